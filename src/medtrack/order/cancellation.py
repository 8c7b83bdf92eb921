"""Order cancellation with inventory and payment reversal.

Cancelling an order refunds a captured payment, puts every reserved unit
back into stock, closes the order and reopens the originating request, all
inside one Unit of Work. The refund is requested before anything is
written. A refund failure raises ``RefundFailed`` and leaves the order,
the stock and the request untouched.
"""

from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from medtrack.domain import logger, medtrack
from medtrack.errors import Forbidden, InvalidState, RefundFailed
from medtrack.gateway import get_gateway
from medtrack.inventory.ledger import InventoryLedger
from medtrack.order.order import Order
from medtrack.request.request import MedicationRequest, RequestStatus
from medtrack.shared.repository import load
from medtrack.shared.roles import is_staff


@medtrack.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    caller_id = Identifier(required=True)
    caller_role = String(required=True, max_length=50)
    reason = Text()


def assert_may_cancel(order: Order, caller_id, caller_role: str | None) -> None:
    """State first, then the owning patient or a staff role."""
    order.assert_cancellable()
    if not order.is_owned_by(caller_id) and not is_staff(caller_role):
        raise Forbidden("You do not have permission to cancel this order")


def cancel_with_reversal(order: Order, cancelled_by, reason: str | None = None) -> Order:
    """Cancel ``order`` and undo its side effects. Must run inside a Unit of Work."""
    order.assert_cancellable()

    request = load(MedicationRequest, order.request_id)
    if request.current_status != RequestStatus.FULFILLED:
        raise InvalidState(
            "MedicationRequest",
            request.status,
            "reopen",
            message=f"Originating request is '{request.status}', expected 'fulfilled'",
        )

    refund_id = None
    if order.is_paid and order.payment_intent_id:
        result = get_gateway().create_refund(order.payment_intent_id)
        if not result.success:
            logger.error(
                "Refund failed",
                order_id=str(order.id),
                payment_intent_id=order.payment_intent_id,
                reason=result.failure_reason,
            )
            raise RefundFailed(order.id, result.failure_reason or "Refund was declined")
        refund_id = result.refund_id

    ledger = InventoryLedger()
    for line in order.items:
        ledger.release(line.medication_id, line.quantity)

    if refund_id:
        order.record_refund(refund_id)
    order.cancel(cancelled_by=cancelled_by, reason=reason)
    request.reopen(order.id)

    ledger.persist()
    current_domain.repository_for(Order).add(order)
    current_domain.repository_for(MedicationRequest).add(request)

    logger.info(
        "Order cancelled",
        order_id=str(order.id),
        order_number=order.order_number,
        cancelled_by=str(cancelled_by),
        refunded=bool(refund_id),
    )
    return order


@medtrack.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        order = load(Order, command.order_id)
        assert_may_cancel(order, command.caller_id, command.caller_role)

        cancel_with_reversal(order, cancelled_by=command.caller_id, reason=command.reason)
        return str(order.id)
