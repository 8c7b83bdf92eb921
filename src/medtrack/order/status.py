"""Order status transitions by pharmacy staff — command and handler.

A transition to ``cancelled`` goes through the same permission check and
reversal as an explicit cancellation, so stock is always returned when an
order is closed early.
"""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from medtrack.domain import logger, medtrack
from medtrack.order.cancellation import assert_may_cancel, cancel_with_reversal
from medtrack.order.order import Order, OrderStatus
from medtrack.shared.repository import load


def parse_status(value: str) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in OrderStatus)
        raise ValidationError({"status": [f"Unknown order status '{value}'. Expected one of: {allowed}"]}) from None


@medtrack.command(part_of="Order")
class TransitionOrderStatus:
    order_id = Identifier(required=True)
    new_status = String(required=True, max_length=20)
    location = String(max_length=200)
    notes = Text()
    changed_by = Identifier()
    caller_role = String(max_length=50)


@medtrack.command_handler(part_of=Order)
class TransitionOrderStatusHandler:
    @handle(TransitionOrderStatus)
    def transition_order_status(self, command):
        target = parse_status(command.new_status)
        order = load(Order, command.order_id)

        if target == OrderStatus.CANCELLED:
            assert_may_cancel(order, command.changed_by, command.caller_role)
            cancel_with_reversal(order, cancelled_by=command.changed_by, reason=command.notes)
            return str(order.id)

        previous = order.status
        order.transition_to(target, location=command.location, notes=command.notes)
        current_domain.repository_for(Order).add(order)
        logger.info(
            "Order status changed",
            order_id=str(order.id),
            order_number=order.order_number,
            previous_status=previous,
            new_status=target.value,
        )
        return str(order.id)
