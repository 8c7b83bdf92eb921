"""Order payment through the payment gateway — command and handler.

The gateway is asked to create a payment intent for the order total and
then to confirm it. Either way the outcome is recorded on the order: a
declined payment is committed as ``failed`` and reported back to the
caller instead of being raised, so the failure survives the Unit of Work.
"""

from dataclasses import dataclass

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from medtrack.domain import logger, medtrack
from medtrack.gateway import get_gateway
from medtrack.order.order import Order, PaymentMethod
from medtrack.shared.repository import load
from medtrack.shared.settings import currency


@dataclass(frozen=True)
class PaymentOutcome:
    order_id: str
    succeeded: bool
    payment_intent_id: str | None = None
    failure_reason: str | None = None


@medtrack.command(part_of="Order")
class ProcessPayment:
    order_id = Identifier(required=True)
    payment_method = String(required=True, max_length=10)


@medtrack.command_handler(part_of=Order)
class ProcessPaymentHandler:
    @handle(ProcessPayment)
    def process_payment(self, command):
        if command.payment_method not in {m.value for m in PaymentMethod}:
            raise ValidationError({"payment_method": [f"Unknown payment method '{command.payment_method}'"]})

        order = load(Order, command.order_id)
        order.begin_payment_attempt()

        gateway = get_gateway()
        result = gateway.create_payment_intent(
            order.total_amount,
            currency(),
            {"order_id": str(order.id), "order_number": order.order_number},
        )
        if result.success:
            result = gateway.confirm_payment_intent(result.intent_id)

        if result.success:
            order.record_payment(command.payment_method, result.intent_id)
            outcome = PaymentOutcome(str(order.id), True, payment_intent_id=result.intent_id)
            logger.info(
                "Payment processed",
                order_id=str(order.id),
                order_number=order.order_number,
                payment_intent_id=result.intent_id,
            )
        else:
            reason = result.failure_reason or "Payment was declined"
            order.record_payment_failure(reason, payment_intent_id=result.intent_id)
            outcome = PaymentOutcome(str(order.id), False, payment_intent_id=result.intent_id, failure_reason=reason)
            logger.warning(
                "Payment failed",
                order_id=str(order.id),
                order_number=order.order_number,
                reason=reason,
            )

        current_domain.repository_for(Order).add(order)
        return outcome
