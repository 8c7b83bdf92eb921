"""Application tests for order payment through the gateway."""

import pytest
from medtrack import lifecycle
from medtrack.errors import InvalidState, PaymentFailed
from medtrack.gateway import get_gateway
from protean.exceptions import ValidationError


class TestSuccessfulPayment:
    def test_order_is_marked_paid(self, order):
        paid = lifecycle.process_payment(order.id, "card")
        assert paid.payment_status == "paid"
        assert paid.payment_method == "card"
        assert paid.payment_intent_id.startswith("pi_fake_")

    def test_gateway_is_charged_the_total(self, order):
        lifecycle.process_payment(order.id, "online")
        intent_call = get_gateway().calls[0]
        assert intent_call["method"] == "create_payment_intent"
        assert intent_call["amount"] == 15.58
        assert intent_call["currency"] == "usd"
        assert intent_call["metadata"] == {"order_id": str(order.id), "order_number": order.order_number}

    def test_paid_order_cannot_be_paid_again(self, paid_order):
        with pytest.raises(InvalidState) as exc:
            lifecycle.process_payment(paid_order.id, "card")
        assert "already paid" in str(exc.value)

    def test_cancelled_order_cannot_be_paid(self, order):
        lifecycle.cancel_order(order.id, "patient-001", "Patient")
        with pytest.raises(InvalidState):
            lifecycle.process_payment(order.id, "card")

    def test_unknown_method(self, order):
        with pytest.raises(ValidationError):
            lifecycle.process_payment(order.id, "barter")


class TestDeclinedPayment:
    def test_decline_is_recorded_then_raised(self, order):
        get_gateway().configure(should_succeed=False, failure_reason="Card declined")

        with pytest.raises(PaymentFailed) as exc:
            lifecycle.process_payment(order.id, "card")

        assert exc.value.reason == "Card declined"
        assert lifecycle.get_order(order.id).payment_status == "failed"

    def test_confirmation_failure_keeps_intent(self, order):
        get_gateway().configure(should_succeed=False, operations=["confirm_payment_intent"])

        with pytest.raises(PaymentFailed):
            lifecycle.process_payment(order.id, "card")

        failed = lifecycle.get_order(order.id)
        assert failed.payment_status == "failed"
        assert failed.payment_intent_id.startswith("pi_fake_")

    def test_failed_payment_can_be_retried(self, order):
        gateway = get_gateway()
        gateway.configure(should_succeed=False)
        with pytest.raises(PaymentFailed):
            lifecycle.process_payment(order.id, "card")

        gateway.configure(should_succeed=True)
        paid = lifecycle.process_payment(order.id, "card")
        assert paid.payment_status == "paid"
