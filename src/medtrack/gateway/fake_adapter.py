"""Configurable fake payment gateway for development and testing.

Simulates a card processor in memory. It can be told at runtime to fail
every call, or only one kind of call, which is how tests and the
non-production /gateway/configure endpoint exercise decline and refund
failure paths.
"""

from uuid import uuid4

from medtrack.gateway.port import IntentResult, PaymentGateway, RefundResult

OPERATIONS = ("create_payment_intent", "confirm_payment_intent", "create_refund")


class FakeGateway(PaymentGateway):
    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Card declined"
        self.failing_operations: frozenset[str] = frozenset(OPERATIONS)
        self.intents: dict[str, dict] = {}
        self.calls: list[dict] = []

    def configure(
        self,
        should_succeed: bool,
        failure_reason: str = "Card declined",
        operations: list[str] | None = None,
    ) -> None:
        """Configure gateway behavior at runtime.

        ``operations`` limits failures to the named calls; by default a
        failing gateway fails every call.
        """
        unknown = set(operations or ()) - set(OPERATIONS)
        if unknown:
            raise ValueError(f"Unknown gateway operations: {', '.join(sorted(unknown))}")

        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.failing_operations = frozenset(operations) if operations else frozenset(OPERATIONS)

    def _fails(self, operation: str) -> bool:
        return not self.should_succeed and operation in self.failing_operations

    def create_payment_intent(self, amount: float, currency: str, metadata: dict) -> IntentResult:
        self.calls.append(
            {"method": "create_payment_intent", "amount": amount, "currency": currency, "metadata": dict(metadata)}
        )
        if self._fails("create_payment_intent"):
            return IntentResult(success=False, status="failed", failure_reason=self.failure_reason)

        intent_id = f"pi_fake_{uuid4().hex[:16]}"
        self.intents[intent_id] = {"amount": amount, "currency": currency, "status": "requires_confirmation"}
        return IntentResult(success=True, intent_id=intent_id, status="requires_confirmation", amount=amount)

    def confirm_payment_intent(self, intent_id: str) -> IntentResult:
        self.calls.append({"method": "confirm_payment_intent", "intent_id": intent_id})
        intent = self.intents.get(intent_id)
        if intent is None:
            return IntentResult(success=False, intent_id=intent_id, failure_reason="No such payment intent")
        if self._fails("confirm_payment_intent"):
            intent["status"] = "requires_payment_method"
            return IntentResult(
                success=False, intent_id=intent_id, status=intent["status"], failure_reason=self.failure_reason
            )

        intent["status"] = "succeeded"
        return IntentResult(success=True, intent_id=intent_id, status="succeeded", amount=intent["amount"])

    def create_refund(self, intent_id: str) -> RefundResult:
        self.calls.append({"method": "create_refund", "intent_id": intent_id})
        if self._fails("create_refund"):
            return RefundResult(success=False, status="failed", failure_reason=self.failure_reason)

        intent = self.intents.get(intent_id)
        if intent is not None:
            intent["status"] = "refunded"
        return RefundResult(success=True, refund_id=f"re_fake_{uuid4().hex[:16]}", status="succeeded")
