"""Payment gateway port.

Three synchronous calls, each all-or-nothing: create a payment intent,
confirm it, and refund a confirmed intent. Adapters report declines and
errors through the ``success`` flag of the returned result instead of
raising, and enforce their own timeouts.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class IntentResult:
    """Outcome of creating or confirming a payment intent."""

    success: bool
    intent_id: str | None = None
    status: str | None = None
    amount: float | None = None
    failure_reason: str | None = None


@dataclass(frozen=True)
class RefundResult:
    success: bool
    refund_id: str | None = None
    status: str | None = None
    failure_reason: str | None = None


class PaymentGateway(ABC):
    @abstractmethod
    def create_payment_intent(self, amount: float, currency: str, metadata: dict) -> IntentResult:
        """Open an intent to charge ``amount`` in ``currency``."""
        ...

    @abstractmethod
    def confirm_payment_intent(self, intent_id: str) -> IntentResult:
        """Capture a previously created intent."""
        ...

    @abstractmethod
    def create_refund(self, intent_id: str) -> RefundResult:
        """Refund the full amount of a confirmed intent."""
        ...
