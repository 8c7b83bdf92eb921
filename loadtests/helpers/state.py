"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance keeps its own state. State tracks the ids
returned by creation endpoints so follow-up steps can reference them.
"""

from dataclasses import dataclass, field


@dataclass
class PharmacyState:
    """The simulated pharmacy and the stock it has added."""

    pharmacy_id: str | None = None
    staff_id: str | None = None
    item_ids: list[str] = field(default_factory=list)
    medication_name: str | None = None


@dataclass
class RequestState:
    """A single simulated medication request."""

    patient_id: str | None = None
    request_id: str | None = None
    current_status: str = "pending"


@dataclass
class OrderState:
    """A single simulated order, from request to delivery or cancellation."""

    patient_id: str | None = None
    request_id: str | None = None
    order_id: str | None = None
    order_number: str | None = None
    delivery_partner_id: str | None = None
    current_status: str = "confirmed"
    payment_status: str = "pending"
