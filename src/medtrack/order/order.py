"""Order aggregate — a priced, deliverable fulfillment of an approved request.

State Machine:
    CONFIRMED → PACKED → OUT_FOR_DELIVERY → DELIVERED
    {CONFIRMED, PACKED, OUT_FOR_DELIVERY} → CANCELLED

Payment sub-state (orthogonal):
    PENDING → {PAID, FAILED}
    PAID → REFUNDED
    FAILED → PENDING (re-attempt)

Pricing is captured once at creation. The total is always the rounded sum
of subtotal, delivery fee and tax; only the delivery fee may change later.
"""

import json
from datetime import UTC, datetime
from enum import Enum
from types import MappingProxyType

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import (
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from medtrack.domain import medtrack
from medtrack.errors import InvalidState, InvalidTransition
from medtrack.order.events import (
    DeliveryPartnerAssigned,
    InvoiceGenerated,
    OrderCancelled,
    OrderCreated,
    OrderDetailsUpdated,
    OrderRefunded,
    OrderStatusChanged,
    PaymentFailedRecorded,
    PaymentRecorded,
)
from medtrack.shared.money import compute_total, price_lines
from medtrack.shared.money import line_total as price_line


# ---------------------------------------------------------------------------
# Enums and transition tables
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    CONFIRMED = "confirmed"
    PACKED = "packed"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(Enum):
    CARD = "card"
    CASH = "cash"
    ONLINE = "online"


ORDER_TRANSITIONS = MappingProxyType(
    {
        OrderStatus.CONFIRMED: frozenset({OrderStatus.PACKED, OrderStatus.CANCELLED}),
        OrderStatus.PACKED: frozenset({OrderStatus.OUT_FOR_DELIVERY, OrderStatus.CANCELLED}),
        OrderStatus.OUT_FOR_DELIVERY: frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED}),
        OrderStatus.DELIVERED: frozenset(),
        OrderStatus.CANCELLED: frozenset(),
    }
)

PAYMENT_TRANSITIONS = MappingProxyType(
    {
        PaymentStatus.PENDING: frozenset({PaymentStatus.PAID, PaymentStatus.FAILED}),
        PaymentStatus.PAID: frozenset({PaymentStatus.REFUNDED}),
        PaymentStatus.FAILED: frozenset({PaymentStatus.PENDING}),
        PaymentStatus.REFUNDED: frozenset(),
    }
)

CLOSED_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})

INITIAL_TRACKING_NOTE = "Order created from approved medication request"
PARTNER_ASSIGNED_LABEL = "delivery_partner_assigned"


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@medtrack.value_object(part_of="Order")
class DeliveryAddress:
    """Where the order is delivered. Replaced wholesale on update."""

    street = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    postal_code = String(required=True, max_length=20)
    phone = String(required=True, max_length=20)
    latitude = Float(min_value=-90.0, max_value=90.0)
    longitude = Float(min_value=-180.0, max_value=180.0)

    @invariant.post
    def coordinates_come_in_pairs(self):
        if (self.latitude is None) != (self.longitude is None):
            raise ValidationError({"coordinates": ["Both latitude and longitude are required"]})

    @classmethod
    def from_dict(cls, data: dict) -> "DeliveryAddress":
        """Build from the API shape, where coordinates nest as {latitude, longitude}."""
        data = dict(data)
        coordinates = data.pop("coordinates", None) or {}
        return cls(latitude=coordinates.get("latitude"), longitude=coordinates.get("longitude"), **data)

    @property
    def coordinates(self) -> dict | None:
        if self.latitude is None:
            return None
        return {"latitude": self.latitude, "longitude": self.longitude}


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@medtrack.entity(part_of="Order")
class OrderLine:
    """One medication on the order, with its price snapshot."""

    medication_id = Identifier(required=True)
    medication_name = String(required=True, max_length=200)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    line_total = Float(required=True, min_value=0.0)

    @invariant.post
    def line_total_matches_quantity_and_price(self):
        if self.line_total != price_line(self.quantity, self.unit_price):
            raise ValidationError({"line_total": ["Line total must equal quantity times unit price"]})


@medtrack.entity(part_of="Order")
class TrackingUpdate:
    status = String(required=True, max_length=50)
    timestamp = DateTime(required=True)
    location = String(max_length=200)
    notes = Text()


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@medtrack.aggregate
class Order:
    order_number = String(required=True, max_length=20, unique=True)
    order_year = Integer(required=True)
    order_sequence = Integer(required=True, min_value=1)
    request_id = Identifier(required=True)
    patient_id = Identifier(required=True)
    pharmacy_id = Identifier(required=True)
    items = HasMany(OrderLine)
    subtotal = Float(default=0.0, min_value=0.0)
    delivery_fee = Float(default=0.0, min_value=0.0)
    tax = Float(default=0.0, min_value=0.0)
    total_amount = Float(default=0.0, min_value=0.0)
    delivery_address = ValueObject(DeliveryAddress)
    status = String(choices=OrderStatus, default=OrderStatus.CONFIRMED.value)
    delivery_partner_id = Identifier()
    estimated_delivery = DateTime()
    actual_delivery = DateTime()
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    payment_method = String(choices=PaymentMethod)
    payment_intent_id = String(max_length=255)
    tracking_updates = HasMany(TrackingUpdate)
    invoice_url = String(max_length=500)
    cancellation_reason = Text()
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def total_is_sum_of_parts(self):
        if self.total_amount != compute_total(self.subtotal or 0.0, self.delivery_fee or 0.0, self.tax or 0.0):
            raise ValidationError({"total_amount": ["Total must equal subtotal plus delivery fee plus tax"]})

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        order_number: str,
        order_year: int,
        order_sequence: int,
        request_id,
        patient_id,
        pharmacy_id,
        lines: list[dict],
        delivery_address: dict,
        delivery_fee: float = 0.0,
        payment_method: str | None = None,
        estimated_delivery: datetime | None = None,
    ):
        """Create a confirmed order from priced line items.

        Args:
            lines: Dicts with medication_id, medication_name, quantity and
                unit_price, in the order they were reserved.
            delivery_address: Dict with street, city, postal_code, phone and
                optional coordinates {latitude, longitude}.
        """
        if not lines:
            raise ValidationError({"items": ["An order needs at least one line item"]})

        now = datetime.now(UTC)
        pricing = price_lines(lines, delivery_fee or 0.0)

        order = cls(
            order_number=order_number,
            order_year=order_year,
            order_sequence=order_sequence,
            request_id=request_id,
            patient_id=patient_id,
            pharmacy_id=pharmacy_id,
            subtotal=pricing["subtotal"],
            delivery_fee=pricing["delivery_fee"],
            tax=pricing["tax"],
            total_amount=pricing["total"],
            delivery_address=DeliveryAddress.from_dict(delivery_address),
            status=OrderStatus.CONFIRMED.value,
            payment_status=PaymentStatus.PENDING.value,
            payment_method=payment_method,
            estimated_delivery=estimated_delivery,
            created_at=now,
            updated_at=now,
        )
        for line in lines:
            order.add_items(
                OrderLine(
                    medication_id=line["medication_id"],
                    medication_name=line["medication_name"],
                    quantity=line["quantity"],
                    unit_price=line["unit_price"],
                    line_total=price_line(line["quantity"], line["unit_price"]),
                )
            )
        order._track(OrderStatus.CONFIRMED.value, notes=INITIAL_TRACKING_NOTE, at=now)

        order.raise_(
            OrderCreated(
                order_id=str(order.id),
                order_number=order_number,
                request_id=str(request_id),
                patient_id=str(patient_id),
                pharmacy_id=str(pharmacy_id),
                items=json.dumps([{**line, "medication_id": str(line["medication_id"])} for line in lines]),
                subtotal=order.subtotal,
                delivery_fee=order.delivery_fee,
                tax=order.tax,
                total_amount=order.total_amount,
                created_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    @property
    def current_status(self) -> OrderStatus:
        return OrderStatus(self.status)

    @property
    def allowed_transitions(self) -> frozenset:
        return ORDER_TRANSITIONS[self.current_status]

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PaymentStatus.PAID.value

    def is_owned_by(self, user_id) -> bool:
        return str(self.patient_id) == str(user_id)

    def _assert_open(self, operation: str) -> None:
        if self.current_status in CLOSED_STATUSES:
            raise InvalidState(
                "Order",
                self.status,
                operation,
                message=f"Cannot {operation} an order that is {self.status}",
            )

    def _assert_can_transition(self, target: OrderStatus) -> None:
        if target not in self.allowed_transitions:
            raise InvalidTransition("Order", self.status, target.value, [s.value for s in self.allowed_transitions])

    def _assert_payment_transition(self, target: PaymentStatus) -> None:
        current = PaymentStatus(self.payment_status)
        if target not in PAYMENT_TRANSITIONS[current]:
            raise InvalidTransition(
                "Payment", current.value, target.value, [s.value for s in PAYMENT_TRANSITIONS[current]]
            )

    def _track(self, status: str, location: str | None = None, notes: str | None = None, at=None) -> None:
        self.add_tracking_updates(
            TrackingUpdate(
                status=status,
                timestamp=at or datetime.now(UTC),
                location=location,
                notes=notes,
            )
        )

    # -------------------------------------------------------------------
    # Details
    # -------------------------------------------------------------------
    def update_details(
        self,
        delivery_address: dict | None = None,
        delivery_fee: float | None = None,
        estimated_delivery: datetime | None = None,
    ) -> list[str]:
        self._assert_open("update")

        changed = []
        with atomic_change(self):
            if delivery_address is not None:
                self.delivery_address = DeliveryAddress.from_dict(delivery_address)
                changed.append("delivery_address")
            if delivery_fee is not None:
                self.delivery_fee = delivery_fee
                self.total_amount = compute_total(self.subtotal, delivery_fee, self.tax)
                changed.append("delivery_fee")
            if estimated_delivery is not None:
                self.estimated_delivery = estimated_delivery
                changed.append("estimated_delivery")

        if changed:
            now = datetime.now(UTC)
            self.updated_at = now
            self.raise_(
                OrderDetailsUpdated(
                    order_id=str(self.id),
                    changed_fields=json.dumps(changed),
                    total_amount=self.total_amount,
                    updated_at=now,
                )
            )
        return changed

    # -------------------------------------------------------------------
    # Status transitions
    # -------------------------------------------------------------------
    def transition_to(self, new_status: OrderStatus, location: str | None = None, notes: str | None = None) -> None:
        """Advance the order and append one tracking entry."""
        self._assert_open("change the status of")
        self._assert_can_transition(new_status)

        previous = self.status
        now = datetime.now(UTC)
        self.status = new_status.value
        if new_status == OrderStatus.DELIVERED:
            self.actual_delivery = now
        self._track(new_status.value, location=location, notes=notes, at=now)
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                order_number=self.order_number,
                previous_status=previous,
                new_status=new_status.value,
                location=location,
                notes=notes,
                changed_at=now,
            )
        )

    def assert_cancellable(self) -> None:
        self._assert_open("cancel")
        self._assert_can_transition(OrderStatus.CANCELLED)

    def cancel(self, cancelled_by, reason: str | None = None) -> None:
        """Close the order. Stock release and refunds are the coordinator's job."""
        self.assert_cancellable()

        previous = self.status
        now = datetime.now(UTC)
        self.status = OrderStatus.CANCELLED.value
        self.cancellation_reason = reason
        self._track(OrderStatus.CANCELLED.value, notes=reason or "Order cancelled", at=now)
        self.updated_at = now

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                order_number=self.order_number,
                request_id=str(self.request_id),
                previous_status=previous,
                reason=reason,
                cancelled_by=str(cancelled_by) if cancelled_by else None,
                cancelled_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Payment
    # -------------------------------------------------------------------
    def assert_payable(self) -> None:
        if self.current_status == OrderStatus.CANCELLED:
            raise InvalidState("Order", self.status, "pay for", message="Cannot pay for a cancelled order")
        if self.is_paid:
            raise InvalidState("Order", self.status, "pay for", message="Order is already paid")
        if self.payment_status == PaymentStatus.REFUNDED.value:
            raise InvalidState("Order", self.status, "pay for", message="Order payment has been refunded")

    def begin_payment_attempt(self) -> None:
        """Reset a failed payment to pending so it can be attempted again."""
        self.assert_payable()
        if self.payment_status == PaymentStatus.FAILED.value:
            self._assert_payment_transition(PaymentStatus.PENDING)
            self.payment_status = PaymentStatus.PENDING.value

    def record_payment(self, payment_method: str, payment_intent_id: str) -> None:
        self._assert_payment_transition(PaymentStatus.PAID)

        now = datetime.now(UTC)
        self.payment_status = PaymentStatus.PAID.value
        self.payment_method = payment_method
        self.payment_intent_id = payment_intent_id
        self.updated_at = now
        self.raise_(
            PaymentRecorded(
                order_id=str(self.id),
                payment_intent_id=payment_intent_id,
                payment_method=payment_method,
                amount=self.total_amount,
                paid_at=now,
            )
        )

    def record_payment_failure(self, reason: str, payment_intent_id: str | None = None) -> None:
        self._assert_payment_transition(PaymentStatus.FAILED)

        now = datetime.now(UTC)
        self.payment_status = PaymentStatus.FAILED.value
        if payment_intent_id:
            self.payment_intent_id = payment_intent_id
        self.updated_at = now
        self.raise_(
            PaymentFailedRecorded(
                order_id=str(self.id),
                payment_intent_id=payment_intent_id,
                reason=reason,
                failed_at=now,
            )
        )

    def record_refund(self, refund_id: str) -> None:
        self._assert_payment_transition(PaymentStatus.REFUNDED)

        now = datetime.now(UTC)
        self.payment_status = PaymentStatus.REFUNDED.value
        self.updated_at = now
        self.raise_(
            OrderRefunded(
                order_id=str(self.id),
                payment_intent_id=self.payment_intent_id,
                refund_id=refund_id,
                amount=self.total_amount,
                refunded_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Delivery and invoicing
    # -------------------------------------------------------------------
    def assign_delivery_partner(self, partner_id) -> None:
        self._assert_open("assign a delivery partner to")

        now = datetime.now(UTC)
        self.delivery_partner_id = partner_id
        self._track(PARTNER_ASSIGNED_LABEL, notes=f"Delivery partner {partner_id} assigned", at=now)
        self.updated_at = now
        self.raise_(
            DeliveryPartnerAssigned(
                order_id=str(self.id),
                delivery_partner_id=str(partner_id),
                assigned_at=now,
            )
        )

    def generate_invoice(self) -> bool:
        """Derive the invoice reference from the order number.

        Returns True when the reference was stored by this call, False when
        the order already had one.
        """
        if self.invoice_url:
            return False

        now = datetime.now(UTC)
        self.invoice_url = f"/invoices/{self.order_number}.pdf"
        self.updated_at = now
        self.raise_(
            InvoiceGenerated(
                order_id=str(self.id),
                order_number=self.order_number,
                invoice_url=self.invoice_url,
                generated_at=now,
            )
        )
        return True
