"""Order domain events."""

from protean.fields import DateTime, Float, Identifier, String, Text

from medtrack.domain import medtrack


@medtrack.event(part_of="Order")
class OrderCreated:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    request_id = Identifier(required=True)
    patient_id = Identifier(required=True)
    pharmacy_id = Identifier(required=True)
    items = Text(required=True)  # JSON list of line item dicts
    subtotal = Float(required=True)
    delivery_fee = Float(required=True)
    tax = Float(required=True)
    total_amount = Float(required=True)
    created_at = DateTime(required=True)


@medtrack.event(part_of="Order")
class OrderDetailsUpdated:
    __version__ = 1

    order_id = Identifier(required=True)
    changed_fields = Text(required=True)  # JSON list of field names
    total_amount = Float(required=True)
    updated_at = DateTime(required=True)


@medtrack.event(part_of="Order")
class OrderStatusChanged:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    location = String()
    notes = Text()
    changed_at = DateTime(required=True)


@medtrack.event(part_of="Order")
class OrderCancelled:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    request_id = Identifier(required=True)
    previous_status = String(required=True)
    reason = Text()
    cancelled_by = Identifier()
    cancelled_at = DateTime(required=True)


@medtrack.event(part_of="Order")
class PaymentRecorded:
    __version__ = 1

    order_id = Identifier(required=True)
    payment_intent_id = String(required=True)
    payment_method = String(required=True)
    amount = Float(required=True)
    paid_at = DateTime(required=True)


@medtrack.event(part_of="Order")
class PaymentFailedRecorded:
    __version__ = 1

    order_id = Identifier(required=True)
    payment_intent_id = String()
    reason = String(required=True)
    failed_at = DateTime(required=True)


@medtrack.event(part_of="Order")
class OrderRefunded:
    __version__ = 1

    order_id = Identifier(required=True)
    payment_intent_id = String(required=True)
    refund_id = String(required=True)
    amount = Float(required=True)
    refunded_at = DateTime(required=True)


@medtrack.event(part_of="Order")
class DeliveryPartnerAssigned:
    __version__ = 1

    order_id = Identifier(required=True)
    delivery_partner_id = Identifier(required=True)
    assigned_at = DateTime(required=True)


@medtrack.event(part_of="Order")
class InvoiceGenerated:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    invoice_url = String(required=True)
    generated_at = DateTime(required=True)

