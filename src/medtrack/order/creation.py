"""Order creation from an available request — command and coordinator handler.

One Unit of Work loads the request, reserves stock for every line item in
order, prices the lines, allocates the next order number, creates the
confirmed Order and marks the request fulfilled. Nothing is written to a
repository until every check has passed, so any failure leaves the request,
the inventory and the order table exactly as they were.
"""

import json

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, String, Text
from protean.utils.globals import current_domain

from medtrack.domain import logger, medtrack
from medtrack.errors import Forbidden, NotFound
from medtrack.inventory.ledger import InventoryLedger
from medtrack.order.numbering import next_order_number
from medtrack.order.order import Order, PaymentMethod
from medtrack.request.request import MedicationRequest
from medtrack.shared.repository import load


@medtrack.command(part_of="Order")
class CreateOrderFromRequest:
    request_id = Identifier(required=True)
    caller_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of {medication_id, quantity}
    delivery_address = Text(required=True)  # JSON: address dict
    delivery_fee = Float(default=0.0, min_value=0.0)
    payment_method = String(max_length=10)
    estimated_delivery = DateTime()


def _decode(value):
    return json.loads(value) if isinstance(value, str) else value


def parse_line_items(raw) -> list[dict]:
    """Normalise requested line items to ``{medication_id, quantity}`` dicts."""
    items = _decode(raw)
    if not isinstance(items, list) or not items:
        raise ValidationError({"items": ["At least one line item is required"]})

    parsed = []
    for position, item in enumerate(items):
        if not isinstance(item, dict) or not item.get("medication_id"):
            raise ValidationError({"items": [f"Line item {position + 1} needs a medication_id"]})
        try:
            quantity = int(item.get("quantity"))
        except (TypeError, ValueError):
            raise ValidationError({"items": [f"Line item {position + 1} needs an integer quantity"]}) from None
        if quantity < 1:
            raise ValidationError({"items": [f"Line item {position + 1} quantity must be at least 1"]})
        parsed.append({"medication_id": str(item["medication_id"]), "quantity": quantity})
    return parsed


@medtrack.command_handler(part_of=Order)
class CreateOrderFromRequestHandler:
    @handle(CreateOrderFromRequest)
    def create_order_from_request(self, command):
        items = parse_line_items(command.items)
        if command.payment_method and command.payment_method not in {m.value for m in PaymentMethod}:
            raise ValidationError({"payment_method": [f"Unknown payment method '{command.payment_method}'"]})

        request = load(MedicationRequest, command.request_id)
        request.assert_orderable()
        if not request.is_owned_by(command.caller_id):
            raise Forbidden("You can only create orders for your own requests")

        # Reserve in line-item order; prices and names are snapshotted from stock
        ledger = InventoryLedger()
        lines = []
        for item in items:
            # Stock held by another pharmacy is invisible to this request
            if str(ledger.item(item["medication_id"]).pharmacy_id) != str(request.pharmacy_id):
                raise NotFound("InventoryItem", item["medication_id"])
            stock = ledger.reserve(item["medication_id"], item["quantity"])
            lines.append(
                {
                    "medication_id": item["medication_id"],
                    "medication_name": stock.medication_name,
                    "quantity": item["quantity"],
                    "unit_price": stock.unit_price,
                }
            )

        order_number, year, sequence = next_order_number()
        order = Order.create(
            order_number=order_number,
            order_year=year,
            order_sequence=sequence,
            request_id=request.id,
            patient_id=request.patient_id,
            pharmacy_id=request.pharmacy_id,
            lines=lines,
            delivery_address=_decode(command.delivery_address),
            delivery_fee=command.delivery_fee or 0.0,
            payment_method=command.payment_method,
            estimated_delivery=command.estimated_delivery,
        )
        request.fulfill(order.id)

        ledger.persist()
        current_domain.repository_for(Order).add(order)
        current_domain.repository_for(MedicationRequest).add(request)

        logger.info(
            "Order created",
            order_id=str(order.id),
            order_number=order_number,
            request_id=str(request.id),
            patient_id=str(request.patient_id),
            total_amount=order.total_amount,
        )
        return str(order.id)
