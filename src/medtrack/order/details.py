"""Order detail edits before the order is closed — command and handler."""

import json

from protean import handle
from protean.fields import DateTime, Float, Identifier, Text
from protean.utils.globals import current_domain

from medtrack.domain import logger, medtrack
from medtrack.order.order import Order
from medtrack.shared.repository import load


@medtrack.command(part_of="Order")
class UpdateOrderDetails:
    order_id = Identifier(required=True)
    delivery_address = Text()  # JSON: address dict
    delivery_fee = Float(min_value=0.0)
    estimated_delivery = DateTime()


@medtrack.command_handler(part_of=Order)
class UpdateOrderDetailsHandler:
    @handle(UpdateOrderDetails)
    def update_order_details(self, command):
        order = load(Order, command.order_id)

        address = command.delivery_address
        if isinstance(address, str):
            address = json.loads(address)

        changed = order.update_details(
            delivery_address=address,
            delivery_fee=command.delivery_fee,
            estimated_delivery=command.estimated_delivery,
        )
        current_domain.repository_for(Order).add(order)
        logger.info("Order details updated", order_id=str(order.id), changed_fields=changed)
        return str(order.id)
