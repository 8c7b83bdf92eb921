"""Delivery partner assignment — command and handler."""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from medtrack.domain import logger, medtrack
from medtrack.order.order import Order
from medtrack.shared.repository import load


@medtrack.command(part_of="Order")
class AssignDeliveryPartner:
    order_id = Identifier(required=True)
    delivery_partner_id = Identifier(required=True)


@medtrack.command_handler(part_of=Order)
class AssignDeliveryPartnerHandler:
    @handle(AssignDeliveryPartner)
    def assign_delivery_partner(self, command):
        order = load(Order, command.order_id)
        order.assign_delivery_partner(command.delivery_partner_id)
        current_domain.repository_for(Order).add(order)
        logger.info(
            "Delivery partner assigned",
            order_id=str(order.id),
            delivery_partner_id=str(command.delivery_partner_id),
        )
        return str(order.id)
