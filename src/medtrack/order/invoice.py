"""Invoice reference generation — command and handler.

The reference is derived from the order number alone, so generating it
again returns the stored value without writing.
"""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from medtrack.domain import logger, medtrack
from medtrack.order.order import Order
from medtrack.shared.repository import load


@medtrack.command(part_of="Order")
class GenerateInvoice:
    order_id = Identifier(required=True)


@medtrack.command_handler(part_of=Order)
class GenerateInvoiceHandler:
    @handle(GenerateInvoice)
    def generate_invoice(self, command):
        order = load(Order, command.order_id)
        if order.generate_invoice():
            current_domain.repository_for(Order).add(order)
            logger.info("Invoice generated", order_id=str(order.id), invoice_url=order.invoice_url)
        return order.invoice_url
