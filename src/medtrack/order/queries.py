"""Read operations over orders."""

from medtrack.order.order import Order
from medtrack.shared.pagination import Page, PageRequest, paginate
from medtrack.shared.repository import load

SORTABLE_FIELDS = frozenset(
    {"created_at", "updated_at", "order_number", "total_amount", "status", "payment_status", "estimated_delivery"}
)


def get_order(order_id) -> Order:
    return load(Order, order_id)


def get_orders(
    page_request: PageRequest | None = None,
    status: str | None = None,
    payment_status: str | None = None,
) -> Page:
    return _page({}, page_request, status, payment_status)


def get_orders_by_user(
    patient_id,
    page_request: PageRequest | None = None,
    status: str | None = None,
    payment_status: str | None = None,
) -> Page:
    return _page({"patient_id": str(patient_id)}, page_request, status, payment_status)


def get_orders_by_pharmacy(
    pharmacy_id,
    page_request: PageRequest | None = None,
    status: str | None = None,
    payment_status: str | None = None,
) -> Page:
    return _page({"pharmacy_id": str(pharmacy_id)}, page_request, status, payment_status)


def get_orders_by_delivery_partner(
    partner_id,
    page_request: PageRequest | None = None,
    status: str | None = None,
    payment_status: str | None = None,
) -> Page:
    return _page({"delivery_partner_id": str(partner_id)}, page_request, status, payment_status)


def get_delivery_tracking(order_id) -> dict:
    """Delivery progress of one order, with its tracking log oldest first."""
    order = load(Order, order_id)
    updates = sorted(order.tracking_updates, key=lambda update: update.timestamp)
    return {
        "order_id": str(order.id),
        "order_number": order.order_number,
        "status": order.status,
        "delivery_partner_id": str(order.delivery_partner_id) if order.delivery_partner_id else None,
        "estimated_delivery": order.estimated_delivery,
        "actual_delivery": order.actual_delivery,
        "delivery_address": order.delivery_address.to_dict() if order.delivery_address else None,
        "tracking_updates": [
            {
                "status": update.status,
                "timestamp": update.timestamp,
                "location": update.location,
                "notes": update.notes,
            }
            for update in updates
        ],
    }


def _page(filters: dict, page_request: PageRequest | None, status: str | None, payment_status: str | None) -> Page:
    if status is not None:
        filters["status"] = status
    if payment_status is not None:
        filters["payment_status"] = payment_status
    return paginate(Order, filters, page_request or PageRequest(), SORTABLE_FIELDS)
