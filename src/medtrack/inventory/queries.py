"""Read operations over pharmacy inventory."""

from protean.utils.globals import current_domain

from medtrack.inventory.item import InventoryItem
from medtrack.shared.pagination import Page, PageRequest, paginate
from medtrack.shared.repository import load

SORTABLE_FIELDS = frozenset({"created_at", "updated_at", "medication_name", "quantity", "unit_price", "category"})


def get_inventory_item(item_id) -> InventoryItem:
    return load(InventoryItem, item_id)


def get_inventory(
    page_request: PageRequest | None = None,
    pharmacy_id=None,
    category: str | None = None,
    requires_prescription: bool | None = None,
    search: str | None = None,
) -> Page:
    """Inventory items, optionally narrowed by pharmacy, category, prescription flag and name."""
    filters = {
        "pharmacy_id": str(pharmacy_id) if pharmacy_id is not None else None,
        "category": category,
        "requires_prescription": requires_prescription,
        "medication_name__icontains": search or None,
    }
    filters = {key: value for key, value in filters.items() if value is not None}
    return paginate(InventoryItem, filters, page_request or PageRequest(), SORTABLE_FIELDS)


def get_low_stock(pharmacy_id=None) -> list[InventoryItem]:
    """Every item at or below its own threshold, scarcest first. Not paged."""
    query = current_domain.repository_for(InventoryItem)._dao.query
    if pharmacy_id is not None:
        query = query.filter(pharmacy_id=str(pharmacy_id))

    items = query.order_by("quantity").limit(None).all().items
    return [item for item in items if item.is_low_stock]
