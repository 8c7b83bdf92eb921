"""Inventory domain events — stock movements tied to orders."""

from protean.fields import DateTime, Identifier, Integer, String

from medtrack.domain import medtrack


@medtrack.event(part_of="InventoryItem")
class InventoryItemAdded:
    __version__ = 1

    inventory_item_id = Identifier(required=True)
    pharmacy_id = Identifier(required=True)
    medication_name = String(required=True)
    quantity = Integer(required=True)
    added_at = DateTime(required=True)


@medtrack.event(part_of="InventoryItem")
class StockReserved:
    """Units were taken out of on-hand stock for an order."""

    __version__ = 1

    inventory_item_id = Identifier(required=True)
    quantity = Integer(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)
    reserved_at = DateTime(required=True)


@medtrack.event(part_of="InventoryItem")
class StockReleased:
    """Units returned to on-hand stock after an order was cancelled."""

    __version__ = 1

    inventory_item_id = Identifier(required=True)
    quantity = Integer(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)
    released_at = DateTime(required=True)


@medtrack.event(part_of="InventoryItem")
class LowStockDetected:
    __version__ = 1

    inventory_item_id = Identifier(required=True)
    pharmacy_id = Identifier(required=True)
    medication_name = String(required=True)
    current_quantity = Integer(required=True)
    threshold = Integer(required=True)
    detected_at = DateTime(required=True)
