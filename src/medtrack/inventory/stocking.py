"""Adding medications to a pharmacy's inventory — command and handler."""

from protean import handle
from protean.fields import Boolean, Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from medtrack.domain import logger, medtrack
from medtrack.errors import Conflict
from medtrack.inventory.item import InventoryItem, MedicationCategory


@medtrack.command(part_of="InventoryItem")
class AddInventoryItem:
    pharmacy_id = Identifier(required=True)
    medication_name = String(required=True, max_length=200)
    generic_name = String(max_length=200)
    category = String(max_length=20, default=MedicationCategory.OTC.value)
    form = String(max_length=20)
    quantity = Integer(default=0, min_value=0)
    unit_price = Float(required=True, min_value=0.0)
    requires_prescription = Boolean(default=False)
    low_stock_threshold = Integer(min_value=0)  # Falls back to LOW_STOCK_THRESHOLD


@medtrack.command_handler(part_of=InventoryItem)
class AddInventoryItemHandler:
    @handle(AddInventoryItem)
    def add_inventory_item(self, command):
        repo = current_domain.repository_for(InventoryItem)

        name = command.medication_name.strip()
        duplicates = repo._dao.query.filter(pharmacy_id=str(command.pharmacy_id), medication_name__iexact=name).all()
        if duplicates.items:
            raise Conflict(
                "medication_name",
                name,
                f"Medication '{name}' already exists in this pharmacy's inventory",
            )

        item = InventoryItem.add(
            pharmacy_id=command.pharmacy_id,
            medication_name=name,
            generic_name=command.generic_name,
            category=command.category or MedicationCategory.OTC.value,
            form=command.form,
            quantity=command.quantity or 0,
            unit_price=command.unit_price,
            requires_prescription=bool(command.requires_prescription),
            low_stock_threshold=command.low_stock_threshold,
        )
        repo.add(item)
        logger.info("Inventory item added", inventory_item_id=str(item.id), pharmacy_id=str(command.pharmacy_id))
        return str(item.id)
