"""InventoryItem aggregate — on-hand stock of one medication at one pharmacy.

Quantity never goes negative. From the engine's point of view it changes
only through ``reserve`` and ``release``, which the order coordinator calls
inside the same Unit of Work that writes the Order.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String

from medtrack.domain import medtrack
from medtrack.errors import InsufficientStock
from medtrack.inventory.events import (
    InventoryItemAdded,
    LowStockDetected,
    StockReleased,
    StockReserved,
)
from medtrack.shared.settings import setting


class MedicationCategory(Enum):
    PRESCRIPTION = "prescription"
    OTC = "otc"
    CONTROLLED = "controlled"


class MedicationForm(Enum):
    TABLET = "tablet"
    CAPSULE = "capsule"
    SYRUP = "syrup"
    INJECTION = "injection"


def default_low_stock_threshold() -> int:
    return int(setting("LOW_STOCK_THRESHOLD"))


@medtrack.aggregate
class InventoryItem:
    pharmacy_id = Identifier(required=True)
    medication_name = String(required=True, max_length=200)
    generic_name = String(max_length=200)
    category = String(choices=MedicationCategory, default=MedicationCategory.OTC.value)
    form = String(choices=MedicationForm)
    quantity = Integer(default=0, min_value=0)
    unit_price = Float(required=True, min_value=0.0)
    requires_prescription = Boolean(default=False)
    low_stock_threshold = Integer(default=default_low_stock_threshold, min_value=0)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def add(
        cls,
        pharmacy_id: str,
        medication_name: str,
        unit_price: float,
        quantity: int = 0,
        generic_name: str | None = None,
        category: str = MedicationCategory.OTC.value,
        form: str | None = None,
        requires_prescription: bool = False,
        low_stock_threshold: int | None = None,
    ):
        now = datetime.now(UTC)
        if low_stock_threshold is None:
            low_stock_threshold = default_low_stock_threshold()
        item = cls(
            pharmacy_id=pharmacy_id,
            medication_name=medication_name.strip(),
            generic_name=generic_name,
            category=category,
            form=form,
            quantity=quantity,
            unit_price=unit_price,
            requires_prescription=requires_prescription,
            low_stock_threshold=low_stock_threshold,
            created_at=now,
            updated_at=now,
        )
        item.raise_(
            InventoryItemAdded(
                inventory_item_id=str(item.id),
                pharmacy_id=str(pharmacy_id),
                medication_name=item.medication_name,
                quantity=quantity,
                added_at=now,
            )
        )
        return item

    @property
    def is_low_stock(self) -> bool:
        return self.quantity <= self.low_stock_threshold

    def reserve(self, quantity: int) -> None:
        """Take ``quantity`` units out of stock, or fail without touching it."""
        if quantity < 1:
            raise ValidationError({"quantity": ["Reserved quantity must be at least 1"]})
        if self.quantity < quantity:
            raise InsufficientStock(self.id, self.medication_name, self.quantity, quantity)

        was_low = self.is_low_stock
        now = datetime.now(UTC)
        previous = self.quantity
        self.quantity = previous - quantity
        self.updated_at = now
        self.raise_(
            StockReserved(
                inventory_item_id=str(self.id),
                quantity=quantity,
                previous_quantity=previous,
                new_quantity=self.quantity,
                reserved_at=now,
            )
        )

        if self.is_low_stock and not was_low:
            self.raise_(
                LowStockDetected(
                    inventory_item_id=str(self.id),
                    pharmacy_id=str(self.pharmacy_id),
                    medication_name=self.medication_name,
                    current_quantity=self.quantity,
                    threshold=self.low_stock_threshold,
                    detected_at=now,
                )
            )

    def release(self, quantity: int) -> None:
        """Return ``quantity`` units to stock. No upper bound applies."""
        if quantity < 1:
            raise ValidationError({"quantity": ["Released quantity must be at least 1"]})

        now = datetime.now(UTC)
        previous = self.quantity
        self.quantity = previous + quantity
        self.updated_at = now
        self.raise_(
            StockReleased(
                inventory_item_id=str(self.id),
                quantity=quantity,
                previous_quantity=previous,
                new_quantity=self.quantity,
                released_at=now,
            )
        )
