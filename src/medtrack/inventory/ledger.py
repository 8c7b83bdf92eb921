"""Inventory ledger — atomic reservation and release of stock.

The ledger stages every stock movement of one Unit of Work on loaded
aggregates and writes them back only when ``persist`` is called. A failed
reservation therefore leaves the repository untouched, and the enclosing
Unit of Work rollback discards anything else the handler staged.
"""

import structlog
from protean.exceptions import IncorrectUsageError, ObjectNotFoundError
from protean.utils.globals import current_domain, current_uow

from medtrack.errors import NotFound
from medtrack.inventory.item import InventoryItem

logger = structlog.get_logger(__name__)


class InventoryLedger:
    def __init__(self) -> None:
        if not current_uow:
            raise IncorrectUsageError("InventoryLedger must be used inside a Unit of Work")
        self._repo = current_domain.repository_for(InventoryItem)
        self._staged: dict[str, InventoryItem] = {}

    def item(self, item_id) -> InventoryItem:
        key = str(item_id)
        if key not in self._staged:
            try:
                self._staged[key] = self._repo.get(key)
            except ObjectNotFoundError:
                raise NotFound("InventoryItem", key) from None
        return self._staged[key]

    def reserve(self, item_id, quantity: int) -> InventoryItem:
        """Decrement stock, raising ``InsufficientStock`` when on-hand is short."""
        item = self.item(item_id)
        item.reserve(quantity)
        logger.debug("Stock reserved", inventory_item_id=str(item_id), quantity=quantity, remaining=item.quantity)
        return item

    def release(self, item_id, quantity: int) -> InventoryItem:
        item = self.item(item_id)
        item.release(quantity)
        logger.debug("Stock released", inventory_item_id=str(item_id), quantity=quantity, on_hand=item.quantity)
        return item

    def persist(self) -> None:
        for item in self._staged.values():
            self._repo.add(item)
