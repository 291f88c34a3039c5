"""
Inventory
=========
In-memory stock book with an append-only adjustment log.
"""

import copy
import logging
from typing import Optional

from ..core.errors import RecordNotFound, ValidationError
from ..core.stock import StockAdjustment, StockItem, adjust_stock, compliance_check
from .locks import RecordLocks

logger = logging.getLogger(__name__)


SAMPLE_STOCK = [
    dict(sku="GSP-001", product_name="Green Sparkler Pro", current_stock=450, min_allowed_stock=50,
         max_allowed_stock=1000, legal_limit=500, reorder_level=100, location="Warehouse A - Shelf 3"),
    dict(sku="MCF-002", product_name="Multi-Color Fountain", current_stock=250, min_allowed_stock=25,
         max_allowed_stock=500, legal_limit=300, reorder_level=50, location="Warehouse A - Shelf 5"),
    dict(sku="ABD-003", product_name="Atom Bomb Deluxe", current_stock=80, min_allowed_stock=10,
         max_allowed_stock=200, legal_limit=150, reorder_level=30, location="Warehouse B - Shelf 1"),
]


class InventoryService:

    def __init__(self):
        self._items: dict[str, StockItem] = {}
        self._adjustments: list[StockAdjustment] = []
        self._locks = RecordLocks()

    def seed(self, rows: list = None):
        for row in rows or SAMPLE_STOCK:
            self.add_item(StockItem(**row))

    def add_item(self, item: StockItem) -> StockItem:
        if item.legal_limit < 0 or item.current_stock < 0:
            raise ValidationError("Stock and legal limit cannot be negative")
        if any(existing.sku == item.sku for existing in self._items.values()):
            raise ValidationError(f"SKU {item.sku} already exists")
        self._items[item.id] = item
        return copy.deepcopy(item)

    def list_items(self) -> list:
        return [copy.deepcopy(item) for item in self._items.values()]

    def get_item(self, item_id: str) -> Optional[StockItem]:
        item = self._items.get(item_id)
        return copy.deepcopy(item) if item else None

    def compliance_report(self) -> list:
        return [compliance_check(item) for item in self._items.values()]

    def adjustments(self, item_id: str = None) -> list:
        return [a for a in self._adjustments if item_id is None or a.product_id == item_id]

    async def adjust(self, item_id: str, kind: str, quantity: int, reason: str = "") -> tuple[StockItem, StockAdjustment]:
        async with self._locks.hold(item_id):
            item = self._items.get(item_id)
            if item is None:
                raise RecordNotFound(f"Stock item {item_id} not found")
            adjustment = adjust_stock(item, kind, quantity, reason)
            self._adjustments.append(adjustment)

        logger.info(
            "Stock %s: %s %s (%s → %s)",
            item.sku, adjustment.type.value, quantity, adjustment.stock_before, adjustment.stock_after,
        )
        return copy.deepcopy(item), adjustment
