"""
Stock & Legal Limits
====================
Each SKU has a licence ceiling (legal_limit) separate from the
min / max / reorder thresholds. Going over it is reported, never blocked.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from .errors import ValidationError
from .lead_fsm import utcnow

logger = logging.getLogger(__name__)

WARNING_THRESHOLD = 80  # percent of the legal limit


class StockStatus(str, Enum):
    SAFE = "safe"
    WARNING = "warning"
    CRITICAL = "critical"
    OVERSTOCK = "overstock"


class AdjustmentType(str, Enum):
    IN = "in"
    OUT = "out"
    ADJUSTMENT = "adjustment"  # set the count outright after a physical check


@dataclass
class StockItem:
    sku: str
    product_name: str
    current_stock: int
    legal_limit: int
    min_allowed_stock: int = 0
    max_allowed_stock: int = 0
    reorder_level: int = 0
    location: str = ""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    last_updated: datetime = field(default_factory=utcnow)


@dataclass
class StockAdjustment:
    product_id: str
    type: AdjustmentType
    quantity: int
    reason: str
    stock_before: int
    stock_after: int
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=utcnow)


def legal_limit_percentage(item: StockItem) -> float:
    if item.legal_limit <= 0:
        return 0.0 if item.current_stock <= 0 else float("inf")
    return item.current_stock / item.legal_limit * 100


def is_over_legal_limit(item: StockItem) -> bool:
    return item.current_stock > item.legal_limit


def stock_status(item: StockItem) -> StockStatus:
    if is_over_legal_limit(item) or (item.max_allowed_stock and item.current_stock > item.max_allowed_stock):
        return StockStatus.OVERSTOCK
    if item.current_stock <= item.reorder_level:
        return StockStatus.CRITICAL
    if legal_limit_percentage(item) > WARNING_THRESHOLD:
        return StockStatus.WARNING
    return StockStatus.SAFE


def compliance_check(item: StockItem) -> dict:
    percentage = legal_limit_percentage(item)
    return {
        "productId": item.id,
        "sku": item.sku,
        "productName": item.product_name,
        "currentStock": item.current_stock,
        "legalLimit": item.legal_limit,
        "percentage": round(percentage) if percentage != float("inf") else None,
        "overLimit": is_over_legal_limit(item),
        "excess": max(item.current_stock - item.legal_limit, 0),
        "status": stock_status(item).value,
    }


def adjust_stock(item: StockItem, kind, quantity: int, reason: str = "") -> StockAdjustment:
    try:
        kind = AdjustmentType(kind)
    except ValueError:
        raise ValidationError(f"Unknown adjustment type: {kind}") from None

    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 0:
        raise ValidationError("Quantity must be a non-negative whole number")

    before = item.current_stock
    if kind == AdjustmentType.IN:
        after = before + quantity
    elif kind == AdjustmentType.OUT:
        after = before - quantity
    else:
        after = quantity

    if after < 0:
        raise ValidationError(
            f"Cannot remove {quantity} units of {item.sku}: only {before} in stock"
        )

    item.current_stock = after
    item.last_updated = utcnow()

    if is_over_legal_limit(item):
        logger.warning(
            "%s now holds %s units, above its legal limit of %s",
            item.sku, item.current_stock, item.legal_limit,
        )

    return StockAdjustment(
        product_id=item.id,
        type=kind,
        quantity=quantity,
        reason=reason,
        stock_before=before,
        stock_after=after,
    )
