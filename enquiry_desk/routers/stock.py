from typing import Optional

from fastapi import APIRouter, Depends, status

from ..core.errors import RecordNotFound
from ..core.stock import StockItem
from ..dependencies import get_inventory
from ..sales.inventory import InventoryService
from ..schemas import StockAdjustmentRequest, StockItemRequest, adjustment_payload, stock_payload

router = APIRouter(prefix="/api/stock", tags=["stock"])


@router.get("")
async def list_stock(inventory: InventoryService = Depends(get_inventory)):
    items = inventory.list_items()
    return {
        "count": len(items),
        "items": [stock_payload(item) for item in items],
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def add_stock_item(body: StockItemRequest, inventory: InventoryService = Depends(get_inventory)):
    item = inventory.add_item(StockItem(**body.model_dump()))
    return stock_payload(item)


@router.get("/compliance")
async def legal_compliance(inventory: InventoryService = Depends(get_inventory)):
    """Stock held against each SKU's licence limit. Over-limit items are flagged, not blocked."""
    report = inventory.compliance_report()
    return {
        "overLimitCount": sum(1 for row in report if row["overLimit"]),
        "items": report,
    }


@router.get("/adjustments")
async def stock_adjustments(
    product_id: Optional[str] = None,
    inventory: InventoryService = Depends(get_inventory),
):
    return {"adjustments": [adjustment_payload(a) for a in inventory.adjustments(product_id)]}


@router.get("/{item_id}")
async def get_stock_item(item_id: str, inventory: InventoryService = Depends(get_inventory)):
    item = inventory.get_item(item_id)
    if item is None:
        raise RecordNotFound(f"Stock item {item_id} not found")
    return stock_payload(item)


@router.post("/{item_id}/adjust")
async def adjust_stock_item(
    item_id: str,
    body: StockAdjustmentRequest,
    inventory: InventoryService = Depends(get_inventory),
):
    item, adjustment = await inventory.adjust(item_id, body.type, body.quantity, body.reason)
    payload = stock_payload(item)
    return {
        "item": payload,
        "adjustment": adjustment_payload(adjustment),
        "legalLimitWarning": item.current_stock > item.legal_limit,
    }
