from typing import Optional

from fastapi import APIRouter, Depends

from ..dependencies import get_pipeline
from ..sales.pipeline import SalesPipeline
from ..schemas import StatusChangeRequest, order_payload

router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.get("")
async def list_orders(
    search: Optional[str] = None,
    status: Optional[str] = None,
    pipeline: SalesPipeline = Depends(get_pipeline),
):
    orders = await pipeline.list_orders(search, status)
    return {
        "count": len(orders),
        "orders": [order_payload(order) for order in orders],
    }


@router.get("/{order_id}")
async def get_order(order_id: str, pipeline: SalesPipeline = Depends(get_pipeline)):
    return order_payload(await pipeline.get_order(order_id))


@router.put("/{order_id}/status")
async def update_order_status(
    order_id: str,
    body: StatusChangeRequest,
    override: bool = False,
    pipeline: SalesPipeline = Depends(get_pipeline),
):
    """Pending → Packed → Delivered, Cancelled before delivery. override=true allows any jump."""
    return order_payload(await pipeline.update_order_status(order_id, body.status, override=override))
