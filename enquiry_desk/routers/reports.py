from fastapi import APIRouter, Depends

from ..core.reports import conversion_summary
from ..dependencies import get_pipeline
from ..sales.pipeline import SalesPipeline

router = APIRouter(prefix="/api/reports", tags=["reports"])


@router.get("/conversion")
async def lead_conversion_report(pipeline: SalesPipeline = Depends(get_pipeline)):
    return conversion_summary(await pipeline.list_leads())
