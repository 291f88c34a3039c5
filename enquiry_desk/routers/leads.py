import logging
from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from ..core.errors import EnquiryDeskError
from ..core.lead_states import STAGE_DISPLAY
from ..core.search import group_by_stage
from ..dependencies import get_pipeline
from ..sales.pipeline import RawEnquiry, SalesPipeline
from ..schemas import (
    ConvertRequest,
    LeadCreateRequest,
    RejectRequest,
    StatusChangeRequest,
    lead_payload,
    order_payload,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/leads", tags=["leads"])


@router.post("/create", status_code=status.HTTP_201_CREATED)
async def create_lead(body: LeadCreateRequest, pipeline: SalesPipeline = Depends(get_pipeline)):
    """Enquiry form / dashboard form submission"""
    try:
        lead = await pipeline.create_lead(RawEnquiry(**body.model_dump()))
    except EnquiryDeskError:
        raise
    except Exception:
        logger.exception("Error creating lead")
        return JSONResponse(status_code=500, content={"error": "Failed to create lead"})

    return {
        "success": True,
        "message": "Lead created successfully",
        "leadId": lead.id,
    }


@router.get("")
async def list_leads(
    search: Optional[str] = None,
    status: Optional[str] = None,
    source: Optional[str] = None,
    pipeline: SalesPipeline = Depends(get_pipeline),
):
    """List leads, filtered by free-text search, stage and source"""
    leads = await pipeline.list_leads(search, status, source)
    return {
        "count": len(leads),
        "leads": [lead_payload(lead) for lead in leads],
    }


@router.get("/board")
async def lead_board(pipeline: SalesPipeline = Depends(get_pipeline)):
    """Kanban view: one column per stage"""
    board = group_by_stage(await pipeline.list_leads())
    return {
        "columns": [
            {
                "stage": stage.value,
                "display": STAGE_DISPLAY[stage],
                "count": len(leads),
                "leads": [lead_payload(lead) for lead in leads],
            }
            for stage, leads in board.items()
        ]
    }


@router.get("/{lead_id}")
async def get_lead(lead_id: str, pipeline: SalesPipeline = Depends(get_pipeline)):
    return lead_payload(await pipeline.get_lead(lead_id))


@router.get("/{lead_id}/history")
async def get_lead_history(lead_id: str, pipeline: SalesPipeline = Depends(get_pipeline)):
    """Full event history for a lead (audit trail)"""
    lead = await pipeline.get_lead(lead_id)
    return {
        "leadId": lead.id,
        "currentStatus": lead.status.value,
        "eventCount": len(lead.history),
        "events": lead.history,
    }


@router.post("/{lead_id}/advance")
async def advance_lead(lead_id: str, pipeline: SalesPipeline = Depends(get_pipeline)):
    return lead_payload(await pipeline.advance_lead(lead_id))


@router.post("/{lead_id}/reject")
async def reject_lead(
    lead_id: str,
    body: Optional[RejectRequest] = None,
    pipeline: SalesPipeline = Depends(get_pipeline),
):
    return lead_payload(await pipeline.reject_lead(lead_id, body.reason if body else None))


@router.put("/{lead_id}/status")
async def set_lead_status(
    lead_id: str,
    body: StatusChangeRequest,
    pipeline: SalesPipeline = Depends(get_pipeline),
):
    """Manual override: any stage, including backwards"""
    return lead_payload(await pipeline.set_lead_status(lead_id, body.status))


@router.post("/{lead_id}/convert", status_code=status.HTTP_201_CREATED)
async def convert_lead(
    lead_id: str,
    body: ConvertRequest,
    pipeline: SalesPipeline = Depends(get_pipeline),
):
    lead, order = await pipeline.convert_lead(
        lead_id,
        [item.model_dump(by_alias=True) for item in body.items],
        discount=body.discount,
        tax=body.tax,
        payment_mode=body.payment_mode,
        delivery_type=body.delivery_type,
    )
    return {
        "lead": lead_payload(lead),
        "order": order_payload(order),
    }
