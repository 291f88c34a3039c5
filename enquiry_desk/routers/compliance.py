from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, status

from ..core.errors import RecordNotFound
from ..core.licences import Licence, parse_kind
from ..dependencies import get_inventory, get_licences
from ..sales.inventory import InventoryService
from ..sales.licences import LicenceRegister, today
from ..schemas import LicenceRequest, licence_payload

router = APIRouter(prefix="/api/compliance", tags=["compliance"])


@router.get("/licences")
async def list_licences(kind: Optional[str] = None, register: LicenceRegister = Depends(get_licences)):
    """Licences and certificates; kind=licence|certificate narrows the list"""
    as_of = today()
    licences = register.list(kind)
    return {
        "count": len(licences),
        "licences": [licence_payload(licence, as_of) for licence in licences],
    }


@router.post("/licences", status_code=status.HTTP_201_CREATED)
async def add_licence(body: LicenceRequest, register: LicenceRegister = Depends(get_licences)):
    licence = register.add(Licence(
        document_type=(body.document_type or "").strip(),
        number=(body.number or "").strip(),
        issued_by=body.issued_by,
        issue_date=body.issue_date,
        expiry_date=body.expiry_date,
        kind=parse_kind(body.kind),
        document_url=body.document_url,
    ))
    return licence_payload(licence, today())


@router.get("/licences/{licence_id}")
async def get_licence(licence_id: str, register: LicenceRegister = Depends(get_licences)):
    licence = register.get(licence_id)
    if licence is None:
        raise RecordNotFound(f"Licence {licence_id} not found")
    return licence_payload(licence, today())


@router.get("/alerts")
async def compliance_alerts(
    as_of: Optional[date] = None,
    register: LicenceRegister = Depends(get_licences),
    inventory: InventoryService = Depends(get_inventory),
):
    """Expiring documents and stock near its legal limit, critical first"""
    alerts = register.alerts(inventory.list_items(), as_of)
    return {
        "count": len(alerts),
        "criticalCount": sum(1 for alert in alerts if alert["type"] == "critical"),
        "alerts": alerts,
    }
