"""
Lead State Machine
==================
Stage transition policy for sales leads.

- advance:    one step along LEAD_PIPELINE, refused on terminal stages
- reject:     any non-terminal stage -> Rejected
- set_status: manual override, any stage -> any stage (the dashboard menu)
"""

import logging
import secrets
import string
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Optional

from .errors import InvalidStateError, ValidationError
from .lead_states import (
    LEAD_PIPELINE,
    TERMINAL_STAGES,
    LeadEvent,
    LeadSource,
    Stage,
)

logger = logging.getLogger(__name__)

LEAD_ID_ALPHABET = string.ascii_uppercase + string.digits
LEAD_ID_LENGTH = 9


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_lead_id() -> str:
    return "".join(secrets.choice(LEAD_ID_ALPHABET) for _ in range(LEAD_ID_LENGTH))


def parse_stage(value) -> Stage:
    try:
        return Stage(value)
    except ValueError:
        raise ValidationError(f"Unknown lead status: {value}") from None


def parse_source(value) -> LeadSource:
    try:
        return LeadSource(value)
    except ValueError:
        raise ValidationError(f"Unknown lead source: {value}") from None


@dataclass
class Lead:
    """
    A customer enquiry moving through the sales pipeline.
    Quantity and product are free text, exactly as the customer wrote them.
    """
    customer_name: str
    phone: str
    id: str = field(default_factory=new_lead_id)
    whatsapp: Optional[str] = None
    city: Optional[str] = None
    interested_product: Optional[str] = None
    quantity: Optional[str] = None
    requirement_date: Optional[date] = None
    lead_source: LeadSource = LeadSource.WEBSITE
    notes: str = ""

    # FSM state
    status: Stage = Stage.NEW_LEAD
    history: list = field(default_factory=list)

    created_at: datetime = field(default_factory=utcnow)
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if self.updated_at is None:
            self.updated_at = self.created_at

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STAGES


def record_creation(lead: Lead, payload: dict = None) -> Lead:
    lead.history.append({
        "from": "NONE",
        "event": LeadEvent.LEAD_CREATED.value,
        "to": lead.status.value,
        "payload": payload or {},
        "timestamp": lead.created_at.isoformat(),
    })
    logger.info("Lead %s created for %s", lead.id, lead.customer_name)
    return lead


def record_transition(lead: Lead, event: LeadEvent, next_stage: Stage, payload: dict = None) -> Stage:
    """Move the lead and append the audit entry. No policy checks here."""
    now = utcnow()
    old_stage = lead.status

    lead.history.append({
        "from": old_stage.value,
        "event": event.value,
        "to": next_stage.value,
        "payload": payload or {},
        "timestamp": now.isoformat(),
    })
    lead.status = next_stage
    lead.updated_at = now

    logger.info("Lead %s: %s + %s → %s", lead.id, old_stage.value, event.value, next_stage.value)
    return next_stage


def next_stage(stage: Stage) -> Optional[Stage]:
    if stage in TERMINAL_STAGES:
        return None
    return LEAD_PIPELINE[LEAD_PIPELINE.index(stage) + 1]


def advance(lead: Lead, payload: dict = None) -> Lead:
    target = next_stage(lead.status)
    if target is None:
        raise InvalidStateError(
            f"Lead {lead.id} is in terminal stage '{lead.status.value}' and cannot advance"
        )
    record_transition(lead, LeadEvent.STAGE_ADVANCED, target, payload)
    return lead


def reject(lead: Lead, reason: Optional[str] = None) -> Lead:
    if lead.is_terminal:
        raise InvalidStateError(
            f"Lead {lead.id} is in terminal stage '{lead.status.value}' and cannot be rejected"
        )
    record_transition(lead, LeadEvent.LEAD_REJECTED, Stage.REJECTED, {"reason": reason} if reason else None)
    return lead


def set_status(lead: Lead, target, payload: dict = None) -> Lead:
    """
    Manual override from the status menu.
    Backward moves and jumps out of terminal stages are allowed on purpose.
    """
    stage = parse_stage(target)
    record_transition(lead, LeadEvent.STATUS_OVERRIDDEN, stage, payload)
    return lead
