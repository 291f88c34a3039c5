"""
Sales Pipeline
==============
Takes enquiries in, walks them through the stages, converts them to orders.
Every mutation of a lead or order runs under that record's lock.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core import lead_fsm, order_fsm
from ..core.conversion import Pricing, build_line_items, convert_to_order
from ..core.errors import RecordNotFound, ValidationError
from ..core.lead_fsm import Lead, parse_source, parse_stage
from ..core.lead_states import DeliveryType, LeadSource, PaymentMode, Stage
from ..core.order_fsm import Order, to_money
from ..core.search import filter_leads, filter_orders
from .locks import RecordLocks
from .store import LeadStore, OrderStore

logger = logging.getLogger(__name__)


# ── Raw Enquiry Structure ─────────────────────────────────────────────────────

@dataclass
class RawEnquiry:
    """Form submission before validation"""
    customer_name: Optional[str] = None
    phone: Optional[str] = None
    whatsapp: Optional[str] = None
    city: Optional[str] = None
    interested_product: Optional[str] = None
    quantity: Optional[str] = None
    requirement_date: Optional[str] = None
    notes: Optional[str] = None
    lead_source: Optional[str] = None
    lead_status: Optional[str] = None


# ── Validation ────────────────────────────────────────────────────────────────

def _clean(value) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _parse_date(value) -> Optional[date]:
    if value is None or isinstance(value, date):
        return value
    value = str(value).strip()
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        raise ValidationError(f"Invalid requirement date: {value}") from None


def sanitize_enquiry(raw: RawEnquiry) -> Lead:
    """Validate a raw enquiry into an unsaved Lead (stage New Lead)"""
    name = _clean(raw.customer_name)
    phone = _clean(raw.phone)
    if not name or not phone:
        raise ValidationError("Customer name and phone are required")

    source = parse_source(raw.lead_source) if _clean(raw.lead_source) else LeadSource.WEBSITE

    return Lead(
        customer_name=name,
        phone=phone,
        whatsapp=_clean(raw.whatsapp),
        city=_clean(raw.city),
        interested_product=_clean(raw.interested_product),
        quantity=_clean(raw.quantity),
        requirement_date=_parse_date(raw.requirement_date),
        lead_source=source,
        notes=_clean(raw.notes) or "",
    )


# ── Pipeline ──────────────────────────────────────────────────────────────────

class SalesPipeline:
    """Lead store + order store + per-record locks"""

    def __init__(self, leads: LeadStore, orders: OrderStore):
        self.leads = leads
        self.orders = orders
        self._locks = RecordLocks()
        self._order_numbers = asyncio.Lock()

    # Leads

    async def create_lead(self, raw: RawEnquiry) -> Lead:
        lead = sanitize_enquiry(raw)
        # Checked before anything is stored
        requested = parse_stage(raw.lead_status) if _clean(raw.lead_status) else Stage.NEW_LEAD

        while await self.leads.get(lead.id) is not None:
            lead.id = lead_fsm.new_lead_id()

        lead_fsm.record_creation(lead, {"source": lead.lead_source.value})
        if requested != Stage.NEW_LEAD:
            lead_fsm.set_status(lead, requested, {"reason": "status chosen on the enquiry form"})

        await self.leads.add(lead)
        return lead

    async def list_leads(self, search: str = None, status: str = None, source: str = None) -> list:
        return filter_leads(await self.leads.list(), search, status, source)

    async def get_lead(self, lead_id: str) -> Lead:
        lead = await self.leads.get(lead_id)
        if lead is None:
            raise RecordNotFound(f"Lead {lead_id} not found")
        return lead

    async def _mutate_lead(self, lead_id: str, action) -> Lead:
        async with self._locks.hold(lead_id):
            lead = await self.get_lead(lead_id)
            action(lead)
            return await self.leads.update(lead)

    async def advance_lead(self, lead_id: str) -> Lead:
        return await self._mutate_lead(lead_id, lead_fsm.advance)

    async def reject_lead(self, lead_id: str, reason: Optional[str] = None) -> Lead:
        return await self._mutate_lead(lead_id, lambda lead: lead_fsm.reject(lead, reason))

    async def set_lead_status(self, lead_id: str, status: str) -> Lead:
        return await self._mutate_lead(lead_id, lambda lead: lead_fsm.set_status(lead, status))

    async def convert_lead(
        self,
        lead_id: str,
        items: list,
        discount=0,
        tax=0,
        payment_mode: str = PaymentMode.CASH.value,
        delivery_type: str = DeliveryType.PICKUP.value,
    ) -> tuple[Lead, Order]:
        try:
            pricing = Pricing(
                discount=to_money(discount),
                tax=to_money(tax),
                payment_mode=PaymentMode(payment_mode),
                delivery_type=DeliveryType(delivery_type),
            )
        except ValueError as e:
            raise ValidationError(str(e)) from None
        line_items = build_line_items(items)

        async with self._locks.hold(lead_id):
            lead = await self.get_lead(lead_id)
            async with self._order_numbers:
                number = await self._next_order_number()
                order = convert_to_order(lead, line_items, pricing, order_number=number)
                await self.orders.add_conversion(order, lead, self.leads)

        logger.info(
            "Lead %s converted to order %s (total %s)", lead.id, order.order_number, order.total_amount
        )
        return lead, order

    async def _next_order_number(self) -> str:
        return f"ORD-{lead_fsm.utcnow().year}-{await self.orders.count() + 1:04d}"

    # Orders

    async def list_orders(self, search: str = None, status: str = None) -> list:
        return filter_orders(await self.orders.list(), search, status)

    async def get_order(self, order_id: str) -> Order:
        order = await self.orders.get(order_id)
        if order is None:
            raise RecordNotFound(f"Order {order_id} not found")
        return order

    async def update_order_status(self, order_id: str, status: str, override: bool = False) -> Order:
        change = order_fsm.override_order_status if override else order_fsm.set_order_status
        async with self._locks.hold(order_id):
            order = await self.get_order(order_id)
            change(order, status)
            return await self.orders.update(order)
