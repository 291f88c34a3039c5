"""
Database-Backed Stores
======================
Same repository interface, written to SQL through SQLAlchemy.
Every history entry on a lead becomes one append-only lead_events row.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from ..core.lead_fsm import Lead
from ..core.lead_states import DeliveryType, LeadSource, OrderStatus, PaymentMode, Stage
from ..core.order_fsm import LineItem, Order
from ..db.models import Lead as LeadModel, LeadEvent as EventModel
from ..db.models import Order as OrderModel, OrderItem as OrderItemModel
from .store import LeadStore, OrderStore

logger = logging.getLogger(__name__)


# ── Row <-> entity mapping ────────────────────────────────────────────────────

def _lead_from_row(row: LeadModel) -> Lead:
    return Lead(
        id=row.id,
        customer_name=row.customer_name,
        phone=row.phone,
        whatsapp=row.whatsapp,
        city=row.city,
        interested_product=row.interested_product,
        quantity=row.quantity,
        requirement_date=row.requirement_date,
        lead_source=LeadSource(row.lead_source),
        notes=row.notes or "",
        status=Stage(row.status),
        history=[
            {
                "from": e.from_state,
                "event": e.event,
                "to": e.to_state,
                "payload": e.payload or {},
                "timestamp": e.occurred_at.isoformat(),
            }
            for e in row.events
        ],
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _copy_lead_fields(lead: Lead, row: LeadModel):
    row.customer_name = lead.customer_name
    row.phone = lead.phone
    row.whatsapp = lead.whatsapp
    row.city = lead.city
    row.interested_product = lead.interested_product
    row.quantity = lead.quantity
    row.requirement_date = lead.requirement_date
    row.lead_source = lead.lead_source.value
    row.notes = lead.notes
    row.status = lead.status.value
    row.updated_at = lead.updated_at


def _event_rows(lead: Lead, start: int) -> list:
    return [
        EventModel(
            lead_id=lead.id,
            sequence=sequence,
            from_state=entry["from"],
            event=entry["event"],
            to_state=entry["to"],
            payload=entry.get("payload") or {},
            occurred_at=datetime.fromisoformat(entry["timestamp"]),
        )
        for sequence, entry in enumerate(lead.history[start:], start)
    ]


async def _write_lead(session: AsyncSession, lead: Lead):
    # Row lock so two writers cannot interleave event sequences
    result = await session.execute(
        select(LeadModel).where(LeadModel.id == lead.id).with_for_update()
    )
    row = result.scalar_one_or_none()
    if not row:
        raise KeyError(f"Lead {lead.id} not found")

    stored_events = (await session.execute(
        select(func.count()).select_from(EventModel).where(EventModel.lead_id == lead.id)
    )).scalar_one()

    _copy_lead_fields(lead, row)
    session.add_all(_event_rows(lead, stored_events))


def _order_from_row(row: OrderModel) -> Order:
    return Order(
        id=row.id,
        order_number=row.order_number,
        converted_from_lead=row.converted_from_lead,
        customer_name=row.customer_name,
        phone=row.phone,
        whatsapp=row.whatsapp,
        city=row.city,
        items=[
            LineItem(
                product_id=item.product_id,
                product_name=item.product_name,
                quantity=item.quantity,
                unit_price=item.unit_price,
            )
            for item in row.items
        ],
        subtotal=row.subtotal,
        discount=row.discount,
        tax=row.tax,
        total_amount=row.total_amount,
        payment_mode=PaymentMode(row.payment_mode),
        delivery_type=DeliveryType(row.delivery_type),
        status=OrderStatus(row.status),
        created_at=row.created_at,
        delivered_at=row.delivered_at,
    )


# ── Stores ────────────────────────────────────────────────────────────────────

class SqlLeadStore(LeadStore):

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    async def add(self, lead: Lead) -> Lead:
        async with self.session_factory() as session:
            position = (await session.execute(select(func.count()).select_from(LeadModel))).scalar_one()
            row = LeadModel(id=lead.id, position=position + 1, created_at=lead.created_at)
            _copy_lead_fields(lead, row)
            session.add(row)
            session.add_all(_event_rows(lead, 0))
            await session.commit()
        return lead

    async def get(self, lead_id: str) -> Optional[Lead]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(LeadModel).where(LeadModel.id == lead_id).options(selectinload(LeadModel.events))
            )
            row = result.scalar_one_or_none()
            return _lead_from_row(row) if row else None

    async def list(self) -> list:
        async with self.session_factory() as session:
            result = await session.execute(
                select(LeadModel).order_by(LeadModel.position).options(selectinload(LeadModel.events))
            )
            return [_lead_from_row(row) for row in result.scalars().all()]

    async def update(self, lead: Lead) -> Lead:
        async with self.session_factory() as session:
            await _write_lead(session, lead)
            await session.commit()

        logger.debug("Lead %s written (%s events)", lead.id, len(lead.history))
        return lead


class SqlOrderStore(OrderStore):

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    async def add(self, order: Order) -> Order:
        async with self.session_factory() as session:
            await self._insert(session, order)
            await session.commit()
        return order

    async def add_conversion(self, order: Order, lead: Lead, leads: LeadStore) -> Order:
        # Lead and order commit together or not at all
        async with self.session_factory() as session:
            await _write_lead(session, lead)
            await self._insert(session, order)
            await session.commit()
        return order

    async def _insert(self, session: AsyncSession, order: Order):
        position = (await session.execute(select(func.count()).select_from(OrderModel))).scalar_one()
        session.add(OrderModel(
            id=order.id,
            position=position + 1,
            order_number=order.order_number,
            converted_from_lead=order.converted_from_lead,
            customer_name=order.customer_name,
            phone=order.phone,
            whatsapp=order.whatsapp,
            city=order.city,
            subtotal=order.subtotal,
            discount=order.discount,
            tax=order.tax,
            total_amount=order.total_amount,
            payment_mode=order.payment_mode.value,
            delivery_type=order.delivery_type.value,
            status=order.status.value,
            created_at=order.created_at,
            delivered_at=order.delivered_at,
            items=[
                OrderItemModel(
                    line_no=line_no,
                    product_id=item.product_id,
                    product_name=item.product_name,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                )
                for line_no, item in enumerate(order.items, 1)
            ],
        ))

    async def get(self, order_id: str) -> Optional[Order]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(OrderModel).where(OrderModel.id == order_id).options(selectinload(OrderModel.items))
            )
            row = result.scalar_one_or_none()
            return _order_from_row(row) if row else None

    async def list(self) -> list:
        async with self.session_factory() as session:
            result = await session.execute(
                select(OrderModel).order_by(OrderModel.position).options(selectinload(OrderModel.items))
            )
            return [_order_from_row(row) for row in result.scalars().all()]

    async def update(self, order: Order) -> Order:
        # Only the status side of an order changes after creation
        async with self.session_factory() as session:
            result = await session.execute(
                select(OrderModel).where(OrderModel.id == order.id).with_for_update()
            )
            row = result.scalar_one_or_none()
            if not row:
                raise KeyError(f"Order {order.id} not found")
            row.status = order.status.value
            row.delivered_at = order.delivered_at
            await session.commit()
        return order

    async def count(self) -> int:
        async with self.session_factory() as session:
            return (await session.execute(select(func.count()).select_from(OrderModel))).scalar_one()
