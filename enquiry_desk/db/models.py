"""
Database Models
===============
Lead = current stage + enquiry data
LeadEvent = immutable history (audit log)
Order / OrderItem = what a converted lead became
"""

from datetime import datetime, timezone
from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, JSON, Numeric, String, Text
from sqlalchemy.orm import DeclarativeBase, relationship


def utcnow():
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class Lead(Base):
    """
    The Lead table stores the CURRENT stage.
    History lives in lead_events.
    """
    __tablename__ = "leads"

    id = Column(String(32), primary_key=True)
    position = Column(Integer, nullable=False, index=True)

    # Enquiry data
    customer_name = Column(String(200), nullable=False)
    phone = Column(String(40), nullable=False)
    whatsapp = Column(String(40), nullable=True)
    city = Column(String(100), nullable=True)
    interested_product = Column(String(255), nullable=True)
    quantity = Column(String(100), nullable=True)
    requirement_date = Column(Date, nullable=True)
    lead_source = Column(String(20), nullable=False)
    notes = Column(Text, nullable=False, default="")

    # FSM stage
    status = Column(String(50), nullable=False, default="New Lead")

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow)

    events = relationship("LeadEvent", back_populates="lead", order_by="LeadEvent.sequence")


class LeadEvent(Base):
    """
    Every transition creates a new row here.
    Never updated or deleted - append-only.
    """
    __tablename__ = "lead_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    lead_id = Column(String(32), ForeignKey("leads.id"), nullable=False, index=True)
    sequence = Column(Integer, nullable=False)

    from_state = Column(String(50), nullable=False)
    event = Column(String(100), nullable=False)
    to_state = Column(String(50), nullable=False)
    payload = Column(JSON, nullable=True)
    occurred_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    lead = relationship("Lead", back_populates="events")


class Order(Base):
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True)
    position = Column(Integer, nullable=False, index=True)
    order_number = Column(String(32), nullable=False, unique=True)

    # Weak back-reference for traceability, not ownership
    converted_from_lead = Column(String(32), nullable=False, index=True)

    customer_name = Column(String(200), nullable=False)
    phone = Column(String(40), nullable=False)
    whatsapp = Column(String(40), nullable=True)
    city = Column(String(100), nullable=True)

    subtotal = Column(Numeric(12, 2), nullable=False)
    discount = Column(Numeric(12, 2), nullable=False)
    tax = Column(Numeric(12, 2), nullable=False)
    total_amount = Column(Numeric(12, 2), nullable=False)

    payment_mode = Column(String(20), nullable=False)
    delivery_type = Column(String(30), nullable=False)
    status = Column(String(20), nullable=False, default="Pending")

    created_at = Column(DateTime(timezone=True), default=utcnow)
    delivered_at = Column(DateTime(timezone=True), nullable=True)

    items = relationship(
        "OrderItem", back_populates="order", order_by="OrderItem.line_no", cascade="all, delete-orphan"
    )


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(String(36), ForeignKey("orders.id"), nullable=False, index=True)
    line_no = Column(Integer, nullable=False)

    product_id = Column(String(64), nullable=False)
    product_name = Column(String(255), nullable=False, default="")
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)

    order = relationship("Order", back_populates="items")
