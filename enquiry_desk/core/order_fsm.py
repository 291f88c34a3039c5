"""
Order Status Tracker
====================
Pending → Packed → Delivered, with Cancelled reachable from Pending or Packed.
Anything else needs the explicit override.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from .errors import InvalidStateError, ValidationError
from .lead_fsm import utcnow
from .lead_states import ORDER_TRANSITIONS, DeliveryType, OrderStatus, PaymentMode

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def to_money(value) -> Decimal:
    """Two-decimal rounding, half-up, from str / int / float / Decimal"""
    if isinstance(value, float):
        value = repr(value)
    try:
        amount = Decimal(value)
        if not amount.is_finite():
            raise ValueError("NaN and Infinity are not amounts")
        return amount.quantize(CENTS, rounding=ROUND_HALF_UP)
    except (ArithmeticError, TypeError, ValueError):
        raise ValidationError(f"Invalid amount: {value!r}") from None


def parse_order_status(value) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError:
        raise ValidationError(f"Unknown order status: {value}") from None


@dataclass
class LineItem:
    product_id: str
    product_name: str
    quantity: int
    unit_price: Decimal

    @property
    def line_total(self) -> Decimal:
        return to_money(self.unit_price * self.quantity)


@dataclass
class Order:
    converted_from_lead: str
    customer_name: str
    phone: str
    items: list
    subtotal: Decimal
    discount: Decimal
    tax: Decimal
    total_amount: Decimal
    order_number: str = ""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    whatsapp: Optional[str] = None
    city: Optional[str] = None
    payment_mode: PaymentMode = PaymentMode.CASH
    delivery_type: DeliveryType = DeliveryType.PICKUP
    status: OrderStatus = OrderStatus.PENDING
    created_at: datetime = field(default_factory=utcnow)
    delivered_at: Optional[datetime] = None


def _apply_status(order: Order, status: OrderStatus) -> Order:
    old_status = order.status
    order.status = status
    order.delivered_at = utcnow() if status == OrderStatus.DELIVERED else None
    logger.info("Order %s: %s → %s", order.order_number or order.id, old_status.value, status.value)
    return order


def set_order_status(order: Order, new_status) -> Order:
    status = parse_order_status(new_status)
    if status == order.status:
        return order

    if (order.status, status) not in ORDER_TRANSITIONS:
        raise InvalidStateError(
            f"Order {order.order_number or order.id} cannot move from "
            f"'{order.status.value}' to '{status.value}'"
        )
    return _apply_status(order, status)


def override_order_status(order: Order, new_status) -> Order:
    """Privileged jump to any status, e.g. to undo a mistaken 'Delivered'"""
    status = parse_order_status(new_status)
    logger.warning(
        "Order %s status overridden: %s → %s",
        order.order_number or order.id, order.status.value, status.value,
    )
    return _apply_status(order, status)
