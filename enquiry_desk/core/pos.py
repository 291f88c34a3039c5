"""
Counter Billing
===============
Walk-in sales at the counter. Each cart line carries both the selling
price and the MRP; the bill's discount is what the customer saves
against MRP.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Iterable, Optional

from .errors import ValidationError
from .lead_fsm import utcnow
from .order_fsm import to_money


class PosPaymentMethod(str, Enum):
    CASH = "cash"
    UPI = "upi"
    CARD = "card"


@dataclass
class CartItem:
    product_id: str
    name: str
    price: Decimal
    mrp: Decimal
    quantity: int
    category: str = ""

    @property
    def line_total(self) -> Decimal:
        return to_money(self.price * self.quantity)

    @property
    def line_mrp(self) -> Decimal:
        return to_money(self.mrp * self.quantity)


@dataclass
class BillTotals:
    total_amount: Decimal
    total_mrp: Decimal
    total_discount: Decimal
    discount_percentage: int


@dataclass
class Bill:
    invoice_number: str
    customer_name: str
    items: list
    totals: BillTotals
    payment_method: PosPaymentMethod = PosPaymentMethod.CASH
    customer_phone: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=utcnow)


def parse_payment_method(value) -> PosPaymentMethod:
    try:
        return PosPaymentMethod(str(value).lower())
    except ValueError:
        raise ValidationError(f"Unknown payment method: {value}") from None


def build_cart(raw_items: Iterable[dict]) -> list:
    """
    `{productId, name, price, mrp, quantity, category}` dicts into CartItems.
    Lines for the same product are merged; lines at quantity 0 drop out,
    like taking an item back off the counter.
    """
    cart: dict[str, CartItem] = {}
    for position, raw in enumerate(raw_items, 1):
        quantity = raw.get("quantity", 1)
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 0:
            raise ValidationError(f"Item {position}: quantity must be a whole number")

        price = to_money(raw.get("price", 0))
        mrp = to_money(raw.get("mrp") if raw.get("mrp") is not None else price)
        if price < 0 or mrp < 0:
            raise ValidationError(f"Item {position}: price and MRP cannot be negative")

        product_id = str(raw.get("productId") or position)
        if product_id in cart:
            cart[product_id].quantity += quantity
        else:
            cart[product_id] = CartItem(
                product_id=product_id,
                name=raw.get("name") or "",
                price=price,
                mrp=mrp,
                quantity=quantity,
                category=raw.get("category") or "",
            )
    return [item for item in cart.values() if item.quantity > 0]


def bill_totals(items: Iterable[CartItem]) -> BillTotals:
    items = list(items)
    total_amount = to_money(sum((item.line_total for item in items), Decimal("0")))
    total_mrp = to_money(sum((item.line_mrp for item in items), Decimal("0")))
    total_discount = total_mrp - total_amount
    if total_mrp > 0:
        percentage = int((total_discount / total_mrp * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    else:
        percentage = 0
    return BillTotals(total_amount, total_mrp, total_discount, percentage)


def checkout(
    items: list,
    customer_name: Optional[str],
    invoice_number: str,
    payment_method=PosPaymentMethod.CASH,
    customer_phone: Optional[str] = None,
) -> Bill:
    name = (customer_name or "").strip()
    if not name:
        raise ValidationError("Customer name is required")
    if not items:
        raise ValidationError("Cart is empty")

    return Bill(
        invoice_number=invoice_number,
        customer_name=name,
        customer_phone=(customer_phone or "").strip() or None,
        items=list(items),
        totals=bill_totals(items),
        payment_method=parse_payment_method(payment_method),
    )
