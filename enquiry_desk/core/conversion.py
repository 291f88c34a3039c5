"""
Conversion Gate
===============
The one-way handoff from a confirmed lead to an order.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from .errors import InvalidStateError, ValidationError
from .lead_fsm import Lead, record_transition
from .lead_states import CONVERTIBLE_STAGE, DeliveryType, LeadEvent, PaymentMode, Stage
from .order_fsm import LineItem, Order, to_money


@dataclass
class Pricing:
    discount: Decimal = Decimal("0")
    tax: Decimal = Decimal("0")
    payment_mode: PaymentMode = PaymentMode.CASH
    delivery_type: DeliveryType = DeliveryType.PICKUP


def build_line_items(raw_items: Iterable[dict]) -> list:
    """Validate `{productId, productName, quantity, price}` dicts into LineItems"""
    items = []
    for position, raw in enumerate(raw_items, 1):
        quantity = raw.get("quantity")
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise ValidationError(f"Item {position}: quantity must be a whole number of at least 1")

        price = to_money(raw.get("price", 0))
        if price < 0:
            raise ValidationError(f"Item {position}: price cannot be negative")

        items.append(LineItem(
            product_id=str(raw.get("productId") or position),
            product_name=raw.get("productName") or "",
            quantity=quantity,
            unit_price=price,
        ))
    return items


def compute_totals(items: list, discount, tax) -> tuple[Decimal, Decimal, Decimal, Decimal]:
    """Returns (subtotal, discount, tax, total) with total = subtotal - discount + tax"""
    discount = to_money(discount)
    tax = to_money(tax)
    if discount < 0 or tax < 0:
        raise ValidationError("Discount and tax cannot be negative")

    subtotal = to_money(sum((item.line_total for item in items), Decimal("0")))
    if discount > subtotal:
        raise ValidationError("Discount cannot exceed the order subtotal")

    total = to_money(subtotal - discount + tax)
    return subtotal, discount, tax, total


def convert_to_order(lead: Lead, line_items: list, pricing: Pricing = None, order_number: str = "") -> Order:
    """
    Create the order for a Confirmed lead and mark the lead converted.
    Raises InvalidStateError for any other stage, so a second call fails.
    """
    pricing = pricing or Pricing()

    if lead.status != CONVERTIBLE_STAGE:
        raise InvalidStateError(
            f"Lead {lead.id} is '{lead.status.value}'; only "
            f"'{CONVERTIBLE_STAGE.value}' leads can be converted to an order"
        )
    if not line_items:
        raise ValidationError("An order needs at least one item")

    subtotal, discount, tax, total = compute_totals(line_items, pricing.discount, pricing.tax)

    order = Order(
        converted_from_lead=lead.id,
        order_number=order_number,
        customer_name=lead.customer_name,
        phone=lead.phone,
        whatsapp=lead.whatsapp,
        city=lead.city,
        items=list(line_items),
        subtotal=subtotal,
        discount=discount,
        tax=tax,
        total_amount=total,
        payment_mode=pricing.payment_mode,
        delivery_type=pricing.delivery_type,
    )

    record_transition(
        lead, LeadEvent.CONVERTED_TO_ORDER, Stage.CONVERTED_TO_ORDER,
        {"order_id": order.id, "order_number": order_number},
    )
    return order
