"""
Customers
=========
Customers are not stored on their own: they are grouped out of leads and
orders by phone number (digits only, so "+91 98765-43210" and
"919876543210" are one customer).
"""

import re
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from .lead_states import OrderStatus

FREQUENT_BUYER_ORDERS = 5
BULK_SPEND = Decimal("100000")


@dataclass
class Customer:
    phone: str
    name: str
    whatsapp: Optional[str] = None
    city: Optional[str] = None
    lead_count: int = 0
    order_count: int = 0
    total_spent: Decimal = Decimal("0")
    last_purchase_date: Optional[date] = None
    order_ids: list = field(default_factory=list)

    @property
    def customer_type(self) -> str:
        return "Bulk" if self.total_spent >= BULK_SPEND else "Retail"

    @property
    def is_frequent_buyer(self) -> bool:
        return self.order_count >= FREQUENT_BUYER_ORDERS


def phone_key(phone: Optional[str]) -> str:
    return re.sub(r"[^\d]", "", phone or "")


def _customer_for(customers: dict, record) -> Optional[Customer]:
    key = phone_key(record.phone)
    if not key:
        return None
    customer = customers.get(key)
    if customer is None:
        customer = customers[key] = Customer(phone=record.phone, name=record.customer_name)
    # Latest contact details win
    customer.name = record.customer_name or customer.name
    customer.whatsapp = record.whatsapp or customer.whatsapp
    customer.city = record.city or customer.city
    return customer


def build_customers(leads: Iterable, orders: Iterable) -> list:
    """
    One Customer per phone number, in order of first appearance.
    Cancelled orders count as orders but not towards money spent.
    """
    customers: dict[str, Customer] = {}

    for lead in leads:
        customer = _customer_for(customers, lead)
        if customer:
            customer.lead_count += 1

    for order in orders:
        customer = _customer_for(customers, order)
        if not customer:
            continue
        customer.order_count += 1
        customer.order_ids.append(order.id)
        if order.status == OrderStatus.CANCELLED:
            continue
        customer.total_spent += order.total_amount
        purchased = order.created_at.date()
        if customer.last_purchase_date is None or purchased > customer.last_purchase_date:
            customer.last_purchase_date = purchased

    return list(customers.values())


def filter_customers(customers: Iterable[Customer], search_term: Optional[str] = None, customer_type: Optional[str] = None) -> list:
    """Same rules as the lead search: name and city case-insensitive, phone as typed"""
    term = search_term or ""
    needle = term.lower()
    kind = (customer_type or "all").lower()

    result = []
    for customer in customers:
        if kind != "all" and customer.customer_type.lower() != kind:
            continue
        if term and not (
            needle in (customer.name or "").lower()
            or term in (customer.phone or "")
            or needle in (customer.city or "").lower()
        ):
            continue
        result.append(customer)
    return result
