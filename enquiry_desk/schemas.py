"""
Request / Response Models
=========================
The dashboard speaks camelCase, so every request model is aliased.
"""

from datetime import date
from decimal import Decimal
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from .core.lead_states import ORDER_STATUS_DISPLAY, STAGE_DISPLAY
from .core.licences import days_until_expiry, expiry_status, status_label
from .core.stock import legal_limit_percentage, stock_status


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Requests ──────────────────────────────────────────────────────────────────

class LeadCreateRequest(CamelModel):
    # Optional on purpose: a missing name / phone is a 400, not a 422.
    # Forms post phone numbers as bare numbers too.
    customer_name: Optional[Union[str, int]] = None
    phone: Optional[Union[str, int]] = None
    whatsapp: Optional[Union[str, int]] = None
    city: Optional[str] = None
    interested_product: Optional[str] = None
    quantity: Optional[Any] = None
    requirement_date: Optional[str] = None
    notes: Optional[str] = None
    lead_source: Optional[str] = None
    lead_status: Optional[str] = None


class StatusChangeRequest(CamelModel):
    status: str


class RejectRequest(CamelModel):
    reason: Optional[str] = None


class LineItemRequest(CamelModel):
    product_id: Any = None
    product_name: Optional[str] = None
    quantity: Any = None
    price: Any = 0


class ConvertRequest(CamelModel):
    items: List[LineItemRequest]
    discount: Any = 0
    tax: Any = 0
    payment_mode: str = "Cash"
    delivery_type: str = "Pickup"


class StockItemRequest(CamelModel):
    sku: str
    product_name: str
    current_stock: int = 0
    legal_limit: int
    min_allowed_stock: int = 0
    max_allowed_stock: int = 0
    reorder_level: int = 0
    location: str = ""


class StockAdjustmentRequest(CamelModel):
    type: str
    quantity: Any
    reason: str = ""


class LicenceRequest(CamelModel):
    document_type: Optional[str] = None
    number: Optional[str] = None
    issued_by: str = ""
    issue_date: date
    expiry_date: date
    kind: str = "licence"
    document_url: Optional[str] = None


class CartItemRequest(CamelModel):
    product_id: Any = None
    name: Optional[str] = None
    price: Any = 0
    mrp: Any = None
    quantity: Any = 1
    category: Optional[str] = None


class CartRequest(CamelModel):
    items: List[CartItemRequest]


class CheckoutRequest(CartRequest):
    customer_name: Optional[str] = None
    customer_phone: Optional[Union[str, int]] = None
    payment_method: str = "cash"


class SendMessageRequest(CamelModel):
    phone_number: Optional[str] = None
    message: Optional[str] = None
    message_type: str = "text"


# ── Serializers ───────────────────────────────────────────────────────────────

def _iso(value):
    return value.isoformat() if value else None


def _money(value: Decimal) -> float:
    return float(value)


def lead_payload(lead) -> dict:
    return {
        "id": lead.id,
        "customerName": lead.customer_name,
        "phone": lead.phone,
        "whatsapp": lead.whatsapp,
        "city": lead.city,
        "interestedProduct": lead.interested_product,
        "quantity": lead.quantity,
        "requirementDate": _iso(lead.requirement_date),
        "leadSource": lead.lead_source.value,
        "leadStatus": lead.status.value,
        "display": STAGE_DISPLAY[lead.status],
        "notes": lead.notes,
        "createdAt": _iso(lead.created_at),
        "updatedAt": _iso(lead.updated_at),
    }


def order_payload(order) -> dict:
    return {
        "id": order.id,
        "orderId": order.order_number,
        "customerName": order.customer_name,
        "phone": order.phone,
        "whatsapp": order.whatsapp,
        "city": order.city,
        "items": [
            {
                "productId": item.product_id,
                "productName": item.product_name,
                "quantity": item.quantity,
                "price": _money(item.unit_price),
                "total": _money(item.line_total),
            }
            for item in order.items
        ],
        "subtotal": _money(order.subtotal),
        "discount": _money(order.discount),
        "tax": _money(order.tax),
        "totalAmount": _money(order.total_amount),
        "paymentMode": order.payment_mode.value,
        "deliveryType": order.delivery_type.value,
        "status": order.status.value,
        "display": ORDER_STATUS_DISPLAY[order.status],
        "convertedFromLead": order.converted_from_lead,
        "createdAt": _iso(order.created_at),
        "deliveredAt": _iso(order.delivered_at),
    }


def stock_payload(item) -> dict:
    percentage = legal_limit_percentage(item)
    return {
        "id": item.id,
        "sku": item.sku,
        "productName": item.product_name,
        "currentStock": item.current_stock,
        "minAllowedStock": item.min_allowed_stock,
        "maxAllowedStock": item.max_allowed_stock,
        "legalLimit": item.legal_limit,
        "legalLimitPercentage": round(percentage) if percentage != float("inf") else None,
        "reorderLevel": item.reorder_level,
        "status": stock_status(item).value,
        "location": item.location,
        "lastUpdated": _iso(item.last_updated),
    }


def adjustment_payload(adjustment) -> dict:
    return {
        "id": adjustment.id,
        "productId": adjustment.product_id,
        "type": adjustment.type.value,
        "quantity": adjustment.quantity,
        "reason": adjustment.reason,
        "stockBefore": adjustment.stock_before,
        "stockAfter": adjustment.stock_after,
        "timestamp": _iso(adjustment.timestamp),
    }


def licence_payload(licence, today: date) -> dict:
    return {
        "id": licence.id,
        "kind": licence.kind.value,
        "documentType": licence.document_type,
        "number": licence.number,
        "issuedBy": licence.issued_by,
        "issueDate": _iso(licence.issue_date),
        "expiryDate": _iso(licence.expiry_date),
        "status": expiry_status(licence, today).value,
        "statusLabel": status_label(licence, today),
        "daysUntilExpiry": days_until_expiry(licence, today),
        "documentUrl": licence.document_url,
    }


def totals_payload(totals) -> dict:
    return {
        "totalAmount": _money(totals.total_amount),
        "totalMrp": _money(totals.total_mrp),
        "totalDiscount": _money(totals.total_discount),
        "discountPercentage": totals.discount_percentage,
    }


def cart_payload(items) -> list:
    return [
        {
            "productId": item.product_id,
            "name": item.name,
            "category": item.category,
            "quantity": item.quantity,
            "price": _money(item.price),
            "mrp": _money(item.mrp),
            "total": _money(item.line_total),
        }
        for item in items
    ]


def bill_payload(bill) -> dict:
    return {
        "id": bill.id,
        "invoiceNumber": bill.invoice_number,
        "customerName": bill.customer_name,
        "customerPhone": bill.customer_phone,
        "paymentMethod": bill.payment_method.value,
        "items": cart_payload(bill.items),
        **totals_payload(bill.totals),
        "createdAt": _iso(bill.created_at),
    }


def customer_payload(customer) -> dict:
    return {
        "name": customer.name,
        "phone": customer.phone,
        "whatsapp": customer.whatsapp,
        "city": customer.city,
        "customerType": customer.customer_type,
        "leadCount": customer.lead_count,
        "orderCount": customer.order_count,
        "totalSpent": _money(customer.total_spent),
        "lastPurchaseDate": _iso(customer.last_purchase_date),
        "isFrequentBuyer": customer.is_frequent_buyer,
    }
