"""
Lead and Order Lifecycle States
Every lead is in exactly ONE stage, every order in exactly ONE status
"""

from enum import Enum


class Stage(str, Enum):
    # Sales pipeline, in order
    NEW_LEAD = "New Lead"                      # Enquiry just captured
    CONTACTED = "Contacted"                    # First call / message done
    QUOTATION_SENT = "Quotation Sent"          # Price list shared
    NEGOTIATION = "Negotiation"                # Haggling over rates / quantities
    CONFIRMED = "Confirmed"                    # Customer agreed, ready to convert
    CONVERTED_TO_ORDER = "Converted to Order"  # Order created (terminal)

    # Drop-out
    REJECTED = "Rejected"                      # Lost or declined (terminal)


class LeadSource(str, Enum):
    WEBSITE = "Website"
    PHONE = "Phone"
    WHATSAPP = "WhatsApp"
    WALK_IN = "Walk-in"
    REFERRAL = "Referral"


class LeadEvent(str, Enum):
    LEAD_CREATED = "LEAD_CREATED"
    STAGE_ADVANCED = "STAGE_ADVANCED"
    STATUS_OVERRIDDEN = "STATUS_OVERRIDDEN"
    LEAD_REJECTED = "LEAD_REJECTED"
    CONVERTED_TO_ORDER = "CONVERTED_TO_ORDER"


# Linear order used by "advance"
LEAD_PIPELINE = [
    Stage.NEW_LEAD,
    Stage.CONTACTED,
    Stage.QUOTATION_SENT,
    Stage.NEGOTIATION,
    Stage.CONFIRMED,
    Stage.CONVERTED_TO_ORDER,
]

# Terminal stages - once a lead reaches these, it stops moving
TERMINAL_STAGES = {
    Stage.CONVERTED_TO_ORDER,
    Stage.REJECTED,
}

# Only a confirmed lead may become an order
CONVERTIBLE_STAGE = Stage.CONFIRMED


class OrderStatus(str, Enum):
    PENDING = "Pending"
    PACKED = "Packed"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class PaymentMode(str, Enum):
    CASH = "Cash"
    UPI = "UPI"
    BANK = "Bank"


class DeliveryType(str, Enum):
    PICKUP = "Pickup"
    LOCAL_DELIVERY = "Local Delivery"


# (from, to) pairs an order may take without an override
ORDER_TRANSITIONS = {
    (OrderStatus.PENDING, OrderStatus.PACKED),
    (OrderStatus.PACKED, OrderStatus.DELIVERED),
    (OrderStatus.PENDING, OrderStatus.CANCELLED),
    (OrderStatus.PACKED, OrderStatus.CANCELLED),
}


# ── Display metadata ──────────────────────────────────────────────────────────
# One table per enum, read by every list / board / badge view.

STAGE_DISPLAY = {
    Stage.NEW_LEAD: {"label": "New Lead", "color": "blue", "badge": "bg-blue-100 text-blue-700"},
    Stage.CONTACTED: {"label": "Contacted", "color": "yellow", "badge": "bg-yellow-100 text-yellow-700"},
    Stage.QUOTATION_SENT: {"label": "Quoted", "color": "purple", "badge": "bg-purple-100 text-purple-700"},
    Stage.NEGOTIATION: {"label": "Negotiating", "color": "orange", "badge": "bg-orange-100 text-orange-700"},
    Stage.CONFIRMED: {"label": "Confirmed", "color": "green", "badge": "bg-green-100 text-green-700"},
    Stage.CONVERTED_TO_ORDER: {"label": "Converted", "color": "emerald", "badge": "bg-emerald-100 text-emerald-700"},
    Stage.REJECTED: {"label": "Rejected", "color": "red", "badge": "bg-red-100 text-red-700"},
}

ORDER_STATUS_DISPLAY = {
    OrderStatus.PENDING: {"label": "Pending", "color": "blue", "badge": "bg-blue-100 text-blue-800"},
    OrderStatus.PACKED: {"label": "Packed", "color": "amber", "badge": "bg-amber-100 text-amber-800"},
    OrderStatus.DELIVERED: {"label": "Delivered", "color": "green", "badge": "bg-green-100 text-green-800"},
    OrderStatus.CANCELLED: {"label": "Cancelled", "color": "red", "badge": "bg-red-100 text-red-800"},
}
