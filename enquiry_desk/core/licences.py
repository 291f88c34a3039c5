"""
Licences & Certificates
=======================
Dealer, shop and storage licences plus product certificates, each with an
expiry date. Status is always derived from the expiry date, never stored.
"""

import uuid
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Iterable, Optional

from .errors import ValidationError
from .stock import WARNING_THRESHOLD, is_over_legal_limit, legal_limit_percentage

EXPIRING_SOON_DAYS = 30


class DocumentKind(str, Enum):
    LICENCE = "licence"
    CERTIFICATE = "certificate"


class ExpiryStatus(str, Enum):
    ACTIVE = "active"
    EXPIRING_SOON = "expiring-soon"
    EXPIRED = "expired"


class AlertLevel(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


@dataclass
class Licence:
    document_type: str          # "Shop License", "PESO Approval Certificate", ...
    number: str
    issued_by: str
    issue_date: date
    expiry_date: date
    kind: DocumentKind = DocumentKind.LICENCE
    document_url: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))


def parse_kind(value) -> DocumentKind:
    try:
        return DocumentKind(value)
    except ValueError:
        raise ValidationError(f"Unknown document kind: {value}") from None


def validate_licence(licence: Licence) -> Licence:
    if not licence.document_type or not licence.number:
        raise ValidationError("Document type and number are required")
    if licence.expiry_date < licence.issue_date:
        raise ValidationError("Expiry date cannot be before the issue date")
    return licence


def days_until_expiry(licence: Licence, today: date) -> int:
    """Negative once expired; 0 on the expiry day itself"""
    return (licence.expiry_date - today).days


def expiry_status(licence: Licence, today: date) -> ExpiryStatus:
    days = days_until_expiry(licence, today)
    if days < 0:
        return ExpiryStatus.EXPIRED
    if days <= EXPIRING_SOON_DAYS:
        return ExpiryStatus.EXPIRING_SOON
    return ExpiryStatus.ACTIVE


def status_label(licence: Licence, today: date) -> str:
    status = expiry_status(licence, today)
    days = days_until_expiry(licence, today)
    if status == ExpiryStatus.ACTIVE:
        return f"Active ({days} days remaining)"
    if status == ExpiryStatus.EXPIRING_SOON:
        return f"Expiring Soon ({days} days remaining)"
    return "Expired"


def compliance_alerts(licences: Iterable[Licence], stock_items: Iterable, today: date) -> list:
    """
    Expired or expiring documents, then stock approaching or above its
    legal limit. Critical alerts first, input order kept within a level.
    """
    alerts = []

    for licence in licences:
        status = expiry_status(licence, today)
        if status == ExpiryStatus.ACTIVE:
            continue
        days = days_until_expiry(licence, today)
        if status == ExpiryStatus.EXPIRED:
            title = f"{licence.document_type} Expired"
            description = f"{licence.document_type} ({licence.number}) expired on {licence.expiry_date.isoformat()}"
        else:
            title = f"{licence.document_type} Expiring Soon"
            description = f"{licence.document_type} ({licence.number}) expires in {days} days"
        alerts.append({
            "type": AlertLevel.CRITICAL.value,
            "title": title,
            "description": description,
            "action": "Renew License" if licence.kind == DocumentKind.LICENCE else "Renew Certificate",
            "daysRemaining": max(days, 0),
            "documentId": licence.id,
        })

    for item in stock_items:
        over = is_over_legal_limit(item)
        if not over and legal_limit_percentage(item) <= WARNING_THRESHOLD:
            continue
        alerts.append({
            "type": (AlertLevel.CRITICAL if over else AlertLevel.WARNING).value,
            "title": "Storage Limit Exceeded" if over else "Storage Limit Alert",
            "description": (
                f"{item.product_name}: current stock ({item.current_stock} units) "
                f"{'is above' if over else 'is approaching'} the licensed limit of {item.legal_limit} units"
            ),
            "action": "View Stock",
            "daysRemaining": None,
            "productId": item.id,
        })

    order = [AlertLevel.CRITICAL.value, AlertLevel.WARNING.value, AlertLevel.INFO.value]
    return sorted(alerts, key=lambda alert: order.index(alert["type"]))
