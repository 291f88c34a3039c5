from datetime import date

import pytest

from enquiry_desk.core.errors import ValidationError
from enquiry_desk.core.licences import (
    DocumentKind,
    ExpiryStatus,
    Licence,
    compliance_alerts,
    days_until_expiry,
    expiry_status,
    status_label,
    validate_licence,
)
from enquiry_desk.core.stock import StockItem
from enquiry_desk.sales.licences import LicenceRegister

TODAY = date(2024, 10, 31)


def licence(expiry, **fields):
    fields.setdefault("document_type", "Firecracker Dealer License")
    fields.setdefault("number", "FDL-2024-001")
    fields.setdefault("issued_by", "Tamil Nadu Fire Safety Board")
    fields.setdefault("issue_date", date(2023, 6, 1))
    return Licence(expiry_date=expiry, **fields)


@pytest.mark.parametrize("expiry, expected, days", [
    (date(2025, 4, 14), ExpiryStatus.ACTIVE, 165),
    (date(2024, 12, 1), ExpiryStatus.ACTIVE, 31),
    (date(2024, 11, 30), ExpiryStatus.EXPIRING_SOON, 30),
    (date(2024, 10, 31), ExpiryStatus.EXPIRING_SOON, 0),
    (date(2024, 10, 30), ExpiryStatus.EXPIRED, -1),
])
def test_expiry_status(expiry, expected, days):
    doc = licence(expiry)
    assert expiry_status(doc, TODAY) == expected
    assert days_until_expiry(doc, TODAY) == days


def test_status_labels():
    assert status_label(licence(date(2025, 4, 14)), TODAY) == "Active (165 days remaining)"
    assert status_label(licence(date(2024, 11, 30)), TODAY) == "Expiring Soon (30 days remaining)"
    assert status_label(licence(date(2024, 1, 1)), TODAY) == "Expired"


def test_validation():
    with pytest.raises(ValidationError):
        validate_licence(licence(date(2023, 1, 1)))
    with pytest.raises(ValidationError):
        validate_licence(licence(date(2025, 1, 1), number=""))


def test_alerts_cover_documents_and_stock():
    documents = [
        licence(date(2025, 4, 14), number="DGL-2024-001", document_type="Shop License"),
        licence(date(2024, 11, 30)),
        licence(date(2024, 6, 19), number="FSA-2024-001", document_type="Fire Safety Audit Report",
                kind=DocumentKind.CERTIFICATE),
    ]
    stock = [
        StockItem(sku="GSP-001", product_name="Green Sparkler Pro", current_stock=450, legal_limit=500),
        StockItem(sku="MCF-002", product_name="Multi-Color Fountain", current_stock=100, legal_limit=300),
        StockItem(sku="ABD-003", product_name="Atom Bomb Deluxe", current_stock=180, legal_limit=150),
    ]

    alerts = compliance_alerts(documents, stock, TODAY)

    assert [a["title"] for a in alerts] == [
        "Firecracker Dealer License Expiring Soon",
        "Fire Safety Audit Report Expired",
        "Storage Limit Exceeded",
        "Storage Limit Alert",
    ]
    assert [a["type"] for a in alerts] == ["critical", "critical", "critical", "warning"]
    assert alerts[0]["daysRemaining"] == 30
    assert alerts[1]["daysRemaining"] == 0
    assert alerts[1]["action"] == "Renew Certificate"


def test_register_rejects_duplicate_numbers():
    register = LicenceRegister()
    register.seed()
    assert len(register.list()) == 6
    assert len(register.list("certificate")) == 3

    with pytest.raises(ValidationError):
        register.add(licence(date(2026, 1, 1)))
    with pytest.raises(ValidationError):
        register.list("permit")


def test_register_alerts_as_of_a_date():
    register = LicenceRegister()
    register.seed()
    alerts = register.alerts([], as_of=TODAY)
    assert [a["documentId"] for a in alerts] == [
        next(doc.id for doc in register.list() if doc.number == "FDL-2024-001")
    ]
