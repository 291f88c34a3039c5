"""
Licence Register
================
In-memory register of licences and certificates.
"""

import copy
import logging
from datetime import date
from typing import Optional

from ..core.errors import ValidationError
from ..core.lead_fsm import utcnow
from ..core.licences import DocumentKind, Licence, compliance_alerts, parse_kind, validate_licence

logger = logging.getLogger(__name__)


SAMPLE_LICENCES = [
    dict(document_type="Shop License", number="DGL-2024-001", issued_by="Explosive License Controller",
         issue_date=date(2023, 4, 15), expiry_date=date(2025, 4, 14)),
    dict(document_type="Firecracker Dealer License", number="FDL-2024-001",
         issued_by="Tamil Nadu Fire Safety Board", issue_date=date(2023, 6, 1), expiry_date=date(2024, 11, 30)),
    dict(document_type="Storage License", number="SL-2024-001", issued_by="District Administration",
         issue_date=date(2024, 1, 10), expiry_date=date(2026, 1, 9)),
    dict(document_type="PESO Approval Certificate", number="PESO-2024-12345",
         issued_by="Petroleum & Explosives Safety Organisation", issue_date=date(2024, 1, 15),
         expiry_date=date(2026, 1, 14), kind=DocumentKind.CERTIFICATE),
    dict(document_type="Green Cracker Certification", number="GCERT-2024-001", issued_by="Ministry of Environment",
         issue_date=date(2024, 3, 1), expiry_date=date(2025, 2, 28), kind=DocumentKind.CERTIFICATE),
    dict(document_type="Fire Safety Audit Report", number="FSA-2024-001", issued_by="Fire Department",
         issue_date=date(2024, 6, 20), expiry_date=date(2025, 6, 19), kind=DocumentKind.CERTIFICATE),
]


def today() -> date:
    return utcnow().date()


class LicenceRegister:

    def __init__(self):
        self._licences: dict[str, Licence] = {}

    def seed(self, rows: list = None):
        for row in rows or SAMPLE_LICENCES:
            self.add(Licence(**row))

    def add(self, licence: Licence) -> Licence:
        validate_licence(licence)
        if any(existing.number == licence.number for existing in self._licences.values()):
            raise ValidationError(f"Document {licence.number} already registered")
        self._licences[licence.id] = copy.deepcopy(licence)
        logger.info("Registered %s %s (expires %s)", licence.kind.value, licence.number, licence.expiry_date)
        return licence

    def get(self, licence_id: str) -> Optional[Licence]:
        licence = self._licences.get(licence_id)
        return copy.deepcopy(licence) if licence else None

    def list(self, kind: str = None) -> list:
        kind = parse_kind(kind) if kind else None
        return [
            copy.deepcopy(licence)
            for licence in self._licences.values()
            if kind is None or licence.kind == kind
        ]

    def alerts(self, stock_items: list, as_of: date = None) -> list:
        return compliance_alerts(self._licences.values(), stock_items, as_of or today())
