"""
POS Counter
===========
Bills walk-in customers and keeps the issued bills.
"""

import asyncio
import copy
import logging
from typing import Optional

from ..core.pos import Bill, bill_totals, build_cart, checkout

logger = logging.getLogger(__name__)


class PosCounter:

    def __init__(self):
        self._bills: dict[str, Bill] = {}
        self._invoice_numbers = asyncio.Lock()

    def quote(self, raw_items: list):
        """Cart and totals without issuing a bill"""
        items = build_cart(raw_items)
        return items, bill_totals(items)

    async def checkout(
        self,
        raw_items: list,
        customer_name: Optional[str],
        payment_method: str = "cash",
        customer_phone: Optional[str] = None,
    ) -> Bill:
        items = build_cart(raw_items)
        async with self._invoice_numbers:
            number = f"INV-{len(self._bills) + 1:06d}"
            bill = checkout(items, customer_name, number, payment_method, customer_phone)
            self._bills[bill.id] = bill

        logger.info("Bill %s: %s items, total %s", bill.invoice_number, len(bill.items), bill.totals.total_amount)
        return copy.deepcopy(bill)

    def list_bills(self) -> list:
        return [copy.deepcopy(bill) for bill in self._bills.values()]

    def get_bill(self, bill_id: str) -> Optional[Bill]:
        bill = self._bills.get(bill_id)
        return copy.deepcopy(bill) if bill else None
