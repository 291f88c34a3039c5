"""
Record Stores
=============
Repository interface for leads and orders: add, get, list, update.
No delete - leads and orders are never hard-deleted.

InMemory* keep everything in the process (lost on restart).
See sql_store.py for the SQLAlchemy-backed versions.
"""

import copy
from abc import ABC, abstractmethod
from typing import Optional

from ..core.lead_fsm import Lead
from ..core.order_fsm import Order


class LeadStore(ABC):

    @abstractmethod
    async def add(self, lead: Lead) -> Lead: ...

    @abstractmethod
    async def get(self, lead_id: str) -> Optional[Lead]: ...

    @abstractmethod
    async def list(self) -> list:
        """All leads, in insertion order"""

    @abstractmethod
    async def update(self, lead: Lead) -> Lead: ...


class OrderStore(ABC):

    @abstractmethod
    async def add(self, order: Order) -> Order: ...

    @abstractmethod
    async def get(self, order_id: str) -> Optional[Order]: ...

    @abstractmethod
    async def list(self) -> list: ...

    @abstractmethod
    async def update(self, order: Order) -> Order: ...

    @abstractmethod
    async def count(self) -> int: ...

    async def add_conversion(self, order: Order, lead: Lead, leads: LeadStore) -> Order:
        """
        Store a new order together with the lead it was converted from.
        The lead goes first: if that write fails no order exists, so a retry
        cannot leave two orders behind one lead.
        """
        await leads.update(lead)
        return await self.add(order)


class InMemoryLeadStore(LeadStore):
    """Stores copies, so a caller's object only changes the store through update()"""

    def __init__(self):
        self._leads: dict[str, Lead] = {}

    async def add(self, lead: Lead) -> Lead:
        if lead.id in self._leads:
            raise KeyError(f"Lead {lead.id} already exists")
        self._leads[lead.id] = copy.deepcopy(lead)
        return lead

    async def get(self, lead_id: str) -> Optional[Lead]:
        lead = self._leads.get(lead_id)
        return copy.deepcopy(lead) if lead else None

    async def list(self) -> list:
        return [copy.deepcopy(lead) for lead in self._leads.values()]

    async def update(self, lead: Lead) -> Lead:
        if lead.id not in self._leads:
            raise KeyError(f"Lead {lead.id} not found")
        self._leads[lead.id] = copy.deepcopy(lead)
        return lead


class InMemoryOrderStore(OrderStore):

    def __init__(self):
        self._orders: dict[str, Order] = {}

    async def add(self, order: Order) -> Order:
        if order.id in self._orders:
            raise KeyError(f"Order {order.id} already exists")
        self._orders[order.id] = copy.deepcopy(order)
        return order

    async def get(self, order_id: str) -> Optional[Order]:
        order = self._orders.get(order_id)
        return copy.deepcopy(order) if order else None

    async def list(self) -> list:
        return [copy.deepcopy(order) for order in self._orders.values()]

    async def update(self, order: Order) -> Order:
        if order.id not in self._orders:
            raise KeyError(f"Order {order.id} not found")
        self._orders[order.id] = copy.deepcopy(order)
        return order

    async def count(self) -> int:
        return len(self._orders)
