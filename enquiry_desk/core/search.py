"""
Filter / Search
===============
Pure functions: nothing here mutates the collections it is given,
and results keep the input order.
"""

from typing import Iterable, Optional

from .lead_states import LEAD_PIPELINE, Stage


def _contains(value: Optional[str], needle: str) -> bool:
    return bool(value) and needle in value.lower()


def filter_leads(
    leads: Iterable,
    search_term: Optional[str] = None,
    status: Optional[str] = None,
    source: Optional[str] = None,
) -> list:
    """
    search_term matches name, phone or city (case-insensitive substring, any field).
    status and source are exact matches. Empty values match everything.
    """
    term = (search_term or "").lower()
    status = getattr(status, "value", status)
    source = getattr(source, "value", source)

    result = []
    for lead in leads:
        if term and not (
            _contains(lead.customer_name, term)
            or _contains(lead.phone, term)
            or _contains(lead.city, term)
        ):
            continue
        if status and lead.status.value != status:
            continue
        if source and lead.lead_source.value != source:
            continue
        result.append(lead)
    return result


def filter_orders(orders: Iterable, search_term: Optional[str] = None, status: Optional[str] = None) -> list:
    term = search_term or ""
    needle = term.lower()
    status = (getattr(status, "value", status) or "all").lower()

    result = []
    for order in orders:
        if status != "all" and order.status.value.lower() != status:
            continue
        if term and not (
            _contains(order.order_number, needle)
            or _contains(order.customer_name, needle)
            or term in (order.phone or "")
        ):
            continue
        result.append(order)
    return result


def group_by_stage(leads: Iterable) -> dict:
    """Kanban columns: every stage, pipeline order first, Rejected last"""
    board = {stage: [] for stage in [*LEAD_PIPELINE, Stage.REJECTED]}
    for lead in leads:
        board[lead.status].append(lead)
    return board
