"""Lead conversion report"""

from collections import Counter
from typing import Iterable

from .lead_states import LEAD_PIPELINE, LeadSource, Stage


def conversion_summary(leads: Iterable) -> dict:
    leads = list(leads)
    by_stage = Counter(lead.status for lead in leads)
    by_source = Counter(lead.lead_source for lead in leads)

    total = len(leads)
    converted = by_stage[Stage.CONVERTED_TO_ORDER]
    rate = round(converted / total * 100, 1) if total else 0.0

    return {
        "totalLeads": total,
        "convertedLeads": converted,
        "conversionRate": rate,
        "byStage": [
            {"stage": stage.value, "count": by_stage[stage]}
            for stage in [*LEAD_PIPELINE, Stage.REJECTED]
        ],
        "bySource": [
            {
                "source": source.value,
                "leads": by_source[source],
                "percentage": round(by_source[source] / total * 100) if total else 0,
            }
            for source in LeadSource
        ],
    }
