import pytest

from enquiry_desk.core import lead_fsm
from enquiry_desk.core.errors import InvalidStateError, ValidationError
from enquiry_desk.core.lead_states import LEAD_PIPELINE, LeadEvent, Stage


def test_new_lead_starts_at_new_lead(make_lead):
    lead = make_lead()
    assert lead.status == Stage.NEW_LEAD
    assert lead.updated_at == lead.created_at
    assert len(lead.id) == lead_fsm.LEAD_ID_LENGTH


def test_advance_walks_the_pipeline_in_order(make_lead):
    lead = make_lead()
    seen = [lead.status]
    while not lead.is_terminal:
        lead_fsm.advance(lead)
        seen.append(lead.status)
    assert seen == LEAD_PIPELINE


def test_advance_from_confirmed_converts(make_lead):
    lead = make_lead(status=Stage.CONFIRMED)
    lead_fsm.advance(lead)
    assert lead.status == Stage.CONVERTED_TO_ORDER


@pytest.mark.parametrize("terminal", [Stage.CONVERTED_TO_ORDER, Stage.REJECTED])
def test_advance_refuses_terminal_stages(make_lead, terminal):
    lead = make_lead(status=terminal)
    before = lead.updated_at

    with pytest.raises(InvalidStateError):
        lead_fsm.advance(lead)

    assert lead.status == terminal
    assert lead.updated_at == before
    assert lead.history == []


def test_reject_from_any_open_stage(make_lead):
    for stage in LEAD_PIPELINE[:-1]:
        lead = make_lead(status=stage)
        lead_fsm.reject(lead, "price too high")
        assert lead.status == Stage.REJECTED
        assert lead.history[-1]["payload"] == {"reason": "price too high"}


def test_reject_twice_fails(make_lead):
    lead = make_lead()
    lead_fsm.reject(lead)
    with pytest.raises(InvalidStateError):
        lead_fsm.reject(lead)


def test_set_status_allows_backward_and_out_of_terminal(make_lead):
    lead = make_lead(status=Stage.NEGOTIATION)
    lead_fsm.set_status(lead, "Contacted")
    assert lead.status == Stage.CONTACTED

    lead = make_lead(status=Stage.REJECTED)
    lead_fsm.set_status(lead, Stage.NEW_LEAD)
    assert lead.status == Stage.NEW_LEAD
    assert lead.history[-1]["event"] == LeadEvent.STATUS_OVERRIDDEN.value


def test_set_status_rejects_unknown_stage(make_lead):
    lead = make_lead()
    with pytest.raises(ValidationError):
        lead_fsm.set_status(lead, "Shipped")
    assert lead.status == Stage.NEW_LEAD


def test_transitions_refresh_updated_at_and_record_history(make_lead):
    lead = make_lead()
    created = lead.updated_at
    lead_fsm.advance(lead)

    assert lead.updated_at >= created
    entry = lead.history[-1]
    assert entry["from"] == "New Lead"
    assert entry["to"] == "Contacted"
    assert entry["event"] == "STAGE_ADVANCED"
