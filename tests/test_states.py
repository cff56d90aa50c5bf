import pytest

from app.flow.states import (
    STATE_METADATA,
    STATE_TRANSITIONS,
    ConversationState,
    get_state_metadata,
    is_valid_transition,
    parse_state,
)


@pytest.mark.parametrize("state", list(ConversationState))
def test_every_state_can_return_to_menu_or_stay(state):
    assert is_valid_transition(state, ConversationState.MENU)
    assert is_valid_transition(state, state)
    assert state in STATE_METADATA


def test_flows_start_only_from_menu():
    assert is_valid_transition(ConversationState.MENU, ConversationState.WAITING_SALARY)
    assert not is_valid_transition(
        ConversationState.WAITING_SALARY,
        ConversationState.WAITING_SHARED_EXPENSE_DESCRIPTION,
    )
    assert not is_valid_transition(
        ConversationState.MENU,
        ConversationState.WAITING_PARTNER_PHONE,
    )


def test_name_leads_to_phone():
    assert ConversationState.WAITING_PARTNER_PHONE in STATE_TRANSITIONS[ConversationState.WAITING_PARTNER_NAME]


def test_persisting_states():
    persisting = {s for s, meta in STATE_METADATA.items() if meta.persists}
    assert persisting == {
        ConversationState.WAITING_SALARY,
        ConversationState.WAITING_SHARED_EXPENSE_DESCRIPTION,
        ConversationState.WAITING_INDIVIDUAL_EXPENSE_DESCRIPTION,
        ConversationState.WAITING_PARTNER_PHONE,
    }
    assert get_state_metadata(ConversationState.WAITING_SALARY).display_name == "Sueldo"


def test_parse_state():
    assert parse_state("waiting_salary") == ConversationState.WAITING_SALARY
    assert parse_state(ConversationState.MENU) == ConversationState.MENU
    assert parse_state("unknown") is None
    assert parse_state(None) is None
