"""
app/flow/states.py

Purpose: Defines all conversation states

- Enum for each step in the flow (menu, waiting_salary, ...)
- Single source of truth for flow stages
- State transition validation
- Metadata for each state (display name, whether it writes to the ledger)
"""

from enum import Enum
from typing import Dict, List, Optional
from dataclasses import dataclass


class ConversationState(str, Enum):
    """
    Defines all possible states of a user's conversation.
    MENU is the idle state every flow returns to.
    """

    MENU = "menu"

    # Salary flow
    WAITING_SALARY = "waiting_salary"

    # Shared expense flow
    WAITING_SHARED_EXPENSE_AMOUNT = "waiting_shared_expense_amount"
    WAITING_SHARED_EXPENSE_DESCRIPTION = "waiting_shared_expense_description"

    # Individual expense flow
    WAITING_INDIVIDUAL_EXPENSE_AMOUNT = "waiting_individual_expense_amount"
    WAITING_INDIVIDUAL_EXPENSE_DESCRIPTION = "waiting_individual_expense_description"

    # Partner flow
    WAITING_PARTNER_NAME = "waiting_partner_name"
    WAITING_PARTNER_PHONE = "waiting_partner_phone"


@dataclass(frozen=True)
class StateMetadata:
    """
    Metadata associated with each conversation state.
    """
    name: ConversationState
    display_name: str
    persists: bool = False  # Whether valid input triggers a ledger write


STATE_METADATA: Dict[ConversationState, StateMetadata] = {
    ConversationState.MENU: StateMetadata(
        name=ConversationState.MENU,
        display_name="Menú"
    ),
    ConversationState.WAITING_SALARY: StateMetadata(
        name=ConversationState.WAITING_SALARY,
        display_name="Sueldo",
        persists=True
    ),
    ConversationState.WAITING_SHARED_EXPENSE_AMOUNT: StateMetadata(
        name=ConversationState.WAITING_SHARED_EXPENSE_AMOUNT,
        display_name="Monto compartido"
    ),
    ConversationState.WAITING_SHARED_EXPENSE_DESCRIPTION: StateMetadata(
        name=ConversationState.WAITING_SHARED_EXPENSE_DESCRIPTION,
        display_name="Descripción compartida",
        persists=True
    ),
    ConversationState.WAITING_INDIVIDUAL_EXPENSE_AMOUNT: StateMetadata(
        name=ConversationState.WAITING_INDIVIDUAL_EXPENSE_AMOUNT,
        display_name="Monto individual"
    ),
    ConversationState.WAITING_INDIVIDUAL_EXPENSE_DESCRIPTION: StateMetadata(
        name=ConversationState.WAITING_INDIVIDUAL_EXPENSE_DESCRIPTION,
        display_name="Descripción individual",
        persists=True
    ),
    ConversationState.WAITING_PARTNER_NAME: StateMetadata(
        name=ConversationState.WAITING_PARTNER_NAME,
        display_name="Nombre de pareja"
    ),
    ConversationState.WAITING_PARTNER_PHONE: StateMetadata(
        name=ConversationState.WAITING_PARTNER_PHONE,
        display_name="Teléfono de pareja",
        persists=True
    ),
}


# Valid state transitions. Every state may stay put (validation error)
# or fall back to MENU (reset, completion, failure).
STATE_TRANSITIONS: Dict[ConversationState, List[ConversationState]] = {
    ConversationState.MENU: [
        ConversationState.MENU,
        ConversationState.WAITING_SALARY,
        ConversationState.WAITING_SHARED_EXPENSE_AMOUNT,
        ConversationState.WAITING_INDIVIDUAL_EXPENSE_AMOUNT,
        ConversationState.WAITING_PARTNER_NAME,
    ],
    ConversationState.WAITING_SALARY: [
        ConversationState.WAITING_SALARY,
        ConversationState.MENU,
    ],
    ConversationState.WAITING_SHARED_EXPENSE_AMOUNT: [
        ConversationState.WAITING_SHARED_EXPENSE_AMOUNT,
        ConversationState.WAITING_SHARED_EXPENSE_DESCRIPTION,
        ConversationState.MENU,
    ],
    ConversationState.WAITING_SHARED_EXPENSE_DESCRIPTION: [
        ConversationState.WAITING_SHARED_EXPENSE_DESCRIPTION,
        ConversationState.MENU,
    ],
    ConversationState.WAITING_INDIVIDUAL_EXPENSE_AMOUNT: [
        ConversationState.WAITING_INDIVIDUAL_EXPENSE_AMOUNT,
        ConversationState.WAITING_INDIVIDUAL_EXPENSE_DESCRIPTION,
        ConversationState.MENU,
    ],
    ConversationState.WAITING_INDIVIDUAL_EXPENSE_DESCRIPTION: [
        ConversationState.WAITING_INDIVIDUAL_EXPENSE_DESCRIPTION,
        ConversationState.MENU,
    ],
    ConversationState.WAITING_PARTNER_NAME: [
        ConversationState.WAITING_PARTNER_NAME,
        ConversationState.WAITING_PARTNER_PHONE,
        ConversationState.MENU,
    ],
    ConversationState.WAITING_PARTNER_PHONE: [
        ConversationState.WAITING_PARTNER_PHONE,
        ConversationState.MENU,
    ],
}


def is_valid_transition(from_state: ConversationState, to_state: ConversationState) -> bool:
    """
    Checks if a state transition is valid.

    Args:
        from_state: Current state
        to_state: Target state

    Returns:
        True if transition is allowed, False otherwise
    """
    allowed_transitions = STATE_TRANSITIONS.get(from_state, [])
    return to_state in allowed_transitions


def get_state_metadata(state: ConversationState) -> StateMetadata:
    """
    Retrieves metadata for a given state.
    """
    return STATE_METADATA.get(state, StateMetadata(
        name=state,
        display_name=state.value
    ))


def parse_state(value: Optional[str]) -> Optional[ConversationState]:
    """
    Converts a stored step value back to the enum.

    Returns:
        The state, or None when the value is not a known step
    """
    if isinstance(value, ConversationState):
        return value
    try:
        return ConversationState(value)
    except ValueError:
        return None
