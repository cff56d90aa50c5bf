"""
app/flow/handlers/expense.py

Handles: shared and individual expense flows

- WAITING_*_EXPENSE_AMOUNT: validate amount, keep it as pending
- WAITING_*_EXPENSE_DESCRIPTION: save the expense with the pending amount
- Both flows are identical except for sharing type and texts
"""

from dataclasses import dataclass

from app.core.config import settings
from app.flow.states import ConversationState
from app.flow.transition import Transition
from app.models.ledger import SharingType
from app.services.ledger_service import LedgerGateway
from app.services.session_service import Session
from app.core.logging import get_logger
from utils.constants import (
    ASK_SHARED_DESCRIPTION_MESSAGE,
    ASK_INDIVIDUAL_DESCRIPTION_MESSAGE,
    INVALID_SHARED_AMOUNT_MESSAGE,
    INVALID_INDIVIDUAL_AMOUNT_MESSAGE,
    EMPTY_DESCRIPTION_MESSAGE,
    SHARED_EXPENSE_SAVED_MESSAGE,
    INDIVIDUAL_EXPENSE_SAVED_MESSAGE,
    MAX_DESCRIPTION_LENGTH,
)
from utils.time_utils import format_sheet_date, local_now
from utils.validation_utils import is_valid_amount, parse_amount, sanitize_input
from utils.whatsapp_utils import format_number, with_menu

logger = get_logger(__name__)


@dataclass(frozen=True)
class ExpenseFlow:
    sharing_type: SharingType
    description_state: ConversationState
    invalid_amount_message: str
    ask_description_message: str
    saved_message: str


SHARED_FLOW = ExpenseFlow(
    sharing_type=SharingType.SHARED,
    description_state=ConversationState.WAITING_SHARED_EXPENSE_DESCRIPTION,
    invalid_amount_message=INVALID_SHARED_AMOUNT_MESSAGE,
    ask_description_message=ASK_SHARED_DESCRIPTION_MESSAGE,
    saved_message=SHARED_EXPENSE_SAVED_MESSAGE,
)

INDIVIDUAL_FLOW = ExpenseFlow(
    sharing_type=SharingType.INDIVIDUAL,
    description_state=ConversationState.WAITING_INDIVIDUAL_EXPENSE_DESCRIPTION,
    invalid_amount_message=INVALID_INDIVIDUAL_AMOUNT_MESSAGE,
    ask_description_message=ASK_INDIVIDUAL_DESCRIPTION_MESSAGE,
    saved_message=INDIVIDUAL_EXPENSE_SAVED_MESSAGE,
)


def _amount_step(flow: ExpenseFlow, session: Session, message: str) -> Transition:
    if not is_valid_amount(message):
        logger.info(f"Invalid {flow.sharing_type.value} expense amount")
        return Transition(session, flow.invalid_amount_message)

    amount = parse_amount(message)
    return Transition(
        session.advance(flow.description_state, amount=amount),
        flow.ask_description_message.format(amount=format_number(amount)),
    )


async def _description_step(
    flow: ExpenseFlow,
    session: Session,
    message: str,
    ledger: LedgerGateway
) -> Transition:
    amount = session.pending.amount
    if amount is None:
        # Amount lost (e.g. evicted session): treat as corrupt
        raise ValueError("No pending amount for expense description")

    description = sanitize_input(message, max_length=MAX_DESCRIPTION_LENGTH)
    if not description:
        return Transition(session, EMPTY_DESCRIPTION_MESSAGE)

    percentage = settings.DEFAULT_SHARE_PERCENTAGE if flow.sharing_type == SharingType.SHARED else 100
    await ledger.record_expense(
        session.phone,
        amount,
        description,
        flow.sharing_type,
        percentage=percentage,
    )

    reply = flow.saved_message.format(
        amount=format_number(amount),
        description=description,
        percentage=percentage,
        date=format_sheet_date(local_now()),
    )
    return Transition(session.reset(), with_menu(reply))


async def handle_shared_expense_amount(session: Session, message: str, ledger: LedgerGateway) -> Transition:
    return _amount_step(SHARED_FLOW, session, message)


async def handle_shared_expense_description(session: Session, message: str, ledger: LedgerGateway) -> Transition:
    return await _description_step(SHARED_FLOW, session, message, ledger)


async def handle_individual_expense_amount(session: Session, message: str, ledger: LedgerGateway) -> Transition:
    return _amount_step(INDIVIDUAL_FLOW, session, message)


async def handle_individual_expense_description(session: Session, message: str, ledger: LedgerGateway) -> Transition:
    return await _description_step(INDIVIDUAL_FLOW, session, message, ledger)
