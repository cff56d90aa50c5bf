"""
app/flow/handlers/menu.py

Handles: MENU – idle state

- Routes option codes 1-6 to their flows
- Renders the monthly expense report and summary (stay in MENU)
- Accepts quick expense lines ("15000 almuerzo comida")
- Re-shows the menu on anything else
"""

from app.flow.states import ConversationState
from app.flow.transition import Transition
from app.models.ledger import SharingType
from app.services.ledger_service import LedgerGateway
from app.services.session_service import Session
from app.core.logging import get_logger
from utils.constants import (
    GREETING_KEYWORDS,
    MENU_OPTION_SALARY,
    MENU_OPTION_SHARED_EXPENSE,
    MENU_OPTION_INDIVIDUAL_EXPENSE,
    MENU_OPTION_EXPENSES_REPORT,
    MENU_OPTION_PARTNER,
    MENU_OPTION_MONTHLY_SUMMARY,
    ASK_SALARY_MESSAGE,
    ASK_SHARED_AMOUNT_MESSAGE,
    ASK_INDIVIDUAL_AMOUNT_MESSAGE,
    ASK_PARTNER_NAME_MESSAGE,
    INVALID_OPTION_MESSAGE,
    EXPENSE_CATEGORIES,
    QUICK_EXPENSE_SAVED_MESSAGE,
    QUICK_ENTRY_FORMAT_ERROR,
    QUICK_ENTRY_AMOUNT_ERROR,
    QUICK_ENTRY_DESCRIPTION_ERROR,
    QUICK_ENTRY_CATEGORY_ERROR,
)
from utils.time_utils import format_sheet_date, local_now
from utils.validation_utils import (
    QuickEntryError,
    fold_text,
    looks_like_quick_entry,
    parse_quick_entry,
)
from utils.whatsapp_utils import (
    build_expenses_report,
    build_main_menu,
    build_monthly_summary,
    format_number,
    with_menu,
)

logger = get_logger(__name__)


# Options that start a multi-step flow
FLOW_STARTS = {
    MENU_OPTION_SALARY: (ConversationState.WAITING_SALARY, ASK_SALARY_MESSAGE),
    MENU_OPTION_SHARED_EXPENSE: (
        ConversationState.WAITING_SHARED_EXPENSE_AMOUNT,
        ASK_SHARED_AMOUNT_MESSAGE,
    ),
    MENU_OPTION_INDIVIDUAL_EXPENSE: (
        ConversationState.WAITING_INDIVIDUAL_EXPENSE_AMOUNT,
        ASK_INDIVIDUAL_AMOUNT_MESSAGE,
    ),
    MENU_OPTION_PARTNER: (ConversationState.WAITING_PARTNER_NAME, ASK_PARTNER_NAME_MESSAGE),
}

QUICK_ENTRY_ERRORS = {
    "format": QUICK_ENTRY_FORMAT_ERROR,
    "amount": QUICK_ENTRY_AMOUNT_ERROR,
    "description": QUICK_ENTRY_DESCRIPTION_ERROR,
    "category": QUICK_ENTRY_CATEGORY_ERROR.format(categories=", ".join(EXPENSE_CATEGORIES)),
}


async def handle_menu_option(session: Session, message: str, ledger: LedgerGateway) -> Transition:
    """
    Handles a message received while the user is at the main menu.

    Args:
        session: Current session (step MENU)
        message: Trimmed user message
        ledger: Persistence gateway

    Returns:
        Transition to the chosen flow, or back to MENU with a reply
    """
    option = fold_text(message)

    if option in FLOW_STARTS:
        next_state, prompt = FLOW_STARTS[option]
        logger.info(f"Menu option {option} -> {next_state.value}")
        return Transition(session.advance(next_state), prompt)

    if option == MENU_OPTION_EXPENSES_REPORT:
        expenses = await ledger.fetch_monthly_expenses(session.phone)
        return Transition(session.reset(), with_menu(build_expenses_report(expenses)))

    if option == MENU_OPTION_MONTHLY_SUMMARY:
        expenses = await ledger.fetch_monthly_expenses(session.phone)
        incomes = await ledger.fetch_monthly_incomes(session.phone)
        partner = await ledger.fetch_partner_link(session.phone)
        summary = build_monthly_summary(session.phone, expenses, incomes, partner)
        return Transition(session.reset(), with_menu(summary))

    if option in GREETING_KEYWORDS:
        return Transition(session.reset(), build_main_menu())

    if looks_like_quick_entry(message):
        return await handle_quick_expense(session, message, ledger)

    logger.info(f"Invalid menu option: {message[:20]!r}")
    return Transition(session.reset(), build_main_menu(INVALID_OPTION_MESSAGE))


async def handle_quick_expense(session: Session, message: str, ledger: LedgerGateway) -> Transition:
    """
    Saves "<amount> <description> <category>" as an individual expense in one message.
    """
    try:
        entry = parse_quick_entry(message, EXPENSE_CATEGORIES)
    except QuickEntryError as e:
        logger.info(f"Quick entry rejected ({e.kind})")
        return Transition(session.reset(), QUICK_ENTRY_ERRORS[e.kind])

    await ledger.record_expense(
        session.phone,
        entry.amount,
        entry.description,
        SharingType.INDIVIDUAL,
        category=entry.category,
    )

    reply = QUICK_EXPENSE_SAVED_MESSAGE.format(
        amount=format_number(entry.amount),
        description=entry.description,
        category=entry.category,
        date=format_sheet_date(local_now()),
    )
    return Transition(session.reset(), with_menu(reply))
