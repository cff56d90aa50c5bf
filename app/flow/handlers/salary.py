"""
app/flow/handlers/salary.py

Handles: WAITING_SALARY

- Validates the amount
- Records the income as "Sueldo"
- Returns to the menu
"""

from app.flow.transition import Transition
from app.services.ledger_service import LedgerGateway
from app.services.session_service import Session
from app.core.logging import get_logger
from utils.constants import INVALID_SALARY_MESSAGE, SALARY_LABEL, SALARY_SAVED_MESSAGE
from utils.time_utils import format_sheet_date, local_now
from utils.validation_utils import is_valid_amount, parse_amount
from utils.whatsapp_utils import format_number, with_menu

logger = get_logger(__name__)


async def handle_salary_input(session: Session, message: str, ledger: LedgerGateway) -> Transition:
    """
    Records the month's salary.

    Invalid amounts keep the user in WAITING_SALARY. Persistence errors
    propagate to the dispatcher, which resets the session.
    """
    if not is_valid_amount(message):
        logger.info("Invalid salary amount")
        return Transition(session, INVALID_SALARY_MESSAGE)

    amount = parse_amount(message)
    await ledger.record_income(session.phone, amount, SALARY_LABEL)

    reply = SALARY_SAVED_MESSAGE.format(
        amount=format_number(amount),
        date=format_sheet_date(local_now()),
    )
    return Transition(session.reset(), with_menu(reply))
