"""
app/flow/handlers/partner.py

Handles: partner configuration

- WAITING_PARTNER_NAME: name of at least 2 characters
- WAITING_PARTNER_PHONE: phone format check, then upsert the link
"""

from app.flow.states import ConversationState
from app.flow.transition import Transition
from app.services.ledger_service import LedgerGateway
from app.services.session_service import Session
from app.core.logging import get_logger
from utils.constants import (
    ASK_PARTNER_PHONE_MESSAGE,
    INVALID_PARTNER_NAME_MESSAGE,
    INVALID_PARTNER_PHONE_MESSAGE,
    OWN_PHONE_AS_PARTNER_MESSAGE,
    PARTNER_SAVED_MESSAGE,
    MIN_PARTNER_NAME_LENGTH,
    MAX_PARTNER_NAME_LENGTH,
)
from utils.validation_utils import (
    normalize_phone,
    phone_key,
    sanitize_input,
    validate_phone_number,
)
from utils.whatsapp_utils import with_menu

logger = get_logger(__name__)


async def handle_partner_name(session: Session, message: str, ledger: LedgerGateway) -> Transition:
    name = sanitize_input(message, max_length=MAX_PARTNER_NAME_LENGTH)
    if len(name) < MIN_PARTNER_NAME_LENGTH:
        return Transition(session, INVALID_PARTNER_NAME_MESSAGE)

    return Transition(
        session.advance(ConversationState.WAITING_PARTNER_PHONE, partner_name=name),
        ASK_PARTNER_PHONE_MESSAGE.format(name=name, name_upper=name.upper()),
    )


async def handle_partner_phone(session: Session, message: str, ledger: LedgerGateway) -> Transition:
    """
    Validates the partner's number and stores the link.

    The number is stored normalized ('+' and digits) so report lookups
    can compare it exactly against sender numbers.
    """
    partner_name = session.pending.partner_name
    if not partner_name:
        raise ValueError("No pending partner name")

    if not validate_phone_number(message):
        logger.info("Invalid partner phone")
        return Transition(session, INVALID_PARTNER_PHONE_MESSAGE)

    if phone_key(message) == phone_key(session.phone):
        return Transition(session, OWN_PHONE_AS_PARTNER_MESSAGE)

    partner_phone = normalize_phone(message)
    await ledger.link_partner(session.phone, partner_name, partner_phone)

    reply = PARTNER_SAVED_MESSAGE.format(name=partner_name, phone=partner_phone)
    return Transition(session.reset(), with_menu(reply))
