"""
app/flow/dispatcher.py

Purpose: Central message dispatcher

- Receives normalized messages from the webhook
- Looks up or creates the sender's session
- Applies the global "menu" reset
- Routes to the handler of the current state
- Turns every failure into a reset to MENU plus a reply
"""

from typing import Dict, Optional

from app.schemas.webhook import UnifiedMessage
from app.flow.states import ConversationState, get_state_metadata, is_valid_transition, parse_state
from app.flow.transition import Handler
from app.flow.handlers.menu import handle_menu_option
from app.flow.handlers.salary import handle_salary_input
from app.flow.handlers.expense import (
    handle_shared_expense_amount,
    handle_shared_expense_description,
    handle_individual_expense_amount,
    handle_individual_expense_description,
)
from app.flow.handlers.partner import handle_partner_name, handle_partner_phone
from app.services.ledger_service import LedgerGateway, get_ledger
from app.services.session_service import SessionStore
from app.core.exceptions import ConfigurationError, PersistenceError
from app.core.logging import get_logger, LogContext
from utils.constants import RESET_KEYWORDS, GENERIC_ERROR_MESSAGE, STORAGE_ERROR_MESSAGE
from utils.validation_utils import fold_text, normalize_phone
from utils.whatsapp_utils import build_main_menu, with_menu

logger = get_logger(__name__)


# State to handler mapping
STATE_HANDLERS: Dict[ConversationState, Handler] = {
    ConversationState.MENU: handle_menu_option,
    ConversationState.WAITING_SALARY: handle_salary_input,
    ConversationState.WAITING_SHARED_EXPENSE_AMOUNT: handle_shared_expense_amount,
    ConversationState.WAITING_SHARED_EXPENSE_DESCRIPTION: handle_shared_expense_description,
    ConversationState.WAITING_INDIVIDUAL_EXPENSE_AMOUNT: handle_individual_expense_amount,
    ConversationState.WAITING_INDIVIDUAL_EXPENSE_DESCRIPTION: handle_individual_expense_description,
    ConversationState.WAITING_PARTNER_NAME: handle_partner_name,
    ConversationState.WAITING_PARTNER_PHONE: handle_partner_phone,
}


class ConversationService:
    """
    Owns the session store and drives one message at a time through
    the state machine.
    """

    def __init__(self, ledger: LedgerGateway, store: Optional[SessionStore] = None):
        self.ledger = ledger
        self.store = store if store is not None else SessionStore()

    async def handle(self, sender: str, text: str, display_name: Optional[str] = None) -> str:
        """
        Processes one inbound message and returns the reply text.

        Never raises: any failure resets the session to MENU and the
        reply offers the main menu again.

        Args:
            sender: Sender id, with or without the 'whatsapp:' prefix
            text: Raw message body
            display_name: Profile name reported by the transport

        Returns:
            Reply text
        """
        phone = normalize_phone(sender) or (sender or "").strip()
        message = (text or "").strip()

        session, created = self.store.get_or_create(phone)
        if created:
            await self._register_user(phone, display_name)

        with LogContext(phone=phone, step=str(getattr(session.step, "value", session.step))):
            try:
                if fold_text(message) in RESET_KEYWORDS:
                    self.store.reset(phone, "menu keyword")
                    return build_main_menu()

                state = parse_state(session.step)
                handler = STATE_HANDLERS.get(state) if state else None
                if handler is None:
                    logger.warning(f"⚠️ Unknown state: {session.step!r}, resetting to menu")
                    self.store.reset(phone, "unknown state")
                    return build_main_menu()

                transition = await handler(session, message, self.ledger)

                new_state = parse_state(transition.session.step)
                if new_state is None or not is_valid_transition(state, new_state):
                    raise ValueError(f"Invalid state transition: {state} -> {transition.session.step}")

                self.store.save(transition.session)
                if new_state != state:
                    logger.info(f"🔄 {state.value} -> {new_state.value}")
                    if new_state == ConversationState.MENU and get_state_metadata(state).persists:
                        logger.info(f"✅ {get_state_metadata(state).display_name} saved")
                return transition.reply

            except (PersistenceError, ConfigurationError) as e:
                logger.error(f"❌ Storage error: {e.message}")
                self.store.reset(phone, "storage error")
                return with_menu(STORAGE_ERROR_MESSAGE)

            except Exception as e:
                logger.error(f"❌ Dispatcher error: {e}", exc_info=True)
                self.store.reset(phone, "unexpected error")
                return build_main_menu(GENERIC_ERROR_MESSAGE)

    async def _register_user(self, phone: str, display_name: Optional[str]) -> None:
        """
        Creates the user's profile row on first contact. A failure here
        must not block the conversation, so it is only logged.
        """
        try:
            await self.ledger.ensure_user(phone, display_name or "")
        except (PersistenceError, ConfigurationError) as e:
            logger.warning(f"⚠️ Could not register user {phone}: {e.message}")


_service: Optional[ConversationService] = None


def get_conversation_service() -> ConversationService:
    """Returns the process-wide conversation service."""
    global _service
    if _service is None:
        _service = ConversationService(ledger=get_ledger())
    return _service


def set_conversation_service(service: Optional[ConversationService]) -> None:
    """Replaces the process-wide service (used at startup and in tests)."""
    global _service
    _service = service


async def dispatch_message(message: UnifiedMessage) -> str:
    """
    Main dispatcher for incoming WhatsApp messages.

    Args:
        message: Normalized message object

    Returns:
        Reply text to send back to the user
    """
    logger.info(f"📨 Dispatching message from {message.phone}")
    service = get_conversation_service()
    return await service.handle(message.phone, message.text, message.name)
