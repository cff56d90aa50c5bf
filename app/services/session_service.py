"""
app/services/session_service.py

Purpose: Session and state management

- One volatile session per phone (never persisted)
- Tracks last interaction time
- Handles reset and idle-session eviction
- Background sweeper for the app lifespan
"""

import asyncio
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Dict, Optional, Tuple

from app.flow.states import ConversationState
from app.core.logging import get_logger, LogContext
from utils.time_utils import is_session_expired, utc_now

logger = get_logger(__name__)


@dataclass(frozen=True)
class PendingEntry:
    """Scratch values collected mid-flow."""
    amount: Optional[int] = None
    partner_name: Optional[str] = None


@dataclass(frozen=True)
class Session:
    """
    Conversation state for a single phone.

    Sessions are values: handlers return a new Session instead of
    mutating the stored one.
    """
    phone: str
    step: ConversationState = ConversationState.MENU
    pending: PendingEntry = field(default_factory=PendingEntry)
    created_at: datetime = field(default_factory=utc_now)
    last_interaction: datetime = field(default_factory=utc_now)

    def advance(self, step: ConversationState, **pending) -> "Session":
        """Moves to `step`, merging any scratch values given."""
        new_pending = replace(self.pending, **pending) if pending else self.pending
        return replace(self, step=step, pending=new_pending)

    def reset(self) -> "Session":
        """Back to MENU with scratch values cleared."""
        return replace(self, step=ConversationState.MENU, pending=PendingEntry())

    def touch(self) -> "Session":
        return replace(self, last_interaction=utc_now())


class SessionStore:
    """
    In-memory session map keyed by phone.

    There is no per-phone locking: the transport is trusted not to
    deliver two messages of the same phone concurrently.
    """

    def __init__(self):
        self._sessions: Dict[str, Session] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, phone: str) -> bool:
        return phone in self._sessions

    def get(self, phone: str) -> Optional[Session]:
        return self._sessions.get(phone)

    def get_or_create(self, phone: str) -> Tuple[Session, bool]:
        """
        Returns the session for `phone`, creating one in MENU if unseen.

        Returns:
            (session, created)
        """
        session = self._sessions.get(phone)
        if session is not None:
            return session, False

        session = Session(phone=phone)
        self._sessions[phone] = session
        with LogContext(phone=phone):
            logger.info("New session created")
        return session, True

    def save(self, session: Session) -> Session:
        """Stores `session` as the current one for its phone."""
        session = session.touch()
        self._sessions[session.phone] = session
        return session

    def reset(self, phone: str, reason: str = "manual") -> Session:
        """
        Resets the phone's session to MENU, creating it if needed.

        Args:
            phone: User phone
            reason: Reason for reset (for logging)
        """
        with LogContext(phone=phone):
            current = self._sessions.get(phone) or Session(phone=phone)
            session = self.save(current.reset())
            logger.info("Session reset", extra={"reason": reason})
            return session

    def evict_idle(self, timeout_minutes: int) -> int:
        """
        Drops sessions idle for longer than `timeout_minutes`.

        Returns:
            Number of sessions evicted
        """
        expired = [
            phone for phone, session in self._sessions.items()
            if is_session_expired(session.last_interaction, timeout_minutes)
        ]
        for phone in expired:
            del self._sessions[phone]

        if expired:
            logger.info(f"Evicted {len(expired)} idle session(s)")
        return len(expired)

    def clear(self) -> None:
        self._sessions.clear()


async def run_session_sweeper(
    store: SessionStore,
    interval_seconds: int,
    timeout_minutes: int
) -> None:
    """
    Periodically evicts idle sessions until cancelled.
    """
    logger.info(
        f"Session sweeper started (every {interval_seconds}s, timeout {timeout_minutes}m)"
    )
    while True:
        await asyncio.sleep(interval_seconds)
        store.evict_idle(timeout_minutes)
