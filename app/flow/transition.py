"""
app/flow/transition.py

Purpose: Handler result type

Every handler returns a Transition: the session to store next and the
reply text for the user. Only the dispatcher writes sessions back.
"""

from typing import Awaitable, Callable, NamedTuple

from app.services.ledger_service import LedgerGateway
from app.services.session_service import Session


class Transition(NamedTuple):
    session: Session
    reply: str


Handler = Callable[[Session, str, LedgerGateway], Awaitable[Transition]]
