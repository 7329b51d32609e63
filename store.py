"""In-memory calculator session store.

Each record pairs an immutable :class:`SessionState` with bookkeeping.
Presses are applied through :func:`session.press`; the store only swaps
the stored state for the one the transition returns.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Iterable

import structlog

from config import DEFAULT_CONFIG, CalculatorConfig
from models import _new_id, _utcnow
from session import SessionState, press, run

logger = structlog.get_logger()


class SessionNotFoundError(Exception):
    """Raised when a session lookup fails."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"Session not found: {session_id}")


@dataclass(frozen=True)
class SessionRecord:
    id: str
    state: SessionState
    created_at: datetime
    updated_at: datetime


class SessionStore:
    """In-memory store of calculator sessions keyed by id."""

    def __init__(self, config: CalculatorConfig = DEFAULT_CONFIG) -> None:
        self.config = config
        self._sessions: dict[str, SessionRecord] = {}

    # -- CRUD ----------------------------------------------------------------

    def create(self) -> SessionRecord:
        """Create a session in its initial state."""
        now = _utcnow()
        record = SessionRecord(
            id=_new_id(), state=SessionState(), created_at=now, updated_at=now
        )
        self._sessions[record.id] = record
        logger.debug("session_created", session_id=record.id)
        return record

    def get(self, session_id: str) -> SessionRecord:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise SessionNotFoundError(session_id) from None

    def list(self, *, offset: int = 0, limit: int = 50) -> list[SessionRecord]:
        """List sessions, most recently created first."""
        items = sorted(
            self._sessions.values(), key=lambda r: r.created_at, reverse=True
        )
        return items[offset : offset + limit]

    def delete(self, session_id: str) -> SessionRecord:
        """Delete a session and return the deleted record."""
        record = self.get(session_id)
        del self._sessions[session_id]
        logger.debug("session_deleted", session_id=session_id)
        return record

    def count(self) -> int:
        return len(self._sessions)

    def clear(self) -> None:
        """Remove all sessions (useful for testing)."""
        self._sessions.clear()

    # -- input ---------------------------------------------------------------

    def press(self, session_id: str, action: str) -> SessionRecord:
        """Apply one press to a stored session."""
        record = self.get(session_id)
        return self._save(record, press(record.state, action, self.config))

    def press_many(self, session_id: str, actions: Iterable[str]) -> SessionRecord:
        """Apply presses in order.  Nothing is stored if any press fails."""
        record = self.get(session_id)
        return self._save(record, run(actions, record.state, self.config))

    def _save(self, record: SessionRecord, state: SessionState) -> SessionRecord:
        updated = replace(record, state=state, updated_at=_utcnow())
        self._sessions[record.id] = updated
        logger.debug(
            "session_updated",
            session_id=record.id,
            display=state.display,
            phase=state.phase.value,
        )
        return updated
