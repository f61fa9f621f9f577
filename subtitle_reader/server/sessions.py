"""In-memory read session store with TTL cleanup.

WHY: Over HTTP the speech engine lives in the client. Progress and end
reports arrive as separate requests, possibly concurrently, and each has
to be applied to the right session's cursor exactly as the local reader
would apply it. Sessions also have to go away once nobody reads them.

HOW: SessionStore keeps SessionEntry objects (a ReadSession plus the
precomputed caption layout of each unit) in a dict keyed by session id.
Every synchronizer transition runs under the store lock, so two progress
reports for the same session cannot interleave. TTL cleanup removes
sessions that stopped reading more than ttl_seconds ago.

RULES:
- All store access is protected by threading.Lock
- get_session() returns None for unknown ids (no exceptions)
- record_progress()/record_end() raise SessionNotFoundError for unknown ids
- record_progress() raises SessionEndedError once a session stopped reading
- record_end() returns the completion effect on the first call only
- Capacity is enforced at creation (ValueError when full)
- Default TTL is 1 hour (3600 seconds), measured from ended_at
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from dataclasses import dataclass
from typing import Dict, List, Optional

from subtitle_reader.core import synchronizer
from subtitle_reader.core.ir import (
    CaptionLayout,
    ReadingComplete,
    ReadPlan,
    ReadSession,
    ShowUnit,
)

logger = logging.getLogger(__name__)

# Default time-to-live for sessions that stopped reading (seconds)
DEFAULT_TTL_SECONDS = 3600


class SessionNotFoundError(LookupError):
    """No session with the given id."""


class SessionEndedError(RuntimeError):
    """The session is no longer reading."""


@dataclass
class SessionEntry:
    """A session and the caption layout of each of its units."""

    session: ReadSession
    layouts: List[CaptionLayout]


class SessionStore:
    """Thread-safe in-memory store for read sessions."""

    def __init__(
        self,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        max_sessions: int = 100,
    ) -> None:
        self._entries: Dict[str, SessionEntry] = {}
        self._lock = threading.Lock()
        self._ttl_seconds = ttl_seconds
        self.max_sessions = max_sessions

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def create_session(self, plan: ReadPlan, layouts: List[CaptionLayout]) -> SessionEntry:
        """Start a new reading session for a plan.

        Raises:
            ValueError: The store already holds max_sessions sessions.
        """
        with self._lock:
            if len(self._entries) >= self.max_sessions:
                raise ValueError(
                    "Maximum number of sessions ({}) reached".format(self.max_sessions)
                )
            session = ReadSession(id=uuid.uuid4().hex, plan=plan)
            entry = SessionEntry(session=session, layouts=list(layouts))
            self._entries[session.id] = entry

        logger.info("Created read session %s (%d units)", session.id, len(plan.units))
        return entry

    def get_session(self, session_id: str) -> Optional[SessionEntry]:
        """Return the live entry for session_id, or None."""
        with self._lock:
            return self._entries.get(session_id)

    def record_progress(self, session_id: str, offset: int, kind: str) -> Optional[ShowUnit]:
        """Apply a progress event to a session.

        Returns:
            The ShowUnit effect, or None if the caption should not change.
        """
        with self._lock:
            session = self._require(session_id).session
            if not session.is_reading:
                raise SessionEndedError(
                    "Session {} is {}".format(session_id, session.state.value)
                )
            return synchronizer.on_progress(session, offset, kind)

    def record_end(self, session_id: str) -> Optional[ReadingComplete]:
        """Mark a session's speech as finished. Effect on the first call only."""
        with self._lock:
            session = self._require(session_id).session
            effect = synchronizer.on_end(session)
        if effect is not None:
            logger.info("Read session %s complete", session_id)
        return effect

    def cancel_session(self, session_id: str) -> bool:
        """Cancel and remove a session. Returns False if it did not exist."""
        with self._lock:
            entry = self._entries.pop(session_id, None)
            if entry is not None:
                synchronizer.cancel(entry.session)

        if entry is None:
            return False
        logger.info("Cancelled read session %s", session_id)
        return True

    def cleanup_expired(self) -> int:
        """Remove sessions that stopped reading more than ttl_seconds ago.

        Returns the number of removed sessions.
        """
        now = time.time()
        expired: List[ReadSession] = []

        with self._lock:
            for session_id, entry in list(self._entries.items()):
                session = entry.session
                if session.is_reading or session.ended_at is None:
                    continue
                if now - session.ended_at > self._ttl_seconds:
                    expired.append(self._entries.pop(session_id).session)

        for session in expired:
            logger.info("Expired read session %s (ended %.0fs ago)", session.id, now - session.ended_at)
        return len(expired)

    def _require(self, session_id: str) -> SessionEntry:
        """Entry lookup that raises. Lock must be held."""
        entry = self._entries.get(session_id)
        if entry is None:
            raise SessionNotFoundError("Session not found: {}".format(session_id))
        return entry
