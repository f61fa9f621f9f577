"""Playback synchronizer: progress events in, "show unit" effects out.

WHY: The speech engine reports character offsets into the spoken form many
times per unit (once per word, sometimes once per sentence too). The caption
should change only when the offset crosses into a different unit, and the
end of reading should be signalled exactly once.

HOW: Two transition functions over an explicit ReadSession:
  on_progress(session, offset, kind) -> ShowUnit | None
  on_end(session) -> ReadingComplete | None
The session's current_unit_index is the only state; it is passed in, never
held here, so independent sessions never share anything.

RULES:
- Only "word" and "sentence" events are considered; other kinds are ignored.
- Offsets resolving to NO_UNIT (seams, unmatched text) change nothing.
- Repeats within the current unit change nothing.
- Any other unit, earlier or later, is an ordinary switch (no rollback logic).
- Sessions that are no longer reading ignore all events.
- on_end() returns ReadingComplete on its first call only.
"""

from __future__ import annotations

import time

from subtitle_reader.core.ir import (
    BOUNDARY_KINDS,
    NO_UNIT,
    ReadingComplete,
    ReadSession,
    SessionState,
    ShowUnit,
)


def on_progress(session: ReadSession, offset: int, kind: str) -> ShowUnit | None:
    """Apply one progress event to a session.

    Args:
        session: The session the event belongs to (already matched by id).
        offset: Character offset into session.plan.spoken_form.
        kind: Event kind reported by the speech engine.

    Returns:
        A ShowUnit effect when the current unit changes, else None.
    """
    if not session.is_reading or kind not in BOUNDARY_KINDS:
        return None

    unit_index = session.plan.unit_at(offset)
    if unit_index == NO_UNIT or unit_index == session.current_unit_index:
        return None

    session.current_unit_index = unit_index
    return ShowUnit(
        session_id=session.id,
        unit_index=unit_index,
        text=session.plan.units[unit_index].text,
    )


def on_end(session: ReadSession) -> ReadingComplete | None:
    """Mark a session as finished. Returns the completion effect once."""
    if not session.is_reading:
        return None
    session.state = SessionState.ENDED
    session.ended_at = time.time()
    return ReadingComplete(session_id=session.id)


def cancel(session: ReadSession) -> bool:
    """Discard a session without a completion effect. True if it was reading."""
    if not session.is_reading:
        return False
    session.state = SessionState.CANCELLED
    session.ended_at = time.time()
    return True
