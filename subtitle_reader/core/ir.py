"""Intermediate representation for read plans, sessions, and effects.

WHY: Three views of the same text meet during a read: the display units a
caption shows, the spoken form a speech engine reads, and the stream of
character offsets the engine reports back. The aligner, the synchronizer,
the exporters, and the HTTP API all need one shared, well-typed form of
those views so none of them depends on another's internals.

HOW: Dataclasses in three groups:
  DisplayUnit / ReadPlan    — output of alignment, immutable per read
  ReadSession / SessionState — the cursor state threaded through the
                               synchronizer, one per read
  ShowUnit / ReadingComplete / CaptionLayout — effects handed to renderers

RULES:
- ReadPlan.offset_index has exactly one cell per spoken_form character.
- A cell holds a unit index or NO_UNIT (-1), never anything else.
- DisplayUnit.start/end are local to the extracted line, informational only.
- A ReadPlan is never mutated after align() returns it.
- ReadSession is mutable, but only the synchronizer writes to it.
"""

from __future__ import annotations

import enum
import time
from dataclasses import dataclass, field

NO_UNIT = -1
"""Offset-index sentinel: no display unit covers this spoken-form position."""

BOUNDARY_KINDS = frozenset({"word", "sentence"})
"""Progress event kinds that mark a natural reading boundary."""


@dataclass(frozen=True)
class DisplayUnit:
    """One caption-sized fragment.

    RULES:
    - text: what the caption shows (noise removed, wording intact)
    - sanitized_text: the search key used to locate the unit in the
      spoken form (links blanked, not deleted)
    - start / end: half-open range within the source line
    """

    text: str
    sanitized_text: str
    start: int
    end: int


@dataclass(frozen=True)
class ReadPlan:
    """Display units, spoken form, and the offset index that joins them.

    WHY: The speech engine only knows the spoken form. Resolving one of its
    offsets to "the unit being read" must be a constant-time lookup.

    HOW: offset_index[i] is the index of the unit covering spoken_form[i],
    or NO_UNIT. Built once by core.aligner.align().
    """

    units: list[DisplayUnit]
    spoken_form: str
    offset_index: list[int]

    def unit_at(self, offset: int) -> int:
        """Resolve a spoken-form offset to a unit index, or NO_UNIT."""
        if 0 <= offset < len(self.offset_index):
            return self.offset_index[offset]
        return NO_UNIT

    def span_of(self, unit_index: int) -> tuple[int, int] | None:
        """Half-open spoken-form span mapped to a unit, or None if unmapped."""
        try:
            first = self.offset_index.index(unit_index)
        except ValueError:
            return None
        last = first
        while last + 1 < len(self.offset_index) and self.offset_index[last + 1] == unit_index:
            last += 1
        return first, last + 1

    @property
    def mapped_count(self) -> int:
        """How many units received at least one offset-index cell."""
        return len({i for i in self.offset_index if i != NO_UNIT})


class SessionState(str, enum.Enum):
    """Lifecycle of a read session.

    RULES:
    - reading: spoken form submitted, progress events are applied
    - ended: speech finished, "reading complete" already emitted
    - cancelled: session discarded by stop() or by a newer read
    """

    READING = "reading"
    ENDED = "ended"
    CANCELLED = "cancelled"


@dataclass
class ReadSession:
    """One read: a plan plus the synchronizer's cursor.

    RULES:
    - id: hex UUID, used to tag progress events from the speech engine
    - current_unit_index: None until the first unit is shown
    - ended_at: set when the session leaves the reading state
    """

    id: str
    plan: ReadPlan
    current_unit_index: int | None = None
    state: SessionState = SessionState.READING
    created_at: float = field(default_factory=time.time)
    ended_at: float | None = None

    @property
    def is_reading(self) -> bool:
        return self.state == SessionState.READING


@dataclass(frozen=True)
class ShowUnit:
    """Effect: the caption should now show this unit."""

    session_id: str
    unit_index: int
    text: str


@dataclass(frozen=True)
class ReadingComplete:
    """Effect: the read has finished. Emitted once per session."""

    session_id: str


class SizeClass(str, enum.Enum):
    """Caption height class derived from the measured text width."""

    SINGLE_LINE = "single-line"
    MULTI_LINE = "multi-line"


@dataclass(frozen=True)
class CaptionLayout:
    """Desired caption geometry for a piece of text.

    width/height are only acted on by a window controller in standalone
    mode; embedded renderers use size_class alone.
    """

    size_class: SizeClass
    width: float
    height: float
