"""Caption unit library: bounded-width text segmentation and noise sanitizing.

WHY: A caption reader shows spoken text one short fragment at a time. Both
the fragments and the text handed to the speech engine need the same
well-defined cleaning rules and the same deterministic splitting rules. This
package provides exactly those two pieces as a small library with no I/O,
so the application layer (alignment, playback sync, rendering) can be
tested against plain strings.

HOW: Two public entry points:
  sanitize(text, mode) — remove emoji, links, and stray symbols, either
      deleting them (display) or blanking links to keep offsets (speech).
  segment_line(line, max_width, measure) — split a line into Cut objects
      using sentence, then clause, then character tiers.
The width oracle is any callable str -> number; visible_width() is the
default, counting wide CJK glyphs as two cells.

RULES:
- All functions are pure; the width oracle is passed in explicitly.
- Cut positions are local to the segmented line.
- Never mutate the constants in presets.py.
- Python 3.9 compatible (no slots=True, no match/case, no X | Y unions).
"""

from .models import Cut, SanitizeMode
from .presets import CLAUSE_MARKS, SENTENCE_MARKS
from .core import (
    WidthOracle,
    sanitize,
    segment_line,
    split_clauses,
    split_hard,
    split_sentences,
    visible_width,
)

__all__ = [
    "Cut",
    "SanitizeMode",
    "WidthOracle",
    "sanitize",
    "segment_line",
    "split_sentences",
    "split_clauses",
    "split_hard",
    "visible_width",
    "SENTENCE_MARKS",
    "CLAUSE_MARKS",
]
