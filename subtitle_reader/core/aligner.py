"""Aligner: builds the spoken form and the offset-to-unit index.

WHY: The speech engine reports positions in the spoken form. The caption
shows display units cut from the unsanitized lines. Something has to
record, once per read, which spoken-form characters belong to which unit
so playback can resolve an offset without searching.

HOW: Two passes over the extracted lines.
  1. Each line is sanitized in length-preserving mode to get its spoken
     line; lines whose spoken line is blank are dropped. The spoken form
     is the surviving spoken lines joined by single spaces.
  2. Walking the lines again with a cursor that only moves forward, each
     spoken line is located in the spoken form. Inside that span, each of
     the line's units is located in segmentation order, from a line-local
     cursor, by a whitespace-tolerant search for its sanitized text. Every
     matched position is marked with the unit's index.

RULES:
- Segmentation runs on the raw line, so cutting punctuation survives
- A unit's display text is the complete-mode sanitization of its cut;
  cuts with nothing left to display produce no unit
- A line or unit that cannot be located is logged and left unmapped;
  alignment never raises for it
- Spans never overlap and move strictly forward through the spoken form
- Whitespace between units and between lines stays NO_UNIT
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional, Pattern, Sequence

from caption_units import (
    SanitizeMode,
    WidthOracle,
    sanitize,
    segment_line,
)
from subtitle_reader.core.ir import NO_UNIT, DisplayUnit, ReadPlan

logger = logging.getLogger(__name__)

LINE_SEPARATOR = " "


def align(
    lines: Sequence[str],
    max_unit_width: float,
    measure: Optional[WidthOracle] = None,
) -> ReadPlan:
    """Build the read plan for a sequence of extracted lines.

    Args:
        lines: Plain-text lines in reading order (see core.lines.lines_of).
        max_unit_width: Width budget per display unit, in oracle units.
        measure: Width oracle; defaults to the cell-width oracle.

    Returns:
        ReadPlan with units, spoken form, and an offset index of equal
        length to the spoken form.
    """
    kept_lines: List[str] = []
    spoken_lines: List[str] = []
    for line in lines:
        spoken = sanitize(line, SanitizeMode.PRESERVE_LENGTH)
        if not spoken.strip():
            logger.debug("Skipping line with nothing to speak: %r", line)
            continue
        kept_lines.append(line)
        spoken_lines.append(spoken)

    spoken_form = LINE_SEPARATOR.join(spoken_lines)
    offset_index = [NO_UNIT] * len(spoken_form)
    units: List[DisplayUnit] = []

    cursor = 0
    for line, spoken in zip(kept_lines, spoken_lines):
        line_units = units_for_line(line, max_unit_width, measure)
        first_index = len(units)
        units.extend(line_units)

        line_start = spoken_form.find(spoken, cursor)
        if line_start == -1:
            logger.warning("Alignment miss: line not found in spoken form: %r", line)
            continue
        line_end = line_start + len(spoken)
        _claim_units(spoken_form, offset_index, line_units, first_index, line_start, line_end)
        cursor = line_end

    return ReadPlan(units=units, spoken_form=spoken_form, offset_index=offset_index)


def units_for_line(
    line: str,
    max_unit_width: float,
    measure: Optional[WidthOracle] = None,
) -> List[DisplayUnit]:
    """Segment one raw line and turn its cuts into display units."""
    units: List[DisplayUnit] = []
    for cut in segment_line(line, max_unit_width, measure):
        text = sanitize(cut.text, SanitizeMode.COMPLETE)
        if not text:
            continue
        key = sanitize(cut.text, SanitizeMode.PRESERVE_LENGTH).strip()
        units.append(DisplayUnit(text=text, sanitized_text=key, start=cut.start, end=cut.end))
    return units


def search_pattern(sanitized_text: str) -> Optional[Pattern]:
    """Compile a pattern matching the text with any whitespace run between tokens."""
    tokens = sanitized_text.split()
    if not tokens:
        return None
    return re.compile(r"\s+".join(re.escape(token) for token in tokens))


def _claim_units(
    spoken_form: str,
    offset_index: List[int],
    line_units: List[DisplayUnit],
    first_index: int,
    line_start: int,
    line_end: int,
) -> None:
    cursor = line_start
    for j, unit in enumerate(line_units):
        pattern = search_pattern(unit.sanitized_text)
        match = pattern.search(spoken_form, cursor, line_end) if pattern else None
        if match is None:
            logger.warning(
                "Alignment miss: unit %d not found in its line: %r",
                first_index + j, unit.text,
            )
            continue
        start, end = match.span()
        offset_index[start:end] = [first_index + j] * (end - start)
        cursor = end
