"""Core caption unit logic: noise sanitizing, width measuring, and tiered splitting.

WHY: A caption line must stay short enough to fit on screen, and the text a
reader sees must not carry emoji, links, or markup leftovers. This module
holds both halves of that job as pure functions, so the same input always
yields the same units regardless of who calls it.

HOW: The module has three sections:
  1. Text utilities — sanitize() in complete or length-preserving mode,
     visible_width() as the default font-free width oracle.
  2. Tiered splitting — segment_line() tries the whole line, then sentence
     runs, then clause runs, then a greedy character split. A tier is only
     consulted for a piece the previous tier left over budget.
  3. Helpers shared by the tiers.

RULES:
- Every function takes the width oracle explicitly; no global state.
- Cut positions are local to the line passed to segment_line().
- Whitespace-only pieces are dropped; every other character of the line
  ends up in exactly one cut, in order.
- A single character wider than max_width is still emitted on its own.
- Link-like spans (see LINK_PATTERNS) are never cut; an over-budget link is
  emitted whole, like an over-budget character.
"""

import re
import unicodedata
from typing import Callable, List, Optional, Pattern

from .models import Cut, SanitizeMode
from .presets import (
    CLAUSE_MARKS,
    EMOJI_RE,
    KEPT_CATEGORIES,
    LINK_PATTERNS,
    SENTENCE_MARKS,
)

WidthOracle = Callable[[str], float]

# =============================================================================
# Text Utilities
# =============================================================================

WS_RE = re.compile(r"\s+")


def _run_pattern(marks: str) -> Pattern:
    """Compile a gapless run pattern: text up to and including a run of marks."""
    cls = re.escape(marks)
    return re.compile("[^{0}]*[{0}]+|[^{0}]+".format(cls))


SENTENCE_RUN_RE = _run_pattern(SENTENCE_MARKS)
CLAUSE_RUN_RE = _run_pattern(CLAUSE_MARKS)


def collapse_whitespace(s: str) -> str:
    """Replace every run of whitespace with a single space."""
    return WS_RE.sub(" ", s)


def strip_symbols(s: str) -> str:
    """Delete emoji and every character outside the kept general categories."""
    s = EMOJI_RE.sub("", s)
    return "".join(
        ch for ch in s
        if ch.isspace() or unicodedata.category(ch)[0] in KEPT_CATEGORIES
    )


def _blank(match) -> str:
    return " " * len(match.group(0))


LINK_MASK = "\x00"


def _mask(match) -> str:
    return LINK_MASK * len(match.group(0))


def link_mask(text: str) -> str:
    """Return text with every link-like span replaced by LINK_MASK characters.

    Same length as text, so positions found in the mask slice the original.
    The mask character is neither whitespace nor a punctuation mark, so the
    tier patterns never see the dots and colons inside a link.
    """
    for pattern in LINK_PATTERNS:
        text = pattern.sub(_mask, text)
    return text


def sanitize(text: str, mode: SanitizeMode = SanitizeMode.COMPLETE) -> str:
    """Remove decorative noise from text.

    WHY: Caption text must not show emoji, links, or stray symbols, and the
    speech engine must not read them aloud. The spoken text, however, is
    searched for later by position, so deleting a long link outright would
    move everything after it.

    HOW: Both modes drop emoji and characters outside letters, numbers,
    punctuation, separators, and marks. Link-like spans (scheme URLs, www.
    hosts, email addresses, bare domains) are deleted in COMPLETE mode and
    replaced by an equally long run of spaces in PRESERVE_LENGTH mode.

    RULES:
    - PRESERVE_LENGTH collapses whitespace before blanking links, so a
      blanked link survives as one run of spaces of its own length.
    - Only COMPLETE mode collapses the final result and trims it.
    - Output is deterministic for a given input and mode.

    Args:
        text: Raw text, typically one extracted line.
        mode: SanitizeMode.COMPLETE (display) or PRESERVE_LENGTH (spoken).

    Returns:
        The cleaned string.
    """
    if mode is SanitizeMode.PRESERVE_LENGTH:
        text = collapse_whitespace(text)
        for pattern in LINK_PATTERNS:
            text = pattern.sub(_blank, text)
        return strip_symbols(text)

    for pattern in LINK_PATTERNS:
        text = pattern.sub("", text)
    return collapse_whitespace(strip_symbols(text)).strip()


def char_cells(ch: str) -> int:
    """Return how many monospace cells a character occupies (0, 1 or 2)."""
    if unicodedata.combining(ch) or unicodedata.category(ch) in ("Mn", "Me", "Cf"):
        return 0
    if unicodedata.east_asian_width(ch) in ("W", "F"):
        return 2
    return 1


def visible_width(s: str) -> int:
    """Width of a string in cells. Wide CJK glyphs count double.

    Used as the width oracle when the caller does not supply a font metric.
    """
    return sum(char_cells(ch) for ch in s)


# =============================================================================
# Tiered Splitting
# =============================================================================

def segment_line(
    line: str,
    max_width: float,
    measure: Optional[WidthOracle] = None,
) -> List[Cut]:
    """Split one line into caption-sized cuts.

    WHY: A caption shows one fragment at a time. Fragments should break at
    the most natural boundary that still fits: whole line, then sentence,
    then clause, and only as a last resort in the middle of a run of glyphs.

    HOW: If the whole line fits it is returned as one cut. Otherwise the
    line is split into sentence runs; each run that fits is kept and each
    run that does not is split into clause runs; each clause run that still
    does not fit is split greedily character by character.

    RULES:
    - Pure function: same line, budget, and oracle give the same cuts.
    - Cuts are in line order and their positions are local to `line`.
    - Empty or whitespace-only lines give no cuts.
    - Every cut fits max_width except a single character that cannot fit.

    Args:
        line: The text to split (usually one extracted, unsanitized line).
        max_width: Width budget in the oracle's units.
        measure: Width oracle; defaults to visible_width().

    Returns:
        List of Cut objects.
    """
    if measure is None:
        measure = visible_width
    if not line.strip():
        return []
    if measure(line) <= max_width:
        return [Cut(line, 0, len(line))]
    return split_sentences(line, 0, max_width, measure, link_mask(line))


def split_sentences(
    text: str,
    base: int,
    max_width: float,
    measure: WidthOracle,
    mask: Optional[str] = None,
) -> List[Cut]:
    """Sentence tier. Over-budget sentences fall through to split_clauses()."""
    return _split_runs(text, base, SENTENCE_RUN_RE, split_clauses, max_width, measure, mask)


def split_clauses(
    text: str,
    base: int,
    max_width: float,
    measure: WidthOracle,
    mask: Optional[str] = None,
) -> List[Cut]:
    """Clause tier. Over-budget clauses fall through to split_hard()."""
    return _split_runs(text, base, CLAUSE_RUN_RE, split_hard, max_width, measure, mask)


def split_hard(
    text: str,
    base: int,
    max_width: float,
    measure: WidthOracle,
    mask: Optional[str] = None,
) -> List[Cut]:
    """Greedy character split for text with no usable punctuation.

    WHY: Unbroken runs (long CJK passages, identifiers) have nowhere
    natural to break, but must still be cut to fit.

    HOW: Grow the current cut one stop at a time, re-measuring the whole
    cut each step. A stop is any character boundary not inside a masked
    link. When reaching the next stop would exceed the budget, close the
    cut at the last stop that fit and start the next cut there.

    RULES:
    - Each cut reaches at least its first stop, so progress is guaranteed.
    - A link wider than the budget is emitted whole.
    - Whitespace-only cuts are dropped.
    """
    cuts = []  # type: List[Cut]
    start = 0
    n = len(text)
    while start < n:
        end = _next_stop(mask, start + 1, n)
        while end < n:
            following = _next_stop(mask, end + 1, n)
            if measure(text[start:following]) > max_width:
                break
            end = following
        piece = text[start:end]
        if piece.strip():
            cuts.append(Cut(piece, base + start, base + end))
        start = end
    return cuts


# =============================================================================
# Helpers
# =============================================================================

def _next_stop(mask: Optional[str], pos: int, n: int) -> int:
    """First allowed cut position at or after pos (never inside a link)."""
    if mask is None:
        return pos
    while pos < n and mask[pos - 1] == LINK_MASK and mask[pos] == LINK_MASK:
        pos += 1
    return pos


def _split_runs(
    text: str,
    base: int,
    pattern: Pattern,
    next_tier: Callable[..., List[Cut]],
    max_width: float,
    measure: WidthOracle,
    mask: Optional[str],
) -> List[Cut]:
    """Cut text into mark-terminated runs and hand over-budget runs down a tier.

    Runs are found in the mask when one is given, so marks inside links
    are not cut points. The run pattern is gapless, so trailing text
    without a closing mark is returned as a final run and treated like any
    other.
    """
    source = text if mask is None else mask
    cuts = []  # type: List[Cut]
    for match in pattern.finditer(source):
        piece = text[match.start():match.end()]
        if not piece.strip():
            continue
        start = base + match.start()
        if measure(piece) <= max_width:
            cuts.append(Cut(piece, start, start + len(piece)))
        else:
            piece_mask = None if mask is None else source[match.start():match.end()]
            cuts.extend(next_tier(piece, start, max_width, measure, piece_mask))
    return cuts
