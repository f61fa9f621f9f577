"""Data models for the caption unit engine.

WHY: The segmenter and the sanitizer are consumed by an aligner that lives
outside this package. Both sides need a small, shared vocabulary: a cut of
text with its position inside the line it came from, and the two
sanitizing modes.

HOW: Cut is a frozen dataclass so a segmentation pass can be handed around
without defensive copies. SanitizeMode is a str Enum so the mode can be
read from CLI flags and config files verbatim.

RULES:
- Cut.text is the exact slice line[start:end], never trimmed or cleaned.
- start/end are local to the line that was segmented, half-open.
- Python 3.9 compatible (no slots=True, no X | Y unions).
"""

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class Cut:
    """A caption-sized slice of one line of text.

    Attributes:
        text: The slice itself, unmodified.
        start: Offset of the first character within the source line.
        end: Offset one past the last character within the source line.
    """
    text: str
    start: int
    end: int


class SanitizeMode(str, Enum):
    """How noise is removed from text.

    COMPLETE deletes every match and trims the result (display text).
    PRESERVE_LENGTH blanks link-like matches with spaces of equal length so
    that later substring searches keep their offsets (spoken text).
    """
    COMPLETE = "complete"
    PRESERVE_LENGTH = "preserve_length"
