"""Adapters for the host-bound collaborators of a read.

WHY: The read orchestration talks to a document renderer, a speech
engine, a width oracle, and a caption renderer through small interfaces.
This package holds the concrete implementations that touch real
libraries (markdown, pyttsx3, tkinter.font) so the core never imports them.

HOW: base.py defines the interfaces; one module per adapter implements
them. pyttsx3 is imported only by speech.py, so importing this package
does not require an audio stack.

RULES:
- Every adapter is constructible without side effects until first use
- Width oracles are plain callables: oracle(text) -> pixels
"""

from subtitle_reader.adapters.base import (
    COMPLETE,
    LOADING,
    CaptionRenderer,
    DocumentRenderer,
    SpeechEngine,
    SpeechEngineError,
    Voice,
)
from subtitle_reader.adapters.console import ConsoleCaptionRenderer
from subtitle_reader.adapters.markdown_renderer import MarkdownRenderer
from subtitle_reader.adapters.width import CellWidth, TkFontWidth

__all__ = [
    "COMPLETE",
    "LOADING",
    "CaptionRenderer",
    "CellWidth",
    "ConsoleCaptionRenderer",
    "DocumentRenderer",
    "MarkdownRenderer",
    "SpeechEngine",
    "SpeechEngineError",
    "TkFontWidth",
    "Voice",
]
