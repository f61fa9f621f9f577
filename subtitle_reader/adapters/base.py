"""Collaborator interfaces: document renderer, speech engine, caption renderer.

WHY: Rendering markup, speaking text, and drawing captions all depend on
the host (a desktop session, a sound device, a browser). The read
orchestration only needs a handful of operations from each, so those
operations are named here and everything host-bound sits behind them.
Tests then drive a whole read with fakes and no audio or display.

HOW: Three ABCs plus the Voice value type. Concrete adapters live next to
this module (markdown_renderer, speech, console) and in subtitle_reader.gui.

RULES:
- Progress callbacks receive (offset, kind); offsets index the exact
  string passed to speak()
- The end callback fires once per speak() call, including after stop()
- Engine start-up failures surface as SpeechEngineError
- Renderers never see spoken-form offsets, only text and layouts
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from subtitle_reader.core.ir import CaptionLayout

ProgressCallback = Callable[[int, str], None]
EndCallback = Callable[[], None]

LOADING = "loading"
COMPLETE = "complete"


class SpeechEngineError(RuntimeError):
    """The speech engine could not start, or its playback loop died."""


@dataclass(frozen=True)
class Voice:
    """One installed voice as reported by a speech engine."""

    id: str
    name: str
    languages: List[str] = field(default_factory=list)


class DocumentRenderer(ABC):
    """Converts a markup string to an HTML document."""

    @abstractmethod
    def render(self, markup: str) -> str:
        """Render markup to HTML text."""


class SpeechEngine(ABC):
    """Text-to-speech engine driven by the reader."""

    @abstractmethod
    def voices(self) -> List[Voice]:
        """Return the installed voices, possibly empty."""

    @abstractmethod
    def speak(
        self,
        text: str,
        voice: Optional[Voice],
        rate: float,
        on_progress: ProgressCallback,
        on_end: EndCallback,
    ) -> None:
        """Start speaking text. Must return without waiting for playback.

        Args:
            text: The spoken form, read verbatim.
            voice: Voice to use, or None for the engine default.
            rate: Multiplier on the engine's base speaking rate.
            on_progress: Called with (offset, kind) as reading advances.
            on_end: Called once when the utterance finishes or is stopped.
        """

    @abstractmethod
    def stop(self) -> None:
        """Cancel in-flight speech. A no-op when nothing is speaking."""

    def is_speaking(self) -> bool:
        """Whether the engine is still working through the last speak() call.

        Engines that cannot tell report True; callers then rely on the end
        callback alone.
        """
        return True


class CaptionRenderer(ABC):
    """Caption surface plus, for standalone windows, its window controller."""

    @abstractmethod
    def show_text(self, text: str, layout: CaptionLayout) -> None:
        """Show one display unit."""

    @abstractmethod
    def show_animation(self, kind: str, layout: CaptionLayout) -> None:
        """Show the LOADING or COMPLETE animation."""

    def place_window(self, layout: CaptionLayout) -> None:
        """Resize the window to the layout and centre it at the screen bottom.

        Only called in standalone mode. Embedded renderers ignore it.
        """

    def close(self, delay: float) -> None:
        """Close the caption window after delay seconds (standalone only)."""
