"""Shared test fixtures and fakes for the subtitle reader test suite.

WHY: The reader drives a speech engine, a caption surface, and a width
oracle, none of which can run in CI. Centralizing deterministic fakes
here lets every module drive a complete read with synthetic events.

HOW: Plain classes implement the adapter interfaces and record what they
were asked to do; pytest fixtures hand out fresh instances.

RULES:
- char_width measures one unit per character, so widths are lengths
- FakeSpeechEngine never calls back on its own; tests call progress()/end()
- RecordingRenderer records every call as a tuple, in order
"""

from typing import Any, List, Optional, Tuple

import pytest

from subtitle_reader.adapters.base import CaptionRenderer, SpeechEngine, Voice
from subtitle_reader.adapters.markdown_renderer import MarkdownRenderer
from subtitle_reader.config import ReaderConfig
from subtitle_reader.core.ir import CaptionLayout


def char_width(text: str) -> float:
    """Deterministic width oracle: one unit per character."""
    return float(len(text))


class FakeSpeechEngine(SpeechEngine):
    """Speech engine that records calls and replays events on demand."""

    def __init__(self, voices: Optional[List[Voice]] = None) -> None:
        self._voices = list(voices or [])
        self.calls: List[Tuple[str, Any]] = []
        self.spoken: List[str] = []
        self.callbacks: List[Tuple[Any, Any]] = []

    def voices(self) -> List[Voice]:
        return list(self._voices)

    def speak(self, text, voice, rate, on_progress, on_end) -> None:
        self.calls.append(("speak", (text, voice, rate)))
        self.spoken.append(text)
        self.callbacks.append((on_progress, on_end))

    def stop(self) -> None:
        self.calls.append(("stop", None))

    # Event replay -------------------------------------------------------

    def progress(self, offset: int, kind: str = "word", utterance: int = -1):
        on_progress, _ = self.callbacks[utterance]
        return on_progress(offset, kind)

    def end(self, utterance: int = -1):
        _, on_end = self.callbacks[utterance]
        return on_end()


class RecordingRenderer(CaptionRenderer):
    """Caption renderer that records every call."""

    def __init__(self) -> None:
        self.calls: List[Tuple[str, Any]] = []

    def show_text(self, text: str, layout: CaptionLayout) -> None:
        self.calls.append(("text", text, layout))

    def show_animation(self, kind: str, layout: CaptionLayout) -> None:
        self.calls.append(("animation", kind, layout))

    def place_window(self, layout: CaptionLayout) -> None:
        self.calls.append(("place", layout))

    def close(self, delay: float) -> None:
        self.calls.append(("close", delay))

    def texts(self) -> List[str]:
        return [call[1] for call in self.calls if call[0] == "text"]

    def animations(self) -> List[str]:
        return [call[1] for call in self.calls if call[0] == "animation"]

    def of_kind(self, kind: str) -> List[Tuple[str, Any]]:
        return [call for call in self.calls if call[0] == kind]


VOICES = [
    Voice(id="v-en", name="English Female", languages=["en-US"]),
    Voice(id="v-zh", name="Chinese Huihui", languages=["zh-CN"]),
    Voice(id="v-yx", name="Microsoft Yunxi Online (Natural)", languages=["zh-CN"]),
]


@pytest.fixture
def config():
    """Small, explicit geometry so layout assertions are easy to read."""
    return ReaderConfig(
        target_voice_name="Yunxi",
        voice_language="zh",
        speech_rate=1.25,
        min_caption_width=100,
        max_caption_width=500,
        max_unit_width=1000,
        completion_delay=2.0,
        standalone=False,
    )


@pytest.fixture
def speech():
    return FakeSpeechEngine(voices=list(VOICES))


@pytest.fixture
def renderer():
    return RecordingRenderer()


@pytest.fixture
def markdown_renderer():
    return MarkdownRenderer()


@pytest.fixture
def two_line_markdown():
    """Renders to the lines "Hello world." and "Second line."."""
    return "Hello world.\n\nSecond line.\n"


@pytest.fixture
def measure():
    return char_width
