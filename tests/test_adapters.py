"""Tests for the concrete adapters: markdown, width oracles, pyttsx3, console.

WHY: Adapters are thin, but each one encodes a convention the rest of
the reader depends on: markdown extensions, pixel arithmetic, how
pyttsx3 events become progress offsets.

HOW: The pyttsx3 adapter runs against a fake engine installed in place
of pyttsx3.init(); the fake fires the connected callbacks from
runAndWait() the way the real driver loop does. TkFontWidth needs a
display and is not covered here.
"""

from __future__ import annotations

import io
from types import SimpleNamespace

import pytest

from subtitle_reader.adapters import speech as speech_module
from subtitle_reader.adapters.base import COMPLETE, LOADING, SpeechEngineError, Voice
from subtitle_reader.adapters.console import ANIMATION_MARKERS, ConsoleCaptionRenderer
from subtitle_reader.adapters.markdown_renderer import MarkdownRenderer
from subtitle_reader.adapters.speech import Pyttsx3SpeechEngine, _language_tags
from subtitle_reader.adapters.width import CellWidth
from subtitle_reader.config import ReaderConfig
from subtitle_reader.core.ir import CaptionLayout, SizeClass

LAYOUT = CaptionLayout(SizeClass.SINGLE_LINE, 300, 35)


# ---------------------------------------------------------------------------
# Markdown
# ---------------------------------------------------------------------------


class TestMarkdownRenderer:

    def test_renders_paragraphs(self):
        html = MarkdownRenderer().render("# Title\n\nSome *text*.")
        assert "<h1>Title</h1>" in html
        assert "<em>text</em>" in html

    def test_extra_tables(self):
        html = MarkdownRenderer().render("| a | b |\n|---|---|\n| 1 | 2 |\n")
        assert "<table>" in html

    def test_custom_extensions(self):
        assert MarkdownRenderer(extensions=[]).extensions == []


# ---------------------------------------------------------------------------
# Width oracles
# ---------------------------------------------------------------------------


class TestCellWidth:

    def test_wide_glyph_counts_double(self):
        assert CellWidth(11, 60)("字a") == 93

    def test_padding_on_empty_string(self):
        assert CellWidth(11, 60)("") == 60

    def test_for_config(self):
        measure = CellWidth.for_config(ReaderConfig(font_size=20, width_padding=10))
        assert measure("abcd") == 4 * 10 + 10


# ---------------------------------------------------------------------------
# pyttsx3
# ---------------------------------------------------------------------------


class FakePyttsx3Engine:
    """Minimal pyttsx3 engine: connect/disconnect/say/runAndWait/stop."""

    def __init__(self):
        self.properties = {
            "rate": 200,
            "voices": [
                SimpleNamespace(id="ens", name="English", languages=[b"\x05en-gb"]),
                SimpleNamespace(id="zhs", name="Chinese", languages=["zh-CN"]),
            ],
        }
        self.callbacks = {}
        self.next_token = 0
        self.said = []
        self.stopped = 0

    def getProperty(self, name):
        return self.properties[name]

    def setProperty(self, name, value):
        self.properties[name] = value

    def connect(self, topic, cb):
        self.next_token += 1
        token = {"topic": topic, "id": self.next_token}
        self.callbacks.setdefault(topic, []).append((token, cb))
        return token

    def disconnect(self, token):
        topic = self.callbacks[token["topic"]]
        topic[:] = [(t, cb) for t, cb in topic if t is not token]

    def say(self, text):
        self.said.append(text)

    def runAndWait(self):
        text = self.said[-1]
        for location in (0, text.find(" ") + 1):
            for _, cb in self.callbacks.get("started-word", []):
                cb("utt", location, 1)
        for _, cb in self.callbacks.get("finished-utterance", []):
            cb("utt", True)

    def stop(self):
        self.stopped += 1


@pytest.fixture
def fake_engine(monkeypatch):
    engine = FakePyttsx3Engine()
    monkeypatch.setattr(speech_module.pyttsx3, "init", lambda driver_name=None: engine)
    return engine


class TestPyttsx3SpeechEngine:

    def test_voices(self, fake_engine):
        voices = Pyttsx3SpeechEngine().voices()
        assert voices == [
            Voice(id="ens", name="English", languages=["en-gb"]),
            Voice(id="zhs", name="Chinese", languages=["zh-CN"]),
        ]

    def test_speak_reports_words_then_end(self, fake_engine):
        events = []
        adapter = Pyttsx3SpeechEngine()
        adapter.speak(
            "Hello world",
            voice=Voice(id="zhs", name="Chinese"),
            rate=1.5,
            on_progress=lambda offset, kind: events.append((offset, kind)),
            on_end=lambda: events.append("end"),
        )
        adapter._thread.join(2.0)
        assert events == [(0, "word"), (6, "word"), "end"]
        assert fake_engine.properties["voice"] == "zhs"
        assert fake_engine.properties["rate"] == 300

    def test_callbacks_replaced_between_utterances(self, fake_engine):
        first, second = [], []
        adapter = Pyttsx3SpeechEngine()
        adapter.speak("a b", None, 1.0, lambda o, k: first.append(o), lambda: None)
        adapter._thread.join(2.0)
        adapter.speak("c d", None, 1.0, lambda o, k: second.append(o), lambda: None)
        adapter._thread.join(2.0)
        assert first == [0, 2]
        assert second == [0, 2]
        assert len(fake_engine.callbacks["started-word"]) == 1

    def test_rate_uses_engine_base_rate(self, fake_engine):
        fake_engine.properties["rate"] = 150
        adapter = Pyttsx3SpeechEngine()
        adapter.speak("x", None, 2.0, lambda o, k: None, lambda: None)
        adapter._thread.join(2.0)
        assert fake_engine.properties["rate"] == 300

    def test_stop_before_speaking_is_noop(self, fake_engine):
        adapter = Pyttsx3SpeechEngine()
        adapter.stop()
        assert fake_engine.stopped == 0

    def test_init_failure_is_speech_engine_error(self, monkeypatch):
        def broken_init(driver_name=None):
            raise RuntimeError("no audio driver")

        monkeypatch.setattr(speech_module.pyttsx3, "init", broken_init)
        with pytest.raises(SpeechEngineError, match="no audio driver"):
            Pyttsx3SpeechEngine().voices()

    def test_is_speaking_false_after_loop_exits(self, fake_engine):
        adapter = Pyttsx3SpeechEngine()
        assert not adapter.is_speaking()
        adapter.speak("a b", None, 1.0, lambda o, k: None, lambda: None)
        adapter._thread.join(2.0)
        assert not adapter.is_speaking()
        assert adapter.loop_error is None

    def test_loop_failure_is_recorded(self, fake_engine, monkeypatch):
        def broken_loop():
            raise OSError("audio device lost")

        monkeypatch.setattr(fake_engine, "runAndWait", broken_loop)
        ended = []
        adapter = Pyttsx3SpeechEngine()
        adapter.speak("a b", None, 1.0, lambda o, k: None, lambda: ended.append(True))
        adapter._thread.join(2.0)
        assert not adapter.is_speaking()
        assert adapter.loop_error == "audio device lost"
        assert ended == []

    @pytest.mark.parametrize("raw,expected", [
        ([b"\x05en-gb"], ["en-gb"]),
        (["zh-CN"], ["zh-CN"]),
        ([b"\x05", ""], []),
        (None, []),
    ])
    def test_language_tags(self, raw, expected):
        assert _language_tags(raw) == expected


# ---------------------------------------------------------------------------
# Console
# ---------------------------------------------------------------------------


class TestConsoleCaptionRenderer:

    def test_text_to_out_animation_to_status(self):
        out, status = io.StringIO(), io.StringIO()
        renderer = ConsoleCaptionRenderer(out=out, status=status)
        renderer.show_animation(LOADING, LAYOUT)
        renderer.show_text("Hello", LAYOUT)
        renderer.show_animation(COMPLETE, LAYOUT)
        assert out.getvalue() == "Hello\n"
        assert status.getvalue() == "{}\n{}\n".format(
            ANIMATION_MARKERS[LOADING], ANIMATION_MARKERS[COMPLETE]
        )

    def test_window_calls_are_ignored(self):
        out = io.StringIO()
        renderer = ConsoleCaptionRenderer(out=out, status=io.StringIO())
        renderer.place_window(LAYOUT)
        renderer.close(1.0)
        assert out.getvalue() == ""
