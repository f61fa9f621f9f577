"""Tests for SubtitleReader orchestration, voice selection, and layout.

WHY: The reader is where thread-crossing events meet session state. A
late event from a replaced read, a double end report, or speech left
running under a new read all show up here as wrong captions.

HOW: Fake speech engine and recording renderer from conftest; the real
MarkdownRenderer; one-unit-per-character widths. Events are replayed by
calling the callbacks the reader handed to the fake engine.
"""

import threading

import pytest

from subtitle_reader.adapters.base import COMPLETE, LOADING, CaptionRenderer, Voice
from subtitle_reader.config import ConfigurationError, ReaderConfig
from subtitle_reader.core.ir import SessionState, SizeClass
from subtitle_reader.reader import SubtitleReader, classify_caption, select_voice


@pytest.fixture
def make_reader(config, renderer, speech, measure, markdown_renderer):
    def _make(**overrides):
        kwargs = dict(
            config=config,
            renderer=renderer,
            speech=speech,
            measure=measure,
            document_renderer=markdown_renderer,
        )
        kwargs.update(overrides)
        return SubtitleReader(**kwargs)
    return _make


# ---------------------------------------------------------------------------
# Voice selection
# ---------------------------------------------------------------------------


class TestSelectVoice:

    VOICES = [
        Voice(id="1", name="English Female", languages=["en-US"]),
        Voice(id="2", name="Chinese Huihui", languages=["zh-CN"]),
        Voice(id="3", name="Microsoft Yunxi Online (Natural)", languages=["zh-CN"]),
    ]

    def test_name_match_wins(self):
        assert select_voice(self.VOICES, "Yunxi", "en").id == "3"

    def test_language_fallback(self):
        assert select_voice(self.VOICES, "Nobody", "zh").id == "2"

    def test_language_match_ignores_case(self):
        assert select_voice(self.VOICES, "", "ZH").id == "2"

    def test_first_voice_fallback(self):
        assert select_voice(self.VOICES, "Nobody", "fr").id == "1"

    def test_no_voices(self):
        assert select_voice([], "Yunxi", "zh") is None


# ---------------------------------------------------------------------------
# Caption layout
# ---------------------------------------------------------------------------


class TestClassifyCaption:

    def test_narrow_text_clamped_to_minimum(self, config):
        layout = classify_caption(50, config)
        assert layout.size_class == SizeClass.SINGLE_LINE
        assert layout.width == 100
        assert layout.height == config.single_line_height

    def test_medium_text_uses_measured_width(self, config):
        assert classify_caption(300, config).width == 300

    def test_exactly_max_stays_single_line(self, config):
        assert classify_caption(500, config).size_class == SizeClass.SINGLE_LINE

    def test_wide_text_goes_multi_line(self, config):
        layout = classify_caption(501, config)
        assert layout.size_class == SizeClass.MULTI_LINE
        assert layout.width == 500
        assert layout.height == config.multi_line_height


# ---------------------------------------------------------------------------
# read()
# ---------------------------------------------------------------------------


class TestRead:

    def test_submits_spoken_form(self, make_reader, speech, two_line_markdown):
        session = make_reader().read(two_line_markdown)
        assert speech.spoken == ["Hello world. Second line."]
        assert session.plan.spoken_form == "Hello world. Second line."
        assert session.state == SessionState.READING

    def test_uses_selected_voice_and_rate(self, make_reader, speech, two_line_markdown):
        make_reader().read(two_line_markdown)
        _, (text, voice, rate) = [c for c in speech.calls if c[0] == "speak"][0]
        assert voice.id == "v-yx"
        assert rate == 1.25

    def test_shows_loading_animation_first(self, make_reader, renderer, two_line_markdown):
        make_reader().read(two_line_markdown)
        assert renderer.calls[0][:2] == ("animation", LOADING)

    def test_missing_document_renderer_raises(self, make_reader, renderer, speech):
        reader = make_reader(document_renderer=None)
        with pytest.raises(ConfigurationError):
            reader.read("Hello.")
        assert speech.calls == []
        assert renderer.calls == []
        assert reader.session is None

    def test_stops_speech_before_speaking(self, make_reader, speech, two_line_markdown):
        make_reader().read(two_line_markdown)
        assert [c[0] for c in speech.calls] == ["stop", "speak"]

    def test_not_standalone_never_places_window(self, make_reader, renderer, speech, two_line_markdown):
        make_reader().read(two_line_markdown)
        speech.progress(0)
        speech.end()
        assert renderer.of_kind("place") == []
        assert renderer.of_kind("close") == []


# ---------------------------------------------------------------------------
# Progress and end events
# ---------------------------------------------------------------------------


class TestEvents:

    def test_progress_shows_each_unit_once(self, make_reader, renderer, speech, two_line_markdown):
        make_reader().read(two_line_markdown)
        for offset in (0, 6, 11, 12, 13, 20):
            speech.progress(offset)
        assert renderer.texts() == ["Hello world.", "Second line."]

    def test_shown_text_carries_layout(self, make_reader, renderer, speech, two_line_markdown):
        make_reader().read(two_line_markdown)
        speech.progress(0)
        _, text, layout = renderer.of_kind("text")[0]
        assert layout.size_class == SizeClass.SINGLE_LINE
        assert layout.width == 100

    def test_non_boundary_kind_ignored(self, make_reader, renderer, speech, two_line_markdown):
        make_reader().read(two_line_markdown)
        speech.progress(0, kind="mark")
        assert renderer.texts() == []

    def test_end_completes_once(self, make_reader, renderer, speech, two_line_markdown):
        completed = []
        make_reader(on_complete=completed.append).read(two_line_markdown)
        speech.end()
        speech.end()
        assert renderer.animations() == [LOADING, COMPLETE]
        assert len(completed) == 1
        assert completed[0].state == SessionState.ENDED

    def test_progress_after_end_ignored(self, make_reader, renderer, speech, two_line_markdown):
        make_reader().read(two_line_markdown)
        speech.end()
        speech.progress(0)
        assert renderer.texts() == []


class TestSessionReplacement:

    def test_late_events_from_replaced_session_ignored(self, make_reader, renderer, speech):
        reader = make_reader()
        reader.read("First doc.")
        second = reader.read("Second doc.")

        speech.progress(0, utterance=0)
        speech.end(utterance=0)
        assert renderer.texts() == []
        assert COMPLETE not in renderer.animations()

        speech.progress(0, utterance=1)
        assert renderer.texts() == ["Second doc."]
        assert reader.session is second

    def test_replaced_session_is_cancelled(self, make_reader):
        reader = make_reader()
        first = reader.read("First doc.")
        reader.read("Second doc.")
        assert first.state == SessionState.CANCELLED

    def test_speech_stopped_before_second_read(self, make_reader, speech):
        reader = make_reader()
        reader.read("First doc.")
        reader.read("Second doc.")
        assert [c[0] for c in speech.calls] == ["stop", "speak", "stop", "speak"]


class GatedRenderer(CaptionRenderer):
    """Records text and animations; show_text blocks until the gate opens."""

    def __init__(self) -> None:
        self.calls = []
        self.entered = threading.Event()
        self.gate = threading.Event()

    def show_text(self, text, layout) -> None:
        self.entered.set()
        self.gate.wait(5)
        self.calls.append(("text", text))

    def show_animation(self, kind, layout) -> None:
        self.calls.append(("animation", kind))


class TestRenderOrdering:

    def test_caption_in_flight_lands_before_next_loading_state(self, make_reader, speech):
        renderer = GatedRenderer()
        reader = make_reader(renderer=renderer)
        reader.read("First doc.")

        progress = threading.Thread(target=speech.progress, args=(0,), kwargs={"utterance": 0})
        progress.start()
        assert renderer.entered.wait(5)

        second = threading.Thread(target=reader.read, args=("Second doc.",))
        second.start()
        second.join(0.2)
        renderer.gate.set()
        progress.join(5)
        second.join(5)

        assert renderer.calls == [
            ("animation", LOADING),
            ("text", "First doc."),
            ("animation", LOADING),
        ]


class TestStop:

    def test_stop_cancels_and_shows_completion(self, make_reader, renderer, speech, two_line_markdown):
        reader = make_reader()
        session = reader.read(two_line_markdown)
        assert reader.stop() is session
        assert session.state == SessionState.CANCELLED
        assert reader.session is None
        assert renderer.animations()[-1] == COMPLETE
        assert speech.calls[-1] == ("stop", None)

    def test_events_after_stop_ignored(self, make_reader, renderer, speech, two_line_markdown):
        completed = []
        reader = make_reader(on_complete=completed.append)
        reader.read(two_line_markdown)
        reader.stop()
        speech.progress(0)
        speech.end()
        assert renderer.texts() == []
        assert completed == []

    def test_stop_without_session(self, make_reader, renderer):
        assert make_reader().stop() is None
        assert renderer.calls == []


class TestStandalone:

    @pytest.fixture
    def standalone_config(self, config):
        return config.with_overrides(standalone=True, completion_delay=1.5)

    def test_places_window_at_minimum_before_loading(self, make_reader, renderer, standalone_config):
        make_reader(config=standalone_config).read("Hi.")
        kind, layout = renderer.calls[0]
        assert kind == "place"
        assert layout.width == standalone_config.min_caption_width
        assert layout.height == standalone_config.single_line_height

    def test_resizes_for_each_unit(self, make_reader, renderer, speech, standalone_config):
        make_reader(config=standalone_config).read("A" * 600 + ".")
        speech.progress(0)
        place_calls = renderer.of_kind("place")
        assert place_calls[-1][1].size_class == SizeClass.MULTI_LINE

    def test_closes_after_completion_delay(self, make_reader, renderer, speech, standalone_config):
        make_reader(config=standalone_config).read("Hi.")
        speech.end()
        assert renderer.of_kind("close") == [("close", 1.5)]


class TestDefaults:

    def test_default_measure_is_cell_width(self, renderer, speech, markdown_renderer):
        config = ReaderConfig(min_caption_width=10, max_caption_width=1000, max_unit_width=1000)
        reader = SubtitleReader(config, renderer, speech, document_renderer=markdown_renderer)
        assert reader.measure("ab") == 2 * config.font_size / 2 + config.width_padding
