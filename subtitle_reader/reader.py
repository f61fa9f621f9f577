"""Read orchestration: one SubtitleReader drives one caption and one voice.

WHY: A read touches every collaborator in a fixed order: show a loading
state, stop whatever was speaking, turn markup into lines, align, swap in
the new session, pick a voice, start speaking. Progress and end events
then arrive on the speech engine's thread and must be matched against
the session they belong to. Keeping that sequence in one class keeps the
collaborators ignorant of each other.

HOW: SubtitleReader holds the config, the collaborators, and the single
current ReadSession behind a threading.Lock, plus a second lock that
serialises renderer calls. Speech callbacks are bound to the session id
they were created for; handle_progress()/handle_end() drop events whose id is
no longer current. State transitions are the synchronizer's; this class
only routes their effects to the renderer.

RULES:
- A missing document renderer raises ConfigurationError before anything
  is shown and before any session exists
- The previous session is detached before the loading state is drawn,
  speech is stopped next, and the new session is installed only once its
  plan is built
- State checks happen under the state lock; renderer calls happen outside
  it but under the render lock, so a caption drawn for an old session can
  never land after the next read's loading state
- speech.stop() is never called with the render lock held
- Completion is rendered exactly once per session; stop() renders it for
  a session it cancels
"""

from __future__ import annotations

import logging
import threading
import uuid
from functools import partial
from typing import Callable, Optional, Sequence

from caption_units import WidthOracle
from subtitle_reader.adapters.base import (
    COMPLETE,
    LOADING,
    CaptionRenderer,
    DocumentRenderer,
    SpeechEngine,
    Voice,
)
from subtitle_reader.adapters.width import CellWidth
from subtitle_reader.config import ConfigurationError, ReaderConfig
from subtitle_reader.core import synchronizer
from subtitle_reader.core.aligner import align
from subtitle_reader.core.ir import (
    CaptionLayout,
    ReadingComplete,
    ReadPlan,
    ReadSession,
    ShowUnit,
    SizeClass,
)
from subtitle_reader.core.lines import lines_of

logger = logging.getLogger(__name__)

LOADING_TEXT = "Loading..."
COMPLETE_TEXT = "Done"


def select_voice(
    voices: Sequence[Voice],
    preferred_name: str,
    language: str,
) -> Optional[Voice]:
    """Pick a voice: name match, then language match, then the first voice.

    RULES:
    - Name match is a case-sensitive substring test on Voice.name
    - Language match is a case-insensitive substring test on each tag,
      so "zh" matches "zh-CN" and "cmn-zh"
    - Returns None only when there are no voices at all
    """
    if not voices:
        return None
    if preferred_name:
        for voice in voices:
            if preferred_name in voice.name:
                return voice
    if language:
        wanted = language.lower()
        for voice in voices:
            if any(wanted in tag.lower() for tag in voice.languages):
                return voice
    return voices[0]


def classify_caption(measured_width: float, config: ReaderConfig) -> CaptionLayout:
    """Map a measured text width to caption geometry.

    Text wider than the maximum caption width wraps onto two lines at the
    maximum width; anything else is one line, clamped to [min, max].
    """
    if measured_width > config.max_caption_width:
        return CaptionLayout(
            size_class=SizeClass.MULTI_LINE,
            width=config.max_caption_width,
            height=config.multi_line_height,
        )
    width = min(max(measured_width, config.min_caption_width), config.max_caption_width)
    return CaptionLayout(
        size_class=SizeClass.SINGLE_LINE,
        width=width,
        height=config.single_line_height,
    )


def build_plan(
    markup: str,
    config: ReaderConfig,
    document_renderer: Optional[DocumentRenderer],
    measure: Optional[WidthOracle] = None,
) -> ReadPlan:
    """Render, extract, and align markup without speaking it.

    Raises:
        ConfigurationError: No document renderer was supplied.
    """
    if document_renderer is None:
        raise ConfigurationError("No document renderer configured; cannot read markup")
    html = document_renderer.render(markup)
    return align(lines_of(html), config.max_unit_width, measure or CellWidth.for_config(config))


class SubtitleReader:
    """Speak markup aloud while a caption follows along.

    Args:
        config: Voice, rate, geometry, and standalone settings.
        renderer: Caption surface (and window controller when standalone).
        speech: Speech engine that reads the spoken form.
        measure: Width oracle; defaults to CellWidth for the config.
        document_renderer: Markup-to-HTML renderer, required by read().
        on_complete: Called with the session once its reading completes.
    """

    def __init__(
        self,
        config: ReaderConfig,
        renderer: CaptionRenderer,
        speech: SpeechEngine,
        measure: Optional[WidthOracle] = None,
        document_renderer: Optional[DocumentRenderer] = None,
        on_complete: Optional[Callable[[ReadSession], None]] = None,
    ) -> None:
        self.config = config
        self.renderer = renderer
        self.speech = speech
        self.measure = measure or CellWidth.for_config(config)
        self.document_renderer = document_renderer
        self.on_complete = on_complete
        self._lock = threading.Lock()
        self._render_lock = threading.Lock()
        self._session: Optional[ReadSession] = None

    @property
    def session(self) -> Optional[ReadSession]:
        with self._lock:
            return self._session

    def layout_for(self, text: str) -> CaptionLayout:
        return classify_caption(self.measure(text), self.config)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def read(self, markup: str) -> ReadSession:
        """Start reading markup, replacing any read in progress.

        Returns:
            The new session, already submitted to the speech engine.

        Raises:
            ConfigurationError: No document renderer is configured.
        """
        if self.document_renderer is None:
            raise ConfigurationError("No document renderer configured; cannot read markup")

        with self._render_lock:
            with self._lock:
                previous = self._session
                self._session = None
                if previous is not None:
                    synchronizer.cancel(previous)
            if self.config.standalone:
                self.renderer.place_window(CaptionLayout(
                    size_class=SizeClass.SINGLE_LINE,
                    width=self.config.min_caption_width,
                    height=self.config.single_line_height,
                ))
            self._render_animation(LOADING, LOADING_TEXT)
        # The engine may be waiting on the render lock in a callback.
        self.speech.stop()

        plan = build_plan(markup, self.config, self.document_renderer, self.measure)
        session = ReadSession(id=uuid.uuid4().hex, plan=plan)
        with self._lock:
            self._session = session
        if previous is not None:
            logger.info("Replacing read session %s with %s", previous.id, session.id)

        voice = select_voice(
            self.speech.voices(), self.config.target_voice_name, self.config.voice_language
        )
        logger.info(
            "Read session %s: %d units, %d/%d mapped, voice %s",
            session.id, len(plan.units), plan.mapped_count, len(plan.units),
            voice.name if voice else "(engine default)",
        )
        self.speech.speak(
            plan.spoken_form,
            voice=voice,
            rate=self.config.speech_rate,
            on_progress=partial(self.handle_progress, session.id),
            on_end=partial(self.handle_end, session.id),
        )
        return session

    def stop(self) -> Optional[ReadSession]:
        """Cancel the current read, if any, and show the completion state."""
        with self._render_lock:
            with self._lock:
                session = self._session
                self._session = None
                cancelled = session is not None and synchronizer.cancel(session)
            if cancelled:
                logger.info("Cancelled read session %s", session.id)
                self._render_animation(COMPLETE, COMPLETE_TEXT)
        self.speech.stop()
        return session

    # ------------------------------------------------------------------
    # Speech engine events
    # ------------------------------------------------------------------

    def handle_progress(self, session_id: str, offset: int, kind: str) -> Optional[ShowUnit]:
        """Apply a progress event tagged with the session it came from."""
        with self._render_lock:
            with self._lock:
                session = self._current(session_id)
                effect = synchronizer.on_progress(session, offset, kind) if session else None
            if effect is None:
                return None
            layout = self.layout_for(effect.text)
            if self.config.standalone:
                self.renderer.place_window(layout)
            self.renderer.show_text(effect.text, layout)
        return effect

    def handle_end(self, session_id: str) -> Optional[ReadingComplete]:
        """Apply the end-of-reading event tagged with its session."""
        with self._render_lock:
            with self._lock:
                session = self._current(session_id)
                effect = synchronizer.on_end(session) if session else None
            if effect is None:
                return None
            logger.info("Read session %s complete", session_id)
            self._render_animation(COMPLETE, COMPLETE_TEXT)
            if self.config.standalone:
                self.renderer.close(self.config.completion_delay)
        if self.on_complete is not None:
            self.on_complete(session)
        return effect

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _current(self, session_id: str) -> Optional[ReadSession]:
        """Return the current session if it matches session_id. Lock held."""
        session = self._session
        if session is None or session.id != session_id:
            logger.debug("Ignoring event for superseded session %s", session_id)
            return None
        return session

    def _render_animation(self, kind: str, placeholder: str) -> None:
        layout = self.layout_for(placeholder)
        if self.config.standalone:
            self.renderer.place_window(layout)
        self.renderer.show_animation(kind, layout)
