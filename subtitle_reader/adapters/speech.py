"""pyttsx3 speech engine adapter.

WHY: pyttsx3 drives the platform's own speech stack (SAPI5, NSSpeech,
eSpeak) and reports word boundaries as character offsets into the text it
was given, which is exactly the progress signal the synchronizer needs.

HOW: One pyttsx3 engine per adapter, created lazily. speak() connects
fresh callbacks, queues the utterance, and runs the engine loop on a
daemon worker thread so the caller returns immediately. stop() asks the
engine to stop and waits briefly for the loop thread to exit.

RULES:
- "started-word" events become ("word") progress events at their location
- "finished-utterance" becomes the end callback, stopped or not
- Callbacks run on the worker thread; callers must be thread-safe
- Rate is a multiplier on the engine's base words-per-minute
- pyttsx3.init() failures are raised as SpeechEngineError
- is_speaking() is False once the loop thread has exited, for any reason
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Optional

import pyttsx3

from subtitle_reader.adapters.base import (
    EndCallback,
    ProgressCallback,
    SpeechEngine,
    SpeechEngineError,
    Voice,
)

logger = logging.getLogger(__name__)

STOP_JOIN_TIMEOUT = 2.0


class Pyttsx3SpeechEngine(SpeechEngine):
    """SpeechEngine backed by pyttsx3."""

    def __init__(self, driver_name: Optional[str] = None) -> None:
        self._driver_name = driver_name
        self._engine = None
        self._base_rate = 200
        self._tokens: List[Dict[str, Any]] = []
        self._thread: Optional[threading.Thread] = None
        self.loop_error: Optional[str] = None

    def _get_engine(self):
        if self._engine is None:
            try:
                self._engine = pyttsx3.init(self._driver_name)
            except (RuntimeError, OSError) as e:
                raise SpeechEngineError("Could not start the speech engine: {}".format(e)) from e
            self._base_rate = self._engine.getProperty("rate")
        return self._engine

    def voices(self) -> List[Voice]:
        engine = self._get_engine()
        return [
            Voice(id=v.id, name=v.name or "", languages=_language_tags(v.languages))
            for v in engine.getProperty("voices")
        ]

    def speak(
        self,
        text: str,
        voice: Optional[Voice],
        rate: float,
        on_progress: ProgressCallback,
        on_end: EndCallback,
    ) -> None:
        engine = self._get_engine()
        self.stop()

        for token in self._tokens:
            engine.disconnect(token)
        self._tokens = [
            engine.connect(
                "started-word",
                lambda name, location, length: on_progress(location, "word"),
            ),
            engine.connect(
                "finished-utterance",
                lambda name, completed: on_end(),
            ),
        ]

        if voice is not None:
            engine.setProperty("voice", voice.id)
        engine.setProperty("rate", int(self._base_rate * rate))
        engine.say(text)

        self._thread = threading.Thread(
            target=self._run_loop, args=(engine,), name="pyttsx3-loop", daemon=True
        )
        self._thread.start()
        logger.debug("Speaking %d characters at %.0f wpm", len(text), self._base_rate * rate)

    def is_speaking(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()

    def stop(self) -> None:
        thread = self._thread
        if self._engine is None or thread is None or not thread.is_alive():
            return
        self._engine.stop()
        # stop() may be called from a callback on the loop thread itself
        if thread is not threading.current_thread():
            thread.join(STOP_JOIN_TIMEOUT)
            if thread.is_alive():
                logger.warning("Speech loop did not exit within %.1fs", STOP_JOIN_TIMEOUT)

    def _run_loop(self, engine) -> None:
        """Worker thread body. A failure ends the loop and is kept in loop_error."""
        self.loop_error = None
        try:
            engine.runAndWait()
        except Exception as exc:
            logger.exception("Speech loop failed")
            self.loop_error = str(exc) or type(exc).__name__


def _language_tags(raw) -> List[str]:
    """Normalize pyttsx3 voice languages.

    eSpeak reports byte strings prefixed with a priority byte (b"\\x05en-gb");
    SAPI5 and NSSpeech report plain strings or nothing.
    """
    tags = []
    for lang in raw or []:
        if isinstance(lang, bytes):
            lang = lang.decode("utf-8", "ignore")
        lang = "".join(ch for ch in str(lang) if ch.isprintable()).strip()
        if lang:
            tags.append(lang)
    return tags
