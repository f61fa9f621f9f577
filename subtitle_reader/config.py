"""Configuration defaults, .env loading, and the ReaderConfig surface.

WHY: Voice choice, speech rate, caption geometry, and the standalone flag
are the knobs a deployment actually turns. Keeping them in one place, with
plain defaults and environment overrides, means the CLI, the GUI, and the
HTTP API all read the same values.

HOW: python-dotenv loads the .env file on import. Module-level constants
hold the defaults (overridable via environment variables). ReaderConfig
is the validated, per-read view of those values; ReaderConfig.from_env()
re-reads the environment at call time so tests can monkeypatch it.

RULES:
- Caption widths default to fractions of the screen width:
  minimum caption 30%, maximum caption 90%, maximum unit width 80%
- Heights: 35 px single-line, 70 px multi-line
- Every width measurement carries WIDTH_PADDING (60 px) of caption chrome
- Invalid values raise ConfigurationError (a ValueError), never clamp
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional

from dotenv import load_dotenv

# Load .env from the project root (where the script is run from)
load_dotenv()


class ConfigurationError(ValueError):
    """Invalid configuration, or a required collaborator missing at read start."""


# ---------------------------------------------------------------------------
# Caption geometry
# ---------------------------------------------------------------------------

MIN_CAPTION_RATIO = 0.3
MAX_CAPTION_RATIO = 0.9
MAX_UNIT_RATIO = 0.8

SINGLE_LINE_HEIGHT = 35
MULTI_LINE_HEIGHT = 70

WIDTH_PADDING = 60
"""Pixels added to every text measurement (caption padding and chrome)."""

# ---------------------------------------------------------------------------
# Environment defaults
# ---------------------------------------------------------------------------

DEFAULT_VOICE_NAME = os.getenv("SUBTITLE_READER_VOICE", "Microsoft Yunxi Online")
DEFAULT_VOICE_LANGUAGE = os.getenv("SUBTITLE_READER_LANGUAGE", "zh")
DEFAULT_SPEECH_RATE = 1.0
DEFAULT_SCREEN_WIDTH = 1920
DEFAULT_FONT_FAMILY = os.getenv("SUBTITLE_READER_FONT_FAMILY", "Microsoft YaHei")
DEFAULT_FONT_SIZE = 22
DEFAULT_COMPLETION_DELAY = 2.0
DEFAULT_STANDALONE = os.getenv("SUBTITLE_READER_STANDALONE", "false").lower() == "true"


@dataclass(frozen=True)
class ReaderConfig:
    """Everything a read needs besides its collaborators.

    RULES:
    - min_caption_width <= max_caption_width, both positive
    - max_unit_width positive; it bounds segmentation, not the window
    - speech_rate is a multiplier on the engine's own base rate
    - completion_delay is in seconds
    """

    target_voice_name: str = DEFAULT_VOICE_NAME
    voice_language: str = DEFAULT_VOICE_LANGUAGE
    speech_rate: float = DEFAULT_SPEECH_RATE
    min_caption_width: float = DEFAULT_SCREEN_WIDTH * MIN_CAPTION_RATIO
    max_caption_width: float = DEFAULT_SCREEN_WIDTH * MAX_CAPTION_RATIO
    max_unit_width: float = DEFAULT_SCREEN_WIDTH * MAX_UNIT_RATIO
    single_line_height: float = SINGLE_LINE_HEIGHT
    multi_line_height: float = MULTI_LINE_HEIGHT
    completion_delay: float = DEFAULT_COMPLETION_DELAY
    standalone: bool = DEFAULT_STANDALONE
    font_family: str = DEFAULT_FONT_FAMILY
    font_size: int = DEFAULT_FONT_SIZE
    width_padding: float = WIDTH_PADDING

    def __post_init__(self) -> None:
        if self.min_caption_width <= 0 or self.max_caption_width <= 0:
            raise ConfigurationError("Caption widths must be positive")
        if self.min_caption_width > self.max_caption_width:
            raise ConfigurationError(
                "Minimum caption width ({}) exceeds maximum ({})".format(
                    self.min_caption_width, self.max_caption_width
                )
            )
        if self.max_unit_width <= 0:
            raise ConfigurationError("Maximum unit width must be positive")
        if self.speech_rate <= 0:
            raise ConfigurationError("Speech rate must be positive, got {}".format(self.speech_rate))
        if self.single_line_height <= 0 or self.multi_line_height <= 0:
            raise ConfigurationError("Caption heights must be positive")
        if self.completion_delay < 0:
            raise ConfigurationError("Completion delay cannot be negative")
        if self.font_size <= 0:
            raise ConfigurationError("Font size must be positive")

    @classmethod
    def for_screen(cls, screen_width: float, **overrides) -> "ReaderConfig":
        """Derive caption and unit widths from a screen width.

        Explicit keyword overrides win over the derived values.
        """
        if screen_width <= 0:
            raise ConfigurationError("Screen width must be positive, got {}".format(screen_width))
        values = {
            "min_caption_width": screen_width * MIN_CAPTION_RATIO,
            "max_caption_width": screen_width * MAX_CAPTION_RATIO,
            "max_unit_width": screen_width * MAX_UNIT_RATIO,
        }
        values.update(overrides)
        return cls(**values)

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        screen_width: Optional[float] = None,
    ) -> "ReaderConfig":
        """Build a config from SUBTITLE_READER_* environment variables.

        WHY: Module constants are read once at import; the CLI and the
        server want the environment as it is when they start.

        HOW: Reads each variable, converts it, and delegates geometry to
        for_screen(). Unset variables fall back to the module defaults.

        RULES:
        - Unparseable numbers raise ConfigurationError naming the variable
        - SUBTITLE_READER_STANDALONE is true only for "true" (any case)
        - An explicit screen_width (e.g. from Tk) wins over the variable
        """
        env = os.environ if environ is None else environ
        return cls.for_screen(
            screen_width or _number(env, "SUBTITLE_READER_SCREEN_WIDTH", DEFAULT_SCREEN_WIDTH),
            target_voice_name=env.get("SUBTITLE_READER_VOICE", DEFAULT_VOICE_NAME),
            voice_language=env.get("SUBTITLE_READER_LANGUAGE", DEFAULT_VOICE_LANGUAGE),
            speech_rate=_number(env, "SUBTITLE_READER_RATE", DEFAULT_SPEECH_RATE),
            completion_delay=_number(env, "SUBTITLE_READER_COMPLETION_DELAY", DEFAULT_COMPLETION_DELAY),
            standalone=env.get("SUBTITLE_READER_STANDALONE", str(DEFAULT_STANDALONE)).lower() == "true",
            font_family=env.get("SUBTITLE_READER_FONT_FAMILY", DEFAULT_FONT_FAMILY),
            font_size=int(_number(env, "SUBTITLE_READER_FONT_SIZE", DEFAULT_FONT_SIZE)),
        )

    def with_overrides(self, **overrides) -> "ReaderConfig":
        """Copy with the given fields replaced; None values are skipped."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes) if changes else self


def _number(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError("{} must be a number, got {!r}".format(name, raw)) from None
