"""Tkinter caption window for Subtitle Reader.

WHY: The reader exists to put a caption on screen while a voice reads.
The terminal renderer is fine for debugging; this is the real thing: a
borderless, always-on-top strip at the bottom of the screen that shows
one display unit at a time and sizes itself to the text.

HOW: CaptionWindow implements CaptionRenderer. The speech engine calls
the reader from its own worker thread, so every renderer call only posts
a message to a queue. The Tk main loop polls that queue with .after()
and applies the messages to the widgets. Text is measured with
TkFontWidth so segmentation and sizing use the real caption font.

RULES:
- tkinter widgets are ONLY touched from the main thread
- The message queue is the ONLY channel from the speech thread to Tk
- .after() polls the queue every 100ms
- Loading animation: five dots; completion animation: five bars
- Closing the window stops any read in progress
"""

from __future__ import annotations

import argparse
import logging
import queue
import sys
import tkinter as tk
from typing import Any, List, Optional, Tuple

from subtitle_reader.adapters.base import COMPLETE, LOADING, CaptionRenderer
from subtitle_reader.adapters.markdown_renderer import MarkdownRenderer
from subtitle_reader.adapters.width import TkFontWidth
from subtitle_reader.config import ReaderConfig
from subtitle_reader.core.ir import CaptionLayout, SizeClass
from subtitle_reader.reader import SubtitleReader

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_WINDOW_TITLE = "Subtitle Reader"
_POLL_MS = 100
_FRAME_MS = 150
_BOTTOM_MARGIN = 60
_BACKGROUND = "#202020"
_FOREGROUND = "#f5f5f5"
_DIM = "#606060"

_ANIMATION_FRAMES = {
    LOADING: ["●" * (i + 1) + "○" * (4 - i) for i in range(5)],
    COMPLETE: ["▌" * 5],
}

# Message types for the caption queue
_TEXT_MSG = "text"
_ANIMATION_MSG = "animation"
_PLACE_MSG = "place"
_CLOSE_MSG = "close"


class CaptionWindow(CaptionRenderer):
    """Caption strip and window controller.

    All public CaptionRenderer methods are safe to call from any thread.
    """

    def __init__(self, root: tk.Tk, config: ReaderConfig) -> None:
        self._root = root
        self._config = config
        self._queue: "queue.Queue[Tuple[str, Any]]" = queue.Queue()
        self._animation: Optional[List[str]] = None
        self._frame = 0

        self._root.title(_WINDOW_TITLE)
        self._root.overrideredirect(True)
        self._root.attributes("-topmost", True)
        self._root.configure(background=_BACKGROUND)

        self._label = tk.Label(
            self._root,
            text="",
            font=(config.font_family, -config.font_size),
            foreground=_FOREGROUND,
            background=_BACKGROUND,
            justify=tk.CENTER,
        )
        self._label.pack(fill=tk.BOTH, expand=True)
        self._apply_geometry(CaptionLayout(
            SizeClass.SINGLE_LINE, config.min_caption_width, config.single_line_height
        ))
        self._root.after(_POLL_MS, self._poll)

    # ------------------------------------------------------------------
    # CaptionRenderer (any thread)
    # ------------------------------------------------------------------

    def show_text(self, text: str, layout: CaptionLayout) -> None:
        self._queue.put((_TEXT_MSG, (text, layout)))

    def show_animation(self, kind: str, layout: CaptionLayout) -> None:
        self._queue.put((_ANIMATION_MSG, (kind, layout)))

    def place_window(self, layout: CaptionLayout) -> None:
        self._queue.put((_PLACE_MSG, layout))

    def close(self, delay: float) -> None:
        self._queue.put((_CLOSE_MSG, delay))

    # ------------------------------------------------------------------
    # Main thread
    # ------------------------------------------------------------------

    def _poll(self) -> None:
        """Drain the caption queue and apply each message to the widgets."""
        try:
            while True:
                msg_type, msg_data = self._queue.get_nowait()

                if msg_type == _TEXT_MSG:
                    text, layout = msg_data
                    self._animation = None
                    if not self._config.standalone:
                        self._apply_geometry(layout)
                    self._label.configure(
                        text=text,
                        foreground=_FOREGROUND,
                        wraplength=int(layout.width) if layout.size_class == SizeClass.MULTI_LINE else 0,
                    )

                elif msg_type == _ANIMATION_MSG:
                    kind, layout = msg_data
                    if not self._config.standalone:
                        self._apply_geometry(layout)
                    self._animation = _ANIMATION_FRAMES.get(kind, [kind])
                    self._frame = 0
                    self._label.configure(foreground=_DIM, wraplength=0)
                    self._animate()

                elif msg_type == _PLACE_MSG:
                    self._apply_geometry(msg_data)

                elif msg_type == _CLOSE_MSG:
                    self._root.after(int(msg_data * 1000), self._root.destroy)

        except queue.Empty:
            pass

        self._root.after(_POLL_MS, self._poll)

    def _animate(self) -> None:
        frames = self._animation
        if not frames:
            return
        self._label.configure(text=frames[self._frame % len(frames)])
        self._frame += 1
        if len(frames) > 1:
            self._root.after(_FRAME_MS, self._animate_if_current, frames)

    def _animate_if_current(self, frames: List[str]) -> None:
        if self._animation is frames:
            self._animate()

    def _apply_geometry(self, layout: CaptionLayout) -> None:
        """Resize to the layout and centre the window at the screen bottom."""
        width = int(layout.width)
        height = int(layout.height)
        x = (self._root.winfo_screenwidth() - width) // 2
        y = self._root.winfo_screenheight() - height - _BOTTOM_MARGIN
        self._root.geometry("{}x{}+{}+{}".format(width, height, x, y))


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def run_window(args: argparse.Namespace) -> int:
    """Show the caption window and read args.input_file into it.

    The window follows each caption's layout either way. In standalone mode
    the reader drives placement itself and the window closes after the
    completion delay.
    """
    from subtitle_reader.adapters.speech import Pyttsx3SpeechEngine
    from subtitle_reader.cli import config_from_args, read_input

    try:
        markup, _stem, _dir = read_input(args.input_file)
        root = tk.Tk()
        config = config_from_args(args, screen_width=root.winfo_screenwidth())
    except ValueError as e:
        print("Error: {}".format(e), file=sys.stderr)
        return 1

    window = CaptionWindow(root, config)
    reader = SubtitleReader(
        config,
        window,
        Pyttsx3SpeechEngine(),
        measure=TkFontWidth.for_config(root, config),
        document_renderer=MarkdownRenderer(),
    )

    def _on_close() -> None:
        reader.stop()
        root.destroy()

    root.protocol("WM_DELETE_WINDOW", _on_close)
    root.bind("<Escape>", lambda event: _on_close())
    root.after(0, reader.read, markup)
    root.mainloop()
    reader.stop()
    return 0


def main(argv: Optional[List[str]] = None) -> None:
    """Launch the caption window.

    RULES:
    - Accepts the same arguments as the CLI
    - Blocks until the window is closed
    - Must be called from the main thread
    """
    from subtitle_reader.cli import build_parser

    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    sys.exit(run_window(args))


if __name__ == "__main__":
    main()
