"""Terminal caption renderer.

Prints each shown unit on its own stdout line so captions can be piped
or followed in a terminal. Animations become short status markers on
stderr. Window control calls are ignored.
"""

from __future__ import annotations

import sys
from typing import TextIO

from subtitle_reader.adapters.base import COMPLETE, LOADING, CaptionRenderer
from subtitle_reader.core.ir import CaptionLayout

ANIMATION_MARKERS = {
    LOADING: "[. . . . .]",
    COMPLETE: "[| | | | |]",
}


class ConsoleCaptionRenderer(CaptionRenderer):
    """CaptionRenderer that writes to text streams."""

    def __init__(self, out: TextIO = None, status: TextIO = None) -> None:
        self.out = out if out is not None else sys.stdout
        self.status = status if status is not None else sys.stderr

    def show_text(self, text: str, layout: CaptionLayout) -> None:
        print(text, file=self.out, flush=True)

    def show_animation(self, kind: str, layout: CaptionLayout) -> None:
        print(ANIMATION_MARKERS.get(kind, kind), file=self.status, flush=True)
