"""Width oracles: measure a caption string in pixels.

WHY: Segmentation budgets and caption geometry are both expressed in
pixels, but only a GUI process has real font metrics. The CLI, the HTTP
API, and the tests need a deterministic stand-in that still knows wide
CJK glyphs take twice the room of Latin ones.

HOW: CellWidth counts monospace cells (caption_units.visible_width) and
scales them by half the font size. TkFontWidth asks tkinter.font for the
real advance width. Both add the caption padding to every measurement.

RULES:
- Same string, same oracle instance: same width
- The padding is part of every measurement, including the empty string
"""

from __future__ import annotations

from caption_units import visible_width
from subtitle_reader.config import ReaderConfig


class CellWidth:
    """Font-free oracle: cells x px-per-cell + padding."""

    def __init__(self, cell_px: float, padding: float = 0.0) -> None:
        self.cell_px = cell_px
        self.padding = padding

    @classmethod
    def for_config(cls, config: ReaderConfig) -> "CellWidth":
        """Half an em per cell, so a wide glyph is one em."""
        return cls(cell_px=config.font_size / 2.0, padding=config.width_padding)

    def __call__(self, text: str) -> float:
        return visible_width(text) * self.cell_px + self.padding


class TkFontWidth:
    """Oracle backed by tkinter.font.Font.measure().

    Needs a Tk root to exist before construction. Only the GUI builds one.
    """

    def __init__(self, root, family: str, size: int, padding: float = 0.0) -> None:
        from tkinter import font as tkfont

        # Negative sizes are pixels in Tk.
        self.font = tkfont.Font(root=root, family=family, size=-abs(size))
        self.padding = padding

    @classmethod
    def for_config(cls, root, config: ReaderConfig) -> "TkFontWidth":
        return cls(root, config.font_family, config.font_size, config.width_padding)

    def __call__(self, text: str) -> float:
        return self.font.measure(text) + self.padding
