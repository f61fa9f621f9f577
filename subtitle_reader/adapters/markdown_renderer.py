"""Markdown-to-HTML document renderer.

Uses the markdown package with the "extra" and "sane_lists" extensions,
the same call shape as any markdown-to-HTML preview: one string in, one
HTML string out. Line extraction happens afterwards in core.lines.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

import markdown

from subtitle_reader.adapters.base import DocumentRenderer

DEFAULT_EXTENSIONS = ("extra", "sane_lists")


class MarkdownRenderer(DocumentRenderer):
    """Render markdown with a fixed extension list."""

    def __init__(self, extensions: Optional[Iterable[str]] = None) -> None:
        self.extensions: List[str] = list(DEFAULT_EXTENSIONS if extensions is None else extensions)

    def render(self, markup: str) -> str:
        return markdown.markdown(markup, extensions=self.extensions)
