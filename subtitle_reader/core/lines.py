"""Line extraction from a rendered document.

WHY: Segmentation works on plain-text lines, but the reader is handed
markup. The rendered HTML keeps block structure, and its text nodes in
document order are exactly the lines a person would read.

HOW: BeautifulSoup ("html.parser") walks every text node. Structural
nodes (comments, doctype, CDATA, processing instructions) and the text of
script/style elements are skipped. Each remaining node is split on its
embedded line breaks, every piece is trimmed, and empty pieces are dropped.

RULES:
- Source order is preserved exactly
- Inline elements split a paragraph into several text nodes; adjacent
  inline nodes on the same source line are joined back into one line
- No sanitizing happens here
"""

from __future__ import annotations

from typing import List

from bs4 import BeautifulSoup
from bs4.element import (
    CData,
    Comment,
    Declaration,
    Doctype,
    NavigableString,
    ProcessingInstruction,
)

SKIPPED_PARENTS = frozenset({"script", "style", "head", "title"})

BLOCK_TAGS = frozenset({
    "address", "article", "aside", "blockquote", "br", "dd", "div", "dl", "dt",
    "figcaption", "figure", "footer", "h1", "h2", "h3", "h4", "h5", "h6",
    "header", "hr", "li", "main", "nav", "ol", "p", "pre", "section", "table",
    "tbody", "td", "tfoot", "th", "thead", "tr", "ul",
})

_STRUCTURAL = (Comment, Doctype, Declaration, CData, ProcessingInstruction)


def lines_of(html: str) -> List[str]:
    """Extract ordered, trimmed, non-empty text lines from rendered HTML.

    Args:
        html: Rendered document, typically MarkdownRenderer output.

    Returns:
        Plain-text lines in document order.
    """
    soup = BeautifulSoup(html, "html.parser")
    lines: List[str] = []
    pending = ""

    for node in soup.descendants:
        if not isinstance(node, NavigableString):
            if node.name in BLOCK_TAGS:
                pending = _flush(pending, lines)
            continue
        if isinstance(node, _STRUCTURAL):
            continue
        if node.parent is not None and node.parent.name in SKIPPED_PARENTS:
            continue

        pieces = str(node).split("\n")
        pending += pieces[0]
        for piece in pieces[1:]:
            pending = _flush(pending, lines)
            pending = piece

    _flush(pending, lines)
    return lines


def _flush(pending: str, lines: List[str]) -> str:
    text = pending.strip()
    if text:
        lines.append(text)
    return ""
