"""Abstract base exporter and output container.

WHY: A read plan is easiest to debug by looking at it: what the speech
engine will hear, which captions will appear, and which characters map
to which caption. Each of those views is a small exporter over the same
ReadPlan, so the CLI and the HTTP API can list and run them generically.

HOW: BaseFormatter is an ABC with a ``name`` property and a ``format()``
method. FormatterOutput bundles a file suffix with its content and MIME type.

RULES:
- Subclasses MUST implement ``name`` and ``format()``
- ``format()`` returns a list (every current exporter returns one item)
- ``suffix`` starts with a hyphen, e.g. ``"-plan.json"``
- The caller is responsible for prepending the source filename stem
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from subtitle_reader.core.ir import ReadPlan


@dataclass
class FormatterOutput:
    """One output file produced by an exporter.

    Attributes:
        suffix: File suffix appended to the source stem,
                e.g. ``"-plan.json"`` → ``"notes-plan.json"``.
        content: The file content.
        media_type: MIME type for the content, e.g. ``"application/json"``.
    """

    suffix: str
    content: str
    media_type: str


class BaseFormatter(ABC):
    """Abstract base for all read-plan exporters.

    To add a new exporter:
    1. Create a new file in formatters/
    2. Subclass BaseFormatter
    3. Implement format() and name
    4. Register in FORMATTERS dict in formatters/__init__.py
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable exporter name, e.g. 'Read Plan JSON'."""

    @abstractmethod
    def format(self, plan: ReadPlan) -> list[FormatterOutput]:
        """Render the read plan into one or more output files."""
