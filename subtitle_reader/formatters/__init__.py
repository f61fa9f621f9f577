"""Read plan exporter registry.

WHY: The CLI (--export) and the HTTP API need a single lookup to find an
exporter by key. A central dict makes adding one trivial: create the
class, import it here, add one line.

HOW: FORMATTERS maps string keys to exporter *classes* (not instances).
Callers instantiate as needed: ``formatter = FORMATTERS["plan_json"]()``.

RULES:
- Keys are snake_case identifiers (used in CLI flags and API requests)
- Values are BaseFormatter subclasses (not instances)
- Every exporter listed here must be importable without side effects
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from subtitle_reader.formatters.captions import CaptionsFormatter
from subtitle_reader.formatters.plan_json import PlanJsonFormatter
from subtitle_reader.formatters.spoken_text import SpokenTextFormatter

if TYPE_CHECKING:
    from subtitle_reader.formatters.base import BaseFormatter

FORMATTERS: dict[str, type[BaseFormatter]] = {
    "plan_json": PlanJsonFormatter,
    "spoken_text": SpokenTextFormatter,
    "captions": CaptionsFormatter,
}
