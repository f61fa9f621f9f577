"""Spoken text exporter: the exact string handed to the speech engine.

RULES:
- Content is the spoken form verbatim, blanked link runs included
- A single trailing newline is added to non-empty output
- Output suffix: "-spoken.txt"
"""

from __future__ import annotations

from typing import List

from subtitle_reader.core.ir import ReadPlan
from subtitle_reader.formatters.base import BaseFormatter, FormatterOutput


class SpokenTextFormatter(BaseFormatter):
    @property
    def name(self) -> str:
        return "Spoken Text"

    def format(self, plan: ReadPlan) -> List[FormatterOutput]:
        content = plan.spoken_form
        if content:
            content += "\n"
        return [FormatterOutput(suffix="-spoken.txt", content=content, media_type="text/plain")]
