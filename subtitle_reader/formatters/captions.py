"""Caption list exporter.

WHY: Reviewing segmentation means reading the captions in order without
waiting for the voice. One display unit per line shows at a glance
where the tiers cut and which units never got mapped.

HOW: Writes each unit's display text on its own line. Units with no
spoken-form span are prefixed with "~ " so alignment misses stand out.

RULES:
- One unit per line, in display order
- Unmapped units are marked, never dropped
- Output suffix: "-captions.txt"
"""

from __future__ import annotations

from typing import List

from subtitle_reader.core.ir import NO_UNIT, ReadPlan
from subtitle_reader.formatters.base import BaseFormatter, FormatterOutput

UNMAPPED_MARKER = "~ "


class CaptionsFormatter(BaseFormatter):
    """Exporter that lists display units one per line."""

    @property
    def name(self) -> str:
        return "Caption List"

    def format(self, plan: ReadPlan) -> List[FormatterOutput]:
        mapped = set(plan.offset_index)
        mapped.discard(NO_UNIT)
        lines: List[str] = []
        for index, unit in enumerate(plan.units):
            prefix = "" if index in mapped else UNMAPPED_MARKER
            lines.append(prefix + unit.text)

        content = "\n".join(lines)
        if content:
            content += "\n"
        return [FormatterOutput(suffix="-captions.txt", content=content, media_type="text/plain")]
