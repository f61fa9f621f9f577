"""Read plan JSON exporter.

WHY: The offset index is the part of a read most likely to go wrong
(alignment misses, seams in the wrong place) and the hardest to see.
A JSON dump of units, spoken form, and index makes every mapping
inspectable and diffable between runs.

HOW: Builds a plain dict from the ReadPlan, with each unit's mapped
spoken-form span precomputed, validates it against
read_plan_schema.json with jsonschema, and serializes it.

RULES:
- Schema validation is mandatory, raises on invalid output
- "span" is [start, end) in the spoken form, or null for unmapped units
- Output suffix is "-plan.json"
- Non-ASCII text is written as-is (ensure_ascii=False)
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema

from subtitle_reader.core.ir import ReadPlan
from subtitle_reader.formatters.base import BaseFormatter, FormatterOutput

PLAN_FORMAT_VERSION = "1.0"

_SCHEMA_PATH = Path(__file__).resolve().parent / "read_plan_schema.json"


def _load_schema() -> dict[str, Any]:
    """Load the read plan JSON schema from disk.

    Cached at module level after first call to avoid repeated I/O.
    """
    with open(_SCHEMA_PATH, encoding="utf-8") as f:
        return json.load(f)


_CACHED_SCHEMA: dict[str, Any] | None = None


def _get_schema() -> dict[str, Any]:
    global _CACHED_SCHEMA
    if _CACHED_SCHEMA is None:
        _CACHED_SCHEMA = _load_schema()
    return _CACHED_SCHEMA


def plan_to_dict(plan: ReadPlan) -> dict[str, Any]:
    """Convert a ReadPlan into the exported JSON structure."""
    units = []
    for index, unit in enumerate(plan.units):
        span = plan.span_of(index)
        units.append({
            "index": index,
            "text": unit.text,
            "sanitized_text": unit.sanitized_text,
            "start": unit.start,
            "end": unit.end,
            "span": list(span) if span is not None else None,
        })
    return {
        "version": PLAN_FORMAT_VERSION,
        "spoken_form": plan.spoken_form,
        "units": units,
        "offset_index": list(plan.offset_index),
    }


class PlanJsonFormatter(BaseFormatter):
    """Exporter for the full read plan as validated JSON."""

    @property
    def name(self) -> str:
        return "Read Plan JSON"

    def format(self, plan: ReadPlan) -> list[FormatterOutput]:
        """Serialize the plan.

        Raises:
            jsonschema.ValidationError: If the generated JSON does not
                conform to the read plan schema.
        """
        output = plan_to_dict(plan)
        jsonschema.validate(instance=output, schema=_get_schema())
        return [
            FormatterOutput(
                suffix="-plan.json",
                content=json.dumps(output, indent=2, ensure_ascii=False),
                media_type="application/json",
            )
        ]
