"""Pydantic request/response models for the HTTP API.

WHY: A browser that uses its own speech synthesis can still use this
engine: it asks for a read plan, speaks the spoken form, and reports
progress back. The endpoints need typed schemas for request validation,
response serialization, and automatic OpenAPI documentation.

HOW: One model per request/response shape. All models include Field
descriptions for rich OpenAPI docs. Effects and plans are converted from
the core dataclasses in server/app.py, never exposed directly.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- Offsets and spans refer to the spoken form, half-open
- A unit index of -1 never appears in a response; "no unit" is null
- Python 3.9+ compatible (no PEP 604 unions, use Optional from typing)
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class PlanRequest(BaseModel):
    """Markup to plan, plus optional geometry overrides."""

    markdown: str = Field(description="Markdown document to read.")
    screen_width: Optional[float] = Field(
        default=None,
        gt=0,
        description="Screen width in pixels; caption and unit widths derive from it.",
    )
    max_unit_width: Optional[float] = Field(
        default=None,
        gt=0,
        description="Maximum display unit width in pixels (overrides the derived value).",
    )


class ProgressRequest(BaseModel):
    """One progress event reported by the client's speech engine."""

    offset: int = Field(description="Character offset into the session's spoken form.")
    kind: str = Field(
        default="word",
        description="Event kind. Only 'word' and 'sentence' can change the caption.",
    )


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class LayoutModel(BaseModel):
    """Caption geometry for one piece of text."""

    size_class: str = Field(description="'single-line' or 'multi-line'.")
    width: float = Field(description="Caption width in pixels.")
    height: float = Field(description="Caption height in pixels.")


class UnitModel(BaseModel):
    """One display unit of a read plan."""

    index: int = Field(description="Unit index, in display order.")
    text: str = Field(description="Caption text to show.")
    sanitized_text: str = Field(description="Search key used to align the unit.")
    start: int = Field(description="Start offset within the source line.")
    end: int = Field(description="End offset within the source line (exclusive).")
    span: Optional[List[int]] = Field(
        default=None,
        description="[start, end) in the spoken form, or null if the unit could not be aligned.",
    )
    layout: LayoutModel = Field(description="Caption geometry for this unit.")


class PlanResponse(BaseModel):
    """A complete read plan."""

    spoken_form: str = Field(description="Exact text to hand to the speech engine.")
    units: List[UnitModel] = Field(description="Display units in order.")
    offset_index: List[int] = Field(
        description="Per-character unit index for the spoken form; -1 where no unit applies."
    )
    mapped_count: int = Field(description="Number of units aligned to the spoken form.")


class SessionResponse(BaseModel):
    """State of one read session."""

    id: str = Field(description="Session identifier.")
    state: str = Field(description="'reading', 'ended', or 'cancelled'.")
    current_unit_index: Optional[int] = Field(
        default=None, description="Index of the unit currently shown, or null before the first."
    )
    current_text: Optional[str] = Field(
        default=None, description="Text of the unit currently shown."
    )
    created_at: float = Field(description="Creation timestamp (Unix epoch seconds).")
    ended_at: Optional[float] = Field(
        default=None, description="Timestamp the session stopped reading, if it has."
    )
    plan: Optional[PlanResponse] = Field(
        default=None, description="The session's read plan (returned on creation only)."
    )


class ShowUnitModel(BaseModel):
    """Effect: show this unit now."""

    unit_index: int = Field(description="Index of the unit to show.")
    text: str = Field(description="Caption text.")
    layout: LayoutModel = Field(description="Caption geometry for the text.")


class ProgressResponse(BaseModel):
    """Result of applying one progress event."""

    effect: Optional[ShowUnitModel] = Field(
        default=None,
        description="Unit to show, or null if the caption should not change.",
    )
    current_unit_index: Optional[int] = Field(
        default=None, description="Current unit after the event."
    )


class EndResponse(BaseModel):
    """Result of reporting end of speech."""

    completed: bool = Field(
        description="True on the first end report only; later reports have no effect."
    )
    state: str = Field(description="Session state after the report.")


class FormatInfo(BaseModel):
    """Description of an available plan exporter."""

    key: str = Field(description="Exporter identifier used in requests and --export.")
    name: str = Field(description="Human-readable exporter name.")


class ErrorResponse(BaseModel):
    """Standard error response body.

    RULES:
    - detail is always a human-readable error message
    """

    detail: str = Field(description="Human-readable error description.")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Service health status.", json_schema_extra={"example": "ok"})
    version: str = Field(description="API version string.", json_schema_extra={"example": "0.1.0"})
    sessions: int = Field(description="Number of sessions currently held in memory.")
