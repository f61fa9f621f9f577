"""FastAPI application exposing read plans and read sessions over HTTP.

WHY: In a browser the speech engine is the browser's own speech
synthesis, which reports word and sentence boundaries as offsets into
the text it speaks. The browser only needs this service to cut the text
into captions, give it the exact string to speak, and tell it which
caption to show as each boundary event arrives.

HOW: A single FastAPI app exposes plan, session, format, and health
endpoints. Plans are built with the same build_plan() the local reader
uses. Sessions live in an in-memory SessionStore; a lifespan task
expires ended sessions periodically.

RULES:
- All endpoints have OpenAPI descriptions on every parameter and response
- Error responses use a consistent ErrorResponse schema
- Unknown session → 404; progress on a session that stopped reading → 409;
  configuration errors → 400; store full → 429; body validation → 422
- The session store is a singleton created at import
- Python 3.9+ compatible (no match/case, no PEP 604 unions)
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import List, Optional, Tuple

from fastapi import FastAPI, HTTPException
from fastapi.responses import Response

from subtitle_reader import __version__
from subtitle_reader.adapters.markdown_renderer import MarkdownRenderer
from subtitle_reader.adapters.width import CellWidth
from subtitle_reader.config import ConfigurationError, ReaderConfig
from subtitle_reader.core.ir import CaptionLayout, ReadPlan, ReadSession
from subtitle_reader.formatters import FORMATTERS
from subtitle_reader.reader import build_plan, classify_caption
from subtitle_reader.server.models import (
    EndResponse,
    ErrorResponse,
    FormatInfo,
    HealthResponse,
    LayoutModel,
    PlanRequest,
    PlanResponse,
    ProgressRequest,
    ProgressResponse,
    SessionResponse,
    ShowUnitModel,
    UnitModel,
)
from subtitle_reader.server.sessions import (
    SessionEndedError,
    SessionEntry,
    SessionNotFoundError,
    SessionStore,
)

logger = logging.getLogger(__name__)

CLEANUP_INTERVAL_S = 300

# ---------------------------------------------------------------------------
# App and store setup
# ---------------------------------------------------------------------------

session_store = SessionStore()
document_renderer: Optional[MarkdownRenderer] = MarkdownRenderer()


async def _periodic_cleanup() -> None:
    """Expire ended sessions every 5 minutes."""
    while True:
        await asyncio.sleep(CLEANUP_INTERVAL_S)
        session_store.cleanup_expired()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start periodic cleanup on startup, cancel on shutdown."""
    task = asyncio.create_task(_periodic_cleanup())
    yield
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass


app = FastAPI(
    lifespan=lifespan,
    title="Subtitle Reader API",
    description=(
        "Build caption-synchronized read plans from markdown and track read "
        "sessions driven by a client-side speech engine. Create a session, "
        "speak its spoken form, and report progress offsets to learn which "
        "caption to show."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _layout_model(layout: CaptionLayout) -> LayoutModel:
    return LayoutModel(
        size_class=layout.size_class.value,
        width=layout.width,
        height=layout.height,
    )


def _plan_for(request: PlanRequest) -> Tuple[ReadPlan, List[CaptionLayout]]:
    """Build a plan and each unit's caption layout, mapping config errors to 400."""
    try:
        config = ReaderConfig.from_env(screen_width=request.screen_width).with_overrides(
            max_unit_width=request.max_unit_width,
        )
        measure = CellWidth.for_config(config)
        plan = build_plan(request.markdown, config, document_renderer, measure)
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    layouts = [classify_caption(measure(unit.text), config) for unit in plan.units]
    return plan, layouts


def _plan_to_response(plan: ReadPlan, layouts: List[CaptionLayout]) -> PlanResponse:
    units = []
    for index, unit in enumerate(plan.units):
        span = plan.span_of(index)
        units.append(UnitModel(
            index=index,
            text=unit.text,
            sanitized_text=unit.sanitized_text,
            start=unit.start,
            end=unit.end,
            span=list(span) if span is not None else None,
            layout=_layout_model(layouts[index]),
        ))
    return PlanResponse(
        spoken_form=plan.spoken_form,
        units=units,
        offset_index=list(plan.offset_index),
        mapped_count=plan.mapped_count,
    )


def _session_to_response(
    entry: SessionEntry,
    include_plan: bool = False,
) -> SessionResponse:
    session: ReadSession = entry.session
    current = session.current_unit_index
    return SessionResponse(
        id=session.id,
        state=session.state.value,
        current_unit_index=current,
        current_text=session.plan.units[current].text if current is not None else None,
        created_at=session.created_at,
        ended_at=session.ended_at,
        plan=_plan_to_response(session.plan, entry.layouts) if include_plan else None,
    )


def _get_entry_or_404(session_id: str) -> SessionEntry:
    entry = session_store.get_session(session_id)
    if entry is None:
        raise HTTPException(status_code=404, detail="Session not found: {}".format(session_id))
    return entry


# ---------------------------------------------------------------------------
# Endpoints: Plans
# ---------------------------------------------------------------------------


@app.post(
    "/plans",
    response_model=PlanResponse,
    tags=["plans"],
    summary="Build a read plan",
    description=(
        "Render the markdown, cut it into display units, and return the "
        "spoken form with its per-character unit index. No session is created."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Invalid configuration"},
    },
)
async def create_plan(request: PlanRequest) -> PlanResponse:
    plan, layouts = _plan_for(request)
    return _plan_to_response(plan, layouts)


# ---------------------------------------------------------------------------
# Endpoints: Sessions
# ---------------------------------------------------------------------------


@app.post(
    "/sessions",
    response_model=SessionResponse,
    status_code=201,
    tags=["sessions"],
    summary="Start a read session",
    description=(
        "Build a read plan and start a session for it. Speak the returned "
        "spoken_form and report boundary events to /sessions/{id}/progress."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Invalid configuration"},
        429: {"model": ErrorResponse, "description": "Too many sessions"},
    },
)
async def create_session(request: PlanRequest) -> SessionResponse:
    plan, layouts = _plan_for(request)
    try:
        entry = session_store.create_session(plan, layouts)
    except ValueError as e:
        raise HTTPException(status_code=429, detail=str(e))
    return _session_to_response(entry, include_plan=True)


@app.get(
    "/sessions/{session_id}",
    response_model=SessionResponse,
    tags=["sessions"],
    summary="Get session status",
    description="Return the session's state and the unit currently shown.",
    responses={
        404: {"model": ErrorResponse, "description": "Session not found"},
    },
)
async def get_session(session_id: str) -> SessionResponse:
    return _session_to_response(_get_entry_or_404(session_id))


@app.post(
    "/sessions/{session_id}/progress",
    response_model=ProgressResponse,
    tags=["sessions"],
    summary="Report a speech progress event",
    description=(
        "Apply one boundary event. Returns the unit to show when the caption "
        "changes; repeats within the current unit, offsets between units, and "
        "non-boundary kinds return a null effect."
    ),
    responses={
        404: {"model": ErrorResponse, "description": "Session not found"},
        409: {"model": ErrorResponse, "description": "Session is no longer reading"},
    },
)
async def report_progress(session_id: str, request: ProgressRequest) -> ProgressResponse:
    try:
        effect = session_store.record_progress(session_id, request.offset, request.kind)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except SessionEndedError as e:
        raise HTTPException(status_code=409, detail=str(e))

    entry = _get_entry_or_404(session_id)
    if effect is None:
        return ProgressResponse(current_unit_index=entry.session.current_unit_index)
    return ProgressResponse(
        effect=ShowUnitModel(
            unit_index=effect.unit_index,
            text=effect.text,
            layout=_layout_model(entry.layouts[effect.unit_index]),
        ),
        current_unit_index=effect.unit_index,
    )


@app.post(
    "/sessions/{session_id}/end",
    response_model=EndResponse,
    tags=["sessions"],
    summary="Report end of speech",
    description=(
        "Mark the session's speech as finished. completed is true on the "
        "first report only."
    ),
    responses={
        404: {"model": ErrorResponse, "description": "Session not found"},
    },
)
async def report_end(session_id: str) -> EndResponse:
    try:
        effect = session_store.record_end(session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    entry = _get_entry_or_404(session_id)
    return EndResponse(completed=effect is not None, state=entry.session.state.value)


@app.delete(
    "/sessions/{session_id}",
    status_code=204,
    tags=["sessions"],
    summary="Cancel a read session",
    description="Discard the session. Later reports for it return 404.",
    responses={
        404: {"model": ErrorResponse, "description": "Session not found"},
    },
)
async def delete_session(session_id: str) -> Response:
    if not session_store.cancel_session(session_id):
        raise HTTPException(status_code=404, detail="Session not found: {}".format(session_id))
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# Endpoints: Formats
# ---------------------------------------------------------------------------


@app.get(
    "/formats",
    response_model=List[FormatInfo],
    tags=["formats"],
    summary="List plan exporters",
    description="Exporters available to the CLI's --export flag.",
)
async def list_formats() -> List[FormatInfo]:
    return [
        FormatInfo(key=key, name=formatter_cls().name)
        for key, formatter_cls in sorted(FORMATTERS.items())
    ]


# ---------------------------------------------------------------------------
# Endpoints: Health
# ---------------------------------------------------------------------------


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
    description="Liveness and readiness check for load balancers and orchestrators.",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__, sessions=len(session_store))


def run_api():
    """Entry point for the subtitle-reader-api console script."""
    import uvicorn

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(app, host="0.0.0.0", port=8000)
