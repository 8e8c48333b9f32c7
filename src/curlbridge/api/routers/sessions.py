"""Session-scoped endpoints for editor buffers, environments and analysis."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException

from curlbridge.api.deps import get_session_manager, get_settings, is_session_list_disabled
from curlbridge.api.schemas import (
    AnalysisResponse,
    CompleteResponse,
    EditResponse,
    EnvironmentResponse,
    EnvironmentUpdateRequest,
    RequestUpdateRequest,
    SessionCompleteRequest,
    SessionCreateRequest,
    SessionListResponse,
    SessionResponse,
    TextUpdateRequest,
    VariableSpanResponse,
)
from curlbridge.parser.loader import EnvironmentLoader, EnvironmentLoadError
from curlbridge.service.editor import EditorSession, StaleGenerationError
from curlbridge.service.session_manager import SessionInfo, SessionManager, SessionNotFoundError
from curlbridge.settings import Settings

router = APIRouter()


# -- helpers -----------------------------------------------------------------


def _get_editor(session_id: str, mgr: SessionManager) -> EditorSession:
    """Resolve session_id to EditorSession, raise 404 if missing/expired."""
    try:
        return mgr.get_editor(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found") from None


def _session_response(info: SessionInfo) -> SessionResponse:
    """Convert a SessionInfo dataclass to a Pydantic response."""
    return SessionResponse(**asdict(info))


def _stale(exc: StaleGenerationError) -> HTTPException:
    return HTTPException(
        status_code=409,
        detail={
            "message": str(exc),
            "expected_generation": exc.expected,
            "current_generation": exc.current,
        },
    )


# -- session CRUD ------------------------------------------------------------


@router.post("", response_model=SessionResponse, status_code=201)
async def create_session(
    body: SessionCreateRequest | None = None,
    mgr: SessionManager = Depends(get_session_manager),  # noqa: B008
) -> SessionResponse:
    """Create a new editor session."""
    if body is None:
        body = SessionCreateRequest()
    info = mgr.create_session(
        metadata=body.metadata, text=body.text, environment=body.environment
    )
    return _session_response(info)


@router.get("", response_model=SessionListResponse)
async def list_sessions(
    mgr: SessionManager = Depends(get_session_manager),  # noqa: B008
) -> SessionListResponse:
    """List all active sessions."""
    if is_session_list_disabled():
        raise HTTPException(status_code=403, detail="Session listing is disabled")
    sessions = mgr.list_sessions()
    return SessionListResponse(sessions=[_session_response(s) for s in sessions])


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(
    session_id: str,
    mgr: SessionManager = Depends(get_session_manager),  # noqa: B008
) -> SessionResponse:
    """Get info for a specific session."""
    try:
        info = mgr.get_session(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found") from None
    return _session_response(info)


@router.delete("/{session_id}", status_code=204)
async def close_session(
    session_id: str,
    mgr: SessionManager = Depends(get_session_manager),  # noqa: B008
) -> None:
    """Close a session and cancel its pending analysis."""
    try:
        mgr.close_session(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found") from None


# -- editing -----------------------------------------------------------------


@router.put("/{session_id}/text", response_model=EditResponse)
async def update_text(
    session_id: str,
    body: TextUpdateRequest,
    mgr: SessionManager = Depends(get_session_manager),  # noqa: B008
) -> EditResponse:
    """Replace the command text (text editor edit)."""
    editor = _get_editor(session_id, mgr)
    try:
        generation = editor.update_text(body.text, expected_generation=body.expected_generation)
    except StaleGenerationError as exc:
        raise _stale(exc) from None
    return EditResponse(generation=generation, surface=editor.surface, text=editor.text)


@router.put("/{session_id}/request", response_model=EditResponse)
async def update_request(
    session_id: str,
    body: RequestUpdateRequest,
    mgr: SessionManager = Depends(get_session_manager),  # noqa: B008
) -> EditResponse:
    """Apply a visual-builder edit; the command text is regenerated."""
    editor = _get_editor(session_id, mgr)
    try:
        text = editor.update_request(body.request, expected_generation=body.expected_generation)
    except StaleGenerationError as exc:
        raise _stale(exc) from None
    return EditResponse(generation=editor.generation, surface=editor.surface, text=text)


@router.put("/{session_id}/environment", response_model=EnvironmentResponse)
async def update_environment(
    session_id: str,
    body: EnvironmentUpdateRequest,
    mgr: SessionManager = Depends(get_session_manager),  # noqa: B008
) -> EnvironmentResponse:
    """Set, replace or clear the session's active environment."""
    editor = _get_editor(session_id, mgr)
    environment = body.environment
    if body.environment_document is not None:
        try:
            environment = EnvironmentLoader().load_string(body.environment_document)
        except EnvironmentLoadError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from None
    editor.set_environment(environment)
    if environment is None:
        return EnvironmentResponse()
    return EnvironmentResponse(
        name=environment.name,
        variable_count=len(environment.values),
        fingerprint=environment.fingerprint(),
    )


# -- analysis ----------------------------------------------------------------


@router.get("/{session_id}/analysis", response_model=AnalysisResponse)
async def get_analysis(
    session_id: str,
    mgr: SessionManager = Depends(get_session_manager),  # noqa: B008
    settings: Settings = Depends(get_settings),  # noqa: B008
) -> AnalysisResponse:
    """Diagnostics, variables and the parsed request for the current text."""
    editor = _get_editor(session_id, mgr)
    analysis = editor.analyze()
    return AnalysisResponse(
        generation=analysis.generation,
        surface=analysis.surface,
        text=analysis.text,
        valid=not analysis.has_errors,
        diagnostics=analysis.diagnostics,
        variables=[
            VariableSpanResponse.from_span(s, settings.secret_mask) for s in analysis.variables
        ],
        request=analysis.request,
        interpolated=editor.interpolated_text(),
    )


@router.post("/{session_id}/complete", response_model=CompleteResponse)
async def complete(
    session_id: str,
    body: SessionCompleteRequest,
    mgr: SessionManager = Depends(get_session_manager),  # noqa: B008
) -> CompleteResponse:
    """Suggest completions at a cursor position in the session's text."""
    editor = _get_editor(session_id, mgr)
    return CompleteResponse(suggestions=editor.complete(body.cursor))
