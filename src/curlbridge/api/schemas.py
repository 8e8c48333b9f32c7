"""API request/response Pydantic schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from curlbridge.completion.provider import Suggestion
from curlbridge.grammar.flags import FlagSpec
from curlbridge.models.environment import Environment
from curlbridge.models.errors import Diagnostic
from curlbridge.models.request import RequestModel
from curlbridge.parser.resolver import VariableSpan
from curlbridge.service.editor import Surface


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str = ""


# ---------------------------------------------------------------------------
# Stateless command endpoints
# ---------------------------------------------------------------------------


class CommandRequest(BaseModel):
    """Request body for POST /commands/parse and /commands/validate."""

    command: str = Field(description="cURL command text")


class ParseResponse(BaseModel):
    """Response body for POST /commands/parse."""

    request: RequestModel
    valid: bool
    errors: list[Diagnostic] = []
    warnings: list[Diagnostic] = []


class GenerateRequest(BaseModel):
    """Request body for POST /commands/generate."""

    request: RequestModel
    multiline: bool | None = Field(
        None, description="Force wrapping on/off; by default wraps past the line width"
    )
    include_prefix: bool = True


class GenerateResponse(BaseModel):
    command: str


class CompleteRequest(BaseModel):
    """Request body for POST /commands/complete."""

    command: str
    cursor: int = Field(description="Cursor offset in the command text (clamped)")
    environment: Environment | None = None


class CompleteResponse(BaseModel):
    suggestions: list[Suggestion] = []


# ---------------------------------------------------------------------------
# Variables
# ---------------------------------------------------------------------------


class VariablesRequest(BaseModel):
    """Request body for POST /variables/analyze and /variables/interpolate."""

    text: str
    environment: Environment | None = None


class VariableSpanResponse(BaseModel):
    """A ``{{name}}`` occurrence; secret values are masked."""

    name: str
    start: int
    end: int
    resolved: bool
    value: str | None = None
    secret: bool = False

    @classmethod
    def from_span(cls, span: VariableSpan, mask: str) -> VariableSpanResponse:
        value = mask if span.secret and span.value else span.value
        return cls(
            name=span.name,
            start=span.start,
            end=span.end,
            resolved=span.resolved,
            value=value,
            secret=span.secret,
        )


class AnalyzeResponse(BaseModel):
    variables: list[VariableSpanResponse] = []


class InterpolateResponse(BaseModel):
    """Response body for POST /variables/interpolate."""

    original: str
    interpolated: str
    has_variables: bool
    all_resolved: bool
    unresolved_count: int
    variables: list[VariableSpanResponse] = []


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------


class SessionCreateRequest(BaseModel):
    """Request body for POST /sessions."""

    metadata: dict[str, str] = {}
    text: str = ""
    environment: Environment | None = None


class SessionResponse(BaseModel):
    """Response for session info."""

    session_id: str
    created_at: datetime
    last_accessed_at: datetime
    generation: int = 0
    surface: Surface = Surface.TEXT
    environment_name: str | None = None
    metadata: dict[str, str] = {}


class SessionListResponse(BaseModel):
    """Response for GET /sessions."""

    sessions: list[SessionResponse] = []


class TextUpdateRequest(BaseModel):
    """Request body for PUT /sessions/{session_id}/text."""

    text: str
    expected_generation: int | None = Field(
        None, description="Reject the edit with 409 unless the session is at this generation"
    )


class RequestUpdateRequest(BaseModel):
    """Request body for PUT /sessions/{session_id}/request (visual builder edit)."""

    request: RequestModel
    expected_generation: int | None = None


class EditResponse(BaseModel):
    generation: int
    surface: Surface
    text: str


class EnvironmentUpdateRequest(BaseModel):
    """Request body for PUT /sessions/{session_id}/environment.

    Either a structured ``environment`` or the text of a Postman export in
    ``environment_document``; both empty clears the environment.
    """

    environment: Environment | None = None
    environment_document: str | None = None


class EnvironmentResponse(BaseModel):
    name: str | None = None
    variable_count: int = 0
    fingerprint: str = ""


class AnalysisResponse(BaseModel):
    """Response body for GET /sessions/{session_id}/analysis."""

    generation: int
    surface: Surface
    text: str
    valid: bool
    diagnostics: list[Diagnostic] = []
    variables: list[VariableSpanResponse] = []
    request: RequestModel
    interpolated: str


class SessionCompleteRequest(BaseModel):
    cursor: int


# ---------------------------------------------------------------------------
# Reference
# ---------------------------------------------------------------------------


class FlagInfo(BaseModel):
    """One entry of the flag grammar table."""

    short: str | None = None
    long: str | None = None
    name: str
    arity: int
    argument_kind: str
    description: str
    example: str | None = None
    tip: str | None = None
    repeatable: bool = False
    documentation: str = ""

    @classmethod
    def from_spec(cls, spec: FlagSpec, documentation: str = "") -> FlagInfo:
        return cls(
            short=spec.short,
            long=spec.long,
            name=spec.name,
            arity=spec.arity,
            argument_kind=spec.argument_kind.value,
            description=spec.description,
            example=spec.example,
            tip=spec.tip,
            repeatable=spec.repeatable,
            documentation=documentation,
        )


class ReferenceResponse(BaseModel):
    """Response for GET /reference/flags."""

    reference: str = Field(description="cURL command reference text (markdown)")
    flags: list[FlagInfo] = []
