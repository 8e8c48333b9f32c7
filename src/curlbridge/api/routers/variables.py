"""Variable endpoints: analyze and interpolate ``{{name}}`` placeholders."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from curlbridge.api.deps import get_settings
from curlbridge.api.schemas import (
    AnalyzeResponse,
    InterpolateResponse,
    VariableSpanResponse,
    VariablesRequest,
)
from curlbridge.parser.resolver import VariableResolver
from curlbridge.settings import Settings

router = APIRouter()

_resolver = VariableResolver()


@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze(
    body: VariablesRequest,
    settings: Settings = Depends(get_settings),  # noqa: B008
) -> AnalyzeResponse:
    """Locate placeholders and report whether each resolves."""
    spans = _resolver.analyze(body.text, body.environment)
    return AnalyzeResponse(
        variables=[VariableSpanResponse.from_span(s, settings.secret_mask) for s in spans]
    )


@router.post("/interpolate", response_model=InterpolateResponse)
async def interpolate(
    body: VariablesRequest,
    settings: Settings = Depends(get_settings),  # noqa: B008
) -> InterpolateResponse:
    """Substitute resolved placeholders; unresolved ones are left as written."""
    preview = _resolver.preview(body.text, body.environment)
    return InterpolateResponse(
        original=preview.original,
        interpolated=preview.interpolated,
        has_variables=preview.has_variables,
        all_resolved=preview.all_resolved,
        unresolved_count=preview.unresolved_count,
        variables=[
            VariableSpanResponse.from_span(s, settings.secret_mask) for s in preview.variables
        ],
    )
