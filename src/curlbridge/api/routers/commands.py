"""Stateless command endpoints: parse, generate, validate, complete."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from curlbridge.api.deps import get_settings
from curlbridge.api.schemas import (
    CommandRequest,
    CompleteRequest,
    CompleteResponse,
    GenerateRequest,
    GenerateResponse,
    ParseResponse,
)
from curlbridge.completion.provider import CompletionProvider
from curlbridge.generator.codegen import CurlGenerator
from curlbridge.models.errors import ValidationResult
from curlbridge.parser.parser import parse_command
from curlbridge.parser.validator import validate_command
from curlbridge.settings import Settings

router = APIRouter()


@router.post("/parse", response_model=ParseResponse)
async def parse(
    body: CommandRequest,
    settings: Settings = Depends(get_settings),  # noqa: B008
) -> ParseResponse:
    """Parse a cURL command into a request model, with its diagnostics."""
    result = validate_command(body.command, settings.suggestion_max_distance)
    return ParseResponse(
        request=parse_command(body.command),
        valid=result.valid,
        errors=result.errors,
        warnings=result.warnings,
    )


@router.post("/generate", response_model=GenerateResponse)
async def generate(
    body: GenerateRequest,
    settings: Settings = Depends(get_settings),  # noqa: B008
) -> GenerateResponse:
    """Render a request model as a cURL command."""
    generator = CurlGenerator(settings.generator_line_width)
    command = generator.generate(
        body.request, multiline=body.multiline, include_prefix=body.include_prefix
    )
    return GenerateResponse(command=command)


@router.post("/validate", response_model=ValidationResult)
async def validate(
    body: CommandRequest,
    settings: Settings = Depends(get_settings),  # noqa: B008
) -> ValidationResult:
    """Validate a cURL command (syntax errors and semantic warnings)."""
    return validate_command(body.command, settings.suggestion_max_distance)


@router.post("/complete", response_model=CompleteResponse)
async def complete(
    body: CompleteRequest,
    settings: Settings = Depends(get_settings),  # noqa: B008
) -> CompleteResponse:
    """Suggest completions at a cursor position."""
    provider = CompletionProvider(
        limit=settings.completion_limit, secret_mask=settings.secret_mask
    )
    return CompleteResponse(
        suggestions=provider.complete(body.command, body.cursor, body.environment)
    )
