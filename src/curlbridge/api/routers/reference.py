"""Reference endpoints: GET /reference/flags and GET /reference/flags/{flag}."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException

from curlbridge.api.schemas import FlagInfo, ReferenceResponse
from curlbridge.completion.provider import flag_documentation
from curlbridge.flag_reference import CURL_REFERENCE
from curlbridge.grammar.registry import FlagRegistry, UnknownFlagError

router = APIRouter()


@router.get("/flags", response_model=ReferenceResponse)
async def get_flag_reference() -> ReferenceResponse:
    """Return the cURL command reference and the full flag table."""
    return ReferenceResponse(
        reference=CURL_REFERENCE,
        flags=[FlagInfo.from_spec(spec) for spec in FlagRegistry.all_specs()],
    )


@router.get("/flags/{flag}", response_model=FlagInfo)
async def get_flag(flag: str) -> FlagInfo:
    """Describe one flag by spelling (``-H``, ``--header``) or bare name (``header``)."""
    try:
        spec = FlagRegistry.get(flag)
    except UnknownFlagError as exc:
        raise HTTPException(
            status_code=404,
            detail={"message": str(exc), "suggestions": exc.suggestions},
        ) from None
    return FlagInfo.from_spec(spec, documentation=flag_documentation(spec))
