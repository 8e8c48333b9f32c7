"""cURL flag grammar table."""

from curlbridge.grammar.flags import (
    BODY_EFFECTS,
    COMMON_HEADERS,
    FLAG_SPECS,
    HTTP_METHODS,
    METHOD_DESCRIPTIONS,
    ArgumentKind,
    FlagEffect,
    FlagSpec,
)
from curlbridge.grammar.registry import FlagRegistry, UnknownFlagError, lookup

__all__ = [
    "BODY_EFFECTS",
    "COMMON_HEADERS",
    "FLAG_SPECS",
    "HTTP_METHODS",
    "METHOD_DESCRIPTIONS",
    "ArgumentKind",
    "FlagEffect",
    "FlagRegistry",
    "FlagSpec",
    "UnknownFlagError",
    "lookup",
]
