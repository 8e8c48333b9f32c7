"""Command parsing, validation and variable resolution."""

from curlbridge.parser.loader import EnvironmentLoader, EnvironmentLoadError
from curlbridge.parser.parser import CommandParser, parse, parse_command
from curlbridge.parser.resolver import (
    HighlightSegment,
    InterpolationPreview,
    VariableResolver,
    VariableSpan,
    analyze,
    interpolate,
)
from curlbridge.parser.validator import CommandValidator, validate, validate_command

__all__ = [
    "CommandParser",
    "CommandValidator",
    "EnvironmentLoadError",
    "EnvironmentLoader",
    "HighlightSegment",
    "InterpolationPreview",
    "VariableResolver",
    "VariableSpan",
    "analyze",
    "interpolate",
    "parse",
    "parse_command",
    "validate",
    "validate_command",
]
