"""Completion provider for flags, methods, headers and variables."""

from curlbridge.completion.provider import (
    CompletionProvider,
    Suggestion,
    SuggestionKind,
    complete,
    flag_documentation,
)

__all__ = [
    "CompletionProvider",
    "Suggestion",
    "SuggestionKind",
    "complete",
    "flag_documentation",
]
