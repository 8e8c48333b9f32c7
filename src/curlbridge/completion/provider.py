"""Context-aware completion for cURL command text."""

from __future__ import annotations

import re
from enum import StrEnum

from pydantic import BaseModel

from curlbridge.grammar.flags import (
    COMMON_HEADERS,
    HTTP_METHODS,
    METHOD_DESCRIPTIONS,
    FlagEffect,
    FlagSpec,
)
from curlbridge.grammar.registry import FlagRegistry
from curlbridge.lexer.tokenizer import tokenize
from curlbridge.lexer.tokens import Word, group_words
from curlbridge.models.environment import Environment

_OPEN_VARIABLE_RE = re.compile(r"\{\{([^{}]*)$")
_NAME_TAIL_RE = re.compile(r"[^{}\s'\"]*")
_METHOD_FLAGS = frozenset({"-X", "--request"})


class SuggestionKind(StrEnum):
    FLAG = "flag"
    VARIABLE = "variable"
    METHOD = "method"
    HEADER = "header"
    NO_ACTIVE_ENVIRONMENT = "no_active_environment"


class Suggestion(BaseModel):
    """A completion item; ``[replace_start, replace_end)`` is the text it replaces."""

    label: str
    insert_text: str
    kind: SuggestionKind
    detail: str = ""
    documentation: str = ""
    score: float = 0.0
    replace_start: int
    replace_end: int
    enabled: bool = True
    masked: bool = False


def _argument_taker(word: Word) -> FlagSpec | None:
    """The flag in *word* still waiting for its argument (``-H`` or the ``X`` of ``-sX``)."""
    if not word.is_flag or word.has_attached:
        return None
    flag = word.flag or ""
    spec = FlagRegistry.lookup(flag)
    if spec is None:
        cluster = FlagRegistry.expand_cluster(flag)
        if cluster is None or cluster[1]:
            return None
        spec = cluster[0][-1]
    return spec if spec.arity == 1 else None


def flag_documentation(spec: FlagSpec) -> str:
    """Markdown shown next to a flag suggestion or on hover."""
    lines = [f"**{' / '.join(spec.spellings)}**: {spec.name}", "", spec.description]
    if spec.example:
        lines += ["", f"Example: `{spec.example}`"]
    if spec.tip:
        lines += ["", f"Tip: {spec.tip}"]
    return "\n".join(lines)


class CompletionProvider:
    """Computes suggestions for a cursor position.

    Contexts are tried in order (variable, flag, method, header) and the
    first one that applies produces the result.
    """

    def __init__(self, limit: int = 50, secret_mask: str = "••••••") -> None:
        self.limit = limit
        self.secret_mask = secret_mask

    def complete(
        self, text: str, cursor: int, environment: Environment | None = None
    ) -> list[Suggestion]:
        cursor = max(0, min(cursor, len(text)))
        before = text[:cursor]

        match = _OPEN_VARIABLE_RE.search(before)
        if match is not None:
            return self._variables(text, cursor, match.start(1), environment)[: self.limit]

        words = group_words(tokenize(text))
        current: Word | None = None
        previous: Word | None = None
        for word in words:
            if word.start < cursor <= word.end:
                current = word
                break
            if word.end <= cursor:
                previous = word
            else:
                break

        if current is not None and current.is_flag:
            flag_token = current.tokens[0]
            if cursor <= flag_token.end:
                return self._flags(text[current.start : cursor], current.start, flag_token.end)[
                    : self.limit
                ]
            if current.flag in _METHOD_FLAGS:
                prefix = text[flag_token.end : cursor]
                return self._methods(prefix, flag_token.end, current.end)
            return []

        pending = _argument_taker(previous) if previous is not None else None
        if pending is not None:
            start = current.start if current is not None else cursor
            end = current.end if current is not None else cursor
            typed = text[start:cursor]
            if pending.effect == FlagEffect.METHOD:
                return self._methods(typed, start, end)
            if pending.effect == FlagEffect.HEADER:
                quoted = typed[:1] in ("'", '"')
                if quoted and current is not None and current.tokens[-1].terminated:
                    end -= 1  # keep the closing quote
                return self._headers(typed, start, end)[: self.limit]
        return []

    # -- contexts ------------------------------------------------------------

    def _variables(
        self, text: str, cursor: int, name_start: int, environment: Environment | None
    ) -> list[Suggestion]:
        tail = _NAME_TAIL_RE.match(text, cursor)
        replace_end = tail.end() if tail is not None else cursor
        closed = text.startswith("}}", replace_end)
        if environment is None or environment.is_empty:
            return [
                Suggestion(
                    label="No active environment",
                    insert_text="",
                    kind=SuggestionKind.NO_ACTIVE_ENVIRONMENT,
                    detail="Select an environment to complete variables",
                    replace_start=name_start,
                    replace_end=name_start,
                )
            ]
        prefix = text[name_start:cursor].strip().lower()
        suggestions: list[Suggestion] = []
        seen: set[str] = set()
        for variable in environment.values:
            if not variable.key.lower().startswith(prefix) or variable.key in seen:
                continue
            if variable.enabled:
                seen.add(variable.key)
            status = "" if variable.enabled else " (disabled)"
            suggestions.append(
                Suggestion(
                    label=variable.key,
                    insert_text=variable.key if closed else variable.key + "}}",
                    kind=SuggestionKind.VARIABLE,
                    detail=f"{variable.type}: {variable.display_value(self.secret_mask)}{status}",
                    documentation=variable.description,
                    score=1.0 if variable.enabled else 0.5,
                    replace_start=name_start,
                    replace_end=replace_end,
                    enabled=variable.enabled,
                    masked=variable.is_secret,
                )
            )
        suggestions.sort(key=lambda s: -s.score)
        return suggestions

    def _flags(self, query: str, start: int, end: int) -> list[Suggestion]:
        return [
            Suggestion(
                label=spelling,
                insert_text=spelling,
                kind=SuggestionKind.FLAG,
                detail=spec.name,
                documentation=flag_documentation(spec),
                score=score,
                replace_start=start,
                replace_end=end,
            )
            for spelling, spec, score in FlagRegistry.search(query)
        ]

    def _methods(self, typed: str, start: int, end: int) -> list[Suggestion]:
        quote = typed[:1] if typed[:1] in ("'", '"') else ""
        prefix = typed[len(quote) :].upper()
        return [
            Suggestion(
                label=method,
                insert_text=method,
                kind=SuggestionKind.METHOD,
                detail=METHOD_DESCRIPTIONS.get(method, ""),
                score=1.0,
                replace_start=start + len(quote),
                replace_end=end,
            )
            for method in HTTP_METHODS
            if method.startswith(prefix)
        ]

    def _headers(self, typed: str, start: int, end: int) -> list[Suggestion]:
        quote = typed[:1] if typed[:1] in ("'", '"') else ""
        prefix = typed[len(quote) :].lower()
        suggestions: list[Suggestion] = []
        for header, description in COMMON_HEADERS:
            if not header.lower().startswith(prefix):
                continue
            suggestions.append(
                Suggestion(
                    label=header.strip(),
                    insert_text=header if quote else f'"{header}"',
                    kind=SuggestionKind.HEADER,
                    detail=description,
                    score=1.0,
                    replace_start=start + len(quote),
                    replace_end=end,
                )
            )
        return suggestions


def complete(
    text: str,
    cursor: int,
    environment: Environment | None = None,
    limit: int = 50,
) -> list[Suggestion]:
    return CompletionProvider(limit=limit).complete(text, cursor, environment)
