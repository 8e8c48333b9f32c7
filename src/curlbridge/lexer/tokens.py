"""Immutable token and word types produced by the tokenizer."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum

PLACEHOLDER_RE = re.compile(r"\{\{([^}]+)\}\}")

_SCHEME_RE = re.compile(r"^[A-Za-z][\w+.-]*://")
_HOST_RE = re.compile(
    r"^(?:localhost|\d{1,3}(?:\.\d{1,3}){3}|[\w-]+(?:\.[\w-]+)+)"
    r"(?::\d+)?(?:[/?#]\S*)?$",
    re.IGNORECASE,
)


class TokenKind(StrEnum):
    FLAG = "flag"
    FLAG_ARG = "flag_arg"
    URL = "url"
    QUOTED_STRING = "quoted_string"
    VARIABLE_PLACEHOLDER = "variable_placeholder"
    CONTINUATION = "continuation"
    WHITESPACE = "whitespace"


_TRIVIA = frozenset({TokenKind.WHITESPACE, TokenKind.CONTINUATION})


def looks_like_url(value: str) -> bool:
    """URL-shape heuristic: a scheme, ``localhost``, an IPv4 host, or a dotted host."""
    if not value or value.startswith("-"):
        return False
    if "://" in value or _SCHEME_RE.match(value):
        return True
    return bool(_HOST_RE.match(value))


@dataclass(frozen=True)
class Token:
    """A typed slice ``text[start:end]`` of the command.

    ``value`` is the shell-decoded content: quotes removed and escapes applied.
    Pieces of a quoted run carry the quote character, whether the run was
    closed, and the offset of the opening quote.
    """

    kind: TokenKind
    text: str
    start: int
    end: int
    value: str = ""
    quote: str | None = None
    terminated: bool = True
    quote_start: int | None = None

    @property
    def is_trivia(self) -> bool:
        return self.kind in _TRIVIA


@dataclass(frozen=True)
class Word:
    """Adjacent non-trivia tokens forming one shell argument (``"a"'b'c`` is one word)."""

    tokens: tuple[Token, ...]

    @property
    def start(self) -> int:
        return self.tokens[0].start

    @property
    def end(self) -> int:
        return self.tokens[-1].end

    @property
    def text(self) -> str:
        return "".join(t.text for t in self.tokens)

    @property
    def value(self) -> str:
        return "".join(t.value for t in self.tokens)

    @property
    def is_flag(self) -> bool:
        return self.tokens[0].kind == TokenKind.FLAG

    @property
    def flag(self) -> str | None:
        return self.tokens[0].text if self.is_flag else None

    @property
    def has_attached(self) -> bool:
        """True for ``-XPOST`` or ``-H'Accept: */*'`` style words."""
        return self.is_flag and len(self.tokens) > 1

    @property
    def attached_value(self) -> str:
        return "".join(t.value for t in self.tokens[1:])

    @property
    def starts_with_placeholder(self) -> bool:
        return self.tokens[0].kind == TokenKind.VARIABLE_PLACEHOLDER

    @property
    def looks_like_url(self) -> bool:
        if self.is_flag:
            return False
        if self.starts_with_placeholder or PLACEHOLDER_RE.match(self.value):
            return True
        if any(t.kind == TokenKind.URL for t in self.tokens):
            return True
        return looks_like_url(self.value)


def group_words(tokens: list[Token]) -> list[Word]:
    """Group a token stream into shell words, dropping whitespace and continuations."""
    words: list[Word] = []
    current: list[Token] = []
    for token in tokens:
        if token.is_trivia:
            if current:
                words.append(Word(tuple(current)))
                current = []
            continue
        current.append(token)
    if current:
        words.append(Word(tuple(current)))
    return words
