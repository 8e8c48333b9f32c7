"""Shell-aware tokenizer for cURL command text.

The scan is total: every input, including half-typed commands, produces a
token stream whose tokens cover the text contiguously, so diagnostics and
completions can always be mapped back to exact offsets.
"""

from __future__ import annotations

import re

from curlbridge.grammar.registry import FlagRegistry
from curlbridge.lexer.tokens import PLACEHOLDER_RE, Token, TokenKind, looks_like_url

_WHITESPACE = " \t\r\n\f\v"
_QUOTES = "'\""
_LONG_FLAG_RE = re.compile(r"--[\w.-]*")
_SHORT_FLAG_RE = re.compile(r"-\w*")
_DOUBLE_QUOTE_ESCAPES = frozenset('\\"$`')


def tokenize(text: str) -> list[Token]:
    """Split *text* into typed tokens.  Never raises."""
    return _Scanner(text).run()


def _decode_double(raw: str) -> str:
    """Apply the backslash escapes that are active inside double quotes."""
    out: list[str] = []
    i = 0
    while i < len(raw):
        ch = raw[i]
        if ch == "\\" and i + 1 < len(raw):
            nxt = raw[i + 1]
            if nxt in _DOUBLE_QUOTE_ESCAPES:
                out.append(nxt)
                i += 2
                continue
            if nxt == "\n":
                i += 2
                continue
            if raw.startswith("\r\n", i + 1):
                i += 3
                continue
        out.append(ch)
        i += 1
    return "".join(out)


def _find_double_close(text: str, pos: int) -> int:
    i = pos
    while i < len(text):
        ch = text[i]
        if ch == "\\":
            i += 2
        elif ch == '"':
            return i
        else:
            i += 1
    return -1


class _Scanner:
    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0
        self.tokens: list[Token] = []
        self.word_start = True
        self.force_argument = False
        self.attachable = FlagRegistry.short_with_argument()

    def run(self) -> list[Token]:
        text = self.text
        while self.pos < len(text):
            ch = text[self.pos]
            if ch == "\\" and self._newline_length(self.pos + 1):
                self._continuation()
            elif ch in _WHITESPACE:
                self._whitespace()
            elif ch in _QUOTES:
                self._quoted(ch)
            elif ch == "{" and (match := PLACEHOLDER_RE.match(text, self.pos)):
                self._emit(TokenKind.VARIABLE_PLACEHOLDER, self.pos, match.end(), match.group(0))
            elif ch == "-" and self.word_start:
                self._flag()
            else:
                self._bare()
        return self.tokens

    # -- helpers -------------------------------------------------------------

    def _newline_length(self, pos: int) -> int:
        if self.text.startswith("\n", pos):
            return 1
        if self.text.startswith("\r\n", pos):
            return 2
        return 0

    def _emit(self, kind: TokenKind, start: int, end: int, value: str, **extra: object) -> None:
        self.tokens.append(
            Token(kind=kind, text=self.text[start:end], start=start, end=end, value=value, **extra)
        )
        self.pos = end
        self.word_start = kind in (TokenKind.WHITESPACE, TokenKind.CONTINUATION)
        if kind != TokenKind.FLAG:
            self.force_argument = False

    # -- token classes -------------------------------------------------------

    def _continuation(self) -> None:
        end = self.pos + 1 + self._newline_length(self.pos + 1)
        self._emit(TokenKind.CONTINUATION, self.pos, end, "")

    def _whitespace(self) -> None:
        end = self.pos
        while end < len(self.text) and self.text[end] in _WHITESPACE:
            end += 1
        self._emit(TokenKind.WHITESPACE, self.pos, end, "")

    def _flag(self) -> None:
        text = self.text
        start = self.pos
        if text.startswith("--", start):
            match = _LONG_FLAG_RE.match(text, start)
            self._emit(TokenKind.FLAG, start, match.end(), match.group(0))
            return
        two = text[start : start + 2]
        after = start + 2
        if (
            two in self.attachable
            and after < len(text)
            and text[after] not in _WHITESPACE
            and not (text[after] == "\\" and self._newline_length(after + 1))
        ):
            # -XPOST: the flag and its attached argument are separate tokens
            self._emit(TokenKind.FLAG, start, after, two)
            self.force_argument = True
            return
        match = _SHORT_FLAG_RE.match(text, start)
        self._emit(TokenKind.FLAG, start, match.end(), match.group(0))

    def _quoted(self, quote: str) -> None:
        text = self.text
        start = self.pos
        content_start = start + 1
        if quote == "'":
            close = text.find("'", content_start)
        else:
            close = _find_double_close(text, content_start)
        terminated = close >= 0
        content_end = close if terminated else len(text)
        end = close + 1 if terminated else len(text)

        def decode(raw: str) -> str:
            return _decode_double(raw) if quote == '"' else raw

        extra = {"quote": quote, "terminated": terminated, "quote_start": start}
        piece_start = start
        for match in PLACEHOLDER_RE.finditer(text, content_start, content_end):
            value = decode(text[max(piece_start, content_start) : match.start()])
            self._emit(TokenKind.QUOTED_STRING, piece_start, match.start(), value, **extra)
            self._emit(
                TokenKind.VARIABLE_PLACEHOLDER, match.start(), match.end(), match.group(0), **extra
            )
            piece_start = match.end()
        if piece_start < end or piece_start == start:
            value = decode(text[max(piece_start, content_start) : content_end])
            self._emit(TokenKind.QUOTED_STRING, piece_start, end, value, **extra)

    def _bare(self) -> None:
        text = self.text
        start = self.pos
        i = start
        chars: list[str] = []
        while i < len(text):
            ch = text[i]
            if ch in _WHITESPACE or ch in _QUOTES:
                break
            if ch == "{" and PLACEHOLDER_RE.match(text, i):
                break
            if ch == "\\":
                if self._newline_length(i + 1):
                    break
                if i + 1 < len(text):
                    chars.append(text[i + 1])
                    i += 2
                    continue
            chars.append(ch)
            i += 1
        if i == start:
            chars.append(text[i])
            i += 1
        value = "".join(chars)
        if self.force_argument or not looks_like_url(value):
            kind = TokenKind.FLAG_ARG
        else:
            kind = TokenKind.URL
        self._emit(kind, start, i, value)
