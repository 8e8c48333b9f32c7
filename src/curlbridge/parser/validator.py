"""Positional diagnostics for cURL command text."""

from __future__ import annotations

from curlbridge.grammar.flags import HTTP_METHODS, FlagEffect
from curlbridge.grammar.registry import FlagRegistry
from curlbridge.lexer.positions import LineIndex
from curlbridge.lexer.tokenizer import PLACEHOLDER_RE, tokenize
from curlbridge.lexer.tokens import Token, Word
from curlbridge.models.errors import Diagnostic, DiagnosticCode, Severity, ValidationResult
from curlbridge.parser.parser import CommandStructure, FlagOccurrence, scan, split_header

_BODY_FAMILIES: dict[FlagEffect, str] = {
    FlagEffect.DATA: "raw",
    FlagEffect.JSON: "raw",
    FlagEffect.DATA_URLENCODE: "urlencoded",
    FlagEffect.FORM: "form",
    FlagEffect.FORM_STRING: "form",
}


def _has_placeholder(value: str) -> bool:
    return PLACEHOLDER_RE.search(value) is not None


class CommandValidator:
    """Checks a command for syntax errors and semantic warnings.

    Syntax problems are errors, suspicious-but-runnable input is a warning.
    Unresolved ``{{variables}}`` are never reported here.
    """

    def __init__(self, max_distance: int = 2) -> None:
        self.max_distance = max_distance

    def validate(self, text: str) -> list[Diagnostic]:
        if not text.strip():
            return []
        tokens = tokenize(text)
        index = LineIndex(text)
        structure = scan(tokens)
        diagnostics: list[Diagnostic] = []
        diagnostics.extend(self._check_quotes(tokens, index))
        diagnostics.extend(self._check_flags(structure, index))
        diagnostics.extend(self._check_body_mode(structure, index))
        diagnostics.extend(self._check_url(structure, index, text))
        diagnostics.sort(key=lambda d: (d.row, d.column))
        return diagnostics

    def _diagnostic(
        self,
        index: LineIndex,
        start: int,
        end: int,
        text: str,
        code: DiagnosticCode,
        severity: Severity,
        suggestions: list[str] | None = None,
    ) -> Diagnostic:
        span = index.span(start, end)
        return Diagnostic(
            row=span.row,
            column=span.column,
            end_row=span.end_row,
            end_column=span.end_column,
            text=text,
            severity=severity,
            code=code,
            suggestions=suggestions or [],
        )

    def _check_quotes(self, tokens: list[Token], index: LineIndex) -> list[Diagnostic]:
        """An unterminated quote spans from the opening quote to end of input."""
        diagnostics: list[Diagnostic] = []
        seen: set[int] = set()
        for token in tokens:
            if token.terminated or token.quote_start is None or token.quote_start in seen:
                continue
            seen.add(token.quote_start)
            kind = "single" if token.quote == "'" else "double"
            diagnostics.append(
                self._diagnostic(
                    index,
                    token.quote_start,
                    tokens[-1].end,
                    f"Unterminated {kind} quote",
                    DiagnosticCode.UNTERMINATED_QUOTE,
                    Severity.ERROR,
                )
            )
        return diagnostics

    def _check_flags(self, structure: CommandStructure, index: LineIndex) -> list[Diagnostic]:
        diagnostics: list[Diagnostic] = []
        for occurrence in structure.flags:
            word = occurrence.word
            if occurrence.spec is None:
                if occurrence.spelling in ("-", "--"):
                    continue  # still being typed
                suggestions = FlagRegistry.suggest(occurrence.spelling, self.max_distance)
                message = f"Unknown flag '{occurrence.spelling}'"
                if suggestions:
                    message += f". Did you mean '{suggestions[0]}'?"
                diagnostics.append(
                    self._diagnostic(
                        index,
                        word.start,
                        word.end,
                        message,
                        DiagnosticCode.UNKNOWN_FLAG,
                        Severity.WARNING,
                        suggestions,
                    )
                )
                continue
            if occurrence.missing_argument:
                diagnostics.append(
                    self._diagnostic(
                        index,
                        word.start,
                        word.end,
                        f"Flag '{occurrence.spelling}' requires an argument",
                        DiagnosticCode.MISSING_ARGUMENT,
                        Severity.ERROR,
                    )
                )
                continue
            diagnostics.extend(self._check_argument(occurrence, index))
        return diagnostics

    def _check_argument(self, occurrence: FlagOccurrence, index: LineIndex) -> list[Diagnostic]:
        spec = occurrence.spec
        value = occurrence.value
        argument = occurrence.argument
        if spec is None or value is None or argument is None:
            return []
        start = occurrence.argument_start
        if start is None:
            start = argument.start
        if occurrence.is_nameless_form_field:
            return [
                self._diagnostic(
                    index,
                    start,
                    argument.end,
                    f"Form field '{value}' has no name and will be ignored",
                    DiagnosticCode.FORM_FIELD_MISSING_NAME,
                    Severity.WARNING,
                )
            ]
        if _has_placeholder(value):
            return []
        if spec.effect == FlagEffect.HEADER and split_header(value) is None:
            return [
                self._diagnostic(
                    index,
                    start,
                    argument.end,
                    f"Header '{value}' is missing a ':' separator and will be ignored",
                    DiagnosticCode.HEADER_MISSING_COLON,
                    Severity.WARNING,
                )
            ]
        if spec.effect == FlagEffect.METHOD and value.strip().upper() not in HTTP_METHODS:
            return [
                self._diagnostic(
                    index,
                    start,
                    argument.end,
                    f"'{value}' is not a standard HTTP method",
                    DiagnosticCode.INVALID_METHOD,
                    Severity.WARNING,
                )
            ]
        return []

    def _check_body_mode(self, structure: CommandStructure, index: LineIndex) -> list[Diagnostic]:
        """Warn once when body flags of different modes are mixed; the last one wins."""
        body_flags: list[tuple[FlagOccurrence, str]] = [
            (f, _BODY_FAMILIES[f.spec.effect])
            for f in structure.flags
            if f.spec is not None
            and f.spec.effect in _BODY_FAMILIES
            and not f.missing_argument
            and not f.is_nameless_form_field
        ]
        if not body_flags:
            return []
        final, final_family = body_flags[-1]
        for occurrence, family in body_flags:
            if family != final_family:
                return [
                    self._diagnostic(
                        index,
                        occurrence.start,
                        occurrence.end,
                        (
                            f"'{occurrence.spelling}' is overridden by '{final.spelling}': "
                            f"only the {final_family} body is sent"
                        ),
                        DiagnosticCode.AMBIGUOUS_BODY_MODE,
                        Severity.WARNING,
                    )
                ]
        return []

    def _check_url(
        self, structure: CommandStructure, index: LineIndex, text: str
    ) -> list[Diagnostic]:
        diagnostics: list[Diagnostic] = []
        url_word = structure.url_word()
        if url_word is None:
            if structure.program is not None:
                start, end = structure.program.start, structure.program.end
            else:
                start, end = len(text) - len(text.lstrip()), len(text.rstrip())
            diagnostics.append(
                self._diagnostic(
                    index,
                    start,
                    end,
                    "Missing URL",
                    DiagnosticCode.MISSING_URL,
                    Severity.ERROR,
                )
            )
            return diagnostics

        value = url_word.value
        if not value.strip():
            diagnostics.append(
                self._diagnostic(
                    index,
                    url_word.start,
                    url_word.end,
                    "URL is empty",
                    DiagnosticCode.EMPTY_URL,
                    Severity.ERROR,
                )
            )
        elif not url_word.looks_like_url and not _has_placeholder(value):
            diagnostics.append(
                self._diagnostic(
                    index,
                    url_word.start,
                    url_word.end,
                    f"'{value}' does not look like a URL",
                    DiagnosticCode.SUSPICIOUS_URL,
                    Severity.WARNING,
                )
            )

        for word in structure.extra_positionals():
            diagnostics.append(self._extra_argument(word, index))
        return diagnostics

    def _extra_argument(self, word: Word, index: LineIndex) -> Diagnostic:
        return self._diagnostic(
            index,
            word.start,
            word.end,
            f"Unexpected extra argument '{word.value}'",
            DiagnosticCode.EXTRA_ARGUMENT,
            Severity.WARNING,
        )


def validate(text: str, max_distance: int = 2) -> list[Diagnostic]:
    return CommandValidator(max_distance).validate(text)


def validate_command(text: str, max_distance: int = 2) -> ValidationResult:
    """Validate *text* and split the diagnostics into errors and warnings."""
    diagnostics = validate(text, max_distance)
    errors = [d for d in diagnostics if d.is_error]
    warnings = [d for d in diagnostics if not d.is_error]
    return ValidationResult(valid=not errors, errors=errors, warnings=warnings)
