"""Structured diagnostics with row/column positions in the command text."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field


class Severity(StrEnum):
    ERROR = "error"
    WARNING = "warning"


class DiagnosticCode(StrEnum):
    UNTERMINATED_QUOTE = "UNTERMINATED_QUOTE"
    UNKNOWN_FLAG = "UNKNOWN_FLAG"
    MISSING_ARGUMENT = "MISSING_ARGUMENT"
    MISSING_URL = "MISSING_URL"
    EMPTY_URL = "EMPTY_URL"
    SUSPICIOUS_URL = "SUSPICIOUS_URL"
    EXTRA_ARGUMENT = "EXTRA_ARGUMENT"
    HEADER_MISSING_COLON = "HEADER_MISSING_COLON"
    INVALID_METHOD = "INVALID_METHOD"
    AMBIGUOUS_BODY_MODE = "AMBIGUOUS_BODY_MODE"
    FORM_FIELD_MISSING_NAME = "FORM_FIELD_MISSING_NAME"


class SourceSpan(BaseModel):
    """Points to an exact range in the command text (0-based rows/columns)."""

    row: int
    column: int
    end_row: int = Field(alias="endRow")
    end_column: int = Field(alias="endColumn")

    model_config = {"populate_by_name": True}


class Diagnostic(BaseModel):
    """A positioned error or warning produced by validating command text."""

    row: int
    column: int
    end_row: int = Field(alias="endRow")
    end_column: int = Field(alias="endColumn")
    text: str
    severity: Severity
    code: DiagnosticCode
    suggestions: list[str] = []

    model_config = {"populate_by_name": True}

    @property
    def span(self) -> SourceSpan:
        return SourceSpan(
            row=self.row,
            column=self.column,
            end_row=self.end_row,
            end_column=self.end_column,
        )

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR


class ValidationResult(BaseModel):
    """Result of validating a command."""

    valid: bool
    errors: list[Diagnostic] = []
    warnings: list[Diagnostic] = []
