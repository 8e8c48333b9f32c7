"""Data models: request model, environment snapshot, diagnostics."""

from curlbridge.models.environment import Environment, EnvironmentVariable, VariableType
from curlbridge.models.errors import (
    Diagnostic,
    DiagnosticCode,
    Severity,
    SourceSpan,
    ValidationResult,
)
from curlbridge.models.request import (
    AuthType,
    BodyMode,
    CurlOption,
    FormField,
    FormFieldType,
    GraphQLPayload,
    KeyValue,
    RequestAuth,
    RequestBody,
    RequestModel,
)

__all__ = [
    "AuthType",
    "BodyMode",
    "CurlOption",
    "Diagnostic",
    "DiagnosticCode",
    "Environment",
    "EnvironmentVariable",
    "FormField",
    "FormFieldType",
    "GraphQLPayload",
    "KeyValue",
    "RequestAuth",
    "RequestBody",
    "RequestModel",
    "Severity",
    "SourceSpan",
    "ValidationResult",
    "VariableType",
]
