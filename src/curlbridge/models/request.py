"""Structured HTTP request model shared by the parser, generator and visual builder."""

from __future__ import annotations

import base64
import binascii
from enum import StrEnum

from pydantic import BaseModel, Field


class BodyMode(StrEnum):
    NONE = "none"
    RAW = "raw"
    FORM = "form"
    URLENCODED = "urlencoded"
    GRAPHQL = "graphql"


class AuthType(StrEnum):
    NONE = "none"
    BASIC = "basic"
    BEARER = "bearer"
    APIKEY = "apikey"


class ApiKeyLocation(StrEnum):
    HEADER = "header"
    QUERY = "query"


class BodyLanguage(StrEnum):
    """Syntax of a raw body, used for highlighting."""

    JSON = "json"
    XML = "xml"
    HTML = "html"
    TEXT = "text"


class FormFieldType(StrEnum):
    TEXT = "text"
    FILE = "file"


def decode_basic(credentials: str) -> tuple[str, str] | None:
    """Decode a ``Basic`` authorization payload into ``(username, password)``."""
    try:
        decoded = base64.b64decode(credentials, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None
    username, sep, password = decoded.partition(":")
    if not sep:
        return None
    return username, password


class KeyValue(BaseModel):
    """A header or field entry; disabled entries are kept but never emitted."""

    key: str
    value: str = ""
    enabled: bool = True


class FormField(KeyValue):
    """A multipart or urlencoded body field."""

    type: FormFieldType = FormFieldType.TEXT


class GraphQLPayload(BaseModel):
    query: str = ""
    variables: str = ""  # JSON text, empty when the request sends none
    operation_name: str | None = Field(None, alias="operationName")

    model_config = {"populate_by_name": True}


class RequestBody(BaseModel):
    """Request payload.  Only the field matching ``mode`` is meaningful."""

    mode: BodyMode = BodyMode.NONE
    raw: str = ""
    language: BodyLanguage | None = None  # raw mode only
    fields: list[FormField] = []
    graphql: GraphQLPayload | None = None

    @property
    def content(self) -> str | list[FormField] | GraphQLPayload | None:
        """Payload of the active mode."""
        if self.mode == BodyMode.RAW:
            return self.raw
        if self.mode in (BodyMode.FORM, BodyMode.URLENCODED):
            return self.fields
        if self.mode == BodyMode.GRAPHQL:
            return self.graphql
        return None

    @property
    def is_empty(self) -> bool:
        if self.mode == BodyMode.RAW:
            return self.raw == ""
        if self.mode in (BodyMode.FORM, BodyMode.URLENCODED):
            return not any(f.enabled and f.key for f in self.fields)
        if self.mode == BodyMode.GRAPHQL:
            return self.graphql is None or not self.graphql.query
        return True


class RequestAuth(BaseModel):
    """Auth hint.  ``credentials`` keys depend on ``type``.

    - basic: ``username``, ``password``
    - bearer: ``token``
    - apikey: ``key``, ``value``, ``in`` (``header`` or ``query``)
    """

    type: AuthType = AuthType.NONE
    credentials: dict[str, str] = {}

    @classmethod
    def basic(cls, username: str, password: str = "") -> RequestAuth:
        return cls(type=AuthType.BASIC, credentials={"username": username, "password": password})

    @classmethod
    def bearer(cls, token: str) -> RequestAuth:
        return cls(type=AuthType.BEARER, credentials={"token": token})

    @classmethod
    def apikey(
        cls, key: str, value: str, location: ApiKeyLocation = ApiKeyLocation.HEADER
    ) -> RequestAuth:
        return cls(
            type=AuthType.APIKEY, credentials={"key": key, "value": value, "in": str(location)}
        )

    @classmethod
    def from_authorization(cls, value: str) -> RequestAuth | None:
        """Auth carried by an ``Authorization`` header value.

        Only ``Bearer <token>`` and well-formed ``Basic <base64 user:pass>``
        qualify; any other scheme stays a plain header.
        """
        scheme, _, credentials = value.strip().partition(" ")
        credentials = credentials.strip()
        if scheme.lower() == "bearer" and credentials:
            return cls.bearer(credentials)
        if scheme.lower() == "basic":
            decoded = decode_basic(credentials)
            if decoded is not None:
                return cls.basic(*decoded)
        return None

    @property
    def apikey_location(self) -> ApiKeyLocation:
        if self.credentials.get("in") == ApiKeyLocation.QUERY:
            return ApiKeyLocation.QUERY
        return ApiKeyLocation.HEADER


class CurlOption(BaseModel):
    """A transport option with no request-field equivalent (``--insecure``, ``--max-time 30``)."""

    flag: str
    value: str | None = None


class RequestModel(BaseModel):
    """The structured form of a cURL command."""

    method: str = "GET"
    url: str = ""
    headers: list[KeyValue] = []
    body: RequestBody = Field(default_factory=RequestBody)
    auth: RequestAuth = Field(default_factory=RequestAuth)
    options: list[CurlOption] = []

    def header(self, name: str) -> str | None:
        """Return the first enabled header value matching *name* (case-insensitive)."""
        wanted = name.lower()
        for h in self.headers:
            if h.enabled and h.key.lower() == wanted:
                return h.value
        return None

    @property
    def has_body(self) -> bool:
        return self.body.mode != BodyMode.NONE and not self.body.is_empty
