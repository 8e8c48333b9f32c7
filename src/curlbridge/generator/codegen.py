"""RequestModel → cURL command text."""

from __future__ import annotations

import json
import re
from urllib.parse import quote

from curlbridge.lexer.tokens import PLACEHOLDER_RE
from curlbridge.models.request import (
    ApiKeyLocation,
    AuthType,
    BodyMode,
    FormField,
    FormFieldType,
    GraphQLPayload,
    KeyValue,
    RequestAuth,
    RequestModel,
)

DEFAULT_LINE_WIDTH = 80

_SAFE_RE = re.compile(r"^[\w@%+=:,./-]+$")
_CONTINUATION = " \\\n  "
_QUERY_SAFE = "-_.!~*'()"


def shell_quote(value: str) -> str:
    """Quote *value* for the command line.

    Plain words pass through; anything with spaces, quotes, ``{{``, shell
    metacharacters or a leading ``-`` is single-quoted, with interior single
    quotes written as ``'\\''``.
    """
    if value and _SAFE_RE.match(value) and not value.startswith("-"):
        return value
    return "'" + value.replace("'", "'\\''") + "'"


def _query_component(text: str) -> str:
    """Percent-encode a query key or value, leaving {{placeholders}} intact."""
    pieces: list[str] = []
    last = 0
    for match in PLACEHOLDER_RE.finditer(text):
        pieces.append(quote(text[last : match.start()], safe=_QUERY_SAFE))
        pieces.append(match.group(0))
        last = match.end()
    pieces.append(quote(text[last:], safe=_QUERY_SAFE))
    return "".join(pieces)


def _graphql_json(payload: GraphQLPayload) -> str:
    document: dict[str, object] = {"query": payload.query}
    if payload.variables.strip():
        try:
            document["variables"] = json.loads(payload.variables)
        except json.JSONDecodeError:
            document["variables"] = payload.variables
    if payload.operation_name is not None:
        document["operationName"] = payload.operation_name
    return json.dumps(document, separators=(",", ":"), ensure_ascii=False)


class CurlGenerator:
    """Generates cURL command text from a :class:`RequestModel`.

    Output order is fixed: method, auth, headers, body, options, URL.
    """

    def __init__(self, line_width: int = DEFAULT_LINE_WIDTH) -> None:
        self.line_width = line_width

    def segments(self, model: RequestModel) -> list[str]:
        """One entry per flag (with its argument), URL last.  Wrapping splits on these."""
        parts: list[str] = []
        method = (model.method or "GET").upper()
        if not (method == "GET" and model.body.mode == BodyMode.NONE):
            parts.append(f"-X {shell_quote(method)}")
        parts.extend(self._auth(model))
        for header in model.headers:
            if not header.enabled or not header.key:
                continue
            if self._replaced_by_auth(model, header):
                continue
            parts.append(f"-H {shell_quote(f'{header.key}: {header.value}')}")
        parts.extend(self._body(model))
        for option in model.options:
            if option.value is None:
                parts.append(option.flag)
            else:
                parts.append(f"{option.flag} {shell_quote(option.value)}")
        url = self._url(model)
        if url:
            parts.append(shell_quote(url))
        return parts

    @staticmethod
    def _replaced_by_auth(model: RequestModel, header: KeyValue) -> bool:
        """An Authorization header the auth block would write over.

        Only Bearer and Basic credentials are replaced; other schemes
        (``Token xyz``, ``Digest ...``) are sent alongside the auth block.
        """
        if model.auth.type == AuthType.NONE or header.key.lower() != "authorization":
            return False
        return RequestAuth.from_authorization(header.value) is not None

    @staticmethod
    def _url(model: RequestModel) -> str:
        auth = model.auth
        if not model.url or auth.type != AuthType.APIKEY:
            return model.url
        key, value = auth.credentials.get("key"), auth.credentials.get("value")
        if auth.apikey_location != ApiKeyLocation.QUERY or not key or not value:
            return model.url
        separator = "&" if "?" in model.url else "?"
        return f"{model.url}{separator}{_query_component(key)}={_query_component(value)}"

    def _auth(self, model: RequestModel) -> list[str]:
        auth = model.auth
        creds = auth.credentials
        if auth.type == AuthType.BASIC:
            user = f"{creds.get('username', '')}:{creds.get('password', '')}"
            return [f"-u {shell_quote(user)}"]
        if auth.type == AuthType.BEARER and creds.get("token"):
            return [f"-H {shell_quote('Authorization: Bearer ' + creds.get('token', ''))}"]
        if (
            auth.type == AuthType.APIKEY
            and auth.apikey_location == ApiKeyLocation.HEADER
            and creds.get("key")
        ):
            return [f"-H {shell_quote(creds['key'] + ': ' + creds.get('value', ''))}"]
        return []

    def _body(self, model: RequestModel) -> list[str]:
        body = model.body
        if body.mode == BodyMode.RAW:
            return [f"-d {shell_quote(body.raw)}"]
        if body.mode == BodyMode.GRAPHQL and body.graphql is not None:
            return [f"-d {shell_quote(_graphql_json(body.graphql))}"]
        if body.mode == BodyMode.FORM:
            return [self._form_field(f) for f in body.fields if f.enabled and f.key]
        if body.mode == BodyMode.URLENCODED:
            return [
                f"--data-urlencode {shell_quote(f'{f.key}={f.value}')}"
                for f in body.fields
                if f.enabled
            ]
        return []

    @staticmethod
    def _form_field(field: FormField) -> str:
        if field.type == FormFieldType.FILE:
            return f"-F {shell_quote(f'{field.key}=@{field.value}')}"
        if field.value.startswith(("@", "<")):
            # -F would read a file here
            return f"--form-string {shell_quote(f'{field.key}={field.value}')}"
        return f"-F {shell_quote(f'{field.key}={field.value}')}"

    def generate(
        self,
        model: RequestModel,
        *,
        multiline: bool | None = None,
        include_prefix: bool = True,
    ) -> str:
        """Render *model*.  ``multiline=None`` wraps only past ``line_width``."""
        parts = self.segments(model)
        if include_prefix:
            parts.insert(0, "curl")
        single = " ".join(parts)
        if multiline is None:
            multiline = len(single) > self.line_width
        if not multiline or len(parts) < 2:
            return single
        if include_prefix:
            # keep the first flag on the curl line
            head = " ".join(parts[:2])
            return _CONTINUATION.join([head, *parts[2:]])
        return _CONTINUATION.join(parts)


def generate(
    model: RequestModel,
    *,
    multiline: bool | None = None,
    include_prefix: bool = True,
    line_width: int = DEFAULT_LINE_WIDTH,
) -> str:
    return CurlGenerator(line_width).generate(
        model, multiline=multiline, include_prefix=include_prefix
    )
