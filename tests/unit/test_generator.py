"""Tests for RequestModel → cURL command text."""

from __future__ import annotations

import pytest

from curlbridge.generator.codegen import CurlGenerator, generate, shell_quote
from curlbridge.models.request import (
    ApiKeyLocation,
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
from curlbridge.parser.parser import parse_command
from tests.conftest import CREATE_USER_COMMAND, MULTILINE_COMMAND


class TestShellQuote:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("abc", "abc"),
            ("https://x.io/users", "https://x.io/users"),
            ("", "''"),
            ("a b", "'a b'"),
            ("it's", "'it'\\''s'"),
            ("-v", "'-v'"),
            ("{{token}}", "'{{token}}'"),
            ("a&b", "'a&b'"),
            ('{"a":1}', "'{\"a\":1}'"),
        ],
    )
    def test_quote(self, value: str, expected: str) -> None:
        assert shell_quote(value) == expected


class TestGenerate:
    def test_plain_get(self) -> None:
        assert generate(RequestModel(url="https://x.io")) == "curl https://x.io"

    def test_explicit_get_with_body_keeps_method(self) -> None:
        model = RequestModel(
            url="https://x.io", body=RequestBody(mode=BodyMode.RAW, raw="q=1")
        )
        assert generate(model) == "curl -X GET -d q=1 https://x.io"

    def test_single_line(self) -> None:
        model = parse_command(CREATE_USER_COMMAND)
        assert generate(model, multiline=False) == (
            "curl -X POST -H 'Content-Type: application/json' "
            "-d '{\"name\":\"John\"}' https://api.example.com/users"
        )

    def test_wraps_long_commands(self) -> None:
        model = parse_command(CREATE_USER_COMMAND)
        assert generate(model) == (
            "curl -X POST \\\n"
            "  -H 'Content-Type: application/json' \\\n"
            "  -d '{\"name\":\"John\"}' \\\n"
            "  https://api.example.com/users"
        )

    def test_line_width(self) -> None:
        model = parse_command(CREATE_USER_COMMAND)
        assert "\n" not in generate(model, line_width=200)
        short = RequestModel(url="https://x.io", headers=[KeyValue(key="Accept", value="*/*")])
        assert CurlGenerator(line_width=20).generate(short) == (
            "curl -H 'Accept: */*' \\\n  https://x.io"
        )

    def test_without_prefix(self) -> None:
        assert generate(RequestModel(url="https://x.io"), include_prefix=False) == "https://x.io"

    def test_no_url(self) -> None:
        assert generate(RequestModel(method="DELETE")) == "curl -X DELETE"

    def test_disabled_header_skipped(self) -> None:
        model = RequestModel(
            url="https://x.io",
            headers=[KeyValue(key="A", value="1"), KeyValue(key="B", value="2", enabled=False)],
        )
        assert generate(model) == "curl -H 'A: 1' https://x.io"

    def test_option_order(self) -> None:
        model = RequestModel(
            url="https://x.io",
            options=[CurlOption(flag="--insecure"), CurlOption(flag="--max-time", value="30")],
        )
        assert generate(model) == "curl --insecure --max-time 30 https://x.io"


class TestAuth:
    def test_basic(self) -> None:
        model = RequestModel(url="https://x.io", auth=RequestAuth.basic("alice", "pw"))
        assert generate(model) == "curl -u alice:pw https://x.io"

    def test_bearer(self) -> None:
        model = RequestModel(url="https://x.io", auth=RequestAuth.bearer("tok"))
        assert generate(model) == "curl -H 'Authorization: Bearer tok' https://x.io"

    def test_auth_replaces_authorization_header(self) -> None:
        model = RequestModel(
            url="https://x.io",
            headers=[KeyValue(key="Authorization", value="Bearer old")],
            auth=RequestAuth.bearer("new"),
        )
        assert generate(model).count("Authorization") == 1
        assert "Bearer new" in generate(model)

    def test_empty_bearer_skipped(self) -> None:
        model = RequestModel(url="https://x.io", auth=RequestAuth.bearer(""))
        assert generate(model) == "curl https://x.io"

    def test_other_authorization_scheme_kept(self) -> None:
        model = RequestModel(
            url="https://x.io",
            headers=[KeyValue(key="Authorization", value="Token xyz")],
            auth=RequestAuth.basic("a", "b"),
        )
        assert generate(model) == "curl -u a:b -H 'Authorization: Token xyz' https://x.io"

    def test_apikey_header(self) -> None:
        model = RequestModel(url="https://x.io", auth=RequestAuth.apikey("X-Api-Key", "k1"))
        assert generate(model) == "curl -H 'X-Api-Key: k1' https://x.io"

    def test_apikey_query(self) -> None:
        auth = RequestAuth.apikey("api key", "a&b", ApiKeyLocation.QUERY)
        model = RequestModel(url="https://x.io/items", auth=auth)
        assert generate(model) == "curl 'https://x.io/items?api%20key=a%26b'"

    def test_apikey_query_appends_to_existing_query(self) -> None:
        auth = RequestAuth.apikey("key", "{{apiKey}}", ApiKeyLocation.QUERY)
        model = RequestModel(url="{{baseUrl}}/items?page=2", auth=auth)
        assert generate(model) == "curl '{{baseUrl}}/items?page=2&key={{apiKey}}'"

    def test_apikey_query_needs_value(self) -> None:
        auth = RequestAuth.apikey("key", "", ApiKeyLocation.QUERY)
        assert generate(RequestModel(url="https://x.io", auth=auth)) == "curl https://x.io"


class TestBodies:
    def test_form(self) -> None:
        model = RequestModel(
            method="POST",
            url="https://x.io",
            body=RequestBody(
                mode=BodyMode.FORM,
                fields=[
                    FormField(key="file", value="a.png", type=FormFieldType.FILE),
                    FormField(key="name", value="John Doe"),
                    FormField(key="handle", value="@john"),
                ],
            ),
        )
        assert generate(model, multiline=False) == (
            "curl -X POST -F file=@a.png -F 'name=John Doe' "
            "--form-string handle=@john https://x.io"
        )

    def test_urlencoded(self) -> None:
        model = RequestModel(
            method="POST",
            url="https://x.io",
            body=RequestBody(
                mode=BodyMode.URLENCODED, fields=[FormField(key="q", value="hello world")]
            ),
        )
        assert generate(model) == "curl -X POST --data-urlencode 'q=hello world' https://x.io"

    def test_graphql(self) -> None:
        model = RequestModel(
            method="POST",
            url="https://x.io/graphql",
            body=RequestBody(
                mode=BodyMode.GRAPHQL,
                graphql=GraphQLPayload(query="{ me }", variables='{"a": 1}'),
            ),
        )
        assert generate(model, multiline=False) == (
            "curl -X POST -d '{\"query\":\"{ me }\",\"variables\":{\"a\":1}}' https://x.io/graphql"
        )


ROUND_TRIP_COMMANDS = [
    CREATE_USER_COMMAND,
    MULTILINE_COMMAND,
    "curl -F 'file=@photo.jpg' -F 'note=@home' --form-string 'h=@x' https://x.io",
    "curl 'https://x.io/search' -G --data-urlencode 'q=hello world'",
    "curl -sSL -k --max-time 30 -b 'sid=1' -A 'Agent/1' {{baseUrl}}/items",
    (
        "curl -X POST https://x.io/graphql -H 'Content-Type: application/json' "
        "-d '{\"query\":\"query { me { id } }\",\"variables\":{\"id\":1},\"operationName\":\"Me\"}'"
    ),
    "curl --json '{\"a\":1}' https://x.io",
    "curl -d \"it's here\" https://x.io",
    "curl -u alice:s3cret -H 'X-Trace: 1' https://x.io",
    "curl -u a:b -H 'Authorization: Token xyz' https://x.io",
    "curl -u a:b -H 'Authorization: Basic !!!' https://x.io",
    "curl -F '=x' https://x.io",
    "curl -F a=1 -F '=x' https://x.io",
    "curl --oauth2-bearer '' https://x.io",
    "curl -sX POST -d '<a>1</a>' https://x.io",
    "curl -sSLH 'Accept: */*' https://x.io",
]


class TestRoundTrip:
    @pytest.mark.parametrize("text", ROUND_TRIP_COMMANDS)
    def test_parse_generate_parse(self, text: str) -> None:
        model = parse_command(text)
        assert parse_command(generate(model)).model_dump() == model.model_dump()

    @pytest.mark.parametrize("text", ROUND_TRIP_COMMANDS)
    def test_generate_is_idempotent(self, text: str) -> None:
        once = generate(parse_command(text))
        assert generate(parse_command(once)) == once
