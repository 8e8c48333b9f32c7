"""Tests for context-aware completion."""

from __future__ import annotations

from curlbridge.completion.provider import (
    CompletionProvider,
    SuggestionKind,
    complete,
    flag_documentation,
)
from curlbridge.grammar.flags import COMMON_HEADERS, HTTP_METHODS
from curlbridge.grammar.registry import lookup
from curlbridge.models.environment import Environment


class TestVariables:
    def test_no_environment(self) -> None:
        suggestions = complete("curl {{ba", 9)
        assert len(suggestions) == 1
        assert suggestions[0].kind == SuggestionKind.NO_ACTIVE_ENVIRONMENT
        assert suggestions[0].replace_start == 7

    def test_empty_environment(self) -> None:
        suggestions = complete("curl {{ba", 9, Environment(name="Empty"))
        assert [s.kind for s in suggestions] == [SuggestionKind.NO_ACTIVE_ENVIRONMENT]

    def test_prefix(self, environment: Environment) -> None:
        suggestions = complete("curl {{ba", 9, environment)
        assert [s.label for s in suggestions] == ["baseUrl"]
        s = suggestions[0]
        assert s.kind == SuggestionKind.VARIABLE
        assert s.insert_text == "baseUrl}}"
        assert (s.replace_start, s.replace_end) == (7, 9)

    def test_already_closed(self, environment: Environment) -> None:
        suggestions = complete("curl {{ba}}/x", 9, environment)
        assert suggestions[0].insert_text == "baseUrl"
        assert suggestions[0].replace_end == 9

    def test_replaces_rest_of_name(self, environment: Environment) -> None:
        suggestions = complete("curl {{baxyz}}", 9, environment)
        assert suggestions[0].replace_end == 12

    def test_enabled_first_then_disabled(self, environment: Environment) -> None:
        suggestions = complete("curl {{", 7, environment)
        assert [s.label for s in suggestions] == ["baseUrl", "token", "userId", "legacyUrl"]
        assert [s.enabled for s in suggestions] == [True, True, True, False]

    def test_secret_masked(self, environment: Environment) -> None:
        s = complete("curl {{to", 9, environment)[0]
        assert s.masked
        assert "s3cr3t" not in s.detail
        assert "••••••" in s.detail

    def test_disabled_marked(self, environment: Environment) -> None:
        s = complete("curl {{leg", 10, environment)[0]
        assert s.label == "legacyUrl"
        assert not s.enabled
        assert s.detail.endswith("(disabled)")
        assert s.score < 1.0

    def test_inside_quotes(self, environment: Environment) -> None:
        text = 'curl -H "Authorization: Bearer {{t'
        assert [s.label for s in complete(text, len(text), environment)] == ["token"]


class TestFlags:
    def test_long_prefix(self) -> None:
        suggestions = complete("curl --hea", 10)
        assert [s.label for s in suggestions[:2]] == ["--head", "--header"]
        assert all(s.kind == SuggestionKind.FLAG for s in suggestions)
        assert (suggestions[0].replace_start, suggestions[0].replace_end) == (5, 10)

    def test_dash(self) -> None:
        suggestions = complete("curl -", 6)
        assert suggestions
        assert all(s.kind == SuggestionKind.FLAG for s in suggestions)

    def test_documentation(self) -> None:
        s = complete("curl --heade", 12)[0]
        assert s.label == "--header"
        assert s.documentation == flag_documentation(lookup("-H"))
        assert "-H / --header" in s.documentation

    def test_limit(self) -> None:
        assert len(CompletionProvider(limit=3).complete("curl -", 6)) == 3

    def test_cursor_clamped(self) -> None:
        assert complete("curl -", 100) == complete("curl -", 6)
        assert complete("curl -", -5) == []


class TestMethods:
    def test_after_flag(self) -> None:
        suggestions = complete("curl -X ", 8)
        assert [s.label for s in suggestions] == list(HTTP_METHODS)
        assert all(s.kind == SuggestionKind.METHOD for s in suggestions)

    def test_prefix(self) -> None:
        suggestions = complete("curl -X P", 9)
        assert [s.label for s in suggestions] == ["POST", "PUT", "PATCH"]
        assert suggestions[0].replace_start == 8

    def test_attached(self) -> None:
        suggestions = complete("curl -XP", 8)
        assert [s.label for s in suggestions] == ["POST", "PUT", "PATCH"]
        assert suggestions[0].replace_start == 7

    def test_lowercase_prefix(self) -> None:
        assert [s.label for s in complete("curl -X de", 10)] == ["DELETE"]

    def test_after_cluster(self) -> None:
        suggestions = complete("curl -sX P", 10)
        assert [s.label for s in suggestions] == ["POST", "PUT", "PATCH"]
        assert suggestions[0].replace_start == 9


class TestHeaders:
    def test_after_flag(self) -> None:
        suggestions = complete("curl -H ", 8)
        assert len(suggestions) == len(COMMON_HEADERS)
        assert suggestions[0].insert_text == '"Content-Type: application/json"'
        assert all(s.kind == SuggestionKind.HEADER for s in suggestions)

    def test_after_cluster(self) -> None:
        suggestions = complete("curl -sSH ", 10)
        assert len(suggestions) == len(COMMON_HEADERS)

    def test_inside_open_quote(self) -> None:
        text = "curl -H 'Content"
        suggestions = complete(text, len(text))
        assert len(suggestions) == 4
        assert all(s.label.startswith("Content-Type") for s in suggestions)
        assert suggestions[0].insert_text == "Content-Type: application/json"
        assert (suggestions[0].replace_start, suggestions[0].replace_end) == (9, 16)

    def test_keeps_closing_quote(self) -> None:
        suggestions = complete("curl -H 'Acc'", 12)
        assert [s.label for s in suggestions] == ["Accept: application/json", "Accept: */*"]
        assert (suggestions[0].replace_start, suggestions[0].replace_end) == (9, 12)


class TestNoContext:
    def test_url_word(self) -> None:
        assert complete("curl https://x.io", 17) == []

    def test_data_argument(self) -> None:
        assert complete("curl -d '-", 10) == []
