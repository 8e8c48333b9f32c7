"""cURL command text → RequestModel."""

from __future__ import annotations

import json
from dataclasses import dataclass, field

from curlbridge.grammar.flags import FlagEffect, FlagSpec
from curlbridge.grammar.registry import FlagRegistry
from curlbridge.lexer.tokenizer import tokenize
from curlbridge.lexer.tokens import PLACEHOLDER_RE, Token, Word, group_words
from curlbridge.models.request import (
    BodyLanguage,
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

_GRAPHQL_KEYS = frozenset({"query", "variables", "operationName"})


@dataclass(frozen=True)
class FlagOccurrence:
    """One flag as written in the command, with its argument when it takes one."""

    word: Word
    spelling: str
    spec: FlagSpec | None
    argument: Word | None = None
    value: str | None = None
    missing_argument: bool = False
    argument_start: int | None = None

    @property
    def start(self) -> int:
        return self.word.start

    @property
    def end(self) -> int:
        if self.argument is not None:
            return self.argument.end
        return self.word.end

    @property
    def is_nameless_form_field(self) -> bool:
        """``-F =x``: curl refuses a form part without a name."""
        if self.spec is None or self.value is None:
            return False
        if self.spec.effect not in (FlagEffect.FORM, FlagEffect.FORM_STRING):
            return False
        return not self.value.partition("=")[0]


@dataclass
class CommandStructure:
    """Flags and positional words of a command, shared by the parser and validator."""

    words: list[Word]
    program: Word | None = None
    flags: list[FlagOccurrence] = field(default_factory=list)
    positionals: list[Word] = field(default_factory=list)

    def url_candidates(self) -> list[FlagOccurrence]:
        return [
            f
            for f in self.flags
            if f.spec is not None and f.spec.effect == FlagEffect.URL and f.value is not None
        ]

    def url_word(self) -> Word | None:
        """The word the request URL is taken from.

        ``--url`` wins; otherwise the first URL-shaped positional, falling back
        to the first positional of any shape.
        """
        for occurrence in self.url_candidates():
            return occurrence.argument
        for word in self.positionals:
            if word.looks_like_url:
                return word
        return self.positionals[0] if self.positionals else None

    def extra_positionals(self) -> list[Word]:
        chosen = self.url_word()
        return [w for w in self.positionals if w is not chosen]


def scan(tokens: list[Token]) -> CommandStructure:
    """Walk shell words left to right, pairing flags with their arguments."""
    words = group_words(tokens)
    structure = CommandStructure(words=words)
    i = 0
    if words and not words[0].is_flag and words[0].value == "curl":
        structure.program = words[0]
        i = 1
    while i < len(words):
        word = words[i]
        i += 1
        if not word.is_flag:
            structure.positionals.append(word)
            continue

        flag = word.flag or ""
        if flag.startswith("--") and word.has_attached:
            # curl has no --flag=value syntax; the whole word is the spelling
            structure.flags.append(FlagOccurrence(word=word, spelling=word.value, spec=None))
            continue
        spec = FlagRegistry.lookup(flag)
        inline = ""
        if spec is None:
            cluster = FlagRegistry.expand_cluster(flag)
            if cluster is None:
                structure.flags.append(FlagOccurrence(word=word, spelling=flag, spec=None))
                continue
            members, inline = cluster
            for member in members[:-1]:
                structure.flags.append(
                    FlagOccurrence(word=word, spelling=member.short or "", spec=member)
                )
            spec = members[-1]
            flag = spec.short or ""
        if spec.arity == 0:
            structure.flags.append(FlagOccurrence(word=word, spelling=flag, spec=spec))
            continue

        if inline or word.has_attached:
            # -XPOST, -H'A: b' or the tail of a cluster such as -sXPOST
            flag_token = word.tokens[0]
            start = flag_token.end - len(inline) if inline else word.tokens[1].start
            occurrence = FlagOccurrence(
                word=word,
                spelling=flag,
                spec=spec,
                argument=word,
                value=inline + word.attached_value,
                argument_start=start,
            )
        elif i < len(words) and not words[i].is_flag:
            argument = words[i]
            i += 1
            occurrence = FlagOccurrence(
                word=word,
                spelling=flag,
                spec=spec,
                argument=argument,
                value=argument.value,
                argument_start=argument.start,
            )
        else:
            occurrence = FlagOccurrence(word=word, spelling=flag, spec=spec, missing_argument=True)
        structure.flags.append(occurrence)
    return structure


def split_header(raw: str) -> tuple[str, str] | None:
    """Split ``Name: value`` on the first colon; ``None`` when there is no colon or name."""
    name, sep, value = raw.partition(":")
    name = name.strip()
    if not sep or not name:
        return None
    return name, value.strip()


def graphql_from_raw(raw: str) -> GraphQLPayload | None:
    """Recognize a raw JSON body that is a GraphQL request."""
    stripped = raw.strip()
    if not stripped.startswith("{"):
        return None
    try:
        payload = json.loads(stripped)
    except json.JSONDecodeError:
        return None
    if not isinstance(payload, dict) or not isinstance(payload.get("query"), str):
        return None
    if not set(payload) <= _GRAPHQL_KEYS:
        return None
    variables = payload.get("variables")
    operation_name = payload.get("operationName")
    if operation_name is not None and not isinstance(operation_name, str):
        return None
    return GraphQLPayload(
        query=payload["query"],
        variables="" if variables is None else json.dumps(variables, separators=(",", ":")),
        operation_name=operation_name,
    )


def _is_json(text: str) -> bool:
    try:
        json.loads(text)
    except json.JSONDecodeError:
        return False
    return True


def detect_body_language(raw: str) -> BodyLanguage:
    """Guess the syntax of a raw body from its content."""
    stripped = raw.strip()
    if (stripped.startswith("{") and stripped.endswith("}")) or (
        stripped.startswith("[") and stripped.endswith("]")
    ):
        # placeholders stand in for values: {"id": {{userId}}} is still JSON
        if _is_json(PLACEHOLDER_RE.sub("0", stripped)):
            return BodyLanguage.JSON
    lowered = stripped.lower()
    if "<!doctype html" in lowered or "<html" in lowered:
        return BodyLanguage.HTML
    if stripped.startswith("<") and stripped.endswith(">"):
        return BodyLanguage.XML
    return BodyLanguage.TEXT


class _RequestBuilder:
    """Accumulates flag effects in command order."""

    def __init__(self) -> None:
        self.method: str | None = None
        self.headers: list[KeyValue] = []
        self.auth = RequestAuth()
        self.options: list[CurlOption] = []
        self.mode = BodyMode.NONE
        self.raw_parts: list[str] = []
        self.fields: list[FormField] = []
        self.json_flag = False

    def apply(self, occurrence: FlagOccurrence) -> None:
        spec = occurrence.spec
        if spec is None or occurrence.missing_argument or occurrence.is_nameless_form_field:
            return
        value = occurrence.value if occurrence.value is not None else ""
        effect = spec.effect
        if effect == FlagEffect.METHOD:
            if value.strip():
                self.method = value.strip().upper()
        elif effect == FlagEffect.GET:
            self.method = "GET"
        elif effect == FlagEffect.HEAD:
            self.method = "HEAD"
        elif effect == FlagEffect.HEADER:
            self._header(value)
        elif effect == FlagEffect.USER:
            username, _, password = value.partition(":")
            self.auth = RequestAuth.basic(username, password)
        elif effect == FlagEffect.BEARER:
            if value.strip():
                self.auth = RequestAuth.bearer(value.strip())
        elif effect == FlagEffect.USER_AGENT:
            self.headers.append(KeyValue(key="User-Agent", value=value))
        elif effect == FlagEffect.REFERER:
            self.headers.append(KeyValue(key="Referer", value=value))
        elif effect == FlagEffect.COOKIE:
            if "=" in value:
                self.headers.append(KeyValue(key="Cookie", value=value))
            else:
                self.options.append(CurlOption(flag=spec.canonical, value=value))
        elif effect in (FlagEffect.DATA, FlagEffect.JSON):
            self._switch_mode(BodyMode.RAW)
            self.raw_parts.append(value)
            if effect == FlagEffect.JSON:
                self.json_flag = True
        elif effect == FlagEffect.DATA_URLENCODE:
            self._switch_mode(BodyMode.URLENCODED)
            key, _, content = value.partition("=") if "=" in value else ("", "", value)
            self.fields.append(FormField(key=key, value=content))
        elif effect in (FlagEffect.FORM, FlagEffect.FORM_STRING):
            self._switch_mode(BodyMode.FORM)
            key, _, content = value.partition("=")
            if effect == FlagEffect.FORM and content.startswith("@"):
                self.fields.append(FormField(key=key, value=content[1:], type=FormFieldType.FILE))
            else:
                self.fields.append(FormField(key=key, value=content))
        elif effect == FlagEffect.OPTION:
            self.options.append(
                CurlOption(flag=spec.canonical, value=value if spec.arity == 1 else None)
            )

    def _header(self, raw: str) -> None:
        parts = split_header(raw)
        if parts is None:
            return
        name, value = parts
        if name.lower() == "authorization":
            auth = RequestAuth.from_authorization(value)
            if auth is not None:
                self.auth = auth
                return
        self.headers.append(KeyValue(key=name, value=value))

    def _switch_mode(self, mode: BodyMode) -> None:
        # last body flag wins; content of the previous mode is dropped
        if self.mode != mode:
            self.mode = mode
            self.raw_parts = []
            self.fields = []

    def _has_header(self, name: str) -> bool:
        return any(h.key.lower() == name.lower() for h in self.headers)

    def build(self, url: str) -> RequestModel:
        body = RequestBody(mode=self.mode)
        if self.mode == BodyMode.RAW:
            raw = "&".join(self.raw_parts)
            graphql = graphql_from_raw(raw)
            if graphql is not None:
                body = RequestBody(mode=BodyMode.GRAPHQL, graphql=graphql)
            else:
                body = RequestBody(
                    mode=BodyMode.RAW, raw=raw, language=detect_body_language(raw)
                )
        elif self.mode in (BodyMode.FORM, BodyMode.URLENCODED):
            body = RequestBody(mode=self.mode, fields=self.fields)

        if self.json_flag:
            for name in ("Content-Type", "Accept"):
                if not self._has_header(name):
                    self.headers.append(KeyValue(key=name, value="application/json"))

        method = self.method
        if method is None:
            method = "POST" if self.mode != BodyMode.NONE else "GET"
        return RequestModel(
            method=method,
            url=url,
            headers=self.headers,
            body=body,
            auth=self.auth,
            options=self.options,
        )


class CommandParser:
    """Builds a :class:`RequestModel` from a token stream.  Never raises."""

    def parse(self, tokens: list[Token]) -> RequestModel:
        structure = scan(tokens)
        builder = _RequestBuilder()
        for occurrence in structure.flags:
            builder.apply(occurrence)
        url_word = structure.url_word()
        url = url_word.value if url_word is not None else ""
        return builder.build(url)


def parse(tokens: list[Token]) -> RequestModel:
    return CommandParser().parse(tokens)


def parse_command(text: str) -> RequestModel:
    """Tokenize and parse cURL command text."""
    return CommandParser().parse(tokenize(text))
