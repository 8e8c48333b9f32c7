"""Static cURL flag grammar: arity, argument kind, semantic effect and documentation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class ArgumentKind(StrEnum):
    HEADER = "header"
    DATA = "data"
    AUTH = "auth"
    METHOD = "method"
    STRING = "string"
    FLAG = "flag"  # no argument


class FlagEffect(StrEnum):
    """Which request field a flag's argument is routed to."""

    METHOD = "method"
    HEADER = "header"
    DATA = "data"
    DATA_URLENCODE = "data_urlencode"
    JSON = "json"
    FORM = "form"
    FORM_STRING = "form_string"
    USER = "user"
    BEARER = "bearer"
    USER_AGENT = "user_agent"
    REFERER = "referer"
    COOKIE = "cookie"
    URL = "url"
    GET = "get"
    HEAD = "head"
    OPTION = "option"


BODY_EFFECTS = frozenset(
    {
        FlagEffect.DATA,
        FlagEffect.DATA_URLENCODE,
        FlagEffect.JSON,
        FlagEffect.FORM,
        FlagEffect.FORM_STRING,
    }
)


@dataclass(frozen=True)
class FlagSpec:
    """One supported cURL option."""

    short: str | None
    long: str | None
    arity: int
    argument_kind: ArgumentKind
    effect: FlagEffect
    name: str
    description: str
    example: str | None = None
    tip: str | None = None
    repeatable: bool = False

    @property
    def spellings(self) -> tuple[str, ...]:
        return tuple(s for s in (self.short, self.long) if s)

    @property
    def canonical(self) -> str:
        """Spelling used when the flag is stored or regenerated (long form preferred)."""
        return self.long or self.short or ""

    @property
    def takes_argument(self) -> bool:
        return self.arity == 1

    @property
    def is_body(self) -> bool:
        return self.effect in BODY_EFFECTS


_S = ArgumentKind.STRING
_F = ArgumentKind.FLAG

FLAG_SPECS: tuple[FlagSpec, ...] = (
    # -- request line --------------------------------------------------------
    FlagSpec(
        "-X", "--request", 1, ArgumentKind.METHOD, FlagEffect.METHOD,
        name="Request Method",
        description="Specifies the HTTP request method to use when talking to the server.",
        example="-X POST",
        tip="GET is the default; a body implies POST unless -X overrides it.",
    ),
    FlagSpec(
        None, "--url", 1, _S, FlagEffect.URL,
        name="URL",
        description="Sets the URL to fetch, as an alternative to a positional argument.",
        example="--url https://api.example.com/users",
    ),
    FlagSpec(
        "-G", "--get", 0, _F, FlagEffect.GET,
        name="Force GET",
        description="Sends the request with the GET method even when data flags are present.",
        example="-G -d 'q=search'",
        tip="curl appends the data to the query string when -G is used.",
    ),
    FlagSpec(
        "-I", "--head", 0, _F, FlagEffect.HEAD,
        name="HEAD Request",
        description="Fetches the response headers only, using the HEAD method.",
        example="-I https://example.com",
    ),
    # -- headers -------------------------------------------------------------
    FlagSpec(
        "-H", "--header", 1, ArgumentKind.HEADER, FlagEffect.HEADER,
        name="Header",
        description="Adds a custom HTTP header to the request. May be repeated.",
        example='-H "Content-Type: application/json"',
        tip="Format is 'Name: value'. Common headers: Content-Type, Authorization, Accept.",
        repeatable=True,
    ),
    FlagSpec(
        "-A", "--user-agent", 1, _S, FlagEffect.USER_AGENT,
        name="User Agent",
        description="Sets the User-Agent header for the request.",
        example='-A "MyApp/1.0"',
        tip="Some APIs reject requests without a recognizable user agent.",
    ),
    FlagSpec(
        "-e", "--referer", 1, _S, FlagEffect.REFERER,
        name="Referer",
        description="Sets the Referer header for the request.",
        example="-e https://example.com/page",
    ),
    FlagSpec(
        "-b", "--cookie", 1, _S, FlagEffect.COOKIE,
        name="Cookie",
        description="Sends cookies with the request, either inline or read from a file.",
        example='-b "session=abc123; user=john"',
        tip="Inline cookies use the name=value format; anything else is a cookie file.",
        repeatable=True,
    ),
    # -- body ----------------------------------------------------------------
    FlagSpec(
        "-d", "--data", 1, ArgumentKind.DATA, FlagEffect.DATA,
        name="Data",
        description="Sends the given data in the request body. Implies POST.",
        example="-d '{\"name\": \"John\"}'",
        tip="Repeated -d values are joined with '&'. Pair with a Content-Type header for JSON.",
        repeatable=True,
    ),
    FlagSpec(
        None, "--data-raw", 1, ArgumentKind.DATA, FlagEffect.DATA,
        name="Raw Data",
        description="Sends data exactly as given, without interpreting a leading @.",
        example="--data-raw '{\"raw\": \"data\"}'",
        repeatable=True,
    ),
    FlagSpec(
        None, "--data-binary", 1, ArgumentKind.DATA, FlagEffect.DATA,
        name="Binary Data",
        description="Sends data with newlines and special characters preserved.",
        example="--data-binary @file.bin",
        tip="Use @filename to read the payload from a file.",
        repeatable=True,
    ),
    FlagSpec(
        None, "--data-ascii", 1, ArgumentKind.DATA, FlagEffect.DATA,
        name="ASCII Data",
        description="Alias of --data.",
        example="--data-ascii 'a=1'",
        repeatable=True,
    ),
    FlagSpec(
        None, "--data-urlencode", 1, ArgumentKind.DATA, FlagEffect.DATA_URLENCODE,
        name="URL Encoded Data",
        description="URL-encodes the value before sending it as form data.",
        example='--data-urlencode "name=John Doe"',
        tip="Useful for values containing spaces or reserved characters.",
        repeatable=True,
    ),
    FlagSpec(
        None, "--json", 1, ArgumentKind.DATA, FlagEffect.JSON,
        name="JSON Data",
        description="Sends JSON data and sets Content-Type and Accept to application/json.",
        example="--json '{\"name\": \"John\"}'",
        repeatable=True,
    ),
    FlagSpec(
        "-F", "--form", 1, ArgumentKind.DATA, FlagEffect.FORM,
        name="Form Field",
        description="Sends a multipart/form-data field. May be repeated.",
        example='-F "file=@photo.jpg" -F "name=John"',
        tip="An @ prefix uploads the named file.",
        repeatable=True,
    ),
    FlagSpec(
        None, "--form-string", 1, ArgumentKind.DATA, FlagEffect.FORM_STRING,
        name="Form String",
        description="Sends a multipart/form-data field whose value is taken literally.",
        example="--form-string 'handle=@john'",
        repeatable=True,
    ),
    # -- auth ----------------------------------------------------------------
    FlagSpec(
        "-u", "--user", 1, ArgumentKind.AUTH, FlagEffect.USER,
        name="User Authentication",
        description="Specifies user name and password for server authentication.",
        example="-u username:password",
        tip="Used for HTTP Basic auth. Consider bearer tokens instead.",
    ),
    FlagSpec(
        None, "--oauth2-bearer", 1, ArgumentKind.AUTH, FlagEffect.BEARER,
        name="OAuth 2 Bearer",
        description="Sends the given OAuth 2.0 bearer token in the Authorization header.",
        example="--oauth2-bearer {{token}}",
    ),
    # -- transport options ---------------------------------------------------
    FlagSpec(
        "-k", "--insecure", 0, _F, FlagEffect.OPTION,
        name="Insecure",
        description="Allows TLS connections to servers without valid certificates.",
        example="-k https://self-signed.example.com",
        tip="Only use for development with self-signed certificates.",
    ),
    FlagSpec(
        "-L", "--location", 0, _F, FlagEffect.OPTION,
        name="Follow Redirects",
        description="Follows 3xx redirects to the new location.",
        example="-L https://short.url/abc",
    ),
    FlagSpec(
        None, "--compressed", 0, _F, FlagEffect.OPTION,
        name="Compressed",
        description="Requests a compressed response and decompresses it.",
    ),
    FlagSpec(
        "-m", "--max-time", 1, _S, FlagEffect.OPTION,
        name="Max Time",
        description="Maximum time in seconds allowed for the whole operation.",
        example="-m 30",
        tip="Prevents hanging on slow servers.",
    ),
    FlagSpec(
        None, "--connect-timeout", 1, _S, FlagEffect.OPTION,
        name="Connect Timeout",
        description="Maximum time in seconds allowed for the connection phase.",
        example="--connect-timeout 10",
    ),
    FlagSpec(
        None, "--retry", 1, _S, FlagEffect.OPTION,
        name="Retry",
        description="Retries transient failures the given number of times.",
        example="--retry 3",
    ),
    FlagSpec(
        "-x", "--proxy", 1, _S, FlagEffect.OPTION,
        name="Proxy",
        description="Uses the given proxy.",
        example="-x http://proxy.local:3128",
    ),
    FlagSpec(
        "-U", "--proxy-user", 1, _S, FlagEffect.OPTION,
        name="Proxy User",
        description="User name and password for proxy authentication.",
        example="-U user:password",
    ),
    FlagSpec(
        None, "--http1.1", 0, _F, FlagEffect.OPTION,
        name="HTTP/1.1",
        description="Forces HTTP/1.1.",
    ),
    FlagSpec(
        None, "--http2", 0, _F, FlagEffect.OPTION,
        name="HTTP/2",
        description="Attempts HTTP/2.",
    ),
    FlagSpec(
        "-f", "--fail", 0, _F, FlagEffect.OPTION,
        name="Fail",
        description="Fails silently on HTTP errors (status 400 and above).",
    ),
    # -- output --------------------------------------------------------------
    FlagSpec(
        "-o", "--output", 1, _S, FlagEffect.OPTION,
        name="Output File",
        description="Writes the response body to a file instead of stdout.",
        example="-o response.json",
    ),
    FlagSpec(
        "-O", "--remote-name", 0, _F, FlagEffect.OPTION,
        name="Remote Name",
        description="Writes output to a file named after the remote file.",
        example="-O https://example.com/file.zip",
    ),
    FlagSpec(
        "-c", "--cookie-jar", 1, _S, FlagEffect.OPTION,
        name="Cookie Jar",
        description="Saves received cookies to a file.",
        example="-c cookies.txt",
    ),
    FlagSpec(
        "-v", "--verbose", 0, _F, FlagEffect.OPTION,
        name="Verbose",
        description="Shows request and response details, including headers and TLS handshake.",
        tip="Great for debugging.",
    ),
    FlagSpec(
        "-i", "--include", 0, _F, FlagEffect.OPTION,
        name="Include Headers",
        description="Includes the response headers in the output.",
    ),
    FlagSpec(
        "-s", "--silent", 0, _F, FlagEffect.OPTION,
        name="Silent",
        description="Suppresses the progress meter and error messages.",
        tip="Combine with -S to still show errors.",
    ),
    FlagSpec(
        "-S", "--show-error", 0, _F, FlagEffect.OPTION,
        name="Show Error",
        description="Shows errors even when -s is used.",
    ),
)

HTTP_METHODS: tuple[str, ...] = (
    "GET",
    "POST",
    "PUT",
    "PATCH",
    "DELETE",
    "HEAD",
    "OPTIONS",
    "CONNECT",
    "TRACE",
)

METHOD_DESCRIPTIONS: dict[str, str] = {
    "GET": "Retrieve resource",
    "POST": "Create resource",
    "PUT": "Update/replace resource",
    "PATCH": "Partial update",
    "DELETE": "Delete resource",
    "HEAD": "Get headers only",
    "OPTIONS": "Get allowed methods",
}

COMMON_HEADERS: tuple[tuple[str, str], ...] = (
    ("Content-Type: application/json", "JSON content"),
    ("Content-Type: application/x-www-form-urlencoded", "Form content"),
    ("Content-Type: multipart/form-data", "Multipart form"),
    ("Content-Type: text/plain", "Plain text"),
    ("Authorization: Bearer ", "Bearer token auth"),
    ("Authorization: Basic ", "Basic auth"),
    ("Accept: application/json", "Accept JSON"),
    ("Accept: */*", "Accept anything"),
    ("User-Agent: ", "User agent string"),
    ("Cache-Control: no-cache", "No caching"),
    ("X-Api-Key: ", "API key header"),
    ("X-Request-ID: ", "Request ID header"),
)
