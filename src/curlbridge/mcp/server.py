"""FastMCP server exposing curlbridge's command-language tools to an LLM assistant.

Run via::

    curlbridge-mcp                       # reads .env (default: stdio)
    MCP_TRANSPORT=http curlbridge-mcp    # streamable HTTP on port 9000
    MCP_TRANSPORT=sse  curlbridge-mcp    # legacy SSE on port 9000

The assistant's generated command text is fed back through the same
validator and parser the editor uses.  Sessions hold an editor buffer and an
environment; in stdio mode a default session is used automatically.
Settings are loaded from environment variables and ``.env`` file, see
``.env.example`` for available options.
"""

from __future__ import annotations

import json
import logging

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from pydantic import ValidationError

from curlbridge import __version__
from curlbridge.completion.provider import flag_documentation
from curlbridge.flag_reference import CURL_REFERENCE
from curlbridge.generator.codegen import CurlGenerator
from curlbridge.grammar.registry import FlagRegistry, UnknownFlagError
from curlbridge.models.environment import Environment
from curlbridge.models.errors import Diagnostic
from curlbridge.models.request import RequestModel
from curlbridge.parser.loader import EnvironmentLoader, EnvironmentLoadError
from curlbridge.parser.parser import parse_command as parse_text
from curlbridge.parser.resolver import VariableResolver
from curlbridge.parser.validator import validate_command as validate_text
from curlbridge.service.editor import EditorSession
from curlbridge.service.session_manager import SessionManager, SessionNotFoundError
from curlbridge.settings import Settings

# ---------------------------------------------------------------------------
# Server + shared state
# ---------------------------------------------------------------------------

logger = logging.getLogger("curlbridge.mcp")

mcp = FastMCP("curlbridge")
_session_manager: SessionManager | None = None
_resolver = VariableResolver()
_line_width = 80


def _resolve_editor(session_id: str | None = None) -> EditorSession:
    """Resolve a session_id to its EditorSession.

    - If *session_id* is provided, look it up in the session manager.
    - If ``None``, use the default session.
    """
    if _session_manager is None:
        raise ToolError("Session manager not initialised")
    if session_id is not None:
        try:
            return _session_manager.get_editor(session_id)
        except SessionNotFoundError as exc:
            raise ToolError(str(exc)) from exc
    return _session_manager.get_or_create_default()


def _load_environment(environment_json: str) -> Environment:
    try:
        return EnvironmentLoader().load_string(environment_json)
    except EnvironmentLoadError as exc:
        raise ToolError(f"Invalid environment: {exc}") from exc


def _environment_for(environment_json: str | None, session_id: str | None) -> Environment | None:
    """Explicit JSON wins; otherwise the session's environment (if a session is named)."""
    if environment_json:
        return _load_environment(environment_json)
    if session_id is not None:
        return _resolve_editor(session_id).environment
    return None


def _format_diagnostic(d: Diagnostic) -> str:
    line = f"  [{d.code}] {d.text}  (line {d.row + 1}, column {d.column + 1})"
    if d.suggestions:
        line += f"  Did you mean: {', '.join(d.suggestions)}?"
    return line


# ---------------------------------------------------------------------------
# Resources: auto-injected context for LLMs
# ---------------------------------------------------------------------------


@mcp.resource("curl://reference")
def curl_reference() -> str:
    """cURL command reference: quoting, variables, body modes and every supported flag."""
    return CURL_REFERENCE


@mcp.tool
def get_flag_reference() -> str:
    """Get the cURL command reference.

    Call this BEFORE composing a cURL command to learn which flags are
    supported, how quoting works and how ``{{variables}}`` are written.
    """
    return CURL_REFERENCE


@mcp.tool
def explain_flag(flag: str) -> str:
    """Explain a single cURL flag.

    Args:
        flag: A spelling such as ``-H`` or ``--header``, or a bare name like ``header``.
    """
    try:
        spec = FlagRegistry.get(flag)
    except UnknownFlagError as exc:
        raise ToolError(str(exc)) from exc
    return flag_documentation(spec)


# ---------------------------------------------------------------------------
# Session tools
# ---------------------------------------------------------------------------


@mcp.tool
def create_session(metadata_json: str | None = None, environment_json: str | None = None) -> str:
    """Create a new session and return its session_id.

    A session holds an environment that the variable tools resolve against.

    Args:
        metadata_json: Optional JSON object with metadata key-value pairs.
        environment_json: Optional environment (Postman export or ``{"key": "value"}`` map).
    """
    if _session_manager is None:
        raise ToolError("Session manager not initialised")
    metadata: dict[str, str] = {}
    if metadata_json:
        try:
            metadata = json.loads(metadata_json)
        except json.JSONDecodeError as exc:
            raise ToolError(f"Invalid metadata JSON: {exc}") from exc
    environment = _load_environment(environment_json) if environment_json else None
    info = _session_manager.create_session(metadata=metadata, environment=environment)
    return (
        f"Session created.  session_id: {info.session_id}\n"
        f"  created_at: {info.created_at.isoformat()}"
    )


@mcp.tool
def close_session(session_id: str) -> str:
    """Close a session and release its resources.

    Args:
        session_id: The session to close.
    """
    if _session_manager is None:
        raise ToolError("Session manager not initialised")
    try:
        _session_manager.close_session(session_id)
    except SessionNotFoundError as exc:
        raise ToolError(str(exc)) from exc
    return f"Session '{session_id}' closed."


@mcp.tool
def list_sessions() -> str:
    """List all active sessions."""
    if _session_manager is None:
        raise ToolError("Session manager not initialised")
    sessions = _session_manager.list_sessions()
    if not sessions:
        return "No active sessions."
    lines = ["Active sessions:", ""]
    for s in sessions:
        env = s.environment_name or "none"
        lines.append(
            f"  {s.session_id}  "
            f"(environment: {env}, "
            f"last accessed: {s.last_accessed_at.isoformat()})"
        )
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Command tools
# ---------------------------------------------------------------------------


@mcp.tool
def validate_command(command: str) -> str:
    """Validate a cURL command.

    Returns syntax errors (unterminated quotes, missing flag arguments,
    missing URL) and warnings (unknown flags, headers without ':', mixed
    body flags).  Unresolved ``{{variables}}`` are not errors.

    Args:
        command: The cURL command text.
    """
    logger.info("validate_command called (length=%d)", len(command))
    result = validate_text(command)
    if result.valid:
        msg = "Command is valid."
        if result.warnings:
            msg += "\nWarnings:"
            for w in result.warnings:
                msg += "\n" + _format_diagnostic(w)
        return msg

    lines = ["Command has errors:"]
    lines.extend(_format_diagnostic(e) for e in result.errors)
    if result.warnings:
        lines.append("Warnings:")
        lines.extend(_format_diagnostic(w) for w in result.warnings)
    return "\n".join(lines)


@mcp.tool
def parse_command(command: str) -> str:
    """Parse a cURL command into a structured request (JSON).

    Parsing never fails: malformed input yields a best-effort request.  Use
    ``validate_command`` to see what is wrong with it.

    Args:
        command: The cURL command text.
    """
    logger.info("parse_command called (length=%d)", len(command))
    request = parse_text(command)
    return request.model_dump_json(indent=2, by_alias=True)


@mcp.tool
def generate_command(request_json: str, multiline: bool | None = None) -> str:
    """Generate a cURL command from a structured request.

    Args:
        request_json: JSON object with ``method``, ``url``, ``headers``
            (list of ``{key, value}``), ``body`` (``{mode, raw, fields, graphql}``),
            ``auth`` (``{type, credentials}``) and ``options``.
        multiline: Force wrapping on or off; by default long commands wrap.
    """
    try:
        request = RequestModel.model_validate_json(request_json)
    except ValidationError as exc:
        raise ToolError(f"Invalid request JSON: {exc}") from exc
    return CurlGenerator(_line_width).generate(request, multiline=multiline)


@mcp.tool
def check_generated_command(
    command: str,
    environment_json: str | None = None,
    session_id: str | None = None,
) -> str:
    """Sanity-check a cURL command you generated before handing it to the user.

    Reports errors and warnings, the parsed method and URL, and any
    ``{{variables}}`` the active environment cannot resolve.

    Args:
        command: The generated cURL command text.
        environment_json: Optional environment to resolve variables against.
        session_id: Use this session's environment when no environment_json is given.
    """
    environment = _environment_for(environment_json, session_id)
    result = validate_text(command)
    request = parse_text(command)
    variables = _resolver.analyze(command, environment)

    lines = ["Command is valid." if result.valid else "Command has errors:"]
    lines.extend(_format_diagnostic(e) for e in result.errors)
    if result.warnings:
        lines.append("Warnings:")
        lines.extend(_format_diagnostic(w) for w in result.warnings)
    lines.append(f"Request: {request.method} {request.url or '(no URL)'}")
    lines.append(f"  headers: {len(request.headers)}, body: {request.body.mode}")
    unresolved = sorted({v.name for v in variables if not v.resolved})
    if unresolved:
        lines.append(f"Unresolved variables: {', '.join(unresolved)}")
    elif variables:
        lines.append("All variables resolve.")
    return "\n".join(lines)


@mcp.tool
def interpolate_command(
    command: str,
    environment_json: str | None = None,
    session_id: str | None = None,
) -> str:
    """Substitute ``{{variables}}`` in a command with environment values.

    Unresolved placeholders are left as written and listed.

    Args:
        command: The cURL command text.
        environment_json: Environment as a Postman export or ``{"key": "value"}`` map.
        session_id: Use this session's environment when no environment_json is given.
    """
    environment = _environment_for(environment_json, session_id)
    preview = _resolver.preview(command, environment)
    if not preview.has_variables:
        return preview.interpolated
    lines = [preview.interpolated]
    if not preview.all_resolved:
        names = sorted({v.name for v in preview.variables if not v.resolved})
        lines += ["", f"Unresolved variables ({preview.unresolved_count}): {', '.join(names)}"]
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------


@mcp.prompt
def write_curl_command() -> str:
    """How to write a cURL command this client understands."""
    return """\
# Writing cURL commands

- Put the URL last and quote every header and body with single quotes:
  `curl -X POST -H 'Content-Type: application/json' -d '{"a": 1}' https://api.example.com/items`
- Use `{{name}}` for values that come from the user's environment
  (base URLs, tokens, ids): `-H 'Authorization: Bearer {{token}}'`.
- Use one body style per command: `-d` (raw/JSON), `-F` (multipart) or
  `--data-urlencode` (form).  Mixing them keeps only the last one.
- Call `check_generated_command` on the final command before answering.
"""


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main() -> None:
    """Run the MCP server using settings from environment / .env file."""
    settings = Settings()

    logging.basicConfig(level=settings.log_level.upper())
    logger.info(
        "curlbridge MCP Server v%s starting (transport=%s)",
        __version__,
        settings.mcp_transport,
    )

    global _session_manager, _line_width  # noqa: PLW0603
    _line_width = settings.generator_line_width
    _session_manager = SessionManager(
        ttl_seconds=settings.session_ttl_seconds,
        cleanup_interval=settings.session_cleanup_interval,
        debounce_ms=settings.validation_debounce_ms,
        line_width=settings.generator_line_width,
        max_distance=settings.suggestion_max_distance,
        completion_limit=settings.completion_limit,
        secret_mask=settings.secret_mask,
    )
    _session_manager.start()

    try:
        if settings.mcp_transport == "stdio":
            mcp.run(transport="stdio")
        else:
            mcp.run(
                transport=settings.mcp_transport,
                host=settings.mcp_server_host,
                port=settings.mcp_server_port,
                log_level=settings.log_level.lower(),
            )
    finally:
        _session_manager.stop()


if __name__ == "__main__":
    main()
