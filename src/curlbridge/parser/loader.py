"""Environment file loader for Postman environment exports (JSON or YAML)."""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap, CommentedSeq
from ruamel.yaml.error import YAMLError

from curlbridge.models.environment import Environment, EnvironmentVariable, VariableType

# ---------------------------------------------------------------------------
# Safety limits
# ---------------------------------------------------------------------------

_MAX_DOCUMENT_SIZE = 1_000_000  # 1M characters
_MAX_NODE_COUNT = 20_000
_MAX_DEPTH = 10

# Anchor definitions (&name) at line start or after whitespace/sequence/mapping
# indicators.  Comment lines are stripped before matching.
_ANCHOR_RE = re.compile(r"(?:^|[\s\-:\[,])&(\w+)", re.MULTILINE)

_TYPE_ALIASES = {
    "any": VariableType.DEFAULT,
    "text": VariableType.DEFAULT,
    "string": VariableType.DEFAULT,
}


class EnvironmentLoadError(Exception):
    """Raised when an environment file is malformed or violates safety limits."""


class EnvironmentLoader:
    """Loads an :class:`Environment` from a Postman export or a plain mapping.

    Accepted shapes::

        {"name": "Dev", "values": [{"key": "baseUrl", "value": "...", "enabled": true}]}
        {"baseUrl": "https://api.example.com", "token": "abc"}

    JSON documents (Postman exports are tab-indented, which YAML rejects) go
    through :mod:`json`; everything else through ruamel.yaml.  Both share the
    safety checks.
    """

    def __init__(self) -> None:
        self._yaml = YAML(typ="safe", pure=True)

    # -- safety checks -------------------------------------------------------

    @staticmethod
    def _check_safety(content: str) -> None:
        if len(content) > _MAX_DOCUMENT_SIZE:
            raise EnvironmentLoadError(
                f"Environment document exceeds maximum size "
                f"({len(content):,} chars > {_MAX_DOCUMENT_SIZE:,} limit)"
            )

    @staticmethod
    def _check_anchors(content: str) -> None:
        code = "\n".join(
            line for line in content.splitlines() if not line.lstrip().startswith("#")
        )
        if _ANCHOR_RE.search(code):
            raise EnvironmentLoadError("YAML anchors/aliases are not supported in environments")

    @staticmethod
    def _check_shape(data: Any) -> None:
        """Reject documents with too many nodes or too deep nesting."""
        count = 0
        stack: list[tuple[Any, int]] = [(data, 0)]
        while stack:
            node, depth = stack.pop()
            count += 1
            if count > _MAX_NODE_COUNT:
                raise EnvironmentLoadError(
                    f"Environment document exceeds maximum node count ({_MAX_NODE_COUNT:,})"
                )
            if depth > _MAX_DEPTH:
                raise EnvironmentLoadError(
                    f"Environment document exceeds maximum nesting depth ({_MAX_DEPTH})"
                )
            if isinstance(node, (dict, CommentedMap)):
                stack.extend((v, depth + 1) for v in node.values())
            elif isinstance(node, (list, CommentedSeq)):
                stack.extend((v, depth + 1) for v in node)

    # -- public loading API --------------------------------------------------

    def load(self, path: Path) -> Environment:
        """Load an environment file; the file stem is the default name."""
        with path.open("r", encoding="utf-8") as handle:
            content = handle.read()
        return self.load_string(content, default_name=path.stem)

    def load_string(self, content: str, default_name: str = "") -> Environment:
        self._check_safety(content)
        try:
            if content.lstrip().startswith("{"):
                data = json.loads(content)
            else:
                self._check_anchors(content)
                data = self._yaml.load(content)
        except (json.JSONDecodeError, YAMLError) as exc:
            raise EnvironmentLoadError(f"Invalid environment document: {exc}") from exc
        if data is None:
            return Environment(name=default_name)
        self._check_shape(data)
        if not isinstance(data, dict):
            raise EnvironmentLoadError("Environment document must be a mapping")
        try:
            return self._to_environment(data, default_name)
        except ValidationError as exc:
            raise EnvironmentLoadError(f"Invalid environment variable: {exc}") from exc

    # -- conversion ----------------------------------------------------------

    def _to_environment(self, data: dict[str, Any], default_name: str) -> Environment:
        if "values" in data and isinstance(data["values"], list):
            name = str(data.get("name") or default_name)
            values = [self._to_variable(entry, i) for i, entry in enumerate(data["values"])]
            return Environment(name=name, values=values)
        values = [
            EnvironmentVariable(key=str(key), value=self._to_text(value))
            for key, value in data.items()
        ]
        return Environment(name=default_name, values=values)

    def _to_variable(self, entry: Any, position: int) -> EnvironmentVariable:
        if not isinstance(entry, dict) or "key" not in entry:
            raise EnvironmentLoadError(f"values[{position}] must be a mapping with a 'key'")
        raw_type = str(entry.get("type") or VariableType.DEFAULT.value).lower()
        if raw_type in _TYPE_ALIASES:
            var_type = _TYPE_ALIASES[raw_type]
        else:
            try:
                var_type = VariableType(raw_type)
            except ValueError:
                raise EnvironmentLoadError(
                    f"values[{position}] has unknown type '{raw_type}'"
                ) from None
        return EnvironmentVariable(
            key=str(entry["key"]),
            value=self._to_text(entry.get("value", "")),
            type=var_type,
            enabled=bool(entry.get("enabled", True)),
            description=str(entry.get("description") or ""),
        )

    @staticmethod
    def _to_text(value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)
