"""Environment snapshot consumed read-only by the resolver and completion provider."""

from __future__ import annotations

import hashlib
import json
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, model_validator


class VariableType(StrEnum):
    DEFAULT = "default"
    SECRET = "secret"
    BOOLEAN = "boolean"
    NUMBER = "number"
    JSON = "json"


class EnvironmentVariable(BaseModel):
    """A single ``{key, value}`` entry of an environment."""

    key: str
    value: str = ""
    type: VariableType = VariableType.DEFAULT
    enabled: bool = True
    description: str = ""

    @model_validator(mode="after")
    def _check_typed_value(self) -> EnvironmentVariable:
        if self.value == "":
            return self
        if self.type == VariableType.BOOLEAN and self.value not in ("true", "false"):
            raise ValueError(f"Boolean variable '{self.key}' must have value 'true' or 'false'")
        if self.type == VariableType.NUMBER:
            try:
                float(self.value)
            except ValueError:
                raise ValueError(
                    f"Number variable '{self.key}' must have a numeric value"
                ) from None
        if self.type == VariableType.JSON:
            try:
                json.loads(self.value)
            except json.JSONDecodeError:
                raise ValueError(
                    f"JSON variable '{self.key}' must have valid JSON as value"
                ) from None
        return self

    @property
    def is_secret(self) -> bool:
        return self.type == VariableType.SECRET

    def parsed_value(self) -> Any:
        """Value coerced to its declared type (``None`` when disabled or empty)."""
        if not self.enabled or self.value == "":
            return None
        if self.type == VariableType.BOOLEAN:
            return self.value == "true"
        if self.type == VariableType.NUMBER:
            number = float(self.value)
            return int(number) if number.is_integer() else number
        if self.type == VariableType.JSON:
            return json.loads(self.value)
        return self.value

    def display_value(self, mask: str = "••••••") -> str:
        """Value as shown in tooltips and suggestion lists."""
        if self.is_secret and self.value:
            return mask
        return self.value


class Environment(BaseModel):
    """An ordered list of variables.  First enabled match by key wins."""

    name: str = ""
    values: list[EnvironmentVariable] = []

    def lookup(self, key: str) -> EnvironmentVariable | None:
        for variable in self.values:
            if variable.enabled and variable.key == key:
                return variable
        return None

    def enabled_variables(self) -> list[EnvironmentVariable]:
        return [v for v in self.values if v.enabled]

    @property
    def is_empty(self) -> bool:
        return not self.values

    def fingerprint(self) -> str:
        """Stable digest of the visible contents, used to detect stale renders."""
        payload = json.dumps(
            [[v.key, v.value, v.type.value, v.enabled] for v in self.values],
            separators=(",", ":"),
        )
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:16]
