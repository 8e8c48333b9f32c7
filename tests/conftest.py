"""Shared test fixtures for curlbridge."""

from __future__ import annotations

import pytest

from curlbridge.models.environment import Environment, EnvironmentVariable, VariableType
from curlbridge.parser.loader import EnvironmentLoader
from curlbridge.parser.resolver import VariableResolver
from curlbridge.parser.validator import CommandValidator
from curlbridge.service.session_manager import SessionManager


@pytest.fixture
def loader() -> EnvironmentLoader:
    return EnvironmentLoader()


@pytest.fixture
def resolver() -> VariableResolver:
    return VariableResolver()


@pytest.fixture
def validator() -> CommandValidator:
    return CommandValidator()


@pytest.fixture
def environment() -> Environment:
    """A small environment with a secret, a disabled entry and a shadowed key."""
    return Environment(
        name="Dev",
        values=[
            EnvironmentVariable(key="baseUrl", value="https://api.example.com"),
            EnvironmentVariable(key="token", value="s3cr3t-token", type=VariableType.SECRET),
            EnvironmentVariable(key="legacyUrl", value="https://old.example.com", enabled=False),
            EnvironmentVariable(key="userId", value="42", type=VariableType.NUMBER),
            EnvironmentVariable(key="userId", value="99", type=VariableType.NUMBER),
        ],
    )


@pytest.fixture
def session_manager() -> SessionManager:
    """SessionManager with long TTL and no cleanup thread (for tests)."""
    return SessionManager(ttl_seconds=3600, cleanup_interval=9999)


CREATE_USER_COMMAND = (
    "curl -X POST https://api.example.com/users "
    "-H \"Content-Type: application/json\" -d '{\"name\":\"John\"}'"
)

MULTILINE_COMMAND = """\
curl -X PUT \\
  -H 'Accept: application/json' \\
  -H 'Authorization: Bearer {{token}}' \\
  -d '{"active": true}' \\
  {{baseUrl}}/users/{{userId}}"""

POSTMAN_ENVIRONMENT_JSON = """\
{
\t"id": "5d1c9f3e-0000-4000-8000-000000000000",
\t"name": "Staging",
\t"values": [
\t\t{"key": "baseUrl", "value": "https://staging.example.com", "type": "default", "enabled": true},
\t\t{"key": "token", "value": "abc123", "type": "secret", "enabled": true},
\t\t{"key": "retries", "value": "3", "type": "number", "enabled": true},
\t\t{"key": "debug", "value": "false", "type": "boolean", "enabled": false}
\t],
\t"_postman_variable_scope": "environment"
}
"""
