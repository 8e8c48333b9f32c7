"""Integration tests for the FastAPI REST API."""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from curlbridge.api.app import build_session_manager, create_app
from curlbridge.api.deps import init_session_manager, reset_session_manager
from curlbridge.settings import Settings
from tests.conftest import CREATE_USER_COMMAND, POSTMAN_ENVIRONMENT_JSON

ENVIRONMENT = {
    "name": "Dev",
    "values": [
        {"key": "baseUrl", "value": "https://api.example.com"},
        {"key": "token", "value": "s3cr3t", "type": "secret"},
    ],
}


@pytest.fixture
def app():
    settings = Settings(session_ttl_seconds=3600, session_cleanup_interval=9999)
    app = create_app(settings=settings)
    # Manually init SessionManager (ASGITransport doesn't trigger lifespan)
    init_session_manager(build_session_manager(settings))
    yield app
    reset_session_manager()


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


async def _create_session(client: AsyncClient, **body: object) -> str:
    response = await client.post("/sessions", json=body)
    assert response.status_code == 201
    return response.json()["session_id"]


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


class TestHealthEndpoint:
    async def test_health(self, client: AsyncClient) -> None:
        response = await client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert "version" in data
        assert "X-Request-Duration-Ms" in response.headers


# ---------------------------------------------------------------------------
# Stateless command endpoints
# ---------------------------------------------------------------------------


class TestParseEndpoint:
    async def test_parse(self, client: AsyncClient) -> None:
        response = await client.post("/commands/parse", json={"command": CREATE_USER_COMMAND})
        assert response.status_code == 200
        data = response.json()
        assert data["valid"] is True
        assert data["request"]["method"] == "POST"
        assert data["request"]["url"] == "https://api.example.com/users"
        assert data["request"]["body"] == {
            "mode": "raw",
            "raw": '{"name":"John"}',
            "language": "json",
            "fields": [],
            "graphql": None,
        }

    async def test_parse_with_errors(self, client: AsyncClient) -> None:
        response = await client.post("/commands/parse", json={"command": "curl -d '{"})
        data = response.json()
        assert response.status_code == 200
        assert data["valid"] is False
        codes = {e["code"] for e in data["errors"]}
        assert codes == {"UNTERMINATED_QUOTE", "MISSING_URL"}


class TestValidateEndpoint:
    async def test_valid(self, client: AsyncClient) -> None:
        response = await client.post("/commands/validate", json={"command": "curl https://x.io"})
        assert response.json() == {"valid": True, "errors": [], "warnings": []}

    async def test_positions_use_camel_case(self, client: AsyncClient) -> None:
        response = await client.post(
            "/commands/validate", json={"command": "curl https://x.io \\\n  -H"}
        )
        error = response.json()["errors"][0]
        assert error["code"] == "MISSING_ARGUMENT"
        assert error["severity"] == "error"
        assert (error["row"], error["column"], error["endRow"], error["endColumn"]) == (
            1,
            2,
            1,
            4,
        )

    async def test_warning_with_suggestions(self, client: AsyncClient) -> None:
        response = await client.post(
            "/commands/validate", json={"command": "curl -h https://x.io"}
        )
        data = response.json()
        assert data["valid"] is True
        assert data["warnings"][0]["suggestions"] == ["-H"]

    async def test_missing_command(self, client: AsyncClient) -> None:
        response = await client.post("/commands/validate", json={})
        assert response.status_code == 422


class TestGenerateEndpoint:
    async def test_generate(self, client: AsyncClient) -> None:
        response = await client.post(
            "/commands/generate",
            json={
                "request": {
                    "method": "POST",
                    "url": "https://x.io",
                    "auth": {"type": "bearer", "credentials": {"token": "{{token}}"}},
                    "body": {"mode": "urlencoded", "fields": [{"key": "q", "value": "a b"}]},
                },
                "multiline": False,
            },
        )
        assert response.status_code == 200
        assert response.json()["command"] == (
            "curl -X POST -H 'Authorization: Bearer {{token}}' "
            "--data-urlencode 'q=a b' https://x.io"
        )

    async def test_round_trip(self, client: AsyncClient) -> None:
        parsed = await client.post("/commands/parse", json={"command": CREATE_USER_COMMAND})
        request = parsed.json()["request"]
        generated = await client.post("/commands/generate", json={"request": request})
        reparsed = await client.post(
            "/commands/parse", json={"command": generated.json()["command"]}
        )
        assert reparsed.json()["request"] == request

    async def test_invalid_request(self, client: AsyncClient) -> None:
        response = await client.post(
            "/commands/generate", json={"request": {"body": {"mode": "soap"}}}
        )
        assert response.status_code == 422


class TestCompleteEndpoint:
    async def test_flags(self, client: AsyncClient) -> None:
        response = await client.post(
            "/commands/complete", json={"command": "curl --hea", "cursor": 10}
        )
        labels = [s["label"] for s in response.json()["suggestions"]]
        assert labels[:2] == ["--head", "--header"]

    async def test_variables(self, client: AsyncClient) -> None:
        response = await client.post(
            "/commands/complete",
            json={"command": "curl {{to", "cursor": 9, "environment": ENVIRONMENT},
        )
        suggestion = response.json()["suggestions"][0]
        assert suggestion["label"] == "token"
        assert suggestion["masked"] is True
        assert "s3cr3t" not in suggestion["detail"]

    async def test_no_environment(self, client: AsyncClient) -> None:
        response = await client.post(
            "/commands/complete", json={"command": "curl {{to", "cursor": 9}
        )
        assert response.json()["suggestions"][0]["kind"] == "no_active_environment"


# ---------------------------------------------------------------------------
# Variables
# ---------------------------------------------------------------------------


class TestVariablesEndpoints:
    async def test_analyze_masks_secrets(self, client: AsyncClient) -> None:
        response = await client.post(
            "/variables/analyze",
            json={
                "text": "curl {{baseUrl}} -H 'X: {{token}}' {{nope}}",
                "environment": ENVIRONMENT,
            },
        )
        variables = response.json()["variables"]
        assert [(v["name"], v["resolved"]) for v in variables] == [
            ("baseUrl", True),
            ("token", True),
            ("nope", False),
        ]
        assert variables[0]["value"] == "https://api.example.com"
        assert variables[1]["value"] == "••••••"
        assert variables[1]["secret"] is True

    async def test_interpolate(self, client: AsyncClient) -> None:
        response = await client.post(
            "/variables/interpolate",
            json={"text": "curl {{baseUrl}}/{{nope}}", "environment": ENVIRONMENT},
        )
        data = response.json()
        assert data["interpolated"] == "curl https://api.example.com/{{nope}}"
        assert data["has_variables"] is True
        assert data["all_resolved"] is False
        assert data["unresolved_count"] == 1

    async def test_interpolate_without_environment(self, client: AsyncClient) -> None:
        response = await client.post("/variables/interpolate", json={"text": "{{a}}"})
        assert response.json()["interpolated"] == "{{a}}"


# ---------------------------------------------------------------------------
# Reference
# ---------------------------------------------------------------------------


class TestReferenceEndpoints:
    async def test_flags(self, client: AsyncClient) -> None:
        response = await client.get("/reference/flags")
        data = response.json()
        assert "# cURL Command Reference" in data["reference"]
        longs = [f["long"] for f in data["flags"]]
        assert "--header" in longs
        assert "--data-urlencode" in longs

    async def test_single_flag(self, client: AsyncClient) -> None:
        response = await client.get("/reference/flags/header")
        data = response.json()
        assert response.status_code == 200
        assert data["short"] == "-H"
        assert data["arity"] == 1
        assert data["argument_kind"] == "header"
        assert "--header" in data["documentation"]

    async def test_unknown_flag(self, client: AsyncClient) -> None:
        response = await client.get("/reference/flags/hedaer")
        assert response.status_code == 404
        assert "--header" in response.json()["detail"]["suggestions"]


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------


class TestSessionsCRUD:
    async def test_create_session(self, client: AsyncClient) -> None:
        response = await client.post("/sessions", json={"metadata": {"user": "alice"}})
        assert response.status_code == 201
        data = response.json()
        assert len(data["session_id"]) == 32
        assert data["metadata"] == {"user": "alice"}
        assert data["generation"] == 0
        assert data["surface"] == "text"

    async def test_create_without_body(self, client: AsyncClient) -> None:
        response = await client.post("/sessions")
        assert response.status_code == 201

    async def test_get_and_list(self, client: AsyncClient) -> None:
        sid = await _create_session(client, environment=ENVIRONMENT)
        response = await client.get(f"/sessions/{sid}")
        assert response.json()["environment_name"] == "Dev"
        listing = await client.get("/sessions")
        assert [s["session_id"] for s in listing.json()["sessions"]] == [sid]

    async def test_delete(self, client: AsyncClient) -> None:
        sid = await _create_session(client)
        response = await client.delete(f"/sessions/{sid}")
        assert response.status_code == 204
        response = await client.get(f"/sessions/{sid}")
        assert response.status_code == 404

    async def test_missing_session(self, client: AsyncClient) -> None:
        response = await client.get("/sessions/nonexist123/analysis")
        assert response.status_code == 404
        response = await client.delete("/sessions/nonexist123")
        assert response.status_code == 404

    async def test_list_disabled(self) -> None:
        settings = Settings(disable_session_list=True)
        app = create_app(settings=settings)
        init_session_manager(build_session_manager(settings), disable_session_list=True)
        try:
            async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
                response = await c.get("/sessions")
            assert response.status_code == 403
        finally:
            reset_session_manager()


class TestSessionEditing:
    async def test_text_then_analysis(self, client: AsyncClient) -> None:
        sid = await _create_session(client, environment=ENVIRONMENT)
        response = await client.put(
            f"/sessions/{sid}/text",
            json={"text": "curl {{baseUrl}}/users -H 'Authorization: Bearer {{token}}'"},
        )
        assert response.json()["generation"] == 1

        analysis = (await client.get(f"/sessions/{sid}/analysis")).json()
        assert analysis["generation"] == 1
        assert analysis["valid"] is True
        assert analysis["request"]["auth"]["type"] == "bearer"
        assert analysis["interpolated"].startswith("curl https://api.example.com/users")
        secret = next(v for v in analysis["variables"] if v["name"] == "token")
        assert secret["value"] == "••••••"

    async def test_stale_generation(self, client: AsyncClient) -> None:
        sid = await _create_session(client)
        await client.put(f"/sessions/{sid}/text", json={"text": "curl a.io"})
        response = await client.put(
            f"/sessions/{sid}/text", json={"text": "curl b.io", "expected_generation": 0}
        )
        assert response.status_code == 409
        detail = response.json()["detail"]
        assert detail["expected_generation"] == 0
        assert detail["current_generation"] == 1

    async def test_builder_edit(self, client: AsyncClient) -> None:
        sid = await _create_session(client)
        response = await client.put(
            f"/sessions/{sid}/request",
            json={"request": {"method": "DELETE", "url": "https://x.io/1"}},
        )
        data = response.json()
        assert data["text"] == "curl -X DELETE https://x.io/1"
        assert data["surface"] == "builder"
        analysis = (await client.get(f"/sessions/{sid}/analysis")).json()
        assert analysis["surface"] == "builder"
        assert analysis["request"]["method"] == "DELETE"

    async def test_session_complete(self, client: AsyncClient) -> None:
        sid = await _create_session(client, text="curl -X P")
        response = await client.post(f"/sessions/{sid}/complete", json={"cursor": 9})
        labels = [s["label"] for s in response.json()["suggestions"]]
        assert labels == ["POST", "PUT", "PATCH"]


class TestSessionEnvironment:
    async def test_upload_postman_export(self, client: AsyncClient) -> None:
        sid = await _create_session(client, text="curl {{baseUrl}}")
        response = await client.put(
            f"/sessions/{sid}/environment",
            json={"environment_document": POSTMAN_ENVIRONMENT_JSON},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Staging"
        assert data["variable_count"] == 4
        analysis = (await client.get(f"/sessions/{sid}/analysis")).json()
        assert analysis["interpolated"] == "curl https://staging.example.com"

    async def test_invalid_document(self, client: AsyncClient) -> None:
        sid = await _create_session(client)
        response = await client.put(
            f"/sessions/{sid}/environment",
            json={"environment_document": "a: &x 1\nb: *x\n"},
        )
        assert response.status_code == 422
        assert "anchors" in response.json()["detail"]

    async def test_clear(self, client: AsyncClient) -> None:
        sid = await _create_session(client, environment=ENVIRONMENT)
        response = await client.put(f"/sessions/{sid}/environment", json={})
        assert response.json() == {"name": None, "variable_count": 0, "fingerprint": ""}
        info = (await client.get(f"/sessions/{sid}")).json()
        assert info["environment_name"] is None
