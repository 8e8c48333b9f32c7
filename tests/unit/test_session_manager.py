"""Unit tests for SessionManager."""

from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from curlbridge.models.environment import Environment
from curlbridge.models.request import RequestModel
from curlbridge.service.editor import Surface
from curlbridge.service.session_manager import SessionManager, SessionNotFoundError


class TestSessionLifecycle:
    def test_create_session(self, session_manager: SessionManager) -> None:
        info = session_manager.create_session()
        assert len(info.session_id) == 32
        assert info.generation == 0
        assert info.surface == Surface.TEXT
        assert info.environment_name is None
        assert info.metadata == {}

    def test_create_with_metadata(self, session_manager: SessionManager) -> None:
        info = session_manager.create_session(metadata={"user": "alice"})
        assert info.metadata == {"user": "alice"}

    def test_create_with_text_and_environment(
        self, session_manager: SessionManager, environment: Environment
    ) -> None:
        info = session_manager.create_session(text="curl {{baseUrl}}", environment=environment)
        assert info.environment_name == "Dev"
        editor = session_manager.get_editor(info.session_id)
        assert editor.text == "curl {{baseUrl}}"
        assert editor.interpolated_text() == "curl https://api.example.com"

    def test_get_editor(self, session_manager: SessionManager) -> None:
        info = session_manager.create_session()
        editor = session_manager.get_editor(info.session_id)
        assert editor.text == ""

    def test_get_editor_missing_raises(self, session_manager: SessionManager) -> None:
        with pytest.raises(SessionNotFoundError, match="not found"):
            session_manager.get_editor("nonexist123")

    def test_get_session_reflects_edits(self, session_manager: SessionManager) -> None:
        info = session_manager.create_session()
        session_manager.get_editor(info.session_id).update_text("curl https://x.io")
        retrieved = session_manager.get_session(info.session_id)
        assert retrieved.session_id == info.session_id
        assert retrieved.generation == 1

    def test_close_session(self, session_manager: SessionManager) -> None:
        info = session_manager.create_session()
        session_manager.close_session(info.session_id)
        with pytest.raises(SessionNotFoundError):
            session_manager.get_editor(info.session_id)

    def test_close_missing_raises(self, session_manager: SessionManager) -> None:
        with pytest.raises(SessionNotFoundError, match="not found"):
            session_manager.close_session("nonexist123")

    def test_list_sessions(self, session_manager: SessionManager) -> None:
        session_manager.create_session()
        session_manager.create_session()
        sessions = session_manager.list_sessions()
        assert len(sessions) == 2

    def test_active_count(self, session_manager: SessionManager) -> None:
        assert session_manager.active_count == 0
        session_manager.create_session()
        session_manager.create_session()
        assert session_manager.active_count == 2

    def test_editor_options_propagate(self) -> None:
        mgr = SessionManager(ttl_seconds=3600, cleanup_interval=9999, line_width=20)
        info = mgr.create_session()
        editor = mgr.get_editor(info.session_id)
        text = editor.update_request(RequestModel(method="DELETE", url="https://x.io/1"))
        assert "\\\n" in text


class TestSessionExpiration:
    def test_expired_session_raises(self) -> None:
        mgr = SessionManager(ttl_seconds=0, cleanup_interval=9999)
        info = mgr.create_session()
        time.sleep(0.05)  # ensure TTL has passed
        with pytest.raises(SessionNotFoundError, match="expired"):
            mgr.get_editor(info.session_id)

    def test_get_session_expired_raises(self) -> None:
        mgr = SessionManager(ttl_seconds=0, cleanup_interval=9999)
        info = mgr.create_session()
        time.sleep(0.05)
        with pytest.raises(SessionNotFoundError, match="expired"):
            mgr.get_session(info.session_id)


class TestDefaultSession:
    def test_get_or_create_default(self, session_manager: SessionManager) -> None:
        editor1 = session_manager.get_or_create_default()
        editor2 = session_manager.get_or_create_default()
        assert editor1 is editor2

    def test_default_not_in_list(self, session_manager: SessionManager) -> None:
        session_manager.get_or_create_default()
        assert session_manager.list_sessions() == []


class TestCleanup:
    def test_purge_expired(self) -> None:
        mgr = SessionManager(ttl_seconds=0, cleanup_interval=9999)
        mgr.create_session()
        mgr.create_session()
        time.sleep(0.05)
        mgr._purge_expired()
        assert mgr.active_count == 0

    def test_cleanup_thread(self) -> None:
        mgr = SessionManager(ttl_seconds=0, cleanup_interval=0.05)
        mgr.start()
        try:
            mgr.create_session()
            time.sleep(0.2)  # wait for cleanup to run
            assert mgr.active_count == 0
        finally:
            mgr.stop()


class TestThreadSafety:
    def test_concurrent_creates(self, session_manager: SessionManager) -> None:
        def create() -> str:
            info = session_manager.create_session()
            return info.session_id

        with ThreadPoolExecutor(max_workers=10) as pool:
            ids = list(pool.map(lambda _: create(), range(50)))

        assert len(set(ids)) == 50
        assert session_manager.active_count == 50

    def test_concurrent_edits_keep_generations_unique(
        self, session_manager: SessionManager
    ) -> None:
        info = session_manager.create_session()
        editor = session_manager.get_editor(info.session_id)

        with ThreadPoolExecutor(max_workers=10) as pool:
            generations = list(
                pool.map(lambda n: editor.update_text(f"curl https://x.io/{n}"), range(50))
            )

        assert sorted(generations) == list(range(1, 51))


class TestSessionIsolation:
    def test_editors_are_independent(
        self, session_manager: SessionManager, environment: Environment
    ) -> None:
        """Text and environment set in one session are not visible in another."""
        info_a = session_manager.create_session()
        info_b = session_manager.create_session()

        editor_a = session_manager.get_editor(info_a.session_id)
        editor_b = session_manager.get_editor(info_b.session_id)

        editor_a.update_text("curl {{baseUrl}}")
        editor_a.set_environment(environment)

        assert editor_b.text == ""
        assert editor_b.environment is None
