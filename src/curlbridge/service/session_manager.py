"""Session management: TTL-scoped editor sessions for multi-client use."""

from __future__ import annotations

import logging
import secrets
import threading
import time
from dataclasses import dataclass, field
from datetime import UTC, datetime

from curlbridge.models.environment import Environment
from curlbridge.service.editor import EditorSession, Surface

_DEFAULT_SESSION_ID = "__default__"

logger = logging.getLogger("curlbridge.service")


class SessionNotFoundError(KeyError):
    """Raised when a session ID is not found or has expired."""


@dataclass
class SessionInfo:
    """Public session metadata (returned by list/get)."""

    session_id: str
    created_at: datetime
    last_accessed_at: datetime
    generation: int
    surface: Surface
    environment_name: str | None
    metadata: dict[str, str]


@dataclass
class _Session:
    """Internal session state."""

    session_id: str
    editor: EditorSession
    last_accessed: float  # monotonic clock for TTL checks
    metadata: dict[str, str] = field(default_factory=dict)
    created_at_wall: datetime = field(default_factory=lambda: datetime.now(UTC))
    last_accessed_wall: datetime = field(default_factory=lambda: datetime.now(UTC))


class SessionManager:
    """Manages TTL-scoped sessions, each holding its own :class:`EditorSession`.

    Thread-safe.  Call :meth:`start` to begin the background cleanup thread
    and :meth:`stop` to shut it down.
    """

    def __init__(
        self,
        ttl_seconds: int = 1800,
        cleanup_interval: int = 60,
        *,
        debounce_ms: int = 500,
        line_width: int = 80,
        max_distance: int = 2,
        completion_limit: int = 50,
        secret_mask: str = "••••••",
    ) -> None:
        self._ttl = ttl_seconds
        self._cleanup_interval = cleanup_interval
        self._editor_options = {
            "debounce_ms": debounce_ms,
            "line_width": line_width,
            "max_distance": max_distance,
            "completion_limit": completion_limit,
            "secret_mask": secret_mask,
        }
        self._lock = threading.Lock()
        self._sessions: dict[str, _Session] = {}
        self._stop_event = threading.Event()
        self._cleanup_thread: threading.Thread | None = None

    # -- lifecycle -----------------------------------------------------------

    def start(self) -> None:
        """Start the background cleanup daemon thread."""
        if self._cleanup_thread is not None:
            return
        self._stop_event.clear()
        self._cleanup_thread = threading.Thread(
            target=self._cleanup_loop, daemon=True, name="session-cleanup"
        )
        self._cleanup_thread.start()

    def stop(self) -> None:
        """Signal the cleanup thread to stop and wait for it."""
        self._stop_event.set()
        if self._cleanup_thread is not None:
            self._cleanup_thread.join(timeout=5)
            self._cleanup_thread = None

    # -- public API ----------------------------------------------------------

    def _new_editor(self, text: str = "", environment: Environment | None = None) -> EditorSession:
        return EditorSession(text, environment, **self._editor_options)

    def create_session(
        self,
        metadata: dict[str, str] | None = None,
        text: str = "",
        environment: Environment | None = None,
    ) -> SessionInfo:
        """Create a new session and return its info."""
        session_id = secrets.token_hex(16)  # 32-char hex (128-bit)
        now_wall = datetime.now(UTC)
        session = _Session(
            session_id=session_id,
            editor=self._new_editor(text, environment),
            last_accessed=time.monotonic(),
            metadata=metadata or {},
            created_at_wall=now_wall,
            last_accessed_wall=now_wall,
        )
        with self._lock:
            self._sessions[session_id] = session
        logger.debug("Created session %s", session_id)
        return self._session_info(session)

    def _touch(self, session_id: str) -> _Session:
        """Look up a live session and refresh it.  Caller holds the lock."""
        now_mono = time.monotonic()
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(f"Session '{session_id}' not found")
        if now_mono - session.last_accessed > self._ttl:
            del self._sessions[session_id]
            session.editor.close()
            raise SessionNotFoundError(f"Session '{session_id}' has expired")
        session.last_accessed = now_mono
        session.last_accessed_wall = datetime.now(UTC)
        return session

    def get_editor(self, session_id: str) -> EditorSession:
        """Get the EditorSession for a session, updating its last-accessed time.

        Raises :class:`SessionNotFoundError` if the session is missing or expired.
        """
        with self._lock:
            return self._touch(session_id).editor

    def get_session(self, session_id: str) -> SessionInfo:
        """Get session info (also refreshes last-accessed)."""
        with self._lock:
            return self._session_info(self._touch(session_id))

    def close_session(self, session_id: str) -> None:
        """Explicitly close a session, cancelling any pending analysis."""
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is None:
            raise SessionNotFoundError(f"Session '{session_id}' not found")
        session.editor.close()

    def list_sessions(self) -> list[SessionInfo]:
        """Return info for all non-expired sessions (excluding default)."""
        now_mono = time.monotonic()
        result: list[SessionInfo] = []
        with self._lock:
            for session in self._sessions.values():
                if session.session_id == _DEFAULT_SESSION_ID:
                    continue
                if now_mono - session.last_accessed <= self._ttl:
                    result.append(self._session_info(session))
        return result

    @property
    def active_count(self) -> int:
        """Number of active (non-expired) sessions."""
        now_mono = time.monotonic()
        with self._lock:
            return sum(
                1 for s in self._sessions.values() if now_mono - s.last_accessed <= self._ttl
            )

    def get_or_create_default(self) -> EditorSession:
        """Get (or lazily create) the default session."""
        with self._lock:
            session = self._sessions.get(_DEFAULT_SESSION_ID)
            if session is not None:
                session.last_accessed = time.monotonic()
                session.last_accessed_wall = datetime.now(UTC)
                return session.editor
            session = _Session(
                session_id=_DEFAULT_SESSION_ID,
                editor=self._new_editor(),
                last_accessed=time.monotonic(),
            )
            self._sessions[_DEFAULT_SESSION_ID] = session
            return session.editor

    # -- internal ------------------------------------------------------------

    @staticmethod
    def _session_info(session: _Session) -> SessionInfo:
        environment = session.editor.environment
        return SessionInfo(
            session_id=session.session_id,
            created_at=session.created_at_wall,
            last_accessed_at=session.last_accessed_wall,
            generation=session.editor.generation,
            surface=session.editor.surface,
            environment_name=environment.name if environment is not None else None,
            metadata=session.metadata,
        )

    def _purge_expired(self) -> None:
        """Remove all expired sessions (called by cleanup thread)."""
        now_mono = time.monotonic()
        with self._lock:
            expired = [
                sid for sid, s in self._sessions.items() if now_mono - s.last_accessed > self._ttl
            ]
            removed = [self._sessions.pop(sid) for sid in expired]
        for session in removed:
            session.editor.close()
        if removed:
            logger.info("Purged %d expired session(s)", len(removed))

    def _cleanup_loop(self) -> None:
        """Background loop that periodically purges expired sessions."""
        while not self._stop_event.wait(timeout=self._cleanup_interval):
            self._purge_expired()
