"""Editor sessions: buffer state, debounced analysis and TTL-scoped session management."""

from curlbridge.service.debounce import Debouncer
from curlbridge.service.editor import EditorAnalysis, EditorSession, StaleGenerationError, Surface
from curlbridge.service.session_manager import SessionInfo, SessionManager, SessionNotFoundError

__all__ = [
    "Debouncer",
    "EditorAnalysis",
    "EditorSession",
    "SessionInfo",
    "SessionManager",
    "SessionNotFoundError",
    "StaleGenerationError",
    "Surface",
]
