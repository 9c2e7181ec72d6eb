"""Authentication and session handling for the admin API."""

from .session_manager import SessionManager, SessionState

__all__ = ["SessionManager", "SessionState"]
