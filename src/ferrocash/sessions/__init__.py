"""Register session lifecycle."""

from ferrocash.sessions.service import SessionManager

__all__ = ["SessionManager"]
