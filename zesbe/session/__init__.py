from .store import SessionStore, SessionResult, SessionInfo, generate_summary, DEFAULT_SESSION

__all__ = [
    "SessionStore",
    "SessionResult",
    "SessionInfo",
    "generate_summary",
    "DEFAULT_SESSION",
]
