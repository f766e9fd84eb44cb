"""Session persistence - named JSON snapshots of an agent's conversation"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from zesbe.agent.message import AgentStats, ConversationMessage
from zesbe.storage.storage import Storage

logger = logging.getLogger(__name__)

DEFAULT_SESSION = "last"
SUMMARY_MESSAGES = 3
SUMMARY_CHARS = 50


@dataclass
class SessionResult:
    """Outcome of a session operation; I/O failures are reported, not raised"""
    success: bool
    error: str | None = None
    path: Path | None = None
    saved_at: str | None = None
    summary: str | None = None
    message_count: int = 0
    data: dict | None = None


@dataclass
class SessionInfo:
    name: str
    modified: datetime
    summary: str = ""


def generate_summary(history: list[ConversationMessage]) -> str:
    """Short description built from the last few user messages"""
    if not history:
        return "Empty session"

    user_messages = [m for m in history if m.role == "user"]
    parts = []
    for msg in user_messages[-SUMMARY_MESSAGES:]:
        text = msg.content[:SUMMARY_CHARS]
        if len(msg.content) > SUMMARY_CHARS:
            text += "..."
        parts.append(text)

    return " -> ".join(parts) or "No user messages"


class SessionStore:
    """Saves and restores sessions under ``<data dir>/sessions/<name>.json``"""

    PREFIX = "sessions"

    def _key(self, name: str) -> list[str]:
        return [self.PREFIX, name]

    def path_for(self, name: str = DEFAULT_SESSION) -> Path:
        return Storage.path(self._key(name))

    def save(
        self,
        name: str = DEFAULT_SESSION,
        *,
        cwd: str,
        provider: str,
        model: str,
        history: list[ConversationMessage],
        stats: AgentStats,
    ) -> SessionResult:
        session = {
            "savedAt": datetime.now(timezone.utc).isoformat(),
            "cwd": cwd,
            "provider": provider,
            "model": model,
            "history": [m.to_dict() for m in history],
            "stats": stats.to_dict(),
            "summary": generate_summary(history),
        }

        try:
            path = Storage.write(self._key(name), session)
        except (OSError, TypeError, ValueError) as e:
            logger.warning(f"Failed to save session {name}: {e}")
            return SessionResult(success=False, error=str(e))

        logger.debug(f"Saved session {name} to {path}")
        return SessionResult(
            success=True,
            path=path,
            saved_at=session["savedAt"],
            summary=session["summary"],
            message_count=len(history),
            data=session,
        )

    def load(self, name: str = DEFAULT_SESSION) -> SessionResult:
        if not Storage.exists(self._key(name)):
            return SessionResult(success=False, error="No saved session found")

        try:
            data = Storage.read(self._key(name))
            history = [ConversationMessage.from_dict(m) for m in data.get("history") or []]
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning(f"Failed to load session {name}: {e}")
            return SessionResult(success=False, error=str(e))

        data["history"] = history
        return SessionResult(
            success=True,
            path=self.path_for(name),
            saved_at=data.get("savedAt"),
            summary=data.get("summary"),
            message_count=len(history),
            data=data,
        )

    def delete(self, name: str) -> SessionResult:
        try:
            removed = Storage.delete(self._key(name))
        except OSError as e:
            return SessionResult(success=False, error=str(e))
        if not removed:
            return SessionResult(success=False, error="No saved session found")
        return SessionResult(success=True)

    def list_sessions(self) -> list[SessionInfo]:
        """Saved sessions, most recently modified first"""
        sessions = []
        for key in Storage.list([self.PREFIX]):
            path = Storage.path(key)
            try:
                modified = datetime.fromtimestamp(path.stat().st_mtime)
            except OSError:
                continue

            summary = ""
            try:
                data: Any = Storage.read(key)
                summary = data.get("summary", "") if isinstance(data, dict) else ""
            except (OSError, ValueError):
                pass

            sessions.append(SessionInfo(name=key[-1], modified=modified, summary=summary))

        return sorted(sessions, key=lambda s: s.modified, reverse=True)
