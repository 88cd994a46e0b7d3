"""
Per-audience session token cache.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from pydantic import RootModel

from racli.common.exceptions import FileSystemError
from racli.common.models import Session, SessionStatus, parse_document
from racli.store.fs import ensure_directory, read_json, write_private_json

logger = logging.getLogger(__name__)

SESSION_FILE_NAME = "session.json"


class SessionMap(RootModel[dict[str, Session]]):
    pass


class SessionStore:
    """Manages session.json, a JSON object keyed by audience."""

    def __init__(self, base_dir: Path):
        self.base_dir = base_dir
        self.session_path = base_dir / SESSION_FILE_NAME

    def _load_sessions(self) -> dict[str, Session]:
        """Load all sessions; a missing or corrupted file reads as empty."""
        try:
            raw = read_json(self.session_path)
        except FileNotFoundError:
            return {}
        # ValueError covers JSONDecodeError and UnicodeDecodeError
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable session file %s: %s", self.session_path, e)
            return {}
        result = parse_document(SessionMap, raw)
        if result.value is None:
            logger.warning("Ignoring corrupted session file %s", self.session_path)
            return {}
        return result.value.root

    def store_session(self, session: Session) -> Path:
        """Merge the session under its audience and rewrite the file."""
        sessions = self._load_sessions()
        sessions[session.aud] = session
        data: dict[str, Any] = {aud: s.to_wire() for aud, s in sessions.items()}
        try:
            ensure_directory(self.base_dir)
            write_private_json(self.session_path, data)
        except OSError as e:
            msg = f"Failed to store session for {session.aud}: {e.strerror or e}"
            raise FileSystemError(msg) from e
        logger.info("Session for audience %s stored", session.aud)
        return self.session_path

    def get_session(self, aud: str) -> Session | None:
        return self._load_sessions().get(aud)

    def current_session(self) -> SessionStatus | None:
        """Status of the first stored session, if any."""
        sessions = self._load_sessions()
        if not sessions:
            return None
        session = next(iter(sessions.values()))
        return SessionStatus(
            did=session.did, expiry=session.expiry, active=session.is_active()
        )
