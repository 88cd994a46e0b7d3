"""
Interfaces and protocols for dependency injection.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from racli.common.models import Identity, PostRecord, Session, SessionStatus


class IKeyStore(Protocol):
    """Protocol for identity persistence."""

    def exists(self) -> bool: ...

    def save(self, identity: Identity) -> Path: ...

    def load(self) -> Identity | None: ...


class ISessionStore(Protocol):
    """Protocol for the per-audience session cache."""

    def store_session(self, session: Session) -> Path: ...

    def get_session(self, aud: str) -> Session | None: ...

    def current_session(self) -> SessionStatus | None: ...


class IPostStore(Protocol):
    """Protocol for the local content store."""

    def load(self) -> list[PostRecord]: ...

    def append(self, record: PostRecord) -> None: ...
