"""Domain layer: Core client entities.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from racli.common.models import NonceChallenge, Session


class SessionState(enum.Enum):
    """States of the nonce-challenge session flow."""

    NO_SESSION = "no_session"
    NONCE_REQUESTED = "nonce_requested"
    NONCE_RECEIVED = "nonce_received"
    SIGNATURE_PENDING = "signature_pending"
    SESSION_ISSUED = "session_issued"


@dataclass
class SessionFlow:
    """Domain entity tracking one pass through the session flow."""

    state: SessionState = SessionState.NO_SESSION
    did: str | None = None
    audience: str | None = None
    challenge: NonceChallenge | None = None
    session: Session | None = None

    def reset(self) -> None:
        self.state = SessionState.NO_SESSION
        self.challenge = None
        self.session = None
