"""
Session issuance for the identity service.

Two user-driven steps: fetch a nonce, then sign it and exchange it for a
token. Nothing chains the steps automatically; the nonce is shown to the user
in between.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from racli.client.domain.entities import SessionFlow, SessionState
from racli.client.http import join_url
from racli.common.crypto import SigningService
from racli.common.exceptions import AuthError
from racli.common.models import (
    NonceChallenge,
    NonceRequest,
    Session,
    SessionIssueRequest,
    SessionIssueResponse,
    utc_now_iso,
)

if TYPE_CHECKING:
    from racli.client.http import ResilientHttpClient
    from racli.common.interfaces import IKeyStore, ISessionStore

logger = logging.getLogger(__name__)

NONCE_PATH = "/v1/session/nonce"
ISSUE_PATH = "/v1/session/issue"


class SessionProtocol:
    """Handles the nonce-challenge flow and persists issued sessions."""

    def __init__(
        self,
        identity_base: str,
        http: ResilientHttpClient,
        key_store: IKeyStore,
        session_store: ISessionStore,
        timeout_ms: int | None = None,
    ):
        self.identity_base = identity_base
        self.http = http
        self.key_store = key_store
        self.session_store = session_store
        self.timeout_ms = timeout_ms
        self.flow = SessionFlow()

    @property
    def state(self) -> SessionState:
        return self.flow.state

    def request_nonce(self, did: str, audience: str) -> NonceChallenge:
        """Fetch a short-lived nonce for (did, audience)."""
        self.flow.did = did
        self.flow.audience = audience
        self.flow.state = SessionState.NONCE_REQUESTED
        logger.info("Requesting nonce for %s (aud=%s)", did, audience)

        try:
            challenge = self.http.request(
                join_url(self.identity_base, NONCE_PATH),
                "POST",
                NonceRequest(did=did, aud=audience).to_wire(),
                model=NonceChallenge,
                timeout_ms=self.timeout_ms,
            )
        except Exception:
            self.flow.reset()
            raise

        self.flow.challenge = challenge
        self.flow.state = SessionState.NONCE_RECEIVED
        return challenge

    def sign_and_issue(self, did: str, audience: str, nonce: str) -> Session:
        """
        Sign the nonce with the local identity and exchange it for a session.

        Nonce expiry and reuse are checked by the server only.
        """
        try:
            identity = self.key_store.load()
            if identity is None:
                msg = "No identity configured. Run `ra identity create` first."
                raise AuthError(msg, "NO_IDENTITY")
            if identity.did != did:
                logger.warning(
                    "Issuing for %s with local identity %s", did, identity.did
                )

            self.flow.state = SessionState.SIGNATURE_PENDING
            signature = SigningService.sign_text(nonce, identity.secret_key)
            req = SessionIssueRequest(
                did=did, aud=audience, nonce=nonce, signature=signature
            )
            resp = self.http.request(
                join_url(self.identity_base, ISSUE_PATH),
                "POST",
                req.to_wire(),
                model=SessionIssueResponse,
                timeout_ms=self.timeout_ms,
            )
            session = Session(
                jwt=resp.jwt,
                expiry=resp.exp,
                aud=resp.aud,
                issued_at=utc_now_iso(),
                did=resp.sub,
            )
            self.session_store.store_session(session)
        except Exception:
            self.flow.reset()
            raise

        self.flow.did = did
        self.flow.audience = audience
        self.flow.session = session
        self.flow.state = SessionState.SESSION_ISSUED
        logger.info("Session issued for %s (aud=%s)", session.did, session.aud)
        return session
