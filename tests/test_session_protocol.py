import base64

import pytest

from racli.client.client import RegistryAccordClient
from racli.client.domain.entities import SessionState
from racli.common.crypto import SigningService
from racli.common.exceptions import AuthError, HttpClientError, ResponseParseError

from .conftest import FakeSession, MockResponse

AUD = "cdv"


def test_request_nonce(client: RegistryAccordClient, fake_session: FakeSession) -> None:
    fake_session.queue(MockResponse(200, {"nonce": "n-1", "expiresAt": "2999-01-01T00:00:00Z"}))

    challenge = client.sessions.request_nonce("did:ra:ed25519:abc", AUD)

    assert challenge.nonce == "n-1"
    assert client.sessions.state is SessionState.NONCE_RECEIVED
    call = fake_session.calls[0]
    assert call["url"] == "http://localhost:8081/v1/session/nonce"
    assert call["json"] == {"did": "did:ra:ed25519:abc", "aud": AUD}


def test_request_nonce_failure_resets_state(
    client: RegistryAccordClient, fake_session: FakeSession
) -> None:
    fake_session.queue(MockResponse(404))
    with pytest.raises(HttpClientError):
        client.sessions.request_nonce("did:ra:ed25519:abc", AUD)
    assert client.sessions.state is SessionState.NO_SESSION


def test_sign_and_issue_stores_session(
    client: RegistryAccordClient, fake_session: FakeSession
) -> None:
    identity, _ = client.create_identity()
    fake_session.queue(
        MockResponse(
            200,
            {"jwt": "token", "exp": "2999-01-01T00:00:00Z", "aud": AUD, "sub": identity.did},
        )
    )

    session = client.sessions.sign_and_issue(identity.did, AUD, "n-1")

    assert client.sessions.state is SessionState.SESSION_ISSUED
    body = fake_session.calls[0]["json"]
    assert fake_session.calls[0]["url"] == "http://localhost:8081/v1/session/issue"
    assert body["nonce"] == "n-1"
    assert SigningService.verify(
        b"n-1", base64.b64decode(body["signature"]), identity.public_key
    )

    stored = client.session_store.get_session(AUD)
    assert stored == session
    assert stored.jwt == "token"
    assert stored.did == identity.did
    assert stored.is_active()


def test_sign_and_issue_without_identity(
    client: RegistryAccordClient, fake_session: FakeSession
) -> None:
    with pytest.raises(AuthError, match="No identity configured"):
        client.sessions.sign_and_issue("did:ra:ed25519:abc", AUD, "n-1")
    assert fake_session.calls == []
    assert client.sessions.state is SessionState.NO_SESSION


def test_rejected_nonce_stores_nothing(
    client: RegistryAccordClient, fake_session: FakeSession
) -> None:
    identity, _ = client.create_identity()
    fake_session.queue(MockResponse(401, text="nonce expired"))

    with pytest.raises(AuthError):
        client.sessions.sign_and_issue(identity.did, AUD, "stale")

    assert client.session_store.get_session(AUD) is None
    assert client.sessions.state is SessionState.NO_SESSION


def test_unexpected_nonce_shape_keeps_correlation_id(
    client: RegistryAccordClient, fake_session: FakeSession
) -> None:
    fake_session.queue(MockResponse(200, {"unexpected": True}))

    with pytest.raises(ResponseParseError, match="NonceChallenge") as exc:
        client.sessions.request_nonce("did:ra:ed25519:abc", AUD)

    assert exc.value.exit_code == 5
    assert exc.value.correlation_id == fake_session.calls[0]["headers"]["X-Correlation-ID"]
    assert client.sessions.state is SessionState.NO_SESSION
