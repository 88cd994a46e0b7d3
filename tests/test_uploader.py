import hashlib
from pathlib import Path

import pytest

from racli.client.client import RegistryAccordClient
from racli.common.exceptions import ChecksumMismatchError, FileSystemError, ServerError

from .conftest import FakeSession, MockResponse

PAYLOAD = b"\x89PNG fake image bytes"
DIGEST = hashlib.sha256(PAYLOAD).hexdigest()


@pytest.fixture
def media_file(tmp_path: Path) -> Path:
    path = tmp_path / "pic.png"
    path.write_bytes(PAYLOAD)
    return path


def _init_response() -> MockResponse:
    return MockResponse(
        200,
        {
            "uploadUrl": "http://localhost:8082/v1/media/upload/abc",
            "finalizeUrl": "http://localhost:8082/v1/media/finalize/abc",
        },
    )


def test_upload_flow(
    client: RegistryAccordClient, fake_session: FakeSession, media_file: Path
) -> None:
    fake_session.queue(
        _init_response(),
        MockResponse(200),
        MockResponse(200, {"cid": DIGEST.upper(), "mimeType": "image/png", "size": len(PAYLOAD)}),
    )

    ref = client.uploader.upload(media_file, "image/png")

    assert ref.content_id == DIGEST
    assert ref.mime_type == "image/png"
    init, put, finalize = fake_session.calls
    assert init["url"] == "http://localhost:8082/v1/media/uploadInit"
    assert init["json"] == {"mimeType": "image/png", "size": len(PAYLOAD)}
    assert put["method"] == "PUT"
    assert put["data"] == PAYLOAD
    assert finalize["url"].endswith("/v1/media/finalize/abc")
    assert finalize["json"] == {"checksum": DIGEST}


def test_checksum_mismatch_names_both_digests(
    client: RegistryAccordClient, fake_session: FakeSession, media_file: Path
) -> None:
    wrong = "0" * 64
    fake_session.queue(_init_response(), MockResponse(200), MockResponse(200, {"cid": wrong}))

    with pytest.raises(ChecksumMismatchError) as exc:
        client.uploader.upload(media_file, "image/png")

    assert DIGEST in str(exc.value)
    assert wrong in str(exc.value)
    assert isinstance(exc.value, ServerError)
    assert exc.value.correlation_id == fake_session.calls[2]["headers"]["X-Correlation-ID"]
    # never retried
    assert len(fake_session.calls) == 3


def test_mismatch_aborts_post_creation(
    client: RegistryAccordClient, fake_session: FakeSession, media_file: Path
) -> None:
    client.create_identity()
    fake_session.queue(_init_response(), MockResponse(200), MockResponse(200, {"cid": "ff" * 32}))

    with pytest.raises(ChecksumMismatchError):
        client.content.create_local_post("with media", media_file, "image/png")

    assert client.post_store.load() == []


def test_failed_upload_init_aborts_post_creation(
    client: RegistryAccordClient, fake_session: FakeSession, media_file: Path
) -> None:
    client.create_identity()
    fake_session.queue(MockResponse(500, text="boom"))

    with pytest.raises(ServerError):
        client.content.create_local_post("with media", media_file, "image/png")

    assert client.post_store.load() == []


def test_post_embeds_media_reference(
    client: RegistryAccordClient, fake_session: FakeSession, media_file: Path
) -> None:
    client.create_identity()
    fake_session.queue(_init_response(), MockResponse(200), MockResponse(200, {"cid": DIGEST}))

    record = client.content.create_local_post("with media", media_file, "image/png")

    assert record.media is not None
    assert record.media.content_id == DIGEST
    assert client.post_store.load()[0].media == record.media


def test_missing_file(client: RegistryAccordClient, tmp_path: Path) -> None:
    with pytest.raises(FileSystemError):
        client.uploader.upload(tmp_path / "nope.png", "image/png")
