import json
import stat
from pathlib import Path

import pytest

from racli.common.crypto import SigningService
from racli.common.exceptions import ValidationError
from racli.common.models import MediaReference, PostRecord, Session
from racli.store import KeyStore, PostStore, SessionStore
from racli.store.fs import ensure_directory


def _mode(path: Path) -> int:
    return stat.S_IMODE(path.stat().st_mode)


def _session(aud: str, jwt: str = "jwt", expiry: str = "2999-01-01T00:00:00Z") -> Session:
    return Session(
        jwt=jwt, expiry=expiry, aud=aud, issued_at="2024-01-01T00:00:00Z", did="did:ra:ed25519:abc"
    )


def test_ensure_directory_hardens_existing_dir(tmp_path: Path) -> None:
    target = tmp_path / "loose"
    target.mkdir(mode=0o755)
    target.chmod(0o755)
    ensure_directory(target)
    assert _mode(target) == 0o700


def test_key_round_trip(tmp_path: Path) -> None:
    store = KeyStore(tmp_path / "home")
    identity = SigningService.generate_keypair()

    path = store.save(identity)
    loaded = store.load()

    assert loaded is not None
    assert loaded.did == identity.did
    assert loaded.public_key == identity.public_key
    assert loaded.secret_key == identity.secret_key
    assert _mode(path) == 0o600
    assert _mode(tmp_path / "home") == 0o700
    assert set(json.loads(path.read_text())) == {"did", "publicKeyBase64", "secretKeyBase64"}


def test_key_save_overwrites(tmp_path: Path) -> None:
    store = KeyStore(tmp_path)
    store.save(SigningService.generate_keypair())
    second = SigningService.generate_keypair()
    store.save(second)
    loaded = store.load()
    assert loaded is not None
    assert loaded.did == second.did


def test_key_load_missing_returns_none(tmp_path: Path) -> None:
    assert KeyStore(tmp_path).load() is None


def test_key_load_legacy_field(tmp_path: Path) -> None:
    identity = SigningService.generate_keypair()
    current = KeyStore(tmp_path / "current")
    current.save(identity)
    data = json.loads(current.key_path.read_text())

    legacy_dir = tmp_path / "legacy"
    legacy_dir.mkdir()
    data["privateKeyBase64"] = data.pop("secretKeyBase64")
    (legacy_dir / "key.json").write_text(json.dumps(data))

    assert KeyStore(legacy_dir).load() == current.load()


@pytest.mark.parametrize(
    "content",
    [
        '{"did": "did:ra:ed25519:x"}',
        '{"did": 1, "publicKeyBase64": "a", "secretKeyBase64": "b"}',
        "[]",
        "not json",
    ],
)
def test_key_load_invalid_shape_names_path(tmp_path: Path, content: str) -> None:
    (tmp_path / "key.json").write_text(content)
    with pytest.raises(ValidationError) as exc:
        KeyStore(tmp_path).load()
    assert str(tmp_path / "key.json") in str(exc.value)


def test_key_load_binary_file_names_path(tmp_path: Path) -> None:
    (tmp_path / "key.json").write_bytes(b"\xff\xfe\x00garbage")
    with pytest.raises(ValidationError) as exc:
        KeyStore(tmp_path).load()
    assert exc.value.exit_code == 2
    assert str(tmp_path / "key.json") in str(exc.value)


def test_key_load_wrong_key_length(tmp_path: Path) -> None:
    (tmp_path / "key.json").write_text(
        json.dumps({"did": "d", "publicKeyBase64": "c2hvcnQ=", "secretKeyBase64": "c2hvcnQ="})
    )
    with pytest.raises(ValidationError, match="Invalid key file format at"):
        KeyStore(tmp_path).load()


def test_session_store_merges_by_audience(tmp_path: Path) -> None:
    store = SessionStore(tmp_path / "home")
    store.store_session(_session("cdv", "first"))
    store.store_session(_session("gateway"))
    store.store_session(_session("cdv", "second"))

    cdv = store.get_session("cdv")
    assert cdv is not None
    assert cdv.jwt == "second"
    assert store.get_session("gateway") is not None
    assert store.get_session("unknown") is None
    assert _mode(store.session_path) == 0o600

    raw = json.loads(store.session_path.read_text())
    assert raw["cdv"] == {
        "jwt": "second",
        "expiry": "2999-01-01T00:00:00Z",
        "aud": "cdv",
        "issuedAt": "2024-01-01T00:00:00Z",
        "did": "did:ra:ed25519:abc",
    }


def test_corrupted_session_file_is_no_session(tmp_path: Path) -> None:
    store = SessionStore(tmp_path)
    store.session_path.write_text("{broken")
    assert store.get_session("cdv") is None
    assert store.current_session() is None

    store.store_session(_session("cdv"))
    assert store.get_session("cdv") is not None


def test_session_with_wrong_shape_is_no_session(tmp_path: Path) -> None:
    store = SessionStore(tmp_path)
    store.session_path.write_text(json.dumps({"cdv": {"jwt": "x"}}))
    assert store.get_session("cdv") is None


def test_current_session_reports_expiry(tmp_path: Path) -> None:
    store = SessionStore(tmp_path)
    store.store_session(_session("cdv", expiry="2000-01-01T00:00:00Z"))
    status = store.current_session()
    assert status is not None
    assert status.active is False
    assert status.did == "did:ra:ed25519:abc"


def _record(**overrides: object) -> PostRecord:
    data = {
        "id": "1",
        "created_at": "2024-01-01T00:00:00.000Z",
        "text": "t",
        "signature_base64": "sig",
        "public_key_base64": "pk",
        "did": "d",
    }
    data.update(overrides)
    return PostRecord(**data)  # type: ignore[arg-type]


def test_post_store_missing_file_is_empty(tmp_path: Path) -> None:
    assert PostStore(tmp_path / "cdv.json").load() == []


def test_post_store_append_preserves_order(tmp_path: Path) -> None:
    store = PostStore(tmp_path / "nested" / "cdv.json")
    store.append(_record(id="1"))
    store.append(_record(id="2", media=MediaReference(content_id="ab", mime_type="image/png")))
    loaded = store.load()
    assert [p.id for p in loaded] == ["1", "2"]
    assert loaded[1].media is not None
    assert loaded[1].media.content_id == "ab"
    raw = json.loads(store.path.read_text())
    assert "media" not in raw[0]
    assert raw[1]["media"] == {"contentId": "ab", "mimeType": "image/png"}


def test_post_store_rejects_non_array(tmp_path: Path) -> None:
    path = tmp_path / "cdv.json"
    path.write_text(json.dumps({"not": "an array"}))
    with pytest.raises(ValidationError, match="Invalid posts file format"):
        PostStore(path).load()


def test_post_store_rejects_bad_entry(tmp_path: Path) -> None:
    path = tmp_path / "cdv.json"
    path.write_text(json.dumps([{"id": "1", "text": "missing fields"}]))
    with pytest.raises(ValidationError, match="Invalid post entry"):
        PostStore(path).load()


def test_post_store_rejects_binary_file(tmp_path: Path) -> None:
    path = tmp_path / "cdv.json"
    path.write_bytes(b"\xff\xfe\x00garbage")
    with pytest.raises(ValidationError, match="Invalid posts file format"):
        PostStore(path).load()


def test_binary_session_file_is_no_session(tmp_path: Path) -> None:
    store = SessionStore(tmp_path)
    store.session_path.write_bytes(b"\xff\xfe\x00garbage")
    assert store.get_session("cdv") is None
    assert store.current_session() is None

    store.store_session(_session("cdv"))
    assert store.get_session("cdv") is not None
