"""
Pydantic models for request/response and file validation.

Field names follow Python conventions; aliases match the camelCase used on
the wire and in the local JSON files.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic import ValidationError as PydanticValidationError

from racli.common.exceptions import ResponseParseError

T = TypeVar("T", bound=BaseModel)


class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


def utc_now_iso() -> str:
    """Current UTC time as ISO-8601 with millisecond precision and a Z suffix."""
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def parse_timestamp(value: str) -> datetime | None:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# Identity


class Identity(BaseModel):
    """The single local Ed25519 identity."""

    model_config = ConfigDict(frozen=True)

    did: str
    public_key: bytes
    secret_key: bytes = Field(repr=False)


class StoredKey(WireModel):
    """On-disk shape of key.json."""

    did: str
    public_key_base64: str = Field(alias="publicKeyBase64")
    secret_key_base64: str = Field(alias="secretKeyBase64")

    @model_validator(mode="before")
    @classmethod
    def _map_legacy_secret(cls, data: Any) -> Any:
        # Older files named the secret key field privateKeyBase64
        if (
            isinstance(data, dict)
            and "secretKeyBase64" not in data
            and "privateKeyBase64" in data
        ):
            data = dict(data)
            data["secretKeyBase64"] = data.pop("privateKeyBase64")
        return data


# Sessions


class Session(WireModel):
    jwt: str
    expiry: str
    aud: str
    issued_at: str = Field(alias="issuedAt")
    did: str

    def is_active(self, now: datetime | None = None) -> bool:
        """Advisory expiry check against wall-clock time."""
        expires = parse_timestamp(self.expiry)
        if expires is None:
            return False
        return expires > (now or datetime.now(timezone.utc))


class SessionStatus(BaseModel):
    did: str
    expiry: str
    active: bool


class NonceRequest(WireModel):
    did: str
    aud: str


class NonceChallenge(WireModel):
    nonce: str
    expires_at: str = Field(alias="expiresAt")


class SessionIssueRequest(WireModel):
    did: str
    aud: str
    nonce: str
    signature: str


class SessionIssueResponse(WireModel):
    jwt: str
    exp: str
    aud: str
    sub: str


# Media


class MediaReference(WireModel):
    content_id: str = Field(alias="contentId")
    mime_type: str = Field(alias="mimeType")


class UploadInitRequest(WireModel):
    mime_type: str = Field(alias="mimeType")
    size: int = Field(ge=0)


class UploadInitResponse(WireModel):
    upload_url: str = Field(alias="uploadUrl")
    finalize_url: str = Field(alias="finalizeUrl")


class FinalizeRequest(WireModel):
    checksum: str


class FinalizeResponse(WireModel):
    cid: str
    mime_type: str | None = Field(default=None, alias="mimeType")
    size: int | None = None


# Content records


class PostRecord(WireModel):
    """A signed post as kept in the local content store."""

    id: str
    created_at: str = Field(alias="createdAt")
    text: str
    signature_base64: str = Field(alias="signatureBase64")
    public_key_base64: str = Field(alias="publicKeyBase64")
    did: str
    media: MediaReference | None = None


class VerifiedPost(BaseModel):
    record: PostRecord
    valid: bool


class CreateRecordRequest(WireModel):
    text: str
    author_did: str = Field(alias="authorDid")
    signature: str
    public_key: str = Field(alias="publicKey")
    created_at: str = Field(alias="createdAt")
    media: MediaReference | None = None


class CreateRecordResponse(WireModel):
    uri: str
    cid: str
    indexed_at: str = Field(alias="indexedAt")


class Page(WireModel):
    """One page of a paginated listing; next_cursor absent means no more data."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    items: list[dict[str, Any]] = Field(default_factory=list)
    next_cursor: str | None = Field(default=None, alias="nextCursor")


# Client configuration


class ClientConfig(BaseModel):
    identity_base: str | None = None
    cdv_base: str | None = None
    gateway_base: str | None = None
    env: str | None = None
    output: str | None = None
    timeout_ms: int | None = Field(default=None, gt=0)
    retries: int | None = Field(default=None, ge=0)
    backoff_ms: int | None = Field(default=None, ge=0)
    home_dir: Path | None = None
    cdv_path: Path | None = None
    audience: str | None = None
    log_level: int | None = None


# Deserialization boundary


@dataclass(frozen=True)
class ParseResult(Generic[T]):
    """Tagged outcome of validating a loaded document."""

    value: T | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def parse_document(model: type[T], raw: Any) -> ParseResult[T]:
    """Validate raw decoded JSON against a model without raising."""
    try:
        return ParseResult(value=model.model_validate(raw))
    except PydanticValidationError as e:
        return ParseResult(error=str(e))


def parse_response(
    model: type[T], data: Any, correlation_id: str | None = None
) -> T:
    """Validate a decoded response body, raising ResponseParseError on mismatch."""
    result = parse_document(model, data)
    if result.value is None:
        msg = f"Unexpected {model.__name__} response shape: {result.error}"
        raise ResponseParseError(msg, correlation_id=correlation_id)
    return result.value
