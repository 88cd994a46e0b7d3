"""
Input validation for user-supplied identifiers, URLs and timestamps.
"""

from __future__ import annotations

import re
from urllib.parse import urlsplit

from racli.common.exceptions import ValidationError

# did:<method>:<method-specific id>; the id may itself contain colons
DID_PATTERN = re.compile(r"^did:[a-z0-9]+:[a-zA-Z0-9._:-]+$")
ISO_TIMESTAMP_PATTERN = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d{1,6})?(Z|[+-]\d{2}:\d{2})?$"
)
MAX_URL_LENGTH = 2048
MAX_HOSTNAME_LENGTH = 253
MAX_DID_LENGTH = 512


def is_valid_url(url: str | None) -> bool:
    if not url or not url.strip():
        return False
    url = url.strip()
    if len(url) > MAX_URL_LENGTH:
        return False
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    if parts.scheme not in ("http", "https"):
        return False
    hostname = parts.hostname
    return bool(hostname) and len(hostname) <= MAX_HOSTNAME_LENGTH


def is_valid_did(did: str | None) -> bool:
    if not did:
        return False
    did = did.strip()
    return 0 < len(did) <= MAX_DID_LENGTH and bool(DID_PATTERN.match(did))


def is_valid_timestamp(value: str | None) -> bool:
    return bool(value) and bool(ISO_TIMESTAMP_PATTERN.match(value))


def require_url(url: str | None, label: str) -> None:
    if url is not None and not is_valid_url(url):
        raise ValidationError(f"Invalid {label} base URL format", "INVALID_URL")


def require_did(did: str | None) -> str:
    if not did:
        raise ValidationError("DID is required", "MISSING_DID")
    if not is_valid_did(did):
        msg = "Invalid DID format. Expected format: did:method:identifier"
        raise ValidationError(msg, "INVALID_DID")
    return did.strip()


def require_timestamp(value: str | None, label: str) -> None:
    if value is not None and not is_valid_timestamp(value):
        msg = (
            f"Invalid {label} timestamp format. "
            "Expected ISO 8601 format (YYYY-MM-DDTHH:mm:ssZ)"
        )
        raise ValidationError(msg, "INVALID_TIMESTAMP")
