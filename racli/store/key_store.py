"""
Persistence of the local identity keypair.
"""

from __future__ import annotations

import base64
import logging
from pathlib import Path

from racli.common.crypto import decode_key
from racli.common.exceptions import FileSystemError, ValidationError
from racli.common.models import Identity, StoredKey, parse_document
from racli.store.fs import ensure_directory, read_json, write_private_json

logger = logging.getLogger(__name__)

KEY_FILE_NAME = "key.json"


class KeyStore:
    """Reads and writes key.json under a configured base directory."""

    def __init__(self, base_dir: Path):
        self.base_dir = base_dir
        self.key_path = base_dir / KEY_FILE_NAME

    def exists(self) -> bool:
        return self.key_path.exists()

    def save(self, identity: Identity) -> Path:
        """Write the identity unconditionally and return the key file path."""
        stored = StoredKey(
            did=identity.did,
            public_key_base64=base64.b64encode(identity.public_key).decode("ascii"),
            secret_key_base64=base64.b64encode(identity.secret_key).decode("ascii"),
        )
        try:
            ensure_directory(self.base_dir)
            write_private_json(self.key_path, stored.to_wire())
        except OSError as e:
            msg = f"Failed to write key file {self.key_path}: {e.strerror or e}"
            raise FileSystemError(msg) from e
        logger.info("Identity %s stored at %s", identity.did, self.key_path)
        return self.key_path

    def load(self) -> Identity | None:
        """Load the identity, or None when no key file exists."""
        if not self.key_path.exists():
            return None
        invalid = f"Invalid key file format at {self.key_path}"
        try:
            raw = read_json(self.key_path)
        except OSError as e:
            msg = f"Failed to read key file {self.key_path}: {e.strerror or e}"
            raise FileSystemError(msg) from e
        except ValueError as e:
            # undecodable bytes or malformed JSON
            raise ValidationError(invalid, "INVALID_KEY_FILE") from e

        stored = parse_document(StoredKey, raw).value
        if stored is None:
            raise ValidationError(invalid, "INVALID_KEY_FILE")

        try:
            public_key = decode_key(stored.public_key_base64, "public key")
            secret_key = decode_key(stored.secret_key_base64, "secret key")
        except ValidationError as e:
            logger.debug("Key material rejected: %s", e.message)
            raise ValidationError(invalid, "INVALID_KEY_FILE") from e
        return Identity(did=stored.did, public_key=public_key, secret_key=secret_key)
