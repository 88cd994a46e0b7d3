"""Ed25519 signing, verification and DID derivation.

Pure functions over bytes; nothing here touches the filesystem or network.
"""

from __future__ import annotations

import base64
import binascii

import base58
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)

from racli.common.exceptions import ValidationError
from racli.common.models import Identity

DID_PREFIX = "did:ra:ed25519:"
KEY_LENGTH = 32
SIGNATURE_LENGTH = 64


class SigningService:
    """Utility class for Ed25519 operations."""

    @staticmethod
    def derive_did(public_key: bytes) -> str:
        """Derive the identity string from a raw public key."""
        return DID_PREFIX + base58.b58encode(public_key).decode("ascii")

    @staticmethod
    def generate_keypair() -> Identity:
        """Generate a fresh keypair from the OS CSPRNG."""
        private_key = Ed25519PrivateKey.generate()
        secret_key = private_key.private_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PrivateFormat.Raw,
            encryption_algorithm=serialization.NoEncryption(),
        )
        public_key = private_key.public_key().public_bytes(
            serialization.Encoding.Raw,
            serialization.PublicFormat.Raw,
        )
        return Identity(
            did=SigningService.derive_did(public_key),
            public_key=public_key,
            secret_key=secret_key,
        )

    @staticmethod
    def sign(message: bytes, secret_key: bytes) -> bytes:
        """Deterministic RFC 8032 signature; secret_key is the 32-byte seed."""
        if len(secret_key) != KEY_LENGTH:
            msg = f"Secret key must be {KEY_LENGTH} bytes, got {len(secret_key)}"
            raise ValidationError(msg, "INVALID_KEY")
        return Ed25519PrivateKey.from_private_bytes(secret_key).sign(message)

    @staticmethod
    def verify(message: bytes, signature: bytes, public_key: bytes) -> bool:
        """
        Check a signature.

        Returns False for a wrong or malformed signature. A public key of the
        wrong length is an input error and raises ValidationError instead.
        """
        if len(public_key) != KEY_LENGTH:
            msg = f"Public key must be {KEY_LENGTH} bytes, got {len(public_key)}"
            raise ValidationError(msg, "INVALID_KEY")
        if len(signature) != SIGNATURE_LENGTH:
            return False
        try:
            key = Ed25519PublicKey.from_public_bytes(public_key)
        except ValueError as e:
            raise ValidationError(f"Invalid public key: {e}", "INVALID_KEY") from e
        try:
            key.verify(signature, message)
        except InvalidSignature:
            return False
        return True

    @staticmethod
    def sign_text(text: str, secret_key: bytes) -> str:
        """Sign UTF-8 text and return the base64 signature."""
        signature = SigningService.sign(text.encode("utf-8"), secret_key)
        return base64.b64encode(signature).decode("ascii")

    @staticmethod
    def verify_text(text: str, signature_base64: str, public_key_base64: str) -> bool:
        """Verify a base64 signature over UTF-8 text against a base64 public key."""
        public_key = decode_key(public_key_base64, "public key")
        try:
            signature = base64.b64decode(signature_base64, validate=True)
        except (binascii.Error, ValueError):
            return False
        return SigningService.verify(text.encode("utf-8"), signature, public_key)


def decode_key(value: str, label: str) -> bytes:
    """Decode base64 key material, rejecting undecodable or wrong-length input."""
    try:
        raw = base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationError(f"Invalid {label} encoding", "INVALID_KEY") from e
    if len(raw) != KEY_LENGTH:
        msg = f"Invalid {label} length: expected {KEY_LENGTH} bytes, got {len(raw)}"
        raise ValidationError(msg, "INVALID_KEY")
    return raw
