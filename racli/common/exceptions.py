"""
Custom exceptions for the RegistryAccord CLI.

Every error carries the process exit code the CLI terminates with.
"""

from __future__ import annotations

EXIT_VALIDATION = 2
EXIT_AUTH = 3
EXIT_NETWORK = 4
EXIT_SERVER = 5


class RegistryAccordError(Exception):
    """Base class for classified CLI errors."""

    exit_code: int = 1
    default_code: str = "ERROR"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        correlation_id: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.correlation_id = correlation_id
        self.status_code = status_code

    def __str__(self) -> str:
        if self.correlation_id:
            return f"{self.message} (correlationId: {self.correlation_id})"
        return self.message


class ValidationError(RegistryAccordError):
    """Malformed input, bad DID/URL/timestamp or missing field."""

    exit_code = EXIT_VALIDATION
    default_code = "VALIDATION_ERROR"


class AuthError(RegistryAccordError):
    """Missing identity or upstream 401/403."""

    exit_code = EXIT_AUTH
    default_code = "AUTH_ERROR"


class NetworkError(RegistryAccordError):
    """Timeouts, connection failures and exhausted retries."""

    exit_code = EXIT_NETWORK
    default_code = "NETWORK_ERROR"


class HttpClientError(NetworkError):
    """Non-retryable upstream 4xx other than authentication failures."""

    default_code = "HTTP_CLIENT_ERROR"


class ServerError(RegistryAccordError):
    """Upstream 5xx."""

    exit_code = EXIT_SERVER
    default_code = "SERVER_ERROR"


class ResponseParseError(RegistryAccordError):
    """A 2xx response whose body is not valid JSON."""

    exit_code = EXIT_SERVER
    default_code = "RESPONSE_PARSE_ERROR"


class ChecksumMismatchError(ServerError):
    """Server-reported media digest differs from the locally computed one."""

    default_code = "CHECKSUM_MISMATCH"

    def __init__(
        self, local_digest: str, remote_digest: str, correlation_id: str | None = None
    ) -> None:
        msg = (
            f"Checksum mismatch: local sha256 {local_digest} "
            f"!= server cid {remote_digest}"
        )
        super().__init__(msg, correlation_id=correlation_id)
        self.local_digest = local_digest
        self.remote_digest = remote_digest


class FileSystemError(RegistryAccordError):
    """Permission or I/O failure on key, session or content files."""

    exit_code = EXIT_VALIDATION
    default_code = "FILE_SYSTEM_ERROR"


class ConfigError(RegistryAccordError):
    """Invalid configuration value."""

    exit_code = EXIT_VALIDATION
    default_code = "CONFIG_ERROR"
