"""
Configuration settings for the RegistryAccord CLI.

Precedence everywhere: explicit inputs > environment variables > defaults.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

DEFAULT_TIMEOUT_MS = 5000


def get_default_timeout_ms() -> int:
    """Resolve the default HTTP timeout; invalid RA_HTTP_TIMEOUT_MS values are ignored."""
    raw = os.getenv("RA_HTTP_TIMEOUT_MS")
    if not raw:
        return DEFAULT_TIMEOUT_MS
    try:
        parsed = int(raw, 10)
    except ValueError:
        return DEFAULT_TIMEOUT_MS
    return parsed if parsed > 0 else DEFAULT_TIMEOUT_MS


class Config:
    """Central configuration class for all CLI settings."""

    def __init__(self) -> None:
        # Service base URLs
        self.IDENTITY_BASE_URL: str = os.getenv(
            "RA_IDENTITY_BASE_URL", "http://localhost:8081"
        )
        self.CDV_BASE_URL: str = os.getenv("RA_CDV_BASE_URL", "http://localhost:8082")
        self.GATEWAY_BASE_URL: str = os.getenv(
            "RA_GATEWAY_BASE_URL", "http://localhost:8083"
        )
        self.ENV: str = os.getenv("RA_ENV", "development")
        self.OUTPUT: str = os.getenv("RA_OUTPUT", "table")
        self.DEFAULT_AUDIENCE: str = os.getenv("RA_AUDIENCE", "cdv")

        # HTTP settings
        self.TIMEOUT_MS: int = get_default_timeout_ms()
        self.RETRIES: int = 3  # Extra attempts beyond the first
        self.BACKOFF_MS: int = 1000  # Delay before retry n is BACKOFF_MS * 2**n

        # File paths
        self.HOME_DIR: Path = Path(
            os.getenv("RA_HOME", str(Path.home() / ".registryaccord"))
        )
        cdv_path = os.getenv("RA_CDV_PATH")
        self.CDV_PATH: Path = (
            Path(cdv_path).resolve() if cdv_path else Path.cwd() / "cdv.json"
        )

        # Versions
        self.CLI_VERSION: str = "0.1.0"
        self.API_VERSION: str = "v1"

        # Logging
        self.LOG_LEVEL: int = logging.WARNING
