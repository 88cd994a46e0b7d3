"""Infrastructure layer: Configuration resolution and store construction.
"""

from __future__ import annotations

import logging

from racli.common import Configurable, setup_logger
from racli.common.config import Config
from racli.common.exceptions import ConfigError
from racli.common.models import ClientConfig
from racli.common.validators import is_valid_url, require_url
from racli.store import KeyStore, PostStore, SessionStore


class ConfigLoader(Configurable):
    """Resolves explicit settings against environment-backed defaults."""

    def __init__(self, client_config: ClientConfig | None = None):
        self.config: Config = Config()
        client_config = client_config or ClientConfig()

        require_url(client_config.identity_base, "identity")
        require_url(client_config.cdv_base, "CDV")
        require_url(client_config.gateway_base, "gateway")

        overrides = client_config.model_dump()
        self.identity_base: str = (
            client_config.identity_base or self.config.IDENTITY_BASE_URL
        )
        self.cdv_base: str = client_config.cdv_base or self.config.CDV_BASE_URL
        self.gateway_base: str = (
            client_config.gateway_base or self.config.GATEWAY_BASE_URL
        )
        for name, url in (
            ("RA_IDENTITY_BASE_URL", self.identity_base),
            ("RA_CDV_BASE_URL", self.cdv_base),
            ("RA_GATEWAY_BASE_URL", self.gateway_base),
        ):
            if not is_valid_url(url):
                raise ConfigError(f"Invalid {name} value: {url!r}", "INVALID_URL")

        self.home_dir = client_config.home_dir or self.config.HOME_DIR
        self.cdv_path = client_config.cdv_path or self.config.CDV_PATH
        self.audience: str = client_config.audience or self.config.DEFAULT_AUDIENCE

        self.env: str
        self.output: str
        self.timeout_ms: int
        self.retries: int
        self.backoff_ms: int
        self.log_level: int
        self.apply_overrides(
            overrides,
            self.config,
            ["env", "output", "timeout_ms", "retries", "backoff_ms", "log_level"],
        )

        # Setup logging for the whole package
        self.logger = logging.getLogger("racli")
        setup_logger(self.logger, self.log_level)

    def key_store(self) -> KeyStore:
        return KeyStore(self.home_dir)

    def session_store(self) -> SessionStore:
        return SessionStore(self.home_dir)

    def post_store(self) -> PostStore:
        return PostStore(self.cdv_path)

    def describe(self) -> dict[str, str]:
        """Effective configuration; contains no secrets."""
        return {
            "identityBase": self.identity_base,
            "cdvBase": self.cdv_base,
            "gatewayBase": self.gateway_base,
            "env": self.env,
            "output": self.output,
            "home": str(self.home_dir),
            "cdvPath": str(self.cdv_path),
            "timeoutMs": str(self.timeout_ms),
        }
