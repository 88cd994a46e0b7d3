"""
RegistryAccord client: wires configuration, stores and operations together.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from racli.client.content import ContentOperations
from racli.client.discovery import DiscoveryOperations
from racli.client.http import ResilientHttpClient
from racli.client.infrastructure.config_loader import ConfigLoader
from racli.client.session_handler import SessionProtocol
from racli.client.uploader import ChecksumUploader
from racli.common.crypto import SigningService
from racli.common.exceptions import ValidationError
from racli.common.models import ClientConfig, Identity

if TYPE_CHECKING:
    from pathlib import Path

    import requests

    from racli.common.interfaces import IKeyStore, IPostStore, ISessionStore

logger = logging.getLogger(__name__)


class RegistryAccordClient:
    """Facade over identity, session, content and discovery operations.

    Stores and the HTTP session can be injected, which is how tests swap in
    in-memory or fake implementations.
    """

    def __init__(
        self,
        client_config: ClientConfig | None = None,
        *,
        http_session: requests.Session | None = None,
        key_store: IKeyStore | None = None,
        session_store: ISessionStore | None = None,
        post_store: IPostStore | None = None,
    ):
        self.settings = ConfigLoader(client_config)
        self.http = ResilientHttpClient(
            self.settings.config,
            session=http_session,
            timeout_ms=self.settings.timeout_ms,
            retries=self.settings.retries,
            backoff_ms=self.settings.backoff_ms,
        )
        self.key_store = key_store or self.settings.key_store()
        self.session_store = session_store or self.settings.session_store()
        self.post_store = post_store or self.settings.post_store()

        self.uploader = ChecksumUploader(self.settings.cdv_base, self.http)
        self.sessions = SessionProtocol(
            self.settings.identity_base, self.http, self.key_store, self.session_store
        )
        self.content = ContentOperations(
            self.settings.cdv_base,
            self.http,
            self.key_store,
            self.session_store,
            self.post_store,
            self.uploader,
        )
        self.discovery = DiscoveryOperations(self.settings.gateway_base, self.http)

    def create_identity(self, *, force: bool = False) -> tuple[Identity, Path]:
        """Generate and store a new identity; refuses to overwrite unless forced."""
        if self.key_store.exists() and not force:
            msg = "Identity already exists. Use --force to overwrite it."
            raise ValidationError(msg, "IDENTITY_EXISTS")
        identity = SigningService.generate_keypair()
        path = self.key_store.save(identity)
        logger.info("Created identity %s", identity.did)
        return identity, path
