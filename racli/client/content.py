"""
Signed post creation and listing.
"""

from __future__ import annotations

import base64
import logging
import uuid
from pathlib import Path
from typing import TYPE_CHECKING

from racli.client.http import join_url
from racli.common.crypto import SigningService
from racli.common.exceptions import AuthError
from racli.common.models import (
    CreateRecordRequest,
    CreateRecordResponse,
    Identity,
    MediaReference,
    Page,
    PostRecord,
    VerifiedPost,
    utc_now_iso,
)

if TYPE_CHECKING:
    from racli.client.http import ResilientHttpClient
    from racli.client.uploader import ChecksumUploader
    from racli.common.interfaces import IKeyStore, IPostStore, ISessionStore

logger = logging.getLogger(__name__)

RECORD_PATH = "/v1/repo/record"
LIST_RECORDS_PATH = "/v1/repo/listRecords"


class ContentOperations:
    """Creates signed posts locally or remotely and lists them back."""

    def __init__(
        self,
        cdv_base: str,
        http: ResilientHttpClient,
        key_store: IKeyStore,
        session_store: ISessionStore,
        post_store: IPostStore,
        uploader: ChecksumUploader,
        timeout_ms: int | None = None,
    ):
        self.cdv_base = cdv_base
        self.http = http
        self.key_store = key_store
        self.session_store = session_store
        self.post_store = post_store
        self.uploader = uploader
        self.timeout_ms = timeout_ms

    def _require_identity(self) -> Identity:
        identity = self.key_store.load()
        if identity is None:
            msg = "No identity found. Run `ra identity create` first."
            raise AuthError(msg, "NO_IDENTITY")
        return identity

    def _upload_media(
        self, media: Path | str | None, mime_type: str | None
    ) -> MediaReference | None:
        if media is None:
            return None
        return self.uploader.upload(media, mime_type or "application/octet-stream")

    def create_local_post(
        self,
        text: str,
        media: Path | str | None = None,
        mime_type: str | None = None,
    ) -> PostRecord:
        """Sign text and append the record to the local content store."""
        identity = self._require_identity()
        # Upload first: a failed or mismatched upload must leave no record behind
        media_ref = self._upload_media(media, mime_type)

        record = PostRecord(
            id=str(uuid.uuid4()),
            created_at=utc_now_iso(),
            text=text,
            signature_base64=SigningService.sign_text(text, identity.secret_key),
            public_key_base64=base64.b64encode(identity.public_key).decode("ascii"),
            did=identity.did,
            media=media_ref,
        )
        self.post_store.append(record)
        logger.info("Post %s created by %s", record.id, record.did)
        return record

    def create_remote_post(
        self,
        text: str,
        audience: str,
        media: Path | str | None = None,
        mime_type: str | None = None,
    ) -> CreateRecordResponse:
        """Sign text and submit it to the content service with the cached session."""
        identity = self._require_identity()
        session = self.session_store.get_session(audience)
        if session is None:
            msg = (
                f"No session for audience '{audience}'. "
                "Run `ra session nonce` and `ra session issue` first."
            )
            raise AuthError(msg, "NO_SESSION")
        if not session.is_active():
            logger.warning("Session for %s expired at %s", audience, session.expiry)

        media_ref = self._upload_media(media, mime_type)
        req = CreateRecordRequest(
            text=text,
            author_did=session.did,
            signature=SigningService.sign_text(text, identity.secret_key),
            public_key=base64.b64encode(identity.public_key).decode("ascii"),
            created_at=utc_now_iso(),
            media=media_ref,
        )
        return self.http.request(
            join_url(self.cdv_base, RECORD_PATH),
            "POST",
            req.to_wire(),
            model=CreateRecordResponse,
            headers={"Authorization": f"Bearer {session.jwt}"},
            timeout_ms=self.timeout_ms,
        )

    def list_local_posts(self) -> list[VerifiedPost]:
        """Read every local post and re-verify each signature."""
        return [
            VerifiedPost(
                record=record,
                valid=SigningService.verify_text(
                    record.text, record.signature_base64, record.public_key_base64
                ),
            )
            for record in self.post_store.load()
        ]

    def list_remote_posts(
        self,
        did: str,
        collection: str | None = None,
        limit: int | None = None,
        cursor: str | None = None,
        since: str | None = None,
        until: str | None = None,
    ) -> Page:
        """
        Fetch exactly one page; filtering happens server-side.

        Follow Page.next_cursor by calling again; nothing here pages
        automatically.
        """
        return self.http.request(
            join_url(self.cdv_base, LIST_RECORDS_PATH),
            "GET",
            model=Page,
            params={
                "did": did,
                "collection": collection,
                "limit": limit,
                "cursor": cursor,
                "since": since,
                "until": until,
            },
            timeout_ms=self.timeout_ms,
        )
