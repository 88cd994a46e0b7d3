"""Read-only gateway queries: feeds, search and profiles."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from racli.client.http import join_url
from racli.common.exceptions import ResponseParseError
from racli.common.models import Page

if TYPE_CHECKING:
    from racli.client.http import ResilientHttpClient

SEARCH_TYPES = ("post", "profile", "all")


class DiscoveryOperations:
    def __init__(
        self, gateway_base: str, http: ResilientHttpClient, timeout_ms: int | None = None
    ):
        self.gateway_base = gateway_base
        self.http = http
        self.timeout_ms = timeout_ms

    def _page(self, path: str, params: dict[str, Any]) -> Page:
        return self.http.request(
            join_url(self.gateway_base, path),
            "GET",
            model=Page,
            params=params,
            timeout_ms=self.timeout_ms,
        )

    def feed_following(
        self, viewer_did: str, limit: int | None = None, cursor: str | None = None
    ) -> Page:
        return self._page(
            "/v1/feed/following",
            {"viewerDid": viewer_did, "limit": limit, "cursor": cursor},
        )

    def feed_author(
        self, author_did: str, limit: int | None = None, cursor: str | None = None
    ) -> Page:
        return self._page(
            "/v1/feed/author",
            {"authorDid": author_did, "limit": limit, "cursor": cursor},
        )

    def search(
        self,
        query: str,
        search_type: str = "all",
        limit: int | None = None,
        cursor: str | None = None,
    ) -> Page:
        return self._page(
            "/v1/search",
            {"q": query, "type": search_type, "limit": limit, "cursor": cursor},
        )

    def profile(self, did: str) -> dict[str, Any]:
        """Profile document for a DID (the `profile` member of the response)."""
        out, correlation_id = self.http.exchange(
            join_url(self.gateway_base, "/v1/profile"),
            "GET",
            params={"did": did},
            timeout_ms=self.timeout_ms,
        )
        if not isinstance(out, dict) or not isinstance(out.get("profile"), dict):
            msg = "Unexpected profile response shape: missing profile object"
            raise ResponseParseError(msg, correlation_id=correlation_id)
        return out["profile"]
