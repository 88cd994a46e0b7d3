"""
JSON HTTP client with per-attempt timeouts, retry/backoff and correlation ids.
"""

from __future__ import annotations

import logging
import secrets
import string
import time
from typing import Any
from urllib.parse import urlsplit, urlunsplit

import requests
from pydantic import BaseModel

from racli.client.retry import AttemptOutcome, OutcomeKind, RetryPolicy
from racli.common import Configurable
from racli.common.config import Config
from racli.common.exceptions import (
    AuthError,
    HttpClientError,
    NetworkError,
    RegistryAccordError,
    ResponseParseError,
    ServerError,
)
from racli.common.logging_utils import CorrelationLoggerAdapter
from racli.common.models import parse_response

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"
CORRELATION_PREFIX = "cli-"
_BASE36 = string.digits + string.ascii_lowercase


def _to_base36(value: int) -> str:
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits)) or "0"


def generate_correlation_id() -> str:
    """Format: cli-{base36 ms timestamp}{5 random base36 chars}."""
    suffix = "".join(secrets.choice(_BASE36) for _ in range(5))
    return CORRELATION_PREFIX + _to_base36(int(time.time() * 1000)) + suffix


def join_url(base: str, path: str) -> str:
    """Replace the path of base with path."""
    parts = urlsplit(base)
    return urlunsplit((parts.scheme, parts.netloc, path, "", ""))


class ResilientHttpClient(Configurable):
    """Stateless per call; the only shared state is the configured defaults."""

    def __init__(
        self,
        config: Config | None = None,
        session: requests.Session | None = None,
        **overrides: Any,
    ):
        self.config = config or Config()
        self.timeout_ms: int
        self.retries: int
        self.backoff_ms: int
        self.apply_overrides(
            overrides, self.config, ["timeout_ms", "retries", "backoff_ms"]
        )
        self.session = session or requests.Session()

    def request(
        self,
        url: str,
        method: str = "GET",
        body: Any = None,
        *,
        model: type[BaseModel] | None = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout_ms: int | None = None,
        retries: int | None = None,
        backoff_ms: int | None = None,
    ) -> Any:
        """
        Perform a JSON call and return the decoded body of a 2xx response.

        With model set, the body is validated into that model and a shape
        mismatch raises ResponseParseError carrying the call's correlation id.
        """
        out, _ = self.exchange(
            url,
            method,
            body,
            model=model,
            params=params,
            headers=headers,
            timeout_ms=timeout_ms,
            retries=retries,
            backoff_ms=backoff_ms,
        )
        return out

    def exchange(
        self,
        url: str,
        method: str = "GET",
        body: Any = None,
        *,
        model: type[BaseModel] | None = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout_ms: int | None = None,
        retries: int | None = None,
        backoff_ms: int | None = None,
    ) -> tuple[Any, str]:
        """Same as request, also returning the correlation id of the call."""
        correlation_id = generate_correlation_id()
        send_headers = {"Accept": "application/json", **(headers or {})}
        send_headers[CORRELATION_HEADER] = correlation_id
        extra: dict[str, Any] = {}
        if params:
            extra["params"] = {k: v for k, v in params.items() if v is not None}
        if body is not None:
            extra["json"] = body

        response = self._execute(
            method,
            url,
            send_headers,
            extra,
            correlation_id,
            timeout_ms=timeout_ms,
            retries=retries,
            backoff_ms=backoff_ms,
        )
        try:
            data = response.json()
        except ValueError as e:
            msg = f"Invalid JSON in response from {url}"
            raise ResponseParseError(
                msg, correlation_id=correlation_id, status_code=response.status_code
            ) from e
        if model is not None:
            data = parse_response(model, data, correlation_id)
        return data, correlation_id

    def put_bytes(
        self,
        url: str,
        data: bytes,
        content_type: str = "application/octet-stream",
        *,
        timeout_ms: int | None = None,
    ) -> None:
        """Binary PUT sharing the retry policy; the response body is ignored."""
        correlation_id = generate_correlation_id()
        send_headers = {
            "Content-Type": content_type,
            CORRELATION_HEADER: correlation_id,
        }
        self._execute(
            "PUT",
            url,
            send_headers,
            {"data": data},
            correlation_id,
            timeout_ms=timeout_ms,
        )

    def _execute(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        extra: dict[str, Any],
        correlation_id: str,
        *,
        timeout_ms: int | None = None,
        retries: int | None = None,
        backoff_ms: int | None = None,
    ) -> Any:
        log = CorrelationLoggerAdapter(logger, correlation_id)
        timeout = timeout_ms or self.timeout_ms
        policy = RetryPolicy(
            retries=self.retries if retries is None else retries,
            backoff_ms=self.backoff_ms if backoff_ms is None else backoff_ms,
            on_retry=lambda outcome, delay: log.debug(
                "Retrying %s %s in %.3fs after %s (attempt %d)",
                method,
                url,
                delay,
                outcome.status_code or outcome.kind.value,
                outcome.attempt,
            ),
        )
        log.debug("Starting HTTP request %s %s", method, url)

        def attempt(n: int) -> AttemptOutcome:
            log.debug("HTTP attempt %d timeout=%dms", n, timeout)
            try:
                response = self.session.request(
                    method, url, headers=headers, timeout=timeout / 1000, **extra
                )
            except requests.exceptions.Timeout as e:
                log.warning("HTTP request timed out after %dms (attempt %d)", timeout, n)
                return AttemptOutcome(OutcomeKind.TIMEOUT, n, error=e)
            except requests.exceptions.ConnectionError as e:
                log.warning("HTTP connection failed (attempt %d): %s", n, e)
                return AttemptOutcome(OutcomeKind.CONNECTION_ERROR, n, error=e)
            except requests.exceptions.RequestException as e:
                raise NetworkError(
                    str(e), "HTTP_NETWORK_ERROR", correlation_id=correlation_id
                ) from e

            if 200 <= response.status_code < 300:  # noqa: PLR2004
                log.debug("HTTP request successful (attempt %d)", n)
                return AttemptOutcome(OutcomeKind.SUCCESS, n, response=response)
            log.warning(
                "HTTP request failed: %s %s (attempt %d)",
                response.status_code,
                response.reason,
                n,
            )
            return AttemptOutcome(
                OutcomeKind.HTTP_ERROR,
                n,
                response=response,
                status_code=response.status_code,
            )

        outcome = policy.run(attempt)
        if outcome.kind is OutcomeKind.SUCCESS:
            return outcome.response

        error = self._classify(outcome, correlation_id, timeout)
        log.error("HTTP request failed permanently: %s", error.message)
        raise error

    @staticmethod
    def _classify(
        outcome: AttemptOutcome, correlation_id: str, timeout_ms: int
    ) -> RegistryAccordError:
        if outcome.kind is OutcomeKind.TIMEOUT:
            return NetworkError(
                f"HTTP timeout after {timeout_ms}ms",
                "HTTP_TIMEOUT",
                correlation_id=correlation_id,
            )
        if outcome.kind is OutcomeKind.CONNECTION_ERROR:
            return NetworkError(
                str(outcome.error),
                "HTTP_NETWORK_ERROR",
                correlation_id=correlation_id,
            )

        response = outcome.response
        status = outcome.status_code or 0
        message = f"{status} {response.reason}: {response.text}"
        if status in (401, 403):
            return AuthError(message, "HTTP_AUTH_ERROR", correlation_id, status)
        if status >= 500:  # noqa: PLR2004
            return ServerError(message, "HTTP_SERVER_ERROR", correlation_id, status)
        if status >= 400:  # noqa: PLR2004
            return HttpClientError(message, "HTTP_CLIENT_ERROR", correlation_id, status)
        return NetworkError(message, "HTTP_UNKNOWN_ERROR", correlation_id, status)
