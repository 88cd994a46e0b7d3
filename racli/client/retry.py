"""
Retry policy over a unified attempt outcome.

Every attempt, whether it produced a response or raised, is collapsed into
one AttemptOutcome so a single loop owns the backoff logic.
"""

from __future__ import annotations

import enum
import time
from dataclasses import dataclass
from typing import Any, Callable

RETRYABLE_STATUSES = frozenset({429, 503})


class OutcomeKind(enum.Enum):
    SUCCESS = "success"
    HTTP_ERROR = "http_error"
    TIMEOUT = "timeout"
    CONNECTION_ERROR = "connection_error"


@dataclass
class AttemptOutcome:
    kind: OutcomeKind
    attempt: int
    response: Any = None
    status_code: int | None = None
    error: Exception | None = None


def is_transient(outcome: AttemptOutcome) -> bool:
    """Default predicate: 429, 503, timeouts and connection failures."""
    if outcome.kind in (OutcomeKind.TIMEOUT, OutcomeKind.CONNECTION_ERROR):
        return True
    return (
        outcome.kind is OutcomeKind.HTTP_ERROR
        and outcome.status_code in RETRYABLE_STATUSES
    )


class RetryPolicy:
    """Exponential backoff without jitter: delay before retry n is base * 2**n."""

    def __init__(
        self,
        retries: int = 3,
        backoff_ms: int = 1000,
        is_retryable: Callable[[AttemptOutcome], bool] = is_transient,
        on_retry: Callable[[AttemptOutcome, float], None] | None = None,
    ):
        self.retries = retries
        self.backoff_ms = backoff_ms
        self.is_retryable = is_retryable
        self.on_retry = on_retry

    def delay_seconds(self, attempt: int) -> float:
        return self.backoff_ms * (2**attempt) / 1000

    def run(self, attempt_fn: Callable[[int], AttemptOutcome]) -> AttemptOutcome:
        """
        Call attempt_fn until it succeeds, fails terminally or retries run out.

        Returns the last outcome; the caller decides how to classify it.
        """
        attempt = 0
        while True:
            outcome = attempt_fn(attempt)
            if outcome.kind is OutcomeKind.SUCCESS:
                return outcome
            if attempt >= self.retries or not self.is_retryable(outcome):
                return outcome
            delay = self.delay_seconds(attempt)
            if self.on_retry:
                self.on_retry(outcome, delay)
            time.sleep(delay)
            attempt += 1
