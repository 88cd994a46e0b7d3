from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterator

import pytest
import requests

from racli.client.client import RegistryAccordClient
from racli.common.models import ClientConfig

_NO_JSON = object()


class MockResponse:
    def __init__(self, status_code: int, json_data: Any = _NO_JSON, text: str = "", reason: str = ""):
        self.status_code = status_code
        self._json = json_data
        self.text = text
        self.reason = reason or ("OK" if status_code < 400 else "Error")

    def json(self) -> Any:
        if self._json is _NO_JSON:
            raise ValueError("No JSON object could be decoded")
        return self._json


class FakeSession:
    """Replays scripted responses (or raises scripted exceptions) in order."""

    def __init__(self, *outcomes: Any):
        self.outcomes = list(outcomes)
        self.calls: list[dict[str, Any]] = []

    def queue(self, *outcomes: Any) -> None:
        self.outcomes.extend(outcomes)

    def request(self, method: str, url: str, **kwargs: Any) -> MockResponse:
        self.calls.append({"method": method, "url": url, **kwargs})
        if not self.outcomes:
            raise AssertionError(f"Unexpected request {method} {url}")
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point every path-bearing setting at a temporary directory."""
    home = tmp_path / "home"
    monkeypatch.setenv("RA_HOME", str(home))
    monkeypatch.setenv("RA_CDV_PATH", str(tmp_path / "cdv.json"))
    for name in (
        "RA_IDENTITY_BASE_URL",
        "RA_CDV_BASE_URL",
        "RA_GATEWAY_BASE_URL",
        "RA_HTTP_TIMEOUT_MS",
        "RA_ENV",
        "RA_OUTPUT",
        "RA_AUDIENCE",
    ):
        monkeypatch.delenv(name, raising=False)
    return home


@pytest.fixture
def sleeps(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    """Record backoff delays instead of sleeping."""
    delays: list[float] = []
    monkeypatch.setattr("racli.client.retry.time.sleep", delays.append)
    return delays


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def client(fake_session: FakeSession, sleeps: list[float]) -> RegistryAccordClient:
    return RegistryAccordClient(
        ClientConfig(), http_session=fake_session  # type: ignore[arg-type]
    )


@pytest.fixture
def no_network(monkeypatch: pytest.MonkeyPatch) -> None:
    def refuse(*args: Any, **kwargs: Any) -> None:
        raise requests.exceptions.ConnectionError("network disabled in tests")

    monkeypatch.setattr(requests.Session, "request", refuse)


@pytest.fixture(autouse=True)
def reset_package_logger() -> Iterator[None]:
    """Drop handlers bound to streams that CliRunner closes between tests."""
    yield
    logging.getLogger("racli").handlers.clear()
