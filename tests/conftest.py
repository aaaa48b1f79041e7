from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

import pytest
import requests

from gtx_translator.batch_runner import BatchTranslator
from gtx_translator.client import GtxClient
from gtx_translator.rate_limiter import RateLimiter
from gtx_translator.session import TranslatorSession
from gtx_translator.settings import Settings
from gtx_translator.storage import KeyValueStore

NOT_JSON = object()


def gtx_payload(*fragments: str, detected: str = "fr") -> list:
    return [[[fragment, "src", None, None, 10] for fragment in fragments], None, detected]


class FakeResponse:
    def __init__(self, payload: Any, status_code: int = 200) -> None:
        self.payload = payload
        self.status_code = status_code

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    def json(self) -> Any:
        if self.payload is NOT_JSON:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self.payload


class FakeHTTP:
    """Stands in for ``requests.Session``; answers with ``handler(params)``."""

    def __init__(self, handler: Callable[[dict], Any] | None = None) -> None:
        self.handler = handler or (lambda params: FakeResponse(gtx_payload(f"{params['tl']}::{params['q']}")))
        self.calls: list[dict] = []

    def get(self, url: str, params: dict, timeout: float) -> FakeResponse:
        self.calls.append(dict(params))
        outcome = self.handler(params)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def http() -> FakeHTTP:
    return FakeHTTP()


@pytest.fixture
def store(tmp_path: Path) -> KeyValueStore:
    return KeyValueStore(tmp_path / "store.json")


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(data_root=tmp_path, batch_delay=0.0)


@pytest.fixture
def make_session(settings: Settings, http: FakeHTTP) -> Callable[..., TranslatorSession]:
    def factory(*, limiter: RateLimiter | None = None, handler=None) -> TranslatorSession:
        if handler is not None:
            http.handler = handler
        client = GtxClient(session=http)
        return TranslatorSession(
            settings,
            client=client,
            limiter=limiter,
            batch=BatchTranslator(client, delay=0.0, sleep=lambda _: None),
        )

    return factory


@pytest.fixture
def network_down() -> Callable[[dict], Exception]:
    return lambda params: requests.exceptions.ConnectionError("connection refused")
