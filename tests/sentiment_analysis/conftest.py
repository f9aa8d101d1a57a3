"""
Shared fixtures for the sentiment analysis tests.

HTTP is faked with an in-memory session object; nothing here touches
the network.
"""

import json
import random
from typing import Any, Optional

import pytest

from sentiment_analysis import (
    AnalysisOrchestrator,
    AnalyzerConfig,
    DemoSimulator,
    HuggingFaceClient,
    MemoryResultStore,
    RequestScheduler,
)


VALID_API_KEY = "hf_testkey1234567890"
PRIMARY_URL = "https://inference.test/models/primary"
FALLBACK_URL = "https://inference.test/models/fallback"


class FakeResponse:
    """Minimal stand-in for an aiohttp response context manager."""

    def __init__(
        self,
        status: int = 200,
        body: Any = None,
        headers: Optional[dict[str, str]] = None,
    ) -> None:
        self.status = status
        self._body = body if isinstance(body, str) else json.dumps(body)
        self.headers = headers or {}

    async def text(self) -> str:
        return self._body

    async def __aenter__(self) -> "FakeResponse":
        return self

    async def __aexit__(self, *exc_info) -> bool:
        return False


class FakeSession:
    """Replays queued responses (or raises queued exceptions) for each POST."""

    def __init__(self, responses: list) -> None:
        self._responses = list(responses)
        self.calls: list[dict[str, Any]] = []
        self.closed = False

    def post(self, url: str, json: Any = None, headers: Optional[dict] = None):
        self.calls.append({"url": url, "json": json, "headers": headers})
        item = self._responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    async def close(self) -> None:
        self.closed = True


def _ok_response(pairs: list[tuple[str, float]], nested: bool = True) -> FakeResponse:
    items = [{"label": label, "score": score} for label, score in pairs]
    return FakeResponse(200, [items] if nested else items)


def _make_client(
    responses: list,
    api_key: Optional[str] = VALID_API_KEY,
) -> tuple[HuggingFaceClient, FakeSession]:
    session = FakeSession(responses)
    client = HuggingFaceClient(
        api_key=api_key,
        primary_url=PRIMARY_URL,
        fallback_url=FALLBACK_URL,
        session=session,
    )
    return client, session


@pytest.fixture
def http_response():
    """The FakeResponse class, for building arbitrary HTTP replies."""
    return FakeResponse


@pytest.fixture
def ok_response():
    """Builds a 200 reply carrying label/score pairs."""
    return _ok_response


@pytest.fixture
def make_client():
    """Factory returning (client, fake session) for queued replies."""
    return _make_client


@pytest.fixture
def instant_simulator() -> DemoSimulator:
    """Demo simulator without artificial latency and with a fixed seed."""
    return DemoSimulator(latency_range=(0.0, 0.0), rng=random.Random(42))


@pytest.fixture
def memory_store() -> MemoryResultStore:
    return MemoryResultStore()


@pytest.fixture
def make_orchestrator(tmp_path, instant_simulator, memory_store):
    """Factory for orchestrators wired to fakes; pass HTTP responses for the live path."""

    def _make(
        responses: Optional[list] = None,
        delay_seconds: float = 0.0,
        api_key: Optional[str] = VALID_API_KEY,
    ):
        client, session = _make_client(responses or [], api_key=api_key)
        scheduler = RequestScheduler(client.analyze, delay_seconds=delay_seconds)
        orchestrator = AnalysisOrchestrator(
            config=AnalyzerConfig(api_key=api_key, storage_dir=tmp_path),
            store=memory_store,
            client=client,
            simulator=instant_simulator,
            scheduler=scheduler,
        )
        return orchestrator, session

    return _make
