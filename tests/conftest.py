from __future__ import annotations

from collections.abc import Iterator
from datetime import UTC, datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from header_forge.api.main import create_app
from header_forge.config.settings import Settings
from header_forge.pipeline.orchestrator import BatchOrchestrator
from header_forge.pipeline.processor import UnitProcessor
from header_forge.quota import InMemoryQuotaStore, RateLimiter
from header_forge.storage import InMemoryBlobStore

# Base64 of the 8-byte PNG signature.
PNG_DATA_URL = "data:image/png;base64,iVBORw0KGgo="


class MutableClock:
    """Test clock that only moves when told to."""

    def __init__(self, now: datetime | None = None) -> None:
        self.now = now or datetime(2024, 1, 1, 9, 30, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


class FakeTextGenerator:
    def __init__(self, failing_inputs: set[str] | None = None) -> None:
        self.failing_inputs = failing_inputs or set()
        self.calls: list[tuple[str, str]] = []

    def generate(self, system_directive: str, user_input: str) -> str:
        self.calls.append((system_directive, user_input))
        if user_input in self.failing_inputs:
            raise RuntimeError("concept backend unavailable")
        return f"A calm scene illustrating {user_input}."


class FakeImageGenerator:
    def __init__(self, reference: str | None = PNG_DATA_URL) -> None:
        self.reference = reference
        self.prompts: list[str] = []

    def generate(self, prompt: str) -> str | None:
        self.prompts.append(prompt)
        return self.reference


class FailingQuotaStore:
    def increment(self, key: str, by_amount: int) -> int:
        raise ConnectionError("quota store down")

    def read(self, key: str) -> int:
        raise ConnectionError("quota store down")


@pytest.fixture
def clock() -> MutableClock:
    return MutableClock()


@pytest.fixture
def quota_store(clock: MutableClock) -> InMemoryQuotaStore:
    return InMemoryQuotaStore(clock=clock)


@pytest.fixture
def limiter(quota_store: InMemoryQuotaStore, clock: MutableClock) -> RateLimiter:
    return RateLimiter(quota_store, daily_limit=10, clock=clock)


@pytest.fixture
def text_generator() -> FakeTextGenerator:
    return FakeTextGenerator()


@pytest.fixture
def image_generator() -> FakeImageGenerator:
    return FakeImageGenerator()


@pytest.fixture
def blob_store() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture
def processor(
    text_generator: FakeTextGenerator,
    image_generator: FakeImageGenerator,
    blob_store: InMemoryBlobStore,
) -> UnitProcessor:
    return UnitProcessor(
        text_generator=text_generator,
        image_generator=image_generator,
        blob_store=blob_store,
    )


@pytest.fixture
def orchestrator(limiter: RateLimiter, processor: UnitProcessor) -> BatchOrchestrator:
    return BatchOrchestrator(limiter=limiter, processor=processor)


@pytest.fixture
def client(orchestrator: BatchOrchestrator) -> Iterator[TestClient]:
    app = create_app(
        orchestrator=orchestrator,
        settings_override=Settings(quota_backend="memory", blob_backend="memory"),
    )
    with TestClient(app) as test_client:
        yield test_client
