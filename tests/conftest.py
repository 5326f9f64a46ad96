"""Shared test fixtures."""

from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from autopress.config import Settings
from autopress.errors import BackendError, BackendUnavailable
from autopress.generator import ContentGenerator
from autopress.models import ArticleDraft, TopicCandidate
from autopress.ratelimit import MinIntervalLimiter
from autopress.store import ContentStore


class MockGeminiClient:
    """A mock generation backend that returns pre-configured responses.

    Exceptions in the queue are raised instead of returned. Once the queue
    is exhausted the client behaves as if it were not configured.
    """

    def __init__(self) -> None:
        self.call_count = 0
        self.prompts: list[str] = []
        self._responses: list[str | Exception] = []
        self._response_index = 0

    def set_responses(self, responses: list[str | Exception]) -> None:
        self._responses = responses
        self._response_index = 0

    def complete(self, prompt: str) -> str:
        self.call_count += 1
        self.prompts.append(prompt)

        if self._response_index < len(self._responses):
            resp = self._responses[self._response_index]
            self._response_index += 1
            if isinstance(resp, Exception):
                raise resp
            return resp

        raise BackendUnavailable("no response configured")


class FailingGeminiClient(MockGeminiClient):
    def complete(self, prompt: str) -> str:
        self.call_count += 1
        raise BackendError("backend exploded")


class FakeClock:
    """Monotonic seconds clock that only moves when told to, or when slept on."""

    def __init__(self) -> None:
        self.now = 1000.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class StepDatetime:
    """Datetime clock advancing a fixed step on every call."""

    def __init__(self, start: datetime | None = None, step: timedelta = timedelta(0)) -> None:
        self.current = start or datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)
        self.step = step

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + self.step
        return value


@pytest.fixture
def mock_client() -> MockGeminiClient:
    return MockGeminiClient()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def no_wait_limiter(fake_clock: FakeClock) -> MinIntervalLimiter:
    return MinIntervalLimiter(2.0, clock=fake_clock, sleep=fake_clock.sleep)


@pytest.fixture
def sample_settings(tmp_path: Path) -> Settings:
    return Settings(
        gemini_api_key="",
        model_id="test-model",
        store_path=str(tmp_path / "data" / "store.json"),
        sitemap_path=str(tmp_path / "public" / "sitemap.xml"),
        site_url="https://example.com",
        site_name="Example",
        feeds_path=str(tmp_path / "feeds.txt"),
        min_word_count=1500,
        max_word_count=1500,
        write_delay_seconds=0.0,
        publish_delay_seconds=0.0,
        backend_min_interval_seconds=0.0,
    )


@pytest.fixture
def store(sample_settings: Settings) -> ContentStore:
    return ContentStore(sample_settings)


@pytest.fixture
def generator(mock_client: MockGeminiClient, sample_settings: Settings) -> ContentGenerator:
    return ContentGenerator(mock_client, sample_settings, rng=random.Random(7))


@pytest.fixture
def sample_candidates() -> list[TopicCandidate]:
    return [
        TopicCandidate(title="ChatGPT new features", keyword="ChatGPT", search_volume=5_000_000),
        TopicCandidate(title="Side hustle ideas", keyword="side hustle", search_volume=1_800_000),
        TopicCandidate(title="Quiet morning routines"),
    ]


def make_draft(slug: str, tags: list[str] | None = None, title: str | None = None) -> ArticleDraft:
    return ArticleDraft(
        title=title or slug.replace("-", " ").title(),
        slug=slug,
        content=f"<h1>{slug}</h1>\n<article>\n<p>Body of {slug}.</p>\n</article>",
        summary=f"Summary of {slug}.",
        category="tech",
        tags=tags if tags is not None else ["ai", "tech"],
        keywords=["ai"],
        meta_title=slug[:60],
        meta_description=f"Summary of {slug}.",
        word_count=4,
    )


@pytest.fixture
def draft_factory():
    return make_draft
