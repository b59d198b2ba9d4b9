"""
Shared test fixtures.

Caches live under pytest's tmp_path and read time from a FakeClock, so
expiry can be exercised without sleeping.
"""

from __future__ import annotations

import os
from collections.abc import AsyncIterator
from pathlib import Path

import httpx
import pytest

from research_cache.config import Settings, get_settings
from research_cache.core.cache.manager import CacheManager
from research_cache.providers.perplexity import PerplexityClient

START_TIME = 1_750_000_000.0


class FakeClock:
    """Callable clock returning epoch seconds; advance() moves it forward."""

    def __init__(self, now: float = START_TIME) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# Test Settings Override

def get_test_settings(cache_dir: Path) -> Settings:
    return Settings(
        cache={"directory": str(cache_dir), "ttl_hours": 1},  # type: ignore[arg-type]
        perplexity={"api_key": "pplx-test-key", "default_model": "sonar"},  # type: ignore[arg-type]
        logging={"level": "DEBUG", "format": "console"},  # type: ignore[arg-type]
    )


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in list(os.environ):
        if name.upper().startswith("RESEARCH_CACHE_") or name.upper() == "PERPLEXITY_API_KEY":
            monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()


# Cache Fixtures

@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    return tmp_path / "cache"


@pytest.fixture
def test_settings(cache_dir: Path) -> Settings:
    return get_test_settings(cache_dir)


@pytest.fixture
def cache(cache_dir: Path, clock: FakeClock) -> CacheManager:
    return CacheManager(cache_dir, ttl_hours=1, clock=clock)


# HTTP Fixtures

@pytest.fixture
async def http_client() -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient() as client:
        yield client


@pytest.fixture
def perplexity_client(test_settings: Settings, http_client: httpx.AsyncClient) -> PerplexityClient:
    return PerplexityClient(test_settings.perplexity, http_client)
