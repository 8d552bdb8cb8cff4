"""
Shared fixtures: a fakeredis-backed store and a scripted GitHub fetcher.
"""

import threading
from datetime import datetime, timezone

import fakeredis
import pytest

from git_traffic_charts.cache import StatsCache
from git_traffic_charts.errors import UpstreamFetchError
from git_traffic_charts.models import StatsSnapshot
from git_traffic_charts.service import TrafficChartService
from git_traffic_charts.store import RedisStore
from git_traffic_charts.tokens import TokenStore

FIXED_NOW = datetime(2024, 1, 3, 12, 0, 0, tzinfo=timezone.utc)

TWO_DAY_PAYLOAD = {
    "count": 25,
    "uniques": 8,
    "views": [
        {"timestamp": "2024-01-01T00:00:00Z", "count": 10, "uniques": 4},
        {"timestamp": "2024-01-02T00:00:00Z", "count": 15, "uniques": 6},
    ],
}


class FakeFetcher:
    """Stands in for GitHubTrafficClient, recording every call."""

    def __init__(self, payload=None, error=None):
        self.payload = payload if payload is not None else TWO_DAY_PAYLOAD
        self.error = error
        self.calls = []
        self._lock = threading.Lock()

    def fetch(self, repo_id, token):
        with self._lock:
            self.calls.append((repo_id, token))
        if self.error is not None:
            raise self.error
        return StatsSnapshot.from_github_payload(self.payload)


@pytest.fixture
def redis_client():
    return fakeredis.FakeRedis(server=fakeredis.FakeServer())


@pytest.fixture
def store(redis_client):
    return RedisStore(redis_client)


@pytest.fixture
def tokens(store):
    return TokenStore(store)


@pytest.fixture
def cache(store):
    return StatsCache(store)


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def service(tokens, cache, fetcher):
    return TrafficChartService(tokens, cache, fetcher, clock=lambda: FIXED_NOW)


@pytest.fixture
def snapshot():
    return StatsSnapshot.from_github_payload(TWO_DAY_PAYLOAD)


@pytest.fixture
def failing_fetcher():
    return FakeFetcher(error=UpstreamFetchError("GitHub is down"))
