#!/usr/bin/env python3
"""
Chart request orchestration.

A chart request resolves whose token to use, gets the repository's traffic
through the stats cache (fetching from GitHub only on a miss), and renders
the result. Concurrent cold requests for the same repository may each fetch
and overwrite the cache; the writes are equivalent snapshots, so the
duplicated work is accepted rather than serialized.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from .cache import StatsCache
from .charts import build_chart_spec, render_png
from .errors import StoreError
from .github import GitHubTrafficClient
from .models import StatsSnapshot
from .tokens import TokenStore

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ChartResult:
    """A rendered chart and the expiry of the data behind it."""
    repo_id: str
    png: bytes
    snapshot: StatsSnapshot

    @property
    def expires(self) -> str:
        return self.snapshot.expires_header


class TrafficChartService:
    """Serves visitor charts for repositories."""

    def __init__(self, tokens: TokenStore, cache: StatsCache, fetcher: GitHubTrafficClient,
                 clock: Callable[[], datetime] = _utcnow):
        self.tokens = tokens
        self.cache = cache
        self.fetcher = fetcher
        self.clock = clock

    def get_stats(self, repo_id: str, token: str) -> StatsSnapshot:
        """
        Return the repository's traffic, from cache when possible.

        Raises:
            UpstreamFetchError: On a cache miss whose fetch failed; nothing is cached then
        """
        snapshot = self.cache.get(repo_id)
        if snapshot is not None:
            logger.info("cache hit")
            return snapshot

        snapshot = self.fetcher.fetch(repo_id, token).with_expiry(self.clock(), self.cache.ttl)
        try:
            self.cache.put(repo_id, snapshot, self.cache.ttl)
        except StoreError as e:
            # The fresh snapshot is still good for this request
            logger.error(f"Failed to cache results for {repo_id}: {e}")
        return snapshot

    def render_chart(self, user: str, repo: str, auth_user: Optional[str] = None) -> ChartResult:
        """
        Render the visitor chart of user/repo.

        Args:
            user: Repository owner from the request path
            repo: Repository name from the request path
            auth_user: User whose token should be used, when it isn't the owner's

        Raises:
            TokenNotFound: If no token is registered for the resolved user
            UpstreamFetchError: If GitHub could not be queried
        """
        token = self.tokens.get(auth_user or user)

        repo_id = f"{user}/{repo}"
        logger.info(f"~ view: {repo_id}")

        snapshot = self.get_stats(repo_id, token)
        png = render_png(build_chart_spec(repo_id, snapshot))
        return ChartResult(repo_id=repo_id, png=png, snapshot=snapshot)
