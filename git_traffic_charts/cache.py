#!/usr/bin/env python3
"""
Time-limited cache of repository traffic snapshots.

Entries live under "stats:<owner>/<repo>" for a fixed two hours. A cached
entry is either a complete, decodable snapshot or it is treated as absent:
unreadable or malformed data is a miss, never an error.
"""

import logging
from datetime import timedelta
from typing import Optional

from .errors import StoreError
from .models import StatsSnapshot
from .store import KeyValueStore

STATS_PREFIX = "stats:"
STATS_TTL = timedelta(hours=2)

logger = logging.getLogger(__name__)


class StatsCache:
    """Stats snapshots keyed by repository id, independent of whose token fetched them."""

    def __init__(self, store: KeyValueStore, ttl: timedelta = STATS_TTL):
        self.store = store
        self.ttl = ttl

    def get(self, repo_id: str) -> Optional[StatsSnapshot]:
        """Return the cached snapshot for repo_id, or None on a miss."""
        key = STATS_PREFIX + repo_id
        try:
            cached = self.store.get(key)
        except StoreError as e:
            logger.warning(f"Could not read cache for {repo_id}: {e}")
            return None

        if not cached:
            return None

        try:
            return StatsSnapshot.from_json(cached)
        except ValueError as e:
            logger.warning(f"Data at cache is invalid: {cached[:200]!r} // {e}")
            return None

    def put(self, repo_id: str, snapshot: StatsSnapshot, ttl: Optional[timedelta] = None) -> None:
        """
        Store a snapshot, overwriting whatever is there. Last writer wins.

        Raises:
            StoreError: If the store could not be written
        """
        self.store.set(STATS_PREFIX + repo_id, snapshot.to_json(), ttl or self.ttl)
