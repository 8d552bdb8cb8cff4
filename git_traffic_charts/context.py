#!/usr/bin/env python3
"""
Process-wide application context.

Built once at start-up from Settings and handed to the server; nothing in it
changes while the process runs.
"""

from dataclasses import dataclass
from typing import Optional

from .auth import GitHubOAuth
from .cache import StatsCache
from .config import Settings
from .db_factory import get_store
from .github import GitHubTrafficClient
from .service import TrafficChartService
from .state import OAuthStateManager
from .store import KeyValueStore
from .tokens import TokenStore


@dataclass(frozen=True)
class AppContext:
    settings: Settings
    store: KeyValueStore
    tokens: TokenStore
    charts: TrafficChartService
    oauth: GitHubOAuth
    states: OAuthStateManager


def create_app_context(settings: Settings, store: Optional[KeyValueStore] = None,
                       fetcher: Optional[GitHubTrafficClient] = None,
                       oauth: Optional[GitHubOAuth] = None) -> AppContext:
    """Wire the store and components together. Pieces may be passed in to replace the defaults."""
    if store is None:
        store = get_store(settings)
    tokens = TokenStore(store)
    charts = TrafficChartService(tokens, StatsCache(store), fetcher or GitHubTrafficClient())
    return AppContext(
        settings=settings,
        store=store,
        tokens=tokens,
        charts=charts,
        oauth=oauth or GitHubOAuth(settings.github_client_id, settings.github_client_secret),
        states=OAuthStateManager(settings.session_secret),
    )
