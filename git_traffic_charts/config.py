#!/usr/bin/env python3
"""
Environment-supplied configuration.

All settings are read once at start-up; a missing required setting is fatal.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .errors import ConfigurationError


@dataclass(frozen=True)
class Settings:
    """Process-wide settings. Never mutated after start-up."""
    host: str
    port: int
    github_client_id: str
    github_client_secret: str
    redis_addr: Optional[str] = None
    redis_password: Optional[str] = None
    session_secret: Optional[str] = None
    use_firestore: bool = False

    @property
    def callback_url(self) -> str:
        """OAuth redirect URI registered with GitHub."""
        return f"{self.host.rstrip('/')}/_callback"


def _require(env: Mapping[str, str], name: str, allow_empty: bool = False) -> str:
    value = env.get(name)
    if value is None or (not value and not allow_empty):
        raise ConfigurationError(f"{name} environment variable not set.")
    return value


def firestore_selected(env: Mapping[str, str]) -> bool:
    """Firestore is used when USE_FIRESTORE=true or when running on App Engine."""
    use_firestore = env.get('USE_FIRESTORE', '').lower() == 'true'
    is_gae = env.get('GAE_ENV', '').startswith('standard')
    return use_firestore or is_gae


def load_configuration(env: Optional[Mapping[str, str]] = None) -> Settings:
    """Load settings from environment variables."""
    if env is None:
        env = os.environ

    port_value = _require(env, 'PORT')
    try:
        port = int(port_value)
    except ValueError:
        raise ConfigurationError(f"PORT must be an integer, got {port_value!r}.")

    use_firestore = firestore_selected(env)
    redis_addr = redis_password = None
    if not use_firestore:
        redis_addr = _require(env, 'REDIS_ADDR')
        # An unauthenticated redis is configured with an empty password
        redis_password = _require(env, 'REDIS_PASSWORD', allow_empty=True)

    return Settings(
        host=_require(env, 'HOST'),
        port=port,
        github_client_id=_require(env, 'GITHUB_CLIENT_ID'),
        github_client_secret=_require(env, 'GITHUB_CLIENT_SECRET'),
        redis_addr=redis_addr,
        redis_password=redis_password,
        session_secret=env.get('SESSION_SECRET') or None,
        use_firestore=use_firestore,
    )
