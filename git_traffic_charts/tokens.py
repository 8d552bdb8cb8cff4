#!/usr/bin/env python3
"""
Per-user GitHub access tokens.

Tokens are stored under "token:<username>" without expiry; re-authorizing
simply overwrites the previous token.
"""

from .errors import TokenNotFound
from .store import KeyValueStore

TOKEN_PREFIX = "token:"


class TokenStore:
    """Persists the OAuth access token of each user who authorized the app."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def put(self, username: str, token: str) -> None:
        self.store.set(TOKEN_PREFIX + username, token.encode('utf-8'))

    def get(self, username: str) -> str:
        """
        Look up the token registered for a user.

        Raises:
            TokenNotFound: If the user never authorized the app
            StoreError: If the store could not be read
        """
        value = self.store.get(TOKEN_PREFIX + username)
        if not value:
            raise TokenNotFound(username)
        return value.decode('utf-8')
