#!/usr/bin/env python3
"""
Signed OAuth state values.

The state sent to GitHub is a Fernet token, so the callback can check that it
was issued by this process (or one sharing SESSION_SECRET) in the last few
minutes without keeping any server-side record.
"""

import base64
import hashlib
import logging
import os
import secrets
import time
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken

from .errors import ConfigurationError, InvalidStateError

STATE_TTL_SECONDS = 10 * 60

logger = logging.getLogger(__name__)


class OAuthStateManager:
    """Issues and validates encrypted, time-limited OAuth state values."""

    def __init__(self, secret_key: Optional[str] = None, ttl: int = STATE_TTL_SECONDS):
        """
        Initialize state manager with encryption key.

        Args:
            secret_key: Base64 encoded Fernet key or any passphrase. If None, a
                random key is generated, valid only for this process.
            ttl: Seconds a state value stays valid
        """
        if secret_key is None:
            logger.warning("SESSION_SECRET not set; OAuth state is only valid for this process")
            secret_key = base64.urlsafe_b64encode(os.urandom(32)).decode()

        key = secret_key.encode()
        if len(key) != 44:  # Base64 encoded 32-byte key length
            key = base64.urlsafe_b64encode(hashlib.sha256(key).digest())

        try:
            self.cipher = Fernet(key)
        except ValueError as e:
            raise ConfigurationError(f"Invalid session secret key: {e}")
        self.ttl = ttl

    def create_state(self) -> str:
        return self.cipher.encrypt(secrets.token_bytes(16)).decode()

    def validate_state(self, state: Optional[str], now: Optional[int] = None) -> None:
        """
        Check a state value returned by GitHub.

        Args:
            state: The state query parameter of the callback
            now: Unix time to check the age against (current time if None)

        Raises:
            InvalidStateError: If the state is missing, was not issued here, or is too old
        """
        if not state:
            raise InvalidStateError("missing OAuth state")
        if now is None:
            now = int(time.time())
        try:
            self.cipher.decrypt_at_time(state.encode(), self.ttl, now)
        except InvalidToken:
            raise InvalidStateError("invalid or expired OAuth state")
