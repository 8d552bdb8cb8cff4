#!/usr/bin/env python3
"""
Exception types shared across git-traffic-charts.
"""


class TrafficChartsError(Exception):
    """Base class for all application errors."""
    pass


class ConfigurationError(TrafficChartsError, ValueError):
    """Raised when a required setting is missing or malformed."""
    pass


class StoreError(TrafficChartsError):
    """Raised when the key-value store cannot be read or written."""
    pass


class TokenNotFound(TrafficChartsError):
    """Raised when no GitHub token is registered for a user."""

    def __init__(self, username: str):
        super().__init__(f"user {username} doesn't have a valid GitHub token registered.")
        self.username = username


class UpstreamFetchError(TrafficChartsError):
    """Raised when traffic statistics cannot be fetched from GitHub."""
    pass


class OAuthError(TrafficChartsError):
    """Raised when the GitHub OAuth exchange fails."""
    pass


class InvalidStateError(OAuthError):
    """Raised when the OAuth state parameter is missing, forged or expired."""
    pass
