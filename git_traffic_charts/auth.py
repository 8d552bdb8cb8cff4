#!/usr/bin/env python3
"""
GitHub OAuth authentication handlers.

Implements the GitHub OAuth 2.0 web flow used to obtain a token for the
owner of the repositories being charted.
"""

import logging
from typing import Optional
from urllib.parse import urlencode

import requests

from .errors import OAuthError
from .github import GITHUB_API_URL, USER_AGENT
from .tokens import TokenStore

logger = logging.getLogger(__name__)


class GitHubOAuth:
    """GitHub OAuth 2.0 authentication handler."""

    def __init__(self, client_id: str, client_secret: str, session: Optional[requests.Session] = None):
        """
        Initialize GitHub OAuth handler.

        Args:
            client_id: GitHub OAuth app client ID
            client_secret: GitHub OAuth app client secret
            session: HTTP session to reuse (a new one if None)
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.session = session or requests.Session()

        # GitHub OAuth endpoints
        self.authorize_url = "https://github.com/login/oauth/authorize"
        self.token_url = "https://github.com/login/oauth/access_token"
        self.user_api_url = f"{GITHUB_API_URL}/user"

    def get_authorization_url(self, redirect_uri: str, state: str) -> str:
        """
        Generate GitHub OAuth authorization URL.

        Args:
            redirect_uri: URL to redirect to after authorization
            state: State parameter for CSRF protection

        Returns:
            GitHub authorization URL
        """
        params = {
            'client_id': self.client_id,
            'redirect_uri': redirect_uri,
            'scope': 'public_repo',  # Enough to read traffic of public repositories
            'state': state
        }

        return f"{self.authorize_url}?{urlencode(params)}"

    def exchange_code_for_token(self, code: str, redirect_uri: str) -> str:
        """
        Exchange authorization code for access token.

        Args:
            code: Authorization code from GitHub
            redirect_uri: Redirect URI used in authorization

        Returns:
            Access token

        Raises:
            OAuthError: If GitHub could not be reached or returned no token
        """
        data = {
            'client_id': self.client_id,
            'client_secret': self.client_secret,
            'code': code,
            'redirect_uri': redirect_uri
        }

        headers = {
            'Accept': 'application/json',
            'User-Agent': USER_AGENT
        }

        try:
            response = self.session.post(self.token_url, data=data, headers=headers, timeout=30)
            response.raise_for_status()
            token_data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Error exchanging code for token: {e}")
            raise OAuthError(f"failed to exchange code for token: {e}") from e

        access_token = token_data.get('access_token') if isinstance(token_data, dict) else None
        if not access_token:
            error = token_data.get('error_description', 'Unknown error') if isinstance(token_data, dict) else 'Unknown error'
            logger.error(f"Failed to fetch access token from GitHub: {error}")
            raise OAuthError(f"failed to fetch access token from github: {error}")

        return access_token

    def get_user_login(self, access_token: str) -> str:
        """
        Get the login of the user an access token belongs to.

        Raises:
            OAuthError: If the user could not be looked up
        """
        headers = {
            'Authorization': f'token {access_token}',
            'Accept': 'application/vnd.github.v3+json',
            'User-Agent': USER_AGENT
        }

        try:
            response = self.session.get(self.user_api_url, headers=headers, timeout=30)
            response.raise_for_status()
            user_data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Error getting user info: {e}")
            raise OAuthError(f"failed to fetch user info: {e}") from e

        login = user_data.get('login') if isinstance(user_data, dict) else None
        if not login:
            logger.error("Failed to fetch user login from GitHub after OAuth.")
            raise OAuthError("failed to fetch user login from github after oauth.")

        return login


def register_user_token(oauth: GitHubOAuth, tokens: TokenStore, code: str, redirect_uri: str) -> str:
    """
    Complete the OAuth flow: exchange the code, find out who authorized, and store their token.

    Returns:
        The GitHub login the token was stored for
    """
    access_token = oauth.exchange_code_for_token(code, redirect_uri)
    login = oauth.get_user_login(access_token)
    tokens.put(login, access_token)
    logger.info(f"Stored GitHub token for {login}")
    return login
