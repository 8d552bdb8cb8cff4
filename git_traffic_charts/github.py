#!/usr/bin/env python3
"""
GitHub traffic API client.
"""

import logging
from typing import Optional

import requests

from .errors import UpstreamFetchError
from .models import StatsSnapshot

USER_AGENT = "git-traffic-charts/1.0"
GITHUB_API_URL = "https://api.github.com"

logger = logging.getLogger(__name__)


class GitHubTrafficClient:
    """Fetches repository view statistics on behalf of a user."""

    def __init__(self, session: Optional[requests.Session] = None, api_url: str = GITHUB_API_URL,
                 timeout: int = 30):
        """
        Initialize the traffic client.

        Args:
            session: HTTP session to reuse (a new one if None)
            api_url: Base URL of the GitHub REST API
            timeout: Seconds to wait for GitHub before giving up
        """
        self.api_url = api_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": USER_AGENT
        })

    def fetch(self, repo_id: str, token: str) -> StatsSnapshot:
        """
        Fetch the view statistics of a repository with one API call.

        Args:
            repo_id: Repository in owner/name form
            token: GitHub access token of a user allowed to see the repo's traffic

        Returns:
            Snapshot of the last 14 days of views, without an expiry stamp

        Raises:
            UpstreamFetchError: On transport failure, a non-success status, or an invalid body
        """
        url = f"{self.api_url}/repos/{repo_id}/traffic/views"

        try:
            response = self.session.get(url, headers={"Authorization": f"token {token}"},
                                        timeout=self.timeout)
            response.raise_for_status()
            snapshot = StatsSnapshot.from_github_payload(response.json())
        except requests.RequestException as e:
            logger.error(f"Error fetching traffic for {repo_id}: {e}")
            raise UpstreamFetchError(f"failed to fetch traffic for {repo_id}: {e}") from e
        except ValueError as e:
            logger.error(f"Invalid traffic data for {repo_id}: {e}")
            raise UpstreamFetchError(f"invalid traffic data for {repo_id}: {e}") from e

        if not snapshot.daily_points:
            # Passed through so the chart shows no data instead of failing
            logger.warning(f"No data received from GitHub for {repo_id}.")

        return snapshot
