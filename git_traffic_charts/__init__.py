"""
GitHub Repository Traffic Charts

Serves visitor charts for GitHub repositories. Repository owners authorize
through GitHub OAuth, and traffic statistics are cached for two hours to stay
within GitHub's API rate limits.
"""

__version__ = "1.0.0"

from .cache import StatsCache
from .models import StatsSnapshot, ViewRecord
from .service import TrafficChartService
from .tokens import TokenStore

__all__ = [
    "StatsCache",
    "StatsSnapshot",
    "TokenStore",
    "TrafficChartService",
    "ViewRecord",
]
