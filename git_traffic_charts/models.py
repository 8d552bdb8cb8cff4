#!/usr/bin/env python3
"""
Data models for GitHub repository traffic statistics.

Contains the snapshot that is fetched from GitHub, cached, and charted.
"""

import json
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from email.utils import format_datetime, parsedate_to_datetime
from typing import Any, Dict, Optional, Tuple

GITHUB_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def _require_int(entry: Dict[str, Any], field: str) -> int:
    value = entry.get(field)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"'{field}' must be an integer, got {value!r}")
    return value


def parse_github_timestamp(timestamp: str) -> datetime:
    """Parse a GitHub traffic timestamp such as 2024-01-01T00:00:00Z into an aware datetime."""
    return datetime.strptime(timestamp, GITHUB_TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)


def format_http_date(moment: datetime) -> str:
    """Format a datetime the way HTTP Expires headers expect (RFC 1123, GMT)."""
    return format_datetime(moment.astimezone(timezone.utc), usegmt=True)


@dataclass(frozen=True)
class ViewRecord:
    """Represents a single day of views with count, timestamp, and unique visitors."""
    count: int
    timestamp: str
    uniques: int

    def __str__(self) -> str:
        return f"{self.count} {self.timestamp} {self.uniques}"

    @property
    def day(self) -> datetime:
        return parse_github_timestamp(self.timestamp)

    @classmethod
    def from_github_entry(cls, entry: Dict[str, Any]) -> 'ViewRecord':
        """Create a ViewRecord from a GitHub API response entry, validating every field."""
        if not isinstance(entry, dict):
            raise ValueError(f"view entry must be an object, got {type(entry).__name__}")
        timestamp = entry.get("timestamp")
        if not isinstance(timestamp, str):
            raise ValueError(f"'timestamp' must be a string, got {timestamp!r}")
        parse_github_timestamp(timestamp)
        return cls(_require_int(entry, "count"), timestamp, _require_int(entry, "uniques"))

    def to_dict(self) -> Dict[str, Any]:
        return {"timestamp": self.timestamp, "count": self.count, "uniques": self.uniques}


@dataclass(frozen=True)
class StatsSnapshot:
    """
    Traffic statistics for one repository over GitHub's rolling 14 day window.

    daily_points is kept in the order GitHub returns it (ascending by day);
    the chart is drawn straight from that order.
    """
    total_count: int
    total_uniques: int
    daily_points: Tuple[ViewRecord, ...] = ()
    expires_at: Optional[datetime] = None

    @classmethod
    def from_github_payload(cls, payload: Dict[str, Any]) -> 'StatsSnapshot':
        """
        Build a snapshot from a /traffic/views response body (or a cached copy of one).

        Raises:
            ValueError: If the payload is not a structurally valid traffic payload
        """
        if not isinstance(payload, dict):
            raise ValueError(f"traffic payload must be an object, got {type(payload).__name__}")

        views = payload.get("views", [])
        if not isinstance(views, list):
            raise ValueError("'views' must be a list")

        expires_at = None
        expires = payload.get("expires")
        if expires:
            if not isinstance(expires, str):
                raise ValueError(f"'expires' must be a string, got {expires!r}")
            try:
                expires_at = parsedate_to_datetime(expires)
            except (TypeError, ValueError) as e:
                raise ValueError(f"invalid 'expires' value {expires!r}: {e}")
            # A "-0000" offset parses as naive; HTTP dates are always GMT
            if expires_at.tzinfo is None:
                expires_at = expires_at.replace(tzinfo=timezone.utc)

        return cls(
            total_count=_require_int(payload, "count"),
            total_uniques=_require_int(payload, "uniques"),
            daily_points=tuple(ViewRecord.from_github_entry(entry) for entry in views),
            expires_at=expires_at,
        )

    @classmethod
    def from_json(cls, data: bytes) -> 'StatsSnapshot':
        """Decode a cached snapshot. Raises ValueError on anything malformed."""
        try:
            payload = json.loads(data)
        except (TypeError, UnicodeDecodeError, json.JSONDecodeError, RecursionError) as e:
            raise ValueError(f"cached snapshot is not valid JSON: {e}")
        return cls.from_github_payload(payload)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "count": self.total_count,
            "uniques": self.total_uniques,
            "views": [point.to_dict() for point in self.daily_points],
        }
        if self.expires_at is not None:
            data["expires"] = self.expires_header
        return data

    def to_json(self) -> bytes:
        return json.dumps(self.to_dict()).encode('utf-8')

    def with_expiry(self, now: datetime, ttl: timedelta) -> 'StatsSnapshot':
        """Return a copy stamped with expires_at = now + ttl, truncated to whole seconds."""
        return replace(self, expires_at=(now + ttl).replace(microsecond=0))

    @property
    def expires_header(self) -> str:
        """Value for the HTTP Expires header, empty when the snapshot was never stamped."""
        if self.expires_at is None:
            return ""
        return format_http_date(self.expires_at)
