#!/usr/bin/env python3
"""
Key-value store capability shared by the token store and the stats cache.

The backing store owns expiry: values written with a ttl disappear on their
own, and per-key get/set are atomic, so callers need no locking.
"""

import logging
from datetime import timedelta
from typing import Optional

import redis

from .errors import StoreError

logger = logging.getLogger(__name__)


class KeyValueStore:
    """Base interface for key-value backends."""

    def get(self, key: str) -> Optional[bytes]:
        raise NotImplementedError

    def set(self, key: str, value: bytes, ttl: Optional[timedelta] = None) -> None:
        raise NotImplementedError


class RedisStore(KeyValueStore):
    """Redis backend. The redis-py client pools connections and is safe to share across threads."""

    def __init__(self, client: redis.Redis):
        self.client = client

    def get(self, key: str) -> Optional[bytes]:
        try:
            value = self.client.get(key)
        except redis.RedisError as e:
            raise StoreError(f"redis GET {key} failed: {e}") from e
        if isinstance(value, str):
            value = value.encode('utf-8')
        return value

    def set(self, key: str, value: bytes, ttl: Optional[timedelta] = None) -> None:
        try:
            self.client.set(key, value, ex=ttl)
        except redis.RedisError as e:
            raise StoreError(f"redis SET {key} failed: {e}") from e


def create_redis_client(addr: str, password: Optional[str] = None) -> redis.Redis:
    """
    Create a redis client from an address.

    Args:
        addr: Either host:port (port defaults to 6379) or a redis:// URL
        password: Redis password; empty means no AUTH

    Returns:
        Configured redis client
    """
    password = password or None
    if "://" in addr:
        return redis.Redis.from_url(addr, password=password)

    host, _, port = addr.rpartition(":")
    if not host:
        host, port = addr, "6379"
    logger.info(f"Using redis at {host}:{port}")
    return redis.Redis(host=host, port=int(port), password=password)
