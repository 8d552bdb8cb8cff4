#!/usr/bin/env python3
"""
Store factory to switch between Redis and Firestore based on configuration.
"""

import logging

from .config import Settings
from .store import KeyValueStore, RedisStore, create_redis_client


def get_store(settings: Settings) -> KeyValueStore:
    """
    Return the key-value store selected by the settings.

    Firestore is used when USE_FIRESTORE is 'true' or when running on GAE;
    otherwise Redis at REDIS_ADDR.
    """
    logger = logging.getLogger(__name__)

    if settings.use_firestore:
        from .firestore_db import FirestoreStore
        logger.info("Using Firestore store")
        return FirestoreStore()

    logger.info("Using Redis store")
    return RedisStore(create_redis_client(settings.redis_addr, settings.redis_password))
