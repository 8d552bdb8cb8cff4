#!/usr/bin/env python3
"""
Firestore key-value backend for Google App Engine deployment.

Each key is one document in the `kv` collection. Expiry is enforced by a
Firestore TTL policy on the `expires_at` field; because that policy deletes
lazily, reads also treat past-due documents as absent.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from google.api_core import exceptions as google_exceptions
from google.cloud import firestore

from .errors import StoreError
from .store import KeyValueStore

COLLECTION = 'kv'


class FirestoreStore(KeyValueStore):
    """Handles key-value operations using Firestore."""

    def __init__(self, client: Optional[firestore.Client] = None):
        """Initialize the Firestore store."""
        self.db = client if client is not None else firestore.Client()
        self.logger = logging.getLogger(__name__)

    def _document(self, key: str):
        # Firestore document ids may not contain '/'
        return self.db.collection(COLLECTION).document(key.replace('/', '|'))

    def get(self, key: str) -> Optional[bytes]:
        try:
            doc = self._document(key).get()
        except google_exceptions.GoogleAPICallError as e:
            raise StoreError(f"firestore read of {key} failed: {e}") from e

        if not doc.exists:
            return None

        data = doc.to_dict() or {}
        expires_at = data.get('expires_at')
        if expires_at is not None and expires_at <= datetime.now(timezone.utc):
            self.logger.debug(f"Document for {key} is past its expiry")
            return None
        return data.get('value')

    def set(self, key: str, value: bytes, ttl: Optional[timedelta] = None) -> None:
        expires_at = datetime.now(timezone.utc) + ttl if ttl is not None else None
        try:
            self._document(key).set({
                'key': key,
                'value': value,
                'expires_at': expires_at,
            })
        except google_exceptions.GoogleAPICallError as e:
            raise StoreError(f"firestore write of {key} failed: {e}") from e
