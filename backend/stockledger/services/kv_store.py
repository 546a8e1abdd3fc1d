# Overview: Durable key-value store adapter; JSON snapshots over the kv_store table.

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Mapping, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import KeyValueEntry

"""
Key-value store contract (authoritative)

- load() never raises for missing rows, corrupt JSON, wrong shapes or
  database errors: it logs and returns the caller's default.
- save() overwrites the whole key with a full snapshot. Failures are logged,
  rolled back and swallowed; the in-memory state stays authoritative.
- A committed save is visible to the next load in the same process.
"""

logger = logging.getLogger(__name__)

USERS_KEY = "users"
PRODUCTS_KEY = "products"
TRANSACTIONS_KEY = "transactions"


def _encode(value: Sequence[Any]) -> str:
    items = [item.to_dict() if hasattr(item, "to_dict") else item for item in value]
    return json.dumps(items)


class KeyValueStore:
    """Snapshot persistence for whole collections, one row per key."""

    @property
    def session(self):
        return db.session

    def load(self, key: str, default: Any, decode: Optional[Callable[[Any], Any]] = None) -> Any:
        try:
            entry = self.session.get(KeyValueEntry, key)
        except SQLAlchemyError:
            logger.exception("Failed to read key %r; using default", key)
            self.session.rollback()
            return default

        if entry is None:
            return default

        try:
            data = json.loads(entry.value)
            if not isinstance(data, list):
                raise TypeError(f"expected a JSON array, got {type(data).__name__}")
            if decode is not None:
                data = [decode(item) for item in data]
        except (ValueError, TypeError, KeyError) as exc:
            logger.warning("Discarding unreadable data under key %r: %s", key, exc)
            return default

        return data

    def _put(self, key: str, value: Sequence[Any]) -> None:
        payload = _encode(value)
        entry = self.session.get(KeyValueEntry, key)
        if entry is None:
            self.session.add(KeyValueEntry(key=key, value=payload))
        else:
            entry.value = payload

    def save(self, key: str, value: Sequence[Any]) -> None:
        self.save_many({key: value})

    def save_many(self, snapshots: Mapping[str, Sequence[Any]]) -> None:
        """Write several keys in one database transaction."""
        try:
            for key, value in snapshots.items():
                self._put(key, value)
            self.session.commit()
        except (TypeError, ValueError, SQLAlchemyError):
            logger.exception("Failed to persist keys %s; changes kept in memory only", sorted(snapshots))
            self.session.rollback()

    def keys(self) -> list[str]:
        """Persisted keys, for health checks and the CLI."""
        return [row.key for row in self.session.query(KeyValueEntry).order_by(KeyValueEntry.key).all()]
