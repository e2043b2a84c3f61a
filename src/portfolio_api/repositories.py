from __future__ import annotations

import copy
import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from itertools import count
from threading import RLock
from typing import Callable, Dict, List, Optional

from .errors import StoreConfigurationError
from .models import ChangeEvent, StorageRow
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[ChangeEvent], None]


@dataclass(frozen=True)
class OrderBy:
    """
    Ordering requested for a table scan.
    """
    column: str
    descending: bool = True


# PUBLIC_INTERFACE
class Subscription:
    """Handle for a change-notification subscription; close() stops delivery."""

    def __init__(self, release: Callable[[], None]) -> None:
        self._release = release
        self._lock = RLock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._release()


class ChangeFeed:
    """
    In-process fan-out of table change events to subscribers.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._ids = count(1)
        self._listeners: Dict[str, Dict[int, ChangeCallback]] = {}

    def subscribe(self, table: str, callback: ChangeCallback) -> Subscription:
        with self._lock:
            key = next(self._ids)
            self._listeners.setdefault(table, {})[key] = callback

        def release() -> None:
            with self._lock:
                self._listeners.get(table, {}).pop(key, None)

        return Subscription(release)

    def publish(self, event: ChangeEvent) -> None:
        with self._lock:
            listeners = list(self._listeners.get(event.table, {}).values())
        for callback in listeners:
            try:
                callback(event)
            except Exception:
                logger.exception("Change listener for %s failed", event.table)


# PUBLIC_INTERFACE
class RecordStore(ABC):
    """Abstract contract for the table/collection service holding the records."""

    #: Whether subscribe() delivers change notifications.
    supports_subscriptions: bool = False

    @abstractmethod
    def list(self, table: str, order_by: Optional[OrderBy] = None) -> List[StorageRow]:
        """
        Return every row of `table`.
        - With order_by, rows come back sorted by that column; rows with equal
          values keep store order. Raises OrderingUnsupported when the store
          cannot order by the column.
        - Without order_by, rows come back in store order.
        """

    @abstractmethod
    def insert(self, table: str, row: StorageRow) -> StorageRow:
        """Insert a row and return it including its store-assigned 'id'."""

    @abstractmethod
    def update(self, table: str, record_id: str, fields: StorageRow) -> bool:
        """Set the given columns of a row. Return False if no row has that id."""

    @abstractmethod
    def delete(self, table: str, record_id: str) -> None:
        """Delete a row by id. Deleting an absent id is not an error."""

    def subscribe(self, table: str, callback: ChangeCallback) -> Optional[Subscription]:
        """
        Register `callback` for writes to `table`. Returns None when the store
        does not support change notification.
        """
        return None

    def close(self) -> None:
        """Release connections held by the store."""


def _sort_rows(rows: List[StorageRow], order_by: OrderBy) -> List[StorageRow]:
    # Missing values sort after present ones when descending.
    def key(row: StorageRow):
        value = row.get(order_by.column)
        return (value is not None, value if value is not None else 0)

    return sorted(rows, key=key, reverse=order_by.descending)


class InMemoryRecordStore(RecordStore):
    """
    Thread-safe in-memory store suitable for testing and default runtime.
    """

    supports_subscriptions = True

    def __init__(self) -> None:
        self._lock = RLock()
        self._tables: Dict[str, Dict[str, StorageRow]] = {}
        self._feed = ChangeFeed()

    def _table(self, table: str) -> Dict[str, StorageRow]:
        return self._tables.setdefault(table, {})

    def list(self, table: str, order_by: Optional[OrderBy] = None) -> List[StorageRow]:
        with self._lock:
            rows = [copy.deepcopy(r) for r in self._table(table).values()]
        if order_by is None:
            return rows
        return _sort_rows(rows, order_by)

    def insert(self, table: str, row: StorageRow) -> StorageRow:
        stored = copy.deepcopy(row)
        stored["id"] = uuid.uuid4().hex
        with self._lock:
            self._table(table)[stored["id"]] = stored
        self._feed.publish(ChangeEvent(table, "INSERT", stored["id"]))
        return copy.deepcopy(stored)

    def update(self, table: str, record_id: str, fields: StorageRow) -> bool:
        with self._lock:
            existing = self._table(table).get(record_id)
            if existing is None:
                return False
            changes = {k: copy.deepcopy(v) for k, v in fields.items() if k != "id"}
            existing.update(changes)
        self._feed.publish(ChangeEvent(table, "UPDATE", record_id))
        return True

    def delete(self, table: str, record_id: str) -> None:
        with self._lock:
            removed = self._table(table).pop(record_id, None)
        if removed is not None:
            self._feed.publish(ChangeEvent(table, "DELETE", record_id))

    def subscribe(self, table: str, callback: ChangeCallback) -> Optional[Subscription]:
        return self._feed.subscribe(table, callback)


# PUBLIC_INTERFACE
def get_record_store(settings: Optional[Settings] = None) -> RecordStore:
    """
    Factory to return the configured record store based on settings.
    - memory: InMemoryRecordStore
    - sqlite: SQLiteRecordStore at settings.sqlite_db_path
    - supabase: SupabaseRecordStore (requires SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY)
    """
    settings = settings or get_settings()
    if settings.store_backend == "sqlite":
        from .db import SQLiteRecordStore

        logger.info("Using SQLite store at %s", settings.sqlite_db_path)
        return SQLiteRecordStore(settings.sqlite_db_path, timeout=settings.store_timeout_seconds)
    if settings.store_backend == "supabase":
        if not settings.supabase_url or not settings.supabase_service_key:
            raise StoreConfigurationError(
                "Missing Supabase configuration: set SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY"
            )
        from .supabase import SupabaseRecordStore

        logger.info("Using Supabase store at %s", settings.supabase_url)
        return SupabaseRecordStore(
            settings.supabase_url,
            settings.supabase_service_key,
            timeout=settings.store_timeout_seconds,
        )
    return InMemoryRecordStore()
