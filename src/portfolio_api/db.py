from __future__ import annotations

import json
import logging
import os
import sqlite3
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Generator, List, Optional, Tuple

from .errors import OrderingUnsupported, StoreUnavailable, ValidationError
from .models import ChangeEvent, StorageRow
from .repositories import ChangeCallback, ChangeFeed, OrderBy, RecordStore, Subscription

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Column:
    name: str
    sql_type: str
    json: bool = False


@dataclass(frozen=True)
class _Table:
    name: str
    columns: Tuple[_Column, ...]

    @property
    def column_names(self) -> Tuple[str, ...]:
        return tuple(c.name for c in self.columns)


_TABLES: Dict[str, _Table] = {
    t.name: t
    for t in (
        _Table(
            "timeline",
            (
                _Column("date_value", "TEXT NOT NULL"),
                _Column("title", "TEXT"),
                _Column("content", "TEXT"),
                _Column("tag", "TEXT"),
                _Column("color", "TEXT"),
                _Column("markdown_content", "TEXT"),
            ),
        ),
        _Table(
            "career",
            (
                _Column("role", "TEXT NOT NULL"),
                _Column("company", "TEXT NOT NULL"),
                _Column("period", "TEXT NOT NULL"),
                _Column("description", "TEXT"),
                _Column("stack", "TEXT NOT NULL DEFAULT '[]'", json=True),
                _Column("order", "INTEGER NOT NULL DEFAULT 0"),
            ),
        ),
        _Table(
            "shitposts",
            (
                _Column("content", "TEXT NOT NULL"),
                _Column("likes", "TEXT"),
                _Column("date", "TEXT NOT NULL"),
                _Column("subtext", "TEXT"),
                _Column("order", "INTEGER NOT NULL DEFAULT 0"),
            ),
        ),
    )
}


def _q(identifier: str) -> str:
    # "order" and "date" are keywords; quote every identifier.
    return '"' + identifier.replace('"', '""') + '"'


class SQLiteRecordStore(RecordStore):
    """
    Lightweight SQLite store implementing the RecordStore interface.

    Change notifications cover writes made through this instance.
    """

    supports_subscriptions = True

    def __init__(self, db_path: str, timeout: float = 15.0) -> None:
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        self._db_path = db_path
        self._timeout = timeout
        self._feed = ChangeFeed()
        self._init_db()

    @contextmanager
    def _conn(self) -> Generator[sqlite3.Connection, None, None]:
        try:
            conn = sqlite3.connect(self._db_path, timeout=self._timeout)
        except sqlite3.Error as e:
            raise StoreUnavailable(f"Cannot open database {self._db_path}: {e}") from e
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except sqlite3.IntegrityError as e:
            conn.rollback()
            raise ValidationError(f"Write rejected by store: {e}") from e
        except sqlite3.Error as e:
            conn.rollback()
            raise StoreUnavailable(f"Database error: {e}") from e
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self._conn() as conn:
            for table in _TABLES.values():
                columns = ", ".join(f"{_q(c.name)} {c.sql_type}" for c in table.columns)
                conn.execute(
                    f"CREATE TABLE IF NOT EXISTS {_q(table.name)} ("
                    f"{_q('id')} TEXT PRIMARY KEY, {columns})"
                )

    def _table(self, name: str) -> _Table:
        table = _TABLES.get(name)
        if table is None:
            raise ValidationError(f"Unknown table: {name}")
        return table

    def _encode(self, table: _Table, row: StorageRow) -> StorageRow:
        known = set(table.column_names)
        unknown = sorted(k for k in row if k not in known and k != "id")
        if unknown:
            raise ValidationError(f"Unknown columns for {table.name}: {', '.join(unknown)}")
        json_cols = {c.name for c in table.columns if c.json}
        return {
            k: json.dumps(v) if k in json_cols and v is not None else v
            for k, v in row.items()
            if k != "id"
        }

    def _row_to_dict(self, table: _Table, row: sqlite3.Row) -> StorageRow:
        out: StorageRow = {"id": row["id"]}
        for col in table.columns:
            value = row[col.name]
            if col.json and value is not None:
                value = json.loads(value)
            out[col.name] = value
        return out

    def list(self, table: str, order_by: Optional[OrderBy] = None) -> List[StorageRow]:
        t = self._table(table)
        order_sql = "ORDER BY rowid ASC"
        if order_by is not None:
            if order_by.column not in t.column_names:
                raise OrderingUnsupported(f"{table} has no column {order_by.column}")
            direction = "DESC" if order_by.descending else "ASC"
            order_sql = f"ORDER BY {_q(order_by.column)} IS NULL, {_q(order_by.column)} {direction}, rowid ASC"
        with self._conn() as conn:
            rows = conn.execute(f"SELECT * FROM {_q(t.name)} {order_sql}").fetchall()
            return [self._row_to_dict(t, r) for r in rows]

    def insert(self, table: str, row: StorageRow) -> StorageRow:
        t = self._table(table)
        values = self._encode(t, row)
        values["id"] = uuid.uuid4().hex
        cols = list(values)
        with self._conn() as conn:
            conn.execute(
                f"INSERT INTO {_q(t.name)} ({', '.join(_q(c) for c in cols)}) "
                f"VALUES ({', '.join('?' for _ in cols)})",
                [values[c] for c in cols],
            )
            created = conn.execute(
                f"SELECT * FROM {_q(t.name)} WHERE {_q('id')} = ?", (values["id"],)
            ).fetchone()
            assert created is not None
            result = self._row_to_dict(t, created)
        self._feed.publish(ChangeEvent(t.name, "INSERT", result["id"]))
        return result

    def update(self, table: str, record_id: str, fields: StorageRow) -> bool:
        t = self._table(table)
        values = self._encode(t, fields)
        with self._conn() as conn:
            if values:
                cur = conn.execute(
                    f"UPDATE {_q(t.name)} SET {', '.join(f'{_q(c)} = ?' for c in values)} "
                    f"WHERE {_q('id')} = ?",
                    [*values.values(), record_id],
                )
                found = cur.rowcount > 0
            else:
                found = conn.execute(
                    f"SELECT 1 FROM {_q(t.name)} WHERE {_q('id')} = ?", (record_id,)
                ).fetchone() is not None
        if found and values:
            self._feed.publish(ChangeEvent(t.name, "UPDATE", record_id))
        return found

    def delete(self, table: str, record_id: str) -> None:
        t = self._table(table)
        with self._conn() as conn:
            cur = conn.execute(f"DELETE FROM {_q(t.name)} WHERE {_q('id')} = ?", (record_id,))
            removed = cur.rowcount > 0
        if removed:
            self._feed.publish(ChangeEvent(t.name, "DELETE", record_id))

    def subscribe(self, table: str, callback: ChangeCallback) -> Optional[Subscription]:
        self._table(table)
        return self._feed.subscribe(table, callback)
