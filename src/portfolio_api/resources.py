"""
Resource clients for the three record kinds.

A ResourceSpec declares how one record kind looks at the API boundary
(display field names, required fields, defaults, sort key) and how those
names map onto storage columns. ResourceClient drives the list/create/update/
delete calls against a RecordStore using that spec, so the three kinds share
one code path.
"""
from __future__ import annotations

import logging
import re
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Dict, Generator, Iterable, List, Mapping, Optional, Tuple

from .errors import NotFound, OrderingUnsupported, ResourceError, StoreUnavailable, ValidationError
from .models import StorageRow
from .repositories import ChangeCallback, OrderBy, RecordStore, Subscription

logger = logging.getLogger(__name__)

Record = Dict[str, Any]

DEFAULT_TIMELINE_COLOR = "bg-emerald-500"

_ISO_DATE = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")


@dataclass(frozen=True)
class ResourceSpec:
    """
    Declarative description of one record kind.

    - name: key used by clients and the admin session ('timeline', 'career', 'posts')
    - table: storage table/collection name
    - route: path segment under /api
    - fields: display field names, excluding 'id'
    - storage_names: display -> storage renames; unlisted fields keep their name
    - required: fields that must be present and non-blank on create
    - defaults: factories for fields that are absent or blank
    - optional: nullable fields that null or "" clears
    - date_fields: fields holding ISO calendar dates, stored as YYYY-MM-DD
    - field_types: int or list (of str) for fields with a non-text type
    - sort_field / sort_missing: display field ordering the list (descending)
      and the value used when a record lacks it
    """

    name: str
    table: str
    route: str
    fields: Tuple[str, ...]
    sort_field: str
    sort_missing: Any
    storage_names: Mapping[str, str] = field(default_factory=dict)
    required: Tuple[str, ...] = ()
    defaults: Mapping[str, Callable[[], Any]] = field(default_factory=dict)
    optional: Tuple[str, ...] = ()
    date_fields: Tuple[str, ...] = ()
    field_types: Mapping[str, type] = field(default_factory=dict)

    def storage_name(self, display_name: str) -> str:
        return self.storage_names.get(display_name, display_name)

    def recognized(self, record: Mapping[str, Any]) -> Record:
        """Return the recognized display fields present in `record`."""
        return {k: record[k] for k in self.fields if k in record}

    def to_storage(self, record: Mapping[str, Any]) -> StorageRow:
        return {self.storage_name(k): v for k, v in self.recognized(record).items()}

    def from_storage(self, row: Mapping[str, Any]) -> Record:
        out: Record = {"id": str(row["id"])}
        for name in self.fields:
            out[name] = row.get(self.storage_name(name))
        return self.with_defaults(out)

    def with_defaults(self, record: Mapping[str, Any]) -> Record:
        out = dict(record)
        for name, factory in self.defaults.items():
            if out.get(name) in (None, ""):
                out[name] = factory()
        for name in self.optional:
            if out.get(name) == "":
                out[name] = None
            else:
                out.setdefault(name, None)
        return out

    def _clean_value(self, name: str, value: Any) -> Any:
        """Check one submitted value; return it with date fields normalized to YYYY-MM-DD."""
        if name in self.required and (value is None or (isinstance(value, str) and not value.strip())):
            raise ValidationError(f"{name} is required")
        if value is None:
            return value
        if name in self.date_fields:
            return _iso_date(name, value)
        expected = self.field_types.get(name)
        if expected is int and (isinstance(value, bool) or not isinstance(value, int)):
            raise ValidationError(f"{name} must be an integer, got {value!r}")
        if expected is list and (
            not isinstance(value, list) or not all(isinstance(item, str) for item in value)
        ):
            raise ValidationError(f"{name} must be a list of strings, got {value!r}")
        return value

    # PUBLIC_INTERFACE
    def validate_create(self, record: Mapping[str, Any]) -> Record:
        """
        Check a record submitted for creation and return its recognized fields.

        Raises:
            ValidationError if a required field is missing or blank, a date
            field is not a YYYY-MM-DD calendar date, or a typed field holds
            the wrong type.
        """
        fields = self.recognized(record)
        for name in self.required:
            self._clean_value(name, fields.get(name))
        return {name: self._clean_value(name, value) for name, value in fields.items()}

    # PUBLIC_INTERFACE
    def validate_update(self, record_id: str, changes: Mapping[str, Any]) -> Record:
        """
        Check an update payload and return the recognized fields it carries.

        Raises:
            ValidationError if the id is blank, no recognized field is present,
            or a present field fails the create-time checks.
        """
        if not record_id or not str(record_id).strip():
            raise ValidationError("id is required")
        fields = self.recognized(changes)
        if not fields:
            raise ValidationError(f"No updatable fields supplied; expected any of: {', '.join(self.fields)}")
        fields = {name: self._clean_value(name, value) for name, value in fields.items()}
        for name in self.optional:
            if fields.get(name, None) == "":
                fields[name] = None
        for name, factory in self.defaults.items():
            if name in fields and fields[name] is None:
                fields[name] = factory()
        return fields

    def sort(self, records: Iterable[Record]) -> List[Record]:
        """Stable descending sort by the sort field."""
        def key(record: Record) -> Any:
            value = record.get(self.sort_field)
            return self.sort_missing if value is None else value

        return sorted(records, key=key, reverse=True)


TIMELINE = ResourceSpec(
    name="timeline",
    table="timeline",
    route="timeline",
    fields=("dateValue", "title", "content", "tag", "color", "markdownContent"),
    storage_names={"dateValue": "date_value", "markdownContent": "markdown_content"},
    required=("dateValue",),
    defaults={
        "title": str,
        "content": str,
        "tag": str,
        "color": lambda: DEFAULT_TIMELINE_COLOR,
    },
    optional=("markdownContent",),
    date_fields=("dateValue",),
    sort_field="dateValue",
    sort_missing="1900-01-01",
)

CAREER = ResourceSpec(
    name="career",
    table="career",
    route="career",
    fields=("role", "company", "period", "description", "stack", "order"),
    required=("role", "company", "period"),
    defaults={"description": str, "stack": list, "order": int},
    field_types={"stack": list, "order": int},
    sort_field="order",
    sort_missing=0,
)

POSTS = ResourceSpec(
    name="posts",
    table="shitposts",
    route="shitposts",
    fields=("content", "likes", "date", "subtext", "order"),
    required=("content", "date"),
    defaults={"likes": lambda: "0", "order": int},
    field_types={"order": int},
    optional=("subtext",),
    sort_field="order",
    sort_missing=0,
)

RESOURCES: Dict[str, ResourceSpec] = {spec.name: spec for spec in (TIMELINE, CAREER, POSTS)}


def _iso_date(name: str, value: Any) -> str:
    text = str(value).strip()
    if not _ISO_DATE.match(text):
        raise ValidationError(f"{name} must be an ISO calendar date (e.g. '2024-01-31'), got {value!r}")
    try:
        return date.fromisoformat(text).isoformat()
    except ValueError as e:
        raise ValidationError(f"{name} is not a valid calendar date: {value!r}") from e


@contextmanager
def _store_errors(spec: ResourceSpec, action: str) -> Generator[None, None, None]:
    """Re-signal anything but a ResourceError raised by the store as StoreUnavailable."""
    try:
        yield
    except ResourceError:
        raise
    except Exception as e:
        logger.error("Store failure while trying to %s %s: %s", action, spec.name, e)
        raise StoreUnavailable(f"Failed to {action} {spec.name}: {e}") from e


# PUBLIC_INTERFACE
class ResourceClient:
    """
    CRUD client for one record kind over a RecordStore.

    Records crossing this boundary use display field names; the store only
    ever sees storage names.
    """

    def __init__(self, spec: ResourceSpec, store: RecordStore) -> None:
        self.spec = spec
        self._store = store

    def list(self) -> List[Record]:
        """
        Return every record ordered by its kind's sort field, newest/highest first.

        When the store cannot order the scan, the unordered rows are fetched
        and sorted here instead.
        """
        order_by = OrderBy(self.spec.storage_name(self.spec.sort_field), descending=True)
        with _store_errors(self.spec, "fetch"):
            try:
                rows = self._store.list(self.spec.table, order_by=order_by)
                ordered = True
            except OrderingUnsupported as e:
                logger.warning("Ordered scan of %s failed, sorting client-side: %s", self.spec.table, e)
                rows = self._store.list(self.spec.table)
                ordered = False
        records = [self.spec.from_storage(row) for row in rows]
        return records if ordered else self.spec.sort(records)

    def get(self, record_id: str) -> Record:
        for record in self.list():
            if record["id"] == record_id:
                return record
        raise NotFound(f"{self.spec.name} {record_id} not found")

    def create(self, record: Mapping[str, Any]) -> Record:
        """Validate, apply defaults and insert; return the record with its new id."""
        fields = self.spec.with_defaults(self.spec.validate_create(record))
        with _store_errors(self.spec, "create"):
            row = self._store.insert(self.spec.table, self.spec.to_storage(fields))
        created = {**fields, "id": str(row["id"])}
        logger.info("Created %s %s", self.spec.name, created["id"])
        return created

    def update(self, record_id: str, changes: Mapping[str, Any]) -> None:
        """Apply only the fields present in `changes`. Raises NotFound for an unknown id."""
        fields = self.spec.validate_update(record_id, changes)
        with _store_errors(self.spec, "update"):
            found = self._store.update(self.spec.table, record_id, self.spec.to_storage(fields))
        if not found:
            raise NotFound(f"{self.spec.name} {record_id} not found")
        logger.info("Updated %s %s: %s", self.spec.name, record_id, ", ".join(sorted(fields)))

    def delete(self, record_id: str) -> None:
        if not record_id or not str(record_id).strip():
            raise ValidationError("id is required")
        with _store_errors(self.spec, "delete"):
            self._store.delete(self.spec.table, record_id)
        logger.info("Deleted %s %s", self.spec.name, record_id)

    def subscribe(self, callback: ChangeCallback) -> Optional[Subscription]:
        """Subscribe to store changes for this kind, or None if the store has no notifications."""
        if not self._store.supports_subscriptions:
            return None
        with _store_errors(self.spec, "subscribe to"):
            return self._store.subscribe(self.spec.table, callback)


# PUBLIC_INTERFACE
def build_clients(store: RecordStore) -> Dict[str, ResourceClient]:
    """Return one ResourceClient per record kind, keyed by resource name."""
    return {name: ResourceClient(spec, store) for name, spec in RESOURCES.items()}
