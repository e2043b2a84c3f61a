"""
Supabase record store.

Talks to the project's PostgREST endpoint (<url>/rest/v1/<table>) with the
service-role key. Realtime channels are not used: subscribe() is unsupported,
so live views over this store fall back to a single fetch.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from .errors import OrderingUnsupported, StoreUnavailable, ValidationError
from .models import StorageRow
from .repositories import OrderBy, RecordStore

logger = logging.getLogger(__name__)

# PostgreSQL "undefined_column"
_UNDEFINED_COLUMN = "42703"


class SupabaseRecordStore(RecordStore):
    """RecordStore backed by a Supabase table through its REST interface."""

    def __init__(
        self,
        url: str,
        service_key: str,
        timeout: float = 15.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._base_url = f"{url.rstrip('/')}/rest/v1"
        self._timeout = timeout
        self._session = session or requests.Session()
        self._headers = {
            "apikey": service_key,
            "Authorization": f"Bearer {service_key}",
            "Content-Type": "application/json",
        }

    def _request(
        self,
        method: str,
        table: str,
        params: Optional[Dict[str, str]] = None,
        json: Any = None,
        prefer: Optional[str] = None,
    ) -> requests.Response:
        headers = dict(self._headers)
        if prefer:
            headers["Prefer"] = prefer
        try:
            resp = self._session.request(
                method,
                f"{self._base_url}/{table}",
                params=params,
                json=json,
                headers=headers,
                timeout=self._timeout,
            )
        except requests.Timeout as e:
            raise StoreUnavailable(f"Supabase request timed out after {self._timeout}s") from e
        except requests.RequestException as e:
            raise StoreUnavailable(f"Supabase unreachable: {e}") from e

        if resp.status_code in (401, 403):
            raise StoreUnavailable("Supabase rejected the service credentials")
        if resp.status_code >= 500:
            raise StoreUnavailable(f"Supabase error {resp.status_code}: {_error_message(resp)}")
        return resp

    def list(self, table: str, order_by: Optional[OrderBy] = None) -> List[StorageRow]:
        params = {"select": "*"}
        if order_by is not None:
            direction = "desc" if order_by.descending else "asc"
            params["order"] = f"{order_by.column}.{direction}.nullslast"
        resp = self._request("GET", table, params=params)
        if resp.status_code >= 400:
            if order_by is not None and _error_code(resp) in (_UNDEFINED_COLUMN, "PGRST100"):
                raise OrderingUnsupported(_error_message(resp))
            raise StoreUnavailable(f"Supabase query failed: {_error_message(resp)}")
        return resp.json() or []

    def insert(self, table: str, row: StorageRow) -> StorageRow:
        payload = {k: v for k, v in row.items() if k != "id"}
        resp = self._request("POST", table, json=payload, prefer="return=representation")
        if resp.status_code >= 400:
            raise ValidationError(f"Insert rejected: {_error_message(resp)}")
        created = resp.json()
        if isinstance(created, list):
            if not created:
                raise StoreUnavailable("Supabase returned no row for insert")
            created = created[0]
        return created

    def update(self, table: str, record_id: str, fields: StorageRow) -> bool:
        params = {"id": f"eq.{record_id}"}
        payload = {k: v for k, v in fields.items() if k != "id"}
        if not payload:
            resp = self._request("GET", table, params={**params, "select": "id"})
        else:
            resp = self._request(
                "PATCH", table, params=params, json=payload, prefer="return=representation"
            )
        if resp.status_code >= 400:
            raise ValidationError(f"Update rejected: {_error_message(resp)}")
        return bool(resp.json())

    def delete(self, table: str, record_id: str) -> None:
        resp = self._request("DELETE", table, params={"id": f"eq.{record_id}"})
        if resp.status_code >= 400:
            raise ValidationError(f"Delete rejected: {_error_message(resp)}")

    def close(self) -> None:
        self._session.close()


def _error_body(resp: requests.Response) -> Dict[str, Any]:
    try:
        body = resp.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def _error_code(resp: requests.Response) -> Optional[str]:
    return _error_body(resp).get("code")


def _error_message(resp: requests.Response) -> str:
    return _error_body(resp).get("message") or resp.text or f"HTTP {resp.status_code}"
