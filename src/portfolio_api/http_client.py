"""
Resource client speaking the public REST surface.

HttpResourceClient has the same list/create/update/delete surface as
ResourceClient, so an AdminSession or DataSubscription can run against a
deployed API instead of a local store. Write calls carry the shared secret as
a bearer token; the server is the authority on it.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

import requests

from .errors import NotFound, StoreUnavailable, Unauthorized, ValidationError
from .repositories import ChangeCallback, Subscription
from .resources import RESOURCES, Record, ResourceSpec

logger = logging.getLogger(__name__)


class HttpResourceClient:
    """
    Client for one resource of a running Portfolio API.
    """

    def __init__(
        self,
        spec: ResourceSpec,
        base_url: str,
        admin_token: Optional[str] = None,
        timeout: float = 15.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.spec = spec
        self._url = f"{base_url.rstrip('/')}/{spec.route}"
        self._admin_token = admin_token
        self._timeout = timeout
        self._session = session or requests.Session()

    def _auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self._admin_token}"} if self._admin_token else {}

    def _request(self, method: str, url: str, json: Any = None, auth: bool = False) -> Any:
        try:
            resp = self._session.request(
                method,
                url,
                json=json,
                headers=self._auth_headers() if auth else {},
                timeout=self._timeout,
            )
        except requests.Timeout as e:
            raise StoreUnavailable(f"{method} {url} timed out after {self._timeout}s") from e
        except requests.RequestException as e:
            raise StoreUnavailable(f"{method} {url} failed: {e}") from e

        if resp.status_code < 300:
            return resp.json() if resp.content else None

        message = _error_message(resp)
        if resp.status_code == 401:
            raise Unauthorized(message)
        if resp.status_code == 404:
            raise NotFound(message)
        if resp.status_code in (400, 422):
            raise ValidationError(message)
        raise StoreUnavailable(message)

    def list(self) -> List[Record]:
        return self._request("GET", self._url) or []

    def get(self, record_id: str) -> Record:
        for record in self.list():
            if record["id"] == record_id:
                return record
        raise NotFound(f"{self.spec.name} {record_id} not found")

    def create(self, record: Mapping[str, Any]) -> Record:
        fields = self.spec.validate_create(record)
        return self._request("POST", self._url, json=fields, auth=True)

    def update(self, record_id: str, changes: Mapping[str, Any]) -> None:
        fields = self.spec.validate_update(record_id, changes)
        self._request("PUT", f"{self._url}/{record_id}", json=fields, auth=True)

    def delete(self, record_id: str) -> None:
        if not record_id or not str(record_id).strip():
            raise ValidationError("id is required")
        self._request("DELETE", f"{self._url}/{record_id}", auth=True)

    def subscribe(self, callback: ChangeCallback) -> Optional[Subscription]:
        # The REST surface has no change feed.
        return None


# PUBLIC_INTERFACE
def build_http_clients(
    base_url: str,
    admin_token: Optional[str] = None,
    timeout: float = 15.0,
) -> Dict[str, HttpResourceClient]:
    """Return one HttpResourceClient per resource sharing a single HTTP session."""
    session = requests.Session()
    return {
        name: HttpResourceClient(spec, base_url, admin_token=admin_token, timeout=timeout, session=session)
        for name, spec in RESOURCES.items()
    }


def _error_message(resp: requests.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return f"HTTP error! status: {resp.status_code}"
