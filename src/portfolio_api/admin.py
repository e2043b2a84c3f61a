"""
Single-operator admin session.

The session is a coarse lock: one shared password unlocks create/update/
delete for every resource. It does not protect the write calls themselves;
an HttpResourceClient still has to present the secret to the API.
"""
from __future__ import annotations

import copy
import logging
from typing import Any, Dict, List, Mapping, Optional

from .errors import NotFound, ResourceError, Unauthorized, ValidationError
from .resources import RESOURCES, Record, ResourceSpec
from .sync import DataSubscription, RefreshMode

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class AdminSession:
    """
    Admin mutation controller over a set of resource clients.

    Every successful mutation reloads the affected resource's view in full;
    a failed one is logged, re-raised, and leaves the view untouched.
    """

    def __init__(self, clients: Mapping[str, Any], admin_password: Optional[str]) -> None:
        self._clients = dict(clients)
        self._admin_password = admin_password
        self._views: Dict[str, DataSubscription] = {}
        self._unlocked = False

    @property
    def is_unlocked(self) -> bool:
        return self._unlocked

    def unlock(self, password: str) -> bool:
        """Compare `password` with the configured secret and load every view on success."""
        if not self._admin_password or password != self._admin_password:
            logger.warning("Admin unlock rejected")
            return False
        if not self._unlocked:
            self._unlocked = True
            for name, client in self._clients.items():
                view = DataSubscription(client, mode=RefreshMode.POLL_ONCE)
                self._views[name] = view
                view.start()
        return True

    def lock(self) -> None:
        self._unlocked = False
        for view in self._views.values():
            view.close()
        self._views.clear()

    close = lock

    def _require(self, resource: str) -> Any:
        if not self._unlocked:
            raise Unauthorized("Admin session is locked")
        client = self._clients.get(resource)
        if client is None:
            raise ValidationError(f"Unknown resource: {resource}")
        return client

    def _spec(self, resource: str, client: Any) -> ResourceSpec:
        return getattr(client, "spec", None) or RESOURCES[resource]

    def view(self, resource: str) -> DataSubscription:
        self._require(resource)
        return self._views[resource]

    def items(self, resource: str) -> List[Record]:
        return self.view(resource).data

    def create(self, resource: str, record: Mapping[str, Any]) -> Record:
        client = self._require(resource)
        self._spec(resource, client).validate_create(record)
        try:
            created = client.create(record)
        except ResourceError as e:
            logger.error("Error adding %s item: %s", resource, e)
            raise
        self._views[resource].refetch()
        return created

    def update(self, resource: str, record_id: str, changes: Mapping[str, Any]) -> None:
        client = self._require(resource)
        self._spec(resource, client).validate_update(record_id, changes)
        try:
            client.update(record_id, changes)
        except ResourceError as e:
            logger.error("Error updating %s item %s: %s", resource, record_id, e)
            raise
        self._views[resource].refetch()

    def delete(self, resource: str, record_id: str) -> None:
        client = self._require(resource)
        try:
            client.delete(record_id)
        except ResourceError as e:
            logger.error("Error deleting %s item %s: %s", resource, record_id, e)
            raise
        self._views[resource].refetch()

    def edit(self, resource: str, record_id: str) -> "EditBuffer":
        """Start a local edit of a loaded record; nothing is sent until EditBuffer.save()."""
        for record in self.items(resource):
            if record["id"] == record_id:
                return EditBuffer(self, resource, record)
        raise NotFound(f"{resource} {record_id} is not loaded")


class EditBuffer:
    """
    Local draft of one record. Edits stay in the buffer until save(), which
    sends only the fields that differ from the original.
    """

    def __init__(self, session: AdminSession, resource: str, record: Mapping[str, Any]) -> None:
        self._session = session
        self.resource = resource
        self.record_id = record["id"]
        self._original = copy.deepcopy(dict(record))
        self.draft: Record = copy.deepcopy(dict(record))

    def set(self, name: str, value: Any) -> None:
        if name == "id":
            raise ValidationError("id cannot be edited")
        self.draft[name] = value

    def set_markdown(self, text: str) -> None:
        self.set("markdownContent", text)

    def add_stack_item(self, name: str) -> bool:
        """Append a technology to the draft stack; blank names are ignored."""
        name = name.strip()
        if not name:
            return False
        self.draft["stack"] = [*(self.draft.get("stack") or []), name]
        return True

    def remove_stack_item(self, index: int) -> None:
        stack = list(self.draft.get("stack") or [])
        if not 0 <= index < len(stack):
            raise IndexError(f"stack has no item {index}")
        del stack[index]
        self.draft["stack"] = stack

    def changes(self) -> Record:
        return {
            k: v for k, v in self.draft.items()
            if k != "id" and self._original.get(k) != v
        }

    @property
    def dirty(self) -> bool:
        return bool(self.changes())

    def save(self) -> bool:
        """Send the changed fields; returns False when there was nothing to save."""
        changes = self.changes()
        if not changes:
            return False
        self._session.update(self.resource, self.record_id, changes)
        self._original = copy.deepcopy(self.draft)
        return True

    def discard(self) -> None:
        self.draft = copy.deepcopy(self._original)
