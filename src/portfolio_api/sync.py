"""
Cached list views over a resource client.

A DataSubscription holds the current list for one resource together with its
loading and error state, refreshed either on demand (poll-once) or whenever
the store reports a change (live). Every fetch replaces the whole list; only
the result of the most recently started fetch is ever applied.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from threading import RLock
from typing import Any, Callable, Dict, List, Optional

from .errors import ResourceError
from .models import ChangeEvent
from .repositories import Subscription

logger = logging.getLogger(__name__)


class RefreshMode(str, Enum):
    POLL_ONCE = "poll_once"
    LIVE = "live"


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class SubscriptionState:
    """Snapshot of a view: the last applied list, whether a fetch is pending, and the last error."""

    data: List[Dict[str, Any]] = field(default_factory=list)
    loading: bool = True
    error: Optional[ResourceError] = None


# PUBLIC_INTERFACE
class DataSubscription:
    """
    Per-consumer cache of one resource's list.

    `client` is anything with list() and subscribe(callback) (ResourceClient or
    HttpResourceClient). `on_change` is called with each new state while the
    subscription is open; it runs under the subscription's lock and must not block.
    """

    def __init__(
        self,
        client: Any,
        mode: RefreshMode = RefreshMode.POLL_ONCE,
        on_change: Optional[Callable[[SubscriptionState], None]] = None,
    ) -> None:
        self._client = client
        self._mode = RefreshMode(mode)
        self._on_change = on_change
        self._lock = RLock()
        self._state = SubscriptionState()
        self._latest_token = 0
        self._started = False
        self._closed = False
        self._subscription: Optional[Subscription] = None

    @property
    def mode(self) -> RefreshMode:
        return self._mode

    @property
    def state(self) -> SubscriptionState:
        with self._lock:
            return self._state

    @property
    def data(self) -> List[Dict[str, Any]]:
        return self.state.data

    @property
    def loading(self) -> bool:
        return self.state.loading

    @property
    def error(self) -> Optional[ResourceError]:
        return self.state.error

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def live(self) -> bool:
        """True while a store change subscription is active."""
        return self._subscription is not None and not self._subscription.closed

    def start(self) -> SubscriptionState:
        """Load the list the first time; later calls are no-ops."""
        with self._lock:
            if self._started or self._closed:
                return self._state
            self._started = True

        if self._mode is RefreshMode.LIVE:
            try:
                subscription = self._client.subscribe(self._handle_change)
            except ResourceError as e:
                logger.warning("Live updates unavailable, fetching once: %s", e)
                subscription = None
            if subscription is None:
                logger.info("Store has no change notifications; live view will not auto-refresh")
            else:
                with self._lock:
                    if self._closed:
                        subscription.close()
                    else:
                        self._subscription = subscription
        return self.refetch()

    def refetch(self) -> SubscriptionState:
        """
        Fetch the list again and return the resulting state.

        Never raises: failures land in `error`. A result is dropped when a
        newer fetch was started meanwhile or the subscription was closed.
        """
        with self._lock:
            if self._closed:
                return self._state
            self._latest_token += 1
            token = self._latest_token
            self._apply(token, SubscriptionState(data=self._state.data, loading=True, error=None))

        try:
            result = SubscriptionState(data=list(self._client.list()), loading=False)
        except ResourceError as e:
            logger.error("Error fetching data: %s", e)
            with self._lock:
                result = SubscriptionState(data=self._state.data, loading=False, error=e)

        with self._lock:
            if not self._apply(token, result):
                logger.debug("Discarding stale fetch %d (latest is %d)", token, self._latest_token)
            return self._state

    def _apply(self, token: int, state: SubscriptionState) -> bool:
        with self._lock:
            if self._closed or token != self._latest_token:
                return False
            self._state = state
            if self._on_change is not None:
                self._on_change(state)
            return True

    def _handle_change(self, event: ChangeEvent) -> None:
        if self._closed:
            return
        logger.debug("%s %s on %s, refreshing", event.kind, event.record_id, event.table)
        self.refetch()

    def close(self) -> None:
        """Release the store subscription; no callbacks are delivered afterwards."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            subscription, self._subscription = self._subscription, None
        if subscription is not None:
            subscription.close()

    def __enter__(self) -> "DataSubscription":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
