"""
Error taxonomy shared by the stores, the resource clients and the HTTP layer.

Every failure that reaches a caller of a resource client is one of the
ResourceError subclasses below; each carries the HTTP status the API answers
with. OrderingUnsupported is an internal signal between a store and the
resource client and never reaches callers.
"""
from __future__ import annotations


class ResourceError(Exception):
    """Base class for failures surfaced by resource operations."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


# PUBLIC_INTERFACE
class ValidationError(ResourceError):
    """A required field is missing or malformed, or the store rejected a write."""

    status_code = 400


# PUBLIC_INTERFACE
class Unauthorized(ResourceError):
    """The shared secret was missing or incorrect."""

    status_code = 401


# PUBLIC_INTERFACE
class NotFound(ResourceError):
    """No record exists with the requested id."""

    status_code = 404


# PUBLIC_INTERFACE
class StoreUnavailable(ResourceError):
    """The record store could not be reached, authenticated against, or failed."""

    status_code = 500


class OrderingUnsupported(Exception):
    """Raised by a store that cannot order a scan by the requested column."""


class StoreConfigurationError(RuntimeError):
    """The selected store backend is missing required configuration."""
