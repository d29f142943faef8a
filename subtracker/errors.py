"""Error kinds raised by the subscription manager and its stores."""
from __future__ import annotations


class SubscriptionError(Exception):
    """Base class for every failure surfaced by the subscription subsystem."""

    kind = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(SubscriptionError):
    """Caller supplied input that breaks a business rule."""

    kind = "validation"


class NotFoundError(SubscriptionError):
    """The referenced subscription does not exist."""

    kind = "not_found"


class StoreError(SubscriptionError):
    """The backing store is unreachable or rejected the query."""

    kind = "store"


class ConstraintError(StoreError):
    """A row violated a constraint of the backing store (e.g. duplicate id)."""

    kind = "constraint"


__all__ = [
    "ConstraintError",
    "NotFoundError",
    "StoreError",
    "SubscriptionError",
    "ValidationError",
]
