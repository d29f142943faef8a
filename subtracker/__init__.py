"""Core utilities for the subscription tracker service."""

from __future__ import annotations

from typing import Any

from .database import Database, resolve_database_path
from .errors import ConstraintError, NotFoundError, StoreError, SubscriptionError, ValidationError
from .manager import SubscriptionManager
from .models import CostFilter, Subscription
from .store import InMemoryStore, SubscriptionStore


def create_app(*args: Any, **kwargs: Any):
    """Factory function that returns the HTTP API application."""

    from .service import create_app as _create_app

    return _create_app(*args, **kwargs)


__all__ = [
    "ConstraintError",
    "CostFilter",
    "Database",
    "InMemoryStore",
    "NotFoundError",
    "StoreError",
    "Subscription",
    "SubscriptionError",
    "SubscriptionManager",
    "SubscriptionStore",
    "ValidationError",
    "create_app",
    "resolve_database_path",
]
