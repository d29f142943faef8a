"""Storage contract for subscriptions and an in-memory implementation."""

from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date, datetime
from typing import Dict, List, Optional, Protocol

from .errors import ConstraintError, NotFoundError
from .models import CostFilter, Subscription


class SubscriptionStore(Protocol):
    """Persistence operations the manager relies on.

    Every operation is a single, independent round trip to the backing store.
    """

    def initialize(self) -> None: ...

    def insert(self, subscription: Subscription) -> None: ...

    def find_by_id(self, subscription_id: str) -> Subscription: ...

    def update(
        self,
        subscription_id: str,
        *,
        service_name: str,
        price: int,
        user_id: str,
        start_date: date,
        end_date: Optional[date],
        updated_at: datetime,
    ) -> None: ...

    def delete(self, subscription_id: str) -> None: ...

    def list(self) -> List[Subscription]: ...

    def sum_by_filter(self, cost_filter: CostFilter) -> int: ...


class InMemoryStore:
    """Dictionary-backed store used for tests and throwaway instances."""

    def __init__(self) -> None:
        self._records: Dict[str, Subscription] = {}
        self._lock = threading.Lock()

    def initialize(self) -> None:
        return None

    def insert(self, subscription: Subscription) -> None:
        with self._lock:
            if subscription.id in self._records:
                raise ConstraintError(f"Subscription {subscription.id} already exists")
            self._records[subscription.id] = subscription

    def find_by_id(self, subscription_id: str) -> Subscription:
        with self._lock:
            record = self._records.get(subscription_id)
        if record is None:
            raise NotFoundError(f"Subscription {subscription_id} not found")
        return record

    def update(
        self,
        subscription_id: str,
        *,
        service_name: str,
        price: int,
        user_id: str,
        start_date: date,
        end_date: Optional[date],
        updated_at: datetime,
    ) -> None:
        with self._lock:
            current = self._records.get(subscription_id)
            if current is None:
                raise NotFoundError(f"Subscription {subscription_id} not found")
            self._records[subscription_id] = replace(
                current,
                service_name=service_name,
                price=price,
                user_id=user_id,
                start_date=start_date,
                end_date=end_date,
                updated_at=updated_at,
            )

    def delete(self, subscription_id: str) -> None:
        with self._lock:
            if self._records.pop(subscription_id, None) is None:
                raise NotFoundError(f"Subscription {subscription_id} not found")

    def list(self) -> List[Subscription]:
        with self._lock:
            return list(self._records.values())

    def sum_by_filter(self, cost_filter: CostFilter) -> int:
        with self._lock:
            records = list(self._records.values())
        return sum(record.price for record in records if cost_filter.matches(record))


__all__ = ["InMemoryStore", "SubscriptionStore"]
