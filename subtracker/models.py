"""Domain models for tracked subscriptions."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional

from .periods import format_month


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Subscription:
    """One user's subscription to a named service over a range of months."""

    id: str
    service_name: str
    price: int
    user_id: str
    start_date: date
    end_date: Optional[date]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def new(
        cls,
        id: str,
        service_name: str,
        price: int,
        user_id: str,
        start_date: date,
        end_date: Optional[date] = None,
    ) -> "Subscription":
        """Build a fresh record with both timestamps set to the current time."""

        now = utcnow()
        return cls(
            id=id,
            service_name=service_name,
            price=price,
            user_id=user_id,
            start_date=start_date,
            end_date=end_date,
            created_at=now,
            updated_at=now,
        )

    def as_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "service_name": self.service_name,
            "price": self.price,
            "user_id": self.user_id,
            "start_date": format_month(self.start_date),
            "end_date": format_month(self.end_date) if self.end_date is not None else None,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


@dataclass(frozen=True)
class CostFilter:
    """Optional constraints applied when summing subscription prices.

    ``None`` means the constraint is not applied at all. Date bounds are
    inclusive and compare against each record's start date.
    """

    user_id: Optional[str] = None
    service_name: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    def matches(self, subscription: Subscription) -> bool:
        if self.user_id is not None and subscription.user_id != self.user_id:
            return False
        if self.service_name is not None and subscription.service_name != self.service_name:
            return False
        if self.start_date is not None and subscription.start_date < self.start_date:
            return False
        if self.end_date is not None and subscription.start_date > self.end_date:
            return False
        return True


__all__ = ["CostFilter", "Subscription", "utcnow"]
