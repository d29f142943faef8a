"""Business rules and orchestration for subscription records."""

from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import List, Optional, Tuple

from .errors import NotFoundError, StoreError, ValidationError
from .models import CostFilter, Subscription, utcnow
from .periods import parse_month
from .store import SubscriptionStore

logger = logging.getLogger("subtracker.manager")


def _generate_id() -> str:
    return str(uuid.uuid4())


def _optional(value: Optional[str]) -> Optional[str]:
    """Collapse empty strings to ``None`` so that both mean "not supplied"."""

    if value is None or value == "":
        return None
    return value


def _require_text(value: Optional[str], field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} is required")
    return value


def _require_price(price: object) -> int:
    if isinstance(price, bool) or not isinstance(price, int):
        raise ValidationError("price must be an integer")
    if price <= 0:
        raise ValidationError("price must be positive")
    return price


def _parse_range(start_text: str, end_text: Optional[str]) -> Tuple[date, Optional[date]]:
    start = parse_month(start_text, label="start date")
    end_value = _optional(end_text)
    if end_value is None:
        return start, None
    end = parse_month(end_value, label="end date")
    if end < start:
        raise ValidationError("end before start")
    return start, end


class SubscriptionManager:
    """Validate input and coordinate calls against a :class:`SubscriptionStore`."""

    def __init__(self, store: SubscriptionStore) -> None:
        self._store = store

    @property
    def store(self) -> SubscriptionStore:
        return self._store

    def create(
        self,
        service_name: str,
        price: int,
        user_id: str,
        start_date: str,
        end_date: Optional[str] = None,
    ) -> Subscription:
        """Validate and persist a new subscription, returning the stored record."""

        try:
            service_name = _require_text(service_name, "service_name")
            price = _require_price(price)
            user_id = _require_text(user_id, "user_id")
            start, end = _parse_range(start_date, end_date)
        except ValidationError as exc:
            logger.warning("Rejected new subscription for user %s: %s", user_id, exc)
            raise

        subscription = Subscription.new(
            _generate_id(),
            service_name,
            price,
            user_id,
            start,
            end,
        )
        try:
            self._store.insert(subscription)
        except StoreError as exc:
            raise type(exc)(f"could not persist subscription: {exc}") from exc

        logger.info(
            "Created subscription %s for user %s (service=%s, price=%s)",
            subscription.id,
            user_id,
            service_name,
            price,
        )
        return subscription

    def get(self, subscription_id: str) -> Subscription:
        subscription_id = _require_text(subscription_id, "id")
        try:
            return self._store.find_by_id(subscription_id)
        except NotFoundError:
            raise
        except StoreError as exc:
            raise type(exc)(f"could not load subscription: {exc}") from exc

    def update(
        self,
        subscription_id: str,
        service_name: str,
        price: int,
        user_id: str,
        start_date: str,
        end_date: Optional[str] = None,
    ) -> Subscription:
        """Replace every mutable field of a subscription.

        The record is read back after the write so callers see exactly what
        was persisted. If another request deletes the row between the two
        steps the re-read raises :class:`NotFoundError`.
        """

        try:
            subscription_id = _require_text(subscription_id, "id")
            service_name = _require_text(service_name, "service_name")
            price = _require_price(price)
            user_id = _require_text(user_id, "user_id")
            start, end = _parse_range(start_date, end_date)
        except ValidationError as exc:
            logger.warning("Rejected update of subscription %s: %s", subscription_id, exc)
            raise

        try:
            self._store.update(
                subscription_id,
                service_name=service_name,
                price=price,
                user_id=user_id,
                start_date=start,
                end_date=end,
                updated_at=utcnow(),
            )
        except NotFoundError:
            raise
        except StoreError as exc:
            raise type(exc)(f"could not update subscription: {exc}") from exc

        refreshed = self.get(subscription_id)
        logger.info("Updated subscription %s", subscription_id)
        return refreshed

    def delete(self, subscription_id: str) -> None:
        subscription_id = _require_text(subscription_id, "id")
        try:
            self._store.delete(subscription_id)
        except NotFoundError:
            raise
        except StoreError as exc:
            raise type(exc)(f"could not delete subscription: {exc}") from exc
        logger.info("Deleted subscription %s", subscription_id)

    def list(self) -> List[Subscription]:
        try:
            subscriptions = self._store.list()
        except StoreError as exc:
            raise type(exc)(f"could not list subscriptions: {exc}") from exc
        logger.info("Listed %d subscriptions", len(subscriptions))
        return subscriptions

    def calculate_total_cost(
        self,
        user_id: Optional[str] = None,
        service_name: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> int:
        """Sum ``price`` over every subscription matching the supplied filters.

        Each argument is optional and ``None`` or an empty string leaves that
        constraint out. Date bounds are inclusive and apply to the start date
        of each record.
        """

        start_text = _optional(start_date)
        end_text = _optional(end_date)
        try:
            start = parse_month(start_text, label="start date") if start_text else None
            end = parse_month(end_text, label="end date") if end_text else None
            if start is not None and end is not None and end < start:
                raise ValidationError("end before start")
        except ValidationError as exc:
            logger.warning("Rejected total cost query: %s", exc)
            raise

        cost_filter = CostFilter(
            user_id=_optional(user_id),
            service_name=_optional(service_name),
            start_date=start,
            end_date=end,
        )
        try:
            total = self._store.sum_by_filter(cost_filter)
        except StoreError as exc:
            raise type(exc)(f"could not calculate total cost: {exc}") from exc

        logger.info("Calculated total cost %d for %s", total, cost_filter)
        return total


__all__ = ["SubscriptionManager"]
