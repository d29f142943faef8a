"""SQLite-backed persistence for subscriptions."""
from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from datetime import date, datetime
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Tuple

from .errors import ConstraintError, NotFoundError, StoreError
from .models import CostFilter, Subscription

logger = logging.getLogger("subtracker.database")

_COLUMNS = "id, service_name, price, user_id, start_date, end_date, created_at, updated_at"


def _ensure_directory(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def resolve_database_path(env_value: Optional[str]) -> Path:
    """Resolve the on-disk path for the subscriptions database."""

    if env_value:
        return Path(env_value).expanduser().resolve(strict=False)
    base_dir = Path(__file__).resolve().parent.parent / "data"
    return (base_dir / "subscriptions.sqlite3").resolve(strict=False)


def _serialize_date(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _parse_date(value: Optional[str]) -> Optional[date]:
    return date.fromisoformat(value) if value else None


def _serialize_datetime(value: datetime) -> str:
    return value.isoformat()


def _parse_datetime(value: str) -> datetime:
    return datetime.fromisoformat(value)


def build_cost_query(cost_filter: CostFilter) -> Tuple[str, List[object]]:
    """Return the aggregation SQL and its bound parameters for ``cost_filter``.

    A clause is appended only for constraints that are set; values are always
    passed as parameters.
    """

    clauses: List[str] = []
    params: List[object] = []
    if cost_filter.user_id is not None:
        clauses.append("user_id = ?")
        params.append(cost_filter.user_id)
    if cost_filter.service_name is not None:
        clauses.append("service_name = ?")
        params.append(cost_filter.service_name)
    if cost_filter.start_date is not None:
        clauses.append("start_date >= ?")
        params.append(_serialize_date(cost_filter.start_date))
    if cost_filter.end_date is not None:
        clauses.append("start_date <= ?")
        params.append(_serialize_date(cost_filter.end_date))

    query = "SELECT COALESCE(SUM(price), 0) AS total FROM subscriptions"
    if clauses:
        query += " WHERE " + " AND ".join(clauses)
    return query, params


class Database:
    """Simple wrapper around SQLite for persisting subscriptions."""

    def __init__(self, path: Path) -> None:
        _ensure_directory(path)
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def _session(self, action: str) -> Iterator[sqlite3.Connection]:
        """Yield a connection that commits on success and is always closed.

        SQLite failures are translated into :class:`StoreError` subclasses.
        """

        try:
            conn = self._connect()
        except sqlite3.Error as exc:
            logger.error("Could not open database %s: %s", self._path, exc)
            raise StoreError(f"Could not open subscription store: {exc}") from exc
        try:
            with conn:
                yield conn
        except sqlite3.IntegrityError as exc:
            logger.error("Constraint violation while trying to %s: %s", action, exc)
            raise ConstraintError(f"Could not {action}: {exc}") from exc
        except sqlite3.Error as exc:
            logger.error("Database failure while trying to %s: %s", action, exc)
            raise StoreError(f"Could not {action}: {exc}") from exc
        finally:
            conn.close()

    def initialize(self) -> None:
        """Create the required tables if they do not already exist."""

        with self._session("initialise schema") as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS subscriptions (
                    id TEXT PRIMARY KEY,
                    service_name TEXT NOT NULL,
                    price INTEGER NOT NULL CHECK (price > 0),
                    user_id TEXT NOT NULL,
                    start_date TEXT NOT NULL,
                    end_date TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );

                CREATE INDEX IF NOT EXISTS idx_subscriptions_user_id ON subscriptions(user_id);
                CREATE INDEX IF NOT EXISTS idx_subscriptions_service_name ON subscriptions(service_name);
                """
            )

    # ------------------------------------------------------------------
    # Subscription records
    # ------------------------------------------------------------------
    def insert(self, subscription: Subscription) -> None:
        with self._session("insert subscription") as conn:
            conn.execute(
                f"""
                INSERT INTO subscriptions ({_COLUMNS})
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    subscription.id,
                    subscription.service_name,
                    subscription.price,
                    subscription.user_id,
                    _serialize_date(subscription.start_date),
                    _serialize_date(subscription.end_date),
                    _serialize_datetime(subscription.created_at),
                    _serialize_datetime(subscription.updated_at),
                ),
            )

    def find_by_id(self, subscription_id: str) -> Subscription:
        with self._session("load subscription") as conn:
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM subscriptions WHERE id = ?",
                (subscription_id,),
            ).fetchone()
        if row is None:
            raise NotFoundError(f"Subscription {subscription_id} not found")
        return self._row_to_subscription(row)

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
        with self._session("update subscription") as conn:
            cursor = conn.execute(
                """
                UPDATE subscriptions
                   SET service_name = ?, price = ?, user_id = ?, start_date = ?, end_date = ?,
                       updated_at = ?
                 WHERE id = ?
                """,
                (
                    service_name,
                    price,
                    user_id,
                    _serialize_date(start_date),
                    _serialize_date(end_date),
                    _serialize_datetime(updated_at),
                    subscription_id,
                ),
            )
            affected = cursor.rowcount
        if affected == 0:
            raise NotFoundError(f"Subscription {subscription_id} not found")

    def delete(self, subscription_id: str) -> None:
        with self._session("delete subscription") as conn:
            cursor = conn.execute("DELETE FROM subscriptions WHERE id = ?", (subscription_id,))
            affected = cursor.rowcount
        if affected == 0:
            raise NotFoundError(f"Subscription {subscription_id} not found")

    def list(self) -> List[Subscription]:
        with self._session("list subscriptions") as conn:
            rows = conn.execute(f"SELECT {_COLUMNS} FROM subscriptions").fetchall()
        return self._rows_to_subscriptions(rows)

    def sum_by_filter(self, cost_filter: CostFilter) -> int:
        query, params = build_cost_query(cost_filter)
        with self._session("calculate total cost") as conn:
            row = conn.execute(query, params).fetchone()
        return int(row["total"])

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _rows_to_subscriptions(self, rows: Sequence[sqlite3.Row]) -> List[Subscription]:
        return [self._row_to_subscription(row) for row in rows]

    def _row_to_subscription(self, row: sqlite3.Row) -> Subscription:
        return Subscription(
            id=str(row["id"]),
            service_name=str(row["service_name"]),
            price=int(row["price"]),
            user_id=str(row["user_id"]),
            start_date=date.fromisoformat(str(row["start_date"])),
            end_date=_parse_date(row["end_date"]),
            created_at=_parse_datetime(str(row["created_at"])),
            updated_at=_parse_datetime(str(row["updated_at"])),
        )


__all__ = ["Database", "build_cost_query", "resolve_database_path"]
