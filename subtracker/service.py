"""HTTP API exposing subscription records and cost totals."""

from __future__ import annotations

import logging
import os
import time
from datetime import datetime
from typing import Dict, List, Optional

from fastapi import FastAPI, HTTPException, Query, Request, Response, status
from pydantic import BaseModel, Field, StrictInt

from .config import ServiceConfig, load_config, resolve_config_path
from .database import Database
from .errors import NotFoundError, SubscriptionError, ValidationError
from .manager import SubscriptionManager
from .models import Subscription
from .periods import MONTH_FORMAT

logger = logging.getLogger("subtracker.service")
http_logger = logging.getLogger("subtracker.http")


class SubscriptionRequest(BaseModel):
    service_name: str = Field(..., description="Name of the subscribed service", examples=["Netflix"])
    price: StrictInt = Field(..., description="Monthly price in the smallest currency unit", examples=[999])
    user_id: str = Field(..., description="Identifier of the subscribing user", examples=["user123"])
    start_date: str = Field(..., description=f"First billed month ({MONTH_FORMAT})", examples=["01-2024"])
    end_date: Optional[str] = Field(default=None, description=f"Last billed month ({MONTH_FORMAT})")


class SubscriptionResponse(BaseModel):
    id: str
    service_name: str
    price: int
    user_id: str
    start_date: str
    end_date: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class TotalCostResponse(BaseModel):
    total_cost: int
    user_id: Optional[str] = None
    service_name: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None


def _to_response(subscription: Subscription) -> SubscriptionResponse:
    return SubscriptionResponse(**subscription.as_dict())


def _to_http_error(exc: SubscriptionError) -> HTTPException:
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message)
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message)
    logger.error("Subscription store failure: %s", exc.message)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=exc.message)


def register_api_routes(app: FastAPI, manager: SubscriptionManager) -> None:
    """Expose the JSON API endpoints on the provided FastAPI application."""

    @app.get("/healthz")
    def healthcheck() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post(
        "/subscriptions",
        status_code=status.HTTP_201_CREATED,
        response_model=SubscriptionResponse,
    )
    def create_subscription(request: SubscriptionRequest) -> SubscriptionResponse:
        try:
            subscription = manager.create(
                request.service_name,
                request.price,
                request.user_id,
                request.start_date,
                request.end_date,
            )
        except SubscriptionError as exc:
            raise _to_http_error(exc) from exc
        return _to_response(subscription)

    @app.get("/subscriptions", response_model=List[SubscriptionResponse])
    def list_subscriptions() -> List[SubscriptionResponse]:
        try:
            subscriptions = manager.list()
        except SubscriptionError as exc:
            raise _to_http_error(exc) from exc
        return [_to_response(subscription) for subscription in subscriptions]

    @app.get("/subscriptions/total", response_model=TotalCostResponse)
    def total_cost(
        user_id: Optional[str] = Query(default=None),
        service_name: Optional[str] = Query(default=None),
        start_date: Optional[str] = Query(default=None, description=f"Lower bound ({MONTH_FORMAT})"),
        end_date: Optional[str] = Query(default=None, description=f"Upper bound ({MONTH_FORMAT})"),
    ) -> TotalCostResponse:
        try:
            total = manager.calculate_total_cost(
                user_id=user_id,
                service_name=service_name,
                start_date=start_date,
                end_date=end_date,
            )
        except SubscriptionError as exc:
            raise _to_http_error(exc) from exc
        return TotalCostResponse(
            total_cost=total,
            user_id=user_id,
            service_name=service_name,
            start_date=start_date,
            end_date=end_date,
        )

    @app.get("/subscriptions/{subscription_id}", response_model=SubscriptionResponse)
    def get_subscription(subscription_id: str) -> SubscriptionResponse:
        try:
            subscription = manager.get(subscription_id)
        except SubscriptionError as exc:
            raise _to_http_error(exc) from exc
        return _to_response(subscription)

    @app.put("/subscriptions/{subscription_id}", response_model=SubscriptionResponse)
    def update_subscription(subscription_id: str, request: SubscriptionRequest) -> SubscriptionResponse:
        try:
            subscription = manager.update(
                subscription_id,
                request.service_name,
                request.price,
                request.user_id,
                request.start_date,
                request.end_date,
            )
        except SubscriptionError as exc:
            raise _to_http_error(exc) from exc
        return _to_response(subscription)

    @app.delete("/subscriptions/{subscription_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_subscription(subscription_id: str) -> Response:
        try:
            manager.delete(subscription_id)
        except SubscriptionError as exc:
            raise _to_http_error(exc) from exc
        return Response(status_code=status.HTTP_204_NO_CONTENT)


def _register_request_logging(app: FastAPI) -> None:
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        http_logger.info(
            "%s %s -> %s in %.1fms (client=%s)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request.client.host if request.client else "-",
        )
        return response


def create_app(
    *,
    manager: SubscriptionManager | None = None,
    database: Database | None = None,
    config: ServiceConfig | None = None,
) -> FastAPI:
    """Instantiate the FastAPI application for the subscription API.

    An explicit ``manager`` wins over ``database``; without either, a SQLite
    database is opened at the configured path.
    """

    if manager is None:
        if database is None:
            settings = config or load_config(resolve_config_path(os.getenv("SUBTRACKER_CONFIG")))
            database = Database(settings.database_path)
        database.initialize()
        manager = SubscriptionManager(database)

    app = FastAPI(
        title="Subscription Tracker API",
        version="0.1.0",
        description="Manage user subscriptions and aggregate their cost.",
    )
    app.state.manager = manager

    _register_request_logging(app)
    register_api_routes(app, manager)
    return app


__all__ = ["create_app", "register_api_routes"]
