"""HTTP ingress: CRM change signals plus the thin CRM proxies used by the site."""

from __future__ import annotations

import json
from collections.abc import Awaitable, Callable
from logging import getLogger
from typing import Any

import jwt
from fastapi import BackgroundTasks, FastAPI, Header, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from eventsync.adapters.crm import CrmClient
from eventsync.adapters.http_resilience import ApiError, ApiHttpError
from eventsync.app import build_reconcile, handle_change_signal
from eventsync.config import IngressConfig, get_ingress_config, get_sync_settings
from eventsync.domain.model import ChangeSignal, ChangeType

log = getLogger(__name__)

SignalHandler = Callable[[ChangeSignal], Awaitable[object]]
CrmFactory = Callable[[], CrmClient]

WEBHOOK_PATH = "/api/crm-webhook"
EVENT_PRODUCT_PATH = "/api/event-product"
SALES_ORDER_PATH = "/api/sales-order"


class ChangeSignalClaims(BaseModel):
    """Claims carried by the CRM's signed change notification."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    entity_name: str = Field(alias="entityName", min_length=1)
    record_id: str = Field(alias="recordId", min_length=1)
    change_type: str = Field(alias="changeType", min_length=1)

    def to_signal(self) -> ChangeSignal:
        return ChangeSignal(
            entity_name=self.entity_name,
            record_id=self.record_id,
            change_type=ChangeType.parse(self.change_type),
        )


def _bearer_token(authorization: str | None) -> str:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Unauthorized: No Bearer token.")
    return authorization.removeprefix("Bearer ").strip()


def _decode_claims(token: str, config: IngressConfig) -> dict[str, Any]:
    try:
        return jwt.decode(token, config.jwt_secret, algorithms=list(config.jwt_algorithms))
    except jwt.PyJWTError as exc:
        log.warning("JWT verification failed: %s", exc)
        raise HTTPException(status_code=401, detail="Unauthorized: Invalid token.") from exc


def create_app(
    config: IngressConfig | None = None,
    *,
    signal_handler: SignalHandler | None = None,
    crm_factory: CrmFactory | None = None,
) -> FastAPI:
    """Build the ingress app; missing configuration fails here, before any request."""

    ingress = config or get_ingress_config()
    if signal_handler is None or crm_factory is None:
        settings = get_sync_settings()
        reconcile = build_reconcile(settings)

        async def default_handler(signal: ChangeSignal) -> object:
            return await handle_change_signal(signal, reconcile=reconcile)

        signal_handler = signal_handler or default_handler
        crm_factory = crm_factory or (lambda: CrmClient(settings.crm))

    handle_signal: SignalHandler = signal_handler
    open_crm: CrmFactory = crm_factory

    app = FastAPI(title="eventsync")
    if ingress.allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(ingress.allowed_origins),
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["*"],
        )

    async def dispatch(signal: ChangeSignal) -> None:
        try:
            await handle_signal(signal)
        except Exception:  # noqa: BLE001
            log.exception(
                "Change signal for %s %s (%s) could not be reconciled",
                signal.entity_name,
                signal.record_id,
                signal.change_type,
            )

    @app.post(WEBHOOK_PATH)
    async def crm_webhook(
        background_tasks: BackgroundTasks,
        authorization: str | None = Header(default=None),
    ) -> dict[str, Any]:
        decoded = _decode_claims(_bearer_token(authorization), ingress)
        try:
            claims = ChangeSignalClaims.model_validate(decoded)
        except ValidationError as exc:
            log.error("JWT payload missing required fields: %s", decoded)  # noqa: TRY400
            raise HTTPException(
                status_code=400,
                detail=(
                    "Bad Request: JWT payload is missing required fields "
                    "(entityName, recordId, changeType)."
                ),
            ) from exc

        log.info(
            "Change in %s with id %s (%s)",
            claims.entity_name,
            claims.record_id,
            claims.change_type,
        )
        background_tasks.add_task(dispatch, claims.to_signal())
        return {
            "message": "Webhook received and processed.",
            "data": claims.model_dump(by_alias=True),
        }

    @app.get(EVENT_PRODUCT_PATH, response_model=None)
    async def event_products(
        event_id: str | None = Query(default=None, alias="eventId"),
    ) -> JSONResponse | list[dict[str, object]]:
        if not event_id:
            return JSONResponse(
                status_code=400, content={"msg": "Query parameter 'eventId' is required."}
            )
        try:
            async with open_crm() as crm:
                products = await crm.get_event_price_level(event_id)
        except ApiError:
            log.exception("Failed to fetch event products for %s", event_id)
            return JSONResponse(
                status_code=500, content={"msg": "Server error while fetching product data."}
            )
        log.info("Found %s products for event %s", len(products), event_id)
        return products

    @app.post(SALES_ORDER_PATH, response_model=None)
    async def submit_sales_order(request: Request) -> JSONResponse | object:
        try:
            body = await request.json()
        except json.JSONDecodeError:
            body = None
        if not body:
            return JSONResponse(
                status_code=400,
                content={"error": {"message": "Missing salesOrder data in request body."}},
            )

        order = body["salesOrder"] if isinstance(body, dict) and "salesOrder" in body else body
        if not order:
            return JSONResponse(
                status_code=400,
                content={"error": {"message": "Missing salesOrder data in request body."}},
            )
        try:
            async with open_crm() as crm:
                return await crm.submit_sales_order(order)
        except ApiHttpError as exc:
            log.exception("CRM rejected the sales order")
            try:
                return JSONResponse(status_code=500, content=json.loads(exc.body))
            except json.JSONDecodeError:
                pass
        except ApiError:
            log.exception("Sales order submission failed")
        return JSONResponse(
            status_code=500,
            content={"error": {"message": "An internal server error occurred."}},
        )

    return app
