"""
PURPOSE: Webhook ingestion routes for the alert relay.

Provides the public inbound endpoint TradingView alerts are pointed at, plus
the manual submission and test-alert endpoints used by the dashboard.

Ingestion boundary contract (/api/webhook):
    POST     application/json bodies are parsed as JSON (invalid JSON -> 400);
             any other content type is tried as JSON and otherwise kept as text.
             Parse failure -> 400, stored -> 200 with the alert, store failure -> 500.
    GET      static liveness payload with ingestion counters.
    OPTIONS  200 with CORS headers.
    other    405.

Every failure path returns a JSON error payload; no exception escapes.

CALLED BY:
    - TradingView alert webhooks (POST, public)
    - Dashboard (GET status, manual submission, test alert)
"""

import json
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from alert_relay.core.rate_limit import WEBHOOK_LIMIT, WRITE_LIMIT, limiter
from alert_relay.db.engine import get_db
from alert_relay.notifications import get_notification_dispatcher
from alert_relay.schemas.alert import ManualSubmission
from alert_relay.utils.logger import get_logger
from alert_relay.utils.time_utils import get_utc_now
from alert_relay.webhook.processor import (
    IngestResult,
    build_test_alert,
    decode_text_payload,
    get_webhook_processor,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/webhook", tags=["webhook"])

CORS_HEADERS: Dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}


# ════════════════════════════════════════════════════════════════
# Internal Helpers
# ════════════════════════════════════════════════════════════════


def _json(status_code: int, content: Dict[str, Any]) -> JSONResponse:
    """JSON response carrying the webhook CORS headers."""
    return JSONResponse(status_code=status_code, content=content, headers=CORS_HEADERS)


def _result_response(result: IngestResult, success_message: str) -> JSONResponse:
    """
    PURPOSE: Map an IngestResult onto the ingestion boundary's HTTP contract.

    Args:
        result: Outcome of WebhookProcessor.ingest().
        success_message: Human-readable message for the 200 payload.

    Returns:
        JSONResponse: 200 / 400 / 500 payload.
    """
    if result.parse_failure is not None:
        return _json(
            status.HTTP_400_BAD_REQUEST,
            {"error": result.parse_failure.message, "stage": result.parse_failure.stage},
        )
    if result.store_error is not None:
        return _json(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            {"error": "Failed to save alert"},
        )
    return _json(
        status.HTTP_200_OK,
        {
            "success": True,
            "message": success_message,
            "alert": result.alert.model_dump(mode="json", by_alias=True),
        },
    )


def _route_error(action: str, error: Exception) -> JSONResponse:
    """
    PURPOSE: Log an unexpected failure and return a consistent HTTP 500 payload.

    Args:
        action: Human-readable description of the failed operation.
        error:  The caught exception.
    """
    logger.error(
        "webhook_route_failed",
        action=action,
        error=str(error),
        exception_type=type(error).__name__,
    )
    return _json(status.HTTP_500_INTERNAL_SERVER_ERROR, {"error": "Internal server error"})


async def _read_payload(request: Request) -> Any:
    """
    PURPOSE: Decode the request body according to its content type.

    Raises:
        ValueError: If a JSON-typed body is not valid JSON.
    """
    body = await request.body()
    content_type = request.headers.get("content-type", "")

    if "application/json" in content_type:
        return json.loads(body.decode("utf-8"))

    return decode_text_payload(body.decode("utf-8", errors="replace"))


# ════════════════════════════════════════════════════════════════
# Public Inbound Endpoint
# ════════════════════════════════════════════════════════════════


@router.post("")
@limiter.limit(WEBHOOK_LIMIT)
async def receive_webhook(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    """
    PURPOSE: Receive a TradingView alert webhook, normalize it and store it.

    Rate limit: WEBHOOK_RATE_LIMIT per IP address.

    Returns:
        200: {"success": true, "message": ..., "alert": {...}}
        400: {"error": "Invalid JSON body"} or {"error": "Unable to parse alert data", "stage": ...}
        500: {"error": "Failed to save alert"} or {"error": "Internal server error"}
    """
    try:
        payload = await _read_payload(request)
    except ValueError as e:
        logger.warning("webhook_body_unreadable", error=str(e))
        return _json(status.HTTP_400_BAD_REQUEST, {"error": "Invalid JSON body"})

    logger.info(
        "webhook_alert_received",
        payload_type=type(payload).__name__,
        content_type=request.headers.get("content-type", ""),
    )

    try:
        result = await get_webhook_processor().ingest(db, payload, source="webhook")
    except Exception as e:
        return _route_error("process webhook alert", e)

    return _result_response(result, "Alert received and saved")


@router.get("")
async def webhook_status() -> JSONResponse:
    """
    PURPOSE: Liveness payload for someone opening the webhook URL in a browser.

    Returns:
        dict: message, status, usage, timestamp, ingestion and notification counters.
    """
    return _json(
        status.HTTP_200_OK,
        {
            "message": "TradingView Webhook Endpoint",
            "status": "Active and ready to receive POST requests",
            "usage": "This endpoint accepts POST requests from TradingView alerts",
            "timestamp": get_utc_now().isoformat(),
            "processor": get_webhook_processor().get_status(),
            "notifications": get_notification_dispatcher().get_status(),
        },
    )


@router.options("")
async def webhook_preflight() -> Response:
    """CORS preflight for browsers posting to the webhook directly."""
    return Response(status_code=status.HTTP_200_OK, headers=CORS_HEADERS)


@router.api_route("", methods=["PUT", "PATCH", "DELETE"], include_in_schema=False)
async def webhook_method_not_allowed() -> JSONResponse:
    """Only GET, POST and OPTIONS are served on the webhook URL."""
    return _json(status.HTTP_405_METHOD_NOT_ALLOWED, {"error": "Method not allowed"})


# ════════════════════════════════════════════════════════════════
# Dashboard Endpoints
# ════════════════════════════════════════════════════════════════


@router.post("/submit")
@limiter.limit(WRITE_LIMIT)
async def submit_alert(
    request: Request,
    submission: ManualSubmission,
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    """
    PURPOSE: Manually submit an alert pasted into the dashboard.

    String data that parses as JSON is decoded first; any other string goes
    through the free-text path.

    Returns:
        Same contract as POST /api/webhook.
    """
    payload = submission.data
    if isinstance(payload, str):
        payload = decode_text_payload(payload)

    try:
        result = await get_webhook_processor().ingest(db, payload, source="manual")
    except Exception as e:
        return _route_error("submit manual alert", e)

    return _result_response(result, "Alert submitted")


@router.post("/test")
@limiter.limit(WRITE_LIMIT)
async def send_test_alert(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    """
    PURPOSE: Fire a canned EURUSD BUY alert through the full ingestion path.

    Lets the user verify storage, live updates and notifications without
    waiting for TradingView to fire a real alert.

    Returns:
        Same contract as POST /api/webhook.
    """
    test_alert = build_test_alert()
    logger.info("webhook_test_alert_fired", alert_id=test_alert["id"])

    try:
        result = await get_webhook_processor().ingest(db, test_alert, source="test")
    except Exception as e:
        return _route_error("send test alert", e)

    return _result_response(result, "Test alert sent")
