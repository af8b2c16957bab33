"""
PURPOSE: Alert store API routes for the alert relay.

Exposes the stored alerts to the dashboard: filtered listing, statistics,
single-alert lookup, status/outcome updates and deletion.
"""

from typing import Literal, NoReturn, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from alert_relay.core.rate_limit import READ_LIMIT, WRITE_LIMIT, limiter
from alert_relay.db.engine import get_db
from alert_relay.schemas.alert import AlertList, AlertResponse, AlertStats, AlertUpdate
from alert_relay.services.alert_service import AlertService
from alert_relay.utils.logger import get_logger
from alert_relay.webhook.errors import StoreError

logger = get_logger(__name__)

router = APIRouter(prefix="/alerts", tags=["alerts"])


def _raise_alert_route_error(action: str, error: Exception) -> NoReturn:
    """
    PURPOSE: Raise a consistent HTTP 500 response for alert route failures.

    Args:
        action: Human-readable description of the failed operation.
        error:  The caught exception.

    Raises:
        HTTPException: Always raises HTTP 500.
    """
    logger.error(
        "alert_route_failed",
        action=action,
        error=str(error),
        exception_type=type(error).__name__,
    )
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}",
    )


def _not_found(alert_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Alert '{alert_id}' not found",
    )


@router.get("", response_model=AlertList)
@limiter.limit(READ_LIMIT)
async def list_alerts(
    request: Request,
    symbol: Optional[str] = None,
    action: Optional[Literal["BUY", "SELL"]] = None,
    alert_status: Optional[Literal["active", "completed", "stopped"]] = Query(None, alias="status"),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
) -> AlertList:
    """
    PURPOSE: List stored alerts newest first.

    Query params:
        symbol, action, status: equality filters
        limit, offset: pagination
    """
    try:
        alerts = await AlertService.list_alerts(
            db,
            symbol=symbol,
            action=action,
            status=alert_status,
            limit=limit,
            offset=offset,
        )
    except StoreError as e:
        _raise_alert_route_error("fetch alerts", e)

    return AlertList(alerts=alerts, count=len(alerts), limit=limit, offset=offset)


@router.get("/stats", response_model=AlertStats)
@limiter.limit(READ_LIMIT)
async def get_alert_stats(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> AlertStats:
    """PURPOSE: Counts of alerts by status and by action."""
    try:
        return await AlertService.get_stats(db)
    except StoreError as e:
        _raise_alert_route_error("fetch alert statistics", e)


@router.get("/{alert_id}", response_model=AlertResponse)
@limiter.limit(READ_LIMIT)
async def get_alert(
    request: Request,
    alert_id: str,
    db: AsyncSession = Depends(get_db),
) -> AlertResponse:
    """PURPOSE: Fetch one stored alert; 404 when it does not exist."""
    alert = await AlertService.get_alert(db, alert_id)
    if alert is None:
        raise _not_found(alert_id)
    return alert


@router.patch("/{alert_id}", response_model=AlertResponse)
@limiter.limit(WRITE_LIMIT)
async def update_alert(
    request: Request,
    alert_id: str,
    updates: AlertUpdate,
    db: AsyncSession = Depends(get_db),
) -> AlertResponse:
    """
    PURPOSE: Apply a partial update, typically marking an alert completed or
    stopped and tagging its outcome.

    Raises:
        HTTP 404: Alert does not exist.
        HTTP 422: Status or outcome outside their allowed values.
        HTTP 500: Store failure.
    """
    try:
        alert = await AlertService.update_alert(db, alert_id, updates)
    except StoreError as e:
        _raise_alert_route_error("update alert", e)

    if alert is None:
        raise _not_found(alert_id)
    return alert


@router.delete("/{alert_id}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit(WRITE_LIMIT)
async def delete_alert(
    request: Request,
    alert_id: str,
    db: AsyncSession = Depends(get_db),
) -> None:
    """PURPOSE: Delete a stored alert; 404 when it does not exist."""
    try:
        deleted = await AlertService.delete_alert(db, alert_id)
    except StoreError as e:
        _raise_alert_route_error("delete alert", e)

    if not deleted:
        raise _not_found(alert_id)
