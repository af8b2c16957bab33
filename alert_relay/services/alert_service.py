"""
Alert service for the alert relay.

PURPOSE: Store collaborator for canonical alerts: list, get, insert, update,
delete and statistics over the trading_alerts table. Every committed write
publishes a change event on the event bus; event publication happens after
the commit and its failure never rolls the write back.

CALLED BY: alert_relay.webhook.processor, alert_relay.api.routes_alerts
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from alert_relay.config.constants import AlertAction, AlertStatus, EventType
from alert_relay.events.bus import get_event_bus
from alert_relay.models.alert import TradingAlert
from alert_relay.schemas.alert import AlertResponse, AlertStats, AlertUpdate, CanonicalAlert
from alert_relay.utils.logger import get_logger
from alert_relay.webhook.errors import StoreError


logger = get_logger("services.alert")

MAX_PAGE_SIZE = 500


def to_response(row: TradingAlert) -> AlertResponse:
    """Map a stored row to the API response schema."""
    return AlertResponse(
        id=row.id,
        action=row.action,
        symbol=row.symbol,
        timeframe=row.timeframe,
        entry=row.entry,
        target=row.target,
        stop=row.stop,
        rr=row.rr,
        risk=row.risk,
        message=row.message,
        strategy_name=row.strategy_name,
        raw_message=row.raw_message,
        status=row.status,
        outcome=row.outcome,
        timestamp=row.created_at,
        updated_at=row.updated_at,
    )


async def _publish(event_type: EventType, data: Dict[str, Any]) -> None:
    """Publish a change event; failures are logged, never raised."""
    try:
        await get_event_bus().publish(
            event_type=event_type.value,
            data=data,
            source="alert_service",
            severity="INFO",
        )
    except Exception as e:
        logger.warning("event_publish_failed", event_type=event_type.value, error=str(e))


class AlertService:
    """
    Service for managing stored alerts.

    PURPOSE: Provide the store operations the ingestion boundary and the
    alert API rely on, publishing events for each state change.

    CALLED BY: WebhookProcessor, API routes for alert endpoints
    """

    @staticmethod
    async def create_alert(db: AsyncSession, alert: CanonicalAlert) -> AlertResponse:
        """
        Insert a canonical alert.

        Args:
            db: Async database session
            alert: Validated CanonicalAlert produced by the pipeline

        Returns:
            AlertResponse: Stored alert with timestamps

        Raises:
            StoreError: If the id already exists or the database write fails
        """
        row = TradingAlert(
            id=alert.id,
            action=alert.action,
            symbol=alert.symbol,
            timeframe=alert.timeframe,
            entry=alert.entry,
            target=alert.target,
            stop=alert.stop,
            rr=alert.rr,
            risk=alert.risk,
            message=alert.message,
            strategy_name=alert.strategy_name,
            raw_message=alert.raw_message,
            status=alert.status,
            outcome=alert.outcome,
        )

        try:
            db.add(row)
            await db.commit()
            await db.refresh(row)
        except IntegrityError as e:
            await db.rollback()
            logger.error("create_alert_duplicate_id", alert_id=alert.id, error=str(e.orig))
            raise StoreError(f"Alert '{alert.id}' already exists") from e
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("create_alert_error", alert_id=alert.id, error=str(e))
            raise StoreError("Failed to save alert") from e

        stored = to_response(row)
        logger.info(
            "alert_created",
            alert_id=stored.id,
            symbol=stored.symbol,
            action=stored.action,
        )

        await _publish(EventType.ALERT_CREATED, stored.model_dump(mode="json", by_alias=True))
        return stored

    @staticmethod
    async def get_alert(db: AsyncSession, alert_id: str) -> Optional[AlertResponse]:
        """
        Retrieve a single alert by id.

        Returns:
            AlertResponse if found, None otherwise
        """
        row = await db.get(TradingAlert, alert_id)
        if row is None:
            logger.info("alert_not_found", alert_id=alert_id)
            return None
        return to_response(row)

    @staticmethod
    async def list_alerts(
        db: AsyncSession,
        symbol: Optional[str] = None,
        action: Optional[str] = None,
        status: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[AlertResponse]:
        """
        List alerts newest first with optional equality filters.

        Args:
            db: Async database session
            symbol: Only alerts for this symbol (case-insensitive)
            action: Only BUY or SELL alerts
            status: Only alerts with this lifecycle status
            limit: Page size (capped at MAX_PAGE_SIZE)
            offset: Rows to skip

        Returns:
            list[AlertResponse]: Matching alerts
        """
        stmt = select(TradingAlert)
        if symbol:
            stmt = stmt.where(TradingAlert.symbol == symbol.upper())
        if action:
            stmt = stmt.where(TradingAlert.action == action.upper())
        if status:
            stmt = stmt.where(TradingAlert.status == status)

        stmt = (
            stmt.order_by(TradingAlert.created_at.desc())
            .offset(max(offset, 0))
            .limit(min(max(limit, 1), MAX_PAGE_SIZE))
        )

        try:
            result = await db.execute(stmt)
        except SQLAlchemyError as e:
            logger.error("list_alerts_error", error=str(e))
            raise StoreError("Failed to fetch alerts") from e

        return [to_response(row) for row in result.scalars().all()]

    @staticmethod
    async def update_alert(
        db: AsyncSession,
        alert_id: str,
        updates: AlertUpdate,
    ) -> Optional[AlertResponse]:
        """
        Apply a partial update (typically status/outcome) to an alert.

        Any status may follow any other and outcome may be set regardless of
        status; only the values themselves are constrained by AlertUpdate.

        Returns:
            AlertResponse if the alert exists, None otherwise

        Raises:
            StoreError: If the database write fails
        """
        row = await db.get(TradingAlert, alert_id)
        if row is None:
            logger.info("alert_not_found", alert_id=alert_id)
            return None

        changes = updates.model_dump(exclude_unset=True)
        # status is NOT NULL; an explicit null leaves it unchanged
        if changes.get("status") is None:
            changes.pop("status", None)
        for name, value in changes.items():
            setattr(row, name, value)

        try:
            await db.commit()
            await db.refresh(row)
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("update_alert_error", alert_id=alert_id, error=str(e))
            raise StoreError("Failed to update alert") from e

        updated = to_response(row)
        logger.info("alert_updated", alert_id=alert_id, fields=sorted(changes))

        await _publish(EventType.ALERT_UPDATED, updated.model_dump(mode="json", by_alias=True))
        return updated

    @staticmethod
    async def delete_alert(db: AsyncSession, alert_id: str) -> bool:
        """
        Delete an alert.

        Returns:
            bool: True if a row was deleted, False if none existed

        Raises:
            StoreError: If the database write fails
        """
        row = await db.get(TradingAlert, alert_id)
        if row is None:
            logger.info("alert_not_found", alert_id=alert_id)
            return False

        try:
            await db.delete(row)
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("delete_alert_error", alert_id=alert_id, error=str(e))
            raise StoreError("Failed to delete alert") from e

        logger.info("alert_deleted", alert_id=alert_id)
        await _publish(EventType.ALERT_DELETED, {"id": alert_id})
        return True

    @staticmethod
    async def get_stats(db: AsyncSession) -> AlertStats:
        """
        Count alerts by status and by action.

        Returns:
            AlertStats: Aggregate counts
        """
        try:
            status_rows = await db.execute(
                select(TradingAlert.status, func.count()).group_by(TradingAlert.status)
            )
            action_rows = await db.execute(
                select(TradingAlert.action, func.count()).group_by(TradingAlert.action)
            )
        except SQLAlchemyError as e:
            logger.error("alert_stats_error", error=str(e))
            raise StoreError("Failed to fetch alert statistics") from e

        by_status = {status: count for status, count in status_rows.all()}
        by_action = {action: count for action, count in action_rows.all()}

        return AlertStats(
            total=sum(by_status.values()),
            active=by_status.get(AlertStatus.ACTIVE.value, 0),
            completed=by_status.get(AlertStatus.COMPLETED.value, 0),
            stopped=by_status.get(AlertStatus.STOPPED.value, 0),
            buy_count=by_action.get(AlertAction.BUY.value, 0),
            sell_count=by_action.get(AlertAction.SELL.value, 0),
        )
