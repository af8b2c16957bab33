"""
PURPOSE: Webhook ingestion processor for the alert relay.

Bridges inbound webhook payloads to the alert store: runs the normalization
pipeline, inserts accepted alerts through AlertService (which publishes the
alert_created event that drives live updates and notifications), and keeps
ingestion counters for the status endpoint.

CALLED BY:
    - api/routes_webhook.py (POST /api/webhook, /submit, /test)
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional
from uuid import uuid4

from sqlalchemy.ext.asyncio import AsyncSession

from alert_relay.config.constants import EventType
from alert_relay.schemas.alert import AlertResponse
from alert_relay.services.alert_service import AlertService
from alert_relay.utils.logger import get_logger
from alert_relay.utils.time_utils import get_utc_now
from alert_relay.webhook.errors import StoreError
from alert_relay.webhook.pipeline import ParseFailure, normalize_alert

logger = get_logger(__name__)


@dataclass(frozen=True)
class IngestResult:
    """
    Outcome of one ingestion attempt.

    Exactly one of alert / parse_failure / store_error is set.
    """

    alert: Optional[AlertResponse] = None
    parse_failure: Optional[ParseFailure] = None
    store_error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.alert is not None


def decode_text_payload(text: str) -> Any:
    """
    PURPOSE: Interpret a non-JSON-typed body or a manual submission string.

    TradingView sometimes sends JSON with a text/plain content type, so the
    text is tried as JSON first and kept as raw text otherwise.

    Args:
        text: Body text.

    Returns:
        The decoded JSON value, or the text itself.
    """
    stripped = text.strip()
    if not stripped:
        return text
    try:
        return json.loads(stripped)
    except ValueError:
        return text


def build_test_alert() -> Dict[str, str]:
    """Canned structured alert used by the dashboard 'send test alert' action."""
    return {
        "action": "BUY",
        "symbol": "EURUSD",
        "timeframe": "15",
        "entry": "1.1565",
        "target": "1.1598",
        "stop": "1.1532",
        "id": f"test_{uuid4().hex[:12]}",
        "rr": "1.2",
        "risk": "1%",
    }


class WebhookProcessor:
    """
    PURPOSE: Normalizes webhook payloads and persists the accepted ones.

    Attributes:
        _total_received: Payloads seen since start.
        _total_stored: Payloads stored as alerts.
        _total_rejected: Payloads that failed to parse.
        _total_store_failures: Parsed payloads the store refused.
        _last_alert_time: ISO-8601 timestamp of the most recent stored alert.
    """

    def __init__(self) -> None:
        self._total_received: int = 0
        self._total_stored: int = 0
        self._total_rejected: int = 0
        self._total_store_failures: int = 0
        self._last_alert_time: Optional[str] = None

    # ════════════════════════════════════════════════════════════════
    # Public API
    # ════════════════════════════════════════════════════════════════

    async def ingest(self, db: AsyncSession, raw: Any, source: str = "webhook") -> IngestResult:
        """
        PURPOSE: Normalize one payload and store it when it parses.

        Parse failures and store failures come back as an IngestResult; this
        method does not raise for either.

        Args:
            db: Async database session.
            raw: Payload as received (string, mapping, or other JSON value).
            source: Where the payload came from (webhook, manual, test).

        Returns:
            IngestResult: Stored alert or the failure that stopped it.
        """
        self._total_received += 1

        result = normalize_alert(raw)
        if not result.ok:
            self._total_rejected += 1
            logger.warning(
                "webhook_alert_rejected",
                source=source,
                stage=result.failure.stage,
                kind=result.kind.value,
                reason=result.failure.reason,
            )
            return IngestResult(parse_failure=result.failure)

        try:
            stored = await AlertService.create_alert(db, result.alert)
        except StoreError as e:
            self._total_store_failures += 1
            logger.error(
                "webhook_alert_store_failed",
                source=source,
                alert_id=result.alert.id,
                error=str(e),
            )
            return IngestResult(store_error=str(e))

        self._total_stored += 1
        self._last_alert_time = get_utc_now().isoformat()

        logger.info(
            "webhook_alert_processed",
            source=source,
            kind=result.kind.value,
            alert_id=stored.id,
            symbol=stored.symbol,
            action=stored.action,
        )
        return IngestResult(alert=stored)

    def get_status(self) -> Dict[str, Any]:
        """
        PURPOSE: Return ingestion counters for the liveness payload.

        Returns:
            dict: {total_received, total_stored, total_rejected,
                   total_store_failures, last_alert_time, event}
        """
        return {
            "total_received": self._total_received,
            "total_stored": self._total_stored,
            "total_rejected": self._total_rejected,
            "total_store_failures": self._total_store_failures,
            "last_alert_time": self._last_alert_time,
            "event": EventType.ALERT_CREATED.value,
        }


# ════════════════════════════════════════════════════════════════
# Module-level singleton
# ════════════════════════════════════════════════════════════════

_processor_instance: Optional[WebhookProcessor] = None


def get_webhook_processor() -> WebhookProcessor:
    """
    PURPOSE: Return the module-level WebhookProcessor singleton.

    Creates the instance on first call; subsequent calls return the same object.

    CALLED BY: routes_webhook.py route handlers

    Returns:
        WebhookProcessor: Singleton processor instance.
    """
    global _processor_instance
    if _processor_instance is None:
        _processor_instance = WebhookProcessor()
    return _processor_instance
