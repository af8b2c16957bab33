"""
PURPOSE: System-level API routes for the alert relay.

Provides health and version endpoints for load balancers and the dashboard.
"""

import time

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from alert_relay.db.engine import get_db
from alert_relay.events.bus import get_event_bus
from alert_relay.schemas import HealthCheck, VersionInfo
from alert_relay.utils.logger import get_logger
from alert_relay.utils.time_utils import get_utc_now
from alert_relay.version import get_version


logger = get_logger(__name__)
router = APIRouter(prefix="/system", tags=["system"])

_startup_time = time.time()


@router.get("/health", response_model=HealthCheck)
async def health_check(db: AsyncSession = Depends(get_db)) -> HealthCheck:
    """
    PURPOSE: Report whether the store is reachable and Redis fan-out is live.

    CALLED BY: Load balancers, uptime monitors, dashboard status card

    Returns:
        HealthCheck: status 'ok' when the database answers, 'degraded' otherwise
    """
    database = "ok"
    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning("health_check_database_failed", error=str(e))
        database = str(e)

    return HealthCheck(
        status="ok" if database == "ok" else "degraded",
        version=get_version().get("version", "unknown"),
        uptime_seconds=round(time.time() - _startup_time, 1),
        database=database,
        redis_connected=get_event_bus().is_connected,
        timestamp=get_utc_now(),
    )


@router.get("/version", response_model=VersionInfo)
async def version_info() -> VersionInfo:
    """PURPOSE: Return version metadata from version.json."""
    return VersionInfo(**get_version())
