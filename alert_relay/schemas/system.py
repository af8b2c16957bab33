"""
System-level Pydantic schemas for health and version endpoints.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class HealthCheck(BaseModel):
    """
    Service liveness payload.

    Attributes:
        status: 'ok' when the service can reach its store
        version: Running service version
        uptime_seconds: Seconds since the API process started
        database: 'ok' or the connection error text
        redis_connected: Whether cross-process fan-out is live
        timestamp: Server time of the check
    """

    status: str
    version: str
    uptime_seconds: float
    database: str
    redis_connected: bool
    timestamp: datetime


class VersionInfo(BaseModel):
    """Version metadata read from version.json."""

    version: str
    codename: Optional[str] = None
    updated_at: Optional[str] = None
    changelog: List[str] = []
