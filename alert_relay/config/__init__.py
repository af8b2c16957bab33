"""
PURPOSE: Export configuration settings and constants for the alert relay.

This module centralizes access to all configuration settings and constants
used throughout the alert relay service.
"""

from .constants import (
    ALERT_ID_PREFIX,
    DEFAULT_STRATEGY_NAME,
    DEFAULT_TIMEFRAME,
    AlertAction,
    AlertOutcome,
    AlertStatus,
    EventType,
)
from .settings import settings

__all__ = [
    "settings",
    "AlertAction",
    "AlertStatus",
    "AlertOutcome",
    "EventType",
    "ALERT_ID_PREFIX",
    "DEFAULT_STRATEGY_NAME",
    "DEFAULT_TIMEFRAME",
]
