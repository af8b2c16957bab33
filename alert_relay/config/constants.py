"""
PURPOSE: Domain constants and enumerations for the alert relay.

Alert actions, lifecycle status and outcome tags mirror the values stored in
the trading_alerts table; EventType names the change-notification events
published on the event bus.
"""

from enum import Enum


class AlertAction(str, Enum):
    """Trade direction carried by an alert."""

    BUY = "BUY"
    SELL = "SELL"


class AlertStatus(str, Enum):
    """Lifecycle tag of a stored alert."""

    ACTIVE = "active"
    COMPLETED = "completed"
    STOPPED = "stopped"


class AlertOutcome(str, Enum):
    """Post-hoc result tag applied once the trade idea has played out."""

    WIN = "win"
    LOSS = "loss"
    BREAKEVEN = "breakeven"


class EventType(str, Enum):
    """Events published on the event bus after store writes."""

    ALERT_CREATED = "alert_created"
    ALERT_UPDATED = "alert_updated"
    ALERT_DELETED = "alert_deleted"


# Timeframe assumed when the sender does not provide one (minutes)
DEFAULT_TIMEFRAME = "15"

# Label used when a strategy message carries no recognizable strategy name
DEFAULT_STRATEGY_NAME = "TradingView Strategy"

# Generated alert ids look like alert_<epoch-ms>_<9 chars>
ALERT_ID_PREFIX = "alert"

ACTION_VALUES = frozenset(a.value for a in AlertAction)
