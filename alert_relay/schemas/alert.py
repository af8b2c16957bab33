"""
Alert-related Pydantic schemas for the alert relay API.

Handles validation and serialization of canonical alerts, stored alert
responses, partial updates and statistical aggregations. Attributes are
snake_case in Python and camelCase on the wire (rawMessage, strategyName).
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from alert_relay.config.constants import DEFAULT_TIMEFRAME

AlertActionLiteral = Literal["BUY", "SELL"]
AlertStatusLiteral = Literal["active", "completed", "stopped"]
AlertOutcomeLiteral = Literal["win", "loss", "breakeven"]


class CanonicalAlert(BaseModel):
    """
    Normalized, storable representation of a trading signal.

    Attributes:
        id: Caller-supplied or generated alert identifier
        action: Trade direction, 'BUY' or 'SELL'
        symbol: Upper-cased instrument symbol (e.g., 'EURUSD')
        timeframe: Chart timeframe, '15' when the sender gave none
        entry: Entry price or quantity, kept as text
        target: Optional take-profit level
        stop: Optional stop-loss level
        rr: Optional risk/reward ratio
        risk: Optional risk descriptor (e.g., '1%')
        message: Optional human-readable description
        strategy_name: Strategy name recovered from a strategy message
        raw_message: Verbatim serialization of the original payload
        status: Lifecycle tag, 'active' at creation
        outcome: Post-hoc win/loss/breakeven tag, never set at creation
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    id: str
    action: AlertActionLiteral
    symbol: str
    timeframe: str = DEFAULT_TIMEFRAME
    entry: str
    target: Optional[str] = None
    stop: Optional[str] = None
    rr: Optional[str] = None
    risk: Optional[str] = None
    message: Optional[str] = None
    strategy_name: Optional[str] = None
    raw_message: str
    status: AlertStatusLiteral = "active"
    outcome: Optional[AlertOutcomeLiteral] = None

    @field_validator("symbol", "entry")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Validate that mandatory text fields are not empty."""
        if not v or not v.strip():
            raise ValueError("must be a non-empty string")
        return v


class AlertResponse(CanonicalAlert):
    """
    Stored alert as returned by the API.

    Attributes:
        timestamp: When the alert was stored (row created_at)
        updated_at: Last modification time of the row
    """

    timestamp: datetime
    updated_at: Optional[datetime] = None


class AlertUpdate(BaseModel):
    """
    Partial update applied to a stored alert.

    Status and outcome are constrained to their enums; any status may follow
    any other and outcome may be set regardless of status.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    status: Optional[AlertStatusLiteral] = None
    outcome: Optional[AlertOutcomeLiteral] = None
    target: Optional[str] = None
    stop: Optional[str] = None
    rr: Optional[str] = None
    risk: Optional[str] = None
    message: Optional[str] = None


class AlertList(BaseModel):
    """Page of stored alerts, newest first."""

    alerts: List[AlertResponse]
    count: int
    limit: int
    offset: int


class AlertStats(BaseModel):
    """
    Aggregate counts over all stored alerts.

    Attributes:
        total: Number of stored alerts
        active: Alerts with status 'active'
        completed: Alerts with status 'completed'
        stopped: Alerts with status 'stopped'
        buy_count: BUY alerts
        sell_count: SELL alerts
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total: int = 0
    active: int = 0
    completed: int = 0
    stopped: int = 0
    buy_count: int = 0
    sell_count: int = 0


class ManualSubmission(BaseModel):
    """Body of the manual submission endpoint: a raw string or an object."""

    data: str | dict
