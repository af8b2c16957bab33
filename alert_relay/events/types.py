"""
Event payload types for the alert relay event bus.

Defines EventPayload, the envelope used for every change notification.
"""

from datetime import datetime
from uuid import uuid4

from pydantic import BaseModel, Field

from alert_relay.utils.time_utils import get_utc_now


class EventPayload(BaseModel):
    """
    Standardized event payload for all events on the bus.

    PURPOSE: Ensure consistent structure for all events published to the event bus.
    USED BY: EventBus publish/subscribe operations.

    Attributes:
        event_type: Type of event (e.g., alert_created, alert_updated).
        source: Module or component that originated the event.
        data: Event-specific payload data as dictionary.
        timestamp: When the event was created (UTC).
        correlation_id: Unique ID for tracing related events across modules.
        severity: Event severity level (INFO, WARNING, ERROR, CRITICAL).
        origin: Id of the EventBus instance that published the event.
    """

    event_type: str = Field(
        ...,
        description="Type identifier for the event"
    )
    source: str = Field(
        ...,
        description="Module or component that generated this event"
    )
    data: dict = Field(
        default_factory=dict,
        description="Event-specific payload data"
    )
    timestamp: datetime = Field(
        default_factory=get_utc_now,
        description="UTC timestamp when event was created"
    )
    correlation_id: str = Field(
        default_factory=lambda: str(uuid4()),
        description="Unique correlation ID for tracing across modules"
    )
    severity: str = Field(
        default="INFO",
        description="Severity level: INFO, WARNING, ERROR, or CRITICAL"
    )
    origin: str = Field(
        default="",
        description="Publishing bus instance, used to skip self-echo from Redis"
    )
