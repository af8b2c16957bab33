"""
Event bus package: change notifications for stored alerts.
"""

from alert_relay.events.bus import EventBus, get_event_bus, set_event_bus
from alert_relay.events.types import EventPayload

__all__ = ["EventBus", "EventPayload", "get_event_bus", "set_event_bus"]
