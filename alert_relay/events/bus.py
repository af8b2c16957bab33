"""
Event bus for the alert relay.

Local handler registry with optional Redis pub/sub fan-out, so other
processes (dashboards, workers) can follow alert changes too.
"""

from typing import Awaitable, Callable, Optional
from uuid import uuid4

import redis.asyncio as redis

from alert_relay.events.types import EventPayload
from alert_relay.utils.logger import get_logger

EventHandler = Callable[[EventPayload], Awaitable[None]]


class EventBus:
    """
    Change-notification bus for stored alerts.

    PURPOSE: Decouple the store from its listeners (notifications, live
    WebSocket clients, other processes via Redis).

    CALLED BY: AlertService after committed writes; main.py wires handlers.

    Attributes:
        CHANNEL: Redis channel name for all events.
        _redis: Async Redis client instance, None when fan-out is disabled.
        _redis_url: Redis connection URL (empty disables Redis).
        _logger: Logger instance.
        _handlers: Registry of local event handlers by event type.
        _instance_id: Tags published events so Redis echoes are skipped.
    """

    CHANNEL: str = "alert_relay:events"

    def __init__(self, redis_url: str = "") -> None:
        """
        Initialize the bus without connecting.

        Args:
            redis_url: Redis connection URL (e.g., 'redis://localhost:6379/0').
                Empty keeps the bus process-local.
        """
        self._redis_url: str = redis_url
        self._redis: Optional[redis.Redis] = None
        self._logger = get_logger("events.bus")
        self._handlers: dict[str, list[EventHandler]] = {}
        self._instance_id: str = uuid4().hex

    @property
    def is_connected(self) -> bool:
        return self._redis is not None

    async def connect(self) -> None:
        """
        Establish the Redis connection when a URL is configured.

        Should be called during application startup.

        Raises:
            Exception: If Redis is configured but unreachable.
        """
        if not self._redis_url:
            self._logger.info("redis_fanout_disabled")
            return

        try:
            client = redis.from_url(self._redis_url, decode_responses=True)
            await client.ping()
            self._redis = client
            self._logger.info("redis_connected", redis_url=self._redis_url)
        except Exception as e:
            self._logger.error("redis_connection_failed", error=str(e))
            raise

    async def disconnect(self) -> None:
        """
        Close the Redis connection if one is open.

        Should be called during application shutdown.
        """
        if self._redis:
            try:
                await self._redis.aclose()
                self._logger.info("redis_disconnected")
            except Exception as e:
                self._logger.error("redis_disconnection_failed", error=str(e))
            finally:
                self._redis = None

    async def publish(
        self,
        event_type: str,
        data: dict,
        source: str = "unknown",
        severity: str = "INFO"
    ) -> EventPayload:
        """
        Publish event to Redis (when connected) and invoke local handlers.

        Handler failures are logged and never propagate to the publisher.

        Args:
            event_type: Type of event being published.
            data: Event payload dictionary.
            source: Module/component originating the event.
            severity: Event severity level (INFO, WARNING, ERROR, CRITICAL).

        Returns:
            EventPayload: The envelope that was dispatched.
        """
        payload = EventPayload(
            event_type=event_type,
            source=source,
            data=data,
            severity=severity,
            origin=self._instance_id,
        )

        # Publish to Redis
        if self._redis:
            try:
                await self._redis.publish(self.CHANNEL, payload.model_dump_json())
                self._logger.info(
                    "event_published",
                    event_type=event_type,
                    source=source,
                    correlation_id=payload.correlation_id
                )
            except Exception as e:
                self._logger.error("redis_publish_failed", event_type=event_type, error=str(e))

        await self._dispatch(payload)
        return payload

    async def _dispatch(self, payload: EventPayload) -> None:
        """Run every local handler for the payload's event type."""
        for handler in list(self._handlers.get(payload.event_type, [])):
            try:
                await handler(payload)
            except Exception as e:
                self._logger.error(
                    "handler_error",
                    event_type=payload.event_type,
                    handler=getattr(handler, "__name__", repr(handler)),
                    error=str(e),
                    correlation_id=payload.correlation_id
                )

    def on(self, event_type: str, handler: EventHandler) -> None:
        """
        Register a handler for an event type.

        Args:
            event_type: Event type to subscribe to.
            handler: Async callable(EventPayload) -> None.
        """
        handlers = self._handlers.setdefault(event_type, [])
        if handler not in handlers:
            handlers.append(handler)
            self._logger.info("handler_registered", event_type=event_type)

    def off(self, event_type: str, handler: EventHandler) -> None:
        """Remove a previously registered handler; unknown handlers are ignored."""
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    async def subscribe_redis(self) -> None:
        """
        Listen to the Redis channel and dispatch events from other processes.

        Events published by this bus instance are skipped; their local
        handlers already ran in publish(). Runs until cancelled.
        """
        if not self._redis:
            self._logger.warning("redis_not_connected_cannot_subscribe")
            return

        try:
            pubsub = self._redis.pubsub()
            await pubsub.subscribe(self.CHANNEL)
            self._logger.info("redis_subscription_started", channel=self.CHANNEL)

            async for message in pubsub.listen():
                if message["type"] != "message":
                    continue
                try:
                    payload = EventPayload.model_validate_json(message["data"])
                except Exception as e:
                    self._logger.error("message_parsing_failed", error=str(e))
                    continue
                if payload.origin == self._instance_id:
                    continue
                await self._dispatch(payload)
        except Exception as e:
            self._logger.error("redis_subscription_error", error=str(e))
            raise


# Global event bus singleton
_bus: Optional[EventBus] = None


def set_event_bus(bus: Optional[EventBus]) -> None:
    """
    Store an EventBus instance as the global singleton.

    CALLED BY: main.py on_startup() after connecting; tests to inject a bus.

    Args:
        bus: EventBus instance to share, or None to reset.
    """
    global _bus
    _bus = bus


def get_event_bus() -> EventBus:
    """
    Get or create the global EventBus singleton.

    Returns the instance stored via set_event_bus(); otherwise creates an
    unconnected bus configured from settings.

    Returns:
        EventBus: Global singleton instance.
    """
    global _bus
    if _bus is None:
        from alert_relay.config.settings import settings
        _bus = EventBus(settings.REDIS_URL)
    return _bus
