"""
Event handlers for alert change notifications.

Logs every store change and forwards newly created alerts to the
notification dispatcher.
"""

import asyncio
from typing import Optional, Set

from alert_relay.config.constants import EventType
from alert_relay.events.types import EventPayload
from alert_relay.notifications import NotificationDispatcher, get_notification_dispatcher
from alert_relay.utils.logger import get_logger


async def handle_alert_event(payload: EventPayload) -> None:
    """
    Log alert store changes (created, updated, deleted) for the audit trail.

    CALLED BY: EventBus on ALERT_CREATED, ALERT_UPDATED, ALERT_DELETED events.

    Args:
        payload: EventPayload containing the alert (or its id for deletes).
    """
    logger = get_logger("events.handlers")
    logger.info(
        "alert_event",
        event_type=payload.event_type,
        source=payload.source,
        alert_id=payload.data.get("id"),
        symbol=payload.data.get("symbol"),
        correlation_id=payload.correlation_id
    )


# In-flight notification deliveries; strong references keep the tasks alive
_pending_notifications: Set[asyncio.Task] = set()


def _on_notification_done(task: asyncio.Task) -> None:
    """Drop a finished delivery and log anything it raised."""
    _pending_notifications.discard(task)
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        get_logger("events.handlers").error(
            "notification_task_failed",
            error=str(error),
            exception_type=type(error).__name__,
        )


def make_notification_handler(dispatcher: Optional[NotificationDispatcher] = None):
    """
    Build the ALERT_CREATED handler that sends an outbound notification.

    Delivery runs as a background task so the publishing request does not
    wait on transport timeouts. Task failures are logged, never raised.

    Args:
        dispatcher: Dispatcher to use; defaults to the shared instance.

    Returns:
        Async handler callable(EventPayload) -> None.
    """
    async def handle_alert_created_notify(payload: EventPayload) -> None:
        target = dispatcher or get_notification_dispatcher()
        task = asyncio.create_task(target.notify(payload.data))
        _pending_notifications.add(task)
        task.add_done_callback(_on_notification_done)

    return handle_alert_created_notify


async def wait_for_pending_notifications(timeout: Optional[float] = None) -> None:
    """
    Wait for in-flight notification deliveries to finish.

    CALLED BY: main.py on_shutdown(), tests.

    Args:
        timeout: Seconds to wait before giving up; None waits indefinitely.
    """
    if not _pending_notifications:
        return
    await asyncio.wait(list(_pending_notifications), timeout=timeout)


def register_all_handlers(bus, dispatcher: Optional[NotificationDispatcher] = None) -> None:
    """
    Wire up all event handlers to the event bus.

    CALLED BY: Application startup sequence.

    Args:
        bus: EventBus instance to register handlers with.
        dispatcher: Notification dispatcher for ALERT_CREATED events.
    """
    logger = get_logger("events.handlers")

    bus.on(EventType.ALERT_CREATED.value, handle_alert_event)
    bus.on(EventType.ALERT_UPDATED.value, handle_alert_event)
    bus.on(EventType.ALERT_DELETED.value, handle_alert_event)

    bus.on(EventType.ALERT_CREATED.value, make_notification_handler(dispatcher))

    logger.info("all_handlers_registered")
