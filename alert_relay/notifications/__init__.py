"""
PURPOSE: Notification delivery for stored alerts.
"""

from typing import Optional

from alert_relay.notifications.notifier import (
    AlertNotification,
    NotificationConfig,
    NotificationDispatcher,
    build_notification,
)

_dispatcher: Optional[NotificationDispatcher] = None


def set_notification_dispatcher(dispatcher: Optional[NotificationDispatcher]) -> None:
    """Store the dispatcher built at startup (or a test double)."""
    global _dispatcher
    _dispatcher = dispatcher


def get_notification_dispatcher() -> NotificationDispatcher:
    """
    Return the shared NotificationDispatcher, creating it from settings on first call.
    """
    global _dispatcher
    if _dispatcher is None:
        from alert_relay.config.settings import settings
        _dispatcher = NotificationDispatcher(NotificationConfig.from_settings(settings))
    return _dispatcher


__all__ = [
    "AlertNotification",
    "NotificationConfig",
    "NotificationDispatcher",
    "build_notification",
    "get_notification_dispatcher",
    "set_notification_dispatcher",
]
