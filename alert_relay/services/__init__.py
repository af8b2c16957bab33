"""
Service layer for the alert relay.
"""

from alert_relay.services.alert_service import AlertService

__all__ = ["AlertService"]
