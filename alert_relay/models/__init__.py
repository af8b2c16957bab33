"""Database models for the alert relay.

Import all models here so Base.metadata knows every table at startup.
"""

from alert_relay.models.alert import TradingAlert

__all__ = [
    "TradingAlert",
]
