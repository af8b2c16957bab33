"""
PURPOSE: Rate limiting configuration for the alert relay API using slowapi.

Provides a shared Limiter instance keyed by client IP address and
pre-defined rate limit strings for different endpoint categories:
    - WEBHOOK_LIMIT: public inbound webhook (configurable, default 60/minute)
    - WRITE_LIMIT:   moderate (30/minute): manual submission, updates, deletes
    - READ_LIMIT:    relaxed  (120/minute): list/get endpoints, stats
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from alert_relay.config.settings import settings

# Shared limiter instance, keyed by client IP
limiter = Limiter(key_func=get_remote_address)

# ── Rate limit tiers ──────────────────────────────────────────
WEBHOOK_LIMIT = settings.WEBHOOK_RATE_LIMIT
WRITE_LIMIT = "30/minute"
READ_LIMIT = "120/minute"
