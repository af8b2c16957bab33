"""
PURPOSE: API router initialization and exports for the alert relay.

This module aggregates the webhook, alert and system routers into a single
api_router that is included in the main FastAPI application.
"""

from fastapi import APIRouter

from alert_relay.api.routes_alerts import router as alerts_router
from alert_relay.api.routes_system import router as system_router
from alert_relay.api.routes_webhook import router as webhook_router

# Create the main API router
api_router = APIRouter(prefix="/api")

# Include all sub-routers
api_router.include_router(webhook_router)
api_router.include_router(alerts_router)
api_router.include_router(system_router)

__all__ = ["api_router"]
