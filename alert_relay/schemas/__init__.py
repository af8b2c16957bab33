"""
Pydantic v2 schemas for the alert relay API.

This module exports all schema classes used throughout the API
for request/response validation and documentation.
"""

from .alert import (
    AlertList,
    AlertResponse,
    AlertStats,
    AlertUpdate,
    CanonicalAlert,
    ManualSubmission,
)
from .system import HealthCheck, VersionInfo

__all__ = [
    # Alert schemas
    "CanonicalAlert",
    "AlertResponse",
    "AlertUpdate",
    "AlertList",
    "AlertStats",
    "ManualSubmission",
    # System schemas
    "HealthCheck",
    "VersionInfo",
]
