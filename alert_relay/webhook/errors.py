"""
PURPOSE: Error taxonomy for alert ingestion.

Parse failures (classification, extraction, validation) share the
AlertParseError base and carry the pipeline stage that rejected the input.
The pipeline converts them into a structured ParseResult so they never
escape to the caller. Store and notification failures are separate: store
failures surface as HTTP 500, notification failures are always swallowed.
"""

from typing import Optional


class AlertParseError(Exception):
    """Base class for inputs that cannot be normalized into an alert."""

    stage: str = "parse"

    def __init__(self, reason: str, detail: Optional[dict] = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.detail = detail or {}


class ClassificationError(AlertParseError):
    """Input shape unrecognized: not a string and not a mapping."""

    stage = "classification"


class ExtractionError(AlertParseError):
    """Shape recognized but mandatory fields could not be recovered."""

    stage = "extraction"


class AlertValidationError(AlertParseError):
    """Candidate record has a missing or invalid mandatory field."""

    stage = "validation"


class StoreError(Exception):
    """The alert store rejected or failed a write."""


class NotificationError(Exception):
    """A notification transport failed to deliver an alert."""
