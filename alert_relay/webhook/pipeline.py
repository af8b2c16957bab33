"""
PURPOSE: Alert normalization pipeline: classifier -> extractor -> validator.

normalize_alert() is pure and synchronous: one payload in, one ParseResult
out, no I/O and no shared state, so it is safe to call concurrently.
Parse failures never raise; they come back as a ParseFailure naming the
stage that rejected the input. Callers show a single "unable to parse"
outcome, logs keep the stage.

CALLED BY:
    - webhook/processor.py WebhookProcessor.ingest()
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from alert_relay.schemas.alert import CanonicalAlert
from alert_relay.utils.logger import get_logger
from alert_relay.webhook.classifier import FormatKind, classify
from alert_relay.webhook.errors import AlertParseError, ClassificationError
from alert_relay.webhook.extractors import (
    extract_free_text,
    extract_heuristic,
    extract_structured,
    serialize_raw,
)
from alert_relay.webhook.validator import validate_candidate

logger = get_logger(__name__)

PARSE_FAILURE_MESSAGE = "Unable to parse alert data"


@dataclass(frozen=True)
class ParseFailure:
    """
    Structured rejection returned by the pipeline.

    Attributes:
        stage: 'classification', 'extraction' or 'validation'.
        reason: Short diagnostic for logs.
        detail: Extra diagnostic context (never shown as the primary error).
    """

    stage: str
    reason: str
    detail: Dict[str, Any] = field(default_factory=dict)

    @property
    def message(self) -> str:
        return PARSE_FAILURE_MESSAGE


@dataclass(frozen=True)
class ParseResult:
    """Either a canonical alert or a failure, plus the path that was taken."""

    kind: FormatKind
    alert: Optional[CanonicalAlert] = None
    failure: Optional[ParseFailure] = None

    @property
    def ok(self) -> bool:
        return self.alert is not None


def _extract(kind: FormatKind, payload: Any, raw: Any) -> Dict[str, Any]:
    """Dispatch to the extractor for kind."""
    if kind is FormatKind.STRUCTURED:
        return extract_structured(payload)
    if kind is FormatKind.FREE_TEXT:
        raw_message = serialize_raw(raw) if isinstance(raw, Mapping) else None
        return extract_free_text(payload, raw_message=raw_message)
    if kind is FormatKind.HEURISTIC:
        return extract_heuristic(payload)
    raise ClassificationError(
        "Unsupported payload type",
        detail={"payload_type": type(raw).__name__},
    )


def normalize_alert(raw: Any) -> ParseResult:
    """
    PURPOSE: Normalize a raw webhook payload into a CanonicalAlert.

    Args:
        raw: Payload as received: a string, a mapping, or anything else
            (which is rejected at classification).

    Returns:
        ParseResult: alert set on success, failure set otherwise.
    """
    classification = classify(raw)

    try:
        candidate = _extract(classification.kind, classification.payload, raw)
        alert = validate_candidate(candidate)
    except AlertParseError as e:
        failure = ParseFailure(stage=e.stage, reason=e.reason, detail=e.detail)
        logger.warning(
            "alert_parse_failed",
            stage=failure.stage,
            kind=classification.kind.value,
            reason=failure.reason,
            detail=failure.detail,
        )
        return ParseResult(kind=classification.kind, failure=failure)

    logger.debug(
        "alert_parsed",
        kind=classification.kind.value,
        alert_id=alert.id,
        action=alert.action,
        symbol=alert.symbol,
    )
    return ParseResult(kind=classification.kind, alert=alert)
