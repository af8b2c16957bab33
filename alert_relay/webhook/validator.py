"""
PURPOSE: Minimum-viable-record checks applied to every extracted candidate.

A candidate is accepted iff action is exactly BUY or SELL and symbol and
entry are non-empty strings. Accepted candidates are promoted to
CanonicalAlert; rejected ones raise AlertValidationError, which the
pipeline turns into a structured failure.

CALLED BY:
    - webhook/pipeline.py normalize_alert()
"""

from typing import Any, List, Mapping

from pydantic import ValidationError

from alert_relay.config.constants import ACTION_VALUES
from alert_relay.schemas.alert import CanonicalAlert
from alert_relay.webhook.errors import AlertValidationError


def _is_filled(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def find_violations(candidate: Mapping[str, Any]) -> List[str]:
    """
    PURPOSE: List the mandatory fields a candidate gets wrong.

    Args:
        candidate: Candidate alert dict (or CanonicalAlert dump).

    Returns:
        list[str]: Human-readable violations; empty when the candidate is valid.
    """
    violations: List[str] = []
    if candidate.get("action") not in ACTION_VALUES:
        violations.append("action must be BUY or SELL")
    if not _is_filled(candidate.get("symbol")):
        violations.append("symbol must be a non-empty string")
    if not _is_filled(candidate.get("entry")):
        violations.append("entry must be a non-empty string")
    return violations


def is_valid_alert(candidate: Mapping[str, Any]) -> bool:
    """True when the candidate satisfies every mandatory-field rule."""
    return not find_violations(candidate)


def validate_candidate(candidate: Mapping[str, Any]) -> CanonicalAlert:
    """
    PURPOSE: Accept a candidate and promote it to a CanonicalAlert.

    Args:
        candidate: Candidate alert dict produced by an extractor.

    Returns:
        CanonicalAlert: Validated record.

    Raises:
        AlertValidationError: If a mandatory field is missing or invalid, or
            an optional field has an unusable type.
    """
    violations = find_violations(candidate)
    if violations:
        raise AlertValidationError(
            "Alert data is missing required fields",
            detail={"violations": violations},
        )

    try:
        return CanonicalAlert.model_validate(dict(candidate))
    except ValidationError as e:
        raise AlertValidationError(
            "Alert data failed schema validation",
            detail={"violations": [err["msg"] for err in e.errors()]},
        ) from e
