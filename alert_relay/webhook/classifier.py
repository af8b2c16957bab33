"""
PURPOSE: Decide which extractor interprets a raw webhook payload.

The decision is a tagged value (FormatKind + payload) so classification can
be tested on its own and extraction can dispatch on it exhaustively.

Precedence:
    1. mapping with action BUY/SELL (any case), string symbol, string entry -> STRUCTURED
    2. plain string, or mapping with a non-empty string `message`           -> FREE_TEXT
    3. any other mapping                                                     -> HEURISTIC
    4. anything else (None, numbers, lists, ...)                             -> UNRECOGNIZED

CALLED BY:
    - webhook/pipeline.py normalize_alert()
"""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from alert_relay.config.constants import ACTION_VALUES


class FormatKind(str, Enum):
    """Interpretation strategy chosen for a raw payload."""

    STRUCTURED = "structured"
    FREE_TEXT = "free_text"
    HEURISTIC = "heuristic"
    UNRECOGNIZED = "unrecognized"


@dataclass(frozen=True)
class Classification:
    """
    Result of classifying a raw payload.

    Attributes:
        kind: Chosen interpretation strategy.
        payload: The mapping for STRUCTURED/HEURISTIC, the message text for
            FREE_TEXT, the untouched input for UNRECOGNIZED.
    """

    kind: FormatKind
    payload: Any


def is_structured_alert(data: Any) -> bool:
    """True when data already carries explicit action/symbol/entry fields."""
    if not isinstance(data, Mapping):
        return False
    action = data.get("action")
    return (
        isinstance(action, str)
        and action.upper() in ACTION_VALUES
        and isinstance(data.get("symbol"), str)
        and isinstance(data.get("entry"), str)
    )


def classify(raw: Any) -> Classification:
    """
    PURPOSE: Select the extractor for a raw payload. Pure, no side effects.

    Args:
        raw: Payload as received (string, mapping, or anything else).

    Returns:
        Classification: Tagged decision with the payload the extractor needs.
    """
    if is_structured_alert(raw):
        return Classification(FormatKind.STRUCTURED, raw)

    if isinstance(raw, str):
        return Classification(FormatKind.FREE_TEXT, raw)

    if isinstance(raw, Mapping):
        message = raw.get("message")
        if isinstance(message, str) and message:
            return Classification(FormatKind.FREE_TEXT, message)
        return Classification(FormatKind.HEURISTIC, raw)

    return Classification(FormatKind.UNRECOGNIZED, raw)
