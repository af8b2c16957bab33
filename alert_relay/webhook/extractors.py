"""
PURPOSE: Extract candidate alert records from classified webhook payloads.

Three extractors, one per FormatKind:

    extract_structured  - mapping with explicit action/symbol/entry fields
    extract_free_text   - TradingView strategy order-fill message
    extract_heuristic   - arbitrary mapping searched through FIELD_ALIASES

Each returns a candidate dict keyed by CanonicalAlert attribute names, or
raises ExtractionError when action, symbol or entry cannot be recovered.
Extractors never merge partial results from one another.

CALLED BY:
    - webhook/pipeline.py normalize_alert()
"""

import json
import re
from collections.abc import Mapping
from typing import Any, Dict, Optional, Tuple
from uuid import uuid4

from alert_relay.config.constants import (
    ALERT_ID_PREFIX,
    DEFAULT_STRATEGY_NAME,
    DEFAULT_TIMEFRAME,
    AlertAction,
    AlertStatus,
)
from alert_relay.utils.time_utils import get_epoch_ms
from alert_relay.webhook.errors import ExtractionError

# Ordered candidate keys per semantic field, first match wins.
# New aliases are added here, not in the extractor bodies.
FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    "action": ("action", "side", "order_action", "type"),
    "symbol": ("symbol", "ticker", "instrument", "pair"),
    "entry": ("entry", "price", "entry_price", "fill_price", "close"),
    "timeframe": ("timeframe", "tf"),
    "target": ("target", "tp"),
    "stop": ("stop", "sl"),
    "rr": ("rr", "risk_reward"),
    "risk": ("risk",),
    "message": ("message", "msg"),
}

# Substrings that resolve a free-form side/action value to a direction
_ACTION_KEYWORDS: Tuple[Tuple[AlertAction, Tuple[str, ...]], ...] = (
    (AlertAction.BUY, ("BUY", "LONG")),
    (AlertAction.SELL, ("SELL", "SHORT")),
)

# TradingView strategy fill message, e.g.
# "26/7/2025 VIDYA Strategy (14, 20): order BUY @ 100 filled on EURUSD. New strategy position is 100"
_ACTION_RE = re.compile(r"order\s+(BUY|SELL)\s+@", re.IGNORECASE)
_SYMBOL_RE = re.compile(r"filled\s+on\s+([A-Z0-9]+)", re.IGNORECASE)
_CONTRACTS_RE = re.compile(r"@\s+(\d+(?:\.\d+)?)\s+filled", re.IGNORECASE)
_POSITION_RE = re.compile(r"position\s+is\s+(-?\d+(?:\.\d+)?)", re.IGNORECASE)
_STRATEGY_RE = re.compile(r"^[\d/\s]+(.+?Strategy.*?)(?:\s*\(|:)", re.IGNORECASE)

_DEFAULT_CONTRACTS = "1"


# ════════════════════════════════════════════════════════════════
# Shared helpers
# ════════════════════════════════════════════════════════════════


def generate_alert_id() -> str:
    """
    PURPOSE: Build a collision-resistant id for single-process use.

    Returns:
        str: alert_<epoch-ms>_<9 hex chars>
    """
    return f"{ALERT_ID_PREFIX}_{get_epoch_ms()}_{uuid4().hex[:9]}"


def serialize_raw(raw: Any) -> str:
    """
    PURPOSE: Verbatim serialization of a payload for the rawMessage audit field.

    Strings are kept as-is; everything else becomes compact JSON. Values
    JSON cannot encode (non-string keys, cycles) fall back to repr().
    """
    if isinstance(raw, str):
        return raw
    try:
        return json.dumps(raw, separators=(",", ":"), ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        return repr(raw)


def _as_text(value: Any) -> Optional[str]:
    """Render a scalar as text, keeping None as None."""
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


def _first_present(data: Mapping, field: str) -> Any:
    """First truthy value among the aliases of field, or None."""
    for key in FIELD_ALIASES[field]:
        value = data.get(key)
        if value:
            return value
    return None


def _resolve_action(data: Mapping) -> Optional[str]:
    """Resolve a direction from the action aliases by keyword containment."""
    for key in FIELD_ALIASES["action"]:
        value = data.get(key)
        if not value:
            continue
        text = str(value).upper()
        for action, keywords in _ACTION_KEYWORDS:
            if any(keyword in text for keyword in keywords):
                return action.value
    return None


def _resolve_symbol(data: Mapping) -> Optional[str]:
    """First non-empty string among the symbol aliases."""
    for key in FIELD_ALIASES["symbol"]:
        value = data.get(key)
        if value and isinstance(value, str):
            return value
    return None


# ════════════════════════════════════════════════════════════════
# Extractors
# ════════════════════════════════════════════════════════════════


def extract_structured(data: Mapping) -> Dict[str, Any]:
    """
    PURPOSE: Map an explicitly shaped alert onto the canonical fields.

    The classifier has already checked action/symbol/entry, so this never
    fails. Optional fields are copied verbatim.

    Args:
        data: Mapping with action BUY/SELL, string symbol and string entry.

    Returns:
        dict: Candidate alert.
    """
    return {
        "id": _as_text(data.get("id")) or generate_alert_id(),
        "action": data["action"].upper(),
        "symbol": data["symbol"].upper(),
        "timeframe": _as_text(data.get("timeframe") or DEFAULT_TIMEFRAME),
        "entry": data["entry"],
        "target": _as_text(data.get("target")),
        "stop": _as_text(data.get("stop")),
        "rr": _as_text(data.get("rr")),
        "risk": _as_text(data.get("risk")),
        "message": _as_text(data.get("message")),
        "raw_message": serialize_raw(data),
        "status": AlertStatus.ACTIVE.value,
    }


def extract_free_text(text: str, raw_message: Optional[str] = None) -> Dict[str, Any]:
    """
    PURPOSE: Recover an alert from a TradingView strategy order-fill message.

    Each field is its own case-insensitive match over the text. The message
    carries no price, so the filled quantity becomes the entry.

    Args:
        text: Message text.
        raw_message: Serialized original payload when the text came out of a
            mapping's `message` field; defaults to the text itself.

    Returns:
        dict: Candidate alert.

    Raises:
        ExtractionError: If the order action or the filled symbol is missing.
    """
    action_match = _ACTION_RE.search(text)
    symbol_match = _SYMBOL_RE.search(text)

    if not action_match or not symbol_match:
        raise ExtractionError(
            "Could not extract action and symbol from message",
            detail={
                "has_action": bool(action_match),
                "has_symbol": bool(symbol_match),
            },
        )

    contracts_match = _CONTRACTS_RE.search(text)
    position_match = _POSITION_RE.search(text)
    strategy_match = _STRATEGY_RE.search(text)

    contracts = contracts_match.group(1) if contracts_match else _DEFAULT_CONTRACTS
    position = position_match.group(1) if position_match else contracts
    strategy_name = strategy_match.group(1).strip() if strategy_match else DEFAULT_STRATEGY_NAME

    return {
        "id": generate_alert_id(),
        "action": action_match.group(1).upper(),
        "symbol": symbol_match.group(1).upper(),
        "timeframe": DEFAULT_TIMEFRAME,
        "entry": contracts,
        "message": f"{strategy_name} - Position: {position}",
        "strategy_name": strategy_name,
        "raw_message": raw_message if raw_message is not None else text,
        "status": AlertStatus.ACTIVE.value,
    }


def extract_heuristic(data: Mapping) -> Dict[str, Any]:
    """
    PURPOSE: Best-effort field recovery from an arbitrarily shaped mapping.

    Args:
        data: Mapping that is neither structured nor a message carrier.

    Returns:
        dict: Candidate alert.

    Raises:
        ExtractionError: If action, symbol or entry cannot be resolved.
    """
    action = _resolve_action(data)
    symbol = _resolve_symbol(data)
    entry = _first_present(data, "entry")

    if not action or not symbol or not entry:
        raise ExtractionError(
            "Could not resolve action, symbol and entry from object keys",
            detail={
                "has_action": bool(action),
                "has_symbol": bool(symbol),
                "has_entry": bool(entry),
                "keys": sorted(str(k) for k in data.keys())[:20],
            },
        )

    return {
        "id": _as_text(data.get("id")) or generate_alert_id(),
        "action": action,
        "symbol": symbol.upper(),
        "timeframe": _as_text(_first_present(data, "timeframe")) or DEFAULT_TIMEFRAME,
        "entry": _as_text(entry),
        "target": _as_text(_first_present(data, "target")),
        "stop": _as_text(_first_present(data, "stop")),
        "rr": _as_text(_first_present(data, "rr")),
        "risk": _as_text(_first_present(data, "risk")),
        "message": _as_text(_first_present(data, "message")),
        "raw_message": serialize_raw(data),
        "status": AlertStatus.ACTIVE.value,
    }
