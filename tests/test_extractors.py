"""
PURPOSE: Tests for the three candidate extractors.

Tests field recovery per payload shape:
- Structured mappings copied onto canonical fields
- Strategy order-fill messages parsed field by field
- Arbitrary mappings searched through the alias table in priority order
"""

import json

import pytest

from alert_relay.webhook.errors import ExtractionError
from alert_relay.webhook.extractors import (
    FIELD_ALIASES,
    extract_free_text,
    extract_heuristic,
    extract_structured,
    generate_alert_id,
    serialize_raw,
)


class TestHelpers:
    """Test id generation and raw serialization."""

    def test_generate_alert_id_format(self):
        """Test ids look like alert_<epoch-ms>_<suffix>."""
        alert_id = generate_alert_id()
        prefix, epoch_ms, suffix = alert_id.split("_")
        assert prefix == "alert"
        assert epoch_ms.isdigit()
        assert len(suffix) == 9

    def test_generate_alert_id_unique(self):
        """Test consecutive ids differ."""
        assert len({generate_alert_id() for _ in range(200)}) == 200

    def test_serialize_raw_keeps_strings(self):
        """Test strings are stored verbatim."""
        assert serialize_raw("order BUY") == "order BUY"

    def test_serialize_raw_compact_json(self):
        """Test mappings become compact JSON."""
        assert serialize_raw({"a": 1, "b": "x"}) == '{"a":1,"b":"x"}'

    def test_serialize_raw_non_string_keys(self):
        """Test a mapping JSON cannot encode falls back to its repr."""
        raw = {("a", "b"): 1, "side": "buy"}
        assert serialize_raw(raw) == repr(raw)

    def test_serialize_raw_cyclic_mapping(self):
        """Test a self-referencing mapping still yields text."""
        raw = {"side": "buy"}
        raw["self"] = raw
        assert isinstance(serialize_raw(raw), str)

    def test_alias_table_priority_order(self):
        """Test the primary name is tried first for every field."""
        for name, aliases in FIELD_ALIASES.items():
            assert aliases[0] == name


class TestExtractStructured:
    """Test the structured extractor."""

    def test_structured_normalizes_case(self, structured_payload):
        """Test action and symbol are upper-cased."""
        candidate = extract_structured(structured_payload)
        assert candidate["action"] == "BUY"
        assert candidate["symbol"] == "EURUSD"
        assert candidate["entry"] == "1.1565"
        assert candidate["target"] == "1.1598"
        assert candidate["stop"] == "1.1532"

    def test_structured_defaults(self, structured_payload):
        """Test default timeframe, active status and generated id."""
        candidate = extract_structured(structured_payload)
        assert candidate["timeframe"] == "15"
        assert candidate["status"] == "active"
        assert candidate["id"].startswith("alert_")

    def test_structured_keeps_supplied_id_and_timeframe(self, structured_payload):
        """Test caller-supplied id and timeframe are kept."""
        candidate = extract_structured({**structured_payload, "id": "abc", "timeframe": "60"})
        assert candidate["id"] == "abc"
        assert candidate["timeframe"] == "60"

    @pytest.mark.parametrize("timeframe", [0, False, "", None])
    def test_structured_falsy_timeframe_defaults(self, structured_payload, timeframe):
        """Test an empty or falsy timeframe falls back to the default."""
        candidate = extract_structured({**structured_payload, "timeframe": timeframe})
        assert candidate["timeframe"] == "15"

    def test_structured_raw_message(self, structured_payload):
        """Test rawMessage is the serialized input."""
        candidate = extract_structured(structured_payload)
        assert json.loads(candidate["raw_message"]) == structured_payload


class TestExtractFreeText:
    """Test the strategy message extractor."""

    def test_free_text_full_message(self, strategy_message):
        """Test every field is recovered from a complete message."""
        candidate = extract_free_text(strategy_message)
        assert candidate["action"] == "BUY"
        assert candidate["symbol"] == "EURUSD"
        assert candidate["entry"] == "100"
        assert candidate["strategy_name"] == "VIDYA Strategy"
        assert candidate["message"] == "VIDYA Strategy - Position: 100"
        assert candidate["raw_message"] == strategy_message
        assert candidate["timeframe"] == "15"

    def test_free_text_case_insensitive(self):
        """Test patterns ignore case and the symbol is upper-cased."""
        candidate = extract_free_text("Order sell @ 2 FILLED ON ethusd")
        assert candidate["action"] == "SELL"
        assert candidate["symbol"] == "ETHUSD"
        assert candidate["entry"] == "2"

    def test_free_text_signed_position(self):
        """Test a negative position is kept in the message."""
        candidate = extract_free_text(
            "Strategy (8,14): order SELL @ 50 filled on BTCUSD. New strategy position is -50"
        )
        assert "Position: -50" in candidate["message"]

    def test_free_text_defaults(self):
        """Test missing quantity, position and strategy name fall back to defaults."""
        candidate = extract_free_text("order SELL @ filled on BTCUSD")
        assert candidate["entry"] == "1"
        assert candidate["strategy_name"] == "TradingView Strategy"
        assert candidate["message"] == "TradingView Strategy - Position: 1"

    def test_free_text_raw_message_override(self):
        """Test the serialized container replaces the text as rawMessage."""
        candidate = extract_free_text(
            "order BUY @ 1 filled on ETHUSD",
            raw_message='{"message":"order BUY @ 1 filled on ETHUSD"}',
        )
        assert candidate["raw_message"] == '{"message":"order BUY @ 1 filled on ETHUSD"}'

    def test_free_text_missing_symbol(self):
        """Test a message without 'filled on' is rejected."""
        with pytest.raises(ExtractionError) as exc_info:
            extract_free_text("order BUY @ 100")
        assert exc_info.value.stage == "extraction"
        assert exc_info.value.detail["has_symbol"] is False

    def test_free_text_missing_action(self):
        """Test a message without an order action is rejected."""
        with pytest.raises(ExtractionError):
            extract_free_text("something filled on EURUSD")


class TestExtractHeuristic:
    """Test alias-driven recovery from arbitrary mappings."""

    def test_heuristic_aliases(self):
        """Test side/ticker/price resolve through their aliases."""
        candidate = extract_heuristic({"side": "short", "ticker": "AAPL", "price": "230.5"})
        assert candidate["action"] == "SELL"
        assert candidate["symbol"] == "AAPL"
        assert candidate["entry"] == "230.5"

    def test_heuristic_long_means_buy(self):
        """Test LONG resolves to BUY by containment."""
        candidate = extract_heuristic({"order_action": "go long", "pair": "eurusd", "close": 1.2})
        assert candidate["action"] == "BUY"
        assert candidate["symbol"] == "EURUSD"
        assert candidate["entry"] == "1.2"

    def test_heuristic_action_alias_priority(self):
        """Test the first alias wins when several are present."""
        candidate = extract_heuristic(
            {"action": "buy", "side": "sell", "symbol": "X", "price": "1"}
        )
        assert candidate["action"] == "BUY"

    def test_heuristic_skips_unclassifiable_action(self):
        """Test an action alias that names no direction is passed over."""
        candidate = extract_heuristic(
            {"side": "limit", "type": "short", "symbol": "X", "price": "1"}
        )
        assert candidate["action"] == "SELL"

    def test_heuristic_entry_alias_priority(self):
        """Test empty aliases are skipped and earlier aliases win."""
        candidate = extract_heuristic(
            {"side": "buy", "symbol": "X", "entry": "", "price": "2", "close": "3"}
        )
        assert candidate["entry"] == "2"

    def test_heuristic_optional_aliases(self):
        """Test tp/sl/tf/risk_reward/msg aliases fill optional fields."""
        candidate = extract_heuristic({
            "side": "buy",
            "symbol": "X",
            "price": "1",
            "tp": "2",
            "sl": "0.5",
            "tf": "60",
            "risk_reward": "2.0",
            "msg": "note",
        })
        assert candidate["target"] == "2"
        assert candidate["stop"] == "0.5"
        assert candidate["timeframe"] == "60"
        assert candidate["rr"] == "2.0"
        assert candidate["message"] == "note"

    def test_heuristic_symbol_must_be_string(self):
        """Test non-string symbol values are skipped."""
        candidate = extract_heuristic({"side": "buy", "symbol": 5, "ticker": "aapl", "price": "1"})
        assert candidate["symbol"] == "AAPL"

    def test_heuristic_symbol_alias_priority(self):
        """Test symbol wins over ticker when both are present."""
        candidate = extract_heuristic({"side": "buy", "ticker": "aapl", "symbol": "msft", "price": "1"})
        assert candidate["symbol"] == "MSFT"

    def test_heuristic_missing_entry(self):
        """Test a mapping without any entry alias is rejected."""
        with pytest.raises(ExtractionError) as exc_info:
            extract_heuristic({"side": "buy", "symbol": "X"})
        assert exc_info.value.detail["has_entry"] is False
        assert exc_info.value.detail["has_action"] is True

    def test_heuristic_unrelated_keys(self):
        """Test a mapping with no recognizable keys is rejected."""
        with pytest.raises(ExtractionError):
            extract_heuristic({"foo": "bar"})
