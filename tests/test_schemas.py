"""
PURPOSE: Tests for Pydantic schemas.

Tests validation and wire format of alert models:
- CanonicalAlert mandatory fields and enum constraints
- camelCase aliases on the wire, snake_case in Python
- AlertUpdate partial updates
"""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from alert_relay.config.constants import AlertOutcome, AlertStatus
from alert_relay.schemas.alert import (
    AlertResponse,
    AlertStats,
    AlertUpdate,
    CanonicalAlert,
    ManualSubmission,
)


def _alert(**overrides):
    data = {
        "id": "alert_1_abc",
        "action": "BUY",
        "symbol": "EURUSD",
        "entry": "1.1565",
        "raw_message": "{}",
    }
    data.update(overrides)
    return CanonicalAlert(**data)


class TestCanonicalAlertSchema:
    """Test CanonicalAlert Pydantic schema."""

    def test_defaults(self):
        """Test timeframe, status and outcome defaults."""
        alert = _alert()
        assert alert.timeframe == "15"
        assert alert.status == "active"
        assert alert.outcome is None

    def test_invalid_action(self):
        """Test that lower-case or unknown actions are rejected."""
        with pytest.raises(ValidationError):
            _alert(action="buy")
        with pytest.raises(ValidationError):
            _alert(action="HOLD")

    def test_blank_symbol(self):
        """Test that a whitespace-only symbol is rejected."""
        with pytest.raises(ValidationError):
            _alert(symbol="  ")

    def test_invalid_outcome(self):
        """Test outcome is restricted to win/loss/breakeven."""
        with pytest.raises(ValidationError):
            _alert(outcome="draw")

    def test_wire_aliases(self):
        """Test the wire form uses camelCase keys."""
        dumped = _alert(strategy_name="VIDYA Strategy").model_dump(by_alias=True)
        assert dumped["rawMessage"] == "{}"
        assert dumped["strategyName"] == "VIDYA Strategy"
        assert "raw_message" not in dumped

    def test_accepts_camel_case_input(self):
        """Test camelCase keys populate snake_case attributes."""
        alert = CanonicalAlert.model_validate({
            "id": "x",
            "action": "SELL",
            "symbol": "BTCUSD",
            "entry": "50",
            "rawMessage": "raw",
            "strategyName": "S",
        })
        assert alert.raw_message == "raw"
        assert alert.strategy_name == "S"


class TestAlertResponseSchema:
    """Test AlertResponse schema."""

    def test_timestamp_on_wire(self):
        """Test the stored timestamp and updatedAt are serialized."""
        now = datetime(2025, 7, 26, 12, 0, tzinfo=timezone.utc)
        response = AlertResponse(
            id="x",
            action="BUY",
            symbol="EURUSD",
            entry="1",
            raw_message="{}",
            timestamp=now,
            updated_at=now,
        )
        dumped = response.model_dump(mode="json", by_alias=True)
        assert dumped["timestamp"].startswith("2025-07-26T12:00:00")
        assert "updatedAt" in dumped


class TestAlertUpdateSchema:
    """Test AlertUpdate schema."""

    def test_partial_update_tracks_set_fields(self):
        """Test only provided fields are reported as set."""
        update = AlertUpdate(status="completed", outcome="win")
        assert update.model_dump(exclude_unset=True) == {"status": "completed", "outcome": "win"}

    def test_accepts_every_lifecycle_value(self):
        """Test every status and outcome constant is a valid update."""
        for status in AlertStatus:
            assert AlertUpdate(status=status.value).status == status.value
        for outcome in AlertOutcome:
            assert AlertUpdate(outcome=outcome.value).outcome == outcome.value

    def test_invalid_status(self):
        """Test status is restricted to active/completed/stopped."""
        with pytest.raises(ValidationError):
            AlertUpdate(status="archived")


class TestAlertStatsSchema:
    """Test AlertStats schema."""

    def test_defaults_and_aliases(self):
        """Test counts default to zero and use camelCase on the wire."""
        dumped = AlertStats(total=2, buy_count=2).model_dump(by_alias=True)
        assert dumped["total"] == 2
        assert dumped["buyCount"] == 2
        assert dumped["sellCount"] == 0


class TestManualSubmissionSchema:
    """Test ManualSubmission schema."""

    def test_accepts_string_or_object(self):
        """Test data may be raw text or an object."""
        assert ManualSubmission(data="order BUY").data == "order BUY"
        assert ManualSubmission(data={"side": "buy"}).data == {"side": "buy"}

    def test_rejects_missing_data(self):
        """Test data is required."""
        with pytest.raises(ValidationError):
            ManualSubmission()
