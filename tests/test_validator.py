"""
PURPOSE: Tests for minimum-viable-record validation.

Tests acceptance rules applied to every extracted candidate:
- action must be exactly BUY or SELL
- symbol and entry must be non-empty strings
- accepted candidates become CanonicalAlert instances
"""

import pytest

from alert_relay.schemas.alert import CanonicalAlert
from alert_relay.webhook.errors import AlertValidationError
from alert_relay.webhook.validator import find_violations, is_valid_alert, validate_candidate


def _candidate(**overrides):
    base = {
        "id": "alert_1_abc",
        "action": "BUY",
        "symbol": "EURUSD",
        "entry": "1.1565",
        "raw_message": "{}",
        "status": "active",
    }
    base.update(overrides)
    return base


class TestFindViolations:
    """Test violation reporting."""

    def test_valid_candidate_has_no_violations(self):
        """Test a complete candidate passes."""
        assert find_violations(_candidate()) == []
        assert is_valid_alert(_candidate()) is True

    def test_lowercase_action_is_invalid(self):
        """Test action must already be normalized to upper case."""
        assert find_violations(_candidate(action="buy")) == ["action must be BUY or SELL"]

    @pytest.mark.parametrize("symbol", ["", "   ", None, 5])
    def test_bad_symbol(self, symbol):
        """Test blank, missing or non-string symbols are invalid."""
        assert is_valid_alert(_candidate(symbol=symbol)) is False

    @pytest.mark.parametrize("entry", ["", None, 1.5])
    def test_bad_entry(self, entry):
        """Test blank, missing or non-string entries are invalid."""
        assert is_valid_alert(_candidate(entry=entry)) is False

    def test_all_violations_reported(self):
        """Test every failing rule is listed."""
        assert len(find_violations({})) == 3


class TestValidateCandidate:
    """Test promotion to CanonicalAlert."""

    def test_returns_canonical_alert(self):
        """Test a valid candidate is promoted."""
        alert = validate_candidate(_candidate(target="1.2"))
        assert isinstance(alert, CanonicalAlert)
        assert alert.symbol == "EURUSD"
        assert alert.target == "1.2"
        assert alert.outcome is None

    def test_rejects_missing_fields(self):
        """Test a missing mandatory field raises with the validation stage."""
        with pytest.raises(AlertValidationError) as exc_info:
            validate_candidate(_candidate(symbol=""))
        assert exc_info.value.stage == "validation"
        assert exc_info.value.detail["violations"] == ["symbol must be a non-empty string"]

    def test_rejects_bad_optional_type(self):
        """Test schema errors on optional fields are reported as validation failures."""
        with pytest.raises(AlertValidationError):
            validate_candidate(_candidate(status="archived"))
