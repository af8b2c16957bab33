"""
PURPOSE: HTTP tests for the webhook ingestion routes.

Tests the ingestion boundary contract of /api/webhook:
- JSON, text and JSON-as-text bodies are accepted and stored
- Unparseable bodies return 400 with the failing stage
- Store failures return 500, unsupported methods 405
- Manual submission and test-alert endpoints share the same contract
"""

import pytest


WEBHOOK_URL = "/api/webhook"


@pytest.mark.asyncio
class TestReceiveWebhook:
    """Test POST /api/webhook."""

    async def test_structured_json(self, client, structured_payload, event_bus):
        """Test a structured JSON alert is stored and returned."""
        response = await client.post(WEBHOOK_URL, json=structured_payload)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["alert"]["action"] == "BUY"
        assert body["alert"]["symbol"] == "EURUSD"
        assert body["alert"]["status"] == "active"
        assert "rawMessage" in body["alert"]
        assert event_bus.captured[0].event_type == "alert_created"

    async def test_text_body(self, client, strategy_message):
        """Test a plain-text strategy message is parsed."""
        response = await client.post(
            WEBHOOK_URL,
            content=strategy_message,
            headers={"content-type": "text/plain"},
        )

        assert response.status_code == 200
        alert = response.json()["alert"]
        assert alert["symbol"] == "EURUSD"
        assert alert["entry"] == "100"
        assert alert["strategyName"] == "VIDYA Strategy"
        assert alert["rawMessage"] == strategy_message

    async def test_json_sent_as_text(self, client):
        """Test JSON with a text/plain content type is decoded as JSON."""
        response = await client.post(
            WEBHOOK_URL,
            content='{"side":"short","ticker":"AAPL","price":"230.5"}',
            headers={"content-type": "text/plain"},
        )

        assert response.status_code == 200
        alert = response.json()["alert"]
        assert alert["action"] == "SELL"
        assert alert["symbol"] == "AAPL"

    async def test_invalid_json(self, client):
        """Test a malformed JSON body returns 400."""
        response = await client.post(
            WEBHOOK_URL,
            content="{not json",
            headers={"content-type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid JSON body"}

    async def test_unparseable_alert(self, client):
        """Test an unrecognizable object returns 400 with the stage."""
        response = await client.post(WEBHOOK_URL, json={"foo": "bar"})

        assert response.status_code == 400
        assert response.json() == {"error": "Unable to parse alert data", "stage": "extraction"}

    async def test_bare_number(self, client):
        """Test a JSON number fails classification."""
        response = await client.post(WEBHOOK_URL, json=42)

        assert response.status_code == 400
        assert response.json()["stage"] == "classification"

    async def test_duplicate_id_is_store_failure(self, client, structured_payload):
        """Test the store rejecting a duplicate id returns 500."""
        payload = {**structured_payload, "id": "fixed-id"}

        first = await client.post(WEBHOOK_URL, json=payload)
        second = await client.post(WEBHOOK_URL, json=payload)

        assert first.status_code == 200
        assert second.status_code == 500
        assert second.json() == {"error": "Failed to save alert"}

    async def test_cors_header(self, client, structured_payload):
        """Test responses carry the permissive CORS header."""
        response = await client.post(WEBHOOK_URL, json=structured_payload)
        assert response.headers["access-control-allow-origin"] == "*"


@pytest.mark.asyncio
class TestWebhookOtherMethods:
    """Test GET, OPTIONS and unsupported methods on /api/webhook."""

    async def test_get_liveness(self, client):
        """Test GET returns the static liveness payload."""
        response = await client.get(WEBHOOK_URL)

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "TradingView Webhook Endpoint"
        assert "total_received" in body["processor"]
        assert body["notifications"]["enabled"] is False

    async def test_options(self, client):
        """Test OPTIONS answers 200 for preflight."""
        response = await client.options(WEBHOOK_URL)

        assert response.status_code == 200
        assert "POST" in response.headers["access-control-allow-methods"]

    @pytest.mark.parametrize("method", ["PUT", "PATCH", "DELETE"])
    async def test_method_not_allowed(self, client, method):
        """Test unsupported methods return 405."""
        response = await client.request(method, WEBHOOK_URL)

        assert response.status_code == 405
        assert response.json() == {"error": "Method not allowed"}


@pytest.mark.asyncio
class TestDashboardEndpoints:
    """Test manual submission and the test alert."""

    async def test_submit_text(self, client, strategy_message):
        """Test a pasted strategy message is stored."""
        response = await client.post(f"{WEBHOOK_URL}/submit", json={"data": strategy_message})

        assert response.status_code == 200
        assert response.json()["message"] == "Alert submitted"
        assert response.json()["alert"]["symbol"] == "EURUSD"

    async def test_submit_json_string(self, client):
        """Test a pasted JSON string is decoded before parsing."""
        response = await client.post(
            f"{WEBHOOK_URL}/submit",
            json={"data": '{"action":"SELL","symbol":"btcusd","entry":"50"}'},
        )

        assert response.status_code == 200
        assert response.json()["alert"]["symbol"] == "BTCUSD"

    async def test_submit_object(self, client, structured_payload):
        """Test an object submission is stored."""
        response = await client.post(f"{WEBHOOK_URL}/submit", json={"data": structured_payload})
        assert response.status_code == 200

    async def test_submit_unparseable(self, client):
        """Test unparseable manual input returns 400."""
        response = await client.post(f"{WEBHOOK_URL}/submit", json={"data": "hello"})

        assert response.status_code == 400
        assert response.json()["error"] == "Unable to parse alert data"

    async def test_submit_missing_data(self, client):
        """Test a body without data fails request validation."""
        response = await client.post(f"{WEBHOOK_URL}/submit", json={})
        assert response.status_code == 422

    async def test_test_alert(self, client):
        """Test the canned alert goes through the full path."""
        response = await client.post(f"{WEBHOOK_URL}/test")

        assert response.status_code == 200
        alert = response.json()["alert"]
        assert alert["id"].startswith("test_")
        assert alert["symbol"] == "EURUSD"
        assert alert["rr"] == "1.2"
