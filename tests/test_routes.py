import pytest
from fastapi.testclient import TestClient

from src.dependencies import (
    get_clock,
    get_conversation_service,
    get_credit_gate,
    get_ledger,
    get_warning_tracker,
)
from src.interfaces.credits import CreditAction
from src.main import app
from src.services.auth import create_access_token

ADMIN_HEADERS = {"X-Admin-Secret": "test-admin-secret"}
CRON_HEADERS = {"Authorization": "Bearer test-cron-secret"}


@pytest.fixture
def client(clock, ledger, gate, tracker, conversation):
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_ledger] = lambda: ledger
    app.dependency_overrides[get_credit_gate] = lambda: gate
    app.dependency_overrides[get_warning_tracker] = lambda: tracker
    app.dependency_overrides[get_conversation_service] = lambda: conversation
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token('alice')}"}


class TestCredits:
    def test_status_requires_auth(self, client):
        assert client.get("/credits/status").status_code in (401, 403)
        assert client.get("/credits/status", headers={"Authorization": "Bearer nope"}).status_code == 401

    def test_status(self, client, auth_headers):
        response = client.get("/credits/status", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["tier"] == "core"
        assert data["usage_percent"] == 0
        assert data["can_proceed"] is True

    def test_consume(self, client, auth_headers, ledger):
        response = client.post("/credits/consume", json={"action": "normal_chat"}, headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["allowed"] is True
        assert response.json()["verdict"]["usage_percent"] == 2
        assert ledger.load("alice").consumed_for(CreditAction.normal_chat) == 1

    def test_consume_forbidden_action(self, client, auth_headers):
        response = client.post("/credits/consume", json={"action": "skill_session"}, headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["allowed"] is False

    def test_consume_unknown_action(self, client, auth_headers):
        response = client.post("/credits/consume", json={"action": "teleport"}, headers=auth_headers)

        assert response.status_code == 422

    def test_warning(self, client, auth_headers, ledger):
        with ledger.checkout("alice") as account:
            account.consumed[CreditAction.normal_chat] = 45

        first = client.post("/credits/warning", headers=auth_headers).json()
        second = client.post("/credits/warning", headers=auth_headers).json()

        assert first["warning"] == "soft"
        assert first["message"]
        assert second["warning"] is None

    def test_update_tier_requires_admin_secret(self, client):
        body = {"user_id": "alice", "tier": "plus"}

        assert client.put("/credits/tier", json=body).status_code == 401
        assert client.put("/credits/tier", json=body, headers={"X-Admin-Secret": "wrong"}).status_code == 401

    def test_update_tier(self, client, auth_headers):
        response = client.put(
            "/credits/tier", json={"user_id": "alice", "tier": "plus", "is_premium": True}, headers=ADMIN_HEADERS
        )

        assert response.status_code == 200
        assert response.json()["tier"] == "plus"
        assert response.json()["is_premium"] is True
        assert client.get("/credits/status", headers=auth_headers).json()["is_premium"] is True

    def test_unlimited_tier_status(self, client, auth_headers):
        client.put("/credits/tier", json={"user_id": "alice", "tier": "pro"}, headers=ADMIN_HEADERS)

        data = client.get("/credits/status", headers=auth_headers).json()
        assert data["tier"] == "pro"
        assert data["is_premium"] is False
        assert data["unbounded"] is True

    def test_reset_daily(self, client, ledger, clock):
        with ledger.checkout("alice") as account:
            account.consumed[CreditAction.normal_chat] = 10

        assert client.post("/credits/reset-daily").status_code == 401

        clock.advance(days=1)
        response = client.post("/credits/reset-daily", headers=CRON_HEADERS)

        assert response.status_code == 200
        assert response.json() == {"accounts_reset": 1, "reset_date": clock.today().isoformat()}
        assert ledger.load("alice").consumed == {}


class TestAgents:
    def test_domains(self, client):
        response = client.get("/agents/domains")

        assert response.status_code == 200
        domains = response.json()
        assert len(domains) == 17
        notification = next(domain for domain in domains if domain["id"] == "notification")
        assert notification["actions"] == {"set_reminder": ["title", "time"]}

    def test_route(self, client, auth_headers):
        response = client.post("/agents/route", json={"message": "log my gym workout"}, headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["fallback"] is False
        assert [match["domain_id"] for match in data["matches"]] == ["fitness"]
        assert data["matches"][0]["mode"] == "predict_confirm"
        assert data["matches"][0]["requires_approval"] is True

    def test_mode(self, client, auth_headers):
        response = client.post(
            "/agents/mode", json={"domain_id": "finance", "global_mode": "full_auto"}, headers=auth_headers
        )

        assert response.json() == {"domain_id": "finance", "mode": "full_auto", "requires_approval": False}

    def test_mode_unknown_domain(self, client, auth_headers):
        response = client.post(
            "/agents/mode", json={"domain_id": "teleport", "global_mode": "adaptive"}, headers=auth_headers
        )

        assert response.status_code == 404

    def test_action(self, client, auth_headers):
        response = client.post(
            "/agents/actions",
            json={"domain_id": "energy", "action": "log_water", "params": {"amount": 500}},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Logged 500 ml of water."

    def test_action_missing_parameters(self, client, auth_headers):
        response = client.post(
            "/agents/actions",
            json={"domain_id": "notification", "action": "set_reminder", "params": {"title": "Stretch"}},
            headers=auth_headers,
        )

        assert response.status_code == 400


class TestChat:
    def test_message(self, client, auth_headers):
        response = client.post("/chat/messages", json={"message": "I want to save money"}, headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["reply"] == "Sure, let's do it."
        assert [match["domain_id"] for match in data["matches"]] == ["planner", "finance"]
        assert data["verdict"]["usage_percent"] == 2

    def test_empty_message(self, client, auth_headers):
        assert client.post("/chat/messages", json={"message": ""}, headers=auth_headers).status_code == 422

    def test_requires_auth(self, client):
        assert client.post("/chat/messages", json={"message": "hi"}).status_code in (401, 403)
