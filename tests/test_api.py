# =============================================================================
# tests/test_api.py - Endpoint Tests
# =============================================================================
# Drives the FastAPI app through TestClient:
# - Auth (bearer token required, identity from the token)
# - Error envelope {"success": false, "error": ...}
# - CORS preflight
# - Payments, phone verification, subscriptions, notifications, search, maps
#
# Supabase, gateways and Termii are mocked at the service layer.
# =============================================================================

from __future__ import annotations

import time
from unittest.mock import MagicMock, patch

import httpx
import pytest
from fastapi.testclient import TestClient
from jose import jwt

from app.config import settings
from app.main import app
from lib import google_maps
from lib.payment_gateways import HostedPayment, PaymentGateway, VerifiedPayment


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def auth_headers(user_id):
    token = jwt.encode(
        {
            "sub": str(user_id),
            "aud": "authenticated",
            "email": "ada@example.com",
            "exp": int(time.time()) + 3600,
        },
        settings.SUPABASE_JWT_SECRET,
        algorithm="HS256",
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def gateway():
    mock = MagicMock(spec=PaymentGateway)
    mock.name = "flutterwave"
    mock.supports_currency.return_value = True
    mock.create_payment.return_value = HostedPayment(link="https://checkout.flutterwave.com/pay/abc")
    with patch("core.services.payment_service.get_gateway", return_value=mock):
        yield mock


INITIATE_BODY = {
    "plan": "monthly",
    "currency": "NGN",
    "customer_email": "ada@example.com",
    "customer_name": "Ada Obi",
    "redirect_url": "https://findwhosabi.com/payment-success",
}


# =============================================================================
# Health & CORS
# =============================================================================

class TestHealth:

    def test_health(self, client):
        response = client.get("/api/v1/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_live(self, client):
        assert client.get("/api/v1/health/live").json()["status"] == "alive"

    def test_preflight_is_open(self, client):
        response = client.options(
            "/api/v1/payments/verify",
            headers={
                "Origin": "https://findwhosabi.com",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "authorization, content-type",
            },
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"


# =============================================================================
# Payments
# =============================================================================

class TestPaymentEndpoints:

    def test_initiate_requires_token(self, client):
        response = client.post("/api/v1/payments/initiate", json=INITIATE_BODY)

        assert response.status_code == 401
        assert response.json() == {"success": False, "error": "No authorization header"}

    def test_initiate_rejects_bad_token(self, client):
        response = client.post(
            "/api/v1/payments/initiate",
            json=INITIATE_BODY,
            headers={"Authorization": "Bearer not-a-jwt"},
        )

        assert response.status_code == 401
        assert response.json()["error"] == "Unauthorized"

    def test_initiate(self, client, auth_headers, gateway, user_id):
        with patch("core.services.payment_service.SupabaseClient") as mock_db:
            mock_db.fetch_user.return_value = {"user_type": "provider"}
            mock_db.fetch_pricing.return_value = {"price": 2500}
            mock_db.fetch_currency.return_value = {"name": "Nigerian Naira", "symbol": "₦"}

            response = client.post("/api/v1/payments/initiate", json=INITIATE_BODY, headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["payment_link"] == "https://checkout.flutterwave.com/pay/abc"
        assert body["tx_ref"].startswith("FWS_0f8e2c1a_monthly_")
        assert body["currency_symbol"] == "₦"

        # Identity comes from the token, not the body
        mock_db.fetch_user.assert_called_once()
        assert str(mock_db.fetch_user.call_args.args[0]) == str(user_id)

    def test_initiate_missing_field(self, client, auth_headers):
        body = {k: v for k, v in INITIATE_BODY.items() if k != "redirect_url"}

        response = client.post("/api/v1/payments/initiate", json=body, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["success"] is False
        assert "redirect_url" in response.json()["error"]

    def test_initiate_pricing_not_found(self, client, auth_headers, gateway):
        with patch("core.services.payment_service.SupabaseClient") as mock_db:
            mock_db.fetch_user.return_value = None
            mock_db.fetch_pricing.return_value = None

            response = client.post("/api/v1/payments/initiate", json=INITIATE_BODY, headers=auth_headers)

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Plan pricing not found for selected currency"}

    def test_verify(self, client, gateway, user_id):
        gateway.verify.return_value = VerifiedPayment(
            tx_ref="FWS_0f8e2c1a_monthly_1",
            transaction_id="4975363",
            amount=2500,
            currency="NGN",
            metadata={"user_id": str(user_id), "plan": "monthly"},
        )

        with patch("core.services.payment_service.SupabaseClient") as mock_db, \
                patch("core.services.side_effects.SupabaseClient") as mock_effects_db:
            mock_db.update_user.return_value = {"id": str(user_id)}
            mock_effects_db.insert_notification.side_effect = Exception("insert failed")

            response = client.post(
                "/api/v1/payments/verify",
                json={"transaction_id": 4975363, "tx_ref": "FWS_0f8e2c1a_monthly_1"},
            )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["subscription"]["plan"] == "monthly"
        assert body["subscription"]["currency"] == "NGN"

    def test_verify_mismatch(self, client, gateway, user_id):
        gateway.verify.return_value = VerifiedPayment(
            tx_ref="FWS_other",
            transaction_id="1",
            amount=2500,
            currency="NGN",
            metadata={"user_id": str(user_id), "plan": "monthly"},
        )

        response = client.post("/api/v1/payments/verify", json={"transaction_id": "1", "tx_ref": "FWS_mine"})

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Transaction reference mismatch"}

    def test_verify_subscription_write_failure(self, client, gateway, user_id):
        gateway.verify.return_value = VerifiedPayment(
            tx_ref="FWS_mine",
            transaction_id="1",
            amount=2500,
            currency="NGN",
            metadata={"user_id": str(user_id), "plan": "monthly"},
        )

        with patch("core.services.payment_service.SupabaseClient") as mock_db:
            mock_db.update_user.return_value = None
            response = client.post("/api/v1/payments/verify", json={"transaction_id": "1", "tx_ref": "FWS_mine"})

        assert response.status_code == 500
        assert response.json()["error"] == "Failed to activate subscription"


# =============================================================================
# Phone Verification
# =============================================================================

class TestVerificationEndpoints:

    def test_sms_missing_phone(self, client):
        response = client.post("/api/v1/sms", json={"action": "send_verification"})

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Phone number is required"}

    def test_otp_invalid_action(self, client):
        response = client.post("/api/v1/otp", json={"phone": "+2348012345678", "action": "call_me"})

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid action"

    def test_sms_send(self, client):
        with patch("core.services.verification_service.SupabaseClient") as mock_db, \
                patch("core.services.verification_service.TermiiClient") as mock_termii:
            mock_db.update_user_by_phone.return_value = [{"id": "u1"}]

            response = client.post(
                "/api/v1/sms",
                json={"phone": "2348012345678", "action": "send_verification"},
            )

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Verification code sent successfully"}
        assert mock_termii.return_value.send_sms.call_args.args[0] == "+2348012345678"


# =============================================================================
# Subscriptions & Notifications
# =============================================================================

class TestUserEndpoints:

    def test_subscription_status(self, client, auth_headers, user_row):
        with patch("core.services.subscription_service.SupabaseClient") as mock_db:
            mock_db.fetch_user.return_value = user_row
            response = client.get("/api/v1/subscriptions/me", headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["plan"] == "yearly"
        assert "time_remaining" in body

    def test_subscription_requires_token(self, client):
        assert client.get("/api/v1/subscriptions/me").status_code == 401

    def test_notifications(self, client, auth_headers, user_id):
        rows = [
            {
                "id": "5b7c1f0e-3d1a-4e2b-8f9c-0a1b2c3d4e5f",
                "user_id": str(user_id),
                "title": "Subscription Activated!",
                "message": "Your monthly subscription has been activated.",
                "type": "success",
                "read": True,
                "created_at": "2026-03-01T12:00:00+00:00",
            }
        ]
        with patch("core.services.notification_service.SupabaseClient") as mock_db:
            mock_db.fetch_notifications.return_value = rows
            response = client.get("/api/v1/notifications?limit=10", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["total"] == 1
        assert response.json()["notifications"][0]["type"] == "success"
        assert response.json()["notifications"][0]["read"] is True
        mock_db.fetch_notifications.assert_called_once()
        assert mock_db.fetch_notifications.call_args.kwargs["limit"] == 10

    def test_notifications_with_null_columns(self, client, auth_headers, user_id):
        rows = [
            {
                "id": "5b7c1f0e-3d1a-4e2b-8f9c-0a1b2c3d4e5f",
                "user_id": str(user_id),
                "title": "Welcome",
                "message": "Complete your profile to get discovered.",
                "type": None,
                "read": None,
                "action_url": None,
                "created_at": "2026-03-01T12:00:00+00:00",
                "updated_at": None,
            }
        ]
        with patch("core.services.notification_service.SupabaseClient") as mock_db:
            mock_db.fetch_notifications.return_value = rows
            response = client.get("/api/v1/notifications", headers=auth_headers)

        assert response.status_code == 200
        notification = response.json()["notifications"][0]
        assert notification["type"] == "info"
        assert notification["read"] is False


# =============================================================================
# Search & Maps
# =============================================================================

class TestSearchEndpoint:

    def test_empty_filters_skip_database(self, client):
        with patch("core.services.search_service.SupabaseClient") as mock_db:
            response = client.post("/api/v1/search", json={})

        assert response.json() == {"results": [], "total": 0}
        mock_db.rpc.assert_not_called()

    def test_search(self, client):
        with patch("core.services.search_service.SupabaseClient") as mock_db:
            mock_db.rpc.return_value = [
                {"user_id": "u1", "name": "Tunde Plumbing", "skills": ["plumbing"], "match_score": 0.92},
            ]
            response = client.post("/api/v1/search", json={"search_term": "plumber", "location": "Lekki"})

        assert response.json()["total"] == 1
        assert response.json()["results"][0]["name"] == "Tunde Plumbing"
        function, params = mock_db.rpc.call_args.args
        assert function == "smart_search_providers"
        assert params["search_location"] == "Lekki"

    def test_provider_without_skills_or_tags(self, client):
        with patch("core.services.search_service.SupabaseClient") as mock_db:
            mock_db.rpc.return_value = [
                {"user_id": "u1", "name": "Tunde Plumbing", "skills": ["plumbing"], "tags": None, "match_score": 0.92},
                {"user_id": "u2", "name": "Ngozi Repairs", "skills": None, "tags": None, "match_score": 0.41},
            ]
            response = client.post("/api/v1/search", json={"search_term": "repairs"})

        assert response.status_code == 200
        results = response.json()["results"]
        assert response.json()["total"] == 2
        assert results[0]["tags"] == []
        assert results[1]["skills"] == []
        assert results[1]["tags"] == []


class TestMaps:

    def test_build_autocomplete(self):
        url, params = google_maps.build_request("places-autocomplete", {"input": "12 Admiralty"})
        assert url.endswith("/place/autocomplete/json")
        assert params == {"input": "12 Admiralty", "types": "address"}

    def test_geocode_requires_target(self):
        from app.exceptions import ValidationError

        with pytest.raises(ValidationError):
            google_maps.build_request("geocode", {})

    def test_proxy_adds_key(self):
        seen: list[httpx.Request] = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"status": "OK", "results": []})

        status, payload = google_maps.proxy(
            {"endpoint": "geocode", "address": "Lekki Phase 1"},
            client=httpx.Client(transport=httpx.MockTransport(handler)),
        )

        assert status == 200
        assert payload["status"] == "OK"
        assert seen[0].url.params["key"] == "test-maps-key"
        assert seen[0].url.params["address"] == "Lekki Phase 1"

    def test_endpoint_missing(self, client):
        response = client.post("/api/v1/maps", json={"input": "12 Admiralty"})

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Missing endpoint parameter"}
