# =============================================================================
# tests/test_verification.py - Phone Verification Tests
# =============================================================================
# This module contains tests for:
# - Request routing and validation shared by both flows
# - LocalCodeVerification (locally generated 6-digit code)
# - TermiiPinVerification (provider pinId, phone_verifications fallback)
# - TermiiClient payloads against httpx.MockTransport
# =============================================================================

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, patch

import httpx
import pytest

from app.exceptions import GatewayError, PersistenceError, ValidationError
from core.models.verification import PhoneVerificationRequest
from core.services.verification_service import (
    LocalCodeVerification,
    TermiiPinVerification,
    generate_code,
)
from lib.supabase_client import SupabaseClientError
from lib.termii_client import PIN_ATTEMPTS, TermiiClient
from lib.utils import mask_phone, normalize_phone

PHONE = "+2348012345678"
NOW = datetime(2026, 1, 1, 10, 0, tzinfo=timezone.utc)


@pytest.fixture
def termii():
    mock = MagicMock(spec=TermiiClient)
    mock.send_otp.return_value = "pin-abc-123"
    mock.verify_otp.return_value = True
    return mock


@pytest.fixture
def mock_db():
    with patch("core.services.verification_service.SupabaseClient") as mock:
        mock.update_user_by_phone.return_value = [{"id": "u1"}]
        yield mock


def send(phone=PHONE):
    return PhoneVerificationRequest(phone=phone, action="send_verification")


def verify(code, phone=PHONE):
    return PhoneVerificationRequest(phone=phone, action="verify_code", code=code)


# =============================================================================
# Utility Tests
# =============================================================================

class TestPhoneUtils:

    def test_normalize_phone(self):
        assert normalize_phone("234 801 234 5678") == "+2348012345678"
        assert normalize_phone(" +234 801\t234 5678 ") == "+2348012345678"

    def test_mask_phone(self):
        assert mask_phone(PHONE) == "+234***78"
        assert mask_phone("+123") == "***"

    def test_generate_code_is_six_digits(self):
        for _ in range(50):
            code = generate_code()
            assert len(code) == 6
            assert 100000 <= int(code) <= 999999


# =============================================================================
# Shared Request Handling
# =============================================================================

class TestRequestHandling:

    def test_phone_required(self, termii, mock_db):
        with pytest.raises(ValidationError) as exc:
            LocalCodeVerification(termii=termii).handle(PhoneVerificationRequest(action="send_verification"))
        assert exc.value.message == "Phone number is required"

    def test_invalid_action(self, termii, mock_db):
        with pytest.raises(ValidationError) as exc:
            LocalCodeVerification(termii=termii).handle(PhoneVerificationRequest(phone=PHONE, action="reset"))
        assert exc.value.message == "Invalid action"

    def test_code_required_for_verify(self, termii, mock_db):
        with pytest.raises(ValidationError) as exc:
            LocalCodeVerification(termii=termii).handle(PhoneVerificationRequest(phone=PHONE, action="verify_code"))
        assert exc.value.message == "Verification code is required"


# =============================================================================
# Local Code Flow
# =============================================================================

class TestLocalCodeVerification:

    def test_send_stores_code_and_sends_sms(self, termii, mock_db):
        response = LocalCodeVerification(termii=termii).handle(send("234 801 234 5678"), now=NOW)

        assert response.success is True
        assert response.message == "Verification code sent successfully"

        phone, update = mock_db.update_user_by_phone.call_args.args
        assert phone == PHONE
        assert len(update["phone_verification_code"]) == 6
        assert update["phone_verification_expires"].startswith("2026-01-01T10:10:00")

        sms_phone, sms_text = termii.send_sms.call_args.args
        assert sms_phone == PHONE
        assert update["phone_verification_code"] in sms_text

    def test_send_storage_failure(self, termii, mock_db):
        mock_db.update_user_by_phone.side_effect = SupabaseClientError("down")

        with pytest.raises(PersistenceError):
            LocalCodeVerification(termii=termii).handle(send(), now=NOW)

        termii.send_sms.assert_not_called()

    def test_sms_failure_is_reported(self, termii, mock_db):
        termii.send_sms.side_effect = GatewayError("Failed to send SMS", provider="termii")

        with pytest.raises(GatewayError):
            LocalCodeVerification(termii=termii).handle(send(), now=NOW)

    def test_verify_correct_code(self, termii, mock_db):
        mock_db.fetch_user_by_phone.return_value = {
            "phone_verification_code": "482913",
            "phone_verification_expires": "2026-01-01T10:10:00Z",
        }

        response = LocalCodeVerification(termii=termii).handle(verify("482913"), now=NOW + timedelta(minutes=5))

        assert response.message == "Phone number verified successfully"
        _, update = mock_db.update_user_by_phone.call_args.args
        assert update == {
            "phone_verified": True,
            "phone_verification_code": None,
            "phone_verification_expires": None,
        }

    def test_verify_wrong_code(self, termii, mock_db):
        mock_db.fetch_user_by_phone.return_value = {
            "phone_verification_code": "482913",
            "phone_verification_expires": "2026-01-01T10:10:00Z",
        }

        with pytest.raises(ValidationError) as exc:
            LocalCodeVerification(termii=termii).handle(verify("000000"), now=NOW)

        assert exc.value.message == "Invalid verification code"
        mock_db.update_user_by_phone.assert_not_called()

    def test_expired_correct_code_rejected(self, termii, mock_db):
        mock_db.fetch_user_by_phone.return_value = {
            "phone_verification_code": "482913",
            "phone_verification_expires": "2026-01-01T10:10:00Z",
        }

        with pytest.raises(ValidationError) as exc:
            LocalCodeVerification(termii=termii).handle(verify("482913"), now=NOW + timedelta(minutes=10, seconds=1))

        assert exc.value.message == "Verification code has expired"
        mock_db.update_user_by_phone.assert_not_called()

    def test_verify_without_issued_code(self, termii, mock_db):
        mock_db.fetch_user_by_phone.return_value = {
            "phone_verification_code": None,
            "phone_verification_expires": None,
        }

        with pytest.raises(ValidationError) as exc:
            LocalCodeVerification(termii=termii).handle(verify("482913"), now=NOW)

        assert exc.value.message == "Verification code has expired"

    def test_verify_unknown_phone(self, termii, mock_db):
        mock_db.fetch_user_by_phone.return_value = None

        with pytest.raises(ValidationError) as exc:
            LocalCodeVerification(termii=termii).handle(verify("482913"), now=NOW)

        assert exc.value.message == "User not found"


# =============================================================================
# Termii Pin Flow
# =============================================================================

class TestTermiiPinVerification:

    def test_send_for_existing_user_stores_pin_on_user(self, termii, mock_db):
        mock_db.fetch_user_by_phone.return_value = {"id": "u1"}

        TermiiPinVerification(termii=termii).handle(send(), now=NOW)

        _, update = mock_db.update_user_by_phone.call_args.args
        assert update["phone_verification_code"] == "pin-abc-123"
        mock_db.upsert_phone_verification.assert_not_called()

    def test_send_for_new_phone_upserts_pending_row(self, termii, mock_db):
        mock_db.fetch_user_by_phone.return_value = None

        TermiiPinVerification(termii=termii).handle(send(), now=NOW)

        phone, pin_id, expires_at, updated_at = mock_db.upsert_phone_verification.call_args.args
        assert phone == PHONE
        assert pin_id == "pin-abc-123"
        assert expires_at.startswith("2026-01-01T10:10:00")
        assert updated_at.startswith("2026-01-01T10:00:00")
        mock_db.update_user_by_phone.assert_not_called()

    def test_verify_existing_user(self, termii, mock_db):
        mock_db.fetch_user_by_phone.return_value = {
            "phone_verification_code": "pin-abc-123",
            "phone_verification_expires": "2026-01-01T10:10:00Z",
        }

        TermiiPinVerification(termii=termii).handle(verify("123456"), now=NOW)

        termii.verify_otp.assert_called_once_with("pin-abc-123", "123456")
        _, update = mock_db.update_user_by_phone.call_args.args
        assert update["phone_verified"] is True
        mock_db.delete_phone_verification.assert_not_called()

    def test_verify_pending_phone_deletes_row(self, termii, mock_db):
        mock_db.fetch_user_by_phone.return_value = None
        mock_db.fetch_phone_verification.return_value = {
            "verification_code": "pin-abc-123",
            "expires_at": "2026-01-01T10:10:00+00:00",
        }

        TermiiPinVerification(termii=termii).handle(verify("123456"), now=NOW)

        mock_db.delete_phone_verification.assert_called_once_with(PHONE)

    def test_verify_without_record(self, termii, mock_db):
        mock_db.fetch_user_by_phone.return_value = None
        mock_db.fetch_phone_verification.return_value = None

        with pytest.raises(ValidationError) as exc:
            TermiiPinVerification(termii=termii).handle(verify("123456"), now=NOW)

        assert exc.value.message == "Verification code not found"
        termii.verify_otp.assert_not_called()

    def test_expired_pin_not_sent_to_termii(self, termii, mock_db):
        mock_db.fetch_user_by_phone.return_value = None
        mock_db.fetch_phone_verification.return_value = {
            "verification_code": "pin-abc-123",
            "expires_at": "2026-01-01T10:10:00+00:00",
        }

        with pytest.raises(ValidationError) as exc:
            TermiiPinVerification(termii=termii).handle(verify("123456"), now=NOW + timedelta(minutes=11))

        assert exc.value.message == "Verification code has expired"
        termii.verify_otp.assert_not_called()

    def test_termii_rejects_pin(self, termii, mock_db):
        mock_db.fetch_user_by_phone.return_value = {
            "phone_verification_code": "pin-abc-123",
            "phone_verification_expires": "2026-01-01T10:10:00Z",
        }
        termii.verify_otp.side_effect = GatewayError("Invalid verification code", provider="termii")

        with pytest.raises(GatewayError):
            TermiiPinVerification(termii=termii).handle(verify("999999"), now=NOW)

        mock_db.update_user_by_phone.assert_not_called()


# =============================================================================
# Termii Client
# =============================================================================

class TestTermiiClient:

    @staticmethod
    def client(status_code, body, seen):
        def handler(request):
            seen.append(request)
            return httpx.Response(status_code, json=body)
        return TermiiClient(client=httpx.Client(transport=httpx.MockTransport(handler)))

    def test_send_otp_payload(self):
        seen: list[httpx.Request] = []
        termii = self.client(200, {"pinId": "pin-1", "status": "200"}, seen)

        pin_id = termii.send_otp(PHONE, "Your code is < 1234 >", 10)

        assert pin_id == "pin-1"
        payload = json.loads(seen[0].content)
        assert seen[0].url.path.endswith("/sms/otp/send")
        assert payload["api_key"] == "test-termii-key"
        assert payload["pin_attempts"] == PIN_ATTEMPTS
        assert payload["pin_time_to_live"] == 10
        assert payload["pin_length"] == 6

    def test_send_otp_without_pin_id(self):
        termii = self.client(200, {"message": "Insufficient balance"}, [])

        with pytest.raises(GatewayError) as exc:
            termii.send_otp(PHONE, "Your code is < 1234 >", 10)

        assert exc.value.message == "Insufficient balance"

    def test_verify_otp(self):
        termii = self.client(200, {"pinId": "pin-1", "verified": True, "msisdn": "2348012345678"}, [])
        assert termii.verify_otp("pin-1", "123456") is True

    def test_verify_otp_not_verified(self):
        termii = self.client(200, {"verified": "Expired"}, [])

        with pytest.raises(GatewayError):
            termii.verify_otp("pin-1", "123456")

    def test_send_sms_requires_message_id(self):
        termii = self.client(200, {"code": "error"}, [])

        with pytest.raises(GatewayError) as exc:
            termii.send_sms(PHONE, "hello")

        assert exc.value.message == "Failed to send SMS"
