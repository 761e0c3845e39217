# =============================================================================
# core/services/verification_service.py - Phone Verification Business Logic
# =============================================================================
# Two interchangeable flows behind the same request shape:
#
# LocalCodeVerification (POST /sms):
#   We generate a 6-digit code, store it on the user row, and deliver it as a
#   plain SMS. Verification compares codes locally.
#
# TermiiPinVerification (POST /otp):
#   Termii generates and delivers the pin and hands back an opaque pinId.
#   We store the pinId (on the user row, or in phone_verifications for phones
#   that have not signed up yet) and let Termii check the pin.
#
# Both store an expiry OTP_TTL_MINUTES from the send, and reject verification
# once it has passed, even for a correct code.
# =============================================================================

import logging
import secrets
from datetime import datetime, timedelta

from app.config import settings
from app.exceptions import PersistenceError, ValidationError
from core.models.verification import (
    PhoneVerificationRequest,
    PhoneVerificationResponse,
    SmsAction,
    VerificationRecord,
    VerificationState,
)
from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.termii_client import PIN_PLACEHOLDER, TermiiClient
from lib.utils import mask_phone, normalize_phone, parse_timestamp, to_iso, utc_now

logger = logging.getLogger(__name__)

USER_CODE_COLUMNS = "phone_verification_code, phone_verification_expires"

SENT_MESSAGE = "Verification code sent successfully"
VERIFIED_MESSAGE = "Phone number verified successfully"


def generate_code() -> str:
    """Random 6-digit code in [100000, 999999]."""
    return str(100000 + secrets.randbelow(900000))


def verification_sms(code: str) -> str:
    return (
        f"Your {settings.SITE_NAME} verification code is: {code}. "
        f"Valid for {settings.OTP_TTL_MINUTES} minutes."
    )


def check_not_expired(record: VerificationRecord, now: datetime) -> None:
    """
    Raises:
        ValidationError: If the record's expiry has passed or was never set
    """
    if record.expires_at is None or record.state(now) == VerificationState.EXPIRED:
        raise ValidationError("Verification code has expired")


class PhoneVerificationService:
    """
    Shared request handling for both verification flows.

    Subclasses implement send_code/verify_code for an already-normalised
    phone number.
    """

    def handle(
        self,
        request: PhoneVerificationRequest,
        now: datetime | None = None,
    ) -> PhoneVerificationResponse:
        """
        Validate the request and route it to send or verify.

        Raises:
            ValidationError: Missing phone, missing code, or unknown action
        """
        now = now or utc_now()

        if not request.phone or not request.phone.strip():
            raise ValidationError("Phone number is required")
        phone = normalize_phone(request.phone)

        if request.action == SmsAction.SEND_VERIFICATION.value:
            self.send_code(phone, now)
            logger.info(f"Verification code issued for {mask_phone(phone)}")
            return PhoneVerificationResponse(message=SENT_MESSAGE)

        if request.action == SmsAction.VERIFY_CODE.value:
            if not request.code:
                raise ValidationError("Verification code is required")
            self.verify_code(phone, request.code, now)
            logger.info(f"Phone {mask_phone(phone)} verified")
            return PhoneVerificationResponse(message=VERIFIED_MESSAGE)

        raise ValidationError("Invalid action")

    def send_code(self, phone: str, now: datetime) -> None:
        raise NotImplementedError

    def verify_code(self, phone: str, code: str, now: datetime) -> None:
        raise NotImplementedError

    # -------------------------------------------------------------------------
    # User row helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _expiry_from(now: datetime) -> datetime:
        return now + timedelta(minutes=settings.OTP_TTL_MINUTES)

    @staticmethod
    def _fetch_user_record(phone: str) -> VerificationRecord | None:
        row = SupabaseClient.fetch_user_by_phone(phone, columns=USER_CODE_COLUMNS)
        if row is None:
            return None
        return VerificationRecord(
            code=row.get("phone_verification_code"),
            expires_at=parse_timestamp(row.get("phone_verification_expires")),
        )

    @staticmethod
    def _store_on_user(phone: str, code: str, expires_at: datetime) -> list[dict]:
        try:
            return SupabaseClient.update_user_by_phone(phone, {
                "phone_verification_code": code,
                "phone_verification_expires": to_iso(expires_at),
            })
        except SupabaseClientError as e:
            logger.error(f"Failed to store verification code for {mask_phone(phone)}: {e}")
            raise PersistenceError("Failed to store verification code")

    @staticmethod
    def _mark_user_verified(phone: str) -> None:
        try:
            SupabaseClient.update_user_by_phone(phone, {
                "phone_verified": True,
                "phone_verification_code": None,
                "phone_verification_expires": None,
            })
        except SupabaseClientError as e:
            logger.error(f"Failed to mark {mask_phone(phone)} verified: {e}")
            raise PersistenceError("Failed to verify phone number")


class LocalCodeVerification(PhoneVerificationService):
    """
    Codes generated here and delivered as a plain Termii SMS.

    Only phones that already belong to a user can be verified.
    """

    def __init__(self, termii: TermiiClient | None = None):
        self._termii = termii

    @property
    def termii(self) -> TermiiClient:
        if self._termii is None:
            self._termii = TermiiClient()
        return self._termii

    def send_code(self, phone: str, now: datetime) -> None:
        code = generate_code()
        self._store_on_user(phone, code, self._expiry_from(now))
        self.termii.send_sms(phone, verification_sms(code))

    def verify_code(self, phone: str, code: str, now: datetime) -> None:
        record = self._fetch_user_record(phone)
        if record is None:
            raise ValidationError("User not found")

        check_not_expired(record, now)

        if record.code != code:
            raise ValidationError("Invalid verification code")

        self._mark_user_verified(phone)


class TermiiPinVerification(PhoneVerificationService):
    """
    Pins generated and checked by Termii.

    Phones without a user row (mid-signup) keep their pinId in
    phone_verifications until verified.
    """

    def __init__(self, termii: TermiiClient | None = None):
        self._termii = termii

    @property
    def termii(self) -> TermiiClient:
        if self._termii is None:
            self._termii = TermiiClient()
        return self._termii

    def send_code(self, phone: str, now: datetime) -> None:
        message_text = (
            f"Your {settings.SITE_NAME} verification code is {PIN_PLACEHOLDER}. "
            f"Valid for {settings.OTP_TTL_MINUTES} minutes."
        )
        pin_id = self.termii.send_otp(phone, message_text, settings.OTP_TTL_MINUTES)
        expires_at = self._expiry_from(now)

        if SupabaseClient.fetch_user_by_phone(phone, columns="id") is not None:
            self._store_on_user(phone, pin_id, expires_at)
            return

        try:
            SupabaseClient.upsert_phone_verification(phone, pin_id, to_iso(expires_at), to_iso(now))
        except SupabaseClientError as e:
            logger.error(f"Failed to store pinId for {mask_phone(phone)}: {e}")
            raise PersistenceError("Failed to store verification code")

    def verify_code(self, phone: str, code: str, now: datetime) -> None:
        record = self._fetch_user_record(phone)
        has_user = record is not None

        if record is None:
            row = SupabaseClient.fetch_phone_verification(phone)
            if row is None:
                raise ValidationError("Verification code not found")
            record = VerificationRecord(
                code=row.get("verification_code"),
                expires_at=parse_timestamp(row.get("expires_at")),
            )

        check_not_expired(record, now)

        if not record.code:
            raise ValidationError("Verification code not found")

        self.termii.verify_otp(record.code, code)

        if has_user:
            self._mark_user_verified(phone)
        else:
            SupabaseClient.delete_phone_verification(phone)
