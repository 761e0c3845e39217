# =============================================================================
# core/models/verification.py - Phone Verification Schemas
# =============================================================================
# Request/response contract shared by both phone verification endpoints
# (/sms with locally generated codes, /otp with provider pinIds).
#
# State machine for one phone number:
#     none -> code_issued -> verified
#                        \-> expired
# A new send from any state returns to code_issued, overwriting the old code.
# =============================================================================

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator


class SmsAction(str, Enum):
    """Operations accepted by the phone verification endpoints."""
    SEND_VERIFICATION = "send_verification"
    VERIFY_CODE = "verify_code"


class VerificationState(str, Enum):
    """Where a phone number is in its verification lifecycle."""
    NONE = "none"
    CODE_ISSUED = "code_issued"
    VERIFIED = "verified"
    EXPIRED = "expired"


class PhoneVerificationRequest(BaseModel):
    """
    Body of POST /sms and POST /otp.

    Example:
        {"phone": "+234 801 234 5678", "action": "verify_code", "code": "123456"}
    """

    # Presence is checked by the service so the error text matches the
    # messages the mobile clients already display.
    phone: str | None = None
    action: str | None = Field(default=None, description="send_verification | verify_code")
    code: str | None = None

    @field_validator("code", mode="before")
    @classmethod
    def stringify_code(cls, value):
        return str(value).strip() if value is not None else None


class PhoneVerificationResponse(BaseModel):
    """Outcome of a send or verify action."""

    success: bool = True
    message: str


class VerificationRecord(BaseModel):
    """
    A stored code (or pinId) with its expiry.

    `code` holds the literal 6-digit code for the local variant and the
    provider pinId for the Termii OTP variant.
    """

    code: str | None = None
    expires_at: datetime | None = None
    verified: bool = False

    def state(self, now: datetime) -> VerificationState:
        if self.verified and not self.code:
            return VerificationState.VERIFIED
        if not self.code or self.expires_at is None:
            return VerificationState.NONE
        if now > self.expires_at:
            return VerificationState.EXPIRED
        return VerificationState.CODE_ISSUED
