# =============================================================================
# app/routers/verification.py - Phone Verification Endpoints
# =============================================================================
# POST /sms  locally generated code, delivered as a plain SMS
# POST /otp  Termii-generated pin, tracked by pinId
#
# Both accept {phone, action: send_verification|verify_code, code?}.
# No authentication: these run during signup, before a session exists.
# =============================================================================

from fastapi import APIRouter

from core.models.verification import PhoneVerificationRequest, PhoneVerificationResponse
from core.services.verification_service import LocalCodeVerification, TermiiPinVerification

router = APIRouter()


@router.post("/sms", response_model=PhoneVerificationResponse)
async def sms_verification(request: PhoneVerificationRequest):
    """Send or check a locally generated 6-digit code."""
    return LocalCodeVerification().handle(request)


@router.post("/otp", response_model=PhoneVerificationResponse)
async def otp_verification(request: PhoneVerificationRequest):
    """Send or check a Termii OTP."""
    return TermiiPinVerification().handle(request)
