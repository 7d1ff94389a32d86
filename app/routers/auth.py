"""
One-time code and password-reset endpoints.
"""

from fastapi import APIRouter, Request

from app.dependencies import Gateway
from app.models import (
    AcknowledgedResponse,
    OtpRequest,
    OtpRequestResponse,
    OtpVerifyRequest,
    PasswordResetRequest,
    PasswordResetResponse,
)
from app.outcomes import raise_for_rejection
from app.rate_limit import AUTH, STRICT, limiter

router = APIRouter(tags=["auth"])


@router.post(
    "/request-otp",
    response_model=OtpRequestResponse,
    operation_id="requestOtp",
    summary="Issue a one-time code and email it",
)
@limiter.limit(STRICT)
async def request_otp(request: Request, body: OtpRequest, gateway: Gateway):
    """
    Generate a 6-digit code valid for five minutes.  A new request replaces
    any earlier code for the same email.
    """
    outcome = await gateway.issue_otp(body.email)
    return raise_for_rejection(outcome)


@router.post(
    "/verify-otp",
    response_model=AcknowledgedResponse,
    operation_id="verifyOtp",
    summary="Check and consume a one-time code",
)
@limiter.limit(AUTH)
async def verify_otp(request: Request, body: OtpVerifyRequest, gateway: Gateway):
    outcome = await gateway.verify_otp(body.email, body.code)
    return raise_for_rejection(outcome)


@router.post(
    "/forgot-password",
    response_model=PasswordResetResponse,
    operation_id="forgotPassword",
    summary="Email a temporary password (once per day per email)",
)
@limiter.limit(STRICT)
async def forgot_password(request: Request, body: PasswordResetRequest, gateway: Gateway):
    outcome = await gateway.request_password_reset(body.email)
    return raise_for_rejection(outcome)
