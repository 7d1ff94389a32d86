"""
Audio upload endpoint.

Uploads need a valid one-time code, must arrive between 14:00 and 19:00 IST
and may not play longer than five minutes.
"""

from typing import Annotated

from fastapi import APIRouter, File, Form, Request, UploadFile

from app.dependencies import Gateway
from app.models import UploadResponse
from app.outcomes import raise_for_rejection
from app.rate_limit import AUTH, limiter

router = APIRouter(tags=["uploads"])


@router.post(
    "/upload-audio",
    response_model=UploadResponse,
    operation_id="uploadAudio",
    summary="Upload an audio post",
)
@limiter.limit(AUTH)
async def upload_audio(
    request: Request,
    gateway: Gateway,
    email: Annotated[str | None, Form()] = None,
    otp: Annotated[str | None, Form()] = None,
    audio: Annotated[UploadFile | None, File()] = None,
):
    outcome = await gateway.submit_audio(email, otp, audio)
    return raise_for_rejection(outcome)
