"""
Mock subscription endpoint.

No payment provider is involved: an admitted request only produces an
invoice email.  Payments are accepted between 10:00 and 11:00 IST.
"""

from fastapi import APIRouter

from app.dependencies import Gateway
from app.models import SubscribeRequest, SubscribeResponse
from app.outcomes import raise_for_rejection

router = APIRouter(tags=["billing"])


@router.post(
    "/subscribe",
    response_model=SubscribeResponse,
    operation_id="subscribe",
    summary="Subscribe to a plan and receive an invoice",
)
async def subscribe(body: SubscribeRequest, gateway: Gateway):
    outcome = await gateway.subscribe(body.email, body.plan)
    return raise_for_rejection(outcome)
