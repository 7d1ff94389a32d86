"""
Health check endpoint.
"""

from datetime import datetime, timezone

from fastapi import APIRouter

from app.config import APP_VERSION
from app.dependencies import DocumentStore
from app.models import HealthResponse

router = APIRouter(prefix="/api", tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    operation_id="getHealth",
    summary="Health check",
)
async def get_health(store: DocumentStore) -> HealthResponse:
    return HealthResponse(
        status="ok",
        version=APP_VERSION,
        timestamp=datetime.now(timezone.utc),
        store=store.name,
    )
