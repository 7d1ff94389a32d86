"""Main FastAPI application for the Twiller backend."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from app.config import APP_VERSION
from app.db import create_store
from app.rate_limit import limiter
from app.routers import auth, billing, health, posts, uploads, users
from app.services.background import Housekeeper
from app.services.email import Mailer
from app.services.gateway import SubmissionGateway
from app.services.storage import ArtifactStorage

logger = logging.getLogger(__name__)


def build_gateway() -> SubmissionGateway:
    """Wire the gateway to the collaborators selected by configuration."""
    return SubmissionGateway(
        store=create_store(),
        storage=ArtifactStorage(),
        mailer=Mailer(),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    gateway = build_gateway()
    await gateway.store.open()
    housekeeper = Housekeeper(gateway)
    await housekeeper.start()
    app.state.gateway = gateway
    logger.info("Twiller backend started (store=%s)", gateway.store.name)
    try:
        yield
    finally:
        await housekeeper.stop()
        await gateway.store.close()


app = FastAPI(
    title="Twiller API",
    description="Posts, users and the gated upload / reset / subscription endpoints",
    version=APP_VERSION,
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed input is a client error like any missing field: answer 400."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "detail": {
                "error": "malformed request",
                "reason": "missing_fields",
                "kind": "validation_error",
                "retry_after_ms": None,
                "errors": jsonable_encoder(exc.errors()),
            }
        },
    )


app.include_router(health.router)
app.include_router(auth.router)
app.include_router(uploads.router)
app.include_router(billing.router)
app.include_router(posts.router)
app.include_router(users.router)


@app.get("/", response_class=PlainTextResponse, include_in_schema=False)
async def root() -> str:
    return "Twiller is working"
