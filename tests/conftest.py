"""
Shared test fixtures.

Provides a SubmissionGateway wired to:
  • an in-memory document store
  • a temporary upload directory
  • a recording mailer (nothing is sent)
  • a fake clock parked at 15:00 IST, inside the upload window

The `client` fixture runs the full app lifespan and swaps the gateway in
through a dependency override.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from app.db import MemoryStore
from app.dependencies import get_gateway
from app.main import app
from app.services.gateway import SubmissionGateway
from app.services.storage import ArtifactStorage
from app.services.upload_validator import UploadValidator
from tests.mocks.models import ist
from tests.mocks.services import FakeClock, RecordingMailer


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(ist(15, 0))


@pytest.fixture()
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture()
def upload_dir(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture()
def validator() -> UploadValidator:
    """Real mutagen decoding; tests swap in a StubDecoder where convenient."""
    return UploadValidator(max_duration=300)


@pytest.fixture()
def gateway(clock, mailer, upload_dir, validator) -> SubmissionGateway:
    return SubmissionGateway(
        store=MemoryStore(),
        storage=ArtifactStorage(str(upload_dir), max_bytes=1024 * 1024),
        mailer=mailer,
        validator=validator,
        clock=clock,
    )


@pytest.fixture()
def _test_env(monkeypatch, tmp_path):
    """Keep the lifespan's own gateway off the real disk and out of SMTP."""
    import app.main as main_mod

    monkeypatch.setattr(main_mod, "create_store", lambda: MemoryStore())
    monkeypatch.setattr(
        main_mod, "ArtifactStorage", lambda: ArtifactStorage(str(tmp_path / "lifespan-uploads"))
    )

    # ── Disable rate limiting in tests ────────────────────────────────
    from app.rate_limit import limiter as _limiter

    monkeypatch.setattr(_limiter, "enabled", False)


@pytest.fixture()
def client(_test_env, gateway: SubmissionGateway) -> TestClient:
    """
    FastAPI TestClient backed by the test gateway.

    Uses a context manager so the lifespan runs (store open / housekeeping).
    """
    app.dependency_overrides[get_gateway] = lambda: gateway

    with TestClient(app, raise_server_exceptions=False) as tc:
        yield tc

    app.dependency_overrides.clear()
