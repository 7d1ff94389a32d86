"""
Request-scoped access to the objects built at startup.

Everything lives on ``app.state`` (see ``app.main.lifespan``); tests swap
them out through ``app.dependency_overrides``.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from app.db import Store
from app.services.gateway import SubmissionGateway


def get_gateway(request: Request) -> SubmissionGateway:
    return request.app.state.gateway


def get_store(gateway: Annotated[SubmissionGateway, Depends(get_gateway)]) -> Store:
    return gateway.store


Gateway = Annotated[SubmissionGateway, Depends(get_gateway)]
DocumentStore = Annotated[Store, Depends(get_store)]
