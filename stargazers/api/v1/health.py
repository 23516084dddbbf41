"""Health check endpoint with record store connectivity check."""

from typing import Annotated

from fastapi import APIRouter, Depends

from stargazers.api.deps import get_app_settings, get_stores
from stargazers.core.config import Settings
from stargazers.schemas.health import HealthResponse
from stargazers.store import Stores

router = APIRouter()


@router.get("", response_model=HealthResponse)
def get_health(
    settings: Annotated[Settings, Depends(get_app_settings)],
    stores: Annotated[Stores, Depends(get_stores)],
) -> HealthResponse:
    """
    Return service health status and record store connectivity.
    Used by load balancers and monitoring.
    """
    connected = stores.users.ping() and stores.events.ping()

    return HealthResponse(
        status="ok",
        environment=settings.APP_ENV,
        store=stores.backend,
        database="connected" if connected else "disconnected",
    )
