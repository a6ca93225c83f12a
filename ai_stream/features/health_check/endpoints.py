from fastapi import APIRouter, Depends

from .handler import HealthCheckHandler
from .query import RelayHealth

router = APIRouter()


@router.get("/health", response_model=RelayHealth)
def relay_health(handler: HealthCheckHandler = Depends(HealthCheckHandler)) -> RelayHealth:
    """Reports whether the relay can serve stream requests."""
    return handler.handle()
