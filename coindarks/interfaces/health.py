"""
Liveness endpoint for the exchange API.

Answers without touching the database or the price feed, so a slow
CoinGecko or an unreachable store never marks the pod dead.
"""

from fastapi import APIRouter

from coindarks.core.config import settings
from coindarks.interfaces.exchange.schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Liveness only. Does not check the database or the price feed.",
)
def health_check() -> HealthResponse:
    """Report that the process is serving requests."""
    return HealthResponse(status="ok", version=settings.version)
