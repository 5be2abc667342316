"""
Admin / observability endpoints
===============================

POST /api/v1/admin/sweep  -- run the availability sweep now
GET  /api/v1/admin/health -- simple health check
"""

from fastapi import APIRouter, Depends, Request

from src.api.dependencies import get_sweep
from src.api.middleware import limiter
from src.api.schemas import HealthResponse, SweepResponse
from src.config import settings
from src.workers.sweeper import AvailabilitySweep

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post(
    "/sweep",
    response_model=SweepResponse,
    summary="Advance date-driven statuses now",
    description=(
        "Completes Ongoing bookings whose return date has been reached and "
        "re-derives maintenance statuses.  Safe to call repeatedly."
    ),
)
@limiter.limit(settings.rate_limit)
async def run_sweep(
    request: Request,
    sweep: AvailabilitySweep = Depends(get_sweep),
):
    return SweepResponse.model_validate(await sweep.run())


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health():
    return HealthResponse()
