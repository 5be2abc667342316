"""
FastAPI application factory.

* Registers routes for rentals, the vehicle catalogue, maintenance and admin.
* Starts / stops the availability sweep via lifespan events.
* Maps lifecycle errors to HTTP responses and applies rate limiting.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from src.api.errors import register_error_handlers
from src.api.middleware import limiter
from src.api.routes import admin, maintenance, rentals, vehicles
from src.config import settings
from src.infrastructure.database import engine
from src.infrastructure.redis_client import close_redis
from src.workers import sweeper as _sweeper

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the sweep on startup (it runs once immediately).

    On shutdown the sweep stops first, then the Redis and database pools close.
    """
    await _sweeper.start_sweep_loop()
    yield
    await _sweeper.stop_sweep_loop()
    await close_redis()
    await engine.dispose()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Fleet Booking API",
        description=(
            "Books vehicles for date ranges and schedules maintenance, "
            "never letting a booking and a maintenance day claim the same "
            "vehicle.  Date-driven statuses advance on a background sweep."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    register_error_handlers(app)

    # Routers
    app.include_router(rentals.router, prefix="/api/v1")
    app.include_router(vehicles.router, prefix="/api/v1")
    app.include_router(maintenance.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")

    return app
