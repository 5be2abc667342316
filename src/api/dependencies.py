"""FastAPI dependency injection helpers."""

from sqlalchemy.ext.asyncio import AsyncSession

from src.config import settings
from src.domain.dates import Clock, make_clock
from src.infrastructure.database import async_session_factory
from src.workers.sweeper import AvailabilitySweep


async def get_db() -> AsyncSession:  # type: ignore[misc]
    """Yield an async DB session; commit on success, rollback on error."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_clock() -> Clock:
    """The clock every lifecycle decision reads "today" from."""
    return make_clock(settings.timezone)


def get_sweep() -> AvailabilitySweep:
    return AvailabilitySweep(async_session_factory, get_clock())
