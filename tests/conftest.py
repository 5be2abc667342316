"""
Shared test fixtures.

Tables are created on the in-memory SQLite engine from
``tests.factories`` for each test and dropped afterwards.  The clock is
pinned to ``TODAY`` (2026-05-01).
"""

from decimal import Decimal
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.database import Base
from src.infrastructure.models import UserModel, VehicleModel
from tests.factories import TestSessionFactory, fixed_clock, test_engine


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create tables, yield a session, then drop everything."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionFactory() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def fleet(db_session: AsyncSession) -> dict:
    """One customer and two vehicles, committed."""
    customer = UserModel(name="Test Customer", email="customer@example.com")
    car = VehicleModel(brand="Toyota", model="Corolla", price_per_day=Decimal("45"))
    van = VehicleModel(brand="Ford", model="Transit", price_per_day=Decimal("90"))
    db_session.add_all([customer, car, van])
    await db_session.commit()
    return {"customer": customer.id, "car": car.id, "van": van.id}


@pytest.fixture
def clock():
    return fixed_clock()
