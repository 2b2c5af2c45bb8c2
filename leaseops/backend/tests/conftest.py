# tests/conftest.py
import pytest
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.models import Base
from app.models import Property, PropertyType


LISTING_URL = "https://www.zillow.com/homedetails/14504-Ardenall-Ave-East-Cleveland-OH-44112/33444982_zpid/"


@pytest.fixture
async def engine():
    """
    Fresh in-memory DB per test. StaticPool makes all connections share the same
    in-memory database for the lifetime of this engine fixture.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def async_session_maker(engine):
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=True)


@pytest.fixture
async def seeded_property(async_session_maker):
    async with async_session_maker() as session:  # type: AsyncSession
        p = Property(
            organization_id="org-1",
            address="14504 Ardenall Ave",
            city="East Cleveland",
            state="OH",
            zip_code="44112",
            bedrooms=2,
            bathrooms=1.0,
            square_feet=None,
            property_type=PropertyType.house,
            rent_price=1000.0,
        )
        session.add(p)
        await session.commit()
        await session.refresh(p)
        return p
