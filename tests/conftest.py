"""Shared test fixtures: in-memory SQLite schema, API client, sample founders and investors."""

import uuid
from collections.abc import AsyncGenerator
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from invplatform.core.database import Base, get_db
from invplatform.core.security import create_access_token
from invplatform.main import app
from invplatform.models.connections import StartupInvestorMapping
from invplatform.models.core import Investor, Startup, User
from invplatform.models.enums import InvestorRole, InvestorType, MappingStatus, Sector, UserRole

FOUNDER_EMAIL = "founder@acme.io"
INVESTOR_EMAIL = "investor@fund.io"


@pytest.fixture
async def engine():
    # StaticPool keeps the single in-memory database alive across connections
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
async def db(engine) -> AsyncGenerator[AsyncSession]:
    factory = async_sessionmaker(engine, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest.fixture
async def client(db: AsyncSession) -> AsyncGenerator[AsyncClient]:
    """API client whose requests share the test session."""

    async def _override_get_db() -> AsyncGenerator[AsyncSession]:
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def s3():
    """Replace the boto3 S3 client with a mock."""
    mock_client = MagicMock()
    with patch("invplatform.services.storage._get_s3_client", return_value=mock_client):
        yield mock_client


def auth_headers(user: User) -> dict[str, str]:
    token = create_access_token({"sub": str(user.id), "role": user.role.value})
    return {"Authorization": f"Bearer {token}"}


class Factory:
    """Builds persisted domain objects with sensible defaults."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _save(self, obj):
        self.db.add(obj)
        await self.db.flush()
        return obj

    async def user(self, role: UserRole, email: str | None = None, name: str | None = None) -> User:
        email = email or f"{uuid.uuid4().hex[:8]}@example.io"
        return await self._save(
            User(
                name=name or email.split("@")[0].title(),
                email=email,
                role=role,
                is_verified=True,
                is_onboarded=True,
            )
        )

    async def startup(self, founder: User | None = None, **overrides) -> Startup:
        if founder is None:
            founder = await self.user(UserRole.FOUNDER)
        fields = {
            "name": "Acme Robotics",
            "sector": Sector.DEEPTECH,
            "stage": "Seed",
            "funding_raised": Decimal("500000"),
            "valuation": Decimal("4000000"),
            "team_size": 12,
            "hq_location": "Bengaluru",
        }
        fields.update(overrides)
        return await self._save(Startup(founder_user_id=founder.id, **fields))

    async def investor(self, user: User | None = None, **overrides) -> Investor:
        if user is None:
            user = await self.user(UserRole.INVESTOR)
        fields = {
            "firm_name": "Northstar Ventures",
            "investor_type": InvestorType.VC,
            "ticket_size": "1-5 Cr",
            "sector_focus": ["DEEPTECH"],
        }
        fields.update(overrides)
        return await self._save(Investor(user_id=user.id, **fields))

    async def mapping(
        self,
        startup: Startup,
        investor: Investor | None = None,
        status: MappingStatus = MappingStatus.ACTIVE,
        investor_email: str | None = None,
    ) -> StartupInvestorMapping:
        return await self._save(
            StartupInvestorMapping(
                startup_id=startup.id,
                investor_id=investor.id if investor else None,
                investor_email=investor_email,
                investor_role=InvestorRole.LEAD_INVESTOR,
                status=status,
            )
        )


@pytest.fixture
def factory(db: AsyncSession) -> Factory:
    return Factory(db)


@pytest.fixture
async def founder_user(factory: Factory) -> User:
    return await factory.user(UserRole.FOUNDER, email=FOUNDER_EMAIL, name="Fiona Founder")


@pytest.fixture
async def startup(factory: Factory, founder_user: User) -> Startup:
    return await factory.startup(founder_user)


@pytest.fixture
async def investor_user(factory: Factory) -> User:
    return await factory.user(UserRole.INVESTOR, email=INVESTOR_EMAIL, name="Ivan Investor")


@pytest.fixture
async def investor(factory: Factory, investor_user: User) -> Investor:
    return await factory.investor(investor_user)


@pytest.fixture
async def active_mapping(
    factory: Factory, startup: Startup, investor: Investor
) -> StartupInvestorMapping:
    return await factory.mapping(startup, investor, MappingStatus.ACTIVE)
