from collections.abc import AsyncGenerator
from datetime import date

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from policydesk.common.enums import UserRole
from policydesk.common.security import get_password_hash
from policydesk.config import settings
from policydesk.db.base import Base
from policydesk.db.models import *  # noqa: F401,F403 - ensure all models loaded
from policydesk.db.session import enable_sqlite_savepoints

# In-memory SQLite, one database per test
TEST_DATABASE_URL = "sqlite+aiosqlite://"

# Fixed "today" for everything that classifies expiry through the API
TODAY = date(2026, 3, 15)

PASSWORD = "testpass123"


@pytest.fixture
def user_password():
    return PASSWORD


@pytest.fixture(autouse=True)
def fast_password_hashing(monkeypatch):
    monkeypatch.setattr(settings, "BCRYPT_ROUNDS", 4)


@pytest.fixture(autouse=True)
def reset_login_throttle():
    from policydesk.common.throttle import login_throttle

    login_throttle.reset()
    yield
    login_throttle.reset()


@pytest.fixture
async def test_engine():
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=StaticPool)
    enable_sqlite_savepoints(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
async def app(db_session):
    from policydesk.api.deps import get_db, get_today
    from policydesk.main import app

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_today] = lambda: TODAY
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def _make_user(db_session, username: str, role: UserRole, full_name: str | None = None):
    from policydesk.db.models.user import User

    user = User(
        username=username,
        hashed_password=get_password_hash(PASSWORD),
        role=role.value,
        full_name=full_name,
    )
    db_session.add(user)
    await db_session.flush()
    await db_session.refresh(user)
    return user


@pytest.fixture
async def admin_user(db_session):
    return await _make_user(db_session, "admin_test", UserRole.ADMIN, "Test Admin")


@pytest.fixture
async def sales_user(db_session):
    return await _make_user(db_session, "sales_test", UserRole.SALES, "Test Sales")


@pytest.fixture
async def viewer_user(db_session):
    return await _make_user(db_session, "viewer_test", UserRole.VIEWER)


async def _logged_in_client(app, username: str) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        response = await ac.post(
            "/api/v1/auth/login", json={"username": username, "password": PASSWORD}
        )
        assert response.status_code == 200, response.text
        yield ac


@pytest.fixture
async def admin_client(app, admin_user):
    async for ac in _logged_in_client(app, admin_user.username):
        yield ac


@pytest.fixture
async def sales_client(app, sales_user):
    async for ac in _logged_in_client(app, sales_user.username):
        yield ac


@pytest.fixture
async def viewer_client(app, viewer_user):
    async for ac in _logged_in_client(app, viewer_user.username):
        yield ac


@pytest.fixture
def contract_payload():
    """Legacy-keyed JSON body for POST /contracts."""
    return {
        "draudejas": "UAB Testas",
        "pardavejas": "sales_test",
        "ldGrupe": "Casco",
        "policyNo": "POL-1",
        "galiojaNuo": "2026-01-01",
        "galiojaIki": "2026-12-31",
        "valstybinisNr": "ABC123",
        "metineIsmoka": 100,
        "ismoka": 15000,
        "notes": [],
    }


@pytest.fixture
def contract_fields():
    """Python-named fields for calling the lifecycle directly."""
    from decimal import Decimal

    return {
        "client_name": "UAB Testas",
        "salesperson": "sales_test",
        "insurance_type": "Casco",
        "policy_no": "POL-1",
        "valid_from": date(2026, 1, 1),
        "valid_until": date(2026, 12, 31),
        "registration_no": "ABC123",
        "yearly_premium": Decimal("100.00"),
        "payout": Decimal("15000.00"),
        "notes": [],
    }
