"""Shared fixtures: in-memory SQLite database, seeded inventory and an API client."""

import os

os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite+aiosqlite://")
os.environ.setdefault("ENVIRONMENT", "development")

from collections.abc import AsyncGenerator
from decimal import Decimal
from types import SimpleNamespace

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import joyhomes.models  # noqa: F401
from joyhomes.core.immutability import register_immutability_enforcement
from joyhomes.core.security import create_access_token, get_password_hash, token_claims
from joyhomes.database import Base, get_db
from joyhomes.models.customer import Customer
from joyhomes.models.inventory import Project, Property
from joyhomes.models.user import User

register_immutability_enforcement()

PASSWORD = "Test@1234"
# Hashing is slow; every seeded user shares one hash
PASSWORD_HASH = get_password_hash(PASSWORD)


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
async def seed(session_factory) -> SimpleNamespace:
    """One user per role, a project at 2.5% with three units, and two customers."""
    async with session_factory() as session:
        users = {
            role: User(
                email=f"{role.lower()}@joyhomes.vn",
                password_hash=PASSWORD_HASH,
                full_name=f"{role.title()} User",
                role=role,
            )
            for role in ("ADMIN", "MANAGER", "SALES", "ACCOUNTANT", "MARKETING")
        }
        other_sales = User(
            email="sales2@joyhomes.vn",
            password_hash=PASSWORD_HASH,
            full_name="Second Sales",
            role="SALES",
        )
        project = Project(code="VH-GP", name="Vinhomes Grand Park", commission_rate=Decimal("2.5"))
        no_rate_project = Project(code="MT", name="Masteri Thảo Điền")
        session.add_all([*users.values(), other_sales, project, no_rate_project])
        await session.flush()

        prop = Property(project_id=project.id, code="S1.01-1205", building="S1.01", floor=12, price=3_100_000_000)
        sold_prop = Property(project_id=project.id, code="S1.02-0301", price=2_500_000_000, status="SOLD")
        default_rate_prop = Property(project_id=no_rate_project.id, code="T1-0808", price=4_000_000_000)
        customer = Customer(
            code="KH-20260101-0001",
            full_name="Nguyễn Văn A",
            phone="0901234567",
            assigned_to_id=users["SALES"].id,
        )
        other_customer = Customer(code="KH-20260101-0002", full_name="Trần Thị B", phone="0907654321")
        session.add_all([prop, sold_prop, default_rate_prop, customer, other_customer])
        await session.commit()

    return SimpleNamespace(
        users=users,
        admin=users["ADMIN"],
        manager=users["MANAGER"],
        sales=users["SALES"],
        accountant=users["ACCOUNTANT"],
        marketing=users["MARKETING"],
        other_sales=other_sales,
        project=project,
        no_rate_project=no_rate_project,
        property=prop,
        sold_property=sold_prop,
        default_rate_property=default_rate_prop,
        customer=customer,
        other_customer=other_customer,
    )


def auth_headers(user: User) -> dict[str, str]:
    token = create_access_token(token_claims(user))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def client(session_factory) -> AsyncGenerator[httpx.AsyncClient, None]:
    from joyhomes.main import app

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
