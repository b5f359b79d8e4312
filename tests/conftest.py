"""
Shared fixtures for the catalog API test suite.

Each test gets its own in-memory SQLite database. HTTP tests talk to the
FastAPI app in-process with get_db pointed at that database.
"""

import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import catalog_api.models  # noqa: F401
from catalog_api.core.database import Base, enable_sqlite_foreign_keys, get_db
from catalog_api.core.rbac import Role, build_principal
from catalog_api.core.security import create_access_token, get_password_hash
from catalog_api.main import app
from catalog_api.models.catalog import Product
from catalog_api.models.user import User

DEFAULT_PASSWORD = "Password123!"
_PASSWORD_HASH = get_password_hash(DEFAULT_PASSWORD)


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_foreign_keys(engine.sync_engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


async def create_user(db, email, role, owner_id=None, is_active=True, **extra) -> User:
    user = User(
        email=email,
        full_name=email.split("@")[0].title(),
        hashed_password=_PASSWORD_HASH,
        role=role,
        owner_id=owner_id,
        is_active=is_active,
        **extra,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def create_product(db, tenant: User, name: str = "Widget") -> Product:
    product = Product(user_id=tenant.id, name=name, sku=f"SKU-{name.upper()}")
    db.add(product)
    await db.commit()
    await db.refresh(product)
    return product


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(subject=str(user.id))}"}


def principal_for(user: User):
    return build_principal(user)


@pytest_asyncio.fixture
async def admin(db):
    return await create_user(db, "admin@catalog.test", Role.ADMIN)


@pytest_asyncio.fixture
async def owner(db):
    return await create_user(db, "owner.one@catalog.test", Role.OWNER)


@pytest_asyncio.fixture
async def other_owner(db):
    return await create_user(db, "owner.two@catalog.test", Role.OWNER)


@pytest_asyncio.fixture
async def staff(db, owner):
    return await create_user(db, "staff.one@catalog.test", Role.STAFF, owner_id=owner.id)


@pytest_asyncio.fixture
async def other_staff(db, other_owner):
    return await create_user(db, "staff.two@catalog.test", Role.STAFF, owner_id=other_owner.id)
