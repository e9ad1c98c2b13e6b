"""
Test fixtures for the marketing ledger test suite.

  - db_engine / db_session: Fresh in-memory SQLite database for each test
  - make_card: Insert a card row with exact balances (bypasses the API)
  - client: Async HTTP test client (unauthenticated)
  - authenticated_client: Test client with a MEMBER user and JWT
  - admin_client: Test client with an ADMIN user and JWT

Engine and reversal tests talk to the services through db_session so they
can set up any balance state directly. Route tests go through the client,
whose get_db override mirrors the production one (commit on success,
rollback on any exception).
"""

import os

# Settings are read at import time; provide the required secret first
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("LOG_JSON", "false")

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy import update
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from marketing_ledger.database import Base, get_db
from marketing_ledger.main import app
from marketing_ledger.models.ad_account import AdAccount
from marketing_ledger.models.card import Card
from marketing_ledger.models.user import User, UserType


TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest_asyncio.fixture
async def db_engine():
    """Create a fresh async engine with all tables for each test."""
    engine = create_async_engine(TEST_DATABASE_URL)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    """Provide an async session bound to the test engine."""
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with async_session() as session:
        yield session


@pytest_asyncio.fixture
async def make_card(db_session):
    """
    Factory that inserts a card with the given balances (in cents).

    Usage:
        card = await make_card(cold=10_000, limit=50_000)
    """
    counter = {"n": 0}

    async def _make(cold=0, real=0, limit=0, used=0, name=None, last_four="1234"):
        counter["n"] += 1
        card = Card(
            name=name or f"Card {counter['n']}",
            last_four_digits=last_four,
            cold_balance_cents=cold,
            real_balance_cents=real,
            dotation_limit_cents=limit,
            dotation_used_cents=used,
        )
        db_session.add(card)
        await db_session.flush()
        return card

    return _make


@pytest_asyncio.fixture
async def make_ad_account(db_session):
    async def _make(name="Meta Ads"):
        ad_account = AdAccount(name=name)
        db_session.add(ad_account)
        await db_session.flush()
        return ad_account

    return _make


@pytest_asyncio.fixture
async def client(db_engine):
    """
    Async HTTP test client with the test database injected.

    This overrides the get_db dependency so all requests hit the
    in-memory test database instead of the real one.
    """
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async def override_get_db():
        async with async_session() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def authenticated_client(client):
    """Test client with a freshly signed-up MEMBER user."""
    response = await client.post(
        "/auth/signup",
        json={"email": "testuser@example.com", "password": "SecurePass123!"},
    )
    assert response.status_code == 201, f"Signup failed: {response.text}"
    token = response.json()["token"]
    client.headers["Authorization"] = f"Bearer {token}"
    return client


@pytest_asyncio.fixture
async def admin_client(client, db_engine):
    """
    Test client with an ADMIN user.

    Signs up normally, then promotes the user directly in the database,
    the way an operator provisions admins.
    """
    signup_response = await client.post(
        "/auth/signup",
        json={"email": "admin@example.com", "password": "AdminPass123!"},
    )
    assert signup_response.status_code == 201
    user_id = signup_response.json()["user_id"]

    async_session = async_sessionmaker(
        db_engine, class_=AsyncSession, expire_on_commit=False,
    )
    async with async_session() as session:
        await session.execute(
            update(User)
            .where(User.id == user_id)
            .values(user_type=UserType.ADMIN)
        )
        await session.commit()

    login_response = await client.post(
        "/auth/login",
        json={"email": "admin@example.com", "password": "AdminPass123!"},
    )
    admin_token = login_response.json()["token"]
    client.headers["Authorization"] = f"Bearer {admin_token}"
    return client
