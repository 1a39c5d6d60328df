"""
Test fixtures for the minibank test suite.

  - store: Fresh in-memory SQLite record store for each test
  - db_session: A session on that store, for repository-level tests
  - client: Async HTTP test client for an app built around the store
  - registered_user: Ana, created through the real create endpoint
  - staff_client: Client carrying the bearer token of a bank employee

In-memory SQLite (sqlite+aiosqlite://) keeps every test isolated. The app
is built with create_app(store), the same composition root the server
uses, so no dependency overrides are needed.
"""

import os

# Settings require a signing key; set it before minibank is imported
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import update

from minibank.database import RecordStore
from minibank.main import create_app
from minibank.models.user import Role, User


TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest_asyncio.fixture
async def store():
    """Create a fresh record store with all tables for each test."""
    store = RecordStore(TEST_DATABASE_URL)
    await store.create_schema()
    yield store
    await store.drop_schema()
    await store.close()


@pytest_asyncio.fixture
async def db_session(store):
    async with store.session() as session:
        yield session


@pytest_asyncio.fixture
async def client(store):
    """Async HTTP test client serving from the test store."""
    app = create_app(store)

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest_asyncio.fixture
async def registered_user(client):
    """Create Ana via the create endpoint and return the user payload."""
    response = await client.post(
        "/account/create",
        json={"name": "Ana", "email": "ana@example.com", "password": "secret"},
    )
    assert response.status_code == 201, f"Create failed: {response.text}"
    return response.json()["user"]


async def login_token(client, email, password):
    response = await client.post(
        "/account/login",
        json={"email": email, "password": password},
    )
    assert response.status_code == 200, f"Login failed: {response.text}"
    return response.headers["Authorization"]


@pytest_asyncio.fixture
async def staff_client(client, store):
    """
    Client authenticated as a bank employee.

    Staff are provisioned by an operator, not self-service: the user is
    created normally and then promoted directly in the store.
    """
    response = await client.post(
        "/account/create",
        json={"name": "Teller", "email": "teller@example.com", "password": "TellerPass1"},
    )
    assert response.status_code == 201

    async with store.session() as session:
        await session.execute(
            update(User)
            .where(User.email == "teller@example.com")
            .values(role=Role.BANK_EMPLOYEE)
        )
        await session.commit()

    client.headers["Authorization"] = await login_token(
        client, "teller@example.com", "TellerPass1"
    )
    return client
