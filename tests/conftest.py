"""
Test configuration and fixtures.

Provides:
- An in-memory entity store shared by service and API tests
- Admin, manager and standard actors with bearer tokens
- HTTPX AsyncClient bound to the app with the fake store injected
"""
import os

os.environ.setdefault("ENVIRONMENT", "test")

import pytest
import pytest_asyncio
from fastapi import Request
from httpx import ASGITransport, AsyncClient

from inspection_hub.api.deps import get_store
from inspection_hub.main import app
from inspection_hub.schemas.auth import Actor
from tests.mocks import FakeEntityStore

ADMIN = {"id": "u-admin", "email": "admin@example.com", "role": "admin"}
MANAGER = {
    "id": "u-manager",
    "email": "manager@example.com",
    "role": "user",
    "is_manager": True,
}
STAFF = {"id": "u-staff", "email": "staff@example.com", "role": "user"}
OTHER = {"id": "u-other", "email": "other@example.com", "role": "user"}

TOKENS = {
    "admin-token": ADMIN,
    "manager-token": MANAGER,
    "staff-token": STAFF,
    "other-token": OTHER,
}


@pytest.fixture()
def store():
    return FakeEntityStore(users=TOKENS, token="admin-token")


@pytest.fixture()
def admin():
    return Actor.model_validate(ADMIN)


@pytest.fixture()
def manager():
    return Actor.model_validate(MANAGER)


@pytest.fixture()
def staff():
    return Actor.model_validate(STAFF)


@pytest.fixture()
def other_user():
    return Actor.model_validate(OTHER)


@pytest_asyncio.fixture()
async def client(store):
    def store_for_request(request: Request):
        token = request.headers.get("Authorization", "").removeprefix("Bearer ")
        return store.with_token(token or None)

    app.dependency_overrides[get_store] = store_for_request
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
