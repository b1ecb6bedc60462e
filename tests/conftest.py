"""
tests/conftest.py -- Shared test fixtures for Stockroom tests.

This module provides:
  - user_store / item_store: in-memory stores for unit tests
  - codec: TokenCodec with a fixed secret
  - authenticator / service: wired components over those stores
  - api_client: TestClient running the real app with isolated stores, plus
    an admin and a staff token for Authorization headers

Design: Named shared-memory SQLite URIs (not plain :memory:) are used for the
API fixture because TestClient runs sync route handlers in a thread pool.
Plain :memory: DBs are per-connection and would present a blank schema to
each worker thread. Each fixture instance gets a unique name so tests never
see each other's records.

The DEBUG env var must be set before any project import so get_settings()
auto-generates SECRET_KEY in dev mode rather than raising ValueError.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager
from dataclasses import dataclass

# CRITICAL: Set DEBUG before any project import so get_settings() can
# auto-generate SECRET_KEY in dev mode instead of raising ValueError.
os.environ.setdefault("DEBUG", "true")

import pytest
from fastapi.testclient import TestClient

from api.main import app, close_state, init_state
from auth.authenticator import Authenticator
from auth.models import Principal, Role
from auth.store import UserStore
from auth.tokens import TokenCodec
from core.config import Settings
from inventory.service import InventoryService
from inventory.store import ItemStore

TEST_SECRET = "test-secret-key-that-is-at-least-32-chars"
# Lowest cost factor the Authenticator accepts; keeps the suite fast.
TEST_ROUNDS = 10


def _shared_memory_url(prefix: str) -> str:
    return f"sqlite:///file:{prefix}_{uuid.uuid4().hex}?mode=memory&cache=shared&uri=true"


# ---------------------------------------------------------------------------
# Unit-level fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def user_store() -> Generator[UserStore, None, None]:
    store = UserStore(_shared_memory_url("users"))
    yield store
    store.close()


@pytest.fixture
def item_store() -> Generator[ItemStore, None, None]:
    store = ItemStore(_shared_memory_url("items"))
    yield store
    store.close()


@pytest.fixture
def codec() -> TokenCodec:
    return TokenCodec(TEST_SECRET, expire_seconds=86400)


@pytest.fixture
def authenticator(user_store: UserStore, codec: TokenCodec) -> Authenticator:
    return Authenticator(user_store, codec, bcrypt_rounds=TEST_ROUNDS)


@pytest.fixture
def service(item_store: ItemStore, user_store: UserStore) -> InventoryService:
    return InventoryService(item_store, user_store)


@pytest.fixture
def admin(authenticator: Authenticator) -> Principal:
    summary = authenticator.register("Ada Admin", "ada@example.com", "adminpass", Role.admin)
    return Principal(id=summary.id, name=summary.name, role=summary.role)


@pytest.fixture
def staff(authenticator: Authenticator) -> Principal:
    summary = authenticator.register("Sam Staff", "sam@example.com", "staffpass")
    return Principal(id=summary.id, name=summary.name, role=summary.role)


# ---------------------------------------------------------------------------
# API fixtures
# ---------------------------------------------------------------------------


def _test_settings() -> Settings:
    return Settings(
        debug=True,
        secret_key=TEST_SECRET,
        bcrypt_rounds=TEST_ROUNDS,
        auth_db_url=_shared_memory_url("api_auth"),
        inventory_db_url=_shared_memory_url("api_items"),
    )


def _patch_lifespan(settings: Settings):
    """Return an async context manager that replaces the real lifespan.

    Wires stores built from the test settings into app.state so TestClient
    routes use isolated in-memory databases.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        init_state(app, settings)
        yield
        close_state(app)

    return test_lifespan


@dataclass
class ApiContext:
    client: TestClient
    admin_token: str
    admin_id: int
    staff_token: str
    staff_id: int

    def auth(self, token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def empty_api_client() -> Generator[TestClient, None, None]:
    """TestClient over stores with no accounts at all (first-run state)."""
    app.router.lifespan_context = _patch_lifespan(_test_settings())
    with TestClient(app, raise_server_exceptions=True) as client:
        yield client


@pytest.fixture
def api_client() -> Generator[ApiContext, None, None]:
    """Yield an ApiContext with an admin and a staff account already registered.

    Tokens are minted through the real login endpoint so the tests exercise
    the same path a client would.
    """
    app.router.lifespan_context = _patch_lifespan(_test_settings())
    with TestClient(app, raise_server_exceptions=True) as client:
        authenticator: Authenticator = app.state.authenticator
        admin = authenticator.register("Ada Admin", "ada@example.com", "adminpass", Role.admin)
        staff = authenticator.register("Sam Staff", "sam@example.com", "staffpass", Role.staff)

        admin_token = client.post("/api/v1/auth/login", json={"email": "ada@example.com", "password": "adminpass"})
        staff_token = client.post("/api/v1/auth/login", json={"email": "sam@example.com", "password": "staffpass"})

        yield ApiContext(
            client=client,
            admin_token=admin_token.json()["token"],
            admin_id=admin.id,
            staff_token=staff_token.json()["token"],
            staff_id=staff.id,
        )
