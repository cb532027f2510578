"""Pytest configuration and fixtures for fieldops.

HTTP tests run the real app (fieldops.main:app) over ASGITransport with the
document store replaced by tests.fakes.FakeFirestoreClient and real JWTs
signed with the test secret. Settings come from env, set here before the app
module is imported.
"""

import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-for-fieldops-tests-only")
os.environ.setdefault("WRITE_RATE_LIMIT", "10000/minute")
os.environ.setdefault("TRIGGER_BACKOFF_BASE_SECONDS", "0")
os.environ.setdefault("TRIGGER_MAX_ATTEMPTS", "2")

from collections.abc import AsyncIterator  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from fieldops.api.v1.dependencies import get_firestore, get_trigger_dispatcher  # noqa: E402
from fieldops.core.config import get_settings  # noqa: E402
from fieldops.infrastructure.services.tenant_seeding import TenantSeedingService  # noqa: E402
from fieldops.infrastructure.services.trigger_dispatcher import (  # noqa: E402
    TriggerDispatcher,
    build_trigger_dispatcher,
)
from fieldops.main import app  # noqa: E402
from tests.factories import (  # noqa: E402
    COMPANY_A,
    COMPANY_B,
    add_customer,
    add_role,
    add_user,
)
from tests.fakes import FakeFirestoreClient  # noqa: E402


@pytest.fixture
def store() -> FakeFirestoreClient:
    """Empty in-memory document store."""
    return FakeFirestoreClient()


@pytest.fixture
async def dispatcher(store: FakeFirestoreClient) -> AsyncIterator[TriggerDispatcher]:
    """Running trigger dispatcher over the fake store; webhooks hit a mock transport."""
    http_client = httpx.AsyncClient(
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json={"ok": True}))
    )
    dispatcher = build_trigger_dispatcher(store, http_client, get_settings())
    await dispatcher.start()
    yield dispatcher
    await dispatcher.stop(timeout=5)
    await http_client.aclose()


@pytest.fixture
async def client(
    store: FakeFirestoreClient, dispatcher: TriggerDispatcher
) -> AsyncIterator[AsyncClient]:
    """Async HTTP client against the FastAPI app (ASGI) with the fake store wired in."""
    app.dependency_overrides[get_firestore] = lambda: store
    app.dependency_overrides[get_trigger_dispatcher] = lambda: dispatcher
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def seeded(store: FakeFirestoreClient) -> FakeFirestoreClient:
    """Platform roles plus company A defaults; ``admin-a`` holds Administrator in A,
    ``owner`` is platform owner, ``tech-a`` holds a narrow technician role.
    Customers ``cust-1`` (A) and ``cust-b`` (B) exist."""
    seeding = TenantSeedingService(store)
    add_user(store, "owner", None)
    await seeding.seed_platform(owner_user_id="owner")
    add_user(store, "admin-a", COMPANY_A)
    await seeding.seed_company(COMPANY_A, admin_user_id="admin-a")
    add_role(
        store,
        "tech-role",
        COMPANY_A,
        {"work-orders": {"can_access": True, "view": True}, "automation": {"view": True}},
        name="Field Tech",
    )
    add_user(store, "tech-a", COMPANY_A, ("tech-role",))
    add_user(store, "admin-b", COMPANY_B)
    await seeding.seed_company(COMPANY_B, admin_user_id="admin-b")
    add_customer(store, "cust-1", COMPANY_A)
    add_customer(store, "cust-b", COMPANY_B)
    return store
