"""
Security tests for JWT authentication and tenant database routing.

CRITICAL: These tests verify that:
1. Protected paths reject missing (401) and invalid/expired (403) tokens
   without invoking the downstream handler
2. Each request is routed to the pool named by its token's databaseName
3. Requests without databaseName use the default pool and never add a
   tenant pool entry
4. The tenant database name never leaks past the end of a request
5. Data in one organization's database is invisible to another
6. Overlapping requests keep their own tenant, and a slow pool creation
   for one tenant does not hold up requests for another
"""

import asyncio
import time

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient

from hoa_nexus.auth.jwt import create_access_token
from hoa_nexus.config.settings import AuthSettings
from hoa_nexus.database.registry import ConnectionRegistry, get_connection, set_registry
from hoa_nexus.platform.database_context import get_database_name
from hoa_nexus.platform.tenant_context import (
    PUBLIC_PATHS,
    TenantContext,
    TenantContextMiddleware,
    get_tenant_context,
)

from conftest import DEFAULT_DATABASE, SqliteEngineFactory


@pytest.fixture
def whoami(registry):
    """
    Minimal app behind the middleware that records, for every request it
    handles, the context database name and the engine resolved for it.
    """
    app = FastAPI()
    app.middleware("http")(TenantContextMiddleware())
    seen = []

    @app.get("/api/whoami")
    async def whoami_endpoint(request: Request):
        tenant_context = get_tenant_context(request)
        seen.append((get_database_name(), get_connection()))
        return {"userId": tenant_context.user_id, "databaseName": get_database_name()}

    @app.get("/public")
    async def public_endpoint():
        return {"databaseName": get_database_name()}

    return TestClient(app), seen


def create_token_with_secret(secret, **claims):
    payload = {"userId": "user-1", "username": "a@b.c"}
    payload.update(claims)
    return create_access_token(payload, settings=AuthSettings(jwt_secret=secret))


@pytest.mark.security
class TestAuthentication:
    def test_missing_token_returns_401(self, whoami):
        client, seen = whoami
        response = client.get("/api/whoami")
        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Access token required"}
        assert seen == []

    def test_non_bearer_header_returns_401(self, whoami):
        client, seen = whoami
        response = client.get("/api/whoami", headers={"Authorization": "Basic dXNlcjpwYXNz"})
        assert response.status_code == 401
        assert seen == []

    def test_garbage_token_returns_403(self, whoami):
        client, seen = whoami
        response = client.get("/api/whoami", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 403
        assert response.json() == {"success": False, "message": "Invalid or expired token"}
        assert seen == []

    def test_wrong_signature_returns_403(self, whoami):
        client, seen = whoami
        forged = create_token_with_secret("some-other-secret", databaseName="org_a")
        response = client.get("/api/whoami", headers={"Authorization": f"Bearer {forged}"})
        assert response.status_code == 403
        assert seen == []

    def test_expired_token_returns_403(self, whoami):
        client, seen = whoami
        token = create_access_token(
            {"userId": "user-1", "username": "a@b.c", "databaseName": "org_a"},
            expires_in=-60,
        )
        response = client.get("/api/whoami", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 403
        assert seen == []

    def test_token_without_user_id_returns_403(self, whoami, make_token):
        client, seen = whoami
        token = make_token(userId=None, databaseName="org_a")
        response = client.get("/api/whoami", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 403
        assert seen == []

    def test_token_with_empty_user_id_returns_403(self, whoami, make_token):
        client, seen = whoami
        token = make_token(userId="")
        response = client.get("/api/whoami", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 403
        assert seen == []

    def test_public_path_needs_no_token(self, whoami):
        client, seen = whoami
        response = client.get("/public")
        assert response.status_code == 200
        assert response.json() == {"databaseName": None}

    def test_login_and_health_are_public(self):
        assert {"/", "/health", "/api/auth/login", "/api/auth/logout"} <= PUBLIC_PATHS
        assert "/api/test-db" not in PUBLIC_PATHS


@pytest.mark.security
class TestDatabaseRouting:
    def test_requests_route_to_their_own_pool(self, whoami, registry, auth_headers):
        client, seen = whoami

        response_a = client.get("/api/whoami", headers=auth_headers(databaseName="org_a"))
        response_b = client.get("/api/whoami", headers=auth_headers(databaseName="org_b"))

        assert response_a.json()["databaseName"] == "org_a"
        assert response_b.json()["databaseName"] == "org_b"
        (name_a, engine_a), (name_b, engine_b) = seen
        assert name_a == "org_a" and engine_a is registry.get_client_connection("org_a")
        assert name_b == "org_b" and engine_b is registry.get_client_connection("org_b")
        assert engine_a is not engine_b

    def test_same_tenant_reuses_pool(self, whoami, registry, engine_factory, auth_headers):
        client, seen = whoami
        for _ in range(3):
            client.get("/api/whoami", headers=auth_headers(databaseName="org_a"))

        assert len({id(engine) for _, engine in seen}) == 1
        assert engine_factory.calls.count("org_a") == 1

    def test_no_database_claim_uses_default_pool(self, whoami, registry, auth_headers):
        client, seen = whoami
        client.get("/api/whoami", headers=auth_headers())
        client.get("/api/whoami", headers=auth_headers())

        (name_1, engine_1), (name_2, engine_2) = seen
        assert name_1 is None and name_2 is None
        assert engine_1 is engine_2 is registry.get_default_connection()
        assert registry.client_database_names == frozenset()

    def test_default_claim_uses_default_pool(self, whoami, registry, auth_headers):
        client, seen = whoami
        client.get("/api/whoami", headers=auth_headers(databaseName=DEFAULT_DATABASE))
        client.get("/api/whoami", headers=auth_headers())

        (_, engine_1), (_, engine_2) = seen
        assert engine_1 is engine_2
        assert DEFAULT_DATABASE not in registry.client_database_names

    def test_empty_claim_uses_default_pool(self, whoami, registry, auth_headers):
        client, seen = whoami
        client.get("/api/whoami", headers=auth_headers(databaseName=""))

        [(name, engine)] = seen
        assert name is None
        assert engine is registry.get_default_connection()

    def test_tenant_not_visible_after_request(self, whoami, auth_headers):
        client, _ = whoami
        client.get("/api/whoami", headers=auth_headers(databaseName="org_a"))
        assert get_database_name() is None

        response = client.get("/public")
        assert response.json() == {"databaseName": None}

    def test_request_without_claim_does_not_inherit_tenant(self, whoami, registry, auth_headers):
        client, seen = whoami
        client.get("/api/whoami", headers=auth_headers(databaseName="org_a"))
        client.get("/api/whoami", headers=auth_headers())

        assert seen[1][0] is None
        assert seen[1][1] is registry.get_default_connection()

    def test_failed_auth_does_not_create_pools(self, whoami, engine_factory):
        client, _ = whoami
        client.get("/api/whoami")
        client.get("/api/whoami", headers={"Authorization": "Bearer not-a-jwt"})
        assert engine_factory.calls == []


@pytest.fixture
def overlapping_app(registry):
    """
    App whose handlers yield between two reads of the tenant name, so
    requests running at the same time interleave inside the handler.
    """
    app = FastAPI()
    app.middleware("http")(TenantContextMiddleware())

    @app.get("/api/async-handler")
    async def async_handler():
        before = get_database_name()
        await asyncio.sleep(0.05)
        return {"before": before, "after": get_database_name(), "engine": id(get_connection())}

    @app.get("/api/sync-handler")
    def sync_handler():
        before = get_database_name()
        time.sleep(0.05)
        return {"before": before, "after": get_database_name(), "engine": id(get_connection())}

    return app


@pytest.fixture
def slow_tenant_registry(registry, db_settings):
    """Registry where creating the org_slow pool takes a full second."""
    factory = SqliteEngineFactory()

    def engine_factory(database_name):
        if database_name == "org_slow":
            time.sleep(1.0)
        return factory(database_name)

    slow_registry = ConnectionRegistry(db_settings, engine_factory=engine_factory)
    previous = set_registry(slow_registry)
    yield slow_registry
    set_registry(previous)
    slow_registry.dispose_all()


@pytest.mark.security
class TestConcurrentRequests:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", ["/api/async-handler", "/api/sync-handler"])
    async def test_overlapping_requests_keep_their_own_tenant(
        self, overlapping_app, registry, auth_headers, path
    ):
        claims = ["org_a", "org_b", None, "org_a", "org_b"]

        transport = ASGITransport(app=overlapping_app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            responses = await asyncio.gather(*(
                client.get(path, headers=auth_headers(databaseName=claim)) for claim in claims
            ))

        for claim, response in zip(claims, responses):
            assert response.status_code == 200
            body = response.json()
            assert body["before"] == body["after"] == claim
            assert body["engine"] == id(registry.get_connection(claim))
        assert registry.client_database_names == frozenset({"org_a", "org_b"})
        assert get_database_name() is None

    @pytest.mark.slow
    @pytest.mark.asyncio
    async def test_slow_pool_creation_does_not_stall_other_tenants(
        self, app, slow_tenant_registry, auth_headers
    ):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            slow = asyncio.create_task(
                client.get("/api/communities", headers=auth_headers(databaseName="org_slow"))
            )
            await asyncio.sleep(0.1)

            started = time.monotonic()
            fast = await client.get("/api/communities", headers=auth_headers(databaseName="org_fast"))
            fast_elapsed = time.monotonic() - started
            slow_still_pending = not slow.done()

            slow_response = await slow

        assert fast.status_code == 200
        assert slow_response.status_code == 200
        assert slow_still_pending
        assert fast_elapsed < 0.5


@pytest.mark.security
class TestTenantIsolation:
    def test_organizations_see_only_their_own_rows(self, client, make_community, auth_headers):
        make_community("org_a", name="Alpha Gardens", pcode="AG01")
        make_community("org_b", name="Beta Heights", pcode="BH01")

        response_a = client.get("/api/communities", headers=auth_headers(databaseName="org_a"))
        response_b = client.get("/api/communities", headers=auth_headers(databaseName="org_b"))

        assert [c["Name"] for c in response_a.json()["data"]] == ["Alpha Gardens"]
        assert [c["Name"] for c in response_b.json()["data"]] == ["Beta Heights"]

    def test_writes_land_in_the_callers_database(self, client, registry, auth_headers):
        response = client.post(
            "/api/communities",
            json={"Name": "Created In A", "Pcode": "CA01"},
            headers=auth_headers(databaseName="org_a"),
        )
        assert response.status_code == 201

        listed_b = client.get("/api/communities", headers=auth_headers(databaseName="org_b"))
        listed_default = client.get("/api/communities", headers=auth_headers())
        assert listed_b.json()["count"] == 0
        assert listed_default.json()["count"] == 0

    def test_tenant_header_on_response(self, client, auth_headers):
        response = client.get("/api/communities", headers=auth_headers(databaseName="org_a"))
        assert response.headers["X-Tenant-Database"] == "org_a"

        response = client.get("/api/communities", headers=auth_headers())
        assert "X-Tenant-Database" not in response.headers


class TestTenantContext:
    def test_is_immutable(self):
        ctx = TenantContext(user_id="user-1", username="a@b.c", database_name="org_a")
        with pytest.raises(AttributeError):
            ctx.database_name = "org_b"
        assert ctx.database_name == "org_a"

    def test_requires_user_id(self):
        with pytest.raises(ValueError):
            TenantContext(user_id="", username="a@b.c")

    def test_empty_database_name_is_none(self):
        ctx = TenantContext(user_id="user-1", username="a@b.c", database_name="")
        assert ctx.database_name is None

    def test_repr_omits_username(self):
        ctx = TenantContext(user_id="user-1", username="secret@b.c", stakeholder_id=7)
        assert "secret@b.c" not in repr(ctx)
        assert "stakeholder_id=7" in repr(ctx)
