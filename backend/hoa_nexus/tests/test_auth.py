"""
Tests for login, session and password endpoints.

Login reads the account from the master database, then the stakeholder from
the organization's tenant database; the issued token routes later requests
to that tenant database.
"""

from datetime import timedelta

import pytest

from hoa_nexus.auth.jwt import decode_access_token
from hoa_nexus.auth.passwords import hash_password, verify_password
from hoa_nexus.database.session import session_scope
from hoa_nexus.models.user_account import UserAccount
from hoa_nexus.services.user_account_service import utcnow

from conftest import TEST_PASSWORD

EMAIL = "manager@sunsetridge.test"


@pytest.fixture
def portal_user(make_organization, make_stakeholder, make_account):
    """Active organization on org_a with one portal-enabled employee."""
    organization_id = make_organization("org_a", name="Org A")
    stakeholder_id = make_stakeholder(
        "org_a",
        type="Company Employee",
        access_level="Full",
        first_name="Morgan",
        last_name="Lee",
        email=EMAIL,
        portal_access_enabled=True,
    )
    account_id = make_account(organization_id, EMAIL, stakeholder_id)
    return {
        "organization_id": organization_id,
        "stakeholder_id": stakeholder_id,
        "account_id": account_id,
    }


def update_account(registry, account_id, **fields):
    with session_scope(registry.get_master_connection()) as session:
        account = session.get(UserAccount, account_id)
        for key, value in fields.items():
            setattr(account, key, value)
        session.commit()


def load_account(registry, account_id):
    with session_scope(registry.get_master_connection()) as session:
        account = session.get(UserAccount, account_id)
        session.expunge(account)
        return account


def login(client, username=EMAIL, password=TEST_PASSWORD):
    return client.post("/api/auth/login", json={"username": username, "password": password})


@pytest.mark.security
class TestLogin:
    def test_login_issues_token_for_tenant(self, client, portal_user):
        response = login(client)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Login successful"

        claims = decode_access_token(body["token"])
        assert claims.database_name == "org_a"
        assert claims.user_id == portal_user["account_id"]
        assert claims.stakeholder_id == portal_user["stakeholder_id"]
        assert claims.organization_id == portal_user["organization_id"]
        assert claims.access_level == "Full"

        user = body["user"]
        assert user["firstName"] == "Morgan"
        assert user["mustChangePassword"] is True

    def test_token_routes_to_tenant_database(self, client, portal_user, make_community):
        make_community("org_a", name="Only In A")
        token = login(client).json()["token"]

        response = client.get("/api/communities", headers={"Authorization": f"Bearer {token}"})
        assert [c["Name"] for c in response.json()["data"]] == ["Only In A"]

    def test_missing_credentials(self, client):
        response = client.post("/api/auth/login", json={"username": EMAIL})
        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Username and password are required"

    def test_unknown_user(self, client, registry):
        response = login(client, username="nobody@example.test")
        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Invalid username or password"

    def test_wrong_password_counts_failure(self, client, registry, portal_user):
        response = login(client, password="not-the-password")
        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Invalid username or password"
        assert load_account(registry, portal_user["account_id"]).failed_login_attempts == 1

    def test_successful_login_resets_failures(self, client, registry, portal_user):
        update_account(registry, portal_user["account_id"], failed_login_attempts=3)
        assert login(client).status_code == 200
        assert load_account(registry, portal_user["account_id"]).failed_login_attempts == 0

    def test_locked_account(self, client, registry, portal_user):
        update_account(registry, portal_user["account_id"], account_locked=True)
        response = login(client)
        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Account is locked. Please contact administrator."

    def test_expired_temporary_password(self, client, registry, portal_user):
        update_account(
            registry,
            portal_user["account_id"],
            temp_password_expiry=utcnow() - timedelta(days=1),
        )
        response = login(client)
        assert response.status_code == 401
        assert "Temporary password has expired" in response.json()["error"]["message"]

    def test_inactive_organization(self, client, make_organization, make_stakeholder, make_account):
        organization_id = make_organization("org_c", is_active=False)
        stakeholder_id = make_stakeholder("org_c", email="c@org.test", portal_access_enabled=True)
        make_account(organization_id, "c@org.test", stakeholder_id)

        response = login(client, username="c@org.test")
        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Organization is not active"

    def test_portal_access_disabled(self, client, make_organization, make_stakeholder, make_account):
        organization_id = make_organization("org_a")
        stakeholder_id = make_stakeholder("org_a", email="off@org.test", portal_access_enabled=False)
        make_account(organization_id, "off@org.test", stakeholder_id)

        response = login(client, username="off@org.test")
        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Portal access is not enabled for this account."

    def test_logout_is_public(self, client):
        response = client.post("/api/auth/logout")
        assert response.status_code == 200
        assert response.json()["success"] is True


class TestSession:
    def test_me_returns_profile(self, client, portal_user):
        token = login(client).json()["token"]
        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        user = response.json()["user"]
        assert user["stakeholderId"] == portal_user["stakeholder_id"]
        assert user["email"] == EMAIL
        assert user["type"] == "Company Employee"

    def test_me_requires_token(self, client):
        assert client.get("/api/auth/me").status_code == 401

    def test_change_password(self, client, registry, portal_user):
        token = login(client).json()["token"]
        headers = {"Authorization": f"Bearer {token}"}

        response = client.put(
            "/api/auth/change-password",
            json={"currentPassword": TEST_PASSWORD, "newPassword": "Brand-New-Pass-99"},
            headers=headers,
        )
        assert response.status_code == 200
        assert response.json()["message"] == "Password changed successfully"

        account = load_account(registry, portal_user["account_id"])
        assert account.must_change_password is False
        assert account.temp_password_expiry is None
        assert verify_password("Brand-New-Pass-99", account.password_hash)
        assert login(client, password="Brand-New-Pass-99").status_code == 200

    def test_change_password_wrong_current(self, client, portal_user):
        token = login(client).json()["token"]
        response = client.put(
            "/api/auth/change-password",
            json={"currentPassword": "wrong-password", "newPassword": "Brand-New-Pass-99"},
            headers={"Authorization": f"Bearer {token}"},
        )
        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Current password is incorrect"

    def test_change_password_too_short(self, client, portal_user):
        token = login(client).json()["token"]
        response = client.put(
            "/api/auth/change-password",
            json={"currentPassword": TEST_PASSWORD, "newPassword": "short"},
            headers={"Authorization": f"Bearer {token}"},
        )
        assert response.status_code == 400
        assert response.json()["error"]["message"] == "New password must be at least 8 characters long"


class TestPasswords:
    def test_hash_and_verify(self):
        hashed = hash_password("correct horse")
        assert hashed != "correct horse"
        assert verify_password("correct horse", hashed)
        assert not verify_password("wrong horse", hashed)

    def test_verify_rejects_malformed_hash(self):
        assert not verify_password("anything", "not-a-bcrypt-hash")
