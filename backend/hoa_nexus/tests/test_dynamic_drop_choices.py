"""
Tests for dynamic drop choice routes.
"""

import pytest

from hoa_nexus.database.session import session_scope
from hoa_nexus.models.dynamic_drop_choice import DynamicDropChoice


def choices_in(registry, group_id):
    with session_scope(registry.get_connection()) as session:
        rows = (
            session.query(DynamicDropChoice)
            .filter(DynamicDropChoice.group_id == group_id)
            .order_by(DynamicDropChoice.display_order)
            .all()
        )
        return [(row.choice_value, row.display_order, row.is_default, row.is_active) for row in rows]


@pytest.fixture
def client_types(make_choice):
    return {
        "HOA": make_choice("client-types", "HOA", display_order=2),
        "Condo": make_choice("client-types", "Condo", display_order=1, is_default=True),
        "Retired": make_choice("client-types", "Retired", display_order=3, is_active=False),
    }


class TestGetChoices:
    def test_single_group_in_display_order(self, client, client_types, auth_headers):
        response = client.get("/api/dynamic-drop-choices", params={"groupId": "client-types"}, headers=auth_headers())

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Dynamic drop choices retrieved successfully"
        assert body["count"] == 1
        assert [c["ChoiceValue"] for c in body["data"]["client-types"]] == ["Condo", "HOA"]

    def test_include_inactive(self, client, client_types, auth_headers):
        body = client.get(
            "/api/dynamic-drop-choices",
            params={"groupId": "client-types", "includeInactive": "true"},
            headers=auth_headers(),
        ).json()
        assert [c["ChoiceValue"] for c in body["data"]["client-types"]] == ["Condo", "HOA", "Retired"]

    def test_several_groups(self, client, client_types, make_choice, auth_headers):
        make_choice("fee-types", "Flat")
        body = client.get(
            "/api/dynamic-drop-choices",
            params={"groupIds": "client-types, fee-types,unknown"},
            headers=auth_headers(),
        ).json()
        assert body["count"] == 3
        assert [c["ChoiceValue"] for c in body["data"]["fee-types"]] == ["Flat"]
        assert body["data"]["unknown"] == []

    def test_legacy_table_and_column(self, client, client_types, make_choice, auth_headers):
        make_choice("service-types", "Full Service")
        body = client.get(
            "/api/dynamic-drop-choices",
            params={"table": "cor_Communities", "column": "ClientType,ServiceType"},
            headers=auth_headers(),
        ).json()
        assert sorted(body["data"]) == ["ClientType", "ServiceType"]
        assert [c["ChoiceValue"] for c in body["data"]["ServiceType"]] == ["Full Service"]

    def test_legacy_column_without_mapping(self, client, auth_headers):
        response = client.get(
            "/api/dynamic-drop-choices",
            params={"table": "cor_Communities", "column": "Color"},
            headers=auth_headers(),
        )
        assert response.status_code == 400
        assert response.json()["error"]["message"] == "No GroupID mapping found for cor_Communities.Color"

    def test_group_is_required(self, client, auth_headers):
        response = client.get("/api/dynamic-drop-choices", headers=auth_headers())
        assert response.status_code == 400
        assert response.json()["error"]["message"] == 'Query parameter "groupId" or "groupIds" is required'

    def test_residents_can_read(self, client, client_types, auth_headers):
        response = client.get(
            "/api/dynamic-drop-choices",
            params={"groupId": "client-types"},
            headers=auth_headers(type="Resident", accessLevel=None),
        )
        assert response.status_code == 200


class TestCreateChoice:
    def test_appends_to_group(self, client, registry, client_types, auth_headers):
        response = client.post(
            "/api/dynamic-drop-choices",
            json={"groupId": "client-types", "choiceValue": "Master"},
            headers=auth_headers(),
        )

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Dynamic drop choice created successfully"
        assert body["data"]["DisplayOrder"] == 4
        assert body["data"]["CreatedBy"] == 1

    def test_new_default_replaces_old(self, client, registry, client_types, auth_headers):
        client.post(
            "/api/dynamic-drop-choices",
            json={"tableName": "cor_Communities", "columnName": "ClientType", "choiceValue": "Master", "isDefault": True},
            headers=auth_headers(),
        )
        defaults = [value for value, _, is_default, _ in choices_in(registry, "client-types") if is_default]
        assert defaults == ["Master"]

    def test_requires_group_and_value(self, client, auth_headers):
        response = client.post("/api/dynamic-drop-choices", json={"groupId": "client-types"}, headers=auth_headers())
        assert response.status_code == 400
        assert response.json()["error"]["message"] == "groupId (or tableName/columnName) and choiceValue are required"

    def test_system_managed_group(self, client, auth_headers):
        response = client.post(
            "/api/dynamic-drop-choices",
            json={"groupId": "access-levels", "choiceValue": "Superuser"},
            headers=auth_headers(),
        )
        assert response.status_code == 403
        assert response.json()["error"]["message"].startswith("Cannot create new choices for access-levels.")

    def test_needs_a_stakeholder(self, client, auth_headers):
        response = client.post(
            "/api/dynamic-drop-choices",
            json={"groupId": "client-types", "choiceValue": "Master"},
            headers=auth_headers(stakeholderId=None),
        )
        assert response.status_code == 401

    def test_residents_cannot_create(self, client, auth_headers):
        response = client.post(
            "/api/dynamic-drop-choices",
            json={"groupId": "client-types", "choiceValue": "Master"},
            headers=auth_headers(type="Resident", accessLevel=None),
        )
        assert response.status_code == 403


class TestUpdateChoice:
    def test_rename_and_make_default(self, client, registry, client_types, auth_headers):
        response = client.put(
            f"/api/dynamic-drop-choices/{client_types['HOA']}",
            json={"choiceValue": "HOA (Single Family)", "isDefault": True},
            headers=auth_headers(),
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Dynamic drop choice updated successfully"
        assert response.json()["data"]["ModifiedBy"] == 1
        assert [row[:3] for row in choices_in(registry, "client-types")] == [
            ("Condo", 1, False),
            ("HOA (Single Family)", 2, True),
            ("Retired", 3, False),
        ]

    def test_deactivate_through_update(self, client, registry, client_types, auth_headers):
        client.put(
            f"/api/dynamic-drop-choices/{client_types['HOA']}",
            json={"isActive": False},
            headers=auth_headers(),
        )
        assert ("HOA", 2, False, False) in choices_in(registry, "client-types")

    def test_unknown_choice(self, client, auth_headers):
        response = client.put("/api/dynamic-drop-choices/999", json={"choiceValue": "X"}, headers=auth_headers())
        assert response.status_code == 404
        assert response.json()["error"]["message"] == "Choice not found"

    def test_system_managed_choice(self, client, make_choice, auth_headers):
        admin = make_choice("access-levels", "Admin", is_system_managed=True)
        response = client.put(f"/api/dynamic-drop-choices/{admin}", json={"choiceValue": "Root"}, headers=auth_headers())
        assert response.status_code == 403


class TestToggleActive:
    def test_deactivate_then_activate(self, client, registry, client_types, auth_headers):
        url = f"/api/dynamic-drop-choices/{client_types['Condo']}/toggle-active"

        off = client.put(url, json={"isActive": False}, headers=auth_headers())
        assert off.status_code == 200
        assert off.json()["message"] == "Choice deactivated successfully"
        assert off.json()["data"]["IsActive"] is False

        on = client.put(url, json={"isActive": True}, headers=auth_headers())
        assert on.json()["message"] == "Choice activated successfully"
        assert on.json()["data"]["IsActive"] is True

    def test_requires_flag(self, client, client_types, auth_headers):
        response = client.put(
            f"/api/dynamic-drop-choices/{client_types['Condo']}/toggle-active", json={}, headers=auth_headers()
        )
        assert response.status_code == 400
        assert response.json()["error"]["message"] == "isActive is required"

    def test_inactive_choice_can_be_reactivated(self, client, client_types, auth_headers):
        response = client.put(
            f"/api/dynamic-drop-choices/{client_types['Retired']}/toggle-active",
            json={"isActive": True},
            headers=auth_headers(),
        )
        assert response.status_code == 200


class TestBulkUpdateOrder:
    def test_renumbers_in_given_order(self, client, registry, client_types, make_choice, auth_headers):
        other_group = make_choice("fee-types", "Flat", display_order=7)
        response = client.post(
            "/api/dynamic-drop-choices/bulk-update-order",
            json={
                "groupId": "client-types",
                "choices": [
                    {"choiceId": client_types["Retired"]},
                    {"choiceId": client_types["HOA"]},
                    {"choiceId": client_types["Condo"]},
                    {"choiceId": other_group},
                ],
            },
            headers=auth_headers(),
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Display order updated successfully"
        assert [row[:2] for row in choices_in(registry, "client-types")] == [
            ("Retired", 1),
            ("HOA", 2),
            ("Condo", 3),
        ]
        assert choices_in(registry, "fee-types")[0][1] == 7

    def test_requires_choices_array(self, client, auth_headers):
        response = client.post(
            "/api/dynamic-drop-choices/bulk-update-order",
            json={"groupId": "client-types"},
            headers=auth_headers(),
        )
        assert response.status_code == 400
        assert response.json()["error"]["message"] == "groupId (or tableName/columnName) and choices array are required"
