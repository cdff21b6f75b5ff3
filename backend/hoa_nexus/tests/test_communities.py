"""
Tests for community and property routes.

All rows are created in the default tenant database unless a test names
another organization.
"""

from hoa_nexus.database.session import session_scope
from hoa_nexus.models.property import Property, PropertyStakeholder


def add_property(registry, community_id, address, database_name=None, is_active=True):
    with session_scope(registry.get_connection(database_name)) as session:
        prop = Property(community_id=community_id, address_line1=address, is_active=is_active)
        session.add(prop)
        session.commit()
        return prop.id


class TestCommunities:
    def test_list_includes_property_count(self, client, registry, make_community, auth_headers):
        ridge = make_community(name="Sunset Ridge")
        make_community(name="Aspen Court", pcode="AC01")
        add_property(registry, ridge, "1 Ridge Way")
        add_property(registry, ridge, "2 Ridge Way")
        add_property(registry, ridge, "3 Ridge Way", is_active=False)

        response = client.get("/api/communities", headers=auth_headers())

        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 2
        assert [c["Name"] for c in body["data"]] == ["Aspen Court", "Sunset Ridge"]
        assert [c["PropertyCount"] for c in body["data"]] == [0, 2]

    def test_get_community(self, client, make_community, auth_headers):
        community_id = make_community(city="Boulder")
        response = client.get(f"/api/communities/{community_id}", headers=auth_headers())
        assert response.status_code == 200
        assert response.json()["data"]["City"] == "Boulder"

    def test_get_missing_community(self, client, auth_headers):
        response = client.get("/api/communities/999", headers=auth_headers())
        assert response.status_code == 404
        assert response.json()["error"]["message"] == "Community not found with identifier: 999"

    def test_stats(self, client, registry, make_community, make_stakeholder, auth_headers):
        community_id = make_community()
        add_property(registry, community_id, "1 Ridge Way")
        make_stakeholder(community_id=community_id)
        make_stakeholder(community_id=community_id, is_active=False)

        data = client.get(f"/api/communities/{community_id}/stats", headers=auth_headers()).json()["data"]
        assert data["PropertyCount"] == 1
        assert data["StakeholderCount"] == 1

    def test_create_applies_defaults(self, client, auth_headers):
        response = client.post(
            "/api/communities",
            json={"Name": "Lakeside", "Pcode": "LS01", "FormationDate": "2001-05-01"},
            headers=auth_headers(),
        )
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["Status"] == "Active"
        assert data["TimeZone"] == "UTC"
        assert data["FormationDate"] == "2001-05-01"
        assert data["IsActive"] is True

    def test_create_requires_name(self, client, auth_headers):
        response = client.post("/api/communities", json={"Pcode": "X1"}, headers=auth_headers())
        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Community name is required"

    def test_update_changes_only_given_fields(self, client, make_community, auth_headers):
        community_id = make_community(city="Boulder")
        response = client.put(
            f"/api/communities/{community_id}",
            json={"DisplayName": "The Ridge"},
            headers=auth_headers(),
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["DisplayName"] == "The Ridge"
        assert data["City"] == "Boulder"

    def test_update_with_empty_body(self, client, make_community, auth_headers):
        community_id = make_community()
        response = client.put(f"/api/communities/{community_id}", json={}, headers=auth_headers())
        assert response.status_code == 400
        assert response.json()["error"]["message"] == "No fields provided for update"

    def test_delete_is_soft(self, client, make_community, auth_headers):
        community_id = make_community()
        response = client.delete(f"/api/communities/{community_id}", headers=auth_headers())
        assert response.status_code == 200
        assert response.json()["message"] == "Community deleted successfully"

        assert client.get(f"/api/communities/{community_id}", headers=auth_headers()).status_code == 404
        assert client.delete(f"/api/communities/{community_id}", headers=auth_headers()).status_code == 404

    def test_invalid_body_type(self, client, auth_headers):
        response = client.post(
            "/api/communities",
            json={"Name": "Lakeside", "IsSubAssociation": "definitely"},
            headers=auth_headers(),
        )
        assert response.status_code == 400
        assert response.json()["success"] is False


class TestProperties:
    def test_create_and_list_by_community(self, client, make_community, auth_headers):
        ridge = make_community()
        aspen = make_community(name="Aspen Court", pcode="AC01")
        for address in ("2 Ridge Way", "1 Ridge Way"):
            response = client.post(
                "/api/properties",
                json={"CommunityID": ridge, "AddressLine1": address, "Bedrooms": 3},
                headers=auth_headers(),
            )
            assert response.status_code == 201
        client.post("/api/properties", json={"CommunityID": aspen, "AddressLine1": "9 Aspen"}, headers=auth_headers())

        listed = client.get(f"/api/properties/community/{ridge}", headers=auth_headers()).json()
        assert listed["count"] == 2
        assert [p["AddressLine1"] for p in listed["data"]] == ["1 Ridge Way", "2 Ridge Way"]
        assert client.get("/api/properties", headers=auth_headers()).json()["count"] == 3

    def test_create_requires_community_and_address(self, client, auth_headers):
        response = client.post("/api/properties", json={"City": "Boulder"}, headers=auth_headers())
        assert response.status_code == 400
        assert response.json()["error"]["message"] == "CommunityID and AddressLine1 are required"

    def test_create_in_unknown_community(self, client, auth_headers):
        response = client.post(
            "/api/properties",
            json={"CommunityID": 404, "AddressLine1": "Nowhere"},
            headers=auth_headers(),
        )
        assert response.status_code == 404

    def test_property_stakeholders(self, client, registry, make_community, make_stakeholder, auth_headers):
        community_id = make_community()
        property_id = add_property(registry, community_id, "1 Ridge Way")
        owner = make_stakeholder(first_name="Ava", last_name="Owner", email="ava@example.test")
        gone = make_stakeholder(first_name="Gone", last_name="Person", is_active=False)
        with session_scope(registry.get_connection()) as session:
            session.add_all([
                PropertyStakeholder(property_id=property_id, stakeholder_id=owner, relationship_type="Owner"),
                PropertyStakeholder(property_id=property_id, stakeholder_id=gone, relationship_type="Tenant"),
            ])
            session.commit()

        data = client.get(f"/api/properties/{property_id}/stakeholders", headers=auth_headers()).json()["data"]
        assert data["AddressLine1"] == "1 Ridge Way"
        assert data["stakeholders"] == [{
            "StakeholderID": owner,
            "StakeholderType": "Resident",
            "FirstName": "Ava",
            "LastName": "Owner",
            "Email": "ava@example.test",
            "Phone": None,
            "RelationshipType": "Owner",
        }]

    def test_update_and_delete(self, client, registry, make_community, auth_headers):
        community_id = make_community()
        property_id = add_property(registry, community_id, "1 Ridge Way")

        updated = client.put(f"/api/properties/{property_id}", json={"City": "Denver"}, headers=auth_headers())
        assert updated.json()["data"]["City"] == "Denver"

        assert client.delete(f"/api/properties/{property_id}", headers=auth_headers()).status_code == 200
        assert client.get(f"/api/properties/{property_id}", headers=auth_headers()).status_code == 404

    def test_update_to_unknown_community(self, client, registry, make_community, auth_headers):
        property_id = add_property(registry, make_community(), "1 Ridge Way")
        response = client.put(f"/api/properties/{property_id}", json={"CommunityID": 777}, headers=auth_headers())
        assert response.status_code == 404
