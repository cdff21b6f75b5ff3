"""
Tests for amenity listing and lookup.
"""

import pytest

from hoa_nexus.database.session import session_scope
from hoa_nexus.models.amenity import Amenity


@pytest.fixture
def make_amenity(registry):
    def _make_amenity(community_id, name, **fields):
        fields.setdefault("status", "Available")
        with session_scope(registry.get_connection()) as session:
            amenity = Amenity(community_id=community_id, name=name, **fields)
            session.add(amenity)
            session.commit()
            return amenity.id

    return _make_amenity


@pytest.fixture
def ridge(make_community, make_amenity):
    community_id = make_community()
    make_amenity(community_id, "Pool", amenity_type="Pool", description="Heated outdoor pool")
    make_amenity(community_id, "Clubhouse", amenity_type="Building")
    make_amenity(community_id, "Tennis Court", amenity_type="Court", status="Closed")
    make_amenity(community_id, "Basketball Court", amenity_type="Court")
    return community_id


class TestListAmenities:
    def test_defaults_to_available_ordered_by_name(self, client, ridge, auth_headers):
        response = client.get(f"/api/amenities/{ridge}/amenities", headers=auth_headers())

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert [a["Name"] for a in body["data"]] == ["Basketball Court", "Clubhouse", "Pool"]
        assert body["data"][0]["CommunityName"] == "Sunset Ridge"
        assert body["data"][0]["CommunityCode"] == "SR01"
        assert body["pagination"] == {"page": 1, "limit": 20, "total": 3, "pages": 1}

    def test_empty_status_includes_everything(self, client, ridge, auth_headers):
        body = client.get(
            f"/api/amenities/{ridge}/amenities", params={"status": ""}, headers=auth_headers()
        ).json()
        assert body["pagination"]["total"] == 4

    def test_filter_by_type(self, client, ridge, auth_headers):
        body = client.get(
            f"/api/amenities/{ridge}/amenities",
            params={"type": "Court", "status": "Closed"},
            headers=auth_headers(),
        ).json()
        assert [a["Name"] for a in body["data"]] == ["Tennis Court"]

    def test_search_matches_description(self, client, ridge, auth_headers):
        body = client.get(
            f"/api/amenities/{ridge}/amenities", params={"search": "heated"}, headers=auth_headers()
        ).json()
        assert [a["Name"] for a in body["data"]] == ["Pool"]

    def test_pagination(self, client, ridge, auth_headers):
        body = client.get(
            f"/api/amenities/{ridge}/amenities",
            params={"page": 2, "limit": 2},
            headers=auth_headers(),
        ).json()
        assert [a["Name"] for a in body["data"]] == ["Pool"]
        assert body["pagination"] == {"page": 2, "limit": 2, "total": 3, "pages": 2}

    @pytest.mark.parametrize("params", [{"page": 0}, {"limit": 0}, {"limit": 101}])
    def test_bad_paging(self, client, ridge, auth_headers, params):
        response = client.get(f"/api/amenities/{ridge}/amenities", params=params, headers=auth_headers())
        assert response.status_code == 400

    def test_unknown_community(self, client, auth_headers):
        response = client.get("/api/amenities/999/amenities", headers=auth_headers())
        assert response.status_code == 404


class TestGetAmenity:
    def test_get(self, client, make_community, make_amenity, auth_headers):
        amenity_id = make_amenity(make_community(), "Pool", capacity=40)
        data = client.get(f"/api/amenities/amenity/{amenity_id}", headers=auth_headers()).json()["data"]
        assert data["Name"] == "Pool"
        assert data["Capacity"] == 40
        assert data["CommunityName"] == "Sunset Ridge"

    def test_missing(self, client, auth_headers):
        response = client.get("/api/amenities/amenity/404", headers=auth_headers())
        assert response.status_code == 404
        assert response.json()["error"]["resource"] == "Amenity"
