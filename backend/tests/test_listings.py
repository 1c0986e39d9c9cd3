"""Listing CRUD and search."""

import base64

import pytest

from marketplace.core.config import get_settings
from marketplace.models.listing import ListingStatus, PropertyType
from tests.conftest import auth_headers
from tests.factories import listing_data, make_listing, make_user

PNG_DATA_URL = "data:image/png;base64," + base64.b64encode(b"\x89PNG\r\n\x1a\nfake").decode()


class TestCreateListing:
    def test_requires_authentication(self, client):
        response = client.post("/api/listings/create", json=listing_data())
        assert response.status_code == 401

    def test_defaults_are_applied(self, client, owner):
        response = client.post("/api/listings/create", json=listing_data(), headers=auth_headers(owner))

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["imageUrls"] == [get_settings().DEFAULT_LISTING_IMAGE_URL]
        assert data["listingType"] == "SALE"
        assert data["propertyType"] == "HOUSE"
        assert data["status"] == "ACTIVE"
        assert data["amenities"] == ""
        assert data["ownerId"] == owner.id
        assert data["ownerName"] == owner.full_name
        assert data["contactEmail"] == owner.email

    def test_invalid_images_are_dropped_in_order(self, client, owner):
        urls = ["ftp://nope/img.jpg", "https://cdn.example.com/a.jpg", PNG_DATA_URL, "data:image/png;base64,%%%", "/uploads/b.jpg"]
        response = client.post(
            "/api/listings/create", json=listing_data(imageUrls=urls), headers=auth_headers(owner)
        )
        assert response.json()["data"]["imageUrls"] == ["https://cdn.example.com/a.jpg", PNG_DATA_URL, "/uploads/b.jpg"]

    def test_only_invalid_images_fall_back_to_one_placeholder(self, client, owner):
        response = client.post(
            "/api/listings/create", json=listing_data(imageUrls=["not a url", ""]), headers=auth_headers(owner)
        )
        assert response.json()["data"]["imageUrls"] == [get_settings().DEFAULT_LISTING_IMAGE_URL]

    def test_invalid_property_type_is_rejected(self, client, owner):
        response = client.post(
            "/api/listings/create", json=listing_data(propertyType="CASTLE"), headers=auth_headers(owner)
        )
        assert response.status_code == 400
        assert "Invalid property type" in response.json()["message"]

    def test_property_type_is_case_insensitive(self, client, owner):
        response = client.post(
            "/api/listings/create", json=listing_data(propertyType="apartment"), headers=auth_headers(owner)
        )
        assert response.json()["data"]["propertyType"] == "APARTMENT"

    def test_unknown_status_falls_back_to_active(self, client, owner):
        response = client.post(
            "/api/listings/create", json=listing_data(status="ARCHIVED"), headers=auth_headers(owner)
        )
        assert response.json()["data"]["status"] == "ACTIVE"

    def test_overlong_description_is_rejected(self, client, owner):
        response = client.post(
            "/api/listings/create", json=listing_data(description="x" * 1001), headers=auth_headers(owner)
        )
        assert response.status_code == 400
        assert response.json()["success"] is False


class TestModifyListing:
    def test_partial_update_keeps_other_fields(self, client, db, owner):
        listing = make_listing(db, owner, name="Old name", price=100.0)
        response = client.put(
            f"/api/listings/update/{listing.id}", json={"price": 250.0}, headers=auth_headers(owner)
        )
        data = response.json()["data"]
        assert data["price"] == 250.0
        assert data["name"] == "Old name"

    def test_update_with_unknown_status_keeps_current(self, client, db, owner):
        listing = make_listing(db, owner, status=ListingStatus.PENDING)
        response = client.put(
            f"/api/listings/update/{listing.id}", json={"status": "bogus"}, headers=auth_headers(owner)
        )
        assert response.json()["data"]["status"] == "PENDING"

    def test_non_owner_cannot_update_or_delete(self, client, db, owner, buyer):
        listing = make_listing(db, owner)
        update = client.put(f"/api/listings/update/{listing.id}", json={"price": 1}, headers=auth_headers(buyer))
        delete = client.delete(f"/api/listings/delete/{listing.id}", headers=auth_headers(buyer))
        assert update.status_code == 403
        assert delete.status_code == 403

    def test_admin_can_delete_any_listing(self, client, db, owner, admin):
        listing = make_listing(db, owner)
        response = client.delete(f"/api/listings/delete/{listing.id}", headers=auth_headers(admin))
        assert response.status_code == 200
        assert client.get(f"/api/listings/get/{listing.id}").status_code == 404

    def test_status_endpoint_validates_value(self, client, db, owner):
        listing = make_listing(db, owner)
        bad = client.put(f"/api/listings/status/{listing.id}", params={"status": "GONE"}, headers=auth_headers(owner))
        good = client.put(f"/api/listings/status/{listing.id}", params={"status": "SOLD"}, headers=auth_headers(owner))
        assert bad.status_code == 400
        assert "Valid values" in bad.json()["message"]
        assert good.json()["data"]["status"] == "SOLD"

    def test_update_rejects_overlong_description(self, client, db, owner):
        listing = make_listing(db, owner)
        response = client.put(
            f"/api/listings/update/{listing.id}", json={"description": "x" * 1001}, headers=auth_headers(owner)
        )
        assert response.status_code == 400


class TestReadListing:
    def test_get_missing_listing_is_404_envelope(self, client):
        response = client.get("/api/listings/get/999")
        assert response.status_code == 404
        assert response.json()["success"] is False
        assert response.json()["data"] is None

    def test_user_listings_only_active(self, client, db, owner):
        make_listing(db, owner, status=ListingStatus.ACTIVE)
        make_listing(db, owner, status=ListingStatus.SOLD)
        response = client.get("/api/listings/user", headers=auth_headers(owner))
        assert [item["status"] for item in response.json()["data"]] == ["ACTIVE"]

    def test_test_endpoint(self, client):
        assert client.get("/api/listings/test").json()["data"] == "API is working!"


class TestSearch:
    @pytest.fixture
    def catalogue(self, db, owner):
        make_listing(db, owner, name="Furnished loft", furnished=True, parking=False, price=300.0)
        make_listing(db, owner, name="Garage house", furnished=False, parking=True, price=200.0)
        make_listing(db, owner, name="Plain flat", furnished=False, parking=False, price=100.0,
                     property_type=PropertyType.APARTMENT, listing_type="RENT")
        make_listing(db, owner, name="Sold villa", furnished=True, parking=True, price=900.0,
                     status=ListingStatus.SOLD)

    def test_unset_flags_match_everything_active(self, client, catalogue):
        response = client.get("/api/listings/search")
        names = {item["name"] for item in response.json()["data"]}
        assert names == {"Furnished loft", "Garage house", "Plain flat"}

    def test_furnished_true_filters(self, client, catalogue):
        response = client.get("/api/listings/search", params={"furnished": "true"})
        assert [item["name"] for item in response.json()["data"]] == ["Furnished loft"]

    def test_parking_false_filters(self, client, catalogue):
        response = client.get("/api/listings/search", params={"parking": "false"})
        assert {item["name"] for item in response.json()["data"]} == {"Furnished loft", "Plain flat"}

    def test_search_term_is_case_insensitive(self, client, catalogue):
        response = client.get("/api/listings/search", params={"searchTerm": "LOFT"})
        assert [item["name"] for item in response.json()["data"]] == ["Furnished loft"]

    def test_search_term_wildcards_match_literally(self, client, db, owner, catalogue):
        make_listing(db, owner, name="Garden 50% off")
        make_listing(db, owner, name="Corner_unit")

        percent = client.get("/api/listings/search", params={"searchTerm": "%"})
        underscore = client.get("/api/listings/search", params={"searchTerm": "_"})
        assert [item["name"] for item in percent.json()["data"]] == ["Garden 50% off"]
        assert [item["name"] for item in underscore.json()["data"]] == ["Corner_unit"]

    def test_status_and_type_filters(self, client, catalogue):
        sold = client.get("/api/listings/search", params={"status": "SOLD"})
        rent = client.get("/api/listings/search", params={"listingType": "rent", "propertyType": "APARTMENT"})
        assert [item["name"] for item in sold.json()["data"]] == ["Sold villa"]
        assert [item["name"] for item in rent.json()["data"]] == ["Plain flat"]

    def test_price_range(self, client, catalogue):
        response = client.get("/api/listings/search", params={"minPrice": 150, "maxPrice": 350, "sort": "price", "order": "asc"})
        assert [item["name"] for item in response.json()["data"]] == ["Garage house", "Furnished loft"]

    def test_invalid_property_type_is_rejected(self, client, catalogue):
        response = client.get("/api/listings/search", params={"propertyType": "CASTLE"})
        assert response.status_code == 400
        assert "Invalid property type" in response.json()["message"]

    def test_legacy_get_alias_returns_listings_field(self, client, catalogue):
        body = client.get("/api/listings/get").json()
        assert len(body["listings"]) == len(body["data"]) == 3


class TestPagination:
    def test_start_index_skips_exact_global_offset(self, client, db):
        owner = make_user(db)
        for price in range(1, 11):
            make_listing(db, owner, name=f"Listing {price}", price=float(price))

        response = client.get(
            "/api/listings/search",
            params={"startIndex": 5, "limit": 3, "sort": "price", "order": "asc"},
        )
        assert [item["price"] for item in response.json()["data"]] == [6.0, 7.0, 8.0]

    def test_default_limit_is_nine(self, client, db):
        owner = make_user(db)
        for i in range(12):
            make_listing(db, owner, name=f"Listing {i}")
        assert len(client.get("/api/listings/search").json()["data"]) == 9

    def test_negative_start_index_is_treated_as_zero(self, client, db):
        owner = make_user(db)
        for price in range(1, 4):
            make_listing(db, owner, price=float(price))
        response = client.get("/api/listings/search", params={"startIndex": -4, "sort": "price", "order": "asc"})
        assert response.json()["data"][0]["price"] == 1.0
