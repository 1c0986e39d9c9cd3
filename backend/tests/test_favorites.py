"""Saved listings."""

from tests.conftest import auth_headers
from tests.factories import make_listing


class TestFavorites:
    def test_toggle_round_trip(self, client, db, owner, buyer):
        listing = make_listing(db, owner)
        url = f"/api/favorites/{listing.id}/toggle"

        on = client.post(url, headers=auth_headers(buyer)).json()["data"]
        off = client.post(url, headers=auth_headers(buyer)).json()["data"]

        assert on == {"listingId": listing.id, "isFavorite": True}
        assert off == {"listingId": listing.id, "isFavorite": False}

    def test_add_is_idempotent(self, client, db, owner, buyer):
        listing = make_listing(db, owner)
        client.post(f"/api/favorites/{listing.id}", headers=auth_headers(buyer))
        client.post(f"/api/favorites/{listing.id}", headers=auth_headers(buyer))

        count = client.get(f"/api/favorites/listing/{listing.id}/count").json()["data"]
        assert count == {"listingId": listing.id, "count": 1}

        favorites = client.get("/api/favorites", headers=auth_headers(buyer)).json()["data"]
        assert [item["id"] for item in favorites] == [listing.id]

    def test_check_reports_state(self, client, db, owner, buyer):
        listing = make_listing(db, owner)
        before = client.get(f"/api/favorites/{listing.id}/check", headers=auth_headers(buyer)).json()["data"]
        client.post(f"/api/favorites/{listing.id}", headers=auth_headers(buyer))
        after = client.get(
            "/api/favorites/check",
            params={"userId": buyer.id, "listingId": listing.id},
            headers=auth_headers(buyer),
        ).json()["data"]

        assert before["isFavorite"] is False
        assert after["isFavorite"] is True

    def test_remove_missing_favorite_is_not_an_error(self, client, db, owner, buyer):
        listing = make_listing(db, owner)
        response = client.delete(f"/api/favorites/{listing.id}", headers=auth_headers(buyer))
        assert response.status_code == 200
        assert response.json()["data"]["isFavorite"] is False

    def test_unknown_listing_is_404(self, client, buyer):
        response = client.post("/api/favorites/4242", headers=auth_headers(buyer))
        assert response.status_code == 404

    def test_cannot_manage_another_users_favorites(self, client, db, owner, buyer):
        listing = make_listing(db, owner)
        add = client.post(f"/api/favorites/{owner.id}/{listing.id}", headers=auth_headers(buyer))
        read = client.get(f"/api/favorites/user/{owner.id}", headers=auth_headers(buyer))
        assert add.status_code == 403
        assert read.status_code == 403

    def test_admin_manages_on_behalf_of_user(self, client, db, owner, buyer, admin):
        listing = make_listing(db, owner)
        response = client.post(f"/api/favorites/{buyer.id}/{listing.id}", headers=auth_headers(admin))
        assert response.json()["data"]["isFavorite"] is True

        favorites = client.get(f"/api/favorites/user/{buyer.id}", headers=auth_headers(admin)).json()["data"]
        assert [item["id"] for item in favorites] == [listing.id]

    def test_deleting_listing_removes_favorites(self, client, db, owner, buyer):
        listing = make_listing(db, owner)
        client.post(f"/api/favorites/{listing.id}", headers=auth_headers(buyer))
        client.delete(f"/api/listings/delete/{listing.id}", headers=auth_headers(owner))

        favorites = client.get("/api/favorites", headers=auth_headers(buyer)).json()["data"]
        assert favorites == []
