"""User profile and admin endpoints."""

from unittest.mock import MagicMock, patch

import pytest

from marketplace.bootstrap import create_admin
from marketplace.core.errors import ConflictError
from marketplace.models.listing import ListingStatus
from marketplace.models.user import User, UserRole
from marketplace.services.users import create_user
from tests.conftest import auth_headers
from tests.factories import DEFAULT_PASSWORD, make_listing, make_user, unique_email


class TestUserProfile:
    def test_public_profile_hides_contact_details(self, client, owner):
        data = client.get(f"/api/users/public/{owner.id}").json()["data"]
        assert data["fullName"] == owner.full_name
        assert "email" not in data
        assert "phone" not in data

    def test_self_update_renames_username(self, client, buyer):
        response = client.put(
            f"/api/users/update/{buyer.id}",
            json={"firstName": "Alan", "lastName": "Turing", "phone": "555-0199"},
            headers=auth_headers(buyer),
        )
        data = response.json()["data"]
        assert data["username"] == "Alan Turing"
        assert data["phone"] == "555-0199"

    def test_cannot_update_someone_else(self, client, owner, buyer):
        response = client.put(f"/api/users/{owner.id}", json={"phone": "1"}, headers=auth_headers(buyer))
        assert response.status_code == 403

    def test_email_change_conflict(self, client, owner, buyer):
        response = client.put(f"/api/users/{buyer.id}", json={"email": owner.email}, headers=auth_headers(buyer))
        assert response.status_code == 409

    def test_active_listings_are_public(self, client, db, owner):
        make_listing(db, owner, status=ListingStatus.ACTIVE)
        make_listing(db, owner, status=ListingStatus.SOLD)
        body = client.get(f"/api/users/listings/active/{owner.id}").json()
        assert len(body["data"]) == 1
        assert body["listings"] == body["data"]

    def test_user_deletes_own_account(self, client, db, buyer):
        response = client.delete(f"/api/users/delete/{buyer.id}", headers=auth_headers(buyer))
        assert response.status_code == 200
        assert client.get(f"/api/users/public/{buyer.id}").status_code == 404


class TestAdmin:
    def test_regular_user_is_forbidden(self, client, buyer):
        assert client.get("/api/admin/users", headers=auth_headers(buyer)).status_code == 403
        assert client.get("/api/users", headers=auth_headers(buyer)).status_code == 403

    def test_admin_lists_users(self, client, owner, buyer, admin):
        data = client.get("/api/admin/users", headers=auth_headers(admin)).json()["data"]
        assert {u["id"] for u in data} == {owner.id, buyer.id, admin.id}

    def test_admin_creates_agent(self, client, admin):
        payload = {
            "firstName": "Estate",
            "lastName": "Agent",
            "email": unique_email(),
            "password": DEFAULT_PASSWORD,
            "role": "AGENT",
        }
        response = client.post("/api/users", json=payload, headers=auth_headers(admin))
        assert response.status_code == 201
        assert response.json()["data"]["role"] == UserRole.AGENT.value

    def test_deactivation_revokes_tokens(self, client, buyer, admin):
        headers = auth_headers(buyer)
        response = client.put(f"/api/admin/users/{buyer.id}/deactivate", headers=auth_headers(admin))
        assert response.json()["data"]["isActive"] is False

        stale = client.get("/api/auth/current-user", headers=headers)
        assert stale.status_code == 401

        login = client.post("/api/auth/login", json={"email": buyer.email, "password": DEFAULT_PASSWORD})
        assert login.status_code == 403

    def test_reactivated_user_can_log_in(self, client, buyer, admin):
        client.put(f"/api/admin/users/{buyer.id}/deactivate", headers=auth_headers(admin))
        client.put(f"/api/admin/users/{buyer.id}/activate", headers=auth_headers(admin))
        login = client.post("/api/auth/login", json={"email": buyer.email, "password": DEFAULT_PASSWORD})
        assert login.status_code == 200

    def test_admin_resets_password(self, client, buyer, admin):
        response = client.post(
            "/api/admin/reset-password",
            params={"email": buyer.email, "newPassword": "another-pass"},
            headers=auth_headers(admin),
        )
        assert response.status_code == 200

        old = client.post("/api/auth/login", json={"email": buyer.email, "password": DEFAULT_PASSWORD})
        new = client.post("/api/auth/login", json={"email": buyer.email, "password": "another-pass"})
        assert old.status_code == 401
        assert new.status_code == 200

    def test_user_details_by_email(self, client, db, admin):
        user = make_user(db, email="lookup@example.com")
        data = client.get(
            "/api/admin/user-details", params={"email": "lookup@example.com"}, headers=auth_headers(admin)
        ).json()["data"]
        assert data["id"] == user.id

    def test_admin_deletes_user_and_their_listings(self, client, db, owner, admin):
        listing = make_listing(db, owner)
        response = client.delete(f"/api/admin/users/{owner.id}", headers=auth_headers(admin))
        assert response.status_code == 200
        assert client.get(f"/api/listings/get/{listing.id}").status_code == 404


class TestBootstrap:
    def test_create_admin_is_idempotent(self, db):
        create_admin("root@example.com", "bootstrap-pass")
        create_admin("root@example.com", "other-pass")

        users = db.query(User).filter(User.email == "root@example.com").all()
        assert len(users) == 1
        assert users[0].role == UserRole.ADMIN


class TestCreateUserRace:
    def test_unique_index_violation_is_a_conflict(self, db, buyer):
        email = buyer.email
        lookup = MagicMock()
        lookup.filter.return_value.first.return_value = None

        # The pre-insert lookup misses, as when another registration commits first.
        with patch.object(db, "query", return_value=lookup):
            with pytest.raises(ConflictError):
                create_user(db, first_name="Late", last_name="Comer", email=email, password=DEFAULT_PASSWORD)

        assert db.query(User).filter(User.email == email).count() == 1
