"""
Tests for profile, bank-account, and lookup endpoints.

These tests verify:
  - Profile and user updates change only the intended fields
  - Creating a bank account assigns a new number and type, keeping the balance
  - Lookups return the user without the password and 404 when absent
  - The all-users listing is limited to staff
"""

from minibank.services import user_repository


class TestUpdateProfile:
    """Tests for PUT /account/update-profile."""

    async def test_update_profile(self, client, registered_user):
        response = await client.put(
            "/account/update-profile",
            json={"email": "ana@example.com", "name": "Ana Silva", "phoneNumber": "555-0100"},
        )
        assert response.status_code == 200
        assert response.json() == {"message": "Profile updated successfully"}

        profile = await client.get("/account/profile", params={"email": "ana@example.com"})
        data = profile.json()
        assert data["name"] == "Ana Silva"
        assert data["phoneNumber"] == "555-0100"

    async def test_update_profile_unknown_user(self, client):
        response = await client.put(
            "/account/update-profile",
            json={"email": "missing@example.com", "name": "X", "phoneNumber": "1"},
        )
        assert response.status_code == 404

    async def test_update_profile_missing_phone(self, client, registered_user):
        response = await client.put(
            "/account/update-profile",
            json={"email": "ana@example.com", "name": "Ana Silva"},
        )
        assert response.status_code == 400


class TestUpdateUser:
    """Tests for POST /account/update."""

    async def test_change_password_then_login(self, client, registered_user):
        response = await client.post(
            "/account/update",
            json={"email": "ana@example.com", "password": "new-secret"},
        )
        assert response.status_code == 200
        assert response.json()["user"]["name"] == "Ana"

        old = await client.post(
            "/account/login", json={"email": "ana@example.com", "password": "secret"}
        )
        assert old.status_code == 401
        new = await client.post(
            "/account/login", json={"email": "ana@example.com", "password": "new-secret"}
        )
        assert new.status_code == 200

    async def test_change_name(self, client, registered_user):
        response = await client.post(
            "/account/update",
            json={"email": "ana@example.com", "name": "Ana Maria"},
        )
        assert response.status_code == 200
        assert response.json()["message"] == "User information updated successfully"
        assert response.json()["user"]["name"] == "Ana Maria"

    async def test_update_unknown_user(self, client):
        response = await client.post(
            "/account/update",
            json={"email": "missing@example.com", "name": "Ghost"},
        )
        assert response.status_code == 404

    async def test_email_only_returns_current_record(self, client, registered_user):
        response = await client.post("/account/update", json={"email": "ana@example.com"})
        assert response.status_code == 200
        assert response.json()["user"]["name"] == "Ana"

        login = await client.post(
            "/account/login", json={"email": "ana@example.com", "password": "secret"}
        )
        assert login.status_code == 200

    async def test_email_only_unknown_user(self, client):
        response = await client.post("/account/update", json={"email": "missing@example.com"})
        assert response.status_code == 404
        assert response.json()["error_type"] == "user_not_found"


class TestCreateBankAccount:
    """Tests for POST /account/createbank."""

    async def test_create_bank_account(self, client, registered_user, monkeypatch):
        await client.post("/account/deposit", json={"email": "ana@example.com", "amount": 25})
        monkeypatch.setattr(user_repository, "generate_account_number", lambda: "8080808080")

        response = await client.post(
            "/account/createbank",
            json={"email": "ana@example.com", "accountType": "savings"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Bank account created successfully"
        assert data["user"]["accountNumber"] == "8080808080"
        assert data["user"]["accountType"] == "savings"
        assert data["user"]["balance"] == 25
        assert "password" not in data["user"]

    async def test_invalid_account_type(self, client, registered_user):
        response = await client.post(
            "/account/createbank",
            json={"email": "ana@example.com", "accountType": "brokerage"},
        )
        assert response.status_code == 400

    async def test_unknown_user(self, client):
        response = await client.post(
            "/account/createbank",
            json={"email": "missing@example.com", "accountType": "checking"},
        )
        assert response.status_code == 404


class TestLookups:

    async def test_find(self, client, registered_user):
        response = await client.post("/account/find", json={"email": "ana@example.com"})
        assert response.status_code == 200
        users = response.json()
        assert len(users) == 1
        assert users[0]["accountNumber"] == registered_user["accountNumber"]

    async def test_find_unknown(self, client):
        response = await client.post("/account/find", json={"email": "missing@example.com"})
        assert response.status_code == 404

    async def test_find_one(self, client, registered_user):
        response = await client.post("/account/findOne", json={"email": "ana@example.com"})
        assert response.status_code == 200
        assert response.json()["email"] == "ana@example.com"
        assert "password" not in response.json()

    async def test_find_one_unknown(self, client):
        response = await client.post("/account/findOne", json={"email": "missing@example.com"})
        assert response.status_code == 404

    async def test_profile(self, client, registered_user):
        response = await client.get("/account/profile", params={"email": "ana@example.com"})
        assert response.status_code == 200
        assert response.json()["id"] == registered_user["id"]

    async def test_profile_unknown(self, client):
        response = await client.get("/account/profile", params={"email": "missing@example.com"})
        assert response.status_code == 404

    async def test_data_matches_profile(self, client, registered_user):
        params = {"email": "ana@example.com"}
        data = await client.get("/account/data", params=params)
        profile = await client.get("/account/profile", params=params)
        assert data.status_code == 200
        assert data.json() == profile.json()
        assert "password" not in data.json()

    async def test_data_unknown(self, client):
        response = await client.get("/account/data", params={"email": "missing@example.com"})
        assert response.status_code == 404


class TestListAll:
    """Tests for GET /account/all."""

    async def test_requires_token(self, client, registered_user):
        response = await client.get("/account/all")
        assert response.status_code == 401

    async def test_rejects_bad_token(self, client, registered_user):
        response = await client.get(
            "/account/all", headers={"Authorization": "Bearer not-a-jwt"}
        )
        assert response.status_code == 401

    async def test_customer_forbidden(self, client, registered_user):
        login = await client.post(
            "/account/login", json={"email": "ana@example.com", "password": "secret"}
        )
        response = await client.get(
            "/account/all", headers={"Authorization": login.headers["Authorization"]}
        )
        assert response.status_code == 403

    async def test_staff_lists_everyone(self, staff_client, registered_user):
        response = await staff_client.get("/account/all")
        assert response.status_code == 200
        emails = {user["email"] for user in response.json()}
        assert emails == {"teller@example.com", "ana@example.com"}


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
