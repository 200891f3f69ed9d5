"""
HTTP tests for /api/v1/auth.
"""
from datetime import timedelta

from models import storage
from models.base_model import utcnow
from models.refresh_session import RefreshSession, RevokeReason
from tests.helpers import PASSWORD, bearer, login

REGISTER = "/api/v1/auth/register"
REFRESH = "/api/v1/auth/refresh"
LOGOUT = "/api/v1/auth/logout"
ME = "/api/v1/auth/me"


def only_session(account_id):
    session = storage.get_session()
    session.expire_all()
    return session.query(RefreshSession).filter(RefreshSession.account_id == account_id).one()


class TestRegister:
    def test_register(self, client):
        res = client.post(REGISTER, json={"email": "New@Example.com", "username": "newbie", "password": "longenough1"})
        assert res.status_code == 201
        body = res.get_json()
        assert body["user"]["email"] == "new@example.com"
        assert body["user"]["is_admin"] is False
        assert "password" not in body["user"]
        assert "password_hash" not in body["user"]

    def test_duplicate_email(self, client, account):
        res = client.post(REGISTER, json={"email": "alice@example.com", "username": "again", "password": "longenough1"})
        assert res.status_code == 409
        assert res.get_json()["error"] == "CONFLICT"

    def test_short_password(self, client):
        res = client.post(REGISTER, json={"email": "x@example.com", "username": "x", "password": "short"})
        assert res.status_code == 422
        body = res.get_json()
        assert body["error"] == "VALIDATION_ERROR"
        assert "password" in body["details"]


class TestLogin:
    def test_success(self, client, account):
        res = login(client)
        assert res.status_code == 200
        body = res.get_json()
        assert body["token_type"] == "Bearer"
        assert body["expires_in"] == 1800
        assert body["access_token"] and body["refresh_token"]
        assert body["user"]["email"] == "alice@example.com"

    def test_wrong_password_and_unknown_email_look_the_same(self, client, account):
        wrong = login(client, password="not-the-password")
        unknown = login(client, email="nobody@example.com")
        assert wrong.status_code == unknown.status_code == 401
        assert wrong.get_json() == unknown.get_json() == {
            "error": "UNAUTHORIZED",
            "message": "Invalid credentials",
            "status": 401,
        }

    def test_missing_fields(self, client):
        res = client.post("/api/v1/auth/login", json={"email": "alice@example.com"})
        assert res.status_code == 422

    def test_tenth_failure_locks_the_account(self, client, account):
        for _ in range(9):
            assert login(client, password="not-the-password").status_code == 401

        res = login(client, password="not-the-password")
        assert res.status_code == 423
        body = res.get_json()
        assert body["error"] == "ACCOUNT_LOCKED"
        assert "Try again after" in body["message"]
        assert body["details"]["locked_until"].endswith("Z")

        # The right password does not get past an active lock
        assert login(client, password=PASSWORD).status_code == 423

    def test_session_lifetime_follows_remember_me(self, client, account):
        account_id = account.id
        before = utcnow()
        login(client, remember_me=False)
        row = only_session(account_id)
        assert row.remember_me is False
        assert before + timedelta(hours=23, minutes=59) < row.expires_at <= utcnow() + timedelta(hours=24)

    def test_remember_me_lasts_30_days(self, client, account):
        account_id = account.id
        before = utcnow()
        login(client, remember_me=True)
        row = only_session(account_id)
        assert row.remember_me is True
        assert before + timedelta(days=29, hours=23) < row.expires_at <= utcnow() + timedelta(days=30)


class TestRefresh:
    def test_rotation(self, client, account):
        account_id = account.id
        tokens = login(client).get_json()
        old_row_id = only_session(account_id).id

        res = client.post(REFRESH, headers=bearer(tokens["refresh_token"]))
        assert res.status_code == 200
        body = res.get_json()
        assert body["refresh_token"] != tokens["refresh_token"]
        assert body["message"] == "Token refreshed successfully"
        assert body["token_type"] == "Bearer"

        old = storage.get(RefreshSession, old_row_id)
        assert old.revoked is True
        assert old.revoked_reason == RevokeReason.ROTATION.value

    def test_replay_is_rejected_without_a_reason(self, client, account):
        tokens = login(client).get_json()
        assert client.post(REFRESH, headers=bearer(tokens["refresh_token"])).status_code == 200

        replay = client.post(REFRESH, headers=bearer(tokens["refresh_token"]))
        assert replay.status_code == 401
        assert replay.get_json() == {"error": "UNAUTHORIZED", "message": "Unauthorized", "status": 401}

    def test_token_in_body(self, client, account):
        tokens = login(client).get_json()
        res = client.post(REFRESH, json={"refresh_token": tokens["refresh_token"]})
        assert res.status_code == 200

    def test_token_in_cookie(self, client, account):
        tokens = login(client).get_json()
        client.set_cookie("refresh_token", tokens["refresh_token"])
        res = client.post(REFRESH)
        assert res.status_code == 200

    def test_missing_token(self, client):
        res = client.post(REFRESH)
        assert res.status_code == 400
        assert res.get_json()["message"] == "Refresh token not provided"

    def test_garbage_token(self, client):
        res = client.post(REFRESH, headers=bearer("not-a-token"))
        assert res.status_code == 401

    def test_access_token_cannot_refresh(self, client, account):
        tokens = login(client).get_json()
        res = client.post(REFRESH, headers=bearer(tokens["access_token"]))
        assert res.status_code == 401


class TestLogout:
    def test_logout(self, client, account):
        tokens = login(client).get_json()
        res = client.post(LOGOUT, headers=bearer(tokens["refresh_token"]))
        assert res.status_code == 200
        assert res.get_json()["message"] == "Successfully logged out"
        assert client.post(REFRESH, headers=bearer(tokens["refresh_token"])).status_code == 401

    def test_logout_all_devices(self, client, account):
        first = login(client).get_json()
        second = login(client).get_json()

        res = client.post(LOGOUT, headers=bearer(first["refresh_token"]), json={"all_devices": True})
        assert res.status_code == 200
        assert res.get_json()["message"] == "Successfully logged out from all devices"
        assert client.post(REFRESH, headers=bearer(second["refresh_token"])).status_code == 401

    def test_token_in_body(self, client, account):
        tokens = login(client).get_json()
        res = client.post(LOGOUT, json={"refresh_token": tokens["refresh_token"]})
        assert res.status_code == 200
        assert client.post(REFRESH, headers=bearer(tokens["refresh_token"])).status_code == 401

    def test_always_succeeds(self, client, account):
        tokens = login(client).get_json()
        client.post(LOGOUT, headers=bearer(tokens["refresh_token"]))

        assert client.post(LOGOUT).status_code == 200
        assert client.post(LOGOUT, headers=bearer("garbage")).status_code == 200
        assert client.post(LOGOUT, headers=bearer(tokens["refresh_token"])).status_code == 200
        assert client.post(LOGOUT, json={"all_devices": "sometimes"}).status_code == 200


class TestMe:
    def test_requires_a_token(self, client):
        res = client.get(ME)
        assert res.status_code == 401
        assert res.get_json()["error"] == "UNAUTHORIZED"

    def test_refresh_token_is_not_accepted(self, client, account):
        tokens = login(client).get_json()
        assert client.get(ME, headers=bearer(tokens["refresh_token"])).status_code == 401

    def test_me(self, client, account):
        tokens = login(client).get_json()
        res = client.get(ME, headers=bearer(tokens["access_token"]))
        assert res.status_code == 200
        data = res.get_json()["data"]
        assert data["email"] == "alice@example.com"
        assert data["last_login_at"] is not None
