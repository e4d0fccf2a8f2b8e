"""
Route tests for register / login / logout / me.
"""

from unittest.mock import patch

import jwt as pyjwt
import pytest
from fastapi.testclient import TestClient

from api import auth as auth_routes
from auth.jwt import issue_token
from auth.password import verify_password

from .fakes import JWT_SECRET


def register(client, username="alice", password="pw1"):
    return client.post("/api/register", json={"username": username, "password": password})


def login(client, username="alice", password="pw1"):
    return client.post("/api/login", json={"username": username, "password": password})


class TestRegister:
    def test_register_returns_201_with_id(self, client, couch):
        r = register(client)
        assert r.status_code == 201
        body = r.json()
        assert body["ok"] is True
        assert body["id"] == body["userId"]
        assert "alice" in couch.dbs

        stored = couch.dbs["users"][body["id"]]
        assert stored["username"] == "alice"
        assert stored["passwordHash"] != "pw1"
        assert "password" not in stored
        assert stored["salt"]

    def test_duplicate_username_conflicts_without_touching_collection(self, client, couch):
        assert register(client).status_code == 201
        couch.put_doc("alice", {"_id": "t1", "title": "keep me"})
        before = {k: dict(v) for k, v in couch.dbs["alice"].items()}

        r = register(client, password="other")
        assert r.status_code == 409
        assert r.json() == {"error": "Username is already taken."}
        assert couch.dbs["alice"] == before
        assert len(couch.dbs["users"]) == 1

    @pytest.mark.parametrize(
        "payload",
        [{}, {"username": "alice"}, {"password": "pw"}, {"username": "  ", "password": "pw"}],
    )
    def test_missing_fields(self, client, payload):
        r = client.post("/api/register", json=payload)
        assert r.status_code == 400
        assert r.json() == {"error": "Username and password are required."}

    def test_invalid_json(self, client):
        r = client.post(
            "/api/register", content=b"{not json", headers={"content-type": "application/json"}
        )
        assert r.status_code == 400
        assert r.json() == {"error": "Invalid request body."}

    def test_username_must_be_a_valid_collection_name(self, client, couch):
        r = register(client, username="Alice")
        assert r.status_code == 400
        assert "Alice" not in couch.dbs

    def test_partial_failure_is_500(self, client, couch):
        couch.broken_dbs.add("users")
        r = register(client, username="dave")
        assert r.status_code == 500
        assert r.json() == {"error": "Failed to finalize user registration."}

    def test_create_reply_without_id_is_json_500(self, client, couch):
        couch.canned[("POST", "users")] = (201, {"ok": True})
        r = register(client)
        assert r.status_code == 500
        assert r.json() == {"error": "Failed to finalize user registration."}

    def test_store_unreachable_is_503(self, client, couch):
        couch.unreachable = True
        r = register(client)
        assert r.status_code == 503
        assert "error" in r.json()


class TestLogin:
    def test_register_login_me_round_trip(self, client):
        user_id = register(client).json()["id"]

        assert login(client, password="wrong").status_code == 401

        r = login(client)
        assert r.status_code == 200
        assert r.json()["ok"] is True
        cookie = r.headers["set-cookie"]
        assert cookie.startswith("auth=")
        assert "HttpOnly" in cookie
        assert "Secure" in cookie
        assert "samesite=strict" in cookie.lower()
        assert "Path=/" in cookie

        me = client.get("/api/me")
        assert me.status_code == 200
        assert me.json() == {"username": "alice", "userId": user_id}

    def test_unknown_user_and_wrong_password_look_identical(self, client):
        register(client)
        wrong_password = login(client, password="nope")
        unknown_user = login(client, username="mallory")
        assert wrong_password.status_code == unknown_user.status_code == 401
        assert wrong_password.json() == unknown_user.json() == {"error": "Invalid username or password."}
        assert "set-cookie" not in wrong_password.headers

    def test_unknown_user_still_pays_for_a_hash(self, client):
        with patch.object(auth_routes, "verify_password", wraps=verify_password) as spy:
            r = login(client, username="mallory")
        assert r.status_code == 401
        spy.assert_called_once()

    def test_identity_without_credentials_gets_uniform_401(self, client, couch):
        couch.put_doc("users", {"username": "alice", "password": "pw1"})
        r = login(client)
        assert r.status_code == 401
        assert r.json() == {"error": "Invalid username or password."}

    def test_configured_algorithm_is_used(self, client, settings):
        settings.jwt_algorithm = "HS512"
        register(client)
        assert login(client).status_code == 200
        assert pyjwt.get_unverified_header(client.cookies["auth"])["alg"] == "HS512"
        assert client.get("/api/me").status_code == 200

    def test_missing_fields(self, client):
        r = client.post("/api/login", json={"username": "alice"})
        assert r.status_code == 400

    def test_store_error_is_generic_500(self, client, couch):
        couch.broken_dbs.add("users")
        r = login(client)
        assert r.status_code == 500
        assert r.json() == {"error": "Could not process login request."}

    def test_missing_secret_is_500(self, client, settings):
        register(client)
        settings.jwt_secret = ""
        r = login(client)
        assert r.status_code == 500
        assert r.json() == {"error": "Service configuration error."}


class TestLogoutAndMe:
    def test_logout_clears_cookie(self, client):
        register(client)
        login(client)
        r = client.get("/api/logout")
        assert r.status_code == 200
        assert r.json()["message"] == "Logout successful."
        assert "max-age=0" in r.headers["set-cookie"].lower()
        assert client.get("/api/me").status_code == 401

    def test_me_without_cookie(self, client):
        r = client.get("/api/me")
        assert r.status_code == 401
        assert r.json() == {"error": "Not authenticated."}
        assert "set-cookie" not in r.headers

    def test_me_with_expired_token_clears_cookie(self, make_client):
        expired = issue_token("u-1", "alice", secret=JWT_SECRET, ttl_seconds=60, now=1_000_000)
        c = make_client()
        c.cookies.set("auth", expired)
        r = c.get("/api/me")
        assert r.status_code == 401
        assert r.json() == {"error": "Invalid or expired token."}
        assert "Max-Age=0" in r.headers["set-cookie"]

    def test_me_with_forged_token(self, make_client):
        forged = issue_token("u-1", "alice", secret="some-other-secret-0123456789abcdef")
        c = make_client()
        c.cookies.set("auth", forged)
        assert c.get("/api/me").status_code == 401

    def test_me_without_configured_secret(self, make_client, settings):
        settings.jwt_secret = ""
        c = make_client()
        c.cookies.set("auth", "anything")
        r = c.get("/api/me")
        assert r.status_code == 500
        assert r.json() == {"error": "Service not configured."}


class TestIdentityRevalidation:
    def test_deleted_identity_loses_access(self, client, couch, settings):
        settings.verify_identity_on_request = True
        user_id = register(client).json()["id"]
        login(client)
        assert client.get("/api/me").status_code == 200

        del couch.dbs["users"][user_id]
        r = client.get("/api/me")
        assert r.status_code == 401
        assert r.json() == {"error": "Invalid or expired token."}


class TestMiddleware:
    def test_api_responses_are_not_cached(self, client):
        r = client.get("/api/logout")
        assert r.headers["cache-control"] == "no-store"
        assert float(r.headers["x-process-time"]) >= 0


class TestUnexpectedErrors:
    def test_unhandled_exception_is_json_500(self, app):
        @app.get("/api/boom")
        async def boom():
            raise RuntimeError("kaboom")

        with TestClient(app, base_url="https://testserver", raise_server_exceptions=False) as c:
            r = c.get("/api/boom")
        assert r.status_code == 500
        assert r.json() == {"error": "An unexpected error occurred."}
