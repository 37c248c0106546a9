"""Integration tests for the session auth endpoints."""

import asyncio
import time
import unittest
from unittest.mock import patch

import httpx

from newsboard.core.config import Settings
from newsboard.core.database import get_db
from newsboard.main import app
from newsboard.models import User
from newsboard.services import auth as auth_service
from newsboard.services import storage
from tests.support import PASSWORD, ApiTestCase, override_get_db


class TestRegister(ApiTestCase):
    def test_register_creates_user_and_logs_in(self) -> None:
        r = self.register(self.client, "alice")
        self.assertEqual(r.status_code, 201)
        user = r.json()["user"]
        self.assertEqual(user["username"], "alice")
        self.assertEqual(user["role"], "user")
        self.assertNotIn("password", user)
        self.assertNotIn("password_hash", user)

        me = self.client.get("/api/auth/user")
        self.assertEqual(me.status_code, 200)
        self.assertEqual(me.json()["user"]["id"], user["id"])

    def test_duplicate_username_is_rejected(self) -> None:
        self.assertEqual(self.register(self.client, "alice").status_code, 201)
        r = self.register(self.new_client(), "alice", "another-password")
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json(), {"message": "Username already taken"})
        self.assertEqual(self.db.query(User).filter(User.username == "alice").count(), 1)

    def test_usernames_are_case_sensitive(self) -> None:
        self.assertEqual(self.register(self.client, "alice").status_code, 201)
        self.assertEqual(self.register(self.new_client(), "Alice").status_code, 201)

    def test_validation_error_message(self) -> None:
        r = self.register(self.client, "alice", "short")
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json(), {"message": "Password must be at least 8 characters"})
        self.assertEqual(self.db.query(User).count(), 0)

    def test_missing_field(self) -> None:
        r = self.client.post("/api/auth/register", json={"username": "alice"})
        self.assertEqual(r.status_code, 400)
        self.assertIn("password", r.json()["message"])

    def test_username_markup_is_stripped(self) -> None:
        r = self.register(self.client, "<b>alice</b>")
        self.assertEqual(r.status_code, 201)
        self.assertEqual(r.json()["user"]["username"], "alice")

    def test_register_cannot_request_admin_role(self) -> None:
        r = self.client.post(
            "/api/auth/register",
            json={"username": "mallory", "password": PASSWORD, "role": "admin"},
        )
        self.assertEqual(r.status_code, 201)
        self.assertEqual(r.json()["user"]["role"], "user")


class TestLogin(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.register(self.new_client(), "alice")

    def test_login_success_sets_session(self) -> None:
        r = self.login(self.client, "alice")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["user"]["username"], "alice")
        self.assertEqual(self.client.get("/api/auth/user").status_code, 200)

    def test_session_cookie_flags(self) -> None:
        r = self.login(self.client, "alice")
        cookie = r.headers["set-cookie"].lower()
        self.assertIn("newsboard_session=", cookie)
        self.assertIn("httponly", cookie)
        self.assertIn("samesite=lax", cookie)

    def test_wrong_password_and_unknown_user_are_indistinguishable(self) -> None:
        wrong_password = self.login(self.client, "alice", "wrong-password")
        unknown_user = self.login(self.client, "nobody", PASSWORD)
        self.assertEqual(wrong_password.status_code, 401)
        self.assertEqual(unknown_user.status_code, 401)
        self.assertEqual(wrong_password.json(), unknown_user.json())
        self.assertEqual(wrong_password.json(), {"message": "Invalid credentials"})
        self.assertEqual(self.client.get("/api/auth/user").status_code, 401)

    def test_empty_or_missing_credentials_fail_like_wrong_ones(self) -> None:
        bodies = (
            {"username": "", "password": PASSWORD},
            {"username": "alice", "password": ""},
            {"username": "alice"},
            {},
        )
        for body in bodies:
            with self.subTest(body=body):
                r = self.client.post("/api/auth/login", json=body)
                self.assertEqual(r.status_code, 401)
                self.assertEqual(r.json(), {"message": "Invalid credentials"})


class TestSession(ApiTestCase):
    def test_current_user_requires_session(self) -> None:
        r = self.client.get("/api/auth/user")
        self.assertEqual(r.status_code, 401)
        self.assertEqual(r.json(), {"message": "Unauthorized"})

    def test_logout_ends_session(self) -> None:
        self.register(self.client, "alice")
        r = self.client.post("/api/auth/logout")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json(), {"message": "Logged out successfully"})
        self.assertEqual(self.client.get("/api/auth/user").status_code, 401)

    def test_logout_requires_session(self) -> None:
        self.assertEqual(self.client.post("/api/auth/logout").status_code, 401)

    def test_session_of_deleted_user_is_rejected(self) -> None:
        user_id = self.register(self.client, "alice").json()["user"]["id"]
        storage.delete_user(self.db, user_id)
        self.assertEqual(self.client.get("/api/auth/user").status_code, 401)

    def test_role_is_read_from_database_each_request(self) -> None:
        user_id = self.register(self.client, "alice").json()["user"]["id"]
        self.db.query(User).filter(User.id == user_id).update({"role": "admin"})
        self.db.commit()
        self.assertEqual(self.client.get("/api/auth/user").json()["user"]["role"], "admin")

    def test_bootstrap_admin_can_log_in(self) -> None:
        settings = Settings(_env_file=None, APP_ENV="dev", ADMIN_PASSWORD="bootstrap-pass")
        auth_service.ensure_admin_user(self.db, settings)
        r = self.login(self.client, "admin", "bootstrap-pass")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["user"]["role"], "admin")


class TestAuthRateLimit(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.register(self.new_client(), "alice")
        # Registration succeeded, so it does not count; start from a clean slate anyway.
        self.assertFalse(self.auth_limited())

    def auth_limited(self) -> bool:
        return app.state.auth_limiter.is_limited("testclient")

    def test_failed_logins_are_limited(self) -> None:
        for _ in range(5):
            self.assertEqual(self.login(self.client, "alice", "wrong-password").status_code, 401)
        r = self.login(self.client, "alice")
        self.assertEqual(r.status_code, 429)
        self.assertEqual(r.json(), {"message": "Too many login attempts, please try again later."})
        self.assertIn("retry-after", r.headers)

    def test_successful_logins_do_not_count(self) -> None:
        for _ in range(7):
            self.assertEqual(self.login(self.client, "alice").status_code, 200)
        self.assertFalse(self.auth_limited())


class TestParallelLoginAttempts(unittest.IsolatedAsyncioTestCase):
    """Failed logins sent at the same moment are still held to the auth ceiling."""

    async def asyncSetUp(self) -> None:
        app.dependency_overrides[get_db] = override_get_db
        app.state.auth_limiter.reset()
        app.state.api_limiter.reset()
        self.client = httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://testserver")

    async def asyncTearDown(self) -> None:
        await self.client.aclose()
        app.dependency_overrides.pop(get_db, None)
        app.state.auth_limiter.reset()
        app.state.api_limiter.reset()

    async def test_parallel_wrong_passwords_stop_at_the_ceiling(self) -> None:
        def slow_reject(db, username, password):
            time.sleep(0.05)
            return None

        with patch("newsboard.api.auth.auth_service.authenticate", side_effect=slow_reject):
            responses = await asyncio.gather(
                *(
                    self.client.post(
                        "/api/auth/login",
                        json={"username": "alice", "password": "wrong-password"},
                    )
                    for _ in range(30)
                )
            )

        statuses = [r.status_code for r in responses]
        self.assertEqual(statuses.count(401), app.state.auth_limiter.max_requests)
        self.assertEqual(statuses.count(429), 30 - app.state.auth_limiter.max_requests)


class TestResponseHeaders(ApiTestCase):
    def test_security_headers(self) -> None:
        r = self.client.get("/api/articles")
        self.assertEqual(r.headers["x-content-type-options"], "nosniff")
        self.assertEqual(r.headers["x-frame-options"], "SAMEORIGIN")
        self.assertIn("default-src 'self'", r.headers["content-security-policy"])


if __name__ == "__main__":
    unittest.main()
