"""End-to-end API tests through FastAPI's TestClient against an in-memory store."""

import unittest
from datetime import UTC, datetime, timedelta
from unittest.mock import patch

from usergate.core.errors import StorageError
from usergate.models.user import Role
from usergate.services.user_store import UserStore
from tests.helpers import API, bearer, build_client, login, seed_user


class ApiTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.client, self.app = build_client()
        self.admin = seed_user(self.app, "admin@x.com", "admin-pass", role=Role.ADMIN)
        self.admin_token = login(self.client, "admin@x.com", "admin-pass")

    def register(self, email: str, password: str):
        return self.client.post(f"{API}/register", json={"email": email, "password": password})


class TestScenario(ApiTestCase):
    """Register, log in, read yourself, then fail to delete yourself."""

    def test_register_login_get_self_delete(self) -> None:
        response = self.register("a@x.com", "secret")
        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertEqual(body["email"], "a@x.com")
        self.assertEqual(body["role"], "user")
        self.assertEqual(set(body), {"id", "email", "role"})
        user_id = body["id"]

        token = login(self.client, "a@x.com", "secret")
        claims = self.app.state.tokens.verify(token)
        self.assertEqual(claims.subject_id, user_id)
        self.assertIs(claims.role, Role.USER)

        response = self.client.get(f"{API}/user/{user_id}", headers=bearer(token))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"id": user_id, "email": "a@x.com", "role": "user"})

        # A plain user is stopped by the admin guard before the self-delete rule.
        response = self.client.delete(f"{API}/user/{user_id}", headers=bearer(token))
        self.assertEqual(response.status_code, 403)

    def test_admin_cannot_delete_self(self) -> None:
        response = self.client.delete(
            f"{API}/user/{self.admin.id}", headers=bearer(self.admin_token)
        )
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["detail"], "You cannot delete yourself")


class TestRegisterEndpoint(ApiTestCase):
    def test_duplicate_email(self) -> None:
        self.assertEqual(self.register("a@x.com", "secret").status_code, 201)
        response = self.register("a@x.com", "secret")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"], "Email already exists")

    def test_validation_lists_fields(self) -> None:
        response = self.register("nope", "")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["fields"], ["email", "password"])

    def test_role_in_body_is_ignored(self) -> None:
        response = self.client.post(
            f"{API}/register",
            json={"email": "sneaky@x.com", "password": "secret", "role": "admin"},
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["role"], "user")

    def test_malformed_json(self) -> None:
        response = self.client.post(
            f"{API}/register",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["fields"], ["body"])

    def test_storage_failure_is_500(self) -> None:
        with patch.object(UserStore, "create", side_effect=StorageError()):
            response = self.register("a@x.com", "secret")
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"detail": "Internal server error"})


class TestLoginEndpoint(ApiTestCase):
    def test_bad_credentials_are_indistinguishable(self) -> None:
        self.register("a@x.com", "secret")
        wrong_password = self.client.post(
            f"{API}/login", json={"email": "a@x.com", "password": "wrong"}
        )
        unknown_email = self.client.post(
            f"{API}/login", json={"email": "ghost@x.com", "password": "secret"}
        )
        self.assertEqual(wrong_password.status_code, 401)
        self.assertEqual(unknown_email.status_code, 401)
        self.assertEqual(wrong_password.json(), unknown_email.json())

    def test_token_response_shape(self) -> None:
        response = self.client.post(
            f"{API}/login", json={"email": "admin@x.com", "password": "admin-pass"}
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["token_type"], "bearer")
        self.assertEqual(body["expires_in"], 600)

    def test_missing_password_is_400(self) -> None:
        response = self.client.post(f"{API}/login", json={"email": "a@x.com"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["fields"], ["password"])


class TestAuthentication(ApiTestCase):
    def test_missing_token(self) -> None:
        response = self.client.get(f"{API}/user/{self.admin.id}")
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.headers["WWW-Authenticate"], "Bearer")

    def test_expired_token(self) -> None:
        token = self.app.state.tokens.issue(
            subject_id=self.admin.id,
            email="admin@x.com",
            role=Role.ADMIN,
            now=datetime.now(UTC) - timedelta(minutes=11),
        )
        response = self.client.get(f"{API}/user/{self.admin.id}", headers=bearer(token))
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["detail"], "Invalid or expired token")

    def test_non_bearer_scheme(self) -> None:
        response = self.client.get(
            f"{API}/user/{self.admin.id}", headers={"Authorization": "Basic Zm9vOmJhcg=="}
        )
        self.assertEqual(response.status_code, 401)

    def test_unknown_user(self) -> None:
        response = self.client.get(f"{API}/user/9999", headers=bearer(self.admin_token))
        self.assertEqual(response.status_code, 404)

    def test_ids_outside_column_range_are_not_found(self) -> None:
        headers = bearer(self.admin_token)
        for user_id in (2**64, 2**31, 0, -1):
            path = f"{API}/user/{user_id}"
            self.assertEqual(self.client.get(path, headers=headers).status_code, 404, path)
            self.assertEqual(
                self.client.put(path, json={"role": "admin"}, headers=headers).status_code, 404, path
            )
            self.assertEqual(self.client.delete(path, headers=headers).status_code, 404, path)


class TestAdminOnly(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user_id = self.register("a@x.com", "secret").json()["id"]
        self.user_token = login(self.client, "a@x.com", "secret")

    def test_user_token_is_forbidden_on_writes(self) -> None:
        headers = bearer(self.user_token)
        calls = [
            self.client.post(f"{API}/user", json={"email": "b@x.com", "password": "p"}, headers=headers),
            self.client.put(f"{API}/user/{self.user_id}", json={"role": "admin"}, headers=headers),
            self.client.delete(f"{API}/user/{self.admin.id}", headers=headers),
            self.client.get(f"{API}/user", headers=headers),
        ]
        for response in calls:
            self.assertEqual(response.status_code, 403, response.text)
            self.assertEqual(response.json()["detail"], "Admin access required")

    def test_admin_creates_admin_by_default(self) -> None:
        response = self.client.post(
            f"{API}/user",
            json={"email": "ops@x.com", "password": "ops-pass"},
            headers=bearer(self.admin_token),
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["role"], "admin")

    def test_admin_can_create_plain_user(self) -> None:
        response = self.client.post(
            f"{API}/user",
            json={"email": "c@x.com", "password": "pw", "role": "user"},
            headers=bearer(self.admin_token),
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["role"], "user")

    def test_invalid_role_rejected(self) -> None:
        response = self.client.post(
            f"{API}/user",
            json={"email": "c@x.com", "password": "pw", "role": "root"},
            headers=bearer(self.admin_token),
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["fields"], ["role"])


class TestUpdate(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user_id = self.register("a@x.com", "secret").json()["id"]

    def put(self, user_id: int, body: dict):
        return self.client.put(f"{API}/user/{user_id}", json=body, headers=bearer(self.admin_token))

    def test_password_only(self) -> None:
        response = self.put(self.user_id, {"password": "newpass"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"id": self.user_id, "email": "a@x.com", "role": "user"})

        old = self.client.post(f"{API}/login", json={"email": "a@x.com", "password": "secret"})
        self.assertEqual(old.status_code, 401)
        login(self.client, "a@x.com", "newpass")

    def test_email_and_role(self) -> None:
        response = self.put(self.user_id, {"email": "new@x.com", "role": "admin"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["email"], "new@x.com")
        self.assertEqual(response.json()["role"], "admin")
        login(self.client, "new@x.com", "secret")

    def test_blank_fields_are_ignored(self) -> None:
        response = self.put(self.user_id, {"email": "", "password": "", "role": ""})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"id": self.user_id, "email": "a@x.com", "role": "user"})
        login(self.client, "a@x.com", "secret")

    def test_same_email_is_not_a_conflict(self) -> None:
        self.assertEqual(self.put(self.user_id, {"email": "a@x.com"}).status_code, 200)

    def test_email_taken_by_other_user(self) -> None:
        response = self.put(self.user_id, {"email": "admin@x.com"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"], "Email already in use")

    def test_unknown_user(self) -> None:
        self.assertEqual(self.put(9999, {"role": "admin"}).status_code, 404)

    def test_invalid_email(self) -> None:
        response = self.put(self.user_id, {"email": "not-an-email"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["fields"], ["email"])


class TestDelete(ApiTestCase):
    def test_delete_other_user(self) -> None:
        user_id = self.register("a@x.com", "secret").json()["id"]
        headers = bearer(self.admin_token)
        response = self.client.delete(f"{API}/user/{user_id}", headers=headers)
        self.assertEqual(response.status_code, 204)
        self.assertEqual(response.content, b"")
        self.assertEqual(self.client.get(f"{API}/user/{user_id}", headers=headers).status_code, 404)

    def test_delete_unknown(self) -> None:
        response = self.client.delete(f"{API}/user/9999", headers=bearer(self.admin_token))
        self.assertEqual(response.status_code, 404)

    def test_email_reusable_after_delete(self) -> None:
        user_id = self.register("a@x.com", "secret").json()["id"]
        self.client.delete(f"{API}/user/{user_id}", headers=bearer(self.admin_token))
        self.assertEqual(self.register("a@x.com", "secret").status_code, 201)


class TestList(ApiTestCase):
    def test_pagination(self) -> None:
        for i in range(4):
            self.register(f"u{i}@x.com", "secret")
        response = self.client.get(
            f"{API}/user", params={"page": 2, "page_size": 2}, headers=bearer(self.admin_token)
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["total"], 5)
        self.assertEqual(body["total_pages"], 3)
        self.assertEqual([u["email"] for u in body["users"]], ["u1@x.com", "u2@x.com"])
        self.assertTrue(body["has_next"])
        self.assertTrue(body["has_prev"])

    def test_page_size_bounds(self) -> None:
        response = self.client.get(
            f"{API}/user", params={"page_size": 101}, headers=bearer(self.admin_token)
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["fields"], ["page_size"])


class TestHealth(unittest.TestCase):
    def test_reports_database(self) -> None:
        client, _ = build_client()
        response = client.get(f"{API}/health/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.json(), {"status": "ok", "environment": "dev", "database": "connected"}
        )
        self.assertEqual(client.get("/").json(), {"message": "usergate API"})


if __name__ == "__main__":
    unittest.main()
