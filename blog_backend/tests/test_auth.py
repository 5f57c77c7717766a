import unittest
from datetime import timedelta

import jwt

from blog_backend.auth import AuthService
from blog_backend.db import InMemoryDbClient
from blog_backend.errors import (
    DuplicateUsername,
    InvalidCredentials,
    Unauthenticated,
    ValidationError,
)


class AuthServiceTests(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryDbClient()
        self.auth = AuthService(self.db, secret="test-secret", hash_rounds=4)

    def test_register_hashes_password(self):
        user = self.auth.register("alice", "secret")
        self.assertEqual(user.username, "alice")
        self.assertNotEqual(user.password_hash, "secret")
        self.assertTrue(self.auth.verify_password("secret", user.password_hash))
        self.assertNotIn("password_hash", user.as_public())

    def test_register_same_username_twice(self):
        self.auth.register("alice", "secret")
        with self.assertRaises(DuplicateUsername):
            self.auth.register(" alice ", "other")

    def test_register_rejects_empty_fields(self):
        with self.assertRaises(ValidationError):
            self.auth.register("", "secret")
        with self.assertRaises(ValidationError):
            self.auth.register("alice", "")

    def test_login_returns_token_and_user(self):
        registered = self.auth.register("alice", "secret")
        token, user = self.auth.login("alice", "secret")
        self.assertEqual(user.user_id, registered.user_id)
        claims = self.auth.verify(token)
        self.assertEqual(claims.username, "alice")
        self.assertEqual(claims.id, registered.user_id)
        self.assertIsNone(claims.exp)

    def test_login_failures_are_indistinguishable(self):
        self.auth.register("alice", "secret")
        with self.assertRaises(InvalidCredentials) as wrong_password:
            self.auth.login("alice", "wrong")
        with self.assertRaises(InvalidCredentials) as unknown_user:
            self.auth.login("nobody", "secret")
        self.assertEqual(wrong_password.exception.message, unknown_user.exception.message)

    def test_verify_rejects_missing_token(self):
        with self.assertRaises(Unauthenticated):
            self.auth.verify(None)
        with self.assertRaises(Unauthenticated):
            self.auth.verify("")

    def test_verify_rejects_tampered_token(self):
        self.auth.register("alice", "secret")
        token, _ = self.auth.login("alice", "secret")
        header, payload, signature = token.split(".")
        tampered = ".".join([header, payload, signature[::-1]])
        with self.assertRaises(Unauthenticated):
            self.auth.verify(tampered)

    def test_verify_rejects_token_from_other_secret(self):
        user = self.auth.register("alice", "secret")
        other = AuthService(self.db, secret="another-secret", hash_rounds=4)
        with self.assertRaises(Unauthenticated):
            self.auth.verify(other.create_token(user))

    def test_verify_rejects_expired_token(self):
        user = self.auth.register("alice", "secret")
        token = self.auth.create_token(user, expires_delta=timedelta(seconds=-10))
        with self.assertRaises(Unauthenticated) as ctx:
            self.auth.verify(token)
        self.assertEqual(ctx.exception.message, "Token expired")

    def test_configured_lifetime_adds_expiry(self):
        auth = AuthService(
            self.db, secret="test-secret", hash_rounds=4, token_expire_minutes=5
        )
        user = auth.register("alice", "secret")
        payload = jwt.decode(
            auth.create_token(user), "test-secret", algorithms=["HS256"]
        )
        self.assertEqual(payload["exp"] - payload["iat"], 300)

    def test_verify_rejects_token_without_identity(self):
        token = jwt.encode({"foo": "bar"}, "test-secret", algorithm="HS256")
        with self.assertRaises(Unauthenticated):
            self.auth.verify(token)


if __name__ == "__main__":
    unittest.main()
