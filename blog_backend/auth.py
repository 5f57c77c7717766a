"""
Password hashing and session tokens.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from passlib.context import CryptContext
from pydantic import BaseModel

from blog_backend.db import DbClient, UserRecord
from blog_backend.errors import InvalidCredentials, Unauthenticated, ValidationError

logger = logging.getLogger(__name__)


class Claims(BaseModel):
    username: str
    id: str
    iat: Optional[int] = None
    exp: Optional[int] = None


class AuthService:
    """
    Registers users, checks passwords and signs/verifies session tokens.

    The signing secret and hash cost are passed in rather than read from
    module globals, so tests can build a cheap instance.
    """

    def __init__(
        self,
        db: DbClient,
        *,
        secret: str,
        algorithm: str = "HS256",
        hash_rounds: int = 10,
        token_expire_minutes: Optional[int] = None,
    ):
        self.db = db
        self.secret = secret
        self.algorithm = algorithm
        self.token_expire_minutes = token_expire_minutes
        self.pwd_context = CryptContext(
            schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=hash_rounds
        )

    def hash_password(self, password: str) -> str:
        return self.pwd_context.hash(password)

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        return self.pwd_context.verify(plain_password, hashed_password)

    def register(self, username: str, password: str) -> UserRecord:
        username = (username or "").strip()
        if not username or not password:
            raise ValidationError("Username and password are required")
        user = self.db.create_user(username, self.hash_password(password))
        logger.info("Registered user %s", user.username)
        return user

    def authenticate(self, username: str, password: str) -> UserRecord:
        user = self.db.get_user_by_username((username or "").strip())
        if not user or not password or not self.verify_password(password, user.password_hash):
            logger.warning("Failed login attempt for %r", username)
            raise InvalidCredentials()
        return user

    def create_token(self, user: UserRecord, expires_delta: Optional[timedelta] = None) -> str:
        now = datetime.now(timezone.utc)
        to_encode = {"username": user.username, "id": user.user_id, "iat": now}
        if expires_delta is None and self.token_expire_minutes:
            expires_delta = timedelta(minutes=self.token_expire_minutes)
        if expires_delta is not None:
            to_encode["exp"] = now + expires_delta
        return jwt.encode(to_encode, self.secret, algorithm=self.algorithm)

    def login(self, username: str, password: str) -> tuple[str, UserRecord]:
        user = self.authenticate(username, password)
        return self.create_token(user), user

    def verify(self, token: Optional[str]) -> Claims:
        if not token:
            raise Unauthenticated("No token found")
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
            return Claims(**payload)
        except jwt.ExpiredSignatureError:
            raise Unauthenticated("Token expired")
        except (jwt.InvalidTokenError, ValueError):
            raise Unauthenticated("Invalid token")
