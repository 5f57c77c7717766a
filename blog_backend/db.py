"""
Database abstraction for SQL databases and an in-memory test implementation.

Users and posts share one client; the HTTP layer never sees ORM rows, only
the ``UserRecord``/``PostRecord`` dataclasses below.
"""

from __future__ import annotations

import logging
import time
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from typing import Dict, Iterator, Optional, Protocol

from sqlalchemy import Column, Float, ForeignKey, String, Text, create_engine, select, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from blog_backend.errors import DuplicateUsername, StoreError

logger = logging.getLogger(__name__)


class DbClient(Protocol):
    """Interface for database access."""

    def ping(self) -> bool:
        ...

    def create_user(self, username: str, password_hash: str) -> "UserRecord":
        ...

    def get_user(self, user_id: str) -> Optional["UserRecord"]:
        ...

    def get_user_by_username(self, username: str) -> Optional["UserRecord"]:
        ...

    def create_post(
        self,
        *,
        author_id: str,
        title: str,
        summary: str,
        content: str,
        cover: str,
    ) -> "PostRecord":
        ...

    def get_post(self, post_id: str) -> Optional["PostRecord"]:
        ...

    def list_recent_posts(self, limit: int = 20) -> list["PostRecord"]:
        ...

    def update_post(
        self,
        post_id: str,
        *,
        title: Optional[str] = None,
        summary: Optional[str] = None,
        content: Optional[str] = None,
        cover: Optional[str] = None,
    ) -> Optional["PostRecord"]:
        ...


@dataclass
class UserRecord:
    user_id: str
    username: str
    password_hash: str
    created_at: float = field(default_factory=lambda: time.time())
    updated_at: float = field(default_factory=lambda: time.time())

    def as_public(self) -> dict:
        """Everything except the password hash."""
        return {
            "id": self.user_id,
            "username": self.username,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


@dataclass
class PostRecord:
    post_id: str
    title: str
    summary: str
    content: str
    cover: str
    author_id: str
    # Filled in when the author is resolved against the users table.
    author_username: Optional[str] = None
    created_at: float = field(default_factory=lambda: time.time())
    updated_at: float = field(default_factory=lambda: time.time())

    def as_dict(self) -> dict:
        return {
            "id": self.post_id,
            "title": self.title,
            "summary": self.summary,
            "content": self.content,
            "cover": self.cover,
            "author": {"id": self.author_id, "username": self.author_username},
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


class InMemoryDbClient:
    """Simple in-memory database for development and tests."""

    def __init__(self):
        self.users: Dict[str, UserRecord] = {}
        self.posts: Dict[str, PostRecord] = {}

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.users.clear()
        self.posts.clear()

    def ping(self) -> bool:
        return True

    def create_user(self, username: str, password_hash: str) -> UserRecord:
        if self.get_user_by_username(username):
            raise DuplicateUsername()
        record = UserRecord(
            user_id=uuid.uuid4().hex,
            username=username,
            password_hash=password_hash,
        )
        self.users[record.user_id] = record
        return replace(record)

    def get_user(self, user_id: str) -> Optional[UserRecord]:
        user = self.users.get(user_id)
        return replace(user) if user else None

    def get_user_by_username(self, username: str) -> Optional[UserRecord]:
        for user in self.users.values():
            if user.username == username:
                return replace(user)
        return None

    def _resolved(self, post: PostRecord) -> PostRecord:
        author = self.users.get(post.author_id)
        return replace(post, author_username=author.username if author else None)

    def create_post(
        self,
        *,
        author_id: str,
        title: str,
        summary: str,
        content: str,
        cover: str,
    ) -> PostRecord:
        record = PostRecord(
            post_id=uuid.uuid4().hex,
            title=title,
            summary=summary,
            content=content,
            cover=cover,
            author_id=author_id,
        )
        self.posts[record.post_id] = record
        return self._resolved(record)

    def get_post(self, post_id: str) -> Optional[PostRecord]:
        post = self.posts.get(post_id)
        return self._resolved(post) if post else None

    def list_recent_posts(self, limit: int = 20) -> list[PostRecord]:
        # Reversed first so that, on equal timestamps, later inserts come first.
        ordered = sorted(
            reversed(list(self.posts.values())),
            key=lambda post: post.created_at,
            reverse=True,
        )
        return [self._resolved(post) for post in ordered[:limit]]

    def update_post(
        self,
        post_id: str,
        *,
        title: Optional[str] = None,
        summary: Optional[str] = None,
        content: Optional[str] = None,
        cover: Optional[str] = None,
    ) -> Optional[PostRecord]:
        post = self.posts.get(post_id)
        if not post:
            return None
        if title is not None:
            post.title = title
        if summary is not None:
            post.summary = summary
        if content is not None:
            post.content = content
        if cover is not None:
            post.cover = cover
        post.updated_at = time.time()
        return self._resolved(post)


class SqlDbClient:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for SqlDbClient")
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
            connect_args={"check_same_thread": False} if database_url.startswith("sqlite") else {},
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as exc:
            raise StoreError("Database unavailable") from exc

    @contextmanager
    def _session(self) -> Iterator[Session]:
        try:
            with self.Session() as session:
                yield session
        except SQLAlchemyError as exc:
            logger.exception("Database operation failed")
            raise StoreError() from exc

    def _to_user_record(self, row: "UserRow") -> UserRecord:
        return UserRecord(
            user_id=row.id,
            username=row.username,
            password_hash=row.password_hash,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def _to_post_record(self, row: "PostRow", username: Optional[str]) -> PostRecord:
        return PostRecord(
            post_id=row.id,
            title=row.title,
            summary=row.summary,
            content=row.content,
            cover=row.cover,
            author_id=row.author_id,
            author_username=username,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def _post_query(self):
        return select(PostRow, UserRow.username).outerjoin(
            UserRow, UserRow.id == PostRow.author_id
        )

    def ping(self) -> bool:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            logger.warning("Database ping failed", exc_info=True)
            return False

    def create_user(self, username: str, password_hash: str) -> UserRecord:
        now = time.time()
        with self._session() as session:
            row = UserRow(
                id=uuid.uuid4().hex,
                username=username,
                password_hash=password_hash,
                created_at=now,
                updated_at=now,
            )
            session.add(row)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise DuplicateUsername() from exc
            session.refresh(row)
            return self._to_user_record(row)

    def get_user(self, user_id: str) -> Optional[UserRecord]:
        with self._session() as session:
            row = session.get(UserRow, user_id)
            return self._to_user_record(row) if row else None

    def get_user_by_username(self, username: str) -> Optional[UserRecord]:
        with self._session() as session:
            row = session.execute(
                select(UserRow).where(UserRow.username == username)
            ).scalar_one_or_none()
            return self._to_user_record(row) if row else None

    def create_post(
        self,
        *,
        author_id: str,
        title: str,
        summary: str,
        content: str,
        cover: str,
    ) -> PostRecord:
        now = time.time()
        post_id = uuid.uuid4().hex
        with self._session() as session:
            session.add(
                PostRow(
                    id=post_id,
                    title=title,
                    summary=summary,
                    content=content,
                    cover=cover,
                    author_id=author_id,
                    created_at=now,
                    updated_at=now,
                )
            )
            session.commit()
        return self.get_post(post_id)

    def get_post(self, post_id: str) -> Optional[PostRecord]:
        with self._session() as session:
            result = session.execute(
                self._post_query().where(PostRow.id == post_id)
            ).first()
            if not result:
                return None
            row, username = result
            return self._to_post_record(row, username)

    def list_recent_posts(self, limit: int = 20) -> list[PostRecord]:
        with self._session() as session:
            stmt = (
                self._post_query()
                .order_by(PostRow.created_at.desc())
                .limit(limit)
            )
            return [
                self._to_post_record(row, username)
                for row, username in session.execute(stmt).all()
            ]

    def update_post(
        self,
        post_id: str,
        *,
        title: Optional[str] = None,
        summary: Optional[str] = None,
        content: Optional[str] = None,
        cover: Optional[str] = None,
    ) -> Optional[PostRecord]:
        with self._session() as session:
            row = session.get(PostRow, post_id)
            if not row:
                return None
            if title is not None:
                row.title = title
            if summary is not None:
                row.summary = summary
            if content is not None:
                row.content = content
            if cover is not None:
                row.cover = cover
            row.updated_at = time.time()
            session.commit()
        return self.get_post(post_id)


Base = declarative_base()


class UserRow(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True)
    username = Column(String, nullable=False, unique=True, index=True)
    password_hash = Column(String, nullable=False)
    created_at = Column(Float, nullable=False)
    updated_at = Column(Float, nullable=False)


class PostRow(Base):
    __tablename__ = "posts"

    id = Column(String, primary_key=True)
    title = Column(String, nullable=False)
    summary = Column(String, nullable=False)
    content = Column(Text, nullable=False)
    cover = Column(String, nullable=False)
    author_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(Float, nullable=False, index=True)
    updated_at = Column(Float, nullable=False)
