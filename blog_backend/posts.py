"""
Post operations with the author ownership check.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from blog_backend.db import DbClient, PostRecord
from blog_backend.errors import Forbidden, NotFound

logger = logging.getLogger(__name__)

RECENT_POSTS_LIMIT = 20


@dataclass
class PostPatch:
    title: Optional[str] = None
    summary: Optional[str] = None
    content: Optional[str] = None
    cover: Optional[str] = None


class PostService:
    def __init__(self, db: DbClient):
        self.db = db

    def create(
        self, author_id: str, title: str, summary: str, content: str, cover: str
    ) -> PostRecord:
        post = self.db.create_post(
            author_id=author_id,
            title=title,
            summary=summary,
            content=content,
            cover=cover,
        )
        logger.info("Created post %s by %s", post.post_id, author_id)
        return post

    def list_recent(self, limit: int = RECENT_POSTS_LIMIT) -> list[PostRecord]:
        return self.db.list_recent_posts(limit=limit)

    def get_by_id(self, post_id: str) -> PostRecord:
        post = self.db.get_post(post_id)
        if not post:
            raise NotFound()
        return post

    def ensure_author(self, post_id: str, requester_id: str) -> PostRecord:
        post = self.get_by_id(post_id)
        if post.author_id != requester_id:
            logger.warning("User %s tried to edit post %s", requester_id, post_id)
            raise Forbidden()
        return post

    def update(self, post_id: str, requester_id: str, patch: PostPatch) -> PostRecord:
        # The only write path for posts, so it enforces ownership itself even
        # when the caller already ran ensure_author.
        self.ensure_author(post_id, requester_id)
        updated = self.db.update_post(
            post_id,
            title=patch.title,
            summary=patch.summary,
            content=patch.content,
            cover=patch.cover,
        )
        if not updated:
            raise NotFound()
        logger.info("Updated post %s", post_id)
        return updated
