"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Cookie, Depends, Request
from starlette.datastructures import FormData

from blog_backend.auth import AuthService, Claims
from blog_backend.config import Settings, get_settings
from blog_backend.db import DbClient, InMemoryDbClient, SqlDbClient
from blog_backend.posts import PostService
from blog_backend.uploads import UploadStore

TOKEN_COOKIE = "token"

_db_client: DbClient | None = None


def get_db_client(settings: Settings = Depends(get_settings)) -> DbClient:
    """
    Return a singleton DB client so users and posts persist across requests.
    """
    global _db_client
    if _db_client:
        return _db_client

    if settings.use_in_memory_backends or not settings.database_url:
        _db_client = InMemoryDbClient()
    else:
        _db_client = SqlDbClient(settings.database_url)
    return _db_client


def get_auth_service(
    settings: Settings = Depends(get_settings),
    db: DbClient = Depends(get_db_client),
) -> AuthService:
    return AuthService(
        db,
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        hash_rounds=settings.password_hash_rounds,
        token_expire_minutes=settings.token_expire_minutes,
    )


def get_post_service(db: DbClient = Depends(get_db_client)) -> PostService:
    return PostService(db)


def get_upload_store(settings: Settings = Depends(get_settings)) -> UploadStore:
    return UploadStore(settings.upload_dir)


async def get_form_data(request: Request) -> FormData:
    """
    The raw submitted form. FastAPI maps an empty ``Form`` value to the
    parameter default, so handlers that must tell ``""`` from an absent
    field read it from here.
    """
    return await request.form()


def get_current_claims(
    token: Optional[str] = Cookie(None),
    auth: AuthService = Depends(get_auth_service),
) -> Claims:
    """Claims from the session cookie; raises Unauthenticated when absent or invalid."""
    return auth.verify(token)
