"""
HTTP routes for the blog API.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, Response, UploadFile
from starlette.datastructures import FormData

from blog_backend.auth import AuthService, Claims
from blog_backend.config import Settings, get_settings
from blog_backend.db import PostRecord
from blog_backend.dependencies import (
    TOKEN_COOKIE,
    get_auth_service,
    get_current_claims,
    get_form_data,
    get_post_service,
    get_upload_store,
)
from blog_backend.errors import MissingFile, StoreError
from blog_backend.posts import PostPatch, PostService
from blog_backend.schemas import (
    Credentials,
    LoginResponse,
    MessageResponse,
    PostResponse,
    UserResponse,
)
from blog_backend.uploads import UploadStore

logger = logging.getLogger(__name__)

router = APIRouter()

PATCHABLE_FIELDS = ("title", "summary", "content")


def _post_response(post: PostRecord) -> PostResponse:
    return PostResponse(**post.as_dict())


@router.post("/register", response_model=UserResponse, status_code=201)
def register(payload: Credentials, auth: AuthService = Depends(get_auth_service)):
    user = auth.register(payload.username, payload.password)
    return UserResponse(**user.as_public())


@router.post("/login", response_model=LoginResponse)
def login(
    payload: Credentials,
    response: Response,
    auth: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
):
    token, user = auth.login(payload.username, payload.password)
    response.set_cookie(
        TOKEN_COOKIE,
        token,
        httponly=True,
        samesite="lax",
        secure=settings.secure_cookies,
        domain=settings.cookie_domain,
    )
    return LoginResponse(id=user.user_id, username=user.username)


@router.get("/profile", response_model=Claims, response_model_exclude_none=True)
def profile(claims: Claims = Depends(get_current_claims)):
    return claims


@router.post("/logout", response_model=MessageResponse)
def logout(response: Response, settings: Settings = Depends(get_settings)):
    """
    Clears the session cookie. Tokens are stateless, so nothing is revoked server-side.
    """
    response.delete_cookie(
        TOKEN_COOKIE,
        httponly=True,
        samesite="lax",
        secure=settings.secure_cookies,
        domain=settings.cookie_domain,
    )
    return MessageResponse(message="Logged out")


@router.post("/post", response_model=PostResponse, status_code=201)
def create_post(
    title: str = Form(...),
    summary: str = Form(...),
    content: str = Form(...),
    cover: UploadFile | None = File(None),
    claims: Claims = Depends(get_current_claims),
    posts: PostService = Depends(get_post_service),
    uploads: UploadStore = Depends(get_upload_store),
):
    if cover is None:
        raise MissingFile()
    cover_path = uploads.store(cover.file, cover.filename)
    try:
        post = posts.create(claims.id, title, summary, content, cover_path)
    except StoreError as exc:
        raise HTTPException(status_code=400, detail="Post creation failed.") from exc
    return _post_response(post)


@router.get("/post", response_model=list[PostResponse])
def list_posts(posts: PostService = Depends(get_post_service)):
    return [_post_response(post) for post in posts.list_recent()]


@router.get("/post/{post_id}", response_model=PostResponse)
def get_post(post_id: str, posts: PostService = Depends(get_post_service)):
    return _post_response(posts.get_by_id(post_id))


@router.put("/post", response_model=PostResponse)
def update_post(
    post_id: str = Form(..., alias="id"),
    cover: UploadFile | None = File(None),
    form: FormData = Depends(get_form_data),
    claims: Claims = Depends(get_current_claims),
    posts: PostService = Depends(get_post_service),
    uploads: UploadStore = Depends(get_upload_store),
):
    # Check ownership before touching the filesystem so a rejected edit stores nothing.
    posts.ensure_author(post_id, claims.id)

    new_cover = None
    if cover is not None and cover.filename:
        new_cover = uploads.store(cover.file, cover.filename)

    # Fields present in the form are applied even when empty; absent ones are kept.
    fields = {
        name: form[name]
        for name in PATCHABLE_FIELDS
        if name in form and isinstance(form[name], str)
    }
    patch = PostPatch(cover=new_cover, **fields)
    return _post_response(posts.update(post_id, claims.id, patch))
