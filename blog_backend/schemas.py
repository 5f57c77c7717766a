"""
Pydantic schemas for the blog API.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class Credentials(BaseModel):
    username: str = ""
    password: str = ""


class UserResponse(BaseModel):
    id: str
    username: str
    created_at: float
    updated_at: float


class LoginResponse(BaseModel):
    id: str
    username: str


class AuthorResponse(BaseModel):
    id: str
    username: Optional[str] = None


class PostResponse(BaseModel):
    id: str
    title: str
    summary: str
    content: str
    cover: str
    author: AuthorResponse
    created_at: float
    updated_at: float


class MessageResponse(BaseModel):
    message: str


class StatusResponse(BaseModel):
    message: str
    service_status: str
    database: str
