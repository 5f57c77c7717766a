"""
Error taxonomy shared by the services and the HTTP layer.

Each error carries the status code the API answers with; the app installs a
single handler that turns any ``BlogError`` into ``{"detail": message}``.
"""

from __future__ import annotations


class BlogError(Exception):
    status_code: int = 500
    default_message: str = "Server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(BlogError):
    status_code = 400
    default_message = "Missing required fields"


class DuplicateUsername(BlogError):
    status_code = 409
    default_message = "Username already exists"


class InvalidCredentials(BlogError):
    status_code = 401
    default_message = "Invalid credentials"


class Unauthenticated(BlogError):
    status_code = 401
    default_message = "Invalid token or not logged in."


class Forbidden(BlogError):
    status_code = 403
    default_message = "You are not the author and cannot edit this post."


class NotFound(BlogError):
    status_code = 404
    default_message = "Post not found"


class MissingFile(BlogError):
    status_code = 400
    default_message = "No file uploaded."


class StoreError(BlogError):
    status_code = 500
    default_message = "Server error"
