"""
Backend package for the blog API.

This package provides a FastAPI application with user registration,
cookie-based sessions and post management, layered over a swappable
database client (in-memory or SQLAlchemy).
"""
