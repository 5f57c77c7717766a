"""
FastAPI application entry point for the blog backend.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from blog_backend.config import DEFAULT_JWT_SECRET, Settings, get_settings
from blog_backend.db import DbClient
from blog_backend.dependencies import get_db_client
from blog_backend.errors import BlogError
from blog_backend.routes import router
from blog_backend.schemas import StatusResponse
from blog_backend.uploads import UploadStore

logger = logging.getLogger(__name__)


async def handle_blog_error(request: Request, exc: BlogError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Fail fast rather than serve requests without a working database.
        try:
            get_db_client(settings)
        except Exception:
            logger.exception("Database connection failed")
            raise
        UploadStore(settings.upload_dir).ensure_dir()
        if settings.secure_cookies and settings.jwt_secret == DEFAULT_JWT_SECRET:
            logger.warning("JWT_SECRET is not set; tokens are signed with the default secret")
        logger.info("Blog backend started (environment=%s)", settings.environment)
        yield

    app = FastAPI(title="Blog Backend (FastAPI)", version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(BlogError, handle_blog_error)
    app.include_router(router, prefix=settings.api_prefix)

    # The directory is created on startup or on first upload.
    app.mount(
        settings.uploads_url_path,
        StaticFiles(directory=settings.upload_dir, check_dir=False),
        name="uploads",
    )

    @app.get("/", response_model=StatusResponse)
    def status(db: DbClient = Depends(get_db_client)):
        return StatusResponse(
            message="Blog API is live and running!",
            service_status="OK",
            database="Connected" if db.ping() else "Unavailable",
        )

    return app


app = create_app()
