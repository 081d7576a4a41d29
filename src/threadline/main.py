"""Main entry point for the Threadline application."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from threadline import __version__
from threadline.api.v1 import auth_router, threads_router, users_router
from threadline.core.errors import InvalidQuery, ThreadlineError
from threadline.core.security import Argon2PasswordHasher, JwtTokenIssuer
from threadline.core.settings import Settings
from threadline.db.session import build_engine, build_session_factory
from threadline.repositories import (
    FollowRepository,
    ThreadRepository,
    UserRepository,
    VoteRepository,
)
from threadline.schemas.common import ErrorResponse
from threadline.services.feed import FeedAssembler
from threadline.services.follow_service import FollowService
from threadline.services.thread_service import ThreadService
from threadline.services.user_service import UserService
from threadline.services.votes_service import VotesService

logger = logging.getLogger(__name__)


def _wire_services(app: FastAPI, settings: Settings) -> None:
    engine = build_engine(settings)
    sessions = build_session_factory(engine)

    users = UserRepository(sessions)
    threads = ThreadRepository(
        sessions, popularity_window=settings.popularity_candidate_window
    )
    follows = FollowRepository(sessions)
    votes = VoteRepository(sessions)
    feed = FeedAssembler(
        threads, users, source_timeout=settings.feed_source_timeout_seconds
    )
    token_issuer = JwtTokenIssuer(settings)

    app.state.settings = settings
    app.state.engine = engine
    app.state.token_issuer = token_issuer
    app.state.user_service = UserService(
        users, follows, Argon2PasswordHasher(settings), token_issuer
    )
    app.state.thread_service = ThreadService(threads, users, votes, feed)
    app.state.follow_service = FollowService(follows, users)
    app.state.votes_service = VotesService(votes, users, threads)


async def _handle_domain_error(request: Request, exc: ThreadlineError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(message=exc.message).model_dump(),
    )


async def _handle_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.info("Rejected malformed request on %s %s", request.method, request.url.path)
    return await _handle_domain_error(request, InvalidQuery())


async def _handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(message="Internal server error").model_dump(),
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application around one :class:`Settings` instance."""
    settings = settings or Settings()
    logging.basicConfig(level=settings.log_level.upper())

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.engine.dispose()

    app = FastAPI(
        title=settings.app_name,
        description="Threads, replies, votes and cursor-paginated feeds",
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    # Add GZip middleware for compression
    app.add_middleware(GZipMiddleware)

    app.add_exception_handler(ThreadlineError, _handle_domain_error)
    app.add_exception_handler(RequestValidationError, _handle_validation_error)
    app.add_exception_handler(Exception, _handle_unexpected_error)

    # Include API routers
    app.include_router(auth_router, prefix="/api/v1")
    app.include_router(threads_router, prefix="/api/v1")
    app.include_router(users_router, prefix="/api/v1")

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint to verify the service is running."""
        return {"status": "ok"}

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint with basic information about the API."""
        return {
            "name": settings.app_name,
            "version": __version__,
            "docs": "/docs",
            "redoc": "/redoc",
        }

    _wire_services(app, settings)
    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run("threadline.main:app", host="0.0.0.0", port=8000)
