"""
FastAPI application: REST adapter for the diet recipe recommender.

Usage:
    python run_api.py

Or directly:
    uvicorn adapters.rest.app:app --host 0.0.0.0 --port 8000 --reload
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from domain.exceptions import (
    ConflictError,
    DomainError,
    DuplicateEntryError,
    GenerationError,
    NoConditionsError,
    NotFoundError,
    RecommendationFailure,
    RepositoryError,
    ValidationError,
)
from infrastructure.config import Settings
from factory import ServiceFactory
from adapters.rest.routers import chat, conditions, recipes, users

logger = logging.getLogger(__name__)

__version__ = "1.0.0"

# Most specific first: the first matching class decides the status
_STATUS_CODES: list[tuple[type[DomainError], int]] = [
    (ValidationError, 400),
    (NoConditionsError, 400),
    (NotFoundError, 404),
    (ConflictError, 409),
    (DuplicateEntryError, 409),
    (GenerationError, 500),
    (RecommendationFailure, 500),
    (RepositoryError, 500),
]


def status_for(exc: DomainError) -> int:
    for exc_type, status_code in _STATUS_CODES:
        if isinstance(exc, exc_type):
            return status_code
    return 500


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the ServiceFactory on startup (unless one was provided) and close it on shutdown."""
    factory = getattr(app.state, "factory", None)
    if factory is None:
        factory = ServiceFactory(Settings.from_env())
        app.state.factory = factory
    await factory.initialize()
    yield
    await factory.close()


async def _domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc)
    return JSONResponse(status_code=status_code, content={"success": False, "error": str(exc)})


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path"))
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    else:
        message = "Invalid request"
    return JSONResponse(status_code=400, content={"success": False, "error": message})


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"success": False, "error": "Internal server error"})


def create_app(factory: ServiceFactory | None = None) -> FastAPI:
    """Build the FastAPI app. A pre-built factory is used instead of one from the environment."""
    app = FastAPI(
        title="Diet Recipe Recommender",
        version=__version__,
        description="Recipe recommendations driven by users' medical conditions.",
        lifespan=lifespan,
    )
    if factory is not None:
        app.state.factory = factory

    # CORS: permissive for development; tighten allowed_origins in production
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(DomainError, _domain_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)

    app.include_router(recipes.router, prefix="/api/recipes")
    app.include_router(users.router, prefix="/api/users")
    app.include_router(conditions.router, prefix="/api/medical-conditions")
    app.include_router(chat.router, prefix="/api/chat")

    @app.get("/api/health", tags=["health"])
    async def health():
        return {"status": "ok", "version": __version__}

    return app


app = create_app()
