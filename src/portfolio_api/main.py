from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .errors import ResourceError, StoreUnavailable
from .repositories import RecordStore, get_record_store
from .resources import build_clients
from .routers import career as career_router
from .routers import posts as posts_router
from .routers import timeline as timeline_router
from .settings import Settings, get_settings
from .utils import CORS_ALLOW_HEADERS, RouteCORSMiddleware

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {"name": "timeline", "description": "Life events, newest first. Writes require the admin token."},
    {"name": "career", "description": "Career history ranked by order. Writes require the admin token."},
    {"name": "posts", "description": "Short-form post feed ranked by order. Writes require the admin token."},
]


# PUBLIC_INTERFACE
def create_app(settings: Optional[Settings] = None, store: Optional[RecordStore] = None) -> FastAPI:
    """
    Build the Portfolio API application.

    Args:
        settings: Configuration; read from the environment when omitted.
        store: Record store to serve; built from settings when omitted.
    """
    settings = settings or get_settings()
    logging.getLogger("portfolio_api").setLevel(settings.log_level)
    store = store or get_record_store(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        store.close()

    app = FastAPI(
        title="Portfolio API",
        description="Timeline, career history and post feed for a personal portfolio site.",
        version="0.1.0",
        openapi_tags=openapi_tags,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store
    app.state.clients = build_clients(store)

    # Configure CORS based on settings (.env -> CORS_ALLOW_ORIGINS), with '*' fallback
    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    app.add_middleware(
        RouteCORSMiddleware,
        routes=app.routes,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=[h.strip() for h in CORS_ALLOW_HEADERS.split(",")],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """
        Request bodies that fail schema validation answer 400.

        Response format:
            {
                "error": "Request validation failed",
                "detail": [... pydantic/fastapi error details ...]
            }
        """
        return JSONResponse(
            status_code=400,
            content={"error": "Request validation failed", "detail": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(ResourceError)
    async def resource_exception_handler(request: Request, exc: ResourceError) -> JSONResponse:
        if isinstance(exc, StoreUnavailable):
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    # PUBLIC_INTERFACE
    @app.get("/api/health", summary="Health Check", tags=["health"])
    def health_check():
        """
        Health check endpoint.

        Returns:
            A JSON object indicating service health and the active store backend.
        """
        return {"status": "ok", "backend": settings.store_backend}

    app.include_router(timeline_router.router)
    app.include_router(career_router.router)
    app.include_router(posts_router.router)
    return app


app = create_app()
