"""
Academy access service: main application.

Assembles config, middleware, auth, users and the permission matrix routes.
"""

import time
import traceback
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from academy.config import DatabaseManager, Settings, settings as default_settings
from academy.middleware import AuthPermissionMiddleware
from academy.middleware.rate_limiting import AuthRateLimitMiddleware
from academy.users.repository import UserRepository
from academy.utils import Logger, configure_logging, error_response

# ── Route imports ────────────────────────────────────────────────
from academy.auth import auth_router
from academy.users import users_router
from academy.rbac.routes import permissions_router

logger = Logger("request")


# ── Request Logging Middleware ───────────────────────────────────
class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs every request: method, path, status code, and duration."""

    async def dispatch(self, request: Request, call_next):
        start = time.time()
        method = request.method
        path = request.url.path
        client = request.client.host if request.client else "unknown"

        logger.info(f"--> {method} {path} (from {client})")

        try:
            response = await call_next(request)
        except Exception as exc:
            duration = round((time.time() - start) * 1000, 2)
            logger.error(f"<-- {method} {path} | 500 | {duration}ms")
            logger.error(f"    Exception: {exc}")
            raise

        duration = round((time.time() - start) * 1000, 2)
        status = response.status_code

        if status >= 500:
            logger.error(f"<-- {method} {path} | {status} | {duration}ms")
        elif status >= 400:
            logger.warning(f"<-- {method} {path} | {status} | {duration}ms")
        else:
            logger.info(f"<-- {method} {path} | {status} | {duration}ms")

        return response


# ── Lifespan ─────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    db_manager: Optional[DatabaseManager] = None
    if app.state.user_repository is None:
        config: Settings = app.state.settings
        db_manager = DatabaseManager(config)
        await db_manager.connect()
        repository = UserRepository(db_manager.database[config.users_collection])
        await repository.ensure_indexes()
        app.state.db_manager = db_manager
        app.state.user_repository = repository
    yield
    if db_manager is not None:
        db_manager.close()
        app.state.user_repository = None
        app.state.db_manager = None


# ── App factory ──────────────────────────────────────────────────
def create_app(
    settings: Settings = default_settings,
    user_repository: Optional[UserRepository] = None,
) -> FastAPI:
    """
    Build the application. Pass ``user_repository`` to run against an
    existing store; otherwise MongoDB is connected on startup.
    """
    configure_logging(settings.debug)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Role and permission service for the academy platform",
        docs_url="/api/docs",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.user_repository = user_repository
    app.state.db_manager = None

    # ── Auth + RBAC middleware (innermost) ───────────────────
    app.add_middleware(AuthPermissionMiddleware)

    # ── Auth route throttling ────────────────────────────────
    app.add_middleware(AuthRateLimitMiddleware, settings=settings)

    # ── Request logging (runs on every request) ──────────────
    app.add_middleware(RequestLoggingMiddleware)

    # ── CORS (outermost, answers preflight) ──────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allowed_methods,
        allow_headers=settings.cors_allowed_headers,
    )

    # ── Exception handlers ───────────────────────────────────
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        response = error_response(str(exc.detail), code=exc.status_code)
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        details = [
            {
                "path": ".".join(str(p) for p in err.get("loc", ()) if p != "body"),
                "message": err.get("msg", ""),
            }
            for err in exc.errors()
        ]
        return error_response("Invalid request data.", code=400, details=details)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception on {request.method} {request.url.path}:")
        logger.error(traceback.format_exc())
        return error_response(
            str(exc) if settings.debug else "An internal server error occurred.",
            code=500,
        )

    # ── Routes ───────────────────────────────────────────────
    v = settings.api_version  # "v1"

    app.include_router(
        auth_router,
        prefix=f"/api/{v}/auth",
        tags=["Authentication"],
    )
    app.include_router(
        users_router,
        prefix=f"/api/{v}/users",
        tags=["Users"],
    )
    app.include_router(
        permissions_router,
        prefix=f"/api/{v}/permissions",
        tags=["Permissions"],
    )

    # ── Health check ─────────────────────────────────────────
    @app.get("/health")
    async def health():
        db_manager = app.state.db_manager
        return {
            "status": "healthy",
            "app": settings.app_name,
            "version": settings.app_version,
            "database": bool(db_manager and db_manager.is_connected),
        }

    return app


# ── Create the app instance ──────────────────────────────────────
app = create_app()
