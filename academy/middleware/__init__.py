"""
Authentication + permission middleware.

Runs on every request (except the public routes for the app's api_version):
  1. Decode JWT → extract the user id
  2. Load the user fresh from the repository and resolve its permissions
  3. Set request.state.user, user_id, user_role, user_permissions
  4. Gate application routes (/api/v1/<app>/...) on the CRUD action
"""

from fastapi import HTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from academy.auth.helpers import decode_access_token
from academy.rbac.permissions import is_allowed, resolve_permission_from_request
from academy.users.service import to_public_user
from academy.utils import Logger, error_response

logger = Logger("middleware")

# Routes that skip all auth / permission checks
STATIC_PUBLIC_ROUTES = ("/health", "/openapi.json", "/api/docs", "/redoc")


def public_routes(api_version: str) -> set[str]:
    return {
        f"/api/{api_version}/auth/login",
        f"/api/{api_version}/auth/register",
        *STATIC_PUBLIC_ROUTES,
    }


class AuthPermissionMiddleware(BaseHTTPMiddleware):
    """Single middleware that handles JWT verification + RBAC enforcement."""

    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS":
            return await call_next(request)

        path = request.url.path

        # ── Skip public routes ───────────────────────────────────
        api_version = request.app.state.settings.api_version
        if path in public_routes(api_version) or path.startswith("/api/docs"):
            return await call_next(request)

        # ── Extract & decode JWT ─────────────────────────────────
        auth_header = request.headers.get("Authorization")
        if not auth_header:
            return error_response("Authentication token required.", code=401)

        if not auth_header.startswith("Bearer "):
            return error_response(
                "Invalid token format. Expected 'Bearer <token>'", code=401
            )

        token = auth_header.split(" ", 1)[1].strip()

        try:
            payload = decode_access_token(token)
        except HTTPException as e:
            return error_response(e.detail, code=e.status_code)

        # ── Load acting user ─────────────────────────────────────
        repository = request.app.state.user_repository
        user_doc = await repository.find_by_id(str(payload.get("sub", "")))
        if not user_doc:
            return error_response("User no longer exists.", code=401)

        user = to_public_user(user_doc)
        request.state.user = user
        request.state.user_id = user["id"]
        request.state.user_role = user.get("role")
        request.state.user_permissions = user["permissions"]

        # ── RBAC check ───────────────────────────────────────────
        required = resolve_permission_from_request(request)
        if required:
            app, action = required
            if not is_allowed(user["permissions"], app, action):
                logger.warning(
                    f"Denied {request.method} {path} for user {user['id']} "
                    f"({app.value}:{action.value})"
                )
                return error_response(
                    f"Permission denied. Requires: {app.value}:{action.value}",
                    code=403,
                )

        return await call_next(request)
