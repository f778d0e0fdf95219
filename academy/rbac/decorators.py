"""
Declarative permission decorators for route handlers.

Usage:
    @router.get("/")
    @require_permission(AppName.CRM, Action.READ)
    async def list_leads(request: Request):
        ...

    @router.put("/{user_id}/role")
    @require_role(Role.ADMIN)
    async def change_role(request: Request, ...):
        ...
"""

from functools import wraps

from fastapi import HTTPException, status
from starlette.requests import Request

from academy.utils import Logger
from academy.utils.exceptions import PermissionDeniedError
from .apps import Action, AppName
from .permissions import is_allowed
from .roles import Role, parse_role

logger = Logger("rbac")


def _find_request(args, kwargs) -> Request:
    request: Request | None = kwargs.get("request")
    if request is None:
        for arg in args:
            if isinstance(arg, Request):
                request = arg
                break

    if request is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Request object not found in handler",
        )
    return request


def require_permission(app: AppName, action: Action):
    """
    Check that the acting user (resolved by the middleware onto
    request.state) holds ``action`` on ``app``.

    Must be applied AFTER the route decorator.
    """

    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            request = _find_request(args, kwargs)
            permissions = getattr(request.state, "user_permissions", None)

            if not is_allowed(permissions, app, action):
                logger.warning(
                    f"Denied {action.value} on {app.value} for user "
                    f"{getattr(request.state, 'user_id', None)}"
                )
                raise PermissionDeniedError(
                    f"Permission denied. Requires: {app.value}:{action.value}"
                )

            return await func(*args, **kwargs)

        return wrapper

    return decorator


def require_role(*roles: Role):
    """Only let users holding one of ``roles`` through."""

    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            request = _find_request(args, kwargs)
            role = parse_role(getattr(request.state, "user_role", None))

            if role not in roles:
                logger.warning(
                    f"Denied role-gated {request.method} {request.url.path} "
                    f"for role {role.value if role else None}"
                )
                raise PermissionDeniedError(
                    "Permission denied. Requires role: "
                    + ", ".join(r.value for r in roles)
                )

            return await func(*args, **kwargs)

        return wrapper

    return decorator
