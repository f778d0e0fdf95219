"""
User management routes.

Endpoints:
    GET    /                          List users (Admin)
    POST   /                          Create user (Admin)
    GET    /me/permissions            Effective permissions of the caller
    POST   /set-initial-password      First-login password set
    GET    /{user_id}                 Get user (Admin or self)
    PUT    /{user_id}                 Update name/email (Admin or self)
    PUT    /{user_id}/role            Change role (Admin)
    PUT    /{user_id}/permissions     Replace permission override (Admin)
    POST   /{user_id}/change-password Change own password
"""

from fastapi import APIRouter, Depends, Request

from academy.rbac import Role, parse_role
from academy.rbac.decorators import require_role
from academy.utils import success_response
from academy.utils.exceptions import AuthenticationError, PermissionDeniedError
from .dependencies import get_user_repository
from .repository import UserRepository
from .schemas import (
    ChangePasswordRequest,
    CreateUserRequest,
    SetInitialPasswordRequest,
    UpdatePermissionsRequest,
    UpdateRoleRequest,
    UpdateUserRequest,
)
from .service import UserService

users_router = APIRouter()


def _current_user(request: Request) -> dict:
    """Acting user set by the AuthPermissionMiddleware."""
    user = getattr(request.state, "user", None)
    if not user:
        raise AuthenticationError("Authentication context not found")
    return user


def _ensure_admin_or_self(request: Request, user_id: str) -> None:
    user = _current_user(request)
    if parse_role(user.get("role")) is not Role.ADMIN and user.get("id") != user_id:
        raise PermissionDeniedError("You are not authorized to access this profile.")


@users_router.get("/")
@require_role(Role.ADMIN)
async def list_users(
    request: Request,
    repository: UserRepository = Depends(get_user_repository),
):
    users = await UserService(repository).list_users()
    return success_response(data={"users": users, "total": len(users)})


@users_router.post("/")
@require_role(Role.ADMIN)
async def create_user(
    request: Request,
    body: CreateUserRequest,
    repository: UserRepository = Depends(get_user_repository),
):
    svc = UserService(repository)
    user = await svc.create_user(
        data=body.model_dump(), created_by=_current_user(request).get("id")
    )
    users = await svc.list_users()
    return success_response(
        data={"added_user": user, "users": users}, message="User created", code=201
    )


@users_router.get("/me/permissions")
async def my_permissions(request: Request):
    """Effective permissions for UI affordances. The server gate is authoritative."""
    _current_user(request)
    return success_response(data=request.state.user_permissions)


@users_router.post("/set-initial-password")
async def set_initial_password(
    request: Request,
    body: SetInitialPasswordRequest,
    repository: UserRepository = Depends(get_user_repository),
):
    user_id = _current_user(request).get("id")
    user = await UserService(repository).set_initial_password(user_id, body.new_password)
    return success_response(data=user, message="Password set")


@users_router.get("/{user_id}")
async def get_user(
    request: Request,
    user_id: str,
    repository: UserRepository = Depends(get_user_repository),
):
    _ensure_admin_or_self(request, user_id)
    user = await UserService(repository).get_user(user_id)
    return success_response(data=user)


@users_router.put("/{user_id}")
async def update_user(
    request: Request,
    user_id: str,
    body: UpdateUserRequest,
    repository: UserRepository = Depends(get_user_repository),
):
    _ensure_admin_or_self(request, user_id)
    user = await UserService(repository).update_profile(user_id, body.model_dump())
    return success_response(data=user, message="User updated")


@users_router.put("/{user_id}/role")
@require_role(Role.ADMIN)
async def change_role(
    request: Request,
    user_id: str,
    body: UpdateRoleRequest,
    repository: UserRepository = Depends(get_user_repository),
):
    users = await UserService(repository).change_role(
        _current_user(request), user_id, body.role
    )
    return success_response(data={"users": users}, message="Role updated")


@users_router.put("/{user_id}/permissions")
@require_role(Role.ADMIN)
async def change_permissions(
    request: Request,
    user_id: str,
    body: UpdatePermissionsRequest,
    repository: UserRepository = Depends(get_user_repository),
):
    users = await UserService(repository).change_permissions(
        _current_user(request), user_id, body.to_permission_map()
    )
    return success_response(data={"users": users}, message="Permissions updated")


@users_router.post("/{user_id}/change-password")
async def change_password(
    request: Request,
    user_id: str,
    body: ChangePasswordRequest,
    repository: UserRepository = Depends(get_user_repository),
):
    if _current_user(request).get("id") != user_id:
        raise PermissionDeniedError("You can only change your own password.")
    user = await UserService(repository).change_password(
        user_id, body.current_password, body.new_password
    )
    return success_response(data=user, message="Password changed")
