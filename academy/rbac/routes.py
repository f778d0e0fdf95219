from fastapi import APIRouter, Request

from academy.utils import success_response
from .apps import ALL_APPS, ACTIONS, Action, AppName
from .decorators import require_permission
from .roles import get_role_permissions, Role

permissions_router = APIRouter()


@permissions_router.get("/defaults")
@require_permission(AppName.ACCESS_CONTROL, Action.READ)
async def default_permissions(request: Request):
    """The role → app → CRUD matrix, for the access-control screen."""
    return success_response(
        data={
            "apps": [app.value for app in ALL_APPS],
            "actions": list(ACTIONS),
            "roles": {role.value: get_role_permissions(role) for role in Role},
        }
    )
