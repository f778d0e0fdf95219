from .apps import ALL_APPS, ACTIONS, Action, AppName
from .roles import (
    DEFAULT_PERMISSIONS,
    PermissionMap,
    PermissionSet,
    Role,
    get_role_permissions,
    parse_role,
)
from .permissions import (
    is_allowed,
    resolve_permission_from_request,
    resolve_permissions,
)
from .safety import RoleChangeDecision, can_change_role

__all__ = [
    "ALL_APPS",
    "ACTIONS",
    "Action",
    "AppName",
    "DEFAULT_PERMISSIONS",
    "PermissionMap",
    "PermissionSet",
    "Role",
    "get_role_permissions",
    "parse_role",
    "is_allowed",
    "resolve_permission_from_request",
    "resolve_permissions",
    "RoleChangeDecision",
    "can_change_role",
]
