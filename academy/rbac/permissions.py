"""
Permission resolution and checking.

``resolve_permissions`` turns a user record into its effective permission map
(stored override, else the role default). ``is_allowed`` answers a single
{app, action} question against that map. Both are total: unknown roles, apps
or actions simply resolve to a deny.
"""

from collections.abc import Mapping
from typing import Any

from starlette.requests import Request

from .apps import Action, AppName
from .roles import PermissionMap, get_role_permissions


# ── Map URL path segments to applications ────────────────────────
APP_ROUTE_MAP: dict[str, AppName] = {
    "dashboard": AppName.DASHBOARD,
    "contacts": AppName.CONTACTS,
    "lms": AppName.LMS,
    "crm": AppName.CRM,
    "calendar": AppName.CALENDAR,
    "discuss": AppName.DISCUSS,
    "accounting": AppName.ACCOUNTING,
    "sales": AppName.SALES,
    "inventory": AppName.INVENTORY,
    "manufacturing": AppName.MANUFACTURING,
    "website": AppName.WEBSITE,
    "pos": AppName.POINT_OF_SALE,
    "marketing": AppName.MARKETING,
    "todo": AppName.TODO,
    "reception": AppName.RECEPTION,
    "settings": AppName.SETTINGS,
    "access-control": AppName.ACCESS_CONTROL,
    "student-dashboard": AppName.STUDENT_DASHBOARD,
    "profile": AppName.PROFILE,
}

# ── Map HTTP methods to CRUD actions ─────────────────────────────
METHOD_TO_ACTION: dict[str, Action] = {
    "GET": Action.READ,
    "HEAD": Action.READ,
    "POST": Action.CREATE,
    "PUT": Action.UPDATE,
    "PATCH": Action.UPDATE,
    "DELETE": Action.DELETE,
}


def has_override(permissions: Any) -> bool:
    """A stored override counts only when it is a non-empty mapping."""
    return isinstance(permissions, Mapping) and len(permissions) > 0


def resolve_permissions(user: Mapping[str, Any]) -> PermissionMap:
    """
    Effective permission map for a user record.

    A non-empty stored ``permissions`` mapping wins in its entirety; there is
    no per-app merge with the role default. Anything else (missing, None,
    empty, not a mapping) falls back to the matrix row for ``user["role"]``.
    An empty override therefore means "use role defaults", not "no access".
    """
    stored = user.get("permissions")
    if has_override(stored):
        return {
            app.value if isinstance(app, AppName) else app:
                dict(perms) if isinstance(perms, Mapping) else perms
            for app, perms in stored.items()
        }
    return get_role_permissions(user.get("role"))


def is_allowed(
    permission_map: Mapping[str, Any] | None,
    app_name: AppName | str,
    action: Action | str,
) -> bool:
    """True when ``permission_map`` grants ``action`` on ``app_name``."""
    if not isinstance(permission_map, Mapping):
        return False
    app_key = app_name.value if isinstance(app_name, AppName) else app_name
    action_key = action.value if isinstance(action, Action) else action
    entry = permission_map.get(app_key)
    if not isinstance(entry, Mapping):
        return False
    return bool(entry.get(action_key, False))


def resolve_permission_from_request(
    request: Request,
) -> tuple[AppName, Action] | None:
    """
    Derive the (app, action) a request needs.

    URL pattern expected:  /api/{version}/{app-segment}/...
    Returns None when the segment is not an application route.
    """
    path_parts = request.url.path.strip("/").split("/")
    # path_parts = ["api", "v1", "crm", ...]
    if len(path_parts) < 3 or path_parts[0] != "api":
        return None
    app = APP_ROUTE_MAP.get(path_parts[2])
    action = METHOD_TO_ACTION.get(request.method)

    if app is None or action is None:
        return None

    return app, action
