"""
Role definitions and default permission matrix.

Permission sets are plain dicts of the four CRUD flags:
    {"read": True, "create": True, "update": True, "delete": True}
A missing flag means False. A missing app means no access at all.
"""

import copy
from enum import Enum

from .apps import ALL_APPS, AppName


class Role(str, Enum):
    ADMIN = "Admin"
    EMPLOYEE = "Employee"
    STUDENT = "Student"


PermissionSet = dict[str, bool]
PermissionMap = dict[str, PermissionSet]

FULL_ACCESS: PermissionSet = {"read": True, "create": True, "update": True, "delete": True}
READ_ONLY: PermissionSet = {"read": True}

EMPLOYEE_FULL_ACCESS_APPS = frozenset({
    AppName.CONTACTS,
    AppName.CRM,
    AppName.CALENDAR,
    AppName.DISCUSS,
    AppName.TODO,
    AppName.RECEPTION,
    AppName.SALES,
    AppName.MARKETING,
    AppName.LMS,
})
EMPLOYEE_READ_ONLY_APPS = frozenset({
    AppName.DASHBOARD,
    AppName.ACCOUNTING,
    AppName.INVENTORY,
    AppName.MANUFACTURING,
    AppName.WEBSITE,
    AppName.POINT_OF_SALE,
})
STUDENT_APPS = (AppName.LMS, AppName.STUDENT_DASHBOARD, AppName.PROFILE)


def _build_admin_row() -> PermissionMap:
    return {app.value: dict(FULL_ACCESS) for app in ALL_APPS}


def _build_employee_row() -> PermissionMap:
    row: PermissionMap = {}
    for app in ALL_APPS:
        if app in EMPLOYEE_FULL_ACCESS_APPS:
            row[app.value] = dict(FULL_ACCESS)
        elif app in EMPLOYEE_READ_ONLY_APPS:
            row[app.value] = dict(READ_ONLY)
    return row


def _build_student_row() -> PermissionMap:
    return {app.value: dict(READ_ONLY) for app in STUDENT_APPS}


DEFAULT_PERMISSIONS: dict[Role, PermissionMap] = {
    Role.ADMIN: _build_admin_row(),
    Role.EMPLOYEE: _build_employee_row(),
    Role.STUDENT: _build_student_row(),
}


def parse_role(role) -> Role | None:
    """Return the Role for a Role or its string value, None if unrecognized."""
    if isinstance(role, Role):
        return role
    try:
        return Role(role)
    except ValueError:
        return None


def get_role_permissions(role) -> PermissionMap:
    """Return a private copy of the default permission map for a role."""
    parsed = parse_role(role)
    if parsed is None:
        return {}
    return copy.deepcopy(DEFAULT_PERMISSIONS[parsed])
