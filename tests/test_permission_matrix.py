"""
Default permission matrix and gate behaviour per role.
"""
import pytest
from hypothesis import given, strategies as st

from academy.rbac import (
    ACTIONS,
    ALL_APPS,
    DEFAULT_PERMISSIONS,
    AppName,
    Role,
    get_role_permissions,
    is_allowed,
    resolve_permissions,
)

EMPLOYEE_FULL = {"Contacts", "CRM", "Calendar", "Discuss", "To-do", "Reception", "Sales", "Marketing", "LMS"}
EMPLOYEE_READ = {"Dashboard", "Accounting", "Inventory", "Manufacturing", "Website", "Point of Sale"}
STUDENT_APPS = {"LMS", "StudentDashboard", "Profile"}

ALLOWED_APPS = {
    Role.ADMIN: {app.value for app in ALL_APPS},
    Role.EMPLOYEE: EMPLOYEE_FULL | EMPLOYEE_READ,
    Role.STUDENT: STUDENT_APPS,
}

app_names = st.one_of(
    st.sampled_from([app.value for app in AppName]),
    st.text(max_size=30),
)


def defaults_for(role):
    return resolve_permissions({"role": role, "permissions": None})


def test_canonical_app_list_has_seventeen_entries():
    assert len(ALL_APPS) == 17
    assert AppName.STUDENT_DASHBOARD not in ALL_APPS
    assert AppName.PROFILE not in ALL_APPS


@pytest.mark.parametrize("app", [app.value for app in ALL_APPS])
@pytest.mark.parametrize("action", ACTIONS)
def test_admin_has_everything(app, action):
    assert is_allowed(defaults_for(Role.ADMIN), app, action)


def test_employee_full_access_apps():
    perms = defaults_for(Role.EMPLOYEE)
    for app in EMPLOYEE_FULL:
        assert all(is_allowed(perms, app, action) for action in ACTIONS), app


def test_employee_read_only_apps():
    perms = defaults_for(Role.EMPLOYEE)
    for app in EMPLOYEE_READ:
        assert is_allowed(perms, app, "read"), app
        for action in ("create", "update", "delete"):
            assert not is_allowed(perms, app, action), (app, action)


def test_employee_has_no_settings_or_access_control():
    perms = defaults_for(Role.EMPLOYEE)
    assert "Settings" not in perms
    assert "Access Control" not in perms


def test_student_row_is_exactly_three_read_only_apps():
    perms = defaults_for(Role.STUDENT)
    assert set(perms) == STUDENT_APPS
    for app in STUDENT_APPS:
        assert is_allowed(perms, app, "read")
        for action in ("create", "update", "delete"):
            assert not is_allowed(perms, app, action)


@given(role=st.sampled_from(list(Role)), app=app_names, action=st.sampled_from(ACTIONS))
def test_apps_outside_allow_list_are_denied(role, app, action):
    if app in ALLOWED_APPS[role]:
        return
    assert not is_allowed(defaults_for(role), app, action)


def test_unknown_role_resolves_to_nothing():
    assert resolve_permissions({"role": "Janitor"}) == {}
    assert get_role_permissions(None) == {}
    assert not is_allowed(resolve_permissions({"role": "Janitor"}), "LMS", "read")


def test_role_accepts_enum_or_string():
    assert get_role_permissions("Employee") == get_role_permissions(Role.EMPLOYEE)


def test_returned_rows_do_not_share_state_with_defaults():
    row = get_role_permissions(Role.ADMIN)
    row["CRM"]["delete"] = False
    del row["LMS"]
    assert DEFAULT_PERMISSIONS[Role.ADMIN]["CRM"]["delete"] is True
    assert "LMS" in DEFAULT_PERMISSIONS[Role.ADMIN]


def test_admin_entries_are_independent_copies():
    row = DEFAULT_PERMISSIONS[Role.ADMIN]
    assert row["CRM"] is not row["LMS"]
