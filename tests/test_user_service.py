"""
UserService against the in-memory repository.
"""
import pytest
from bson import ObjectId

from academy.auth.helpers import verify_password
from academy.rbac import Role, get_role_permissions, resolve_permissions
from academy.users.service import UserService
from academy.utils.exceptions import (
    BadRequestError,
    DuplicateError,
    NotFoundError,
    PermissionDeniedError,
    RoleChangeDenied,
)
from .conftest import make_user


def _public(user: dict) -> dict:
    return {"id": str(user["_id"]), "role": user["role"]}


async def test_create_user_seeds_role_defaults(repo):
    svc = UserService(repo)
    user = await svc.create_user(
        {"name": "Nadia", "email": "nadia@academy.edu", "role": Role.EMPLOYEE, "password": "temp"}
    )

    stored = await repo.find_by_id(user["id"])
    assert stored["permissions"] == get_role_permissions(Role.EMPLOYEE)
    assert stored["must_reset_password"] is True
    assert verify_password("temp", stored["password"])
    assert "password" not in user
    assert user["permissions"] == get_role_permissions(Role.EMPLOYEE)


async def test_create_user_respects_must_reset_flag(repo):
    user = await UserService(repo).create_user(
        {"name": "Omar", "email": "omar@academy.edu", "role": "Student",
         "password": "temp", "must_reset_password": False}
    )
    assert user["must_reset_password"] is False


async def test_create_user_rejects_duplicate_email(repo, employee):
    with pytest.raises(DuplicateError):
        await UserService(repo).create_user(
            {"name": "Dup", "email": employee["email"], "role": "Employee", "password": "x"}
        )


async def test_get_user_validates_id(repo):
    svc = UserService(repo)
    with pytest.raises(BadRequestError):
        await svc.get_user("not-an-id")
    with pytest.raises(NotFoundError):
        await svc.get_user(str(ObjectId()))


async def test_change_role_reseeds_permissions(repo, admin):
    target = make_user(repo, Role.STUDENT, permissions={"Settings": {"read": True}})
    svc = UserService(repo)

    await svc.change_role(_public(admin), str(target["_id"]), Role.EMPLOYEE)

    stored = await repo.find_by_id(str(target["_id"]))
    assert stored["role"] == "Employee"
    assert resolve_permissions(stored) == get_role_permissions(Role.EMPLOYEE)


async def test_only_admin_cannot_demote_self(repo, admin):
    svc = UserService(repo)
    with pytest.raises(RoleChangeDenied) as exc:
        await svc.change_role(_public(admin), str(admin["_id"]), Role.EMPLOYEE)

    assert exc.value.status_code == 400
    assert "only administrator" in exc.value.detail
    assert (await repo.find_by_id(str(admin["_id"])))["role"] == "Admin"


async def test_admin_can_demote_self_when_another_admin_exists(repo, admin):
    make_user(repo, Role.ADMIN)
    await UserService(repo).change_role(_public(admin), str(admin["_id"]), Role.EMPLOYEE)
    assert (await repo.find_by_id(str(admin["_id"])))["role"] == "Employee"


async def test_change_permissions_replaces_override(repo, admin, employee):
    override = {"Reception": {"read": True}}
    users = await UserService(repo).change_permissions(
        _public(admin), str(employee["_id"]), override
    )

    stored = await repo.find_by_id(str(employee["_id"]))
    assert stored["permissions"] == override
    listed = next(u for u in users if u["id"] == str(employee["_id"]))
    assert listed["permissions"] == override


async def test_update_profile_rejects_email_of_other_user(repo, admin, employee):
    with pytest.raises(DuplicateError):
        await UserService(repo).update_profile(
            str(employee["_id"]), {"name": "Emp", "email": admin["email"]}
        )


async def test_update_profile_keeps_own_email(repo, employee):
    user = await UserService(repo).update_profile(
        str(employee["_id"]), {"name": "Renamed", "email": employee["email"]}
    )
    assert user["name"] == "Renamed"


async def test_set_initial_password_only_when_pending(repo):
    pending = make_user(repo, Role.EMPLOYEE, must_reset_password=True)
    done = make_user(repo, Role.EMPLOYEE)
    svc = UserService(repo)

    user = await svc.set_initial_password(str(pending["_id"]), "newpass1")
    assert user["must_reset_password"] is False
    assert verify_password("newpass1", (await repo.find_by_id(user["id"]))["password"])

    with pytest.raises(PermissionDeniedError):
        await svc.set_initial_password(str(done["_id"]), "newpass1")


async def test_change_password_checks_current(repo, employee):
    svc = UserService(repo)
    with pytest.raises(BadRequestError):
        await svc.change_password(str(employee["_id"]), "wrong", "another1")

    await svc.change_password(str(employee["_id"]), "secret123", "another1")
    assert verify_password("another1", (await repo.find_by_id(str(employee["_id"])))["password"])
