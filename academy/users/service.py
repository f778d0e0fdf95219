"""User service: account management and the role/permission mutation points."""

from datetime import datetime, timezone
from typing import Any, Optional

from bson import ObjectId

from academy.auth.helpers import hash_password, verify_password
from academy.rbac import Role, can_change_role, get_role_permissions, resolve_permissions
from academy.utils import Logger, serialize_mongo_doc
from academy.utils.exceptions import (
    BadRequestError,
    DuplicateError,
    NotFoundError,
    PermissionDeniedError,
    RoleChangeDenied,
)
from .repository import UserRepository

logger = Logger("users")


def to_public_user(doc: dict) -> dict:
    """Serialize a stored user: drop the hash, expose effective permissions."""
    safe = serialize_mongo_doc(doc)
    safe.pop("password", None)
    safe["id"] = safe.get("_id")
    safe["permissions"] = resolve_permissions(doc)
    return safe


class UserService:
    def __init__(self, repository: UserRepository):
        self.repository = repository

    async def _get_doc(self, user_id: str) -> dict:
        if not ObjectId.is_valid(user_id):
            raise BadRequestError("Invalid user ID")
        user = await self.repository.find_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    async def _update(self, user_id: str, fields: dict) -> dict:
        updated = await self.repository.update(user_id, fields)
        if not updated:
            raise NotFoundError("User not found")
        return updated

    async def create_user(self, data: dict, created_by: Optional[str] = None) -> dict:
        """Create a staff/student account seeded with its role's default permissions."""
        if await self.repository.find_by_email(data["email"]):
            raise DuplicateError("User with this email already exists.")

        role = Role(data["role"])
        must_reset = data.get("must_reset_password")
        now = datetime.now(timezone.utc)

        user_doc = {
            "name": data["name"],
            "email": data["email"],
            "password": hash_password(data["password"]),
            "role": role.value,
            "permissions": get_role_permissions(role),
            "must_reset_password": True if must_reset is None else must_reset,
            "created_by": created_by,
            "created_at": now,
            "updated_at": now,
        }
        user_doc = await self.repository.insert(user_doc)
        logger.info(f"Created {role.value} user {user_doc['_id']} ({data['email']})")
        return to_public_user(user_doc)

    async def get_user(self, user_id: str) -> dict:
        return to_public_user(await self._get_doc(user_id))

    async def list_users(self) -> list[dict]:
        return [to_public_user(u) for u in await self.repository.list_all()]

    async def update_profile(self, user_id: str, data: dict) -> dict:
        """Update name/email. Email must stay unique."""
        await self._get_doc(user_id)
        other = await self.repository.find_by_email(data["email"])
        if other and str(other["_id"]) != user_id:
            raise DuplicateError("User with this email already exists.")

        updated = await self._update(
            user_id, {"name": data["name"], "email": data["email"]}
        )
        return to_public_user(updated)

    async def change_role(
        self, acting_user: dict[str, Any], user_id: str, new_role: Role
    ) -> list[dict]:
        """
        Move a user to ``new_role`` and re-seed their permissions from the
        matrix. Prior overrides are discarded. Returns all users.
        """
        await self._get_doc(user_id)

        # fresh count right before the write
        admin_count = await self.repository.count_by_role(Role.ADMIN.value)
        decision = can_change_role(acting_user, user_id, new_role, admin_count)
        if not decision:
            logger.warning(
                f"Role change refused for {user_id} -> {new_role.value}: {decision.reason}"
            )
            raise RoleChangeDenied(decision.reason)

        await self._update(
            user_id,
            {"role": new_role.value, "permissions": get_role_permissions(new_role)},
        )
        logger.info(
            f"User {acting_user.get('id')} changed role of {user_id} to {new_role.value}"
        )
        return await self.list_users()

    async def change_permissions(
        self, acting_user: dict[str, Any], user_id: str, permissions: dict
    ) -> list[dict]:
        """Replace the stored override wholesale. Returns all users."""
        await self._get_doc(user_id)
        await self._update(user_id, {"permissions": permissions})
        logger.info(
            f"User {acting_user.get('id')} replaced permissions of {user_id} "
            f"({len(permissions)} apps)"
        )
        return await self.list_users()

    async def set_initial_password(self, user_id: str, new_password: str) -> dict:
        """First-login password set; only allowed while a reset is pending."""
        user = await self.repository.find_by_id(user_id)
        if not user or not user.get("must_reset_password"):
            raise PermissionDeniedError("Not authorized or password reset not required.")

        updated = await self._update(
            user_id,
            {"password": hash_password(new_password), "must_reset_password": False},
        )
        return to_public_user(updated)

    async def change_password(
        self, user_id: str, current_password: str, new_password: str
    ) -> dict:
        user = await self._get_doc(user_id)

        if not verify_password(current_password, user.get("password", "")):
            raise BadRequestError("Incorrect current password.")

        updated = await self._update(user_id, {"password": hash_password(new_password)})
        return to_public_user(updated)
