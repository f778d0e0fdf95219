"""Authentication service: student registration and login."""

from datetime import datetime, timezone

from academy.rbac import Role, get_role_permissions
from academy.users.repository import UserRepository
from academy.users.service import to_public_user
from academy.utils import Logger
from academy.utils.exceptions import AuthenticationError, DuplicateError
from .helpers import create_access_token, hash_password, verify_password

logger = Logger("auth")


class AuthService:
    def __init__(self, repository: UserRepository):
        self.repository = repository

    def _issue(self, user: dict) -> dict:
        token = create_access_token(
            data={"sub": str(user["_id"]), "role": user.get("role")}
        )
        return {
            "access_token": token,
            "token_type": "bearer",
            "user": to_public_user(user),
        }

    async def register(self, name: str, email: str, password: str) -> dict:
        """Self sign-up always creates a Student."""
        if await self.repository.find_by_email(email):
            raise DuplicateError("An account with this email already exists.")

        now = datetime.now(timezone.utc)
        user = await self.repository.insert(
            {
                "name": name,
                "email": email,
                "password": hash_password(password),
                "role": Role.STUDENT.value,
                "permissions": get_role_permissions(Role.STUDENT),
                "must_reset_password": False,
                "created_at": now,
                "updated_at": now,
            }
        )
        logger.info(f"Registered student {user['_id']} ({email})")
        return self._issue(user)

    async def authenticate(self, email: str, password: str) -> dict:
        user = await self.repository.find_by_email(email)
        if not user or not verify_password(password, user.get("password", "")):
            logger.warning(f"Failed login for {email}")
            raise AuthenticationError("Invalid credentials.")

        return self._issue(user)
