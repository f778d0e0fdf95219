from pydantic import BaseModel, Field, EmailStr, StrictBool
from typing import Optional

from academy.rbac import AppName, Role


class PermissionSetSchema(BaseModel):
    read: Optional[StrictBool] = None
    create: Optional[StrictBool] = None
    update: Optional[StrictBool] = None
    delete: Optional[StrictBool] = None


class CreateUserRequest(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    role: Role
    password: str = Field(..., min_length=1)  # temporary password
    must_reset_password: Optional[bool] = None


class UpdateUserRequest(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr


class UpdateRoleRequest(BaseModel):
    role: Role


class UpdatePermissionsRequest(BaseModel):
    """Replaces the stored override wholesale. Keys must be known apps."""
    permissions: dict[AppName, PermissionSetSchema]

    def to_permission_map(self) -> dict[str, dict[str, bool]]:
        return {
            app.value: perms.model_dump(exclude_none=True)
            for app, perms in self.permissions.items()
        }


class SetInitialPasswordRequest(BaseModel):
    new_password: str = Field(..., min_length=6)


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6)
