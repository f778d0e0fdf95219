"""Guard rails on role changes."""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional

from .roles import Role, parse_role

LAST_ADMIN_REASON = "Cannot demote the only administrator."


@dataclass(frozen=True)
class RoleChangeDecision:
    allowed: bool
    reason: Optional[str] = None

    def __bool__(self) -> bool:
        return self.allowed


def can_change_role(
    acting_user: Mapping[str, Any],
    target_user_id: str,
    new_role: Role | str,
    current_admin_count: int,
) -> RoleChangeDecision:
    """
    Decide whether ``acting_user`` may move ``target_user_id`` to ``new_role``.

    The only rule here is that an admin cannot demote themselves while they
    are the last admin. Whether the acting user is an admin at all is the
    gate's job (``require_role``), and ``current_admin_count`` should come
    from a fresh read right before the write.
    """
    acting_id = str(acting_user.get("id") or acting_user.get("_id") or acting_user.get("sub") or "")
    is_self = acting_id != "" and acting_id == str(target_user_id)
    if is_self and parse_role(new_role) is not Role.ADMIN and current_admin_count <= 1:
        return RoleChangeDecision(False, LAST_ADMIN_REASON)
    return RoleChangeDecision(True)
