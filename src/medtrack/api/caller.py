"""Caller identity as asserted by the upstream identity service.

The identity service authenticates the user and forwards ``X-User-Id`` and
``X-User-Role``. The engine trusts both and only enforces ownership and
role rules on top of them.
"""

from dataclasses import dataclass

from fastapi import Header, HTTPException

from medtrack.errors import Forbidden
from medtrack.shared.roles import Role, is_staff
from medtrack.utils.logging import bind_caller


@dataclass(frozen=True)
class Caller:
    user_id: str
    role: str
    pharmacy_id: str | None = None

    @property
    def is_staff(self) -> bool:
        return is_staff(self.role)

    def require(self, *roles: Role) -> None:
        if self.role not in {role.value for role in roles}:
            raise Forbidden(f"Role '{self.role}' is not allowed to perform this action")

    def require_self_or_staff(self, user_id: str) -> None:
        if not self.is_staff and self.user_id != str(user_id):
            raise Forbidden("You can only access your own records")


async def get_caller(
    x_user_id: str = Header(default=""),
    x_user_role: str = Header(default=""),
    x_pharmacy_id: str | None = Header(default=None),
) -> Caller:
    if not x_user_id or not x_user_role:
        raise HTTPException(status_code=401, detail="Missing caller identity")
    if x_user_role not in {role.value for role in Role}:
        raise HTTPException(status_code=401, detail=f"Unknown role '{x_user_role}'")
    bind_caller(x_user_id, x_user_role)
    return Caller(user_id=x_user_id, role=x_user_role, pharmacy_id=x_pharmacy_id)
