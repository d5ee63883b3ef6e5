from typing import Iterable, Optional

from models.enums import UserRole

from .errors import Forbidden
from .identity import Caller, ManagerCaller, SuperAdminCaller


def require(caller_role: Optional[UserRole], allowed_roles: Iterable[UserRole]) -> None:
    if caller_role is None or caller_role not in set(allowed_roles):
        raise Forbidden("Access Denied.")


class CheckRolePermission:
    async def check_superadmin(self, current_user: Caller) -> SuperAdminCaller:
        require(current_user.role, {UserRole.SUPERADMIN})
        return current_user

    async def check_manager(self, current_user: Caller) -> ManagerCaller:
        require(current_user.role, {UserRole.MANAGER})
        return current_user

    async def check_roles(self, current_user: Caller, *roles: UserRole):
        require(current_user.role, roles)
        return current_user

    async def check_authenticated(self, current_user: Caller):
        require(
            current_user.role,
            {UserRole.SUPERADMIN, UserRole.MANAGER, UserRole.TENANT},
        )
        return current_user
