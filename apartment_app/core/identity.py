"""Caller identities.

A request's caller is one of three frozen variants, built once from the user
row by the access gate. Services branch on the variant with ``isinstance``
instead of comparing role strings.
"""

import uuid
from dataclasses import dataclass, field
from typing import Union

from models.enums import UserRole


@dataclass(frozen=True)
class SuperAdminCaller:
    id: uuid.UUID
    name: str
    email: str
    role: UserRole = field(default=UserRole.SUPERADMIN, init=False)


@dataclass(frozen=True)
class ManagerCaller:
    id: uuid.UUID
    name: str
    email: str
    role: UserRole = field(default=UserRole.MANAGER, init=False)


@dataclass(frozen=True)
class TenantCaller:
    id: uuid.UUID
    name: str
    email: str
    role: UserRole = field(default=UserRole.TENANT, init=False)


Caller = Union[SuperAdminCaller, ManagerCaller, TenantCaller]

_VARIANTS = {
    UserRole.SUPERADMIN: SuperAdminCaller,
    UserRole.MANAGER: ManagerCaller,
    UserRole.TENANT: TenantCaller,
}


def caller_from_user(user) -> Caller:
    variant = _VARIANTS.get(user.role)
    if variant is None:
        raise ValueError(f"Unknown role {user.role!r}")
    return variant(id=user.id, name=user.name, email=user.email)
