"""
Privileged user creation and listings.
"""

import uuid

import pytest

from core.errors import Conflict, Forbidden, NotFoundOrForbidden
from models.enums import NotificationType, UserRole
from repos.auth_repo import AuthRepo
from schemas.schema import ManagerCreate, TenantCreate
from services.apartment_service import ApartmentService
from services.user_service import UserService


def tenant_data(**extra):
    values = {"name": "Nora New", "email": "nora@oakhall.io", "password": "secret123"}
    values.update(extra)
    return TenantCreate(**values)


async def test_superadmin_creates_manager(db, dispatcher, admin_caller):
    created = await UserService(db, dispatcher).create_manager(
        ManagerCreate(name="Max Manager", email="Max@OakHall.io", password="secret123"),
        admin_caller,
    )

    assert created.role == UserRole.MANAGER
    assert created.email == "max@oakhall.io"
    assert dispatcher.types() == [NotificationType.USER_CREATED]


async def test_manager_cannot_create_manager(db, dispatcher, manager_caller):
    with pytest.raises(Forbidden):
        await UserService(db, dispatcher).create_manager(
            ManagerCreate(name="Max Manager", email="max@oakhall.io", password="secret123"),
            manager_caller,
        )


async def test_duplicate_manager_email(db, dispatcher, admin_caller, tenant):
    with pytest.raises(Conflict):
        await UserService(db, dispatcher).create_manager(
            ManagerCreate(name="Tara Again", email="tara@oakhall.io", password="secret123"),
            admin_caller,
        )


async def test_manager_creates_tenant_assigned_to_self(db, dispatcher, manager, manager_caller):
    created = await UserService(db, dispatcher).create_tenant(tenant_data(), manager_caller)

    assert created.role == UserRole.TENANT
    assert created.assigned_manager_id == manager.id
    assert created.assigned_apartment is None
    assert dispatcher.types() == [NotificationType.USER_CREATED]


async def test_create_tenant_into_managed_apartment(
    db, dispatcher, apartment, manager, manager_caller
):
    created = await UserService(db, dispatcher).create_tenant(
        tenant_data(apartment_id=apartment.id), manager_caller
    )

    assert created.assigned_apartment.id == apartment.id
    assert created.assigned_manager_id == manager.id
    assert (await ApartmentService(db, dispatcher).get(apartment.id)).tenant_ids == [created.id]
    assert dispatcher.types() == [NotificationType.TENANT_ADDED]


async def test_create_tenant_into_foreign_apartment_creates_nothing(
    db, dispatcher, apartment, other_manager_caller
):
    with pytest.raises(NotFoundOrForbidden):
        await UserService(db, dispatcher).create_tenant(
            tenant_data(apartment_id=apartment.id), other_manager_caller
        )

    assert await AuthRepo(db).get_by_email("nora@oakhall.io") is None
    assert dispatcher.events == []


async def test_create_tenant_into_missing_apartment(db, dispatcher, manager_caller):
    with pytest.raises(NotFoundOrForbidden):
        await UserService(db, dispatcher).create_tenant(
            tenant_data(apartment_id=uuid.uuid4()), manager_caller
        )


async def test_listings(
    db, dispatcher, admin_caller, manager_caller, other_manager_caller, manager, other_manager, tenant, apartment
):
    service = UserService(db, dispatcher)
    mine = await service.create_tenant(tenant_data(), manager_caller)

    managers = await service.list_managers(admin_caller)
    everyone = await service.list_all_tenants(admin_caller)

    assert [m.id for m in managers] == [manager.id, other_manager.id]
    assert [a.id for a in managers[0].managed_apartments] == [apartment.id]
    assert {t.id for t in everyone} == {mine.id, tenant.id}
    assert [t.id for t in await service.list_my_tenants(manager_caller)] == [mine.id]
    assert await service.list_my_tenants(other_manager_caller) == []


async def test_listing_permissions(db, dispatcher, manager_caller, admin_caller, tenant_caller):
    service = UserService(db, dispatcher)

    with pytest.raises(Forbidden):
        await service.list_managers(manager_caller)
    with pytest.raises(Forbidden):
        await service.list_all_tenants(tenant_caller)
    with pytest.raises(Forbidden):
        await service.list_my_tenants(admin_caller)
