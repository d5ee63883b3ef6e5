"""
Role checks and the authorization matrix for mutating operations.
"""

import uuid
from datetime import timedelta

import pytest

from core.check_permission import require
from core.date_helper import utcnow
from core.errors import Forbidden
from models.enums import PaymentType, UserRole
from schemas.schema import ApartmentUpdate, AssignManager, PaymentCreate, TenantRef
from services.apartment_service import ApartmentService
from services.audit_service import AuditService
from services.payment_service import PaymentService


@pytest.mark.parametrize(
    "role, allowed",
    [
        (UserRole.SUPERADMIN, {UserRole.SUPERADMIN}),
        (UserRole.MANAGER, {UserRole.MANAGER, UserRole.SUPERADMIN}),
        (UserRole.TENANT, {UserRole.TENANT}),
    ],
)
def test_require_allows_listed_roles(role, allowed):
    assert require(role, allowed) is None


@pytest.mark.parametrize(
    "role, allowed",
    [
        (UserRole.TENANT, {UserRole.SUPERADMIN}),
        (UserRole.MANAGER, {UserRole.SUPERADMIN}),
        (UserRole.SUPERADMIN, {UserRole.MANAGER}),
        (None, {UserRole.SUPERADMIN, UserRole.MANAGER, UserRole.TENANT}),
        (UserRole.SUPERADMIN, set()),
    ],
)
def test_require_denies_everything_else(role, allowed):
    with pytest.raises(Forbidden) as exc:
        require(role, allowed)

    assert exc.value.status_code == 403


async def test_tenant_cannot_mutate_apartments(
    db, dispatcher, apartment, tenant_caller, manager, tenant
):
    service = ApartmentService(db, dispatcher)
    ref = TenantRef(tenant_id=tenant.id)

    for call in (
        service.assign_manager(apartment.id, AssignManager(manager_id=manager.id), tenant_caller),
        service.add_tenant(apartment.id, ref, tenant_caller),
        service.remove_tenant(apartment.id, ref, tenant_caller),
        service.update(apartment.id, ApartmentUpdate(name="Mine now"), tenant_caller),
        service.delete(apartment.id, tenant_caller),
    ):
        with pytest.raises(Forbidden):
            await call

    assert dispatcher.events == []


async def test_manager_cannot_do_superadmin_work(
    db, dispatcher, apartment, manager_caller, other_manager
):
    service = ApartmentService(db, dispatcher)

    with pytest.raises(Forbidden):
        await service.assign_manager(
            apartment.id, AssignManager(manager_id=other_manager.id), manager_caller
        )
    with pytest.raises(Forbidden):
        await service.update(apartment.id, ApartmentUpdate(name="Renamed"), manager_caller)
    with pytest.raises(Forbidden):
        await service.delete(apartment.id, manager_caller)
    with pytest.raises(Forbidden):
        await AuditService(db).assignments(manager_caller)


async def test_superadmin_cannot_manage_tenants_or_payments(
    db, dispatcher, apartment, admin_caller, tenant
):
    with pytest.raises(Forbidden):
        await ApartmentService(db, dispatcher).add_tenant(
            apartment.id, TenantRef(tenant_id=tenant.id), admin_caller
        )
    with pytest.raises(Forbidden):
        await PaymentService(db, dispatcher).mark_paid(uuid.uuid4(), admin_caller)


async def test_tenant_cannot_create_payment(db, dispatcher, apartment, tenant, tenant_caller):
    with pytest.raises(Forbidden):
        await PaymentService(db, dispatcher).create(
            PaymentCreate(
                amount="10.00",
                tenant_id=tenant.id,
                apartment_id=apartment.id,
                due_date=utcnow() + timedelta(days=1),
                payment_type=PaymentType.OTHER,
            ),
            tenant_caller,
        )
