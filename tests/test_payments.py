"""
Payment ledger: authorization, overdue derivation, scoped reads and stats.
"""

import uuid
from datetime import timedelta
from decimal import Decimal

import pytest
from sqlalchemy import update

from core.date_helper import utcnow
from core.errors import Forbidden, InvalidReference, NotFound, NotFoundOrForbidden, ValidationFailed
from models.enums import NotificationType, PaymentStatus, PaymentType
from models.event_listener import derive_overdue
from models.models import Payment
from schemas.schema import PaymentCreate, PaymentUpdate, TenantRef
from services.apartment_service import ApartmentService
from services.payment_service import PaymentService


def payment_payload(
    tenant_id, apartment_id, days=10, amount="1500.00", payment_type=PaymentType.RENT
):
    return PaymentCreate(
        amount=amount,
        tenant_id=tenant_id,
        apartment_id=apartment_id,
        due_date=utcnow() + timedelta(days=days),
        payment_type=payment_type,
    )


@pytest.fixture
async def placed_tenant(db, dispatcher, apartment, manager_caller, tenant):
    await ApartmentService(db, dispatcher).add_tenant(
        apartment.id, TenantRef(tenant_id=tenant.id), manager_caller
    )
    dispatcher.events.clear()
    return tenant


@pytest.fixture
async def payment(db, dispatcher, apartment, manager_caller, placed_tenant):
    created = await PaymentService(db, dispatcher).create(
        payment_payload(placed_tenant.id, apartment.id), manager_caller
    )
    dispatcher.events.clear()
    return created


def test_derive_overdue_only_flips_stale_pending():
    now = utcnow()
    past = now - timedelta(days=1)
    future = now + timedelta(days=1)

    assert derive_overdue(PaymentStatus.PENDING, past, now) == PaymentStatus.OVERDUE
    assert derive_overdue(PaymentStatus.PENDING, future, now) == PaymentStatus.PENDING
    assert derive_overdue(PaymentStatus.PAID, past, now) == PaymentStatus.PAID
    assert derive_overdue(PaymentStatus.CANCELLED, past, now) == PaymentStatus.CANCELLED
    assert derive_overdue(PaymentStatus.OVERDUE, future, now) == PaymentStatus.OVERDUE


async def test_create_starts_pending(db, dispatcher, payment, manager_caller, placed_tenant):
    assert payment.status == PaymentStatus.PENDING
    assert payment.created_by_id == manager_caller.id
    assert payment.updated_by_id is None
    assert payment.payment_date is None
    assert payment.tenant.id == placed_tenant.id
    assert payment.apartment.name == "Oak Hall 2B"


async def test_create_with_past_due_date_is_overdue_immediately(
    db, dispatcher, apartment, manager_caller, placed_tenant
):
    created = await PaymentService(db, dispatcher).create(
        payment_payload(placed_tenant.id, apartment.id, days=-3), manager_caller
    )

    assert created.status == PaymentStatus.OVERDUE
    assert dispatcher.types() == [NotificationType.PAYMENT_CREATED]


async def test_create_rejects_non_tenant(db, dispatcher, apartment, manager, manager_caller):
    with pytest.raises(InvalidReference):
        await PaymentService(db, dispatcher).create(
            payment_payload(manager.id, apartment.id), manager_caller
        )


async def test_create_on_unmanaged_apartment_is_forbidden(
    db, dispatcher, apartment, other_manager_caller, tenant
):
    with pytest.raises(NotFoundOrForbidden) as exc:
        await PaymentService(db, dispatcher).create(
            payment_payload(tenant.id, apartment.id), other_manager_caller
        )

    assert exc.value.status_code == 403


async def test_superadmin_cannot_record_payments(
    db, dispatcher, apartment, admin_caller, tenant
):
    with pytest.raises(Forbidden):
        await PaymentService(db, dispatcher).create(
            payment_payload(tenant.id, apartment.id), admin_caller
        )


async def test_mark_paid_stamps_payment_date_once(db, dispatcher, payment, manager_caller):
    service = PaymentService(db, dispatcher)

    paid = await service.mark_paid(payment.id, manager_caller)
    again = await service.mark_paid(payment.id, manager_caller)

    assert paid.status == PaymentStatus.PAID
    assert paid.updated_by_id == manager_caller.id
    assert paid.payment_date is not None
    assert again.payment_date == paid.payment_date
    assert dispatcher.types() == [NotificationType.PAYMENT_PAID] * 2


async def test_mark_paid_errors(db, dispatcher, payment, other_manager_caller, manager_caller):
    service = PaymentService(db, dispatcher)

    with pytest.raises(NotFound):
        await service.mark_paid(uuid.uuid4(), manager_caller)
    with pytest.raises(Forbidden) as exc:
        await service.mark_paid(payment.id, other_manager_caller)

    assert exc.value.detail == "You do not have permission to update this payment"


async def test_update_merges_fields(db, dispatcher, payment, manager_caller):
    updated = await PaymentService(db, dispatcher).update(
        payment.id,
        PaymentUpdate(
            amount="1600.00",
            payment_type=PaymentType.MAINTENANCE,
            description="Boiler repair",
        ),
        manager_caller,
    )

    assert updated.amount == Decimal("1600")
    assert updated.payment_type == PaymentType.MAINTENANCE
    assert updated.description == "Boiler repair"
    assert updated.updated_by_id == manager_caller.id
    assert updated.status == PaymentStatus.PENDING
    assert dispatcher.types() == [NotificationType.PAYMENT_UPDATED]


async def test_update_to_paid_stamps_payment_date(db, dispatcher, payment, manager_caller):
    updated = await PaymentService(db, dispatcher).update(
        payment.id, PaymentUpdate(status=PaymentStatus.PAID), manager_caller
    )

    assert updated.status == PaymentStatus.PAID
    assert updated.payment_date is not None


async def test_moving_due_date_into_past_flips_to_overdue(
    db, dispatcher, payment, manager_caller
):
    updated = await PaymentService(db, dispatcher).update(
        payment.id,
        PaymentUpdate(due_date=utcnow() - timedelta(days=2)),
        manager_caller,
    )

    assert updated.status == PaymentStatus.OVERDUE


async def test_paid_payment_never_becomes_overdue(db, dispatcher, payment, manager_caller):
    service = PaymentService(db, dispatcher)
    await service.mark_paid(payment.id, manager_caller)

    updated = await service.update(
        payment.id,
        PaymentUpdate(due_date=utcnow() - timedelta(days=2)),
        manager_caller,
    )

    assert updated.status == PaymentStatus.PAID


async def test_update_rejects_null_amount(db, dispatcher, payment, manager_caller):
    with pytest.raises(ValidationFailed):
        await PaymentService(db, dispatcher).update(
            payment.id, PaymentUpdate(amount=None), manager_caller
        )


async def test_update_by_other_manager_is_forbidden(
    db, dispatcher, payment, other_manager_caller
):
    with pytest.raises(Forbidden):
        await PaymentService(db, dispatcher).update(
            payment.id, PaymentUpdate(description="nope"), other_manager_caller
        )


async def test_lists_sorted_by_due_date_desc(
    db, dispatcher, apartment, manager_caller, placed_tenant, admin_caller
):
    service = PaymentService(db, dispatcher)
    first = await service.create(
        payment_payload(placed_tenant.id, apartment.id, days=5), manager_caller
    )
    later = await service.create(
        payment_payload(placed_tenant.id, apartment.id, days=35), manager_caller
    )

    by_apartment = await service.list_by_apartment(apartment.id, manager_caller)
    by_tenant = await service.list_by_tenant(placed_tenant.id, admin_caller)

    assert [p.id for p in by_apartment] == [later.id, first.id]
    assert [p.id for p in by_tenant] == [later.id, first.id]


async def test_manager_reads_are_scoped(
    db, dispatcher, payment, apartment, placed_tenant, other_manager_caller, second_tenant, manager_caller
):
    service = PaymentService(db, dispatcher)

    with pytest.raises(Forbidden):
        await service.list_by_apartment(apartment.id, other_manager_caller)
    with pytest.raises(Forbidden):
        await service.list_by_tenant(placed_tenant.id, other_manager_caller)
    with pytest.raises(Forbidden):
        await service.list_by_tenant(second_tenant.id, manager_caller)


async def test_tenant_cannot_read_payment_lists(db, dispatcher, payment, apartment, tenant_caller):
    service = PaymentService(db, dispatcher)

    with pytest.raises(Forbidden):
        await service.list_by_apartment(apartment.id, tenant_caller)
    with pytest.raises(Forbidden):
        await service.list_by_tenant(tenant_caller.id, tenant_caller)


async def test_list_all_is_superadmin_only(
    db, dispatcher, payment, admin_caller, manager_caller
):
    service = PaymentService(db, dispatcher)

    assert [p.id for p in await service.list_all(admin_caller)] == [payment.id]
    with pytest.raises(Forbidden):
        await service.list_all(manager_caller)


async def test_stats_sums_by_status(
    db, dispatcher, apartment, manager_caller, placed_tenant, admin_caller
):
    service = PaymentService(db, dispatcher)
    paid = await service.create(
        payment_payload(placed_tenant.id, apartment.id, amount="1000.00"), manager_caller
    )
    await service.mark_paid(paid.id, manager_caller)
    await service.create(
        payment_payload(placed_tenant.id, apartment.id, amount="250.50"), manager_caller
    )
    await service.create(
        payment_payload(placed_tenant.id, apartment.id, days=-1, amount="99.50"),
        manager_caller,
    )
    cancelled = await service.create(
        payment_payload(placed_tenant.id, apartment.id, amount="5000.00"), manager_caller
    )
    await service.update(
        cancelled.id, PaymentUpdate(status=PaymentStatus.CANCELLED), manager_caller
    )

    stats = await service.stats(admin_caller)

    assert stats.total_paid == Decimal("1000")
    assert stats.total_pending == Decimal("250.50")
    assert stats.total_overdue == Decimal("99.50")
    assert len(stats.recent_payments) == 4
    assert stats.recent_payments[0].id == cancelled.id


async def test_stats_keeps_five_most_recent(
    db, dispatcher, apartment, manager_caller, placed_tenant, admin_caller
):
    service = PaymentService(db, dispatcher)
    for days in range(1, 8):
        await service.create(
            payment_payload(placed_tenant.id, apartment.id, days=days), manager_caller
        )

    stats = await service.stats(admin_caller)

    assert len(stats.recent_payments) == 5
    assert stats.total_pending == Decimal("10500")


async def test_stats_on_empty_ledger(db, dispatcher, admin_caller):
    stats = await PaymentService(db, dispatcher).stats(admin_caller)

    assert stats.total_paid == stats.total_pending == stats.total_overdue == 0
    assert stats.recent_payments == []


async def test_sweep_flips_stale_pending_payments(
    db, dispatcher, payment, admin_caller
):
    # simulate time passing: move the due date back without going through the ORM
    await db.execute(
        update(Payment)
        .where(Payment.id == payment.id)
        .values(due_date=utcnow() - timedelta(hours=1))
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    service = PaymentService(db, dispatcher)

    flipped = await service.sweep_overdue()

    assert flipped == 1
    assert dispatcher.types() == [NotificationType.PAYMENT_OVERDUE]
    assert dispatcher.events[0].related_payment_id == payment.id
    listed = await service.list_all(admin_caller)
    assert listed[0].status == PaymentStatus.OVERDUE
    assert await service.sweep_overdue() == 0
