import logging
import uuid
from typing import List, Optional

from core.check_permission import CheckRolePermission
from core.date_helper import utcnow
from core.errors import Forbidden, InvalidReference, NotFound, NotFoundOrForbidden
from core.identity import ManagerCaller
from core.notification_dispatch import NotificationDispatcher, notification_dispatcher
from core.validators import partial_changes
from models.enums import NotificationType, PaymentStatus, UserRole
from models.models import Payment
from repos.apartment_repo import ApartmentRepo
from repos.auth_repo import AuthRepo
from repos.payment_repo import PaymentRepo
from schemas.schema import (
    NotificationEvent,
    PaymentCreate,
    PaymentOut,
    PaymentStats,
    PaymentUpdate,
)

logger = logging.getLogger(__name__)

NULLABLE_FIELDS = frozenset({"description"})


class PaymentService:
    def __init__(self, db, dispatcher: Optional[NotificationDispatcher] = None):
        self.repo: PaymentRepo = PaymentRepo(db)
        self.apartment_repo: ApartmentRepo = ApartmentRepo(db)
        self.auth_repo: AuthRepo = AuthRepo(db)
        self.permission: CheckRolePermission = CheckRolePermission()
        self.dispatcher: NotificationDispatcher = dispatcher or notification_dispatcher

    async def _out(self, payment_id: uuid.UUID) -> PaymentOut:
        payment = await self.repo.get_with_relations(payment_id)
        return PaymentOut.model_validate(payment)

    async def _mutable_payment(self, payment_id: uuid.UUID, manager_id: uuid.UUID) -> Payment:
        payment = await self.repo.get_by_id(payment_id)
        if not payment:
            raise NotFound("Payment record not found")

        apartment = None
        if payment.apartment_id is not None:
            apartment = await self.apartment_repo.get_managed_by(
                payment.apartment_id, manager_id
            )
        if not apartment:
            raise Forbidden("You do not have permission to update this payment")
        return payment

    async def _notify(self, event_type: NotificationType, message: str, payment: Payment):
        await self.dispatcher.dispatch(
            NotificationEvent(
                type=event_type,
                message=message,
                related_user_id=payment.tenant_id,
                related_apartment_id=payment.apartment_id,
                related_payment_id=payment.id,
            )
        )

    async def create(self, payload: PaymentCreate, current_user) -> PaymentOut:
        await self.permission.check_manager(current_user)

        tenant = await self.auth_repo.get_with_role(payload.tenant_id, UserRole.TENANT)
        if not tenant:
            raise InvalidReference("Invalid tenant ID")

        apartment = await self.apartment_repo.get_managed_by(
            payload.apartment_id, current_user.id
        )
        if not apartment:
            raise NotFoundOrForbidden()

        payment = Payment(
            amount=payload.amount,
            tenant_id=tenant.id,
            apartment_id=apartment.id,
            due_date=payload.due_date,
            payment_type=payload.payment_type,
            description=payload.description,
            status=PaymentStatus.PENDING,
            created_by_id=current_user.id,
        )
        await self.repo.create(payment)

        logger.info(
            "Payment %s created for tenant %s in apartment %s (status=%s)",
            payment.id,
            tenant.id,
            apartment.id,
            payment.status.value,
        )
        await self._notify(
            NotificationType.PAYMENT_CREATED,
            f"New payment of ${payment.amount} has been created for tenant {tenant.name}",
            payment,
        )
        return await self._out(payment.id)

    async def mark_paid(self, payment_id: uuid.UUID, current_user) -> PaymentOut:
        await self.permission.check_manager(current_user)
        payment = await self._mutable_payment(payment_id, current_user.id)

        payment.status = PaymentStatus.PAID
        if payment.payment_date is None:
            payment.payment_date = utcnow()
        payment.updated_by_id = current_user.id
        await self.repo.save(payment)

        logger.info("Payment %s marked paid by %s", payment.id, current_user.id)
        await self._notify(
            NotificationType.PAYMENT_PAID,
            f"Payment of ${payment.amount} has been marked as paid",
            payment,
        )
        return await self._out(payment.id)

    async def update(
        self, payment_id: uuid.UUID, payload: PaymentUpdate, current_user
    ) -> PaymentOut:
        await self.permission.check_manager(current_user)
        payment = await self._mutable_payment(payment_id, current_user.id)

        changes = partial_changes(payload, nullable=NULLABLE_FIELDS)
        for field, value in changes.items():
            setattr(payment, field, value)
        if payment.status == PaymentStatus.PAID and payment.payment_date is None:
            payment.payment_date = utcnow()
        payment.updated_by_id = current_user.id
        await self.repo.save(payment)

        logger.info("Payment %s updated: %s", payment.id, sorted(changes))
        await self._notify(
            NotificationType.PAYMENT_UPDATED,
            "Payment record has been updated",
            payment,
        )
        return await self._out(payment.id)

    async def list_by_apartment(
        self, apartment_id: uuid.UUID, current_user
    ) -> List[PaymentOut]:
        await self.permission.check_roles(
            current_user, UserRole.MANAGER, UserRole.SUPERADMIN
        )
        if isinstance(current_user, ManagerCaller):
            apartment = await self.apartment_repo.get_managed_by(
                apartment_id, current_user.id
            )
            if not apartment:
                raise Forbidden(
                    "Apartment not found or you do not have permission to view "
                    "its payments"
                )
        payments = await self.repo.list_by_apartment(apartment_id)
        return [PaymentOut.model_validate(p) for p in payments]

    async def list_by_tenant(
        self, tenant_id: uuid.UUID, current_user
    ) -> List[PaymentOut]:
        await self.permission.check_roles(
            current_user, UserRole.MANAGER, UserRole.SUPERADMIN
        )
        if isinstance(current_user, ManagerCaller):
            tenant = await self.auth_repo.get_tenant_of_manager(
                tenant_id, current_user.id
            )
            if not tenant:
                raise Forbidden(
                    "Tenant not found or you do not have permission to view "
                    "their payments"
                )
        payments = await self.repo.list_by_tenant(tenant_id)
        return [PaymentOut.model_validate(p) for p in payments]

    async def list_all(self, current_user) -> List[PaymentOut]:
        await self.permission.check_superadmin(current_user)
        payments = await self.repo.list_all()
        return [PaymentOut.model_validate(p) for p in payments]

    async def stats(self, current_user) -> PaymentStats:
        await self.permission.check_superadmin(current_user)
        totals = await self.repo.totals_by_status()
        recent = await self.repo.recent(limit=5)
        return PaymentStats(
            total_paid=totals.get(PaymentStatus.PAID, 0),
            total_pending=totals.get(PaymentStatus.PENDING, 0),
            total_overdue=totals.get(PaymentStatus.OVERDUE, 0),
            recent_payments=[PaymentOut.model_validate(p) for p in recent],
        )

    async def sweep_overdue(self) -> int:
        """Flip PENDING payments whose due date has passed. Returns how many."""
        stale = await self.repo.pending_past_due(utcnow())
        if not stale:
            return 0

        for payment in stale:
            payment.status = PaymentStatus.OVERDUE
        await self.repo.commit()

        logger.info("Overdue sweep flipped %d payments", len(stale))
        for payment in stale:
            await self._notify(
                NotificationType.PAYMENT_OVERDUE,
                f"Payment of ${payment.amount} is overdue",
                payment,
            )
        return len(stale)
