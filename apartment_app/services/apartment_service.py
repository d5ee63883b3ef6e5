import logging
import uuid
from typing import List, Optional

from core.check_permission import CheckRolePermission
from core.errors import InvalidReference, NotFound, NotFoundOrForbidden
from core.notification_dispatch import NotificationDispatcher, notification_dispatcher
from core.unit_of_work import unit_of_work
from core.validators import partial_changes
from models.enums import NotificationType, UserRole
from models.models import Apartment, User
from repos.apartment_repo import ApartmentRepo
from repos.auth_repo import AuthRepo
from schemas.schema import (
    ApartmentCreate,
    ApartmentOut,
    ApartmentUpdate,
    AssignManager,
    MessageOut,
    NotificationEvent,
    TenantRef,
)

logger = logging.getLogger(__name__)

NULLABLE_FIELDS = frozenset({"description"})


class ApartmentService:
    def __init__(self, db, dispatcher: Optional[NotificationDispatcher] = None):
        self.db = db
        self.repo: ApartmentRepo = ApartmentRepo(db)
        self.auth_repo: AuthRepo = AuthRepo(db)
        self.permission: CheckRolePermission = CheckRolePermission()
        self.dispatcher: NotificationDispatcher = dispatcher or notification_dispatcher

    async def _manager_or_invalid(self, manager_id: uuid.UUID) -> User:
        manager = await self.auth_repo.get_with_role(manager_id, UserRole.MANAGER)
        if not manager:
            raise InvalidReference("Invalid manager ID")
        return manager

    async def _tenant_or_invalid(self, tenant_id: uuid.UUID) -> User:
        tenant = await self.auth_repo.get_with_role(tenant_id, UserRole.TENANT)
        if not tenant:
            raise InvalidReference("Invalid tenant ID")
        return tenant

    async def _existing(self, apartment_id: uuid.UUID) -> Apartment:
        apartment = await self.repo.get_by_id(apartment_id)
        if not apartment:
            raise NotFound("Apartment not found")
        return apartment

    async def managed_or_hidden(
        self, apartment_id: uuid.UUID, manager_id: uuid.UUID
    ) -> Apartment:
        # missing and not-yours look the same to the caller
        apartment = await self.repo.get_managed_by(apartment_id, manager_id)
        if not apartment:
            raise NotFoundOrForbidden()
        return apartment

    async def _out(self, apartment_id: uuid.UUID) -> ApartmentOut:
        apartment = await self.repo.get_with_relations(apartment_id)
        return ApartmentOut.model_validate(apartment)

    async def create(self, payload: ApartmentCreate, current_user) -> ApartmentOut:
        await self.permission.check_superadmin(current_user)

        manager = None
        if payload.manager_id is not None:
            manager = await self._manager_or_invalid(payload.manager_id)

        apartment = Apartment(
            **payload.model_dump(exclude={"manager_id"}),
            owner_id=current_user.id,
            manager_id=payload.manager_id,
        )
        async with unit_of_work(self.db):
            await self.repo.add(apartment)
            if manager:
                await self.repo.add_to_managed_set(manager.id, apartment.id)

        logger.info(
            "Apartment %s created by %s (manager=%s)",
            apartment.id,
            current_user.id,
            payload.manager_id,
        )

        if manager:
            message = (
                f"New apartment '{apartment.name}' has been created and assigned "
                f"to manager {manager.name}"
            )
        else:
            message = (
                f"New apartment '{apartment.name}' has been created without a "
                "manager assigned"
            )
        await self.dispatcher.dispatch(
            NotificationEvent(
                type=NotificationType.APARTMENT_CREATED,
                message=message,
                related_user_id=payload.manager_id,
                related_apartment_id=apartment.id,
            )
        )
        return await self._out(apartment.id)

    async def assign_manager(
        self, apartment_id: uuid.UUID, payload: AssignManager, current_user
    ) -> ApartmentOut:
        await self.permission.check_superadmin(current_user)
        apartment = await self._existing(apartment_id)
        manager = await self._manager_or_invalid(payload.manager_id)

        async with unit_of_work(self.db):
            await self.repo.set_manager(apartment.id, manager.id)
            await self.repo.add_to_managed_set(manager.id, apartment.id)
            await self.repo.repoint_tenant_managers(apartment.id, manager.id)

        logger.info("Apartment %s assigned to manager %s", apartment.id, manager.id)
        await self.dispatcher.dispatch(
            NotificationEvent(
                type=NotificationType.APARTMENT_UPDATED,
                message=(
                    f"Apartment '{apartment.name}' has been assigned to manager "
                    f"{manager.name}"
                ),
                related_user_id=manager.id,
                related_apartment_id=apartment.id,
            )
        )
        return await self._out(apartment.id)

    async def add_tenant(
        self, apartment_id: uuid.UUID, payload: TenantRef, current_user
    ) -> ApartmentOut:
        await self.permission.check_manager(current_user)
        apartment = await self.managed_or_hidden(apartment_id, current_user.id)
        tenant = await self._tenant_or_invalid(payload.tenant_id)

        async with unit_of_work(self.db):
            await self.repo.place_tenant(apartment.id, tenant.id, current_user.id)

        logger.info("Tenant %s added to apartment %s", tenant.id, apartment.id)
        await self.dispatcher.dispatch(
            NotificationEvent(
                type=NotificationType.TENANT_ADDED,
                message=(
                    f"Tenant {tenant.name} has been added to apartment "
                    f"'{apartment.name}'"
                ),
                related_user_id=tenant.id,
                related_apartment_id=apartment.id,
            )
        )
        return await self._out(apartment.id)

    async def remove_tenant(
        self, apartment_id: uuid.UUID, payload: TenantRef, current_user
    ) -> ApartmentOut:
        await self.permission.check_manager(current_user)
        apartment = await self.managed_or_hidden(apartment_id, current_user.id)
        tenant = await self.auth_repo.by_id(payload.tenant_id)
        if not tenant:
            raise InvalidReference("Invalid tenant ID")

        async with unit_of_work(self.db):
            await self.repo.remove_tenant_member(apartment.id, tenant.id)
            await self.repo.unassign_tenant(tenant.id, apartment.id)

        logger.info("Tenant %s removed from apartment %s", tenant.id, apartment.id)
        await self.dispatcher.dispatch(
            NotificationEvent(
                type=NotificationType.TENANT_REMOVED,
                message=(
                    f"Tenant {tenant.name} has been removed from apartment "
                    f"'{apartment.name}'"
                ),
                related_user_id=tenant.id,
                related_apartment_id=apartment.id,
            )
        )
        return await self._out(apartment.id)

    async def update(
        self, apartment_id: uuid.UUID, payload: ApartmentUpdate, current_user
    ) -> ApartmentOut:
        await self.permission.check_superadmin(current_user)
        apartment = await self._existing(apartment_id)

        changes = partial_changes(payload, nullable=NULLABLE_FIELDS)
        async with unit_of_work(self.db):
            for field, value in changes.items():
                setattr(apartment, field, value)

        logger.info("Apartment %s updated: %s", apartment.id, sorted(changes))
        await self.dispatcher.dispatch(
            NotificationEvent(
                type=NotificationType.APARTMENT_UPDATED,
                message=f"Apartment '{apartment.name}' has been updated",
                related_apartment_id=apartment.id,
            )
        )
        return await self._out(apartment.id)

    async def delete(self, apartment_id: uuid.UUID, current_user) -> MessageOut:
        await self.permission.check_superadmin(current_user)
        apartment = await self._existing(apartment_id)
        name = apartment.name

        async with unit_of_work(self.db):
            await self.repo.delete_cascade(apartment_id)

        logger.info("Apartment %s deleted by %s", apartment_id, current_user.id)
        await self.dispatcher.dispatch(
            NotificationEvent(
                type=NotificationType.APARTMENT_UPDATED,
                message=f"Apartment '{name}' has been deleted",
                related_apartment_id=apartment_id,
            )
        )
        return MessageOut(msg="Apartment removed")

    async def list_all(self) -> List[ApartmentOut]:
        apartments = await self.repo.list_all()
        return [ApartmentOut.model_validate(a) for a in apartments]

    async def get(self, apartment_id: uuid.UUID) -> ApartmentOut:
        apartment = await self.repo.get_with_relations(apartment_id)
        if not apartment:
            raise NotFound("Apartment not found")
        return ApartmentOut.model_validate(apartment)

    async def list_managed(self, current_user) -> List[ApartmentOut]:
        await self.permission.check_manager(current_user)
        apartments = await self.repo.list_managed(current_user.id)
        return [ApartmentOut.model_validate(a) for a in apartments]
