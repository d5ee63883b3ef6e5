import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError

from core.check_permission import CheckRolePermission
from core.errors import Conflict
from core.notification_dispatch import NotificationDispatcher, notification_dispatcher
from core.unit_of_work import unit_of_work
from models.enums import NotificationType, UserRole
from models.models import User
from repos.apartment_repo import ApartmentRepo
from repos.auth_repo import AuthRepo
from schemas.schema import (
    ManagerCreate,
    ManagerOut,
    NotificationEvent,
    TenantCreate,
    TenantOut,
    UserOut,
)
from services.apartment_service import ApartmentService

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, db, dispatcher: Optional[NotificationDispatcher] = None):
        self.db = db
        self.repo: AuthRepo = AuthRepo(db)
        self.apartment_repo: ApartmentRepo = ApartmentRepo(db)
        self.apartments: ApartmentService = ApartmentService(db, dispatcher)
        self.permission: CheckRolePermission = CheckRolePermission()
        self.dispatcher: NotificationDispatcher = dispatcher or notification_dispatcher

    async def _ensure_email_free(self, email: str):
        if await self.repo.get_by_email(email=email):
            raise Conflict("User already exists")

    async def create_manager(self, data: ManagerCreate, current_user) -> UserOut:
        await self.permission.check_superadmin(current_user)
        await self._ensure_email_free(data.email)

        user = User(name=data.name, email=data.email, role=UserRole.MANAGER)
        user.set_password(raw_password=data.password)
        try:
            await self.repo.create(user)
        except IntegrityError:
            raise Conflict("User already exists")

        logger.info("Manager %s created by %s", user.id, current_user.id)
        await self.dispatcher.dispatch(
            NotificationEvent(
                type=NotificationType.USER_CREATED,
                message=f"New manager {user.name} ({user.email}) has been created",
                related_user_id=user.id,
            )
        )
        return UserOut.model_validate(user)

    async def create_tenant(self, data: TenantCreate, current_user) -> TenantOut:
        await self.permission.check_manager(current_user)
        await self._ensure_email_free(data.email)

        apartment = None
        if data.apartment_id is not None:
            apartment = await self.apartments.managed_or_hidden(
                data.apartment_id, current_user.id
            )

        user = User(
            name=data.name,
            email=data.email,
            role=UserRole.TENANT,
            assigned_manager_id=current_user.id,
        )
        user.set_password(raw_password=data.password)
        try:
            async with unit_of_work(self.db):
                await self.repo.add(user)
                if apartment:
                    await self.apartment_repo.place_tenant(
                        apartment.id, user.id, current_user.id
                    )
        except IntegrityError:
            raise Conflict("User already exists")

        logger.info(
            "Tenant %s created by manager %s (apartment=%s)",
            user.id,
            current_user.id,
            data.apartment_id,
        )
        if apartment:
            event = NotificationEvent(
                type=NotificationType.TENANT_ADDED,
                message=(
                    f"New tenant {user.name} ({user.email}) has been added to "
                    f"apartment '{apartment.name}'"
                ),
                related_user_id=user.id,
                related_apartment_id=apartment.id,
            )
        else:
            event = NotificationEvent(
                type=NotificationType.USER_CREATED,
                message=f"New tenant {user.name} ({user.email}) has been created",
                related_user_id=user.id,
            )
        await self.dispatcher.dispatch(event)

        created = await self.repo.get_with_relations(user.id)
        return TenantOut.model_validate(created)

    async def list_managers(self, current_user) -> List[ManagerOut]:
        await self.permission.check_superadmin(current_user)
        managers = await self.repo.list_by_role(UserRole.MANAGER)
        return [ManagerOut.model_validate(m) for m in managers]

    async def list_all_tenants(self, current_user) -> List[TenantOut]:
        await self.permission.check_superadmin(current_user)
        tenants = await self.repo.list_by_role(UserRole.TENANT)
        return [TenantOut.model_validate(t) for t in tenants]

    async def list_my_tenants(self, current_user) -> List[TenantOut]:
        await self.permission.check_manager(current_user)
        tenants = await self.repo.list_tenants_of_manager(current_user.id)
        return [TenantOut.model_validate(t) for t in tenants]
