from typing import List

from fastapi import APIRouter, Depends, status
from fastapi_utils.cbv import cbv
from sqlalchemy.ext.asyncio import AsyncSession

from core.get_current_user import get_current_user
from core.get_db import get_db_async
from core.identity import Caller
from core.notification_dispatch import NotificationDispatcher, get_dispatcher
from core.safe_handler import safe_handler
from schemas.schema import ManagerCreate, ManagerOut, TenantCreate, TenantOut, UserOut
from services.user_service import UserService

router = APIRouter(prefix="/api/users", tags=["Users"])


@cbv(router=router)
class UserRoutes:
    db: AsyncSession = Depends(get_db_async)
    current_user: Caller = Depends(get_current_user)
    dispatcher: NotificationDispatcher = Depends(get_dispatcher)

    def service(self) -> UserService:
        return UserService(self.db, self.dispatcher)

    @router.post(
        "/managers", response_model=UserOut, status_code=status.HTTP_201_CREATED
    )
    @safe_handler
    async def create_manager(self, payload: ManagerCreate):
        return await self.service().create_manager(payload, self.current_user)

    @router.get("/managers", response_model=List[ManagerOut])
    @safe_handler
    async def list_managers(self):
        return await self.service().list_managers(self.current_user)

    @router.post(
        "/tenants", response_model=TenantOut, status_code=status.HTTP_201_CREATED
    )
    @safe_handler
    async def create_tenant(self, payload: TenantCreate):
        return await self.service().create_tenant(payload, self.current_user)

    @router.get("/tenants", response_model=List[TenantOut])
    @safe_handler
    async def list_my_tenants(self):
        return await self.service().list_my_tenants(self.current_user)

    @router.get("/all-tenants", response_model=List[TenantOut])
    @safe_handler
    async def list_all_tenants(self):
        return await self.service().list_all_tenants(self.current_user)
