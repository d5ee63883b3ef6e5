import uuid
from typing import List

from fastapi import APIRouter, Depends, status
from fastapi_utils.cbv import cbv
from sqlalchemy.ext.asyncio import AsyncSession

from core.get_current_user import get_current_user
from core.get_db import get_db_async
from core.identity import Caller
from core.notification_dispatch import NotificationDispatcher, get_dispatcher
from core.safe_handler import safe_handler
from schemas.schema import (
    ApartmentCreate,
    ApartmentOut,
    ApartmentUpdate,
    AssignManager,
    MessageOut,
    TenantRef,
)
from services.apartment_service import ApartmentService

router = APIRouter(prefix="/api/apartments", tags=["Apartments"])


@cbv(router=router)
class ApartmentRoutes:
    db: AsyncSession = Depends(get_db_async)
    dispatcher: NotificationDispatcher = Depends(get_dispatcher)

    def service(self) -> ApartmentService:
        return ApartmentService(self.db, self.dispatcher)

    @router.get("", response_model=List[ApartmentOut])
    @safe_handler
    async def list_apartments(self):
        return await self.service().list_all()

    @router.get("/managed", response_model=List[ApartmentOut])
    @safe_handler
    async def list_managed(self, current_user: Caller = Depends(get_current_user)):
        return await self.service().list_managed(current_user)

    @router.get("/{apartment_id}", response_model=ApartmentOut)
    @safe_handler
    async def get_apartment(self, apartment_id: uuid.UUID):
        return await self.service().get(apartment_id)

    @router.post("", response_model=ApartmentOut, status_code=status.HTTP_201_CREATED)
    @safe_handler
    async def create(
        self,
        payload: ApartmentCreate,
        current_user: Caller = Depends(get_current_user),
    ):
        return await self.service().create(payload, current_user)

    @router.put("/{apartment_id}/assign-manager", response_model=ApartmentOut)
    @safe_handler
    async def assign_manager(
        self,
        apartment_id: uuid.UUID,
        payload: AssignManager,
        current_user: Caller = Depends(get_current_user),
    ):
        return await self.service().assign_manager(apartment_id, payload, current_user)

    @router.put("/{apartment_id}/add-tenant", response_model=ApartmentOut)
    @safe_handler
    async def add_tenant(
        self,
        apartment_id: uuid.UUID,
        payload: TenantRef,
        current_user: Caller = Depends(get_current_user),
    ):
        return await self.service().add_tenant(apartment_id, payload, current_user)

    @router.put("/{apartment_id}/remove-tenant", response_model=ApartmentOut)
    @safe_handler
    async def remove_tenant(
        self,
        apartment_id: uuid.UUID,
        payload: TenantRef,
        current_user: Caller = Depends(get_current_user),
    ):
        return await self.service().remove_tenant(apartment_id, payload, current_user)

    @router.put("/{apartment_id}", response_model=ApartmentOut)
    @safe_handler
    async def update(
        self,
        apartment_id: uuid.UUID,
        payload: ApartmentUpdate,
        current_user: Caller = Depends(get_current_user),
    ):
        return await self.service().update(apartment_id, payload, current_user)

    @router.delete("/{apartment_id}", response_model=MessageOut)
    @safe_handler
    async def delete(
        self,
        apartment_id: uuid.UUID,
        current_user: Caller = Depends(get_current_user),
    ):
        return await self.service().delete(apartment_id, current_user)
