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
from schemas.schema import PaymentCreate, PaymentOut, PaymentStats, PaymentUpdate
from services.payment_service import PaymentService

router = APIRouter(prefix="/api/payments", tags=["Payments"])


@cbv(router=router)
class PaymentRoutes:
    db: AsyncSession = Depends(get_db_async)
    current_user: Caller = Depends(get_current_user)
    dispatcher: NotificationDispatcher = Depends(get_dispatcher)

    def service(self) -> PaymentService:
        return PaymentService(self.db, self.dispatcher)

    @router.get("", response_model=List[PaymentOut])
    @safe_handler
    async def list_all(self):
        return await self.service().list_all(self.current_user)

    @router.get("/stats", response_model=PaymentStats)
    @safe_handler
    async def stats(self):
        return await self.service().stats(self.current_user)

    @router.get("/apartment/{apartment_id}", response_model=List[PaymentOut])
    @safe_handler
    async def by_apartment(self, apartment_id: uuid.UUID):
        return await self.service().list_by_apartment(apartment_id, self.current_user)

    @router.get("/tenant/{tenant_id}", response_model=List[PaymentOut])
    @safe_handler
    async def by_tenant(self, tenant_id: uuid.UUID):
        return await self.service().list_by_tenant(tenant_id, self.current_user)

    @router.post("", response_model=PaymentOut, status_code=status.HTTP_201_CREATED)
    @safe_handler
    async def create(self, payload: PaymentCreate):
        return await self.service().create(payload, self.current_user)

    @router.put("/{payment_id}/pay", response_model=PaymentOut)
    @safe_handler
    async def mark_paid(self, payment_id: uuid.UUID):
        return await self.service().mark_paid(payment_id, self.current_user)

    @router.put("/{payment_id}", response_model=PaymentOut)
    @safe_handler
    async def update(self, payment_id: uuid.UUID, payload: PaymentUpdate):
        return await self.service().update(payment_id, payload, self.current_user)
