import uuid

from fastapi import APIRouter, Depends, Query
from fastapi_utils.cbv import cbv
from sqlalchemy.ext.asyncio import AsyncSession

from core.get_current_user import get_current_user
from core.get_db import get_db_async
from core.identity import Caller
from core.safe_handler import safe_handler
from schemas.schema import MessageOut, NotificationOut, NotificationPage
from services.notification_service import NotificationService

router = APIRouter(prefix="/api/notifications", tags=["Notifications"])


@cbv(router=router)
class NotificationRoutes:
    db: AsyncSession = Depends(get_db_async)
    current_user: Caller = Depends(get_current_user)

    @router.get("", response_model=NotificationPage)
    @safe_handler
    async def list_notifications(
        self,
        page: int = Query(1, ge=1),
        page_size: int = Query(20, ge=1, le=100),
    ):
        return await NotificationService(self.db).list_for_user(
            self.current_user, page=page, page_size=page_size
        )

    @router.put("/read-all", response_model=MessageOut)
    @safe_handler
    async def mark_all_read(self):
        return await NotificationService(self.db).mark_all_read(self.current_user)

    @router.put("/{notification_id}/read", response_model=NotificationOut)
    @safe_handler
    async def mark_read(self, notification_id: uuid.UUID):
        return await NotificationService(self.db).mark_read(
            notification_id, self.current_user
        )

    @router.delete("/{notification_id}", response_model=MessageOut)
    @safe_handler
    async def delete(self, notification_id: uuid.UUID):
        return await NotificationService(self.db).delete(
            notification_id, self.current_user
        )
