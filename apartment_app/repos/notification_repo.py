import uuid
from typing import List, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError

from models.models import Notification


class NotificationRepo:
    def __init__(self, db):
        self.db = db

    async def get_by_id(self, notification_id: uuid.UUID) -> Optional[Notification]:
        result = await self.db.execute(
            select(Notification).where(Notification.id == notification_id)
        )
        return result.scalar_one_or_none()

    async def page_for_user(
        self, user_id: uuid.UUID, offset: int, limit: int
    ) -> List[Notification]:
        result = await self.db.execute(
            select(Notification)
            .where(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc(), Notification.id)
            .offset(offset)
            .limit(limit)
        )
        return result.scalars().all()

    async def count_for_user(self, user_id: uuid.UUID, unread_only: bool = False) -> int:
        stmt = (
            select(func.count())
            .select_from(Notification)
            .where(Notification.user_id == user_id)
        )
        if unread_only:
            stmt = stmt.where(Notification.read.is_(False))
        result = await self.db.execute(stmt)
        return result.scalar_one()

    async def create(self, notification: Notification) -> Notification:
        self.db.add(notification)
        return await self._commit_and_refresh(notification)

    async def mark_read(self, notification: Notification) -> Notification:
        notification.read = True
        self.db.add(notification)
        return await self._commit_and_refresh(notification)

    async def mark_all_read(self, user_id: uuid.UUID) -> int:
        try:
            result = await self.db.execute(
                update(Notification)
                .where(Notification.user_id == user_id, Notification.read.is_(False))
                .values(read=True)
                .execution_options(synchronize_session=False)
            )
            await self.db.commit()
            return result.rowcount
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    async def delete(self, notification_id: uuid.UUID) -> int:
        try:
            result = await self.db.execute(
                delete(Notification).where(Notification.id == notification_id)
            )
            await self.db.commit()
            return result.rowcount
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    async def _commit_and_refresh(self, notification: Notification) -> Notification:
        try:
            await self.db.commit()
            await self.db.refresh(notification)
            return notification
        except SQLAlchemyError:
            await self.db.rollback()
            raise
