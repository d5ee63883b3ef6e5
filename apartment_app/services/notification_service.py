import logging
import uuid
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from core.check_permission import CheckRolePermission
from core.errors import Forbidden, NotFound
from core.paginate import PaginatePage
from models.enums import NotificationType, UserRole
from models.models import Notification
from repos.auth_repo import AuthRepo
from repos.notification_repo import NotificationRepo
from schemas.schema import MessageOut, NotificationEvent, NotificationOut, NotificationPage

logger = logging.getLogger(__name__)


class NotificationService:
    def __init__(self, db):
        self.repo: NotificationRepo = NotificationRepo(db)
        self.auth_repo: AuthRepo = AuthRepo(db)
        self.paginate: PaginatePage = PaginatePage()
        self.permission: CheckRolePermission = CheckRolePermission()

    async def notify(
        self,
        event_type: NotificationType,
        message: str,
        recipient_id: uuid.UUID,
        related_user_id: Optional[uuid.UUID] = None,
        related_apartment_id: Optional[uuid.UUID] = None,
        related_payment_id: Optional[uuid.UUID] = None,
    ) -> Notification:
        notification = Notification(
            type=event_type,
            message=message,
            user_id=recipient_id,
            related_user_id=related_user_id,
            related_apartment_id=related_apartment_id,
            related_payment_id=related_payment_id,
            read=False,
        )
        return await self.repo.create(notification)

    async def deliver(
        self, recipient_id: uuid.UUID, event: NotificationEvent
    ) -> Notification:
        return await self.notify(
            event.type,
            event.message,
            recipient_id,
            related_user_id=event.related_user_id,
            related_apartment_id=event.related_apartment_id,
            related_payment_id=event.related_payment_id,
        )

    async def recipient_ids(self, role: UserRole) -> List[uuid.UUID]:
        return await self.auth_repo.ids_by_role(role)

    async def notify_all(self, event: NotificationEvent) -> List[Notification]:
        """Write one notification per recipient; a failed write skips only that one.

        In-process counterpart of the ``fan_out_notification`` actor, which
        resolves recipients through the same ``recipient_ids`` and sends one
        ``deliver_notification`` message per id instead.
        """
        delivered = []
        for recipient_id in await self.recipient_ids(event.recipient_role):
            try:
                delivered.append(await self.deliver(recipient_id, event))
            except SQLAlchemyError:
                logger.exception(
                    "Failed to deliver %s notification to %s",
                    event.type.value,
                    recipient_id,
                )
        return delivered

    async def _owned(self, notification_id: uuid.UUID, current_user, action: str):
        notification = await self.repo.get_by_id(notification_id)
        if not notification:
            raise NotFound("Notification not found")
        if notification.user_id != current_user.id:
            raise Forbidden(f"Not authorized to {action} this notification")
        return notification

    async def list_for_user(
        self, current_user, page: int = 1, page_size: int = 20
    ) -> NotificationPage:
        await self.permission.check_authenticated(current_user)
        page, page_size = self.paginate.clamp(page, page_size)
        items = await self.repo.page_for_user(
            current_user.id, self.paginate.offset(page, page_size), page_size
        )
        total = await self.repo.count_for_user(current_user.id)
        unread = await self.repo.count_for_user(current_user.id, unread_only=True)
        return NotificationPage(
            notifications=[NotificationOut.model_validate(n) for n in items],
            total=total,
            unread=unread,
            page=page,
            page_size=page_size,
        )

    async def mark_read(self, notification_id: uuid.UUID, current_user) -> NotificationOut:
        notification = await self._owned(notification_id, current_user, "access")
        await self.repo.mark_read(notification)
        return NotificationOut.model_validate(notification)

    async def mark_all_read(self, current_user) -> MessageOut:
        await self.permission.check_authenticated(current_user)
        updated = await self.repo.mark_all_read(current_user.id)
        logger.info("Marked %d notifications read for %s", updated, current_user.id)
        return MessageOut(msg="All notifications marked as read")

    async def delete(self, notification_id: uuid.UUID, current_user) -> MessageOut:
        await self._owned(notification_id, current_user, "delete")
        await self.repo.delete(notification_id)
        return MessageOut(msg="Notification removed")
