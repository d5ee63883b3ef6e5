import logging
import uuid

import dramatiq

from core.get_db import AsyncSessionLocal
from core.threads import run_in_thread
from schemas.schema import NotificationEvent
from services.notification_service import NotificationService

logger = logging.getLogger(__name__)


def create_notification_tasks():
    @dramatiq.actor(
        queue_name="notifications",
        max_retries=3,
        time_limit=60_000,
    )
    async def fan_out_notification(event: dict):
        notification_event = NotificationEvent.model_validate(event)
        async with AsyncSessionLocal() as db:
            recipients = await NotificationService(db).recipient_ids(
                notification_event.recipient_role
            )

        deliver = dramatiq.get_broker().get_actor("deliver_notification")
        for recipient_id in recipients:
            await run_in_thread(deliver.send, str(recipient_id), event)

        logger.info(
            "Fanned out %s to %d recipients",
            notification_event.type.value,
            len(recipients),
        )

    @dramatiq.actor(
        queue_name="notifications",
        max_retries=5,
        time_limit=60_000,
    )
    async def deliver_notification(recipient_id: str, event: dict):
        async with AsyncSessionLocal() as db:
            await NotificationService(db).deliver(
                uuid.UUID(recipient_id), NotificationEvent.model_validate(event)
            )

    return fan_out_notification, deliver_notification
