import logging

from schemas.schema import NotificationEvent

from .threads import run_in_thread

logger = logging.getLogger(__name__)

FAN_OUT_ACTOR = "fan_out_notification"


class NotificationDispatcher:
    """Hands notification events to the task queue without blocking the request.

    Enqueue failures are logged and dropped: a mutation that already committed
    is never failed by its notification.
    """

    async def dispatch(self, event: NotificationEvent) -> None:
        try:
            # imported late: the worker module imports the services that use this
            from dramatiq_worker.dramatiq_app import dramatiq_app

            await run_in_thread(
                dramatiq_app.delay, FAN_OUT_ACTOR, event.model_dump(mode="json")
            )
            logger.info("Queued %s notification", event.type.value)
        except Exception:
            logger.exception("Failed to queue %s notification", event.type.value)


notification_dispatcher = NotificationDispatcher()


def get_dispatcher() -> NotificationDispatcher:
    return notification_dispatcher
