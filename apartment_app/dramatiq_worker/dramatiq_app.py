import logging

import dramatiq
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from dramatiq.brokers.redis import RedisBroker
from dramatiq.brokers.stub import StubBroker
from dramatiq.middleware import AsyncIO

from core.settings import settings
from tasks.notification_tasks import create_notification_tasks
from tasks.overdue_payment_tasks import create_overdue_sweep_task

logger = logging.getLogger(__name__)


class DramatiqManager:
    def __init__(self):
        self.REDIS_URL = settings.DRAMATIQ_REDIS_URL

        if settings.TASK_BROKER == "stub":
            self.broker = StubBroker()
        else:
            self.broker = RedisBroker(url=self.REDIS_URL)

        self.broker.add_middleware(AsyncIO())

        dramatiq.set_broker(self.broker)

        self._register_tasks()

        self.scheduler = BackgroundScheduler(timezone="UTC")
        self._register_cron_jobs()

    def _register_tasks(self):
        create_notification_tasks()
        create_overdue_sweep_task()

    def _register_cron_jobs(self):
        self.scheduler.add_job(
            func=lambda: self.broker.get_actor("sweep_overdue_payments").send(),
            trigger=IntervalTrigger(minutes=settings.OVERDUE_SWEEP_MINUTES),
            id="sweep-overdue-payments",
            replace_existing=True,
        )

    def start_scheduler(self):
        if not self.scheduler.running:
            self.scheduler.start()
            logger.info(
                "Overdue sweep scheduled every %d minutes",
                settings.OVERDUE_SWEEP_MINUTES,
            )

    def connect(self):
        if isinstance(self.broker, StubBroker):
            return
        logger.info("Connecting to Dramatiq broker: %s", self.REDIS_URL)
        try:
            self.broker.client.ping()
            logger.info("Dramatiq connected successfully.")
        except Exception:
            logger.exception("Dramatiq connection failed")

    def delay(self, actor_name: str, *args, **kwargs):
        actor = self.broker.get_actor(actor_name)
        return actor.send(*args, **kwargs)


dramatiq_app = DramatiqManager()
