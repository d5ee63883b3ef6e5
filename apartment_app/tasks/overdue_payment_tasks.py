import dramatiq

from core.get_db import AsyncSessionLocal
from services.payment_service import PaymentService


def create_overdue_sweep_task():
    @dramatiq.actor(
        queue_name="sweep_overdue_payments",
        max_retries=3,
        time_limit=600_000,
    )
    async def sweep_overdue_payments():
        async with AsyncSessionLocal() as db:
            return await PaymentService(db).sweep_overdue()

    return sweep_overdue_payments
