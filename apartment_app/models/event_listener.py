from datetime import datetime
from typing import Optional

from sqlalchemy import event

from core.date_helper import utcnow

from .enums import PaymentStatus
from .models import Payment, User


def derive_overdue(
    status: PaymentStatus, due_date: datetime, now: Optional[datetime] = None
) -> PaymentStatus:
    """Only a PENDING payment past its due date turns OVERDUE."""
    now = now or utcnow()
    if status == PaymentStatus.PENDING and due_date is not None and due_date < now:
        return PaymentStatus.OVERDUE
    return status


@event.listens_for(Payment, "before_insert")
@event.listens_for(Payment, "before_update")
def apply_overdue(mapper, connection, target: Payment):
    target.status = derive_overdue(
        target.status or PaymentStatus.PENDING, target.due_date
    )


@event.listens_for(User, "before_insert")
@event.listens_for(User, "before_update")
def normalize_user(mapper, connection, target: User):
    if target.email and target.name:
        target.normalize()
