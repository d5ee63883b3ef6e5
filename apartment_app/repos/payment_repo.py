import uuid
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload

from models.enums import PaymentStatus
from models.models import Payment


class PaymentRepo:
    def __init__(self, db):
        self.db = db

    def _with_parties(self):
        return select(Payment).options(
            selectinload(Payment.tenant),
            selectinload(Payment.apartment),
        )

    async def get_by_id(self, payment_id: uuid.UUID) -> Optional[Payment]:
        result = await self.db.execute(select(Payment).where(Payment.id == payment_id))
        return result.scalar_one_or_none()

    async def get_with_relations(self, payment_id: uuid.UUID) -> Optional[Payment]:
        result = await self.db.execute(
            self._with_parties()
            .where(Payment.id == payment_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_by_apartment(self, apartment_id: uuid.UUID) -> List[Payment]:
        result = await self.db.execute(
            self._with_parties()
            .where(Payment.apartment_id == apartment_id)
            .order_by(Payment.due_date.desc())
        )
        return result.scalars().all()

    async def list_by_tenant(self, tenant_id: uuid.UUID) -> List[Payment]:
        result = await self.db.execute(
            self._with_parties()
            .where(Payment.tenant_id == tenant_id)
            .order_by(Payment.due_date.desc())
        )
        return result.scalars().all()

    async def list_all(self) -> List[Payment]:
        result = await self.db.execute(
            self._with_parties().order_by(Payment.created_at.desc())
        )
        return result.scalars().all()

    async def recent(self, limit: int = 5) -> List[Payment]:
        result = await self.db.execute(
            self._with_parties().order_by(Payment.updated_at.desc()).limit(limit)
        )
        return result.scalars().all()

    async def totals_by_status(self) -> Dict[PaymentStatus, Decimal]:
        result = await self.db.execute(
            select(Payment.status, func.sum(Payment.amount)).group_by(Payment.status)
        )
        return {status: total or Decimal("0") for status, total in result.all()}

    async def pending_past_due(self, now: datetime) -> List[Payment]:
        result = await self.db.execute(
            select(Payment).where(
                Payment.status == PaymentStatus.PENDING,
                Payment.due_date < now,
            )
        )
        return result.scalars().all()

    async def create(self, payment: Payment) -> Payment:
        self.db.add(payment)
        return await self._commit_and_refresh(payment)

    async def save(self, payment: Payment) -> Payment:
        self.db.add(payment)
        return await self._commit_and_refresh(payment)

    async def commit(self):
        try:
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    async def _commit_and_refresh(self, payment: Payment) -> Payment:
        try:
            await self.db.commit()
            await self.db.refresh(payment)
            return payment
        except SQLAlchemyError:
            await self.db.rollback()
            raise
