import uuid
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload

from models.enums import UserRole
from models.models import User


class AuthRepo:
    def __init__(self, db):
        self.db = db

    async def by_id(self, user_id: uuid.UUID) -> Optional[User]:
        stmt = select(User).where(User.id == user_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> User | None:
        email_payload = email.strip().lower()
        result = await self.db.execute(select(User).where(User.email == email_payload))
        return result.scalar_one_or_none()

    async def get_with_relations(self, user_id: uuid.UUID) -> Optional[User]:
        stmt = (
            select(User)
            .options(
                selectinload(User.managed_apartments),
                selectinload(User.assigned_apartment),
                selectinload(User.assigned_manager),
            )
            .where(User.id == user_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_with_role(self, user_id: uuid.UUID, role: UserRole) -> Optional[User]:
        stmt = select(User).where(User.id == user_id, User.role == role)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def list_by_role(self, role: UserRole) -> List[User]:
        stmt = (
            select(User)
            .options(
                selectinload(User.managed_apartments),
                selectinload(User.assigned_apartment),
            )
            .where(User.role == role)
            .order_by(User.name)
        )
        result = await self.db.execute(stmt)
        return result.scalars().all()

    async def list_tenants_of_manager(self, manager_id: uuid.UUID) -> List[User]:
        stmt = (
            select(User)
            .options(selectinload(User.assigned_apartment))
            .where(
                User.role == UserRole.TENANT,
                User.assigned_manager_id == manager_id,
            )
            .order_by(User.name)
        )
        result = await self.db.execute(stmt)
        return result.scalars().all()

    async def get_tenant_of_manager(
        self, tenant_id: uuid.UUID, manager_id: uuid.UUID
    ) -> Optional[User]:
        stmt = select(User).where(
            User.id == tenant_id,
            User.role == UserRole.TENANT,
            User.assigned_manager_id == manager_id,
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def ids_by_role(self, role: UserRole) -> List[uuid.UUID]:
        result = await self.db.execute(select(User.id).where(User.role == role))
        return list(result.scalars().all())

    async def add(self, user: User) -> User:
        """Stage a new user and flush so its id is usable in the same unit of work."""
        if user.id is not None:
            raise ValueError("add() called with an already persisted user")
        user.normalize()
        self.db.add(user)
        await self.db.flush()
        return user

    async def create(self, user: User) -> User:
        try:
            await self.add(user)
        except SQLAlchemyError:
            await self.db.rollback()
            raise
        return await self._commit_and_refresh(user)

    async def _commit_and_refresh(self, user: User) -> User:
        try:
            await self.db.commit()
            await self.db.refresh(user)
            return user
        except SQLAlchemyError:
            await self.db.rollback()
            raise
