import uuid
from typing import List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.orm import selectinload

from core.upsert import upsert
from models.models import Apartment, ApartmentTenant, ManagerApartment, Payment, User


class ApartmentRepo:
    """Every write to the manager/tenant graph goes through this repo.

    Set membership changes are single upsert / delete statements on
    the membership tables and back-references are single UPDATEs, so two
    requests touching the same apartment never overwrite each other's
    in-memory copy. Nothing here commits; the calling service decides
    where the unit of work ends.
    """

    def __init__(self, db):
        self.db = db

    async def get_by_id(self, apartment_id: uuid.UUID) -> Optional[Apartment]:
        result = await self.db.execute(
            select(Apartment).where(Apartment.id == apartment_id)
        )
        return result.scalar_one_or_none()

    async def get_with_relations(self, apartment_id: uuid.UUID) -> Optional[Apartment]:
        result = await self.db.execute(
            select(Apartment)
            .options(
                selectinload(Apartment.tenants),
                selectinload(Apartment.manager),
                selectinload(Apartment.owner),
            )
            .where(Apartment.id == apartment_id)
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    async def get_managed_by(
        self, apartment_id: uuid.UUID, manager_id: uuid.UUID
    ) -> Optional[Apartment]:
        result = await self.db.execute(
            select(Apartment).where(
                Apartment.id == apartment_id,
                Apartment.manager_id == manager_id,
            )
        )
        return result.scalar_one_or_none()

    async def list_all(self) -> List[Apartment]:
        result = await self.db.execute(
            select(Apartment)
            .options(selectinload(Apartment.tenants))
            .order_by(Apartment.created_at.desc())
        )
        return result.scalars().all()

    async def list_managed(self, manager_id: uuid.UUID) -> List[Apartment]:
        result = await self.db.execute(
            select(Apartment)
            .options(selectinload(Apartment.tenants))
            .where(Apartment.manager_id == manager_id)
            .order_by(Apartment.created_at.desc())
        )
        return result.scalars().all()

    async def add(self, apartment: Apartment) -> Apartment:
        self.db.add(apartment)
        await self.db.flush()
        return apartment

    async def set_manager(self, apartment_id: uuid.UUID, manager_id: uuid.UUID):
        await self.db.execute(
            update(Apartment)
            .where(Apartment.id == apartment_id)
            .values(manager_id=manager_id)
        )

    async def add_to_managed_set(self, manager_id: uuid.UUID, apartment_id: uuid.UUID):
        # keyed by apartment: takes the entry away from any previous manager
        await self.db.execute(
            upsert(
                self.db,
                ManagerApartment,
                "apartment_id",
                manager_id=manager_id,
                apartment_id=apartment_id,
            )
        )

    async def prune_managed_sets(self, apartment_id: uuid.UUID) -> int:
        result = await self.db.execute(
            delete(ManagerApartment).where(
                ManagerApartment.apartment_id == apartment_id
            )
        )
        return result.rowcount

    async def repoint_tenant_managers(
        self, apartment_id: uuid.UUID, manager_id: uuid.UUID
    ):
        await self.db.execute(
            update(User)
            .where(User.assigned_apartment_id == apartment_id)
            .values(assigned_manager_id=manager_id)
        )

    async def add_tenant_member(self, apartment_id: uuid.UUID, tenant_id: uuid.UUID):
        # keyed by tenant: moves the tenant out of any other apartment
        await self.db.execute(
            upsert(
                self.db,
                ApartmentTenant,
                "tenant_id",
                apartment_id=apartment_id,
                tenant_id=tenant_id,
            )
        )

    async def remove_tenant_member(
        self, apartment_id: uuid.UUID, tenant_id: uuid.UUID
    ) -> int:
        result = await self.db.execute(
            delete(ApartmentTenant).where(
                ApartmentTenant.apartment_id == apartment_id,
                ApartmentTenant.tenant_id == tenant_id,
            )
        )
        return result.rowcount

    async def assign_tenant(
        self,
        tenant_id: uuid.UUID,
        apartment_id: uuid.UUID,
        manager_id: Optional[uuid.UUID],
    ):
        await self.db.execute(
            update(User)
            .where(User.id == tenant_id)
            .values(assigned_apartment_id=apartment_id, assigned_manager_id=manager_id)
        )

    async def place_tenant(
        self,
        apartment_id: uuid.UUID,
        tenant_id: uuid.UUID,
        manager_id: Optional[uuid.UUID],
    ):
        """Move a tenant into an apartment: one apartment per tenant."""
        await self.add_tenant_member(apartment_id, tenant_id)
        await self.assign_tenant(tenant_id, apartment_id, manager_id)

    async def unassign_tenant(self, tenant_id: uuid.UUID, apartment_id: uuid.UUID):
        # conditional: a tenant already moved elsewhere keeps the newer assignment
        await self.db.execute(
            update(User)
            .where(
                User.id == tenant_id,
                User.assigned_apartment_id == apartment_id,
            )
            .values(assigned_apartment_id=None, assigned_manager_id=None)
        )

    async def clear_tenant_apartments(self, apartment_id: uuid.UUID) -> int:
        result = await self.db.execute(
            update(User)
            .where(User.assigned_apartment_id == apartment_id)
            .values(assigned_apartment_id=None)
        )
        return result.rowcount

    async def delete_cascade(self, apartment_id: uuid.UUID):
        await self.prune_managed_sets(apartment_id)
        await self.clear_tenant_apartments(apartment_id)
        await self.db.execute(
            delete(ApartmentTenant).where(ApartmentTenant.apartment_id == apartment_id)
        )
        await self.db.execute(
            update(Payment)
            .where(Payment.apartment_id == apartment_id)
            .values(apartment_id=None)
            .execution_options(synchronize_session=False)
        )
        await self.db.execute(delete(Apartment).where(Apartment.id == apartment_id))
