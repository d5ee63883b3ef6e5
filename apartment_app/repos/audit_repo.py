import uuid
from typing import Dict, List, Optional, Set, Tuple

from sqlalchemy import select

from models.enums import UserRole
from models.models import Apartment, ApartmentTenant, ManagerApartment, User


class AuditRepo:
    def __init__(self, db):
        self.db = db

    async def tenant_assignments(
        self,
    ) -> List[Tuple[uuid.UUID, Optional[uuid.UUID], Optional[uuid.UUID]]]:
        result = await self.db.execute(
            select(
                User.id, User.assigned_apartment_id, User.assigned_manager_id
            ).where(User.role == UserRole.TENANT)
        )
        return [tuple(row) for row in result.all()]

    async def apartment_managers(self) -> Dict[uuid.UUID, Optional[uuid.UUID]]:
        result = await self.db.execute(select(Apartment.id, Apartment.manager_id))
        return {apartment_id: manager_id for apartment_id, manager_id in result.all()}

    async def tenant_memberships(self) -> Set[Tuple[uuid.UUID, uuid.UUID]]:
        result = await self.db.execute(
            select(ApartmentTenant.apartment_id, ApartmentTenant.tenant_id)
        )
        return {tuple(row) for row in result.all()}

    async def managed_entries(self) -> Set[Tuple[uuid.UUID, uuid.UUID]]:
        result = await self.db.execute(
            select(ManagerApartment.manager_id, ManagerApartment.apartment_id)
        )
        return {tuple(row) for row in result.all()}
