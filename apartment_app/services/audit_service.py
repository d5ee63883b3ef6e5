import logging

from core.check_permission import CheckRolePermission
from repos.audit_repo import AuditRepo
from schemas.schema import AuditIssue, AuditReport

logger = logging.getLogger(__name__)


class AuditService:
    """Read-only consistency check of the apartment/manager/tenant graph."""

    def __init__(self, db):
        self.repo: AuditRepo = AuditRepo(db)
        self.permission: CheckRolePermission = CheckRolePermission()

    async def assignments(self, current_user) -> AuditReport:
        await self.permission.check_superadmin(current_user)

        tenants = await self.repo.tenant_assignments()
        managers_by_apartment = await self.repo.apartment_managers()
        memberships = await self.repo.tenant_memberships()
        managed = await self.repo.managed_entries()

        assigned = {tenant_id: apartment_id for tenant_id, apartment_id, _ in tenants}
        issues = []

        for tenant_id, apartment_id, manager_id in tenants:
            if apartment_id is None:
                continue
            if (apartment_id, tenant_id) not in memberships:
                issues.append(
                    AuditIssue(
                        kind="missing_membership",
                        user_id=tenant_id,
                        apartment_id=apartment_id,
                        detail="Tenant points at an apartment that does not list them",
                    )
                )
            apartment_manager = managers_by_apartment.get(apartment_id)
            if manager_id and apartment_manager and manager_id != apartment_manager:
                issues.append(
                    AuditIssue(
                        kind="manager_mismatch",
                        user_id=tenant_id,
                        apartment_id=apartment_id,
                        detail="Tenant's manager differs from the apartment's manager",
                    )
                )

        for apartment_id, tenant_id in sorted(memberships, key=str):
            if assigned.get(tenant_id) != apartment_id:
                issues.append(
                    AuditIssue(
                        kind="stale_membership",
                        user_id=tenant_id,
                        apartment_id=apartment_id,
                        detail="Apartment lists a tenant assigned elsewhere",
                    )
                )

        for apartment_id, manager_id in managers_by_apartment.items():
            if manager_id and (manager_id, apartment_id) not in managed:
                issues.append(
                    AuditIssue(
                        kind="missing_managed_entry",
                        user_id=manager_id,
                        apartment_id=apartment_id,
                        detail="Manager's set does not contain their apartment",
                    )
                )

        for manager_id, apartment_id in sorted(managed, key=str):
            if managers_by_apartment.get(apartment_id) != manager_id:
                issues.append(
                    AuditIssue(
                        kind="stale_managed_entry",
                        user_id=manager_id,
                        apartment_id=apartment_id,
                        detail="Manager's set contains an apartment managed by someone else",
                    )
                )

        if issues:
            logger.warning("Assignment audit found %d issues", len(issues))
        return AuditReport(
            checked_tenants=len(tenants),
            checked_apartments=len(managers_by_apartment),
            issues=issues,
        )
