from fastapi import APIRouter, Depends
from fastapi_utils.cbv import cbv
from sqlalchemy.ext.asyncio import AsyncSession

from core.get_current_user import get_current_user
from core.get_db import get_db_async
from core.identity import Caller
from core.safe_handler import safe_handler
from schemas.schema import AuditReport
from services.audit_service import AuditService

router = APIRouter(prefix="/api/admin", tags=["Admin"])


@cbv(router=router)
class AdminRoutes:
    db: AsyncSession = Depends(get_db_async)
    current_user: Caller = Depends(get_current_user)

    @router.get("/assignments/audit", response_model=AuditReport)
    @safe_handler
    async def assignment_audit(self):
        return await AuditService(self.db).assignments(self.current_user)
