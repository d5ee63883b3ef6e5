import uuid

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from repos.auth_repo import AuthRepo

from .errors import Unauthenticated
from .get_db import get_db_async
from .identity import Caller, caller_from_user
from .validators import jwt_protect


async def authenticate(db: AsyncSession, user_id: uuid.UUID) -> Caller:
    user = await AuthRepo(db).by_id(user_id)
    if not user:
        # token outlived its user
        raise Unauthenticated("Not authenticated")
    return caller_from_user(user)


async def get_current_user(
    user_id: uuid.UUID = Depends(jwt_protect),
    db: AsyncSession = Depends(get_db_async),
) -> Caller:
    return await authenticate(db, user_id)
