"""Create the first SuperAdmin from settings.

    python -m admin.create_superadmin

Does nothing when a SuperAdmin already exists.
"""

import asyncio
import logging
import sys

from core.get_db import AsyncSessionLocal
from core.lifespan import init_models
from core.settings import settings
from models.enums import UserRole
from models.models import User
from repos.auth_repo import AuthRepo

logger = logging.getLogger(__name__)


async def create_superadmin(db) -> User:
    repo = AuthRepo(db)
    existing = await repo.list_by_role(UserRole.SUPERADMIN)
    if existing:
        logger.info("SuperAdmin already exists: %s", existing[0].email)
        return existing[0]

    if not settings.SUPERADMIN_PASSWORD:
        raise RuntimeError("SUPERADMIN_PASSWORD is not set")

    superadmin = User(
        name=settings.SUPERADMIN_NAME,
        email=settings.SUPERADMIN_EMAIL,
        role=UserRole.SUPERADMIN,
    )
    superadmin.set_password(raw_password=settings.SUPERADMIN_PASSWORD)
    await repo.create(superadmin)
    logger.info("SuperAdmin created successfully: %s", superadmin.email)
    return superadmin


async def run():
    await init_models()
    async with AsyncSessionLocal() as db:
        await create_superadmin(db)


if __name__ == "__main__":
    logging.basicConfig(level=settings.LOG_LEVEL)
    try:
        asyncio.run(run())
    except Exception:
        logger.exception("Error running script")
        sys.exit(1)
