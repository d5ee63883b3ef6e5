import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from tenacity import retry, stop_after_attempt, wait_exponential

from dramatiq_worker.dramatiq_app import dramatiq_app
from models import models  # noqa: F401  registers tables on Base.metadata

from .get_db import Base, async_engine
from .settings import settings

logger = logging.getLogger("startup")


@retry(
    stop=stop_after_attempt(settings.DB_CONNECT_RETRIES),
    wait=wait_exponential(multiplier=2, min=2, max=10),
    reraise=True,
)
async def init_models():
    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Waiting for application startup...")

    if not settings.SECRET_KEY:
        raise RuntimeError("SECRET_KEY is not set; refusing to start")

    await init_models()
    logger.info("Database schema ready.")

    dramatiq_app.connect()

    logger.info("Application startup complete.")

    yield

    await async_engine.dispose()
    logger.info("Database connections closed.")
