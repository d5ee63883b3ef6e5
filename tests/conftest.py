import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["TASK_BROKER"] = "stub"
os.environ["ALLOWED_HOSTS"] = "http://localhost:3000"

import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from core.get_db import Base
from core.identity import caller_from_user
from core.notification_dispatch import NotificationDispatcher
from models import models  # noqa: F401
from models.enums import UserRole
from models.models import User
from repos.auth_repo import AuthRepo
from schemas.schema import ApartmentCreate
from services.apartment_service import ApartmentService

PASSWORD = "secret123"


class RecordingDispatcher(NotificationDispatcher):
    """Keeps dispatched events in memory instead of queueing them."""

    def __init__(self):
        self.events = []

    async def dispatch(self, event):
        self.events.append(event)

    def types(self):
        return [e.type for e in self.events]


def enable_foreign_keys(engine):
    @event.listens_for(engine.sync_engine, "connect")
    def _fk_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


async def create_user(db, name, email, role, password=PASSWORD, **extra) -> User:
    user = User(name=name, email=email, role=role, **extra)
    user.set_password(raw_password=password)
    return await AuthRepo(db).create(user)


@pytest.fixture
async def db_engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    enable_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db(db_engine):
    session_factory = async_sessionmaker(
        bind=db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with session_factory() as session:
        yield session


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture
async def superadmin(db):
    return await create_user(db, "Ada Admin", "ada@oakhall.io", UserRole.SUPERADMIN)


@pytest.fixture
async def manager(db):
    return await create_user(db, "Mona Manager", "mona@oakhall.io", UserRole.MANAGER)


@pytest.fixture
async def other_manager(db):
    return await create_user(db, "Oscar Other", "oscar@oakhall.io", UserRole.MANAGER)


@pytest.fixture
async def tenant(db):
    return await create_user(db, "Tara Tenant", "tara@oakhall.io", UserRole.TENANT)


@pytest.fixture
async def second_tenant(db):
    return await create_user(db, "Theo Tenant", "theo@oakhall.io", UserRole.TENANT)


@pytest.fixture
def admin_caller(superadmin):
    return caller_from_user(superadmin)


@pytest.fixture
def manager_caller(manager):
    return caller_from_user(manager)


@pytest.fixture
def other_manager_caller(other_manager):
    return caller_from_user(other_manager)


@pytest.fixture
def tenant_caller(tenant):
    return caller_from_user(tenant)


@pytest.fixture
def apartment_payload():
    def build(**overrides):
        values = {
            "name": "Oak Hall 2B",
            "address": "12 Oak Street",
            "number_of_rooms": 2,
            "price": "1500.00",
        }
        values.update(overrides)
        return ApartmentCreate(**values)

    return build


@pytest.fixture
async def apartment(db, dispatcher, admin_caller, manager, apartment_payload):
    service = ApartmentService(db, dispatcher)
    created = await service.create(
        apartment_payload(manager_id=manager.id), admin_caller
    )
    dispatcher.events.clear()
    return created


@pytest.fixture
def make_user(db):
    async def build(name, email, role=UserRole.TENANT, **extra):
        return await create_user(db, name, email, role, **extra)

    return build
