import uuid
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from core.date_helper import to_naive_utc
from models.enums import NotificationType, PaymentStatus, PaymentType, UserRole


class UserCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=120)
    email: EmailStr
    password: str = Field(
        ..., min_length=6, json_schema_extra={"type": "string", "format": "password"}
    )

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value: str) -> str:
        return value.strip() if isinstance(value, str) else value


class ManagerCreate(UserCreate):
    pass


class TenantCreate(UserCreate):
    apartment_id: Optional[uuid.UUID] = None


class LoginInput(BaseModel):
    email: EmailStr
    password: str

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower() if isinstance(value, str) else value


class ApartmentBrief(BaseModel):
    id: uuid.UUID
    name: str
    address: str

    model_config = {"from_attributes": True}


class UserBrief(BaseModel):
    id: uuid.UUID
    name: str
    email: str
    role: UserRole

    model_config = {"from_attributes": True}


class UserOut(UserBrief):
    assigned_manager_id: Optional[uuid.UUID] = None
    assigned_apartment_id: Optional[uuid.UUID] = None
    created_at: datetime


class ManagerOut(UserOut):
    managed_apartments: List[ApartmentBrief] = []


class TenantOut(UserOut):
    assigned_apartment: Optional[ApartmentBrief] = None


class UserProfile(UserOut):
    managed_apartments: List[ApartmentBrief] = []
    assigned_apartment: Optional[ApartmentBrief] = None
    assigned_manager: Optional[UserBrief] = None


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    role: UserRole
    user: UserOut


class ApartmentCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    address: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = None
    number_of_rooms: int = Field(..., ge=1)
    price: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    available: bool = True
    images: List[str] = []
    amenities: List[str] = []
    manager_id: Optional[uuid.UUID] = None


class ApartmentUpdate(BaseModel):
    """Scalar fields only. Manager, tenants and owner in the body are dropped."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    address: Optional[str] = Field(None, min_length=1, max_length=500)
    description: Optional[str] = None
    number_of_rooms: Optional[int] = Field(None, ge=1)
    price: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    available: Optional[bool] = None
    images: Optional[List[str]] = None
    amenities: Optional[List[str]] = None

    model_config = {"extra": "ignore"}


class AssignManager(BaseModel):
    manager_id: uuid.UUID


class TenantRef(BaseModel):
    tenant_id: uuid.UUID


class ApartmentOut(BaseModel):
    id: uuid.UUID
    name: str
    address: str
    description: Optional[str] = None
    number_of_rooms: int
    price: Decimal
    available: bool
    owner_id: uuid.UUID
    manager_id: Optional[uuid.UUID] = None
    tenant_ids: List[uuid.UUID] = []
    images: List[str] = []
    amenities: List[str] = []
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class PaymentCreate(BaseModel):
    amount: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    tenant_id: uuid.UUID
    apartment_id: uuid.UUID
    due_date: datetime
    payment_type: PaymentType
    description: Optional[str] = None

    @field_validator("due_date")
    @classmethod
    def as_naive_utc(cls, value: datetime) -> datetime:
        return to_naive_utc(value)


class PaymentUpdate(BaseModel):
    amount: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    due_date: Optional[datetime] = None
    payment_type: Optional[PaymentType] = None
    description: Optional[str] = None
    status: Optional[PaymentStatus] = None

    model_config = {"extra": "ignore"}

    @field_validator("due_date")
    @classmethod
    def as_naive_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value) if value is not None else None


class PaymentOut(BaseModel):
    id: uuid.UUID
    amount: Decimal
    tenant_id: uuid.UUID
    apartment_id: Optional[uuid.UUID] = None
    due_date: datetime
    payment_date: Optional[datetime] = None
    status: PaymentStatus
    payment_type: PaymentType
    description: Optional[str] = None
    created_by_id: uuid.UUID
    updated_by_id: Optional[uuid.UUID] = None
    created_at: datetime
    updated_at: datetime
    tenant: Optional[UserBrief] = None
    apartment: Optional[ApartmentBrief] = None

    model_config = {"from_attributes": True}


class PaymentStats(BaseModel):
    total_paid: Decimal = Decimal("0")
    total_pending: Decimal = Decimal("0")
    total_overdue: Decimal = Decimal("0")
    recent_payments: List[PaymentOut] = []


class NotificationOut(BaseModel):
    id: uuid.UUID
    type: NotificationType
    message: str
    user_id: uuid.UUID
    related_user_id: Optional[uuid.UUID] = None
    related_apartment_id: Optional[uuid.UUID] = None
    related_payment_id: Optional[uuid.UUID] = None
    read: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class NotificationPage(BaseModel):
    notifications: List[NotificationOut]
    total: int
    unread: int
    page: int
    page_size: int


class NotificationEvent(BaseModel):
    """One state change to broadcast; recipients are resolved by role at delivery."""

    type: NotificationType
    message: str
    recipient_role: UserRole = UserRole.SUPERADMIN
    related_user_id: Optional[uuid.UUID] = None
    related_apartment_id: Optional[uuid.UUID] = None
    related_payment_id: Optional[uuid.UUID] = None


class MessageOut(BaseModel):
    msg: str


class AuditIssue(BaseModel):
    kind: str
    user_id: Optional[uuid.UUID] = None
    apartment_id: Optional[uuid.UUID] = None
    detail: str


class AuditReport(BaseModel):
    checked_tenants: int
    checked_apartments: int
    issues: List[AuditIssue] = []

    @property
    def ok(self) -> bool:
        return not self.issues
