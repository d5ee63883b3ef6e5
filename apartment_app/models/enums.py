from enum import Enum


class UserRole(str, Enum):
    SUPERADMIN = "superadmin"
    MANAGER = "manager"
    TENANT = "tenant"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class PaymentType(str, Enum):
    RENT = "rent"
    DEPOSIT = "deposit"
    MAINTENANCE = "maintenance"
    OTHER = "other"


class NotificationType(str, Enum):
    USER_CREATED = "user_created"
    USER_UPDATED = "user_updated"
    APARTMENT_CREATED = "apartment_created"
    APARTMENT_UPDATED = "apartment_updated"
    TENANT_ADDED = "tenant_added"
    TENANT_REMOVED = "tenant_removed"
    PAYMENT_CREATED = "payment_created"
    PAYMENT_UPDATED = "payment_updated"
    PAYMENT_OVERDUE = "payment_overdue"
    PAYMENT_PAID = "payment_paid"
    SYSTEM = "system"
