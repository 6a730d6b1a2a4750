"""Domain entities exposed by the application."""

from .notification import (
    EVENT_PAYMENT_APPROVED,
    EVENT_PAYMENT_REJECTED,
    EVENT_PAYMENT_REMINDER,
    EVENT_PAYMENT_SUBMITTED,
    Notification,
)
from .payment import (
    PAYMENT_STATUS_APPROVED,
    PAYMENT_STATUS_PENDING,
    PAYMENT_STATUS_REJECTED,
    Payment,
)
from .role import ROLE_ADMIN, ROLE_MEMBER, Role
from .user import User

__all__ = [
    "EVENT_PAYMENT_APPROVED",
    "EVENT_PAYMENT_REJECTED",
    "EVENT_PAYMENT_REMINDER",
    "EVENT_PAYMENT_SUBMITTED",
    "Notification",
    "PAYMENT_STATUS_APPROVED",
    "PAYMENT_STATUS_PENDING",
    "PAYMENT_STATUS_REJECTED",
    "Payment",
    "ROLE_ADMIN",
    "ROLE_MEMBER",
    "Role",
    "User",
]
