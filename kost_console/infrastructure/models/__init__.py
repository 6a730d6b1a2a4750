"""ORM models used by the application infrastructure."""

from .role import RoleModel
from .user import UserModel
from .notification import NotificationModel
from .payment import PaymentModel

__all__ = [
    "RoleModel",
    "UserModel",
    "NotificationModel",
    "PaymentModel",
]
