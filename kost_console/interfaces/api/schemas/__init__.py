from .notification import MarkAllReadResponse, NotificationRead, UnreadCountRead
from .payment import (
    PaymentRead,
    PaymentReceiptCreate,
    PaymentReject,
    PaymentReminderCreate,
)

__all__ = [
    "MarkAllReadResponse",
    "NotificationRead",
    "PaymentRead",
    "PaymentReceiptCreate",
    "PaymentReject",
    "PaymentReminderCreate",
    "UnreadCountRead",
]
