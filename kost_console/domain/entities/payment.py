"""Domain entity representing a monthly rent payment."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

PAYMENT_STATUS_PENDING = "PENDING"
PAYMENT_STATUS_APPROVED = "APPROVED"
PAYMENT_STATUS_REJECTED = "REJECTED"


@dataclass
class Payment:
    """Rent payment submitted by a member together with a photo receipt."""

    id: int | None
    user_id: int
    payment_month: int
    payment_year: int
    amount: Decimal
    receipt_path: str
    status: str = PAYMENT_STATUS_PENDING
    description: str | None = None
    rejection_reason: str | None = None
    reviewed_by: int | None = None
    reviewed_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def is_pending(self) -> bool:
        """Return ``True`` while the receipt awaits an administrator review."""

        return self.status == PAYMENT_STATUS_PENDING


__all__ = [
    "PAYMENT_STATUS_APPROVED",
    "PAYMENT_STATUS_PENDING",
    "PAYMENT_STATUS_REJECTED",
    "Payment",
]
