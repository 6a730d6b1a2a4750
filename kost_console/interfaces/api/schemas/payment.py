"""Pydantic models describing payment payloads."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class PaymentReceiptCreate(BaseModel):
    """Receipt submission sent by a member.

    The image itself is stored by the upload service; only its reference is
    recorded here.
    """

    model_config = ConfigDict(populate_by_name=True)

    payment_month: int = Field(alias="paymentMonth", ge=1, le=12)
    payment_year: int = Field(alias="paymentYear", ge=2000)
    amount: Decimal = Field(gt=0)
    receipt_path: str = Field(alias="receiptPath", min_length=1, max_length=255)
    description: str | None = None


class PaymentReject(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    rejection_reason: str = Field(alias="rejectionReason", min_length=1)


class PaymentReminderCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: int = Field(alias="userId")
    payment_month: int = Field(alias="paymentMonth", ge=1, le=12)
    payment_year: int = Field(alias="paymentYear", ge=2000)


class PaymentRead(BaseModel):
    """Representation of a payment returned by the API."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    user_id: int = Field(alias="userId")
    payment_month: int = Field(alias="paymentMonth")
    payment_year: int = Field(alias="paymentYear")
    amount: Decimal
    description: str | None = None
    receipt_path: str = Field(alias="receiptPath")
    status: str
    rejection_reason: str | None = Field(default=None, alias="rejectionReason")
    reviewed_by: int | None = Field(default=None, alias="reviewedBy")
    reviewed_at: datetime | None = Field(default=None, alias="reviewedAt")
    created_at: datetime | None = Field(default=None, alias="createdAt")


__all__ = [
    "PaymentRead",
    "PaymentReceiptCreate",
    "PaymentReject",
    "PaymentReminderCreate",
]
