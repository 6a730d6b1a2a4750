"""Aggregate application use cases."""

from .payments import (
    approve_payment,
    reject_payment,
    send_payment_reminder,
    submit_payment_receipt,
)
from .users import create_user

__all__ = [
    "approve_payment",
    "create_user",
    "reject_payment",
    "send_payment_reminder",
    "submit_payment_receipt",
]
