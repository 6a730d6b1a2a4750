"""Public helpers for emitting domain notifications."""

from .events import (
    notify_payment_approved,
    notify_payment_rejected,
    notify_payment_reminder,
    notify_payment_submitted,
    period_label,
)

__all__ = [
    "notify_payment_approved",
    "notify_payment_rejected",
    "notify_payment_reminder",
    "notify_payment_submitted",
    "period_label",
]
