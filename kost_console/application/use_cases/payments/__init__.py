"""Use cases for the payment receipt workflow."""

from .approve_payment import approve_payment
from .reject_payment import reject_payment
from .send_payment_reminder import send_payment_reminder
from .submit_payment_receipt import submit_payment_receipt
from .validators import PAYMENT_ALREADY_REVIEWED, PAYMENT_NOT_FOUND

__all__ = [
    "PAYMENT_ALREADY_REVIEWED",
    "PAYMENT_NOT_FOUND",
    "approve_payment",
    "reject_payment",
    "send_payment_reminder",
    "submit_payment_receipt",
]
