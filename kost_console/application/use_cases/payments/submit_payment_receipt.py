"""Use case for submitting a rent payment receipt."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy.orm import Session

from kost_console.application.use_cases.notifications import notify_payment_submitted
from kost_console.domain.entities import PAYMENT_STATUS_PENDING, Payment, User
from kost_console.infrastructure.repositories import PaymentRepository
from kost_console.utils import now_local

from .validators import normalize_amount, validate_period


def submit_payment_receipt(
    session: Session,
    *,
    member: User,
    payment_month: int,
    payment_year: int,
    amount: Decimal | int | float | str,
    receipt_path: str,
    description: str | None = None,
) -> Payment:
    """Register a pending payment for ``member`` and alert the administrators."""

    validate_period(payment_month, payment_year)
    value = normalize_amount(amount)
    receipt = (receipt_path or "").strip()
    if not receipt:
        raise ValueError("Bukti pembayaran wajib diunggah")

    payment = Payment(
        id=None,
        user_id=member.id,
        payment_month=payment_month,
        payment_year=payment_year,
        amount=value,
        receipt_path=receipt,
        status=PAYMENT_STATUS_PENDING,
        description=(description or "").strip() or None,
        created_at=now_local(),
    )
    saved = PaymentRepository(session).create(payment)
    notify_payment_submitted(session, payment=saved, member=member)
    return saved
