"""Use case for rejecting a pending payment."""

from sqlalchemy.orm import Session

from kost_console.application.use_cases.notifications import notify_payment_rejected
from kost_console.domain.entities import PAYMENT_STATUS_REJECTED, Payment, User
from kost_console.infrastructure.repositories import PaymentRepository
from kost_console.utils import now_local

from .validators import get_pending_payment


def reject_payment(
    session: Session, payment_id: int, *, reviewer: User, reason: str
) -> Payment:
    """Reject a pending payment, keeping the reason shown to the member."""

    cleaned_reason = (reason or "").strip()
    if not cleaned_reason:
        raise ValueError("Alasan penolakan wajib diisi")

    repository = PaymentRepository(session)
    payment = get_pending_payment(repository, payment_id)

    now = now_local()
    payment.status = PAYMENT_STATUS_REJECTED
    payment.rejection_reason = cleaned_reason
    payment.reviewed_by = reviewer.id
    payment.reviewed_at = now
    payment.updated_at = now
    saved = repository.update(payment)

    notify_payment_rejected(session, payment=saved)
    return saved
