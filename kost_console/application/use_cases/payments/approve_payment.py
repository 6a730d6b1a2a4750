"""Use case for approving a pending payment."""

from sqlalchemy.orm import Session

from kost_console.application.use_cases.notifications import notify_payment_approved
from kost_console.domain.entities import PAYMENT_STATUS_APPROVED, Payment, User
from kost_console.infrastructure.repositories import PaymentRepository
from kost_console.utils import now_local

from .validators import get_pending_payment


def approve_payment(session: Session, payment_id: int, *, reviewer: User) -> Payment:
    """Approve a pending payment and notify its owner."""

    repository = PaymentRepository(session)
    payment = get_pending_payment(repository, payment_id)

    now = now_local()
    payment.status = PAYMENT_STATUS_APPROVED
    payment.rejection_reason = None
    payment.reviewed_by = reviewer.id
    payment.reviewed_at = now
    payment.updated_at = now
    saved = repository.update(payment)

    notify_payment_approved(session, payment=saved)
    return saved
