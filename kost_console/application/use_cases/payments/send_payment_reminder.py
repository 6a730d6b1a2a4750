"""Use case for reminding a member about an unpaid period."""

from sqlalchemy.orm import Session

from kost_console.application.use_cases.notifications import notify_payment_reminder
from kost_console.domain.entities import Notification
from kost_console.infrastructure.repositories import UserRepository

from .validators import validate_period


def send_payment_reminder(
    session: Session, *, user_id: int, payment_month: int, payment_year: int
) -> Notification:
    validate_period(payment_month, payment_year)
    member = UserRepository(session).get(user_id)
    if member is None or not member.is_active:
        raise ValueError("Penghuni tidak ditemukan")
    return notify_payment_reminder(
        session, member=member, payment_month=payment_month, payment_year=payment_year
    )
