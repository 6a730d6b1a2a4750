"""Utility helpers to generate and dispatch payment notifications."""

from __future__ import annotations

from sqlalchemy.orm import Session

from kost_console.domain.entities import (
    EVENT_PAYMENT_APPROVED,
    EVENT_PAYMENT_REJECTED,
    EVENT_PAYMENT_REMINDER,
    EVENT_PAYMENT_SUBMITTED,
    ROLE_ADMIN,
    Notification,
    Payment,
    User,
)
from kost_console.infrastructure.notifications import (
    dispatch_notification,
    dispatch_unread_count,
)
from kost_console.infrastructure.repositories import (
    NotificationRepository,
    UserRepository,
)
from kost_console.utils import now_local

_MONTH_NAMES = (
    "Januari",
    "Februari",
    "Maret",
    "April",
    "Mei",
    "Juni",
    "Juli",
    "Agustus",
    "September",
    "Oktober",
    "November",
    "Desember",
)


def period_label(month: int, year: int) -> str:
    """Return the Indonesian ``"<Bulan> <tahun>"`` label for a billing period."""

    return f"{_MONTH_NAMES[month - 1]} {year}"


def _persist_notification(
    session: Session,
    *,
    user_id: int,
    event_type: str,
    title: str,
    message: str,
    payload: dict | None = None,
) -> Notification:
    notification = Notification(
        id=None,
        user_id=user_id,
        event_type=event_type,
        title=title,
        message=message,
        payload=payload or {},
        created_at=now_local(),
        read_at=None,
    )
    repository = NotificationRepository(session)
    saved = repository.create(notification)
    dispatch_notification(saved)
    dispatch_unread_count(user_id, repository.count_unread_for_user(user_id))
    return saved


def _payment_payload(payment: Payment) -> dict[str, object]:
    return {
        "payment_id": payment.id,
        "status": payment.status,
        "payment_month": payment.payment_month,
        "payment_year": payment.payment_year,
        "amount": str(payment.amount),
    }


def notify_payment_submitted(
    session: Session, *, payment: Payment, member: User
) -> list[Notification]:
    """Tell every administrator that a receipt is waiting for review."""

    admin_ids = UserRepository(session).list_ids_by_role_alias(ROLE_ADMIN)
    message = (
        f"{member.name} mengunggah bukti pembayaran untuk "
        f"{period_label(payment.payment_month, payment.payment_year)}."
    )
    payload = {**_payment_payload(payment), "user_id": member.id, "user_name": member.name}
    return [
        _persist_notification(
            session,
            user_id=admin_id,
            event_type=EVENT_PAYMENT_SUBMITTED,
            title="Pembayaran baru",
            message=message,
            payload=payload,
        )
        for admin_id in admin_ids
    ]


def notify_payment_approved(session: Session, *, payment: Payment) -> Notification:
    """Inform the member that the administrator approved their payment."""

    message = (
        "Pembayaran Anda untuk "
        f"{period_label(payment.payment_month, payment.payment_year)} telah disetujui."
    )
    return _persist_notification(
        session,
        user_id=payment.user_id,
        event_type=EVENT_PAYMENT_APPROVED,
        title="Pembayaran disetujui",
        message=message,
        payload=_payment_payload(payment),
    )


def notify_payment_rejected(session: Session, *, payment: Payment) -> Notification:
    """Inform the member that their receipt was rejected and why."""

    message = (
        "Pembayaran Anda untuk "
        f"{period_label(payment.payment_month, payment.payment_year)} ditolak. "
        f"Alasan: {payment.rejection_reason}"
    )
    payload = {**_payment_payload(payment), "rejection_reason": payment.rejection_reason}
    return _persist_notification(
        session,
        user_id=payment.user_id,
        event_type=EVENT_PAYMENT_REJECTED,
        title="Pembayaran ditolak",
        message=message,
        payload=payload,
    )


def notify_payment_reminder(
    session: Session, *, member: User, payment_month: int, payment_year: int
) -> Notification:
    """Remind a member that the rent for a period is still due."""

    message = (
        "Jangan lupa melakukan pembayaran sewa untuk "
        f"{period_label(payment_month, payment_year)}."
    )
    return _persist_notification(
        session,
        user_id=member.id,
        event_type=EVENT_PAYMENT_REMINDER,
        title="Pengingat pembayaran",
        message=message,
        payload={"payment_month": payment_month, "payment_year": payment_year},
    )


__all__ = [
    "notify_payment_approved",
    "notify_payment_rejected",
    "notify_payment_reminder",
    "notify_payment_submitted",
    "period_label",
]
