"""Tests for the payment workflow use cases and the events they emit."""

from __future__ import annotations

from decimal import Decimal

import pytest

from kost_console.application.use_cases import (
    approve_payment,
    create_user,
    reject_payment,
    send_payment_reminder,
    submit_payment_receipt,
)
from kost_console.application.use_cases.notifications import events as notification_events
from kost_console.domain.entities import (
    EVENT_PAYMENT_APPROVED,
    EVENT_PAYMENT_REJECTED,
    EVENT_PAYMENT_REMINDER,
    EVENT_PAYMENT_SUBMITTED,
    PAYMENT_STATUS_APPROVED,
    PAYMENT_STATUS_PENDING,
    PAYMENT_STATUS_REJECTED,
    ROLE_ADMIN,
)
from kost_console.infrastructure.repositories import NotificationRepository


@pytest.fixture()
def pushed(monkeypatch):
    """Capture realtime pushes instead of sending them to sockets."""

    frames = []
    monkeypatch.setattr(
        notification_events,
        "dispatch_notification",
        lambda notification: frames.append(("notification", notification)),
    )
    monkeypatch.setattr(
        notification_events,
        "dispatch_unread_count",
        lambda user_id, count: frames.append(("unread_count", user_id, count)),
    )
    return frames


def _submit(db_session, member, **overrides):
    values = {
        "member": member,
        "payment_month": 5,
        "payment_year": 2024,
        "amount": "850000",
        "receipt_path": "receipts/a1.jpg",
    }
    values.update(overrides)
    return submit_payment_receipt(db_session, **values)


def test_submit_receipt_creates_pending_payment_for_every_admin(
    db_session, admin_user, member_user, pushed
):
    second_admin = create_user(
        db_session,
        name="Pak Kost",
        email="pak@kost.test",
        password="Rahasia123",
        role_alias=ROLE_ADMIN,
    )

    payment = _submit(db_session, member_user, description="  ")

    assert payment.id is not None
    assert payment.status == PAYMENT_STATUS_PENDING
    assert payment.amount == Decimal("850000")
    assert payment.description is None

    events = [frame for frame in pushed if frame[0] == "notification"]
    assert {frame[1].user_id for frame in events} == {admin_user.id, second_admin.id}
    assert all(frame[1].event_type == EVENT_PAYMENT_SUBMITTED for frame in events)
    assert ("unread_count", admin_user.id, 1) in pushed


@pytest.mark.parametrize(
    ("overrides", "message"),
    [
        ({"payment_month": 0}, "Bulan pembayaran harus antara 1 dan 12"),
        ({"payment_year": 1999}, "Tahun pembayaran tidak valid"),
        ({"amount": "0"}, "Jumlah pembayaran harus lebih dari 0"),
        ({"amount": "banyak"}, "Jumlah pembayaran tidak valid"),
        ({"receipt_path": " "}, "Bukti pembayaran wajib diunggah"),
    ],
)
def test_submit_receipt_validation(db_session, member_user, pushed, overrides, message):
    with pytest.raises(ValueError, match=message):
        _submit(db_session, member_user, **overrides)

    assert pushed == []


def test_approve_payment_notifies_owner(db_session, admin_user, member_user, pushed):
    payment = _submit(db_session, member_user)
    pushed.clear()

    approved = approve_payment(db_session, payment.id, reviewer=admin_user)

    assert approved.status == PAYMENT_STATUS_APPROVED
    assert approved.reviewed_by == admin_user.id
    assert approved.reviewed_at is not None
    kind, notification = pushed[0]
    assert kind == "notification"
    assert notification.user_id == member_user.id
    assert notification.event_type == EVENT_PAYMENT_APPROVED
    assert notification.payload["payment_id"] == payment.id
    assert pushed[1] == ("unread_count", member_user.id, 1)


def test_reviewed_payment_cannot_be_reviewed_again(db_session, admin_user, member_user, pushed):
    payment = _submit(db_session, member_user)
    approve_payment(db_session, payment.id, reviewer=admin_user)

    with pytest.raises(ValueError, match="Pembayaran sudah diproses"):
        reject_payment(db_session, payment.id, reviewer=admin_user, reason="Salah")
    with pytest.raises(ValueError, match="Pembayaran tidak ditemukan"):
        approve_payment(db_session, 404, reviewer=admin_user)


def test_reject_payment_keeps_reason(db_session, admin_user, member_user, pushed):
    payment = _submit(db_session, member_user)

    with pytest.raises(ValueError, match="Alasan penolakan wajib diisi"):
        reject_payment(db_session, payment.id, reviewer=admin_user, reason="  ")

    rejected = reject_payment(
        db_session, payment.id, reviewer=admin_user, reason=" Nominal tidak sesuai "
    )

    assert rejected.status == PAYMENT_STATUS_REJECTED
    assert rejected.rejection_reason == "Nominal tidak sesuai"
    notifications = NotificationRepository(db_session).list_for_user(member_user.id)
    assert notifications[0].event_type == EVENT_PAYMENT_REJECTED
    assert "Nominal tidak sesuai" in notifications[0].message


def test_send_payment_reminder(db_session, member_user, pushed):
    notification = send_payment_reminder(
        db_session, user_id=member_user.id, payment_month=12, payment_year=2024
    )

    assert notification.event_type == EVENT_PAYMENT_REMINDER
    assert notification.title == "Pengingat pembayaran"
    assert "Desember 2024" in notification.message
    assert notification.is_read is False

    with pytest.raises(ValueError, match="Penghuni tidak ditemukan"):
        send_payment_reminder(db_session, user_id=999, payment_month=1, payment_year=2025)


def test_period_label_uses_indonesian_month_names():
    assert notification_events.period_label(1, 2025) == "Januari 2025"
    assert notification_events.period_label(8, 2024) == "Agustus 2024"


def test_create_user_rejects_duplicates_and_unknown_roles(db_session, member_user):
    with pytest.raises(ValueError, match="Email sudah terdaftar"):
        create_user(db_session, name="X", email=member_user.email, password="x")
    with pytest.raises(ValueError, match="Peran tidak diizinkan"):
        create_user(db_session, name="X", email="x@kost.test", password="x", role_alias="owner")
