"""Routes for the rent payment receipt workflow."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from kost_console.application.use_cases.payments import (
    PAYMENT_ALREADY_REVIEWED,
    PAYMENT_NOT_FOUND,
    approve_payment as approve_payment_uc,
    reject_payment as reject_payment_uc,
    send_payment_reminder as send_payment_reminder_uc,
    submit_payment_receipt as submit_payment_receipt_uc,
)
from kost_console.domain.entities import Payment, User
from kost_console.infrastructure.database import get_db
from kost_console.infrastructure.notifications import serialize_notification
from kost_console.infrastructure.repositories import PaymentRepository
from kost_console.interfaces.api.dependencies import get_current_active_user, require_admin
from kost_console.interfaces.api.schemas import (
    NotificationRead,
    PaymentRead,
    PaymentReceiptCreate,
    PaymentReject,
    PaymentReminderCreate,
)

router = APIRouter(prefix="/payments", tags=["payments"])


def _to_read_model(payment: Payment) -> PaymentRead:
    return PaymentRead(
        id=payment.id or 0,
        user_id=payment.user_id,
        payment_month=payment.payment_month,
        payment_year=payment.payment_year,
        amount=payment.amount,
        description=payment.description,
        receipt_path=payment.receipt_path,
        status=payment.status,
        rejection_reason=payment.rejection_reason,
        reviewed_by=payment.reviewed_by,
        reviewed_at=payment.reviewed_at,
        created_at=payment.created_at,
    )


def _review_error(exc: ValueError) -> HTTPException:
    detail = str(exc)
    if detail == PAYMENT_NOT_FOUND:
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)
    if detail == PAYMENT_ALREADY_REVIEWED:
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=detail)
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


@router.post(
    "/upload-receipt",
    response_model=PaymentRead,
    status_code=status.HTTP_201_CREATED,
)
def upload_receipt(
    receipt_in: PaymentReceiptCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> PaymentRead:
    """Register a receipt for the current member; administrators are notified."""

    try:
        payment = submit_payment_receipt_uc(
            db,
            member=current_user,
            payment_month=receipt_in.payment_month,
            payment_year=receipt_in.payment_year,
            amount=receipt_in.amount,
            receipt_path=receipt_in.receipt_path,
            description=receipt_in.description,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return _to_read_model(payment)


@router.get("/my-payments", response_model=list[PaymentRead])
def list_my_payments(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> list[PaymentRead]:
    return [_to_read_model(p) for p in PaymentRepository(db).list_for_user(current_user.id)]


@router.get("/pending", response_model=list[PaymentRead])
def list_pending_payments(
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
) -> list[PaymentRead]:
    """Return receipts waiting for review, oldest first."""

    return [_to_read_model(p) for p in PaymentRepository(db).list_by_status()]


@router.post(
    "/reminders",
    response_model=NotificationRead,
    status_code=status.HTTP_201_CREATED,
)
def send_payment_reminder(
    reminder_in: PaymentReminderCreate,
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
) -> NotificationRead:
    try:
        notification = send_payment_reminder_uc(
            db,
            user_id=reminder_in.user_id,
            payment_month=reminder_in.payment_month,
            payment_year=reminder_in.payment_year,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return NotificationRead.model_validate(serialize_notification(notification))


@router.get("/{payment_id}", response_model=PaymentRead)
def get_payment(
    payment_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
) -> PaymentRead:
    payment = PaymentRepository(db).get(payment_id)
    if payment is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=PAYMENT_NOT_FOUND)
    return _to_read_model(payment)


@router.post("/{payment_id}/approve", response_model=PaymentRead)
def approve_payment(
    payment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> PaymentRead:
    """Approve a pending receipt; the member receives a ``PAYMENT_APPROVED`` event."""

    try:
        payment = approve_payment_uc(db, payment_id, reviewer=current_user)
    except ValueError as exc:
        raise _review_error(exc) from exc
    return _to_read_model(payment)


@router.post("/{payment_id}/reject", response_model=PaymentRead)
def reject_payment(
    payment_id: int,
    reject_in: PaymentReject,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> PaymentRead:
    """Reject a pending receipt; the member receives a ``PAYMENT_REJECTED`` event."""

    try:
        payment = reject_payment_uc(
            db,
            payment_id,
            reviewer=current_user,
            reason=reject_in.rejection_reason,
        )
    except ValueError as exc:
        raise _review_error(exc) from exc
    return _to_read_model(payment)
