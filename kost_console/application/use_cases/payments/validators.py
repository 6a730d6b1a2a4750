"""Validation helpers for payment use cases."""

from decimal import Decimal, InvalidOperation

from kost_console.domain.entities import Payment
from kost_console.infrastructure.repositories import PaymentRepository

PAYMENT_NOT_FOUND = "Pembayaran tidak ditemukan"
PAYMENT_ALREADY_REVIEWED = "Pembayaran sudah diproses"


def validate_period(payment_month: int, payment_year: int) -> None:
    if not 1 <= payment_month <= 12:
        raise ValueError("Bulan pembayaran harus antara 1 dan 12")
    if payment_year < 2000:
        raise ValueError("Tahun pembayaran tidak valid")


def normalize_amount(amount: Decimal | int | float | str) -> Decimal:
    """Return ``amount`` as a positive :class:`Decimal`."""

    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError) as exc:
        raise ValueError("Jumlah pembayaran tidak valid") from exc
    if not value.is_finite() or value <= 0:
        raise ValueError("Jumlah pembayaran harus lebih dari 0")
    return value


def get_pending_payment(repository: PaymentRepository, payment_id: int) -> Payment:
    """Return the payment identified by ``payment_id`` if it can still be reviewed."""

    payment = repository.get(payment_id)
    if payment is None:
        raise ValueError(PAYMENT_NOT_FOUND)
    if not payment.is_pending():
        raise ValueError(PAYMENT_ALREADY_REVIEWED)
    return payment
