"""Persistence helpers for payment entities."""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

from sqlalchemy.orm import Session

from kost_console.domain.entities import PAYMENT_STATUS_PENDING, Payment
from kost_console.infrastructure.models import PaymentModel
from kost_console.utils import to_db, to_local


class PaymentRepository:
    """Provide CRUD operations for :class:`Payment` objects."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, payment_id: int) -> Payment | None:
        model = self.session.get(PaymentModel, payment_id)
        return self._to_entity(model) if model else None

    def list_for_user(self, user_id: int) -> Sequence[Payment]:
        query = (
            self.session.query(PaymentModel)
            .filter(PaymentModel.user_id == user_id)
            .order_by(
                PaymentModel.payment_year.desc(),
                PaymentModel.payment_month.desc(),
                PaymentModel.id.desc(),
            )
        )
        return [self._to_entity(model) for model in query.all()]

    def list_by_status(self, status: str = PAYMENT_STATUS_PENDING) -> Sequence[Payment]:
        query = (
            self.session.query(PaymentModel)
            .filter(PaymentModel.status == status)
            .order_by(PaymentModel.created_at.asc(), PaymentModel.id.asc())
        )
        return [self._to_entity(model) for model in query.all()]

    def create(self, payment: Payment) -> Payment:
        model = PaymentModel()
        self._apply_entity_to_model(model, payment)
        if payment.created_at is not None:
            model.created_at = to_db(payment.created_at)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def update(self, payment: Payment) -> Payment:
        if payment.id is None:
            raise ValueError("Payment id is required for updates")
        model = self.session.get(PaymentModel, payment.id)
        if model is None:
            msg = f"Payment with id {payment.id} not found"
            raise ValueError(msg)
        self._apply_entity_to_model(model, payment)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    @staticmethod
    def _apply_entity_to_model(model: PaymentModel, payment: Payment) -> None:
        model.user_id = payment.user_id
        model.payment_month = payment.payment_month
        model.payment_year = payment.payment_year
        model.amount = payment.amount
        model.description = payment.description
        model.receipt_path = payment.receipt_path
        model.status = payment.status
        model.rejection_reason = payment.rejection_reason
        model.reviewed_by = payment.reviewed_by
        model.reviewed_at = to_db(payment.reviewed_at)
        model.updated_at = to_db(payment.updated_at)

    @staticmethod
    def _to_entity(model: PaymentModel) -> Payment:
        return Payment(
            id=model.id,
            user_id=model.user_id,
            payment_month=model.payment_month,
            payment_year=model.payment_year,
            amount=Decimal(model.amount),
            description=model.description,
            receipt_path=model.receipt_path,
            status=model.status,
            rejection_reason=model.rejection_reason,
            reviewed_by=model.reviewed_by,
            reviewed_at=to_local(model.reviewed_at),
            created_at=to_local(model.created_at),
            updated_at=to_local(model.updated_at),
        )


__all__ = ["PaymentRepository"]
