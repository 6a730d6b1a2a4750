"""SQLAlchemy model for rent payments."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Text

from kost_console.infrastructure.database import Base
from kost_console.utils import now_for_db


class PaymentModel(Base):
    """Database representation of a rent payment and its receipt."""

    __tablename__ = "payment"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("user.id"), nullable=False, index=True)
    payment_month = Column(Integer, nullable=False)
    payment_year = Column(Integer, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    description = Column(Text, nullable=True)
    receipt_path = Column(String(255), nullable=False)
    status = Column(String(20), nullable=False, index=True)
    rejection_reason = Column(Text, nullable=True)
    reviewed_by = Column(Integer, ForeignKey("user.id"), nullable=True)
    reviewed_at = Column(DateTime(), nullable=True)
    created_at = Column(DateTime(), nullable=False, default=now_for_db)
    updated_at = Column(DateTime(), nullable=True)


__all__ = ["PaymentModel"]
