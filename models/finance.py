from datetime import date
from decimal import Decimal
from typing import Any

from sqlalchemy import JSON, Date, ForeignKey, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from core.database import Base
from core.enums import InvoiceStatus
from models.mixins import BaseModel

Money = Numeric(12, 2)


class FeeStructure(BaseModel, Base):
    """Fees charged for a class in an academic year"""

    __tablename__ = "fee_structure"

    class_id: Mapped[str] = mapped_column(
        String, ForeignKey("class_level.id", ondelete="CASCADE"), nullable=False
    )
    academic_year: Mapped[str] = mapped_column(String, nullable=False)
    tuition_fee: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))
    transport_fee: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))
    meals_fee: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))
    accommodation_fee: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))

    __table_args__ = (
        UniqueConstraint("class_id", "academic_year", name="uq_fee_structure_class_year"),
    )


class Invoice(BaseModel, Base):
    """
    A bill issued to a student.

    items holds [{"description": str, "amount": "12.50"}]; total is their sum
    and balance = total - amount_paid at all times.
    """

    __tablename__ = "invoice"

    student_id: Mapped[str] = mapped_column(
        String, ForeignKey("student.id"), nullable=False, index=True
    )
    academic_year: Mapped[str] = mapped_column(String, nullable=False)
    items: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(Money, nullable=False)
    amount_paid: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))
    balance: Mapped[Decimal] = mapped_column(Money, nullable=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    status: Mapped[str] = mapped_column(
        String, nullable=False, default=InvoiceStatus.UNPAID.value, index=True
    )


class Payment(BaseModel, Base):
    __tablename__ = "payment"

    invoice_id: Mapped[str] = mapped_column(
        String, ForeignKey("invoice.id", ondelete="CASCADE"), nullable=False, index=True
    )
    amount: Mapped[Decimal] = mapped_column(Money, nullable=False)
    payment_date: Mapped[date] = mapped_column(Date, nullable=False)
    method: Mapped[str] = mapped_column(String, nullable=False)
    transaction_id: Mapped[str | None] = mapped_column(String, nullable=True)
    recorded_by: Mapped[str | None] = mapped_column(
        String, ForeignKey("user.id", ondelete="SET NULL"), nullable=True
    )
