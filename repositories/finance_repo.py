from datetime import date
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.enums import InvoiceStatus, PermissionModule
from models.finance import FeeStructure, Invoice, Payment
from repositories.auditable_repo import AuditableRepository, audit_fields
from repositories.base import BaseRepository


class FeeStructureRepository(BaseRepository[FeeStructure]):
    def __init__(self, db: AsyncSession):
        super().__init__(db, FeeStructure)

    async def get_for_class_year(self, class_id: str, academic_year: str) -> FeeStructure | None:
        result = await self.db.execute(
            select(FeeStructure).where(
                FeeStructure.class_id == class_id,
                FeeStructure.academic_year == academic_year,
            )
        )
        return result.scalar_one_or_none()

    async def list_structures(self, academic_year: str | None = None) -> list[FeeStructure]:
        query = select(FeeStructure).order_by(FeeStructure.academic_year.desc())
        if academic_year:
            query = query.where(FeeStructure.academic_year == academic_year)
        result = await self.db.execute(query)
        return list(result.scalars().all())


class InvoiceRepository(AuditableRepository[Invoice]):
    entity_type = "invoice"
    module = PermissionModule.FINANCE

    def __init__(self, db: AsyncSession):
        super().__init__(db, Invoice)

    def _serialize_for_audit(self, obj: Invoice) -> dict[str, Any]:
        return audit_fields(obj, "id", "student_id", "total_amount", "balance", "status")

    async def list_invoices(
        self, student_id: str | None = None, status: InvoiceStatus | None = None
    ) -> list[Invoice]:
        query = select(Invoice).order_by(Invoice.due_date.desc())
        if student_id:
            query = query.where(Invoice.student_id == student_id)
        if status:
            query = query.where(Invoice.status == status.value)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def mark_overdue(self, today: date) -> int:
        """Flag every open invoice whose due date has passed; returns the count"""
        result = await self.db.execute(
            select(Invoice).where(
                Invoice.due_date < today,
                Invoice.status.in_(
                    [InvoiceStatus.UNPAID.value, InvoiceStatus.PARTIALLY_PAID.value]
                ),
            )
        )
        invoices = list(result.scalars().all())
        for invoice in invoices:
            invoice.status = InvoiceStatus.OVERDUE.value
        await self.db.flush()
        return len(invoices)


class PaymentRepository(AuditableRepository[Payment]):
    entity_type = "payment"
    module = PermissionModule.FINANCE

    def __init__(self, db: AsyncSession):
        super().__init__(db, Payment)

    def _serialize_for_audit(self, obj: Payment) -> dict[str, Any]:
        return audit_fields(obj, "id", "invoice_id", "amount", "method", "transaction_id")

    async def list_payments(self, invoice_id: str | None = None) -> list[Payment]:
        query = select(Payment).order_by(Payment.payment_date.desc())
        if invoice_id:
            query = query.where(Payment.invoice_id == invoice_id)
        result = await self.db.execute(query)
        return list(result.scalars().all())
