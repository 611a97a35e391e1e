from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from core.context import get_current_actor_id
from core.enums import InvoiceStatus
from core.exceptions import ConflictError, ResourceNotFoundError, ValidationError
from core.logging import get_logger
from models.finance import FeeStructure, Invoice, Payment
from repositories.academic_repo import ClassLevelRepository
from repositories.finance_repo import FeeStructureRepository, InvoiceRepository, PaymentRepository
from repositories.student_repo import StudentRepository
from schemas.finance import FeeStructureUpsert, InvoiceCreate, PaymentCreate

logger = get_logger(__name__)

CENT = Decimal("0.01")


def to_money(value: Decimal) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


class FinanceService:
    """
    Fee structures, invoices and payments.

    An invoice always satisfies balance == total_amount - amount_paid;
    recording a payment is the only way amount_paid changes.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.fee_structures = FeeStructureRepository(db)
        self.invoices = InvoiceRepository(db)
        self.payments = PaymentRepository(db)
        self.classes = ClassLevelRepository(db)
        self.students = StudentRepository(db)

    async def upsert_fee_structure(self, data: FeeStructureUpsert) -> FeeStructure:
        if await self.classes.get_by_id(data.class_id) is None:
            raise ResourceNotFoundError("Class", data.class_id)

        fees = {
            "tuition_fee": to_money(data.tuition_fee),
            "transport_fee": to_money(data.transport_fee),
            "meals_fee": to_money(data.meals_fee),
            "accommodation_fee": to_money(data.accommodation_fee),
        }
        structure = await self.fee_structures.get_for_class_year(data.class_id, data.academic_year)
        if structure is None:
            return await self.fee_structures.create(
                FeeStructure(class_id=data.class_id, academic_year=data.academic_year, **fees)
            )

        for field, value in fees.items():
            setattr(structure, field, value)
        return await self.fee_structures.update(structure)

    async def get_invoice(self, invoice_id: str) -> Invoice:
        invoice = await self.invoices.get_by_id(invoice_id)
        if invoice is None:
            raise ResourceNotFoundError("Invoice", invoice_id)
        return invoice

    async def create_invoice(self, data: InvoiceCreate) -> Invoice:
        if await self.students.get_live_by_id(data.student_id) is None:
            raise ResourceNotFoundError("Student", data.student_id)

        items = [
            {"description": item.description, "amount": str(to_money(item.amount))}
            for item in data.items
        ]
        total = to_money(sum((item.amount for item in data.items), Decimal("0")))

        invoice = await self.invoices.create(
            Invoice(
                student_id=data.student_id,
                academic_year=data.academic_year,
                items=items,
                total_amount=total,
                amount_paid=Decimal("0.00"),
                balance=total,
                due_date=data.due_date,
                status=InvoiceStatus.UNPAID.value,
            )
        )
        logger.info("Invoice %s issued to student %s for %s", invoice.id, data.student_id, total)
        return invoice

    async def delete_invoice(self, invoice_id: str) -> None:
        invoice = await self.get_invoice(invoice_id)
        if to_money(invoice.amount_paid) > 0:
            raise ConflictError("Cannot delete an invoice with recorded payments")
        await self.invoices.delete(invoice)

    async def record_payment(self, data: PaymentCreate) -> Payment:
        invoice = await self.get_invoice(data.invoice_id)
        if invoice.status == InvoiceStatus.PAID.value:
            raise ValidationError("Invoice is already fully paid", field="invoice_id")

        amount = to_money(data.amount)
        balance = to_money(invoice.balance)
        if amount > balance:
            raise ValidationError(
                f"Payment amount {amount} exceeds the outstanding balance {balance}",
                field="amount",
            )

        payment = await self.payments.create(
            Payment(
                invoice_id=invoice.id,
                amount=amount,
                payment_date=data.payment_date,
                method=data.method.value,
                transaction_id=data.transaction_id,
                recorded_by=get_current_actor_id(),
            )
        )

        invoice.amount_paid = to_money(invoice.amount_paid) + amount
        invoice.balance = balance - amount
        invoice.status = (
            InvoiceStatus.PAID.value if invoice.balance == 0 else InvoiceStatus.PARTIALLY_PAID.value
        )
        await self.invoices.update(invoice)

        logger.info(
            "Payment %s of %s recorded on invoice %s (status %s)",
            payment.id,
            amount,
            invoice.id,
            invoice.status,
        )
        return payment

    async def mark_overdue(self, today: date | None = None) -> int:
        count = await self.invoices.mark_overdue(today or date.today())
        if count:
            logger.info("Marked %d invoice(s) overdue", count)
        return count
