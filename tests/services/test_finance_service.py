"""FinanceService: invoice totals, payments and the overdue sweep"""

from datetime import date
from decimal import Decimal

import pytest

from core.enums import InvoiceStatus, PaymentMethod
from core.exceptions import ConflictError, ResourceNotFoundError, ValidationError
from schemas.finance import FeeStructureUpsert, InvoiceCreate, InvoiceItem, PaymentCreate
from services.finance_service import FinanceService


def _invoice(student_id: str, *amounts: str, due: date = date(2025, 1, 31)) -> InvoiceCreate:
    return InvoiceCreate(
        student_id=student_id,
        academic_year="2024-2025",
        items=[
            InvoiceItem(description=f"Item {i}", amount=Decimal(amount))
            for i, amount in enumerate(amounts, start=1)
        ],
        due_date=due,
    )


def _payment(invoice_id: str, amount: str) -> PaymentCreate:
    return PaymentCreate(
        invoice_id=invoice_id,
        amount=Decimal(amount),
        payment_date=date(2025, 1, 10),
        method=PaymentMethod.CASH,
    )


@pytest.mark.asyncio
async def test_invoice_total_is_sum_of_items(test_db, school_data):
    invoice = await FinanceService(test_db).create_invoice(
        _invoice(school_data["student_id"], "500.00", "120.50")
    )

    assert invoice.total_amount == Decimal("620.50")
    assert invoice.balance == Decimal("620.50")
    assert invoice.amount_paid == Decimal("0")
    assert invoice.status == InvoiceStatus.UNPAID.value
    assert invoice.items[1] == {"description": "Item 2", "amount": "120.50"}


@pytest.mark.asyncio
async def test_invoice_for_unknown_student(test_db, school_data):
    with pytest.raises(ResourceNotFoundError):
        await FinanceService(test_db).create_invoice(_invoice("missing", "10.00"))


@pytest.mark.asyncio
async def test_partial_then_full_payment(test_db, school_data):
    service = FinanceService(test_db)
    invoice = await service.create_invoice(_invoice(school_data["student_id"], "300.00"))

    await service.record_payment(_payment(invoice.id, "100.00"))
    invoice = await service.get_invoice(invoice.id)
    assert invoice.status == InvoiceStatus.PARTIALLY_PAID.value
    assert Decimal(invoice.balance) == Decimal("200.00")
    assert Decimal(invoice.amount_paid) == Decimal("100.00")

    await service.record_payment(_payment(invoice.id, "200.00"))
    invoice = await service.get_invoice(invoice.id)
    assert invoice.status == InvoiceStatus.PAID.value
    assert Decimal(invoice.balance) == Decimal("0")


@pytest.mark.asyncio
async def test_overpayment_rejected(test_db, school_data):
    service = FinanceService(test_db)
    invoice = await service.create_invoice(_invoice(school_data["student_id"], "50.00"))

    with pytest.raises(ValidationError, match="exceeds the outstanding balance"):
        await service.record_payment(_payment(invoice.id, "50.01"))


@pytest.mark.asyncio
async def test_payment_on_paid_invoice_rejected(test_db, school_data):
    service = FinanceService(test_db)
    invoice = await service.create_invoice(_invoice(school_data["student_id"], "50.00"))
    await service.record_payment(_payment(invoice.id, "50.00"))

    with pytest.raises(ValidationError, match="already fully paid"):
        await service.record_payment(_payment(invoice.id, "1.00"))


@pytest.mark.asyncio
async def test_invoice_with_payments_cannot_be_deleted(test_db, school_data):
    service = FinanceService(test_db)
    invoice = await service.create_invoice(_invoice(school_data["student_id"], "80.00"))
    await service.record_payment(_payment(invoice.id, "10.00"))

    with pytest.raises(ConflictError):
        await service.delete_invoice(invoice.id)


@pytest.mark.asyncio
async def test_mark_overdue_only_touches_open_past_due_invoices(test_db, school_data):
    service = FinanceService(test_db)
    student_id = school_data["student_id"]
    past_due = await service.create_invoice(_invoice(student_id, "10.00", due=date(2025, 1, 1)))
    partly_paid = await service.create_invoice(_invoice(student_id, "10.00", due=date(2025, 1, 1)))
    await service.record_payment(_payment(partly_paid.id, "5.00"))
    paid = await service.create_invoice(_invoice(student_id, "10.00", due=date(2025, 1, 1)))
    await service.record_payment(_payment(paid.id, "10.00"))
    not_due = await service.create_invoice(_invoice(student_id, "10.00", due=date(2025, 3, 1)))

    updated = await service.mark_overdue(today=date(2025, 2, 1))

    assert updated == 2
    statuses = {
        invoice_id: (await service.get_invoice(invoice_id)).status
        for invoice_id in (past_due.id, partly_paid.id, paid.id, not_due.id)
    }
    assert statuses == {
        past_due.id: InvoiceStatus.OVERDUE.value,
        partly_paid.id: InvoiceStatus.OVERDUE.value,
        paid.id: InvoiceStatus.PAID.value,
        not_due.id: InvoiceStatus.UNPAID.value,
    }


@pytest.mark.asyncio
async def test_fee_structure_upsert_replaces_existing(test_db, school_data):
    service = FinanceService(test_db)
    data = FeeStructureUpsert(
        class_id=school_data["class_id"], academic_year="2024-2025", tuition_fee=Decimal("1000")
    )

    first = await service.upsert_fee_structure(data)
    second = await service.upsert_fee_structure(
        data.model_copy(update={"tuition_fee": Decimal("1200"), "meals_fee": Decimal("150")})
    )

    assert first.id == second.id
    assert Decimal(second.tuition_fee) == Decimal("1200.00")
    assert Decimal(second.meals_fee) == Decimal("150.00")


@pytest.mark.asyncio
async def test_fee_structure_for_unknown_class(test_db, school_data):
    with pytest.raises(ResourceNotFoundError):
        await FinanceService(test_db).upsert_fee_structure(
            FeeStructureUpsert(class_id="missing", academic_year="2024-2025")
        )
