from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import require_permission
from core.database import get_db, get_db_transactional
from core.enums import InvoiceStatus, PermissionAction, PermissionModule
from repositories.finance_repo import FeeStructureRepository, InvoiceRepository, PaymentRepository
from schemas.finance import (
    FeeStructureResponse,
    FeeStructureUpsert,
    InvoiceCreate,
    InvoiceResponse,
    OverdueSweepResponse,
    PaymentCreate,
    PaymentResponse,
)
from services.finance_service import FinanceService

router = APIRouter()

MODULE = PermissionModule.FINANCE


def _guard(action: PermissionAction):
    return [Depends(require_permission(action, MODULE))]


@router.get(
    "/fees/structures",
    response_model=list[FeeStructureResponse],
    dependencies=_guard(PermissionAction.READ),
)
async def list_fee_structures(
    db: Annotated[AsyncSession, Depends(get_db)],
    academic_year: str | None = None,
):
    return await FeeStructureRepository(db).list_structures(academic_year)


@router.post(
    "/fees/structures",
    response_model=FeeStructureResponse,
    dependencies=_guard(PermissionAction.CREATE),
)
async def upsert_fee_structure(
    data: FeeStructureUpsert, db: Annotated[AsyncSession, Depends(get_db_transactional)]
):
    """Create or replace the fees for (class, academic year)"""
    return await FinanceService(db).upsert_fee_structure(data)


@router.get(
    "/invoices",
    response_model=list[InvoiceResponse],
    dependencies=_guard(PermissionAction.READ),
)
async def list_invoices(
    db: Annotated[AsyncSession, Depends(get_db)],
    student_id: str | None = None,
    status_filter: InvoiceStatus | None = Query(None, alias="status"),
):
    return await InvoiceRepository(db).list_invoices(student_id=student_id, status=status_filter)


@router.post(
    "/invoices",
    response_model=InvoiceResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=_guard(PermissionAction.CREATE),
)
async def create_invoice(
    data: InvoiceCreate, db: Annotated[AsyncSession, Depends(get_db_transactional)]
):
    return await FinanceService(db).create_invoice(data)


@router.post(
    "/invoices/mark-overdue",
    response_model=OverdueSweepResponse,
    dependencies=_guard(PermissionAction.UPDATE),
)
async def mark_overdue(db: Annotated[AsyncSession, Depends(get_db_transactional)]):
    """Flag unpaid invoices past their due date; meant for a scheduled caller"""
    return OverdueSweepResponse(updated=await FinanceService(db).mark_overdue())


@router.get(
    "/invoices/{invoice_id}",
    response_model=InvoiceResponse,
    dependencies=_guard(PermissionAction.READ),
)
async def get_invoice(invoice_id: str, db: Annotated[AsyncSession, Depends(get_db)]):
    return await FinanceService(db).get_invoice(invoice_id)


@router.delete(
    "/invoices/{invoice_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=_guard(PermissionAction.DELETE),
)
async def delete_invoice(invoice_id: str, db: Annotated[AsyncSession, Depends(get_db_transactional)]):
    await FinanceService(db).delete_invoice(invoice_id)


@router.get(
    "/payments",
    response_model=list[PaymentResponse],
    dependencies=_guard(PermissionAction.READ),
)
async def list_payments(
    db: Annotated[AsyncSession, Depends(get_db)],
    invoice_id: str | None = None,
):
    return await PaymentRepository(db).list_payments(invoice_id)


@router.post(
    "/payments",
    response_model=PaymentResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=_guard(PermissionAction.CREATE),
)
async def record_payment(
    data: PaymentCreate, db: Annotated[AsyncSession, Depends(get_db_transactional)]
):
    return await FinanceService(db).record_payment(data)
