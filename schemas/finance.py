from datetime import date, datetime
from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from core.enums import InvoiceStatus, PaymentMethod

NonNegativeMoney = Annotated[Decimal, Field(ge=0, max_digits=12, decimal_places=2)]


class FeeStructureUpsert(BaseModel):
    class_id: str = Field(..., min_length=1)
    academic_year: str = Field(..., min_length=4)
    tuition_fee: NonNegativeMoney = Decimal("0")
    transport_fee: NonNegativeMoney = Decimal("0")
    meals_fee: NonNegativeMoney = Decimal("0")
    accommodation_fee: NonNegativeMoney = Decimal("0")


class FeeStructureResponse(BaseModel):
    id: str
    class_id: str
    academic_year: str
    tuition_fee: Decimal
    transport_fee: Decimal
    meals_fee: Decimal
    accommodation_fee: Decimal

    model_config = ConfigDict(from_attributes=True)


class InvoiceItem(BaseModel):
    description: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)


class InvoiceCreate(BaseModel):
    student_id: str = Field(..., min_length=1)
    academic_year: str = Field(..., min_length=4)
    items: list[InvoiceItem] = Field(..., min_length=1)
    due_date: date


class InvoiceResponse(BaseModel):
    id: str
    student_id: str
    academic_year: str
    items: list[InvoiceItem]
    total_amount: Decimal
    amount_paid: Decimal
    balance: Decimal
    due_date: date
    status: InvoiceStatus
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PaymentCreate(BaseModel):
    invoice_id: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    payment_date: date
    method: PaymentMethod
    transaction_id: str | None = None


class PaymentResponse(BaseModel):
    id: str
    invoice_id: str
    amount: Decimal
    payment_date: date
    method: PaymentMethod
    transaction_id: str | None = None
    recorded_by: str | None = None

    model_config = ConfigDict(from_attributes=True)


class OverdueSweepResponse(BaseModel):
    updated: int
