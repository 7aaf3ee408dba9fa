from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal

from synexa.models.finance import InvoiceStatus, PaymentMethod
from synexa.schemas.common import StudentBrief


class InvoiceCreate(BaseModel):
    student_id: str
    amount: Decimal = Field(..., ge=Decimal("0.01"), decimal_places=2)
    due_date: date
    description: str = Field(..., min_length=1, max_length=200)
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=2020, le=2030)


class PayInvoiceRequest(BaseModel):
    amount: Decimal = Field(..., ge=Decimal("0.01"), decimal_places=2)
    method: PaymentMethod
    reference: Optional[str] = Field(None, max_length=100)


class PaymentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    amount: float
    method: PaymentMethod
    reference: Optional[str] = None
    paid_at: datetime


class InvoiceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    document_number: str
    student_id: str
    amount: float
    due_date: date
    description: str
    month: int
    year: int
    status: InvoiceStatus
    total_paid: float
    remaining_balance: float
    payments: List[PaymentResponse] = []
    student: Optional[StudentBrief] = None
    created_at: datetime
