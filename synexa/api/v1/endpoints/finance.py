"""
Finance API - propinas and payments

- POST   /finance/invoices                      create (ADMIN, SECRETARIA)
- GET    /finance/invoices                      list with filters
- GET    /finance/invoices/{id}                 get
- POST   /finance/invoices/{id}/pay             register a payment (ADMIN, SECRETARIA)
- GET    /finance/invoices/{id}/pdf             invoice / receipt PDF
- POST   /finance/invoices/{id}/cancel          cancel (ADMIN)
- DELETE /finance/invoices/{id}                 delete (ADMIN)
- GET    /finance/students/{id}/history         a student's invoices with summary
- GET    /finance/reports/summary               totals per status and method (ADMIN, DIRETOR)
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import date
from typing import Optional, List

from pydantic import BaseModel

from synexa.core.database import get_db
from synexa.models.finance import InvoiceStatus
from synexa.models.user import User
from synexa.modules.auth.dependencies import (
    require_roles,
    get_current_admin,
    SCHOOL_ADMIN,
    OFFICE_READ,
    MANAGEMENT,
)
from synexa.schemas.common import Page, MessageResponse, StudentBrief
from synexa.schemas.finance import InvoiceCreate, PayInvoiceRequest, InvoiceResponse
from synexa.services.finance_service import finance_service
from synexa.utils.responses import pdf_response

router = APIRouter()


class InvoiceSummary(BaseModel):
    total_invoices: int
    total_amount: float
    total_paid: float
    total_pending: float
    overdue_count: int


class StudentFinancialHistory(BaseModel):
    student: StudentBrief
    invoices: List[InvoiceResponse]
    summary: InvoiceSummary


@router.post("/invoices", response_model=InvoiceResponse, status_code=status.HTTP_201_CREATED)
async def create_invoice(
    data: InvoiceCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*SCHOOL_ADMIN)),
):
    return await finance_service.create_invoice(db, data, created_by=current_user.id)


@router.get("/invoices", response_model=Page[InvoiceResponse])
async def list_invoices(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    student_id: Optional[str] = None,
    status: Optional[InvoiceStatus] = None,
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*OFFICE_READ)),
):
    return await finance_service.list_invoices(
        db, page, page_size,
        student_id=student_id, status=status, month=month, year=year,
        start_date=start_date, end_date=end_date,
    )


@router.get("/invoices/{invoice_id}", response_model=InvoiceResponse)
async def get_invoice(
    invoice_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*OFFICE_READ)),
):
    return await finance_service.get_invoice(db, invoice_id)


@router.post("/invoices/{invoice_id}/pay", response_model=InvoiceResponse)
async def pay_invoice(
    invoice_id: str,
    data: PayInvoiceRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*SCHOOL_ADMIN)),
):
    return await finance_service.pay_invoice(db, invoice_id, data, received_by=current_user.id)


@router.get("/invoices/{invoice_id}/pdf")
async def invoice_pdf(
    invoice_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*OFFICE_READ)),
):
    _, pdf, document = await finance_service.invoice_pdf(db, invoice_id, issued_by=current_user.id)
    return pdf_response(pdf, document.filename)


@router.post("/invoices/{invoice_id}/cancel", response_model=InvoiceResponse)
async def cancel_invoice(
    invoice_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
):
    return await finance_service.cancel_invoice(db, invoice_id)


@router.delete("/invoices/{invoice_id}", response_model=MessageResponse)
async def delete_invoice(
    invoice_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
):
    await finance_service.delete_invoice(db, invoice_id)
    return {"message": "Fatura removida com sucesso"}


@router.get("/students/{student_id}/history", response_model=StudentFinancialHistory)
async def student_history(
    student_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*OFFICE_READ)),
):
    return await finance_service.student_history(db, student_id)


@router.get("/reports/summary")
async def summary_report(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*MANAGEMENT)),
):
    return await finance_service.summary_report(db, start_date, end_date)
