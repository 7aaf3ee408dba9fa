"""
Parents Portal API - PARENT accounts only

- GET /parents-portal/profile
- GET /parents-portal/students/{id}/grades
- GET /parents-portal/students/{id}/payments
- GET /parents-portal/messages
- GET /parents-portal/students/{id}/documents
- GET /parents-portal/students/{id}/documents/{doc_id}/download
"""
from enum import Enum

from fastapi import APIRouter, Depends, Query
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from synexa.core.database import get_db
from synexa.models.finance import InvoiceStatus
from synexa.models.user import User
from synexa.modules.auth.dependencies import get_current_parent
from synexa.services.parent_portal_service import parent_portal_service, PAYMENTS_LIMIT

router = APIRouter()


class PaymentStatusFilter(str, Enum):
    ALL = "ALL"
    PENDENTE = "PENDENTE"
    PAGA = "PAGA"
    VENCIDA = "VENCIDA"


@router.get("/profile")
async def profile(
    db: AsyncSession = Depends(get_db),
    parent: User = Depends(get_current_parent),
):
    return await parent_portal_service.profile(db, parent)


@router.get("/students/{student_id}/grades")
async def student_grades(
    student_id: str,
    year: Optional[int] = Query(None, ge=2020),
    db: AsyncSession = Depends(get_db),
    parent: User = Depends(get_current_parent),
):
    return await parent_portal_service.student_grades(db, parent, student_id, year)


@router.get("/students/{student_id}/payments")
async def student_payments(
    student_id: str,
    year: Optional[int] = Query(None, ge=2020),
    status: PaymentStatusFilter = PaymentStatusFilter.ALL,
    limit: int = Query(PAYMENTS_LIMIT, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    parent: User = Depends(get_current_parent),
):
    invoice_status = None if status == PaymentStatusFilter.ALL else InvoiceStatus(status.value)
    return await parent_portal_service.student_payments(
        db, parent, student_id, year=year, status=invoice_status, limit=limit
    )


@router.get("/messages")
async def school_messages(
    db: AsyncSession = Depends(get_db),
    parent: User = Depends(get_current_parent),
):
    return await parent_portal_service.school_messages(db)


@router.get("/students/{student_id}/documents")
async def student_documents(
    student_id: str,
    db: AsyncSession = Depends(get_db),
    parent: User = Depends(get_current_parent),
):
    return await parent_portal_service.student_documents(db, parent, student_id)


@router.get("/students/{student_id}/documents/{document_id}/download")
async def download_document(
    student_id: str,
    document_id: str,
    db: AsyncSession = Depends(get_db),
    parent: User = Depends(get_current_parent),
):
    document, path = await parent_portal_service.download_document(db, parent, student_id, document_id)
    return FileResponse(path=path, filename=document.filename, media_type="application/pdf")
