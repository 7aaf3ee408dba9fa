"""
Documents API - certificates, declarations and transcripts (ADMIN, SECRETARIA, DIRETOR)

Each document comes in three flavours:
- POST /documents/{kind}            data only
- POST /documents/{kind}/pdf        PDF download (stored as an issued document)
- POST /documents/{kind}/with-pdf   data plus the PDF as base64
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from synexa.core.database import get_db
from synexa.models.user import User
from synexa.modules.auth.dependencies import require_roles, OFFICE_READ
from synexa.schemas.document import CertificateRequest, DeclarationRequest, TranscriptRequest
from synexa.services.document_service import document_service
from synexa.utils.responses import pdf_response

router = APIRouter()


# ==================== Certificate ====================

@router.post("/certificate")
async def certificate(
    data: CertificateRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*OFFICE_READ)),
):
    return await document_service.certificate_data(db, data.student_id, data.year)


@router.post("/certificate/pdf")
async def certificate_pdf(
    data: CertificateRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*OFFICE_READ)),
):
    _, pdf, document = await document_service.certificate_pdf(
        db, data.student_id, data.year, issued_by=current_user.id
    )
    return pdf_response(pdf, document.filename)


@router.post("/certificate/with-pdf")
async def certificate_with_pdf(
    data: CertificateRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*OFFICE_READ)),
):
    result = await document_service.certificate_pdf(db, data.student_id, data.year, issued_by=current_user.id)
    return document_service.with_pdf(*result)


# ==================== Declaration ====================

@router.post("/declaration")
async def declaration(
    data: DeclarationRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*OFFICE_READ)),
):
    return await document_service.declaration_data(db, data.student_id, data.year, data.purpose)


@router.post("/declaration/pdf")
async def declaration_pdf(
    data: DeclarationRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*OFFICE_READ)),
):
    _, pdf, document = await document_service.declaration_pdf(
        db, data.student_id, data.year, data.purpose, issued_by=current_user.id
    )
    return pdf_response(pdf, document.filename)


@router.post("/declaration/with-pdf")
async def declaration_with_pdf(
    data: DeclarationRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*OFFICE_READ)),
):
    result = await document_service.declaration_pdf(
        db, data.student_id, data.year, data.purpose, issued_by=current_user.id
    )
    return document_service.with_pdf(*result)


# ==================== Transcript ====================

@router.post("/transcript")
async def transcript(
    data: TranscriptRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*OFFICE_READ)),
):
    return await document_service.transcript_data(db, data.student_id, data.start_year, data.end_year)


@router.post("/transcript/pdf")
async def transcript_pdf(
    data: TranscriptRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*OFFICE_READ)),
):
    _, pdf, document = await document_service.transcript_pdf(
        db, data.student_id, data.start_year, data.end_year, issued_by=current_user.id
    )
    return pdf_response(pdf, document.filename)


@router.post("/transcript/with-pdf")
async def transcript_with_pdf(
    data: TranscriptRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*OFFICE_READ)),
):
    result = await document_service.transcript_pdf(
        db, data.student_id, data.start_year, data.end_year, issued_by=current_user.id
    )
    return document_service.with_pdf(*result)
