"""
Report Cards (boletins) API - ADMIN, SECRETARIA, DIRETOR

- GET /report-cards/student/{id}          report card data (year, optional term)
- GET /report-cards/student/{id}/pdf      report card PDF, recorded as an issued document
- GET /report-cards/class/{id}            report cards of every student in a class
- GET /report-cards/class/{id}/students   students actively enrolled in the class for the year
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from synexa.core.database import get_db
from synexa.models.user import User
from synexa.modules.auth.dependencies import require_roles, OFFICE_READ
from synexa.services.report_card_service import report_card_service
from synexa.utils.responses import pdf_response

router = APIRouter()


@router.get("/student/{student_id}")
async def student_report_card(
    student_id: str,
    year: int = Query(..., ge=2020),
    term: Optional[int] = Query(None, ge=1, le=3),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*OFFICE_READ)),
):
    return await report_card_service.report_card(db, student_id, year, term)


@router.get("/student/{student_id}/pdf")
async def student_report_card_pdf(
    student_id: str,
    year: int = Query(..., ge=2020),
    term: Optional[int] = Query(None, ge=1, le=3),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*OFFICE_READ)),
):
    _, pdf, document = await report_card_service.report_card_pdf(
        db, student_id, year, term, issued_by=current_user.id
    )
    return pdf_response(pdf, document.filename)


@router.get("/class/{class_id}")
async def class_report_cards(
    class_id: str,
    year: int = Query(..., ge=2020),
    term: Optional[int] = Query(None, ge=1, le=3),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*OFFICE_READ)),
):
    return await report_card_service.class_report_cards(db, class_id, year, term)


@router.get("/class/{class_id}/students")
async def class_students(
    class_id: str,
    year: int = Query(..., ge=2020),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*OFFICE_READ)),
):
    return await report_card_service.class_students(db, class_id, year)
