"""
Students API

- POST   /students                          create (ADMIN, SECRETARIA)
- GET    /students                          list (search, class_id, academic_year)
- GET    /students/{id}                     detail with parents and latest enrollment
- PUT    /students/{id}                     update (ADMIN, SECRETARIA)
- DELETE /students/{id}                     delete (ADMIN)
- POST   /students/{id}/parents             link a parent account (ADMIN, SECRETARIA)
- GET    /students/by-bi/{bi_number}        find by Bilhete de Identidade
- GET    /students/statistics               head counts (ADMIN, SECRETARIA, DIRETOR)
- POST   /students/{id}/notes               add a note (ADMIN, SECRETARIA, PROFESSOR)
- GET    /students/{id}/notes               notes, newest first
- POST   /students/{id}/timeline            add a timeline event (ADMIN, SECRETARIA)
- GET    /students/{id}/timeline            timeline, newest first
- GET    /students/{id}/invoices            invoices with payments (ADMIN, SECRETARIA, DIRETOR)
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional, List

from synexa.core.database import get_db
from synexa.models.user import User, UserRole
from synexa.modules.auth.dependencies import (
    require_roles,
    get_current_admin,
    SCHOOL_ADMIN,
    OFFICE_READ,
    ACADEMIC_READ,
)
from synexa.schemas.common import Page, MessageResponse
from synexa.schemas.student import (
    StudentCreate,
    StudentUpdate,
    StudentResponse,
    StudentDetail,
    EnrollmentSummary,
    ParentLinkRequest,
    StudentStatistics,
    NoteCreate,
    NoteResponse,
    TimelineEventCreate,
    TimelineEventResponse,
)
from synexa.schemas.finance import InvoiceResponse
from synexa.services.finance_service import finance_service
from synexa.services.student_service import student_service

router = APIRouter()

NOTE_AUTHORS = (UserRole.ADMIN, UserRole.SECRETARIA, UserRole.PROFESSOR)


def _detail(student, latest) -> StudentDetail:
    detail = StudentDetail.model_validate(student)
    if latest:
        detail.latest_enrollment = EnrollmentSummary.model_validate(latest)
    return detail


@router.post("", response_model=StudentResponse, status_code=status.HTTP_201_CREATED)
async def create_student(
    data: StudentCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*SCHOOL_ADMIN)),
):
    return await student_service.create_student(db, data)


@router.get("", response_model=Page[StudentResponse])
async def list_students(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    search: Optional[str] = Query(None, description="Name or student number"),
    class_id: Optional[str] = None,
    academic_year: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*ACADEMIC_READ)),
):
    return await student_service.list_students(
        db, page, page_size, search=search, class_id=class_id, academic_year=academic_year
    )


@router.get("/by-bi/{bi_number}", response_model=StudentResponse)
async def get_by_bi(
    bi_number: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*ACADEMIC_READ)),
):
    return await student_service.get_by_bi(db, bi_number)


@router.get("/statistics", response_model=StudentStatistics)
async def statistics(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*OFFICE_READ)),
):
    return await student_service.statistics(db)


@router.get("/{student_id}", response_model=StudentDetail)
async def get_student(
    student_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*ACADEMIC_READ)),
):
    student, latest = await student_service.get_student_detail(db, student_id)
    return _detail(student, latest)


@router.put("/{student_id}", response_model=StudentResponse)
async def update_student(
    student_id: str,
    data: StudentUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*SCHOOL_ADMIN)),
):
    return await student_service.update_student(db, student_id, data)


@router.delete("/{student_id}", response_model=MessageResponse)
async def delete_student(
    student_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
):
    await student_service.delete_student(db, student_id)
    return {"message": "Aluno removido com sucesso"}


@router.post("/{student_id}/parents", response_model=StudentDetail)
async def link_parent(
    student_id: str,
    data: ParentLinkRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*SCHOOL_ADMIN)),
):
    await student_service.link_parent(db, student_id, data.parent_id)
    student, latest = await student_service.get_student_detail(db, student_id)
    return _detail(student, latest)


# ==================== Notes & timeline ====================

@router.post("/{student_id}/notes", response_model=NoteResponse, status_code=status.HTTP_201_CREATED)
async def add_note(
    student_id: str,
    data: NoteCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*NOTE_AUTHORS)),
):
    return await student_service.add_note(db, student_id, data, author_id=current_user.id)


@router.get("/{student_id}/notes", response_model=List[NoteResponse])
async def list_notes(
    student_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*ACADEMIC_READ)),
):
    return await student_service.list_notes(db, student_id)


@router.post("/{student_id}/timeline", response_model=TimelineEventResponse, status_code=status.HTTP_201_CREATED)
async def add_timeline_event(
    student_id: str,
    data: TimelineEventCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*SCHOOL_ADMIN)),
):
    return await student_service.add_timeline_event(db, student_id, data, created_by=current_user.id)


@router.get("/{student_id}/timeline", response_model=List[TimelineEventResponse])
async def timeline(
    student_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*ACADEMIC_READ)),
):
    return await student_service.timeline(db, student_id)


@router.get("/{student_id}/invoices", response_model=List[InvoiceResponse])
async def student_invoices(
    student_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*OFFICE_READ)),
):
    history = await finance_service.student_history(db, student_id)
    return history["invoices"]
