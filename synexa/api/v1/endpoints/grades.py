"""
Grades (notas) API

- POST   /grades                                         launch a grade (ADMIN, PROFESSOR)
- GET    /grades                                         list with filters
- GET    /grades/student/{id}/term/{term}                raw grades of a student in a term
- GET    /grades/class/{id}/term/{term}                  raw grades of a class in a term
- GET    /grades/student/{id}/term/{term}/summary        MAC/NPP/NPT/MT per subject
- GET    /grades/class/{id}/term/{term}/summary          term MT per student
- GET    /grades/student/{id}/subject/{id}/term/{term}   MT of one subject
- GET    /grades/{id}                                    get
- PUT    /grades/{id}                                    update (owner or ADMIN)
- DELETE /grades/{id}                                    delete (owner or ADMIN)
"""
from fastapi import APIRouter, Depends, Query, Path, status
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import datetime
from typing import Optional, List

from synexa.core.database import get_db
from synexa.models.grade import GradeType
from synexa.models.user import User, UserRole
from synexa.modules.auth.dependencies import require_roles, ACADEMIC_READ
from synexa.schemas.common import Page, MessageResponse
from synexa.schemas.grade import GradeCreate, GradeUpdate, GradeResponse
from synexa.services.grade_service import grade_service

router = APIRouter()

GRADE_WRITE = (UserRole.ADMIN, UserRole.PROFESSOR)


def _current_year() -> int:
    return datetime.utcnow().year


@router.post("", response_model=GradeResponse, status_code=status.HTTP_201_CREATED)
async def create_grade(
    data: GradeCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*GRADE_WRITE)),
):
    return await grade_service.create_grade(db, data, current_user)


@router.get("", response_model=Page[GradeResponse])
async def list_grades(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    student_id: Optional[str] = None,
    subject_id: Optional[str] = None,
    teacher_id: Optional[str] = None,
    class_id: Optional[str] = None,
    type: Optional[GradeType] = None,
    term: Optional[int] = Query(None, ge=1, le=3),
    year: Optional[int] = None,
    student_name: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*ACADEMIC_READ)),
):
    return await grade_service.list_grades(
        db, page, page_size,
        student_id=student_id, subject_id=subject_id, teacher_id=teacher_id, class_id=class_id,
        type=type, term=term, year=year, student_name=student_name,
    )


@router.get("/student/{student_id}/term/{term}", response_model=List[GradeResponse])
async def by_student_and_term(
    student_id: str,
    term: int = Path(..., ge=1, le=3),
    year: Optional[int] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*ACADEMIC_READ)),
):
    return await grade_service.by_student_and_term(db, student_id, term, year or _current_year())


@router.get("/class/{class_id}/term/{term}", response_model=List[GradeResponse])
async def by_class_and_term(
    class_id: str,
    term: int = Path(..., ge=1, le=3),
    year: Optional[int] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*ACADEMIC_READ)),
):
    return await grade_service.by_class_and_term(db, class_id, term, year or _current_year())


@router.get("/student/{student_id}/term/{term}/summary")
async def student_term_grades(
    student_id: str,
    term: int = Path(..., ge=1, le=3),
    year: Optional[int] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*ACADEMIC_READ)),
):
    return await grade_service.student_term_grades(db, student_id, term, year or _current_year())


@router.get("/class/{class_id}/term/{term}/summary")
async def class_term_summary(
    class_id: str,
    term: int = Path(..., ge=1, le=3),
    year: Optional[int] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*ACADEMIC_READ)),
):
    return await grade_service.class_term_summary(db, class_id, term, year or _current_year())


@router.get("/student/{student_id}/subject/{subject_id}/term/{term}")
async def subject_mt(
    student_id: str,
    subject_id: str,
    term: int = Path(..., ge=1, le=3),
    year: Optional[int] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*ACADEMIC_READ)),
):
    return await grade_service.subject_mt(db, student_id, subject_id, term, year or _current_year())


@router.get("/{grade_id}", response_model=GradeResponse)
async def get_grade(
    grade_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*ACADEMIC_READ)),
):
    return await grade_service.get_grade(db, grade_id)


@router.put("/{grade_id}", response_model=GradeResponse)
async def update_grade(
    grade_id: str,
    data: GradeUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*GRADE_WRITE)),
):
    return await grade_service.update_grade(db, grade_id, data, current_user)


@router.delete("/{grade_id}", response_model=MessageResponse)
async def delete_grade(
    grade_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*GRADE_WRITE)),
):
    await grade_service.delete_grade(db, grade_id, current_user)
    return {"message": "Nota removida com sucesso"}
