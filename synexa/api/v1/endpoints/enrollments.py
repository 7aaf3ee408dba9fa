"""
Enrollments (matrículas) API

- POST   /enrollments                     enroll an existing student (ADMIN, SECRETARIA)
- POST   /enrollments/with-student        register a student and enroll in one step
- GET    /enrollments                     list (year, status, class_id)
- GET    /enrollments/years               academic years with enrollments
- GET    /enrollments/student/{id}        a student's enrollment history
- GET    /enrollments/year/{year}         enrollments of a year
- GET    /enrollments/class/{id}          enrollments of a class
- GET    /enrollments/{id}                get
- PUT    /enrollments/{id}                change status or class
- DELETE /enrollments/{id}                cancel (status CANCELLED)
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional, List

from synexa.core.database import get_db
from synexa.models.enrollment import EnrollmentStatus
from synexa.models.user import User
from synexa.modules.auth.dependencies import require_roles, SCHOOL_ADMIN, OFFICE_READ
from synexa.schemas.common import Page
from synexa.schemas.enrollment import (
    EnrollmentCreate,
    EnrollmentWithStudentCreate,
    EnrollmentUpdate,
    EnrollmentResponse,
)
from synexa.services.enrollment_service import enrollment_service

router = APIRouter()


@router.post("", response_model=EnrollmentResponse, status_code=status.HTTP_201_CREATED)
async def create_enrollment(
    data: EnrollmentCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*SCHOOL_ADMIN)),
):
    return await enrollment_service.create_enrollment(db, data)


@router.post("/with-student", response_model=EnrollmentResponse, status_code=status.HTTP_201_CREATED)
async def create_with_student(
    data: EnrollmentWithStudentCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*SCHOOL_ADMIN)),
):
    return await enrollment_service.create_with_student(db, data)


@router.get("", response_model=Page[EnrollmentResponse])
async def list_enrollments(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    year: Optional[int] = None,
    status: Optional[EnrollmentStatus] = None,
    class_id: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*OFFICE_READ)),
):
    return await enrollment_service.list_enrollments(
        db, page, page_size, year=year, status=status, class_id=class_id
    )


@router.get("/years")
async def academic_years(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*OFFICE_READ)),
):
    """Distinct years, newest first, labelled YYYY/YYYY+1"""
    return await enrollment_service.academic_years(db)


@router.get("/student/{student_id}", response_model=List[EnrollmentResponse])
async def by_student(
    student_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*OFFICE_READ)),
):
    return await enrollment_service.by_student(db, student_id)


@router.get("/year/{year}", response_model=List[EnrollmentResponse])
async def by_year(
    year: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*OFFICE_READ)),
):
    return await enrollment_service.by_year(db, year)


@router.get("/class/{class_id}", response_model=List[EnrollmentResponse])
async def by_class(
    class_id: str,
    year: Optional[int] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*OFFICE_READ)),
):
    return await enrollment_service.by_class(db, class_id, year)


@router.get("/{enrollment_id}", response_model=EnrollmentResponse)
async def get_enrollment(
    enrollment_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*OFFICE_READ)),
):
    return await enrollment_service.get_enrollment(db, enrollment_id)


@router.put("/{enrollment_id}", response_model=EnrollmentResponse)
async def update_enrollment(
    enrollment_id: str,
    data: EnrollmentUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*SCHOOL_ADMIN)),
):
    return await enrollment_service.update_enrollment(db, enrollment_id, data)


@router.delete("/{enrollment_id}", response_model=EnrollmentResponse)
async def cancel_enrollment(
    enrollment_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*SCHOOL_ADMIN)),
):
    return await enrollment_service.cancel_enrollment(db, enrollment_id)
