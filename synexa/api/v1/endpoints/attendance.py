"""
Attendance (presenças) API

- POST   /attendance/mark                          roll call for a class and subject
- GET    /attendance                               list (dates, subject, student, class)
- GET    /attendance/class/{class_id}              roll for a date
- GET    /attendance/student/{student_id}          per-subject totals
- PUT    /attendance/{id}                          correct a record (ADMIN, SECRETARIA)
- DELETE /attendance/{id}                          delete (ADMIN)
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import date
from typing import Optional

from synexa.core.database import get_db
from synexa.models.user import User, UserRole
from synexa.modules.auth.dependencies import require_roles, get_current_admin, ACADEMIC_READ
from synexa.schemas.attendance import (
    MarkAttendanceRequest,
    MarkAttendanceResponse,
    AttendanceUpdate,
    AttendanceResponse,
)
from synexa.schemas.common import Page, MessageResponse
from synexa.services.attendance_service import attendance_service

router = APIRouter()

ROLL_CALL = (UserRole.ADMIN, UserRole.SECRETARIA, UserRole.PROFESSOR)


@router.post("/mark", response_model=MarkAttendanceResponse)
async def mark_attendance(
    data: MarkAttendanceRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*ROLL_CALL)),
):
    return await attendance_service.mark_attendance(db, data, current_user)


@router.get("", response_model=Page[AttendanceResponse])
async def list_attendances(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    subject_id: Optional[str] = None,
    student_id: Optional[str] = None,
    class_id: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*ACADEMIC_READ)),
):
    return await attendance_service.list_attendances(
        db, page, page_size,
        start_date=start_date, end_date=end_date,
        subject_id=subject_id, student_id=student_id, class_id=class_id,
    )


@router.get("/class/{class_id}")
async def class_attendance(
    class_id: str,
    on_date: date = Query(..., alias="date", description="Roll call date"),
    subject_id: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*ACADEMIC_READ)),
):
    return await attendance_service.class_attendance(db, class_id, on_date, subject_id)


@router.get("/student/{student_id}")
async def student_attendance(
    student_id: str,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    subject_id: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*ACADEMIC_READ)),
):
    return await attendance_service.student_attendance(
        db, student_id, start_date=start_date, end_date=end_date, subject_id=subject_id
    )


@router.put("/{attendance_id}", response_model=AttendanceResponse)
async def update_attendance(
    attendance_id: str,
    data: AttendanceUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*ACADEMIC_READ)),
):
    return await attendance_service.update_attendance(db, attendance_id, data, current_user)


@router.delete("/{attendance_id}", response_model=MessageResponse)
async def delete_attendance(
    attendance_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
):
    await attendance_service.delete_attendance(db, attendance_id)
    return {"message": "Registo de presença removido com sucesso"}
