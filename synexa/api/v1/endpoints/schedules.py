"""
Schedules API - teachers' weekly timetable

- POST   /schedules                              create (ADMIN, SECRETARIA)
- GET    /schedules                              list (teacher_id, weekday, subject_id)
- GET    /schedules/teacher/{teacher_id}         a teacher's week
- GET    /schedules/conflicts/{teacher_id}       slots clashing with a proposed one
- GET    /schedules/{id}                         get
- PUT    /schedules/{id}                         update (ADMIN, SECRETARIA)
- DELETE /schedules/{id}                         delete (ADMIN, SECRETARIA)
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional, List

from synexa.core.database import get_db
from synexa.models.schedule import Weekday
from synexa.models.user import User
from synexa.modules.auth.dependencies import require_roles, SCHOOL_ADMIN, ACADEMIC_READ
from synexa.schemas.common import MessageResponse
from synexa.schemas.schedule import (
    ScheduleCreate,
    ScheduleUpdate,
    ScheduleResponse,
    ConflictCheckResponse,
)
from synexa.schemas.transport import TIME_PATTERN
from synexa.services.schedule_service import schedule_service, validate_range

router = APIRouter()


@router.post("", response_model=ScheduleResponse, status_code=status.HTTP_201_CREATED)
async def create_schedule(
    data: ScheduleCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*SCHOOL_ADMIN)),
):
    return await schedule_service.create_schedule(db, data)


@router.get("", response_model=List[ScheduleResponse])
async def list_schedules(
    teacher_id: Optional[str] = None,
    weekday: Optional[Weekday] = None,
    subject_id: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*ACADEMIC_READ)),
):
    return await schedule_service.list_schedules(
        db, teacher_id=teacher_id, weekday=weekday, subject_id=subject_id
    )


@router.get("/teacher/{teacher_id}", response_model=List[ScheduleResponse])
async def teacher_schedule(
    teacher_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*ACADEMIC_READ)),
):
    return await schedule_service.teacher_schedule(db, teacher_id)


@router.get("/conflicts/{teacher_id}", response_model=ConflictCheckResponse)
async def check_conflicts(
    teacher_id: str,
    weekday: Weekday,
    start_time: str = Query(..., pattern=TIME_PATTERN),
    end_time: str = Query(..., pattern=TIME_PATTERN),
    exclude_id: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*ACADEMIC_READ)),
):
    validate_range(start_time, end_time)
    conflicts = await schedule_service.find_conflicts(
        db, teacher_id, weekday, start_time, end_time, exclude_id=exclude_id
    )
    return {"has_conflicts": bool(conflicts), "conflicts": conflicts}


@router.get("/{schedule_id}", response_model=ScheduleResponse)
async def get_schedule(
    schedule_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*ACADEMIC_READ)),
):
    return await schedule_service.get_schedule(db, schedule_id)


@router.put("/{schedule_id}", response_model=ScheduleResponse)
async def update_schedule(
    schedule_id: str,
    data: ScheduleUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*SCHOOL_ADMIN)),
):
    return await schedule_service.update_schedule(db, schedule_id, data)


@router.delete("/{schedule_id}", response_model=MessageResponse)
async def delete_schedule(
    schedule_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*SCHOOL_ADMIN)),
):
    await schedule_service.delete_schedule(db, schedule_id)
    return {"message": "Horário removido com sucesso"}
