"""
Teachers API

- POST /teachers                    create a profile for a PROFESSOR user (ADMIN, DIRETOR)
- GET  /teachers                    list
- GET  /teachers/{id}               get
- PUT  /teachers/{id}               update (ADMIN, DIRETOR)
- POST /teachers/{id}/subjects      assign subjects (ADMIN, DIRETOR)
- POST /teachers/{id}/classes       assign classes (ADMIN, DIRETOR)
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from synexa.core.database import get_db
from synexa.models.user import User
from synexa.modules.auth.dependencies import require_roles, MANAGEMENT, ACADEMIC_READ
from synexa.schemas.common import Page
from synexa.schemas.teacher import TeacherCreate, TeacherUpdate, TeacherResponse, AssignIdsRequest
from synexa.services.teacher_service import teacher_service

router = APIRouter()


@router.post("", response_model=TeacherResponse, status_code=status.HTTP_201_CREATED)
async def create_teacher(
    data: TeacherCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*MANAGEMENT)),
):
    return await teacher_service.create_teacher(db, data)


@router.get("", response_model=Page[TeacherResponse])
async def list_teachers(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    search: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*ACADEMIC_READ)),
):
    return await teacher_service.list_teachers(db, page, page_size, search=search)


@router.get("/{teacher_id}", response_model=TeacherResponse)
async def get_teacher(
    teacher_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*ACADEMIC_READ)),
):
    return await teacher_service.get_teacher(db, teacher_id)


@router.put("/{teacher_id}", response_model=TeacherResponse)
async def update_teacher(
    teacher_id: str,
    data: TeacherUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*MANAGEMENT)),
):
    return await teacher_service.update_teacher(db, teacher_id, data)


@router.post("/{teacher_id}/subjects", response_model=TeacherResponse)
async def assign_subjects(
    teacher_id: str,
    data: AssignIdsRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*MANAGEMENT)),
):
    return await teacher_service.assign_subjects(db, teacher_id, data.ids)


@router.post("/{teacher_id}/classes", response_model=TeacherResponse)
async def assign_classes(
    teacher_id: str,
    data: AssignIdsRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*MANAGEMENT)),
):
    return await teacher_service.assign_classes(db, teacher_id, data.ids)
