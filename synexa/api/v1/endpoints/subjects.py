"""
Subjects (disciplinas) API

- POST   /subjects          create (ADMIN, DIRETOR)
- GET    /subjects          list
- GET    /subjects/{id}     get
- PUT    /subjects/{id}     update (ADMIN, DIRETOR)
- DELETE /subjects/{id}     delete (ADMIN, DIRETOR)
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from synexa.core.database import get_db
from synexa.models.user import User
from synexa.modules.auth.dependencies import require_roles, MANAGEMENT, ACADEMIC_READ
from synexa.schemas.common import Page, MessageResponse
from synexa.schemas.subject import SubjectCreate, SubjectUpdate, SubjectResponse
from synexa.services.subject_service import subject_service

router = APIRouter()


@router.post("", response_model=SubjectResponse, status_code=status.HTTP_201_CREATED)
async def create_subject(
    data: SubjectCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*MANAGEMENT)),
):
    return await subject_service.create_subject(db, data)


@router.get("", response_model=Page[SubjectResponse])
async def list_subjects(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    search: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*ACADEMIC_READ)),
):
    return await subject_service.list_subjects(db, page, page_size, search=search)


@router.get("/{subject_id}", response_model=SubjectResponse)
async def get_subject(
    subject_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*ACADEMIC_READ)),
):
    return await subject_service.get_subject(db, subject_id)


@router.put("/{subject_id}", response_model=SubjectResponse)
async def update_subject(
    subject_id: str,
    data: SubjectUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*MANAGEMENT)),
):
    return await subject_service.update_subject(db, subject_id, data)


@router.delete("/{subject_id}", response_model=MessageResponse)
async def delete_subject(
    subject_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*MANAGEMENT)),
):
    await subject_service.delete_subject(db, subject_id)
    return {"message": "Disciplina removida com sucesso"}
