"""
Classes (turmas) API

- POST   /classes                 create (ADMIN, DIRETOR)
- GET    /classes                 list (year, shift)
- GET    /classes/{id}            get with active student count
- PUT    /classes/{id}            update (ADMIN, DIRETOR)
- DELETE /classes/{id}            delete (ADMIN, DIRETOR)
- GET    /classes/{id}/students   students currently placed in the class
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional, List

from synexa.core.database import get_db
from synexa.models.school_class import Shift
from synexa.models.user import User
from synexa.modules.auth.dependencies import require_roles, MANAGEMENT, ACADEMIC_READ
from synexa.schemas.common import Page, MessageResponse
from synexa.schemas.school_class import ClassCreate, ClassUpdate, ClassResponse
from synexa.schemas.student import StudentResponse
from synexa.services.class_service import class_service

router = APIRouter()


@router.post("", response_model=ClassResponse, status_code=status.HTTP_201_CREATED)
async def create_class(
    data: ClassCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*MANAGEMENT)),
):
    school_class = await class_service.create_class(db, data)
    return await class_service.to_response(db, school_class)


@router.get("", response_model=Page[ClassResponse])
async def list_classes(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    year: Optional[int] = None,
    shift: Optional[Shift] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*ACADEMIC_READ)),
):
    return await class_service.list_classes(db, page, page_size, year=year, shift=shift)


@router.get("/{class_id}", response_model=ClassResponse)
async def get_class(
    class_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*ACADEMIC_READ)),
):
    school_class = await class_service.get_class(db, class_id)
    return await class_service.to_response(db, school_class)


@router.put("/{class_id}", response_model=ClassResponse)
async def update_class(
    class_id: str,
    data: ClassUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*MANAGEMENT)),
):
    school_class = await class_service.update_class(db, class_id, data)
    return await class_service.to_response(db, school_class)


@router.delete("/{class_id}", response_model=MessageResponse)
async def delete_class(
    class_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*MANAGEMENT)),
):
    await class_service.delete_class(db, class_id)
    return {"message": "Turma removida com sucesso"}


@router.get("/{class_id}/students", response_model=List[StudentResponse])
async def class_students(
    class_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*ACADEMIC_READ)),
):
    return await class_service.class_students(db, class_id)
