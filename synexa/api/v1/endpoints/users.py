"""
Users Management API (ADMIN)

- POST   /users                      create a user
- GET    /users                      list (role, search)
- GET    /users/{id}                 get
- PUT    /users/{id}                 update
- POST   /users/{id}/deactivate      deactivate
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from synexa.core.database import get_db
from synexa.models.user import User, UserRole
from synexa.modules.auth.dependencies import get_current_admin
from synexa.schemas.common import Page
from synexa.schemas.user import UserCreate, UserUpdate, UserResponse
from synexa.services.user_service import user_service

router = APIRouter()


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    data: UserCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
):
    return await user_service.create_user(db, data)


@router.get("", response_model=Page[UserResponse])
async def list_users(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    role: Optional[UserRole] = None,
    search: Optional[str] = Query(None, description="Search by name or email"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
):
    return await user_service.list_users(db, page, page_size, role=role, search=search)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
):
    return await user_service.get_user(db, user_id)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    data: UserUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
):
    return await user_service.update_user(db, user_id, data)


@router.post("/{user_id}/deactivate", response_model=UserResponse)
async def deactivate_user(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
):
    return await user_service.deactivate_user(db, user_id)
