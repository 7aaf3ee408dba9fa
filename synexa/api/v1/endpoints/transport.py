"""
Transport API

Routes:
- POST   /transport/routes                          create (ADMIN)
- GET    /transport/routes                          list with filters and student counts
- GET    /transport/routes/{id}                     get
- PUT    /transport/routes/{id}                     update (ADMIN)
- DELETE /transport/routes/{id}                     delete, only without students (ADMIN)
- POST   /transport/routes/{id}/students            assign students (ADMIN, SECRETARIA)

Student seats:
- GET    /transport/students                        list assignments
- GET    /transport/students/{student_id}           a student's assignment
- PUT    /transport/students/{student_id}           change stop, route or notes (ADMIN, SECRETARIA)
- DELETE /transport/students/{student_id}           remove from transport (ADMIN, SECRETARIA)
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional, List

from synexa.core.database import get_db
from synexa.models.user import User
from synexa.modules.auth.dependencies import (
    require_roles,
    get_current_admin,
    SCHOOL_ADMIN,
    OFFICE_READ,
)
from synexa.schemas.common import Page, MessageResponse
from synexa.schemas.transport import (
    RouteCreate,
    RouteUpdate,
    RouteResponse,
    AssignStudentsRequest,
    StudentTransportUpdate,
    StudentTransportResponse,
)
from synexa.services.transport_service import transport_service

router = APIRouter()


# ==================== Routes ====================

@router.post("/routes", response_model=RouteResponse, status_code=status.HTTP_201_CREATED)
async def create_route(
    data: RouteCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
):
    route = await transport_service.create_route(db, data)
    return await transport_service.to_response(db, route)


@router.get("/routes", response_model=Page[RouteResponse])
async def list_routes(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    route_name: Optional[str] = None,
    driver_name: Optional[str] = None,
    vehicle: Optional[str] = None,
    departure_time: Optional[str] = None,
    return_time: Optional[str] = None,
    stop_name: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*OFFICE_READ)),
):
    return await transport_service.list_routes(
        db, page, page_size,
        route_name=route_name, driver_name=driver_name, vehicle=vehicle,
        departure_time=departure_time, return_time=return_time, stop_name=stop_name,
    )


@router.get("/routes/{route_id}", response_model=RouteResponse)
async def get_route(
    route_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*OFFICE_READ)),
):
    route = await transport_service.get_route(db, route_id)
    return await transport_service.to_response(db, route)


@router.put("/routes/{route_id}", response_model=RouteResponse)
async def update_route(
    route_id: str,
    data: RouteUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
):
    route = await transport_service.update_route(db, route_id, data)
    return await transport_service.to_response(db, route)


@router.delete("/routes/{route_id}", response_model=MessageResponse)
async def delete_route(
    route_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
):
    await transport_service.delete_route(db, route_id)
    return {"message": "Rota de transporte eliminada com sucesso"}


@router.post(
    "/routes/{route_id}/students",
    response_model=List[StudentTransportResponse],
    status_code=status.HTTP_201_CREATED,
)
async def assign_students(
    route_id: str,
    data: AssignStudentsRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*SCHOOL_ADMIN)),
):
    return await transport_service.assign_students(db, route_id, data)


# ==================== Student seats ====================

@router.get("/students", response_model=Page[StudentTransportResponse])
async def list_student_transports(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    student_name: Optional[str] = None,
    class_name: Optional[str] = None,
    route_name: Optional[str] = None,
    stop_name: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*OFFICE_READ)),
):
    return await transport_service.list_student_transports(
        db, page, page_size,
        student_name=student_name, class_name=class_name, route_name=route_name, stop_name=stop_name,
    )


@router.get("/students/{student_id}", response_model=StudentTransportResponse)
async def student_transport(
    student_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*OFFICE_READ)),
):
    return await transport_service.student_transport(db, student_id)


@router.put("/students/{student_id}", response_model=StudentTransportResponse)
async def update_student_transport(
    student_id: str,
    data: StudentTransportUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*SCHOOL_ADMIN)),
):
    return await transport_service.update_student_transport(db, student_id, data)


@router.delete("/students/{student_id}", response_model=MessageResponse)
async def remove_student_transport(
    student_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*SCHOOL_ADMIN)),
):
    await transport_service.remove_student_transport(db, student_id)
    return {"message": "Aluno removido do transporte com sucesso"}
