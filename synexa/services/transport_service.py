"""
Transport Service - school bus routes and student seats

Route rules:
- stop names (case-insensitive, trimmed) and stop orders are unique per route
- departure must be earlier than return
- route names are unique
- a route with assigned students cannot be deleted

A student has at most one transport assignment, boarding at a stop that
exists on the route.
"""

import unicodedata

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from sqlalchemy.orm import selectinload
from typing import Optional, List, Dict

from synexa.core.exceptions import ConflictError, ResourceNotFoundError, ValidationError
from synexa.core.logging_config import get_logger
from synexa.models.school_class import SchoolClass
from synexa.models.student import Student
from synexa.models.transport import TransportRoute, StudentTransport
from synexa.schemas.transport import (
    AssignStudentsRequest,
    RouteCreate,
    RouteUpdate,
    Stop,
    StudentTransportUpdate,
)
from synexa.utils.pagination import paginate, normalize_page, create_paginated_response

logger = get_logger(__name__)


def to_minutes(value: str) -> int:
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def validate_stops(stops: List[Stop]) -> List[dict]:
    """Check stop uniqueness and return them as stored, sorted by order"""
    names = [stop.name.strip().lower() for stop in stops]
    if len(names) != len(set(names)):
        raise ValidationError("Não é possível ter paragens duplicadas na mesma rota", field="stops")

    orders = [stop.order for stop in stops]
    if len(orders) != len(set(orders)):
        raise ValidationError("Não é possível ter ordens duplicadas na mesma rota", field="stops")

    return [
        {"name": stop.name.strip(), "order": stop.order}
        for stop in sorted(stops, key=lambda s: s.order)
    ]


def fold_text(value: str) -> str:
    """Case and accent insensitive form, so 'sao' and 'SÃO' both find 'São Paulo'"""
    decomposed = unicodedata.normalize("NFKD", value.casefold())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def route_has_stop(route: TransportRoute, term: str) -> bool:
    needle = fold_text(term.strip())
    return any(needle in fold_text(stop["name"]) for stop in (route.stops or []))


def validate_times(departure_time: str, return_time: str) -> None:
    if to_minutes(departure_time) >= to_minutes(return_time):
        raise ValidationError(
            "Horário de saída deve ser anterior ao horário de retorno", field="departure_time"
        )


class TransportService:

    # ==================== ROUTES ====================

    async def _load_route(self, db: AsyncSession, route_id: str) -> TransportRoute:
        result = await db.execute(
            select(TransportRoute)
            .where(TransportRoute.id == route_id)
            .execution_options(populate_existing=True)
        )
        route = result.scalar_one_or_none()
        if not route:
            raise ResourceNotFoundError("Transport route", route_id)
        return route

    async def _ensure_name_free(self, db: AsyncSession, name: str, exclude_id: Optional[str] = None) -> None:
        query = select(TransportRoute.id).where(TransportRoute.name == name)
        if exclude_id:
            query = query.where(TransportRoute.id != exclude_id)
        if (await db.execute(query)).first():
            raise ConflictError("Já existe uma rota com este nome")

    async def _student_counts(self, db: AsyncSession, route_ids: List[str]) -> Dict[str, int]:
        if not route_ids:
            return {}
        result = await db.execute(
            select(StudentTransport.route_id, func.count(StudentTransport.id))
            .where(StudentTransport.route_id.in_(route_ids))
            .group_by(StudentTransport.route_id)
        )
        return {route_id: count for route_id, count in result.all()}

    async def to_response(self, db: AsyncSession, route: TransportRoute) -> dict:
        counts = await self._student_counts(db, [route.id])
        return self._as_dict(route, counts.get(route.id, 0))

    @staticmethod
    def _as_dict(route: TransportRoute, student_count: int) -> dict:
        return {
            "id": route.id,
            "name": route.name,
            "driver_name": route.driver_name,
            "vehicle": route.vehicle,
            "departure_time": route.departure_time,
            "return_time": route.return_time,
            "stops": route.stops or [],
            "student_count": student_count,
            "created_at": route.created_at,
        }

    async def create_route(self, db: AsyncSession, data: RouteCreate) -> TransportRoute:
        stops = validate_stops(data.stops)
        validate_times(data.departure_time, data.return_time)
        await self._ensure_name_free(db, data.name)

        route = TransportRoute(
            name=data.name,
            driver_name=data.driver_name,
            vehicle=data.vehicle,
            departure_time=data.departure_time,
            return_time=data.return_time,
            stops=stops,
        )
        db.add(route)
        await db.commit()

        logger.log_audit_event("create", "transport_route", str(route.id), route_name=route.name, stops=len(stops))
        return await self._load_route(db, route.id)

    async def list_routes(
        self,
        db: AsyncSession,
        page: int = 1,
        page_size: int = 10,
        route_name: Optional[str] = None,
        driver_name: Optional[str] = None,
        vehicle: Optional[str] = None,
        departure_time: Optional[str] = None,
        return_time: Optional[str] = None,
        stop_name: Optional[str] = None,
    ) -> dict:
        query = select(TransportRoute)
        if route_name:
            query = query.where(TransportRoute.name.ilike(f"%{route_name}%"))
        if driver_name:
            query = query.where(TransportRoute.driver_name.ilike(f"%{driver_name}%"))
        if vehicle:
            query = query.where(TransportRoute.vehicle.ilike(f"%{vehicle}%"))
        if departure_time:
            query = query.where(TransportRoute.departure_time == departure_time)
        if return_time:
            query = query.where(TransportRoute.return_time == return_time)
        query = query.order_by(TransportRoute.created_at.desc())

        if stop_name:
            # stops is a JSON list; match on the decoded names
            matches = [
                route for route in (await db.execute(query)).scalars().all()
                if route_has_stop(route, stop_name)
            ]
            page, page_size = normalize_page(page, page_size)
            start = (page - 1) * page_size
            result = create_paginated_response(matches[start:start + page_size], len(matches), page, page_size)
        else:
            result = await paginate(db, query, page, page_size)

        counts = await self._student_counts(db, [r.id for r in result["items"]])
        result["items"] = [self._as_dict(r, counts.get(r.id, 0)) for r in result["items"]]
        return result

    async def get_route(self, db: AsyncSession, route_id: str) -> TransportRoute:
        return await self._load_route(db, route_id)

    async def update_route(self, db: AsyncSession, route_id: str, data: RouteUpdate) -> TransportRoute:
        route = await self._load_route(db, route_id)
        updates = data.model_dump(exclude_unset=True, exclude={"stops"})

        stops = validate_stops(data.stops) if data.stops is not None else None
        validate_times(
            updates.get("departure_time") or route.departure_time,
            updates.get("return_time") or route.return_time,
        )

        if updates.get("name") and updates["name"] != route.name:
            await self._ensure_name_free(db, updates["name"], exclude_id=route_id)

        if stops is not None:
            route.stops = stops
        for field, value in updates.items():
            if value is not None:
                setattr(route, field, value)

        await db.commit()
        logger.log_audit_event("update", "transport_route", route_id, fields=sorted(data.model_fields_set))
        return await self._load_route(db, route_id)

    async def delete_route(self, db: AsyncSession, route_id: str) -> None:
        route = await self._load_route(db, route_id)
        counts = await self._student_counts(db, [route_id])
        if counts.get(route_id):
            raise ValidationError("Não é possível eliminar uma rota com alunos atribuídos")

        await db.delete(route)
        await db.commit()
        logger.log_audit_event("delete", "transport_route", route_id, route_name=route.name)

    # ==================== STUDENT ASSIGNMENTS ====================

    def _assignment_query(self):
        return select(StudentTransport).options(
            selectinload(StudentTransport.student),
            selectinload(StudentTransport.route),
        )

    @staticmethod
    def _ensure_stop(route: TransportRoute, stop_name: str) -> None:
        if stop_name not in route.stop_names:
            raise ValidationError(
                f'Paragem "{stop_name}" não existe na rota "{route.name}"', field="stop_name"
            )

    async def assign_students(
        self, db: AsyncSession, route_id: str, data: AssignStudentsRequest
    ) -> List[StudentTransport]:
        route = await self._load_route(db, route_id)

        for item in data.students:
            self._ensure_stop(route, item.stop_name)

        student_ids = [item.student_id for item in data.students]
        if len(student_ids) != len(set(student_ids)):
            raise ValidationError("O mesmo aluno foi indicado mais de uma vez", field="students")

        result = await db.execute(select(Student.id).where(Student.id.in_(student_ids)))
        found = {row[0] for row in result.all()}
        missing = [sid for sid in student_ids if sid not in found]
        if missing:
            raise ResourceNotFoundError("Student", ", ".join(missing))

        existing = await db.execute(
            self._assignment_query().where(StudentTransport.student_id.in_(student_ids))
        )
        conflicts = [
            {
                "student_id": t.student_id,
                "student_name": t.student.full_name,
                "route_id": t.route_id,
                "route_name": t.route.name,
            }
            for t in existing.scalars().all()
        ]
        if conflicts:
            messages = [f'{c["student_name"]} já está atribuído à rota "{c["route_name"]}"' for c in conflicts]
            raise ConflictError(f"Conflitos encontrados: {', '.join(messages)}", conflicts=conflicts)

        assignments = [
            StudentTransport(
                student_id=item.student_id,
                route_id=route_id,
                stop_name=item.stop_name,
                notes=item.notes,
            )
            for item in data.students
        ]
        db.add_all(assignments)
        await db.commit()

        logger.log_audit_event(
            "assign_students", "transport_route", route_id, students=len(assignments),
        )
        result = await db.execute(
            self._assignment_query()
            .where(StudentTransport.id.in_([a.id for a in assignments]))
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def student_transport(self, db: AsyncSession, student_id: str) -> StudentTransport:
        result = await db.execute(
            self._assignment_query()
            .where(StudentTransport.student_id == student_id)
            .execution_options(populate_existing=True)
        )
        transport = result.scalar_one_or_none()
        if not transport:
            raise ResourceNotFoundError("Student transport", student_id)
        return transport

    async def update_student_transport(
        self, db: AsyncSession, student_id: str, data: StudentTransportUpdate
    ) -> StudentTransport:
        transport = await self.student_transport(db, student_id)

        route = transport.route
        if data.route_id and data.route_id != transport.route_id:
            route = await self._load_route(db, data.route_id)
            if not data.stop_name and transport.stop_name not in route.stop_names:
                raise ValidationError(
                    f'Indique uma paragem da rota "{route.name}"', field="stop_name"
                )

        if data.stop_name:
            self._ensure_stop(route, data.stop_name)
            transport.stop_name = data.stop_name
        transport.route_id = route.id

        if "notes" in data.model_fields_set:
            transport.notes = data.notes

        await db.commit()
        logger.log_audit_event("update", "student_transport", str(transport.id), student_id=student_id)
        return await self.student_transport(db, student_id)

    async def remove_student_transport(self, db: AsyncSession, student_id: str) -> None:
        transport = await self.student_transport(db, student_id)
        await db.delete(transport)
        await db.commit()
        logger.log_audit_event("remove", "student_transport", str(transport.id), student_id=student_id)

    async def list_student_transports(
        self,
        db: AsyncSession,
        page: int = 1,
        page_size: int = 10,
        student_name: Optional[str] = None,
        class_name: Optional[str] = None,
        route_name: Optional[str] = None,
        stop_name: Optional[str] = None,
    ) -> dict:
        query = (
            self._assignment_query()
            .join(Student, Student.id == StudentTransport.student_id)
            .join(TransportRoute, TransportRoute.id == StudentTransport.route_id)
        )
        if student_name:
            full_name = Student.first_name + " " + Student.last_name
            query = query.where(full_name.ilike(f"%{student_name}%"))
        if class_name:
            query = query.join(SchoolClass, SchoolClass.id == Student.class_id).where(
                SchoolClass.name.ilike(f"%{class_name}%")
            )
        if route_name:
            query = query.where(TransportRoute.name.ilike(f"%{route_name}%"))
        if stop_name:
            query = query.where(StudentTransport.stop_name.ilike(f"%{stop_name}%"))

        query = query.order_by(Student.first_name, Student.last_name)
        return await paginate(db, query, page, page_size)


transport_service = TransportService()
