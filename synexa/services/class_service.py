"""
Class Service - turmas, their teachers and their current students
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from sqlalchemy.orm import selectinload
from typing import Optional, List

from synexa.core.exceptions import ConflictError, ResourceNotFoundError, ValidationError
from synexa.core.logging_config import get_logger
from synexa.models.enrollment import Enrollment, EnrollmentStatus
from synexa.models.school_class import SchoolClass, Shift
from synexa.models.student import Student
from synexa.models.teacher import Teacher
from synexa.schemas.school_class import ClassCreate, ClassUpdate
from synexa.utils.pagination import paginate, create_paginated_response

logger = get_logger(__name__)


class ClassService:

    async def _load(self, db: AsyncSession, class_id: str) -> SchoolClass:
        result = await db.execute(
            select(SchoolClass)
            .options(selectinload(SchoolClass.teachers), selectinload(SchoolClass.students))
            .where(SchoolClass.id == class_id)
            .execution_options(populate_existing=True)
        )
        school_class = result.scalar_one_or_none()
        if not school_class:
            raise ResourceNotFoundError("Class", class_id)
        return school_class

    async def _check_name(
        self, db: AsyncSession, name: str, year: int, exclude_id: Optional[str] = None
    ) -> None:
        query = select(SchoolClass.id).where(SchoolClass.name == name, SchoolClass.year == year)
        if exclude_id:
            query = query.where(SchoolClass.id != exclude_id)
        if (await db.execute(query)).first():
            raise ConflictError(f"Já existe a turma {name} no ano {year}")

    async def _resolve_students(
        self, db: AsyncSession, student_ids: List[str], capacity: int, class_id: Optional[str] = None
    ) -> List[Student]:
        ids = list(dict.fromkeys(student_ids))
        if len(ids) > capacity:
            raise ValidationError(
                f"Número de alunos ({len(ids)}) excede a capacidade da turma ({capacity})",
                field="student_ids",
            )
        if not ids:
            return []

        result = await db.execute(select(Student).where(Student.id.in_(ids)))
        students = list(result.scalars().all())

        missing = set(ids) - {str(s.id) for s in students}
        if missing:
            raise ValidationError(
                f"Alunos não encontrados: {', '.join(sorted(missing))}", field="student_ids"
            )

        taken = [s for s in students if s.class_id and str(s.class_id) != str(class_id)]
        if taken:
            names = ", ".join(s.full_name for s in taken)
            raise ValidationError(f"Alunos já pertencem a outra turma: {names}", field="student_ids")

        return students

    async def _resolve_teachers(self, db: AsyncSession, teacher_ids: List[str]) -> List[Teacher]:
        ids = list(dict.fromkeys(teacher_ids))
        if not ids:
            return []
        result = await db.execute(select(Teacher).where(Teacher.id.in_(ids)))
        teachers = list(result.scalars().all())
        missing = set(ids) - {str(t.id) for t in teachers}
        if missing:
            raise ValidationError(
                f"Professores não encontrados: {', '.join(sorted(missing))}", field="teacher_ids"
            )
        return teachers

    async def _active_enrollments(self, db: AsyncSession, school_class: SchoolClass) -> int:
        result = await db.execute(
            select(func.count(Enrollment.id)).where(
                Enrollment.class_id == school_class.id,
                Enrollment.year == school_class.year,
                Enrollment.status == EnrollmentStatus.ACTIVE,
            )
        )
        return result.scalar() or 0

    async def to_response(self, db: AsyncSession, school_class: SchoolClass) -> dict:
        return {
            "id": school_class.id,
            "name": school_class.name,
            "year": school_class.year,
            "shift": school_class.shift,
            "capacity": school_class.capacity,
            "teachers": school_class.teachers,
            "student_count": len(school_class.students),
            "active_enrollments": await self._active_enrollments(db, school_class),
            "created_at": school_class.created_at,
        }

    async def create_class(self, db: AsyncSession, data: ClassCreate) -> SchoolClass:
        await self._check_name(db, data.name, data.year)
        students = await self._resolve_students(db, data.student_ids, data.capacity)
        teachers = await self._resolve_teachers(db, data.teacher_ids)

        school_class = SchoolClass(
            name=data.name,
            year=data.year,
            shift=data.shift,
            capacity=data.capacity,
            teachers=teachers,
        )
        db.add(school_class)
        await db.flush()

        for student in students:
            student.class_id = school_class.id

        await db.commit()
        logger.log_audit_event("create", "class", str(school_class.id), class_name=data.name, year=data.year)
        return await self._load(db, school_class.id)

    async def list_classes(
        self,
        db: AsyncSession,
        page: int = 1,
        page_size: int = 10,
        year: Optional[int] = None,
        shift: Optional[Shift] = None,
    ) -> dict:
        query = select(SchoolClass).options(
            selectinload(SchoolClass.teachers), selectinload(SchoolClass.students)
        )
        if year:
            query = query.where(SchoolClass.year == year)
        if shift:
            query = query.where(SchoolClass.shift == shift)
        query = query.order_by(SchoolClass.year.desc(), SchoolClass.name)

        result = await paginate(db, query, page, page_size)
        items = [await self.to_response(db, c) for c in result["items"]]
        return create_paginated_response(items, result["total"], result["page"], result["page_size"])

    async def get_class(self, db: AsyncSession, class_id: str) -> SchoolClass:
        return await self._load(db, class_id)

    async def update_class(self, db: AsyncSession, class_id: str, data: ClassUpdate) -> SchoolClass:
        school_class = await self._load(db, class_id)
        updates = data.model_dump(exclude_unset=True)

        name = updates.get("name") or school_class.name
        year = updates.get("year") or school_class.year
        if name != school_class.name or year != school_class.year:
            await self._check_name(db, name, year, exclude_id=class_id)

        capacity = updates.get("capacity") or school_class.capacity

        if updates.get("student_ids") is not None:
            students = await self._resolve_students(db, updates["student_ids"], capacity, class_id)
            keep = {str(s.id) for s in students}
            for current in school_class.students:
                if str(current.id) not in keep:
                    current.class_id = None
            for student in students:
                student.class_id = school_class.id
        elif len(school_class.students) > capacity:
            raise ValidationError(
                f"A turma já tem {len(school_class.students)} alunos, acima da capacidade {capacity}",
                field="capacity",
            )

        if updates.get("teacher_ids") is not None:
            school_class.teachers = await self._resolve_teachers(db, updates["teacher_ids"])

        for field in ("name", "year", "shift", "capacity"):
            if updates.get(field) is not None:
                setattr(school_class, field, updates[field])

        await db.commit()
        return await self._load(db, class_id)

    async def delete_class(self, db: AsyncSession, class_id: str) -> None:
        school_class = await self._load(db, class_id)
        for student in school_class.students:
            student.class_id = None
        await db.delete(school_class)
        await db.commit()
        logger.log_audit_event("delete", "class", class_id)

    async def class_students(self, db: AsyncSession, class_id: str) -> List[Student]:
        await self._load(db, class_id)
        result = await db.execute(
            select(Student)
            .options(selectinload(Student.school_class))
            .where(Student.class_id == class_id)
            .order_by(Student.first_name, Student.last_name)
        )
        return list(result.scalars().all())


class_service = ClassService()
