"""
Student Service - student records, parent links, notes and timeline
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
from sqlalchemy.orm import selectinload
from collections import Counter
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from synexa.core.exceptions import ConflictError, ResourceNotFoundError, ValidationError
from synexa.core.logging_config import get_logger
from synexa.models.enrollment import Enrollment
from synexa.models.school_class import SchoolClass
from synexa.models.student import Student
from synexa.models.student_record import StudentNote, StudentTimelineEvent, TimelineEventType
from synexa.models.user import User, UserRole
from synexa.schemas.student import StudentCreate, StudentUpdate, NoteCreate, TimelineEventCreate
from synexa.utils.pagination import paginate

logger = get_logger(__name__)


def normalize_bi(bi_number: Optional[str]) -> Optional[str]:
    """Bilhete de Identidade as stored: trimmed, upper-case, no spaces"""
    if not bi_number:
        return None
    normalized = bi_number.strip().upper().replace(" ", "")
    return normalized or None


class StudentService:

    async def _check_unique(
        self,
        db: AsyncSession,
        student_number: Optional[str],
        bi_number: Optional[str],
        exclude_id: Optional[str] = None,
    ) -> None:
        if student_number:
            query = select(Student.id).where(Student.student_number == student_number)
            if exclude_id:
                query = query.where(Student.id != exclude_id)
            if (await db.execute(query)).first():
                raise ConflictError(f"Número de estudante {student_number} já está em uso")

        if bi_number:
            query = select(Student.id).where(Student.bi_number == bi_number)
            if exclude_id:
                query = query.where(Student.id != exclude_id)
            if (await db.execute(query)).first():
                raise ConflictError(f"Já existe um aluno com o BI {bi_number}")

    async def _check_class(self, db: AsyncSession, class_id: str) -> None:
        if not await db.get(SchoolClass, class_id):
            raise ValidationError("Turma não encontrada", field="class_id")

    async def _load(self, db: AsyncSession, student_id: str) -> Student:
        result = await db.execute(
            select(Student)
            .options(selectinload(Student.school_class), selectinload(Student.parents))
            .where(Student.id == student_id)
            .execution_options(populate_existing=True)
        )
        student = result.scalar_one_or_none()
        if not student:
            raise ResourceNotFoundError("Student", student_id)
        return student

    async def create_student(self, db: AsyncSession, data: StudentCreate) -> Student:
        payload = data.model_dump()
        payload["bi_number"] = normalize_bi(payload.get("bi_number"))

        await self._check_unique(db, payload["student_number"], payload["bi_number"])
        await self._check_class(db, payload["class_id"])

        student = Student(**payload, tags=[])
        db.add(student)
        await db.commit()

        logger.log_audit_event("create", "student", str(student.id), student_number=student.student_number)
        return await self._load(db, student.id)

    async def list_students(
        self,
        db: AsyncSession,
        page: int = 1,
        page_size: int = 10,
        search: Optional[str] = None,
        class_id: Optional[str] = None,
        academic_year: Optional[str] = None,
    ) -> dict:
        query = select(Student).options(selectinload(Student.school_class))

        if search:
            pattern = f"%{search}%"
            query = query.where(or_(
                Student.first_name.ilike(pattern),
                Student.last_name.ilike(pattern),
                Student.student_number.ilike(pattern),
            ))
        if class_id:
            query = query.where(Student.class_id == class_id)
        if academic_year:
            query = query.where(Student.academic_year == academic_year)

        query = query.order_by(
            Student.academic_year.desc(), Student.first_name, Student.last_name
        )
        return await paginate(db, query, page, page_size)

    async def get_student(self, db: AsyncSession, student_id: str) -> Student:
        return await self._load(db, student_id)

    async def get_student_detail(
        self, db: AsyncSession, student_id: str
    ) -> Tuple[Student, Optional[Enrollment]]:
        """Student with current class, parents and most recent enrollment"""
        student = await self._load(db, student_id)
        result = await db.execute(
            select(Enrollment)
            .where(Enrollment.student_id == student_id)
            .order_by(Enrollment.year.desc(), Enrollment.created_at.desc())
            .limit(1)
        )
        return student, result.scalar_one_or_none()

    async def update_student(self, db: AsyncSession, student_id: str, data: StudentUpdate) -> Student:
        student = await self._load(db, student_id)
        updates = data.model_dump(exclude_unset=True)

        if "bi_number" in updates:
            updates["bi_number"] = normalize_bi(updates["bi_number"])

        await self._check_unique(
            db,
            updates.get("student_number"),
            updates.get("bi_number"),
            exclude_id=student_id,
        )
        if updates.get("class_id"):
            await self._check_class(db, updates["class_id"])

        for field, value in updates.items():
            setattr(student, field, value)

        await db.commit()
        return await self._load(db, student_id)

    async def delete_student(self, db: AsyncSession, student_id: str) -> None:
        student = await db.get(Student, student_id)
        if not student:
            raise ResourceNotFoundError("Student", student_id)
        await db.delete(student)
        await db.commit()
        logger.log_audit_event("delete", "student", student_id)

    async def link_parent(self, db: AsyncSession, student_id: str, parent_id: str) -> Student:
        student = await self._load(db, student_id)
        parent = await db.get(User, parent_id)
        if not parent:
            raise ResourceNotFoundError("User", parent_id)
        if parent.role != UserRole.PARENT:
            raise ValidationError("O utilizador indicado não é um encarregado de educação", field="parent_id")

        if parent not in student.parents:
            student.parents.append(parent)
            await db.commit()
            logger.log_audit_event("link_parent", "student", student_id, parent_id=parent_id)

        return await self._load(db, student_id)

    async def get_by_bi(self, db: AsyncSession, bi_number: str) -> Student:
        normalized = normalize_bi(bi_number)
        result = await db.execute(
            select(Student)
            .options(selectinload(Student.school_class))
            .where(Student.bi_number == normalized)
        )
        student = result.scalar_one_or_none()
        if not student:
            raise ResourceNotFoundError("Student", bi_number)
        return student

    async def statistics(self, db: AsyncSession) -> Dict[str, Any]:
        """Head counts by gender, province, year, class and tag, plus average age"""
        result = await db.execute(
            select(
                Student.gender, Student.province, Student.academic_year,
                Student.birth_date, Student.tags, SchoolClass.name,
            ).outerjoin(SchoolClass, Student.class_id == SchoolClass.id)
        )
        rows = result.all()

        today = date.today()
        ages = [
            today.year - born.year - ((today.month, today.day) < (born.month, born.day))
            for _, _, _, born, _, _ in rows
        ]
        return {
            "total": len(rows),
            "by_gender": dict(Counter(gender.value for gender, *_ in rows)),
            "by_province": dict(Counter(row[1] or "Sem província" for row in rows)),
            "by_academic_year": dict(Counter(row[2] or "Sem ano" for row in rows)),
            "by_class": dict(Counter(row[5] or "Sem turma" for row in rows)),
            "by_tag": dict(Counter(tag for row in rows for tag in (row[4] or []))),
            "average_age": round(sum(ages) / len(ages), 1) if ages else None,
        }

    # ==================== Notes & timeline ====================

    async def _ensure_exists(self, db: AsyncSession, student_id: str) -> None:
        if not await db.get(Student, student_id):
            raise ResourceNotFoundError("Student", student_id)

    async def add_note(self, db: AsyncSession, student_id: str, data: NoteCreate, author_id: str) -> StudentNote:
        await self._ensure_exists(db, student_id)
        note = StudentNote(
            student_id=student_id,
            note_type=data.note_type,
            content=data.content.strip(),
            author_id=author_id,
        )
        db.add(note)
        await db.commit()

        logger.log_audit_event("add_note", "student", student_id, note_type=data.note_type.value)
        result = await db.execute(
            select(StudentNote).where(StudentNote.id == note.id).execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def list_notes(self, db: AsyncSession, student_id: str) -> List[StudentNote]:
        await self._ensure_exists(db, student_id)
        result = await db.execute(
            select(StudentNote)
            .where(StudentNote.student_id == student_id)
            .order_by(StudentNote.created_at.desc())
        )
        return list(result.scalars().all())

    async def add_timeline_event(
        self, db: AsyncSession, student_id: str, data: TimelineEventCreate, created_by: Optional[str] = None
    ) -> StudentTimelineEvent:
        await self._ensure_exists(db, student_id)
        event = timeline_event(
            student_id, data.event_type, data.title,
            description=data.description, metadata=data.metadata, created_by=created_by,
        )
        db.add(event)
        await db.commit()
        await db.refresh(event)

        logger.log_audit_event("add_timeline_event", "student", student_id, event_type=data.event_type.value)
        return event

    async def timeline(self, db: AsyncSession, student_id: str) -> List[StudentTimelineEvent]:
        """Most recent first"""
        await self._ensure_exists(db, student_id)
        result = await db.execute(
            select(StudentTimelineEvent)
            .where(StudentTimelineEvent.student_id == student_id)
            .order_by(StudentTimelineEvent.created_at.desc())
        )
        return list(result.scalars().all())


def timeline_event(
    student_id: str,
    event_type: TimelineEventType,
    title: str,
    description: Optional[str] = None,
    metadata: Optional[dict] = None,
    created_by: Optional[str] = None,
) -> StudentTimelineEvent:
    return StudentTimelineEvent(
        student_id=student_id,
        event_type=event_type,
        title=title,
        description=description,
        event_metadata=metadata,
        created_by=created_by,
    )


student_service = StudentService()
