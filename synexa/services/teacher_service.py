"""
Teacher Service - teaching profiles of PROFESSOR users
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import selectinload
from typing import Optional, List

from synexa.core.exceptions import ConflictError, ResourceNotFoundError, ValidationError
from synexa.core.logging_config import get_logger
from synexa.models.school_class import SchoolClass
from synexa.models.subject import Subject
from synexa.models.teacher import Teacher
from synexa.models.user import User, UserRole
from synexa.schemas.teacher import TeacherCreate, TeacherUpdate
from synexa.utils.pagination import paginate

logger = get_logger(__name__)


class TeacherService:

    async def _load(self, db: AsyncSession, teacher_id: str) -> Teacher:
        result = await db.execute(
            select(Teacher)
            .options(selectinload(Teacher.subjects), selectinload(Teacher.classes))
            .where(Teacher.id == teacher_id)
            .execution_options(populate_existing=True)
        )
        teacher = result.scalar_one_or_none()
        if not teacher:
            raise ResourceNotFoundError("Teacher", teacher_id)
        return teacher

    async def get_by_user(self, db: AsyncSession, user_id: str) -> Optional[Teacher]:
        result = await db.execute(
            select(Teacher)
            .options(selectinload(Teacher.subjects), selectinload(Teacher.classes))
            .where(Teacher.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def create_teacher(self, db: AsyncSession, data: TeacherCreate) -> Teacher:
        user = await db.get(User, data.user_id)
        if not user:
            raise ResourceNotFoundError("User", data.user_id)
        if user.role != UserRole.PROFESSOR:
            raise ValidationError("O utilizador deve ter o perfil PROFESSOR", field="user_id")
        if await self.get_by_user(db, data.user_id):
            raise ConflictError("Este utilizador já possui um perfil de professor")

        teacher = Teacher(user_id=data.user_id, bio=data.bio)
        db.add(teacher)
        await db.commit()

        logger.log_audit_event("create", "teacher", str(teacher.id), user_id=data.user_id)
        return await self._load(db, teacher.id)

    async def list_teachers(
        self, db: AsyncSession, page: int = 1, page_size: int = 10, search: Optional[str] = None
    ) -> dict:
        query = (
            select(Teacher)
            .join(User, Teacher.user_id == User.id)
            .options(selectinload(Teacher.subjects), selectinload(Teacher.classes))
        )
        if search:
            query = query.where(User.name.ilike(f"%{search}%"))
        return await paginate(db, query.order_by(User.name), page, page_size)

    async def get_teacher(self, db: AsyncSession, teacher_id: str) -> Teacher:
        return await self._load(db, teacher_id)

    async def update_teacher(self, db: AsyncSession, teacher_id: str, data: TeacherUpdate) -> Teacher:
        teacher = await self._load(db, teacher_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(teacher, field, value)
        await db.commit()
        return await self._load(db, teacher_id)

    async def assign_subjects(self, db: AsyncSession, teacher_id: str, subject_ids: List[str]) -> Teacher:
        teacher = await self._load(db, teacher_id)
        ids = list(dict.fromkeys(subject_ids))
        result = await db.execute(select(Subject).where(Subject.id.in_(ids)))
        subjects = list(result.scalars().all())
        missing = set(ids) - {str(s.id) for s in subjects}
        if missing:
            raise ValidationError(f"Disciplinas não encontradas: {', '.join(sorted(missing))}", field="ids")

        teacher.subjects = subjects
        await db.commit()
        logger.log_audit_event("assign_subjects", "teacher", teacher_id, count=len(subjects))
        return await self._load(db, teacher_id)

    async def assign_classes(self, db: AsyncSession, teacher_id: str, class_ids: List[str]) -> Teacher:
        teacher = await self._load(db, teacher_id)
        ids = list(dict.fromkeys(class_ids))
        result = await db.execute(select(SchoolClass).where(SchoolClass.id.in_(ids)))
        classes = list(result.scalars().all())
        missing = set(ids) - {str(c.id) for c in classes}
        if missing:
            raise ValidationError(f"Turmas não encontradas: {', '.join(sorted(missing))}", field="ids")

        teacher.classes = classes
        await db.commit()
        logger.log_audit_event("assign_classes", "teacher", teacher_id, count=len(classes))
        return await self._load(db, teacher_id)


teacher_service = TeacherService()
