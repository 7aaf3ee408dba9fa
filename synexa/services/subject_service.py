"""
Subject Service - disciplinas and the teachers who teach them
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from sqlalchemy.orm import selectinload
from typing import Optional, List

from synexa.core.exceptions import ConflictError, ResourceNotFoundError, ValidationError
from synexa.core.logging_config import get_logger
from synexa.models.subject import Subject
from synexa.models.teacher import Teacher
from synexa.schemas.subject import SubjectCreate, SubjectUpdate
from synexa.utils.pagination import paginate

logger = get_logger(__name__)


class SubjectService:

    async def _load(self, db: AsyncSession, subject_id: str) -> Subject:
        result = await db.execute(
            select(Subject)
            .options(selectinload(Subject.teachers))
            .where(Subject.id == subject_id)
            .execution_options(populate_existing=True)
        )
        subject = result.scalar_one_or_none()
        if not subject:
            raise ResourceNotFoundError("Subject", subject_id)
        return subject

    async def _check_name(self, db: AsyncSession, name: str, exclude_id: Optional[str] = None) -> None:
        query = select(Subject.id).where(func.lower(Subject.name) == name.strip().lower())
        if exclude_id:
            query = query.where(Subject.id != exclude_id)
        if (await db.execute(query)).first():
            raise ConflictError(f"Disciplina '{name}' já existe")

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

    async def create_subject(self, db: AsyncSession, data: SubjectCreate) -> Subject:
        await self._check_name(db, data.name)
        subject = Subject(
            name=data.name.strip(),
            description=data.description,
            teachers=await self._resolve_teachers(db, data.teacher_ids),
        )
        db.add(subject)
        await db.commit()
        logger.log_audit_event("create", "subject", str(subject.id), subject_name=subject.name)
        return await self._load(db, subject.id)

    async def list_subjects(
        self, db: AsyncSession, page: int = 1, page_size: int = 10, search: Optional[str] = None
    ) -> dict:
        query = select(Subject).options(selectinload(Subject.teachers))
        if search:
            query = query.where(Subject.name.ilike(f"%{search}%"))
        return await paginate(db, query.order_by(Subject.name), page, page_size)

    async def get_subject(self, db: AsyncSession, subject_id: str) -> Subject:
        return await self._load(db, subject_id)

    async def update_subject(self, db: AsyncSession, subject_id: str, data: SubjectUpdate) -> Subject:
        subject = await self._load(db, subject_id)
        updates = data.model_dump(exclude_unset=True)

        if updates.get("name"):
            await self._check_name(db, updates["name"], exclude_id=subject_id)
            subject.name = updates["name"].strip()
        if "description" in updates:
            subject.description = updates["description"]
        if updates.get("teacher_ids") is not None:
            subject.teachers = await self._resolve_teachers(db, updates["teacher_ids"])

        await db.commit()
        return await self._load(db, subject_id)

    async def delete_subject(self, db: AsyncSession, subject_id: str) -> None:
        subject = await self._load(db, subject_id)
        await db.delete(subject)
        await db.commit()
        logger.log_audit_event("delete", "subject", subject_id)


subject_service = SubjectService()
