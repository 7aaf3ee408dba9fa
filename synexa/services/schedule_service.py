"""
Schedule Service - teachers' weekly timetable

Slots are half-open [start, end), so 08:00-09:00 and 09:00-10:00 on the
same day do not clash. A teacher never holds two overlapping slots on
the same weekday.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import selectinload
from typing import Optional, List

from synexa.core.exceptions import ConflictError, ResourceNotFoundError, ValidationError
from synexa.core.logging_config import get_logger
from synexa.models.schedule import Schedule, Weekday, WEEKDAY_ORDER
from synexa.models.subject import Subject
from synexa.models.teacher import Teacher
from synexa.schemas.schedule import ScheduleCreate, ScheduleUpdate
from synexa.services.transport_service import to_minutes

logger = get_logger(__name__)


def overlaps(start_a: str, end_a: str, start_b: str, end_b: str) -> bool:
    return to_minutes(start_a) < to_minutes(end_b) and to_minutes(start_b) < to_minutes(end_a)


def validate_range(start_time: str, end_time: str) -> None:
    if to_minutes(start_time) >= to_minutes(end_time):
        raise ValidationError("Hora de fim deve ser posterior à hora de início", field="end_time")


def timetable_order(schedules: List[Schedule]) -> List[Schedule]:
    return sorted(schedules, key=lambda s: (WEEKDAY_ORDER[s.weekday], to_minutes(s.start_time)))


def conflict_entry(schedule: Schedule) -> dict:
    return {
        "id": str(schedule.id),
        "weekday": schedule.weekday.value,
        "start_time": schedule.start_time,
        "end_time": schedule.end_time,
        "subject_id": str(schedule.subject_id),
    }


class ScheduleService:

    def _with_relations(self):
        return select(Schedule).options(
            selectinload(Schedule.teacher).selectinload(Teacher.user), selectinload(Schedule.subject)
        )

    async def _load(self, db: AsyncSession, schedule_id: str) -> Schedule:
        result = await db.execute(
            self._with_relations()
            .where(Schedule.id == schedule_id)
            .execution_options(populate_existing=True)
        )
        schedule = result.scalar_one_or_none()
        if not schedule:
            raise ResourceNotFoundError("Schedule", schedule_id)
        return schedule

    async def _check_refs(self, db: AsyncSession, teacher_id: Optional[str], subject_id: Optional[str]) -> None:
        if teacher_id and not await db.get(Teacher, teacher_id):
            raise ValidationError("Professor não encontrado", field="teacher_id")
        if subject_id and not await db.get(Subject, subject_id):
            raise ValidationError("Disciplina não encontrada", field="subject_id")

    async def find_conflicts(
        self,
        db: AsyncSession,
        teacher_id: str,
        weekday: Weekday,
        start_time: str,
        end_time: str,
        exclude_id: Optional[str] = None,
    ) -> List[Schedule]:
        """The teacher's slots that day overlapping [start_time, end_time)"""
        query = self._with_relations().where(Schedule.teacher_id == teacher_id, Schedule.weekday == weekday)
        if exclude_id:
            query = query.where(Schedule.id != exclude_id)
        result = await db.execute(query)
        return timetable_order([
            s for s in result.scalars().all()
            if overlaps(s.start_time, s.end_time, start_time, end_time)
        ])

    async def _ensure_free(self, db: AsyncSession, teacher_id: str, weekday: Weekday,
                           start_time: str, end_time: str, exclude_id: Optional[str] = None) -> None:
        clashes = await self.find_conflicts(db, teacher_id, weekday, start_time, end_time, exclude_id)
        if clashes:
            raise ConflictError(
                "Professor já possui um horário conflitante neste período",
                conflicts=[conflict_entry(s) for s in clashes],
            )

    async def create_schedule(self, db: AsyncSession, data: ScheduleCreate) -> Schedule:
        await self._check_refs(db, data.teacher_id, data.subject_id)
        validate_range(data.start_time, data.end_time)
        await self._ensure_free(db, data.teacher_id, data.weekday, data.start_time, data.end_time)

        schedule = Schedule(**data.model_dump())
        db.add(schedule)
        await db.commit()

        logger.log_audit_event(
            "create", "schedule", str(schedule.id),
            teacher_id=data.teacher_id, weekday=data.weekday.value, slot=f"{data.start_time}-{data.end_time}",
        )
        return await self._load(db, schedule.id)

    async def list_schedules(
        self,
        db: AsyncSession,
        teacher_id: Optional[str] = None,
        weekday: Optional[Weekday] = None,
        subject_id: Optional[str] = None,
    ) -> List[Schedule]:
        query = self._with_relations().execution_options(populate_existing=True)
        if teacher_id:
            query = query.where(Schedule.teacher_id == teacher_id)
        if weekday:
            query = query.where(Schedule.weekday == weekday)
        if subject_id:
            query = query.where(Schedule.subject_id == subject_id)
        result = await db.execute(query)
        return timetable_order(list(result.scalars().all()))

    async def get_schedule(self, db: AsyncSession, schedule_id: str) -> Schedule:
        return await self._load(db, schedule_id)

    async def teacher_schedule(self, db: AsyncSession, teacher_id: str) -> List[Schedule]:
        if not await db.get(Teacher, teacher_id):
            raise ResourceNotFoundError("Teacher", teacher_id)
        return await self.list_schedules(db, teacher_id=teacher_id)

    async def update_schedule(self, db: AsyncSession, schedule_id: str, data: ScheduleUpdate) -> Schedule:
        schedule = await self._load(db, schedule_id)
        updates = data.model_dump(exclude_unset=True, exclude_none=True)

        await self._check_refs(db, updates.get("teacher_id"), updates.get("subject_id"))

        teacher_id = updates.get("teacher_id", schedule.teacher_id)
        weekday = updates.get("weekday", schedule.weekday)
        start_time = updates.get("start_time", schedule.start_time)
        end_time = updates.get("end_time", schedule.end_time)
        validate_range(start_time, end_time)
        await self._ensure_free(db, teacher_id, weekday, start_time, end_time, exclude_id=schedule_id)

        for field, value in updates.items():
            setattr(schedule, field, value)
        await db.commit()

        logger.log_audit_event("update", "schedule", schedule_id, fields=sorted(updates))
        return await self._load(db, schedule_id)

    async def delete_schedule(self, db: AsyncSession, schedule_id: str) -> None:
        schedule = await self._load(db, schedule_id)
        await db.delete(schedule)
        await db.commit()
        logger.log_audit_event("delete", "schedule", schedule_id)


schedule_service = ScheduleService()
