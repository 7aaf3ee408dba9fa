"""
Attendance Service - chamada (roll call) per class, subject and day
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import selectinload
from datetime import date
from typing import Optional

from synexa.core.exceptions import (
    AuthorizationError, ResourceNotFoundError, ValidationError,
)
from synexa.core.logging_config import get_logger
from synexa.models.attendance import Attendance
from synexa.models.enrollment import Enrollment, EnrollmentStatus
from synexa.models.school_class import SchoolClass, class_teachers
from synexa.models.student import Student
from synexa.models.subject import Subject, subject_teachers
from synexa.models.teacher import Teacher
from synexa.models.user import User, UserRole
from synexa.schemas.attendance import MarkAttendanceRequest, AttendanceUpdate
from synexa.utils.pagination import paginate

logger = get_logger(__name__)


def _percentage(part: int, total: int) -> float:
    return round(part / total * 100, 1) if total else 0.0


class AttendanceService:

    async def _resolve_teacher(
        self, db: AsyncSession, user: User, class_id: str, subject_id: str
    ) -> Teacher:
        if user.role == UserRole.PROFESSOR:
            result = await db.execute(
                select(Teacher)
                .options(selectinload(Teacher.subjects), selectinload(Teacher.classes))
                .where(Teacher.user_id == user.id)
            )
            teacher = result.scalar_one_or_none()
            if not teacher:
                raise ResourceNotFoundError("Teacher")
            if subject_id not in {str(s.id) for s in teacher.subjects}:
                raise AuthorizationError("Professor não leciona esta disciplina")
            if class_id not in {str(c.id) for c in teacher.classes}:
                raise AuthorizationError("Professor não leciona para esta turma")
            return teacher

        result = await db.execute(
            select(Teacher)
            .join(subject_teachers, subject_teachers.c.teacher_id == Teacher.id)
            .join(class_teachers, class_teachers.c.teacher_id == Teacher.id)
            .where(subject_teachers.c.subject_id == subject_id, class_teachers.c.class_id == class_id)
            .limit(1)
        )
        teacher = result.scalars().first()
        if not teacher:
            raise ValidationError("Nenhum professor encontrado para esta disciplina e turma")
        return teacher

    def _roster(self, school_class: SchoolClass):
        """Students ACTIVE in the class for the class's own academic year"""
        return (
            select(Student)
            .join(Enrollment, Enrollment.student_id == Student.id)
            .where(
                Enrollment.class_id == school_class.id,
                Enrollment.year == school_class.year,
                Enrollment.status == EnrollmentStatus.ACTIVE,
            )
            .distinct()
        )

    async def active_student_ids(self, db: AsyncSession, school_class: SchoolClass) -> set:
        result = await db.execute(self._roster(school_class))
        return {str(s.id) for s in result.scalars().all()}

    async def mark_attendance(self, db: AsyncSession, data: MarkAttendanceRequest, user: User) -> dict:
        if data.date > date.today():
            raise ValidationError("Não é possível registrar presença para datas futuras", field="date")

        teacher = await self._resolve_teacher(db, user, data.class_id, data.subject_id)

        school_class = await db.get(SchoolClass, data.class_id)
        if not school_class:
            raise ResourceNotFoundError("Class", data.class_id)
        if not await db.get(Subject, data.subject_id):
            raise ResourceNotFoundError("Subject", data.subject_id)

        enrolled = await self.active_student_ids(db, school_class)
        offenders = sorted({r.student_id for r in data.attendances} - enrolled)
        if offenders:
            raise ValidationError(
                "Alguns alunos não estão matriculados ativamente nesta turma: " + ", ".join(offenders),
                field="attendances",
            )

        result = await db.execute(
            select(Attendance).where(
                Attendance.date == data.date,
                Attendance.subject_id == data.subject_id,
                Attendance.student_id.in_([r.student_id for r in data.attendances]),
            )
        )
        existing = {str(a.student_id): a for a in result.scalars().all()}

        created = updated = 0
        for record in data.attendances:
            current = existing.get(record.student_id)
            if current:
                current.present = record.present
                current.justified = record.justified
                if record.note is not None:
                    current.note = record.note
                current.class_id = data.class_id
                current.teacher_id = teacher.id
                updated += 1
            else:
                attendance = Attendance(
                    date=data.date,
                    student_id=record.student_id,
                    subject_id=data.subject_id,
                    class_id=data.class_id,
                    teacher_id=teacher.id,
                    present=record.present,
                    justified=record.justified,
                    note=record.note,
                )
                db.add(attendance)
                existing[record.student_id] = attendance
                created += 1

        await db.commit()
        logger.log_audit_event(
            "mark", "attendance", None,
            class_id=data.class_id, subject_id=data.subject_id, date=data.date.isoformat(),
            created_count=created, updated_count=updated,
        )
        return {"message": "Chamada registrada com sucesso", "created": created, "updated": updated}

    async def class_attendance(
        self, db: AsyncSession, class_id: str, on_date: date, subject_id: Optional[str] = None
    ) -> dict:
        school_class = await db.get(SchoolClass, class_id)
        if not school_class:
            raise ResourceNotFoundError("Class", class_id)

        result = await db.execute(
            self._roster(school_class).order_by(Student.first_name, Student.last_name)
        )
        students = list(result.scalars().all())

        query = select(Attendance).where(
            Attendance.date == on_date,
            Attendance.student_id.in_([s.id for s in students]),
        )
        if subject_id:
            query = query.where(Attendance.subject_id == subject_id)
        records = {str(a.student_id): a for a in (await db.execute(query)).scalars().all()}

        rows = []
        for student in students:
            record = records.get(str(student.id))
            rows.append({
                "student_id": str(student.id),
                "student_name": student.full_name,
                "present": record.present if record else False,
                "justified": record.justified if record else False,
                "note": record.note if record else None,
            })

        subject = await db.get(Subject, subject_id) if subject_id else None
        return {
            "class": {"id": str(school_class.id), "name": school_class.name, "shift": school_class.shift.value},
            "date": on_date.isoformat(),
            "subject": {"id": str(subject.id), "name": subject.name} if subject else None,
            "attendances": rows,
            "summary": {
                "total_students": len(rows),
                "total_present": sum(1 for r in rows if r["present"]),
                "total_absent": sum(1 for r in rows if not r["present"]),
                "total_justified": sum(1 for r in rows if r["justified"]),
            },
        }

    async def student_attendance(
        self,
        db: AsyncSession,
        student_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        subject_id: Optional[str] = None,
    ) -> dict:
        student = await db.get(Student, student_id)
        if not student:
            raise ResourceNotFoundError("Student", student_id)

        query = select(Attendance).options(selectinload(Attendance.subject)).where(
            Attendance.student_id == student_id
        )
        if start_date:
            query = query.where(Attendance.date >= start_date)
        if end_date:
            query = query.where(Attendance.date <= end_date)
        if subject_id:
            query = query.where(Attendance.subject_id == subject_id)
        records = list((await db.execute(query)).scalars().all())

        by_subject = {}
        for record in records:
            entry = by_subject.setdefault(str(record.subject_id), {
                "subject_id": str(record.subject_id),
                "subject_name": record.subject.name,
                "total_classes": 0,
                "total_present": 0,
            })
            entry["total_classes"] += 1
            if record.present:
                entry["total_present"] += 1
        for entry in by_subject.values():
            entry["attendance_percentage"] = _percentage(entry["total_present"], entry["total_classes"])

        total = len(records)
        present = sum(1 for r in records if r.present)
        return {
            "student": {"id": str(student.id), "name": student.full_name, "email": student.parent_email},
            "total_classes": total,
            "total_present": present,
            "total_absent": total - present,
            "total_justified": sum(1 for r in records if r.justified),
            "attendance_percentage": _percentage(present, total),
            "by_subject": sorted(by_subject.values(), key=lambda e: e["subject_name"]),
        }

    async def list_attendances(
        self,
        db: AsyncSession,
        page: int = 1,
        page_size: int = 20,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        subject_id: Optional[str] = None,
        student_id: Optional[str] = None,
        class_id: Optional[str] = None,
    ) -> dict:
        query = (
            select(Attendance)
            .join(Student, Attendance.student_id == Student.id)
            .options(selectinload(Attendance.student), selectinload(Attendance.subject))
        )
        if start_date:
            query = query.where(Attendance.date >= start_date)
        if end_date:
            query = query.where(Attendance.date <= end_date)
        if subject_id:
            query = query.where(Attendance.subject_id == subject_id)
        if student_id:
            query = query.where(Attendance.student_id == student_id)
        if class_id:
            query = query.where(Attendance.class_id == class_id)

        query = query.order_by(Attendance.date.desc(), Student.first_name)
        return await paginate(db, query, page, page_size)

    async def _load(self, db: AsyncSession, attendance_id: str) -> Attendance:
        result = await db.execute(
            select(Attendance)
            .options(selectinload(Attendance.student), selectinload(Attendance.subject))
            .where(Attendance.id == attendance_id)
            .execution_options(populate_existing=True)
        )
        attendance = result.scalar_one_or_none()
        if not attendance:
            raise ResourceNotFoundError("Attendance", attendance_id)
        return attendance

    async def update_attendance(
        self, db: AsyncSession, attendance_id: str, data: AttendanceUpdate, user: User
    ) -> Attendance:
        if user.role not in (UserRole.ADMIN, UserRole.SECRETARIA):
            raise AuthorizationError("Apenas a administração pode alterar registos de presença")

        attendance = await self._load(db, attendance_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(attendance, field, value)
        await db.commit()

        logger.log_audit_event("update", "attendance", attendance_id)
        return await self._load(db, attendance_id)

    async def delete_attendance(self, db: AsyncSession, attendance_id: str) -> None:
        attendance = await self._load(db, attendance_id)
        await db.delete(attendance)
        await db.commit()
        logger.log_audit_event("delete", "attendance", attendance_id)


attendance_service = AttendanceService()
