"""
Enrollment Service - matrículas

Rules enforced here:
- a student holds at most one ACTIVE enrollment per academic year
- a class never holds more ACTIVE enrollments for its year than its capacity
- the enrollment year is the class's academic year
- enrolling updates the student's current class and academic year
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from sqlalchemy.orm import selectinload
from datetime import datetime
from typing import Optional, List

from synexa.core.exceptions import ConflictError, ResourceNotFoundError, ValidationError
from synexa.core.logging_config import get_logger
from synexa.models.enrollment import Enrollment, EnrollmentStatus
from synexa.models.school_class import SchoolClass
from synexa.models.student import Student
from synexa.models.student_record import TimelineEventType
from synexa.schemas.enrollment import EnrollmentCreate, EnrollmentWithStudentCreate, EnrollmentUpdate
from synexa.services.student_service import normalize_bi, timeline_event
from synexa.utils.grading import format_academic_year
from synexa.utils.pagination import paginate

logger = get_logger(__name__)

PLACEHOLDER_PARENT_EMAIL = "nao.informado@email.com"
PLACEHOLDER_PARENT_PHONE = "000000000"


class EnrollmentService:

    def _with_relations(self):
        return select(Enrollment).options(
            selectinload(Enrollment.student), selectinload(Enrollment.school_class)
        )

    async def _load(self, db: AsyncSession, enrollment_id: str) -> Enrollment:
        result = await db.execute(
            self._with_relations()
            .where(Enrollment.id == enrollment_id)
            .execution_options(populate_existing=True)
        )
        enrollment = result.scalar_one_or_none()
        if not enrollment:
            raise ResourceNotFoundError("Enrollment", enrollment_id)
        return enrollment

    async def _get_class(self, db: AsyncSession, class_id: str) -> SchoolClass:
        school_class = await db.get(SchoolClass, class_id)
        if not school_class:
            raise ResourceNotFoundError("Class", class_id)
        return school_class

    async def _ensure_no_active(
        self, db: AsyncSession, student_id: str, year: int, exclude_id: Optional[str] = None
    ) -> None:
        query = select(Enrollment.id).where(
            Enrollment.student_id == student_id,
            Enrollment.year == year,
            Enrollment.status == EnrollmentStatus.ACTIVE,
        )
        if exclude_id:
            query = query.where(Enrollment.id != exclude_id)
        if (await db.execute(query)).first():
            raise ConflictError(f"Aluno já possui matrícula ativa no ano letivo {year}")

    def _ensure_class_year(self, school_class: SchoolClass, year: int) -> None:
        if school_class.year != year:
            raise ValidationError(
                f"A turma {school_class.name} pertence ao ano letivo {school_class.year}, não a {year}",
                field="year",
            )

    async def _ensure_capacity(
        self, db: AsyncSession, school_class: SchoolClass, year: int, exclude_id: Optional[str] = None
    ) -> None:
        query = select(func.count(Enrollment.id)).where(
            Enrollment.class_id == school_class.id,
            Enrollment.year == year,
            Enrollment.status == EnrollmentStatus.ACTIVE,
        )
        if exclude_id:
            query = query.where(Enrollment.id != exclude_id)
        active = (await db.execute(query)).scalar() or 0
        if active >= school_class.capacity:
            raise ValidationError(
                f"Turma {school_class.name} já atingiu a capacidade máxima ({school_class.capacity})",
                field="class_id",
            )

    async def _enroll(
        self,
        db: AsyncSession,
        student: Student,
        school_class: SchoolClass,
        year: int,
        status: EnrollmentStatus,
    ) -> Enrollment:
        self._ensure_class_year(school_class, year)
        await self._ensure_no_active(db, student.id, year)
        if status == EnrollmentStatus.ACTIVE:
            await self._ensure_capacity(db, school_class, year)

        enrollment = Enrollment(
            student_id=student.id,
            class_id=school_class.id,
            year=year,
            status=status,
        )
        db.add(enrollment)

        student.class_id = school_class.id
        student.academic_year = str(year)
        db.add(timeline_event(
            student.id, TimelineEventType.MATRICULA,
            f"Matrícula em {school_class.name} ({year})",
            metadata={"class_id": str(school_class.id), "year": year, "status": status.value},
        ))

        await db.commit()

        logger.log_audit_event(
            "create", "enrollment", str(enrollment.id),
            student_id=str(student.id), class_id=str(school_class.id), year=year, status=status.value,
        )
        return await self._load(db, enrollment.id)

    async def create_enrollment(self, db: AsyncSession, data: EnrollmentCreate) -> Enrollment:
        student = await db.get(Student, data.student_id)
        if not student:
            raise ResourceNotFoundError("Student", data.student_id)
        school_class = await self._get_class(db, data.class_id)
        return await self._enroll(db, student, school_class, data.year, data.status)

    async def _next_student_number(self, db: AsyncSession) -> str:
        year = datetime.utcnow().year
        count = (await db.execute(select(func.count(Student.id)))).scalar() or 0
        while True:
            count += 1
            candidate = f"{year}{count:04d}"
            taken = await db.execute(select(Student.id).where(Student.student_number == candidate))
            if not taken.first():
                return candidate

    async def _find_or_create_student(self, db: AsyncSession, data: EnrollmentWithStudentCreate) -> Student:
        bi_number = normalize_bi(data.bi_number)
        if bi_number:
            result = await db.execute(select(Student).where(Student.bi_number == bi_number))
            existing = result.scalar_one_or_none()
            if existing:
                logger.info(f"Enrollment reusing student {existing.id} found by BI {bi_number}")
                return existing

        result = await db.execute(
            select(Student).where(
                func.lower(Student.first_name) == data.first_name.lower(),
                func.lower(Student.last_name) == data.last_name.lower(),
                Student.birth_date == data.birth_date,
            )
        )
        duplicate = result.scalars().first()
        if duplicate:
            raise ConflictError(
                f'Já existe um aluno "{data.first_name} {data.last_name}" nascido em '
                f"{data.birth_date.isoformat()}. Verifique se não é duplicação "
                f"ou use o BI {duplicate.bi_number or '(sem BI)'} para matricular.",
                conflicts=[{"student_id": str(duplicate.id), "student_number": duplicate.student_number}],
            )

        student = Student(
            first_name=data.first_name,
            last_name=data.last_name,
            gender=data.gender,
            birth_date=data.birth_date,
            bi_number=bi_number,
            phone=data.phone,
            student_number=await self._next_student_number(db),
            guardian_name=data.guardian_name,
            guardian_phone=data.guardian_phone,
            municipality=data.municipality,
            province=data.province,
            country="Angola",
            parent_email=data.parent_email or PLACEHOLDER_PARENT_EMAIL,
            parent_phone=data.guardian_phone or PLACEHOLDER_PARENT_PHONE,
            tags=[data.observation] if data.observation else [],
        )
        db.add(student)
        await db.flush()
        logger.log_audit_event("create", "student", str(student.id), student_number=student.student_number)
        return student

    async def create_with_student(self, db: AsyncSession, data: EnrollmentWithStudentCreate) -> Enrollment:
        """Enroll a new student, or an existing one found by BI, in a single step"""
        school_class = await self._get_class(db, data.class_id)
        student = await self._find_or_create_student(db, data)
        return await self._enroll(db, student, school_class, data.year, EnrollmentStatus.ACTIVE)

    async def list_enrollments(
        self,
        db: AsyncSession,
        page: int = 1,
        page_size: int = 10,
        year: Optional[int] = None,
        status: Optional[EnrollmentStatus] = None,
        class_id: Optional[str] = None,
    ) -> dict:
        query = self._with_relations()
        if year:
            query = query.where(Enrollment.year == year)
        if status:
            query = query.where(Enrollment.status == status)
        if class_id:
            query = query.where(Enrollment.class_id == class_id)
        query = query.order_by(Enrollment.year.desc(), Enrollment.created_at.desc())
        return await paginate(db, query, page, page_size)

    async def get_enrollment(self, db: AsyncSession, enrollment_id: str) -> Enrollment:
        return await self._load(db, enrollment_id)

    async def by_student(self, db: AsyncSession, student_id: str) -> List[Enrollment]:
        if not await db.get(Student, student_id):
            raise ResourceNotFoundError("Student", student_id)
        result = await db.execute(
            self._with_relations()
            .where(Enrollment.student_id == student_id)
            .order_by(Enrollment.year.desc(), Enrollment.created_at.desc())
        )
        return list(result.scalars().all())

    async def by_year(self, db: AsyncSession, year: int) -> List[Enrollment]:
        result = await db.execute(
            self._with_relations()
            .join(Student, Enrollment.student_id == Student.id)
            .where(Enrollment.year == year)
            .order_by(Student.first_name, Student.last_name)
        )
        return list(result.scalars().all())

    async def by_class(self, db: AsyncSession, class_id: str, year: Optional[int] = None) -> List[Enrollment]:
        await self._get_class(db, class_id)
        query = (
            self._with_relations()
            .join(Student, Enrollment.student_id == Student.id)
            .where(Enrollment.class_id == class_id)
        )
        if year:
            query = query.where(Enrollment.year == year)
        result = await db.execute(query.order_by(Student.first_name, Student.last_name))
        return list(result.scalars().all())

    async def update_enrollment(self, db: AsyncSession, enrollment_id: str, data: EnrollmentUpdate) -> Enrollment:
        enrollment = await self._load(db, enrollment_id)

        target_status = data.status or enrollment.status
        target_class = enrollment.school_class
        if data.class_id:
            target_class = await self._get_class(db, data.class_id)
            self._ensure_class_year(target_class, enrollment.year)

        if target_status == EnrollmentStatus.ACTIVE:
            await self._ensure_no_active(db, enrollment.student_id, enrollment.year, exclude_id=enrollment_id)
            await self._ensure_capacity(db, target_class, enrollment.year, exclude_id=enrollment_id)

        enrollment.status = target_status
        if data.class_id and str(target_class.id) != str(enrollment.class_id):
            enrollment.class_id = target_class.id
            if target_status == EnrollmentStatus.ACTIVE:
                enrollment.student.class_id = target_class.id

        await db.commit()
        logger.log_audit_event(
            "update", "enrollment", enrollment_id,
            status=target_status.value, class_id=str(target_class.id),
        )
        return await self._load(db, enrollment_id)

    async def cancel_enrollment(self, db: AsyncSession, enrollment_id: str) -> Enrollment:
        enrollment = await self._load(db, enrollment_id)
        enrollment.status = EnrollmentStatus.CANCELLED
        await db.commit()
        logger.log_audit_event("cancel", "enrollment", enrollment_id)
        return await self._load(db, enrollment_id)

    async def academic_years(self, db: AsyncSession) -> List[dict]:
        result = await db.execute(
            select(Enrollment.year).distinct().order_by(Enrollment.year.desc())
        )
        return [
            {"year": year, "label": format_academic_year(year)}
            for year in result.scalars().all()
        ]


enrollment_service = EnrollmentService()
