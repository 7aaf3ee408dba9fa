"""
Grade Service - lançamento de notas and the Angolan term views

Grades are launched per component (MAC, NPP, NPT). The term average MT is
derived from the three components, see ``synexa.utils.grading.term_mt``.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import selectinload
from typing import Optional, List, Dict

from synexa.core.exceptions import (
    AuthorizationError, ConflictError, ResourceNotFoundError, ValidationError,
)
from synexa.core.logging_config import get_logger
from synexa.models.enrollment import Enrollment, EnrollmentStatus
from synexa.models.grade import Grade, GradeType
from synexa.models.school_class import SchoolClass
from synexa.models.student import Student
from synexa.models.subject import Subject
from synexa.models.teacher import Teacher
from synexa.models.user import User, UserRole
from synexa.schemas.grade import GradeCreate, GradeUpdate
from synexa.utils.grading import term_mt, TERM_LABELS, PASS_MARK
from synexa.utils.pagination import paginate

logger = get_logger(__name__)

COMPONENTS = (GradeType.MAC, GradeType.NPP, GradeType.NPT)


def _components_by_subject(grades: List[Grade]) -> Dict[str, dict]:
    """Group MAC/NPP/NPT values per subject id"""
    grouped: Dict[str, dict] = {}
    for grade in grades:
        if grade.type not in COMPONENTS:
            continue
        entry = grouped.setdefault(str(grade.subject_id), {
            "subject_id": str(grade.subject_id),
            "subject": grade.subject.name,
            "mac": None,
            "npp": None,
            "npt": None,
        })
        entry[grade.type.value.lower()] = grade.value
    return grouped


def _overall(mts: List[float]) -> tuple:
    if not mts:
        return 0.0, "INCOMPLETO"
    average = round(sum(mts) / len(mts), 1)
    return average, "APROVADO" if average >= PASS_MARK else "REPROVADO"


class GradeService:

    def _with_relations(self):
        return select(Grade).options(
            selectinload(Grade.student),
            selectinload(Grade.subject),
            selectinload(Grade.teacher),
            selectinload(Grade.school_class),
        )

    async def _load(self, db: AsyncSession, grade_id: str) -> Grade:
        result = await db.execute(
            self._with_relations()
            .where(Grade.id == grade_id)
            .execution_options(populate_existing=True)
        )
        grade = result.scalar_one_or_none()
        if not grade:
            raise ResourceNotFoundError("Grade", grade_id)
        return grade

    async def _check_owner(self, db: AsyncSession, grade: Grade, user: User) -> None:
        if user.role == UserRole.ADMIN:
            return
        teacher = await db.get(Teacher, grade.teacher_id)
        if not teacher or str(teacher.user_id) != str(user.id):
            raise AuthorizationError("Só pode alterar notas que você mesmo lançou")

    async def create_grade(self, db: AsyncSession, data: GradeCreate, user: User) -> Grade:
        result = await db.execute(
            select(Teacher).options(selectinload(Teacher.subjects)).where(Teacher.id == data.teacher_id)
        )
        teacher = result.scalar_one_or_none()
        if not teacher:
            raise ResourceNotFoundError("Teacher", data.teacher_id)
        if user.role != UserRole.ADMIN and str(teacher.user_id) != str(user.id):
            raise AuthorizationError("Só pode lançar notas como o professor associado ao seu utilizador")
        if data.subject_id not in {str(s.id) for s in teacher.subjects}:
            raise AuthorizationError("Professor não leciona esta disciplina")

        if not await db.get(Student, data.student_id):
            raise ResourceNotFoundError("Student", data.student_id)
        if not await db.get(Subject, data.subject_id):
            raise ResourceNotFoundError("Subject", data.subject_id)
        if not await db.get(SchoolClass, data.class_id):
            raise ResourceNotFoundError("Class", data.class_id)

        enrolled = await db.execute(
            select(Enrollment.id).where(
                Enrollment.student_id == data.student_id,
                Enrollment.class_id == data.class_id,
                Enrollment.year == data.year,
                Enrollment.status == EnrollmentStatus.ACTIVE,
            )
        )
        if not enrolled.first():
            raise ValidationError("Aluno não está matriculado nesta turma no ano especificado")

        duplicate = await db.execute(
            select(Grade.id).where(
                Grade.student_id == data.student_id,
                Grade.subject_id == data.subject_id,
                Grade.type == data.type,
                Grade.term == data.term,
                Grade.year == data.year,
            )
        )
        if duplicate.first():
            raise ConflictError(
                f"Já existe uma nota {data.type.value} para este aluno nesta disciplina no {data.term}º trimestre"
            )

        grade = Grade(**data.model_dump())
        db.add(grade)
        await db.commit()

        logger.log_audit_event(
            "create", "grade", str(grade.id),
            student_id=data.student_id, subject_id=data.subject_id, type=data.type.value, term=data.term,
        )
        return await self._load(db, grade.id)

    async def list_grades(
        self,
        db: AsyncSession,
        page: int = 1,
        page_size: int = 10,
        student_id: Optional[str] = None,
        subject_id: Optional[str] = None,
        teacher_id: Optional[str] = None,
        class_id: Optional[str] = None,
        type: Optional[GradeType] = None,
        term: Optional[int] = None,
        year: Optional[int] = None,
        student_name: Optional[str] = None,
    ) -> dict:
        query = self._with_relations().join(Student, Grade.student_id == Student.id)
        if student_id:
            query = query.where(Grade.student_id == student_id)
        if subject_id:
            query = query.where(Grade.subject_id == subject_id)
        if teacher_id:
            query = query.where(Grade.teacher_id == teacher_id)
        if class_id:
            query = query.where(Grade.class_id == class_id)
        if type:
            query = query.where(Grade.type == type)
        if term:
            query = query.where(Grade.term == term)
        if year:
            query = query.where(Grade.year == year)
        if student_name:
            pattern = f"%{student_name}%"
            query = query.where(Student.first_name.ilike(pattern) | Student.last_name.ilike(pattern))

        query = query.order_by(Grade.year.desc(), Grade.term.desc(), Student.first_name)
        return await paginate(db, query, page, page_size)

    async def get_grade(self, db: AsyncSession, grade_id: str) -> Grade:
        return await self._load(db, grade_id)

    async def update_grade(self, db: AsyncSession, grade_id: str, data: GradeUpdate, user: User) -> Grade:
        grade = await self._load(db, grade_id)
        await self._check_owner(db, grade, user)

        updates = data.model_dump(exclude_unset=True)
        new_type = updates.get("type")
        if new_type and new_type != grade.type:
            clash = await db.execute(
                select(Grade.id).where(
                    Grade.student_id == grade.student_id,
                    Grade.subject_id == grade.subject_id,
                    Grade.type == new_type,
                    Grade.term == grade.term,
                    Grade.year == grade.year,
                )
            )
            if clash.first():
                raise ConflictError(f"Já existe uma nota {new_type.value} para este aluno neste trimestre")

        for field, value in updates.items():
            if value is not None:
                setattr(grade, field, value)
        await db.commit()

        logger.log_audit_event("update", "grade", grade_id)
        return await self._load(db, grade_id)

    async def delete_grade(self, db: AsyncSession, grade_id: str, user: User) -> None:
        grade = await self._load(db, grade_id)
        await self._check_owner(db, grade, user)
        await db.delete(grade)
        await db.commit()
        logger.log_audit_event("delete", "grade", grade_id)

    async def by_student_and_term(self, db: AsyncSession, student_id: str, term: int, year: int) -> List[Grade]:
        if not await db.get(Student, student_id):
            raise ResourceNotFoundError("Student", student_id)
        result = await db.execute(
            self._with_relations()
            .where(Grade.student_id == student_id, Grade.term == term, Grade.year == year)
            .order_by(Grade.created_at)
        )
        return list(result.scalars().all())

    async def by_class_and_term(self, db: AsyncSession, class_id: str, term: int, year: int) -> List[Grade]:
        if not await db.get(SchoolClass, class_id):
            raise ResourceNotFoundError("Class", class_id)
        result = await db.execute(
            self._with_relations()
            .join(Student, Grade.student_id == Student.id)
            .where(Grade.class_id == class_id, Grade.term == term, Grade.year == year)
            .order_by(Student.first_name, Grade.created_at)
        )
        return list(result.scalars().all())

    async def _term_components(self, db: AsyncSession, student_id: str, term: int, year: int) -> Dict[str, dict]:
        result = await db.execute(
            select(Grade)
            .options(selectinload(Grade.subject))
            .where(Grade.student_id == student_id, Grade.term == term, Grade.year == year)
        )
        return _components_by_subject(list(result.scalars().all()))

    async def student_term_grades(self, db: AsyncSession, student_id: str, term: int, year: int) -> dict:
        student = await db.get(Student, student_id)
        if not student:
            raise ResourceNotFoundError("Student", student_id)

        subjects = []
        valid_mts = []
        for entry in sorted((await self._term_components(db, student_id, term, year)).values(),
                            key=lambda e: e["subject"]):
            mt, status = term_mt(entry["mac"], entry["npp"], entry["npt"])
            subjects.append({**entry, "mt": mt, "status": status})
            if status != "INCOMPLETO":
                valid_mts.append(mt)

        average, overall_status = _overall(valid_mts)
        return {
            "student": student.full_name,
            "term": TERM_LABELS.get(term, str(term)),
            "year": year,
            "subjects": subjects,
            "average": average,
            "overall_status": overall_status,
        }

    async def class_term_summary(self, db: AsyncSession, class_id: str, term: int, year: int) -> List[dict]:
        if not await db.get(SchoolClass, class_id):
            raise ResourceNotFoundError("Class", class_id)

        result = await db.execute(
            select(Student)
            .join(Enrollment, Enrollment.student_id == Student.id)
            .where(
                Enrollment.class_id == class_id,
                Enrollment.year == year,
                Enrollment.status == EnrollmentStatus.ACTIVE,
            )
            .distinct()
        )
        rows = []
        for student in result.scalars().all():
            components = await self._term_components(db, student.id, term, year)
            mts = []
            for entry in components.values():
                mt, status = term_mt(entry["mac"], entry["npp"], entry["npt"])
                if status != "INCOMPLETO":
                    mts.append(mt)
            average, status = _overall(mts)
            rows.append({
                "student_id": str(student.id),
                "student": student.full_name,
                "mt": average,
                "status": status,
            })
        return sorted(rows, key=lambda r: r["student"].lower())

    async def subject_mt(self, db: AsyncSession, student_id: str, subject_id: str, term: int, year: int) -> dict:
        if not await db.get(Student, student_id):
            raise ResourceNotFoundError("Student", student_id)
        if not await db.get(Subject, subject_id):
            raise ResourceNotFoundError("Subject", subject_id)

        result = await db.execute(
            select(Grade).where(
                Grade.student_id == student_id,
                Grade.subject_id == subject_id,
                Grade.term == term,
                Grade.year == year,
            )
        )
        values = {g.type: g.value for g in result.scalars().all()}
        mac, npp, npt = (values.get(t) for t in COMPONENTS)
        mt, status = term_mt(mac, npp, npt)
        return {"mac": mac, "npp": npp, "npt": npt, "mt": mt, "status": status}


grade_service = GradeService()
