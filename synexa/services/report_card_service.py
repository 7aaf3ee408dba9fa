"""
Report Card Service - boletins de notas

A report card lists, per subject, the term columns (MAC, NPP, NPT, MT) and
the annual average, which is the mean of the available term MTs. The term
MT here averages whatever components were launched, so a report card can be
printed mid-term.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import selectinload
from datetime import datetime
from typing import Optional, List, Tuple

from synexa.core.exceptions import ResourceNotFoundError, ValidationError
from synexa.core.logging_config import get_logger
from synexa.models.document import DocumentType, IssuedDocument
from synexa.models.enrollment import Enrollment, EnrollmentStatus
from synexa.models.grade import Grade, GradeType
from synexa.models.school_class import SchoolClass
from synexa.models.student import Student
from synexa.models.teacher import Teacher
from synexa.services.document_service import document_service
from synexa.services.pdf_service import pdf_service
from synexa.utils.grading import (
    calculate_mt, classify, final_status, general_average, format_shift, format_academic_year,
)

logger = get_logger(__name__)

TERMS = (1, 2, 3)


class ReportCardService:

    async def _active_enrollment(self, db: AsyncSession, student_id: str, year: int) -> Enrollment:
        result = await db.execute(
            select(Enrollment)
            .options(selectinload(Enrollment.school_class))
            .where(
                Enrollment.student_id == student_id,
                Enrollment.year == year,
                Enrollment.status == EnrollmentStatus.ACTIVE,
            )
        )
        enrollment = result.scalars().first()
        if not enrollment:
            raise ValidationError(f"Aluno não possui matrícula ativa no ano {year}")
        return enrollment

    async def report_card(
        self, db: AsyncSession, student_id: str, year: int, term: Optional[int] = None
    ) -> dict:
        student = await db.get(Student, student_id)
        if not student:
            raise ResourceNotFoundError("Student", student_id)

        enrollment = await self._active_enrollment(db, student_id, year)
        school_class = enrollment.school_class

        query = (
            select(Grade)
            .options(selectinload(Grade.subject), selectinload(Grade.teacher).selectinload(Teacher.user))
            .where(Grade.student_id == student_id, Grade.year == year)
        )
        if term:
            query = query.where(Grade.term == term)
        grades = list((await db.execute(query)).scalars().all())
        if not grades:
            raise ValidationError(f"Nenhuma nota encontrada para o aluno no ano {year}")

        terms = (term,) if term else TERMS
        by_subject = {}
        for grade in grades:
            entry = by_subject.setdefault(str(grade.subject_id), {
                "subject_id": str(grade.subject_id),
                "subject": grade.subject.name,
                "teacher": grade.teacher.name if grade.teacher else None,
                "components": {t: {} for t in terms},
            })
            if grade.term in entry["components"]:
                entry["components"][grade.term][grade.type] = grade.value

        subjects = []
        for entry in sorted(by_subject.values(), key=lambda e: e["subject"]):
            columns = []
            for t in terms:
                parts = entry["components"][t]
                mt = calculate_mt(parts.get(GradeType.MAC), parts.get(GradeType.NPP), parts.get(GradeType.NPT))
                columns.append({
                    "term": t,
                    "mac": parts.get(GradeType.MAC),
                    "npp": parts.get(GradeType.NPP),
                    "npt": parts.get(GradeType.NPT),
                    "mt": mt,
                    "classification": classify(mt),
                })
            final_average = general_average(c["mt"] for c in columns)
            subjects.append({
                "subject_id": entry["subject_id"],
                "subject": entry["subject"],
                "teacher": entry["teacher"],
                "terms": columns,
                "final_average": final_average,
                "classification": classify(final_average),
            })

        finals = [s["final_average"] for s in subjects]
        return {
            "student": {
                "id": str(student.id),
                "name": student.full_name,
                "student_number": student.student_number,
                "birth_date": student.birth_date.isoformat() if student.birth_date else None,
            },
            "class": {
                "id": str(school_class.id),
                "name": school_class.name,
                "shift": school_class.shift.value,
                "shift_label": format_shift(school_class.shift),
            },
            "year": year,
            "academic_year": format_academic_year(year),
            "terms": list(terms),
            "subjects": subjects,
            "general_average": general_average(finals),
            "final_status": final_status(finals),
            "generated_at": datetime.utcnow().isoformat(),
        }

    async def class_students(self, db: AsyncSession, class_id: str, year: int) -> List[dict]:
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
            .order_by(Student.first_name, Student.last_name)
        )
        return [
            {
                "id": str(s.id),
                "name": s.full_name,
                "student_number": s.student_number,
                "birth_date": s.birth_date,
            }
            for s in result.scalars().all()
        ]

    async def class_report_cards(
        self, db: AsyncSession, class_id: str, year: int, term: Optional[int] = None
    ) -> List[dict]:
        cards = []
        for student in await self.class_students(db, class_id, year):
            try:
                cards.append(await self.report_card(db, student["id"], year, term))
            except ValidationError as e:
                logger.warning(f"[ReportCards] Skipping {student['name']}: {e.message}")
        return cards

    async def report_card_pdf(
        self, db: AsyncSession, student_id: str, year: int,
        term: Optional[int] = None, issued_by: Optional[str] = None,
    ) -> Tuple[dict, bytes, IssuedDocument]:
        data = await self.report_card(db, student_id, year, term)
        pdf = pdf_service.report_card(data)
        label = f"{term}º Trimestre " if term else ""
        document = await document_service.issue(
            db, await db.get(Student, student_id), DocumentType.REPORT_CARD, pdf, issued_by,
            f"Boletim de Notas {label}{data['academic_year']}",
        )
        return data, pdf, document


report_card_service = ReportCardService()
