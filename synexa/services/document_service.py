"""
Document Service - certificados, declarações and históricos escolares

Each document has three forms:
- data: the dict the PDF is rendered from
- pdf: the rendered bytes, also recorded as an IssuedDocument
- with-pdf: the data plus the PDF encoded in base64
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import selectinload
from datetime import datetime
from typing import Optional, Tuple
import base64
import uuid

from synexa.core.exceptions import AuthorizationError, ResourceNotFoundError, ValidationError
from synexa.core.logging_config import get_logger
from synexa.models.document import IssuedDocument, DocumentType
from synexa.models.enrollment import Enrollment, EnrollmentStatus
from synexa.models.grade import Grade, GradeType
from synexa.models.student import Student
from synexa.services.pdf_service import pdf_service
from synexa.services.storage_service import storage_service
from synexa.utils.grading import PASS_MARK, format_shift_period, format_academic_year

logger = get_logger(__name__)

DOCUMENTS_FOLDER = "documents"

DESCRIPTIONS = {
    DocumentType.CERTIFICATE: "Certificado de Habilitações",
    DocumentType.DECLARATION: "Declaração de Matrícula",
    DocumentType.TRANSCRIPT: "Histórico Escolar",
    DocumentType.REPORT_CARD: "Boletim de Notas",
    DocumentType.INVOICE: "Fatura",
}


def _student_block(student: Student) -> dict:
    return {
        "id": str(student.id),
        "name": student.full_name,
        "student_number": student.student_number,
        "birth_date": student.birth_date.strftime("%d/%m/%Y") if student.birth_date else None,
        "bi_number": student.bi_number,
        "guardian_name": student.guardian_name,
    }


def _subject_averages(grades) -> list:
    """Annual average per subject from its MT grades, 2 decimals"""
    by_subject = {}
    for grade in grades:
        by_subject.setdefault(grade.subject.name, []).append(grade.value)
    subjects = []
    for name in sorted(by_subject):
        values = by_subject[name]
        average = round(sum(values) / len(values), 2)
        subjects.append({
            "subject": name,
            "average": average,
            "status": "APROVADO" if average >= PASS_MARK else "REPROVADO",
        })
    return subjects


class DocumentService:

    async def _student(self, db: AsyncSession, student_id: str) -> Student:
        student = await db.get(Student, student_id)
        if not student:
            raise ResourceNotFoundError("Student", student_id)
        return student

    async def _mt_grades(self, db: AsyncSession, student_id: str, year: int):
        result = await db.execute(
            select(Grade)
            .options(selectinload(Grade.subject))
            .where(Grade.student_id == student_id, Grade.year == year, Grade.type == GradeType.MT)
        )
        return list(result.scalars().all())

    # ==================== DATA ====================

    async def certificate_data(self, db: AsyncSession, student_id: str, year: int) -> dict:
        student = await self._student(db, student_id)

        result = await db.execute(
            select(Enrollment)
            .options(selectinload(Enrollment.school_class))
            .where(Enrollment.student_id == student_id, Enrollment.year == year)
            .order_by(Enrollment.created_at.desc())
        )
        enrollment = result.scalars().first()
        if not enrollment:
            raise ValidationError(f"Aluno não possui matrícula no ano {year}")

        grades = await self._mt_grades(db, student_id, year)
        if not grades:
            raise ValidationError(f"Aluno não possui notas registradas no ano {year}")

        subjects = _subject_averages(grades)
        overall = round(sum(s["average"] for s in subjects) / len(subjects), 2)
        if overall < PASS_MARK:
            raise AuthorizationError(
                f"Não é possível gerar certificado para aluno com média {overall}. Média mínima: {PASS_MARK}"
            )

        school_class = enrollment.school_class
        return {
            "document_type": DocumentType.CERTIFICATE.value,
            "student": _student_block(student),
            "class": {
                "name": school_class.name,
                "shift": school_class.shift.value,
                "period": format_shift_period(school_class.shift),
            },
            "year": year,
            "academic_year": format_academic_year(year),
            "subjects": subjects,
            "overall_average": overall,
            "issued_at": datetime.utcnow().isoformat(),
        }

    async def declaration_data(
        self, db: AsyncSession, student_id: str, year: int, purpose: Optional[str] = None
    ) -> dict:
        student = await self._student(db, student_id)

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

        school_class = enrollment.school_class
        return {
            "document_type": DocumentType.DECLARATION.value,
            "student": _student_block(student),
            "class": {
                "name": school_class.name,
                "shift": school_class.shift.value,
                "period": format_shift_period(school_class.shift),
            },
            "year": year,
            "academic_year": format_academic_year(year),
            "enrollment_status": enrollment.status.value,
            "purpose": purpose,
            "issued_at": datetime.utcnow().isoformat(),
        }

    async def transcript_data(
        self,
        db: AsyncSession,
        student_id: str,
        start_year: Optional[int] = None,
        end_year: Optional[int] = None,
    ) -> dict:
        student = await self._student(db, student_id)

        query = (
            select(Enrollment)
            .options(selectinload(Enrollment.school_class))
            .where(Enrollment.student_id == student_id)
        )
        if start_year:
            query = query.where(Enrollment.year >= start_year)
        if end_year:
            query = query.where(Enrollment.year <= end_year)
        enrollments = list((await db.execute(query.order_by(Enrollment.year, Enrollment.created_at))).scalars().all())
        if not enrollments:
            raise ValidationError("Nenhuma matrícula encontrada para o período especificado")

        years = []
        all_averages = []
        for enrollment in enrollments:
            subjects = _subject_averages(await self._mt_grades(db, student_id, enrollment.year))
            averages = [s["average"] for s in subjects]
            year_average = round(sum(averages) / len(averages), 2) if averages else 0.0
            all_averages.extend(averages)
            years.append({
                "year": enrollment.year,
                "academic_year": format_academic_year(enrollment.year),
                "class_name": enrollment.school_class.name,
                "enrollment_status": enrollment.status.value,
                "subjects": subjects,
                "average": year_average,
                "status": "APROVADO" if year_average >= PASS_MARK else "REPROVADO",
            })

        overall = round(sum(all_averages) / len(all_averages), 2) if all_averages else 0.0
        if enrollments[-1].status == EnrollmentStatus.ACTIVE:
            status = "CURSANDO"
        elif overall >= PASS_MARK:
            status = "CONCLUÍDO"
        else:
            status = "REPROVADO"

        return {
            "document_type": DocumentType.TRANSCRIPT.value,
            "student": _student_block(student),
            "years": years,
            "overall_average": overall,
            "status": status,
            "issued_at": datetime.utcnow().isoformat(),
        }

    # ==================== ISSUING ====================

    async def issue(
        self,
        db: AsyncSession,
        student: Student,
        doc_type: DocumentType,
        pdf: bytes,
        issued_by: Optional[str] = None,
        description: Optional[str] = None,
    ) -> IssuedDocument:
        """Persist a rendered PDF and record it for the parent portal"""
        stamp = datetime.utcnow().strftime("%Y%m%d%H%M%S")
        filename = f"{doc_type.value.lower()}_{student.student_number}_{stamp}_{uuid.uuid4().hex[:8]}.pdf"
        await storage_service.save(DOCUMENTS_FOLDER, filename, pdf)

        document = IssuedDocument(
            student_id=student.id,
            type=doc_type,
            filename=filename,
            description=description or DESCRIPTIONS[doc_type],
            issued_by=issued_by,
        )
        db.add(document)
        await db.commit()
        await db.refresh(document)

        logger.log_audit_event(
            "issue", "document", str(document.id),
            actor_id=issued_by, doc_type=doc_type.value, student_id=str(student.id),
        )
        return document

    async def certificate_pdf(
        self, db: AsyncSession, student_id: str, year: int, issued_by: Optional[str] = None
    ) -> Tuple[dict, bytes, IssuedDocument]:
        data = await self.certificate_data(db, student_id, year)
        pdf = pdf_service.certificate(data)
        document = await self.issue(
            db, await self._student(db, student_id), DocumentType.CERTIFICATE, pdf, issued_by,
            f"Certificado de Habilitações {data['academic_year']}",
        )
        return data, pdf, document

    async def declaration_pdf(
        self, db: AsyncSession, student_id: str, year: int,
        purpose: Optional[str] = None, issued_by: Optional[str] = None,
    ) -> Tuple[dict, bytes, IssuedDocument]:
        data = await self.declaration_data(db, student_id, year, purpose)
        pdf = pdf_service.declaration(data)
        document = await self.issue(
            db, await self._student(db, student_id), DocumentType.DECLARATION, pdf, issued_by,
            f"Declaração de Matrícula {data['academic_year']}",
        )
        return data, pdf, document

    async def transcript_pdf(
        self, db: AsyncSession, student_id: str,
        start_year: Optional[int] = None, end_year: Optional[int] = None, issued_by: Optional[str] = None,
    ) -> Tuple[dict, bytes, IssuedDocument]:
        data = await self.transcript_data(db, student_id, start_year, end_year)
        pdf = pdf_service.transcript(data)
        document = await self.issue(
            db, await self._student(db, student_id), DocumentType.TRANSCRIPT, pdf, issued_by,
        )
        return data, pdf, document

    @staticmethod
    def with_pdf(data: dict, pdf: bytes, document: IssuedDocument) -> dict:
        return {
            "data": data,
            "pdf": base64.b64encode(pdf).decode("ascii"),
            "filename": document.filename,
            "document_id": str(document.id),
        }


document_service = DocumentService()
