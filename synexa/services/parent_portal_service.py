"""
Parent Portal Service - read-only views for encarregados de educação

Every student-scoped call checks the parent-student link first.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_, exists
from sqlalchemy.orm import selectinload
from datetime import datetime
from pathlib import Path
from typing import Optional, Tuple

from synexa.core.config import settings
from synexa.core.exceptions import AuthorizationError, ResourceNotFoundError
from synexa.core.logging_config import get_logger
from synexa.models.communication import SchoolNotice
from synexa.models.document import IssuedDocument
from synexa.models.finance import Invoice, InvoiceStatus
from synexa.models.grade import Grade
from synexa.models.student import Student, parent_students
from synexa.models.teacher import Teacher
from synexa.models.user import User, UserRole
from synexa.services.finance_service import finance_service, invoice_summary
from synexa.services.storage_service import storage_service

logger = get_logger(__name__)

PAYMENTS_LIMIT = 20
MESSAGES_LIMIT = 50
DOCUMENTS_LIMIT = 50


def grade_status(average: float) -> str:
    if average >= 10:
        return "APROVADO"
    if average >= 7:
        return "EM_RECUPERACAO"
    return "REPROVADO"


def _student_view(student: Student) -> dict:
    return {
        "id": student.id,
        "name": student.full_name,
        "student_number": student.student_number,
        "birth_date": student.birth_date.isoformat(),
        "school_class": {
            "id": student.school_class.id,
            "name": student.school_class.name,
            "shift": student.school_class.shift.value,
        } if student.school_class else None,
    }


class ParentPortalService:

    async def validate_access(self, db: AsyncSession, parent: User, student_id: str) -> Student:
        linked = await db.execute(
            select(
                exists().where(
                    parent_students.c.parent_id == parent.id,
                    parent_students.c.student_id == student_id,
                )
            )
        )
        if not linked.scalar():
            logger.warning(f"[ParentPortal] Parent {parent.id} denied access to student {student_id}")
            raise AuthorizationError("Não tem permissão para aceder aos dados deste aluno")

        result = await db.execute(
            select(Student).options(selectinload(Student.school_class)).where(Student.id == student_id)
        )
        student = result.scalar_one_or_none()
        if not student:
            raise ResourceNotFoundError("Student", student_id)
        return student

    async def profile(self, db: AsyncSession, parent: User) -> dict:
        result = await db.execute(
            select(Student)
            .options(selectinload(Student.school_class))
            .join(parent_students, parent_students.c.student_id == Student.id)
            .where(parent_students.c.parent_id == parent.id)
            .order_by(Student.first_name, Student.last_name)
        )
        return {
            "id": parent.id,
            "name": parent.name,
            "email": parent.email,
            "phone": parent.phone,
            "students": [_student_view(s) for s in result.scalars().all()],
            "created_at": parent.created_at,
        }

    async def student_grades(
        self, db: AsyncSession, parent: User, student_id: str, year: Optional[int] = None
    ) -> dict:
        student = await self.validate_access(db, parent, student_id)
        year = year or datetime.utcnow().year

        result = await db.execute(
            select(Grade)
            .options(
                selectinload(Grade.subject),
                selectinload(Grade.teacher).selectinload(Teacher.user),
            )
            .where(Grade.student_id == student_id, Grade.year == year)
            .order_by(Grade.created_at.desc())
        )
        grades = [
            {
                "subject_name": g.subject.name,
                "type": g.type.value,
                "term": g.term,
                "grade": g.value,
                "teacher_name": g.teacher.user.name if g.teacher and g.teacher.user else "Professor",
                "created_at": g.created_at.date().isoformat(),
            }
            for g in result.scalars().all()
        ]
        average = sum(g["grade"] for g in grades) / len(grades) if grades else 0.0

        return {
            "student": _student_view(student),
            "year": year,
            "grades": grades,
            "average_grade": round(average, 2),
            "status": grade_status(average),
        }

    async def student_payments(
        self,
        db: AsyncSession,
        parent: User,
        student_id: str,
        year: Optional[int] = None,
        status: Optional[InvoiceStatus] = None,
        limit: int = PAYMENTS_LIMIT,
    ) -> dict:
        student = await self.validate_access(db, parent, student_id)
        year = year or datetime.utcnow().year
        await finance_service.mark_overdue(db)

        query = (
            select(Invoice)
            .options(selectinload(Invoice.payments))
            .where(Invoice.student_id == student_id, Invoice.year == year)
            .execution_options(populate_existing=True)
        )
        if status:
            query = query.where(Invoice.status == status)
        query = query.order_by(Invoice.due_date.desc()).limit(limit)
        invoices = list((await db.execute(query)).scalars().all())

        summary = invoice_summary(invoices)
        return {
            "student": _student_view(student),
            "payments": [
                {
                    "id": invoice.id,
                    "document_number": invoice.document_number,
                    "description": invoice.description,
                    "amount": float(invoice.amount),
                    "due_date": invoice.due_date.isoformat(),
                    "status": invoice.status.value,
                    "total_paid": float(invoice.total_paid),
                    "remaining_balance": float(invoice.remaining_balance),
                    "period": f"{invoice.month}/{invoice.year}",
                }
                for invoice in invoices
            ],
            "summary": {
                "total_amount": summary["total_amount"],
                "total_paid": summary["total_paid"],
                "total_pending": summary["total_pending"],
                "overdue_count": summary["overdue_count"],
            },
        }

    async def school_messages(self, db: AsyncSession) -> list:
        now = datetime.utcnow()
        result = await db.execute(
            select(SchoolNotice)
            .where(
                SchoolNotice.published == True,  # noqa: E712
                or_(SchoolNotice.target_role.is_(None), SchoolNotice.target_role == UserRole.PARENT),
                or_(SchoolNotice.expires_at.is_(None), SchoolNotice.expires_at >= now),
            )
            .order_by(SchoolNotice.priority.desc(), SchoolNotice.published_at.desc())
            .limit(MESSAGES_LIMIT)
        )
        return [
            {
                "id": notice.id,
                "title": notice.title,
                "content": notice.content,
                "type": notice.type,
                "priority": notice.priority,
                "author": notice.author.name if notice.author else None,
                "published_at": notice.published_at,
                "expires_at": notice.expires_at,
            }
            for notice in result.scalars().all()
        ]

    async def student_documents(self, db: AsyncSession, parent: User, student_id: str) -> list:
        await self.validate_access(db, parent, student_id)
        result = await db.execute(
            select(IssuedDocument)
            .where(IssuedDocument.student_id == student_id)
            .order_by(IssuedDocument.created_at.desc())
            .limit(DOCUMENTS_LIMIT)
        )
        return [
            {
                "id": doc.id,
                "type": doc.type.value,
                "filename": doc.filename,
                "description": doc.description,
                "created_at": doc.created_at,
                "download_url": (
                    f"/api/{settings.API_VERSION}/parents-portal/students/{student_id}/documents/{doc.id}/download"
                ),
            }
            for doc in result.scalars().all()
        ]

    async def download_document(
        self, db: AsyncSession, parent: User, student_id: str, document_id: str
    ) -> Tuple[IssuedDocument, Path]:
        await self.validate_access(db, parent, student_id)
        result = await db.execute(
            select(IssuedDocument).where(
                IssuedDocument.id == document_id, IssuedDocument.student_id == student_id
            )
        )
        document = result.scalar_one_or_none()
        if not document:
            raise ResourceNotFoundError("Document", document_id)

        path = settings.documents_dir / document.filename
        if not await storage_service.exists(str(path)):
            logger.error(f"[ParentPortal] Document {document_id} missing on disk: {path}")
            raise ResourceNotFoundError("Document file", document_id)
        return document, path


parent_portal_service = ParentPortalService()
