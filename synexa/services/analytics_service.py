"""
Analytics Service - the management dashboard overview for one academic year
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, case
from datetime import date

from synexa.core.logging_config import get_logger
from synexa.models.attendance import Attendance
from synexa.models.enrollment import Enrollment, EnrollmentStatus
from synexa.models.finance import Invoice, InvoiceStatus
from synexa.models.school_class import SchoolClass, Shift
from synexa.models.subject import Subject
from synexa.models.teacher import Teacher

logger = get_logger(__name__)

SHIFT_LABELS = {Shift.MORNING: "Manhã", Shift.AFTERNOON: "Tarde", Shift.EVENING: "Noite"}


def rate(part: int, whole: int) -> float:
    """Percentage with one decimal; 0.0 when there is nothing to measure"""
    return round(part * 100 / whole, 1) if whole else 0.0


class AnalyticsService:

    async def overview(self, db: AsyncSession, year: int) -> dict:
        active = (
            Enrollment.year == year,
            Enrollment.status == EnrollmentStatus.ACTIVE,
        )

        total_students = await db.scalar(
            select(func.count(func.distinct(Enrollment.student_id))).where(*active)
        ) or 0
        total_teachers = await db.scalar(select(func.count(Teacher.id))) or 0
        total_classes = await db.scalar(
            select(func.count(SchoolClass.id)).where(SchoolClass.year == year)
        ) or 0
        total_subjects = await db.scalar(select(func.count(Subject.id))) or 0

        shift_rows = await db.execute(
            select(SchoolClass.shift, func.count(Enrollment.id))
            .join(Enrollment, Enrollment.class_id == SchoolClass.id)
            .where(*active)
            .group_by(SchoolClass.shift)
        )
        by_shift = dict(shift_rows.all())
        enrollments_by_shift = [
            {"shift": shift.value, "label": SHIFT_LABELS[shift], "value": by_shift[shift]}
            for shift in Shift if by_shift.get(shift)
        ]

        attendance_total, attendance_present = (await db.execute(
            select(
                func.count(Attendance.id),
                func.sum(case((Attendance.present.is_(True), 1), else_=0)),
            ).where(Attendance.date.between(date(year, 1, 1), date(year, 12, 31)))
        )).one()

        invoice_total, invoice_paid = (await db.execute(
            select(
                func.count(Invoice.id),
                func.sum(case((Invoice.status == InvoiceStatus.PAGA, 1), else_=0)),
            ).where(Invoice.year == year, Invoice.status != InvoiceStatus.CANCELADA)
        )).one()

        logger.debug(f"[Analytics] overview {year}: {total_students} students, {attendance_total} attendance rows")
        return {
            "year": year,
            "total_students": total_students,
            "total_teachers": total_teachers,
            "total_classes": total_classes,
            "total_subjects": total_subjects,
            "enrollments_by_shift": enrollments_by_shift,
            "attendance_rate": rate(attendance_present or 0, attendance_total or 0),
            "payment_rate": rate(invoice_paid or 0, invoice_total or 0),
        }


analytics_service = AnalyticsService()
