"""
API Tests for the dashboard overview
"""
from datetime import date, timedelta
from decimal import Decimal

import pytest
from httpx import AsyncClient

from synexa.models import Attendance, Invoice, InvoiceStatus


async def add_invoice(db, student, number: int, status: InvoiceStatus) -> None:
    db.add(Invoice(
        number=number,
        student_id=student.id,
        amount=Decimal("15000.00"),
        due_date=date.today() + timedelta(days=30),
        description=f"Propina {number}",
        month=number,
        year=date.today().year,
        status=status,
    ))
    await db.commit()


class TestOverview:

    @pytest.mark.asyncio
    async def test_overview(self, client: AsyncClient, db_session, diretor_headers, enrolled_student, subject, teacher):
        this_year = date.today().year
        for day, present in ((date(this_year, 3, 10), True), (date(this_year, 3, 11), False)):
            db_session.add(Attendance(
                date=day, student_id=enrolled_student.id, subject_id=subject.id, present=present,
            ))
        await db_session.commit()
        await add_invoice(db_session, enrolled_student, 1, InvoiceStatus.PAGA)
        await add_invoice(db_session, enrolled_student, 2, InvoiceStatus.PENDENTE)
        await add_invoice(db_session, enrolled_student, 3, InvoiceStatus.CANCELADA)

        response = await client.get("/api/v1/analytics/overview", headers=diretor_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["year"] == date.today().year
        assert data["total_students"] == 1
        assert data["total_teachers"] == 1
        assert data["total_classes"] == 1
        assert data["total_subjects"] == 1
        assert data["enrollments_by_shift"] == [{"shift": "MORNING", "label": "Manhã", "value": 1}]
        assert data["attendance_rate"] == 50.0
        assert data["payment_rate"] == 50.0

    @pytest.mark.asyncio
    async def test_empty_year(self, client: AsyncClient, admin_headers, enrolled_student):
        response = await client.get(
            "/api/v1/analytics/overview", headers=admin_headers, params={"year": date.today().year - 5}
        )

        data = response.json()
        assert data["total_students"] == 0
        assert data["enrollments_by_shift"] == []
        assert data["attendance_rate"] == 0.0
        assert data["payment_rate"] == 0.0

    @pytest.mark.asyncio
    async def test_secretaria_not_allowed(self, client: AsyncClient, secretaria_headers):
        response = await client.get("/api/v1/analytics/overview", headers=secretaria_headers)

        assert response.status_code == 403
