"""
API Tests for the parents portal
"""
from datetime import date, timedelta

import pytest
from httpx import AsyncClient

from tests.conftest import add_grades, create_student


class TestProfile:

    @pytest.mark.asyncio
    async def test_profile_lists_children(self, client: AsyncClient, parent_with_child, parent_headers, student):
        response = await client.get("/api/v1/parents-portal/profile", headers=parent_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["email"] == parent_with_child.email
        assert [s["id"] for s in data["students"]] == [student.id]
        assert data["students"][0]["school_class"]["name"] == "7ª Classe A"

    @pytest.mark.asyncio
    async def test_staff_cannot_use_portal(self, client: AsyncClient, secretaria_headers):
        response = await client.get("/api/v1/parents-portal/profile", headers=secretaria_headers)

        assert response.status_code == 403


class TestChildAccess:

    @pytest.mark.asyncio
    async def test_unlinked_student_is_forbidden(
        self, client: AsyncClient, db_session, parent_with_child, parent_headers, school_class
    ):
        stranger = await create_student(db_session, school_class)

        for path in ("grades", "payments", "documents"):
            response = await client.get(
                f"/api/v1/parents-portal/students/{stranger.id}/{path}", headers=parent_headers
            )
            assert response.status_code == 403
            assert response.json()["error"]["code"] == "NOT_AUTHORIZED"

    @pytest.mark.asyncio
    async def test_grades(
        self, client: AsyncClient, db_session, parent_with_child, parent_headers,
        teacher, subject, school_class, enrolled_student,
    ):
        await add_grades(db_session, enrolled_student, subject, teacher, school_class, term=1, MAC=8, NPP=7)

        response = await client.get(
            f"/api/v1/parents-portal/students/{enrolled_student.id}/grades", headers=parent_headers
        )

        assert response.status_code == 200
        data = response.json()
        assert len(data["grades"]) == 2
        assert data["grades"][0]["subject_name"] == "Matemática"
        assert data["average_grade"] == 7.5
        assert data["status"] == "EM_RECUPERACAO"

    @pytest.mark.asyncio
    async def test_payments(
        self, client: AsyncClient, parent_with_child, parent_headers, secretaria_headers, student
    ):
        year = date.today().year
        for month, due in ((2, date.today() - timedelta(days=3)), (3, date.today() + timedelta(days=20))):
            await client.post("/api/v1/finance/invoices", headers=secretaria_headers, json={
                "student_id": student.id,
                "amount": "12000.00",
                "due_date": due.isoformat(),
                "description": "Propina",
                "month": month,
                "year": year,
            })

        response = await client.get(f"/api/v1/parents-portal/students/{student.id}/payments", headers=parent_headers)

        data = response.json()
        assert len(data["payments"]) == 2
        assert data["summary"]["overdue_count"] == 1
        assert data["summary"]["total_pending"] == 24000.0

        response = await client.get(
            f"/api/v1/parents-portal/students/{student.id}/payments",
            headers=parent_headers, params={"status": "VENCIDA"},
        )
        assert [p["period"] for p in response.json()["payments"]] == [f"2/{year}"]


class TestNoticesAndDocuments:

    @pytest.mark.asyncio
    async def test_only_parent_notices(self, client: AsyncClient, secretaria_headers, parent_headers):
        for title, role in (("Reunião de encarregados", "PARENT"), ("Conselho de notas", "PROFESSOR")):
            await client.post("/api/v1/communication/notices", headers=secretaria_headers, json={
                "title": title,
                "content": "Detalhes em breve.",
                "target_role": role,
            })

        response = await client.get("/api/v1/parents-portal/messages", headers=parent_headers)

        assert [n["title"] for n in response.json()] == ["Reunião de encarregados"]

    @pytest.mark.asyncio
    async def test_issued_documents_are_downloadable(
        self, client: AsyncClient, parent_with_child, parent_headers, secretaria_headers, enrolled_student, school_class
    ):
        await client.post("/api/v1/documents/declaration/pdf", headers=secretaria_headers, json={
            "student_id": enrolled_student.id,
            "year": school_class.year,
        })

        listed = await client.get(
            f"/api/v1/parents-portal/students/{enrolled_student.id}/documents", headers=parent_headers
        )
        documents = listed.json()
        assert len(documents) == 1
        assert documents[0]["type"] == "DECLARATION"

        response = await client.get(documents[0]["download_url"], headers=parent_headers)
        assert response.status_code == 200
        assert response.content.startswith(b"%PDF")

    @pytest.mark.asyncio
    async def test_unknown_document(self, client: AsyncClient, parent_with_child, parent_headers, student):
        response = await client.get(
            f"/api/v1/parents-portal/students/{student.id}/documents/00000000-0000-0000-0000-000000000000/download",
            headers=parent_headers,
        )

        assert response.status_code == 404
