"""
API Tests for certificates, declarations and transcripts
"""
import base64
import pytest
from httpx import AsyncClient

from tests.conftest import add_grades
from synexa.models import Subject


async def add_subject(db_session, name: str) -> Subject:
    disciplina = Subject(name=name)
    db_session.add(disciplina)
    await db_session.commit()
    await db_session.refresh(disciplina)
    return disciplina


class TestDeclaration:

    @pytest.mark.asyncio
    async def test_declaration_data(
        self, client: AsyncClient, secretaria_headers, enrolled_student, school_class
    ):
        response = await client.post("/api/v1/documents/declaration", headers=secretaria_headers, json={
            "student_id": enrolled_student.id,
            "year": school_class.year,
            "purpose": "Abertura de conta bancária",
        })

        assert response.status_code == 200
        data = response.json()
        assert data["document_type"] == "DECLARATION"
        assert data["student"]["name"] == "Ana Silva"
        assert data["student"]["birth_date"] == "17/05/2012"
        assert data["class"]["period"] == "Matutino"
        assert data["enrollment_status"] == "ACTIVE"
        assert data["purpose"] == "Abertura de conta bancária"

    @pytest.mark.asyncio
    async def test_declaration_requires_active_enrollment(
        self, client: AsyncClient, secretaria_headers, student, school_class
    ):
        response = await client.post("/api/v1/documents/declaration", headers=secretaria_headers, json={
            "student_id": student.id,
            "year": school_class.year,
        })

        assert response.status_code == 400
        assert "matrícula ativa" in response.json()["error"]["message"]

    @pytest.mark.asyncio
    async def test_declaration_pdf_download(
        self, client: AsyncClient, secretaria_headers, enrolled_student, school_class
    ):
        response = await client.post("/api/v1/documents/declaration/pdf", headers=secretaria_headers, json={
            "student_id": enrolled_student.id,
            "year": school_class.year,
        })

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.content.startswith(b"%PDF")
        assert "declaration_" in response.headers["content-disposition"]


class TestCertificate:

    @pytest.mark.asyncio
    async def test_certificate_with_mt_grades(
        self, client: AsyncClient, db_session, diretor_headers, teacher, subject, school_class, enrolled_student
    ):
        portugues = await add_subject(db_session, "Língua Portuguesa")
        await add_grades(db_session, enrolled_student, subject, teacher, school_class, term=3, MT=15)
        await add_grades(db_session, enrolled_student, portugues, teacher, school_class, term=3, MT=12)

        response = await client.post("/api/v1/documents/certificate", headers=diretor_headers, json={
            "student_id": enrolled_student.id,
            "year": school_class.year,
        })

        assert response.status_code == 200
        data = response.json()
        assert data["overall_average"] == 13.5
        assert [s["subject"] for s in data["subjects"]] == ["Língua Portuguesa", "Matemática"]
        assert all(s["status"] == "APROVADO" for s in data["subjects"])

    @pytest.mark.asyncio
    async def test_certificate_refused_below_pass_mark(
        self, client: AsyncClient, db_session, diretor_headers, teacher, subject, school_class, enrolled_student
    ):
        await add_grades(db_session, enrolled_student, subject, teacher, school_class, term=3, MT=8)

        response = await client.post("/api/v1/documents/certificate", headers=diretor_headers, json={
            "student_id": enrolled_student.id,
            "year": school_class.year,
        })

        assert response.status_code == 403
        assert "Média mínima" in response.json()["error"]["message"]

    @pytest.mark.asyncio
    async def test_certificate_without_grades(
        self, client: AsyncClient, diretor_headers, enrolled_student, school_class
    ):
        response = await client.post("/api/v1/documents/certificate", headers=diretor_headers, json={
            "student_id": enrolled_student.id,
            "year": school_class.year,
        })

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_certificate_with_pdf(
        self, client: AsyncClient, db_session, secretaria_headers, teacher, subject, school_class, enrolled_student
    ):
        await add_grades(db_session, enrolled_student, subject, teacher, school_class, term=3, MT=16)

        response = await client.post("/api/v1/documents/certificate/with-pdf", headers=secretaria_headers, json={
            "student_id": enrolled_student.id,
            "year": school_class.year,
        })

        assert response.status_code == 200
        body = response.json()
        assert body["data"]["overall_average"] == 16.0
        assert base64.b64decode(body["pdf"]).startswith(b"%PDF")
        assert body["filename"].startswith("certificate_")
        assert body["document_id"]


class TestTranscript:

    @pytest.mark.asyncio
    async def test_transcript_of_current_year(
        self, client: AsyncClient, db_session, admin_headers, teacher, subject, school_class, enrolled_student
    ):
        await add_grades(db_session, enrolled_student, subject, teacher, school_class, term=3, MT=11)

        response = await client.post("/api/v1/documents/transcript", headers=admin_headers, json={
            "student_id": enrolled_student.id,
        })

        assert response.status_code == 200
        data = response.json()
        assert len(data["years"]) == 1
        assert data["years"][0]["class_name"] == school_class.name
        assert data["years"][0]["average"] == 11.0
        assert data["status"] == "CURSANDO"

    @pytest.mark.asyncio
    async def test_transcript_without_enrollments(self, client: AsyncClient, admin_headers, student):
        response = await client.post("/api/v1/documents/transcript", headers=admin_headers, json={
            "student_id": student.id,
        })

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_transcript_inverted_range(self, client: AsyncClient, admin_headers, student):
        response = await client.post("/api/v1/documents/transcript", headers=admin_headers, json={
            "student_id": student.id,
            "start_year": 2025,
            "end_year": 2022,
        })

        assert response.status_code == 422


class TestDocumentAccess:

    @pytest.mark.asyncio
    async def test_professor_cannot_issue(self, client: AsyncClient, professor_headers, enrolled_student, school_class):
        response = await client.post("/api/v1/documents/declaration", headers=professor_headers, json={
            "student_id": enrolled_student.id,
            "year": school_class.year,
        })

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_unknown_student(self, client: AsyncClient, admin_headers, school_class):
        response = await client.post("/api/v1/documents/declaration", headers=admin_headers, json={
            "student_id": "00000000-0000-0000-0000-000000000000",
            "year": school_class.year,
        })

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "STUDENT_NOT_FOUND"
