"""
API Tests for grades and report cards
"""
import pytest
from httpx import AsyncClient

from tests.conftest import add_grades, create_user, auth_headers_for
from synexa.models.user import UserRole


def grade_payload(student, subject, teacher, school_class, **overrides) -> dict:
    payload = {
        "student_id": student.id,
        "subject_id": subject.id,
        "teacher_id": teacher.id,
        "class_id": school_class.id,
        "type": "MAC",
        "term": 1,
        "year": school_class.year,
        "value": 14,
    }
    payload.update(overrides)
    return payload


class TestCreateGrade:

    @pytest.mark.asyncio
    async def test_professor_launches_grade(
        self, client: AsyncClient, professor_headers, assigned_teacher, subject, school_class, enrolled_student
    ):
        response = await client.post("/api/v1/grades", headers=professor_headers, json=grade_payload(
            enrolled_student, subject, assigned_teacher, school_class
        ))

        assert response.status_code == 201
        data = response.json()
        assert data["value"] == 14
        assert data["teacher"]["id"] == assigned_teacher.id
        assert data["subject"]["name"] == subject.name

    @pytest.mark.asyncio
    async def test_duplicate_component(
        self, client: AsyncClient, professor_headers, assigned_teacher, subject, school_class, enrolled_student
    ):
        payload = grade_payload(enrolled_student, subject, assigned_teacher, school_class)
        await client.post("/api/v1/grades", headers=professor_headers, json=payload)

        response = await client.post("/api/v1/grades", headers=professor_headers, json=payload)

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_student_must_be_enrolled(
        self, client: AsyncClient, admin_headers, assigned_teacher, subject, school_class, student
    ):
        response = await client.post("/api/v1/grades", headers=admin_headers, json=grade_payload(
            student, subject, assigned_teacher, school_class
        ))

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_professor_cannot_launch_for_colleague(
        self, client: AsyncClient, db_session, assigned_teacher, subject, school_class, enrolled_student
    ):
        colleague = await create_user(db_session, UserRole.PROFESSOR)

        response = await client.post("/api/v1/grades", headers=auth_headers_for(colleague), json=grade_payload(
            enrolled_student, subject, assigned_teacher, school_class
        ))

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_value_out_of_scale(
        self, client: AsyncClient, professor_headers, assigned_teacher, subject, school_class, enrolled_student
    ):
        response = await client.post("/api/v1/grades", headers=professor_headers, json=grade_payload(
            enrolled_student, subject, assigned_teacher, school_class, value=21
        ))

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_secretaria_cannot_launch(
        self, client: AsyncClient, secretaria_headers, assigned_teacher, subject, school_class, enrolled_student
    ):
        response = await client.post("/api/v1/grades", headers=secretaria_headers, json=grade_payload(
            enrolled_student, subject, assigned_teacher, school_class
        ))

        assert response.status_code == 403


class TestGradeChanges:

    @pytest.mark.asyncio
    async def test_update_and_delete_own_grade(
        self, client: AsyncClient, professor_headers, assigned_teacher, subject, school_class, enrolled_student
    ):
        created = await client.post("/api/v1/grades", headers=professor_headers, json=grade_payload(
            enrolled_student, subject, assigned_teacher, school_class
        ))
        grade_id = created.json()["id"]

        response = await client.put(f"/api/v1/grades/{grade_id}", headers=professor_headers, json={"value": 16.5})
        assert response.status_code == 200
        assert response.json()["value"] == 16.5

        response = await client.delete(f"/api/v1/grades/{grade_id}", headers=professor_headers)
        assert response.status_code == 200

        response = await client.get(f"/api/v1/grades/{grade_id}", headers=professor_headers)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_other_professor_cannot_update(
        self, client: AsyncClient, db_session, professor_headers, assigned_teacher, subject, school_class, enrolled_student
    ):
        created = await client.post("/api/v1/grades", headers=professor_headers, json=grade_payload(
            enrolled_student, subject, assigned_teacher, school_class
        ))
        colleague = await create_user(db_session, UserRole.PROFESSOR)

        response = await client.put(
            f"/api/v1/grades/{created.json()['id']}", headers=auth_headers_for(colleague), json={"value": 20}
        )

        assert response.status_code == 403


class TestTermViews:

    @pytest.mark.asyncio
    async def test_student_term_summary(
        self, client: AsyncClient, db_session, admin_headers, teacher, subject, school_class, enrolled_student
    ):
        await add_grades(db_session, enrolled_student, subject, teacher, school_class, term=1, MAC=12, NPP=14, NPT=13)

        response = await client.get(
            f"/api/v1/grades/student/{enrolled_student.id}/term/1/summary",
            headers=admin_headers, params={"year": school_class.year},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["term"] == "1º Trimestre"
        assert data["subjects"][0]["mt"] == 13.0
        assert data["subjects"][0]["status"] == "APROVADO"
        assert data["average"] == 13.0
        assert data["overall_status"] == "APROVADO"

    @pytest.mark.asyncio
    async def test_incomplete_subject_mt(
        self, client: AsyncClient, db_session, admin_headers, teacher, subject, school_class, enrolled_student
    ):
        await add_grades(db_session, enrolled_student, subject, teacher, school_class, term=2, MAC=12)

        response = await client.get(
            f"/api/v1/grades/student/{enrolled_student.id}/subject/{subject.id}/term/2",
            headers=admin_headers, params={"year": school_class.year},
        )

        assert response.json() == {"mac": 12.0, "npp": None, "npt": None, "mt": 0.0, "status": "INCOMPLETO"}

    @pytest.mark.asyncio
    async def test_class_summary(
        self, client: AsyncClient, db_session, admin_headers, teacher, subject, school_class, enrolled_student
    ):
        await add_grades(db_session, enrolled_student, subject, teacher, school_class, term=1, MAC=8, NPP=9, NPT=7)

        response = await client.get(
            f"/api/v1/grades/class/{school_class.id}/term/1/summary", headers=admin_headers,
        )

        assert response.json() == [{
            "student_id": enrolled_student.id,
            "student": "Ana Silva",
            "mt": 8.0,
            "status": "REPROVADO",
        }]

    @pytest.mark.asyncio
    async def test_class_summary_lists_each_student_once(
        self, client: AsyncClient, db_session, admin_headers, teacher, subject, school_class, enrolled_student
    ):
        from synexa.models import Enrollment, EnrollmentStatus

        db_session.add(Enrollment(
            student_id=enrolled_student.id, class_id=school_class.id,
            year=school_class.year + 1, status=EnrollmentStatus.ACTIVE,
        ))
        await db_session.commit()
        await add_grades(db_session, enrolled_student, subject, teacher, school_class, term=1, MAC=14, NPP=14, NPT=14)

        response = await client.get(
            f"/api/v1/grades/class/{school_class.id}/term/1/summary", headers=admin_headers,
        )

        assert [row["student_id"] for row in response.json()] == [enrolled_student.id]

    @pytest.mark.asyncio
    async def test_invalid_term(self, client: AsyncClient, admin_headers, student):
        response = await client.get(f"/api/v1/grades/student/{student.id}/term/4", headers=admin_headers)

        assert response.status_code == 422


class TestReportCards:

    @pytest.mark.asyncio
    async def test_annual_report_card(
        self, client: AsyncClient, db_session, secretaria_headers, teacher, subject, school_class, enrolled_student
    ):
        await add_grades(db_session, enrolled_student, subject, teacher, school_class, term=1, MAC=12, NPP=14, NPT=16)
        await add_grades(db_session, enrolled_student, subject, teacher, school_class, term=2, MAC=10, NPP=11)

        response = await client.get(
            f"/api/v1/report-cards/student/{enrolled_student.id}",
            headers=secretaria_headers, params={"year": school_class.year},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["terms"] == [1, 2, 3]
        row = data["subjects"][0]
        assert [t["mt"] for t in row["terms"]] == [14.0, 10.5, None]
        assert row["final_average"] == 12.25
        assert row["classification"] == "Bom"
        assert data["final_status"] == "Aprovado"
        assert data["academic_year"] == f"{school_class.year}/{school_class.year + 1}"

    @pytest.mark.asyncio
    async def test_requires_active_enrollment(self, client: AsyncClient, secretaria_headers, student, school_class):
        response = await client.get(
            f"/api/v1/report-cards/student/{student.id}",
            headers=secretaria_headers, params={"year": school_class.year},
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_pdf_is_recorded(
        self, client: AsyncClient, db_session, secretaria_headers, teacher, subject, school_class, enrolled_student
    ):
        await add_grades(db_session, enrolled_student, subject, teacher, school_class, term=1, MAC=12, NPP=14, NPT=16)

        response = await client.get(
            f"/api/v1/report-cards/student/{enrolled_student.id}/pdf",
            headers=secretaria_headers, params={"year": school_class.year, "term": 1},
        )

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.content.startswith(b"%PDF")
        assert "attachment" in response.headers["content-disposition"]

    @pytest.mark.asyncio
    async def test_class_report_cards_skip_students_without_grades(
        self, client: AsyncClient, db_session, secretaria_headers, teacher, subject, school_class, enrolled_student
    ):
        await add_grades(db_session, enrolled_student, subject, teacher, school_class, term=1, MAC=12)

        students = await client.get(
            f"/api/v1/report-cards/class/{school_class.id}/students",
            headers=secretaria_headers, params={"year": school_class.year},
        )
        assert [s["id"] for s in students.json()] == [enrolled_student.id]

        cards = await client.get(
            f"/api/v1/report-cards/class/{school_class.id}",
            headers=secretaria_headers, params={"year": school_class.year, "term": 2},
        )
        assert cards.status_code == 200
        assert cards.json() == []

    @pytest.mark.asyncio
    async def test_professor_has_no_access(self, client: AsyncClient, professor_headers, student, school_class):
        response = await client.get(
            f"/api/v1/report-cards/student/{student.id}",
            headers=professor_headers, params={"year": school_class.year},
        )

        assert response.status_code == 403
