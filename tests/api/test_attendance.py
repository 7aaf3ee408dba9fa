"""
API Tests for attendance (chamada)
"""
import pytest
from datetime import date, timedelta
from httpx import AsyncClient

from tests.conftest import create_student


def roll_call(class_id: str, subject_id: str, records: list, on: date = None) -> dict:
    return {
        "date": (on or date.today()).isoformat(),
        "class_id": class_id,
        "subject_id": subject_id,
        "attendances": records,
    }


class TestMarkAttendance:

    @pytest.mark.asyncio
    async def test_professor_marks_own_class(
        self, client: AsyncClient, professor_headers, assigned_teacher, school_class, subject, enrolled_student
    ):
        response = await client.post("/api/v1/attendance/mark", headers=professor_headers, json=roll_call(
            school_class.id, subject.id, [{"student_id": enrolled_student.id, "present": True}]
        ))

        assert response.status_code == 200
        assert response.json() == {"message": "Chamada registrada com sucesso", "created": 1, "updated": 0}

    @pytest.mark.asyncio
    async def test_second_call_updates(
        self, client: AsyncClient, secretaria_headers, assigned_teacher, school_class, subject, enrolled_student
    ):
        payload = roll_call(school_class.id, subject.id, [{"student_id": enrolled_student.id, "present": True}])
        await client.post("/api/v1/attendance/mark", headers=secretaria_headers, json=payload)

        payload["attendances"][0].update({"present": False, "justified": True, "note": "Consulta médica"})
        response = await client.post("/api/v1/attendance/mark", headers=secretaria_headers, json=payload)

        assert response.json()["updated"] == 1
        assert response.json()["created"] == 0

    @pytest.mark.asyncio
    async def test_future_date_rejected(
        self, client: AsyncClient, secretaria_headers, assigned_teacher, school_class, subject, enrolled_student
    ):
        response = await client.post("/api/v1/attendance/mark", headers=secretaria_headers, json=roll_call(
            school_class.id, subject.id, [{"student_id": enrolled_student.id, "present": True}],
            on=date.today() + timedelta(days=1),
        ))

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_student_not_enrolled(
        self, client: AsyncClient, secretaria_headers, assigned_teacher, school_class, subject, db_session
    ):
        outsider = await create_student(db_session)

        response = await client.post("/api/v1/attendance/mark", headers=secretaria_headers, json=roll_call(
            school_class.id, subject.id, [{"student_id": outsider.id, "present": True}]
        ))

        assert response.status_code == 400
        assert outsider.id in response.json()["error"]["message"]

    @pytest.mark.asyncio
    async def test_professor_outside_own_subject(
        self, client: AsyncClient, professor_headers, teacher, school_class, subject, enrolled_student
    ):
        response = await client.post("/api/v1/attendance/mark", headers=professor_headers, json=roll_call(
            school_class.id, subject.id, [{"student_id": enrolled_student.id, "present": True}]
        ))

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_no_teacher_for_subject_and_class(
        self, client: AsyncClient, admin_headers, school_class, subject, enrolled_student
    ):
        response = await client.post("/api/v1/attendance/mark", headers=admin_headers, json=roll_call(
            school_class.id, subject.id, [{"student_id": enrolled_student.id, "present": True}]
        ))

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_diretor_cannot_mark(self, client: AsyncClient, diretor_headers, school_class, subject, student):
        response = await client.post("/api/v1/attendance/mark", headers=diretor_headers, json=roll_call(
            school_class.id, subject.id, [{"student_id": student.id, "present": True}]
        ))

        assert response.status_code == 403


class TestAttendanceReports:

    @pytest.mark.asyncio
    async def test_class_and_student_views(
        self, client: AsyncClient, secretaria_headers, assigned_teacher, school_class, subject, enrolled_student, db_session
    ):
        await client.post("/api/v1/attendance/mark", headers=secretaria_headers, json=roll_call(
            school_class.id, subject.id, [{"student_id": enrolled_student.id, "present": False, "justified": True}]
        ))

        response = await client.get(
            f"/api/v1/attendance/class/{school_class.id}",
            headers=secretaria_headers,
            params={"date": date.today().isoformat(), "subject_id": subject.id},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["summary"] == {
            "total_students": 1, "total_present": 0, "total_absent": 1, "total_justified": 1,
        }
        assert data["subject"]["id"] == subject.id

        response = await client.get(f"/api/v1/attendance/student/{enrolled_student.id}", headers=secretaria_headers)
        data = response.json()
        assert data["total_classes"] == 1
        assert data["attendance_percentage"] == 0.0
        assert data["by_subject"][0]["subject_name"] == subject.name

    @pytest.mark.asyncio
    async def test_update_restricted_to_office(
        self, client: AsyncClient, secretaria_headers, professor_headers, assigned_teacher,
        school_class, subject, enrolled_student
    ):
        await client.post("/api/v1/attendance/mark", headers=secretaria_headers, json=roll_call(
            school_class.id, subject.id, [{"student_id": enrolled_student.id, "present": False}]
        ))
        listing = await client.get(
            "/api/v1/attendance", headers=secretaria_headers, params={"student_id": enrolled_student.id}
        )
        attendance_id = listing.json()["items"][0]["id"]

        response = await client.put(
            f"/api/v1/attendance/{attendance_id}", headers=professor_headers, json={"present": True}
        )
        assert response.status_code == 403

        response = await client.put(
            f"/api/v1/attendance/{attendance_id}", headers=secretaria_headers, json={"present": True}
        )
        assert response.status_code == 200
        assert response.json()["present"] is True


class TestClassRoster:

    @pytest.mark.asyncio
    async def test_roster_uses_class_year(
        self, client: AsyncClient, secretaria_headers, school_class, enrolled_student, db_session
    ):
        from synexa.models import Enrollment, EnrollmentStatus

        # Rows carried over from an earlier import: same class, other years
        other = await create_student(db_session, school_class, first_name="Bruno")
        db_session.add_all([
            Enrollment(student_id=enrolled_student.id, class_id=school_class.id,
                       year=school_class.year + 1, status=EnrollmentStatus.ACTIVE),
            Enrollment(student_id=other.id, class_id=school_class.id,
                       year=school_class.year - 1, status=EnrollmentStatus.ACTIVE),
        ])
        await db_session.commit()

        response = await client.get(
            f"/api/v1/attendance/class/{school_class.id}",
            headers=secretaria_headers,
            params={"date": date.today().isoformat()},
        )

        data = response.json()
        assert data["summary"]["total_students"] == 1
        assert [row["student_id"] for row in data["attendances"]] == [enrolled_student.id]
