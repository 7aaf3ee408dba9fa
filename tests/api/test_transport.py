"""
API Tests for transport routes and student seats
"""
import uuid

import pytest
from httpx import AsyncClient

from tests.conftest import create_student


def route_payload(**overrides) -> dict:
    payload = {
        "name": "Rota Talatona",
        "driver_name": "Manuel Costa",
        "vehicle": "Toyota Hiace LD-12-34-AB",
        "departure_time": "06:30",
        "return_time": "13:15",
        "stops": [
            {"name": "Largo do Kinaxixi", "order": 2},
            {"name": "Belas Shopping", "order": 1},
        ],
    }
    payload.update(overrides)
    return payload


async def create_route(client: AsyncClient, headers: dict, **overrides) -> dict:
    response = await client.post("/api/v1/transport/routes", headers=headers, json=route_payload(**overrides))
    assert response.status_code == 201, response.text
    return response.json()


class TestRoutes:

    @pytest.mark.asyncio
    async def test_create_route_sorts_stops(self, client: AsyncClient, admin_headers):
        data = await create_route(client, admin_headers)

        assert [s["name"] for s in data["stops"]] == ["Belas Shopping", "Largo do Kinaxixi"]
        assert data["student_count"] == 0

    @pytest.mark.asyncio
    async def test_name_is_unique(self, client: AsyncClient, admin_headers):
        await create_route(client, admin_headers)

        response = await client.post("/api/v1/transport/routes", headers=admin_headers, json=route_payload())

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_departure_before_return(self, client: AsyncClient, admin_headers):
        response = await client.post(
            "/api/v1/transport/routes", headers=admin_headers,
            json=route_payload(departure_time="14:00", return_time="07:00"),
        )

        assert response.status_code == 400
        assert response.json()["error"]["details"]["field"] == "departure_time"

    @pytest.mark.asyncio
    async def test_duplicate_stops(self, client: AsyncClient, admin_headers):
        response = await client.post("/api/v1/transport/routes", headers=admin_headers, json=route_payload(stops=[
            {"name": "Mutamba", "order": 1},
            {"name": "mutamba ", "order": 2},
        ]))

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_malformed_time(self, client: AsyncClient, admin_headers):
        response = await client.post(
            "/api/v1/transport/routes", headers=admin_headers, json=route_payload(departure_time="6h30"),
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_only_admin_manages_routes(self, client: AsyncClient, secretaria_headers):
        response = await client.post("/api/v1/transport/routes", headers=secretaria_headers, json=route_payload())

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_update_and_filter(self, client: AsyncClient, admin_headers, secretaria_headers):
        route = await create_route(client, admin_headers)
        await create_route(client, admin_headers, name="Rota Viana", driver_name="Pedro Lopes")

        response = await client.put(
            f"/api/v1/transport/routes/{route['id']}", headers=admin_headers, json={"driver_name": "João Neto"}
        )
        assert response.json()["driver_name"] == "João Neto"

        listed = await client.get(
            "/api/v1/transport/routes", headers=secretaria_headers, params={"stop_name": "kinaxixi"}
        )
        assert listed.json()["total"] == 2

        listed = await client.get(
            "/api/v1/transport/routes", headers=secretaria_headers, params={"driver_name": "Pedro"}
        )
        assert [r["name"] for r in listed.json()["items"]] == ["Rota Viana"]

    @pytest.mark.asyncio
    async def test_filter_by_accented_stop(self, client: AsyncClient, admin_headers):
        await create_route(client, admin_headers, name="Rota Samba", stops=[
            {"name": "São Paulo", "order": 1},
            {"name": "Maianga", "order": 2},
        ])
        await create_route(client, admin_headers, name="Rota Viana")

        for term in ("São", "são paulo", "Sao"):
            listed = await client.get(
                "/api/v1/transport/routes", headers=admin_headers, params={"stop_name": term}
            )
            assert listed.json()["total"] == 1, term
            assert listed.json()["items"][0]["name"] == "Rota Samba"

    @pytest.mark.asyncio
    async def test_update_keeps_departure_before_return(self, client: AsyncClient, admin_headers):
        route = await create_route(client, admin_headers)

        response = await client.put(
            f"/api/v1/transport/routes/{route['id']}", headers=admin_headers, json={"return_time": "06:00"}
        )
        assert response.status_code == 400
        assert response.json()["error"]["details"]["field"] == "departure_time"

        response = await client.put(
            f"/api/v1/transport/routes/{route['id']}", headers=admin_headers, json={"departure_time": "13:15"}
        )
        assert response.status_code == 400

        detail = await client.get(f"/api/v1/transport/routes/{route['id']}", headers=admin_headers)
        assert (detail.json()["departure_time"], detail.json()["return_time"]) == ("06:30", "13:15")

    @pytest.mark.asyncio
    async def test_rename_to_existing_name(self, client: AsyncClient, admin_headers):
        route = await create_route(client, admin_headers)
        await create_route(client, admin_headers, name="Rota Viana")

        response = await client.put(
            f"/api/v1/transport/routes/{route['id']}", headers=admin_headers, json={"name": "Rota Viana"}
        )

        assert response.status_code == 409


class TestStudentSeats:

    @pytest.mark.asyncio
    async def test_assign_students(self, client: AsyncClient, admin_headers, secretaria_headers, student):
        route = await create_route(client, admin_headers)

        response = await client.post(f"/api/v1/transport/routes/{route['id']}/students", headers=secretaria_headers, json={
            "students": [{"student_id": student.id, "stop_name": "Belas Shopping"}],
        })

        assert response.status_code == 201
        assert response.json()[0]["route"]["name"] == "Rota Talatona"

        detail = await client.get(f"/api/v1/transport/routes/{route['id']}", headers=admin_headers)
        assert detail.json()["student_count"] == 1

    @pytest.mark.asyncio
    async def test_unknown_stop(self, client: AsyncClient, admin_headers, student):
        route = await create_route(client, admin_headers)

        response = await client.post(f"/api/v1/transport/routes/{route['id']}/students", headers=admin_headers, json={
            "students": [{"student_id": student.id, "stop_name": "Cacuaco"}],
        })

        assert response.status_code == 400
        assert "Cacuaco" in response.json()["error"]["message"]

    @pytest.mark.asyncio
    async def test_student_on_another_route(self, client: AsyncClient, admin_headers, student):
        first = await create_route(client, admin_headers)
        second = await create_route(client, admin_headers, name="Rota Viana")
        await client.post(f"/api/v1/transport/routes/{first['id']}/students", headers=admin_headers, json={
            "students": [{"student_id": student.id, "stop_name": "Belas Shopping"}],
        })

        response = await client.post(f"/api/v1/transport/routes/{second['id']}/students", headers=admin_headers, json={
            "students": [{"student_id": student.id, "stop_name": "Belas Shopping"}],
        })

        assert response.status_code == 409
        conflicts = response.json()["error"]["details"]["conflicts"]
        assert conflicts[0]["route_name"] == "Rota Talatona"

    @pytest.mark.asyncio
    async def test_unknown_student(self, client: AsyncClient, admin_headers):
        route = await create_route(client, admin_headers)

        response = await client.post(f"/api/v1/transport/routes/{route['id']}/students", headers=admin_headers, json={
            "students": [{"student_id": str(uuid.uuid4()), "stop_name": "Belas Shopping"}],
        })

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "STUDENT_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_same_student_twice_in_request(self, client: AsyncClient, admin_headers, student):
        route = await create_route(client, admin_headers)

        response = await client.post(f"/api/v1/transport/routes/{route['id']}/students", headers=admin_headers, json={
            "students": [
                {"student_id": student.id, "stop_name": "Belas Shopping"},
                {"student_id": student.id, "stop_name": "Largo do Kinaxixi"},
            ],
        })

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_route_with_students_cannot_be_deleted(self, client: AsyncClient, admin_headers, student):
        route = await create_route(client, admin_headers)
        await client.post(f"/api/v1/transport/routes/{route['id']}/students", headers=admin_headers, json={
            "students": [{"student_id": student.id, "stop_name": "Belas Shopping"}],
        })

        response = await client.delete(f"/api/v1/transport/routes/{route['id']}", headers=admin_headers)
        assert response.status_code == 400

        await client.delete(f"/api/v1/transport/students/{student.id}", headers=admin_headers)
        response = await client.delete(f"/api/v1/transport/routes/{route['id']}", headers=admin_headers)
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_move_student_to_another_route(self, client: AsyncClient, db_session, admin_headers, student):
        first = await create_route(client, admin_headers)
        second = await create_route(client, admin_headers, name="Rota Viana", stops=[{"name": "Estalagem", "order": 1}])
        await client.post(f"/api/v1/transport/routes/{first['id']}/students", headers=admin_headers, json={
            "students": [{"student_id": student.id, "stop_name": "Belas Shopping"}],
        })

        response = await client.put(
            f"/api/v1/transport/students/{student.id}", headers=admin_headers, json={"route_id": second["id"]}
        )
        assert response.status_code == 400

        response = await client.put(f"/api/v1/transport/students/{student.id}", headers=admin_headers, json={
            "route_id": second["id"],
            "stop_name": "Estalagem",
            "notes": "Sai às 12h às sextas",
        })
        assert response.status_code == 200
        assert response.json()["route_id"] == second["id"]
        assert response.json()["notes"] == "Sai às 12h às sextas"

    @pytest.mark.asyncio
    async def test_change_stop_within_current_route(self, client: AsyncClient, admin_headers, student):
        route = await create_route(client, admin_headers)
        await client.post(f"/api/v1/transport/routes/{route['id']}/students", headers=admin_headers, json={
            "students": [{"student_id": student.id, "stop_name": "Belas Shopping"}],
        })

        response = await client.put(
            f"/api/v1/transport/students/{student.id}", headers=admin_headers, json={"stop_name": "Estalagem"}
        )
        assert response.status_code == 400
        assert response.json()["error"]["details"]["field"] == "stop_name"

        response = await client.put(
            f"/api/v1/transport/students/{student.id}", headers=admin_headers, json={"stop_name": "Largo do Kinaxixi"}
        )
        assert response.status_code == 200
        assert response.json()["stop_name"] == "Largo do Kinaxixi"

    @pytest.mark.asyncio
    async def test_list_by_student_name(self, client: AsyncClient, db_session, admin_headers, school_class, student):
        other = await create_student(db_session, school_class, first_name="Bruno", last_name="Fernandes")
        route = await create_route(client, admin_headers)
        await client.post(f"/api/v1/transport/routes/{route['id']}/students", headers=admin_headers, json={
            "students": [
                {"student_id": student.id, "stop_name": "Belas Shopping"},
                {"student_id": other.id, "stop_name": "Largo do Kinaxixi"},
            ],
        })

        response = await client.get(
            "/api/v1/transport/students", headers=admin_headers, params={"student_name": "Bruno Fern"}
        )

        assert response.json()["total"] == 1
        assert response.json()["items"][0]["student_id"] == other.id

    @pytest.mark.asyncio
    async def test_student_without_transport(self, client: AsyncClient, admin_headers, student):
        response = await client.get(f"/api/v1/transport/students/{student.id}", headers=admin_headers)

        assert response.status_code == 404
