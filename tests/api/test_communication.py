"""
API Tests for messages, conversation threads and notices
"""
import pytest
from httpx import AsyncClient

from tests.conftest import create_user, auth_headers_for
from synexa.models.user import UserRole


def message_payload(**overrides) -> dict:
    payload = {
        "title": "Reunião de pais",
        "content": "A reunião de pais realiza-se na sexta-feira às 17h.",
        "priority": "NORMAL",
        "audience": ["PARENTS"],
    }
    payload.update(overrides)
    return payload


class TestMessages:

    @pytest.mark.asyncio
    async def test_broadcast_to_parents(self, client: AsyncClient, diretor_headers, parent_user, parent_headers):
        response = await client.post("/api/v1/communication/messages", headers=diretor_headers, json=message_payload())

        assert response.status_code == 201
        data = response.json()
        assert data["recipient_count"] == 1
        assert data["read_count"] == 0

        inbox = await client.get("/api/v1/communication/messages/inbox", headers=parent_headers)
        body = inbox.json()
        assert body["total"] == 1
        assert body["items"][0]["is_read"] is False
        assert body["summary"]["unread_messages"] == 1

    @pytest.mark.asyncio
    async def test_no_recipients(self, client: AsyncClient, diretor_headers):
        response = await client.post("/api/v1/communication/messages", headers=diretor_headers, json=message_payload())

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_specific_class_requires_class_id(self, client: AsyncClient, diretor_headers, parent_user):
        response = await client.post(
            "/api/v1/communication/messages", headers=diretor_headers,
            json=message_payload(audience=["SPECIFIC_CLASS"]),
        )

        assert response.status_code == 400
        assert response.json()["error"]["details"]["field"] == "class_id"

    @pytest.mark.asyncio
    async def test_class_audience_reaches_parents_and_teachers(
        self, client: AsyncClient, diretor_headers, school_class, parent_with_child, assigned_teacher
    ):
        response = await client.post(
            "/api/v1/communication/messages", headers=diretor_headers,
            json=message_payload(audience=["SPECIFIC_CLASS"], class_id=school_class.id),
        )

        assert response.status_code == 201
        assert response.json()["recipient_count"] == 2

    @pytest.mark.asyncio
    async def test_individual_message_and_read_receipt(
        self, client: AsyncClient, secretaria_headers, professor_user, professor_headers
    ):
        created = await client.post(
            "/api/v1/communication/messages", headers=secretaria_headers,
            json=message_payload(audience=["INDIVIDUAL"], target_users=[professor_user.id], priority="URGENT"),
        )
        message_id = created.json()["id"]

        response = await client.post(f"/api/v1/communication/messages/{message_id}/read", headers=professor_headers)
        assert response.status_code == 200

        inbox = (await client.get("/api/v1/communication/messages/inbox", headers=professor_headers)).json()
        assert inbox["items"][0]["is_read"] is True
        assert inbox["summary"]["unread_messages"] == 0
        assert inbox["summary"]["urgent_messages"] == 1

        message = await client.get(f"/api/v1/communication/messages/{message_id}", headers=professor_headers)
        assert message.json()["read_count"] == 1

    @pytest.mark.asyncio
    async def test_read_by_non_recipient(self, client: AsyncClient, diretor_headers, parent_user, professor_headers):
        created = await client.post("/api/v1/communication/messages", headers=diretor_headers, json=message_payload())

        response = await client.post(
            f"/api/v1/communication/messages/{created.json()['id']}/read", headers=professor_headers
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_parents_cannot_broadcast(self, client: AsyncClient, parent_headers):
        response = await client.post("/api/v1/communication/messages", headers=parent_headers, json=message_payload())

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_only_author_or_management_edits(
        self, client: AsyncClient, db_session, secretaria_headers, diretor_headers, parent_user
    ):
        created = await client.post("/api/v1/communication/messages", headers=secretaria_headers, json=message_payload())
        message_id = created.json()["id"]
        other = await create_user(db_session, UserRole.SECRETARIA)

        response = await client.put(
            f"/api/v1/communication/messages/{message_id}",
            headers=auth_headers_for(other), json={"priority": "HIGH"},
        )
        assert response.status_code == 403

        response = await client.put(
            f"/api/v1/communication/messages/{message_id}", headers=diretor_headers, json={"priority": "HIGH"},
        )
        assert response.json()["priority"] == "HIGH"

    @pytest.mark.asyncio
    async def test_deleted_message_leaves_inbox(
        self, client: AsyncClient, secretaria_headers, parent_user, parent_headers
    ):
        created = await client.post("/api/v1/communication/messages", headers=secretaria_headers, json=message_payload())

        response = await client.delete(
            f"/api/v1/communication/messages/{created.json()['id']}", headers=secretaria_headers
        )
        assert response.status_code == 200

        inbox = await client.get("/api/v1/communication/messages/inbox", headers=parent_headers)
        assert inbox.json()["total"] == 0

    @pytest.mark.asyncio
    async def test_sent_and_stats(self, client: AsyncClient, diretor_headers, parent_user):
        await client.post("/api/v1/communication/messages", headers=diretor_headers, json=message_payload())

        sent = await client.get("/api/v1/communication/messages/sent", headers=diretor_headers)
        assert sent.json()["total"] == 1

        stats = (await client.get("/api/v1/communication/messages/stats", headers=diretor_headers)).json()
        assert stats["total_messages"] == 1
        assert stats["by_audience"]["PARENTS"] == 1
        assert stats["average_read_rate"] == 0.0


class TestThreads:

    @pytest.mark.asyncio
    async def test_conversation(
        self, client: AsyncClient, parent_user, parent_headers, professor_user, professor_headers
    ):
        created = await client.post("/api/v1/communication/threads", headers=parent_headers, json={
            "subject": "Trabalho de casa",
            "content": "Bom dia, professor. A Ana pode entregar o trabalho amanhã?",
            "participant_ids": [professor_user.id],
        })
        assert created.status_code == 201
        thread_id = created.json()["id"]
        assert {p["id"] for p in created.json()["participants"]} == {parent_user.id, professor_user.id}

        reply = await client.post(f"/api/v1/communication/threads/{thread_id}/reply", headers=professor_headers, json={
            "content": "Sim, sem problema.",
        })
        assert reply.status_code == 200
        assert [m["sender"]["id"] for m in reply.json()["messages"]] == [parent_user.id, professor_user.id]

        threads = await client.get("/api/v1/communication/threads", headers=professor_headers)
        assert threads.json()["total"] == 1

    @pytest.mark.asyncio
    async def test_outsider_cannot_read(
        self, client: AsyncClient, parent_headers, professor_user, secretaria_headers
    ):
        created = await client.post("/api/v1/communication/threads", headers=parent_headers, json={
            "content": "Olá",
            "participant_ids": [professor_user.id],
        })

        response = await client.get(
            f"/api/v1/communication/threads/{created.json()['id']}", headers=secretaria_headers
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_thread_with_only_self(self, client: AsyncClient, parent_user, parent_headers):
        response = await client.post("/api/v1/communication/threads", headers=parent_headers, json={
            "content": "Olá",
            "participant_ids": [parent_user.id],
        })

        assert response.status_code == 400


class TestNotices:

    @pytest.mark.asyncio
    async def test_publish_and_list(self, client: AsyncClient, secretaria_headers):
        response = await client.post("/api/v1/communication/notices", headers=secretaria_headers, json={
            "title": "Feriado nacional",
            "content": "Não haverá aulas no dia 4 de Fevereiro.",
            "target_role": "PARENT",
        })
        assert response.status_code == 201
        assert response.json()["published_at"] is not None

        await client.post("/api/v1/communication/notices", headers=secretaria_headers, json={
            "title": "Rascunho",
            "content": "Por publicar",
            "published": False,
        })

        listed = await client.get(
            "/api/v1/communication/notices", headers=secretaria_headers, params={"published": True}
        )
        assert [n["title"] for n in listed.json()["items"]] == ["Feriado nacional"]

    @pytest.mark.asyncio
    async def test_professor_cannot_publish(self, client: AsyncClient, professor_headers):
        response = await client.post("/api/v1/communication/notices", headers=professor_headers, json={
            "title": "Aviso",
            "content": "Teste",
        })

        assert response.status_code == 403
