from datetime import datetime

import pytest

from app.core.database import async_session_maker
from app.models import Client


@pytest.fixture
async def customers():
    async with async_session_maker() as session:
        ana = Client(name="Ana", email="ana@example.com", phone="5511999998888")
        bruno = Client(name="Bruno", email="bruno@example.com", phone="5521988887777")
        session.add_all([ana, bruno])
        await session.commit()
        return ana.id, bruno.id


async def open_ticket(client, headers, client_id, **overrides):
    payload = {"clientId": client_id, "subject": "Sem acesso", "description": "Não recebi o login"}
    payload.update(overrides)
    return await client.post("/api/support/tickets", headers=headers, json=payload)


async def test_create_ticket_with_defaults(client, user_headers, customers):
    response = await open_ticket(client, user_headers, customers[0])

    assert response.status_code == 201
    ticket = response.json()
    assert ticket["priority"] == "medium"
    assert ticket["status"] == "open"
    assert ticket["client"]["name"] == "Ana"


async def test_ticket_for_unknown_client_is_404(client, user_headers):
    response = await open_ticket(client, user_headers, 999)

    assert response.status_code == 404


async def test_invalid_priority_is_400(client, user_headers, customers):
    response = await open_ticket(client, user_headers, customers[0], priority="critical")

    assert response.status_code == 400


async def test_list_tickets_with_filters(client, user_headers, customers):
    ana, bruno = customers
    await open_ticket(client, user_headers, ana, priority="urgent")
    await open_ticket(client, user_headers, ana, status="closed")
    await open_ticket(client, user_headers, bruno, priority="urgent")

    urgent = await client.get("/api/support/tickets?priority=urgent", headers=user_headers)
    closed = await client.get("/api/support/tickets?status=closed", headers=user_headers)
    by_client = await client.get(f"/api/support/tickets?clientId={bruno}", headers=user_headers)
    by_legacy_param = await client.get(f"/api/support/tickets?userId={ana}", headers=user_headers)

    assert len(urgent.json()) == 2
    assert [ticket["status"] for ticket in closed.json()] == ["closed"]
    assert [ticket["clientId"] for ticket in by_client.json()] == [bruno]
    assert {ticket["clientId"] for ticket in by_legacy_param.json()} == {ana}
    assert len(by_legacy_param.json()) == 2


async def test_update_ticket_bumps_updated_at(client, user_headers, customers):
    created = (await open_ticket(client, user_headers, customers[0])).json()

    response = await client.put(
        f"/api/support/tickets/{created['id']}",
        headers=user_headers,
        json={"status": "in_progress"}
    )

    assert response.status_code == 200
    updated = response.json()
    assert updated["status"] == "in_progress"
    assert updated["subject"] == "Sem acesso"
    assert datetime.fromisoformat(updated["updatedAt"]) > datetime.fromisoformat(created["updatedAt"])


async def test_delete_ticket(client, user_headers, customers):
    created = (await open_ticket(client, user_headers, customers[0])).json()

    deleted = await client.delete(f"/api/support/tickets/{created['id']}", headers=user_headers)
    missing = await client.get(f"/api/support/tickets/{created['id']}", headers=user_headers)

    assert deleted.status_code == 204
    assert missing.status_code == 404
