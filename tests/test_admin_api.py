import warnings

import pytest
from pydantic import ValidationError as PydanticValidationError

from app.core.database import async_session_maker
from app.models import Client, ClientEvent, Sale, SupportTicket, User, UserPlan
from app.schemas.admin import WebhookCreate, WebhookUpdate
from conftest import USER_EMAIL, login


async def test_admin_routes_reject_regular_users(client, user_headers):
    response = await client.get("/api/admin/users", headers=user_headers)

    assert response.status_code == 403


async def test_admin_routes_require_session(client):
    response = await client.get("/api/admin/plans")

    assert response.status_code == 401


# ===========================================
# USUÁRIOS
# ===========================================

async def test_create_user_returns_temp_password_once(client, admin_headers):
    response = await client.post("/api/admin/users", headers=admin_headers, json={
        "email": "novo@dashboard.com",
        "name": "Novo",
    })

    assert response.status_code == 201
    created = response.json()
    assert created["role"] == "user"
    assert created["requirePasswordChange"] is True
    assert len(created["tempPassword"]) == 10

    headers = await login("novo@dashboard.com", created["tempPassword"])
    me = await client.get("/api/auth/user", headers=headers)
    assert me.json()["email"] == "novo@dashboard.com"

    listing = await client.get("/api/admin/users", headers=admin_headers)
    assert all("tempPassword" not in user and "passwordHash" not in user for user in listing.json())


async def test_create_user_with_duplicate_email_is_409(client, admin_headers, operator):
    response = await client.post("/api/admin/users", headers=admin_headers, json={
        "email": USER_EMAIL,
        "name": "Outro",
        "tempPassword": "abcdef",
    })

    assert response.status_code == 409


async def test_update_and_reset_user(client, admin_headers, operator):
    updated = await client.put(f"/api/admin/users/{operator.id}", headers=admin_headers, json={"role": "admin"})
    assert updated.status_code == 200
    assert updated.json()["role"] == "admin"

    reset = await client.post(f"/api/admin/users/{operator.id}/reset-password", headers=admin_headers)
    assert reset.status_code == 200
    temp_password = reset.json()["tempPassword"]

    login_response = await client.post("/api/login", json={"email": USER_EMAIL, "password": temp_password})
    assert login_response.json()["requirePasswordChange"] is True


async def test_admin_cannot_delete_own_account(client, admin_headers):
    me = await client.get("/api/auth/user", headers=admin_headers)

    response = await client.delete(f"/api/admin/users/{me.json()['id']}", headers=admin_headers)

    assert response.status_code == 403


async def test_delete_user(client, admin_headers, operator, fetch):
    response = await client.delete(f"/api/admin/users/{operator.id}", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert operator.id not in [user.id for user in await fetch(User)]


# ===========================================
# PLANOS
# ===========================================

async def create_plan(client, headers, **overrides):
    payload = {"name": "Pro", "price": "97.00", "features": "Dashboard\nSuporte", "maxUsers": 3}
    payload.update(overrides)
    return await client.post("/api/admin/plans", headers=headers, json=payload)


async def test_plan_crud(client, admin_headers):
    created = await create_plan(client, admin_headers)
    assert created.status_code == 201
    plan = created.json()
    assert plan["features"] == ["Dashboard", "Suporte"]
    assert plan["maxWhatsappChips"] == 1

    updated = await client.put(f"/api/admin/plans/{plan['id']}", headers=admin_headers, json={"isActive": False})
    assert updated.json()["isActive"] is False
    assert updated.json()["name"] == "Pro"

    deleted = await client.delete(f"/api/admin/plans/{plan['id']}", headers=admin_headers)
    assert deleted.json() == {"success": True, "message": "Plano removido"}

    missing = await client.get(f"/api/admin/plans/{plan['id']}", headers=admin_headers)
    assert missing.status_code == 404


async def test_negative_price_is_400(client, admin_headers):
    response = await create_plan(client, admin_headers, price="-1")

    assert response.status_code == 400


async def test_assigning_plan_deactivates_previous(client, admin_headers, operator, fetch):
    basic = (await create_plan(client, admin_headers, name="Basic")).json()
    pro = (await create_plan(client, admin_headers, name="Pro")).json()

    first = await client.post("/api/admin/user-plans", headers=admin_headers, json={
        "userId": operator.id, "planId": basic["id"],
    })
    second = await client.post("/api/admin/user-plans", headers=admin_headers, json={
        "userId": operator.id, "planId": pro["id"],
    })

    assert first.status_code == 201
    assert second.json()["plan"]["name"] == "Pro"

    user_plans = await fetch(UserPlan)
    assert [(up.plan_id, up.is_active) for up in user_plans] == [(basic["id"], False), (pro["id"], True)]
    assert user_plans[0].end_date is not None

    listing = await client.get("/api/admin/user-plans", headers=admin_headers)
    assert len(listing.json()) == 2


async def test_plan_in_use_cannot_be_deleted(client, admin_headers, operator):
    plan = (await create_plan(client, admin_headers)).json()
    await client.post("/api/admin/user-plans", headers=admin_headers, json={
        "userId": operator.id, "planId": plan["id"],
    })

    response = await client.delete(f"/api/admin/plans/{plan['id']}", headers=admin_headers)

    assert response.status_code == 409


# ===========================================
# WEBHOOKS
# ===========================================

async def test_webhook_crud_hides_secret(client, admin_headers):
    created = await client.post("/api/admin/webhooks", headers=admin_headers, json={
        "name": "CRM",
        "url": "https://crm.example.com/hooks",
        "events": ["payment_completed", "recovery_purchase"],
        "secret": "s3cr3t",
    })

    assert created.status_code == 201
    webhook = created.json()
    assert webhook["hasSecret"] is True
    assert "secret" not in webhook
    assert webhook["url"] == "https://crm.example.com/hooks"

    updated = await client.put(f"/api/admin/webhooks/{webhook['id']}", headers=admin_headers, json={"secret": ""})
    assert updated.json()["hasSecret"] is False
    assert updated.json()["events"] == ["payment_completed", "recovery_purchase"]

    deleted = await client.delete(f"/api/admin/webhooks/{webhook['id']}", headers=admin_headers)
    assert deleted.json()["success"] is True


@pytest.mark.parametrize("payload", [
    {"name": "CRM", "url": "not-a-url", "events": ["payment_completed"]},
    {"name": "CRM", "url": "https://crm.example.com", "events": ["sale_exploded"]},
    {"name": "CRM", "url": "https://crm.example.com", "events": []},
])
async def test_invalid_webhook_is_400(client, admin_headers, payload):
    response = await client.post("/api/admin/webhooks", headers=admin_headers, json=payload)

    assert response.status_code == 400


def test_webhook_url_dumps_as_plain_text():
    created = WebhookCreate(name="CRM", url="https://crm.example.com/hooks", events="payment_completed")
    updated = WebhookUpdate(url="http://crm.example.com/v2")

    with warnings.catch_warnings():
        warnings.simplefilter("error")
        created_data = created.model_dump()
        updated_data = updated.model_dump(exclude_unset=True)

    assert created_data["url"] == "https://crm.example.com/hooks"
    assert isinstance(created_data["url"], str)
    assert updated_data == {"url": "http://crm.example.com/v2"}


def test_webhook_url_longer_than_column_is_rejected():
    with pytest.raises(PydanticValidationError):
        WebhookCreate(name="CRM", url="https://crm.example.com/" + "a" * 500, events=["payment_completed"])


async def test_trigger_unknown_webhook_is_404(client, admin_headers):
    response = await client.post("/api/admin/webhooks/999/trigger", headers=admin_headers, json={
        "eventType": "payment_completed",
    })

    assert response.status_code == 404


# ===========================================
# CHIPS DE WHATSAPP
# ===========================================

async def test_chip_crud_and_recover(client, admin_headers):
    created = await client.post("/api/admin/whatsapp-chips", headers=admin_headers, json={
        "chipId": "CHIP-01",
        "phoneNumber": "+55 11 90000-0001",
    })

    assert created.status_code == 201
    chip = created.json()
    assert chip["status"] == "active"
    assert chip["phoneNumber"] == "5511900000001"
    assert chip["recoveryStartedAt"] is None

    duplicate = await client.post("/api/admin/whatsapp-chips", headers=admin_headers, json={
        "chipId": "CHIP-01",
        "phoneNumber": "5511900000002",
    })
    assert duplicate.status_code == 409

    recovered = await client.post(f"/api/admin/whatsapp-chips/{chip['id']}/recover", headers=admin_headers)
    assert recovered.json()["status"] == "recovery"
    assert recovered.json()["recoveryStartedAt"] is not None

    inactive = await client.put(
        f"/api/admin/whatsapp-chips/{chip['id']}",
        headers=admin_headers,
        json={"status": "inactive"}
    )
    assert inactive.json()["status"] == "inactive"

    filtered = await client.get("/api/admin/whatsapp-chips?status=inactive", headers=admin_headers)
    assert [item["chipId"] for item in filtered.json()] == ["CHIP-01"]

    deleted = await client.delete(f"/api/admin/whatsapp-chips/{chip['id']}", headers=admin_headers)
    assert deleted.json()["success"] is True


async def test_invalid_chip_status_is_400(client, admin_headers):
    response = await client.post("/api/admin/whatsapp-chips", headers=admin_headers, json={
        "chipId": "CHIP-02",
        "phoneNumber": "5511900000002",
        "status": "broken",
    })

    assert response.status_code == 400


# ===========================================
# MÉTRICAS E LIMPEZA
# ===========================================

async def test_admin_metrics(client, admin_headers, operator, make_event):
    await client.post("/api/webhook/sales", json=make_event("SALE_APPROVED", total_price="R$ 100,00"))
    await client.post("/api/webhook/sales", json=make_event("ABANDONED_CART", phone="5511000000001"))
    await client.post("/api/webhook/sales", json=make_event("SALE_APPROVED", phone="5511000000001"))

    response = await client.get("/api/admin/metrics", headers=admin_headers)

    assert response.status_code == 200
    assert response.json() == {
        "totalUsers": 2,
        "totalSalesValue": 150.0,
        "totalRecoveredValue": 50.0,
        "totalClients": 2,
    }


async def seed_operational_data(client, make_event):
    response = await client.post("/api/webhook/sales", json=make_event("PIX_GENERATED"))
    async with async_session_maker() as session:
        session.add(SupportTicket(
            client_id=response.json()["clientId"],
            subject="Ajuda",
            description="Preciso de ajuda",
            priority="low",
            status="open",
        ))
        await session.commit()


async def test_clear_sales_keeps_clients(client, admin_headers, make_event, fetch):
    await seed_operational_data(client, make_event)

    response = await client.post("/api/admin/clear-sales", headers=admin_headers)

    assert response.json()["success"] is True
    assert await fetch(Sale) == []
    assert len(await fetch(Client)) == 1
    events = await fetch(ClientEvent)
    assert len(events) == 1 and events[0].sale_id is None


async def test_clear_clients_removes_dependents(client, admin_headers, make_event, fetch):
    await seed_operational_data(client, make_event)

    response = await client.post("/api/admin/clear-clients", headers=admin_headers)

    assert response.json()["success"] is True
    assert await fetch(Client) == []
    assert await fetch(Sale) == []
    assert await fetch(SupportTicket) == []
    assert await fetch(ClientEvent) == []


async def test_clear_data_keeps_users(client, admin_headers, make_event, fetch):
    await seed_operational_data(client, make_event)

    response = await client.post("/api/admin/clear-data", headers=admin_headers)

    assert response.status_code == 200
    assert await fetch(Client) == []
    assert await fetch(Sale) == []
    assert len(await fetch(User)) == 1
