import pytest

from app.core.config import settings
from app.models import Client, Sale


async def test_pix_generated_returns_success(client, make_event, fetch):
    response = await client.post("/api/webhook/sales", json=make_event("PIX_GENERATED"))

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["status"] == "pending"
    assert body["saleId"] is not None
    assert body["clientId"] is not None
    assert body["message"]


async def test_documented_scenario_pending_then_realized(client, fetch):
    pix = {
        "event": "PIX_GENERATED",
        "customer": {"phone": "5511999998888", "name": "Ana"},
        "total_price": "R$ 50,00",
        "products": [{"name": "Plan A"}],
    }
    approved = {
        "event": "SALE_APPROVED",
        "sale_id": "X1",
        "customer": {"phone": "5511999998888"},
        "total_price": "R$ 50,00",
        "products": [{"name": "Plan A"}],
    }

    first = await client.post("/api/webhook/sales", json=pix)
    second = await client.post("/api/webhook/sales", json=approved)

    assert first.json()["status"] == "pending"
    assert second.json()["status"] == "realized"
    assert second.json()["saleId"] == first.json()["saleId"]

    sales = await fetch(Sale)
    assert len(sales) == 1
    assert sales[0].external_sale_id == "X1"


async def test_array_payload_with_body_is_unwrapped(client, make_event, fetch):
    payload = [{"body": make_event("ABANDONED_CART")}]

    response = await client.post("/api/webhook/sales", json=payload)

    assert response.status_code == 200
    assert response.json()["status"] == "lost"
    assert len(await fetch(Sale)) == 1


async def test_phone_number_alias_is_accepted(client, make_event, fetch):
    payload = make_event(customer={"name": "Luzenir", "phone_number": "55 44 99984-9562"})

    response = await client.post("/api/webhook/sales", json=payload)

    assert response.status_code == 200
    assert (await fetch(Client))[0].phone == "5544999849562"


async def test_unknown_event_is_acknowledged_without_action(client, make_event, fetch):
    response = await client.post("/api/webhook/sales", json=make_event("REFUND_REQUESTED"))

    assert response.status_code == 200
    assert response.json()["success"] is False
    assert await fetch(Client) == []


async def test_missing_customer_phone_is_400(client, make_event, fetch):
    response = await client.post("/api/webhook/sales", json=make_event(customer={"name": "Sem telefone"}))

    assert response.status_code == 400
    body = response.json()
    assert body["message"]
    assert any("phone" in error["field"] for error in body["errors"])
    assert await fetch(Client) == []


async def test_missing_event_is_400(client, make_event):
    payload = make_event()
    del payload["event"]

    response = await client.post("/api/webhook/sales", json=payload)

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "event"


async def test_unparseable_price_is_400_and_writes_nothing(client, make_event, fetch):
    response = await client.post("/api/webhook/sales", json=make_event(total_price="abc"))

    assert response.status_code == 400
    assert "abc" in response.json()["message"]
    assert await fetch(Client) == []
    assert await fetch(Sale) == []


@pytest.mark.parametrize("overrides", [
    {"sale_id": "X" * 101},
    {"payment_method": "P" * 51},
    {"products": [{"name": "N" * 256}]},
    {"customer": {"name": "A" * 256, "phone": "5511999998888"}},
    {"customer": {"phone": "9" * 51}},
    {"customer": {"phone": "5511999998888", "email": "a" * 250 + "@x.com"}},
    {"total_price": "R$ 100.000.000,00"},
])
async def test_oversized_fields_are_400_and_write_nothing(client, make_event, fetch, overrides):
    response = await client.post("/api/webhook/sales", json=make_event("SALE_APPROVED", **overrides))

    assert response.status_code == 400
    assert await fetch(Client) == []
    assert await fetch(Sale) == []


async def test_largest_amount_is_accepted(client, make_event, fetch):
    response = await client.post("/api/webhook/sales", json=make_event(total_price="R$ 99.999.999,99"))

    assert response.status_code == 200
    assert str((await fetch(Sale))[0].value) == "99999999.99"


async def test_invalid_customer_email_gets_placeholder(client, make_event, fetch):
    response = await client.post("/api/webhook/sales", json=make_event(
        customer={"name": "Ana", "phone": "5511999998888", "email": "not-an-email"}
    ))

    assert response.status_code == 200
    clients = await fetch(Client)
    assert clients[0].email == f"5511999998888@{settings.placeholder_email_domain}"


async def test_valid_customer_email_is_kept(client, make_event, fetch):
    response = await client.post("/api/webhook/sales", json=make_event(
        customer={"name": "Ana", "phone": "5511999998888", "email": " ana@example.com "}
    ))

    assert response.status_code == 200
    assert (await fetch(Client))[0].email == "ana@example.com"


async def test_invalid_json_is_400(client):
    response = await client.post(
        "/api/webhook/sales",
        content=b"{not json",
        headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 400


async def test_database_failure_is_500(client, make_event, monkeypatch):
    from sqlalchemy.exc import OperationalError
    from app.services import sale_classifier

    async def broken(session, phone):
        raise OperationalError("SELECT", {}, Exception("database is gone"))

    monkeypatch.setattr(sale_classifier, "get_client_by_phone", broken)

    response = await client.post("/api/webhook/sales", json=make_event())

    assert response.status_code == 500
    assert response.json()["success"] is False


async def test_webhook_token_is_enforced_when_configured(client, make_event, monkeypatch):
    monkeypatch.setattr(settings, "sales_webhook_token", "segredo")

    denied = await client.post("/api/webhook/sales", json=make_event())
    allowed = await client.post(
        "/api/webhook/sales",
        json=make_event(),
        headers={"X-Webhook-Token": "segredo"}
    )

    assert denied.status_code == 401
    assert allowed.status_code == 200
