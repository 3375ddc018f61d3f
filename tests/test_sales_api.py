from datetime import datetime
from decimal import Decimal

import pytest

from app.core.database import async_session_maker
from app.models import Client, Sale
from app.services.metrics_service import get_sales_charts


@pytest.fixture
async def customer():
    async with async_session_maker() as session:
        customer = Client(name="Ana", email="ana@example.com", phone="5511999998888")
        session.add(customer)
        await session.commit()
        await session.refresh(customer)
        return customer


async def add_sale(client_id: int, status: str, value: str, date: datetime = None) -> Sale:
    async with async_session_maker() as session:
        sale = Sale(client_id=client_id, product="Plan A", value=Decimal(value), status=status)
        if date:
            sale.date = date
        session.add(sale)
        await session.commit()
        await session.refresh(sale)
        return sale


async def test_sales_require_authentication(client):
    response = await client.get("/api/sales")

    assert response.status_code == 401
    assert response.json()["message"]


async def test_create_and_get_sale(client, user_headers, customer):
    response = await client.post("/api/sales", headers=user_headers, json={
        "clientId": customer.id,
        "product": "Plan B",
        "value": "199.90",
        "status": "realized",
        "notes": "Venda manual",
    })

    assert response.status_code == 201
    created = response.json()
    assert created["status"] == "realized"
    assert Decimal(created["value"]) == Decimal("199.90")
    assert created["client"]["id"] == customer.id

    fetched = await client.get(f"/api/sales/{created['id']}", headers=user_headers)
    assert fetched.status_code == 200
    assert fetched.json()["notes"] == "Venda manual"


async def test_create_sale_with_invalid_status_is_400(client, user_headers, customer):
    response = await client.post("/api/sales", headers=user_headers, json={
        "clientId": customer.id,
        "product": "Plan B",
        "value": "10.00",
        "status": "refunded",
    })

    assert response.status_code == 400
    assert any(error["field"] == "status" for error in response.json()["errors"])


async def test_create_sale_for_unknown_client_is_404(client, user_headers):
    response = await client.post("/api/sales", headers=user_headers, json={
        "clientId": 999,
        "product": "Plan B",
        "value": "10.00",
        "status": "pending",
    })

    assert response.status_code == 404


async def test_list_sales_is_paginated_newest_first(client, user_headers, customer):
    for index in range(3):
        await add_sale(customer.id, "pending", "10.00", datetime(2024, 1, index + 1))

    page = await client.get("/api/sales?limit=2&offset=0", headers=user_headers)
    rest = await client.get("/api/sales?limit=2&offset=2", headers=user_headers)

    assert page.status_code == 200
    assert [sale["date"][:10] for sale in page.json()] == ["2024-01-03", "2024-01-02"]
    assert [sale["date"][:10] for sale in rest.json()] == ["2024-01-01"]
    assert page.json()[0]["client"]["name"] == "Ana"


async def test_list_sales_filters_by_status(client, user_headers, customer):
    await add_sale(customer.id, "pending", "10.00")
    await add_sale(customer.id, "lost", "20.00")

    response = await client.get("/api/sales?status=lost", headers=user_headers)

    assert [sale["status"] for sale in response.json()] == ["lost"]


@pytest.mark.parametrize("query", ["limit=0", "limit=201", "offset=-1"])
async def test_list_sales_rejects_bad_pagination(client, user_headers, query):
    response = await client.get(f"/api/sales?{query}", headers=user_headers)

    assert response.status_code == 400


async def test_update_and_delete_sale(client, user_headers, customer):
    sale = await add_sale(customer.id, "lost", "30.00")

    updated = await client.put(f"/api/sales/{sale.id}", headers=user_headers, json={"status": "recovered"})
    assert updated.status_code == 200
    assert updated.json()["status"] == "recovered"
    assert Decimal(updated.json()["value"]) == Decimal("30.00")

    deleted = await client.delete(f"/api/sales/{sale.id}", headers=user_headers)
    assert deleted.status_code == 204

    missing = await client.get(f"/api/sales/{sale.id}", headers=user_headers)
    assert missing.status_code == 404


async def test_sales_metrics(client, user_headers, customer):
    await add_sale(customer.id, "realized", "100.00")
    await add_sale(customer.id, "realized", "50.50")
    await add_sale(customer.id, "recovered", "30.00")
    await add_sale(customer.id, "lost", "20.00")
    await add_sale(customer.id, "pending", "10.00")

    response = await client.get("/api/sales/metrics", headers=user_headers)

    assert response.status_code == 200
    metrics = response.json()
    assert metrics["totalSales"] == pytest.approx(150.50)
    assert metrics["recoveredSales"] == pytest.approx(30.00)
    assert metrics["lostSales"] == pytest.approx(20.00)
    assert metrics["pendingSales"] == pytest.approx(10.00)
    assert metrics["totalClients"] == 1
    assert metrics["byStatus"]["realized"]["count"] == 2


async def test_sales_charts_endpoint(client, user_headers, customer):
    await add_sale(customer.id, "realized", "100.00")

    response = await client.get("/api/sales/charts", headers=user_headers)

    assert response.status_code == 200
    charts = response.json()
    assert len(charts["monthly"]) == 12
    assert charts["distribution"] == [{"status": "realized", "count": 1, "value": 100.0}]


async def test_sales_charts_only_count_last_twelve_months(customer):
    await add_sale(customer.id, "realized", "100.00", datetime(2024, 3, 10))
    await add_sale(customer.id, "lost", "40.00", datetime(2024, 3, 20))
    await add_sale(customer.id, "realized", "999.00", datetime(2023, 3, 31))

    async with async_session_maker() as session:
        charts = await get_sales_charts(session, now=datetime(2024, 6, 15))

    march = charts["monthly"][2]
    assert march["month"] == "Mar"
    assert march["realized"] == pytest.approx(100.0)
    assert march["lost"] == pytest.approx(40.0)
