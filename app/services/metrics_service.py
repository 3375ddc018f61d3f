"""
Serviço de Métricas - Agregados de vendas para o painel e relatórios.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.models import Client, Sale, User
from app.models.enums import SaleStatus

logger = structlog.get_logger()

MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


def _as_float(value) -> float:
    return float(value or 0)


async def _totals_by_status(db: AsyncSession) -> dict:
    query = select(
        Sale.status,
        func.count(Sale.id),
        func.sum(Sale.value)
    ).group_by(Sale.status)

    result = await db.execute(query)

    totals = {status.value: {"count": 0, "value": 0.0} for status in SaleStatus}
    for status, count, value in result.all():
        totals[status] = {"count": count, "value": _as_float(value)}
    return totals


async def get_sales_metrics(db: AsyncSession) -> dict:
    """
    KPIs do painel: soma de valor por status e total de clientes.
    """
    totals = await _totals_by_status(db)
    total_clients = await db.scalar(select(func.count(Client.id))) or 0

    return {
        "totalSales": totals[SaleStatus.REALIZED.value]["value"],
        "recoveredSales": totals[SaleStatus.RECOVERED.value]["value"],
        "lostSales": totals[SaleStatus.LOST.value]["value"],
        "pendingSales": totals[SaleStatus.PENDING.value]["value"],
        "totalClients": total_clients,
        "byStatus": totals,
    }


def _months_ago(now: datetime, months: int) -> datetime:
    """Primeiro dia do mês `months` meses antes de `now`."""
    index = now.year * 12 + (now.month - 1) - months
    return datetime(index // 12, index % 12 + 1, 1)


async def get_sales_charts(db: AsyncSession, now: Optional[datetime] = None) -> dict:
    """
    Série mensal dos últimos 12 meses e distribuição por status.
    """
    now = now or datetime.utcnow()
    cutoff = _months_ago(now, 11)

    monthly = [
        {"month": month, "realized": 0.0, "recovered": 0.0, "lost": 0.0, "pending": 0.0}
        for month in MONTHS
    ]

    query = select(Sale.date, Sale.status, Sale.value).where(Sale.date >= cutoff)
    result = await db.execute(query)

    sums = {}
    for date, status, value in result.all():
        if status not in monthly[0]:
            continue
        key = (date.month - 1, status)
        sums[key] = sums.get(key, Decimal("0")) + (value or 0)

    for (month_index, status), value in sums.items():
        monthly[month_index][status] = _as_float(value)

    totals = await _totals_by_status(db)
    distribution = [
        {"status": status, "count": data["count"], "value": data["value"]}
        for status, data in totals.items()
        if data["count"]
    ]

    return {"monthly": monthly, "distribution": distribution}


async def get_admin_metrics(db: AsyncSession) -> dict:
    """
    Visão do super admin: usuários, clientes e valores recebidos.
    """
    totals = await _totals_by_status(db)
    total_users = await db.scalar(select(func.count(User.id))) or 0
    total_clients = await db.scalar(select(func.count(Client.id))) or 0

    realized = totals[SaleStatus.REALIZED.value]["value"]
    recovered = totals[SaleStatus.RECOVERED.value]["value"]

    return {
        "totalUsers": total_users,
        "totalSalesValue": round(realized + recovered, 2),
        "totalRecoveredValue": recovered,
        "totalClients": total_clients,
    }
