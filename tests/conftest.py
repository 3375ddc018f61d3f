import os
import tempfile

# Configuração de teste antes de importar a aplicação
_tmpdir = tempfile.mkdtemp(prefix="sales-dashboard-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_tmpdir}/test.db"
os.environ["APP_ENV"] = "testing"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SALES_WEBHOOK_TOKEN"] = ""

import httpx
import pytest
from sqlalchemy import select

import app.models  # noqa
from app.core.config import settings
from app.core.database import Base, async_session_maker, engine, seed_default_admin
from app.core.security import get_password_hash
from app.main import app as fastapi_app
from app.models import User

USER_EMAIL = "operador@dashboard.com"
USER_PASSWORD = "operador123"


@pytest.fixture(autouse=True)
async def database():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await seed_default_admin()

    yield

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def fetch_all(model, *criteria) -> list:
    """Lê com uma sessão curta; no SQLite uma transação aberta bloqueia as escritas."""
    async with async_session_maker() as session:
        result = await session.execute(select(model).where(*criteria).order_by(model.id))
        return list(result.scalars().all())


@pytest.fixture
def fetch():
    return fetch_all


def _client() -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=fastapi_app), base_url="http://test")


@pytest.fixture
async def client():
    async with _client() as http:
        yield http


async def login(email: str, password: str) -> dict:
    # Cliente separado para o cookie da sessão não vazar para o cliente do teste
    async with _client() as http:
        response = await http.post("/api/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
async def admin_headers():
    return await login(settings.default_admin_email, settings.default_admin_password)


@pytest.fixture
async def operator():
    async with async_session_maker() as session:
        user = User(
            email=USER_EMAIL,
            name="Operador",
            password_hash=get_password_hash(USER_PASSWORD),
            role="user",
            is_active=True,
        )
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user


@pytest.fixture
async def user_headers(operator):
    return await login(USER_EMAIL, USER_PASSWORD)


def payment_event(event: str = "PIX_GENERATED", phone: str = "5511999998888", **overrides) -> dict:
    payload = {
        "event": event,
        "sale_id": "8K421YV7",
        "payment_method": "PIX",
        "total_price": "R$ 50,00",
        "customer": {"name": "Ana", "phone": phone},
        "products": [{"name": "Plan A"}],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def make_event():
    return payment_event
