from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import httpx
import pytest

from vatbook.config import Settings
from vatbook.main import create_app


def vies_unreachable(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("Name or service not known", request=request)


@pytest.fixture
def settings():
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        secret_key="test-secret",
        vies_api_url="https://vies.test/check-vat-number",
        vies_timeout_seconds=1.0,
    )


@pytest.fixture
def vies():
    """Mutable holder for the fake VIES handler; tests swap ``vies.handler``."""
    return SimpleNamespace(handler=vies_unreachable, requests=[])


@pytest.fixture
async def app(settings, vies):
    application = create_app(settings)
    async with application.router.lifespan_context(application):
        def route(request: httpx.Request) -> httpx.Response:
            vies.requests.append(request)
            return vies.handler(request)

        await application.state.http_client.aclose()
        application.state.http_client = httpx.AsyncClient(transport=httpx.MockTransport(route))
        yield application


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def register_and_login(client, username="acme", vat_number="BE 0123.456.789"):
    response = await client.post(
        "/api/auth/register",
        json={
            "username": username,
            "password": "correct-horse",
            "company_name": f"{username.title()} BV",
            "vat_number": vat_number,
        },
    )
    assert response.status_code == 201, response.text
    response = await client.post(
        "/api/auth/login",
        json={"username": username, "password": "correct-horse"},
    )
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['data']['access_token']}"}


@pytest.fixture
async def auth_headers(client):
    return await register_and_login(client)


def make_invoice(**overrides):
    """Plain stand-in for a stored invoice row."""
    fields = {
        "id": 1,
        "client_name": "Brasserie Dupont",
        "amount": Decimal("100.00"),
        "vat_rate": Decimal("21.00"),
        "vat_amount": Decimal("21.00"),
        "tax_category": "standard",
        "issue_date": date(2025, 1, 15),
        "due_date": date(2025, 2, 15),
        "status": "pending",
    }
    fields.update(overrides)
    return SimpleNamespace(**fields)
