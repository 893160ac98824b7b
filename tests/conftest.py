"""
Pytest fixtures for PackWorkX API tests.

Every test runs against a fresh SQLite schema through the FastAPI TestClient.
Companies are created through the public registration endpoint so tokens,
roles and numbering settings match what a real sign-up produces.
"""

import asyncio
import os
import tempfile

_DB_DIR = tempfile.mkdtemp(prefix="packworkx-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_DB_DIR, 'packworkx.db')}"
os.environ["RUN_MIGRATIONS_ON_STARTUP"] = "false"
os.environ["CREATE_SCHEMA_ON_STARTUP"] = "false"
os.environ["AUTO_SEED"] = "false"
os.environ["JWT_SECRET_KEY"] = "packworkx-test-secret"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from packworkx.api.main import app  # noqa: E402
from packworkx.db.session import create_schema, drop_schema  # noqa: E402

API = "/api/v1"


def _reset_schema() -> None:
    asyncio.run(drop_schema())
    asyncio.run(create_schema())


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope="function")
def client():
    """Test client bound to an empty database."""
    _reset_schema()
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture(scope="function")
def register(client):
    """Register a company and return its registration payload plus admin headers."""

    def _register(name: str = "Acme Boxes", domain: str = "acme-boxes.com") -> dict:
        resp = client.post(
            f"{API}/companies/register",
            json={
                "company_name": name,
                "company_email": f"office@{domain}",
                "admin_email": f"admin@{domain}",
                "admin_password": "Password123!",
                "admin_full_name": f"{name} Admin",
            },
        )
        assert resp.status_code == 201, resp.text
        body = resp.json()
        body["headers"] = auth_headers(body["tokens"]["access_token"])
        return body

    return _register


@pytest.fixture(scope="function")
def company_a(register):
    """Company A with an admin session."""
    return register("Acme Boxes", "acme-boxes.com")


@pytest.fixture(scope="function")
def company_b(register):
    """Company B, a second tenant of the same deployment."""
    return register("Beta Cartons", "beta-cartons.com")


@pytest.fixture(scope="function")
def headers(company_a):
    return company_a["headers"]


@pytest.fixture(scope="function")
def make_client(client, headers):
    """Factory creating a client (customer, supplier or both) for company A."""

    def _make(display_name: str = "Shree Paper Mills", category: str = "supplier", **extra) -> dict:
        payload = {"display_name": display_name, "client_category": category}
        payload.update(extra)
        resp = client.post(f"{API}/clients", json=payload, headers=headers)
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _make


@pytest.fixture(scope="function")
def make_item(client, headers):
    """Factory creating an item for company A."""

    def _make(item_code: str = "RM-KRAFT-120", **extra) -> dict:
        payload = {
            "item_code": item_code,
            "item_name": extra.pop("item_name", f"Item {item_code}"),
            "uom": "KG",
            "item_type": "reels",
            "cgst": "6",
            "sgst": "6",
        }
        payload.update(extra)
        resp = client.post(f"{API}/items", json=payload, headers=headers)
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _make


@pytest.fixture(scope="function")
def supplier(make_client):
    return make_client("Shree Paper Mills", "supplier", email="sales@shreepapermills.com")


@pytest.fixture(scope="function")
def customer(make_client):
    return make_client("FreshFoods Packaging", "customer", email="buyer@freshfoods-india.com")


@pytest.fixture(scope="function")
def kraft(make_item):
    return make_item("RM-KRAFT-120", item_name="Kraft paper reel 120 GSM", min_stock_level="50", reorder_level="100")


@pytest.fixture(scope="function")
def make_po(client, headers, supplier, kraft):
    """Factory creating a purchase order; approved unless approve=False."""

    def _make(lines=None, approve: bool = True, **extra) -> dict:
        payload = {
            "supplier_id": extra.pop("supplier_id", supplier["id"]),
            "items": lines or [{"item_id": kraft["id"], "quantity": "100", "unit_price": "10"}],
        }
        payload.update(extra)
        resp = client.post(f"{API}/purchase-orders", json=payload, headers=headers)
        assert resp.status_code == 201, resp.text
        po = resp.json()
        if approve:
            resp = client.patch(
                f"{API}/purchase-orders/{po['id']}/decision", json={"decision": "approve"}, headers=headers
            )
            assert resp.status_code == 200, resp.text
        return client.get(f"{API}/purchase-orders/{po['id']}", headers=headers).json()

    return _make


@pytest.fixture(scope="function")
def make_invoice(client, headers, customer):
    """Factory creating a work order invoice for the default customer."""

    def _make(**extra) -> dict:
        payload = {"client_id": customer["id"], "quantity": "100", "rate_per_qty": "10"}
        payload.update(extra)
        resp = client.post(f"{API}/invoices", json=payload, headers=headers)
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _make


@pytest.fixture(scope="function")
def make_user(client, headers):
    """Factory creating a company A user with the given roles and returning its auth headers."""

    def _make(email: str, roles) -> dict:
        resp = client.post(
            f"{API}/admin/users",
            json={"email": email, "password": "Password123!", "roles": list(roles)},
            headers=headers,
        )
        assert resp.status_code == 201, resp.text
        login = client.post(f"{API}/auth/login", data={"username": email, "password": "Password123!"})
        assert login.status_code == 200, login.text
        return auth_headers(login.json()["access_token"])

    return _make
