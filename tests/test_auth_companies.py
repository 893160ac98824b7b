"""
Registration, authentication, role checks and company settings.
"""

from conftest import API, auth_headers


class TestRegistration:
    """Public company sign-up."""

    def test_register_returns_company_admin_and_tokens(self, company_a):
        assert company_a["company"]["company_name"] == "Acme Boxes"
        assert company_a["company"]["status"] == "active"
        assert company_a["user"]["email"] == "admin@acme-boxes.com"
        assert company_a["user"]["roles"] == ["admin"]
        assert company_a["user"]["company_id"] == company_a["company"]["id"]
        assert company_a["tokens"]["token_type"] == "bearer"

    def test_duplicate_company_email_conflicts(self, client, company_a):
        resp = client.post(
            f"{API}/companies/register",
            json={
                "company_name": "Acme Again",
                "company_email": "office@acme-boxes.com",
                "admin_email": "owner@acme-again.com",
                "admin_password": "Password123!",
            },
        )
        assert resp.status_code == 409
        body = resp.json()
        assert body["error"]["type"] == "conflict"
        assert body["path"] == f"{API}/companies/register"

    def test_duplicate_admin_email_conflicts(self, client, company_a):
        resp = client.post(
            f"{API}/companies/register",
            json={
                "company_name": "Other Co",
                "company_email": "office@other-co.com",
                "admin_email": "admin@acme-boxes.com",
                "admin_password": "Password123!",
            },
        )
        assert resp.status_code == 409

    def test_register_validates_payload(self, client):
        resp = client.post(f"{API}/companies/register", json={"company_name": "No Email"})
        assert resp.status_code == 422
        assert resp.json()["error"]["type"] == "validation_error"


class TestAuthentication:
    """Login, refresh and the current user."""

    def test_login_and_me(self, client, company_a):
        resp = client.post(
            f"{API}/auth/login", data={"username": "admin@acme-boxes.com", "password": "Password123!"}
        )
        assert resp.status_code == 200
        me = client.get(f"{API}/auth/me", headers=auth_headers(resp.json()["access_token"]))
        assert me.status_code == 200
        assert me.json()["email"] == "admin@acme-boxes.com"
        assert "admin" in me.json()["roles"]

    def test_login_wrong_password(self, client, company_a):
        resp = client.post(f"{API}/auth/login", data={"username": "admin@acme-boxes.com", "password": "nope-nope"})
        assert resp.status_code == 401

    def test_refresh_issues_new_pair(self, client, company_a):
        resp = client.post(f"{API}/auth/refresh", json={"refresh_token": company_a["tokens"]["refresh_token"]})
        assert resp.status_code == 200
        assert resp.json()["access_token"]

    def test_access_token_cannot_refresh(self, client, company_a):
        resp = client.post(f"{API}/auth/refresh", json={"refresh_token": company_a["tokens"]["access_token"]})
        assert resp.status_code == 401

    def test_missing_token_is_rejected(self, client):
        resp = client.get(f"{API}/clients")
        assert resp.status_code == 401

    def test_garbage_token_is_rejected(self, client):
        resp = client.get(f"{API}/clients", headers=auth_headers("not-a-jwt"))
        assert resp.status_code == 401

    def test_responses_carry_correlation_id(self, client):
        resp = client.get(f"{API}/health", headers={"X-Correlation-ID": "corr-123"})
        assert resp.status_code == 200
        assert resp.json()["message"] == "Healthy"
        assert resp.headers["X-Correlation-ID"] == "corr-123"


class TestRoles:
    """Role-based access inside a company."""

    def test_sales_user_cannot_create_purchase_orders(self, client, make_user, supplier, kraft):
        sales = make_user("sales@acme-boxes.com", ["sales"])
        resp = client.post(
            f"{API}/purchase-orders",
            json={"supplier_id": supplier["id"], "items": [{"item_id": kraft["id"], "quantity": "1", "unit_price": "1"}]},
            headers=sales,
        )
        assert resp.status_code == 403

    def test_sales_user_can_create_clients(self, client, make_user):
        sales = make_user("sales@acme-boxes.com", ["sales"])
        resp = client.post(f"{API}/clients", json={"display_name": "Walk-in Buyer"}, headers=sales)
        assert resp.status_code == 201

    def test_non_admin_cannot_manage_users(self, client, make_user):
        store = make_user("store@acme-boxes.com", ["store"])
        assert client.get(f"{API}/admin/users", headers=store).status_code == 403

    def test_unknown_role_on_user_create(self, client, headers):
        resp = client.post(
            f"{API}/admin/users",
            json={"email": "x@acme-boxes.com", "password": "Password123!", "roles": ["wizard"]},
            headers=headers,
        )
        assert resp.status_code == 400

    def test_admin_cannot_delete_self(self, client, company_a, headers):
        resp = client.delete(f"{API}/admin/users/{company_a['user']['id']}", headers=headers)
        assert resp.status_code == 400

    def test_admin_role_is_protected(self, client, headers):
        roles = client.get(f"{API}/admin/roles", headers=headers).json()
        admin = next(r for r in roles if r["name"] == "admin")
        assert client.delete(f"{API}/admin/roles/{admin['id']}", headers=headers).status_code == 400
        assert {"purchase", "store", "sales", "production", "accounts"} <= {r["name"] for r in roles}


class TestCompanySettings:
    """Company profile and document number formats."""

    def test_update_profile(self, client, headers):
        resp = client.put(f"{API}/companies/me", json={"phone": "+91 79 4000 1234"}, headers=headers)
        assert resp.status_code == 200
        assert resp.json()["phone"] == "+91 79 4000 1234"
        assert resp.json()["company_name"] == "Acme Boxes"

    def test_default_number_formats(self, client, headers):
        resp = client.get(f"{API}/companies/me/invoice-settings", headers=headers)
        assert resp.status_code == 200
        formats = resp.json()["number_formats"]
        assert formats["purchase"] == {"prefix": "PO", "separator": "-", "digits": 5}
        assert formats["work_invoice"]["prefix"] == "WI"

    def test_custom_prefix_applies_to_next_number(self, client, headers, make_client):
        first = make_client("First Buyer", "customer")
        assert first["client_ref_id"] == "CL-00001"

        resp = client.put(
            f"{API}/companies/me/invoice-settings",
            json={"number_formats": {"client": {"prefix": "CUST", "digits": 3}}},
            headers=headers,
        )
        assert resp.status_code == 200
        assert resp.json()["number_formats"]["client"] == {"prefix": "CUST", "separator": "-", "digits": 3}

        second = make_client("Second Buyer", "customer")
        assert second["client_ref_id"] == "CUST-002"

    def test_sequences_are_per_company(self, client, company_a, company_b):
        a = client.post(f"{API}/clients", json={"display_name": "A Buyer"}, headers=company_a["headers"]).json()
        b = client.post(f"{API}/clients", json={"display_name": "B Buyer"}, headers=company_b["headers"]).json()
        assert a["client_ref_id"] == "CL-00001"
        assert b["client_ref_id"] == "CL-00001"
