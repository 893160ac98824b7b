"""
Client and item master data.
"""

from conftest import API


class TestClients:
    """Customers, suppliers and wallets."""

    def test_create_client_starts_with_empty_wallets(self, client, headers, customer):
        assert customer["client_ref_id"] == "CL-00001"
        assert customer["credit_balance"] == 0
        assert customer["debit_balance"] == 0
        assert customer["status"] == "active"

        wallet = client.get(f"{API}/clients/{customer['id']}/wallet", headers=headers).json()
        assert wallet["credit_balance"] == 0
        assert wallet["history"] == []

    def test_duplicate_email_conflicts(self, client, headers, customer):
        resp = client.post(
            f"{API}/clients",
            json={"display_name": "Copy", "email": "BUYER@freshfoods-india.com"},
            headers=headers,
        )
        assert resp.status_code == 409

    def test_category_filter_includes_both(self, client, headers, make_client):
        make_client("Paper Supplier", "supplier")
        make_client("Buyer", "customer")
        make_client("Trader", "both")
        rows = client.get(f"{API}/clients", params={"client_category": "supplier"}, headers=headers).json()
        assert sorted(r["display_name"] for r in rows) == ["Paper Supplier", "Trader"]

    def test_update_keeps_omitted_fields(self, client, headers, customer):
        resp = client.put(
            f"{API}/clients/{customer['id']}",
            json={"payment_terms": "Net 30", "billing_address": {"city": "Ahmedabad"}},
            headers=headers,
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["payment_terms"] == "Net 30"
        assert body["billing_address"] == {"city": "Ahmedabad"}
        assert body["display_name"] == "FreshFoods Packaging"
        assert body["email"] == "buyer@freshfoods-india.com"

    def test_soft_delete_hides_from_default_list(self, client, headers, customer):
        assert client.delete(f"{API}/clients/{customer['id']}", headers=headers).status_code == 204
        assert client.get(f"{API}/clients", headers=headers).json() == []

        everything = client.get(f"{API}/clients", params={"status": "all"}, headers=headers).json()
        assert [r["status"] for r in everything] == ["inactive"]
        # still readable by id
        assert client.get(f"{API}/clients/{customer['id']}", headers=headers).json()["status"] == "inactive"

    def test_unknown_client_is_404(self, client, headers):
        resp = client.get(f"{API}/clients/00000000-0000-0000-0000-000000000000", headers=headers)
        assert resp.status_code == 404
        assert resp.json()["error"]["type"] == "not_found"


class TestItems:
    """Item master."""

    def test_create_item_gets_generated_id(self, kraft):
        assert kraft["item_generate_id"] == "ITM-00001"
        assert kraft["item_type"] == "reels"
        assert kraft["cgst"] == 6

    def test_item_code_unique_among_active(self, client, headers, kraft, make_item):
        resp = client.post(
            f"{API}/items",
            json={"item_code": "RM-KRAFT-120", "item_name": "Duplicate"},
            headers=headers,
        )
        assert resp.status_code == 409

        client.delete(f"{API}/items/{kraft['id']}", headers=headers)
        again = make_item("RM-KRAFT-120", item_name="Kraft reel, new supplier")
        assert again["item_generate_id"] == "ITM-00002"

    def test_invalid_item_type_is_rejected(self, client, headers):
        resp = client.post(
            f"{API}/items", json={"item_code": "X1", "item_name": "Mystery", "item_type": "widgets"}, headers=headers
        )
        assert resp.status_code == 422

    def test_update_and_search(self, client, headers, kraft, make_item):
        make_item("RM-GLUE-STARCH", item_name="Corrugation starch glue", item_type="glues")
        resp = client.put(f"{API}/items/{kraft['id']}", json={"reorder_level": "250"}, headers=headers)
        assert resp.status_code == 200
        assert resp.json()["reorder_level"] == 250

        rows = client.get(f"{API}/items", params={"search": "glue"}, headers=headers).json()
        assert [r["item_code"] for r in rows] == ["RM-GLUE-STARCH"]
        rows = client.get(f"{API}/items", params={"item_type": "reels"}, headers=headers).json()
        assert [r["item_code"] for r in rows] == ["RM-KRAFT-120"]
