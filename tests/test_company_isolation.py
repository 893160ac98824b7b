"""
Cross-company isolation.

Two companies share one deployment; every record of company A must behave as
missing for company B, both on reads and when referenced from B's writes.
"""

from conftest import API


class TestCompanyIsolation:
    """Company B cannot see or reference company A data."""

    def test_reads_are_scoped(self, client, company_b, customer, make_po, kraft):
        b = company_b["headers"]
        po = make_po()
        assert client.get(f"{API}/clients/{customer['id']}", headers=b).status_code == 404
        assert client.get(f"{API}/items/{kraft['id']}", headers=b).status_code == 404
        assert client.get(f"{API}/purchase-orders/{po['id']}", headers=b).status_code == 404
        assert client.get(f"{API}/clients", headers=b).json() == []
        assert client.get(f"{API}/purchase-orders", headers=b).json() == []
        assert client.get(f"{API}/invoices", headers=b).json()["total"] == 0

    def test_foreign_references_are_rejected(self, client, company_b, supplier, customer, kraft, make_po):
        b = company_b["headers"]
        own_supplier = client.post(
            f"{API}/clients", json={"display_name": "B Mill", "client_category": "supplier"}, headers=b
        ).json()

        resp = client.post(
            f"{API}/purchase-orders",
            json={"supplier_id": own_supplier["id"], "items": [{"item_id": kraft["id"], "quantity": "1", "unit_price": "1"}]},
            headers=b,
        )
        assert resp.status_code == 400

        po = make_po()
        resp = client.post(
            f"{API}/grns",
            json={
                "po_id": po["id"],
                "items": [{"po_item_id": po["items"][0]["id"], "quantity_received": "1", "accepted_quantity": "1"}],
            },
            headers=b,
        )
        assert resp.status_code == 400

        resp = client.post(f"{API}/invoices", json={"client_id": customer["id"], "total": "10"}, headers=b)
        assert resp.status_code == 400

    def test_foreign_writes_are_404(self, client, company_b, customer, make_po):
        b = company_b["headers"]
        po = make_po()
        assert client.delete(f"{API}/clients/{customer['id']}", headers=b).status_code == 404
        resp = client.post(f"{API}/purchase-orders/{po['id']}/payments", json={"amount": "10"}, headers=b)
        assert resp.status_code == 404

    def test_users_are_scoped(self, client, company_a, company_b):
        b = company_b["headers"]
        emails = [u["email"] for u in client.get(f"{API}/admin/users", headers=b).json()]
        assert emails == ["admin@beta-cartons.com"]
        resp = client.get(f"{API}/admin/users/{company_a['user']['id']}", headers=b)
        assert resp.status_code == 404

    def test_error_envelope_names_company(self, client, company_b, customer):
        resp = client.get(f"{API}/clients/{customer['id']}", headers=company_b["headers"])
        assert resp.json()["company_id"] == company_b["company"]["id"]
