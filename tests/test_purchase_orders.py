"""
Purchase orders: totals, approval, supplier payments and wallet use.
"""

from conftest import API


class TestPurchaseOrderTotals:
    """Server-side line and header amounts."""

    def test_totals_use_item_tax_rates(self, make_po):
        po = make_po(approve=False)
        assert po["purchase_generate_id"] == "PO-00001"
        assert po["decision"] == "pending"
        assert po["sub_total"] == 1000
        assert po["tax_amount"] == 120
        assert po["total_amount"] == 1120
        assert po["payment_status"] == "pending"
        assert po["receipt_status"] == "pending"

        line = po["items"][0]
        assert line["line_no"] == 1
        assert line["item_code"] == "RM-KRAFT-120"
        assert line["amount"] == 1000
        assert line["tax_amount"] == 120
        assert line["pending_quantity"] == 100

    def test_line_tax_override(self, make_po, kraft):
        po = make_po(
            lines=[{"item_id": kraft["id"], "quantity": "2.5", "unit_price": "40", "cgst": "0", "sgst": "0"}],
            approve=False,
        )
        assert po["sub_total"] == 100
        assert po["total_amount"] == 100

    def test_inactive_item_is_rejected(self, client, headers, supplier, kraft):
        client.delete(f"{API}/items/{kraft['id']}", headers=headers)
        resp = client.post(
            f"{API}/purchase-orders",
            json={"supplier_id": supplier["id"], "items": [{"item_id": kraft["id"], "quantity": "1", "unit_price": "1"}]},
            headers=headers,
        )
        assert resp.status_code == 400
        assert resp.json()["error"]["details"]["line"] == 1

    def test_empty_lines_are_rejected(self, client, headers, supplier):
        resp = client.post(f"{API}/purchase-orders", json={"supplier_id": supplier["id"], "items": []}, headers=headers)
        assert resp.status_code == 422

    def test_update_recomputes_totals(self, client, headers, make_po, supplier, kraft):
        po = make_po(approve=False)
        resp = client.put(
            f"{API}/purchase-orders/{po['id']}",
            json={
                "supplier_id": supplier["id"],
                "po_date": po["po_date"],
                "items": [{"item_id": kraft["id"], "quantity": "50", "unit_price": "10"}],
            },
            headers=headers,
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["total_amount"] == 560
        assert body["items"][0]["id"] == po["items"][0]["id"]


class TestPurchaseOrderLifecycle:
    """Approval, listing and soft delete."""

    def test_removing_lines_of_cancelled_grn_conflicts(self, client, headers, make_po, make_item, supplier, kraft):
        glue = make_item("RM-GLUE-STARCH", item_name="Starch glue")
        po = make_po(
            lines=[
                {"item_id": kraft["id"], "quantity": "100", "unit_price": "10"},
                {"item_id": glue["id"], "quantity": "20", "unit_price": "5"},
            ]
        )
        resp = client.post(
            f"{API}/grns",
            json={
                "po_id": po["id"],
                "items": [{"po_item_id": po["items"][1]["id"], "quantity_received": "20", "accepted_quantity": "20"}],
            },
            headers=headers,
        )
        assert resp.status_code == 201
        assert client.delete(f"{API}/grns/{resp.json()['id']}", headers=headers).status_code == 204

        url = f"{API}/purchase-orders/{po['id']}"
        body = {"supplier_id": supplier["id"], "po_date": po["po_date"]}
        resp = client.put(
            url, json={**body, "items": [{"item_id": kraft["id"], "quantity": "100", "unit_price": "10"}]}, headers=headers
        )
        assert resp.status_code == 409
        assert resp.json()["error"]["message"] == "Removed purchase order lines are referenced by cancelled GRNs"

        resp = client.put(
            url,
            json={
                **body,
                "items": [
                    {"item_id": kraft["id"], "quantity": "90", "unit_price": "10"},
                    {"item_id": glue["id"], "quantity": "20", "unit_price": "5"},
                ],
            },
            headers=headers,
        )
        assert resp.status_code == 200
        assert [line["id"] for line in resp.json()["items"]] == [line["id"] for line in po["items"]]

    def test_decision_and_open_list(self, client, headers, make_po):
        pending = make_po(approve=False)
        approved = make_po()
        open_ids = [p["id"] for p in client.get(f"{API}/purchase-orders/open", headers=headers).json()]
        assert open_ids == [approved["id"]]
        assert pending["id"] not in open_ids

        resp = client.patch(
            f"{API}/purchase-orders/{approved['id']}/decision", json={"decision": "disapprove"}, headers=headers
        )
        assert resp.json()["decision"] == "disapprove"
        assert client.get(f"{API}/purchase-orders/open", headers=headers).json() == []

    def test_invalid_decision(self, client, headers, make_po):
        po = make_po(approve=False)
        resp = client.patch(f"{API}/purchase-orders/{po['id']}/decision", json={"decision": "maybe"}, headers=headers)
        assert resp.status_code == 422

    def test_soft_delete(self, client, headers, make_po):
        po = make_po(approve=False)
        assert client.delete(f"{API}/purchase-orders/{po['id']}", headers=headers).status_code == 204
        assert client.get(f"{API}/purchase-orders", headers=headers).json() == []
        rows = client.get(f"{API}/purchase-orders", params={"status": "inactive"}, headers=headers).json()
        assert [r["id"] for r in rows] == [po["id"]]
        resp = client.post(f"{API}/purchase-orders/{po['id']}/payments", json={"amount": "10"}, headers=headers)
        assert resp.status_code == 404


class TestPurchaseOrderPayments:
    """Supplier payments and the overpay guard."""

    def test_partial_then_full_payment(self, client, headers, make_po):
        po = make_po()
        resp = client.post(
            f"{API}/purchase-orders/{po['id']}/payments",
            json={"amount": "500", "payment_mode": "bank", "reference_number": "UTR-1"},
            headers=headers,
        )
        assert resp.status_code == 201
        assert resp.json()["purchase_payment_generate_id"] == "PP-00001"

        po = client.get(f"{API}/purchase-orders/{po['id']}", headers=headers).json()
        assert po["amount_paid"] == 500
        assert po["payment_status"] == "partial"

        resp = client.post(f"{API}/purchase-orders/{po['id']}/payments", json={"amount": "620"}, headers=headers)
        assert resp.status_code == 201
        po = client.get(f"{API}/purchase-orders/{po['id']}", headers=headers).json()
        assert po["amount_paid"] == 1120
        assert po["payment_status"] == "paid"

        payments = client.get(f"{API}/purchase-orders/{po['id']}/payments", headers=headers).json()
        assert len(payments) == 2

    def test_overpayment_conflicts(self, client, headers, make_po):
        po = make_po()
        client.post(f"{API}/purchase-orders/{po['id']}/payments", json={"amount": "1000"}, headers=headers)
        resp = client.post(f"{API}/purchase-orders/{po['id']}/payments", json={"amount": "200"}, headers=headers)
        assert resp.status_code == 409
        details = resp.json()["error"]["details"]
        assert details["amount_paid"] == 1000
        assert details["total_amount"] == 1120

        po = client.get(f"{API}/purchase-orders/{po['id']}", headers=headers).json()
        assert po["amount_paid"] == 1000

    def test_total_cannot_drop_below_paid(self, client, headers, make_po, supplier, kraft):
        po = make_po(approve=False)
        client.post(f"{API}/purchase-orders/{po['id']}/payments", json={"amount": "800"}, headers=headers)
        resp = client.put(
            f"{API}/purchase-orders/{po['id']}",
            json={
                "supplier_id": supplier["id"],
                "po_date": po["po_date"],
                "items": [{"item_id": kraft["id"], "quantity": "10", "unit_price": "10"}],
            },
            headers=headers,
        )
        assert resp.status_code == 409


class TestSupplierWallet:
    """Paying part of a purchase order from the supplier debit wallet."""

    def _fund(self, client, headers, supplier, amount):
        resp = client.post(
            f"{API}/debit-notes",
            json={"supplier_id": supplier["id"], "sub_total": amount, "reason": "Short supply"},
            headers=headers,
        )
        assert resp.status_code == 201, resp.text

    def test_wallet_payment_on_create(self, client, headers, supplier, kraft, make_po):
        self._fund(client, headers, supplier, "300")
        po = make_po(approve=False, use_wallet=True, wallet_amount="200")
        assert po["amount_paid"] == 200
        assert po["payment_status"] == "partial"
        assert po["payments"][0]["payment_mode"] == "wallet"

        wallet = client.get(f"{API}/clients/{supplier['id']}/wallet", headers=headers).json()
        assert wallet["debit_balance"] == 100
        assert wallet["history"][0]["type"] == "debit"
        assert wallet["history"][0]["reference_number"] == po["purchase_generate_id"]

    def test_wallet_cannot_go_negative(self, client, headers, supplier, kraft):
        self._fund(client, headers, supplier, "300")
        resp = client.post(
            f"{API}/purchase-orders",
            json={
                "supplier_id": supplier["id"],
                "items": [{"item_id": kraft["id"], "quantity": "100", "unit_price": "10"}],
                "use_wallet": True,
                "wallet_amount": "500",
            },
            headers=headers,
        )
        assert resp.status_code == 409
        wallet = client.get(f"{API}/clients/{supplier['id']}/wallet", headers=headers).json()
        assert wallet["debit_balance"] == 300
        assert client.get(f"{API}/purchase-orders", headers=headers).json() == []
