"""
Purchase returns: goods accepted on a GRN going back to the supplier.
"""

from conftest import API


def _received(client, headers, make_po, accepted=60):
    po = make_po()
    resp = client.post(
        f"{API}/grns",
        json={
            "po_id": po["id"],
            "items": [
                {"po_item_id": po["items"][0]["id"], "quantity_received": str(accepted), "accepted_quantity": str(accepted)}
            ],
        },
        headers=headers,
    )
    assert resp.status_code == 201, resp.text
    return po, resp.json()


def _return(client, headers, grn, quantity, **extra):
    payload = {
        "grn_id": grn["id"],
        "reason": "Wet reels",
        "items": [{"grn_item_id": grn["items"][0]["id"], "return_qty": str(quantity)}],
    }
    payload.update(extra)
    return client.post(f"{API}/purchase-returns", json=payload, headers=headers)


def _stock(client, headers):
    return [row["quantity_available"] for row in client.get(f"{API}/inventory", headers=headers).json()]


def _wallet(client, headers, party):
    return client.get(f"{API}/clients/{party['id']}/wallet", headers=headers).json()


class TestPurchaseReturns:

    def test_return_is_priced_at_po_rate_and_credits_supplier(self, client, headers, make_po, supplier):
        po, grn = _received(client, headers, make_po)
        resp = _return(client, headers, grn, 10)
        assert resp.status_code == 201, resp.text
        body = resp.json()
        assert body["purchase_return_generate_id"] == "PR-00001"
        assert body["po_id"] == po["id"]
        assert body["supplier_id"] == supplier["id"]
        assert body["total_qty"] == 10
        assert body["amount"] == 100
        assert body["cgst_amount"] == 6
        assert body["sgst_amount"] == 6
        assert body["total_amount"] == 112
        assert body["items"][0]["unit_price"] == 10

        assert _stock(client, headers) == [50]
        wallet = _wallet(client, headers, supplier)
        assert wallet["debit_balance"] == 112
        assert wallet["history"][0]["reference_number"] == "Purchase Order Return PR-00001"

    def test_cannot_return_more_than_accepted(self, client, headers, make_po):
        _, grn = _received(client, headers, make_po)
        assert _return(client, headers, grn, 10).status_code == 201

        resp = _return(client, headers, grn, 55)
        assert resp.status_code == 409
        details = resp.json()["error"]["details"]
        assert details["already_returned"] == 10
        assert details["returnable"] == 50
        assert _stock(client, headers) == [50]

        assert _return(client, headers, grn, 50).status_code == 201
        assert _stock(client, headers) == [0]

    def test_lines_split_across_one_grn_line_are_summed(self, client, headers, make_po):
        _, grn = _received(client, headers, make_po)
        line = grn["items"][0]["id"]
        resp = client.post(
            f"{API}/purchase-returns",
            json={
                "grn_id": grn["id"],
                "items": [{"grn_item_id": line, "return_qty": "40"}, {"grn_item_id": line, "return_qty": "30"}],
            },
            headers=headers,
        )
        assert resp.status_code == 409
        assert resp.json()["error"]["details"]["line"] == 2

    def test_consumed_stock_cannot_be_returned(self, client, headers, make_po):
        _, grn = _received(client, headers, make_po)
        row = client.get(f"{API}/inventory", headers=headers).json()[0]
        resp = client.post(
            f"{API}/stock-adjustments",
            json={
                "inventory_id": row["id"],
                "reason": "Issued to corrugator",
                "remarks": "Shift A",
                "items": [{"adjustment_type": "decrease", "adjustment_quantity": "55"}],
            },
            headers=headers,
        )
        assert resp.status_code == 201, resp.text
        resp = _return(client, headers, grn, 10)
        assert resp.status_code == 409
        assert resp.json()["error"]["details"]["available"] == 5

    def test_foreign_or_cancelled_grn_is_rejected(self, client, headers, make_po):
        _, first = _received(client, headers, make_po)
        _, second = _received(client, headers, make_po)
        resp = _return(client, headers, first, 1, items=[{"grn_item_id": second["items"][0]["id"], "return_qty": "1"}])
        assert resp.status_code == 400

        assert client.delete(f"{API}/grns/{first['id']}", headers=headers).status_code == 204
        assert _return(client, headers, first, 1).status_code == 400

    def test_return_locks_the_grn_until_cancelled(self, client, headers, make_po, supplier):
        _, grn = _received(client, headers, make_po)
        purchase_return = _return(client, headers, grn, 10).json()
        assert client.delete(f"{API}/grns/{grn['id']}", headers=headers).status_code == 409

        resp = client.delete(f"{API}/purchase-returns/{purchase_return['id']}", headers=headers)
        assert resp.status_code == 204
        assert _stock(client, headers) == [60]
        assert _wallet(client, headers, supplier)["debit_balance"] == 0
        body = client.get(f"{API}/purchase-returns/{purchase_return['id']}", headers=headers).json()
        assert body["status"] == "inactive"
        assert client.get(f"{API}/purchase-returns", headers=headers).json() == []

        assert client.delete(f"{API}/grns/{grn['id']}", headers=headers).status_code == 204

    def test_cancel_blocked_when_credit_spent(self, client, headers, make_po, supplier):
        _, grn = _received(client, headers, make_po)
        purchase_return = _return(client, headers, grn, 10).json()
        make_po(approve=False, use_wallet=True, wallet_amount="100")

        resp = client.delete(f"{API}/purchase-returns/{purchase_return['id']}", headers=headers)
        assert resp.status_code == 409
        assert _stock(client, headers) == [50]
        assert _wallet(client, headers, supplier)["debit_balance"] == 12

    def test_filters_and_roles(self, client, headers, make_po, make_user):
        po, grn = _received(client, headers, make_po)
        _return(client, headers, grn, 5)
        rows = client.get(f"{API}/purchase-returns", params={"po_id": po["id"]}, headers=headers).json()
        assert len(rows) == 1
        rows = client.get(f"{API}/purchase-returns", params={"grn_id": grn["id"]}, headers=headers).json()
        assert rows[0]["items"][0]["return_qty"] == 5

        sales = make_user("sales@acme-boxes.com", ["sales"])
        assert _return(client, sales, grn, 1).status_code == 403
