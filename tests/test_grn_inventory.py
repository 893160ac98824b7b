"""
Goods receipt reconciliation, stock posting and stock adjustments.
"""

from conftest import API


def _grn(client, headers, po, accepted, received=None, rejected=None, line=0):
    item = {
        "po_item_id": po["items"][line]["id"],
        "quantity_received": str(received if received is not None else accepted),
        "accepted_quantity": str(accepted),
    }
    if rejected is not None:
        item["rejected_quantity"] = str(rejected)
    return client.post(f"{API}/grns", json={"po_id": po["id"], "items": [item]}, headers=headers)


def _po(client, headers, po):
    return client.get(f"{API}/purchase-orders/{po['id']}", headers=headers).json()


class TestGoodsReceipt:
    """GRNs against approved purchase orders."""

    def test_unapproved_po_cannot_be_received(self, client, headers, make_po):
        po = make_po(approve=False)
        resp = _grn(client, headers, po, 10)
        assert resp.status_code == 400
        assert resp.json()["error"]["details"]["decision"] == "pending"

    def test_partial_receipt_posts_stock(self, client, headers, make_po, kraft):
        po = make_po()
        resp = _grn(client, headers, po, 60, received=65, rejected=5)
        assert resp.status_code == 201, resp.text
        grn = resp.json()
        assert grn["grn_generate_id"] == "GRN-00001"
        assert grn["grn_status"] == "partially_received"
        assert grn["items"][0]["quantity_ordered"] == 100
        assert grn["items"][0]["rejected_quantity"] == 5

        po = _po(client, headers, po)
        assert po["receipt_status"] == "partially_received"
        assert po["items"][0]["received_quantity"] == 60
        assert po["items"][0]["pending_quantity"] == 40
        assert po["items"][0]["receipt_status"] == "partially_received"

        stock = client.get(f"{API}/inventory", params={"item_id": kraft["id"]}, headers=headers).json()
        assert len(stock) == 1
        assert stock[0]["quantity_available"] == 60
        assert stock[0]["grn_id"] == grn["id"]
        assert stock[0]["inventory_generate_id"] == "INV-00001"

    def test_rejected_defaults_to_difference(self, client, headers, make_po):
        po = make_po()
        resp = _grn(client, headers, po, 8, received=10)
        assert resp.status_code == 201
        assert resp.json()["items"][0]["rejected_quantity"] == 2

    def test_inconsistent_quantities(self, client, headers, make_po):
        po = make_po()
        resp = _grn(client, headers, po, 8, received=10, rejected=5)
        assert resp.status_code == 400

    def test_over_receipt_conflicts(self, client, headers, make_po):
        po = make_po()
        assert _grn(client, headers, po, 60).status_code == 201
        resp = _grn(client, headers, po, 50)
        assert resp.status_code == 409
        details = resp.json()["error"]["details"]
        assert details["already_accepted"] == 60
        assert details["remaining"] == 40

        resp = _grn(client, headers, po, 40)
        assert resp.status_code == 201
        assert resp.json()["grn_status"] == "fully_received"
        assert _po(client, headers, po)["receipt_status"] == "fully_received"
        assert client.get(f"{API}/purchase-orders/open", headers=headers).json() == []

    def test_foreign_po_line_is_rejected(self, client, headers, make_po):
        first = make_po()
        second = make_po()
        resp = client.post(
            f"{API}/grns",
            json={
                "po_id": first["id"],
                "items": [
                    {"po_item_id": second["items"][0]["id"], "quantity_received": "1", "accepted_quantity": "1"}
                ],
            },
            headers=headers,
        )
        assert resp.status_code == 400

    def test_po_with_grn_is_locked(self, client, headers, make_po, supplier, kraft):
        po = make_po()
        _grn(client, headers, po, 10)
        resp = client.put(
            f"{API}/purchase-orders/{po['id']}",
            json={
                "supplier_id": supplier["id"],
                "po_date": po["po_date"],
                "items": [{"item_id": kraft["id"], "quantity": "5", "unit_price": "10"}],
            },
            headers=headers,
        )
        assert resp.status_code == 409
        assert client.delete(f"{API}/purchase-orders/{po['id']}", headers=headers).status_code == 409
        resp = client.patch(
            f"{API}/purchase-orders/{po['id']}/decision", json={"decision": "disapprove"}, headers=headers
        )
        assert resp.status_code == 409

    def test_delete_grn_releases_stock(self, client, headers, make_po):
        po = make_po()
        grn = _grn(client, headers, po, 30).json()
        assert client.delete(f"{API}/grns/{grn['id']}", headers=headers).status_code == 204

        assert client.get(f"{API}/inventory", headers=headers).json() == []
        assert _po(client, headers, po)["receipt_status"] == "pending"
        # the released quantity can be received again
        assert _grn(client, headers, po, 100).status_code == 201

    def test_update_grn_excludes_its_own_lines(self, client, headers, make_po):
        po = make_po()
        grn = _grn(client, headers, po, 60).json()
        resp = client.put(
            f"{API}/grns/{grn['id']}",
            json={
                "grn_date": grn["grn_date"],
                "items": [
                    {"po_item_id": po["items"][0]["id"], "quantity_received": "100", "accepted_quantity": "100"}
                ],
            },
            headers=headers,
        )
        assert resp.status_code == 200, resp.text
        assert resp.json()["grn_status"] == "fully_received"

        stock = client.get(f"{API}/inventory", headers=headers).json()
        assert [s["quantity_available"] for s in stock] == [100]

    def test_grn_locked_after_stock_adjustment(self, client, headers, make_po):
        po = make_po()
        grn = _grn(client, headers, po, 60).json()
        stock = client.get(f"{API}/inventory", headers=headers).json()[0]
        resp = client.post(
            f"{API}/stock-adjustments",
            json={
                "inventory_id": stock["id"],
                "reason": "Damaged",
                "remarks": "Water damage",
                "items": [{"adjustment_type": "decrease", "adjustment_quantity": "5"}],
            },
            headers=headers,
        )
        assert resp.status_code == 201
        assert client.delete(f"{API}/grns/{grn['id']}", headers=headers).status_code == 409

    def test_grn_stock_cannot_be_deleted_directly(self, client, headers, make_po):
        po = make_po()
        grn = _grn(client, headers, po, 40).json()
        row = client.get(f"{API}/inventory", headers=headers).json()[0]
        resp = client.delete(f"{API}/inventory/{row['id']}", headers=headers)
        assert resp.status_code == 409
        assert resp.json()["error"]["details"]["grn_id"] == grn["id"]

        # re-saving the GRN replaces its stock instead of adding to it
        resp = client.put(
            f"{API}/grns/{grn['id']}",
            json={
                "grn_date": grn["grn_date"],
                "items": [
                    {"po_item_id": po["items"][0]["id"], "quantity_received": "40", "accepted_quantity": "40"}
                ],
            },
            headers=headers,
        )
        assert resp.status_code == 200, resp.text
        summary = client.get(f"{API}/inventory/stock-summary", headers=headers).json()
        assert [r["quantity_available"] for r in summary] == [40]


class TestInventory:
    """Manual stock rows and the stock summary."""

    def _open_stock(self, client, headers, item, quantity):
        resp = client.post(
            f"{API}/inventory", json={"item_id": item["id"], "quantity": str(quantity)}, headers=headers
        )
        assert resp.status_code == 201, resp.text
        return resp.json()

    def test_stock_summary_flags(self, client, headers, kraft, make_item):
        glue = make_item("RM-GLUE-STARCH", item_name="Starch glue", min_stock_level="10", reorder_level="20")
        self._open_stock(client, headers, kraft, 20)
        self._open_stock(client, headers, kraft, 100)
        self._open_stock(client, headers, glue, 15)

        rows = {r["item_code"]: r for r in client.get(f"{API}/inventory/stock-summary", headers=headers).json()}
        assert rows["RM-KRAFT-120"]["quantity_available"] == 120
        assert rows["RM-KRAFT-120"]["low_stock"] is False
        assert rows["RM-KRAFT-120"]["reorder"] is False
        assert rows["RM-GLUE-STARCH"]["low_stock"] is False
        assert rows["RM-GLUE-STARCH"]["reorder"] is True

    def test_update_changes_descriptive_fields_only(self, client, headers, kraft):
        row = self._open_stock(client, headers, kraft, 20)
        resp = client.put(
            f"{API}/inventory/{row['id']}",
            json={"location": "Bay 4", "quantity_available": 999},
            headers=headers,
        )
        assert resp.status_code == 200
        assert resp.json()["location"] == "Bay 4"
        assert resp.json()["quantity_available"] == 20


class TestStockAdjustments:
    """Increase/decrease steps and their reversal."""

    def _stock(self, client, headers, item, quantity=20):
        return client.post(
            f"{API}/inventory", json={"item_id": item["id"], "quantity": str(quantity)}, headers=headers
        ).json()

    def _adjust(self, client, headers, stock, steps):
        return client.post(
            f"{API}/stock-adjustments",
            json={
                "inventory_id": stock["id"],
                "reason": "Cycle count",
                "remarks": "Monthly count",
                "items": [{"adjustment_type": t, "adjustment_quantity": str(q)} for t, q in steps],
            },
            headers=headers,
        )

    def test_steps_apply_in_order(self, client, headers, kraft):
        stock = self._stock(client, headers, kraft)
        resp = self._adjust(client, headers, stock, [("increase", 5), ("decrease", 10)])
        assert resp.status_code == 201
        body = resp.json()
        assert body["adjustment_generate_id"] == "SA-00001"
        assert [(s["previous_quantity"], s["new_quantity"]) for s in body["items"]] == [(20, 25), (25, 15)]

        row = client.get(f"{API}/inventory/{stock['id']}", headers=headers).json()
        assert row["quantity_available"] == 15

    def test_negative_stock_conflicts_and_writes_nothing(self, client, headers, kraft):
        stock = self._stock(client, headers, kraft)
        resp = self._adjust(client, headers, stock, [("increase", 5), ("decrease", 30)])
        assert resp.status_code == 409
        assert resp.json()["error"]["details"]["line"] == 2

        row = client.get(f"{API}/inventory/{stock['id']}", headers=headers).json()
        assert row["quantity_available"] == 20
        assert client.get(f"{API}/stock-adjustments", headers=headers).json() == []

    def test_cancel_reverses_net_change(self, client, headers, kraft):
        stock = self._stock(client, headers, kraft)
        adjustment = self._adjust(client, headers, stock, [("decrease", 8)]).json()
        assert client.delete(f"{API}/stock-adjustments/{adjustment['id']}", headers=headers).status_code == 204

        row = client.get(f"{API}/inventory/{stock['id']}", headers=headers).json()
        assert row["quantity_available"] == 20
        assert client.get(f"{API}/stock-adjustments/{adjustment['id']}", headers=headers).json()["status"] == "inactive"

    def test_store_role_required(self, client, kraft, headers, make_user):
        stock = self._stock(client, headers, kraft)
        sales = make_user("sales@acme-boxes.com", ["sales"])
        resp = self._adjust(client, sales, stock, [("increase", 1)])
        assert resp.status_code == 403

    def test_cancel_that_would_go_negative_conflicts(self, client, headers, kraft):
        stock = self._stock(client, headers, kraft)
        top_up = self._adjust(client, headers, stock, [("increase", 10)]).json()
        assert self._adjust(client, headers, stock, [("decrease", 25)]).status_code == 201

        resp = client.delete(f"{API}/stock-adjustments/{top_up['id']}", headers=headers)
        assert resp.status_code == 409
        row = client.get(f"{API}/inventory/{stock['id']}", headers=headers).json()
        assert row["quantity_available"] == 5
        assert client.get(f"{API}/stock-adjustments/{top_up['id']}", headers=headers).json()["status"] == "active"

    def test_adjusted_stock_cannot_be_deleted(self, client, headers, kraft):
        stock = self._stock(client, headers, kraft)
        assert self._adjust(client, headers, stock, [("decrease", 2)]).status_code == 201
        assert client.delete(f"{API}/inventory/{stock['id']}", headers=headers).status_code == 409

        plain = self._stock(client, headers, kraft, 7)
        assert client.delete(f"{API}/inventory/{plain['id']}", headers=headers).status_code == 204
