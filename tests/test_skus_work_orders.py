"""
SKU master, work orders and the references invoices make to them.
"""

import pytest

from conftest import API


@pytest.fixture
def make_sku(client, headers, customer):
    def _make(sku_name="RSC 5-ply 400x300x250", **extra):
        payload = {"sku_name": sku_name, "client_id": customer["id"], "ply": 5, "length": "400", "width": "300",
                   "height": "250", "sku_type": "RSC"}
        payload.update(extra)
        resp = client.post(f"{API}/skus", json=payload, headers=headers)
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _make


def _work_order(client, headers, customer, **extra):
    payload = {"client_id": customer["id"], "quantity": "5000"}
    payload.update(extra)
    return client.post(f"{API}/work-orders", json=payload, headers=headers)


class TestSkus:

    def test_create_numbers_and_defaults(self, make_sku):
        sku = make_sku()
        assert sku["sku_generate_id"] == "SKU-00001"
        assert sku["unit"] == "mm"
        assert sku["ply"] == 5
        assert make_sku("Tray 3-ply")["sku_generate_id"] == "SKU-00002"

    def test_name_unique_ignoring_case(self, client, headers, customer, make_sku):
        sku = make_sku()
        resp = client.post(
            f"{API}/skus", json={"sku_name": "rsc 5-PLY 400x300x250", "client_id": customer["id"]}, headers=headers
        )
        assert resp.status_code == 409

        assert client.delete(f"{API}/skus/{sku['id']}", headers=headers).status_code == 204
        resp = client.post(
            f"{API}/skus", json={"sku_name": "rsc 5-PLY 400x300x250", "client_id": customer["id"]}, headers=headers
        )
        assert resp.status_code == 201

    def test_rename_onto_existing_name_conflicts(self, client, headers, make_sku):
        make_sku("Tray 3-ply")
        sku = make_sku()
        resp = client.put(f"{API}/skus/{sku['id']}", json={"sku_name": "TRAY 3-PLY"}, headers=headers)
        assert resp.status_code == 409
        resp = client.put(f"{API}/skus/{sku['id']}", json={"ply": 7, "unit": "cm"}, headers=headers)
        assert resp.status_code == 200
        assert (resp.json()["ply"], resp.json()["unit"]) == (7, "cm")

    def test_supplier_cannot_own_sku(self, client, headers, supplier):
        resp = client.post(f"{API}/skus", json={"sku_name": "Lid", "client_id": supplier["id"]}, headers=headers)
        assert resp.status_code == 400

    def test_list_filters_by_client(self, client, headers, make_client, make_sku):
        other = make_client("Spice Route Foods", "customer", email="buy@spiceroute.in")
        make_sku()
        make_sku("Spice carton", client_id=other["id"])
        rows = client.get(f"{API}/skus", params={"client_id": other["id"]}, headers=headers).json()
        assert [r["sku_name"] for r in rows] == ["Spice carton"]
        rows = client.get(f"{API}/skus", params={"search": "rsc"}, headers=headers).json()
        assert len(rows) == 1

    def test_purchase_role_cannot_manage_skus(self, client, customer, make_user):
        purchase = make_user("buyer@acme-boxes.com", ["purchase"])
        resp = client.post(f"{API}/skus", json={"sku_name": "Lid", "client_id": customer["id"]}, headers=purchase)
        assert resp.status_code == 403


class TestWorkOrders:

    def test_sku_name_defaults_from_sku(self, client, headers, customer, make_sku):
        sku = make_sku()
        resp = _work_order(client, headers, customer, sku_id=sku["id"], outsource_name="Ignored Converters")
        assert resp.status_code == 201, resp.text
        body = resp.json()
        assert body["work_order_generate_id"] == "WO-00001"
        assert body["sku_name"] == sku["sku_name"]
        assert body["stage"] == "planned"
        assert body["manufacture"] == "inhouse"
        assert body["outsource_name"] is None

    def test_outsourced_needs_vendor(self, client, headers, customer):
        assert _work_order(client, headers, customer, manufacture="outsource").status_code == 400
        resp = _work_order(client, headers, customer, manufacture="outsource", outsource_name="Balaji Converters")
        assert resp.status_code == 201
        assert resp.json()["outsource_name"] == "Balaji Converters"

    def test_planned_window_must_be_ordered(self, client, headers, customer):
        resp = _work_order(
            client, headers, customer, planned_start_date="2026-03-10", planned_end_date="2026-03-01"
        )
        assert resp.status_code == 400
        work_order = _work_order(client, headers, customer, planned_start_date="2026-03-10").json()
        resp = client.put(
            f"{API}/work-orders/{work_order['id']}", json={"planned_end_date": "2026-03-05"}, headers=headers
        )
        assert resp.status_code == 400

    def test_sku_of_another_client_is_rejected(self, client, headers, customer, make_client, make_sku):
        other = make_client("Spice Route Foods", "customer", email="buy@spiceroute.in")
        sku = make_sku("Spice carton", client_id=other["id"])
        resp = _work_order(client, headers, customer, sku_id=sku["id"])
        assert resp.status_code == 400
        assert resp.json()["error"]["details"]["sku_id"] == sku["id"]

    def test_stage_moves_and_filters(self, client, headers, customer):
        work_order = _work_order(client, headers, customer).json()
        resp = client.put(
            f"{API}/work-orders/{work_order['id']}", json={"stage": "in_production"}, headers=headers
        )
        assert resp.status_code == 200
        rows = client.get(f"{API}/work-orders", params={"stage": "in_production"}, headers=headers).json()
        assert [r["id"] for r in rows] == [work_order["id"]]
        assert client.get(f"{API}/work-orders", params={"stage": "planned"}, headers=headers).json() == []


class TestInvoiceReferences:

    def test_work_order_ref_must_belong_to_client(self, client, headers, customer, make_client, make_invoice):
        other = make_client("Spice Route Foods", "customer", email="buy@spiceroute.in")
        _work_order(client, headers, other)
        resp = client.post(
            f"{API}/invoices",
            json={"client_id": customer["id"], "quantity": "10", "rate_per_qty": "10", "work_order_ref": "WO-00001"},
            headers=headers,
        )
        assert resp.status_code == 400
        resp = client.post(
            f"{API}/invoices",
            json={"client_id": customer["id"], "quantity": "10", "rate_per_qty": "10", "work_order_ref": "WO-00099"},
            headers=headers,
        )
        assert resp.status_code == 400

        _work_order(client, headers, customer)
        invoice = make_invoice(work_order_ref="wo-00002")
        assert invoice["work_order_ref"] == "wo-00002"

    def test_sku_lines_must_be_active_skus_of_client(self, client, headers, customer, make_sku, make_invoice):
        sku = make_sku()
        invoice = make_invoice(sku_details=[{"sku_id": sku["id"], "qty": 100}, {"description": "Freight"}])
        assert invoice["sku_details"][0]["sku_id"] == sku["id"]

        assert client.delete(f"{API}/skus/{sku['id']}", headers=headers).status_code == 204
        resp = client.post(
            f"{API}/invoices",
            json={"client_id": customer["id"], "quantity": "1", "rate_per_qty": "1",
                  "sku_details": [{"description": "Freight"}, {"sku_id": sku["id"]}]},
            headers=headers,
        )
        assert resp.status_code == 400
        assert resp.json()["error"]["details"]["lines"] == {"2": sku["id"]}

    def test_malformed_sku_id_is_rejected(self, client, headers, customer):
        resp = client.post(
            f"{API}/invoices",
            json={"client_id": customer["id"], "quantity": "1", "rate_per_qty": "1",
                  "sku_details": [{"sku_id": "not-a-uuid"}]},
            headers=headers,
        )
        assert resp.status_code == 400
        assert resp.json()["error"]["message"] == "Invalid SKU id"

    def test_update_rechecks_references(self, client, headers, make_invoice):
        invoice = make_invoice()
        resp = client.put(f"{API}/invoices/{invoice['id']}", json={"work_order_ref": "WO-00042"}, headers=headers)
        assert resp.status_code == 400
        resp = client.put(f"{API}/invoices/{invoice['id']}", json={"sale_order_ref": "PO-FF-881"}, headers=headers)
        assert resp.status_code == 200
