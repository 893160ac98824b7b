"""
Report exports and dashboard counters.
"""

import csv
import io

from conftest import API


def _rows(resp):
    return list(csv.DictReader(io.StringIO(resp.text)))


class TestExports:
    """CSV, Excel and PDF exports."""

    def test_purchase_order_csv(self, client, headers, make_po):
        po = make_po()
        client.post(f"{API}/purchase-orders/{po['id']}/payments", json={"amount": "120"}, headers=headers)

        resp = client.get(f"{API}/reports/purchase-orders", headers=headers)
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/csv")
        assert 'filename="purchase_orders.csv"' in resp.headers["content-disposition"]

        rows = _rows(resp)
        assert len(rows) == 1
        assert rows[0]["po_number"] == "PO-00001"
        assert rows[0]["supplier"] == "Shree Paper Mills"
        assert float(rows[0]["amount_due"]) == 1000

    def test_empty_report_keeps_headers(self, client, headers):
        resp = client.get(f"{API}/reports/receivables", headers=headers)
        assert resp.status_code == 200
        assert resp.text.splitlines()[0].split(",")[:3] == ["invoice_number", "invoice_date", "due_date"]

    def test_grn_receipts(self, client, headers, make_po):
        po = make_po()
        client.post(
            f"{API}/grns",
            json={
                "po_id": po["id"],
                "items": [
                    {
                        "po_item_id": po["items"][0]["id"],
                        "quantity_received": "30",
                        "accepted_quantity": "28",
                        "batch_no": "B-17",
                    }
                ],
            },
            headers=headers,
        )
        rows = _rows(client.get(f"{API}/reports/grn-receipts", params={"po_id": po["id"]}, headers=headers))
        assert len(rows) == 1
        assert rows[0]["grn_number"] == "GRN-00001"
        assert float(rows[0]["rejected_quantity"]) == 2
        assert rows[0]["batch_no"] == "B-17"

    def test_receivables_days_overdue(self, client, headers, make_invoice):
        make_invoice(invoice_date="2024-01-01", due_date="2024-01-31")
        settled = make_invoice(received_amount="1000")
        rows = _rows(client.get(f"{API}/reports/receivables", params={"as_of": "2024-03-01"}, headers=headers))
        assert [r["invoice_number"] for r in rows] == ["WI-00001"]
        assert settled["invoice_number"] == "WI-00002"
        assert int(rows[0]["days_overdue"]) == 30

    def test_low_stock_only(self, client, headers, kraft, make_item):
        make_item("RM-PIN-STITCH", item_name="Stitching pins")
        client.post(f"{API}/inventory", json={"item_id": kraft["id"], "quantity": "500"}, headers=headers)
        rows = _rows(client.get(f"{API}/reports/inventory-stock", params={"low_stock_only": True}, headers=headers))
        assert [r["item_code"] for r in rows] == ["RM-PIN-STITCH"]

    def test_xlsx_and_pdf(self, client, headers, make_po):
        make_po()
        xlsx = client.get(f"{API}/reports/purchase-orders", params={"format": "xlsx"}, headers=headers)
        assert xlsx.status_code == 200
        assert xlsx.headers["content-type"].startswith("application/vnd.openxmlformats")
        assert xlsx.content[:2] == b"PK"

        pdf = client.get(f"{API}/reports/purchase-orders", params={"format": "pdf"}, headers=headers)
        assert pdf.status_code == 200
        assert pdf.headers["content-type"] == "application/pdf"
        assert pdf.content.startswith(b"%PDF")

    def test_report_roles(self, client, make_user):
        production = make_user("floor@acme-boxes.com", ["production"])
        assert client.get(f"{API}/reports/receivables", headers=production).status_code == 403
        assert client.get(f"{API}/reports/inventory-stock", headers=production).status_code == 200


class TestDashboard:
    """Headline counters."""

    def test_counts(self, client, headers, make_po, make_invoice, kraft):
        make_po(approve=False)
        make_po()
        make_invoice(received_amount="250")
        make_invoice(received_amount="1000")
        client.post(f"{API}/machines", json={"machine_name": "Slotter"}, headers=headers)

        body = client.get(f"{API}/reports/dashboard", headers=headers).json()
        assert body["open_purchase_orders"] == 1
        assert body["awaiting_receipt"] == 1
        assert body["outstanding_receivables"] == 750
        assert body["unpaid_invoices"] == 1
        # kraft has no stock and a minimum of 50
        assert body["low_stock_items"] == 1
        assert body["active_machines"] == 1
