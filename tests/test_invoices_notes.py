"""
Work order invoices, partial payments, credit and debit notes.
"""

from conftest import API


def _pay(client, headers, invoice, amount="0", credit="0", status="completed"):
    return client.post(
        f"{API}/invoices/{invoice['id']}/payments",
        json={"amount": amount, "credit_amount": credit, "payment_type": "bank", "status": status},
        headers=headers,
    )


def _invoice(client, headers, invoice):
    return client.get(f"{API}/invoices/{invoice['id']}", headers=headers).json()


def _credit_note(client, headers, customer, number="CN-A-1", sub_total="200", **extra):
    payload = {"credit_note_number": number, "client_id": customer["id"], "sub_total": sub_total}
    payload.update(extra)
    return client.post(f"{API}/credit-notes", json=payload, headers=headers)


def _wallet(client, headers, party):
    return client.get(f"{API}/clients/{party['id']}/wallet", headers=headers).json()


class TestInvoiceAmounts:
    """Totals, discounts and snapshots."""

    def test_percentage_discount_and_tax(self, make_invoice, customer):
        invoice = make_invoice(discount_type="percentage", discount="10", total_tax="90")
        assert invoice["invoice_number"] == "WI-00001"
        assert invoice["total"] == 1000
        assert invoice["discount_amount"] == 100
        assert invoice["total_amount"] == 990
        assert invoice["balance"] == 990
        assert invoice["payment_status"] == "pending"
        assert invoice["client_name"] == customer["display_name"]
        assert invoice["client_email"] == "buyer@freshfoods-india.com"

    def test_discount_above_total_is_rejected(self, client, headers, customer):
        resp = client.post(
            f"{API}/invoices",
            json={"client_id": customer["id"], "total": "100", "discount": "150"},
            headers=headers,
        )
        assert resp.status_code == 400

    def test_received_amount_at_creation(self, make_invoice):
        invoice = make_invoice(received_amount="400")
        assert invoice["received_amount"] == 400
        assert invoice["balance"] == 600
        assert invoice["payment_status"] == "partial"
        assert len(invoice["payments"]) == 1

    def test_received_amount_above_total_conflicts(self, client, headers, customer):
        resp = client.post(
            f"{API}/invoices",
            json={"client_id": customer["id"], "total": "100", "received_amount": "101"},
            headers=headers,
        )
        assert resp.status_code == 409

    def test_update_total_not_below_settled(self, client, headers, make_invoice):
        invoice = make_invoice(received_amount="500")
        resp = client.put(f"{API}/invoices/{invoice['id']}", json={"total": "400"}, headers=headers)
        assert resp.status_code == 409

        resp = client.put(f"{API}/invoices/{invoice['id']}", json={"rate_per_qty": "12"}, headers=headers)
        assert resp.status_code == 200
        assert resp.json()["total_amount"] == 1200
        assert resp.json()["balance"] == 700

    def test_list_is_paginated(self, client, headers, make_invoice):
        for _ in range(3):
            make_invoice()
        page = client.get(f"{API}/invoices", params={"limit": 2}, headers=headers).json()
        assert page["total"] == 3
        assert page["limit"] == 2
        assert len(page["items"]) == 2


class TestInvoicePayments:
    """Partial payments and the overpay guard."""

    def test_partial_then_paid(self, client, headers, make_invoice):
        invoice = make_invoice()
        assert _pay(client, headers, invoice, amount="600").status_code == 201
        assert _invoice(client, headers, invoice)["payment_status"] == "partial"

        resp = _pay(client, headers, invoice, amount="500")
        assert resp.status_code == 409
        assert resp.json()["error"]["details"]["settled"] == 600

        assert _pay(client, headers, invoice, amount="400").status_code == 201
        body = _invoice(client, headers, invoice)
        assert body["balance"] == 0
        assert body["payment_status"] == "paid"
        assert len(client.get(f"{API}/invoices/{invoice['id']}/payments", headers=headers).json()) == 2

    def test_zero_payment_is_rejected(self, client, headers, make_invoice):
        invoice = make_invoice()
        assert _pay(client, headers, invoice).status_code == 400

    def test_credit_wallet_settles_invoice(self, client, headers, make_invoice, customer):
        assert _credit_note(client, headers, customer).status_code == 201
        invoice = make_invoice()

        assert _pay(client, headers, invoice, amount="100", credit="150").status_code == 201
        body = _invoice(client, headers, invoice)
        assert body["received_amount"] == 100
        assert body["credit_amount"] == 150
        assert body["balance"] == 750

        wallet = _wallet(client, headers, customer)
        assert wallet["credit_balance"] == 50
        assert [h["type"] for h in wallet["history"]] == ["debit", "credit"]

    def test_credit_above_wallet_conflicts(self, client, headers, make_invoice, customer):
        _credit_note(client, headers, customer, sub_total="100")
        invoice = make_invoice()
        resp = _pay(client, headers, invoice, credit="150")
        assert resp.status_code == 409
        assert _invoice(client, headers, invoice)["payments"] == []
        assert _wallet(client, headers, customer)["credit_balance"] == 100

    def test_pending_payment_does_not_settle(self, client, headers, make_invoice):
        invoice = make_invoice()
        payment = _pay(client, headers, invoice, amount="300", status="pending").json()
        assert _invoice(client, headers, invoice)["balance"] == 1000

        resp = client.patch(
            f"{API}/invoices/{invoice['id']}/payments/{payment['id']}", json={"status": "completed"}, headers=headers
        )
        assert resp.status_code == 200
        assert _invoice(client, headers, invoice)["balance"] == 700

    def test_completing_pending_payment_rechecks_overpay(self, client, headers, make_invoice):
        invoice = make_invoice()
        first = _pay(client, headers, invoice, amount="600", status="pending").json()
        second = _pay(client, headers, invoice, amount="500", status="pending").json()
        url = f"{API}/invoices/{invoice['id']}/payments"

        assert client.patch(f"{url}/{first['id']}", json={"status": "completed"}, headers=headers).status_code == 200
        resp = client.patch(f"{url}/{second['id']}", json={"status": "completed"}, headers=headers)
        assert resp.status_code == 409
        assert resp.json()["error"]["details"]["settled"] == 600

        body = _invoice(client, headers, invoice)
        assert body["balance"] == 400
        assert body["payment_status"] == "partial"

    def test_failed_payment_returns_credit(self, client, headers, make_invoice, customer):
        _credit_note(client, headers, customer)
        invoice = make_invoice()
        payment = _pay(client, headers, invoice, credit="200").json()
        assert _wallet(client, headers, customer)["credit_balance"] == 0

        url = f"{API}/invoices/{invoice['id']}/payments/{payment['id']}"
        assert client.patch(url, json={"status": "failed"}, headers=headers).status_code == 200
        assert _wallet(client, headers, customer)["credit_balance"] == 200
        assert _invoice(client, headers, invoice)["payment_status"] == "pending"

        resp = client.patch(url, json={"status": "completed"}, headers=headers)
        assert resp.status_code == 409

    def test_delete_blocked_by_completed_payment(self, client, headers, make_invoice):
        paid = make_invoice(received_amount="10")
        assert client.delete(f"{API}/invoices/{paid['id']}", headers=headers).status_code == 409

        unpaid = make_invoice()
        assert client.delete(f"{API}/invoices/{unpaid['id']}", headers=headers).status_code == 204
        assert client.get(f"{API}/invoices", headers=headers).json()["total"] == 1


class TestCreditNotes:
    """Credit notes move the customer's credit wallet."""

    def test_issue_update_cancel(self, client, headers, customer):
        note = _credit_note(client, headers, customer, tax_amount="36", adjustment="-6").json()
        assert note["credit_note_generate_id"] == "CN-00001"
        assert note["total_amount"] == 230
        assert _wallet(client, headers, customer)["credit_balance"] == 230

        resp = client.put(f"{API}/credit-notes/{note['id']}", json={"sub_total": "300"}, headers=headers)
        assert resp.status_code == 200
        assert resp.json()["total_amount"] == 330
        assert _wallet(client, headers, customer)["credit_balance"] == 330

        assert client.delete(f"{API}/credit-notes/{note['id']}", headers=headers).status_code == 204
        assert _wallet(client, headers, customer)["credit_balance"] == 0

    def test_duplicate_number_conflicts(self, client, headers, customer):
        assert _credit_note(client, headers, customer).status_code == 201
        assert _credit_note(client, headers, customer).status_code == 409

    def test_number_is_fixed(self, client, headers, customer):
        note = _credit_note(client, headers, customer).json()
        resp = client.put(f"{API}/credit-notes/{note['id']}", json={"credit_note_number": "OTHER"}, headers=headers)
        assert resp.status_code == 400

    def test_negative_total_is_rejected(self, client, headers, customer):
        resp = _credit_note(client, headers, customer, sub_total="10", adjustment="-20")
        assert resp.status_code == 400

    def test_invoice_must_belong_to_client(self, client, headers, customer, make_client, make_invoice):
        other = make_client("Other Buyer", "customer")
        invoice = make_invoice(client_id=other["id"])
        resp = _credit_note(client, headers, customer, invoice_id=invoice["id"])
        assert resp.status_code == 400

    def test_cancelled_invoice_cannot_be_referenced(self, client, headers, customer, make_invoice):
        invoice = make_invoice()
        assert client.delete(f"{API}/invoices/{invoice['id']}", headers=headers).status_code == 204
        resp = _credit_note(client, headers, customer, invoice_id=invoice["id"])
        assert resp.status_code == 400
        assert _wallet(client, headers, customer)["credit_balance"] == 0

    def test_cancel_blocked_when_credit_spent(self, client, headers, customer, make_invoice):
        note = _credit_note(client, headers, customer).json()
        invoice = make_invoice()
        _pay(client, headers, invoice, credit="150")
        resp = client.delete(f"{API}/credit-notes/{note['id']}", headers=headers)
        assert resp.status_code == 409
        assert _wallet(client, headers, customer)["credit_balance"] == 50


class TestDebitNotes:
    """Debit notes move the supplier's debit wallet."""

    def test_issue_and_cancel(self, client, headers, supplier):
        resp = client.post(
            f"{API}/debit-notes",
            json={"supplier_id": supplier["id"], "sub_total": "500", "tax_amount": "90"},
            headers=headers,
        )
        assert resp.status_code == 201
        note = resp.json()
        assert note["debit_note_generate_id"] == "DN-00001"
        assert _wallet(client, headers, supplier)["debit_balance"] == 590

        assert client.delete(f"{API}/debit-notes/{note['id']}", headers=headers).status_code == 204
        assert _wallet(client, headers, supplier)["debit_balance"] == 0

    def test_po_must_belong_to_supplier(self, client, headers, make_client, make_po):
        po = make_po(approve=False)
        other = make_client("Other Mill", "supplier")
        resp = client.post(
            f"{API}/debit-notes",
            json={"supplier_id": other["id"], "po_id": po["id"], "sub_total": "10"},
            headers=headers,
        )
        assert resp.status_code == 400

    def test_cancelled_po_cannot_be_referenced(self, client, headers, supplier, make_po):
        po = make_po(approve=False)
        assert client.delete(f"{API}/purchase-orders/{po['id']}", headers=headers).status_code == 204
        resp = client.post(
            f"{API}/debit-notes",
            json={"supplier_id": supplier["id"], "po_id": po["id"], "sub_total": "10"},
            headers=headers,
        )
        assert resp.status_code == 400
