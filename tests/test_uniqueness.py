"""
Database-level uniqueness: document sequences and the active-row unique indexes
that back the services' duplicate checks when two requests race.
"""

import asyncio
from uuid import UUID

from conftest import API

from packworkx.db.session import get_session_maker
from packworkx.repositories.clients import ClientRepository
from packworkx.repositories.items import ItemRepository
from packworkx.repositories.notes import CreditNoteRepository
from packworkx.services.id_generator import generate_id


async def _no_match(self, *args, **kwargs):
    """Stand-in for a duplicate lookup that ran before the competing insert committed."""
    return None


def _issue(company_id: str, key: str) -> str:
    async def _run():
        async with get_session_maker()() as session:
            number = await generate_id(session, UUID(company_id), key)
            await session.commit()
            return number

    return asyncio.run(_run())


class TestSequences:

    def test_first_number_for_a_new_key(self, company_a):
        company_id = company_a["company"]["id"]
        assert _issue(company_id, "purchase_return") == "PR-00001"
        assert _issue(company_id, "purchase_return") == "PR-00002"

    def test_sequences_are_per_company(self, company_a, company_b):
        assert _issue(company_a["company"]["id"], "sku") == "SKU-00001"
        assert _issue(company_b["company"]["id"], "sku") == "SKU-00001"
        assert _issue(company_a["company"]["id"], "sku") == "SKU-00002"


class TestActiveUniqueIndexes:

    def test_duplicate_item_code_past_the_lookup(self, client, headers, kraft, monkeypatch):
        monkeypatch.setattr(ItemRepository, "find_active_by_code", _no_match)
        resp = client.post(
            f"{API}/items", json={"item_code": "rm-kraft-120", "item_name": "Duplicate"}, headers=headers
        )
        assert resp.status_code == 409
        assert len(client.get(f"{API}/items", headers=headers).json()) == 1

    def test_inactive_rows_do_not_block(self, client, headers, kraft, make_item, monkeypatch):
        monkeypatch.setattr(ItemRepository, "find_active_by_code", _no_match)
        assert client.delete(f"{API}/items/{kraft['id']}", headers=headers).status_code == 204
        assert make_item("RM-KRAFT-120")["status"] == "active"

    def test_duplicate_client_email_past_the_lookup(self, client, headers, customer, monkeypatch):
        monkeypatch.setattr(ClientRepository, "find_active_by_email", _no_match)
        resp = client.post(
            f"{API}/clients", json={"display_name": "Copy", "email": customer["email"].upper()}, headers=headers
        )
        assert resp.status_code == 409

    def test_duplicate_credit_note_number_leaves_wallet_alone(self, client, headers, customer, monkeypatch):
        payload = {"credit_note_number": "CN-A-1", "client_id": customer["id"], "sub_total": "200"}
        assert client.post(f"{API}/credit-notes", json=payload, headers=headers).status_code == 201

        monkeypatch.setattr(CreditNoteRepository, "find_active_by_number", _no_match)
        resp = client.post(f"{API}/credit-notes", json={**payload, "credit_note_number": "cn-a-1"}, headers=headers)
        assert resp.status_code == 409
        assert resp.json()["error"]["message"] == "Record conflicts with an existing one"

        wallet = client.get(f"{API}/clients/{customer['id']}/wallet", headers=headers).json()
        assert wallet["credit_balance"] == 200
