"""
Pure helpers: money arithmetic, status roll-ups, number formats and process field checks.
"""

from decimal import Decimal
from types import SimpleNamespace

import pytest

from packworkx.core.errors import BusinessRuleError
from packworkx.services.base import money, qty
from packworkx.services.id_generator import format_number, resolve_format
from packworkx.services.invoices import invoice_amounts, settlement_status
from packworkx.services.machines import validate_process_values
from packworkx.services.notes import note_total
from packworkx.services.purchase_orders import line_amounts, payment_status, po_receipt_status


def _field(label, field_type="text", required=False, options=None, status="active"):
    return SimpleNamespace(label=label, field_type=field_type, required=required, options=options or [], status=status)


class TestPurchaseOrderMath:

    def test_line_amounts_round_to_paise(self):
        amount, tax, total = line_amounts(Decimal("3"), Decimal("33.333"), Decimal("2.5"), Decimal("2.5"))
        assert amount == Decimal("99.99")
        assert tax == Decimal("5.00")
        assert total == Decimal("104.99")

    def test_half_paise_round_up(self):
        amount, tax, total = line_amounts(Decimal("1"), Decimal("10.50"), Decimal("2.5"), Decimal("2.5"))
        assert amount == Decimal("10.50")
        assert tax == Decimal("0.53")
        assert total == Decimal("11.03")
        assert money(Decimal("2.665")) == Decimal("2.67")
        assert qty(Decimal("0.0125")) == Decimal("0.013")

    def test_payment_status(self):
        assert payment_status(Decimal("0"), Decimal("100")) == "pending"
        assert payment_status(Decimal("40"), Decimal("100")) == "partial"
        assert payment_status(Decimal("100"), Decimal("100")) == "paid"

    def test_receipt_rollup(self):
        a = SimpleNamespace(id="a", quantity=Decimal("10"))
        b = SimpleNamespace(id="b", quantity=Decimal("5"))
        assert po_receipt_status([a, b], {}) == "pending"
        assert po_receipt_status([a, b], {"a": Decimal("10")}) == "partially_received"
        assert po_receipt_status([a, b], {"a": Decimal("10"), "b": Decimal("5")}) == "fully_received"


class TestInvoiceMath:

    def test_flat_and_percentage_discounts(self):
        assert invoice_amounts(Decimal("1000"), "flat", Decimal("50"), Decimal("18")) == (
            Decimal("50.00"),
            Decimal("968.00"),
        )
        assert invoice_amounts(Decimal("200"), "percentage", Decimal("12.5"), Decimal("0")) == (
            Decimal("25.00"),
            Decimal("175.00"),
        )

    def test_discount_cannot_exceed_total(self):
        with pytest.raises(BusinessRuleError):
            invoice_amounts(Decimal("10"), "percentage", Decimal("150"), Decimal("0"))

    def test_settlement_status(self):
        assert settlement_status(Decimal("0"), Decimal("100")) == "pending"
        assert settlement_status(Decimal("10"), Decimal("90")) == "partial"
        assert settlement_status(Decimal("100"), Decimal("0")) == "paid"

    def test_note_total(self):
        assert note_total(Decimal("100"), Decimal("18"), Decimal("-3")) == Decimal("115.00")
        with pytest.raises(BusinessRuleError):
            note_total(Decimal("1"), Decimal("0"), Decimal("-2"))


class TestNumberFormats:

    def test_defaults_and_overrides(self):
        assert format_number(resolve_format("grn", None), 7) == "GRN-00007"
        assert format_number(resolve_format("grn", {"prefix": "GR", "separator": "/", "digits": 3}), 12) == "GR/012"
        assert format_number(resolve_format("grn", {"prefix": None}), 1) == "GRN-00001"

    def test_counter_wider_than_padding(self):
        assert format_number({"prefix": "PO", "separator": "-", "digits": 2}, 1234) == "PO-1234"


class TestProcessFieldValidation:

    def test_no_fields_accepts_anything(self):
        validate_process_values([], {"anything": object()})

    def test_type_checks(self):
        fields = [
            _field("Speed", "number"),
            _field("Installed", "date"),
            _field("Glued", "boolean"),
            _field("Flute", "select", options=["A", "B", "C"]),
        ]
        validate_process_values(fields, {"Speed": "120", "Installed": "2024-05-01", "Glued": False, "Flute": "B"})
        with pytest.raises(BusinessRuleError) as exc:
            validate_process_values(fields, {"Speed": True, "Installed": "May 1", "Glued": "yes", "Flute": "E"})
        assert set(exc.value.details) == {"Speed", "Installed", "Glued", "Flute"}

    def test_inactive_fields_are_ignored(self):
        fields = [_field("Depth", "number", required=True, status="inactive"), _field("Note")]
        validate_process_values(fields, {"Note": "ok"})

    def test_labels_ignore_case(self):
        fields = [_field("Depth", "number", required=True)]
        validate_process_values(fields, {"DEPTH": 4})
        with pytest.raises(BusinessRuleError) as exc:
            validate_process_values(fields, {"depth": "deep"})
        assert set(exc.value.details) == {"Depth"}
