"""Baseline schema.

- companies, invoice_settings, id_sequences
- users, roles, user_roles
- clients, wallet_history
- items
- purchase_orders, purchase_order_items, purchase_order_payments
- grns, grn_items
- inventory, stock_adjustments, stock_adjustment_items
- work_order_invoices, partial_payments
- credit_notes, debit_notes
- machines, process_names, process_fields
"""

from typing import List, Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "3c1d5e7a9b20"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSON = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")
MONEY = sa.Numeric(15, 2)
QTY = sa.Numeric(15, 3)
PERCENT = sa.Numeric(5, 2)


def _pk() -> sa.Column:
    return sa.Column("id", sa.Uuid(), primary_key=True)


def _timestamps() -> List[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def _company() -> List[sa.SchemaItem]:
    return [
        sa.Column("company_id", sa.Uuid(), nullable=False),
        sa.ForeignKeyConstraint(["company_id"], ["companies.id"], ondelete="CASCADE"),
    ]


def _audit() -> List[sa.SchemaItem]:
    return [
        sa.Column("created_by", sa.Uuid(), nullable=True),
        sa.Column("updated_by", sa.Uuid(), nullable=True),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["updated_by"], ["users.id"], ondelete="SET NULL"),
    ]


def _status() -> sa.Column:
    return sa.Column("status", sa.String(16), nullable=False, server_default="active")


def _fk(column: str, target: str, ondelete: str) -> sa.ForeignKeyConstraint:
    return sa.ForeignKeyConstraint([column], [target], ondelete=ondelete)


def _index(table: str, *columns: str) -> None:
    op.create_index(f"ix_{table}_{'_'.join(columns)}", table, list(columns))


def upgrade() -> None:
    # Companies and numbering
    op.create_table(
        "companies",
        _pk(),
        sa.Column("company_name", sa.Text(), nullable=False),
        sa.Column("company_email", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(32), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("website", sa.Text(), nullable=True),
        sa.Column("gst_number", sa.String(32), nullable=True),
        sa.Column("timezone", sa.String(64), nullable=False),
        sa.Column("currency", sa.String(8), nullable=False),
        _status(),
        *_timestamps(),
        sa.UniqueConstraint("company_email", name="uq_companies_company_email"),
    )

    op.create_table(
        "invoice_settings",
        _pk(),
        *_company(),
        sa.Column("number_formats", JSON, nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("company_id", name="uq_invoice_settings_company_id"),
    )

    op.create_table(
        "id_sequences",
        _pk(),
        *_company(),
        sa.Column("key", sa.String(64), nullable=False),
        sa.Column("last_value", sa.BigInteger(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("company_id", "key", name="uq_id_sequences_company_key"),
    )

    # Security
    op.create_table(
        "users",
        _pk(),
        *_company(),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("full_name", sa.Text(), nullable=True),
        sa.Column("phone", sa.String(32), nullable=True),
        sa.Column("hashed_password", sa.Text(), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("is_superadmin", sa.Boolean(), server_default=sa.false(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )
    _index("users", "company_id")

    op.create_table(
        "roles",
        _pk(),
        *_company(),
        sa.Column("name", sa.String(64), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("company_id", "name", name="uq_roles_company_name"),
    )

    op.create_table(
        "user_roles",
        _pk(),
        *_company(),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("role_id", sa.Uuid(), nullable=False),
        *_timestamps(),
        _fk("user_id", "users.id", "CASCADE"),
        _fk("role_id", "roles.id", "CASCADE"),
        sa.UniqueConstraint("company_id", "user_id", "role_id", name="uq_user_roles_company_user_role"),
    )

    # Clients and wallets
    op.create_table(
        "clients",
        _pk(),
        *_company(),
        *_audit(),
        sa.Column("client_ref_id", sa.String(64), nullable=False),
        sa.Column("customer_type", sa.String(16), nullable=False),
        sa.Column("client_category", sa.String(16), nullable=False),
        sa.Column("salutation", sa.String(16), nullable=True),
        sa.Column("first_name", sa.Text(), nullable=True),
        sa.Column("last_name", sa.Text(), nullable=True),
        sa.Column("display_name", sa.Text(), nullable=False),
        sa.Column("company_name", sa.Text(), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("work_phone", sa.String(32), nullable=True),
        sa.Column("mobile", sa.String(32), nullable=True),
        sa.Column("gst_number", sa.String(32), nullable=True),
        sa.Column("pan_number", sa.String(16), nullable=True),
        sa.Column("currency", sa.String(8), nullable=False),
        sa.Column("opening_balance", MONEY, nullable=False),
        sa.Column("payment_terms", sa.Text(), nullable=True),
        sa.Column("billing_address", JSON, nullable=False),
        sa.Column("shipping_address", JSON, nullable=False),
        sa.Column("credit_balance", MONEY, nullable=False),
        sa.Column("debit_balance", MONEY, nullable=False),
        _status(),
        *_timestamps(),
    )
    _index("clients", "company_id")
    _index("clients", "status")

    op.create_table(
        "wallet_history",
        _pk(),
        *_company(),
        *_audit(),
        sa.Column("client_id", sa.Uuid(), nullable=False),
        sa.Column("wallet", sa.String(8), nullable=False),
        sa.Column("type", sa.String(8), nullable=False),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("balance_after", MONEY, nullable=False),
        sa.Column("reference_number", sa.Text(), nullable=True),
        *_timestamps(),
        _fk("client_id", "clients.id", "CASCADE"),
    )
    _index("wallet_history", "client_id")

    # Item master
    op.create_table(
        "items",
        _pk(),
        *_company(),
        *_audit(),
        sa.Column("item_generate_id", sa.String(64), nullable=False),
        sa.Column("item_code", sa.String(64), nullable=False),
        sa.Column("item_name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("hsn_code", sa.String(16), nullable=True),
        sa.Column("uom", sa.String(16), nullable=True),
        sa.Column("category", sa.Text(), nullable=True),
        sa.Column("item_type", sa.String(32), nullable=False),
        sa.Column("min_stock_level", QTY, nullable=False),
        sa.Column("reorder_level", QTY, nullable=False),
        sa.Column("cgst", PERCENT, nullable=False),
        sa.Column("sgst", PERCENT, nullable=False),
        sa.Column("standard_cost", MONEY, nullable=True),
        _status(),
        *_timestamps(),
    )
    _index("items", "company_id")
    _index("items", "item_code")

    # Procurement
    op.create_table(
        "purchase_orders",
        _pk(),
        *_company(),
        *_audit(),
        sa.Column("purchase_generate_id", sa.String(64), nullable=False),
        sa.Column("supplier_id", sa.Uuid(), nullable=False),
        sa.Column("supplier_name", sa.Text(), nullable=True),
        sa.Column("po_date", sa.Date(), nullable=False),
        sa.Column("expected_delivery_date", sa.Date(), nullable=True),
        sa.Column("payment_terms", sa.Text(), nullable=True),
        sa.Column("reference", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("sub_total", MONEY, nullable=False),
        sa.Column("tax_amount", MONEY, nullable=False),
        sa.Column("total_amount", MONEY, nullable=False),
        sa.Column("amount_paid", MONEY, nullable=False),
        sa.Column("decision", sa.String(16), nullable=False),
        sa.Column("receipt_status", sa.String(24), nullable=False),
        sa.Column("payment_status", sa.String(16), nullable=False),
        _status(),
        *_timestamps(),
        _fk("supplier_id", "clients.id", "RESTRICT"),
    )
    _index("purchase_orders", "company_id")
    _index("purchase_orders", "supplier_id")
    _index("purchase_orders", "purchase_generate_id")

    op.create_table(
        "purchase_order_items",
        _pk(),
        *_company(),
        sa.Column("po_id", sa.Uuid(), nullable=False),
        sa.Column("line_no", sa.Integer(), nullable=False),
        sa.Column("item_id", sa.Uuid(), nullable=False),
        sa.Column("item_code", sa.String(64), nullable=True),
        sa.Column("item_name", sa.Text(), nullable=True),
        sa.Column("uom", sa.String(16), nullable=True),
        sa.Column("quantity", QTY, nullable=False),
        sa.Column("unit_price", MONEY, nullable=False),
        sa.Column("cgst", PERCENT, nullable=False),
        sa.Column("sgst", PERCENT, nullable=False),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("tax_amount", MONEY, nullable=False),
        sa.Column("total_amount", MONEY, nullable=False),
        *_timestamps(),
        _fk("po_id", "purchase_orders.id", "CASCADE"),
        _fk("item_id", "items.id", "RESTRICT"),
    )
    _index("purchase_order_items", "po_id")

    op.create_table(
        "purchase_order_payments",
        _pk(),
        *_company(),
        *_audit(),
        sa.Column("po_id", sa.Uuid(), nullable=False),
        sa.Column("purchase_payment_generate_id", sa.String(64), nullable=False),
        sa.Column("payment_date", sa.Date(), nullable=False),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("payment_mode", sa.String(16), nullable=False),
        sa.Column("reference_number", sa.Text(), nullable=True),
        sa.Column("remark", sa.Text(), nullable=True),
        sa.Column("status", sa.String(16), nullable=False),
        *_timestamps(),
        _fk("po_id", "purchase_orders.id", "CASCADE"),
    )
    _index("purchase_order_payments", "po_id")

    # Goods receipt
    op.create_table(
        "grns",
        _pk(),
        *_company(),
        *_audit(),
        sa.Column("grn_generate_id", sa.String(64), nullable=False),
        sa.Column("po_id", sa.Uuid(), nullable=False),
        sa.Column("supplier_id", sa.Uuid(), nullable=False),
        sa.Column("grn_date", sa.Date(), nullable=False),
        sa.Column("invoice_no", sa.String(64), nullable=True),
        sa.Column("invoice_date", sa.Date(), nullable=True),
        sa.Column("received_by", sa.Text(), nullable=True),
        sa.Column("remarks", sa.Text(), nullable=True),
        sa.Column("grn_status", sa.String(24), nullable=False),
        _status(),
        *_timestamps(),
        _fk("po_id", "purchase_orders.id", "RESTRICT"),
        _fk("supplier_id", "clients.id", "RESTRICT"),
    )
    _index("grns", "company_id")
    _index("grns", "po_id")

    op.create_table(
        "grn_items",
        _pk(),
        *_company(),
        sa.Column("grn_id", sa.Uuid(), nullable=False),
        sa.Column("line_no", sa.Integer(), nullable=False),
        sa.Column("po_item_id", sa.Uuid(), nullable=False),
        sa.Column("item_id", sa.Uuid(), nullable=False),
        sa.Column("quantity_ordered", QTY, nullable=False),
        sa.Column("quantity_received", QTY, nullable=False),
        sa.Column("accepted_quantity", QTY, nullable=False),
        sa.Column("rejected_quantity", QTY, nullable=False),
        sa.Column("batch_no", sa.String(64), nullable=True),
        sa.Column("location", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        _fk("grn_id", "grns.id", "CASCADE"),
        _fk("po_item_id", "purchase_order_items.id", "RESTRICT"),
        _fk("item_id", "items.id", "RESTRICT"),
    )
    _index("grn_items", "grn_id")
    _index("grn_items", "po_item_id")

    # Inventory
    op.create_table(
        "inventory",
        _pk(),
        *_company(),
        *_audit(),
        sa.Column("inventory_generate_id", sa.String(64), nullable=False),
        sa.Column("item_id", sa.Uuid(), nullable=False),
        sa.Column("item_code", sa.String(64), nullable=True),
        sa.Column("grn_id", sa.Uuid(), nullable=True),
        sa.Column("grn_item_id", sa.Uuid(), nullable=True),
        sa.Column("po_id", sa.Uuid(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("quantity_available", QTY, nullable=False),
        sa.Column("posted_quantity", QTY, nullable=False),
        sa.Column("batch_no", sa.String(64), nullable=True),
        sa.Column("location", sa.Text(), nullable=True),
        _status(),
        *_timestamps(),
        _fk("item_id", "items.id", "RESTRICT"),
        _fk("grn_id", "grns.id", "SET NULL"),
        _fk("grn_item_id", "grn_items.id", "SET NULL"),
        _fk("po_id", "purchase_orders.id", "SET NULL"),
    )
    _index("inventory", "company_id")
    _index("inventory", "item_id")
    _index("inventory", "grn_id")

    op.create_table(
        "stock_adjustments",
        _pk(),
        *_company(),
        *_audit(),
        sa.Column("adjustment_generate_id", sa.String(64), nullable=False),
        sa.Column("inventory_id", sa.Uuid(), nullable=False),
        sa.Column("item_id", sa.Uuid(), nullable=False),
        sa.Column("adjustment_date", sa.Date(), nullable=False),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("remarks", sa.Text(), nullable=False),
        _status(),
        *_timestamps(),
        _fk("inventory_id", "inventory.id", "RESTRICT"),
        _fk("item_id", "items.id", "RESTRICT"),
    )
    _index("stock_adjustments", "inventory_id")

    op.create_table(
        "stock_adjustment_items",
        _pk(),
        *_company(),
        sa.Column("adjustment_id", sa.Uuid(), nullable=False),
        sa.Column("line_no", sa.Integer(), nullable=False),
        sa.Column("adjustment_type", sa.String(16), nullable=False),
        sa.Column("adjustment_quantity", QTY, nullable=False),
        sa.Column("previous_quantity", QTY, nullable=False),
        sa.Column("new_quantity", QTY, nullable=False),
        *_timestamps(),
        _fk("adjustment_id", "stock_adjustments.id", "CASCADE"),
    )

    # Invoicing
    op.create_table(
        "work_order_invoices",
        _pk(),
        *_company(),
        *_audit(),
        sa.Column("invoice_number", sa.String(64), nullable=False),
        sa.Column("client_id", sa.Uuid(), nullable=False),
        sa.Column("client_name", sa.Text(), nullable=True),
        sa.Column("client_email", sa.String(255), nullable=True),
        sa.Column("client_phone", sa.String(32), nullable=True),
        sa.Column("billing_address", JSON, nullable=False),
        sa.Column("work_order_ref", sa.String(64), nullable=True),
        sa.Column("sale_order_ref", sa.String(64), nullable=True),
        sa.Column("invoice_date", sa.Date(), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("sku_details", JSON, nullable=False),
        sa.Column("quantity", QTY, nullable=True),
        sa.Column("rate_per_qty", MONEY, nullable=True),
        sa.Column("total", MONEY, nullable=False),
        sa.Column("discount_type", sa.String(16), nullable=False),
        sa.Column("discount", MONEY, nullable=False),
        sa.Column("discount_amount", MONEY, nullable=False),
        sa.Column("total_tax", MONEY, nullable=False),
        sa.Column("total_amount", MONEY, nullable=False),
        sa.Column("received_amount", MONEY, nullable=False),
        sa.Column("credit_amount", MONEY, nullable=False),
        sa.Column("balance", MONEY, nullable=False),
        sa.Column("payment_status", sa.String(16), nullable=False),
        _status(),
        *_timestamps(),
        _fk("client_id", "clients.id", "RESTRICT"),
    )
    _index("work_order_invoices", "company_id")
    _index("work_order_invoices", "client_id")
    _index("work_order_invoices", "invoice_number")

    op.create_table(
        "partial_payments",
        _pk(),
        *_company(),
        *_audit(),
        sa.Column("invoice_id", sa.Uuid(), nullable=False),
        sa.Column("payment_type", sa.String(16), nullable=False),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("credit_amount", MONEY, nullable=False),
        sa.Column("reference_number", sa.Text(), nullable=True),
        sa.Column("remarks", sa.Text(), nullable=True),
        sa.Column("payment_date", sa.Date(), nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        *_timestamps(),
        _fk("invoice_id", "work_order_invoices.id", "CASCADE"),
    )
    _index("partial_payments", "invoice_id")

    # Credit / debit notes
    op.create_table(
        "credit_notes",
        _pk(),
        *_company(),
        *_audit(),
        sa.Column("credit_note_generate_id", sa.String(64), nullable=False),
        sa.Column("credit_note_number", sa.String(64), nullable=False),
        sa.Column("credit_note_date", sa.Date(), nullable=False),
        sa.Column("client_id", sa.Uuid(), nullable=False),
        sa.Column("invoice_id", sa.Uuid(), nullable=True),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("sub_total", MONEY, nullable=False),
        sa.Column("tax_amount", MONEY, nullable=False),
        sa.Column("adjustment", MONEY, nullable=False),
        sa.Column("total_amount", MONEY, nullable=False),
        _status(),
        *_timestamps(),
        _fk("client_id", "clients.id", "RESTRICT"),
        _fk("invoice_id", "work_order_invoices.id", "SET NULL"),
    )
    _index("credit_notes", "company_id", "credit_note_number")

    op.create_table(
        "debit_notes",
        _pk(),
        *_company(),
        *_audit(),
        sa.Column("debit_note_generate_id", sa.String(64), nullable=False),
        sa.Column("debit_note_date", sa.Date(), nullable=False),
        sa.Column("supplier_id", sa.Uuid(), nullable=False),
        sa.Column("po_id", sa.Uuid(), nullable=True),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("sub_total", MONEY, nullable=False),
        sa.Column("tax_amount", MONEY, nullable=False),
        sa.Column("adjustment", MONEY, nullable=False),
        sa.Column("total_amount", MONEY, nullable=False),
        _status(),
        *_timestamps(),
        _fk("supplier_id", "clients.id", "RESTRICT"),
        _fk("po_id", "purchase_orders.id", "SET NULL"),
    )
    _index("debit_notes", "company_id")

    # Machines
    op.create_table(
        "machines",
        _pk(),
        *_company(),
        *_audit(),
        sa.Column("machine_generate_id", sa.String(64), nullable=False),
        sa.Column("machine_name", sa.Text(), nullable=False),
        sa.Column("machine_type", sa.String(64), nullable=True),
        sa.Column("model_number", sa.String(64), nullable=True),
        sa.Column("serial_number", sa.String(64), nullable=True),
        sa.Column("manufacturer", sa.Text(), nullable=True),
        sa.Column("purchase_date", sa.Date(), nullable=True),
        sa.Column("installation_date", sa.Date(), nullable=True),
        sa.Column("last_maintenance_date", sa.Date(), nullable=True),
        sa.Column("next_maintenance_date", sa.Date(), nullable=True),
        sa.Column("capacity", sa.Text(), nullable=True),
        sa.Column("machine_status", sa.String(24), nullable=False),
        sa.Column("location", sa.Text(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        _status(),
        *_timestamps(),
    )
    _index("machines", "company_id")

    op.create_table(
        "process_names",
        _pk(),
        *_company(),
        *_audit(),
        sa.Column("machine_id", sa.Uuid(), nullable=False),
        sa.Column("process_name", sa.String(128), nullable=False),
        sa.Column("process_value", JSON, nullable=False),
        _status(),
        *_timestamps(),
        _fk("machine_id", "machines.id", "CASCADE"),
        sa.UniqueConstraint("machine_id", "process_name", name="uq_process_names_machine_process"),
    )

    op.create_table(
        "process_fields",
        _pk(),
        *_company(),
        *_audit(),
        sa.Column("process_name_id", sa.Uuid(), nullable=False),
        sa.Column("label", sa.String(128), nullable=False),
        sa.Column("field_type", sa.String(16), nullable=False),
        sa.Column("options", JSON, nullable=False),
        sa.Column("required", sa.Boolean(), server_default=sa.false(), nullable=False),
        _status(),
        *_timestamps(),
        _fk("process_name_id", "process_names.id", "CASCADE"),
        sa.UniqueConstraint("process_name_id", "label", name="uq_process_fields_process_label"),
    )


def downgrade() -> None:
    op.drop_table("process_fields")
    op.drop_table("process_names")
    op.drop_table("machines")
    op.drop_table("debit_notes")
    op.drop_table("credit_notes")
    op.drop_table("partial_payments")
    op.drop_table("work_order_invoices")
    op.drop_table("stock_adjustment_items")
    op.drop_table("stock_adjustments")
    op.drop_table("inventory")
    op.drop_table("grn_items")
    op.drop_table("grns")
    op.drop_table("purchase_order_payments")
    op.drop_table("purchase_order_items")
    op.drop_table("purchase_orders")
    op.drop_table("items")
    op.drop_table("wallet_history")
    op.drop_table("clients")
    op.drop_table("user_roles")
    op.drop_table("roles")
    op.drop_table("users")
    op.drop_table("id_sequences")
    op.drop_table("invoice_settings")
    op.drop_table("companies")
