"""Purchase returns, SKUs, work orders and active-row unique indexes.

- purchase_returns, purchase_return_items
- skus, work_orders
- case-insensitive unique indexes over active rows: item codes, client emails,
  credit note numbers, SKU names
"""

from typing import List, Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "5e8a1c4f2d67"
down_revision: Union[str, None] = "3c1d5e7a9b20"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSON = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")
MONEY = sa.Numeric(15, 2)
QTY = sa.Numeric(15, 3)
PERCENT = sa.Numeric(5, 2)
DIMENSION = sa.Numeric(10, 2)

ACTIVE_ONLY = sa.text("status = 'active'")

# (index name, table, column)
ACTIVE_UNIQUE = [
    ("uq_items_company_item_code_active", "items", "item_code"),
    ("uq_clients_company_email_active", "clients", "email"),
    ("uq_credit_notes_company_number_active", "credit_notes", "credit_note_number"),
    ("uq_skus_company_sku_name_active", "skus", "sku_name"),
]


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
    # Purchase returns
    op.create_table(
        "purchase_returns",
        _pk(),
        *_company(),
        *_audit(),
        sa.Column("purchase_return_generate_id", sa.String(64), nullable=False),
        sa.Column("grn_id", sa.Uuid(), nullable=False),
        sa.Column("po_id", sa.Uuid(), nullable=False),
        sa.Column("supplier_id", sa.Uuid(), nullable=False),
        sa.Column("return_date", sa.Date(), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("total_qty", QTY, nullable=False),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("cgst_amount", MONEY, nullable=False),
        sa.Column("sgst_amount", MONEY, nullable=False),
        sa.Column("tax_amount", MONEY, nullable=False),
        sa.Column("total_amount", MONEY, nullable=False),
        _status(),
        *_timestamps(),
        _fk("grn_id", "grns.id", "RESTRICT"),
        _fk("po_id", "purchase_orders.id", "RESTRICT"),
        _fk("supplier_id", "clients.id", "RESTRICT"),
    )
    _index("purchase_returns", "company_id")
    _index("purchase_returns", "status")
    _index("purchase_returns", "purchase_return_generate_id")
    _index("purchase_returns", "grn_id")
    _index("purchase_returns", "po_id")

    op.create_table(
        "purchase_return_items",
        _pk(),
        *_company(),
        sa.Column("purchase_return_id", sa.Uuid(), nullable=False),
        sa.Column("line_no", sa.Integer(), nullable=False),
        sa.Column("grn_item_id", sa.Uuid(), nullable=False),
        sa.Column("po_item_id", sa.Uuid(), nullable=False),
        sa.Column("item_id", sa.Uuid(), nullable=False),
        sa.Column("inventory_id", sa.Uuid(), nullable=True),
        sa.Column("return_qty", QTY, nullable=False),
        sa.Column("unit_price", MONEY, nullable=False),
        sa.Column("cgst", PERCENT, nullable=False),
        sa.Column("sgst", PERCENT, nullable=False),
        sa.Column("cgst_amount", MONEY, nullable=False),
        sa.Column("sgst_amount", MONEY, nullable=False),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("tax_amount", MONEY, nullable=False),
        sa.Column("total_amount", MONEY, nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        _fk("purchase_return_id", "purchase_returns.id", "CASCADE"),
        _fk("grn_item_id", "grn_items.id", "RESTRICT"),
        _fk("po_item_id", "purchase_order_items.id", "RESTRICT"),
        _fk("item_id", "items.id", "RESTRICT"),
        _fk("inventory_id", "inventory.id", "SET NULL"),
    )
    _index("purchase_return_items", "company_id")
    _index("purchase_return_items", "purchase_return_id")
    _index("purchase_return_items", "grn_item_id")

    # SKUs and work orders
    op.create_table(
        "skus",
        _pk(),
        *_company(),
        *_audit(),
        sa.Column("sku_generate_id", sa.String(64), nullable=False),
        sa.Column("sku_name", sa.String(128), nullable=False),
        sa.Column("client_id", sa.Uuid(), nullable=False),
        sa.Column("sku_type", sa.String(32), nullable=True),
        sa.Column("ply", sa.Integer(), nullable=True),
        sa.Column("length", DIMENSION, nullable=True),
        sa.Column("width", DIMENSION, nullable=True),
        sa.Column("height", DIMENSION, nullable=True),
        sa.Column("unit", sa.String(8), nullable=False),
        sa.Column("joints", sa.Integer(), nullable=True),
        sa.Column("ups", sa.Integer(), nullable=True),
        sa.Column("flap_width", DIMENSION, nullable=True),
        sa.Column("deckle_size", DIMENSION, nullable=True),
        sa.Column("board_size_cm2", sa.Numeric(12, 2), nullable=True),
        sa.Column("customer_reference", sa.Text(), nullable=True),
        sa.Column("minimum_order_level", QTY, nullable=False),
        sa.Column("sku_values", JSON, nullable=False),
        _status(),
        *_timestamps(),
        _fk("client_id", "clients.id", "RESTRICT"),
    )
    _index("skus", "company_id")
    _index("skus", "status")
    _index("skus", "sku_name")
    _index("skus", "client_id")

    op.create_table(
        "work_orders",
        _pk(),
        *_company(),
        *_audit(),
        sa.Column("work_order_generate_id", sa.String(64), nullable=False),
        sa.Column("client_id", sa.Uuid(), nullable=False),
        sa.Column("sku_id", sa.Uuid(), nullable=True),
        sa.Column("sku_name", sa.String(128), nullable=True),
        sa.Column("sale_order_ref", sa.String(64), nullable=True),
        sa.Column("manufacture", sa.String(16), nullable=False),
        sa.Column("outsource_name", sa.Text(), nullable=True),
        sa.Column("quantity", QTY, nullable=False),
        sa.Column("acceptable_excess_units", sa.Integer(), nullable=False),
        sa.Column("edd", sa.Date(), nullable=True),
        sa.Column("planned_start_date", sa.Date(), nullable=True),
        sa.Column("planned_end_date", sa.Date(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("stage", sa.String(24), nullable=False),
        _status(),
        *_timestamps(),
        _fk("client_id", "clients.id", "RESTRICT"),
        _fk("sku_id", "skus.id", "RESTRICT"),
    )
    _index("work_orders", "company_id")
    _index("work_orders", "status")
    _index("work_orders", "work_order_generate_id")
    _index("work_orders", "client_id")

    for name, table, column in ACTIVE_UNIQUE:
        op.create_index(
            name,
            table,
            ["company_id", sa.text(f"lower({column})")],
            unique=True,
            postgresql_where=ACTIVE_ONLY,
            sqlite_where=ACTIVE_ONLY,
        )


def downgrade() -> None:
    for name, table, _ in reversed(ACTIVE_UNIQUE):
        op.drop_index(name, table_name=table)
    op.drop_table("work_orders")
    op.drop_table("skus")
    op.drop_table("purchase_return_items")
    op.drop_table("purchase_returns")
