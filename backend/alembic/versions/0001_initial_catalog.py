"""Initial catalog schema: products and suppliers.

Revision ID: 0001
Revises: (none)
Create Date: 2026-10-18

The unique indexes on products.product_id and suppliers.supplier_id are
what guarantees identifier uniqueness across app instances.
"""

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

from alembic import op
import sqlalchemy as sa


def upgrade() -> None:
    op.create_table(
        "products",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("product_id", sa.String(32), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("categories", sa.JSON(), server_default="[]"),
        sa.Column("category_keys", sa.Text(), nullable=False, server_default=""),
        sa.Column("images", sa.JSON(), server_default="[]"),
        sa.Column("labelled_price", sa.Float(), server_default="0"),
        sa.Column("price", sa.Float(), server_default="0"),
        sa.Column("stock", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_available", sa.Boolean(), server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index(
        "ix_products_product_id", "products", ["product_id"], unique=True
    )

    op.create_table(
        "suppliers",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("supplier_id", sa.String(32), nullable=False),
        sa.Column(
            "product_id",
            sa.String(32),
            sa.ForeignKey("products.product_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("stock", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("cost", sa.Float(), server_default="0"),
        sa.Column("contact_no", sa.String(10)),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index(
        "ix_suppliers_supplier_id", "suppliers", ["supplier_id"], unique=True
    )
    op.create_index("ix_suppliers_product_id", "suppliers", ["product_id"])
    op.create_index("ix_suppliers_created_at", "suppliers", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_suppliers_created_at", table_name="suppliers")
    op.drop_index("ix_suppliers_product_id", table_name="suppliers")
    op.drop_index("ix_suppliers_supplier_id", table_name="suppliers")
    op.drop_table("suppliers")
    op.drop_index("ix_products_product_id", table_name="products")
    op.drop_table("products")
