"""line item pricing type, template library, service resource allocations

Revision ID: 0002_pricing_type_templates_resources
Revises: 0001_initial_schema
Create Date: 2026-10-26 10:15:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = "0002_pricing_type_templates_resources"
down_revision = "0001_initial_schema"
branch_labels = None
depends_on = None

LINE_ITEM_TABLES = ("quote_item", "invoice_item")


def _backfill_pricing_type(table: str) -> None:
    # Rows priced before this column existed: take the type from the seeded catalog.
    from agencyhub.billing.catalog import default_catalog

    items = sa.table(table, sa.column("product_id", sa.String), sa.column("pricing_type", sa.String))
    for product in default_catalog():
        op.execute(
            items.update()
            .where(items.c.product_id == product.id)
            .values(pricing_type=product.pricing_type)
        )


def upgrade():
    # =========================
    # line items: pricing type captured at reprice time
    # =========================
    for table in LINE_ITEM_TABLES:
        op.add_column(table, sa.Column("pricing_type", sa.String(length=20), nullable=True))
        _backfill_pricing_type(table)

    # =========================
    # service capacity + allocations
    # =========================
    op.add_column("service", sa.Column("capacity_limit", sa.Numeric(14, 2), nullable=True))
    op.add_column("service", sa.Column("current_usage", sa.Numeric(14, 2), nullable=True))

    op.create_table(
        "resource_allocation",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("service_id", sa.Integer(), sa.ForeignKey("service.id", ondelete="CASCADE"), nullable=False),
        sa.Column("client_id", sa.Integer(), sa.ForeignKey("client.id", ondelete="CASCADE"), nullable=False),
        sa.Column("allocated", sa.Numeric(14, 2), nullable=False),
        sa.Column("used", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("cost", sa.Numeric(14, 4), nullable=True),
        sa.Column("timestamp", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
    )
    op.create_index("ix_resource_allocation_service_id", "resource_allocation", ["service_id"])
    op.create_index("ix_resource_allocation_client_id", "resource_allocation", ["client_id"])
    op.create_index("ix_resource_allocation_timestamp", "resource_allocation", ["timestamp"])

    # =========================
    # template library
    # =========================
    op.create_table(
        "template",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=160), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("type", sa.String(length=40), nullable=True),
        sa.Column("version", sa.String(length=40), nullable=False, server_default="1.0.0"),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="draft"),
        sa.Column("author", sa.String(length=120), nullable=True),
        sa.Column("repository", sa.String(length=255), nullable=True),
        sa.Column(
            "technologies",
            sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), "postgresql"),
            nullable=False,
            server_default="[]",
        ),
        sa.Column("usage_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.CheckConstraint("status IN ('draft', 'published', 'deprecated')", name="ck_template_status"),
    )
    op.create_index("ix_template_name", "template", ["name"])


def downgrade():
    op.drop_index("ix_template_name", table_name="template")
    op.drop_table("template")

    op.drop_index("ix_resource_allocation_timestamp", table_name="resource_allocation")
    op.drop_index("ix_resource_allocation_client_id", table_name="resource_allocation")
    op.drop_index("ix_resource_allocation_service_id", table_name="resource_allocation")
    op.drop_table("resource_allocation")

    op.drop_column("service", "current_usage")
    op.drop_column("service", "capacity_limit")

    for table in LINE_ITEM_TABLES:
        op.drop_column(table, "pricing_type")
