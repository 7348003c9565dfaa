"""initial schema: clients, services, quotes, invoices, tickets, activity

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None

MONEY = sa.Numeric(14, 4)
PERCENT = sa.Numeric(9, 4)


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
    ]


def _line_item_columns():
    return [
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("product_id", sa.String(length=120), nullable=True),
        sa.Column("description", sa.String(length=255), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("custom_price", MONEY, nullable=True),
        sa.Column("discount", PERCENT, nullable=True),
        sa.Column("unit_price", MONEY, nullable=False, server_default="0"),
        sa.Column("total", MONEY, nullable=False, server_default="0"),
    ]


def upgrade():
    # =========================
    # client / contact
    # =========================
    op.create_table(
        "client",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=160), nullable=False),
        sa.Column("website", sa.String(length=255), nullable=True),
        sa.Column("industry", sa.String(length=120), nullable=True),
        sa.Column("size", sa.String(length=60), nullable=True),
        sa.Column("status", sa.String(length=30), nullable=False, server_default="active"),
        *_timestamps(),
    )
    op.create_index("ix_client_name", "client", ["name"])

    op.create_table(
        "contact",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("client_id", sa.Integer(), sa.ForeignKey("client.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(length=160), nullable=False),
        sa.Column("role", sa.String(length=120), nullable=True),
        sa.Column("email", sa.String(length=160), nullable=True),
        sa.Column("phone", sa.String(length=40), nullable=True),
        sa.Column("is_primary", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("type", sa.String(length=30), nullable=False, server_default="primary"),
    )
    op.create_index("ix_contact_client_id", "contact", ["client_id"])

    # =========================
    # service
    # =========================
    op.create_table(
        "service",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("client_id", sa.Integer(), sa.ForeignKey("client.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(length=160), nullable=False),
        sa.Column("type", sa.String(length=80), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=30), nullable=False, server_default="active"),
        sa.Column("cost_per_unit", MONEY, nullable=True),
        sa.Column("custom_price", MONEY, nullable=True),
        sa.Column("price_range_min", MONEY, nullable=True),
        sa.Column("price_range_max", MONEY, nullable=True),
        sa.Column("included", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_service_client_id", "service", ["client_id"])

    # =========================
    # quote / quote_item
    # =========================
    op.create_table(
        "quote",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("quote_number", sa.String(length=40), nullable=False),
        sa.Column("client_id", sa.Integer(), sa.ForeignKey("client.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False, server_default=""),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("subtotal", MONEY, nullable=False, server_default="0"),
        sa.Column("tax_rate", PERCENT, nullable=False, server_default="0"),
        sa.Column("tax", MONEY, nullable=False, server_default="0"),
        sa.Column("total", MONEY, nullable=False, server_default="0"),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="draft"),
        sa.Column("valid_until", sa.Date(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("quote_number", name="uq_quote_quote_number"),
    )
    op.create_index("ix_quote_client_id", "quote", ["client_id"])
    op.create_index("ix_quote_status", "quote", ["status"])

    op.create_table(
        "quote_item",
        *_line_item_columns(),
        sa.Column("quote_id", sa.Integer(), sa.ForeignKey("quote.id", ondelete="CASCADE"), nullable=False),
    )
    op.create_index("ix_quote_item_quote_id", "quote_item", ["quote_id"])

    # =========================
    # invoice / invoice_item
    # =========================
    op.create_table(
        "invoice",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("invoice_number", sa.String(length=40), nullable=False),
        sa.Column("client_id", sa.Integer(), sa.ForeignKey("client.id", ondelete="CASCADE"), nullable=False),
        sa.Column("source_quote_id", sa.Integer(), sa.ForeignKey("quote.id", ondelete="SET NULL"), nullable=True),
        sa.Column("title", sa.String(length=200), nullable=False, server_default=""),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("type", sa.String(length=20), nullable=False, server_default="custom"),
        sa.Column("subtotal", MONEY, nullable=False, server_default="0"),
        sa.Column("tax_rate", PERCENT, nullable=False, server_default="0"),
        sa.Column("tax", MONEY, nullable=False, server_default="0"),
        sa.Column("amount", MONEY, nullable=False, server_default="0"),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="draft"),
        sa.Column("issue_date", sa.Date(), nullable=False, server_default=sa.text("CURRENT_DATE")),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("paid_date", sa.Date(), nullable=True),
        sa.Column("payment_method", sa.String(length=40), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("invoice_number", name="uq_invoice_invoice_number"),
        sa.CheckConstraint("type IN ('setup', 'monthly', 'custom')", name="ck_invoice_type"),
    )
    op.create_index("ix_invoice_client_id", "invoice", ["client_id"])
    op.create_index("ix_invoice_source_quote_id", "invoice", ["source_quote_id"])
    op.create_index("ix_invoice_status", "invoice", ["status"])

    op.create_table(
        "invoice_item",
        *_line_item_columns(),
        sa.Column("invoice_id", sa.Integer(), sa.ForeignKey("invoice.id", ondelete="CASCADE"), nullable=False),
    )
    op.create_index("ix_invoice_item_invoice_id", "invoice_item", ["invoice_id"])

    # =========================
    # ticket / ticket_service
    # =========================
    op.create_table(
        "ticket",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("client_id", sa.Integer(), sa.ForeignKey("client.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="open"),
        sa.Column("priority", sa.String(length=20), nullable=False, server_default="medium"),
        sa.Column("type", sa.String(length=40), nullable=False),
        sa.Column("assignee", sa.String(length=120), nullable=True),
        sa.Column("impact", sa.String(length=255), nullable=True),
        sa.Column("scheduled_for", sa.Date(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_ticket_client_id", "ticket", ["client_id"])
    op.create_index("ix_ticket_status", "ticket", ["status"])

    op.create_table(
        "ticket_service",
        sa.Column("ticket_id", sa.Integer(), sa.ForeignKey("ticket.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("service_id", sa.Integer(), sa.ForeignKey("service.id", ondelete="CASCADE"), primary_key=True),
    )

    # =========================
    # activity
    # =========================
    op.create_table(
        "activity",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("type", sa.String(length=40), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=False),
        sa.Column("user", sa.String(length=120), nullable=True),
        sa.Column("target", sa.String(length=160), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="success"),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
    )
    op.create_index("ix_activity_type", "activity", ["type"])
    op.create_index("ix_activity_created_at", "activity", ["created_at"])


def downgrade():
    op.drop_index("ix_activity_created_at", table_name="activity")
    op.drop_index("ix_activity_type", table_name="activity")
    op.drop_table("activity")

    op.drop_table("ticket_service")
    op.drop_index("ix_ticket_status", table_name="ticket")
    op.drop_index("ix_ticket_client_id", table_name="ticket")
    op.drop_table("ticket")

    op.drop_index("ix_invoice_item_invoice_id", table_name="invoice_item")
    op.drop_table("invoice_item")
    op.drop_index("ix_invoice_status", table_name="invoice")
    op.drop_index("ix_invoice_source_quote_id", table_name="invoice")
    op.drop_index("ix_invoice_client_id", table_name="invoice")
    op.drop_table("invoice")

    op.drop_index("ix_quote_item_quote_id", table_name="quote_item")
    op.drop_table("quote_item")
    op.drop_index("ix_quote_status", table_name="quote")
    op.drop_index("ix_quote_client_id", table_name="quote")
    op.drop_table("quote")

    op.drop_index("ix_service_client_id", table_name="service")
    op.drop_table("service")

    op.drop_index("ix_contact_client_id", table_name="contact")
    op.drop_table("contact")

    op.drop_index("ix_client_name", table_name="client")
    op.drop_table("client")
