"""create marketplace report tables

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 10:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "marketplace_reports",
        sa.Column("report_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("date_of_report", sa.Date(), nullable=False),
        sa.Column("reported_days", sa.SmallInteger(), nullable=False),
        sa.Column("imported_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("report_id", name="pk_marketplace_reports"),
        sa.UniqueConstraint("date_of_report", "reported_days", name="uq_marketplace_reports_date_days"),
    )
    op.create_index("ix_marketplace_reports_date_of_report", "marketplace_reports", ["date_of_report"], unique=False)
    op.create_index("ix_marketplace_reports_reported_days", "marketplace_reports", ["reported_days"], unique=False)

    op.create_table(
        "marketplace_report_rows",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("report_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("product_name", sa.Text(), nullable=False),
        sa.Column("product_link", sa.Text(), nullable=True),
        sa.Column("seller", sa.Text(), nullable=True),
        sa.Column("brand", sa.Text(), nullable=True),
        sa.Column("category_level1", sa.Text(), nullable=True),
        sa.Column("category_level3", sa.Text(), nullable=True),
        sa.Column("product_flag", sa.Text(), nullable=True),
        sa.Column("work_scheme", sa.Text(), nullable=True),
        sa.Column("ordered_sum", sa.Integer(), nullable=True),
        sa.Column("turnover_dynamic_percentage", sa.Integer(), nullable=True),
        sa.Column("average_price", sa.Integer(), nullable=True),
        sa.Column("minimum_price", sa.Integer(), nullable=True),
        sa.Column("lost_sales", sa.Integer(), nullable=True),
        sa.Column("average_daily_revenue", sa.Integer(), nullable=True),
        sa.Column("ordered_quantity", sa.SmallInteger(), nullable=True),
        sa.Column("buyout_share_percentage", sa.Integer(), nullable=True, comment="Percent x10"),
        sa.Column(
            "days_no_stock",
            sa.SmallInteger(),
            nullable=True,
            comment="Share of period without stock, percent",
        ),
        sa.Column("average_delivery_hours", sa.SmallInteger(), nullable=True),
        sa.Column("average_daily_sales_pcs", sa.SmallInteger(), nullable=True),
        sa.Column("ending_stock", sa.Integer(), nullable=True),
        sa.Column("volume_liters", sa.Integer(), nullable=True, comment="Liters x10"),
        sa.Column("views", sa.Integer(), nullable=True),
        sa.Column("views_search", sa.Integer(), nullable=True),
        sa.Column("views_card", sa.Integer(), nullable=True),
        sa.Column("view_to_cart_percentage", sa.SmallInteger(), nullable=True, comment="Percent x100"),
        sa.Column("search_to_cart_percentage", sa.SmallInteger(), nullable=True, comment="Percent x100"),
        sa.Column("description_to_cart_percentage", sa.SmallInteger(), nullable=True, comment="Percent x100"),
        sa.Column("discount_promo", sa.Integer(), nullable=True, comment="x10"),
        sa.Column("revenue_promo_percentage", sa.Integer(), nullable=True, comment="Percent x10"),
        sa.Column("days_promo", sa.Integer(), nullable=True),
        sa.Column("days_boost", sa.Integer(), nullable=True),
        sa.Column("ads_share_percentage", sa.SmallInteger(), nullable=True, comment="Percent x10"),
        sa.Column("card_date", sa.Date(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(
            ["report_id"],
            ["marketplace_reports.report_id"],
            name="fk_marketplace_report_rows_report_id_marketplace_reports",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_marketplace_report_rows"),
    )
    op.create_index(
        "uq_marketplace_report_rows_report_product",
        "marketplace_report_rows",
        ["report_id", "product_name", sa.text("coalesce(product_link, '')")],
        unique=True,
    )
    op.create_index("ix_marketplace_report_rows_report_id", "marketplace_report_rows", ["report_id"], unique=False)
    op.create_index("ix_marketplace_report_rows_card_date", "marketplace_report_rows", ["card_date"], unique=False)
    op.create_index(
        "ix_marketplace_report_rows_category_level3",
        "marketplace_report_rows",
        ["category_level3"],
        unique=False,
    )

    op.create_table(
        "marketplace_import_history",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("filename", sa.String(length=512), nullable=False),
        sa.Column("file_hash", sa.String(length=64), nullable=False, comment="SHA-256 hex digest"),
        sa.Column("file_size", sa.BigInteger(), nullable=False),
        sa.Column("records_count", sa.Integer(), nullable=False, comment="Rows that parsed validly"),
        sa.Column("actual_records_imported", sa.Integer(), nullable=True),
        sa.Column("records_skipped_duplicates", sa.Integer(), nullable=False),
        sa.Column("records_failed", sa.Integer(), nullable=False),
        sa.Column("date_range_start", sa.Date(), nullable=True),
        sa.Column("date_range_end", sa.Date(), nullable=True),
        sa.Column("validation_status", sa.String(length=16), nullable=False, comment="valid, invalid, warning"),
        sa.Column("validation_errors", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column(
            "import_status",
            sa.String(length=16),
            nullable=False,
            comment="pending, success, partial, error",
        ),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("import_duration_ms", sa.Integer(), nullable=True),
        sa.Column(
            "report_id",
            postgresql.UUID(as_uuid=True),
            nullable=True,
            comment="Report created by this attempt; not a foreign key so history outlives reports",
        ),
        sa.Column("data_purged_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_marketplace_import_history"),
    )
    op.create_index(
        "ix_marketplace_import_history_file_hash",
        "marketplace_import_history",
        ["file_hash"],
        unique=False,
    )
    op.create_index(
        "ix_marketplace_import_history_import_status",
        "marketplace_import_history",
        ["import_status"],
        unique=False,
    )
    op.create_index(
        "ix_marketplace_import_history_created_at",
        "marketplace_import_history",
        ["created_at"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_marketplace_import_history_created_at", table_name="marketplace_import_history")
    op.drop_index("ix_marketplace_import_history_import_status", table_name="marketplace_import_history")
    op.drop_index("ix_marketplace_import_history_file_hash", table_name="marketplace_import_history")
    op.drop_table("marketplace_import_history")

    op.drop_index("ix_marketplace_report_rows_category_level3", table_name="marketplace_report_rows")
    op.drop_index("ix_marketplace_report_rows_card_date", table_name="marketplace_report_rows")
    op.drop_index("ix_marketplace_report_rows_report_id", table_name="marketplace_report_rows")
    op.drop_index("uq_marketplace_report_rows_report_product", table_name="marketplace_report_rows")
    op.drop_table("marketplace_report_rows")

    op.drop_index("ix_marketplace_reports_reported_days", table_name="marketplace_reports")
    op.drop_index("ix_marketplace_reports_date_of_report", table_name="marketplace_reports")
    op.drop_table("marketplace_reports")
