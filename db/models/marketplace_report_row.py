"""
db/models/marketplace_report_row.py

One product line of a marketplace sales report.

Integer column widths match the bounds enforced by
app/validators/schema_constraint_validator.py; keep both in sync.
"""

from __future__ import annotations

import uuid
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, Date, ForeignKey, Index, Integer, SmallInteger, Text, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, CreatedAtMixin

if TYPE_CHECKING:
    from db.models.marketplace_report import MarketplaceReport

REPORT_ROW_UNIQUE_INDEX = "uq_marketplace_report_rows_report_product"


class MarketplaceReportRow(Base, CreatedAtMixin):
    __tablename__ = "marketplace_report_rows"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    report_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("marketplace_reports.report_id", ondelete="CASCADE"),
        nullable=False,
    )

    # Product identity
    product_name: Mapped[str] = mapped_column(Text, nullable=False)
    product_link: Mapped[str | None] = mapped_column(Text, nullable=True)
    seller: Mapped[str | None] = mapped_column(Text, nullable=True)
    brand: Mapped[str | None] = mapped_column(Text, nullable=True)
    category_level1: Mapped[str | None] = mapped_column(Text, nullable=True)
    category_level3: Mapped[str | None] = mapped_column(Text, nullable=True)
    product_flag: Mapped[str | None] = mapped_column(Text, nullable=True)
    work_scheme: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Money, rubles rounded to whole units
    ordered_sum: Mapped[int | None] = mapped_column(Integer, nullable=True)
    turnover_dynamic_percentage: Mapped[int | None] = mapped_column(Integer, nullable=True)
    average_price: Mapped[int | None] = mapped_column(Integer, nullable=True)
    minimum_price: Mapped[int | None] = mapped_column(Integer, nullable=True)
    lost_sales: Mapped[int | None] = mapped_column(Integer, nullable=True)
    average_daily_revenue: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Inventory and logistics
    ordered_quantity: Mapped[int | None] = mapped_column(SmallInteger, nullable=True)
    buyout_share_percentage: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
        comment="Percent x10",
    )
    days_no_stock: Mapped[int | None] = mapped_column(
        SmallInteger,
        nullable=True,
        comment="Share of period without stock, percent",
    )
    average_delivery_hours: Mapped[int | None] = mapped_column(SmallInteger, nullable=True)
    average_daily_sales_pcs: Mapped[int | None] = mapped_column(SmallInteger, nullable=True)
    ending_stock: Mapped[int | None] = mapped_column(Integer, nullable=True)
    volume_liters: Mapped[int | None] = mapped_column(Integer, nullable=True, comment="Liters x10")

    # Funnel
    views: Mapped[int | None] = mapped_column(Integer, nullable=True)
    views_search: Mapped[int | None] = mapped_column(Integer, nullable=True)
    views_card: Mapped[int | None] = mapped_column(Integer, nullable=True)
    view_to_cart_percentage: Mapped[int | None] = mapped_column(
        SmallInteger,
        nullable=True,
        comment="Percent x100",
    )
    search_to_cart_percentage: Mapped[int | None] = mapped_column(
        SmallInteger,
        nullable=True,
        comment="Percent x100",
    )
    description_to_cart_percentage: Mapped[int | None] = mapped_column(
        SmallInteger,
        nullable=True,
        comment="Percent x100",
    )

    # Promotion
    discount_promo: Mapped[int | None] = mapped_column(Integer, nullable=True, comment="x10")
    revenue_promo_percentage: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
        comment="Percent x10",
    )
    days_promo: Mapped[int | None] = mapped_column(Integer, nullable=True)
    days_boost: Mapped[int | None] = mapped_column(Integer, nullable=True)
    ads_share_percentage: Mapped[int | None] = mapped_column(
        SmallInteger,
        nullable=True,
        comment="Percent x10",
    )

    card_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    # ── Relationships ──────────────────────────────────────────────────────────

    report: Mapped["MarketplaceReport"] = relationship(
        "MarketplaceReport",
        back_populates="rows",
    )

    __table_args__ = (
        Index("ix_marketplace_report_rows_report_id", "report_id"),
        Index("ix_marketplace_report_rows_card_date", "card_date"),
        Index("ix_marketplace_report_rows_category_level3", "category_level3"),
    )


# A missing link counts as one value: rows without a link collide on name alone.
Index(
    REPORT_ROW_UNIQUE_INDEX,
    MarketplaceReportRow.report_id,
    MarketplaceReportRow.product_name,
    func.coalesce(MarketplaceReportRow.product_link, ""),
    unique=True,
)
