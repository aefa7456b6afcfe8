"""
app/mappers/column_mapper.py

Header row location and column mapping for marketplace report exports.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from app.mappers.value_transforms import TransformKind

PRODUCT_NAME_LABEL = "Название товара"


@dataclass(frozen=True)
class ColumnSpec:
    field: str
    kind: TransformKind


# Label text must match the export byte for byte after trimming.
COLUMN_MAPPING: dict[str, ColumnSpec] = {
    "Название товара": ColumnSpec("product_name", TransformKind.STRING),
    "Ссылка на товар": ColumnSpec("product_link", TransformKind.STRING),
    "Продавец": ColumnSpec("seller", TransformKind.STRING),
    "Бренд": ColumnSpec("brand", TransformKind.STRING),
    "Категория 1 уровня": ColumnSpec("category_level1", TransformKind.STRING),
    "Категория 3 уровня": ColumnSpec("category_level3", TransformKind.STRING),
    "Признак товара": ColumnSpec("product_flag", TransformKind.STRING),
    "Заказано на сумму, ₽": ColumnSpec("ordered_sum", TransformKind.FORCED_INT),
    "Динамика оборота, %": ColumnSpec("turnover_dynamic_percentage", TransformKind.FORCED_INT),
    "Заказано, штуки": ColumnSpec("ordered_quantity", TransformKind.INT),
    "Средняя цена, ₽": ColumnSpec("average_price", TransformKind.FORCED_INT),
    "Минимальная цена, ₽": ColumnSpec("minimum_price", TransformKind.FORCED_INT),
    "Доля выкупа, %": ColumnSpec("buyout_share_percentage", TransformKind.INTX10),
    "Упущенные продажи, ₽": ColumnSpec("lost_sales", TransformKind.FORCED_INT),
    "Дней без остатка": ColumnSpec("days_no_stock", TransformKind.SPECIAL_RATIO),
    "Ср. время доставки до покупателя, часы": ColumnSpec("average_delivery_hours", TransformKind.SPECIAL_HOURS),
    "Среднесуточные продажи, ₽": ColumnSpec("average_daily_revenue", TransformKind.FORCED_INT),
    "Среднесуточные продажи, штуки": ColumnSpec("average_daily_sales_pcs", TransformKind.INT),
    "Остаток на конец периода, штуки": ColumnSpec("ending_stock", TransformKind.INT),
    "Схема работы": ColumnSpec("work_scheme", TransformKind.STRING),
    "Объем товара, л": ColumnSpec("volume_liters", TransformKind.INTX10),
    "Показы всего": ColumnSpec("views", TransformKind.INT),
    "Просмотры в поиске и каталоге": ColumnSpec("views_search", TransformKind.INT),
    "Просмотры карточки": ColumnSpec("views_card", TransformKind.INT),
    "Конверсия из показа в заказ, %": ColumnSpec("view_to_cart_percentage", TransformKind.INTX100),
    "В корзину из поиска и каталога, %": ColumnSpec("search_to_cart_percentage", TransformKind.INTX100),
    "В корзину из карточки, %": ColumnSpec("description_to_cart_percentage", TransformKind.INTX100),
    "Скидка за счет акций": ColumnSpec("discount_promo", TransformKind.INTX10),
    "Доля оборота в акциях, %": ColumnSpec("revenue_promo_percentage", TransformKind.INTX10),
    "Дней в акциях": ColumnSpec("days_promo", TransformKind.INT),
    "Дней с продвижением": ColumnSpec("days_boost", TransformKind.INT),
    "Доля рекламных расходов, %": ColumnSpec("ads_share_percentage", TransformKind.INTX10),
    "Дата создания карточки товара": ColumnSpec("card_date", TransformKind.DATE),
}


@dataclass(frozen=True)
class MappedColumn:
    index: int
    label: str
    spec: ColumnSpec


@dataclass(frozen=True)
class ColumnMapping:
    """
    Resolved mapping between sheet column positions and row fields.
    """

    columns: tuple[MappedColumn, ...]
    source_headers: tuple[str, ...]

    @property
    def fields(self) -> tuple[str, ...]:
        return tuple(column.spec.field for column in self.columns)


def header_text(cell: Any) -> str:
    if cell is None:
        return ""
    return str(cell).strip()


def locate_header_row(grid: Sequence[Sequence[Any]], *, scan_rows: int = 10) -> int | None:
    """
    Index of the first row, within ``scan_rows``, whose first cell names the
    product column. None when no such row exists.
    """

    for index, row in enumerate(grid[:scan_rows]):
        if row and PRODUCT_NAME_LABEL in header_text(row[0]):
            return index
    return None


class ColumnMapper:
    """
    Maps export header labels to row fields and transform kinds.
    """

    def __init__(self, mapping: Mapping[str, ColumnSpec] | None = None) -> None:
        self._mapping: dict[str, ColumnSpec] = dict(mapping or COLUMN_MAPPING)

    def build_mapping(self, headers: Sequence[Any]) -> ColumnMapping:
        """
        Resolve column positions for one header row.

        Blank and unknown labels are skipped; when a label repeats, the
        leftmost column wins.
        """

        columns: list[MappedColumn] = []
        seen_fields: set[str] = set()
        source_headers: list[str] = []
        for index, cell in enumerate(headers):
            label = header_text(cell)
            source_headers.append(label)
            if not label:
                continue
            spec = self._mapping.get(label)
            if spec is None or spec.field in seen_fields:
                continue
            seen_fields.add(spec.field)
            columns.append(MappedColumn(index=index, label=label, spec=spec))

        return ColumnMapping(columns=tuple(columns), source_headers=tuple(source_headers))

    def map_row(self, *, raw_row: Sequence[Any], mapping: ColumnMapping) -> dict[str, tuple[TransformKind, Any]]:
        """
        Pick the raw cell for every mapped field. Short rows read as empty.
        """

        mapped: dict[str, tuple[TransformKind, Any]] = {}
        for column in mapping.columns:
            value = raw_row[column.index] if column.index < len(raw_row) else None
            mapped[column.spec.field] = (column.spec.kind, value)
        return mapped
