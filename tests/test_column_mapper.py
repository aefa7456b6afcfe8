from __future__ import annotations

import unittest

from app.mappers.column_mapper import COLUMN_MAPPING, ColumnMapper, locate_header_row
from app.mappers.value_transforms import TransformKind
from app.domain.report_parsing import ROW_FIELDS


class TestColumnMapping(unittest.TestCase):
    def test_vocabulary_covers_every_row_field(self) -> None:
        mapped_fields = {spec.field for spec in COLUMN_MAPPING.values()}
        self.assertEqual(mapped_fields, set(ROW_FIELDS))
        self.assertEqual(len(COLUMN_MAPPING), 33)

    def test_selected_kinds(self) -> None:
        self.assertEqual(COLUMN_MAPPING["Дней без остатка"].kind, TransformKind.SPECIAL_RATIO)
        self.assertEqual(
            COLUMN_MAPPING["Ср. время доставки до покупателя, часы"].kind,
            TransformKind.SPECIAL_HOURS,
        )
        self.assertEqual(COLUMN_MAPPING["Доля выкупа, %"].kind, TransformKind.INTX10)
        self.assertEqual(COLUMN_MAPPING["Конверсия из показа в заказ, %"].kind, TransformKind.INTX100)
        self.assertEqual(COLUMN_MAPPING["Дата создания карточки товара"].kind, TransformKind.DATE)


class TestColumnMapper(unittest.TestCase):
    def setUp(self) -> None:
        self.mapper = ColumnMapper()

    def test_unknown_and_blank_headers_are_skipped(self) -> None:
        mapping = self.mapper.build_mapping(["Название товара", None, "Неизвестная колонка", " Бренд "])

        self.assertEqual(mapping.fields, ("product_name", "brand"))
        self.assertEqual([column.index for column in mapping.columns], [0, 3])
        self.assertEqual(mapping.source_headers, ("Название товара", "", "Неизвестная колонка", "Бренд"))

    def test_first_occurrence_wins(self) -> None:
        mapping = self.mapper.build_mapping(["Название товара", "Бренд", "Бренд"])

        brand = [column for column in mapping.columns if column.spec.field == "brand"]
        self.assertEqual(len(brand), 1)
        self.assertEqual(brand[0].index, 1)

    def test_map_row_reads_short_rows_as_empty(self) -> None:
        mapping = self.mapper.build_mapping(["Название товара", "Бренд", "Заказано, штуки"])

        mapped = self.mapper.map_row(raw_row=("Телефон",), mapping=mapping)

        self.assertEqual(mapped["product_name"], (TransformKind.STRING, "Телефон"))
        self.assertEqual(mapped["brand"], (TransformKind.STRING, None))
        self.assertEqual(mapped["ordered_quantity"], (TransformKind.INT, None))


class TestLocateHeaderRow(unittest.TestCase):
    def test_finds_first_matching_row(self) -> None:
        grid = [
            ("Дата формирования", "15.10.2024"),
            ("Период отчета", "28 дней"),
            (),
            ("Название товара", "Бренд"),
            ("Телефон", "Acme"),
        ]
        self.assertEqual(locate_header_row(grid), 3)

    def test_respects_scan_window(self) -> None:
        grid = [("x",)] * 5 + [("Название товара",)]
        self.assertIsNone(locate_header_row(grid, scan_rows=5))
        self.assertEqual(locate_header_row(grid, scan_rows=6), 5)


if __name__ == "__main__":
    unittest.main()
