from __future__ import annotations

import unittest

from app.validators.schema_constraint_validator import SCHEMA_CONSTRAINTS, SchemaConstraintValidator


class TestSchemaConstraintValidator(unittest.TestCase):
    def setUp(self) -> None:
        self.validator = SchemaConstraintValidator()

    def test_smallint_overflow(self) -> None:
        result = self.validator.check_field("ordered_quantity", 40000)

        self.assertFalse(result.is_valid)
        self.assertEqual(
            result.error,
            'Field "ordered_quantity" value 40000 exceeds smallint maximum (32767)',
        )

    def test_integer_underflow(self) -> None:
        result = self.validator.check_field("ordered_sum", -2147483649)

        self.assertEqual(
            result.error,
            'Field "ordered_sum" value -2147483649 below integer minimum (-2147483648)',
        )

    def test_bounds_are_inclusive(self) -> None:
        self.assertTrue(self.validator.check_field("ordered_sum", 2147483647).is_valid)
        self.assertTrue(self.validator.check_field("views", -2147483648).is_valid)
        self.assertTrue(self.validator.check_field("days_no_stock", -32768).is_valid)

    def test_smallint_approaching_maximum_warns(self) -> None:
        result = self.validator.check_field("days_no_stock", 30000)

        self.assertTrue(result.is_valid)
        self.assertEqual(
            result.warning,
            'Field "days_no_stock" value 30000 is approaching smallint maximum (32767)',
        )

    def test_integer_never_warns(self) -> None:
        result = self.validator.check_field("ordered_sum", 2147483000)

        self.assertTrue(result.is_valid)
        self.assertIsNone(result.warning)

    def test_none_and_unknown_fields_pass(self) -> None:
        self.assertTrue(self.validator.check_field("ordered_quantity", None).is_valid)
        self.assertTrue(self.validator.check_field("product_name", "x" * 1000).is_valid)

    def test_reported_days_is_smallint(self) -> None:
        self.assertEqual(SCHEMA_CONSTRAINTS["reported_days"].type_name, "smallint")
        self.assertFalse(self.validator.check_field("reported_days", 40000).is_valid)

    def test_check_values_collects_errors_and_warnings(self) -> None:
        report = self.validator.check_values(
            {"ordered_quantity": 50000, "days_no_stock": 32000, "brand": "Acme", "views": 10}
        )

        self.assertFalse(report.is_valid)
        self.assertEqual(len(report.errors), 1)
        self.assertEqual(len(report.warnings), 1)


if __name__ == "__main__":
    unittest.main()
