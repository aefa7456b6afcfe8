"""
app/validators package marker.
"""

from app.validators.header_validator import HeaderValidator
from app.validators.schema_constraint_validator import SCHEMA_CONSTRAINTS, SchemaConstraintValidator

__all__ = [
    "HeaderValidator",
    "SCHEMA_CONSTRAINTS",
    "SchemaConstraintValidator",
]
