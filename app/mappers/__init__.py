"""
app/mappers package marker.
"""

from app.mappers.column_mapper import (
    COLUMN_MAPPING,
    PRODUCT_NAME_LABEL,
    ColumnMapper,
    ColumnMapping,
    locate_header_row,
)
from app.mappers.row_transformer import RowTransformer
from app.mappers.value_transforms import TransformKind, apply_transform

__all__ = [
    "COLUMN_MAPPING",
    "PRODUCT_NAME_LABEL",
    "ColumnMapper",
    "ColumnMapping",
    "RowTransformer",
    "TransformKind",
    "apply_transform",
    "locate_header_row",
]
