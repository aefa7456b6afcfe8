"""
Repository layer exports.
"""

from db.repositories.errors import (
    UNIQUE_VIOLATION_SQLSTATE,
    StorageError,
    UniqueViolationError,
    translate_storage_error,
)

__all__ = [
    "UNIQUE_VIOLATION_SQLSTATE",
    "StorageError",
    "UniqueViolationError",
    "translate_storage_error",
]
