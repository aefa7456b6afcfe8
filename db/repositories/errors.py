"""
Repository-layer exceptions for marketplace report storage.

Driver errors are translated here so services can tell a unique-constraint
violation apart from every other storage failure without importing psycopg.
"""

from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError

UNIQUE_VIOLATION_SQLSTATE = "23505"


class StorageError(Exception):
    """Base exception for storage failures."""

    def __init__(self, message: str, *, code: str | None = None, constraint: str | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.constraint = constraint


class UniqueViolationError(StorageError):
    """Raised when an insert or update hits a unique constraint."""


def _sqlstate(exc: SQLAlchemyError) -> str | None:
    orig = getattr(exc, "orig", None)
    if orig is None:
        return None
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


def _constraint_name(exc: SQLAlchemyError) -> str | None:
    diag = getattr(getattr(exc, "orig", None), "diag", None)
    return getattr(diag, "constraint_name", None)


def translate_storage_error(exc: SQLAlchemyError, *, action: str) -> StorageError:
    """
    Map a SQLAlchemy error onto the repository error taxonomy.
    """

    code = _sqlstate(exc)
    constraint = _constraint_name(exc)
    lines = str(getattr(exc, "orig", None) or exc).strip().splitlines()
    detail = lines[0] if lines else type(exc).__name__
    message = f"Failed to {action}: {detail}"
    if code == UNIQUE_VIOLATION_SQLSTATE:
        return UniqueViolationError(message, code=code, constraint=constraint)
    return StorageError(message, code=code, constraint=constraint)
