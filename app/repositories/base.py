"""
app/repositories/base.py

Shared session handling for report storage repositories.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from db.repositories.errors import translate_storage_error


class SessionRepository:
    """
    Base for repositories bound to one SQLAlchemy session.

    Each write commits on success and rolls back on failure, so a failed
    statement never leaves the session unusable for the next call. Driver
    errors leave as ``StorageError`` / ``UniqueViolationError``.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    @contextmanager
    def _write(self, action: str) -> Iterator[Session]:
        try:
            yield self._session
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise translate_storage_error(exc, action=action) from exc

    @contextmanager
    def _read(self, action: str) -> Iterator[Session]:
        try:
            yield self._session
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise translate_storage_error(exc, action=action) from exc
