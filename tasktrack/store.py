"""Thin persistence layer over a SQLAlchemy session.

Services talk to the database only through ``Store`` so every failure comes
back as ``Conflict`` (unique key violated) or ``StoreUnavailable``.
"""

from typing import Any, Iterable, Mapping, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from tasktrack.errors import Conflict, StoreUnavailable
from tasktrack.log import get_logger

log = get_logger(__name__)


class Store:
    def __init__(self, db: Session, model):
        self.db = db
        self.model = model

    def _fail(self, op: str, exc: SQLAlchemyError):
        self.db.rollback()
        if isinstance(exc, IntegrityError):
            log.info("store_conflict", model=self.model.__name__, op=op)
            raise Conflict() from exc
        log.error("store_failure", model=self.model.__name__, op=op, error=str(exc), exc_info=True)
        raise StoreUnavailable() from exc

    def insert(self, record):
        try:
            self.db.add(record)
            self.db.commit()
            self.db.refresh(record)
        except SQLAlchemyError as exc:
            self._fail("insert", exc)
        return record

    def find_one(self, *criteria) -> Optional[Any]:
        try:
            return self.db.scalars(select(self.model).where(*criteria).limit(1)).first()
        except SQLAlchemyError as exc:
            self._fail("find_one", exc)

    def find_many(
        self,
        criteria: Iterable,
        order_by: Sequence = (),
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> list:
        stmt = select(self.model).where(*criteria).order_by(*order_by).offset(skip)
        if limit is not None:
            stmt = stmt.limit(limit)
        try:
            return list(self.db.scalars(stmt))
        except SQLAlchemyError as exc:
            self._fail("find_many", exc)

    def count(self, *criteria) -> int:
        stmt = select(func.count()).select_from(self.model).where(*criteria)
        try:
            return self.db.scalar(stmt)
        except SQLAlchemyError as exc:
            self._fail("count", exc)

    def update_one(self, criteria: Iterable, patch: Mapping[str, Any]) -> Optional[Any]:
        """Apply ``patch`` to the first matching record; None when nothing matches."""
        record = self.find_one(*criteria)
        if record is None:
            return None
        try:
            for field, value in patch.items():
                setattr(record, field, value)
            self.db.commit()
            self.db.refresh(record)
        except SQLAlchemyError as exc:
            self._fail("update_one", exc)
        return record

    def delete_one(self, *criteria) -> Optional[Any]:
        """Delete the first matching record and return it as it was."""
        record = self.find_one(*criteria)
        if record is None:
            return None
        try:
            self.db.delete(record)
            self.db.commit()
        except SQLAlchemyError as exc:
            self._fail("delete_one", exc)
        return record
