"""SQLAlchemy implementation of RemoteDataService."""

import logging
import uuid
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from sqlalchemy import func
from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from shopdesk.core.exceptions import (
    NetworkError,
    RemoteDataError,
    RemoteIntegrityError,
)
from shopdesk.repositories.protocols.remote_data import Filters, Row
from shopdesk.repositories.sqlalchemy.orm_models import TABLE_MODELS

logger = logging.getLogger(__name__)

_OPERATORS = {
    "eq": lambda col, v: col == v,
    "neq": lambda col, v: col != v,
    "gt": lambda col, v: col > v,
    "gte": lambda col, v: col >= v,
    "lt": lambda col, v: col < v,
    "lte": lambda col, v: col <= v,
}


class SqlAlchemyRemoteDataService:
    """
    Row store backed by a relational database.

    Each call runs in its own short-lived session so the service can be used
    from background worker threads.
    """

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def select(
        self,
        table: str,
        filters: Optional[Filters] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[Row]:
        model = self._model(table)
        with self._session() as db:
            query = self._apply_filters(db.query(model), model, filters)
            if order_by:
                column = self._column(model, order_by)
                query = query.order_by(column.desc() if descending else column.asc())
            if limit is not None:
                query = query.limit(limit)
            return [self._to_row(obj) for obj in query.all()]

    def get(self, table: str, row_id: str) -> Optional[Row]:
        model = self._model(table)
        with self._session() as db:
            obj = db.get(model, row_id)
            return self._to_row(obj) if obj else None

    def count(self, table: str, filters: Optional[Filters] = None) -> int:
        model = self._model(table)
        with self._session() as db:
            query = self._apply_filters(db.query(func.count(model.id)), model, filters)
            return int(query.scalar() or 0)

    def insert(self, table: str, row: Row) -> Row:
        model = self._model(table)
        payload = dict(row)
        payload.setdefault("id", str(uuid.uuid4()))
        with self._session() as db:
            obj = model(**self._known_columns(model, payload))
            db.add(obj)
            db.commit()
            db.refresh(obj)
            return self._to_row(obj)

    def insert_many(self, table: str, rows: list[Row]) -> int:
        model = self._model(table)
        with self._session() as db:
            for row in rows:
                payload = dict(row)
                payload.setdefault("id", str(uuid.uuid4()))
                db.add(model(**self._known_columns(model, payload)))
            db.commit()
        return len(rows)

    def update(self, table: str, row_id: str, changes: Row) -> Row:
        model = self._model(table)
        with self._session() as db:
            obj = db.get(model, row_id)
            if obj is None:
                raise RemoteDataError(f"No row {row_id} in {table}", code="ROW_NOT_FOUND")
            for key, value in self._known_columns(model, changes).items():
                if key != "id":
                    setattr(obj, key, value)
            db.commit()
            db.refresh(obj)
            return self._to_row(obj)

    def delete(self, table: str, row_id: str) -> None:
        model = self._model(table)
        with self._session() as db:
            db.query(model).filter(model.id == row_id).delete()
            db.commit()

    def delete_all(self, table: str) -> int:
        model = self._model(table)
        with self._session() as db:
            removed = db.query(model).delete()
            db.commit()
            return int(removed or 0)

    @contextmanager
    def _session(self) -> Iterator[Session]:
        """Open a session and translate driver errors into RemoteDataError."""
        db = self._session_factory()
        try:
            yield db
        except IntegrityError as e:
            db.rollback()
            raise RemoteIntegrityError(str(e.orig)) from e
        except DBAPIError as e:
            db.rollback()
            if e.connection_invalidated:
                raise NetworkError(f"NetworkError: connection dropped ({e.orig})") from e
            raise RemoteDataError(str(e.orig)) from e
        except SQLAlchemyError as e:
            db.rollback()
            raise RemoteDataError(str(e)) from e
        finally:
            db.close()

    @staticmethod
    def _model(table: str) -> type:
        try:
            return TABLE_MODELS[table]
        except KeyError:
            raise RemoteDataError(f"Unknown table: {table}", code="UNKNOWN_TABLE") from None

    @staticmethod
    def _column(model: type, name: str) -> Any:
        if name not in model.__table__.columns:
            raise RemoteDataError(
                f"Unknown column {name} on {model.__tablename__}", code="UNKNOWN_COLUMN"
            )
        return getattr(model, name)

    @classmethod
    def _apply_filters(cls, query, model: type, filters: Optional[Filters]):
        for name, condition in (filters or {}).items():
            column = cls._column(model, name)
            conditions = condition if isinstance(condition, list) else [condition]
            for item in conditions:
                op, value = item if isinstance(item, tuple) else ("eq", item)
                if op not in _OPERATORS:
                    raise RemoteDataError(f"Unsupported filter operator: {op}", code="BAD_FILTER")
                query = query.filter(_OPERATORS[op](column, value))
        return query

    @staticmethod
    def _known_columns(model: type, payload: Row) -> Row:
        columns = model.__table__.columns
        unknown = set(payload) - set(columns.keys())
        if unknown:
            logger.debug("Ignoring unknown columns for %s: %s", model.__tablename__, sorted(unknown))
        return {k: v for k, v in payload.items() if k in columns}

    @staticmethod
    def _to_row(obj: Any) -> Row:
        return {c.name: getattr(obj, c.name) for c in obj.__table__.columns}
