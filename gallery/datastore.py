"""
Tabular Data Facade

Generic select/insert/update/delete access to registered tables. Rows are
returned as plain dicts and every database failure surfaces as
DataStoreError.
"""

import logging
from contextlib import contextmanager
from flask import has_app_context
from sqlalchemy.exc import SQLAlchemyError
from gallery.extensions import db

logger = logging.getLogger(__name__)


class DataStoreError(Exception):
    """Raised when a table operation cannot be completed."""


def _row_to_dict(row):
    return {column.name: getattr(row, column.name) for column in row.__table__.columns}


class DataStore:
    """Name-addressed access to SQLAlchemy models."""

    def __init__(self, app=None):
        self.app = None
        self.tables = {}
        if app is not None:
            self.init_app(app)

    def init_app(self, app, tables=None):
        self.app = app
        for name, model in (tables or {}).items():
            self.register(name, model)
        app.extensions['datastore'] = self

    def register(self, name, model):
        self.tables[name] = model

    def _model(self, table):
        try:
            return self.tables[table]
        except KeyError:
            raise DataStoreError(f'Unknown table {table!r}') from None

    @contextmanager
    def _scope(self):
        # Timer and executor threads have no app context of their own
        if has_app_context() or self.app is None:
            yield
        else:
            with self.app.app_context():
                yield

    def _query(self, table, criteria, filters):
        return self._model(table).query.filter_by(**filters).filter(*criteria)

    def select(self, table, *criteria, **filters):
        with self._scope():
            try:
                return [_row_to_dict(row) for row in self._query(table, criteria, filters).all()]
            except SQLAlchemyError as e:
                db.session.rollback()
                raise DataStoreError(f'select on {table} failed: {e}') from e

    def count(self, table, *criteria, **filters):
        with self._scope():
            try:
                return self._query(table, criteria, filters).count()
            except SQLAlchemyError as e:
                db.session.rollback()
                raise DataStoreError(f'count on {table} failed: {e}') from e

    def insert(self, table, values):
        model = self._model(table)
        with self._scope():
            try:
                row = model(**values)
                db.session.add(row)
                db.session.commit()
                return _row_to_dict(row)
            except SQLAlchemyError as e:
                db.session.rollback()
                raise DataStoreError(f'insert into {table} failed: {e}') from e

    def update(self, table, values, *criteria, **filters):
        with self._scope():
            try:
                updated = self._query(table, criteria, filters).update(
                    values, synchronize_session=False)
                db.session.commit()
                return updated
            except SQLAlchemyError as e:
                db.session.rollback()
                raise DataStoreError(f'update on {table} failed: {e}') from e

    def delete(self, table, *criteria, **filters):
        with self._scope():
            try:
                deleted = self._query(table, criteria, filters).delete(synchronize_session=False)
                db.session.commit()
                return deleted
            except SQLAlchemyError as e:
                db.session.rollback()
                raise DataStoreError(f'delete on {table} failed: {e}') from e


datastore = DataStore()
