"""
SQLAlchemy Core adapter.

Exposes a ``Table`` as an entity over an async engine (``sqlite+aiosqlite``,
``postgresql+asyncpg``, ...). Core only: no ORM, no Session.

    engine = create_async_engine("sqlite+aiosqlite:///app.db")
    widgets = TableEntity(widgets_table, engine)
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from crudviews.adapters.base import Record
from crudviews.errors import ConfigurationError
from crudviews.runtime.fields import fields_from_table
from crudviews.specs.entity import FieldDescriptor

if TYPE_CHECKING:
    import sqlalchemy
    from sqlalchemy.ext.asyncio import AsyncEngine

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Lazy imports: sqlalchemy is an optional dependency (sql extra)
# ---------------------------------------------------------------------------

_sa: Any = None


def _ensure_sa() -> Any:
    """Import sqlalchemy on first use and return the module."""
    global _sa
    if _sa is None:
        try:
            import sqlalchemy as sa
        except ImportError as exc:
            raise RuntimeError(
                "sqlalchemy is required for TableEntity.  "
                "Install it with:  pip install crudviews[sql]"
            ) from exc
        _sa = sa
    return _sa


class TableEntity:
    """
    Entity backed by a SQLAlchemy ``Table``.

    The table needs a single-column primary key. Records remember whether
    they were loaded from (or inserted into) the table; ``save()`` inserts
    new records and updates persisted ones by primary key.
    """

    def __init__(self, table: sqlalchemy.Table, engine: AsyncEngine, name: str | None = None):
        _ensure_sa()
        pk_columns = list(table.primary_key.columns)
        if len(pk_columns) != 1:
            raise ConfigurationError(
                f"Table {table.name} needs exactly one primary key column, has {len(pk_columns)}"
            )
        self.table = table
        self.engine = engine
        self.name = name or table.name
        self.primary_key: str = pk_columns[0].name
        self._fields = fields_from_table(table)

    def __repr__(self) -> str:
        return f"TableEntity({self.table.name!r})"

    @property
    def fields(self) -> Mapping[str, FieldDescriptor]:
        return self._fields

    def _where(self, **where: Any) -> list[Any]:
        return [self.table.c[key] == value for key, value in where.items()]

    def _loaded(self, row: Mapping[str, Any]) -> Record:
        return Record(row, store=self, persisted=True)

    async def find_one(self, **where: Any) -> Record | None:
        sa = _ensure_sa()
        stmt = sa.select(self.table).where(*self._where(**where)).limit(1)
        async with self.engine.connect() as conn:
            row = (await conn.execute(stmt)).mappings().first()
        return None if row is None else self._loaded(row)

    async def find_all(self) -> list[Record]:
        sa = _ensure_sa()
        stmt = sa.select(self.table).order_by(self.table.c[self.primary_key])
        async with self.engine.connect() as conn:
            rows = (await conn.execute(stmt)).mappings().all()
        return [self._loaded(row) for row in rows]

    def build(self, data: Mapping[str, Any]) -> Record:
        """Unsaved record holding only the given columns, so column defaults apply on insert."""
        return Record({k: v for k, v in data.items() if k in self.table.c}, store=self)

    # RecordStore

    async def save_record(self, record: Record) -> None:
        sa = _ensure_sa()
        values = {k: v for k, v in record.to_dict().items() if k in self.table.c}
        pk_column = self.table.c[self.primary_key]

        async with self.engine.begin() as conn:
            if record.is_persisted:
                key = values.pop(self.primary_key)
                await conn.execute(sa.update(self.table).where(pk_column == key).values(**values))
            else:
                result = await conn.execute(sa.insert(self.table).values(**values))
                key = result.inserted_primary_key[0]
            row = (await conn.execute(sa.select(self.table).where(pk_column == key))).mappings().one()

        record._data.update(row)
        record.mark_persisted()
        logger.debug("Saved %s %s=%r", self.name, self.primary_key, key)

    async def destroy_record(self, record: Record) -> None:
        sa = _ensure_sa()
        key = record._data.get(self.primary_key)
        async with self.engine.begin() as conn:
            result = await conn.execute(
                sa.delete(self.table).where(self.table.c[self.primary_key] == key)
            )
        if result.rowcount == 0:
            raise LookupError(f"{self.name} with {self.primary_key}={key!r} is not stored")
        record.mark_persisted(False)
        logger.debug("Destroyed %s %s=%r", self.name, self.primary_key, key)
