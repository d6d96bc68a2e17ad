"""
In-process entity store.

Useful for tests, prototypes and the CLI. Rows live in a dict keyed by
primary key, in insertion order; every lookup returns a fresh ``Record``
copy, so changes only reach the store through ``save()``.
"""

import itertools
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel

from crudviews.adapters.base import Record
from crudviews.runtime.fields import fields_from_model
from crudviews.specs.entity import FieldDescriptor

logger = logging.getLogger(__name__)


class MemoryEntity:
    """
    Entity kept in memory.

    Args:
        name: Entity name
        fields: Field descriptors, as a mapping or an ordered iterable
        primary_key: Field holding the primary key; integer keys are
            assigned on first save when missing
    """

    def __init__(
        self,
        name: str,
        fields: Mapping[str, FieldDescriptor] | Iterable[FieldDescriptor],
        primary_key: str = "id",
    ):
        self.name = name
        if isinstance(fields, Mapping):
            self._fields = dict(fields)
        else:
            self._fields = {f.name: f for f in fields}
        self.primary_key = primary_key
        self._rows: dict[Any, dict[str, Any]] = {}
        self._ids = itertools.count(1)

    def __repr__(self) -> str:
        return f"MemoryEntity({self.name!r}, rows={len(self._rows)})"

    def __len__(self) -> int:
        return len(self._rows)

    @property
    def fields(self) -> Mapping[str, FieldDescriptor]:
        return self._fields

    async def find_one(self, **where: Any) -> Record | None:
        for row in self._rows.values():
            if all(row.get(key) == value for key, value in where.items()):
                return Record(row, store=self, persisted=True)
        return None

    async def find_all(self) -> list[Record]:
        return [Record(row, store=self, persisted=True) for row in self._rows.values()]

    def build(self, data: Mapping[str, Any]) -> Record:
        """Unsaved record with every declared field present (None when not given)."""
        values = {name: None for name in self._fields}
        values.update(data)
        return Record(values, store=self)

    def clear(self) -> None:
        self._rows.clear()
        self._ids = itertools.count(1)

    # RecordStore

    async def save_record(self, record: Record) -> None:
        key = record._data.get(self.primary_key)
        if key is None:
            key = self._next_id()
            record._data[self.primary_key] = key
        self._rows[key] = dict(record._data)
        record.mark_persisted()
        logger.debug("Saved %s %s=%r", self.name, self.primary_key, key)

    async def destroy_record(self, record: Record) -> None:
        key = record._data.get(self.primary_key)
        if key not in self._rows:
            raise LookupError(f"{self.name} with {self.primary_key}={key!r} is not stored")
        del self._rows[key]
        record.mark_persisted(False)
        logger.debug("Destroyed %s %s=%r", self.name, self.primary_key, key)

    def _next_id(self) -> int:
        key = next(self._ids)
        while key in self._rows:
            key = next(self._ids)
        return key


def entity_from_model(model_cls: type[BaseModel], name: str | None = None) -> MemoryEntity:
    """Describe a pydantic model as an (empty) in-memory entity."""
    return MemoryEntity(name or model_cls.__name__, fields_from_model(model_cls))
