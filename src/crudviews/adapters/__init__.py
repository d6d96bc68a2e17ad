"""
Entity adapters.

- ``MemoryEntity``: in-process store
- ``TableEntity``: SQLAlchemy Core table (``crudviews.adapters.sqlalchemy``,
  needs the ``sql`` extra)
"""

from crudviews.adapters.base import Record
from crudviews.adapters.memory import MemoryEntity, entity_from_model

__all__ = ["MemoryEntity", "Record", "entity_from_model"]
