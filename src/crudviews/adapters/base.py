"""
Record - attribute-style instance used by the bundled adapters.

A record is a dict with attribute access. ``save`` and ``destroy``
delegate to the store that built it.
"""

from collections.abc import Mapping
from typing import Any, Protocol


class RecordStore(Protocol):
    """Persistence side of an adapter."""

    async def save_record(self, record: "Record") -> None: ...

    async def destroy_record(self, record: "Record") -> None: ...


class Record:
    """
    Entity instance backed by a plain dict.

    Examples:
        >>> r = Record({"id": 1, "name": "bolt"})
        >>> r.name
        'bolt'
        >>> r.name = "nut"
        >>> r.to_dict()
        {'id': 1, 'name': 'nut'}
    """

    def __init__(
        self,
        data: Mapping[str, Any] | None = None,
        store: RecordStore | None = None,
        persisted: bool = False,
    ):
        object.__setattr__(self, "_data", dict(data or {}))
        object.__setattr__(self, "_store", store)
        object.__setattr__(self, "_persisted", persisted)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._data[name]
        except KeyError:
            raise AttributeError(f"{type(self).__name__} has no field {name!r}") from None

    def __setattr__(self, name: str, value: Any) -> None:
        self._data[name] = value

    def __getitem__(self, name: str) -> Any:
        return self._data[name]

    def __contains__(self, name: object) -> bool:
        return name in self._data

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Record):
            return NotImplemented
        return self._data == other._data

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._data!r})"

    @property
    def is_persisted(self) -> bool:
        """Whether the record was loaded from, or saved to, its store."""
        return self._persisted

    def mark_persisted(self, persisted: bool = True) -> None:
        object.__setattr__(self, "_persisted", persisted)

    def to_dict(self) -> dict[str, Any]:
        return dict(self._data)

    async def save(self) -> None:
        if self._store is None:
            raise RuntimeError("Record is not attached to a store")
        await self._store.save_record(self)

    async def destroy(self) -> None:
        if self._store is None:
            raise RuntimeError("Record is not attached to a store")
        await self._store.destroy_record(self)
