"""The record store contract shared by the in-memory and SQL backends."""

from collections.abc import Mapping
from typing import Protocol

from src.domain.results import Result


class RecordStore[K, T](Protocol):
    """Persistence for a single entity type keyed by ``K``.

    Implementations assign keys themselves; ``fields`` never contains ``id``.
    ``update`` replaces every non-id field with the supplied values and never
    creates a record. ``delete`` yields ``Success(False)`` when nothing was
    removed.
    """

    async def list_all(self) -> Result[list[T]]:
        """Return every record in a stable order."""
        ...

    async def get(self, key: K) -> Result[T]:
        """Return the record stored under ``key``."""
        ...

    async def create(self, fields: Mapping[str, object]) -> Result[T]:
        """Persist a new record and return it with its assigned key."""
        ...

    async def update(self, key: K, fields: Mapping[str, object]) -> Result[T]:
        """Replace the fields of an existing record."""
        ...

    async def delete(self, key: K) -> Result[bool]:
        """Remove the record if present."""
        ...
