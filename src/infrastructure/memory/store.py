"""Record store kept in process memory.

Records live in an insertion-ordered dict. All mutations go through a single
``asyncio.Lock``, so concurrent requests never interleave a key assignment
with another write.
"""

import asyncio
import itertools
from collections.abc import Callable, Mapping

from loguru import logger
from pydantic import BaseModel

from src.domain.results import Result, Success, not_found


def sequence_keys(start: int = 1) -> Callable[[], int]:
    """Return a key factory yielding consecutive integers from ``start``."""
    return itertools.count(start).__next__


class InMemoryRecordStore[K, T: BaseModel]:
    """``RecordStore`` backed by a dict.

    Args:
        record_model: Pydantic model of the stored records; must declare ``id``.
        key_factory: Callable producing a fresh, unique key per record.
        entity: Entity label used in messages, e.g. "Item".

    Example:
        items = InMemoryRecordStore(Item, uuid.uuid4, "Item")
    """

    def __init__(
        self,
        record_model: type[T],
        key_factory: Callable[[], K],
        entity: str,
    ) -> None:
        self.record_model = record_model
        self.entity = entity
        self._key_factory = key_factory
        self._records: dict[K, T] = {}
        self._lock = asyncio.Lock()

    def _build(self, key: K, fields: Mapping[str, object]) -> T:
        return self.record_model.model_validate({**fields, "id": key})

    async def list_all(self) -> Result[list[T]]:
        """Return every record in insertion order."""
        return Success(list(self._records.values()))

    async def get(self, key: K) -> Result[T]:
        """Return the record stored under ``key``."""
        record = self._records.get(key)
        if record is None:
            logger.debug("{} not found in memory - ID: {}", self.entity, key)
            return not_found(self.entity, key)
        return Success(record)

    async def create(self, fields: Mapping[str, object]) -> Result[T]:
        """Assign a fresh key and store the record."""
        async with self._lock:
            key = self._key_factory()
            record = self._build(key, fields)
            self._records[key] = record

        logger.info("Created {} with ID: {}", self.entity, key)
        return Success(record)

    async def update(self, key: K, fields: Mapping[str, object]) -> Result[T]:
        """Replace the fields of an existing record, keeping its position."""
        async with self._lock:
            if key not in self._records:
                return not_found(self.entity, key)
            record = self._build(key, fields)
            self._records[key] = record

        logger.info(
            "Updated {} ID {} - fields: {}", self.entity, key, list(fields.keys())
        )
        return Success(record)

    async def delete(self, key: K) -> Result[bool]:
        """Remove the record; ``Success(False)`` if it was not there."""
        async with self._lock:
            removed = self._records.pop(key, None) is not None

        if removed:
            logger.info("Deleted {} with ID: {}", self.entity, key)
        return Success(removed)
