"""In-memory record store."""

from src.infrastructure.memory.store import InMemoryRecordStore, sequence_keys

__all__ = ["InMemoryRecordStore", "sequence_keys"]
