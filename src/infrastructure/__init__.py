"""Infrastructure layer: concrete record stores.

- **memory**: ordered in-process store guarded by an asyncio lock
- **database**: PostgreSQL store on SQLAlchemy 2.0 async with asyncpg

Both implement ``src.domain.store.RecordStore`` and can be swapped at
startup through the ``STORAGE_BACKEND`` setting.
"""
