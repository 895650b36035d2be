"""PostgreSQL persistence on SQLAlchemy 2.0 async with asyncpg.

Core components:
- **base**: Declarative base with constraint naming conventions
- **models**: The ``users`` table
- **schema**: Idempotent table bootstrap run at startup
- **session**: Engine, session factory, health check
- **store**: ``RecordStore`` implementation over a mapped table
"""

from src.infrastructure.database.base import Base
from src.infrastructure.database.models import UserRecord
from src.infrastructure.database.schema import ensure_schema
from src.infrastructure.database.session import (
    check_database_connection,
    close_database,
    create_database_engine,
    get_async_session,
    get_engine,
    get_session_factory,
)
from src.infrastructure.database.store import SqlRecordStore

__all__ = [
    "Base",
    "SqlRecordStore",
    "UserRecord",
    "check_database_connection",
    "close_database",
    "create_database_engine",
    "ensure_schema",
    "get_async_session",
    "get_engine",
    "get_session_factory",
]
