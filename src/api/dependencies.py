"""FastAPI dependencies resolving the stores injected at startup."""

from collections.abc import Callable
from typing import Any

from fastapi import Request

from src.domain.store import RecordStore

type AnyStore = RecordStore[Any, Any]


def store_provider(resource_name: str) -> Callable[[Request], AnyStore]:
    """Build a dependency returning the store registered for a resource.

    Stores are created by ``create_app`` and kept in ``app.state.stores``.

    Args:
        resource_name: Resource key, e.g. "users".

    Returns:
        Callable[[Request], AnyStore]: Dependency for ``Depends``.
    """

    def provide_store(request: Request) -> AnyStore:
        stores: dict[str, AnyStore] = request.app.state.stores
        return stores[resource_name]

    provide_store.__name__ = f"get_{resource_name}_store"
    return provide_store
