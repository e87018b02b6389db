"""Factory for creating list store instances.

Decouples store selection from store implementation: the SDK asks for a
store by the name configured in ``OpsBoardConfig.store`` without importing
concrete backends.
"""

from __future__ import annotations

from typing import Any

from opsboard.contracts.exceptions import ConfigError
from opsboard.contracts.store import ListStore

_REGISTRY: dict[str, type[ListStore]] = {}


def register(name: str, store_cls: type[ListStore]) -> None:
    """Register a store class by name.

    Args:
        name: Store name (e.g. "graph").
        store_cls: Class implementing the ListStore ABC.
    """
    _REGISTRY[name] = store_cls


def available() -> list[str]:
    return sorted(_REGISTRY)


def create_store(name: str, **kwargs: Any) -> ListStore:
    """Create a store instance by name.

    The returned store is an async context manager::

        async with create_store("graph", site_path=..., token=...) as store:
            container = await store.resolve_container()

    Raises:
        ConfigError: If the store name is not registered.
    """
    if name not in _REGISTRY:
        names = ", ".join(available()) or "(none registered)"
        raise ConfigError(f"Unknown store: {name!r}. Available: {names}")
    return _REGISTRY[name](**kwargs)
