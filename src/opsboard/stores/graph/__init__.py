"""Microsoft Graph list store."""

from opsboard.stores.graph.store import GraphListStore

__all__ = ["GraphListStore"]
