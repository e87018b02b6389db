"""List store implementations and registry."""

from opsboard.stores.factory import available, create_store, register
from opsboard.stores.graph import GraphListStore

register("graph", GraphListStore)

__all__ = ["GraphListStore", "available", "create_store", "register"]
