"""Account, transaction and balance persistence."""

from fd_engine.store.base import AccountStore
from fd_engine.store.memory import InMemoryAccountStore

__all__ = ["AccountStore", "InMemoryAccountStore"]
