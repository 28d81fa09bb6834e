"""Persisted query stores.

This module provides the pluggable storage behind persisted queries:
- In-memory read/write store for automatic persisted queries
- Read-only prepared store for allow-listed operations
- Redis store for sharing automatic persisted queries across processes

Main components:
- PersistedQueryStore: Abstract base class for store implementations
- create_store: Factory for building a store from configuration
- load_prepared_queries: Manifest loader for prepared modes
"""

from .base import (
    PersistedQueryStore,
    StoreException,
    StoreLookupError,
)
from .config import (
    dump_prepared_queries,
    load_prepared_queries,
)
from .implementations.memory import InMemoryQueryStore
from .implementations.prepared import PreparedQueryStore

__all__ = [
    # Base classes and exceptions
    "PersistedQueryStore",
    "StoreException",
    "StoreLookupError",
    # Implementations
    "InMemoryQueryStore",
    "PreparedQueryStore",
    # Configuration
    "load_prepared_queries",
    "dump_prepared_queries",
]
