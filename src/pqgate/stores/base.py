"""Core persisted query store interface and exceptions."""

from abc import ABC, abstractmethod

from ..errors import PqgateException


class StoreException(PqgateException):
    """Base exception for store operations."""

    pass


class StoreLookupError(StoreException):
    """A lookup failed for infrastructure reasons.

    Distinct from a missing entry: the caller cannot tell whether the query exists.
    """

    pass


class PersistedQueryStore(ABC):
    """Abstract base class for persisted query stores.

    ``lookup`` must be idempotent and free of side effects so it can run
    concurrently without coordination. Stores that cannot persist new
    entries set ``read_only`` and keep the no-op ``save``.
    """

    read_only: bool = True

    @abstractmethod
    async def lookup(self, query_hash: str) -> str | None:
        """Return the query text stored under ``query_hash``, or None.

        Raises:
            StoreException: When the backing system cannot be queried
        """
        pass

    async def save(self, query_hash: str, query: str) -> bool:
        """Persist ``query`` under ``query_hash``.

        Returns:
            True if the entry was written, False if the store declined it
        """
        _ = query_hash, query
        return False

    async def close(self) -> None:
        """Release any resources held by the store."""
        return None
