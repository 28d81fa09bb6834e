"""In-memory read/write store used by automatic persisted queries."""

from collections.abc import Mapping

from ...logging import get_logger
from ..base import PersistedQueryStore

logger = get_logger(__name__)


class InMemoryQueryStore(PersistedQueryStore):
    """Unbounded dict-backed store.

    Entries are content-addressed, so concurrent saves for the same hash
    always write the same text and the last writer wins.
    """

    read_only = False

    def __init__(self, initial: Mapping[str, str] | None = None):
        self._queries: dict[str, str] = dict(initial or {})

    async def lookup(self, query_hash: str) -> str | None:
        return self._queries.get(query_hash)

    async def save(self, query_hash: str, query: str) -> bool:
        self._queries[query_hash] = query
        logger.debug("Saved persisted query", query_hash=query_hash, size=len(self._queries))
        return True

    def __len__(self) -> int:
        return len(self._queries)

    def __contains__(self, query_hash: object) -> bool:
        return query_hash in self._queries
