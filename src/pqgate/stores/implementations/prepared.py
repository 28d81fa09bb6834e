"""Read-only store seeded with a fixed set of prepared queries."""

from collections.abc import Mapping
from types import MappingProxyType

from ..base import PersistedQueryStore


class PreparedQueryStore(PersistedQueryStore):
    """Allow-list of queries known at startup.

    Keys are usually content hashes but any string works: the shorthand
    ``persisted`` transport passes the key verbatim.
    """

    read_only = True

    def __init__(self, queries: Mapping[str, str]):
        for key, query in queries.items():
            if not isinstance(key, str) or not isinstance(query, str):
                raise TypeError(f"Prepared query entries must map str to str, got {key!r}")
        self._queries = MappingProxyType(dict(queries))

    @property
    def queries(self) -> Mapping[str, str]:
        """Read-only view of the prepared queries."""
        return self._queries

    async def lookup(self, query_hash: str) -> str | None:
        return self._queries.get(query_hash)

    def __len__(self) -> int:
        return len(self._queries)

    def __contains__(self, query_hash: object) -> bool:
        return query_hash in self._queries
