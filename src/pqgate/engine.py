"""
Persisted query resolution engine.

Decides which query text a request executes, consulting the configured
store according to the active mode, or reports the protocol error the
client should receive.
"""

import asyncio
import inspect
from dataclasses import dataclass

from .errors import ConfigurationError, ErrorKind
from .hashing import normalize_hash, verify
from .logging import get_logger
from .modes import PersistedQueryMode, PersistedQuerySettings, SaveQuery
from .request import IncomingRequest
from .stores.base import StoreLookupError

logger = get_logger(__name__)

SUPPORTED_EXTENSION_VERSION = 1


@dataclass(frozen=True)
class Resolved:
    """The request resolved to executable query text."""

    query: str
    hash: str | None = None


@dataclass(frozen=True)
class Failed:
    """The request could not be resolved."""

    kind: ErrorKind


ResolutionOutcome = Resolved | Failed


class ResolutionEngine:
    """Applies a persisted query mode to incoming requests.

    One engine is shared by all requests of a registered GraphQL endpoint.
    Background saves are tracked so they can be drained at shutdown.
    """

    def __init__(self, settings: PersistedQuerySettings):
        self.settings = settings
        self._pending_saves: set[asyncio.Task[None]] = set()

    @property
    def mode(self) -> PersistedQueryMode:
        return self.settings.mode

    async def resolve(self, request: IncomingRequest) -> ResolutionOutcome:
        """Resolve the query text for ``request``.

        Raises:
            StoreLookupError: If the store failed while looking up a hash
        """
        if not self.settings.enabled:
            if request.query is None:
                return Failed(ErrorKind.QUERY_NOT_FOUND)
            return Resolved(request.query)

        if request.persisted and self.mode.allows_shorthand:
            if request.query is None:
                return Failed(ErrorKind.QUERY_NOT_FOUND)
            return await self._resolve_from_store(request.query)

        if request.has_persisted_query:
            query_hash = self._extension_hash(request)
            if query_hash is None:
                return Failed(ErrorKind.PERSISTED_QUERY_NOT_SUPPORTED)

            if request.query is None:
                return await self._resolve_from_store(query_hash)

            if not self.mode.allows_bare_queries:
                outcome = await self._resolve_from_store(query_hash)
                if isinstance(outcome, Failed):
                    return Failed(ErrorKind.UNKNOWN_PERSISTED_QUERY)
                return outcome

            await self._start_save(query_hash, request.query)
            return Resolved(request.query, query_hash)

        if request.query is None:
            return Failed(ErrorKind.QUERY_NOT_FOUND)

        if not self.mode.allows_bare_queries:
            logger.info("Rejected query not in the prepared allow-list")
            return Failed(ErrorKind.UNKNOWN_PERSISTED_QUERY)

        return Resolved(request.query)

    def _extension_hash(self, request: IncomingRequest) -> str | None:
        """Return the normalized hash of a usable persistedQuery extension, else None."""
        version = request.extension_version
        # Exact int only: JSON true and 1.0 are not version 1
        if version is not None and (
            type(version) is not int or version != SUPPORTED_EXTENSION_VERSION
        ):
            logger.debug("Unsupported persisted query version", version=version)
            return None
        return normalize_hash(request.hash)

    async def _resolve_from_store(self, key: str) -> ResolutionOutcome:
        query = await self._lookup(key)
        if query is None:
            return Failed(ErrorKind.PERSISTED_QUERY_NOT_FOUND)
        return Resolved(query, key)

    async def _lookup(self, key: str) -> str | None:
        store = self.settings.store
        if store is None:
            raise ConfigurationError(f"Mode '{self.mode.value}' has no persisted query store")

        try:
            if self.settings.lookup_timeout is None:
                return await store.lookup(key)
            return await asyncio.wait_for(store.lookup(key), timeout=self.settings.lookup_timeout)
        except TimeoutError as e:
            logger.error("Persisted query lookup timed out", query_hash=key)
            raise StoreLookupError(f"Lookup for {key} timed out") from e
        except Exception as e:
            logger.error("Persisted query lookup failed", query_hash=key, error=str(e))
            raise StoreLookupError(f"Lookup for {key} failed: {e}") from e

    async def _start_save(self, query_hash: str, query: str) -> None:
        """Schedule a best-effort save without waiting for it to finish."""
        save_query = self.settings.save_query
        if save_query is None:
            return

        if not verify(query, query_hash):
            logger.warning("Persisted query hash does not match query text, not saving")
            return

        task = asyncio.create_task(self._save(save_query, query_hash, query))
        self._pending_saves.add(task)
        task.add_done_callback(self._pending_saves.discard)

        # Let the save start so fast stores finish before the response is sent
        await asyncio.sleep(0)

    async def _save(self, save_query: SaveQuery, query_hash: str, query: str) -> None:
        try:
            result = save_query(query_hash, query)
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            logger.warning("Failed to save persisted query", query_hash=query_hash, error=str(e))
            return

        if result is False:
            logger.warning("Persisted query store declined save", query_hash=query_hash)
        else:
            logger.debug("Persisted query saved", query_hash=query_hash)

    @property
    def pending_saves(self) -> int:
        return len(self._pending_saves)

    async def wait_for_pending_saves(self, timeout: float | None = None) -> None:
        """Wait for in-flight saves, cancelling whatever is left after ``timeout``."""
        if not self._pending_saves:
            return

        pending = list(self._pending_saves)
        _, still_running = await asyncio.wait(pending, timeout=timeout)
        if not still_running:
            return

        for task in still_running:
            task.cancel()
        await asyncio.gather(*still_running, return_exceptions=True)
        logger.warning("Cancelled unfinished persisted query saves", count=len(still_running))

    async def close(self) -> None:
        """Drain pending saves and close the store."""
        await self.wait_for_pending_saves(timeout=5.0)
        if self.settings.store is not None:
            await self.settings.store.close()
