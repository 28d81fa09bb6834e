"""Persisted query modes and the settings object binding a mode to a store.

A ``PersistedQuerySettings`` instance is built once when GraphQL is
registered and shared read-only by every request. ``PersistedQueryDefaults``
provides the supported combinations::

    PersistedQueryDefaults.automatic()
    PersistedQueryDefaults.prepared({"<hash>": "{ add(x: 1, y: 1) }"})
    PersistedQueryDefaults.prepared_only({"<hash>": "{ add(x: 1, y: 1) }"})

Use ``dataclasses.replace`` to override the automatic ``save_query``, for
example ``replace(PersistedQueryDefaults.automatic(), save_query=None)``
keeps hash lookups working while never persisting anything.
"""

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from .errors import ConfigurationError
from .stores.base import PersistedQueryStore
from .stores.implementations.memory import InMemoryQueryStore
from .stores.implementations.prepared import PreparedQueryStore

SaveQuery = Callable[[str, str], Awaitable[Any] | Any]

DEPRECATED_OPTION_MESSAGE = (
    "Please update from persisted_queries to persisted_query_settings, "
    "using PersistedQueryDefaults."
)


class PersistedQueryMode(StrEnum):
    """Operating mode of the resolution engine."""

    AUTOMATIC = "automatic"
    PREPARED = "prepared"
    PREPARED_ONLY = "prepared_only"
    DISABLED = "disabled"

    @property
    def allows_shorthand(self) -> bool:
        """Whether ``{query: <key>, persisted: true}`` is read as a store lookup."""
        return self in (PersistedQueryMode.PREPARED, PersistedQueryMode.PREPARED_ONLY)

    @property
    def allows_bare_queries(self) -> bool:
        """Whether client-supplied query text may be executed."""
        return self is not PersistedQueryMode.PREPARED_ONLY


@dataclass(frozen=True)
class PersistedQuerySettings:
    """Mode, store and persistence policy for the resolution engine."""

    mode: PersistedQueryMode
    store: PersistedQueryStore | None = None
    save_query: SaveQuery | None = None
    lookup_timeout: float | None = None

    def __post_init__(self):
        if not isinstance(self.mode, PersistedQueryMode):
            raise ConfigurationError(f"Unknown persisted query mode: {self.mode!r}")

        if self.mode is PersistedQueryMode.DISABLED:
            return

        if not isinstance(self.store, PersistedQueryStore):
            raise ConfigurationError(
                f"Persisted query mode '{self.mode.value}' requires a PersistedQueryStore, "
                f"got {type(self.store).__name__}"
            )

        if self.mode is not PersistedQueryMode.AUTOMATIC and self.save_query is not None:
            raise ConfigurationError(
                f"Persisted query mode '{self.mode.value}' is read-only and cannot save queries"
            )

        if self.save_query is not None and not callable(self.save_query):
            raise ConfigurationError("save_query must be callable or None")

        if self.lookup_timeout is not None and self.lookup_timeout <= 0:
            raise ConfigurationError("lookup_timeout must be positive")

    @property
    def enabled(self) -> bool:
        return self.mode is not PersistedQueryMode.DISABLED


class PersistedQueryDefaults:
    """Factories for the supported persisted query configurations."""

    @staticmethod
    def automatic(
        store: PersistedQueryStore | None = None, lookup_timeout: float | None = None
    ) -> PersistedQuerySettings:
        """Automatic persisted queries: clients prime the store by sending query and hash."""
        if store is None:
            store = InMemoryQueryStore()
        return PersistedQuerySettings(
            mode=PersistedQueryMode.AUTOMATIC,
            store=store,
            save_query=None if store.read_only else store.save,
            lookup_timeout=lookup_timeout,
        )

    @staticmethod
    def prepared(queries: Mapping[str, str]) -> PersistedQuerySettings:
        """Pre-seeded read-only store; arbitrary queries are still accepted."""
        return PersistedQuerySettings(
            mode=PersistedQueryMode.PREPARED, store=PreparedQueryStore(queries)
        )

    @staticmethod
    def prepared_only(queries: Mapping[str, str]) -> PersistedQuerySettings:
        """Pre-seeded read-only store; only stored queries may execute."""
        return PersistedQuerySettings(
            mode=PersistedQueryMode.PREPARED_ONLY, store=PreparedQueryStore(queries)
        )

    @staticmethod
    def disabled() -> PersistedQuerySettings:
        """Persisted queries off; query text passes through untouched."""
        return PersistedQuerySettings(mode=PersistedQueryMode.DISABLED)


def resolve_registration_options(
    persisted_query_settings: PersistedQuerySettings | None = None,
    only_persisted: bool = False,
    **options: Any,
) -> PersistedQuerySettings:
    """Validate persisted query registration options and return the settings to use.

    Raises:
        ConfigurationError: For the deprecated ``persisted_queries`` option,
            unknown options, or ``only_persisted`` without prepared-only settings
    """
    if "persisted_queries" in options:
        raise ConfigurationError(DEPRECATED_OPTION_MESSAGE)

    if options:
        raise ConfigurationError(f"Unknown GraphQL options: {', '.join(sorted(options))}")

    if persisted_query_settings is None:
        persisted_query_settings = PersistedQueryDefaults.disabled()

    if not isinstance(persisted_query_settings, PersistedQuerySettings):
        raise ConfigurationError(
            "persisted_query_settings must be built with PersistedQueryDefaults"
        )

    if only_persisted and persisted_query_settings.mode is not PersistedQueryMode.PREPARED_ONLY:
        raise ConfigurationError(
            "only_persisted requires PersistedQueryDefaults.prepared_only(...) settings"
        )

    return persisted_query_settings
