"""Factory for creating persisted query stores and settings from configuration."""

from pathlib import Path
from typing import Any

from ..config import Settings
from ..errors import ConfigurationError
from ..logging import get_logger
from ..modes import (
    DEPRECATED_OPTION_MESSAGE,
    PersistedQueryDefaults,
    PersistedQueryMode,
    PersistedQuerySettings,
)
from .base import PersistedQueryStore
from .config import load_prepared_queries
from .implementations.memory import InMemoryQueryStore
from .implementations.prepared import PreparedQueryStore
from .implementations.redis import RedisQueryStore

logger = get_logger(__name__)


def create_store(store_type: str, config: dict[str, Any]) -> PersistedQueryStore:
    """Create a store instance from configuration.

    Args:
        store_type: Type of store ('memory', 'prepared', 'redis')
        config: Store configuration dictionary

    Returns:
        PersistedQueryStore instance

    Raises:
        ValueError: If the store type is unknown or configuration is invalid
    """
    if store_type == "memory":
        return InMemoryQueryStore(config.get("queries"))
    elif store_type == "prepared":
        return _create_prepared_store(config)
    elif store_type == "redis":
        return _create_redis_store(config)
    else:
        raise ValueError(f"Unknown persisted query store type: {store_type}")


def _create_prepared_store(config: dict[str, Any]) -> PreparedQueryStore:
    queries = config.get("queries")
    path = config.get("path")

    if queries is None and path:
        queries = load_prepared_queries(Path(path))
    if queries is None:
        raise ValueError("Prepared store requires 'queries' or 'path' in configuration")

    return PreparedQueryStore(queries)


def _create_redis_store(config: dict[str, Any]) -> RedisQueryStore:
    url = config.get("url")
    if not url:
        raise ValueError("Redis store requires 'url' in configuration")

    return RedisQueryStore.from_url(
        url,
        key_prefix=config.get("key_prefix", "pqgate:"),
        ttl=config.get("ttl"),
    )


def create_persisted_query_settings(settings: Settings | None = None) -> PersistedQuerySettings:
    """Build persisted query settings from application configuration.

    Falls back to the global settings instance when none is given.

    Raises:
        ConfigurationError: For deprecated keys, unknown modes or stores,
            or prepared modes without a manifest
    """
    if settings is None:
        from ..config import settings as global_settings

        settings = global_settings

    if settings.persisted_queries is not None:
        raise ConfigurationError(DEPRECATED_OPTION_MESSAGE)

    try:
        mode = PersistedQueryMode(settings.mode.lower())
    except ValueError as e:
        raise ConfigurationError(f"Unknown persisted query mode: {settings.mode}") from e

    if settings.only_persisted and mode is not PersistedQueryMode.PREPARED_ONLY:
        raise ConfigurationError("only_persisted requires mode 'prepared_only'")

    if mode is PersistedQueryMode.DISABLED:
        return PersistedQueryDefaults.disabled()

    if mode is PersistedQueryMode.AUTOMATIC:
        try:
            store = create_store(settings.store_type, _store_config(settings))
        except ValueError as e:
            raise ConfigurationError(str(e)) from e
        logger.info(
            "Configured automatic persisted queries",
            store_type=settings.store_type,
            lookup_timeout=settings.lookup_timeout,
        )
        return PersistedQueryDefaults.automatic(store, lookup_timeout=settings.lookup_timeout)

    if not settings.prepared_queries_path:
        raise ConfigurationError(f"Mode '{mode.value}' requires prepared_queries_path")

    try:
        queries = load_prepared_queries(Path(settings.prepared_queries_path))
    except ValueError as e:
        raise ConfigurationError(str(e)) from e

    logger.info("Configured prepared persisted queries", mode=mode.value, count=len(queries))
    if mode is PersistedQueryMode.PREPARED:
        return PersistedQueryDefaults.prepared(queries)
    return PersistedQueryDefaults.prepared_only(queries)


def _store_config(settings: Settings) -> dict[str, Any]:
    if settings.store_type == "redis":
        return {
            "url": settings.redis_url,
            "key_prefix": settings.redis_key_prefix,
            "ttl": settings.redis_ttl,
        }
    return {}
