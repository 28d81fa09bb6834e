"""
FastAPI application factory for serving a GraphQL schema with persisted queries
"""

from contextlib import asynccontextmanager

import strawberry
from fastapi import FastAPI

from .. import __version__
from ..config import Settings
from ..errors import ConfigurationError
from ..graphql.router import register_graphql
from ..logging import configure_logging, get_logger
from ..middleware import LoggingContextMiddleware
from ..modes import DEPRECATED_OPTION_MESSAGE, PersistedQuerySettings
from ..stores.factory import create_persisted_query_settings

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    engine = app.state.persisted_query_engine
    logger.info("Starting pqgate API...", persisted_query_mode=engine.mode.value)

    yield

    logger.info("Shutting down pqgate API...")
    await engine.close()


def create_app(
    schema: strawberry.Schema,
    persisted_query_settings: PersistedQuerySettings | None = None,
    only_persisted: bool | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Persisted query settings come from the environment unless passed in.
    Configuration errors propagate so the server never starts half-configured.
    """
    if settings is None:
        settings = Settings()

    # Rejected even when settings are passed in explicitly
    if settings.persisted_queries is not None:
        raise ConfigurationError(DEPRECATED_OPTION_MESSAGE)

    configure_logging(log_level=settings.log_level, debug=settings.debug)

    if persisted_query_settings is None:
        persisted_query_settings = create_persisted_query_settings(settings)
    if only_persisted is None:
        only_persisted = settings.only_persisted

    app = FastAPI(
        title="pqgate",
        description="GraphQL endpoint with persisted query support",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )

    app.add_middleware(LoggingContextMiddleware, graphql_path=settings.graphql_path)

    @app.get("/health")
    async def health_check():  # pyright: ignore [reportUnusedFunction]
        """Health check endpoint."""
        engine = app.state.persisted_query_engine
        return {
            "status": "healthy",
            "version": __version__,
            "persisted_query_mode": engine.mode.value,
            "pending_saves": engine.pending_saves,
        }

    try:
        register_graphql(
            app,
            schema,
            persisted_query_settings=persisted_query_settings,
            only_persisted=only_persisted,
            path=settings.graphql_path,
        )
    except Exception as e:
        logger.error("Failed to initialize GraphQL endpoint", error=str(e))
        raise

    return app
