"""
GraphQL HTTP endpoint with persisted query resolution
"""

import json
from collections.abc import Awaitable, Callable
from typing import Any

import strawberry
from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse
from strawberry.schema.exceptions import InvalidOperationTypeError
from strawberry.types.graphql import OperationType

from ..engine import Failed, ResolutionEngine
from ..errors import (
    ErrorResponse,
    RequestParseError,
    map_error,
    map_parse_error,
    map_store_failure,
)
from ..hashing import normalize_hash
from ..logging import bind_query_hash, get_logger
from ..modes import PersistedQuerySettings, resolve_registration_options
from ..request import IncomingRequest
from ..stores.base import StoreLookupError

logger = get_logger(__name__)

ContextGetter = Callable[[Request], Awaitable[dict[str, Any]]]

# Mutations over GET are refused, as strawberry's own views do
GET_OPERATION_TYPES = frozenset({OperationType.QUERY})
POST_OPERATION_TYPES = frozenset({OperationType.QUERY, OperationType.MUTATION})


async def default_context_getter(request: Request) -> dict[str, Any]:
    """Get the context for GraphQL resolvers."""
    return {"request": request}


def _json_response(error: ErrorResponse) -> JSONResponse:
    return JSONResponse(status_code=error.status_code, content=error.body)


def create_graphql_router(
    schema: strawberry.Schema,
    engine: ResolutionEngine,
    path: str = "/graphql",
    context_getter: ContextGetter | None = None,
) -> APIRouter:
    """Create a FastAPI router serving GET and POST requests for ``schema``."""
    router = APIRouter()
    get_context = context_getter or default_context_getter

    async def handle(
        request: Request,
        graphql_request: IncomingRequest,
        allowed_operation_types: frozenset[OperationType],
    ) -> JSONResponse:
        query_hash = normalize_hash(graphql_request.hash)
        if query_hash:
            bind_query_hash(query_hash)

        try:
            outcome = await engine.resolve(graphql_request)
        except StoreLookupError as e:
            logger.error("Persisted query store unavailable", error=str(e))
            return _json_response(map_store_failure())

        if isinstance(outcome, Failed):
            logger.info("Persisted query resolution failed", kind=outcome.kind.value)
            return _json_response(map_error(outcome.kind))

        try:
            result = await schema.execute(
                outcome.query,
                variable_values=graphql_request.variables,
                context_value=await get_context(request),
                operation_name=graphql_request.operation_name,
                allowed_operation_types=allowed_operation_types,
            )
        except InvalidOperationTypeError as e:
            return JSONResponse(
                status_code=405, content={"detail": e.as_http_error_reason(request.method)}
            )

        body: dict[str, Any] = {"data": result.data}
        if result.errors:
            body["errors"] = [error.formatted for error in result.errors]
        if result.extensions:
            body["extensions"] = result.extensions
        return JSONResponse(content=body)

    @router.get(path)
    async def graphql_get(request: Request) -> JSONResponse:  # pyright: ignore [reportUnusedFunction]
        """Execute a GraphQL request passed in the query string."""
        try:
            graphql_request = IncomingRequest.from_query_params(request.query_params)
        except RequestParseError as e:
            return _json_response(map_parse_error(e))
        return await handle(request, graphql_request, GET_OPERATION_TYPES)

    @router.post(path)
    async def graphql_post(request: Request) -> JSONResponse:  # pyright: ignore [reportUnusedFunction]
        """Execute a GraphQL request passed as a JSON body."""
        try:
            try:
                payload = await request.json()
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                raise RequestParseError("Request body is not valid JSON") from e
            graphql_request = IncomingRequest.from_payload(payload)
        except RequestParseError as e:
            return _json_response(map_parse_error(e))
        return await handle(request, graphql_request, POST_OPERATION_TYPES)

    return router


def register_graphql(
    app: FastAPI,
    schema: strawberry.Schema,
    persisted_query_settings: PersistedQuerySettings | None = None,
    only_persisted: bool = False,
    path: str = "/graphql",
    context_getter: ContextGetter | None = None,
    **options: Any,
) -> ResolutionEngine:
    """Mount a GraphQL endpoint for ``schema`` on ``app``.

    Options are validated here so misconfiguration fails at setup rather
    than on the first request. The engine is stored on
    ``app.state.persisted_query_engine`` and returned.

    Raises:
        ConfigurationError: For deprecated or unknown options and mode mismatches
    """
    settings = resolve_registration_options(
        persisted_query_settings, only_persisted=only_persisted, **options
    )

    engine = ResolutionEngine(settings)
    app.include_router(create_graphql_router(schema, engine, path, context_getter))
    app.state.persisted_query_engine = engine

    logger.info(
        "GraphQL endpoint registered",
        endpoint=path,
        persisted_query_mode=settings.mode.value,
        only_persisted=only_persisted,
    )
    return engine
