"""
Middleware for request context and logging
"""

import json
import re
from collections.abc import Callable
from typing import Any

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from .hashing import normalize_hash
from .logging import bind_request_context, clear_request_context, get_logger

logger = get_logger(__name__)

REDACTED_GRAPHQL_PARAMS = ("query", "variables", "extensions")


def _operation_from_payload(data: dict[str, Any]) -> str | None:
    op = data.get("operationName")
    if isinstance(op, str) and op:
        return op

    if data.get("persisted") in (True, "true", "1"):
        return "persisted_operation"

    q = data.get("query", "")
    if not isinstance(q, str) or not q:
        return None
    if "__schema" in q or "IntrospectionQuery" in q:
        return "__introspection"

    match = re.search(r"\bquery\s+(\w+)", q) or re.search(r"\bmutation\s+(\w+)", q)
    if match:
        kind = "mutation:" if q.lstrip().startswith("mutation") else ""
        return f"{kind}{match.group(1)}"
    return "unnamed_operation"


def _persisted_hash_from_payload(data: dict[str, Any]) -> str | None:
    extensions = data.get("extensions")
    if isinstance(extensions, str):
        try:
            extensions = json.loads(extensions)
        except json.JSONDecodeError:
            return None
    if not isinstance(extensions, dict):
        return None

    persisted_query = extensions.get("persistedQuery")
    if isinstance(persisted_query, dict):
        return normalize_hash(persisted_query.get("sha256Hash"))
    return None


async def extract_graphql_details(
    request: Request, graphql_path: str = "/graphql"
) -> tuple[str | None, str | None]:
    """Return the GraphQL operation name and persisted query hash of a request, if any."""
    if request.url.path != graphql_path:
        return None, None

    if request.method == "GET":
        data: Any = dict(request.query_params)
    elif request.method == "POST":
        try:
            body = await request.body()
            if not body:
                return None, None
            data = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError):
            return None, None
    else:
        return None, None

    if not isinstance(data, dict):
        return None, None
    return _operation_from_payload(data), _persisted_hash_from_payload(data)


class LoggingContextMiddleware(BaseHTTPMiddleware):
    """Middleware to set logging context for each request."""

    def __init__(self, app: Any, graphql_path: str = "/graphql"):
        super().__init__(app)
        self.graphql_path = graphql_path

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and set logging context."""
        try:
            query_params = None
            if request.query_params:
                query_params = dict(request.query_params)
                # Never log raw GraphQL payloads from the query string
                if request.url.path == self.graphql_path:
                    for key in REDACTED_GRAPHQL_PARAMS:
                        if key in query_params:
                            query_params[key] = "[REDACTED]"

            graphql_operation, query_hash = await extract_graphql_details(
                request, self.graphql_path
            )
            request_id = bind_request_context(query_hash=query_hash)

            log_data: dict[str, Any] = {
                "method": request.method,
                "path": request.url.path,
                "query_params": query_params,
                "user_agent": request.headers.get("user-agent"),
                "remote_addr": request.client.host if request.client else None,
            }
            if graphql_operation:
                log_data["graphql_operation"] = graphql_operation

            logger.info("Request started", **log_data)

            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id

            logger.info(
                "Request completed",
                status_code=response.status_code,
                method=request.method,
                path=request.url.path,
                graphql_operation=graphql_operation,
            )

            return response

        except Exception as e:
            logger.error(
                "Request failed",
                method=request.method,
                path=request.url.path,
                error=str(e),
            )
            raise

        finally:
            clear_request_context()
