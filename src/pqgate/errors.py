"""Error kinds, exceptions and the mapping of resolution failures to HTTP responses."""

from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class ErrorKind(StrEnum):
    """Failure kinds produced by the resolution engine.

    The values are the exact messages of the automatic persisted queries protocol.
    """

    QUERY_NOT_FOUND = "QueryNotFound"
    PERSISTED_QUERY_NOT_SUPPORTED = "PersistedQueryNotSupported"
    PERSISTED_QUERY_NOT_FOUND = "PersistedQueryNotFound"
    UNKNOWN_PERSISTED_QUERY = "UnknownPersistedQuery"


STORE_UNAVAILABLE_MESSAGE = "PersistedQueryStoreUnavailable"


class PqgateException(Exception):
    """Base exception for pqgate."""

    pass


class ConfigurationError(PqgateException):
    """Invalid setup-time configuration. Raised before any request is served."""

    pass


class RequestParseError(PqgateException):
    """The inbound HTTP request could not be turned into a GraphQL request."""

    pass


@dataclass(frozen=True)
class ErrorResponse:
    """Status code and JSON body the transport should emit for a failure."""

    status_code: int
    body: dict[str, Any]


def graphql_error_body(message: str) -> dict[str, Any]:
    """Build a GraphQL response body carrying a single error and no data."""
    return {"data": None, "errors": [{"message": message}]}


def map_error(kind: ErrorKind) -> ErrorResponse:
    """Map a resolution failure to the response the client receives.

    ``UnknownPersistedQuery`` is a policy rejection, so it becomes a plain
    HTTP 400 rather than a GraphQL error payload.
    """
    if kind is ErrorKind.UNKNOWN_PERSISTED_QUERY:
        return ErrorResponse(status_code=400, body={"detail": kind.value})
    return ErrorResponse(status_code=200, body=graphql_error_body(kind.value))


def map_store_failure() -> ErrorResponse:
    """Response for a store lookup that failed for infrastructure reasons."""
    return ErrorResponse(status_code=500, body=graphql_error_body(STORE_UNAVAILABLE_MESSAGE))


def map_parse_error(error: RequestParseError) -> ErrorResponse:
    """Response for a request that could not be parsed."""
    return ErrorResponse(status_code=400, body={"detail": str(error)})
