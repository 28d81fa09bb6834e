"""
Normalized GraphQL request, parsed from a POST body or GET query string
"""

import json
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .errors import RequestParseError

TRUTHY_FLAGS = {"true", "1", "yes"}


class IncomingRequest(BaseModel):
    """A GraphQL request as seen by the resolution engine."""

    model_config = ConfigDict(frozen=True)

    query: str | None = None
    hash: str | None = None
    extension_version: Any = None
    has_persisted_query: bool = False
    persisted: bool = False
    variables: dict[str, Any] | None = None
    operation_name: str | None = None

    @field_validator("query", "operation_name", mode="before")
    @classmethod
    def _empty_to_none(cls, value: Any) -> Any:
        if value == "":
            return None
        return value

    @classmethod
    def from_payload(cls, payload: Any) -> "IncomingRequest":
        """Build a request from a decoded JSON POST body.

        Raises:
            RequestParseError: If the payload is not a JSON object or has wrong field types
        """
        if not isinstance(payload, Mapping):
            raise RequestParseError("GraphQL request body must be a JSON object")

        extensions = payload.get("extensions")
        if extensions is not None and not isinstance(extensions, Mapping):
            raise RequestParseError("'extensions' must be an object")

        persisted_query = (extensions or {}).get("persistedQuery")
        fields: dict[str, Any] = {
            "query": payload.get("query"),
            "variables": payload.get("variables"),
            "operation_name": payload.get("operationName"),
            "persisted": _parse_flag(payload.get("persisted")),
        }

        if persisted_query is not None:
            fields["has_persisted_query"] = True
            if isinstance(persisted_query, Mapping):
                fields["extension_version"] = persisted_query.get("version")
                sha256_hash = persisted_query.get("sha256Hash")
                # Non-string hashes are malformed; the engine reports them as unsupported
                fields["hash"] = sha256_hash if isinstance(sha256_hash, str) else None

        try:
            return cls(**fields)
        except ValidationError as e:
            raise RequestParseError(_describe_validation_error(e)) from e

    @classmethod
    def from_query_params(cls, params: Mapping[str, str]) -> "IncomingRequest":
        """Build a request from GET query parameters.

        ``variables`` and ``extensions`` arrive as JSON-encoded strings.
        """
        payload: dict[str, Any] = {
            "query": params.get("query"),
            "operationName": params.get("operationName"),
            "persisted": params.get("persisted"),
        }
        for key in ("variables", "extensions"):
            raw = params.get(key)
            if raw:
                try:
                    payload[key] = json.loads(raw)
                except json.JSONDecodeError as e:
                    raise RequestParseError(f"'{key}' is not valid JSON") from e

        return cls.from_payload(payload)


def _parse_flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in TRUTHY_FLAGS
    return False


def _describe_validation_error(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first["loc"]) or "request"
    return f"Invalid GraphQL request field '{location}': {first['msg']}"
