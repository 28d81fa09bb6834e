"""GraphQL HTTP integration."""

from .router import create_graphql_router, register_graphql

__all__ = ["create_graphql_router", "register_graphql"]
