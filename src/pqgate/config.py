"""
Configuration management for the pqgate server
"""

from typing import Any

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Persisted queries
    mode: str = "disabled"  # 'automatic', 'prepared', 'prepared_only', 'disabled'
    store_type: str = "memory"  # 'memory', 'redis'
    prepared_queries_path: str | None = None  # YAML/JSON manifest for prepared modes
    lookup_timeout: float | None = 5.0
    only_persisted: bool = False

    # Deprecated: the pre-settings design took a raw mapping here.
    # Rejected at startup, see create_persisted_query_settings().
    persisted_queries: dict[str, Any] | None = None

    # Redis store
    redis_url: str = "redis://localhost:6379/0"
    redis_key_prefix: str = "pqgate:"
    redis_ttl: int | None = None  # seconds, None keeps entries forever

    # API Settings
    graphql_path: str = "/graphql"
    api_host: str = "0.0.0.0"
    api_port: int = 8080
    api_reload: bool = False

    # Environment
    environment: str = "development"  # 'development', 'staging', 'production'
    debug: bool = False
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_prefix = "PQGATE_"
        case_sensitive = False
        extra = "ignore"


# Global settings instance
settings = Settings()
