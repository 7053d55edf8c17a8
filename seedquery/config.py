"""Application configuration using Pydantic Settings.

All configuration is loaded from environment variables.
No secrets are hardcoded.
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class Scheme(str, Enum):
    """Transport scheme for the vector database."""

    HTTP = "http"
    HTTPS = "https"


class ConsistencyLevel(str, Enum):
    """Replication acknowledgment level for writes.

    Ordered from weakest (one replica acknowledges) to strongest
    (all replicas acknowledge).
    """

    ONE = "ONE"
    QUORUM = "QUORUM"
    ALL = "ALL"


class WeaviateSettings(BaseSettings):
    """Weaviate connection configuration."""

    model_config = SettingsConfigDict(env_prefix="WEAVIATE_")

    host: str = Field(
        default="localhost:8080",
        description="Service address as host[:port]",
    )
    scheme: Scheme = Field(
        default=Scheme.HTTP,
        description="Transport scheme (http or https)",
    )
    grpc_port: int = Field(
        default=50051,
        description="gRPC port used by the client for queries and batches",
    )
    api_key: SecretStr | None = Field(
        default=None,
        description="API key (optional for local)",
    )
    request_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Deadline for a single remote call in seconds",
    )
    init_timeout: float = Field(
        default=10.0,
        gt=0,
        description="Timeout for the initial connection handshake in seconds",
    )
    skip_init_checks: bool = Field(
        default=False,
        description="Skip the readiness and version checks on connect",
    )


class CollectionSettings(BaseSettings):
    """Collection (class) schema configuration."""

    model_config = SettingsConfigDict(env_prefix="COLLECTION_")

    class_name: str = Field(
        default="Book",
        description="Collection name",
    )
    description: str = Field(
        default="all books I have",
        description="Collection description",
    )
    vectorizer_module: str = Field(
        default="text2vec-transformers",
        description="Vectorization module used by the service",
    )
    vectorizer_options: dict[str, Any] = Field(
        default_factory=dict,
        description="Module configuration passed through as-is",
    )
    consistency_level: ConsistencyLevel = Field(
        default=ConsistencyLevel.ALL,
        description="Consistency level requested for batch inserts",
    )


class Settings(BaseSettings):
    """Main application settings.

    Aggregates all configuration sections.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application settings
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    strict: bool = Field(
        default=False,
        description="Exit non-zero when any non-fatal step fails",
    )
    metrics_file: Path | None = Field(
        default=None,
        description="Write Prometheus metrics to this file after the run",
    )

    # Nested settings
    weaviate: WeaviateSettings = Field(default_factory=WeaviateSettings)
    collection: CollectionSettings = Field(default_factory=CollectionSettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()
