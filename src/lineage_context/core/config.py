"""Configuration management.

Uses pydantic-settings for type-safe configuration from environment variables.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_LINEAGE_CLASSIFICATION_TYPES = frozenset(
    {"Confidentiality", "Confidence", "Criticality", "Impact", "Retention"}
)


class Settings(BaseSettings):
    """Application settings.

    All settings can be overridden via environment variables.
    Prefix: LINEAGE_CONTEXT_
    """

    model_config = SettingsConfigDict(
        env_prefix="LINEAGE_CONTEXT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Metadata store (SQLAlchemy)
    database_url: str = Field(
        default="sqlite:///./lineage_metadata.db",
        description="SQLAlchemy database URL of the metadata store",
    )

    # Traversal
    supported_zones: list[str] = Field(
        default_factory=list,
        description="Zones the assembler may read entities from (empty = all zones)",
    )
    lineage_classification_types: set[str] = Field(
        default_factory=lambda: set(DEFAULT_LINEAGE_CLASSIFICATION_TYPES),
        description="Classifications copied into the context as auxiliary edges",
    )
    max_traversal_depth: int = Field(
        default=64,
        ge=1,
        description="Maximum number of hops followed along one branch",
    )

    # Logging
    log_level: str = Field(default="WARNING")
    log_format: str = Field(default="console")  # 'json' or 'console'


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
