"""
Configuration management using Pydantic Settings.

All configuration is loaded from environment variables with sensible defaults.
Use a .env file for local development. Settings are built once at process
entry and passed explicitly to the components that need them.

Environment Variables:
    OPENAI_API_KEY: Provider API key (required for index, query and serve)
    API_BASE_URL: Base URL of the OpenAI-compatible provider
    EMBEDDING_MODEL: Model used for chunk and query embeddings
    COMPLETION_MODEL: Model used to generate answers
    INDEX_PATH: Path to the gzip-compressed index file
    MAX_CONTEXT_BYTES: Byte budget for retrieved context
    DOCUMENT_ERROR_POLICY: "fail" or "skip" for unreadable documents
    LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from askdocs.errors import ConfigMissingError


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Provider
    # ==========================================================================
    openai_api_key: Optional[SecretStr] = Field(
        default=None,
        description="API key for the embedding and completion provider",
    )
    api_base_url: str = Field(
        default="https://api.openai.com/v1",
        description="Base URL of the OpenAI-compatible provider API",
    )
    request_timeout: float = Field(
        default=60.0,
        gt=0,
        description="Timeout in seconds for provider requests",
    )
    max_retries: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts per provider request on rate limits and 5xx errors",
    )

    # ==========================================================================
    # Model Configuration
    # ==========================================================================
    embedding_model: str = Field(
        default="text-embedding-ada-002",
        description="Embedding model for chunks and queries",
    )
    embedding_batch_size: int = Field(
        default=2048,
        ge=1,
        description="Maximum number of inputs in one embedding request",
    )
    completion_model: str = Field(
        default="gpt-3.5-turbo-instruct",
        description="Completion model used to answer questions",
    )
    llm_max_tokens: int = Field(
        default=300,
        ge=1,
        le=4096,
        description="Maximum tokens for a generated answer",
    )

    # ==========================================================================
    # Indexing & Retrieval
    # ==========================================================================
    index_path: Path = Field(
        default=Path("index.json.gz"),
        description="Path to the gzip-compressed index file",
    )
    max_context_bytes: int = Field(
        default=6000,
        ge=0,
        description="Maximum total bytes of chunk text passed as context",
    )
    document_error_policy: Literal["fail", "skip"] = Field(
        default="fail",
        description="Abort indexing on an unreadable document, or skip it",
    )
    skip_unreadable_chunks: bool = Field(
        default=False,
        description="Skip chunks whose source document cannot be re-read",
    )
    verify_fingerprints: bool = Field(
        default=True,
        description="Reject source documents changed since indexing",
    )

    # ==========================================================================
    # API Configuration
    # ==========================================================================
    api_host: str = Field(
        default="0.0.0.0",
        description="Host to bind API server",
    )
    api_port: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port for API server",
    )

    # ==========================================================================
    # Observability Configuration
    # ==========================================================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level",
    )

    # ==========================================================================
    # Validators
    # ==========================================================================
    @field_validator("index_path")
    @classmethod
    def resolve_path(cls, v: Path) -> Path:
        """Resolve paths to absolute paths."""
        return v.resolve()

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    # ==========================================================================
    # Computed Properties
    # ==========================================================================
    @property
    def openai_api_key_value(self) -> Optional[str]:
        """Get the actual API key value (use sparingly)."""
        if self.openai_api_key:
            return self.openai_api_key.get_secret_value()
        return None

    def require_api_key(self) -> str:
        """
        Get the API key, failing when it is not configured.

        Raises:
            ConfigMissingError: If OPENAI_API_KEY is unset or empty
        """
        key = self.openai_api_key_value
        if not key:
            raise ConfigMissingError("OPENAI_API_KEY is not set")
        return key


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses LRU cache to ensure settings are only loaded once.
    Call `get_settings.cache_clear()` to reload settings.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
