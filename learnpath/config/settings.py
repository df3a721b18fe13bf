"""LearnPath configuration.

Values come from the process environment or a ``.env`` file. Field names map
to upper-case variables (``CASSANDRA_HOSTS``, ``AUTH_SECRET_KEY``...); lists
are given as JSON (``CASSANDRA_HOSTS='["cass-1","cass-2"]'``).
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


Environment = Literal["development", "staging", "production", "testing"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

# HS256 keys shorter than this are rejected by most identity providers
_MIN_SECRET_LENGTH = 32


class Settings(BaseSettings):
    """Runtime settings for the LearnPath API."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Service identity
    app_name: str = Field(default="learnpath", description="Service name in logs")
    app_version: str = Field(default="0.1.0", description="Reported by /health")
    environment: Environment = Field(
        default="development", description="Deployment stage"
    )
    debug: bool = Field(default=False, description="Reported by /health/ready")

    # Uvicorn (python -m learnpath)
    api_host: str = Field(default="127.0.0.1", description="Bind address")
    api_port: int = Field(default=8000, ge=1, le=65535, description="Bind port")
    api_reload: bool = Field(default=False, description="Reload on code change")

    # Access tokens issued by the identity provider
    auth_secret_key: str = Field(
        default="learnpath-local-signing-key-not-for-production",
        description="Shared HMAC key used to verify access tokens",
    )
    auth_algorithm: str = Field(default="HS256", description="Token algorithm")
    auth_access_token_expire_minutes: int = Field(
        default=30, ge=1, description="Lifetime of locally minted tokens"
    )

    # Cassandra
    cassandra_hosts: list[str] = Field(
        default=["127.0.0.1"], description="Contact points"
    )
    cassandra_port: int = Field(default=9042, description="Native protocol port")
    cassandra_keyspace: str = Field(
        default="learnpath", description="Keyspace holding all tables"
    )
    cassandra_username: str | None = Field(default=None)
    cassandra_password: str | None = Field(default=None)
    cassandra_protocol_version: int = Field(default=4)
    cassandra_datacenter: str = Field(
        default="datacenter1", description="DC name for production replication"
    )
    cassandra_replication_factor: int = Field(
        default=3, ge=1, description="Replicas per DC in production"
    )
    cassandra_connect_timeout: float = Field(default=10.0, description="Seconds")
    cassandra_request_timeout: float = Field(default=10.0, description="Seconds")

    # Catalog
    lecture_position_attempts: int = Field(
        default=3,
        ge=1,
        description="Tries to claim the next lecture position under contention",
    )

    # Logging
    log_level: LogLevel = Field(default="INFO")
    log_format: Literal["json", "console"] = Field(
        default="console", description="Console renderer; files are always JSON"
    )
    log_include_caller_info: bool = Field(default=False)
    log_dir: str = Field(default="logs")
    log_file_max_bytes: int = Field(default=10 * 1024 * 1024)
    log_file_backup_count: int = Field(default=5)
    log_requests: bool = Field(default=True)
    log_exclude_paths: list[str] = Field(default=["/health"])

    # CORS
    cors_origins: list[str] = Field(default=["*"])
    cors_allow_credentials: bool = Field(default=False)
    cors_allow_methods: list[str] = Field(default=["GET", "POST"])
    cors_allow_headers: list[str] = Field(default=["Authorization", "Content-Type"])
    cors_max_age: int = Field(default=600)

    @field_validator("auth_secret_key")
    @classmethod
    def check_secret_length(cls, value: str) -> str:
        if len(value) < _MIN_SECRET_LENGTH:
            msg = f"auth_secret_key must be at least {_MIN_SECRET_LENGTH} characters"
            raise ValueError(msg)
        return value

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
