"""Configuration management using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="AKSK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Digest engine
    hash_algorithm: str = Field(
        default="sha256",
        description="hashlib algorithm name used for body hashes and HMAC",
    )
    encoding: Literal["hex", "base64", "base64url", "base64-raw", "base64url-raw"] = Field(
        default="hex",
        description="Transport encoding for signatures, body hashes and nonces",
    )

    # Verification
    access_keys: dict[str, str] = Field(
        default_factory=dict,
        description="Mapping of access key to secret key (JSON)",
    )
    skip_body: bool = Field(
        default=False,
        description="Skip request body hash verification",
    )
    exempt_paths: tuple[str, ...] = Field(
        default=("/health", "/metrics"),
        description="Paths exempt from AKSK authentication",
    )
    max_age_seconds: int = Field(
        default=300,
        description="Max age (seconds) of a request timestamp",
    )
    max_future_skew_seconds: int = Field(
        default=60,
        description="Max seconds a request timestamp may be ahead of the server clock",
    )

    # Signing
    nonce_bytes: int = Field(
        default=6,
        description="Random bytes per request nonce",
    )
    access_key: str | None = Field(
        default=None,
        description="Access key used by the CLI when signing requests",
    )
    secret_key: str | None = Field(
        default=None,
        description="Secret key used by the CLI when signing requests",
    )
    http_timeout: float = Field(
        default=30.0,
        description="HTTP request timeout in seconds for the signing client",
    )

    # Server
    host: str = Field(
        default="0.0.0.0",
        description="Host for the demo HTTP server",
    )
    port: int = Field(
        default=8080,
        description="Port for the demo HTTP server",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Log level",
    )
    log_json: bool = Field(
        default=False,
        description="Emit JSON log lines",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
