"""Pytest configuration and fixtures."""

import time
from unittest.mock import MagicMock

import pytest

from aksk.auth.config import AuthConfig, reset_default_config
from aksk.auth.digest import DigestEngine
from aksk.auth.headers import (
    HEADER_ACCESS_KEY,
    HEADER_BODY_HASH,
    HEADER_NONCE,
    HEADER_SIGNATURE,
    HEADER_TIMESTAMP,
)
from aksk.auth.store import StaticSecretStore
from aksk.common.settings import Settings

ACCESS_KEY = "202cb962ac59075b964b07152d234b70"
SECRET_KEY = "250cf8b51c773f3f8dc8b4be867a9a02"


@pytest.fixture(autouse=True)
def _fresh_default_config():
    """Each test starts with an unfrozen process-wide config."""
    reset_default_config()
    yield
    reset_default_config()


@pytest.fixture
def config() -> AuthConfig:
    """Fresh config with the default digest engine."""
    return AuthConfig()


@pytest.fixture
def store() -> StaticSecretStore:
    return StaticSecretStore({ACCESS_KEY: SECRET_KEY})


@pytest.fixture
def mock_logger() -> MagicMock:
    return MagicMock()


@pytest.fixture
def settings() -> Settings:
    """Create test settings."""
    return Settings(
        access_keys={ACCESS_KEY: SECRET_KEY},
        exempt_paths=("/health", "/metrics"),
        _env_file=None,
    )


def make_headers(
    digest: DigestEngine,
    timestamp: int | str | None = None,
    body: bytes = b"",
    access_key: str = ACCESS_KEY,
    secret_key: str = SECRET_KEY,
    nonce: str = "a1b2c3d4e5f6",
) -> dict[str, str]:
    """Build AKSK headers for an arbitrary timestamp."""
    if timestamp is None:
        timestamp = int(time.time())
    ts = str(timestamp)
    headers = {
        HEADER_ACCESS_KEY: access_key,
        HEADER_TIMESTAMP: ts,
        HEADER_NONCE: nonce,
    }
    elements = [access_key, ts, nonce]
    if body:
        body_hash = digest.encode(digest.hash(body))
        headers[HEADER_BODY_HASH] = body_hash
        elements.append(body_hash)
    headers[HEADER_SIGNATURE] = digest.encode(digest.mac(secret_key, elements))
    return headers
