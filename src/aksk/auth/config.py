"""Process configuration shared by signer and verifier."""

from __future__ import annotations

import threading
from typing import Any, Protocol

from aksk.auth.digest import DigestEngine, Encoding, HashSpec, get_encoding
from aksk.auth.errors import ConfigurationError

MAX_AGE_SECONDS = 300  # 5 minutes
MAX_FUTURE_SKEW_SECONDS = 60  # 1 minute
NONCE_BYTES = 6


class AuthLogger(Protocol):
    """Diagnostic sink for rejected requests (structlog compatible)."""

    def warning(self, event: str, **kwargs: Any) -> Any: ...


class DiscardLogger:
    """Logger that drops everything."""

    def warning(self, event: str, **kwargs: Any) -> None:
        pass


class AuthConfig:
    """
    Digest engine, logger and window bounds for signing and verification.

    Setters may only be called before the config is frozen. A ``Verifier``
    freezes its config on construction; after that every setter raises
    ``ConfigurationError`` so in-flight requests signed under one engine are
    never checked under another. Passing ``None`` to a setter keeps the
    current value.
    """

    def __init__(
        self,
        digest: DigestEngine | None = None,
        logger: AuthLogger | None = None,
        max_age: int = MAX_AGE_SECONDS,
        max_future_skew: int = MAX_FUTURE_SKEW_SECONDS,
        nonce_bytes: int = NONCE_BYTES,
    ) -> None:
        if max_age < 0 or max_future_skew < 0:
            raise ConfigurationError("Timestamp window bounds must be non-negative")
        if nonce_bytes <= 0:
            raise ConfigurationError("nonce_bytes must be positive")
        self._digest = digest or DigestEngine()
        self._logger: AuthLogger = logger or DiscardLogger()
        self._max_age = max_age
        self._max_future_skew = max_future_skew
        self._nonce_bytes = nonce_bytes
        self._lock = threading.Lock()
        self._frozen = False

    @classmethod
    def from_settings(cls, settings: Any, logger: AuthLogger | None = None) -> AuthConfig:
        """Build a config from ``aksk.common.settings.Settings``."""
        return cls(
            digest=DigestEngine(settings.hash_algorithm, get_encoding(settings.encoding)),
            logger=logger,
            max_age=settings.max_age_seconds,
            max_future_skew=settings.max_future_skew_seconds,
            nonce_bytes=settings.nonce_bytes,
        )

    @property
    def digest(self) -> DigestEngine:
        return self._digest

    @property
    def logger(self) -> AuthLogger:
        return self._logger

    @property
    def max_age(self) -> int:
        return self._max_age

    @property
    def max_future_skew(self) -> int:
        return self._max_future_skew

    @property
    def nonce_bytes(self) -> int:
        return self._nonce_bytes

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        """Reject any further reconfiguration."""
        with self._lock:
            self._frozen = True

    def _check_writable(self, what: str) -> None:
        if self._frozen:
            raise ConfigurationError(f"Cannot set {what} after verification has started")

    def set_hash(self, hash_func: HashSpec | None) -> None:
        with self._lock:
            self._check_writable("hash")
            if hash_func:
                self._digest = self._digest.with_hash(hash_func)

    def set_encoding(self, encoding: Encoding | None) -> None:
        with self._lock:
            self._check_writable("encoding")
            if encoding is not None:
                self._digest = self._digest.with_encoding(encoding)

    def set_logger(self, logger: AuthLogger | None) -> None:
        with self._lock:
            self._check_writable("logger")
            if logger is not None:
                self._logger = logger

    def report(self, event: str, **kwargs: Any) -> None:
        """Send a warning to the logger collaborator; never raises."""
        try:
            self._logger.warning(event, **kwargs)
        except Exception:  # noqa: BLE001
            return


_default_config: AuthConfig | None = None
_default_lock = threading.Lock()


def default_config() -> AuthConfig:
    """Get the process-wide config used when none is passed explicitly."""
    global _default_config
    with _default_lock:
        if _default_config is None:
            _default_config = AuthConfig()
        return _default_config


def reset_default_config() -> None:
    """Drop the process-wide config (test helper)."""
    global _default_config
    with _default_lock:
        _default_config = None
