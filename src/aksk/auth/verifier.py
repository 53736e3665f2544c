"""Verification of AKSK-signed requests."""

from __future__ import annotations

import hmac
import re
import time
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field

from aksk.auth.config import (
    MAX_AGE_SECONDS,
    MAX_FUTURE_SKEW_SECONDS,
    AuthConfig,
    default_config,
)
from aksk.auth.digest import DigestEngine
from aksk.auth.errors import AkskError, ErrorKind
from aksk.auth.headers import (
    HEADER_ACCESS_KEY,
    HEADER_BODY_HASH,
    HEADER_NONCE,
    HEADER_SIGNATURE,
    HEADER_TIMESTAMP,
)
from aksk.auth.store import SecretLookup, as_secret_store
from aksk.common.metrics import record_verification

_TIMESTAMP_RE = re.compile(r"[+-]?[0-9]{1,19}")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


@dataclass(frozen=True)
class SignedHeaders:
    """Authentication headers of a request whose signature checked out."""

    access_key: str
    timestamp: int
    nonce: str = ""
    body_hash: str = ""
    signature: str = field(default="", repr=False)


def validate_timestamp(
    raw: str,
    now: float | None = None,
    max_age: int = MAX_AGE_SECONDS,
    max_future_skew: int = MAX_FUTURE_SKEW_SECONDS,
) -> int:
    """
    Parse a unix-seconds timestamp and check it against the validity window.

    Args:
        raw: Header value
        now: Current time (defaults to ``time.time()``)
        max_age: Seconds a timestamp may lag behind ``now``
        max_future_skew: Seconds a timestamp may run ahead of ``now``

    Returns:
        The parsed timestamp

    Raises:
        AkskError: timestamp-empty, -malformed, -expired or -future-skew
    """
    if not raw:
        raise AkskError(ErrorKind.TIMESTAMP_EMPTY)
    if not _TIMESTAMP_RE.fullmatch(raw):
        raise AkskError(ErrorKind.TIMESTAMP_MALFORMED, f"not an integer: {raw[:32]!r}")
    timestamp = int(raw)
    if not _INT64_MIN <= timestamp <= _INT64_MAX:
        raise AkskError(ErrorKind.TIMESTAMP_MALFORMED, "out of int64 range")

    if now is None:
        now = time.time()
    delta = now - timestamp
    if delta > max_age:
        raise AkskError(ErrorKind.TIMESTAMP_EXPIRED, f"{int(delta)}s old")
    if delta < -max_future_skew:
        raise AkskError(ErrorKind.TIMESTAMP_FUTURE_SKEW, f"{int(-delta)}s ahead")
    return timestamp


def check_body(digest: DigestEngine, body: bytes, claimed: str) -> None:
    """
    Check a request body against its claimed hash.

    An empty body always passes; it is signed without a hash.
    """
    if not body:
        return
    if not claimed:
        raise AkskError(ErrorKind.BODY_DIGEST_MISSING)
    try:
        expected = digest.decode(claimed)
    except ValueError as exc:
        raise AkskError(ErrorKind.BODY_DIGEST_DECODE_FAILURE, str(exc)) from exc
    if not hmac.compare_digest(expected, digest.hash(body)):
        raise AkskError(ErrorKind.BODY_DIGEST_MISMATCH)


def _lower_headers(headers: Mapping[str, str]) -> dict[str, str]:
    return {key.lower(): value for key, value in headers.items()}


class Verifier:
    """
    Check the AKSK headers (and optionally the body) of inbound requests.

    Checks run in a fixed order and stop at the first failure: access key,
    secret lookup, timestamp window, signature, body hash. Each failure
    raises ``AkskError`` and is reported to the config's logger.
    """

    def __init__(
        self,
        store: SecretLookup | Mapping[str, str] | None,
        config: AuthConfig | None = None,
        skip_body: bool = False,
    ) -> None:
        self._store = as_secret_store(store)
        self._config = config or default_config()
        self._config.freeze()
        self._skip_body = skip_body

    @property
    def config(self) -> AuthConfig:
        return self._config

    @property
    def skip_body(self) -> bool:
        return self._skip_body

    def verify_headers(self, headers: Mapping[str, str]) -> SignedHeaders:
        """Check access key, timestamp and signature."""
        try:
            signed = self._check_headers(headers)
        except AkskError as exc:
            self._rejected(exc, headers)
            raise
        if self._skip_body:
            record_verification("accepted")
        return signed

    def verify_body(self, body: bytes, signed: SignedHeaders) -> None:
        """Check a body against the hash carried in already verified headers."""
        try:
            check_body(self._config.digest, body, signed.body_hash)
        except AkskError as exc:
            self._rejected(exc, {HEADER_ACCESS_KEY: signed.access_key})
            raise
        record_verification("accepted")

    def verify(
        self,
        headers: Mapping[str, str],
        read_body: Callable[[], bytes] | None = None,
    ) -> SignedHeaders:
        """
        Run every check against a request.

        ``read_body`` is only called once the signature has passed and body
        checks are enabled. ``None`` means the request has no body.
        """
        try:
            signed = self._check_headers(headers)
            if not self._skip_body:
                body = b""
                if read_body is not None:
                    try:
                        body = read_body()
                    except Exception as exc:
                        raise AkskError(ErrorKind.BODY_READ_FAILURE, str(exc)) from exc
                check_body(self._config.digest, body, signed.body_hash)
        except AkskError as exc:
            self._rejected(exc, headers)
            raise
        record_verification("accepted")
        return signed

    async def verify_async(
        self,
        headers: Mapping[str, str],
        read_body: Callable[[], Awaitable[bytes]] | None = None,
    ) -> SignedHeaders:
        """Same as ``verify`` with an awaitable body reader."""
        try:
            signed = self._check_headers(headers)
            if not self._skip_body:
                body = b""
                if read_body is not None:
                    try:
                        body = await read_body()
                    except Exception as exc:
                        raise AkskError(ErrorKind.BODY_READ_FAILURE, str(exc)) from exc
                check_body(self._config.digest, body, signed.body_hash)
        except AkskError as exc:
            self._rejected(exc, headers)
            raise
        record_verification("accepted")
        return signed

    def _check_headers(self, headers: Mapping[str, str]) -> SignedHeaders:
        values = _lower_headers(headers)

        access_key = values.get(HEADER_ACCESS_KEY, "")
        if not access_key:
            raise AkskError(ErrorKind.IDENTIFIER_EMPTY)

        # Unknown key and empty secret are indistinguishable to the caller.
        secret = self._store.get(access_key)
        if not secret:
            raise AkskError(ErrorKind.SECRET_NOT_FOUND)

        raw_timestamp = values.get(HEADER_TIMESTAMP, "")
        timestamp = validate_timestamp(
            raw_timestamp,
            max_age=self._config.max_age,
            max_future_skew=self._config.max_future_skew,
        )

        signature = values.get(HEADER_SIGNATURE, "")
        if not signature:
            raise AkskError(ErrorKind.SIGNATURE_EMPTY)

        nonce = values.get(HEADER_NONCE, "")
        body_hash = values.get(HEADER_BODY_HASH, "")
        digest = self._config.digest
        try:
            claimed = digest.decode(signature)
        except ValueError as exc:
            raise AkskError(ErrorKind.SIGNATURE_DECODE_FAILURE, str(exc)) from exc
        expected = digest.mac(secret, (access_key, raw_timestamp, nonce, body_hash))
        if not hmac.compare_digest(claimed, expected):
            raise AkskError(ErrorKind.SIGNATURE_MISMATCH)

        return SignedHeaders(
            access_key=access_key,
            timestamp=timestamp,
            nonce=nonce,
            body_hash=body_hash,
            signature=signature,
        )

    def _rejected(self, exc: AkskError, headers: Mapping[str, str]) -> None:
        access_key = _lower_headers(headers).get(HEADER_ACCESS_KEY, "")
        self._config.report(
            "aksk request rejected",
            kind=exc.kind.value,
            access_key=access_key,
            detail=exc.detail,
        )
        record_verification("rejected", exc.kind.value)
