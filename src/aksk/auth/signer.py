"""Signing of outbound requests."""

from __future__ import annotations

import secrets
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from aksk.auth.config import AuthConfig, default_config
from aksk.auth.errors import AkskError, ErrorKind
from aksk.auth.headers import (
    HEADER_ACCESS_KEY,
    HEADER_BODY_HASH,
    HEADER_NONCE,
    HEADER_SIGNATURE,
    HEADER_TIMESTAMP,
)
from aksk.common.metrics import record_signed_request


@dataclass
class SignedRequest:
    """An outbound request with its AKSK headers attached."""

    method: str
    url: str
    body: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)


class RequestSigner:
    """Attach access key, nonce, timestamp, body hash and signature headers."""

    def __init__(
        self,
        access_key: str,
        secret_key: str,
        config: AuthConfig | None = None,
    ) -> None:
        if not access_key:
            raise AkskError(ErrorKind.IDENTIFIER_EMPTY)
        if not secret_key:
            raise AkskError(ErrorKind.SECRET_EMPTY)
        self._access_key = access_key
        self._secret_key = secret_key
        self._config = config or default_config()

    @property
    def access_key(self) -> str:
        return self._access_key

    def __repr__(self) -> str:
        return f"RequestSigner(access_key={self._access_key!r})"

    def _nonce(self) -> str:
        try:
            raw = secrets.token_bytes(self._config.nonce_bytes)
        except (OSError, NotImplementedError) as exc:
            raise AkskError(ErrorKind.RANDOM_SOURCE_FAILURE, str(exc)) from exc
        return self._config.digest.encode(raw)

    def signature_headers(self, body: bytes = b"") -> dict[str, str]:
        """Compute the AKSK headers for a body."""
        digest = self._config.digest
        nonce = self._nonce()
        timestamp = str(int(time.time()))

        headers = {
            HEADER_ACCESS_KEY: self._access_key,
            HEADER_NONCE: nonce,
            HEADER_TIMESTAMP: timestamp,
        }
        elements = [self._access_key, nonce, timestamp]
        if body:
            body_hash = digest.encode(digest.hash(body))
            elements.append(body_hash)
            headers[HEADER_BODY_HASH] = body_hash

        headers[HEADER_SIGNATURE] = digest.encode(digest.mac(self._secret_key, elements))
        return headers

    def sign(self, method: str, url: str, body: bytes | str = b"") -> SignedRequest:
        """
        Sign a request.

        Args:
            method: HTTP method
            url: Request URL
            body: Request body; ``str`` is encoded as UTF-8

        Returns:
            SignedRequest carrying the AKSK headers

        Raises:
            AkskError: If the random source fails
        """
        if isinstance(body, str):
            body = body.encode("utf-8")
        headers = self.signature_headers(body)
        record_signed_request(method)
        return SignedRequest(method=method.upper(), url=url, body=body, headers=headers)


RequestFunc = Callable[..., SignedRequest]


def new_request_func(
    access_key: str,
    secret_key: str,
    config: AuthConfig | None = None,
) -> RequestFunc:
    """Bind credentials once and return a ``(method, url, body)`` signer."""
    signer = RequestSigner(access_key, secret_key, config)

    def request_func(method: str, url: str, body: bytes | str = b"") -> SignedRequest:
        return signer.sign(method, url, body)

    return request_func


def sign_request(
    access_key: str,
    secret_key: str,
    method: str,
    url: str,
    body: bytes | str = b"",
    config: AuthConfig | None = None,
) -> SignedRequest:
    """Sign a single request."""
    return RequestSigner(access_key, secret_key, config).sign(method, url, body)
