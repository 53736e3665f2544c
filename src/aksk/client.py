"""HTTP client that signs every outbound request with AKSK headers."""

from __future__ import annotations

import json
import ssl
from dataclasses import dataclass
from types import TracebackType
from typing import Any

import aiohttp

from aksk.auth.config import AuthConfig
from aksk.auth.signer import RequestSigner
from aksk.common.logging import get_logger
from aksk.common.settings import Settings

logger = get_logger(__name__)


class SigningClientError(Exception):
    """Transport failure while sending a signed request."""

    pass


@dataclass
class SignedResponse:
    """Response to a signed request."""

    status: int
    body: bytes
    headers: dict[str, str]

    def json(self) -> Any:
        return json.loads(self.body.decode("utf-8"))


class SigningClient:
    """
    Async HTTP client for AKSK-protected services.

    Each call gets a fresh nonce and timestamp; failures are not retried.

    Usage:
        async with SigningClient(ak, sk, base_url="http://svc:8080") as client:
            resp = await client.post("/echo", b'{"param":"a"}')
    """

    def __init__(
        self,
        access_key: str,
        secret_key: str,
        base_url: str = "",
        config: AuthConfig | None = None,
        timeout: float = 30.0,
        ssl_context: ssl.SSLContext | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._signer = RequestSigner(access_key, secret_key, config)
        self._base_url = base_url.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._ssl_context = ssl_context
        self._session = session
        self._owns_session = session is None

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        base_url: str = "",
        config: AuthConfig | None = None,
    ) -> SigningClient:
        return cls(
            access_key=settings.access_key or "",
            secret_key=settings.secret_key or "",
            base_url=base_url,
            config=config or AuthConfig.from_settings(settings),
            timeout=settings.http_timeout,
        )

    async def __aenter__(self) -> SigningClient:
        if self._session is None:
            connector = aiohttp.TCPConnector(ssl=self._ssl_context) if self._ssl_context else None
            self._session = aiohttp.ClientSession(connector=connector, timeout=self._timeout)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def close(self) -> None:
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None

    def _url(self, path_or_url: str) -> str:
        if path_or_url.startswith(("http://", "https://")) or not self._base_url:
            return path_or_url
        return f"{self._base_url}/{path_or_url.lstrip('/')}"

    async def request(
        self,
        method: str,
        url: str,
        body: bytes | str = b"",
        headers: dict[str, str] | None = None,
    ) -> SignedResponse:
        """
        Sign and send a request.

        Args:
            method: HTTP method
            url: Absolute URL or path relative to ``base_url``
            body: Request body
            headers: Extra headers; AKSK headers take precedence

        Returns:
            SignedResponse with status, body and headers

        Raises:
            SigningClientError: On transport failure
        """
        if self._session is None:
            raise SigningClientError("Client is not open; use 'async with'")

        signed = self._signer.sign(method, self._url(url), body)
        merged = dict(headers or {})
        merged.update(signed.headers)

        try:
            async with self._session.request(
                signed.method,
                signed.url,
                data=signed.body or None,
                headers=merged,
            ) as response:
                payload = await response.read()
                if response.status == 401:
                    logger.warning(
                        "Signed request rejected",
                        url=signed.url,
                        access_key=self._signer.access_key,
                    )
                return SignedResponse(
                    status=response.status,
                    body=payload,
                    headers=dict(response.headers),
                )
        except aiohttp.ClientError as exc:
            raise SigningClientError(f"Request to {signed.url} failed: {exc}") from exc

    async def get(self, url: str, headers: dict[str, str] | None = None) -> SignedResponse:
        return await self.request("GET", url, headers=headers)

    async def post(
        self,
        url: str,
        body: bytes | str = b"",
        headers: dict[str, str] | None = None,
    ) -> SignedResponse:
        return await self.request("POST", url, body, headers)

    async def put(
        self,
        url: str,
        body: bytes | str = b"",
        headers: dict[str, str] | None = None,
    ) -> SignedResponse:
        return await self.request("PUT", url, body, headers)

    async def delete(self, url: str, headers: dict[str, str] | None = None) -> SignedResponse:
        return await self.request("DELETE", url, headers=headers)
