"""Starlette middleware enforcing AKSK authentication."""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Iterable, Mapping
from typing import Union

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from aksk.auth.config import AuthConfig
from aksk.auth.errors import AkskError
from aksk.auth.store import SecretLookup, StaticSecretStore
from aksk.auth.verifier import Verifier
from aksk.common.errors import error_response
from aksk.common.logging import get_logger
from aksk.common.settings import Settings

logger = get_logger(__name__)

ErrorHandler = Callable[[Request, AkskError], Union[Response, Awaitable[Response]]]


def default_error_handler(_request: Request, error: AkskError) -> Response:
    """401 with ``{"message": ...}``."""
    return error_response(error.message, status_code=401)


class AkskAuthMiddleware(BaseHTTPMiddleware):
    """AKSK auth middleware for service-to-service requests."""

    def __init__(
        self,
        app: ASGIApp,
        store: SecretLookup | Mapping[str, str] | None,
        config: AuthConfig | None = None,
        skip_body: bool = False,
        error_handler: ErrorHandler | None = None,
        exempt_paths: Iterable[str] = (),
    ) -> None:
        super().__init__(app)
        self._verifier = Verifier(store, config=config, skip_body=skip_body)
        self._error_handler = error_handler or default_error_handler
        self._exempt_paths = set(exempt_paths)
        logger.info(
            "AKSK authentication enabled",
            skip_body=skip_body,
            hash=self._verifier.config.digest.hash_name,
            encoding=self._verifier.config.digest.encoding.name,
        )

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path in self._exempt_paths:
            return await call_next(request)

        try:
            signed = await self._verifier.verify_async(request.headers, request.body)
        except AkskError as exc:
            response = self._error_handler(request, exc)
            if inspect.isawaitable(response):
                response = await response
            return response

        request.state.access_key = signed.access_key
        return await call_next(request)


def create_auth_middleware(
    settings: Settings,
    store: SecretLookup | None = None,
    config: AuthConfig | None = None,
    error_handler: ErrorHandler | None = None,
) -> type[AkskAuthMiddleware]:
    """
    Factory function to create AKSK middleware from settings.

    Args:
        settings: Application settings
        store: Secret lookup (defaults to ``settings.access_keys``)
        config: Auth config (defaults to one built from settings)
        error_handler: Custom rejection response builder

    Returns:
        Configured middleware class
    """
    resolved_store = store if store is not None else StaticSecretStore(settings.access_keys)
    resolved_config = config or AuthConfig.from_settings(settings, logger=get_logger("aksk.auth"))

    class ConfiguredAkskAuthMiddleware(AkskAuthMiddleware):
        def __init__(self, app: ASGIApp) -> None:
            super().__init__(
                app,
                store=resolved_store,
                config=resolved_config,
                skip_body=settings.skip_body,
                error_handler=error_handler,
                exempt_paths=settings.exempt_paths,
            )

    return ConfiguredAkskAuthMiddleware
