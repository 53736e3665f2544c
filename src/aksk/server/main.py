"""Echo service behind AKSK middleware, for trying clients against."""

from __future__ import annotations

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route
import uvicorn

from aksk.auth.config import AuthConfig
from aksk.auth.middleware import ErrorHandler, create_auth_middleware
from aksk.auth.store import SecretLookup
from aksk.common.logging import get_logger, setup_logging
from aksk.common.metrics import metrics_endpoint
from aksk.common.settings import Settings, get_settings

logger = get_logger(__name__)


async def handle_health(_request: Request) -> Response:
    return JSONResponse({"status": "ok"})


async def handle_whoami(request: Request) -> Response:
    return JSONResponse({"access_key": getattr(request.state, "access_key", None)})


async def handle_echo(request: Request) -> Response:
    """Return the body exactly as the endpoint received it."""
    body = await request.body()
    return JSONResponse(
        {
            "access_key": getattr(request.state, "access_key", None),
            "body": body.decode("utf-8", errors="replace"),
            "length": len(body),
        }
    )


def create_app(
    settings: Settings | None = None,
    store: SecretLookup | None = None,
    config: AuthConfig | None = None,
    error_handler: ErrorHandler | None = None,
) -> Starlette:
    """Create the Starlette application."""
    settings = settings or get_settings()

    routes = [
        Route("/whoami", handle_whoami, methods=["GET"]),
        Route("/echo", handle_echo, methods=["POST", "PUT"]),
        # Health
        Route("/health", handle_health, methods=["GET"]),
        Route("/metrics", metrics_endpoint, methods=["GET"]),
    ]

    app = Starlette(routes=routes)
    app.add_middleware(
        create_auth_middleware(
            settings,
            store=store,
            config=config,
            error_handler=error_handler,
        )
    )
    return app


def main() -> None:
    """Entry point for the demo server."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_json)
    if not settings.access_keys:
        logger.warning("No access keys configured; every request will be rejected")
    app = create_app(settings)

    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
