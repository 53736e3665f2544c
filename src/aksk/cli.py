"""aksk CLI - Sign, send and verify AKSK-authenticated requests."""

import asyncio
import json
import sys
from collections.abc import Callable, Coroutine
from pathlib import Path
from typing import Any, ParamSpec, TypeVar

import click
from rich.console import Console
from rich.table import Table

from aksk.auth.config import AuthConfig
from aksk.auth.digest import DigestEngine, get_encoding
from aksk.auth.errors import AkskError, ConfigurationError
from aksk.auth.signer import RequestSigner
from aksk.auth.store import StaticSecretStore
from aksk.auth.verifier import Verifier
from aksk.client import SigningClient, SigningClientError
from aksk.common.settings import Settings

console = Console()

P = ParamSpec("P")
R = TypeVar("R")


def async_command(f: Callable[P, Coroutine[Any, Any, R]]) -> Callable[P, R]:
    """Decorator to run async commands."""

    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        return asyncio.run(f(*args, **kwargs))

    return wrapper


def _read_body(data: str | None, data_file: str | None) -> bytes:
    if data is not None and data_file is not None:
        console.print("[red]Use either --data or --data-file, not both[/red]")
        sys.exit(1)
    if data_file:
        path = Path(data_file)
        if not path.exists():
            console.print(f"[red]Body file not found: {data_file}[/red]")
            sys.exit(1)
        return path.read_bytes()
    return (data or "").encode("utf-8")


def _credentials(ctx: click.Context, access_key: str | None, secret_key: str | None) -> tuple[str, str]:
    settings: Settings = ctx.obj["settings"]
    access_key = access_key or settings.access_key
    secret_key = secret_key or settings.secret_key
    if not access_key or not secret_key:
        console.print("[red]Access key and secret key are required (options or AKSK_ACCESS_KEY/AKSK_SECRET_KEY)[/red]")
        sys.exit(1)
    return access_key, secret_key


def _parse_headers(values: tuple[str, ...]) -> dict[str, str]:
    headers: dict[str, str] = {}
    for value in values:
        name, sep, content = value.partition(":")
        if not sep:
            console.print(f"[red]Invalid header (expected 'Name: value'): {value}[/red]")
            sys.exit(1)
        headers[name.strip()] = content.strip()
    return headers


@click.group()
@click.option("--hash", "hash_name", default=None, help="Hash algorithm (default: sha256)")
@click.option(
    "--encoding",
    type=click.Choice(["hex", "base64", "base64url", "base64-raw", "base64url-raw"]),
    default=None,
    help="Transport encoding (default: hex)",
)
@click.pass_context
def cli(ctx: click.Context, hash_name: str | None, encoding: str | None) -> None:
    """aksk CLI - Access-key/secret-key request signing."""
    ctx.ensure_object(dict)
    settings = ctx.obj.get("settings") or Settings()
    overrides: dict[str, Any] = {}
    if hash_name:
        overrides["hash_algorithm"] = hash_name
    if encoding:
        overrides["encoding"] = encoding
    if overrides:
        settings = settings.model_copy(update=overrides)
    ctx.obj["settings"] = settings

    try:
        ctx.obj["config"] = AuthConfig(
            digest=DigestEngine(settings.hash_algorithm, get_encoding(settings.encoding)),
            max_age=settings.max_age_seconds,
            max_future_skew=settings.max_future_skew_seconds,
            nonce_bytes=settings.nonce_bytes,
        )
    except ConfigurationError as exc:
        console.print(f"[red]Invalid configuration: {exc}[/red]")
        sys.exit(1)


# === Signing ===


@cli.command("sign")
@click.option("--access-key", "-a", help="Access key")
@click.option("--secret-key", "-s", help="Secret key")
@click.option("--method", "-X", default="POST", show_default=True, help="HTTP method")
@click.option("--url", "-u", default="/", show_default=True, help="Request URL")
@click.option("--data", "-d", default=None, help="Request body")
@click.option("--data-file", default=None, help="Read request body from file")
@click.option("--json-output", is_flag=True, help="Print headers as JSON")
@click.pass_context
def sign_cmd(
    ctx: click.Context,
    access_key: str | None,
    secret_key: str | None,
    method: str,
    url: str,
    data: str | None,
    data_file: str | None,
    json_output: bool,
) -> None:
    """Compute AKSK headers for a request."""
    access_key, secret_key = _credentials(ctx, access_key, secret_key)
    body = _read_body(data, data_file)

    try:
        signed = RequestSigner(access_key, secret_key, ctx.obj["config"]).sign(method, url, body)
    except AkskError as exc:
        console.print(f"[red]Signing failed: {exc.message}[/red]")
        sys.exit(1)

    if json_output:
        click.echo(json.dumps(signed.headers, indent=2))
        return

    table = Table(title=f"{signed.method} {signed.url}")
    table.add_column("Header", style="cyan")
    table.add_column("Value", style="green")
    for name, value in signed.headers.items():
        table.add_row(name, value)
    console.print(table)


@cli.command("send")
@click.option("--access-key", "-a", help="Access key")
@click.option("--secret-key", "-s", help="Secret key")
@click.option("--method", "-X", default="POST", show_default=True, help="HTTP method")
@click.option("--data", "-d", default=None, help="Request body")
@click.option("--data-file", default=None, help="Read request body from file")
@click.option("--header", "-H", "extra_headers", multiple=True, help="Extra header 'Name: value'")
@click.argument("url")
@click.pass_context
@async_command
async def send_cmd(
    ctx: click.Context,
    access_key: str | None,
    secret_key: str | None,
    method: str,
    data: str | None,
    data_file: str | None,
    extra_headers: tuple[str, ...],
    url: str,
) -> None:
    """Sign and send a request to URL."""
    access_key, secret_key = _credentials(ctx, access_key, secret_key)
    body = _read_body(data, data_file)
    headers = _parse_headers(extra_headers)
    settings: Settings = ctx.obj["settings"]

    async with SigningClient(
        access_key,
        secret_key,
        config=ctx.obj["config"],
        timeout=settings.http_timeout,
    ) as client:
        try:
            response = await client.request(method, url, body, headers)
        except SigningClientError as exc:
            console.print(f"[red]Error: {exc}[/red]")
            sys.exit(1)

    style = "green" if response.status < 400 else "red"
    console.print(f"[{style}]HTTP {response.status}[/{style}]")
    click.echo(response.body.decode("utf-8", errors="replace"))
    if response.status >= 400:
        sys.exit(1)


# === Verification ===


@cli.command("verify")
@click.option("--secret-key", "-s", help="Secret key for the access key in the headers")
@click.option("--header", "-H", "raw_headers", multiple=True, help="Request header 'Name: value'")
@click.option("--data", "-d", default=None, help="Request body")
@click.option("--data-file", default=None, help="Read request body from file")
@click.option("--skip-body", is_flag=True, help="Do not check the body hash")
@click.pass_context
def verify_cmd(
    ctx: click.Context,
    secret_key: str | None,
    raw_headers: tuple[str, ...],
    data: str | None,
    data_file: str | None,
    skip_body: bool,
) -> None:
    """Verify AKSK headers captured from a request."""
    headers = _parse_headers(raw_headers)
    body = _read_body(data, data_file)
    settings: Settings = ctx.obj["settings"]

    keys = dict(settings.access_keys)
    if secret_key:
        access_key = {k.lower(): v for k, v in headers.items()}.get("x-auth-accesskey", "")
        if access_key:
            keys[access_key] = secret_key

    verifier = Verifier(StaticSecretStore(keys), config=ctx.obj["config"], skip_body=skip_body)
    try:
        signed = verifier.verify(headers, lambda: body)
    except AkskError as exc:
        console.print(f"[red]✗ Rejected: {exc.kind.value} ({exc.message})[/red]")
        sys.exit(1)

    console.print(f"[green]✓ Request from {signed.access_key} is valid[/green]")


# === Server ===


@cli.command("serve")
@click.option("--host", default=None, help="Bind host")
@click.option("--port", default=None, type=int, help="Bind port")
@click.pass_context
def serve_cmd(ctx: click.Context, host: str | None, port: int | None) -> None:
    """Run the demo echo service behind AKSK middleware."""
    import uvicorn

    from aksk.common.logging import setup_logging
    from aksk.server.main import create_app

    settings: Settings = ctx.obj["settings"]
    setup_logging(settings.log_level, settings.log_json)
    app = create_app(settings)
    uvicorn.run(
        app,
        host=host or settings.host,
        port=port or settings.port,
        log_level=settings.log_level.lower(),
    )


def main() -> None:
    """CLI entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
