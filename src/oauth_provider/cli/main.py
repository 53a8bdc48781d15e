"""CLI entry point for oauth-token-services.

Invoked as::

    oauth-tokens [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m oauth_provider.cli.main

Commands
--------
version         Show version information
request-token   Issue an unauthorized request token
authorize       Authorize a request token for a resource owner
access-token    Promote an authorized request token to an access token
show            Display a stored token
list            List all stored tokens

All token commands operate on a filesystem token store selected with
``--store-dir``.
"""
from __future__ import annotations

import datetime
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from oauth_provider import __version__
from oauth_provider.errors import OAuthTokenError

console = Console()

_DEFAULT_STORE_DIR = ".oauth-tokens"


# ------------------------------------------------------------------
# Shared options
# ------------------------------------------------------------------


def _store_options(func):  # type: ignore[no-untyped-def]
    """Attach the options every token command shares."""
    func = click.option(
        "--audit-log",
        type=click.Path(dir_okay=False),
        default=None,
        help="Append lifecycle events to this JSONL audit file.",
    )(func)
    func = click.option(
        "--access-validity",
        type=click.IntRange(min=1),
        default=60 * 60 * 12,
        show_default=True,
        help="Access token validity in seconds.",
    )(func)
    func = click.option(
        "--request-validity",
        type=click.IntRange(min=1),
        default=60 * 10,
        show_default=True,
        help="Request token validity in seconds.",
    )(func)
    func = click.option(
        "--store-dir",
        type=click.Path(file_okay=False),
        default=_DEFAULT_STORE_DIR,
        show_default=True,
        help="Directory of the filesystem token store.",
    )(func)
    return func


# ------------------------------------------------------------------
# Root group
# ------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="oauth-tokens")
def cli() -> None:
    """OAuth 1.0 provider token lifecycle management"""


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    console.print(f"[bold]oauth-token-services[/bold] v{__version__}")


# ------------------------------------------------------------------
# request-token
# ------------------------------------------------------------------


@cli.command(name="request-token")
@click.argument("consumer_key")
@click.option(
    "--secret-length",
    type=click.IntRange(min=1),
    default=80,
    show_default=True,
    help="Token secret length in bytes, before base64 encoding.",
)
@_store_options
def request_token_command(
    consumer_key: str,
    secret_length: int,
    store_dir: str,
    request_validity: int,
    access_validity: int,
    audit_log: str | None,
) -> None:
    """Issue an unauthorized request token for CONSUMER_KEY."""
    services = _build_services(
        store_dir, request_validity, access_validity, audit_log, secret_length
    )
    token = _run(lambda: services.create_unauthorized_request_token(consumer_key))

    console.print(f"[green]Issued[/green] request token for [bold]{consumer_key}[/bold]")
    console.print(f"  Token:   {token.value}")
    console.print(f"  Secret:  {token.secret}")
    console.print(f"  Expires: {_expiry(token.timestamp, request_validity)}")


# ------------------------------------------------------------------
# authorize
# ------------------------------------------------------------------


@cli.command(name="authorize")
@click.argument("token_value")
@click.argument("principal")
@click.option(
    "--authority",
    "-a",
    multiple=True,
    help="Authority held by the resource owner (repeatable).",
)
@_store_options
def authorize_command(
    token_value: str,
    principal: str,
    authority: tuple[str, ...],
    store_dir: str,
    request_validity: int,
    access_validity: int,
    audit_log: str | None,
) -> None:
    """Authorize request token TOKEN_VALUE on behalf of PRINCIPAL."""
    from oauth_provider.tokens.model import OwnerAuthentication

    services = _build_services(store_dir, request_validity, access_validity, audit_log)
    owner = OwnerAuthentication(principal=principal, authorities=authority)
    token = _run(lambda: services.authorize_request_token(token_value, owner))

    console.print(f"[green]Authorized[/green] request token [bold]{token.value}[/bold]")
    console.print(f"  Owner:   {principal}")
    console.print(f"  Expires: {_expiry(token.timestamp, request_validity)}")


# ------------------------------------------------------------------
# access-token
# ------------------------------------------------------------------


@cli.command(name="access-token")
@click.argument("request_token_value")
@click.option(
    "--secret-length",
    type=click.IntRange(min=1),
    default=80,
    show_default=True,
    help="Token secret length in bytes, before base64 encoding.",
)
@_store_options
def access_token_command(
    request_token_value: str,
    secret_length: int,
    store_dir: str,
    request_validity: int,
    access_validity: int,
    audit_log: str | None,
) -> None:
    """Promote authorized request token REQUEST_TOKEN_VALUE to an access token.

    Prints the protocol response body on standard output.
    """
    from oauth_provider.provider.endpoints import (
        OAUTH_TOKEN,
        OAUTH_TOKEN_SECRET,
        encode_token_response,
    )

    services = _build_services(
        store_dir, request_validity, access_validity, audit_log, secret_length
    )
    token = _run(lambda: services.create_access_token(request_token_value))

    click.echo(
        encode_token_response(
            [(OAUTH_TOKEN, token.value), (OAUTH_TOKEN_SECRET, token.secret)]
        )
    )


# ------------------------------------------------------------------
# show
# ------------------------------------------------------------------


@cli.command(name="show")
@click.argument("token_value")
@_store_options
def show_command(
    token_value: str,
    store_dir: str,
    request_validity: int,
    access_validity: int,
    audit_log: str | None,
) -> None:
    """Display the live token TOKEN_VALUE (the secret is not shown)."""
    services = _build_services(store_dir, request_validity, access_validity, audit_log)
    token = _run(lambda: services.get_token(token_value))
    validity = services.config.validity_seconds_for(token)

    table = Table(title=f"Token — {token.value}", show_header=True)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Type", "access" if token.is_access_token else "request")
    table.add_row("Consumer", token.consumer_key)
    table.add_row("Owner", token.owner.principal if token.owner is not None else "(unauthorized)")
    if token.owner is not None and token.owner.authorities:
        table.add_row("Authorities", ", ".join(token.owner.authorities))
    table.add_row("Issued", _format_millis(token.timestamp))
    table.add_row("Expires", _expiry(token.timestamp, validity))
    console.print(table)


# ------------------------------------------------------------------
# list
# ------------------------------------------------------------------


@cli.command(name="list")
@_store_options
def list_command(
    store_dir: str,
    request_validity: int,
    access_validity: int,
    audit_log: str | None,
) -> None:
    """List every token in the store, including expired ones."""
    services = _build_services(store_dir, request_validity, access_validity, audit_log)
    store = services.store
    values = store.list_values()  # type: ignore[attr-defined]

    if not values:
        console.print("[yellow]No tokens stored.[/yellow]")
        return

    table = Table(title="Stored Tokens", show_header=True)
    table.add_column("Token", style="cyan")
    table.add_column("Type")
    table.add_column("Consumer")
    table.add_column("Owner")
    table.add_column("Expired", justify="center")

    shown = 0
    for value in values:
        token = _run(lambda: store.read(value))
        if token is None:
            continue
        expired = "[red]Yes[/red]" if services.is_expired(token) else "[green]No[/green]"
        table.add_row(
            token.value,
            "access" if token.is_access_token else "request",
            token.consumer_key,
            token.owner.principal if token.owner is not None else "-",
            expired,
        )
        shown += 1

    console.print(table)
    console.print(f"\nTotal: {shown} token(s)")


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------


def _build_services(  # type: ignore[no-untyped-def]
    store_dir: str,
    request_validity: int,
    access_validity: int,
    audit_log: str | None,
    secret_length: int = 80,
):
    """Construct token services over a filesystem store."""
    from oauth_provider.audit import TokenAuditLogger
    from oauth_provider.tokens import (
        FilesystemTokenStore,
        RandomValueTokenServices,
        TokenServicesConfig,
    )

    config = TokenServicesConfig(
        request_token_validity_seconds=request_validity,
        access_token_validity_seconds=access_validity,
        token_secret_length_bytes=secret_length,
    )
    audit = TokenAuditLogger(Path(audit_log)) if audit_log else None
    return RandomValueTokenServices(
        FilesystemTokenStore(Path(store_dir)),
        config=config,
        audit_logger=audit,
    )


def _run(operation):  # type: ignore[no-untyped-def]
    """Run *operation*, turning token errors into a CLI failure."""
    try:
        return operation()
    except (OAuthTokenError, ValueError) as exc:
        console.print(f"[red]Error:[/red] {exc}")
        sys.exit(1)


def _format_millis(millis: int) -> str:
    moment = datetime.datetime.fromtimestamp(millis / 1000, tz=datetime.timezone.utc)
    return moment.isoformat(timespec="seconds")


def _expiry(timestamp: int, validity_seconds: int) -> str:
    return _format_millis(timestamp + validity_seconds * 1000)


if __name__ == "__main__":
    cli()
