"""
Command-line interface for the relay server.

Runs the web server and covers the operator tasks around it: authorizing
with Google from a terminal, forcing a token refresh, and checking the
local credential files.
"""
from collections import deque

import typer
from rich.console import Console
from rich.table import Table
from typer import Argument, Option
from typing_extensions import Annotated

from drive_relay.application.auth_flow import build_authorization_url, exchange_code_for_token
from drive_relay.application.exceptions import ApplicationError
from drive_relay.application.token_lifecycle import force_refresh
from drive_relay.cli.status import run_status_checks
from drive_relay.config import settings
from drive_relay.infrastructure import log_utils

app = typer.Typer(
    name="drive-relay",
    help="Upload files to Google Drive through a small web form.",
    add_completion=False,
)


def _truncate(value: str | None) -> str:
    if not value:
        return "(none)"
    return f"{value[:12]}... (truncated)"


@app.command()
def serve(
    host: Annotated[str, Option(help="Interface to bind.")] = None,
    port: Annotated[int, Option(help="Port to listen on.")] = None,
) -> None:
    """Start the upload server."""
    import uvicorn

    from drive_relay.api import app as web_app

    bind_host = host or settings.HOST
    bind_port = port or settings.PORT
    log_utils.log_message(f"Server started on http://{bind_host}:{bind_port}", "INFO")
    log_utils.log_message("To upload a file, visit the above URL and use the form.", "INFO")
    uvicorn.run(web_app, host=bind_host, port=bind_port)


@app.command("auth-url")
def auth_url() -> None:
    """
    Print the Google authorization URL.
    Open it in a browser and approve access; Google redirects to /googleCallback.
    """
    try:
        url = build_authorization_url()
    except ApplicationError as exc:
        log_utils.log_message(f"Failed to build authorization URL: {exc}", "ERROR")
        raise typer.Exit(code=1)
    typer.echo("-> Visit this URL to authorize drive-relay with Google:")
    typer.echo(url)


@app.command("exchange-code")
def exchange_code(code: Annotated[str, Argument(help="The ?code=... value from the redirect URL.")]) -> None:
    """Exchange an authorization code for tokens and save them to token.json."""
    try:
        token = exchange_code_for_token(code)
    except ApplicationError as exc:
        log_utils.log_message(f"Failed to exchange code: {exc}", "ERROR")
        typer.echo(f"[FAIL] {type(exc).__name__}: {exc}")
        raise typer.Exit(code=1)

    typer.echo("[OK] Successfully exchanged code for tokens.")
    typer.echo(f"Access token:  {_truncate(token.access_token)}")
    typer.echo(f"Refresh token: {_truncate(token.refresh_token)}")
    typer.echo(f"\nTokens have been saved to {settings.TOKEN_PATH}")


@app.command()
def refresh() -> None:
    """Force a token refresh and save the new access token."""
    try:
        token = force_refresh()
    except ApplicationError as exc:
        log_utils.log_message(f"Failed to refresh tokens: {exc}", "ERROR")
        typer.echo(f"[FAIL] {type(exc).__name__}: {exc}")
        raise typer.Exit(code=1)

    typer.echo("[OK] Google tokens refreshed.")
    typer.echo(f"Access token:  {_truncate(token.access_token)}")


@app.command()
def status() -> None:
    """Check the local credential and token files."""
    results = run_status_checks()

    table = Table(title="drive-relay credentials")
    table.add_column("Check")
    table.add_column("Status")
    table.add_column("Detail")
    for result in results:
        table.add_row(result.name, "OK" if result.ok else "FAIL", result.detail)
    Console().print(table)

    raise typer.Exit(code=0 if all(result.ok for result in results) else 1)


@app.command(help="View the most recent lines from the relay history log.")
def logs(lines: Annotated[int, Option(help="Number of lines to show.")] = 50) -> None:
    log_path = settings.log_path
    if not log_path.exists():
        typer.echo(f"Log file not found: {log_path}")
        raise typer.Exit(code=1)

    with log_path.open("r", encoding="utf-8") as log_file:
        tail = deque(log_file, maxlen=lines)
    for line in tail:
        typer.echo(line.rstrip("\n"))


if __name__ == "__main__":
    app()
