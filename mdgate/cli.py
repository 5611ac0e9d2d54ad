"""Command-line interface for mdgate.

This module defines the CLI commands using the Click framework.

Commands:
- serve: Resolve the content revision and run the gateway.
- routes: Print the route table.
- revision: Resolve and print the revision HEAD points at.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import click

from . import __version__
from .config import ConfigError, load_config
from .errors import GatewayError
from .refs import resolve_revision
from .routes import RouteTable


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _fail(title: str, message: str) -> None:
    click.echo(click.style(title, fg="red", bold=True), err=True)
    click.echo(click.style(f"  Error: {message}", fg="white"), err=True)
    raise SystemExit(1) from None


def _load(project_root: Path) -> dict:
    try:
        return load_config(project_root)
    except ConfigError as exc:
        _fail("Invalid configuration:", str(exc))


@click.group()
@click.version_option(version=__version__, prog_name="mdgate")
def cli():
    """Markdown documentation gateway."""


@cli.command()
@click.option("--host", required=False, help="Interface to bind (overrides mdgate.yaml)")
@click.option("--port", type=int, required=False, help="Port to listen on (overrides mdgate.yaml)")
@click.option("--revision", required=False, help="Serve this commit instead of resolving HEAD")
@click.option(
    "--retry-failures",
    is_flag=True,
    help="Retry documents whose fetch failed instead of caching the failure",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default="info",
    show_default=True,
)
def serve(
    host: str | None,
    port: int | None,
    revision: str | None,
    retry_failures: bool,
    log_level: str,
):
    """Run the documentation gateway."""
    _configure_logging(log_level)
    project_root = Path.cwd()
    from .server import GatewayServer

    overrides = {"revision": revision}
    if retry_failures:
        overrides["cache_failures"] = False
    try:
        server = GatewayServer(project_root, host=host, port=port, overrides=overrides)
    except (ConfigError, ValueError) as exc:
        _fail("Invalid configuration:", str(exc))
    click.echo(f"Serving {server.config['owner']}/{server.config['repo']} at http://{server.host}:{server.port}")
    try:
        server.start()
    except GatewayError as exc:
        _fail("Startup failed:", exc.message)


@cli.command()
def routes():
    """Print the route table."""
    config = _load(Path.cwd())
    try:
        table = RouteTable.from_config(config)
    except ValueError as exc:
        _fail("Invalid configuration:", str(exc))
    prefix = config["content_prefix"]
    for request_path, logical in table:
        click.echo(f"{request_path:<32} {prefix}/{logical}.md")


@cli.command()
def revision():
    """Resolve and print the revision HEAD points at."""
    config = _load(Path.cwd())
    from .server import build_source

    async def _resolve():
        source = build_source(config)
        try:
            return await resolve_revision(
                source, f"{config['owner']}/{config['repo']}", pinned=config.get("revision")
            )
        finally:
            await source.close()

    try:
        resolved = asyncio.run(_resolve())
    except GatewayError as exc:
        _fail("Could not resolve revision:", exc.message)
    if resolved.branch:
        click.echo(f"{resolved.sha} {resolved.branch}")
    else:
        click.echo(resolved.sha)


def main():
    """Entry point for the CLI application."""
    cli()
