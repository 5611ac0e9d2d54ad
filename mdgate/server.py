"""HTTP server for the gateway.

Builds an aiohttp application whose lifecycle owns the shared state:
- on startup: resolve the revision once, build the content cache and
  dispatcher, prefetch the not-found, navigation and footer documents.
- on cleanup: close the content source's HTTP session.

Key pieces:
- create_app: Build the aiohttp Application for a configuration.
- GatewayServer: Run the application until interrupted.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from aiohttp import web

from .cache import ContentCache
from .config import load_config
from .dispatcher import Dispatcher
from .fetcher import ContentFetcher
from .protocols import ContentRenderer, ContentSource
from .refs import resolve_revision
from .renderers import MarkdownRenderer
from .routes import RouteTable
from .source import GitHubSource
from .templates import PageTemplate

logger = logging.getLogger("mdgate.server")

CONFIG_KEY = web.AppKey("config", dict)
SOURCE_KEY = web.AppKey("source", object)
RENDERER_KEY = web.AppKey("renderer", object)
ROUTES_KEY = web.AppKey("routes", RouteTable)
DISPATCHER_KEY = web.AppKey("dispatcher", Dispatcher)


def build_source(config: dict[str, Any]) -> GitHubSource:
    return GitHubSource(
        config["owner"],
        config["repo"],
        git_base_url=config["git_base_url"],
        raw_base_url=config["raw_base_url"],
        timeout=config["fetch_timeout"],
    )


def create_app(
    config: dict[str, Any],
    source: ContentSource | None = None,
    renderer: ContentRenderer | None = None,
) -> web.Application:
    """Create the gateway application.

    Args:
        config: Configuration as returned by ``load_config``.
        source: Content source; a GitHubSource is built from config when omitted.
        renderer: Markdown renderer; defaults to MarkdownRenderer.

    Returns:
        An aiohttp Application. The route table is validated here, so a bad
        ``routes`` section fails before the server binds.
    """
    app = web.Application()
    app[CONFIG_KEY] = config
    app[SOURCE_KEY] = source if source is not None else build_source(config)
    app[RENDERER_KEY] = renderer or MarkdownRenderer()
    app[ROUTES_KEY] = RouteTable.from_config(config)
    app.on_startup.append(_on_startup)
    app.on_cleanup.append(_on_cleanup)
    app.router.add_get("/{tail:.*}", _handle)
    return app


async def _on_startup(app: web.Application) -> None:
    config = app[CONFIG_KEY]
    source = app[SOURCE_KEY]
    repository = f"{config['owner']}/{config['repo']}"
    revision = await resolve_revision(source, repository, pinned=config.get("revision"))
    fetcher = ContentFetcher(
        source,
        content_prefix=config["content_prefix"],
        asset_prefix=config["asset_prefix"],
        timeout=config["fetch_timeout"],
    )
    dispatcher = Dispatcher(
        routes=app[ROUTES_KEY],
        cache=ContentCache(cache_failures=config["cache_failures"]),
        fetcher=fetcher,
        revision=revision,
        renderer=app[RENDERER_KEY],
        template=PageTemplate(config["site_title"]),
    )
    app[DISPATCHER_KEY] = dispatcher
    await dispatcher.warm()
    logger.info("Serving %s at revision %s", repository, revision.sha)


async def _on_cleanup(app: web.Application) -> None:
    close = getattr(app[SOURCE_KEY], "close", None)
    if close is not None:
        await close()


async def _handle(request: web.Request) -> web.StreamResponse:
    return await request.app[DISPATCHER_KEY].handle(request)


class GatewayServer:
    """Runs the gateway until interrupted.

    Attributes:
        project_root: Directory holding mdgate.yaml.
        config: Effective configuration.
        host: Interface to bind.
        port: TCP port to bind.
        routes: Route table built from the effective configuration.
    """

    def __init__(
        self,
        project_root: Path,
        host: str | None = None,
        port: int | None = None,
        overrides: dict[str, Any] | None = None,
    ):
        self.project_root = project_root
        self.config = load_config(project_root)
        for key, value in (overrides or {}).items():
            if value is not None:
                self.config[key] = value
        self.host = host or self.config["host"]
        self.port = int(port or self.config["port"])
        self.routes = RouteTable.from_config(self.config)

    def start(self) -> None:  # pragma: no cover - integration path
        app = create_app(self.config)
        logger.info("Listening on http://%s:%s", self.host, self.port)
        web.run_app(app, host=self.host, port=self.port, print=None)
