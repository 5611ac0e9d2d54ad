"""Request dispatcher.

Per request, in priority order:
1. ``/favicon.ico`` returns the inline SVG icon.
2. ``/wasm/<name>`` returns ``examples/<name>.wasm`` bytes at the pinned
   revision, bypassing the Markdown cache and renderer.
3. ``/search`` builds the search page Markdown.
4. Otherwise the route table maps the path to a logical content path and the
   content cache supplies its Markdown, fetching on first use. Unknown paths
   get the not-found document.

Markdown results are rendered unsanitized and wrapped, together with the
sanitized navigation and footer fragments, in the page template.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Mapping

from aiohttp import web

from .cache import ContentCache
from .errors import ContentUnavailable
from .fetcher import ContentFetcher
from .html_utils import escape_html
from .protocols import ContentRenderer
from .refs import Revision
from .routes import RouteTable
from .search import SEARCH_PATH, render_search
from .templates import PageTemplate

logger = logging.getLogger("mdgate.dispatcher")

NOT_FOUND_KEY = "404"
NAV_KEY = "_nav"
FOOTER_KEY = "_footer"
WARM_KEYS = (NOT_FOUND_KEY, NAV_KEY, FOOTER_KEY)

FAVICON_PATH = "/favicon.ico"
WASM_PREFIX = "/wasm/"

FAVICON_SVG = """<svg width="100" height="100" xmlns="http://www.w3.org/2000/svg">
  <rect width="100" height="100" fill="#74d1f0" />
</svg>"""


class Dispatcher:
    """Resolves requests to rendered pages.

    Attributes:
        routes: Route table.
        cache: Shared content cache, keyed by logical content path.
        fetcher: Content fetcher.
        revision: Revision pinned at startup.
        renderer: Markdown renderer.
        template: Page template.
    """

    def __init__(
        self,
        routes: RouteTable,
        cache: ContentCache,
        fetcher: ContentFetcher,
        revision: Revision,
        renderer: ContentRenderer,
        template: PageTemplate,
    ):
        self.routes = routes
        self.cache = cache
        self.fetcher = fetcher
        self.revision = revision
        self.renderer = renderer
        self.template = template

    def _fetch_fn(self, logical_path: str):
        return functools.partial(self.fetcher.fetch, self.revision, logical_path)

    async def content(self, logical_path: str) -> str:
        """Return Markdown for a logical path, fetching it at most once."""
        return await self.cache.get_or_fetch(logical_path, self._fetch_fn(logical_path))

    async def warm(self) -> None:
        """Prefetch the not-found, navigation and footer documents.

        Failures are logged; they stay in the cache according to its policy
        and surface again when a request needs the document.
        """
        entries = self.cache.warm(WARM_KEYS, self._fetch_fn)
        outcomes = await asyncio.gather(*entries, return_exceptions=True)
        for key, outcome in zip(WARM_KEYS, outcomes):
            if isinstance(outcome, BaseException):
                logger.warning("Could not prefetch %s: %s", key, outcome)
            else:
                logger.info("Prefetched %s (%d chars)", key, len(outcome))

    async def markdown_for(self, path: str, query: Mapping[str, str]) -> tuple[str, int]:
        """Resolve a request to Markdown and an HTTP status.

        Args:
            path: Request path.
            query: Query parameters.

        Returns:
            Tuple of (Markdown, status). Unknown paths yield the not-found
            document with status 404.

        Raises:
            ContentUnavailable: If the needed document cannot be fetched.
        """
        if path == SEARCH_PATH:
            return render_search(query), 200
        logical_path = self.routes.route_for(path)
        if logical_path is None:
            return await self.content(NOT_FOUND_KEY), 404
        return await self.content(logical_path), 200

    async def _fragment(self, key: str) -> str:
        try:
            markdown = await self.content(key)
        except ContentUnavailable as exc:
            logger.warning("Rendering without %s: %s", key, exc.message)
            return ""
        return self.renderer.render(markdown, sanitize=True)

    async def render_page(self, path: str, markdown: str) -> str:
        """Render Markdown as the body of a full page for ``path``."""
        body = self.renderer.render(markdown, sanitize=False)
        nav, footer = await asyncio.gather(
            self._fragment(NAV_KEY), self._fragment(FOOTER_KEY)
        )
        return self.template.render(path, body, nav_html=nav, footer_html=footer)

    async def handle(self, request: web.Request) -> web.StreamResponse:
        """aiohttp handler for every GET request."""
        path = request.path
        if path == FAVICON_PATH:
            return web.Response(body=FAVICON_SVG.encode("utf-8"), content_type="image/svg+xml")
        if path.startswith(WASM_PREFIX):
            return await self._serve_wasm(path[len(WASM_PREFIX) :])
        try:
            markdown, status = await self.markdown_for(path, request.query)
        except ContentUnavailable as exc:
            logger.error("Serving error page for %s: %s", path, exc)
            markdown, status = _error_markdown(path), 502
        html = await self.render_page(path, markdown)
        return web.Response(
            text=html, status=status, content_type="text/html", charset="utf-8"
        )

    async def _serve_wasm(self, name: str) -> web.StreamResponse:
        if not name or name.startswith("/") or ".." in name.split("/"):
            return web.Response(text="Not found", status=404)
        try:
            data = await self.fetcher.fetch_binary(self.revision, name)
        except ContentUnavailable as exc:
            logger.error("Example asset %s unavailable: %s", name, exc)
            return web.Response(text=f"Unavailable: {exc.path}", status=502)
        return web.Response(body=data, content_type="application/wasm")


def _error_markdown(path: str) -> str:
    return (
        "# Content unavailable\n\n"
        f"The page <code>{escape_html(path)}</code> could not be loaded from the "
        "content source. Please try again later.\n"
    )
