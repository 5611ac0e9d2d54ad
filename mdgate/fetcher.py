"""Content fetcher.

Addresses the content source with a fixed structure:
- text content: ``<content_prefix>/<logical path>.md``
- binary example assets: ``<asset_prefix>/<name>.wasm``

Each call issues exactly one request to the source; there are no retries.
Every request is bounded by ``timeout`` seconds.
"""

from __future__ import annotations

import asyncio
import logging

from .errors import ContentUnavailable
from .protocols import ContentSource
from .refs import Revision

logger = logging.getLogger("mdgate.fetcher")


class ContentFetcher:
    """Fetches Markdown and binary assets at a revision.

    Attributes:
        source: The ContentSource to read from.
        content_prefix: Directory holding Markdown documents.
        asset_prefix: Directory holding binary example assets.
        timeout: Deadline in seconds for one fetch.
    """

    def __init__(
        self,
        source: ContentSource,
        content_prefix: str = "site",
        asset_prefix: str = "examples",
        timeout: float = 10.0,
    ):
        self.source = source
        self.content_prefix = content_prefix.strip("/")
        self.asset_prefix = asset_prefix.strip("/")
        self.timeout = timeout

    def content_location(self, logical_path: str) -> str:
        """Return the repository path of a Markdown document.

        Examples:
            >>> ContentFetcher(source).content_location("readme")
            'site/readme.md'
        """
        return f"{self.content_prefix}/{logical_path}.md"

    def asset_location(self, name: str) -> str:
        """Return the repository path of a binary example asset."""
        return f"{self.asset_prefix}/{name}.wasm"

    async def fetch(self, revision: Revision, logical_path: str) -> str:
        """Fetch a Markdown document as text.

        Args:
            revision: Pinned revision.
            logical_path: Logical content path, e.g. ``concepts/strings``.

        Returns:
            The document decoded as UTF-8 (invalid sequences replaced).

        Raises:
            ContentUnavailable: If the document is missing, the source is
                unreachable, or the deadline passes.
        """
        data = await self._fetch(revision, self.content_location(logical_path))
        return data.decode("utf-8", errors="replace")

    async def fetch_binary(self, revision: Revision, name: str) -> bytes:
        """Fetch a binary example asset.

        Raises:
            ContentUnavailable: As for ``fetch``.
        """
        return await self._fetch(revision, self.asset_location(name))

    async def _fetch(self, revision: Revision, path: str) -> bytes:
        logger.info("Fetching %s at %s", path, revision.sha[:12])
        try:
            return await asyncio.wait_for(
                self.source.fetch_file(revision.sha, path), timeout=self.timeout
            )
        except asyncio.TimeoutError as exc:
            logger.warning("Fetch of %s timed out after %ss", path, self.timeout)
            raise ContentUnavailable(
                path, f"timed out after {self.timeout}s", original_error=exc
            ) from exc
        except ContentUnavailable as exc:
            logger.warning("Fetch of %s failed: %s", path, exc.message)
            raise
