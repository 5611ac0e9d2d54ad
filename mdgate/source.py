"""GitHub content source.

Implements the ContentSource protocol over aiohttp:
- fetch_refs: git smart-HTTP reference discovery on the repository.
- fetch_file: raw file bytes at a commit from raw.githubusercontent.com.

One ``aiohttp.ClientSession`` is created lazily inside the running event loop
and reused for every request until ``close()``.
"""

from __future__ import annotations

import asyncio
import logging

import aiohttp

from .errors import ContentUnavailable

logger = logging.getLogger("mdgate.source")

USER_AGENT = "mdgate (+https://github.com/RoyalIcing/Orb)"


class GitHubSource:
    """Content source backed by a GitHub repository.

    Attributes:
        owner: Repository owner.
        repo: Repository name.
        git_base_url: Base URL for smart-HTTP discovery.
        raw_base_url: Base URL for raw file contents.
        timeout: Total timeout, in seconds, for a single HTTP request.
    """

    def __init__(
        self,
        owner: str,
        repo: str,
        git_base_url: str = "https://github.com",
        raw_base_url: str = "https://raw.githubusercontent.com",
        timeout: float = 10.0,
        session: aiohttp.ClientSession | None = None,
    ):
        self.owner = owner
        self.repo = repo
        self.git_base_url = git_base_url.rstrip("/")
        self.raw_base_url = raw_base_url.rstrip("/")
        self.timeout = timeout
        self._session = session
        self._owns_session = session is None

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.repo}"

    def refs_url(self) -> str:
        return f"{self.git_base_url}/{self.owner}/{self.repo}.git/info/refs"

    def file_url(self, revision: str, path: str) -> str:
        return f"{self.raw_base_url}/{self.owner}/{self.repo}/{revision}/{path.lstrip('/')}"

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                headers={"User-Agent": USER_AGENT},
            )
            self._owns_session = True
        return self._session

    async def fetch_refs(self) -> bytes:
        return await self._get(
            self.refs_url(),
            label=f"{self.slug}.git/info/refs",
            params={"service": "git-upload-pack"},
        )

    async def fetch_file(self, revision: str, path: str) -> bytes:
        return await self._get(self.file_url(revision, path), label=path)

    async def _get(self, url: str, label: str, params: dict | None = None) -> bytes:
        session = self._get_session()
        logger.debug("GET %s", url)
        try:
            async with session.get(url, params=params) as response:
                if response.status < 200 or response.status >= 300:
                    raise ContentUnavailable(
                        label,
                        f"content source responded with HTTP {response.status}",
                        status=response.status,
                    )
                return await response.read()
        except asyncio.TimeoutError as exc:
            raise ContentUnavailable(
                label, f"timed out after {self.timeout}s", original_error=exc
            ) from exc
        except aiohttp.ClientError as exc:
            raise ContentUnavailable(
                label, f"content source unreachable: {exc}", original_error=exc
            ) from exc

    async def close(self) -> None:
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None
