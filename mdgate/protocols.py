"""Protocol definitions for the gateway.

The dispatcher depends on these interfaces rather than on the GitHub client
or the mistune renderer directly, so tests can inject fakes.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Protocol, runtime_checkable


@runtime_checkable
class ContentSource(Protocol):
    """Protocol for a remote version-controlled content source."""

    @abstractmethod
    async def fetch_refs(self) -> bytes:
        """Return the raw reference advertisement of the repository.

        Raises:
            ContentUnavailable: If the source cannot be reached.
        """
        ...

    @abstractmethod
    async def fetch_file(self, revision: str, path: str) -> bytes:
        """Return the bytes of ``path`` at ``revision``.

        Args:
            revision: Commit identifier to read from.
            path: Slash-separated path inside the repository.

        Raises:
            ContentUnavailable: If the file is missing or the source is unreachable.
        """
        ...


@runtime_checkable
class ContentRenderer(Protocol):
    """Protocol for turning Markdown into an HTML fragment."""

    @abstractmethod
    def render(self, markdown: str, sanitize: bool = False) -> str:
        """Render Markdown to HTML.

        Args:
            markdown: Markdown source.
            sanitize: Filter raw HTML against an allow-list when True.

        Returns:
            HTML fragment.
        """
        ...
