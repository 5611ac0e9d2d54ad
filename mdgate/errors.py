"""Error kinds raised by the gateway.

Startup errors are fatal and stop the process. Content errors are raised per
fetch and converted to an error page at the dispatcher boundary.
"""

from __future__ import annotations


class GatewayError(Exception):
    """Base class for gateway errors.

    Attributes:
        message: Human-readable error message.
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class StartupUnresolvable(GatewayError):
    """No revision could be determined for the content source.

    Attributes:
        repository: ``owner/repo`` slug that was queried.
        original_error: The underlying exception, if any.
    """

    def __init__(
        self,
        repository: str,
        message: str,
        original_error: Exception | None = None,
    ):
        self.repository = repository
        self.original_error = original_error
        super().__init__(f"{repository}: {message}")


class ContentUnavailable(GatewayError):
    """A file could not be fetched from the content source.

    Attributes:
        path: Remote path inside the repository (e.g. ``site/install.md``).
        status: HTTP status reported by the source, when there was one.
        original_error: The underlying exception, if any.
    """

    def __init__(
        self,
        path: str,
        message: str,
        status: int | None = None,
        original_error: Exception | None = None,
    ):
        self.path = path
        self.status = status
        self.original_error = original_error
        super().__init__(f"{path}: {message}")
