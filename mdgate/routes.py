"""Route table mapping request paths to logical content paths.

A logical content path is a slash-separated name such as ``concepts/strings``.
The fetcher turns it into ``site/concepts/strings.md`` at the pinned revision.
The table is plain data: a mapping loaded from defaults and, optionally,
extended by the ``routes`` section of mdgate.yaml.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping

DEFAULT_ROUTES: dict[str, str] = {
    "/": "readme",
    "/install": "install",
    "/concepts/core-webassembly": "concepts/core-webassembly",
    "/concepts/elixir-compiler": "concepts/elixir-compiler",
    "/concepts/strings": "concepts/strings",
    "/concepts/composable-modules": "concepts/composable-modules",
    "/concepts/custom-types": "concepts/custom-types",
    "/concepts/platform-agnostic": "concepts/platform-agnostic",
    "/run/elixir": "run/elixir",
    "/run/javascript": "run/javascript",
    "/silverorb": "silverorb/silverorb",
    "/silverorb/parse": "silverorb/parse",
    "/silverorb/format": "silverorb/format",
}


def _validate(routes: Mapping[str, str]) -> None:
    seen: dict[str, str] = {}
    for request_path, logical in routes.items():
        if not request_path.startswith("/"):
            raise ValueError(f"Route {request_path!r} must start with '/'")
        if not logical or logical.startswith("/") or logical.endswith("/"):
            raise ValueError(f"Route {request_path!r} has invalid content path {logical!r}")
        if any(part in ("", ".", "..") for part in logical.split("/")):
            raise ValueError(f"Route {request_path!r} has invalid content path {logical!r}")
        if logical in seen:
            raise ValueError(
                f"Routes {seen[logical]!r} and {request_path!r} both map to {logical!r}"
            )
        seen[logical] = request_path


class RouteTable:
    """Static mapping from request path to logical content path.

    Attributes:
        routes: The validated mapping.
    """

    def __init__(
        self,
        routes: Mapping[str, str] | None = None,
        overrides: Mapping[str, str] | None = None,
    ):
        """Build a route table.

        Args:
            routes: Base mapping; defaults to ``DEFAULT_ROUTES``.
            overrides: Entries added to or replacing the base mapping.

        Raises:
            ValueError: If a request path does not start with ``/``, a content
                path is malformed, or two request paths share a content path.
        """
        merged = dict(DEFAULT_ROUTES if routes is None else routes)
        merged.update(overrides or {})
        _validate(merged)
        self.routes: dict[str, str] = merged

    @classmethod
    def from_config(cls, config: Mapping) -> RouteTable:
        return cls(overrides=config.get("routes") or {})

    def route_for(self, request_path: str) -> str | None:
        """Return the logical content path for a request path.

        Args:
            request_path: URL path of the request, e.g. ``/install``.

        Returns:
            The logical content path, or None when the path is unknown or
            does not start with ``/``.
        """
        if not isinstance(request_path, str) or not request_path.startswith("/"):
            return None
        return self.routes.get(request_path)

    def __contains__(self, request_path: object) -> bool:
        return request_path in self.routes

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(sorted(self.routes.items()))

    def __len__(self) -> int:
        return len(self.routes)
