"""Static search page.

Search is a fixed lookup from exact query to result links; there is no index.
The page is returned as Markdown so it flows through the same render and
template path as any other document.
"""

from __future__ import annotations

from collections.abc import Mapping

from .html_utils import escape_html, normalize_whitespace

SEARCH_PATH = "/search"

_GITHUB_RESULTS = (
    "https://github.com/RoyalIcing/Orb",
    "https://github.com/RoyalIcing/SilverOrb",
)
_SPEC_RESULTS = (
    "https://webassembly.org/specs/",
    "https://www.w3.org/TR/wasm-core-1/",
    "https://github.com/WebAssembly/WASI/blob/main/Proposals.md",
)

# Matched case-sensitively against the normalized query.
SEARCH_RESULTS: dict[str, tuple[str, ...]] = {
    "github": _GITHUB_RESULTS,
    "spec": _SPEC_RESULTS,
    "specs": _SPEC_RESULTS,
}


def normalize_query(raw: str) -> str:
    return normalize_whitespace(raw)


def search_results(query: str) -> list[str]:
    """Return result links for a normalized query (empty when unknown)."""
    return list(SEARCH_RESULTS.get(query, ()))


def search_form(query: str) -> str:
    """Return the search form HTML with ``query`` as its escaped value."""
    return (
        f'<form action=/search><input placeholder="Search" name=q '
        f'value="{escape_html(query)}" style="margin-bottom: 1rem"></form>'
    )


def render_search(params: Mapping[str, str]) -> str:
    """Build the search page Markdown for the request query parameters.

    Args:
        params: Query parameters; only ``q`` is read.

    Returns:
        Markdown holding the search form followed by a list of result links.
    """
    query = normalize_query(params.get("q") or "")
    results = search_results(query)
    listing = "\n".join(f"- {url}" for url in results)
    return f"{search_form(query)}\n\n{listing}"
