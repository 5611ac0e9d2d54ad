"""HTML utility functions for the gateway.

Functions:
    escape_html: Escape special HTML characters in a string.
    normalize_whitespace: Collapse whitespace and control characters.
    strip_quotes: Remove double quotes from a value embedded in an attribute.
"""

from __future__ import annotations

import re

# Whitespace plus C0 control characters and DEL
_WHITESPACE_RE = re.compile(r"[\s\x00-\x1f\x7f]+")


def escape_html(text: str) -> str:
    """Escape special HTML characters in a string.

    Converts the following characters to their HTML entity equivalents:
    - & becomes &amp;
    - < becomes &lt;
    - > becomes &gt;
    - " becomes &quot;

    Args:
        text: The string to escape.

    Returns:
        The escaped string, safe for inclusion in HTML text and
        double-quoted attribute values.

    Examples:
        >>> escape_html('<script>alert("XSS")</script>')
        '&lt;script&gt;alert(&quot;XSS&quot;)&lt;/script&gt;'

        >>> escape_html('Tom & Jerry')
        'Tom &amp; Jerry'
    """
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def normalize_whitespace(text: str) -> str:
    """Collapse runs of whitespace and control characters to single spaces.

    Args:
        text: Raw text, typically a query string value.

    Returns:
        The collapsed text with leading and trailing spaces removed.

    Examples:
        >>> normalize_whitespace("  github \\t")
        'github'

        >>> normalize_whitespace("core\\n\\nwebassembly")
        'core webassembly'
    """
    return _WHITESPACE_RE.sub(" ", text).strip()


def strip_quotes(value: str) -> str:
    """Remove double quotes so a value can sit inside a quoted attribute."""
    return value.replace('"', "")
