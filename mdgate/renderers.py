"""Markdown renderer for the gateway.

Renders Markdown to HTML with mistune, highlighting fenced code with Pygments.
Two modes are supported:
- unsanitized: raw HTML passes through (first-party page bodies).
- sanitized: the rendered fragment is parsed with BeautifulSoup and filtered
  against an allow-list (navigation and footer fragments).

Key classes:
- MarkdownRenderer: Implements the ContentRenderer protocol.
"""

from __future__ import annotations

import re

import mistune
from bs4 import BeautifulSoup, NavigableString
from bs4.element import PreformattedString
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from .html_utils import escape_html

# Tags kept by the sanitizer, with the attributes allowed on each.
ALLOWED_TAGS: dict[str, frozenset[str]] = {
    tag: frozenset()
    for tag in (
        "abbr b blockquote br code dd del div dl dt em h1 h2 h3 h4 h5 h6 hr i "
        "kbd li nav p pre s section small span strong sub summary sup table "
        "tbody td tfoot th thead tr ul"
    ).split()
}
ALLOWED_TAGS["a"] = frozenset({"href", "title", "rel"})
ALLOWED_TAGS["img"] = frozenset({"src", "alt", "title", "width", "height"})
ALLOWED_TAGS["details"] = frozenset({"open", "data-path"})
ALLOWED_TAGS["ol"] = frozenset({"start"})
ALLOWED_TAGS["input"] = frozenset({"type", "checked", "disabled"})
GLOBAL_ATTRIBUTES = frozenset({"id", "class", "title", "aria-label"})
URL_ATTRIBUTES = frozenset({"href", "src"})

_SAFE_URL_RE = re.compile(r"^(?:https?:|mailto:|/|#|\.|[^:/?#]*(?:[/?#]|$))", re.IGNORECASE)


def _generate_heading_id(text: str) -> str:
    """Generate a URL-friendly ID from heading text.

    Args:
        text: The heading text.

    Returns:
        URL-friendly slug suitable for anchor links.
    """
    slug = re.sub(r"<[^>]+>", "", text).lower().strip()
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"[-\s]+", "-", slug)
    return slug.strip("-")


def _is_safe_url(url: str) -> bool:
    # Attribute values arrive entity-decoded from the parser.
    cleaned = re.sub(r"[\x00-\x20\x7f]+", "", url)
    return bool(_SAFE_URL_RE.match(cleaned))


def sanitize_html(fragment: str) -> str:
    """Filter an HTML fragment against the tag and attribute allow-list.

    The fragment is parsed with BeautifulSoup. Disallowed tags are replaced by
    their markup as text, so they render escaped; disallowed attributes are
    dropped; URL attributes with unsafe schemes are removed; comments and
    declarations are stripped.

    Examples:
        >>> sanitize_html('<details data-path="/concepts" onclick="x()"></details>')
        '<details data-path="/concepts"></details>'

        >>> sanitize_html('<script>alert(1)</script>')
        '&lt;script&gt;alert(1)&lt;/script&gt;'
    """
    soup = BeautifulSoup(fragment, "html.parser")
    for string in soup.find_all(string=lambda s: isinstance(s, PreformattedString)):
        string.extract()
    for tag in soup.find_all(True):
        allowed = ALLOWED_TAGS.get(tag.name)
        if allowed is None:
            tag.replace_with(NavigableString(str(tag)))
            continue
        for name in list(tag.attrs):
            if name not in allowed and name not in GLOBAL_ATTRIBUTES:
                del tag[name]
            elif name in URL_ATTRIBUTES and not _is_safe_url(tag[name]):
                del tag[name]
    return soup.decode(formatter="minimal")


class _HighlightRenderer(mistune.HTMLRenderer):
    """Mistune renderer with heading anchors and Pygments code blocks."""

    def __init__(self):
        super().__init__(escape=False)
        self._heading_id_counts: dict[str, int] = {}

    def heading(self, text: str, level: int, **attrs) -> str:
        base_id = _generate_heading_id(text)
        if base_id in self._heading_id_counts:
            self._heading_id_counts[base_id] += 1
            heading_id = f"{base_id}-{self._heading_id_counts[base_id]}"
        else:
            self._heading_id_counts[base_id] = 0
            heading_id = base_id
        return f'<h{level} id="{heading_id}">{text}</h{level}>\n'

    def block_code(self, code: str, info: str | None = None) -> str:
        """Render a code block with Pygments syntax highlighting.

        Args:
            code: The code content.
            info: Language identifier (e.g., 'elixir', 'wat').

        Returns:
            HTML string with highlighted code.
        """
        lang = info.split()[0] if info and info.strip() else None
        if lang:
            try:
                lexer = get_lexer_by_name(lang, stripall=True)
            except ClassNotFound:
                lexer = None
            if lexer is not None:
                formatter = HtmlFormatter(nowrap=False, cssclass="highlight")
                return highlight(code, lexer, formatter)
        escaped = code.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")
        lang_class = f' class="language-{escape_html(lang)}"' if lang else ""
        return f"<pre><code{lang_class}>{escaped}</code></pre>\n"


class MarkdownRenderer:
    """Renders Markdown content to HTML fragments."""

    plugins = ["strikethrough", "footnotes", "table", "url", "task_lists"]

    def render(self, markdown: str, sanitize: bool = False) -> str:
        """Render Markdown content to HTML.

        Args:
            markdown: Markdown source content.
            sanitize: Filter the rendered HTML against the allow-list when True.

        Returns:
            Rendered HTML fragment.
        """
        convert = mistune.create_markdown(renderer=_HighlightRenderer(), plugins=self.plugins)
        html = convert(markdown)
        if sanitize:
            return sanitize_html(html)
        return html
