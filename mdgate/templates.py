"""Page template for the gateway.

Uses Jinja2 to wrap a rendered body in the shared site shell: navigation,
footer, stylesheet and the client-side navigation component. The request
path is embedded as ``data-path`` on the root element so styles and the
navigation script can react to the current page.

Key class:
- PageTemplate: Composes HTML fragments into a full document.
"""

from __future__ import annotations

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup
from pygments.formatters import HtmlFormatter

from .html_utils import strip_quotes

TEMPLATES_DIR = Path(__file__).parent / "templates"


class PageTemplate:
    """Jinja2-backed page shell.

    Attributes:
        site_title: Text of the document ``<title>``.
        env: Jinja2 environment.
    """

    def __init__(
        self,
        site_title: str,
        template_dir: Path | None = None,
        template_name: str = "page.html",
    ):
        self.site_title = site_title
        self.template_name = template_name
        self.env = Environment(
            loader=FileSystemLoader([template_dir or TEMPLATES_DIR, TEMPLATES_DIR]),
            autoescape=select_autoescape(["html", "xml"]),
            enable_async=False,
        )
        self.env.globals["pygments_css"] = self._pygments_css

    @staticmethod
    def _pygments_css() -> str:
        """Return Pygments CSS styles for syntax highlighting.

        Returns:
            CSS string for the .highlight class.
        """
        return HtmlFormatter(style="monokai").get_style_defs(".highlight")

    def render(
        self,
        path: str,
        body_html: str,
        nav_html: str = "",
        footer_html: str = "",
    ) -> str:
        """Render a full HTML document.

        Args:
            path: Request path, embedded as the ``data-path`` attribute.
            body_html: Rendered main content (trusted).
            nav_html: Rendered navigation fragment.
            footer_html: Rendered footer fragment.

        Returns:
            The complete HTML document.
        """
        template = self.env.get_template(self.template_name)
        return template.render(
            site_title=self.site_title,
            data_path=strip_quotes(path),
            body=Markup(body_html),
            nav=Markup(nav_html),
            footer=Markup(footer_html),
        )
