"""mdgate, a Markdown documentation gateway.

This package serves a small, fixed set of documentation pages whose Markdown
sources live in a remote Git repository. At startup it pins the revision HEAD
points at; each page is fetched once, cached for the process lifetime,
rendered to HTML and wrapped in the shared site template.

The main entry point is the CLI module, which provides the ``serve`` command.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
