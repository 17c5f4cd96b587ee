"""Markdown rendering for record bodies (mistune 2.x)."""
from __future__ import annotations

from functools import lru_cache
from urllib.parse import urlsplit
from urllib.parse import urlunsplit

import mistune


class DocumentLinkRenderer(mistune.HTMLRenderer):  # type: ignore[misc]
    """Rewrites relative links to source documents into links to the
    HTML pages built from them.
    """

    def __init__(self, source_extension: str | None = None, **options):
        super().__init__(**options)
        self.source_extension = source_extension

    def resolve_url(self, url: str) -> str:
        if not self.source_extension:
            return url
        scheme, netloc, path, query, fragment = urlsplit(url)
        if scheme or netloc or not path.endswith(self.source_extension):
            return url
        path = path[: -len(self.source_extension)] + ".html"
        return urlunsplit(("", "", path, query, fragment))

    def link(self, link: str, text: str | None = None, title: str | None = None) -> str:
        return super().link(self.resolve_url(link), text, title)

    def image(self, src: str, alt: str = "", title: str | None = None) -> str:
        return super().image(self.resolve_url(src), alt, title)


class MarkdownConfig:
    DEFAULT_PLUGINS = ("url", "strikethrough", "footnotes", "table")

    def __init__(self, source_extension: str | None = None) -> None:
        self.source_extension = source_extension
        self.renderer_options = {
            "escape": False,
            "allow_harmful_protocols": True,
        }
        self.plugins = list(self.DEFAULT_PLUGINS)

    def make_parser(self) -> mistune.Markdown:
        renderer = DocumentLinkRenderer(self.source_extension, **self.renderer_options)
        plugins = [mistune.PLUGINS[name] for name in self.plugins]
        return mistune.Markdown(renderer, plugins=plugins)


@lru_cache(maxsize=None)
def get_parser(source_extension: str | None = None) -> mistune.Markdown:
    return MarkdownConfig(source_extension).make_parser()


def render_markdown(source: str, source_extension: str | None = None) -> str:
    if not source:
        return ""
    return get_parser(source_extension)(source)
