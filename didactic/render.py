"""The render pass turns the compiled documents parked in the cache into
HTML files.  It walks the logical file map with the same section gating as
the page tree builder, so every document that was compiled is taken from
the cache exactly once.
"""
import os
import re

import htmlmin
import jinja2
from bs4 import BeautifulSoup
from markupsafe import Markup

from didactic.assets import asset_url
from didactic.exception import BuildError
from didactic.filemap import LogicalPath
from didactic.pages import index_pages
from didactic.pages import section_index
from didactic.reporter import reporter
from didactic.utils import atomic_open


PAGE_TEMPLATE = "index.html"

_img_src_re = re.compile(r'<img([^>]*?)src="(/[^"?]+)"([^>]*?)>')


def extract_body_content(markup):
    """Returns the inner markup of the ``<body>`` element, or the whole
    markup if there is none.
    """
    soup = BeautifulSoup(markup, "html.parser")
    if soup.body is None:
        return markup
    return soup.body.decode_contents()


def bust_image_urls(markup, asset_hashes):
    """Appends content hashes to the ``src`` of local images."""

    def _replace(match):
        before, src, after = match.groups()
        busted = asset_url(src, asset_hashes)
        if busted == src:
            return match.group(0)
        return '<img%ssrc="%s"%s>' % (before, busted, after)

    return _img_src_re.sub(_replace, markup)


def minify_html(markup):
    return htmlmin.minify(markup, remove_comments=True, remove_empty_space=True)


def current_section(logical):
    """The top level directory a document lives in, empty at the root."""
    if logical.depth > 1:
        return logical.parts[0]
    return ""


class RenderPass:
    def __init__(
        self,
        env,
        file_map,
        cache,
        pages,
        output_path,
        extension,
        site=None,
        asset_hashes=None,
        minify=False,
    ):
        self.env = env
        self.file_map = file_map
        self.cache = cache
        self.pages = pages
        self.output_path = output_path
        self.extension = extension
        self.site = site or {}
        self.asset_hashes = asset_hashes or {}
        self.minify = minify
        self._pages_by_source = index_pages(pages)

    def get_destination_filename(self, logical):
        return os.path.join(self.output_path, *logical.with_suffix(".html").parts)

    def render_all(self):
        self.render_tree(LogicalPath())

    def render_tree(self, prefix):
        for directory in sorted(self.file_map.children(prefix)):
            if section_index(self.file_map, directory, self.extension) is not None:
                self.render_tree(directory)

        for logical in self.file_map.documents_at(prefix, self.extension):
            self.render_document(logical)

    def make_context(self, logical, content):
        return {
            "asset_hashes": self.asset_hashes,
            "current_section": current_section(logical),
            "menu": self.pages,
            "page": self._pages_by_source.get(logical),
            "content": Markup(content),
            "site": self.site,
        }

    def render_document(self, logical):
        document = self.cache.take(logical)
        content = extract_body_content(document.render())

        try:
            rv = self.env.render_template(
                PAGE_TEMPLATE, self.make_context(logical, content)
            )
        except jinja2.TemplateError as e:
            raise BuildError("Could not render %s: %s" % (logical, e)) from e

        rv = bust_image_urls(rv, self.asset_hashes)
        if self.minify:
            rv = minify_html(rv)

        filename = self.get_destination_filename(logical)
        os.makedirs(os.path.dirname(filename), exist_ok=True)
        with atomic_open(filename, "wb") as f:
            f.write(rv.encode("utf-8"))
        reporter.report_written(logical.url.lstrip("/"))
        return filename


def render_pages(env, file_map, cache, pages, output_path, extension, **options):
    """Renders every compiled document of the page tree."""
    RenderPass(env, file_map, cache, pages, output_path, extension, **options).render_all()
