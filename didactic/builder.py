import os
import shutil
import sys

from didactic.assets import collect_asset_hashes
from didactic.assets import compile_stylesheet
from didactic.assets import copy_assets
from didactic.assets import copy_mapped_assets
from didactic.cache import CompiledDocumentCache
from didactic.config import PROJECT_FILENAME
from didactic.exception import BuildError
from didactic.feed import generate_rss
from didactic.filemap import FileMap
from didactic.filemap import LogicalPath
from didactic.pages import build_page_tree
from didactic.render import render_pages
from didactic.reporter import reporter
from didactic.utils import is_unsafe_to_delete


STYLESHEET_SOURCE = "main.scss"
STYLESHEET_ARTIFACT = "style.css"


class Builder:
    def __init__(self, env, destination_path, minify=None):
        self.env = env
        self.destination_path = os.path.abspath(
            os.path.join(env.root_path, destination_path)
        )
        self.minify = minify

    @property
    def project(self):
        return self.env.project

    def make_file_map(self, config):
        """Mounts the content folder followed by every linked folder."""
        file_map = FileMap(resolver_base=self.env.root_path)
        file_map.mount(self.project.content_path)
        for link in config.links:
            file_map.mount(link.get_source_path(self.env.root_path), link.slug)
        return file_map

    def build_stylesheet(self, config):
        source = os.path.join(self.env.template_path, STYLESHEET_SOURCE)
        if not os.path.isfile(source):
            reporter.report_generic("No SCSS found, skipping")
            return None
        destination = os.path.join(self.destination_path, STYLESHEET_ARTIFACT)
        compile_stylesheet(source, destination, config["SASS_EXECUTABLE"])
        reporter.report_written(STYLESHEET_ARTIFACT)
        return destination

    def copy_assets(self, file_map, extension):
        if os.path.isdir(self.project.static_path):
            copy_assets(self.project.static_path, self.destination_path, (extension,))
        copy_mapped_assets(file_map, self.destination_path, (extension,))

    def build(self):
        """Runs the whole build and returns the page tree.  Errors are
        raised to the caller.
        """
        config = self.env.load_config()
        if not config.site.get("title"):
            raise BuildError("No site title configured in %s" % PROJECT_FILENAME)
        minify = config.minify if self.minify is None else self.minify
        compiler = self.env.make_compiler(config)
        extension = compiler.source_extension

        reporter.report_generic("Building logical map")
        file_map = self.make_file_map(config)
        reporter.report_debug_info("file map", file_map)

        os.makedirs(self.destination_path, exist_ok=True)
        self.build_stylesheet(config)

        reporter.report_generic("Copying static assets")
        self.copy_assets(file_map, extension)
        asset_hashes = collect_asset_hashes(
            self.destination_path, skip_extensions=(".html", extension)
        )

        reporter.report_generic("Compiling content")
        cache = CompiledDocumentCache()
        pages = build_page_tree(LogicalPath(), file_map, compiler, cache, is_root=True)

        reporter.report_generic("Generating RSS feed")
        generate_rss(pages, config.site, self.destination_path)

        reporter.report_generic("Processing templates")
        render_pages(
            self.env,
            file_map,
            cache,
            pages,
            self.destination_path,
            extension,
            site=config.site,
            asset_hashes=asset_hashes,
            minify=minify,
        )
        cache.ensure_drained()
        return pages

    def build_all(self):
        """Builds the entire site.  Returns the number of failures."""
        with reporter.build("build", self):
            try:
                self.build()
            except Exception as e:  # pylint: disable=broad-except
                reporter.report_failure(getattr(e, "path", None), sys.exc_info())
                reporter.report_build_all_failure(1)
                return 1
        return 0

    def clean(self):
        """Removes the output folder."""
        if is_unsafe_to_delete(self.destination_path, self.env.root_path):
            raise BuildError(
                "Refusing to delete %s as it contains the project"
                % self.destination_path
            )
        with reporter.build("clean", self):
            if os.path.isdir(self.destination_path):
                shutil.rmtree(self.destination_path)
                reporter.report_generic("Removed %s" % self.destination_path)
