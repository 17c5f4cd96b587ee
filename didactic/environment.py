import os
from functools import update_wrapper

import babel.dates
import jinja2

from didactic.assets import asset_url
from didactic.compiler import builtin_compilers
from didactic.config import Config
from didactic.exception import BuildError


def _dates_filter(name, wrapped):
    """Wrap one of the babel.dates.format_* functions for use as a jinja filter.

    Missing dates (undated pages) render as an empty string.
    """

    def wrapper(arg, format="medium", locale="en_US"):
        if arg is None or isinstance(arg, jinja2.Undefined):
            return ""
        if not isinstance(format, str):
            raise TypeError(
                f"The 'format' parameter to '{name}' should be a str, not {format!r}"
            )
        return wrapped(arg, format, locale=locale)

    return update_wrapper(wrapper, wrapped)


@jinja2.pass_context
def _busted_filter(ctx, url):
    return asset_url(url, ctx.get("asset_hashes") or {})


class Environment:
    def __init__(self, project):
        self.project = project
        self.root_path = os.path.abspath(project.tree)

        self.jinja_env = jinja2.Environment(
            autoescape=self.select_jinja_autoescape,
            extensions=["jinja2.ext.do"],
            loader=jinja2.FileSystemLoader([self.template_path]),
        )
        self.jinja_env.filters.update(
            busted=_busted_filter,
            dateformat=_dates_filter("dateformat", babel.dates.format_date),
        )

    @property
    def template_path(self):
        return os.path.join(self.root_path, "templates")

    def load_config(self):
        """Loads the current config."""
        return Config(self.project.project_file)

    def make_compiler(self, config=None):
        """Creates the document compiler selected by the project config.
        Relative source paths are resolved against the project tree.
        """
        if config is None:
            config = self.load_config()
        name = config.compiler_name
        try:
            compiler_cls = builtin_compilers[name]
        except KeyError:
            raise BuildError('Unknown document compiler "%s"' % name) from None
        return compiler_cls(root=self.root_path)

    def render_template(self, name, values=None):
        return self.jinja_env.get_or_select_template(name).render(dict(values or ()))

    @staticmethod
    def select_jinja_autoescape(filename):
        if filename is None:
            return False
        return filename.endswith((".html", ".htm", ".xml", ".xhtml"))
