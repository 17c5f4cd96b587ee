import copy
import os
from collections import OrderedDict

from inifile import IniFile
from werkzeug.utils import cached_property

from didactic.utils import bool_from_string


PROJECT_FILENAME = "didactic.ini"

DEFAULT_CONFIG = {
    "SASS_EXECUTABLE": None,
    "PROJECT": {
        "name": None,
        "output_path": "dist",
        "compiler": "record",
        "minify": "no",
    },
    "SITE": {
        "title": None,
        "author": None,
        "base_url": "",
        "language": "en-us",
    },
    "LINKS": OrderedDict(),
}


def update_config_from_ini(config, inifile):
    sass = inifile.get("env.sass_executable")
    if sass:
        config["SASS_EXECUTABLE"] = sass

    for section_name in ("PROJECT", "SITE"):
        section_config = inifile.section_as_dict(section_name.lower())
        config[section_name].update(section_config)

    for sect in inifile.sections():
        if sect.startswith("links."):
            link_id = sect.split(".", 1)[1]
            config["LINKS"][link_id] = inifile.section_as_dict(sect)


class LinkInfo:
    """An external directory mounted into the site below ``slug``."""

    def __init__(self, id, path, slug=None):
        self.id = id
        self.path = path
        self.slug = (slug or id).strip("/")

    def __repr__(self):
        return "<%s %r path=%r>" % (self.__class__.__name__, self.slug, self.path)

    def get_source_path(self, root_path):
        return os.path.normpath(os.path.join(root_path, self.path))

    def to_json(self):
        return {
            "id": self.id,
            "path": self.path,
            "slug": self.slug,
        }


class Config:
    def __init__(self, filename=None):
        self.filename = filename
        self.values = copy.deepcopy(DEFAULT_CONFIG)

        if filename is not None and os.path.isfile(filename):
            inifile = IniFile(filename)
            update_config_from_ini(self.values, inifile)

    def __getitem__(self, name):
        return self.values[name]

    @property
    def site(self):
        """The site values exposed to templates and the feed."""
        return dict(self.values["SITE"])

    @property
    def compiler_name(self):
        return self.values["PROJECT"]["compiler"]

    @property
    def output_path(self):
        return self.values["PROJECT"]["output_path"]

    @property
    def minify(self):
        return bool_from_string(self.values["PROJECT"]["minify"], False)

    @cached_property
    def base_url(self):
        """The external base URL without a trailing slash."""
        return (self.values["SITE"].get("base_url") or "").rstrip("/")

    @cached_property
    def links(self):
        """The linked directories in the order they are declared."""
        rv = []
        for link_id, info in self.values["LINKS"].items():
            if not info.get("path"):
                continue
            rv.append(LinkInfo(id=link_id, path=info["path"], slug=info.get("slug")))
        return rv

    def get_link(self, link_id):
        for link in self.links:
            if link.id == link_id:
                return link
        return None
