import os

from inifile import IniFile

from didactic.config import PROJECT_FILENAME
from didactic.environment import Environment


class Project:
    def __init__(self, name, project_file, tree):
        self.name = name
        self.project_file = project_file
        self.tree = os.path.normpath(tree)

    def open_config(self):
        if self.project_file is None:
            raise RuntimeError("This project has no project file.")
        return IniFile(self.project_file)

    @classmethod
    def from_file(cls, filename):
        """Reads a project from a project file."""
        inifile = IniFile(filename)
        if inifile.is_new:
            return None

        tree = os.path.dirname(os.path.abspath(filename))
        name = inifile.get("project.name") or os.path.basename(tree)
        return cls(name=name, project_file=filename, tree=tree)

    @classmethod
    def from_path(cls, path):
        """Locates the project for a path."""
        path = os.path.abspath(path)
        if os.path.isfile(path):
            if os.path.basename(path) != PROJECT_FILENAME:
                return None
            return cls.from_file(path)

        project_file = os.path.join(path, PROJECT_FILENAME)
        if os.path.isfile(project_file):
            return cls.from_file(project_file)
        return None

    @classmethod
    def discover(cls, base=None):
        """Auto discovers the closest project."""
        if base is None:
            base = os.getcwd()
        here = os.path.abspath(base)
        while 1:
            project = cls.from_path(here)
            if project is not None:
                return project
            node = os.path.dirname(here)
            if node == here:
                break
            here = node
        return None

    @property
    def project_path(self):
        return self.project_file or self.tree

    @property
    def content_path(self):
        return os.path.join(self.tree, "content")

    @property
    def template_path(self):
        return os.path.join(self.tree, "templates")

    @property
    def static_path(self):
        return os.path.join(self.tree, "static")

    def get_output_path(self):
        """The path where the site is built into."""
        output_path = "dist"
        if self.project_file is not None:
            output_path = self.open_config().get("project.output_path") or output_path
        return os.path.normpath(os.path.join(self.tree, output_path))

    def make_env(self):
        """Create a new environment for this project."""
        return Environment(self)

    def to_json(self):
        return {
            "name": self.name,
            "project_file": self.project_file,
            "project_path": self.project_path,
            "output_path": self.get_output_path(),
            "tree": self.tree,
        }
