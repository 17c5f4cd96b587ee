import os
import shutil
import textwrap
from pathlib import Path

import pytest
from markupsafe import escape

from didactic.builder import Builder
from didactic.compiler import Compiler
from didactic.compiler import Document
from didactic.compiler import parse_date
from didactic.exception import CompileError
from didactic.filemap import FileMap
from didactic.project import Project
from didactic.records import read_record
from didactic.reporter import BufferReporter
from didactic.utils import locate_executable


class FakeCompiler(Compiler):
    """Compiles ``.typ`` files written in the record format without
    markdown.  A ``fail`` field makes the compilation fail.
    """

    source_extension = ".typ"

    def __init__(self, root=None):
        Compiler.__init__(self, root)
        self.compiled = []

    def compile(self, physical_path, inputs=None):
        self.compiled.append(Path(physical_path))
        assert dict(inputs or ()) == {"target": "html"}
        fields = read_record(self.resolve_path(physical_path))
        if "fail" in fields:
            raise CompileError(fields["fail"].strip())
        return Document(
            title=fields.get("title", "").strip() or None,
            date=parse_date(fields.get("date")),
            body="<p>%s</p>\n" % escape(fields.get("body", "")),
        )


@pytest.fixture(scope="session")
def data_path():
    """Path to directory which contains test data.

    Current this data lives in the ``tests`` directory.
    """
    return Path(__file__).parent


@pytest.fixture(scope="session")
def project(data_path):
    return Project.from_path(data_path / "demo-project")


@pytest.fixture(scope="function")
def env(project):
    return project.make_env()


@pytest.fixture(scope="function")
def write_tree(tmp_path):
    """Returns a function that writes a dict of files below ``tmp_path``."""

    def write_tree(files, base="site"):
        root = tmp_path / base
        root.mkdir(parents=True, exist_ok=True)
        for path, text in files.items():
            filename = root / path
            filename.parent.mkdir(parents=True, exist_ok=True)
            filename.write_text(textwrap.dedent(text), "utf-8")
        return root

    return write_tree


@pytest.fixture(scope="function")
def compiler(tmp_path):
    return FakeCompiler(root=tmp_path)


@pytest.fixture(scope="function")
def make_file_map(tmp_path):
    def make_file_map(*mounts):
        file_map = FileMap(resolver_base=tmp_path)
        for mount in mounts:
            if isinstance(mount, tuple):
                file_map.mount(*mount)
            else:
                file_map.mount(mount)
        return file_map

    return make_file_map


@pytest.fixture(scope="function")
def scratch_project_data(tmp_path):
    base = tmp_path / "scratch-proj"

    def write_text(path, text):
        filename = base / path
        filename.parent.mkdir(parents=True, exist_ok=True)
        filename.write_text(textwrap.dedent(text), "utf-8")

    write_text(
        "didactic.ini",
        """
        [project]
        name = Scratch

        [site]
        title = Scratch Site
        base_url = https://scratch.example.com/
        """,
    )
    write_text(
        "content/index.lr",
        """
        title: Index
        ---
        date: 2024-01-01
        ---
        body: *Hello World!*
        """,
    )
    write_text(
        "templates/index.html",
        """
        <!doctype html>
        <title>{{ page.title }} | {{ site.title }}</title>
        <ul>{% for item in menu %}<li>{{ item.title }}</li>{% endfor %}</ul>
        <main data-section="{{ current_section }}">{{ content }}</main>
        """,
    )

    return base


@pytest.fixture(scope="function")
def scratch_project(scratch_project_data):
    return Project.from_path(scratch_project_data)


@pytest.fixture(scope="function")
def scratch_env(scratch_project):
    return scratch_project.make_env()


@pytest.fixture(scope="function")
def scratch_builder(tmp_path, scratch_env):
    return Builder(scratch_env, str(tmp_path / "output"))


@pytest.fixture(scope="function")
def builder(tmp_path, env):
    return Builder(env, str(tmp_path / "output"))


@pytest.fixture(scope="function")
def reporter(request):
    reporter = BufferReporter(None)
    reporter.push()
    request.addfinalizer(reporter.pop)
    return reporter


@pytest.fixture(scope="function")
def project_cli_runner(isolated_cli_runner, project):
    """
    Copy the project files into the isolated file system used by the
    Click test runner.
    """
    for entry in os.listdir(project.tree):
        entry_path = os.path.join(project.tree, entry)
        if os.path.isdir(entry_path):
            shutil.copytree(entry_path, entry)
        else:
            shutil.copy2(entry_path, entry)
    return isolated_cli_runner


@pytest.fixture
def no_utils(monkeypatch):
    """Monkeypatch $PATH to hide any installed external utilities
    (e.g. sass)."""
    monkeypatch.setitem(os.environ, "PATH", "/dev/null")
    locate_executable.cache_clear()
    try:
        yield
    finally:
        locate_executable.cache_clear()
