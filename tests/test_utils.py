import os

import pytest

from didactic.utils import atomic_open
from didactic.utils import bool_from_string
from didactic.utils import is_unsafe_to_delete
from didactic.utils import locate_executable


@pytest.mark.parametrize(
    "path, base, expected",
    [
        ("/a/b", "/a/b", True),
        ("/a", "/a/b", True),
        ("/", "/a/b", True),
        ("/a/b/dist", "/a/b", False),
        ("/a/c", "/a/b", False),
        ("/x", "/a/b", False),
    ],
)
def test_is_unsafe_to_delete(path, base, expected):
    assert is_unsafe_to_delete(path, base) is expected


@pytest.mark.parametrize(
    "value, expected",
    [
        ("yes", True),
        ("TRUE", True),
        ("1", True),
        (True, True),
        ("no", False),
        ("False", False),
        (0, False),
        ("maybe", None),
        (None, None),
    ],
)
def test_bool_from_string(value, expected):
    assert bool_from_string(value) is expected


def test_atomic_open(tmp_path):
    filename = tmp_path / "out.txt"
    with atomic_open(str(filename), "w", encoding="utf-8") as f:
        f.write("hello")
        assert not filename.exists()
    assert filename.read_text("utf-8") == "hello"
    assert os.listdir(tmp_path) == ["out.txt"]


def test_atomic_open_keeps_old_file_on_error(tmp_path):
    filename = tmp_path / "out.txt"
    filename.write_text("old", "utf-8")
    with pytest.raises(RuntimeError):
        with atomic_open(str(filename), "w", encoding="utf-8") as f:
            f.write("new")
            raise RuntimeError()
    assert filename.read_text("utf-8") == "old"
    assert os.listdir(tmp_path) == ["out.txt"]


def test_locate_executable(tmp_path, monkeypatch):
    exe = tmp_path / "tool"
    exe.write_text("#!/bin/sh\n", "utf-8")
    exe.chmod(0o755)
    monkeypatch.setitem(os.environ, "PATH", str(tmp_path))
    locate_executable.cache_clear()
    try:
        assert locate_executable("tool") == str(exe)
        assert locate_executable("missing-tool") is None
    finally:
        locate_executable.cache_clear()


def test_locate_executable_no_utils(no_utils):
    assert locate_executable("sass") is None
