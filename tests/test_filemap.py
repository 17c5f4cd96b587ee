import os
from pathlib import Path
from pathlib import PurePosixPath

import pytest

from didactic.exception import MountError
from didactic.filemap import FileMap
from didactic.filemap import LogicalPath


@pytest.fixture
def source_tree(write_tree):
    return write_tree(
        {
            "a.txt": "a",
            "sub/b.txt": "b",
            "sub/deeper/c.txt": "c",
        },
        base="src",
    )


@pytest.mark.parametrize(
    "value, expected",
    [
        ("", ()),
        (None, ()),
        ("blog", ("blog",)),
        ("blog/post.lr", ("blog", "post.lr")),
        ("blog//post.lr", ("blog", "post.lr")),
        (PurePosixPath("a/b"), ("a", "b")),
    ],
)
def test_logical_path_parse(value, expected):
    assert LogicalPath.parse(value).parts == expected


@pytest.mark.parametrize("value", ["/etc/passwd", "../outside", "blog/../../x"])
def test_logical_path_parse_rejects_escaping_paths(value):
    with pytest.raises(ValueError):
        LogicalPath.parse(value)


def test_logical_path_parse_rejects_physical_paths(tmp_path):
    with pytest.raises(TypeError):
        LogicalPath.parse(tmp_path / "a.txt")


def test_logical_path_url():
    assert LogicalPath("blog/post.lr").url == "/blog/post.html"
    assert LogicalPath("index.typ").url == "/index.html"


def test_logical_path_is_below():
    assert LogicalPath("a/b/c").is_below(LogicalPath("a"))
    assert LogicalPath("a").is_below(LogicalPath())
    assert not LogicalPath("a").is_below(LogicalPath("a"))
    assert not LogicalPath("ab/c").is_below(LogicalPath("a"))


def test_mount_without_prefix(tmp_path, source_tree):
    file_map = FileMap(resolver_base=tmp_path)
    file_map.mount(source_tree)

    assert list(file_map) == [
        LogicalPath("a.txt"),
        LogicalPath("sub/b.txt"),
        LogicalPath("sub/deeper/c.txt"),
    ]
    assert file_map.resolve("sub/b.txt") == Path("src/sub/b.txt")
    assert file_map.resolve("sub/deeper/c.txt") == Path("src/sub/deeper/c.txt")


def test_mount_with_prefix(tmp_path, source_tree):
    file_map = FileMap(resolver_base=tmp_path)
    file_map.mount(source_tree, "notes/linked")

    assert len(file_map) == 3
    assert "notes/linked/a.txt" in file_map
    assert "a.txt" not in file_map
    assert file_map.resolve("notes/linked/sub/deeper/c.txt") == Path(
        "src/sub/deeper/c.txt"
    )


def test_every_file_resolves_back_to_itself(tmp_path, source_tree):
    file_map = FileMap(resolver_base=tmp_path)
    file_map.mount(source_tree, "p")

    for logical in file_map:
        physical = file_map.absolute(file_map.resolve(logical))
        relative = logical.relative_to("p")
        assert physical == source_tree.joinpath(*relative.parts)
        assert physical.is_file()


def test_mount_outside_resolver_base_keeps_absolute_path(tmp_path, source_tree):
    base = tmp_path / "elsewhere"
    base.mkdir()
    file_map = FileMap(resolver_base=base)
    file_map.mount(source_tree)

    physical = file_map.resolve("a.txt")
    assert physical.is_absolute()
    assert file_map.absolute(physical) == physical


def test_mount_without_resolver_base(source_tree):
    file_map = FileMap()
    file_map.mount(source_tree)
    assert file_map.resolve("a.txt") == source_tree.absolute() / "a.txt"


def test_mount_missing_directory(tmp_path):
    file_map = FileMap(resolver_base=tmp_path)
    with pytest.raises(MountError) as exc_info:
        file_map.mount(tmp_path / "missing")
    assert exc_info.value.path == tmp_path / "missing"
    assert len(file_map) == 0


def test_mount_file_is_not_a_directory(tmp_path, source_tree):
    file_map = FileMap(resolver_base=tmp_path)
    with pytest.raises(MountError):
        file_map.mount(source_tree / "a.txt")


def test_mount_symlink_loop(tmp_path, source_tree):
    os.symlink(source_tree, source_tree / "sub" / "loop")
    file_map = FileMap(resolver_base=tmp_path)
    with pytest.raises(MountError) as exc_info:
        file_map.mount(source_tree)
    assert exc_info.value.path == source_tree.absolute() / "sub" / "loop"


def test_mount_follows_symlink_outside_tree(tmp_path, source_tree, write_tree):
    shared = write_tree({"shared.txt": "s"}, base="shared")
    os.symlink(shared, source_tree / "linked")
    file_map = FileMap(resolver_base=tmp_path)
    file_map.mount(source_tree)
    assert "linked/shared.txt" in file_map


def test_mount_skips_hidden_files(tmp_path, write_tree):
    root = write_tree(
        {
            "index.lr": "",
            ".env": "SECRET=1",
            ".git/config": "",
            ".htaccess": "Deny from all",
            "Thumbs.db": "",
        },
        base="notes",
    )
    file_map = FileMap(resolver_base=tmp_path)
    file_map.mount(root, "notes")

    assert list(file_map) == [
        LogicalPath("notes/.htaccess"),
        LogicalPath("notes/index.lr"),
    ]
    assert file_map.children("notes") == set()


def test_mount_empty_prefix(tmp_path, source_tree, reporter):
    file_map = FileMap(resolver_base=tmp_path)
    file_map.mount(source_tree, "")

    assert "a.txt" in file_map
    (event,) = [data for event, data in reporter.buffer if event == "debug-info"]
    assert event["value"] == "%s -> /" % source_tree.absolute()


def test_later_mounts_shadow_earlier_ones(tmp_path, write_tree):
    first = write_tree({"same.txt": "first", "one.txt": "1"}, base="first")
    second = write_tree({"same.txt": "second", "two.txt": "2"}, base="second")

    file_map = FileMap(resolver_base=tmp_path)
    file_map.mount(first)
    file_map.mount(second)

    assert list(file_map) == [
        LogicalPath("one.txt"),
        LogicalPath("same.txt"),
        LogicalPath("two.txt"),
    ]
    assert file_map.resolve("same.txt") == Path("second/same.txt")
    assert file_map.resolve("one.txt") == Path("first/one.txt")


def test_resolve_unknown_path(tmp_path, source_tree):
    file_map = FileMap(resolver_base=tmp_path)
    file_map.mount(source_tree)
    assert file_map.resolve("nope.txt") is None
    assert file_map.resolve("sub") is None


def test_children(tmp_path, source_tree):
    file_map = FileMap(resolver_base=tmp_path)
    file_map.mount(source_tree)

    assert file_map.children(LogicalPath()) == {LogicalPath("sub")}
    assert file_map.children("sub") == {LogicalPath("sub/deeper")}
    assert file_map.children("sub/deeper") == set()
    assert file_map.children("a.txt") == set()


def test_documents_at(tmp_path, write_tree):
    root = write_tree(
        {
            "index.typ": "",
            "b.typ": "",
            "a.typ": "",
            "image.png": "",
            "notes.typ.bak": "",
            "blog/post.typ": "",
        }
    )
    file_map = FileMap(resolver_base=tmp_path)
    file_map.mount(root)

    expected = [LogicalPath("a.typ"), LogicalPath("b.typ"), LogicalPath("index.typ")]
    assert file_map.documents_at(LogicalPath(), ".typ") == expected
    assert file_map.documents_at(LogicalPath(), "typ") == expected
    assert file_map.documents_at("blog", ".typ") == [LogicalPath("blog/post.typ")]
    assert file_map.documents_at("missing", ".typ") == []
