"""The logical file map merges several physical directory trees into one
addressable site tree.

Two kinds of paths travel through the build and must never be mixed up:

- a :class:`LogicalPath` is the address of a file inside the merged site
  tree (``blog/2024/post.lr``).  It is always relative, always uses forward
  slashes and never depends on which directory supplied the file.
- a physical path is a :class:`pathlib.Path` pointing at a real file.  When
  the map has a resolver base, physical paths below it are stored relative
  to it because document compilers resolve their own includes against that
  directory.
"""
from __future__ import annotations

import os
from pathlib import Path
from pathlib import PurePosixPath
from typing import Dict
from typing import FrozenSet
from typing import Iterator
from typing import List
from typing import Optional
from typing import Set
from typing import Union

from didactic.exception import MountError
from didactic.reporter import reporter


class LogicalPath(PurePosixPath):
    """A path inside the merged site tree.  ``LogicalPath()`` is the root."""

    @classmethod
    def parse(cls, value: Union[str, PurePosixPath, None]) -> LogicalPath:
        """Converts untrusted input into a logical path.

        Physical paths, absolute paths and paths escaping the tree with
        ``..`` are rejected.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, Path):
            raise TypeError("Physical path %r used as a logical path" % str(value))
        rv = cls(value or "")
        if rv.is_absolute() or ".." in rv.parts:
            raise ValueError("Invalid logical path %r" % str(value))
        return rv

    @property
    def url(self) -> str:
        """The URL of the HTML artifact built from this path."""
        return "/" + self.with_suffix(".html").as_posix()

    @property
    def depth(self) -> int:
        return len(self.parts)

    def is_below(self, prefix: LogicalPath) -> bool:
        return self.parts[: prefix.depth] == prefix.parts and self.depth > prefix.depth


# Special files that should always be ignored.
IGNORED_FILES = ["thumbs.db", "desktop.ini", "icon\r", ".ds_store"]

# Dot files that are still published.
SPECIAL_ARTIFACTS = [".htaccess", ".htpasswd"]


def is_ignored_name(filename: str) -> bool:
    """Hidden and system files never become part of the site tree."""
    if filename.lower() in IGNORED_FILES:
        return True
    return filename[:1] == "." and filename not in SPECIAL_ARTIFACTS


def _normalize_extension(extension: str) -> str:
    if extension and not extension.startswith("."):
        return "." + extension
    return extension


class FileMap:
    """Maps logical paths to physical paths.

    The map is filled by one or more :meth:`mount` calls and only read
    afterwards.  Later mounts win over earlier ones for identical logical
    paths while sibling files from different mounts live side by side.
    """

    def __init__(self, resolver_base: Optional[os.PathLike | str] = None):
        if resolver_base is not None:
            resolver_base = Path(resolver_base).absolute()
        self.resolver_base: Optional[Path] = resolver_base
        self._entries: Dict[LogicalPath, Path] = {}

    def __repr__(self) -> str:
        return "<%s %d entries base=%r>" % (
            self.__class__.__name__,
            len(self._entries),
            self.resolver_base and str(self.resolver_base),
        )

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[LogicalPath]:
        return iter(sorted(self._entries))

    def __contains__(self, logical) -> bool:
        return LogicalPath.parse(logical) in self._entries

    def mount(
        self, physical_dir: os.PathLike | str, prefix: Union[str, LogicalPath, None] = None
    ) -> None:
        """Merges the directory tree at ``physical_dir`` into the map,
        optionally below ``prefix``.
        """
        root = Path(physical_dir).absolute()
        if prefix is not None:
            prefix = LogicalPath.parse(prefix)
            if not prefix.parts:
                prefix = None
        if not root.is_dir():
            raise MountError("Mount source does not exist or is not a directory", root)
        reporter.report_debug_info(
            "mount", "%s -> /%s" % (root, prefix.as_posix() if prefix else "")
        )
        self._walk(root, root, prefix, frozenset([root.resolve()]))

    def _walk(
        self,
        directory: Path,
        base: Path,
        prefix: Optional[LogicalPath],
        ancestors: FrozenSet[Path],
    ) -> None:
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda x: x.name)
        except OSError as e:
            raise MountError("Could not read directory: %s" % e.strerror, directory) from e

        for entry in entries:
            if is_ignored_name(entry.name):
                continue
            real = Path(entry.path)
            try:
                relative = real.relative_to(base)
            except ValueError as e:
                raise MountError("File is not below its mount root %s" % base, real) from e
            if prefix is None:
                logical = LogicalPath(relative.as_posix())
            else:
                logical = prefix / relative.as_posix()

            try:
                is_dir = entry.is_dir()
                is_file = not is_dir and entry.is_file()
                resolved = real.resolve() if is_dir else None
            except (OSError, RuntimeError) as e:
                raise MountError("Could not read entry: %s" % e, real) from e

            if is_dir:
                if resolved in ancestors:
                    raise MountError("Directory links back to %s" % resolved, real)
                self._walk(real, base, prefix, ancestors | {resolved})
            elif is_file:
                self._entries[logical] = self._to_resolver_relative(real)

    def _to_resolver_relative(self, real: Path) -> Path:
        if self.resolver_base is None:
            return real
        try:
            return real.relative_to(self.resolver_base)
        except ValueError:
            return real

    def resolve(self, logical) -> Optional[Path]:
        """Returns the physical path for a logical path or `None` if the
        path is not part of the tree.
        """
        return self._entries.get(LogicalPath.parse(logical))

    def absolute(self, physical: Path) -> Path:
        """Turns a stored physical path back into an absolute one."""
        if physical.is_absolute() or self.resolver_base is None:
            return physical
        return self.resolver_base / physical

    def children(self, prefix=None) -> Set[LogicalPath]:
        """The immediate logical subdirectories of ``prefix``."""
        prefix = LogicalPath.parse(prefix)
        rv = set()
        for logical in self._entries:
            if logical.depth > prefix.depth + 1 and logical.is_below(prefix):
                rv.add(prefix / logical.parts[prefix.depth])
        return rv

    def documents_at(self, prefix, extension: str) -> List[LogicalPath]:
        """All files directly inside ``prefix`` with the given extension,
        sorted by logical path.
        """
        prefix = LogicalPath.parse(prefix)
        extension = _normalize_extension(extension)
        return sorted(
            logical
            for logical in self._entries
            if logical.depth == prefix.depth + 1
            and logical.is_below(prefix)
            and logical.suffix == extension
        )
