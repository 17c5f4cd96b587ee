from __future__ import annotations

import datetime
from pathlib import Path
from typing import Mapping
from typing import Optional

from markupsafe import escape

from didactic.exception import CompileError
from didactic.markdown import render_markdown
from didactic.records import read_record


HTML_TARGET = "html"


class Document:
    """A compiled source document.

    Only the declared title and date are inspected by the build; the body
    is opaque until :meth:`render` is called.
    """

    def __init__(
        self,
        title: Optional[str] = None,
        date: Optional[datetime.date] = None,
        body: str = "",
    ) -> None:
        self.title = title
        self.date = date
        self.body = body

    def __repr__(self) -> str:
        return "<%s %r date=%s>" % (self.__class__.__name__, self.title, self.date)

    def render(self) -> str:
        return (
            "<!doctype html>\n"
            "<html>\n"
            "<head>\n"
            '<meta charset="utf-8">\n'
            "<title>%s</title>\n"
            "</head>\n"
            "<body>\n%s</body>\n"
            "</html>\n"
        ) % (escape(self.title or ""), self.body)


class Compiler:
    """Turns one source file into a :class:`Document`.

    Physical paths handed to :meth:`compile` may be relative; they are
    resolved against ``root``, which is the same directory the file map
    uses as its resolver base.
    """

    source_extension: str = ""

    def __init__(self, root: Optional[str | Path] = None) -> None:
        self.root = Path(root) if root is not None else None

    def resolve_path(self, physical_path: str | Path) -> Path:
        physical_path = Path(physical_path)
        if physical_path.is_absolute() or self.root is None:
            return physical_path
        return self.root / physical_path

    def compile(
        self, physical_path: str | Path, inputs: Optional[Mapping[str, str]] = None
    ) -> Document:
        raise NotImplementedError()


def parse_date(value: Optional[str]) -> Optional[datetime.date]:
    if value is None or not value.strip():
        return None
    return datetime.date.fromisoformat(value.strip())


class RecordCompiler(Compiler):
    """Compiles record files with ``title``, ``date`` and a markdown
    ``body`` field.
    """

    source_extension = ".lr"

    def compile(self, physical_path, inputs=None):
        inputs = dict(inputs or ())
        target = inputs.get("target", HTML_TARGET)
        if target != HTML_TARGET:
            raise CompileError(
                "Unsupported output target %r" % target, physical_path=physical_path
            )

        filename = self.resolve_path(physical_path)
        try:
            fields = read_record(filename)
        except (OSError, UnicodeDecodeError) as e:
            raise CompileError(
                "Could not read document: %s" % e, physical_path=physical_path
            ) from e

        try:
            date = parse_date(fields.get("date"))
        except ValueError as e:
            raise CompileError(
                "Invalid date %r" % fields["date"].strip(), physical_path=physical_path
            ) from e

        return Document(
            title=fields.get("title", "").strip() or None,
            date=date,
            body=render_markdown(fields.get("body", ""), self.source_extension),
        )


builtin_compilers = {
    "record": RecordCompiler,
}
