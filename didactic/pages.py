"""Derives the navigation tree of a site from its documents.

The tree is built in a single depth-first walk over the logical file map.
Every document is compiled exactly once during the walk and the result is
parked in a :class:`~didactic.cache.CompiledDocumentCache` for the render
pass.

A directory only becomes part of the site if it contains an ``index``
document; that document represents the directory as a
:class:`SectionPage`.  Directories without one are skipped together with
everything below them.
"""
from __future__ import annotations

import datetime
from dataclasses import dataclass
from dataclasses import replace
from typing import Dict
from typing import Iterable
from typing import Iterator
from typing import List
from typing import Optional
from typing import Tuple

from didactic.compiler import HTML_TARGET
from didactic.exception import CompileError
from didactic.filemap import FileMap
from didactic.filemap import LogicalPath
from didactic.reporter import reporter


INDEX_STEM = "index"


@dataclass(frozen=True)
class Page:
    """A leaf page backed by a single document."""

    title: str
    url: str
    section: str
    date: Optional[datetime.date]
    source: LogicalPath

    is_section = False

    @property
    def children(self) -> Tuple[Page, ...]:
        return ()


@dataclass(frozen=True)
class SectionPage(Page):
    """A directory, represented by its index document."""

    children: Tuple[Page, ...] = ()

    is_section = True


def section_index(
    file_map: FileMap, directory: LogicalPath, extension: str
) -> Optional[LogicalPath]:
    """Returns the index document of ``directory`` if it has one."""
    index = directory / (INDEX_STEM + extension)
    if index in file_map:
        return index
    return None


def compile_document(logical: LogicalPath, file_map: FileMap, compiler):
    physical = file_map.resolve(logical)
    with reporter.process_source(logical):
        try:
            return compiler.compile(physical, {"target": HTML_TARGET})
        except CompileError as e:
            if e.path is None:
                e.path = logical
            if e.physical_path is None:
                e.physical_path = physical
            raise
        except Exception as e:
            raise CompileError("Compilation failed: %s" % e, logical, physical) from e


def build_page_tree(
    prefix, file_map: FileMap, compiler, cache, is_root: bool = False
) -> List[Page]:
    """Compiles every document below ``prefix`` and returns the sorted
    page tree.

    Subdirectories come first, followed by the documents at this level.
    With ``is_root`` set an ``index`` document at this level is a page of
    its own; otherwise it belongs to the section of the parent call.
    """
    prefix = LogicalPath.parse(prefix)
    extension = compiler.source_extension
    items: List[Page] = []

    for directory in sorted(file_map.children(prefix)):
        index = section_index(file_map, directory, extension)
        if index is None:
            reporter.report_warning(
                "Skipped %s: no %s%s document" % (directory, INDEX_STEM, extension)
            )
            continue

        document = compile_document(index, file_map, compiler)
        children = build_page_tree(directory, file_map, compiler, cache)
        cache.put(index, document)
        items.append(
            SectionPage(
                title=document.title or directory.name.upper(),
                url=index.url,
                section=directory.name,
                date=document.date,
                source=index,
                children=tuple(children),
            )
        )

    for logical in file_map.documents_at(prefix, extension):
        if not is_root and logical.stem == INDEX_STEM:
            continue
        document = compile_document(logical, file_map, compiler)
        cache.put(logical, document)
        items.append(
            Page(
                title=document.title or logical.stem.upper(),
                url=logical.url,
                section="",
                date=document.date,
                source=logical,
            )
        )

    return sort_pages(items)


def _sort_key(page: Page):
    # Index pages keep their relative order; everything else goes by title.
    if page.url.endswith("/" + INDEX_STEM + ".html"):
        return (0, "")
    return (1, page.title)


def sort_pages(pages: Iterable[Page]) -> List[Page]:
    rv = []
    for page in sorted(pages, key=_sort_key):
        if page.is_section:
            page = replace(page, children=tuple(sort_pages(page.children)))
        rv.append(page)
    return rv


def iter_pages(pages: Iterable[Page]) -> Iterator[Page]:
    """Depth-first iteration over a page tree."""
    for page in pages:
        yield page
        yield from iter_pages(page.children)


def index_pages(pages: Iterable[Page]) -> Dict[LogicalPath, Page]:
    return {page.source: page for page in iter_pages(pages)}
