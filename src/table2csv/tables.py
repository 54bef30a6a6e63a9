"""
Table model and the document views tables are read from.

A view is either a rendered document (reading mode), from which tables can be
collected, or an editable source document, which the exporter refuses.
"""

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Optional, Union

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from .utils import validate_document_path

logger = logging.getLogger(__name__)

HTML_SUFFIXES = ['.html', '.htm', '.xhtml']
SOURCE_SUFFIXES = ['.md', '.markdown', '.txt']

# Elements rendered on lines of their own
_BLOCK_TAGS = {'p', 'div', 'li', 'ul', 'ol', 'pre', 'blockquote',
               'h1', 'h2', 'h3', 'h4', 'h5', 'h6', 'tr', 'table'}

_WHITESPACE_RE = re.compile(r'[ \t\r\n\f]+')


@dataclass
class Table:
    """Ordered rows of ordered cell texts. Rows are not padded."""
    rows: List[List[str]] = field(default_factory=list)
    caption: Optional[str] = None

    def __iter__(self) -> Iterator[List[str]]:
        return iter(self.rows)

    def __len__(self) -> int:
        return len(self.rows)

    @property
    def column_count(self) -> int:
        return max((len(row) for row in self.rows), default=0)


class TableSource(ABC):
    """Read-only access to the tables of the active document."""

    @abstractmethod
    def is_reading_mode(self) -> bool:
        """Return True when the document is shown rendered, not as editable source."""
        pass

    @abstractmethod
    def list_tables(self) -> List[Table]:
        """Return the document's tables in document order."""
        pass


class HtmlTableSource(TableSource):
    """Tables of a rendered HTML document."""

    def __init__(self, html: str, name: str = "<document>"):
        self.name = name
        self.soup = BeautifulSoup(html, 'html.parser')

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> 'HtmlTableSource':
        path = validate_document_path(str(path))
        with open(path, 'r', encoding='utf-8') as f:
            return cls(f.read(), name=str(path))

    def is_reading_mode(self) -> bool:
        return True

    def list_tables(self) -> List[Table]:
        tables = [self._read_table(element) for element in self.soup.find_all('table')]
        logger.debug(f"Found {len(tables)} tables in {self.name}")
        return tables

    def _read_table(self, element: Tag) -> Table:
        rows = []
        for tr in element.find_all('tr'):
            # Rows of nested tables belong to those tables
            if tr.find_parent('table') is not element:
                continue
            cells = tr.find_all(['td', 'th'], recursive=False)
            rows.append([render_text(cell) for cell in cells])

        caption = element.find('caption')
        caption_text = render_text(caption) if caption and caption.find_parent('table') is element else None
        return Table(rows=rows, caption=caption_text or None)


class MarkdownSourceView(TableSource):
    """A document opened as editable source text."""

    def __init__(self, text: str, name: str = "<document>"):
        self.name = name
        self.text = text

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> 'MarkdownSourceView':
        path = validate_document_path(str(path))
        with open(path, 'r', encoding='utf-8') as f:
            return cls(f.read(), name=str(path))

    def is_reading_mode(self) -> bool:
        return False

    def list_tables(self) -> List[Table]:
        # Source text has no rendered tables
        return []


def render_text(element: Tag) -> str:
    """Approximate the rendered text of an element.

    Whitespace runs collapse to a single space, ``<br>`` becomes a line break
    and block elements sit on lines of their own.
    """
    parts: List[str] = []
    _collect_text(element, parts)

    lines = [line.strip() for line in ''.join(parts).split('\n')]
    return '\n'.join(lines).strip('\n')


def _at_line_start(parts: List[str]) -> bool:
    for part in reversed(parts):
        if part.strip(' '):
            return part.endswith('\n')
    return True


def _collect_text(element: Tag, parts: List[str]) -> None:
    for node in element.children:
        if isinstance(node, Comment):
            continue
        if isinstance(node, NavigableString):
            parts.append(_WHITESPACE_RE.sub(' ', str(node)))
        elif isinstance(node, Tag):
            if node.name == 'br':
                parts.append('\n')
            elif node.name in _BLOCK_TAGS:
                if not _at_line_start(parts):
                    parts.append('\n')
                _collect_text(node, parts)
                if not _at_line_start(parts):
                    parts.append('\n')
            else:
                _collect_text(node, parts)


def open_view(path: Union[str, Path]) -> TableSource:
    """Open a document as a view, chosen by file suffix."""
    suffix = Path(path).suffix.lower()

    if suffix in HTML_SUFFIXES:
        return HtmlTableSource.from_file(path)
    if suffix in SOURCE_SUFFIXES:
        return MarkdownSourceView.from_file(path)

    raise ValueError(f"Unsupported document type: {path}")


def preview(table: Table, max_rows: int = 5, max_width: int = 20) -> str:
    """Short text rendering of a table for the selection surface."""
    if not table.rows:
        return "(empty table)"

    def clip(text: str) -> str:
        text = text.replace('\n', ' ')
        return text if len(text) <= max_width else text[:max_width - 3] + '...'

    lines = [" | ".join(clip(cell) for cell in row) for row in table.rows[:max_rows]]
    if len(table.rows) > max_rows:
        lines.append(f"... ({len(table.rows) - max_rows} more rows)")
    return "\n".join(lines)
