"""Public data models for md2nb.

This module contains the cell tree produced by the cell mapper and consumed
by the notebook serializer, the inline styled-run types, the table grid, and
the conversion result.  All cell-tree types are frozen dataclasses holding
tuples, so a finished tree is immutable and compares structurally.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum, Flag
from typing import Union


# ---------------------------------------------------------------------------
# Inline styling
# ---------------------------------------------------------------------------

class Style(Flag):
    """Style flags carried by a :class:`TextRun`.

    Composition is set union, so nesting order never matters:
    ``Style.BOLD | Style.ITALIC == Style.ITALIC | Style.BOLD``.
    """

    NONE = 0
    BOLD = 1
    ITALIC = 2
    CODE = 4


_KIND_NAMES: dict[Style, str] = {
    Style.NONE: "PlainText",
    Style.BOLD: "Bold",
    Style.ITALIC: "Italic",
    Style.BOLD | Style.ITALIC: "BoldItalic",
}


@dataclass(frozen=True)
class TextRun:
    """A contiguous piece of text sharing one set of style flags."""

    text: str
    style: Style = Style.NONE

    @property
    def kind(self) -> str:
        """One of ``PlainText``, ``Bold``, ``Italic``, ``BoldItalic``, ``InlineCode``.

        ``CODE`` wins over every other flag.
        """
        if Style.CODE in self.style:
            return "InlineCode"
        return _KIND_NAMES[self.style]


@dataclass(frozen=True)
class Hyperlink:
    """A link whose display text is itself a styled run."""

    display: tuple[TextRun | Hyperlink, ...]
    target: str


StyledRun = tuple[Union[TextRun, Hyperlink], ...]
"""A sequence of text runs and hyperlinks forming one piece of cell text."""


def plain(text: str) -> TextRun:
    return TextRun(text, Style.NONE)


def bold(text: str) -> TextRun:
    return TextRun(text, Style.BOLD)


def italic(text: str) -> TextRun:
    return TextRun(text, Style.ITALIC)


def bold_italic(text: str) -> TextRun:
    return TextRun(text, Style.BOLD | Style.ITALIC)


def code(text: str) -> TextRun:
    return TextRun(text, Style.CODE)


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------

class Alignment(str, Enum):
    """Horizontal alignment of a grid column."""

    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


@dataclass(frozen=True)
class GridCell:
    """One grid item: independently stylized content plus a wrap flag."""

    content: StyledRun = ()
    wrap: bool = True


@dataclass(frozen=True)
class Grid:
    """A fixed-column grid.  Row 0 is the table header."""

    rows: tuple[tuple[GridCell, ...], ...]
    alignments: tuple[Alignment, ...]

    @property
    def column_count(self) -> int:
        return len(self.alignments)


# ---------------------------------------------------------------------------
# Cell tree
# ---------------------------------------------------------------------------

class CellType(str, Enum):
    """The kind of a notebook cell, independent of its style tag."""

    TEXT = "text"
    CODE = "code"
    EXTERNAL_LANGUAGE = "external_language"
    TITLE = "title"
    SUBTITLE = "subtitle"
    ITEM = "item"
    ITEM_PARAGRAPH = "item_paragraph"
    BLOCK_QUOTE_TEXT = "block_quote_text"
    TABLE = "table"
    HORIZONTAL_RULE = "horizontal_rule"


CellContent = Union[StyledRun, str, Grid, None]


@dataclass(frozen=True)
class Cell:
    """A single typed, styled notebook cell.

    Attributes
    ----------
    cell_type:
        What the cell is (text, code, heading, list item, ...).
    style_tag:
        The notebook style name, e.g. ``"Section"`` or ``"Subitem"``.
    content:
        A :data:`StyledRun` for text-like cells, the verbatim source
        ``str`` for code cells, a :class:`Grid` for tables, ``None`` for
        horizontal rules.
    level:
        Heading level (1-6) for ``TITLE``/``SUBTITLE`` cells, else 0.
    nesting:
        Zero-based list or quote depth for item and quote cells, else 0.
        This is the raw depth; the style tag carries the capped depth.
    language:
        Evaluation language for ``EXTERNAL_LANGUAGE`` cells.
    """

    cell_type: CellType
    style_tag: str
    content: CellContent = ()
    level: int = 0
    nesting: int = 0
    language: str | None = None


@dataclass(frozen=True)
class CellGroup:
    """A header cell grouped with the cells it logically contains."""

    header: Cell
    children: tuple[Cell | CellGroup, ...] = ()


CellNode = Union[Cell, CellGroup]


def iter_cells(nodes: Iterable[CellNode]) -> Iterator[Cell]:
    """Yield every cell of a tree in document order, headers first."""
    for node in nodes:
        if isinstance(node, CellGroup):
            yield node.header
            yield from iter_cells(node.children)
        else:
            yield node


# ---------------------------------------------------------------------------
# Conversion results
# ---------------------------------------------------------------------------

@dataclass
class ConversionWarning:
    """A non-fatal observation made during conversion.

    Warnings never replace errors: anything that would lose content raises.

    Attributes
    ----------
    code:
        A machine-readable warning code (e.g. ``"NESTED_HEADING"``).
    message:
        A human-readable description.
    context:
        Arbitrary structured data for diagnostics.
    """

    code: str
    message: str
    context: dict = field(default_factory=dict)


@dataclass
class ConversionResult:
    """Outcome of a full Markdown-to-notebook conversion.

    Attributes
    ----------
    cells:
        The top-level cell tree.
    notebook:
        The serialized notebook text (pure ASCII).
    warnings:
        Informational warnings collected by the cell mapper.
    """

    cells: tuple[CellNode, ...]
    notebook: str
    warnings: list[ConversionWarning] = field(default_factory=list)

    def to_bytes(self) -> bytes:
        """Return the notebook encoded as UTF-8."""
        return self.notebook.encode("utf-8")
