r"""Render a cell tree as Wolfram notebook expression text.

The output is a complete notebook file::

    (* Content-type: application/vnd.wolfram.mathematica *)

    Notebook[{
    Cell[CellGroupData[{
    Cell["Title", "Title"],
    Cell[TextData[{"Some ", StyleBox["bold", FontWeight->"Bold"], " text."}], "Text"]
    }, Open  ]]
    },
    StyleDefinitions->"Default.nb"
    ]

Strings are written in the notebook's ASCII string syntax: ``\\``, ``\"``,
``\n``, ``\t`` and ``\r`` are backslash escapes, printable ASCII is copied,
and every other code point is written as ``\:hhhh`` (BMP) or ``\|hhhhhh``
(astral planes).  Control characters and lone surrogates have no encoding
and raise :class:`~md2nb.errors.UnencodableCharacterError`.

Rendering is a pure function of the tree: serializing the same tree twice
yields identical text.
"""

from __future__ import annotations

from collections.abc import Iterable

from md2nb.config import WOLFRAM_LANGUAGE
from md2nb.errors import UnencodableCharacterError
from md2nb.models import (
    Alignment,
    Cell,
    CellGroup,
    CellNode,
    CellType,
    Grid,
    GridCell,
    Hyperlink,
    Style,
    StyledRun,
    TextRun,
)

FILE_HEADER = "(* Content-type: application/vnd.wolfram.mathematica *)\n\n"

NOTEBOOK_OPTIONS: tuple[str, ...] = (
    'StyleDefinitions->"Default.nb"',
)
"""Fixed global notebook metadata written after the cell list."""

_ESCAPES: dict[str, str] = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\t": "\\t",
    "\r": "\\r",
}

_ALIGNMENT_SYMBOLS: dict[Alignment, str] = {
    Alignment.LEFT: "Left",
    Alignment.CENTER: "Center",
    Alignment.RIGHT: "Right",
}

_QUOTE_BASE_MARGIN = 66
_QUOTE_INDENT = 24
_QUOTE_MAX_LEVEL = 2

_RULE_OPTIONS: tuple[str, ...] = (
    "Editable->False",
    "Selectable->False",
    "CellFrame->{{0, 0}, {0, 0.5}}",
    "ShowCellBracket->False",
    "CellMargins->{{0, 0}, {1, 1}}",
    "CellFrameMargins->0",
    "CellSize->{Inherited, 3}",
)


# ---------------------------------------------------------------------------
# Strings
# ---------------------------------------------------------------------------

def escape_string(text: str) -> str:
    """Escape *text* for use inside a notebook string literal.

    Raises
    ------
    UnencodableCharacterError
        For control characters other than tab, newline and carriage return,
        and for lone surrogates.
    """
    parts: list[str] = []
    for ch in text:
        escaped = _ESCAPES.get(ch)
        if escaped is not None:
            parts.append(escaped)
            continue
        codepoint = ord(ch)
        if 0x20 <= codepoint < 0x7F:
            parts.append(ch)
        elif codepoint < 0xA0 or 0xD800 <= codepoint <= 0xDFFF:
            raise UnencodableCharacterError(ch)
        elif codepoint <= 0xFFFF:
            parts.append(f"\\:{codepoint:04x}")
        else:
            parts.append(f"\\|{codepoint:06x}")
    return "".join(parts)


def quote(text: str) -> str:
    """Return *text* as a quoted notebook string literal."""
    return f'"{escape_string(text)}"'


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def serialize_notebook(cells: Iterable[CellNode]) -> str:
    """Render a whole notebook document from its top-level cells."""
    body = ",\n".join(serialize_cell(node) for node in cells)
    parts = [FILE_HEADER, "Notebook[{\n"]
    if body:
        parts.append(body + "\n")
    parts.append("},\n")
    parts.append(",\n".join(NOTEBOOK_OPTIONS) + "\n")
    parts.append("]\n")
    return "".join(parts)


def serialize_cell(node: CellNode) -> str:
    """Render a single cell or cell group expression."""
    if isinstance(node, CellGroup):
        members = [serialize_cell(node.header)]
        members.extend(serialize_cell(child) for child in node.children)
        return "Cell[CellGroupData[{\n" + ",\n".join(members) + "\n}, Open  ]]"

    args = [_cell_content(node), quote(node.style_tag)]
    args.extend(_cell_options(node))
    return "Cell[" + ", ".join(args) + "]"


def serialize_run(run: StyledRun) -> str:
    """Render a styled run as a string literal or a ``TextData`` expression."""
    if not run:
        return '""'
    if len(run) == 1 and isinstance(run[0], TextRun) and run[0].style == Style.NONE:
        return quote(run[0].text)
    return "TextData[{" + ", ".join(_inline_box(node) for node in run) + "}]"


# ---------------------------------------------------------------------------
# Cell parts
# ---------------------------------------------------------------------------

def _cell_content(cell: Cell) -> str:
    if cell.cell_type in (CellType.CODE, CellType.EXTERNAL_LANGUAGE):
        return quote(cell.content if isinstance(cell.content, str) else "")
    if cell.cell_type is CellType.TABLE:
        grid = cell.content if isinstance(cell.content, Grid) else Grid(rows=(), alignments=())
        return "BoxData[" + _grid_box(grid) + "]"
    if cell.cell_type is CellType.HORIZONTAL_RULE:
        return '""'
    content = cell.content if isinstance(cell.content, tuple) else ()
    return serialize_run(content)


def _cell_options(cell: Cell) -> list[str]:
    if cell.cell_type is CellType.EXTERNAL_LANGUAGE and cell.language != WOLFRAM_LANGUAGE:
        return [f"CellEvaluationLanguage->{quote(cell.language or '')}"]
    if cell.cell_type is CellType.BLOCK_QUOTE_TEXT:
        level = min(cell.nesting, _QUOTE_MAX_LEVEL)
        left = _QUOTE_BASE_MARGIN + _QUOTE_INDENT * level
        return [
            "CellFrame->{{3, 0}, {0, 0}}",
            "CellFrameColor->GrayLevel[0.8]",
            f"CellMargins->{{{{{left}, 10}}, {{7, 7}}}}",
        ]
    if cell.cell_type is CellType.HORIZONTAL_RULE:
        return list(_RULE_OPTIONS)
    return []


def _inline_box(node: TextRun | Hyperlink) -> str:
    if isinstance(node, Hyperlink):
        if not node.display:
            display = quote(node.target)
        elif len(node.display) == 1:
            display = _inline_box(node.display[0])
        else:
            display = "RowBox[{" + ", ".join(_inline_box(n) for n in node.display) + "}]"
        target = quote(node.target)
        return (
            f"ButtonBox[{display}, BaseStyle->\"Hyperlink\", "
            f"ButtonData->{{URL[{target}], None}}, ButtonNote->{target}]"
        )

    text = quote(node.text)
    options: list[str] = []
    if Style.CODE in node.style:
        options.append('"Code"')
    if Style.BOLD in node.style:
        options.append('FontWeight->"Bold"')
    if Style.ITALIC in node.style:
        options.append('FontSlant->"Italic"')
    if not options:
        return text
    return "StyleBox[" + ", ".join([text, *options]) + "]"


def _grid_box(grid: Grid) -> str:
    rows = ", ".join(
        "{" + ", ".join(_grid_item(cell) for cell in row) + "}"
        for row in grid.rows
    )
    columns = ", ".join(_ALIGNMENT_SYMBOLS[align] for align in grid.alignments)
    return (
        "GridBox[{" + rows + "}, "
        'GridBoxAlignment->{"Columns"->{' + columns + "}}, "
        'GridBoxDividers->{"Columns"->{{True}}, "Rows"->{{True}}}]'
    )


def _grid_item(cell: GridCell) -> str:
    item = "Cell[" + serialize_run(cell.content) + ', "Text"'
    if cell.wrap:
        item += ", LineBreakWithin->Automatic"
    return item + "]"
