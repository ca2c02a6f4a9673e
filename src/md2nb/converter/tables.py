"""Table conversion: Markdown table AST to a notebook grid.

Tables are recognized by :func:`lenient_table`, a mistune block plugin that
replaces mistune's own ``table`` plugin.  Both pipe tables
(``| a | b |``) and bare tables (``a | b``) are accepted, at document level
and inside block quotes and list items.  A body row whose cell count differs
from the header is kept as written instead of demoting the whole table to a
paragraph; :func:`build_grid` then pads it.

The table AST structure (after normalization) looks like::

    {
        "type": "table",
        "children": [
            {
                "type": "table_head",
                "children": [
                    {"type": "table_cell", "attrs": {"align": "center", "head": true},
                     "children": [inline tokens...]},
                    ...
                ]
            },
            {
                "type": "table_body",
                "children": [
                    {
                        "type": "table_row",
                        "children": [
                            {"type": "table_cell", "attrs": {"align": null, "head": false},
                             "children": [inline tokens...]},
                            ...
                        ]
                    },
                    ...
                ]
            }
        ]
    }

The resulting :class:`~md2nb.models.Grid` has one row per header/body row,
a column alignment taken from the delimiter row (``left`` when unset), and
every cell flagged for word wrapping.  Rows shorter than the widest row are
padded with empty cells rather than rejected.
"""

from __future__ import annotations

import re
from re import Match
from typing import Any

import mistune
from mistune.core import BlockState

from md2nb.converter.inline_stylizer import build_styled_run
from md2nb.models import Alignment, Grid, GridCell

_ALIGNMENTS: dict[str | None, Alignment] = {
    None: Alignment.LEFT,
    "left": Alignment.LEFT,
    "center": Alignment.CENTER,
    "right": Alignment.RIGHT,
}


# ---------------------------------------------------------------------------
# Block rule
# ---------------------------------------------------------------------------

TABLE_PATTERN = r"^ {0,3}(?:\|[^\n]*|\S[^\n]*\|[^\n]*)(?:\n|$)"
"""A candidate header row: any line holding a pipe, outer pipes optional."""

_DELIMITER_CELL = re.compile(r"^(:?)-+(:?)$")


def lenient_table(md: mistune.Markdown) -> None:
    """Mistune plugin: tables whose body rows may be ragged."""
    md.block.register("table", TABLE_PATTERN, parse_table, before="paragraph")
    for rules in (md.block.block_quote_rules, md.block.list_rules):
        if "table" not in rules:
            md.block.insert_rule(rules, "table", before="paragraph")


def parse_table(block: mistune.BlockParser, m: Match[str], state: BlockState) -> int | None:
    """Consume a header, a delimiter row and every following table row.

    Returns ``None`` (not a table) when the second line is not a delimiter
    row with one cell per header cell.  Body rows are kept with whatever
    cell count they have.
    """
    header = _strip_row(m.group(0))
    pos = m.end()
    if header is None or pos >= state.cursor_max:
        return None

    delimiter_line = _line_at(state.src, pos)
    delimiter = _strip_row(delimiter_line)
    if delimiter is None:
        return None

    head_cells = _split_cells(header)
    aligns = _parse_alignments(_split_cells(delimiter))
    if aligns is None or len(aligns) != len(head_cells):
        return None
    pos += len(delimiter_line)

    rows: list[dict[str, Any]] = []
    while pos < state.cursor_max:
        line = _line_at(state.src, pos)
        text = _strip_row(line)
        if text is None:
            break
        rows.append({
            "type": "table_row",
            "children": _cell_tokens(_split_cells(text), aligns, head=False),
        })
        pos += len(line)

    state.append_token({
        "type": "table",
        "children": [
            {"type": "table_head", "children": _cell_tokens(head_cells, aligns, head=True)},
            {"type": "table_body", "children": rows},
        ],
    })
    return pos


def _line_at(src: str, pos: int) -> str:
    end = src.find("\n", pos)
    return src[pos:] if end == -1 else src[pos:end + 1]


def _strip_row(line: str) -> str | None:
    """Drop the optional outer pipes of a row; ``None`` if it has no pipe."""
    text = line.strip()
    if "|" not in text:
        return None
    if text.startswith("|"):
        text = text[1:]
    if text.endswith("|") and not _is_escaped(text, len(text) - 1):
        text = text[:-1]
    return text


def _is_escaped(text: str, pos: int) -> bool:
    backslashes = 0
    pos -= 1
    while pos >= 0 and text[pos] == "\\":
        backslashes += 1
        pos -= 1
    return backslashes % 2 == 1


def _split_cells(text: str) -> list[str]:
    """Split a row on unescaped pipes."""
    cells: list[str] = []
    start = 0
    for pos, ch in enumerate(text):
        if ch == "|" and not _is_escaped(text, pos):
            cells.append(text[start:pos].strip())
            start = pos + 1
    cells.append(text[start:].strip())
    return cells


def _parse_alignments(cells: list[str]) -> list[str | None] | None:
    aligns: list[str | None] = []
    for cell in cells:
        m = _DELIMITER_CELL.match(cell.replace(" ", ""))
        if m is None:
            return None
        left, right = m.group(1), m.group(2)
        if left and right:
            aligns.append("center")
        elif left:
            aligns.append("left")
        elif right:
            aligns.append("right")
        else:
            aligns.append(None)
    return aligns


def _cell_tokens(cells: list[str], aligns: list[str | None], *, head: bool) -> list[dict[str, Any]]:
    # Cells past the delimiter row's width get no alignment
    return [
        {
            "type": "table_cell",
            "text": text,
            "attrs": {"align": aligns[i] if i < len(aligns) else None, "head": head},
        }
        for i, text in enumerate(cells)
    ]


# ---------------------------------------------------------------------------
# Grid building
# ---------------------------------------------------------------------------

def build_grid(token: dict[str, Any]) -> Grid:
    """Build a notebook grid from a normalized table AST token."""
    rows: list[list[GridCell]] = []
    aligns: list[Alignment] = []

    for child in token.get("children", []):
        child_type = child.get("type", "")

        if child_type == "table_head":
            cells = child.get("children", [])
            rows.append(_build_row_cells(cells))
            aligns = [_cell_alignment(cell) for cell in cells]

        elif child_type == "table_body":
            for row in child.get("children", []):
                if row.get("type") == "table_row":
                    rows.append(_build_row_cells(row.get("children", [])))

    width = max((len(row) for row in rows), default=0)

    # Pad every row (and the alignment list) to the full width
    for row in rows:
        row.extend(GridCell() for _ in range(width - len(row)))
    aligns.extend(Alignment.LEFT for _ in range(width - len(aligns)))

    return Grid(
        rows=tuple(tuple(row) for row in rows),
        alignments=tuple(aligns[:width]),
    )


def _build_row_cells(cells: list[dict[str, Any]]) -> list[GridCell]:
    """Stylize each table_cell independently."""
    result: list[GridCell] = []
    for cell in cells:
        if cell.get("type") != "table_cell":
            result.append(GridCell())
            continue
        result.append(GridCell(content=build_styled_run(cell.get("children", []))))
    return result


def _cell_alignment(cell: dict[str, Any]) -> Alignment:
    align = (cell.get("attrs") or {}).get("align")
    return _ALIGNMENTS.get(align, Alignment.LEFT)
