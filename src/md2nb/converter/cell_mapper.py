"""Convert normalized AST tokens to a notebook cell tree.

Mapping rules:

- heading -> ``Title`` / ``Chapter`` / ``Section`` / ``Subsection`` /
  ``Subsubsection`` / ``Subsubsubsection``; at document level each heading
  opens a cell group holding everything up to the next heading of the same
  or a shallower level
- paragraph -> ``Text`` cell (``Quote`` family inside block quotes)
- list -> one ``Item``/``ItemNumbered`` family cell per item, depth-capped
- block_quote -> ``Quote`` family cells grouped under the quote's first cell
- block_code -> ``Program`` cell, or an external-language cell for a
  recognized fence tag
- table -> ``Text`` cell wrapping a grid
- thematic_break -> horizontal rule cell
- html_block -> ``Program`` cell holding the raw HTML

The walk threads an immutable :class:`_MapContext` through every handler,
so each handler is a pure function of (token, context).  Warnings come from
a separate read-only pass, :func:`collect_warnings`.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from md2nb.config import WOLFRAM_LANGUAGE, NotebookConfig
from md2nb.converter.inline_stylizer import build_styled_run
from md2nb.converter.languages import resolve_code_cell
from md2nb.converter.tables import build_grid
from md2nb.errors import MalformedTreeError
from md2nb.models import Cell, CellGroup, CellNode, CellType, ConversionWarning

# ---------------------------------------------------------------------------
# Style tags
# ---------------------------------------------------------------------------

HEADING_STYLES: dict[int, str] = {
    1: "Title",
    2: "Chapter",
    3: "Section",
    4: "Subsection",
    5: "Subsubsection",
    6: "Subsubsubsection",
}

BULLET_ITEM_STYLES: tuple[str, ...] = ("Item", "Subitem", "Subsubitem")
NUMBERED_ITEM_STYLES: tuple[str, ...] = ("ItemNumbered", "SubitemNumbered", "SubsubitemNumbered")
ITEM_PARAGRAPH_STYLES: tuple[str, ...] = ("ItemParagraph", "SubitemParagraph", "SubsubitemParagraph")
QUOTE_STYLES: tuple[str, ...] = ("Quote", "Subquote", "Subsubquote")

TEXT_STYLE = "Text"
PROGRAM_STYLE = "Program"
EXTERNAL_LANGUAGE_STYLE = "ExternalLanguage"
WOLFRAM_CODE_STYLE = "Code"


def nesting_style(styles: tuple[str, ...], depth: int) -> str:
    """Pick the style for *depth*, reusing the deepest one past the end."""
    return styles[min(max(depth, 0), len(styles) - 1)]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def build_cells(
    tokens: list[dict],
    config: NotebookConfig,
) -> tuple[tuple[CellNode, ...], list[ConversionWarning]]:
    """Convert normalized AST tokens to a cell tree.

    Parameters
    ----------
    tokens:
        List of canonical AST tokens from :class:`ASTNormalizer`.
    config:
        Converter configuration.

    Returns
    -------
    tuple[tuple[CellNode, ...], list[ConversionWarning]]
        (top-level cells and groups, warnings)

    Raises
    ------
    MalformedTreeError
        If the token tree breaks the parser's structural contract.
    """
    ctx = _MapContext(languages=MappingProxyType(dict(config.external_languages)))
    cells = _group_sections(tokens, ctx)
    return cells, list(collect_warnings(tokens))


@dataclass(frozen=True)
class _MapContext:
    """Immutable walk state; derive children with :meth:`enter`.

    List depth is not tracked here: the normalizer stores it on every
    ``list`` and ``list_item`` token.
    """

    languages: Mapping[str, str]
    parent_type: str | None = None
    quote_depth: int | None = None

    def enter(self, parent_type: str, **changes: object) -> _MapContext:
        """Context for the children of a *parent_type* container.

        Fields not named in *changes* carry over, so a list inside a quote
        keeps the quote's depth.
        """
        return dataclasses.replace(self, parent_type=parent_type, **changes)

    @property
    def nesting(self) -> int:
        return self.quote_depth or 0


# ---------------------------------------------------------------------------
# Warnings
# ---------------------------------------------------------------------------

def collect_warnings(
    tokens: list[dict],
    parent_type: str | None = None,
) -> Iterator[ConversionWarning]:
    """Yield the informational warnings for a token tree in document order."""
    for token in tokens:
        token_type = token.get("type", "")
        children = token.get("children", [])

        if token_type == "heading" and parent_type is not None:
            yield ConversionWarning(
                code="NESTED_HEADING",
                message="Heading inside a list or block quote does not open a section.",
                context={"heading_level": _heading_level(token), "parent_type": parent_type},
            )
        elif token_type == "html_block":
            yield ConversionWarning(
                code="HTML_BLOCK_VERBATIM",
                message="HTML block was kept as verbatim program text.",
                context={"raw": token.get("raw", "").rstrip("\n")[:200]},
            )
        elif token_type in ("block_quote", "list_item"):
            yield from collect_warnings(children, token_type)
        elif token_type == "list":
            yield from collect_warnings(children, parent_type)


# ---------------------------------------------------------------------------
# Outline grouping
# ---------------------------------------------------------------------------

def _group_sections(tokens: list[dict], ctx: _MapContext) -> tuple[CellNode, ...]:
    """Map top-level tokens, nesting content under its governing heading."""
    root: list[CellNode] = []
    # Open sections: (heading level, header cell, captured children)
    stack: list[tuple[int, Cell, list[CellNode]]] = []

    def close_sections(level: int) -> None:
        while stack and stack[-1][0] >= level:
            _, header, children = stack.pop()
            node: CellNode = CellGroup(header, tuple(children)) if children else header
            (stack[-1][2] if stack else root).append(node)

    for token in tokens:
        produced = _map_token(token, ctx)
        if token.get("type") == "heading":
            level = _heading_level(token)
            close_sections(level)
            stack.append((level, produced[0], []))
        else:
            (stack[-1][2] if stack else root).extend(produced)

    close_sections(0)
    return tuple(root)


# ---------------------------------------------------------------------------
# Token dispatch
# ---------------------------------------------------------------------------

def _map_tokens(tokens: list[dict], ctx: _MapContext) -> list[CellNode]:
    produced: list[CellNode] = []
    for token in tokens:
        produced.extend(_map_token(token, ctx))
    return produced


def _map_token(token: dict, ctx: _MapContext) -> list[CellNode]:
    token_type = token.get("type", "")
    handler = _BLOCK_HANDLERS.get(token_type)
    if handler is None:
        raise MalformedTreeError(
            message=f"Unexpected node '{token_type}' at block level.",
            context={"node_type": token_type, "parent_type": ctx.parent_type},
        )
    return handler(token, ctx)


# ---------------------------------------------------------------------------
# Block handlers
# ---------------------------------------------------------------------------

def _heading_level(token: dict) -> int:
    level = token.get("attrs", {}).get("level", 1)
    return min(max(int(level), 1), 6)


def _map_heading(token: dict, ctx: _MapContext) -> list[CellNode]:
    level = _heading_level(token)
    cell = Cell(
        cell_type=CellType.TITLE if level == 1 else CellType.SUBTITLE,
        style_tag=HEADING_STYLES[level],
        content=build_styled_run(token.get("children", [])),
        level=level,
    )
    return [cell]


def _map_paragraph(token: dict, ctx: _MapContext) -> list[CellNode]:
    content = build_styled_run(token.get("children", []))
    if not content:
        return []
    if ctx.quote_depth is not None:
        return [Cell(
            cell_type=CellType.BLOCK_QUOTE_TEXT,
            style_tag=nesting_style(QUOTE_STYLES, ctx.quote_depth),
            content=content,
            nesting=ctx.quote_depth,
        )]
    return [Cell(cell_type=CellType.TEXT, style_tag=TEXT_STYLE, content=content)]


def _map_block_quote(token: dict, ctx: _MapContext) -> list[CellNode]:
    """Map a quote; its cells group under the quote's first cell."""
    depth = token.get("attrs", {}).get("depth", ctx.nesting)
    nodes = _map_tokens(token.get("children", []), ctx.enter("block_quote", quote_depth=depth))
    if len(nodes) > 1 and isinstance(nodes[0], Cell):
        return [CellGroup(nodes[0], tuple(nodes[1:]))]
    return nodes


def _map_list(token: dict, ctx: _MapContext) -> list[CellNode]:
    ordered = bool(token.get("attrs", {}).get("ordered", False))
    produced: list[CellNode] = []
    for item in token.get("children", []):
        if item.get("type") != "list_item":
            raise MalformedTreeError(
                message=f"List contains '{item.get('type')}' instead of a list item.",
                context={"node_type": item.get("type"), "parent_type": "list"},
            )
        produced.append(_map_list_item(item, ordered, ctx))
    return produced


def _map_list_item(token: dict, ordered: bool, ctx: _MapContext) -> CellNode:
    """Map one item: its first paragraph heads a group of everything else."""
    depth = token.get("attrs", {}).get("depth", 0)
    children = token.get("children", [])
    item_ctx = ctx.enter("list_item")

    header_content = ()
    rest = children
    if children and children[0].get("type") == "paragraph":
        header_content = build_styled_run(children[0].get("children", []))
        rest = children[1:]

    header = Cell(
        cell_type=CellType.ITEM,
        style_tag=nesting_style(NUMBERED_ITEM_STYLES if ordered else BULLET_ITEM_STYLES, depth),
        content=header_content,
        nesting=depth,
    )

    nested: list[CellNode] = []
    for child in rest:
        if child.get("type") == "paragraph":
            content = build_styled_run(child.get("children", []))
            if content:
                nested.append(Cell(
                    cell_type=CellType.ITEM_PARAGRAPH,
                    style_tag=nesting_style(ITEM_PARAGRAPH_STYLES, depth),
                    content=content,
                    nesting=depth,
                ))
        else:
            nested.extend(_map_token(child, item_ctx))

    if nested:
        return CellGroup(header, tuple(nested))
    return header


def _reject_list_item(token: dict, ctx: _MapContext) -> list[CellNode]:
    raise MalformedTreeError(
        message="List item found outside of a list.",
        context={"node_type": "list_item", "parent_type": ctx.parent_type},
    )


def _map_code_block(token: dict, ctx: _MapContext) -> list[CellNode]:
    attrs = token.get("attrs", {})
    cell_type, language = resolve_code_cell(
        attrs.get("info"),
        fenced=attrs.get("fenced", True),
        languages=ctx.languages,
    )
    if cell_type is CellType.EXTERNAL_LANGUAGE:
        style = WOLFRAM_CODE_STYLE if language == WOLFRAM_LANGUAGE else EXTERNAL_LANGUAGE_STYLE
    else:
        style = PROGRAM_STYLE
    return [Cell(
        cell_type=cell_type,
        style_tag=style,
        content=token.get("raw", ""),
        nesting=ctx.nesting,
        language=language,
    )]


def _map_table(token: dict, ctx: _MapContext) -> list[CellNode]:
    return [Cell(
        cell_type=CellType.TABLE,
        style_tag=TEXT_STYLE,
        content=build_grid(token),
        nesting=ctx.nesting,
    )]


def _map_thematic_break(token: dict, ctx: _MapContext) -> list[CellNode]:
    return [Cell(cell_type=CellType.HORIZONTAL_RULE, style_tag=TEXT_STYLE, content=None)]


def _map_html_block(token: dict, ctx: _MapContext) -> list[CellNode]:
    """Keep raw HTML verbatim in a program cell."""
    raw = token.get("raw", "").rstrip("\n")
    return [Cell(
        cell_type=CellType.CODE,
        style_tag=PROGRAM_STYLE,
        content=raw,
        nesting=ctx.nesting,
    )]


def _reject_table_part(token: dict, ctx: _MapContext) -> list[CellNode]:
    raise MalformedTreeError(
        message=f"Table part '{token.get('type')}' found outside of a table.",
        context={"node_type": token.get("type"), "parent_type": ctx.parent_type},
    )


# ---------------------------------------------------------------------------
# Block handler dispatch table
# ---------------------------------------------------------------------------

_BlockHandler = Callable[[dict, _MapContext], list[CellNode]]

_BLOCK_HANDLERS: dict[str, _BlockHandler] = {
    "heading": _map_heading,
    "paragraph": _map_paragraph,
    "block_quote": _map_block_quote,
    "list": _map_list,
    "list_item": _reject_list_item,
    "block_code": _map_code_block,
    "table": _map_table,
    "thematic_break": _map_thematic_break,
    "html_block": _map_html_block,
    "table_head": _reject_table_part,
    "table_body": _reject_table_part,
    "table_row": _reject_table_part,
    "table_cell": _reject_table_part,
}
