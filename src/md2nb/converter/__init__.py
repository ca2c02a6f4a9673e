"""Markdown -> notebook conversion pipeline.

Public API:

- :class:`MarkdownToNotebookConverter`: Markdown text to notebook text.
- :class:`ASTNormalizer`: parse and normalize Markdown to canonical AST.
- :func:`build_cells`: convert normalized AST to a cell tree.
- :func:`build_styled_run`: convert inline AST tokens to a styled run.
- :func:`build_grid`: convert a table token to a grid.
- :func:`resolve_code_cell`: classify a fenced code block.
- :func:`serialize_notebook`: render a cell tree as notebook text.
"""

from md2nb.converter.ast_normalizer import ASTNormalizer
from md2nb.converter.cell_mapper import build_cells
from md2nb.converter.inline_stylizer import build_styled_run
from md2nb.converter.languages import resolve_code_cell
from md2nb.converter.md_to_nb import MarkdownToNotebookConverter
from md2nb.converter.serializer import serialize_notebook
from md2nb.converter.tables import build_grid

__all__ = [
    "ASTNormalizer",
    "MarkdownToNotebookConverter",
    "build_cells",
    "build_grid",
    "build_styled_run",
    "resolve_code_cell",
    "serialize_notebook",
]
