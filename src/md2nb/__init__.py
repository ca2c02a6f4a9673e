"""md2nb: convert Markdown documents to Wolfram notebooks.

Public re-exports
-----------------

* **Converter:** :class:`MarkdownToNotebookConverter` and :func:`convert`
* **Configuration:** :class:`NotebookConfig`
* **Errors:** Every :class:`Md2nbError` subclass and :class:`ErrorCode`
* **Models:** The cell tree, styled runs, grids and the conversion result

Usage::

    from md2nb import convert

    notebook_text = convert("# Hello\\n\\nWorld")
"""

from __future__ import annotations

__version__ = "0.1.0"

# ── Configuration ───────────────────────────────────────────────────────
from md2nb.config import DEFAULT_EXTERNAL_LANGUAGES, NotebookConfig

# ── Converter ──────────────────────────────────────────────────────────
from md2nb.converter.md_to_nb import MarkdownToNotebookConverter

# ── Errors ──────────────────────────────────────────────────────────────
from md2nb.errors import (
    ErrorCode,
    InputError,
    MalformedTreeError,
    MappingError,
    Md2nbError,
    NormalizationError,
    OutputError,
    SerializationError,
    UnencodableCharacterError,
    UnresolvedReferenceError,
    UnsupportedNodeError,
)

# ── Models ──────────────────────────────────────────────────────────────
from md2nb.models import (
    Alignment,
    Cell,
    CellGroup,
    CellType,
    ConversionResult,
    ConversionWarning,
    Grid,
    GridCell,
    Hyperlink,
    Style,
    TextRun,
    iter_cells,
)


def convert(markdown: str, config: NotebookConfig | None = None) -> str:
    """Convert Markdown text to notebook text in one call."""
    return MarkdownToNotebookConverter(config).convert(markdown).notebook


# ── Public surface ──────────────────────────────────────────────────────

__all__ = [
    "__version__",
    # Converter
    "MarkdownToNotebookConverter",
    "convert",
    # Configuration
    "NotebookConfig",
    "DEFAULT_EXTERNAL_LANGUAGES",
    # Error base + code enum
    "Md2nbError",
    "ErrorCode",
    # Stage errors
    "NormalizationError",
    "UnresolvedReferenceError",
    "UnsupportedNodeError",
    "MappingError",
    "MalformedTreeError",
    "SerializationError",
    "UnencodableCharacterError",
    # I/O errors
    "InputError",
    "OutputError",
    # Models
    "Alignment",
    "Cell",
    "CellGroup",
    "CellType",
    "ConversionResult",
    "ConversionWarning",
    "Grid",
    "GridCell",
    "Hyperlink",
    "Style",
    "TextRun",
    "iter_cells",
]
