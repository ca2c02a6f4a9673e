"""Full Markdown-to-notebook conversion pipeline.

:class:`MarkdownToNotebookConverter` orchestrates the three-stage pipeline:

1. **Normalize**: mistune parses raw Markdown into an AST and
   :class:`ASTNormalizer` maps it to canonical tokens, resolving link
   references.
2. **Map**: :func:`build_cells` converts normalized tokens into a cell tree,
   collecting :class:`ConversionWarning` along the way.
3. **Serialize**: :func:`serialize_notebook` renders the tree as notebook
   expression text.

Each stage is fatal on error; nothing is returned for a document that fails
at any stage.
"""

from __future__ import annotations

import dataclasses
import json
import sys

from md2nb.config import NotebookConfig
from md2nb.converter.ast_normalizer import ASTNormalizer
from md2nb.converter.cell_mapper import build_cells
from md2nb.converter.serializer import serialize_notebook
from md2nb.models import ConversionResult, iter_cells
from md2nb.observability import get_logger

_log = get_logger("md2nb.converter")


class MarkdownToNotebookConverter:
    """Convert Markdown text to a Wolfram notebook.

    Parameters
    ----------
    config:
        Converter configuration; defaults to :class:`NotebookConfig()`.

    Examples
    --------
    >>> converter = MarkdownToNotebookConverter()
    >>> result = converter.convert("# Hello\\n\\nWorld")
    >>> len(result.cells)
    1
    >>> result.cells[0].header.style_tag
    'Title'
    """

    def __init__(self, config: NotebookConfig | None = None) -> None:
        self._config = config or NotebookConfig()
        self._normalizer = ASTNormalizer()

    @property
    def config(self) -> NotebookConfig:
        return self._config

    def convert(self, markdown: str) -> ConversionResult:
        """Full pipeline: normalize -> map cells -> serialize.

        Parameters
        ----------
        markdown:
            Raw Markdown text to convert.

        Returns
        -------
        ConversionResult
            Contains ``cells`` (the cell tree), ``notebook`` (the notebook
            text) and ``warnings``.

        Raises
        ------
        NormalizationError
            On an unresolved link reference or an unsupported node.
        MappingError
            If the token tree is structurally malformed.
        SerializationError
            If a string holds a character the notebook syntax cannot encode.
        """
        # Stage 1: Parse and normalize
        tokens = self._normalizer.parse(markdown)
        _log.debug(
            "normalized markdown",
            extra={"extra_fields": {"chars": len(markdown), "blocks": len(tokens)}},
        )

        if self._config.debug_dump_ast:
            print(
                "[md2nb] Normalized AST:",
                json.dumps(tokens, indent=2, ensure_ascii=False),
                file=sys.stderr,
            )

        # Stage 2: Build the cell tree
        cells, warnings = build_cells(tokens, self._config)
        _log.debug(
            "mapped cells",
            extra={"extra_fields": {"cells": len(cells), "warnings": len(warnings)}},
        )
        for warning in warnings:
            _log.warning(
                warning.message,
                extra={"extra_fields": {"code": warning.code, **warning.context}},
            )

        if self._config.debug_dump_cells:
            print(
                "[md2nb] Cell tree:",
                json.dumps(
                    [dataclasses.asdict(node) for node in cells],
                    indent=2, ensure_ascii=False, default=str,
                ),
                file=sys.stderr,
            )

        # Stage 3: Serialize
        notebook = serialize_notebook(cells)
        _log.info(
            "conversion complete",
            extra={"extra_fields": {
                "cells": sum(1 for _ in iter_cells(cells)),
                "bytes": len(notebook),
                "warnings": len(warnings),
            }},
        )

        return ConversionResult(cells=cells, notebook=notebook, warnings=warnings)
