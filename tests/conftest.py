"""Shared test fixtures for the md2nb test suite."""

from __future__ import annotations

import pytest

from md2nb.config import NotebookConfig
from md2nb.converter.ast_normalizer import ASTNormalizer
from md2nb.converter.md_to_nb import MarkdownToNotebookConverter


@pytest.fixture
def config() -> NotebookConfig:
    """Default converter configuration."""
    return NotebookConfig()


@pytest.fixture
def converter(config: NotebookConfig) -> MarkdownToNotebookConverter:
    """Markdown-to-notebook converter using the default config."""
    return MarkdownToNotebookConverter(config)


@pytest.fixture
def normalizer() -> ASTNormalizer:
    """Markdown parser and AST normalizer."""
    return ASTNormalizer()
