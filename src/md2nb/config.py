"""Converter configuration for md2nb.

:class:`NotebookConfig` captures the few knobs the converter exposes.  The
notebook metadata written by the serializer is fixed and deliberately not
part of the configuration.

:data:`DEFAULT_EXTERNAL_LANGUAGES` maps fenced-code info tags to the
evaluation language of an external-language cell.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# ---------------------------------------------------------------------------
# Recognized external-evaluation languages
# ---------------------------------------------------------------------------

DEFAULT_EXTERNAL_LANGUAGES: dict[str, str] = {
    "python": "Python",
    "shell": "Shell",
    "sh": "Shell",
    "bash": "Shell",
    "javascript": "NodeJS",
    "js": "NodeJS",
    "node": "NodeJS",
    "julia": "Julia",
    "r": "R",
    "ruby": "Ruby",
    "octave": "Octave",
    "java": "Java",
    "sql": "SQL",
    "wolfram": "Wolfram",
    "mathematica": "Wolfram",
    "wl": "Wolfram",
}
"""Fence tag -> evaluation language.  Lookups are exact and case-sensitive."""

WOLFRAM_LANGUAGE = "Wolfram"
"""Evaluation language rendered as a native ``Code`` cell instead of an
``ExternalLanguage`` cell."""


# ---------------------------------------------------------------------------
# Configuration dataclass
# ---------------------------------------------------------------------------

@dataclass
class NotebookConfig:
    """Configuration for a :class:`~md2nb.converter.MarkdownToNotebookConverter`.

    Parameters
    ----------
    external_languages:
        Fence tags recognized as executable external-language cells, mapped
        to the notebook's evaluation language identifier.  Extend this to
        recognize more tags; any tag outside it yields a plain code cell.
    debug_dump_ast:
        Write the normalized Markdown AST to *stderr* on each conversion.
    debug_dump_cells:
        Write the cell tree to *stderr* on each conversion.
    """

    external_languages: dict[str, str] = field(
        default_factory=lambda: dict(DEFAULT_EXTERNAL_LANGUAGES),
    )

    debug_dump_ast: bool = False

    debug_dump_cells: bool = False
