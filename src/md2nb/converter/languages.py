"""Classify fenced code blocks as executable or plain code cells.

A fence tag recognized in the configured language table yields an
``EXTERNAL_LANGUAGE`` cell carrying the notebook evaluation language; any
other tag, a missing tag, or an indented block yields a plain ``CODE`` cell.
The lookup is exact and case-sensitive: ``Python`` or ``python3`` are not
``python``.
"""

from __future__ import annotations

from collections.abc import Mapping

from md2nb.config import DEFAULT_EXTERNAL_LANGUAGES
from md2nb.models import CellType


def fence_tag(info: str | None) -> str | None:
    """Return the language tag of a fence info string (its first word)."""
    if not info:
        return None
    words = info.split()
    return words[0] if words else None


def resolve_code_cell(
    info: str | None,
    *,
    fenced: bool = True,
    languages: Mapping[str, str] = DEFAULT_EXTERNAL_LANGUAGES,
) -> tuple[CellType, str | None]:
    """Classify a code block.

    Parameters
    ----------
    info:
        The fence info string (``"python"``, ``"js title=x"``) or ``None``.
    fenced:
        ``False`` for indented code blocks, which never carry a language.
    languages:
        Fence tag to evaluation language table.

    Returns
    -------
    tuple[CellType, str | None]
        ``(CellType.EXTERNAL_LANGUAGE, language)`` for a recognized tag,
        otherwise ``(CellType.CODE, None)``.
    """
    if not fenced:
        return CellType.CODE, None
    tag = fence_tag(info)
    if tag is None:
        return CellType.CODE, None
    language = languages.get(tag)
    if language is None:
        return CellType.CODE, None
    return CellType.EXTERNAL_LANGUAGE, language
