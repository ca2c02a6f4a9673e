"""Parse Markdown and normalize to canonical AST tokens.

This module wraps mistune v3's AST renderer and normalises the raw token
stream into a well-defined set of canonical types used by the rest of the
converter pipeline.

Canonical block tokens:
    heading, paragraph, block_quote, list, list_item, block_code, table,
    thematic_break, html_block

Canonical inline tokens:
    text, strong, emphasis, codespan, link, autolink, image, softbreak,
    linebreak, html_inline

On top of renaming, normalization:

* re-resolves every reference-style link against the document's
  link-reference table and fails on labels that have no definition;
* merges adjacent text, collapses runs of soft breaks and tags each break
  with its position in the enclosing inline sequence;
* annotates ``list``, ``list_item`` and ``block_quote`` with a zero-based
  ``depth`` counting ancestors of the same kind.
"""

from __future__ import annotations

from re import Match
from typing import Any

import mistune
from mistune.core import InlineState
from mistune.helpers import parse_link_label
from mistune.util import escape_url, unescape

from md2nb.converter.tables import lenient_table
from md2nb.errors import UnresolvedReferenceError, UnsupportedNodeError

# ---------------------------------------------------------------------------
# Mistune-to-canonical type mapping
# ---------------------------------------------------------------------------

_BLOCK_TYPE_MAP: dict[str, str] = {
    "heading": "heading",
    "paragraph": "paragraph",
    "block_quote": "block_quote",
    "list": "list",
    "list_item": "list_item",
    "block_code": "block_code",
    "table": "table",
    "thematic_break": "thematic_break",
    "block_html": "html_block",
    # Tight list items carry their text as block_text
    "block_text": "paragraph",
}

_INLINE_TYPE_MAP: dict[str, str] = {
    "text": "text",
    "strong": "strong",
    "emphasis": "emphasis",
    "codespan": "codespan",
    "link": "link",
    "image": "image",
    "softbreak": "softbreak",
    "linebreak": "linebreak",
    "inline_html": "html_inline",
}

_TABLE_PART_TYPES: frozenset[str] = frozenset({
    "table_head", "table_body", "table_row", "table_cell",
})

_SKIP_TYPES: frozenset[str] = frozenset({
    "blank_line",
})

MAX_NESTED_LEVEL = 20
"""Container depth (lists and quotes combined) the block parser descends into."""

_UNRESOLVED = "unresolved_reference"
"""Marker token emitted by the inline parser for a dangling reference."""


# ---------------------------------------------------------------------------
# Inline parser hook
# ---------------------------------------------------------------------------

class _ReferenceTrackingInlineParser(mistune.InlineParser):
    """Inline parser that records reference links it could not resolve.

    Mistune treats a bracketed label without a definition as literal text.
    This subclass leaves that behaviour intact and additionally drops an
    ``unresolved_reference`` marker token in front of the literal text, so
    the normalizer can fail at the exact spot.
    """

    def parse_link(self, m: Match[str], state: InlineState) -> int | None:
        end_pos = super().parse_link(m, state)
        if end_pos is None and m.group(0) == "[" and not state.in_link:
            label = _dangling_reference_label(state.src, m.end())
            if label is not None:
                state.append_token({"type": _UNRESOLVED, "label": label})
        return end_pos


def _dangling_reference_label(src: str, pos: int) -> str | None:
    """Return the reference label of a failed ``[...]`` at *pos*, if any.

    Handles shortcut ``[label]``, collapsed ``[label][]`` and full
    ``[text][label]`` forms.  A bracket followed by ``(`` is a malformed
    inline link, not a reference.
    """
    label, end_pos = parse_link_label(src, pos)
    if label is None or end_pos is None:
        return None
    if end_pos < len(src):
        if src[end_pos] == "(":
            return None
        if src[end_pos] == "[":
            second, _ = parse_link_label(src, end_pos + 1)
            if second and second.strip():
                label = second
    if not label.strip():
        return None
    return label


# ---------------------------------------------------------------------------
# Normalizer
# ---------------------------------------------------------------------------

class ASTNormalizer:
    """Parse Markdown and normalize to canonical AST tokens."""

    def __init__(self) -> None:
        self._parser = mistune.Markdown(
            renderer=None,
            block=mistune.BlockParser(max_nested_level=MAX_NESTED_LEVEL),
            inline=_ReferenceTrackingInlineParser(),
            plugins=[lenient_table],
        )

    def parse(self, markdown: str) -> list[dict]:
        """Parse markdown and return the normalized AST token list.

        Raises
        ------
        UnresolvedReferenceError
            If a reference-style link names an undefined label.
        UnsupportedNodeError
            If the parser yields a token type with no canonical mapping.
        """
        raw_tokens, state = self._parser.parse(markdown)
        if isinstance(raw_tokens, str):
            return []
        references = state.env.get("ref_links", {})
        return self.normalize(raw_tokens, references)

    def normalize(self, tokens: list[dict], references: dict[str, dict]) -> list[dict]:
        """Normalize a raw mistune token list.

        Parameters
        ----------
        tokens:
            Raw AST tokens as produced by mistune's AST renderer.
        references:
            The link-reference table, keyed by normalized label (see
            :func:`mistune.util.unikey`), each entry holding at least
            ``url``.
        """
        return _Walk(references).blocks(tokens, list_depth=0, quote_depth=0)


class _Walk:
    """One normalization pass over a single document."""

    __slots__ = ("references",)

    def __init__(self, references: dict[str, dict]) -> None:
        self.references = references

    # -- blocks ------------------------------------------------------------

    def blocks(self, tokens: list[dict], *, list_depth: int, quote_depth: int) -> list[dict]:
        result: list[dict] = []
        for token in tokens:
            normalized = self.block(token, list_depth=list_depth, quote_depth=quote_depth)
            if normalized is not None:
                result.append(normalized)
        return result

    def block(self, token: dict, *, list_depth: int, quote_depth: int) -> dict | None:
        raw_type = token.get("type", "")

        if raw_type in _SKIP_TYPES:
            return None

        if raw_type in _TABLE_PART_TYPES:
            return self._table_part(token)

        canonical_type = _BLOCK_TYPE_MAP.get(raw_type)
        if canonical_type is None:
            raise UnsupportedNodeError(
                message=f"Unsupported block node '{raw_type}'.",
                context={"node_type": raw_type},
            )

        result: dict = {"type": canonical_type}
        attrs = token.get("attrs")
        if attrs:
            result["attrs"] = dict(attrs)

        if canonical_type == "block_code":
            raw_code = token.get("raw", "")
            if raw_code.endswith("\n"):
                raw_code = raw_code[:-1]
            result["raw"] = raw_code
            result.setdefault("attrs", {})["fenced"] = token.get("style") == "fenced"
            return result

        if canonical_type == "html_block":
            result["raw"] = token.get("raw", "")
            return result

        if canonical_type == "thematic_break":
            return result

        if canonical_type == "table":
            result["children"] = [
                self._table_part(child) for child in token.get("children", [])
            ]
            return result

        if canonical_type == "list":
            attrs = result.setdefault("attrs", {})
            attrs["depth"] = list_depth
            attrs["ordered"] = bool(attrs.get("ordered", False))
            result["children"] = [
                self._list_item(item, list_depth=list_depth, quote_depth=quote_depth)
                if item.get("type") == "list_item"
                else self.block(item, list_depth=list_depth, quote_depth=quote_depth)
                for item in token.get("children", [])
                if item.get("type") not in _SKIP_TYPES
            ]
            return result

        if canonical_type == "block_quote":
            result.setdefault("attrs", {})["depth"] = quote_depth
            result["children"] = self.blocks(
                token.get("children", []),
                list_depth=list_depth, quote_depth=quote_depth + 1,
            )
            return result

        if canonical_type == "list_item":
            # Only reachable when an item appears outside a list; keep it so
            # the cell mapper can reject the malformed tree.
            return self._list_item(token, list_depth=list_depth, quote_depth=quote_depth)

        # heading and paragraph carry inline children
        result["children"] = self.inlines(token.get("children", []))
        return result

    def _list_item(self, token: dict, *, list_depth: int, quote_depth: int) -> dict:
        return {
            "type": "list_item",
            "attrs": {"depth": list_depth},
            "children": self.blocks(
                token.get("children", []),
                list_depth=list_depth + 1, quote_depth=quote_depth,
            ),
        }

    def _table_part(self, token: dict) -> dict:
        """Normalize table sub-structure tokens (head, body, row, cell)."""
        result: dict = {"type": token["type"]}

        attrs = token.get("attrs")
        if attrs:
            result["attrs"] = dict(attrs)

        children = token.get("children") or []
        if token["type"] == "table_cell":
            result["children"] = self.inlines(children)
        else:
            result["children"] = [self._table_part(child) for child in children]
        return result

    # -- inlines -----------------------------------------------------------

    def inlines(self, tokens: list[dict]) -> list[dict]:
        """Normalize an inline sequence, collapsing and tagging breaks."""
        result: list[dict] = []
        for token in tokens:
            normalized = self.inline(token)
            if normalized is None:
                continue
            if result and normalized["type"] == result[-1]["type"]:
                if normalized["type"] == "softbreak":
                    continue
                if normalized["type"] == "text":
                    result[-1] = {"type": "text", "raw": result[-1]["raw"] + normalized["raw"]}
                    continue
            if normalized["type"] in ("softbreak", "linebreak"):
                normalized["attrs"] = {"position": len(result)}
            result.append(normalized)
        return result

    def inline(self, token: dict) -> dict | None:
        raw_type = token.get("type", "")

        if raw_type == _UNRESOLVED:
            raise UnresolvedReferenceError(token["label"])

        canonical_type = _INLINE_TYPE_MAP.get(raw_type)
        if canonical_type is None:
            raise UnsupportedNodeError(
                message=f"Unsupported inline node '{raw_type}'.",
                context={"node_type": raw_type},
            )

        if canonical_type == "text":
            return {"type": "text", "raw": unescape(token.get("raw", ""))}

        if canonical_type in ("softbreak", "linebreak"):
            return {"type": canonical_type}

        if canonical_type in ("codespan", "html_inline"):
            return {"type": canonical_type, "raw": token.get("raw", "")}

        children = token.get("children", [])
        attrs: dict[str, Any] = dict(token.get("attrs") or {})

        if canonical_type == "link":
            if "ref" in token:
                attrs["url"] = self._resolve(token["ref"], token.get("label", token["ref"]))
            elif _is_autolink(children, attrs):
                return {"type": "autolink", "attrs": {"url": attrs["url"]}}

        result: dict = {"type": canonical_type, "children": self.inlines(children)}
        if attrs:
            result["attrs"] = attrs
        return result

    def _resolve(self, key: str, label: str) -> str:
        entry = self.references.get(key)
        if not entry or "url" not in entry:
            raise UnresolvedReferenceError(label)
        return entry["url"]


def _is_autolink(children: list[dict], attrs: dict) -> bool:
    """Autolinks are links whose only child is the destination itself."""
    if set(attrs) != {"url"} or len(children) != 1:
        return False
    child = children[0]
    if child.get("type") != "text":
        return False
    text = child.get("raw", "")
    return attrs["url"] in (escape_url(text), escape_url("mailto:" + text))
