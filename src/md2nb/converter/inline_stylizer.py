"""Build styled runs from normalized inline AST tokens.

A styled run is a tuple of :class:`~md2nb.models.TextRun` and
:class:`~md2nb.models.Hyperlink` nodes::

    (TextRun("Some "), TextRun("bold", Style.BOLD), TextRun(" text."))

Style flags are inherited downwards and OR-merged, so
``strong > emphasis > text`` and ``emphasis > strong > text`` both yield a
single ``BOLD | ITALIC`` run.  Code spans drop every inherited flag and keep
only ``CODE``.  Adjacent runs with identical flags are coalesced.
"""

from __future__ import annotations

from md2nb.errors import UnsupportedNodeError
from md2nb.models import Hyperlink, Style, StyledRun, TextRun

_MAILTO = "mailto:"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def build_styled_run(
    children: list[dict],
    *,
    style: Style = Style.NONE,
) -> StyledRun:
    """Convert inline AST tokens to a styled run.

    Handles: text, strong, emphasis, codespan, link, autolink, image (as a
    hyperlink on its alt text), softbreak, linebreak, html_inline.

    Parameters
    ----------
    children:
        List of normalized inline AST tokens.
    style:
        Style inherited from an enclosing ``strong``/``emphasis`` node.

    Raises
    ------
    UnsupportedNodeError
        For an inline type the normalizer should never have produced.
    """
    nodes: list[TextRun | Hyperlink] = []

    for token in children:
        token_type = token.get("type", "")

        if token_type == "text":
            _append(nodes, TextRun(token.get("raw", ""), style))

        elif token_type == "strong":
            for node in build_styled_run(token.get("children", []), style=style | Style.BOLD):
                _append(nodes, node)

        elif token_type == "emphasis":
            for node in build_styled_run(token.get("children", []), style=style | Style.ITALIC):
                _append(nodes, node)

        elif token_type == "codespan":
            _append(nodes, TextRun(token.get("raw", ""), Style.CODE))

        elif token_type in ("link", "image"):
            url = token.get("attrs", {}).get("url", "")
            display = build_styled_run(token.get("children", []), style=style)
            if not display:
                display = (TextRun(url, style),)
            nodes.append(Hyperlink(display=display, target=url))

        elif token_type == "autolink":
            url = token.get("attrs", {}).get("url", "")
            label = url[len(_MAILTO):] if url.startswith(_MAILTO) else url
            nodes.append(Hyperlink(display=(TextRun(label, style),), target=url))

        elif token_type == "softbreak":
            # Reflow: a soft line ending reads as a space
            _append(nodes, TextRun(" ", style))

        elif token_type == "linebreak":
            _append(nodes, TextRun("\n", style))

        elif token_type == "html_inline":
            _append(nodes, TextRun(token.get("raw", ""), style))

        else:
            raise UnsupportedNodeError(
                message=f"Unsupported inline node '{token_type}'.",
                context={"node_type": token_type},
            )

    return tuple(nodes)


def extract_text(run: StyledRun) -> str:
    """Return the plain text of a styled run, ignoring all styling."""
    parts: list[str] = []
    for node in run:
        if isinstance(node, Hyperlink):
            parts.append(extract_text(node.display))
        else:
            parts.append(node.text)
    return "".join(parts)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _append(nodes: list[TextRun | Hyperlink], node: TextRun | Hyperlink) -> None:
    """Append *node*, merging it into a preceding run of the same style."""
    if isinstance(node, TextRun):
        if not node.text:
            return
        if nodes:
            last = nodes[-1]
            if isinstance(last, TextRun) and last.style == node.style:
                nodes[-1] = TextRun(last.text + node.text, node.style)
                return
    nodes.append(node)
