"""Property-based tests for md2nb using Hypothesis.

These tests verify algebraic / invariant properties of the converter
functions.  They complement the example-based unit tests by exercising the
code with a wide range of randomly generated inputs.
"""

from __future__ import annotations

import string

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from md2nb.config import DEFAULT_EXTERNAL_LANGUAGES
from md2nb.converter.inline_stylizer import build_styled_run, extract_text
from md2nb.converter.languages import resolve_code_cell
from md2nb.converter.md_to_nb import MarkdownToNotebookConverter
from md2nb.converter.serializer import escape_string, serialize_notebook
from md2nb.converter.tables import build_grid
from md2nb.models import CellType, Style, TextRun, iter_cells

# ---------------------------------------------------------------------------
# Reusable strategies
# ---------------------------------------------------------------------------

_word_st = st.text(alphabet=string.ascii_letters + string.digits, min_size=1, max_size=12)

_block_st = st.one_of(
    _word_st.map(lambda w: f"# {w}"),
    _word_st.map(lambda w: f"## {w}"),
    _word_st.map(lambda w: f"### {w}"),
    _word_st.map(lambda w: f"Some **{w}** and *{w}* text."),
    _word_st.map(lambda w: f"- {w}\n  - {w}\n- {w}"),
    _word_st.map(lambda w: f"1. {w}\n2. {w}"),
    _word_st.map(lambda w: f"> {w}\n>\n> > {w}"),
    _word_st.map(lambda w: f"```python\n{w} = 1\n```"),
    _word_st.map(lambda w: f"```{w}\ncode\n```"),
    _word_st.map(lambda w: f"| {w} | b |\n|:--|--:|\n| `{w}` | [x](https://e.org/{w}) |"),
    _word_st.map(lambda w: f"<https://example.org/{w}>"),
    st.just("---"),
)

_document_st = st.lists(_block_st, max_size=12).map("\n\n".join)

# Anything except control characters and surrogates, which are unencodable
_encodable_text_st = st.text(
    alphabet=st.characters(blacklist_categories=("Cs", "Cc")),
    max_size=200,
)

_converter = MarkdownToNotebookConverter()


# ---------------------------------------------------------------------------
# Whole-pipeline properties
# ---------------------------------------------------------------------------

class TestPipelineProperties:
    @given(_document_st)
    @settings(max_examples=100, deadline=None)
    def test_reserialization_is_idempotent(self, markdown):
        result = _converter.convert(markdown)
        assert serialize_notebook(result.cells) == result.notebook
        assert _converter.convert(markdown).notebook == result.notebook

    @given(_document_st)
    @settings(max_examples=100, deadline=None)
    def test_output_is_ascii(self, markdown):
        assert _converter.convert(markdown).notebook.isascii()

    @given(_document_st)
    @settings(max_examples=50, deadline=None)
    def test_heading_levels_strictly_increase_down_the_outline(self, markdown):
        from md2nb.models import CellGroup

        def check(nodes, parent_level):
            for node in nodes:
                if isinstance(node, CellGroup):
                    if node.header.level:
                        assert node.header.level > parent_level
                        check(node.children, node.header.level)
                    else:
                        check(node.children, parent_level)

        check(_converter.convert(markdown).cells, 0)

    @given(st.lists(_word_st, min_size=1, max_size=8))
    @settings(max_examples=50, deadline=None)
    def test_paragraph_text_survives(self, words):
        markdown = "\n\n".join(words)
        result = _converter.convert(markdown)
        texts = [extract_text(c.content) for c in iter_cells(result.cells)]
        assert texts == words


# ---------------------------------------------------------------------------
# Inline styling
# ---------------------------------------------------------------------------

def _wrap(kinds, leaf):
    token = leaf
    for kind in reversed(kinds):
        token = {"type": kind, "children": [token]}
    return token


class TestStyleProperties:
    @given(
        st.lists(st.sampled_from(["strong", "emphasis"]), min_size=1, max_size=6),
        st.randoms(use_true_random=False),
        _word_st,
    )
    def test_nesting_order_never_matters(self, kinds, rnd, word):
        shuffled = list(kinds)
        rnd.shuffle(shuffled)
        leaf = {"type": "text", "raw": word}
        assert build_styled_run([_wrap(kinds, leaf)]) == build_styled_run([_wrap(shuffled, leaf)])

    @given(st.lists(st.sampled_from(["strong", "emphasis"]), min_size=1, max_size=6), _word_st)
    def test_style_is_union_of_wrappers(self, kinds, word):
        (run,) = build_styled_run([_wrap(kinds, {"type": "text", "raw": word})])
        expected = Style.NONE
        if "strong" in kinds:
            expected |= Style.BOLD
        if "emphasis" in kinds:
            expected |= Style.ITALIC
        assert run == TextRun(word, expected)

    @given(st.lists(st.sampled_from(["strong", "emphasis"]), max_size=4), _word_st)
    def test_code_span_is_never_bold_or_italic(self, kinds, word):
        (run,) = build_styled_run([_wrap(kinds, {"type": "codespan", "raw": word})])
        assert run.style == Style.CODE


# ---------------------------------------------------------------------------
# Language classification
# ---------------------------------------------------------------------------

class TestLanguageProperties:
    @given(st.text(alphabet=string.ascii_letters + string.digits + "+-_", min_size=1, max_size=15))
    def test_classification_is_table_membership(self, tag):
        cell_type, language = resolve_code_cell(tag)
        if tag in DEFAULT_EXTERNAL_LANGUAGES:
            assert (cell_type, language) == (CellType.EXTERNAL_LANGUAGE, DEFAULT_EXTERNAL_LANGUAGES[tag])
        else:
            assert (cell_type, language) == (CellType.CODE, None)

    @given(st.sampled_from(sorted(DEFAULT_EXTERNAL_LANGUAGES)))
    def test_indented_blocks_never_carry_a_language(self, tag):
        assert resolve_code_cell(tag, fenced=False) == (CellType.CODE, None)


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------

def _row(width, kind):
    cells = [
        {"type": "table_cell", "attrs": {"align": None}, "children": [{"type": "text", "raw": "c"}]}
        for _ in range(width)
    ]
    return {"type": kind, "children": cells}


class TestTableProperties:
    @given(st.integers(min_value=0, max_value=6), st.lists(st.integers(min_value=0, max_value=6), max_size=6))
    def test_grid_is_rectangular(self, head_width, body_widths):
        token = {
            "type": "table",
            "children": [
                _row(head_width, "table_head"),
                {"type": "table_body", "children": [_row(w, "table_row") for w in body_widths]},
            ],
        }
        grid = build_grid(token)
        width = max([head_width, *body_widths])
        assert grid.column_count == width
        assert all(len(row) == width for row in grid.rows)
        assert all(cell.wrap for row in grid.rows for cell in row)


# ---------------------------------------------------------------------------
# String escaping
# ---------------------------------------------------------------------------

class TestEscapeProperties:
    @given(_encodable_text_st)
    def test_escaped_text_is_single_line_ascii(self, text):
        escaped = escape_string(text)
        assert escaped.isascii()
        assert "\n" not in escaped

    @given(_encodable_text_st)
    def test_no_unescaped_quote(self, text):
        escaped = escape_string(text)
        # Every quote must be preceded by an odd run of backslashes
        for i, ch in enumerate(escaped):
            if ch == '"':
                run = len(escaped[:i]) - len(escaped[:i].rstrip("\\"))
                assert run % 2 == 1

    @given(st.text(alphabet=string.printable, max_size=100))
    def test_printable_ascii_round_trips_without_escapes(self, text):
        plain = "".join(c for c in text if c not in '\\"\n\t\r\x0b\x0c')
        assert escape_string(plain) == plain


@pytest.mark.parametrize("depth", [0, 1, 2, 3, 5])
def test_nesting_depth_yields_capped_distinct_tags(depth):
    lines = [f"{'  ' * i}- level {i}" for i in range(depth + 1)]
    result = _converter.convert("\n".join(lines))
    tags = {c.style_tag for c in iter_cells(result.cells)}
    assert len(tags) == min(depth, 2) + 1
    assert tags <= {"Item", "Subitem", "Subsubitem"}
