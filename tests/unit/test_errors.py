"""Error hierarchy, codes and context fields."""

from __future__ import annotations

import pytest

import md2nb
from md2nb import __all__ as PKG_ALL
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


class TestHierarchy:
    @pytest.mark.parametrize(
        ("cls", "parent"),
        [
            (NormalizationError, Md2nbError),
            (UnresolvedReferenceError, NormalizationError),
            (UnsupportedNodeError, NormalizationError),
            (MappingError, Md2nbError),
            (MalformedTreeError, MappingError),
            (SerializationError, Md2nbError),
            (UnencodableCharacterError, SerializationError),
            (InputError, Md2nbError),
            (OutputError, Md2nbError),
        ],
    )
    def test_subclass(self, cls, parent):
        assert issubclass(cls, parent)

    def test_base_is_exception(self):
        assert issubclass(Md2nbError, Exception)


class TestCodesAndContext:
    def test_unresolved_reference(self):
        err = UnresolvedReferenceError("shortcut")
        assert err.code == ErrorCode.UNRESOLVED_REFERENCE
        assert err.label == "shortcut"
        assert err.context == {"label": "shortcut"}
        assert str(err) == "Unresolved link reference: [shortcut]"

    def test_unresolved_reference_extra_context(self):
        err = UnresolvedReferenceError("x", context={"line": 3})
        assert err.context == {"label": "x", "line": 3}

    def test_unsupported_node(self):
        err = UnsupportedNodeError("nope", context={"node_type": "math"})
        assert err.code == ErrorCode.UNSUPPORTED_NODE
        assert err.context["node_type"] == "math"

    def test_malformed_tree(self):
        err = MalformedTreeError("bad", context={"node_type": "list_item", "parent_type": None})
        assert err.code == ErrorCode.MALFORMED_TREE

    def test_unencodable_character(self):
        err = UnencodableCharacterError("\x01")
        assert err.code == ErrorCode.UNENCODABLE_CHARACTER
        assert err.context == {"character": "\x01", "codepoint": "U+0001"}
        assert "U+0001" in err.message

    def test_io_errors(self):
        assert InputError("x").code == ErrorCode.INPUT_ERROR
        assert OutputError("x").code == ErrorCode.OUTPUT_ERROR

    def test_stage_base_defaults(self):
        assert NormalizationError().code == ErrorCode.NORMALIZATION_ERROR
        assert MappingError().code == ErrorCode.MAPPING_ERROR
        assert SerializationError().code == ErrorCode.SERIALIZATION_ERROR

    def test_every_code_is_used(self):
        codes = {
            Md2nbError(ErrorCode.CONVERSION_ERROR, "x").code,
            NormalizationError().code,
            UnresolvedReferenceError("x").code,
            UnsupportedNodeError("x").code,
            MappingError().code,
            MalformedTreeError("x").code,
            SerializationError().code,
            UnencodableCharacterError("\x00").code,
            InputError("x").code,
            OutputError("x").code,
        }
        assert codes == set(ErrorCode)

    def test_code_is_a_string(self):
        assert UnresolvedReferenceError("x").code == "UNRESOLVED_REFERENCE"


class TestCause:
    def test_cause_is_chained(self):
        original = OSError("disk on fire")
        err = OutputError("cannot write", cause=original)
        assert err.cause is original
        assert err.__cause__ is original

    def test_no_cause(self):
        assert InputError("x").cause is None


class TestRepr:
    def test_repr_includes_code_and_context(self):
        text = repr(UnresolvedReferenceError("foo"))
        assert text.startswith("UnresolvedReferenceError(code=")
        assert "'label': 'foo'" in text

    def test_repr_without_context(self):
        assert "context" not in repr(InputError("x"))


class TestPublicSurface:
    def test_all_names_exist(self):
        for name in PKG_ALL:
            assert hasattr(md2nb, name), name

    def test_convert_shortcut(self):
        assert md2nb.convert("# Hi").startswith("(* Content-type")
