"""Error hierarchy for md2nb.

Every public error class inherits from :class:`Md2nbError`.  Each carries a
machine-readable ``code`` (from :class:`ErrorCode`), a human-readable
``message``, an optional structured ``context`` dict, and an optional
``cause`` (chained exception).

Errors are grouped by the pipeline stage that raises them:

* :class:`NormalizationError` -- Markdown parsing / AST normalization.
* :class:`MappingError` -- block tree to cell tree transduction.
* :class:`SerializationError` -- cell tree to notebook text.
* :class:`InputError` / :class:`OutputError` -- the file I/O layer.

All of them are terminal for the current document.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Error code enum
# ---------------------------------------------------------------------------

class ErrorCode(str, Enum):
    """Machine-readable error codes for every error md2nb can raise."""

    CONVERSION_ERROR = "CONVERSION_ERROR"
    NORMALIZATION_ERROR = "NORMALIZATION_ERROR"
    UNRESOLVED_REFERENCE = "UNRESOLVED_REFERENCE"
    UNSUPPORTED_NODE = "UNSUPPORTED_NODE"
    MAPPING_ERROR = "MAPPING_ERROR"
    MALFORMED_TREE = "MALFORMED_TREE"
    SERIALIZATION_ERROR = "SERIALIZATION_ERROR"
    UNENCODABLE_CHARACTER = "UNENCODABLE_CHARACTER"
    INPUT_ERROR = "INPUT_ERROR"
    OUTPUT_ERROR = "OUTPUT_ERROR"


# ---------------------------------------------------------------------------
# Base error
# ---------------------------------------------------------------------------

class Md2nbError(Exception):
    """Base exception for all md2nb errors.

    Parameters
    ----------
    code:
        A value from :class:`ErrorCode` (or any string) identifying the
        error category.
    message:
        A developer-friendly description of what went wrong.
    context:
        Arbitrary structured data providing extra diagnostic detail.
        Keys are documented per subclass.
    cause:
        The underlying exception, if this error wraps another.
    """

    def __init__(
        self,
        code: str,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.code: str = code
        self.message: str = message
        self.context: dict[str, Any] = context or {}
        self.cause: Exception | None = cause
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause

    def __repr__(self) -> str:
        ctx = f", context={self.context!r}" if self.context else ""
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r}{ctx})"


# ---------------------------------------------------------------------------
# Normalization errors
# ---------------------------------------------------------------------------

class NormalizationError(Md2nbError):
    """Base class for errors raised while normalizing the Markdown AST."""

    def __init__(
        self,
        code: str = ErrorCode.NORMALIZATION_ERROR,
        message: str = "Normalization error",
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(code=code, message=message, context=context, cause=cause)


class UnresolvedReferenceError(NormalizationError):
    """A reference-style link names a label with no definition.

    Context keys: ``label``.
    """

    def __init__(
        self,
        label: str,
        message: str | None = None,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.label = label
        super().__init__(
            code=ErrorCode.UNRESOLVED_REFERENCE,
            message=message or f"Unresolved link reference: [{label}]",
            context={"label": label, **(context or {})},
            cause=cause,
        )


class UnsupportedNodeError(NormalizationError):
    """The parser produced a node type that has no notebook mapping.

    Context keys: ``node_type``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.UNSUPPORTED_NODE,
            message=message,
            context=context,
            cause=cause,
        )


# ---------------------------------------------------------------------------
# Mapping errors
# ---------------------------------------------------------------------------

class MappingError(Md2nbError):
    """Base class for errors raised while building the cell tree."""

    def __init__(
        self,
        code: str = ErrorCode.MAPPING_ERROR,
        message: str = "Mapping error",
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(code=code, message=message, context=context, cause=cause)


class MalformedTreeError(MappingError):
    """The normalized tree violates the parser's structural contract
    (e.g. a list item outside a list).

    Context keys: ``node_type``, ``parent_type``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.MALFORMED_TREE,
            message=message,
            context=context,
            cause=cause,
        )


# ---------------------------------------------------------------------------
# Serialization errors
# ---------------------------------------------------------------------------

class SerializationError(Md2nbError):
    """Base class for errors raised while rendering notebook text."""

    def __init__(
        self,
        code: str = ErrorCode.SERIALIZATION_ERROR,
        message: str = "Serialization error",
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(code=code, message=message, context=context, cause=cause)


class UnencodableCharacterError(SerializationError):
    """A string contains a character outside the escaping table.

    Context keys: ``character``, ``codepoint``.
    """

    def __init__(
        self,
        character: str,
        message: str | None = None,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        codepoint = f"U+{ord(character):04X}"
        self.character = character
        super().__init__(
            code=ErrorCode.UNENCODABLE_CHARACTER,
            message=message or f"Character {codepoint} cannot be encoded in a notebook string",
            context={"character": character, "codepoint": codepoint, **(context or {})},
            cause=cause,
        )


# ---------------------------------------------------------------------------
# I/O errors
# ---------------------------------------------------------------------------

class InputError(Md2nbError):
    """The Markdown source could not be read or is not valid UTF-8.

    Context keys: ``path``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.INPUT_ERROR,
            message=message,
            context=context,
            cause=cause,
        )


class OutputError(Md2nbError):
    """The notebook could not be written (target exists or is unwritable).

    Context keys: ``path``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.OUTPUT_ERROR,
            message=message,
            context=context,
            cause=cause,
        )
