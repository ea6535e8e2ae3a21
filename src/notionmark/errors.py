"""Error hierarchy for notionmark.

Every public error class inherits from :class:`NotionmarkError`. Each
carries a machine-readable ``code`` (from :class:`ErrorCode`), a
human-readable ``message``, an optional structured ``context`` dict, and an
optional ``cause`` (chained exception).

All errors are terminal for the conversion call that raised them: no
partial output is ever returned alongside an error.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Error code enum
# ---------------------------------------------------------------------------

class ErrorCode(str, Enum):
    """Machine-readable error codes for every error the library can raise."""

    PARSE_ERROR = "PARSE_ERROR"
    INVALID_JSON = "INVALID_JSON"
    UNSUPPORTED_CONSTRUCT = "UNSUPPORTED_CONSTRUCT"
    MALFORMED_BLOCK = "MALFORMED_BLOCK"


# ---------------------------------------------------------------------------
# Base error
# ---------------------------------------------------------------------------

class NotionmarkError(Exception):
    """Base exception for all notionmark errors.

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
# Parsing errors
# ---------------------------------------------------------------------------

class ParseError(NotionmarkError):
    """The input text could not be tokenized.

    Raised when the Markdown parser rejects its input (or crashes on it).

    Context keys: ``input_length``, ``reason``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
        *,
        code: str = ErrorCode.PARSE_ERROR,
    ) -> None:
        super().__init__(
            code=code,
            message=message,
            context=context,
            cause=cause,
        )


class BlockJSONSyntaxError(ParseError):
    """A block-tree JSON document is not valid JSON.

    Distinct from :class:`MalformedBlockError`, which covers JSON that
    decodes fine but does not have the block shape.

    Context keys: ``line``, ``column``, ``reason``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            message=message,
            context=context,
            cause=cause,
            code=ErrorCode.INVALID_JSON,
        )


# ---------------------------------------------------------------------------
# Conversion errors
# ---------------------------------------------------------------------------

class UnsupportedConstructError(NotionmarkError):
    """A well-formed node has no mapping target.

    In the Markdown direction this is raised for Markdown constructs with no
    block equivalent (tables, raw HTML, footnotes) unless the converter is
    configured with ``lenient=True``.  In the block direction it is raised
    for unknown block types and is never downgraded.

    Context keys: ``node_type`` or ``block_type``, ``position``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.UNSUPPORTED_CONSTRUCT,
            message=message,
            context=context,
            cause=cause,
        )


class MalformedBlockError(NotionmarkError):
    """A block violates the schema of its variant.

    Examples: a ``to_do`` without ``checked``, ``richText`` that is not a
    list, a divider carrying rich text.

    Context keys: ``path``, ``field``, ``reason``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.MALFORMED_BLOCK,
            message=message,
            context=context,
            cause=cause,
        )
