"""Error hierarchy for the tiptapify conversion engine.

Every error class inherits from :class:`TiptapifyError` and carries a
machine-readable ``code`` (from :class:`ErrorCode`), a human-readable
``message``, an optional structured ``context`` dict, and an optional
``cause`` (chained exception).

The public conversion functions never let these escape: they are raised at
internal seams (tag scanning, element conversion, node repair) and caught at
the public boundary, where they are turned into
:class:`~tiptapify.models.ConversionWarning` entries and log records.  A
conversion failure must never crash note viewing or editing.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Error code enum
# ---------------------------------------------------------------------------

class ErrorCode(str, Enum):
    """Machine-readable error codes for every error the engine can raise."""

    PARSE_ERROR = "PARSE_ERROR"
    UNTERMINATED_TAG = "UNTERMINATED_TAG"
    UNCLOSED_ELEMENT = "UNCLOSED_ELEMENT"
    CONVERSION_ERROR = "CONVERSION_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"


# ---------------------------------------------------------------------------
# Base error
# ---------------------------------------------------------------------------

class TiptapifyError(Exception):
    """Base exception for all tiptapify errors.

    Parameters
    ----------
    code:
        A value from :class:`ErrorCode` (or any string) identifying the
        error category.
    message:
        A developer-friendly description of what went wrong.
    context:
        Arbitrary structured data providing extra diagnostic detail.
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
# Concrete errors
# ---------------------------------------------------------------------------

class TiptapifyParseError(TiptapifyError):
    """The HTML scanner hit markup it cannot structure.

    The parser absorbs the offending input as literal text.

    Context keys: ``position``, ``tag``.
    """

    def __init__(
        self,
        message: str,
        code: str = ErrorCode.PARSE_ERROR,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(code=code, message=message, context=context, cause=cause)


class TiptapifyConversionError(TiptapifyError):
    """A parsed element or TipTap node could not be converted.

    Context keys: ``tag``, ``node_type``, ``direction``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.CONVERSION_ERROR,
            message=message,
            context=context,
            cause=cause,
        )


class TiptapifyValidationError(TiptapifyError):
    """A TipTap node is structurally unusable and had to be dropped.

    Context keys: ``index``, ``node``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.VALIDATION_ERROR,
            message=message,
            context=context,
            cause=cause,
        )
