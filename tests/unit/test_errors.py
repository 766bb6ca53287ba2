"""Tests for errors.py."""

from __future__ import annotations

import pytest

from tiptapify.errors import (
    ErrorCode,
    TiptapifyConversionError,
    TiptapifyError,
    TiptapifyParseError,
    TiptapifyValidationError,
)


class TestHierarchy:
    @pytest.mark.parametrize(
        ("cls", "code"),
        [
            (TiptapifyParseError, ErrorCode.PARSE_ERROR),
            (TiptapifyConversionError, ErrorCode.CONVERSION_ERROR),
            (TiptapifyValidationError, ErrorCode.VALIDATION_ERROR),
        ],
    )
    def test_subclass_codes(self, cls, code):
        err = cls("boom")
        assert isinstance(err, TiptapifyError)
        assert err.code == code
        assert err.message == "boom"
        assert str(err) == "boom"
        assert err.context == {}

    def test_parse_error_custom_code(self):
        err = TiptapifyParseError("x", code=ErrorCode.UNTERMINATED_TAG, context={"position": 3})
        assert err.code == "UNTERMINATED_TAG"
        assert err.context == {"position": 3}


class TestCause:
    def test_cause_chained(self):
        original = KeyError("tag")
        err = TiptapifyConversionError("failed", cause=original)
        assert err.cause is original
        assert err.__cause__ is original

    def test_no_cause(self):
        assert TiptapifyValidationError("x").__cause__ is None


class TestRepr:
    def test_repr_with_context(self):
        err = TiptapifyConversionError("bad", context={"tag": "ul"})
        text = repr(err)
        assert text.startswith("TiptapifyConversionError(code=")
        assert text.endswith("message='bad', context={'tag': 'ul'})")

    def test_repr_without_context(self):
        err = TiptapifyError("CUSTOM", "plain")
        assert repr(err) == "TiptapifyError(code='CUSTOM', message='plain')"


def test_error_code_is_str():
    assert ErrorCode.PARSE_ERROR == "PARSE_ERROR"
    assert isinstance(ErrorCode.VALIDATION_ERROR, str)
