"""Tests for observability/logger.py"""
import io
import json
import logging
import sys

import pytest

from md2nb.observability import StructuredFormatter, get_logger, set_level


class TestStructuredFormatter:
    def _get_record(
        self,
        msg,
        level=logging.INFO,
        exc_info=None,
        stack_info=None,
        extra_fields=None,
    ):
        record = logging.LogRecord(
            name="md2nb.test",
            level=level,
            pathname="",
            lineno=0,
            msg=msg,
            args=(),
            exc_info=exc_info,
        )
        if extra_fields is not None:
            record.extra_fields = extra_fields
        if stack_info is not None:
            record.stack_info = stack_info
        return record

    def test_basic_format(self):
        fmt = StructuredFormatter()
        result = json.loads(fmt.format(self._get_record("hello world")))
        assert result["message"] == "hello world"
        assert result["level"] == "INFO"
        assert result["logger"] == "md2nb.test"
        assert "ts" in result

    def test_single_line(self):
        fmt = StructuredFormatter()
        assert "\n" not in fmt.format(self._get_record("a\nb"))

    def test_extra_fields_merged(self):
        fmt = StructuredFormatter()
        record = self._get_record("msg", extra_fields={"cells": 5, "path": "a.md"})
        result = json.loads(fmt.format(record))
        assert result["cells"] == 5
        assert result["path"] == "a.md"

    def test_unserializable_extra_uses_str(self):
        fmt = StructuredFormatter()
        record = self._get_record("msg", extra_fields={"obj": object()})
        result = json.loads(fmt.format(record))
        assert result["obj"].startswith("<object object")

    def test_exception_info_included(self):
        fmt = StructuredFormatter()
        try:
            raise ValueError("test error")
        except ValueError:
            exc_info = sys.exc_info()
        result = json.loads(fmt.format(self._get_record("error msg", exc_info=exc_info)))
        assert "ValueError" in result["exception"]

    def test_stack_info_included(self):
        fmt = StructuredFormatter()
        record = self._get_record("msg", stack_info="Stack Trace Here")
        result = json.loads(fmt.format(record))
        assert result["stack_info"] == "Stack Trace Here"


def _structured_handlers(logger):
    """Handlers installed by md2nb itself, ignoring any the test runner adds."""
    return [h for h in logger.handlers if isinstance(h.formatter, StructuredFormatter)]


class TestGetLogger:
    @pytest.fixture(autouse=True)
    def _restore_level(self):
        root = logging.getLogger("md2nb")
        previous = root.level
        yield
        root.setLevel(previous)

    def test_returns_package_logger(self):
        logger = get_logger()
        assert logger.name == "md2nb"
        assert len(_structured_handlers(logger)) == 1

    def test_child_logger_propagates_to_package(self):
        child = get_logger("md2nb.converter")
        assert _structured_handlers(child) == []
        assert child.propagate is True

    def test_idempotent_no_duplicate_handlers(self):
        get_logger("md2nb.a")
        get_logger("md2nb.b")
        assert len(_structured_handlers(logging.getLogger("md2nb"))) == 1

    def test_package_does_not_propagate(self):
        assert get_logger().propagate is False

    def test_rejects_foreign_names(self):
        with pytest.raises(ValueError):
            get_logger("notmd2nb")
        with pytest.raises(ValueError):
            get_logger("md2nbx.sub")

    def test_string_level(self):
        get_logger(level="debug")
        assert logging.getLogger("md2nb").level == logging.DEBUG

    def test_set_level(self):
        set_level(logging.INFO)
        assert logging.getLogger("md2nb").level == logging.INFO
        set_level("WARNING")
        assert logging.getLogger("md2nb").level == logging.WARNING

    def test_child_records_reach_extra_handler(self):
        stream = io.StringIO()
        handler = logging.StreamHandler(stream)
        handler.setFormatter(StructuredFormatter())
        root = logging.getLogger("md2nb")
        root.addHandler(handler)
        try:
            set_level("INFO")
            get_logger("md2nb.test").info("hello", extra={"extra_fields": {"k": "v"}})
        finally:
            root.removeHandler(handler)
        entry = json.loads(stream.getvalue())
        assert entry["message"] == "hello"
        assert entry["k"] == "v"
        assert entry["logger"] == "md2nb.test"
