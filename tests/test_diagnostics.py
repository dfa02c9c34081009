"""Tests for the logging-backed diagnostic sink."""

import logging

from linehist.diagnostics import TRACE, LoggingSink, NullSink, render


class TestRender:
    def test_joins_parts_without_separator(self):
        assert render(("Loading history from: ", "/tmp/h")) == ("Loading history from: /tmp/h", None)

    def test_trailing_exception_split_off(self):
        exc = OSError("boom")
        message, cause = render(("Error: ", "/tmp/h", exc))
        assert message == "Error: /tmp/h"
        assert cause is exc

    def test_exception_not_last_is_rendered(self):
        message, cause = render((ValueError("x"), " happened"))
        assert message == "x happened"
        assert cause is None


class TestLoggingSink:
    def test_logs_message(self, caplog):
        sink = LoggingSink(logging.getLogger("linehist.test"))
        with caplog.at_level(logging.INFO, logger="linehist.test"):
            sink.log(logging.INFO, "hello ", 42)
        assert caplog.records[-1].getMessage() == "hello 42"

    def test_exception_attached_as_exc_info(self, caplog):
        sink = LoggingSink(logging.getLogger("linehist.test"))
        exc = OSError("disk full")
        with caplog.at_level(logging.WARNING, logger="linehist.test"):
            sink.log(logging.WARNING, "Failed: ", "/tmp/h", exc)
        record = caplog.records[-1]
        assert record.getMessage() == "Failed: /tmp/h"
        assert record.exc_info[1] is exc

    def test_disabled_level_skipped(self, caplog):
        sink = LoggingSink(logging.getLogger("linehist.test"))
        with caplog.at_level(logging.INFO, logger="linehist.test"):
            sink.log(TRACE, "noise")
        assert caplog.records == []

    def test_default_logger_name(self):
        assert LoggingSink().logger.name == "linehist"

    def test_trace_level_name(self):
        assert logging.getLevelName(TRACE) == "TRACE"


class TestNullSink:
    def test_discards(self):
        NullSink().log(logging.ERROR, "ignored", OSError("x"))
