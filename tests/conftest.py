"""Shared test fixtures for the linehist test suite."""

import pytest

from linehist.config import HISTORY_FILE, MappingConfig
from linehist.diagnostics import NullSink
from linehist.history import HistoryLog


@pytest.fixture
def history_path(tmp_path):
    """Path to a not-yet-existing history file."""
    return tmp_path / "history"


@pytest.fixture
def make_log(history_path):
    """Factory for logs backed by ``history_path``; options as keyword args."""

    def _make(path=history_path, **options):
        values = {HISTORY_FILE: path} if path is not None else {}
        config = MappingConfig(values, **options)
        return HistoryLog(config, NullSink())

    return _make


@pytest.fixture
def log(make_log):
    """In-memory log with no backing file."""
    return make_log(path=None)


class RecordingSink:
    """DiagnosticSink that keeps every call for assertions."""

    def __init__(self):
        self.calls = []

    def log(self, level, *parts):
        self.calls.append((level, parts))

    def levels(self):
        return [level for level, _ in self.calls]


@pytest.fixture
def sink():
    return RecordingSink()
