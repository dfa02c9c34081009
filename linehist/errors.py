"""Exception types raised by the history engine.

I/O failures on the backing file are never raised; they are reported via
PersistResult (see persistence.py) and the diagnostic sink.
"""


class HistoryError(Exception):
    """Base class for all history errors."""


class InvalidArgument(HistoryError, ValueError):
    """Raised when add() receives a missing or mistyped time or line."""


class IndexOutOfRange(HistoryError, IndexError):
    """Raised when a global index falls outside [first(), last()]."""

    def __init__(self, index: int, first: int, last: int) -> None:
        super().__init__(f"History index {index} out of range [{first}, {last}]")
        self.index = index
        self.first = first
        self.last = last


class RecordParseError(HistoryError, ValueError):
    """Raised when a persisted record cannot be parsed."""
