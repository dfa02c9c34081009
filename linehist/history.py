"""Bounded, globally indexed command history with navigation.

A HistoryLog keeps a window of the most recent entries. Each entry has a
global index that keeps increasing for the lifetime of the log, even after
older entries are evicted; ``first()`` is the index of the oldest retained
entry and ``last()`` of the newest. A navigation cursor, relative to the
window, backs interactive up/down recall.

Persistence is delegated to HistoryFile (persistence.py), configured
through the same ConfigProvider.
"""

from collections import deque
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from datetime import datetime

from .codec import normalize_time
from .config import (
    DEFAULT_HISTORY_SIZE,
    HISTORY_APPEND,
    HISTORY_INCREMENTAL,
    HISTORY_SIZE,
    ConfigProvider,
    MappingConfig,
)
from .diagnostics import DiagnosticSink, LoggingSink
from .errors import IndexOutOfRange, InvalidArgument
from .filters import FilterPolicy
from .persistence import HistoryFile, PersistResult


@dataclass(frozen=True, slots=True)
class Entry:
    """One recorded line.

    Attributes:
        index: Global index, unique for the lifetime of the log.
        time: When the line was entered (UTC, millisecond resolution).
        line: The recorded text; may contain newlines.
    """

    index: int
    time: datetime
    line: str

    def __str__(self) -> str:
        return f"{self.index}: {self.line}"


class HistoryView(Sequence):
    """Frozen, restartable sequence of entries taken from a HistoryLog.

    The view copies the window when it is created, so later adds,
    evictions or purges on the log do not affect it. Iterating it again
    starts over from the beginning.
    """

    def __init__(self, entries: Sequence[Entry]) -> None:
        self._entries = tuple(entries)

    def __getitem__(self, item):
        return self._entries[item]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Entry]:
        return iter(self._entries)

    def __repr__(self) -> str:
        return f"HistoryView({len(self._entries)} entries)"

    def lines(self) -> list[str]:
        return [entry.line for entry in self._entries]


class HistoryLog:
    """In-memory history window with offset-based addressing.

    Usage::

        log = HistoryLog(MappingConfig({HISTORY_FILE: path}))
        log.load()
        log.append("ls -l")
        log.previous()
        log.current()   # "ls -l"
        log.save()

    Not thread-safe: a single log is meant to serve one interactive
    session. Several logs (in threads or processes) may share one backing
    file when it is saved in append mode.
    """

    def __init__(
        self,
        config: ConfigProvider | None = None,
        sink: DiagnosticSink | None = None,
    ) -> None:
        self.config = config if config is not None else MappingConfig()
        self.sink = sink or LoggingSink()
        self.policy = FilterPolicy(self.config, self.sink)
        self.store = HistoryFile(self.config, self.sink)

        self._window: deque[Entry] = deque()
        self._pending: list[Entry] = []
        self._offset = 0
        self._cursor = 0

    # --- Accessors ---

    @property
    def capacity(self) -> int:
        return max(0, self.config.get_int(HISTORY_SIZE, DEFAULT_HISTORY_SIZE))

    def size(self) -> int:
        return len(self._window)

    def is_empty(self) -> bool:
        return not self._window

    def index(self) -> int:
        """Global index of the navigation cursor."""
        return self._offset + self._cursor

    def first(self) -> int:
        return self._offset

    def last(self) -> int:
        return self._offset + len(self._window) - 1

    @property
    def cursor(self) -> int:
        """Window-relative cursor; ``size()`` is the blank new-line slot."""
        return self._cursor

    def get(self, index: int) -> str:
        """Return the line at a global index.

        Raises:
            IndexOutOfRange: If ``index`` is not in [first(), last()].
        """
        return self.entry(index).line

    def entry(self, index: int) -> Entry:
        self._check_index(index)
        return self._window[index - self._offset]

    def iterate(self, from_index: int | None = None) -> HistoryView:
        """Snapshot the window starting at a global index.

        Args:
            from_index: First global index to include; defaults to first().

        Returns:
            A HistoryView that does not change when the log does.

        Raises:
            IndexOutOfRange: If ``from_index`` is given and not in
                [first(), last()].
        """
        if from_index is None:
            return HistoryView(self._window)
        self._check_index(from_index)
        start = from_index - self._offset
        return HistoryView([self._window[i] for i in range(start, len(self._window))])

    def pending(self) -> HistoryView:
        """Entries added since the last save attempt."""
        return HistoryView(self._pending)

    def __len__(self) -> int:
        return len(self._window)

    def __bool__(self) -> bool:
        # An empty log is still a usable object.
        return True

    def __iter__(self) -> Iterator[Entry]:
        return iter(self.iterate())

    def __str__(self) -> str:
        return "".join(f"{entry}\n" for entry in self._window)

    def _check_index(self, index: int) -> None:
        if not self._offset <= index <= self.last():
            raise IndexOutOfRange(index, self.first(), self.last())

    # --- Adding ---

    def add(self, time: datetime, line: str) -> Entry | None:
        """Record a line entered at ``time`` if the filters accept it.

        Args:
            time: When the line was entered.
            line: The line text.

        Returns:
            The new Entry, or None if the line was filtered out.

        Raises:
            InvalidArgument: If ``time`` or ``line`` is missing.
        """
        if time is None or line is None:
            raise InvalidArgument("add() requires both a time and a line")
        if not isinstance(time, datetime):
            raise InvalidArgument(f"time must be a datetime, not {type(time).__name__}")
        if not isinstance(line, str):
            raise InvalidArgument(f"line must be a str, not {type(line).__name__}")

        previous = self._window[-1].line if self._window else None
        accepted = self.policy.vet(line, previous)
        if accepted is None:
            return None

        entry = self._internal_add(time, accepted)
        if self.config.get_bool(HISTORY_APPEND) and self.config.get_bool(HISTORY_INCREMENTAL):
            self.save()
        return entry

    def append(self, line: str) -> Entry | None:
        """Record a line entered now."""
        return self.add(datetime.now().astimezone(), line)

    def _internal_add(self, time: datetime, line: str, *, pending: bool = True) -> Entry:
        """Append without filtering; used by add() and by loading."""
        entry = Entry(index=self.last() + 1, time=normalize_time(time), line=line)
        self._window.append(entry)
        if pending:
            self._pending.append(entry)
        self._trim()
        return entry

    def _trim(self) -> None:
        capacity = self.capacity
        while len(self._window) > capacity:
            self._window.popleft()
            self._offset += 1
        self._cursor = len(self._window)

    def _take_pending(self) -> list[Entry]:
        pending, self._pending = self._pending, []
        return pending

    def _reset(self) -> None:
        self._window.clear()
        self._pending.clear()
        self._offset = 0
        self._cursor = 0

    # --- Persistence ---

    def load(self) -> PersistResult:
        """Append the backing file's entries to this log."""
        return self.store.load(self)

    def save(self) -> PersistResult:
        """Flush to the backing file in append or snapshot mode."""
        return self.store.save(self)

    def purge(self) -> PersistResult:
        """Drop all entries and delete the backing file."""
        return self.store.purge(self)

    # --- Navigation ---

    def move_to_first(self) -> bool:
        if self._window and self._cursor != 0:
            self._cursor = 0
            return True
        return False

    def move_to_last(self) -> bool:
        """Move to the newest entry (one before the blank slot)."""
        last = len(self._window) - 1
        if last >= 0 and self._cursor != last:
            self._cursor = last
            return True
        return False

    def move_to(self, index: int) -> bool:
        """Move to a global index; leaves the cursor alone if out of range."""
        position = index - self._offset
        if 0 <= position < len(self._window):
            self._cursor = position
            return True
        return False

    def move_to_end(self) -> None:
        """Move past the newest entry, to the blank new-line slot."""
        self._cursor = len(self._window)

    def previous(self) -> bool:
        if self._cursor <= 0:
            return False
        self._cursor -= 1
        return True

    def next(self) -> bool:
        if self._cursor >= len(self._window):
            return False
        self._cursor += 1
        return True

    def current(self) -> str:
        """Line under the cursor, or "" at the blank slot."""
        if self._cursor >= len(self._window):
            return ""
        return self._window[self._cursor].line
