"""Load and save a HistoryLog to its backing file.

Two save strategies are supported:

Snapshot mode (default)
    The whole in-memory window is written to a temporary file next to the
    backing file, which then atomically replaces it. A crash mid-write
    leaves the previous file intact. Not safe for several concurrent
    writers: one writer's replace can race another's.

Append mode (``history-append``)
    Only entries added since the last save are appended. The block is
    encoded up front and written through a single O_APPEND descriptor, so
    blocks from concurrent writers (threads or processes) land whole, in
    whatever order the writes happen.

Failures never propagate to the caller. They are logged through the
diagnostic sink and reported in the returned PersistResult, so an
interactive session keeps running when the history file is unwritable.
"""

import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from .codec import format_record, parse_record
from .config import HISTORY_APPEND, HISTORY_FILE, HISTORY_SKIP_MALFORMED, ConfigProvider
from .diagnostics import TRACE, DiagnosticSink, LoggingSink
from .errors import RecordParseError

if TYPE_CHECKING:
    from .history import Entry, HistoryLog

# Failure kinds reported in PersistResult.kind
IO_FAILURE = "io"
PARSE_FAILURE = "parse"


@dataclass(frozen=True, slots=True)
class PersistResult:
    """Outcome of a load, save or purge.

    Attributes:
        success: False if an I/O or parse failure occurred.
        operation: "load", "save" or "purge".
        path: Backing file path, or None when history is memory-only.
        count: Entries loaded or written (1 for a deleted file on purge).
        kind: "" on success, otherwise IO_FAILURE or PARSE_FAILURE.
        error: Failure description.
        skipped: Malformed records skipped during load.
    """

    success: bool
    operation: str
    path: Path | None = None
    count: int = 0
    kind: str = ""
    error: str = ""
    skipped: int = 0

    def __bool__(self) -> bool:
        return self.success


class HistoryFile:
    """Persistence engine for a HistoryLog.

    The backing path and the save mode are read from the config on every
    call; without a ``history-file`` every operation is a no-op.
    """

    def __init__(self, config: ConfigProvider, sink: DiagnosticSink | None = None) -> None:
        self.config = config
        self.sink = sink or LoggingSink()

    @property
    def path(self) -> Path | None:
        return self.config.get_path(HISTORY_FILE)

    # --- Load ---

    def load(self, log: "HistoryLog") -> PersistResult:
        """Append every record of the backing file to ``log``.

        Records bypass the filter pipeline and get fresh indices after
        ``log.last()``; their timestamps and order are kept. Loaded
        entries are not queued for the next append-mode save.

        By default a malformed record stops the load, keeping the entries
        read before it. With ``history-skip-malformed`` bad records are
        logged and skipped instead.
        """
        path = self.path
        if path is None:
            return PersistResult(success=True, operation="load")

        skip_malformed = self.config.get_bool(HISTORY_SKIP_MALFORMED)
        count = 0
        skipped = 0
        try:
            if not path.exists():
                return PersistResult(success=True, operation="load", path=path)
            self.sink.log(TRACE, "Loading history from: ", path)
            # Only "\n" ends a record; a raw "\r" belongs to the line.
            with open(path, encoding="utf-8", newline="\n") as fh:
                for lineno, raw in enumerate(fh, start=1):
                    try:
                        record = parse_record(raw.removesuffix("\n"))
                    except RecordParseError as exc:
                        if not skip_malformed:
                            raise
                        skipped += 1
                        self.sink.log(
                            logging.WARNING,
                            "Skipping malformed history record at ",
                            path, ":", lineno, ": ", exc,
                        )
                        continue
                    log._internal_add(record.time, record.line, pending=False)
                    count += 1
        except RecordParseError as exc:
            self.sink.log(logging.INFO, "Error parsing history file: ", path, exc)
            return PersistResult(
                success=False,
                operation="load",
                path=path,
                count=count,
                kind=PARSE_FAILURE,
                error=str(exc),
            )
        except (OSError, UnicodeDecodeError) as exc:
            self.sink.log(logging.INFO, "Error reloading history file: ", path, exc)
            return PersistResult(
                success=False,
                operation="load",
                path=path,
                count=count,
                kind=IO_FAILURE,
                error=str(exc),
            )

        return PersistResult(
            success=True, operation="load", path=path, count=count, skipped=skipped
        )

    # --- Save ---

    def save(self, log: "HistoryLog") -> PersistResult:
        """Flush ``log`` to the backing file.

        The pending queue is cleared whether or not the write succeeds.
        """
        pending = log._take_pending()
        path = self.path
        if path is None:
            return PersistResult(success=True, operation="save")

        append = self.config.get_bool(HISTORY_APPEND)
        try:
            self.sink.log(TRACE, "Flushing history")
            target = path.absolute()
            target.parent.mkdir(parents=True, exist_ok=True)
            if append:
                count = self._append(target, pending)
            else:
                count = self._snapshot(target, list(log.iterate()))
        except OSError as exc:
            self.sink.log(logging.DEBUG, "Error saving history file: ", path, exc)
            return PersistResult(
                success=False,
                operation="save",
                path=path,
                kind=IO_FAILURE,
                error=str(exc),
            )
        return PersistResult(success=True, operation="save", path=path, count=count)

    @staticmethod
    def _encode(entries: list["Entry"]) -> bytes:
        return "".join(format_record(e.time, e.line) for e in entries).encode("utf-8")

    def _append(self, target: Path, entries: list["Entry"]) -> int:
        if not entries:
            # Still create the file, like opening it for append would.
            os.close(os.open(target, os.O_WRONLY | os.O_CREAT | os.O_APPEND, 0o666))
            return 0
        data = memoryview(self._encode(entries))
        fd = os.open(target, os.O_WRONLY | os.O_CREAT | os.O_APPEND, 0o666)
        try:
            while data:
                written = os.write(fd, data)
                data = data[written:]
        finally:
            os.close(fd)
        return len(entries)

    def _snapshot(self, target: Path, entries: list["Entry"]) -> int:
        fd, temp = tempfile.mkstemp(prefix=target.name, suffix=".tmp", dir=target.parent)
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(self._encode(entries))
            os.replace(temp, target)
        except BaseException:
            try:
                os.unlink(temp)
            except OSError:
                pass
            raise
        return len(entries)

    # --- Purge ---

    def purge(self, log: "HistoryLog") -> PersistResult:
        """Reset ``log`` to empty and delete the backing file if present."""
        log._reset()
        path = self.path
        if path is None:
            return PersistResult(success=True, operation="purge")

        try:
            self.sink.log(TRACE, "Purging history from: ", path)
            path.unlink()
        except FileNotFoundError:
            return PersistResult(success=True, operation="purge", path=path)
        except OSError as exc:
            self.sink.log(logging.WARNING, "Failed to delete history file: ", path, exc)
            return PersistResult(
                success=False,
                operation="purge",
                path=path,
                kind=IO_FAILURE,
                error=str(exc),
            )
        return PersistResult(success=True, operation="purge", path=path, count=1)
