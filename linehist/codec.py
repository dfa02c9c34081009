"""Record format and line escaping for the history file.

Each entry is stored as one line::

    <epoch-milliseconds>:<escaped-line>\\n

The escaping only touches backslash and newline, so a record never spans
more than one physical line. The format has no header or checksum and is
shared by every writer of the same file.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from .errors import RecordParseError

# --- Wire-format constants ---

FIELD_SEP = ":"
RECORD_END = "\n"

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MS = timedelta(milliseconds=1)

# Java-style Long.parseLong: optional sign, ASCII digits only.
_EPOCH_RE = re.compile(r"[+-]?[0-9]+")


# --- Escaping ---


def escape(line: str) -> str:
    """Escape a line so it fits on a single record line.

    Backslash becomes two backslashes and newline becomes ``\\n``.
    """
    return line.replace("\\", "\\\\").replace("\n", "\\n")


def unescape(text: str) -> str:
    """Reverse escape().

    A backslash followed by ``n`` is a newline; a backslash followed by
    any other character is that character. A trailing lone backslash is
    dropped.
    """
    if "\\" not in text:
        return text

    out = []
    chars = iter(text)
    for ch in chars:
        if ch != "\\":
            out.append(ch)
            continue
        nxt = next(chars, None)
        if nxt is None:
            break
        out.append("\n" if nxt == "n" else nxt)
    return "".join(out)


# --- Timestamps ---


def normalize_time(when: datetime) -> datetime:
    """Return an aware UTC datetime truncated to millisecond resolution.

    Naive datetimes are taken to be local time.
    """
    aware = when.astimezone(timezone.utc)
    return aware.replace(microsecond=aware.microsecond // 1000 * 1000)


def to_epoch_millis(when: datetime) -> int:
    return (when.astimezone(timezone.utc) - EPOCH) // _ONE_MS


def from_epoch_millis(millis: int) -> datetime:
    return EPOCH + timedelta(milliseconds=millis)


# --- Records ---


@dataclass(frozen=True, slots=True)
class Record:
    """A parsed history file record.

    Attributes:
        time: Entry timestamp (UTC, millisecond resolution).
        line: The unescaped line text.
    """

    time: datetime
    line: str


def format_record(time: datetime, line: str) -> str:
    """Encode one entry as a newline-terminated record."""
    return f"{to_epoch_millis(time)}{FIELD_SEP}{escape(line)}{RECORD_END}"


def parse_record(raw: str) -> Record:
    """Parse a single record line (trailing newline already stripped).

    Args:
        raw: One line of the history file.

    Returns:
        Record with the decoded timestamp and line.

    Raises:
        RecordParseError: If the separator is missing or the timestamp
            prefix is not an integer.
    """
    stamp, sep, body = raw.partition(FIELD_SEP)
    if not sep:
        raise RecordParseError(f"Missing ':' separator in record: {raw!r}")
    if not _EPOCH_RE.fullmatch(stamp):
        raise RecordParseError(f"Invalid timestamp {stamp!r} in record: {raw!r}")
    try:
        when = from_epoch_millis(int(stamp))
    except OverflowError as exc:
        raise RecordParseError(f"Timestamp out of range: {stamp!r}") from exc
    return Record(time=when, line=unescape(body))
