"""linehist: persistent command history for interactive line editors.

This package keeps a bounded, globally indexed log of entered lines,
filters what gets recorded, and persists the log to a plain-text file
shared across sessions.

Architecture::

    host (REPL / PromptSession)
        |  add(time, line)          previous()/next()/current()
        v
    HistoryLog  --FilterPolicy-->  window (deque) + pending queue
        |  load()/save()/purge()
        v
    HistoryFile  --codec-->  <epoch-ms>:<escaped-line>\\n
                             (snapshot: temp file + os.replace,
                              append: single O_APPEND write)
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("linehist")
except PackageNotFoundError:
    __version__ = "0.0.0.dev"

from .config import MappingConfig
from .errors import HistoryError, IndexOutOfRange, InvalidArgument, RecordParseError
from .history import Entry, HistoryLog, HistoryView
from .persistence import HistoryFile, PersistResult

__all__ = [
    "Entry",
    "HistoryError",
    "HistoryFile",
    "HistoryLog",
    "HistoryView",
    "IndexOutOfRange",
    "InvalidArgument",
    "MappingConfig",
    "PersistResult",
    "RecordParseError",
    "__version__",
]
