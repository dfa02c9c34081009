"""prompt_toolkit integration.

Wraps a HistoryLog in prompt_toolkit's History interface so a
PromptSession gets up-arrow recall backed by the same file, filters and
save modes as every other user of the engine::

    session = PromptSession(history=get_history(config))
"""

import os
from collections.abc import Iterable

from prompt_toolkit.history import History

from .config import HISTORY_FILE, ConfigProvider, MappingConfig
from .diagnostics import DiagnosticSink
from .history import HistoryLog

# Used when the host config does not name a history file.
DEFAULT_HISTORY_PATH = os.path.expanduser("~/.linehist_history")


class LineHistory(History):
    """prompt_toolkit History backed by a HistoryLog.

    The log is loaded from its backing file before the first read, store
    or save, so a snapshot save never drops entries that were on disk.
    New lines go through the log's filter pipeline and only accepted lines
    become recallable; saving is left to the host (or to incremental
    append mode).
    """

    def __init__(self, log: HistoryLog) -> None:
        super().__init__()
        self.log = log
        self._loaded_from_disk = False

    def _ensure_loaded(self) -> None:
        if not self._loaded_from_disk:
            self._loaded_from_disk = True
            self.log.load()

    def load_history_strings(self) -> Iterable[str]:
        self._ensure_loaded()
        # prompt_toolkit wants the newest entry first.
        for entry in reversed(self.log.iterate()):
            yield entry.line

    def append_string(self, string: str) -> None:
        self._ensure_loaded()
        entry = self.log.append(string)
        if entry is not None:
            self._loaded_strings.insert(0, entry.line)

    def store_string(self, string: str) -> None:
        self._ensure_loaded()
        self.log.append(string)

    def save(self):
        self._ensure_loaded()
        return self.log.save()


def get_history(
    config: ConfigProvider | None = None,
    sink: DiagnosticSink | None = None,
) -> LineHistory:
    """Return a LineHistory for a PromptSession.

    Falls back to DEFAULT_HISTORY_PATH when ``config`` has no
    ``history-file``.
    """
    if config is None:
        config = MappingConfig()
    if config.get_path(HISTORY_FILE) is None and isinstance(config, MappingConfig):
        config.set(HISTORY_FILE, DEFAULT_HISTORY_PATH)
    return LineHistory(HistoryLog(config, sink))
