"""Configuration lookup for the history engine.

The engine never reaches into its host for options. Instead the host
injects a ConfigProvider at construction time; every operation reads the
options it needs through the provider, so a host that changes a value
between calls sees the new value on the next call.
"""

import os
from pathlib import Path
from typing import Any, Mapping, Protocol

# --- Option keys ---

HISTORY_FILE = "history-file"
HISTORY_SIZE = "history-size"
DISABLE_HISTORY = "disable-history"
HISTORY_APPEND = "history-append"
HISTORY_INCREMENTAL = "history-incremental"
HISTORY_IGNORE_SPACE = "history-ignore-space"
HISTORY_REDUCE_BLANKS = "history-reduce-blanks"
HISTORY_IGNORE_DUPS = "history-ignore-dups"
HISTORY_IGNORE = "history-ignore"
HISTORY_IGNORE_GLOB_ONLY = "history-ignore-glob-only"
HISTORY_SKIP_MALFORMED = "history-skip-malformed"

ALL_KEYS = (
    HISTORY_FILE,
    HISTORY_SIZE,
    DISABLE_HISTORY,
    HISTORY_APPEND,
    HISTORY_INCREMENTAL,
    HISTORY_IGNORE_SPACE,
    HISTORY_REDUCE_BLANKS,
    HISTORY_IGNORE_DUPS,
    HISTORY_IGNORE,
    HISTORY_IGNORE_GLOB_ONLY,
    HISTORY_SKIP_MALFORMED,
)

DEFAULT_HISTORY_SIZE = 500

ENV_PREFIX = "LINEHIST_"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


class ConfigProvider(Protocol):
    """Typed option lookup supplied by the host."""

    def get_bool(self, key: str, default: bool = False) -> bool: ...

    def get_int(self, key: str, default: int = 0) -> int: ...

    def get_str(self, key: str, default: str = "") -> str: ...

    def get_path(self, key: str) -> Path | None: ...


class MappingConfig:
    """ConfigProvider backed by a mutable dict.

    Usage::

        config = MappingConfig({HISTORY_FILE: "~/.myrepl_history"})
        config.set(HISTORY_IGNORE_DUPS, True)
        log = HistoryLog(config)

    Values are coerced leniently: booleans accept common string spellings,
    integers accept numeric strings, and unparseable values fall back to
    the caller's default.
    """

    def __init__(self, values: Mapping[str, Any] | None = None, **overrides: Any) -> None:
        self._values: dict[str, Any] = dict(values or {})
        for key, value in overrides.items():
            self._values[key.replace("_", "-")] = value

    @classmethod
    def from_env(
        cls,
        prefix: str = ENV_PREFIX,
        environ: Mapping[str, str] | None = None,
    ) -> "MappingConfig":
        """Build a config from environment variables.

        ``LINEHIST_HISTORY_FILE`` maps to ``history-file``, and so on for
        every key in ALL_KEYS.
        """
        env = os.environ if environ is None else environ
        values = {}
        for key in ALL_KEYS:
            name = prefix + key.upper().replace("-", "_")
            if name in env:
                values[key] = env[name]
        return cls(values)

    # --- Mutation ---

    def set(self, key: str, value: Any) -> None:
        self._values[key] = value

    def unset(self, key: str) -> None:
        self._values.pop(key, None)

    def update(self, values: Mapping[str, Any]) -> None:
        self._values.update(values)

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self._values[key] = value

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __repr__(self) -> str:
        return f"MappingConfig({self._values!r})"

    # --- Typed lookups ---

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self._values.get(key)
        if value is None:
            return default
        if isinstance(value, bool):
            return value
        if isinstance(value, int):
            return value != 0
        text = str(value).strip().lower()
        if text in _TRUE:
            return True
        if text in _FALSE:
            return False
        return default

    def get_int(self, key: str, default: int = 0) -> int:
        value = self._values.get(key)
        if value is None or isinstance(value, bool):
            return default
        if isinstance(value, int):
            return value
        try:
            return int(str(value).strip())
        except ValueError:
            return default

    def get_str(self, key: str, default: str = "") -> str:
        value = self._values.get(key)
        if value is None:
            return default
        return str(value)

    def get_path(self, key: str) -> Path | None:
        value = self._values.get(key)
        if value is None or value == "":
            return None
        return Path(os.fspath(value)).expanduser()
