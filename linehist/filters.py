"""Decide whether a candidate line is recorded in history.

The pipeline runs in a fixed order; the first rule that rejects wins:

1. ``disable-history`` rejects everything.
2. ``history-ignore-space`` rejects lines whose raw text starts with a space.
3. ``history-reduce-blanks`` trims surrounding whitespace; the trimmed
   text is what later rules see and what gets stored.
4. ``history-ignore-dups`` rejects a line equal to the newest entry.
5. ``history-ignore`` rejects lines matching a colon-separated glob list.
"""

import logging
import re
from functools import lru_cache

from .config import (
    DISABLE_HISTORY,
    HISTORY_IGNORE,
    HISTORY_IGNORE_DUPS,
    HISTORY_IGNORE_GLOB_ONLY,
    HISTORY_IGNORE_SPACE,
    HISTORY_REDUCE_BLANKS,
    ConfigProvider,
)
from .diagnostics import DiagnosticSink, LoggingSink


def translate_patterns(patterns: str, *, glob_only: bool = False) -> str:
    """Translate a colon-separated glob list into a regular expression.

    ``\\x`` matches ``x`` literally, ``:`` separates alternatives and ``*``
    matches any run of characters. Any other character is copied into the
    expression as-is, so regex metacharacters such as ``.`` or ``[`` keep
    their regex meaning. Pass ``glob_only=True`` to escape them instead.

    Example::

        >>> translate_patterns("ls:cd *")
        'ls|cd .*'
    """
    out = []
    i = 0
    while i < len(patterns):
        ch = patterns[i]
        if ch == "\\":
            i += 1
            # Trailing lone backslash stands for itself.
            out.append(re.escape(patterns[i] if i < len(patterns) else "\\"))
        elif ch == ":":
            out.append("|")
        elif ch == "*":
            out.append(".*")
        else:
            out.append(re.escape(ch) if glob_only else ch)
        i += 1
    return "".join(out)


@lru_cache(maxsize=32)
def compile_patterns(patterns: str, glob_only: bool = False) -> re.Pattern | None:
    """Compile a pattern list, or return None if it is empty.

    Raises:
        re.error: If the translated expression is not a valid regex.
    """
    if not patterns:
        return None
    return re.compile(translate_patterns(patterns, glob_only=glob_only), re.DOTALL)


def matches_patterns(
    patterns: str,
    line: str,
    *,
    glob_only: bool = False,
    sink: DiagnosticSink | None = None,
    reported: set[str] | None = None,
) -> bool:
    """Return True if ``line`` fully matches one of the patterns.

    An invalid pattern list matches nothing and is logged. Pattern strings
    found in ``reported`` are not logged again; new ones are added to it.
    """
    try:
        regex = compile_patterns(patterns, glob_only)
    except re.error as exc:
        if reported is None or patterns not in reported:
            if reported is not None:
                reported.add(patterns)
            (sink or LoggingSink()).log(
                logging.WARNING, "Invalid history ignore pattern: ", repr(patterns), " (", exc, ")"
            )
        return False
    if regex is None:
        return False
    return regex.fullmatch(line) is not None


class FilterPolicy:
    """Applies the history filter pipeline using live config values."""

    def __init__(self, config: ConfigProvider, sink: DiagnosticSink | None = None) -> None:
        self.config = config
        self.sink = sink or LoggingSink()
        # Invalid pattern strings this policy has already logged.
        self._reported: set[str] = set()

    def vet(self, line: str, previous: str | None) -> str | None:
        """Run the pipeline on a candidate line.

        Args:
            line: The line as entered.
            previous: Line of the newest retained entry, or None if empty.

        Returns:
            The text to store (possibly trimmed), or None if rejected.
        """
        config = self.config
        if config.get_bool(DISABLE_HISTORY):
            return None
        if config.get_bool(HISTORY_IGNORE_SPACE) and line.startswith(" "):
            return None
        if config.get_bool(HISTORY_REDUCE_BLANKS):
            line = line.strip()
        if config.get_bool(HISTORY_IGNORE_DUPS) and previous is not None and line == previous:
            return None
        if matches_patterns(
            config.get_str(HISTORY_IGNORE),
            line,
            glob_only=config.get_bool(HISTORY_IGNORE_GLOB_ONLY),
            sink=self.sink,
            reported=self._reported,
        ):
            return None
        return line
