"""Leveled diagnostic sink used by the history engine.

The engine reports through a DiagnosticSink rather than a concrete logger
so hosts can route messages wherever they like. The default sink forwards
to the standard ``logging`` module.
"""

import logging
from typing import Protocol

# Finer than DEBUG; used for the "Loading/Flushing/Purging" chatter.
TRACE = 5
logging.addLevelName(TRACE, "TRACE")


class DiagnosticSink(Protocol):
    def log(self, level: int, *parts: object) -> None:
        """Emit a message assembled from ``parts``.

        If the last part is an exception it is rendered as a traceback on
        the following lines instead of being joined into the message.
        """


def render(parts: tuple[object, ...]) -> tuple[str, BaseException | None]:
    """Join message parts and split off a trailing exception."""
    cause = None
    if parts and isinstance(parts[-1], BaseException):
        cause = parts[-1]
        parts = parts[:-1]
    return "".join(str(part) for part in parts), cause


class LoggingSink:
    """DiagnosticSink that writes to a ``logging.Logger``."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger("linehist")

    def log(self, level: int, *parts: object) -> None:
        if not self.logger.isEnabledFor(level):
            return
        message, cause = render(parts)
        if cause is not None:
            self.logger.log(level, message, exc_info=(type(cause), cause, cause.__traceback__))
        else:
            self.logger.log(level, message)


class NullSink:
    """DiagnosticSink that discards everything."""

    def log(self, level: int, *parts: object) -> None:
        pass
