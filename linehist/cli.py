"""Click CLI entry point for linehist.

Maintenance commands for history files written by the engine, plus a
small prompt_toolkit REPL that exercises the full add/recall/save cycle.
"""

import logging
import sys
from datetime import datetime

import click
from prompt_toolkit import PromptSession
from prompt_toolkit.formatted_text import HTML

from . import __version__
from .config import (
    HISTORY_APPEND,
    HISTORY_FILE,
    HISTORY_IGNORE,
    HISTORY_IGNORE_DUPS,
    HISTORY_IGNORE_SPACE,
    HISTORY_INCREMENTAL,
    HISTORY_REDUCE_BLANKS,
    HISTORY_SIZE,
    HISTORY_SKIP_MALFORMED,
    MappingConfig,
)
from .display import console, format_failure, format_history_table
from .history import HistoryLog
from .prompt import LineHistory

logger = logging.getLogger(__name__)

QUIT_COMMANDS = (".quit", ".exit")


def _filter_options(func):
    """Shared options controlling the filter pipeline and save mode."""
    options = [
        click.option("--size", type=int, default=None, help="Maximum entries kept in memory."),
        click.option(
            "--append/--snapshot",
            default=None,
            help="Append new entries instead of rewriting the whole file.",
        ),
        click.option("--ignore", default=None, help="Colon-separated glob patterns to skip."),
        click.option("--ignore-dups", is_flag=True, default=False, help="Skip repeated lines."),
        click.option(
            "--ignore-space", is_flag=True, default=False, help="Skip lines starting with a space."
        ),
        click.option(
            "--reduce-blanks", is_flag=True, default=False, help="Trim surrounding whitespace."
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _build_config(path: str, **opts) -> MappingConfig:
    """Environment defaults, overridden by command-line options."""
    config = MappingConfig.from_env()
    config.set(HISTORY_FILE, path)
    if opts.get("size") is not None:
        config.set(HISTORY_SIZE, opts["size"])
    if opts.get("append") is not None:
        config.set(HISTORY_APPEND, opts["append"])
    if opts.get("ignore") is not None:
        config.set(HISTORY_IGNORE, opts["ignore"])
    for flag, key in (
        ("ignore_dups", HISTORY_IGNORE_DUPS),
        ("ignore_space", HISTORY_IGNORE_SPACE),
        ("reduce_blanks", HISTORY_REDUCE_BLANKS),
        ("skip_malformed", HISTORY_SKIP_MALFORMED),
    ):
        if opts.get(flag):
            config.set(key, True)
    return config


@click.group()
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug logging.")
@click.version_option(version=__version__, prog_name="linehist")
def cli(verbose: bool) -> None:
    """Inspect and maintain line-editor history files."""
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )


@cli.command()
@click.argument("path", type=click.Path(dir_okay=False))
@click.option("-n", "--limit", type=int, default=None, help="Show only the newest N entries.")
@click.option("--skip-malformed", is_flag=True, default=False, help="Skip unreadable records.")
def show(path: str, limit: int | None, skip_malformed: bool) -> None:
    """Print the entries of a history file."""
    config = _build_config(path, skip_malformed=skip_malformed)
    log = HistoryLog(config)
    result = log.load()
    if not result:
        console.print(format_failure(result), soft_wrap=True)
        sys.exit(1)

    entries = log.iterate()
    if limit is not None and limit < len(entries):
        entries = entries[len(entries) - max(limit, 0):]
    if not entries:
        console.print("[dim]History is empty.[/dim]")
        return
    console.print(format_history_table(entries))
    if result.skipped:
        console.print(f"[yellow]Skipped {result.skipped} malformed record(s).[/yellow]")


@cli.command("import")
@click.argument("path", type=click.Path(dir_okay=False))
@click.argument("sources", nargs=-1, required=True, type=click.File("r", encoding="utf-8"))
@_filter_options
def import_lines(path: str, sources, **opts) -> None:
    """Add plain-text lines from SOURCES to the history file.

    Each source line is run through the filter pipeline. Use '-' to read
    from stdin.
    """
    config = _build_config(path, **opts)
    log = HistoryLog(config)
    if not config.get_bool(HISTORY_APPEND):
        loaded = log.load()
        if not loaded:
            console.print(format_failure(loaded), soft_wrap=True)
            sys.exit(1)

    accepted = 0
    total = 0
    for source in sources:
        for raw in source:
            total += 1
            if log.add(datetime.now().astimezone(), raw.rstrip("\n")) is not None:
                accepted += 1

    result = log.save()
    if not result:
        console.print(format_failure(result), soft_wrap=True)
        sys.exit(1)
    console.print(f"Imported {accepted} of {total} line(s) into {path}", soft_wrap=True)


@cli.command()
@click.argument("path", type=click.Path(dir_okay=False))
@click.option("--yes", is_flag=True, default=False, help="Do not ask for confirmation.")
def purge(path: str, yes: bool) -> None:
    """Delete a history file."""
    if not yes:
        click.confirm(f"Delete history file {path}?", abort=True)
    result = HistoryLog(_build_config(path)).purge()
    if not result:
        console.print(format_failure(result), soft_wrap=True)
        sys.exit(1)
    if result.count:
        console.print(f"Deleted {path}", soft_wrap=True)
    else:
        console.print(f"[dim]{path} does not exist.[/dim]", soft_wrap=True)


@cli.command()
@click.argument("path", type=click.Path(dir_okay=False))
@click.option("--incremental", is_flag=True, default=False, help="Save after every line.")
@_filter_options
def repl(path: str, incremental: bool, **opts) -> None:
    """Echo REPL with persistent, filtered history.

    Type .history to list the in-memory window and .quit to exit.
    """
    config = _build_config(path, **opts)
    if incremental:
        config.set(HISTORY_INCREMENTAL, True)
    history = LineHistory(HistoryLog(config))
    run_repl(history)


def run_repl(history: LineHistory) -> None:
    """Run the interactive loop until EOF or .quit, then save."""
    session: PromptSession = PromptSession(history=history)
    prompt = HTML("<style fg='ansigray'>[history]</style> <b>&gt;</b> ")
    try:
        while True:
            try:
                line = session.prompt(prompt)
            except EOFError:
                console.print("\nGoodbye")
                break
            except KeyboardInterrupt:
                continue

            trimmed = line.strip()
            if trimmed in QUIT_COMMANDS:
                console.print("Goodbye")
                break
            if trimmed == ".history":
                window = history.log.iterate()
                if window:
                    console.print(format_history_table(window))
                else:
                    console.print("[dim]History is empty.[/dim]")
                continue
            if trimmed:
                console.print(line, highlight=False, markup=False)
    finally:
        result = history.save()
        if not result:
            logger.warning("History was not saved: %s", result.error)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
