"""
Utility functions shared across the script generator modules.
Progress logging goes through a LogSink so callers (CLI, tests, embedding apps) decide where
lines end up. Lines are delivered synchronously, in the order they are produced.
"""

from typing import Callable, Protocol, runtime_checkable


@runtime_checkable
class LogSink(Protocol):
    """Anything that accepts one progress line at a time."""

    def log(self, msg: str, verbose_only: bool = False) -> None:
        ...


class ConsoleLogSink:
    """Print with a [TAG] prefix. Use verbose_only for chunk-level debug output."""

    def __init__(self, prefix: str = "[AI]", verbose: bool = False):
        self.prefix = prefix
        self.verbose = verbose

    def log(self, msg: str, verbose_only: bool = False) -> None:
        if verbose_only and not self.verbose:
            return
        print(f"{self.prefix} {msg}")


class CallbackLogSink:
    """Adapts a plain `fn(msg)` callable. Verbose lines are dropped unless verbose=True."""

    def __init__(self, callback: Callable[[str], None], verbose: bool = False):
        self.callback = callback
        self.verbose = verbose

    def log(self, msg: str, verbose_only: bool = False) -> None:
        if verbose_only and not self.verbose:
            return
        self.callback(msg)


def as_log_sink(sink: "LogSink | Callable[[str], None] | None", verbose: bool = False) -> LogSink:
    """
    Normalize whatever the caller passed into a LogSink.

    Args:
        sink: A LogSink, a plain callable taking one string, or None for console output.
        verbose: Whether wrapped callables / the console sink should receive verbose lines.
    """
    if sink is None:
        return ConsoleLogSink(verbose=verbose)
    if isinstance(sink, LogSink):
        return sink
    if callable(sink):
        return CallbackLogSink(sink, verbose=verbose)
    raise TypeError(f"log sink must be a LogSink or a callable, got {type(sink).__name__}")


def safe_filename(text: str, suffix: str = "_script.json", max_len: int = 60) -> str:
    """Turn a free-form prompt into a filesystem-friendly name (e.g. 'Top 5 Cats!' -> 'top_5_cats_script.json')."""
    safe_name = "".join(c if c.isalnum() or c in (' ', '-', '_') else '' for c in text)
    safe_name = "_".join(safe_name.split()).lower()[:max_len].strip("_")
    return f"{safe_name or 'video'}{suffix}"
