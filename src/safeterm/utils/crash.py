"""Crash capture for independently failing units of work.

Wrap a unit (the TUI loop, a simple-mode run) in recover_panic(). An
unexpected exception inside it is logged, written to a timestamped crash
report with its stack trace, and the caller's cleanup runs before the unit
ends. The guard tells the caller what happened.
"""

import traceback
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

import structlog


@dataclass
class CrashGuard:
    """Outcome of a supervised unit of work."""

    name: str
    error: BaseException | None = None
    report_path: Path | None = None

    @property
    def crashed(self) -> bool:
        """True if the unit ended with an unexpected exception."""
        return self.error is not None


def write_crash_report(
    name: str,
    error: BaseException,
    crash_dir: Path,
    now: datetime | None = None,
) -> Path:
    """Write a crash report for error raised in unit name.

    Args:
        name: Unit name, part of the file name
        error: The exception (its traceback is written)
        crash_dir: Directory for the report
        now: Report time (current local time if None)

    Returns:
        Path to the report, safeterm-panic-<name>-<YYYYmmdd-HHMMSS>.log
    """
    now = now or datetime.now().astimezone()
    crash_dir.mkdir(parents=True, exist_ok=True)
    path = crash_dir / f"safeterm-panic-{name}-{now:%Y%m%d-%H%M%S}.log"

    stack = "".join(traceback.format_exception(type(error), error, error.__traceback__))
    with open(path, "w", encoding="utf-8") as f:
        f.write(f"Panic in {name}: {error!r}\n\n")
        f.write(f"Time: {now.isoformat(timespec='seconds')}\n\n")
        f.write(f"Stack Trace:\n{stack}\n")
    return path


@contextmanager
def recover_panic(
    name: str,
    cleanup: Callable[[], None] | None = None,
    *,
    log: structlog.stdlib.BoundLogger | None = None,
    crash_dir: Path = Path("."),
) -> Iterator[CrashGuard]:
    """Supervise a unit of work, turning a crash into a report.

    KeyboardInterrupt and SystemExit are not intercepted.

    Args:
        name: Unit name used in logs and the report file name
        cleanup: Called after the report is written
        log: Logger for the crash event
        crash_dir: Directory for crash reports

    Yields:
        CrashGuard filled in when the unit crashes
    """
    guard = CrashGuard(name=name)
    try:
        yield guard
    except Exception as e:
        guard.error = e
        if log:
            log.error("panic", name=name, exc_info=e)
        try:
            guard.report_path = write_crash_report(name, e, crash_dir)
        except OSError as report_error:
            if log:
                log.error("crash_report_failed", name=name, error=str(report_error))
        if cleanup is not None:
            cleanup()
