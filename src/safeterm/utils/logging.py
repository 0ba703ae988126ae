"""Process log setup.

The entry point calls setup_logging() once and passes the returned LogHandle
to the components that log. Each process writes its own file:

- safeterm-<pid>.log (current process, rotated by size)
- safeterm-<pid>.log.1, ... (size rotations)

Files left behind by earlier processes are deleted at startup once they are
older than max_age_days.

Records are JSON lines rendered by structlog.
"""

import logging
import logging.handlers
import os
import re
import time
from dataclasses import dataclass
from pathlib import Path

import structlog

DEFAULT_MAX_AGE_DAYS = 30
DEFAULT_MAX_SIZE_MB = 10
DEFAULT_MAX_BACKUPS = 5

_SECONDS_PER_DAY = 24 * 60 * 60

_PROCESSORS = [
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.CallsiteParameterAdder(
        {
            structlog.processors.CallsiteParameter.FILENAME,
            structlog.processors.CallsiteParameter.FUNC_NAME,
            structlog.processors.CallsiteParameter.LINENO,
        }
    ),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    structlog.processors.UnicodeDecoder(),
    structlog.processors.JSONRenderer(),
]


def get_process_log_path(log_file: Path, pid: int | None = None) -> Path:
    """Get the process-specific log path for log_file.

    Args:
        log_file: Configured log file, e.g. ~/.safeterm/logs/safeterm.log
        pid: Process ID (current process if None)

    Returns:
        Path like ~/.safeterm/logs/safeterm-12345.log
    """
    pid = os.getpid() if pid is None else pid
    return log_file.with_name(f"{log_file.stem}-{pid}{log_file.suffix}")


def cleanup_old_process_logs(
    log_dir: Path,
    stem: str,
    suffix: str,
    max_age_days: int = DEFAULT_MAX_AGE_DAYS,
) -> list[Path]:
    """Delete process log files older than max_age_days.

    Only files named <stem>-<pid><suffix> and their size rotations
    <stem>-<pid><suffix>.<n> are considered.

    Args:
        log_dir: Directory holding the log files
        stem: Base name of the configured log file
        suffix: Extension of the configured log file (with the dot)
        max_age_days: Age limit in days

    Returns:
        Paths that were removed
    """
    if not log_dir.is_dir():
        return []

    pattern = re.compile(rf"^{re.escape(stem)}-(\d+){re.escape(suffix)}(?:\.\d+)?$")
    cutoff = time.time() - max_age_days * _SECONDS_PER_DAY

    removed: list[Path] = []
    for path in log_dir.iterdir():
        if not pattern.match(path.name) or not path.is_file():
            continue
        try:
            if path.stat().st_mtime < cutoff:
                path.unlink()
                removed.append(path)
        except OSError:
            # Raced with another process or not ours to delete
            continue
    return removed


@dataclass
class LogHandle:
    """Process logging state owned by the entry point."""

    path: Path
    debug: bool
    _logger: logging.Logger

    def get_logger(self, name: str) -> structlog.stdlib.BoundLogger:
        """Return a structlog logger writing to this process's log file.

        Args:
            name: Component name, recorded as "component"

        Returns:
            Bound logger
        """
        log = structlog.wrap_logger(
            self._logger,
            processors=_PROCESSORS,
            wrapper_class=structlog.stdlib.BoundLogger,
            context_class=dict,
        )
        return log.bind(component=name)

    def close(self) -> None:
        """Flush and close the log file."""
        for handler in list(self._logger.handlers):
            handler.close()
            self._logger.removeHandler(handler)


def setup_logging(
    log_file: Path,
    debug: bool = False,
    max_size_mb: int = DEFAULT_MAX_SIZE_MB,
    max_backups: int = DEFAULT_MAX_BACKUPS,
    max_age_days: int = DEFAULT_MAX_AGE_DAYS,
) -> LogHandle:
    """Open the process log file and return its handle.

    Args:
        log_file: Configured log file path (the PID is added to the name)
        debug: Log DEBUG records too (INFO and above otherwise)
        max_size_mb: Size in MB at which the file is rotated
        max_backups: Number of size rotations to keep
        max_age_days: Age after which other processes' logs are deleted

    Returns:
        LogHandle for the new log file
    """
    log_file = log_file.expanduser()
    log_dir = log_file.parent
    log_dir.mkdir(parents=True, exist_ok=True)

    removed = cleanup_old_process_logs(log_dir, log_file.stem, log_file.suffix, max_age_days)

    process_log = get_process_log_path(log_file)
    handler = logging.handlers.RotatingFileHandler(
        process_log,
        maxBytes=max_size_mb * 1024 * 1024,
        backupCount=max_backups,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    # Not registered with logging.getLogger(), so nothing else writes here
    logger = logging.Logger("safeterm", logging.DEBUG if debug else logging.INFO)
    logger.propagate = False
    logger.addHandler(handler)

    handle = LogHandle(path=process_log, debug=debug, _logger=logger)

    log = handle.get_logger("logging")
    for path in removed:
        log.info("removed_old_process_log", file=path.name)
    return handle
