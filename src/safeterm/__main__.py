"""Entry point for the safeterm viewer.

Usage:
    python -m safeterm -- COMMAND [ARGS...]   View a command's output
    python -m safeterm --file PATH            View a file
    python -m safeterm --simple ...           Use simple output instead of TUI
"""

import asyncio
import sys
from pathlib import Path

import structlog

from safeterm.ansiext import escape
from safeterm.cli import parse_args, should_use_tui
from safeterm.config import ViewerConfig, load_config
from safeterm.gitutil import current_branch
from safeterm.runner import get_sources, run_viewer
from safeterm.ui.app import format_title
from safeterm.utils.crash import recover_panic
from safeterm.utils.logging import LogHandle, setup_logging
from safeterm.utils.transcript import TranscriptLog


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    args = parse_args(argv)
    working_dir = Path.cwd()

    try:
        config = load_config(
            working_dir,
            command=args.command,
            files=args.files,
            log_file=args.log_file,
            debug=args.debug,
            no_ansi=args.no_ansi,
            transcript=not args.no_transcript,
        )
    except Exception as e:
        print(f"\033[31mError loading configuration: {escape(str(e))}\033[0m", file=sys.stderr)
        return 1

    errors = config.validate()
    if errors:
        print("\033[31mConfiguration errors:\033[0m", file=sys.stderr)
        for error in errors:
            print(f"  - {escape(error)}", file=sys.stderr)
        return 1

    # Process logging is set up once here and handed down explicitly
    logs = setup_logging(
        config.log_file,
        debug=config.debug,
        max_size_mb=config.app.max_log_size_mb,
        max_backups=config.app.max_log_backups,
        max_age_days=config.app.max_log_age_days,
    )
    log = logs.get_logger("main")
    log.info("viewer_started", description=config.description, debug=config.debug)

    transcript = None
    if config.transcript:
        transcript = TranscriptLog(config.log_dir, max_files=config.app.max_transcripts)
        transcript.start()

    try:
        if should_use_tui(args):
            return run_with_tui(config, logs, transcript)
        return run_with_simple_ui(config, logs, transcript)
    finally:
        if transcript:
            transcript.close()
        log.info("viewer_stopped")
        logs.close()


def run_with_tui(config: ViewerConfig, logs: LogHandle, transcript: TranscriptLog | None) -> int:
    """Run the viewer with the Textual TUI.

    Args:
        config: Viewer configuration
        logs: Process logging handle
        transcript: Optional transcript for saving output to file

    Returns:
        Exit code
    """
    from safeterm.ui.app import ViewerApp

    log = logs.get_logger("tui")
    branch = asyncio.run(current_branch(config.working_dir))
    sources = get_sources(config)

    result = {"success": False}
    app: ViewerApp | None = None

    def start() -> None:
        """Start reading sources when the UI is ready."""
        asyncio.create_task(view())

    async def view() -> None:
        """Run the sources and exit when done."""
        if app is None:
            return
        try:
            with recover_panic("viewer", log=log, crash_dir=config.log_dir) as guard:
                result["success"] = await run_viewer(config, app, use_pty=True, log=log)
            if guard.crashed:
                app.log_error(f"Viewer crashed: {guard.error}")
                result["success"] = False
        finally:
            app.exit()

    app = ViewerApp(
        title=format_title(str(config.working_dir), branch),
        source_names=[source.name for source in sources],
        on_ready=start,
        transcript=transcript,
        preserve_ansi=config.preserve_ansi,
        tab_width=config.app.tab_width,
    )

    # Textual traps handler exceptions inside run() and sets return_code,
    # so this guard only sees failures while starting or tearing down the
    # app. Failures while viewing are caught by the guard in view().
    with recover_panic("tui", app.exit, log=log, crash_dir=config.log_dir) as guard:
        app.run()
    if guard.crashed:
        _report_crash(log, guard.error, guard.report_path)
        return 1

    return tui_exit_code(app.return_code, result["success"], log)


def tui_exit_code(
    return_code: int | None,
    success: bool,
    log: structlog.stdlib.BoundLogger | None = None,
) -> int:
    """Combine the Textual app return code with the viewer result.

    Args:
        return_code: App.return_code after run() (None if never set)
        success: Whether every source succeeded
        log: Logger for an abnormal app exit

    Returns:
        Exit code
    """
    if return_code:
        if log:
            log.error("tui_failed", return_code=return_code)
        return 1
    return 0 if success else 1


def run_with_simple_ui(
    config: ViewerConfig,
    logs: LogHandle,
    transcript: TranscriptLog | None,
) -> int:
    """Run the viewer with simple sanitized output.

    Args:
        config: Viewer configuration
        logs: Process logging handle
        transcript: Optional transcript for saving output to file

    Returns:
        Exit code
    """
    from safeterm.ui.simple import SimpleUI

    log = logs.get_logger("simple")
    ui = SimpleUI(
        transcript=transcript,
        preserve_ansi=config.preserve_ansi,
        tab_width=config.app.tab_width,
    )

    branch = asyncio.run(current_branch(config.working_dir))
    header = f"=== {format_title(str(config.working_dir), branch)} ==="
    print(f"\033[32m{header}\033[0m" if ui.is_tty else header)
    if transcript:
        transcript.write_line(header)

    success = False
    with recover_panic("simple", sys.stdout.flush, log=log, crash_dir=config.log_dir) as guard:
        success = asyncio.run(run_viewer(config, ui, use_pty=sys.stdout.isatty(), log=log))
    if guard.crashed:
        _report_crash(log, guard.error, guard.report_path)
        return 1

    return 0 if success else 1


def _report_crash(
    log: structlog.stdlib.BoundLogger,
    error: BaseException | None,
    report_path: Path | None,
) -> None:
    report = report_path or "not written"
    message = escape(f"Viewer crashed: {error} (report: {report})")
    print(f"\033[31m{message}\033[0m", file=sys.stderr)
    log.info("crash_reported", report=str(report))


if __name__ == "__main__":
    sys.exit(main())
