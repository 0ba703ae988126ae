"""Viewer runner that feeds sources to the UI."""

import structlog

from safeterm.config import ViewerConfig
from safeterm.sources import CommandSource, FileSource, Source, SourceError, SourceStatus
from safeterm.ui.protocol import ViewerUI
from safeterm.utils.process import ProcessRunner


def get_sources(config: ViewerConfig) -> list[Source]:
    """Get list of sources for the given configuration.

    Files are shown first, then the command output.

    Args:
        config: Viewer configuration

    Returns:
        List of sources to execute
    """
    sources: list[Source] = [FileSource(path) for path in config.files]
    if config.command:
        sources.append(CommandSource(config.command))
    return sources


async def run_viewer(
    config: ViewerConfig,
    ui: ViewerUI,
    use_pty: bool = True,
    log: structlog.stdlib.BoundLogger | None = None,
) -> bool:
    """Run every source, streaming its output to the UI.

    Args:
        config: Viewer configuration
        ui: UI for output and status updates
        use_pty: Whether to use PTY for subprocess execution
        log: Logger for source lifecycle events

    Returns:
        True if every source succeeded, False otherwise
    """
    sources = get_sources(config)
    runner = ProcessRunner(use_pty=use_pty, log=log)

    results: list[tuple[str, SourceStatus]] = []
    current = 0
    success = True

    try:
        for i, source in enumerate(sources, 1):
            current = i
            source.status = SourceStatus.RUNNING

            await ui.log_source(i, len(sources), source.name)
            await ui.update_source_status(i, SourceStatus.RUNNING)

            try:
                try:
                    await source.execute(config, runner, ui.log_output)
                finally:
                    await ui.flush_output()
                source.status = SourceStatus.SUCCESS
                await ui.update_source_status(i, SourceStatus.SUCCESS)
                ui.log_success(f"{source.name} finished")
                results.append((source.name, SourceStatus.SUCCESS))

            except SourceError as e:
                if log:
                    log.warning("source_failed", source=source.name, error=str(e), exit_code=e.exit_code)
                source.status = SourceStatus.FAILED
                await ui.update_source_status(i, SourceStatus.FAILED)
                ui.log_error(str(e))
                results.append((source.name, SourceStatus.FAILED))
                success = False
                break

        # Sources never reached stay pending
        for source in sources[current:]:
            results.append((source.name, SourceStatus.PENDING))

    except Exception as e:
        if log:
            log.exception("viewer_error", source_index=current)
        ui.log_error(f"Unexpected error: {e}")
        success = False
        if 0 < current <= len(sources):
            failed = sources[current - 1]
            failed.status = SourceStatus.FAILED
            await ui.update_source_status(current, SourceStatus.FAILED)
            if len(results) < current:
                results.append((failed.name, SourceStatus.FAILED))
            else:
                results[current - 1] = (failed.name, SourceStatus.FAILED)
            for source in sources[current:]:
                results.append((source.name, SourceStatus.PENDING))

    ui.print_summary(sources=results, success=success, description=config.description)

    return success
