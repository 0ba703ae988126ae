"""Protocol definition for viewer UI."""

from typing import Protocol

from safeterm.sources.base import SourceStatus


class ViewerUI(Protocol):
    """Protocol for viewer UI implementations.

    Both ViewerApp (TUI) and SimpleUI implement this protocol,
    allowing the runner to work with either transparently.
    """

    async def log_output(self, text: str) -> None:
        """Show raw source output (escaped by the UI before display).

        Args:
            text: Raw text (may contain control characters and ANSI codes)
        """
        ...

    async def flush_output(self) -> None:
        """Show any pending partial line of the current source."""
        ...

    async def log_source(self, index: int, total: int, name: str) -> None:
        """Log source header.

        Args:
            index: Current source number (1-indexed)
            total: Total number of sources
            name: Source name
        """
        ...

    async def update_source_status(self, index: int, status: SourceStatus) -> None:
        """Update status of a source.

        Args:
            index: Source number (1-indexed)
            status: New status
        """
        ...

    def log_success(self, message: str) -> None:
        """Log success message."""
        ...

    def log_error(self, message: str) -> None:
        """Log error message."""
        ...

    def print_summary(
        self,
        sources: list[tuple[str, SourceStatus]],
        success: bool,
        description: str | None = None,
    ) -> None:
        """Print final summary.

        Args:
            sources: List of (source_name, status) tuples
            success: Whether every source succeeded
            description: Description of what was viewed
        """
        ...
