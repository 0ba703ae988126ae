"""Simple sanitized output UI for --simple mode and non-TTY stdout."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from safeterm.ansiext import escape, strip_ansi
from safeterm.sources.base import SourceStatus
from safeterm.utils.terminal import OutputProcessor

if TYPE_CHECKING:
    from safeterm.utils.transcript import TranscriptLog


# ANSI color codes
BLUE = "\033[0;34m"
CYAN = "\033[0;36m"
GREEN = "\033[0;32m"
YELLOW = "\033[1;33m"
RED = "\033[0;31m"
DIM = "\033[2m"
NC = "\033[0m"  # No color


class SimpleUI:
    """Non-TUI output handler with colored source headers.

    Used for:
    - --simple mode (TTY with colors)
    - Piped output (non-TTY, no colors)

    Source output is escaped line by line. Colors, both ours and the
    preserved ones from sources, are only output when stdout is a TTY.
    """

    def __init__(
        self,
        transcript: TranscriptLog | None = None,
        preserve_ansi: bool = True,
        tab_width: int = 4,
    ) -> None:
        """Initialize the simple UI.

        Args:
            transcript: Optional transcript for saving output to file
            preserve_ansi: Keep well-formed colour sequences from sources
            tab_width: Spaces per tab stop in source output
        """
        self.is_tty = sys.stdout.isatty()
        self.source_statuses: list[tuple[str, SourceStatus]] = []
        self.transcript = transcript
        self.output_processor = OutputProcessor(preserve_ansi=preserve_ansi, tab_width=tab_width)

    def _color(self, code: str) -> str:
        """Return color code if TTY, empty string otherwise."""
        return code if self.is_tty else ""

    def _log_to_file(self, text: str) -> None:
        if self.transcript:
            self.transcript.write(text)

    def _emit(self, escaped: str) -> None:
        if not escaped:
            return
        print(escaped if self.is_tty else strip_ansi(escaped), end="", flush=True)
        self._log_to_file(escaped)

    async def log_output(self, text: str) -> None:
        """Print escaped source output.

        Args:
            text: Raw output text
        """
        self._emit(self.output_processor.process(text))

    async def flush_output(self) -> None:
        """Print the pending partial line, if any."""
        self._emit(self.output_processor.flush())

    async def log_source(self, index: int, total: int, name: str) -> None:
        """Print colored source header.

        Args:
            index: Current source number (1-indexed)
            total: Total number of sources
            name: Source name
        """
        name = escape(name)
        print()
        print(f"{self._color(CYAN)}[{index}/{total}] {name}{self._color(NC)}")
        self._log_to_file(f"\n[{index}/{total}] {name}\n")
        self.source_statuses.append((name, SourceStatus.RUNNING))

    async def update_source_status(self, index: int, status: SourceStatus) -> None:
        """Update status of a source.

        Args:
            index: Source number (1-indexed)
            status: New status
        """
        if 0 < index <= len(self.source_statuses):
            name = self.source_statuses[index - 1][0]
            self.source_statuses[index - 1] = (name, status)

    def log_success(self, message: str) -> None:
        message = escape(message)
        print(f"  {self._color(GREEN)}✓ {message}{self._color(NC)}")
        self._log_to_file(f"  ✓ {message}\n")

    def log_error(self, message: str) -> None:
        message = escape(message)
        print(f"  {self._color(RED)}✗ ERROR: {message}{self._color(NC)}")
        self._log_to_file(f"  ✗ ERROR: {message}\n")

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
        print()
        print(f"{self._color(CYAN)}=== Summary ==={self._color(NC)}")
        self._log_to_file("\n=== Summary ===\n")

        names = [escape(name) for name, _ in sources]
        max_len = max((len(name) for name in names), default=0)

        for i, (name, (_, status)) in enumerate(zip(names, sources), 1):
            print(f"{self._format_status(status)} [{i}/{len(sources)}] {name:<{max_len}}")
            self._log_to_file(f"{format_status_plain(status)} [{i}/{len(sources)}] {name}\n")

        print()
        self._log_to_file("\n")

        if success:
            print(f"{self._color(GREEN)}=== Done ==={self._color(NC)}")
            self._log_to_file("=== Done ===\n")
        else:
            print(f"{self._color(RED)}=== Failed ==={self._color(NC)}")
            self._log_to_file("=== Failed ===\n")
        if description:
            description = escape(description)
            print(f"{self._color(BLUE)}Viewed: {description}{self._color(NC)}")
            self._log_to_file(f"Viewed: {description}\n")

    def _format_status(self, status: SourceStatus) -> str:
        match status:
            case SourceStatus.SUCCESS:
                color = GREEN
            case SourceStatus.FAILED:
                color = RED
            case SourceStatus.RUNNING:
                color = YELLOW
            case _:
                color = DIM
        return f"{self._color(color)}{format_status_plain(status)}{self._color(NC)}"


def format_status_plain(status: SourceStatus) -> str:
    """Format source status without colors (for transcripts).

    Args:
        status: Source status

    Returns:
        Plain text status string
    """
    match status:
        case SourceStatus.SUCCESS:
            return "[SUCCESS]"
        case SourceStatus.FAILED:
            return "[FAILED ]"
        case SourceStatus.RUNNING:
            return "[RUNNING]"
        case _:
            return "[PENDING]"
