"""Textual TUI application for the safeterm viewer.

Provides a terminal interface with:
- Title with working directory and git branch
- Source table with status indicators
- Scrolling output log showing escaped output with preserved ANSI colors
- Terminal restoration on exit (prints escaped output to scrollback)
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from rich.text import Text
from textual.app import App, ComposeResult
from textual.containers import Container, Vertical
from textual.css.query import NoMatches
from textual.widgets import DataTable, Footer, Header, RichLog, Static

from safeterm.ansiext import escape
from safeterm.sources.base import SourceStatus
from safeterm.ui.simple import format_status_plain
from safeterm.utils.terminal import OutputProcessor

if TYPE_CHECKING:
    from safeterm.utils.transcript import TranscriptLog


# ANSI color codes for terminal restoration
CYAN = "\033[0;36m"
GREEN = "\033[0;32m"
YELLOW = "\033[1;33m"
RED = "\033[0;31m"
DIM = "\033[2m"
NC = "\033[0m"


def format_title(working_dir: str, branch: str = "") -> str:
    """Title line for the viewer, e.g. "safeterm: ~/src/app (main)"."""
    title = f"safeterm: {escape(working_dir)}"
    if branch:
        title += f" ({escape(branch)})"
    return title


class ViewerApp(App):
    """Textual TUI for viewing sanitized output.

    On exit, restores terminal and prints accumulated escaped output
    for full scrollback history.
    """

    CSS = """
    #header-container {
        height: auto;
        max-height: 50%;
    }

    #title {
        text-align: center;
        text-style: bold;
        padding: 1;
        background: $primary;
    }

    #sources-table {
        height: auto;
        max-height: 15;
        margin: 0 1;
    }

    #output-container {
        height: 1fr;
        margin: 0 1 1 1;
        border: solid $primary;
    }

    #output-log {
        height: 1fr;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("ctrl+c", "quit", "Quit"),
    ]

    def __init__(
        self,
        title: str,
        source_names: list[str],
        on_ready: Callable[[], None] | None = None,
        transcript: TranscriptLog | None = None,
        preserve_ansi: bool = True,
        tab_width: int = 4,
    ) -> None:
        """Initialize the viewer app.

        Args:
            title: Title line (already escaped)
            source_names: Names of the sources in run order
            on_ready: Callback to invoke after UI is mounted and ready
            transcript: Optional transcript for saving output to file
            preserve_ansi: Keep well-formed colour sequences from sources
            tab_width: Spaces per tab stop in source output
        """
        super().__init__()
        self.title_text = title
        self.source_names = [escape(name) for name in source_names]
        self.total_sources = len(source_names)
        self.source_statuses: list[SourceStatus] = [SourceStatus.PENDING] * self.total_sources
        self._on_ready = on_ready
        self.transcript = transcript

        # Escaped output for terminal restoration
        self.output_buffer: list[str] = []
        self.output_processor = OutputProcessor(preserve_ansi=preserve_ansi, tab_width=tab_width)

        self.success = False
        self._summary: list[tuple[str, SourceStatus]] = []
        self._description: str | None = None

        self._ui_ready = False

    def compose(self) -> ComposeResult:
        """Compose the UI layout."""
        yield Header()
        with Container(id="header-container"):
            yield Static(Text(self.title_text), id="title")
            yield DataTable(id="sources-table")
        with Vertical(id="output-container"):
            yield RichLog(id="output-log", highlight=False, markup=False)
        yield Footer()

    def on_mount(self) -> None:
        """Initialize the sources table on mount."""
        if self._ui_ready:
            return

        table = self.query_one("#sources-table", DataTable)
        table.add_column("Status", key="status")
        table.add_column("Source", key="index")
        table.add_column("Details", key="name")

        for i, name in enumerate(self.source_names):
            table.add_row(
                self._format_status_text(SourceStatus.PENDING),
                f"[{i + 1}/{self.total_sources}]",
                Text(name),
                key=str(i),
            )

        self._ui_ready = True

        # Give the first frame time to render before output starts
        if self._on_ready:
            self.set_timer(0.1, self._on_ready)

    def _write_log(self, escaped: str) -> None:
        if not self._ui_ready:
            return
        try:
            log = self.query_one("#output-log", RichLog)
        except NoMatches:
            # Widgets already torn down on exit
            return
        log.write(Text.from_ansi(escaped))

    def _show(self, escaped: str) -> None:
        if not escaped:
            return
        self.output_buffer.append(escaped)
        if self.transcript:
            self.transcript.write(escaped)
        self._write_log(escaped.rstrip("\n"))

    async def log_output(self, text: str) -> None:
        """Escape source output and show it.

        Args:
            text: Raw output chunk
        """
        self._show(self.output_processor.process(text))

    async def flush_output(self) -> None:
        """Show the pending partial line, if any."""
        self._show(self.output_processor.flush())

    async def log_source(self, index: int, total: int, name: str) -> None:
        """Log source header.

        Args:
            index: Current source number (1-indexed)
            total: Total number of sources
            name: Source name
        """
        name = escape(name)
        self.output_buffer.append(f"\n{CYAN}[{index}/{total}] {name}{NC}\n")
        if self.transcript:
            self.transcript.write(f"\n[{index}/{total}] {name}\n")
        self._write_log(f"{CYAN}[{index}/{total}] {name}{NC}")

    async def update_source_status(self, index: int, status: SourceStatus) -> None:
        """Update status of a source in the table.

        Args:
            index: Source number (1-indexed)
            status: New status
        """
        if index < 1 or index > self.total_sources:
            return

        self.source_statuses[index - 1] = status

        if not self._ui_ready:
            return

        try:
            table = self.query_one("#sources-table", DataTable)
        except NoMatches:
            return
        table.update_cell(str(index - 1), "status", self._format_status_text(status))

    def _log_message(self, plain: str, color: str = "") -> None:
        self.output_buffer.append(f"{color}{plain}{NC if color else ''}\n")
        if self.transcript:
            self.transcript.write(f"{plain}\n")
        self._write_log(f"{color}{plain}{NC if color else ''}")

    def log_success(self, message: str) -> None:
        self._log_message(f"  ✓ {escape(message)}", GREEN)

    def log_error(self, message: str) -> None:
        self._log_message(f"  ✗ ERROR: {escape(message)}", RED)

    def print_summary(
        self,
        sources: list[tuple[str, SourceStatus]],
        success: bool,
        description: str | None = None,
    ) -> None:
        """Store summary info for terminal restoration.

        The actual printing happens in on_unmount.

        Args:
            sources: List of (source_name, status) tuples
            success: Whether every source succeeded
            description: Description of what was viewed
        """
        self.success = success
        self._summary = [(escape(name), status) for name, status in sources]
        self._description = escape(description) if description else None

        if self.transcript:
            self.transcript.write("\n=== Summary ===\n")
            for i, (name, status) in enumerate(self._summary, 1):
                self.transcript.write(f"{format_status_plain(status)} [{i}/{len(sources)}] {name}\n")
            self.transcript.write("\n=== Done ===\n" if success else "\n=== Failed ===\n")
            if self._description:
                self.transcript.write(f"Viewed: {self._description}\n")

    def on_unmount(self) -> None:
        """Called when app exits - print buffered output to terminal.

        This provides full scrollback history after the TUI exits.
        """
        remaining = self.output_processor.flush()
        if remaining:
            self.output_buffer.append(remaining)

        for chunk in self.output_buffer:
            print(chunk, end="")

        self._print_terminal_summary()

    def _print_terminal_summary(self) -> None:
        print()
        print(f"{CYAN}=== Summary ==={NC}")

        max_len = max((len(name) for name, _ in self._summary), default=0)
        for i, (name, status) in enumerate(self._summary, 1):
            status_text = f"{self._status_color(status)}{format_status_plain(status)}{NC}"
            print(f"{status_text} [{i}/{len(self._summary)}] {name:<{max_len}}")

        print()
        if self.success:
            print(f"{GREEN}=== Done ==={NC}")
        else:
            print(f"{RED}=== Failed ==={NC}")
        if self._description:
            print(f"Viewed: {self._description}")

    @staticmethod
    def _status_color(status: SourceStatus) -> str:
        match status:
            case SourceStatus.SUCCESS:
                return GREEN
            case SourceStatus.FAILED:
                return RED
            case SourceStatus.RUNNING:
                return YELLOW
            case _:
                return DIM

    def _format_status_text(self, status: SourceStatus) -> Text:
        style = {
            SourceStatus.SUCCESS: "green",
            SourceStatus.FAILED: "red",
            SourceStatus.RUNNING: "yellow",
        }.get(status, "dim")
        return Text(format_status_plain(status), style=style)
