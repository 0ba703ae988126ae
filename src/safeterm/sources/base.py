"""Base class for viewer sources."""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from safeterm.config import ViewerConfig
    from safeterm.utils.process import ProcessRunner


class SourceStatus(Enum):
    """Status of a source."""

    PENDING = "pending"
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"


class Source(ABC):
    """Abstract base class for sources of untrusted text.

    Each source produces raw text (command output, file contents) that the
    UI escapes before display.
    """

    def __init__(self, name: str) -> None:
        """Initialize the source.

        Args:
            name: Human-readable name for the source
        """
        self.name = name
        self.status = SourceStatus.PENDING

    @abstractmethod
    async def execute(
        self,
        config: "ViewerConfig",
        runner: "ProcessRunner",
        on_output: Callable[[str], Awaitable[None]],
    ) -> None:
        """Produce the source's text.

        Args:
            config: Viewer configuration
            runner: Process runner for executing commands
            on_output: Async callback receiving raw decoded text

        Raises:
            SourceError: If the source fails
        """
        ...


class SourceError(Exception):
    """Exception raised when a source fails."""

    def __init__(self, source_name: str, message: str, exit_code: int | None = None) -> None:
        """Initialize the error.

        Args:
            source_name: Name of the failed source
            message: Error message
            exit_code: Process exit code (if applicable)
        """
        self.source_name = source_name
        self.exit_code = exit_code
        super().__init__(f"{source_name}: {message}")
