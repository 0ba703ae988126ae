"""Command output source."""

import shlex
from collections.abc import Awaitable, Callable

from safeterm.config import ViewerConfig
from safeterm.sources.base import Source, SourceError
from safeterm.utils.process import ProcessRunner


class CommandSource(Source):
    """Run a command and stream its combined stdout/stderr."""

    def __init__(self, argv: list[str]) -> None:
        """Initialize the command source.

        Args:
            argv: Command and arguments
        """
        super().__init__(f"$ {shlex.join(argv)}")
        self.argv = list(argv)

    async def execute(
        self,
        config: ViewerConfig,
        runner: ProcessRunner,
        on_output: Callable[[str], Awaitable[None]],
    ) -> None:
        """Run the command in the configured working directory.

        Raises:
            SourceError: If the command cannot start or exits non-zero
        """
        try:
            exit_code = await runner.run(
                cmd=self.argv,
                cwd=config.working_dir,
                on_output=on_output,
            )
        except OSError as e:
            raise SourceError(self.name, f"Failed to start command: {e}") from e

        if exit_code != 0:
            raise SourceError(
                self.name,
                f"Command exited with code {exit_code}",
                exit_code=exit_code,
            )
