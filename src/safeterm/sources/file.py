"""File contents source."""

from collections.abc import Awaitable, Callable
from pathlib import Path

from safeterm.config import ViewerConfig
from safeterm.sources.base import Source, SourceError
from safeterm.utils.process import ProcessRunner, new_decoder

CHUNK_SIZE = 64 * 1024


class FileSource(Source):
    """Stream a file's contents, decoded as UTF-8 with replacement."""

    def __init__(self, path: Path) -> None:
        """Initialize the file source.

        Args:
            path: File to read (relative to the working directory)
        """
        super().__init__(f"File {path}")
        self.path = path

    async def execute(
        self,
        config: ViewerConfig,
        runner: ProcessRunner,
        on_output: Callable[[str], Awaitable[None]],
    ) -> None:
        """Read the file in chunks and pass the text on.

        Raises:
            SourceError: If the file cannot be read
        """
        path = self.path if self.path.is_absolute() else config.working_dir / self.path
        decoder = new_decoder()
        try:
            with open(path, "rb") as f:
                while chunk := f.read(CHUNK_SIZE):
                    text = decoder.decode(chunk)
                    if text:
                        await on_output(text)
        except OSError as e:
            raise SourceError(self.name, f"Failed to read file: {e.strerror or e}") from e

        tail = decoder.decode(b"", final=True)
        if tail:
            await on_output(tail)
