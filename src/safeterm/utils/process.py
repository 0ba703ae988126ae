"""Asynchronous subprocess execution with PTY support for color preservation.

Many CLI tools check isatty() to decide whether to output ANSI colors. To
keep colors in the viewer, commands run in a pseudo-terminal (PTY) via
Python's built-in pty module when the viewer itself is on a terminal.

Output is decoded incrementally as UTF-8 so a multi-byte character split
across two reads is never replaced; only genuinely invalid bytes become
U+FFFD.
"""

import asyncio
import codecs
import contextlib
import fcntl
import os
import pty
import struct
import sys
import termios
from collections.abc import Awaitable, Callable
from pathlib import Path

import structlog

READ_SIZE = 4096


def new_decoder() -> codecs.IncrementalDecoder:
    """Create an incremental UTF-8 decoder using replacement characters."""
    return codecs.getincrementaldecoder("utf-8")(errors="replace")


class ProcessRunner:
    """Async subprocess runner with optional PTY for color preservation.

    When use_pty=True and running in a TTY, subprocesses are run through a PTY
    so they think they're connected to a real terminal and output colors.
    """

    def __init__(
        self,
        use_pty: bool = True,
        log: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        """Initialize the process runner.

        Args:
            use_pty: Whether to use PTY (only effective if parent is TTY)
            log: Logger for command lifecycle events
        """
        self.use_pty = use_pty and sys.stdout.isatty()
        self.log = log

    async def run(
        self,
        cmd: list[str],
        cwd: Path,
        env: dict[str, str] | None = None,
        on_output: Callable[[str], Awaitable[None]] | None = None,
    ) -> int:
        """Run command asynchronously, streaming output via async callback.

        Args:
            cmd: Command and arguments to run
            cwd: Working directory for the command
            env: Environment variables (merged into the current env)
            on_output: Async callback for decoded output chunks

        Returns:
            Process exit code
        """
        if self.log:
            self.log.info("command_started", cmd=cmd, cwd=str(cwd), pty=self.use_pty)
        if self.use_pty:
            exit_code = await self._run_with_pty(cmd, cwd, env, on_output)
        else:
            exit_code = await self._run_simple(cmd, cwd, env, on_output)
        if self.log:
            self.log.info("command_finished", cmd=cmd, exit_code=exit_code)
        return exit_code

    async def capture(self, cmd: list[str], cwd: Path) -> tuple[int, str]:
        """Run command without a PTY and collect its stdout.

        stderr is discarded.

        Args:
            cmd: Command and arguments to run
            cwd: Working directory for the command

        Returns:
            (exit code, decoded stdout)

        Raises:
            OSError: If the command cannot be started
        """
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.DEVNULL,
            cwd=cwd,
        )
        stdout, _ = await process.communicate()
        if self.log:
            self.log.debug("command_captured", cmd=cmd, exit_code=process.returncode)
        return process.returncode or 0, stdout.decode("utf-8", errors="replace")

    @staticmethod
    def _merge_env(env: dict[str, str] | None) -> dict[str, str]:
        full_env = os.environ.copy()
        if env:
            full_env.update(env)
        return full_env

    async def _run_with_pty(
        self,
        cmd: list[str],
        cwd: Path,
        env: dict[str, str] | None,
        on_output: Callable[[str], Awaitable[None]] | None,
    ) -> int:
        """Run with PTY for color preservation."""
        master_fd, slave_fd = pty.openpty()

        # Terminal size helps tools that check terminal width
        size = struct.pack("HHHH", 24, 120, 0, 0)  # rows, cols, xpixel, ypixel
        fcntl.ioctl(master_fd, termios.TIOCSWINSZ, size)

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=slave_fd,
                stdout=slave_fd,
                stderr=slave_fd,
                cwd=cwd,
                env=self._merge_env(env),
            )
        except OSError:
            os.close(master_fd)
            raise
        finally:
            os.close(slave_fd)

        try:
            await self._read_fd_async(master_fd, on_output)
        except BaseException:
            if process.returncode is None:
                with contextlib.suppress(ProcessLookupError):
                    process.kill()
            await process.wait()
            raise
        finally:
            os.close(master_fd)

        await process.wait()
        return process.returncode or 0

    async def _run_simple(
        self,
        cmd: list[str],
        cwd: Path,
        env: dict[str, str] | None,
        on_output: Callable[[str], Awaitable[None]] | None,
    ) -> int:
        """Non-PTY execution using native asyncio streams."""
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
            cwd=cwd,
            env=self._merge_env(env),
        )

        decoder = new_decoder()
        try:
            if process.stdout:
                while True:
                    data = await process.stdout.read(READ_SIZE)
                    if not data:
                        break
                    text = decoder.decode(data)
                    if text and on_output:
                        await on_output(text)
            tail = decoder.decode(b"", final=True)
            if tail and on_output:
                await on_output(tail)
        except BaseException:
            # Callback failed or task cancelled: don't leave the child running
            if process.returncode is None:
                with contextlib.suppress(ProcessLookupError):
                    process.kill()
            await process.wait()
            raise

        await process.wait()
        return process.returncode or 0

    async def _read_fd_async(
        self,
        fd: int,
        on_output: Callable[[str], Awaitable[None]] | None,
    ) -> None:
        """Read from file descriptor asynchronously using executor.

        File descriptor operations aren't async-native, so we use
        run_in_executor to avoid blocking the event loop.
        """
        loop = asyncio.get_running_loop()
        decoder = new_decoder()
        while True:
            try:
                data = await loop.run_in_executor(None, os.read, fd, READ_SIZE)
            except OSError:
                # PTY closed or process ended
                break
            if not data:
                break
            text = decoder.decode(data)
            if text and on_output:
                await on_output(text)
        tail = decoder.decode(b"", final=True)
        if tail and on_output:
            await on_output(tail)
