"""Utility modules for the safeterm viewer."""

from safeterm.utils.crash import CrashGuard, recover_panic
from safeterm.utils.logging import LogHandle, setup_logging
from safeterm.utils.process import ProcessRunner
from safeterm.utils.terminal import OutputProcessor
from safeterm.utils.transcript import TranscriptLog, rotate_transcripts

__all__ = [
    "CrashGuard",
    "LogHandle",
    "OutputProcessor",
    "ProcessRunner",
    "TranscriptLog",
    "recover_panic",
    "rotate_transcripts",
    "setup_logging",
]
