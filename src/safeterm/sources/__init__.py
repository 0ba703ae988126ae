"""Sources of untrusted text for the viewer."""

from safeterm.sources.base import Source, SourceError, SourceStatus
from safeterm.sources.command import CommandSource
from safeterm.sources.file import FileSource

__all__ = [
    "CommandSource",
    "FileSource",
    "Source",
    "SourceError",
    "SourceStatus",
]
