"""Session transcript with rotation.

Keeps up to N transcripts (configurable via max_transcripts):
- transcript.log (current/most recent)
- transcript.log.1 (previous)
- transcript.log.2, transcript.log.3, ... (older)

Transcripts hold the escaped output exactly as shown in the viewer, minus
colour codes.
"""

from pathlib import Path

from safeterm.ansiext import strip_ansi

DEFAULT_MAX_TRANSCRIPTS = 5


def get_transcript_path(log_dir: Path, index: int = 0) -> Path:
    """Get path to a specific transcript file.

    Args:
        log_dir: Directory holding transcripts
        index: Transcript index (0 = current, 1+ = older)

    Returns:
        Path to the transcript file
    """
    if index == 0:
        return log_dir / "transcript.log"
    return log_dir / f"transcript.log.{index}"


def rotate_transcripts(log_dir: Path, max_files: int = DEFAULT_MAX_TRANSCRIPTS) -> None:
    """Rotate existing transcripts before starting a new session.

    Renames transcripts from oldest to newest, deleting the oldest if at limit.

    Args:
        log_dir: Directory holding transcripts
        max_files: Maximum number of transcript files to keep
    """
    log_dir.mkdir(parents=True, exist_ok=True)

    oldest = get_transcript_path(log_dir, max_files - 1)
    if oldest.exists():
        oldest.unlink()

    for i in range(max_files - 2, -1, -1):
        current = get_transcript_path(log_dir, i)
        if current.exists():
            current.rename(get_transcript_path(log_dir, i + 1))


class TranscriptLog:
    """Collects and writes the session transcript."""

    def __init__(self, log_dir: Path, max_files: int = DEFAULT_MAX_TRANSCRIPTS) -> None:
        """Initialize the transcript.

        Args:
            log_dir: Directory holding transcripts
            max_files: Maximum number of transcript files to keep
        """
        self.log_dir = log_dir
        self.max_files = max_files
        self.path = get_transcript_path(log_dir)
        self._file_handle = None

    def start(self) -> None:
        """Rotate transcripts and open a new transcript file."""
        rotate_transcripts(self.log_dir, self.max_files)
        self._file_handle = open(self.path, "w", encoding="utf-8")

    def write(self, text: str) -> None:
        """Write escaped text to the transcript.

        Args:
            text: Text to write (may contain ANSI codes, which are removed)
        """
        if self._file_handle:
            self._file_handle.write(strip_ansi(text))
            self._file_handle.flush()

    def write_line(self, text: str) -> None:
        """Write a line to the transcript.

        Args:
            text: Text to write (newline added if missing)
        """
        if not text.endswith("\n"):
            text = text + "\n"
        self.write(text)

    def close(self) -> None:
        """Close the transcript file."""
        if self._file_handle:
            self._file_handle.close()
            self._file_handle = None

    def __enter__(self) -> "TranscriptLog":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
