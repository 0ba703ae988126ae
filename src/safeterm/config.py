"""Configuration management for the safeterm viewer.

Loads configuration from, in increasing priority:
- pyproject.toml: [tool.safeterm] table in the working directory (optional)
- .env file in the working directory (optional)
- Environment variables: SAFETERM_LOG_FILE, SAFETERM_DEBUG
- Command-line arguments
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

import tomllib
from dotenv import load_dotenv

DEFAULT_LOG_FILE = Path("~/.safeterm/logs/safeterm.log")

_TRUE_VALUES = {"1", "true", "yes", "on"}


def env_flag_enabled(value: str | None) -> bool:
    """Return True when an environment value spells an enabled flag."""
    if value is None:
        return False
    return value.strip().lower() in _TRUE_VALUES


@dataclass(frozen=True)
class AppConfig:
    """Settings from [tool.safeterm] in pyproject.toml."""

    log_file: Path = DEFAULT_LOG_FILE
    debug: bool = False
    max_log_age_days: int = 30
    max_log_size_mb: int = 10
    max_log_backups: int = 5
    max_transcripts: int = 5
    tab_width: int = 4
    preserve_ansi: bool = True

    @classmethod
    def from_pyproject(cls, directory: Path) -> "AppConfig":
        """Load configuration from pyproject.toml, defaults if absent."""
        pyproject_path = directory / "pyproject.toml"
        if not pyproject_path.is_file():
            return cls()
        with open(pyproject_path, "rb") as f:
            data = tomllib.load(f)

        config = data.get("tool", {}).get("safeterm", {})
        defaults = cls()

        return cls(
            log_file=Path(config.get("log_file", defaults.log_file)),
            debug=bool(config.get("debug", defaults.debug)),
            max_log_age_days=config.get("max_log_age_days", defaults.max_log_age_days),
            max_log_size_mb=config.get("max_log_size_mb", defaults.max_log_size_mb),
            max_log_backups=config.get("max_log_backups", defaults.max_log_backups),
            max_transcripts=config.get("max_transcripts", defaults.max_transcripts),
            tab_width=config.get("tab_width", defaults.tab_width),
            preserve_ansi=bool(config.get("preserve_ansi", defaults.preserve_ansi)),
        )


@dataclass(frozen=True)
class ViewerConfig:
    """Runtime configuration combining AppConfig, environment and CLI args."""

    app: AppConfig
    working_dir: Path
    command: list[str] = field(default_factory=list)
    files: list[Path] = field(default_factory=list)
    log_file: Path = DEFAULT_LOG_FILE
    debug: bool = False
    preserve_ansi: bool = True
    transcript: bool = True

    @property
    def log_dir(self) -> Path:
        """Directory for process logs, transcripts and crash reports."""
        return self.log_file.expanduser().parent

    @property
    def description(self) -> str:
        """Human-readable description of what is being viewed."""
        parts = [str(path) for path in self.files]
        if self.command:
            parts.append(" ".join(self.command))
        return ", ".join(parts) if parts else "nothing"

    def validate(self) -> list[str]:
        """Validate configuration. Returns list of error messages."""
        errors: list[str] = []

        if not self.command and not self.files:
            errors.append("Nothing to view: pass --file PATH and/or a command")

        for path in self.files:
            resolved = path if path.is_absolute() else self.working_dir / path
            if not resolved.is_file():
                errors.append(f"File not found: {path}")

        if self.app.tab_width < 0:
            errors.append("tab_width must not be negative")
        for name in ("max_log_age_days", "max_log_size_mb", "max_transcripts"):
            if getattr(self.app, name) < 1:
                errors.append(f"{name} must be at least 1")
        if self.app.max_log_backups < 0:
            errors.append("max_log_backups must not be negative")

        return errors


def load_config(
    working_dir: Path,
    command: list[str] | None = None,
    files: list[Path] | None = None,
    log_file: Path | None = None,
    debug: bool = False,
    no_ansi: bool = False,
    transcript: bool = True,
) -> ViewerConfig:
    """Load all configuration - pyproject, .env file, env vars, then CLI.

    Args:
        working_dir: Directory commands run in and config is read from
        command: Command to run and view
        files: Files to view
        log_file: Log file from the command line (overrides everything)
        debug: Debug flag from the command line
        no_ansi: Escape ANSI sequences instead of preserving them
        transcript: Whether to write a session transcript

    Returns:
        Complete ViewerConfig with all settings
    """
    # Load .env file if it exists (no-op when env vars are set directly)
    env_path = working_dir / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    app_config = AppConfig.from_pyproject(working_dir)

    resolved_log_file = app_config.log_file
    if os.environ.get("SAFETERM_LOG_FILE"):
        resolved_log_file = Path(os.environ["SAFETERM_LOG_FILE"])
    if log_file is not None:
        resolved_log_file = log_file

    return ViewerConfig(
        app=app_config,
        working_dir=working_dir,
        command=list(command or []),
        files=list(files or []),
        log_file=resolved_log_file,
        debug=debug or app_config.debug or env_flag_enabled(os.environ.get("SAFETERM_DEBUG")),
        preserve_ansi=app_config.preserve_ansi and not no_ansi,
        transcript=transcript,
    )
